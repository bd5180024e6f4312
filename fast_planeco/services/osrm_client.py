"""OSRM client for distance matrices and driving route geometry."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import httpx

from fast_planeco.config import get_settings
from fast_planeco.exceptions import ProviderError
from fast_planeco.models import RouteLeg, Waypoint

logger = logging.getLogger(__name__)

PROVIDER_NAME = "OSRM"


def format_coordinates(waypoints: Sequence[Waypoint]) -> str:
    """Format waypoints as OSRM's 'lon,lat;lon,lat;...' path segment."""
    return ";".join(f"{wp.lon},{wp.lat}" for wp in waypoints)


class OSRMClient:
    """Client for an OSRM server's table and route services."""

    PROFILE_DRIVING = "driving"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the OSRM client.

        Args:
            base_url: OSRM server base URL.
            timeout: HTTP timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        settings = get_settings()
        self.base_url = (base_url or settings.osrm_base_url).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        """Enter async context manager."""
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context manager."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _get(self, url: str, params: dict) -> dict:
        """GET an OSRM endpoint and check its response code.

        Raises:
            ProviderError: On transport errors, bad status or a non-'Ok' code.
        """
        if not self._client:
            raise RuntimeError("Client not initialized. Use async context manager.")

        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(f"OSRM request failed: {e}")
            raise ProviderError(
                PROVIDER_NAME, f"HTTP {status_code}", status_code=status_code
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Failed to reach OSRM: {e}")
            raise ProviderError(PROVIDER_NAME, str(e) or type(e).__name__) from e
        except ValueError as e:
            logger.error(f"OSRM returned invalid JSON: {e}")
            raise ProviderError(PROVIDER_NAME, "invalid JSON response") from e

        if not isinstance(data, dict) or data.get("code") != "Ok":
            code = data.get("code") if isinstance(data, dict) else None
            logger.warning(f"OSRM returned code {code!r}")
            raise ProviderError(PROVIDER_NAME, f"response code {code!r}")

        return data

    async def get_distance_matrix(
        self, waypoints: Sequence[Waypoint]
    ) -> list[list[float]]:
        """Fetch the all-pairs driving distance matrix.

        The matrix always uses the driving profile: it only ranks visiting
        orders, the reported distance comes from the final route.

        Args:
            waypoints: Origin first, then the following stops.

        Returns:
            N x N matrix of distances in meters.

        Raises:
            ProviderError: If the request fails or the table is malformed.
        """
        size = len(waypoints)
        if size < 2:
            raise ValueError("At least two waypoints are required for a matrix.")

        url = (
            f"{self.base_url}/table/v1/{self.PROFILE_DRIVING}/"
            f"{format_coordinates(waypoints)}"
        )
        logger.debug(f"Requesting {size}x{size} distance matrix")
        data = await self._get(url, {"annotations": "distance"})

        distances = data.get("distances")
        if not isinstance(distances, list) or len(distances) != size:
            raise ProviderError(PROVIDER_NAME, "malformed distance table")

        matrix = []
        for row in distances:
            if not isinstance(row, list) or len(row) != size:
                raise ProviderError(PROVIDER_NAME, "malformed distance table")
            if any(value is None for value in row):
                raise ProviderError(PROVIDER_NAME, "unreachable stop in table")
            try:
                matrix.append([float(value) for value in row])
            except (TypeError, ValueError) as e:
                raise ProviderError(PROVIDER_NAME, "malformed distance table") from e

        return matrix

    async def get_route(
        self,
        waypoints: Sequence[Waypoint],
        profile: str = PROFILE_DRIVING,
    ) -> RouteLeg:
        """Fetch the full route geometry through the waypoints in order.

        Args:
            waypoints: Ordered stops, at least two.
            profile: OSRM profile.

        Returns:
            RouteLeg with aggregate distance and duration.

        Raises:
            ProviderError: If the request fails or holds no route.
        """
        if len(waypoints) < 2:
            raise ValueError("At least two waypoints are required for a route.")

        url = f"{self.base_url}/route/v1/{profile}/{format_coordinates(waypoints)}"
        data = await self._get(url, {"overview": "full", "geometries": "geojson"})

        routes = data.get("routes")
        if not routes:
            logger.warning("No routes found in OSRM response")
            raise ProviderError(PROVIDER_NAME, "no route found")
        if not isinstance(routes, list) or not isinstance(routes[0], dict):
            logger.error(f"Unexpected OSRM routes payload: {routes!r}")
            raise ProviderError(PROVIDER_NAME, "malformed route list")

        route = routes[0]
        try:
            distance_meters = float(route["distance"])
            duration_seconds = float(route["duration"])
            geometry = [
                (float(coord[0]), float(coord[1]))
                for coord in route.get("geometry", {}).get("coordinates", [])
            ]
            leg_durations = [float(leg["duration"]) for leg in route.get("legs", [])]
        except (KeyError, TypeError, ValueError, IndexError, AttributeError) as e:
            logger.error(f"Failed to parse OSRM route: {e}")
            raise ProviderError(PROVIDER_NAME, "malformed route") from e

        return RouteLeg(
            distance_meters=distance_meters,
            duration_seconds=duration_seconds,
            geometry=geometry,
            leg_durations_seconds=leg_durations,
        )

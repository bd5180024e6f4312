"""OpenRouteService directions client for cycling, walking and driving times."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Optional, Sequence

import httpx

from fast_planeco.config import get_settings
from fast_planeco.exceptions import ProviderError
from fast_planeco.models import RouteLeg, Waypoint

logger = logging.getLogger(__name__)

PROVIDER_NAME = "OpenRouteService"


class RateLimiter:
    """Simple rate limiter for API requests."""

    def __init__(self, requests_per_minute: int):
        """Initialize rate limiter.

        Args:
            requests_per_minute: Maximum requests allowed per minute.
        """
        self.requests_per_minute = requests_per_minute
        self.min_interval = 60.0 / requests_per_minute
        self._last_request_time: float = 0.0
        self._lock = asyncio.Lock()

    async def acquire(self):
        """Wait until a request can be made within rate limits."""
        async with self._lock:
            now = time.time()
            time_since_last = now - self._last_request_time
            if time_since_last < self.min_interval:
                wait_time = self.min_interval - time_since_last
                logger.debug(f"Rate limiting: waiting {wait_time:.2f}s")
                await asyncio.sleep(wait_time)
            self._last_request_time = time.time()


class OpenRouteServiceClient:
    """Client for the OpenRouteService directions API."""

    PROFILE_DRIVING_CAR = "driving-car"
    PROFILE_CYCLING_REGULAR = "cycling-regular"
    PROFILE_FOOT_WALKING = "foot-walking"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        requests_per_minute: Optional[int] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the ORS client.

        Args:
            api_key: OpenRouteService API key.
            base_url: ORS API base URL.
            requests_per_minute: Rate limit for requests.
            timeout: HTTP timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        settings = get_settings()
        self.api_key = api_key or settings.ors_api_key
        self.base_url = base_url or settings.ors_base_url
        self.timeout = timeout or settings.http_timeout_seconds
        self.rate_limiter = RateLimiter(
            requests_per_minute or settings.ors_requests_per_minute
        )
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        if not self.api_key:
            logger.warning(
                "No ORS API key configured. Set ORS_API_KEY environment variable."
            )

    async def __aenter__(self):
        """Enter async context manager."""
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            headers={
                "Authorization": self.api_key,
                "Content-Type": "application/json",
            },
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context manager."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get_directions(
        self, waypoints: Sequence[Waypoint], profile: str
    ) -> RouteLeg:
        """Calculate a route through the waypoints, in the given order.

        Args:
            waypoints: Ordered stops, at least two.
            profile: ORS profile (e.g., 'cycling-regular', 'foot-walking').

        Returns:
            RouteLeg with the summed per-leg durations.

        Raises:
            ProviderError: If the request fails or the response is unusable.
        """
        if not self._client:
            raise RuntimeError("Client not initialized. Use async context manager.")

        if len(waypoints) < 2:
            raise ValueError("At least two waypoints are required for directions.")

        if not self.api_key:
            logger.error("Cannot make ORS request without API key")
            raise ProviderError(PROVIDER_NAME, "no API key configured")

        await self.rate_limiter.acquire()

        url = f"{self.base_url}/v2/directions/{profile}"

        payload = {
            "coordinates": [list(wp.coordinates) for wp in waypoints],
            "instructions": False,
        }

        try:
            response = await self._client.post(url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            if status_code == 429:
                logger.warning("ORS rate limit exceeded")
            else:
                logger.error(f"ORS API request failed: {e}")
            raise ProviderError(
                PROVIDER_NAME, f"HTTP {status_code}", status_code=status_code
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Failed to get route from ORS: {e}")
            raise ProviderError(PROVIDER_NAME, str(e) or type(e).__name__) from e
        except ValueError as e:
            logger.error(f"ORS returned invalid JSON: {e}")
            raise ProviderError(PROVIDER_NAME, "invalid JSON response") from e

        return self._parse_route_response(data)

    def _parse_route_response(self, data: dict) -> RouteLeg:
        """Parse ORS directions response.

        Args:
            data: Raw JSON response from ORS API.

        Returns:
            Parsed RouteLeg.

        Raises:
            ProviderError: If the response holds no usable route.
        """
        routes = data.get("routes") if isinstance(data, dict) else None
        if not routes:
            logger.warning("No routes found in ORS response")
            raise ProviderError(PROVIDER_NAME, "no route found")
        if not isinstance(routes, list) or not isinstance(routes[0], dict):
            logger.error(f"Unexpected ORS routes payload: {routes!r}")
            raise ProviderError(PROVIDER_NAME, "malformed route list")

        route = routes[0]
        summary = route.get("summary", {})
        if not isinstance(summary, dict):
            logger.error(f"Unexpected ORS route summary: {summary!r}")
            raise ProviderError(PROVIDER_NAME, "malformed route summary")

        try:
            leg_durations = [
                float(segment["duration"]) for segment in route.get("segments") or []
            ]
            distance_meters = float(summary.get("distance", 0))
            if leg_durations:
                duration_seconds = sum(leg_durations)
            else:
                duration_seconds = float(summary.get("duration", 0))
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Failed to parse ORS response: {e}")
            raise ProviderError(PROVIDER_NAME, "malformed route summary") from e

        geometry_encoded = route.get("geometry", "")
        geometry: list[tuple[float, float]] = []
        if geometry_encoded:
            try:
                geometry = decode_polyline(geometry_encoded)
            except (IndexError, KeyError, TypeError) as e:
                logger.error(f"Failed to decode ORS polyline: {e}")
                raise ProviderError(PROVIDER_NAME, "malformed route geometry") from e

        return RouteLeg(
            distance_meters=distance_meters,
            duration_seconds=duration_seconds,
            geometry=geometry,
            leg_durations_seconds=leg_durations,
        )


def _decode_value(encoded: str, index: int) -> tuple[int, int]:
    """Decode one zigzag varint starting at index; return (delta, next_index)."""
    shift = 0
    result = 0
    while True:
        byte = ord(encoded[index]) - 63
        index += 1
        result |= (byte & 0x1F) << shift
        shift += 5
        if byte < 0x20:
            break
    delta = (~(result >> 1)) if (result & 1) else (result >> 1)
    return delta, index


def decode_polyline(encoded: str, precision: int = 5) -> list[tuple[float, float]]:
    """Decode a Google-style encoded polyline.

    Args:
        encoded: Encoded polyline string.
        precision: Coordinate precision (5 for ORS).

    Returns:
        List of (longitude, latitude) coordinate tuples.
    """
    coordinates = []
    index = 0
    lat = 0
    lon = 0
    factor = 10**precision

    while index < len(encoded):
        delta_lat, index = _decode_value(encoded, index)
        delta_lon, index = _decode_value(encoded, index)
        lat += delta_lat
        lon += delta_lon
        coordinates.append((lon / factor, lat / factor))

    return coordinates

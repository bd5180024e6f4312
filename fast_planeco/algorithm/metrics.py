"""Distance, travel time and CO2 figures for a routed itinerary."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence

from fast_planeco.algorithm.provider_router import ProviderRoute
from fast_planeco.exceptions import PartialDegradation, ProviderError
from fast_planeco.models import RouteLeg, Waypoint
from fast_planeco.services.ors_client import OpenRouteServiceClient
from fast_planeco.vehicles import VehicleProfile

logger = logging.getLogger(__name__)


class DurationSource:
    """Where a reported travel time came from."""

    ROUTE = "route"
    DIRECTIONS = "directions"
    SPEED_ESTIMATE = "speed_estimate"


@dataclass
class Metrics:
    """Reconciled itinerary figures.

    Distance is in km (2 decimals), time in whole minutes and emissions in
    grams of CO2 (2 decimals).
    """

    total_distance_km: float
    total_time_minutes: int
    carbon_footprint_g: float
    duration_source: str


def fallback_minutes(distance_km: float, vehicle: VehicleProfile) -> int:
    """Estimate travel time from the vehicle's nominal speed."""
    if vehicle.nominal_speed_kmh <= 0:
        return 0
    return math.floor(distance_km / vehicle.nominal_speed_kmh * 60)


def carbon_footprint_g(distance_km: float, vehicle: VehicleProfile) -> float:
    return round(distance_km * vehicle.emission_factor_g_per_km, 2)


class MetricsAggregator:
    """Turns a provider route into itinerary metrics."""

    def __init__(self, duration_client: Optional[OpenRouteServiceClient] = None):
        """Initialize the aggregator.

        Args:
            duration_client: Directions client used to refine driving times.
                Without one, driving times use the speed estimate.
        """
        self.duration_client = duration_client

    async def aggregate(
        self,
        route_leg: RouteLeg,
        vehicle: VehicleProfile,
        route: ProviderRoute,
        waypoints: Sequence[Waypoint],
    ) -> Metrics:
        """Compute distance, time and emissions for a route.

        Args:
            route_leg: Route from the geometry backend.
            vehicle: Selected vehicle profile.
            route: Backend selection for the vehicle.
            waypoints: The ordered stops the route goes through.

        Returns:
            Metrics for the itinerary.
        """
        raw_distance_km = route_leg.distance_meters / 1000.0

        if route.duration_profile is None:
            minutes = math.floor(route_leg.duration_seconds / 60)
            source = DurationSource.ROUTE
        else:
            try:
                seconds = await self._secondary_duration(
                    waypoints, route.duration_profile
                )
                minutes = math.floor(seconds / 60)
                source = DurationSource.DIRECTIONS
            except PartialDegradation as e:
                logger.info(f"Using speed-based travel time: {e}")
                minutes = fallback_minutes(raw_distance_km, vehicle)
                source = DurationSource.SPEED_ESTIMATE

        return Metrics(
            total_distance_km=round(raw_distance_km, 2),
            total_time_minutes=minutes,
            carbon_footprint_g=carbon_footprint_g(raw_distance_km, vehicle),
            duration_source=source,
        )

    async def _secondary_duration(
        self, waypoints: Sequence[Waypoint], profile: str
    ) -> float:
        """Look up the travel time on the directions backend.

        Raises:
            PartialDegradation: If the lookup fails or has no leg durations.
        """
        if self.duration_client is None:
            raise PartialDegradation("no directions client configured")

        try:
            leg = await self.duration_client.get_directions(waypoints, profile)
        except ProviderError as e:
            logger.warning(f"Secondary duration lookup failed: {e}")
            raise PartialDegradation(str(e)) from e

        if not leg.leg_durations_seconds:
            raise PartialDegradation("directions response had no segments")

        return sum(leg.leg_durations_seconds)

"""Itinerary controller: runs a planning cycle on every stop or mode change."""

from __future__ import annotations

import dataclasses
import logging
from typing import Optional, Sequence

from fast_planeco.algorithm.metrics import MetricsAggregator
from fast_planeco.algorithm.provider_router import (
    Backend,
    ProviderRoute,
    route_for_vehicle,
)
from fast_planeco.algorithm.route_optimizer import RouteOptimizer
from fast_planeco.exceptions import ProviderError, ValidationError
from fast_planeco.models import ItineraryResult, RouteLeg, StopSet, Waypoint
from fast_planeco.services.ors_client import OpenRouteServiceClient
from fast_planeco.services.osrm_client import OSRMClient
from fast_planeco.vehicles import NO_VEHICLE, VEHICLE_PROFILES

logger = logging.getLogger(__name__)


class ItineraryController:
    """Owns the stop set and the latest itinerary result.

    Each mutator starts a new planning cycle. Cycles are tagged with a
    generation number and only the newest one may commit, so a slow cycle
    never overwrites the result of a later change.
    """

    def __init__(
        self,
        osrm_client: OSRMClient,
        ors_client: OpenRouteServiceClient,
        optimizer: Optional[RouteOptimizer] = None,
        aggregator: Optional[MetricsAggregator] = None,
    ):
        """Initialize the controller.

        Args:
            osrm_client: Entered OSRM client (distance matrix, driving geometry).
            ors_client: Entered ORS client (cycling/walking geometry, durations).
            optimizer: Route optimizer. Defaults to one using configured limits.
            aggregator: Metrics aggregator. Defaults to one backed by ors_client.
        """
        self.osrm_client = osrm_client
        self.ors_client = ors_client
        self.optimizer = optimizer or RouteOptimizer()
        self.aggregator = aggregator or MetricsAggregator(ors_client)

        self._stop_set = StopSet()
        self._vehicle_id = NO_VEHICLE
        self._result = ItineraryResult.empty()
        self._generation = 0
        # Stop set as of the last successful optimization
        self._optimized_stop_set: Optional[StopSet] = None

    @property
    def stop_set(self) -> StopSet:
        return self._stop_set

    @property
    def vehicle_id(self) -> str:
        return self._vehicle_id

    @property
    def result(self) -> ItineraryResult:
        return self._result

    @property
    def generation(self) -> int:
        return self._generation

    # --- Triggering events ---

    async def set_origin(self, origin: Waypoint) -> Optional[ItineraryResult]:
        self._stop_set = self._stop_set.with_origin(origin)
        return await self.plan()

    async def clear_origin(self) -> Optional[ItineraryResult]:
        self._stop_set = self._stop_set.without_origin()
        return await self.plan()

    async def add_following(self, waypoint: Waypoint) -> Optional[ItineraryResult]:
        self._stop_set = self._stop_set.with_following_added(waypoint)
        return await self.plan()

    async def remove_following(self, index: int) -> Optional[ItineraryResult]:
        self._stop_set = self._stop_set.with_following_removed(index)
        return await self.plan()

    async def set_following(
        self, waypoints: Sequence[Waypoint]
    ) -> Optional[ItineraryResult]:
        self._stop_set = self._stop_set.with_following(waypoints)
        return await self.plan()

    async def set_vehicle(self, vehicle_id: str) -> Optional[ItineraryResult]:
        self._vehicle_id = vehicle_id
        return await self.plan()

    # --- Planning cycle ---

    def _is_current(self, generation: int) -> bool:
        if generation != self._generation:
            logger.debug(
                f"Discarding planning cycle {generation} "
                f"(superseded by {self._generation})"
            )
            return False
        return True

    def _commit(self, generation: int, result: ItineraryResult) -> bool:
        if not self._is_current(generation):
            return False
        self._result = result
        return True

    async def plan(self) -> Optional[ItineraryResult]:
        """Run one planning cycle for the current stops and vehicle.

        Returns:
            The committed result, or None if a newer cycle superseded this one.

        Raises:
            ValidationError: If the vehicle or stop count cannot be routed.
            ProviderError: If the matrix or geometry request fails.
        """
        self._generation += 1
        generation = self._generation
        stop_set = self._stop_set
        vehicle_id = self._vehicle_id

        if stop_set.origin is None:
            self._commit(generation, ItineraryResult.empty(generation))
            return self._result

        if not stop_set.following:
            self._commit(
                generation,
                ItineraryResult.markers_only(
                    [stop_set.origin], vehicle_id=vehicle_id, generation=generation
                ),
            )
            return self._result

        try:
            route = route_for_vehicle(vehicle_id)
            vehicle = VEHICLE_PROFILES[vehicle_id]
            self.optimizer.check_limit(len(stop_set.following))
        except ValidationError as e:
            logger.warning(f"Planning cycle {generation} rejected: {e}")
            self._commit(
                generation,
                ItineraryResult.markers_only(
                    stop_set.all_waypoints,
                    vehicle_id=vehicle_id,
                    error=str(e),
                    generation=generation,
                ),
            )
            raise

        try:
            if stop_set != self._optimized_stop_set:
                stop_set = await self._optimize(stop_set)
                if not self._is_current(generation):
                    return None
                self._stop_set = stop_set
                self._optimized_stop_set = stop_set
        except ProviderError as e:
            logger.error(f"Distance matrix unavailable: {e}")
            committed = self._commit(
                generation,
                ItineraryResult.markers_only(
                    stop_set.all_waypoints,
                    vehicle_id=vehicle_id,
                    error=str(e),
                    generation=generation,
                ),
            )
            if committed:
                raise
            return None

        waypoints = stop_set.all_waypoints
        try:
            route_leg = await self._fetch_route(waypoints, route)
        except ProviderError as e:
            logger.error(f"Route geometry unavailable: {e}")
            committed = self._commit(
                generation,
                dataclasses.replace(self._result, error=str(e)),
            )
            if committed:
                raise
            return None
        if not self._is_current(generation):
            return None

        metrics = await self.aggregator.aggregate(route_leg, vehicle, route, waypoints)

        result = ItineraryResult(
            geometry=route_leg.geometry,
            ordered_waypoints=waypoints,
            total_distance_km=metrics.total_distance_km,
            total_time_minutes=metrics.total_time_minutes,
            carbon_footprint_g=metrics.carbon_footprint_g,
            vehicle_id=vehicle_id,
            generation=generation,
        )
        if not self._commit(generation, result):
            return None

        logger.info(
            f"Planned {len(waypoints)} stops by {vehicle_id}: "
            f"{result.total_distance_km} km, {result.total_time_minutes} min "
            f"({metrics.duration_source}), {result.carbon_footprint_g} g CO2"
        )
        return result

    async def _optimize(self, stop_set: StopSet) -> StopSet:
        matrix = await self.osrm_client.get_distance_matrix(stop_set.all_waypoints)
        return self.optimizer.optimize(stop_set, matrix)

    async def _fetch_route(
        self, waypoints: list[Waypoint], route: ProviderRoute
    ) -> RouteLeg:
        if route.backend == Backend.MATRIX_SHAPE:
            return await self.osrm_client.get_route(waypoints, route.profile)
        return await self.ors_client.get_directions(waypoints, route.profile)

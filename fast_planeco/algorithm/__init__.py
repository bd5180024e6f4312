"""Algorithm module for FastPlaneco."""

from fast_planeco.algorithm.itinerary_controller import ItineraryController
from fast_planeco.algorithm.metrics import Metrics, MetricsAggregator
from fast_planeco.algorithm.provider_router import (
    Backend,
    ProviderRoute,
    route_for_vehicle,
)
from fast_planeco.algorithm.route_optimizer import (
    RouteOptimizer,
    find_optimal_order,
    path_distance,
)

__all__ = [
    "Backend",
    "ItineraryController",
    "Metrics",
    "MetricsAggregator",
    "ProviderRoute",
    "RouteOptimizer",
    "find_optimal_order",
    "path_distance",
    "route_for_vehicle",
]

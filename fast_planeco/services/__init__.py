"""Routing provider clients for FastPlaneco."""

from fast_planeco.services.ors_client import (
    OpenRouteServiceClient,
    RateLimiter,
    decode_polyline,
)
from fast_planeco.services.osrm_client import (
    OSRMClient,
    format_coordinates,
)

__all__ = [
    # ORS Client
    "OpenRouteServiceClient",
    "RateLimiter",
    "decode_polyline",
    # OSRM Client
    "OSRMClient",
    "format_coordinates",
]

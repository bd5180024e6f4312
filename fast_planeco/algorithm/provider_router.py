"""Maps a travel mode to the routing backend that draws its path."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from fast_planeco.exceptions import UnknownVehicleError, VehicleNotSelectedError
from fast_planeco.services.ors_client import OpenRouteServiceClient
from fast_planeco.services.osrm_client import OSRMClient
from fast_planeco.vehicles import NO_VEHICLE


class Backend(str, Enum):
    """Routing backend families."""

    MATRIX_SHAPE = "matrix_shape"  # OSRM table + route
    DIRECTIONS = "directions"  # OpenRouteService directions


@dataclass(frozen=True)
class ProviderRoute:
    """Backend and backend-specific profile tokens for one travel mode."""

    backend: Backend
    profile: str
    # Profile for the secondary duration lookup on the directions backend
    duration_profile: Optional[str] = None


_DRIVING = ProviderRoute(
    backend=Backend.MATRIX_SHAPE,
    profile=OSRMClient.PROFILE_DRIVING,
    duration_profile=OpenRouteServiceClient.PROFILE_DRIVING_CAR,
)

PROVIDER_ROUTES = {
    "car": _DRIVING,
    "electricCar": _DRIVING,
    "utility": _DRIVING,
    "electricUtility": _DRIVING,
    "bike": ProviderRoute(
        backend=Backend.DIRECTIONS,
        profile=OpenRouteServiceClient.PROFILE_CYCLING_REGULAR,
    ),
    "byFoot": ProviderRoute(
        backend=Backend.DIRECTIONS,
        profile=OpenRouteServiceClient.PROFILE_FOOT_WALKING,
    ),
}


def route_for_vehicle(vehicle_id: str) -> ProviderRoute:
    """Select the routing backend for a vehicle.

    Raises:
        VehicleNotSelectedError: For the 'no vehicle' placeholder or an empty id.
        UnknownVehicleError: For any other id without a route.
    """
    if not vehicle_id or vehicle_id == NO_VEHICLE:
        raise VehicleNotSelectedError()
    if vehicle_id not in PROVIDER_ROUTES:
        raise UnknownVehicleError(vehicle_id)
    return PROVIDER_ROUTES[vehicle_id]

"""FastAPI application for the FastPlaneco REST API."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from fast_planeco.algorithm.itinerary_controller import ItineraryController
from fast_planeco.config import get_settings
from fast_planeco.exceptions import ProviderError, ValidationError
from fast_planeco.models import ItineraryResult, Waypoint
from fast_planeco.services.ors_client import OpenRouteServiceClient
from fast_planeco.services.osrm_client import OSRMClient
from fast_planeco.vehicles import NO_VEHICLE, VEHICLE_PROFILES, list_available_vehicles

logger = logging.getLogger(__name__)
settings = get_settings()

# --- Pydantic Models ---


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    service: str = "fast-planeco"


class VehicleResponse(BaseModel):
    """Vehicle profile."""

    id: str
    label: str
    nominal_speed_kmh: float
    emission_factor_g_per_km: float


class WaypointModel(BaseModel):
    """A geocoded address."""

    address: str
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)

    def to_waypoint(self) -> Waypoint:
        return Waypoint(address=self.address, lat=self.lat, lon=self.lon)


class PlanRequest(BaseModel):
    """Request to plan an itinerary."""

    origin: Optional[WaypointModel] = Field(
        default=None, description="Starting address"
    )
    following: list[WaypointModel] = Field(
        default_factory=list, description="Addresses to visit, in any order"
    )
    vehicle: str = Field(
        default=NO_VEHICLE, description="Vehicle id (e.g., 'car', 'bike')"
    )


class ItineraryResponse(BaseModel):
    """Planned itinerary."""

    vehicle: Optional[str] = None
    ordered_waypoints: list[WaypointModel]
    following_waypoints: list[WaypointModel]
    total_entries: int
    geometry: Optional[list[list[float]]] = None
    total_distance_km: float
    total_time_minutes: int
    carbon_footprint_g: float


class ErrorResponse(BaseModel):
    """Error response."""

    detail: str


# --- Dependencies ---


async def get_routing_clients():
    """Open OSRM and ORS clients for the duration of a request."""
    async with OSRMClient() as osrm, OpenRouteServiceClient() as ors:
        yield osrm, ors


async def verify_api_key(x_api_key: str = Header(None, alias="X-API-Key")):
    """Verify the API key from request header."""
    valid_keys = settings.api_keys_list

    # If no keys configured, allow all requests (development mode)
    if not valid_keys:
        logger.warning("No API keys configured - allowing unauthenticated access")
        return None

    if not x_api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-API-Key header",
        )

    if x_api_key not in valid_keys:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key",
        )

    return x_api_key


def _to_waypoint_model(waypoint: Waypoint) -> WaypointModel:
    return WaypointModel(address=waypoint.address, lat=waypoint.lat, lon=waypoint.lon)


def to_itinerary_response(result: ItineraryResult) -> ItineraryResponse:
    """Convert an itinerary result to its response model."""
    return ItineraryResponse(
        vehicle=result.vehicle_id,
        ordered_waypoints=[_to_waypoint_model(wp) for wp in result.ordered_waypoints],
        following_waypoints=[
            _to_waypoint_model(wp) for wp in result.following_waypoints
        ],
        total_entries=result.stop_set.total_entries,
        geometry=(
            [list(coord) for coord in result.geometry]
            if result.geometry is not None
            else None
        ),
        total_distance_km=result.total_distance_km,
        total_time_minutes=result.total_time_minutes,
        carbon_footprint_g=result.carbon_footprint_g,
    )


# --- FastAPI App ---

app = FastAPI(
    title="FastPlaneco API",
    description="Plan the shortest multi-stop trip and estimate its carbon footprint",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Enable CORS for third-party websites
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure specific origins in production if needed
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Routes ---


@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """Health check endpoint for monitoring."""
    return HealthResponse()


@app.get(
    "/vehicles",
    response_model=list[VehicleResponse],
    tags=["Vehicles"],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def list_vehicles(_api_key: str = Depends(verify_api_key)):
    """List selectable vehicles with their speed and emission factor."""
    return [
        VehicleResponse(
            id=profile.id,
            label=profile.label,
            nominal_speed_kmh=profile.nominal_speed_kmh,
            emission_factor_g_per_km=profile.emission_factor_g_per_km,
        )
        for profile in (VEHICLE_PROFILES[vid] for vid in list_available_vehicles())
    ]


@app.post(
    "/itineraries/plan",
    response_model=ItineraryResponse,
    tags=["Itineraries"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
async def plan_itinerary(
    request: PlanRequest,
    clients: tuple = Depends(get_routing_clients),
    _api_key: str = Depends(verify_api_key),
):
    """Plan an itinerary.

    The following addresses are reordered to minimize the driving distance
    from the origin. Distance, travel time and carbon footprint are then
    computed for the selected vehicle.
    """
    osrm, ors = clients
    controller = ItineraryController(osrm, ors)

    try:
        await controller.set_vehicle(request.vehicle)
        if request.origin is not None:
            await controller.set_origin(request.origin.to_waypoint())
        await controller.set_following([wp.to_waypoint() for wp in request.following])
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except ProviderError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e),
        )

    return to_itinerary_response(controller.result)


# --- Entry Point ---


def main():
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        "fast_planeco.api:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )


if __name__ == "__main__":
    main()

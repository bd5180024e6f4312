"""Vehicle profiles: nominal speed and CO2 emission factor per travel mode."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class VehicleProfile:
    """Travel mode characteristics."""

    id: str
    label: str
    nominal_speed_kmh: float
    emission_factor_g_per_km: float

    @property
    def is_selected(self) -> bool:
        return self.id != NO_VEHICLE


NO_VEHICLE = "chooseYourVehicle"

VEHICLE_PROFILES = {
    NO_VEHICLE: VehicleProfile(
        id=NO_VEHICLE,
        label="Choose your vehicle",
        nominal_speed_kmh=0.0,
        emission_factor_g_per_km=0.0,
    ),
    "car": VehicleProfile(
        id="car",
        label="Car",
        nominal_speed_kmh=60.0,
        emission_factor_g_per_km=218.0,
    ),
    "electricCar": VehicleProfile(
        id="electricCar",
        label="Electric Car",
        nominal_speed_kmh=60.0,
        emission_factor_g_per_km=103.0,
    ),
    "utility": VehicleProfile(
        id="utility",
        label="Utility",
        nominal_speed_kmh=60.0,
        emission_factor_g_per_km=218.0,
    ),
    "electricUtility": VehicleProfile(
        id="electricUtility",
        label="Electric Utility",
        nominal_speed_kmh=60.0,
        emission_factor_g_per_km=103.0,
    ),
    "bike": VehicleProfile(
        id="bike",
        label="Bike",
        nominal_speed_kmh=15.0,
        emission_factor_g_per_km=6.0,
    ),
    "byFoot": VehicleProfile(
        id="byFoot",
        label="By Foot",
        nominal_speed_kmh=5.0,
        emission_factor_g_per_km=0.0,
    ),
}


def get_vehicle_profile(vehicle_id: str) -> VehicleProfile:
    """Get the profile for a vehicle id.

    Args:
        vehicle_id: Vehicle identifier (e.g., 'car', 'byFoot').

    Returns:
        VehicleProfile for the id.

    Raises:
        ValueError: If the vehicle id is not known.
    """
    if vehicle_id not in VEHICLE_PROFILES:
        raise ValueError(
            f"Unknown vehicle: {vehicle_id}. "
            f"Known vehicles: {list(VEHICLE_PROFILES.keys())}"
        )
    return VEHICLE_PROFILES[vehicle_id]


def list_available_vehicles() -> list[str]:
    """List selectable vehicle ids, excluding the 'no vehicle' placeholder."""
    return [vid for vid in VEHICLE_PROFILES if vid != NO_VEHICLE]

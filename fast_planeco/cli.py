"""Command-line interface for FastPlaneco."""

import asyncio
import json
import logging
import sys
from typing import Optional

import click

from fast_planeco.algorithm.itinerary_controller import ItineraryController
from fast_planeco.exceptions import ProviderError, ValidationError
from fast_planeco.models import ItineraryResult, Waypoint
from fast_planeco.services.ors_client import OpenRouteServiceClient
from fast_planeco.services.osrm_client import OSRMClient
from fast_planeco.vehicles import NO_VEHICLE, VEHICLE_PROFILES, list_available_vehicles

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def parse_waypoint(value: str) -> Waypoint:
    """Parse 'Label@lat,lon' into a Waypoint.

    Raises:
        ValueError: If the value is not in that format.
    """
    address, sep, coords = value.rpartition("@")
    if not sep or not address.strip():
        raise ValueError(f"Expected 'Label@lat,lon', got {value!r}")
    try:
        lat_str, lon_str = coords.split(",")
        lat, lon = float(lat_str), float(lon_str)
    except ValueError as e:
        raise ValueError(f"Invalid coordinates in {value!r}") from e
    if not (-90 <= lat <= 90 and -180 <= lon <= 180):
        raise ValueError(f"Coordinates out of range in {value!r}")
    return Waypoint(address=address.strip(), lat=lat, lon=lon)


def _waypoint_option(ctx, param, value):
    try:
        if isinstance(value, tuple):
            return [parse_waypoint(v) for v in value]
        return parse_waypoint(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


def format_time(minutes: int) -> str:
    """Format minutes as 'M' or 'H h M' for display."""
    if minutes < 60:
        return f"{minutes}"
    return f"{minutes // 60} h {minutes % 60}"


def format_carbon(grams: float) -> str:
    """Format grams of CO2 as 'G' or 'K kg G' for display."""
    if grams < 1000:
        return f"{grams}"
    return f"{int(grams // 1000)} kg {round(grams % 1000)}"


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def cli(verbose: bool):
    """FastPlaneco - Plan the shortest multi-stop trip and its carbon footprint."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@cli.command()
def vehicles():
    """List available vehicles."""
    click.echo("Available vehicles:")
    for vehicle_id in list_available_vehicles():
        profile = VEHICLE_PROFILES[vehicle_id]
        click.echo(
            f"  - {vehicle_id}: {profile.label} "
            f"({profile.nominal_speed_kmh:g} km/h, "
            f"{profile.emission_factor_g_per_km:g} g CO2/km)"
        )


async def run_plan(
    origin: Waypoint,
    stops: list[Waypoint],
    vehicle: str,
    osrm_client: Optional[OSRMClient] = None,
    ors_client: Optional[OpenRouteServiceClient] = None,
) -> ItineraryResult:
    """Plan one itinerary from scratch.

    Raises:
        ValidationError: If the vehicle or stop count is rejected.
        ProviderError: If a routing provider fails.
    """
    osrm_client = osrm_client or OSRMClient()
    ors_client = ors_client or OpenRouteServiceClient()

    async with osrm_client as osrm, ors_client as ors:
        controller = ItineraryController(osrm, ors)
        await controller.set_vehicle(vehicle)
        await controller.set_origin(origin)
        await controller.set_following(stops)
        return controller.result


@cli.command()
@click.option(
    "--origin",
    "-o",
    required=True,
    callback=_waypoint_option,
    help="Starting address as 'Label@lat,lon'",
)
@click.option(
    "--stop",
    "-s",
    "stops",
    multiple=True,
    callback=_waypoint_option,
    help="Following address as 'Label@lat,lon' (repeatable)",
)
@click.option(
    "--vehicle",
    "-V",
    default=NO_VEHICLE,
    type=click.Choice(list(VEHICLE_PROFILES.keys())),
    help="Vehicle used for the trip",
)
@click.option(
    "--output",
    type=click.Path(),
    default=None,
    help="Write the itinerary to a JSON file",
)
def plan(origin: Waypoint, stops: list, vehicle: str, output: Optional[str]):
    """Optimize the stop order and compute distance, time and CO2."""
    click.echo(f"Planning itinerary from {origin.address} with {len(stops)} stop(s)...")

    try:
        result = asyncio.run(run_plan(origin, stops, vehicle))
    except ValidationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except ProviderError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(3)

    click.echo("\nOptimized order:")
    for i, waypoint in enumerate(result.ordered_waypoints):
        marker = "Start" if i == 0 else f"{i:>5}"
        click.echo(f"  {marker}: {waypoint.address}")

    click.echo("\nINFORMATION")
    click.echo(f"  Total entries: {result.stop_set.total_entries}")
    click.echo(f"  Total distance: {result.total_distance_km:.2f} km")
    click.echo(f"  Total time: {format_time(result.total_time_minutes)} min")
    click.echo(f"  Carbon footprint: {format_carbon(result.carbon_footprint_g)} g CO2")

    if output:
        _export_json(result, output)
        click.echo(f"\nExported to: {output}")


def _export_json(result: ItineraryResult, output_path: str):
    """Export an itinerary result to JSON format."""
    data = {
        "vehicle": result.vehicle_id,
        "total_distance_km": result.total_distance_km,
        "total_time_minutes": result.total_time_minutes,
        "carbon_footprint_g": result.carbon_footprint_g,
        "waypoints": [
            {"address": wp.address, "lat": wp.lat, "lon": wp.lon}
            for wp in result.ordered_waypoints
        ],
        "geometry": [list(coord) for coord in result.geometry or []],
    }

    with open(output_path, "w") as f:
        json.dump(data, f, indent=2)


if __name__ == "__main__":
    cli()

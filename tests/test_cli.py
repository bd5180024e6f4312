"""Tests for the FastPlaneco command-line interface."""

import asyncio
import json

import pytest
from click.testing import CliRunner

from fast_planeco import cli as cli_module
from fast_planeco.cli import cli, format_carbon, format_time, parse_waypoint, run_plan
from fast_planeco.exceptions import ProviderError
from fast_planeco.models import ItineraryResult, Waypoint

from conftest import FakeORSClient, FakeOSRMClient


def test_parse_waypoint():
    waypoint = parse_waypoint("Gare de Lyon, Paris@48.8443,2.3743")
    assert waypoint == Waypoint(address="Gare de Lyon, Paris", lat=48.8443, lon=2.3743)


@pytest.mark.parametrize(
    "value", ["Paris", "@48.8,2.3", "Paris@48.8", "Paris@north,east", "Paris@95,2"]
)
def test_parse_waypoint_rejects(value):
    with pytest.raises(ValueError):
        parse_waypoint(value)


def test_format_time():
    assert format_time(45) == "45"
    assert format_time(60) == "1 h 0"
    assert format_time(125) == "2 h 5"


def test_format_carbon():
    assert format_carbon(999.5) == "999.5"
    assert format_carbon(21800.0) == "21 kg 800"
    assert format_carbon(1234.56) == "1 kg 235"


def test_vehicles_command():
    result = CliRunner().invoke(cli, ["vehicles"])
    assert result.exit_code == 0
    assert "car: Car (60 km/h, 218 g CO2/km)" in result.output
    assert "chooseYourVehicle" not in result.output


def test_run_plan_with_fake_providers(origin, stops):
    osrm = FakeOSRMClient(route_distance_m=12_000.0)
    result = asyncio.run(run_plan(origin, stops, "car", osrm, FakeORSClient()))

    assert [wp.address for wp in result.following_waypoints] == ["B", "C", "A"]
    assert result.total_distance_km == 12.0


def test_plan_command_exports_json(monkeypatch, tmp_path, origin, stops):
    planned = ItineraryResult(
        geometry=[(0.0, 48.85), (1.0, 48.87)],
        ordered_waypoints=[origin, stops[1]],
        total_distance_km=100.0,
        total_time_minutes=125,
        carbon_footprint_g=21800.0,
        vehicle_id="car",
    )

    async def fake_run_plan(origin, stops, vehicle):
        return planned

    monkeypatch.setattr(cli_module, "run_plan", fake_run_plan)
    output = tmp_path / "itinerary.json"

    result = CliRunner().invoke(
        cli,
        [
            "plan",
            "--origin",
            "Depot@48.85,0.0",
            "--stop",
            "B@48.87,1.0",
            "--vehicle",
            "car",
            "--output",
            str(output),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Total entries: 2" in result.output
    assert "Total time: 2 h 5 min" in result.output
    assert "Carbon footprint: 21 kg 800 g CO2" in result.output

    data = json.loads(output.read_text())
    assert data["vehicle"] == "car"
    assert data["carbon_footprint_g"] == 21800.0
    assert [wp["address"] for wp in data["waypoints"]] == ["Depot", "B"]
    assert data["geometry"] == [[0.0, 48.85], [1.0, 48.87]]


def test_plan_command_reports_provider_error(monkeypatch):
    async def failing_run_plan(origin, stops, vehicle):
        raise ProviderError("OSRM", "HTTP 503", status_code=503)

    monkeypatch.setattr(cli_module, "run_plan", failing_run_plan)

    result = CliRunner().invoke(
        cli, ["plan", "--origin", "Depot@48.85,0.0", "--stop", "B@48.87,1.0"]
    )

    assert result.exit_code == 3
    assert "Routing provider OSRM unreachable" in result.output


def test_plan_command_rejects_bad_origin():
    result = CliRunner().invoke(cli, ["plan", "--origin", "nowhere"])
    assert result.exit_code == 2
    assert "Label@lat,lon" in result.output


def test_plan_command_requires_vehicle(monkeypatch):
    """Test that planning with the default placeholder vehicle is rejected."""
    osrm = FakeOSRMClient()

    async def run_with_fakes(origin, stops, vehicle):
        return await run_plan(origin, stops, vehicle, osrm, FakeORSClient())

    monkeypatch.setattr(cli_module, "run_plan", run_with_fakes)

    result = CliRunner().invoke(
        cli, ["plan", "--origin", "Depot@48.85,0.0", "--stop", "B@48.87,1.0"]
    )

    assert result.exit_code == 1
    assert "Please choose your type of vehicle." in result.output
    assert "unreachable" not in result.output
    assert osrm.matrix_calls == 0

"""Shared fixtures: in-memory stand-ins for the routing providers."""

import asyncio
from typing import Optional

import pytest

from fast_planeco.exceptions import ProviderError
from fast_planeco.models import RouteLeg, Waypoint


class FakeOSRMClient:
    """OSRM stand-in placing waypoints on a line: distance = |dlon| * 1000 m."""

    def __init__(
        self,
        route_distance_m: float = 10_000.0,
        route_duration_s: float = 600.0,
        matrix_error: bool = False,
        route_error: bool = False,
    ):
        self.route_distance_m = route_distance_m
        self.route_duration_s = route_duration_s
        self.matrix_error = matrix_error
        self.route_error = route_error
        self.matrix_calls = 0
        self.route_calls: list[tuple[list[Waypoint], str]] = []
        # When set, the first matrix call waits for it
        self.matrix_gate: Optional[asyncio.Event] = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass

    async def get_distance_matrix(self, waypoints):
        self.matrix_calls += 1
        if self.matrix_gate is not None and self.matrix_calls == 1:
            await self.matrix_gate.wait()
        if self.matrix_error:
            raise ProviderError("OSRM", "response code 'NoTable'")
        return [[abs(a.lon - b.lon) * 1000.0 for b in waypoints] for a in waypoints]

    async def get_route(self, waypoints, profile="driving"):
        self.route_calls.append((list(waypoints), profile))
        if self.route_error:
            raise ProviderError("OSRM", "HTTP 503", status_code=503)
        return RouteLeg(
            distance_meters=self.route_distance_m,
            duration_seconds=self.route_duration_s,
            geometry=[wp.coordinates for wp in waypoints],
            leg_durations_seconds=[self.route_duration_s],
        )


class FakeORSClient:
    """OpenRouteService stand-in returning fixed per-leg durations."""

    def __init__(
        self,
        route_distance_m: float = 8_000.0,
        leg_duration_s: float = 300.0,
        error: bool = False,
        no_segments: bool = False,
    ):
        self.route_distance_m = route_distance_m
        self.leg_duration_s = leg_duration_s
        self.error = error
        self.no_segments = no_segments
        self.calls: list[tuple[list[Waypoint], str]] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass

    async def get_directions(self, waypoints, profile):
        self.calls.append((list(waypoints), profile))
        if self.error:
            raise ProviderError("OpenRouteService", "HTTP 500", status_code=500)
        legs = [] if self.no_segments else [self.leg_duration_s] * (len(waypoints) - 1)
        return RouteLeg(
            distance_meters=self.route_distance_m,
            duration_seconds=sum(legs),
            geometry=[wp.coordinates for wp in waypoints],
            leg_durations_seconds=legs,
        )


@pytest.fixture
def osrm():
    return FakeOSRMClient()


@pytest.fixture
def ors():
    return FakeORSClient()


@pytest.fixture
def origin():
    return Waypoint(address="Depot", lat=48.85, lon=0.0)


@pytest.fixture
def stops():
    """Three stops given out of their optimal order (optimal is B, C, A)."""
    return [
        Waypoint(address="A", lat=48.86, lon=3.0),
        Waypoint(address="B", lat=48.87, lon=1.0),
        Waypoint(address="C", lat=48.88, lon=2.0),
    ]

"""Data model for itinerary planning."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence


@dataclass(frozen=True)
class Waypoint:
    """A stop on the itinerary."""

    address: str
    lat: float
    lon: float

    @property
    def coordinates(self) -> tuple[float, float]:
        """(lon, lat) pair as routing providers expect it."""
        return (self.lon, self.lat)


@dataclass(frozen=True)
class StopSet:
    """The origin and the following stops, in their current order.

    Following stops have no required order; the optimizer may permute them
    and the permuted set replaces this one.
    """

    origin: Optional[Waypoint] = None
    following: tuple[Waypoint, ...] = ()

    def with_origin(self, origin: Waypoint) -> StopSet:
        return StopSet(origin=origin, following=self.following)

    def without_origin(self) -> StopSet:
        return StopSet(origin=None, following=self.following)

    def with_following_added(self, waypoint: Waypoint) -> StopSet:
        return StopSet(origin=self.origin, following=self.following + (waypoint,))

    def with_following_removed(self, index: int) -> StopSet:
        if not 0 <= index < len(self.following):
            raise IndexError(f"No following address at index {index}")
        following = self.following[:index] + self.following[index + 1 :]
        return StopSet(origin=self.origin, following=following)

    def with_following(self, following: Sequence[Waypoint]) -> StopSet:
        return StopSet(origin=self.origin, following=tuple(following))

    @property
    def all_waypoints(self) -> list[Waypoint]:
        """Origin followed by the following stops, empty without an origin."""
        if self.origin is None:
            return []
        return [self.origin, *self.following]

    @property
    def total_entries(self) -> int:
        return len(self.all_waypoints)


@dataclass
class RouteLeg:
    """Provider-agnostic route returned by every routing client."""

    distance_meters: float
    duration_seconds: float
    geometry: list[tuple[float, float]]  # List of (lon, lat) coordinates
    leg_durations_seconds: list[float] = field(default_factory=list)


@dataclass(frozen=True)
class ItineraryResult:
    """Consolidated outcome of one planning cycle."""

    geometry: Optional[list[tuple[float, float]]]
    ordered_waypoints: list[Waypoint]
    total_distance_km: float = 0.0
    total_time_minutes: int = 0
    carbon_footprint_g: float = 0.0
    vehicle_id: Optional[str] = None
    error: Optional[str] = None
    generation: int = 0

    @classmethod
    def empty(cls, generation: int = 0) -> ItineraryResult:
        """Result when no origin is set."""
        return cls(geometry=None, ordered_waypoints=[], generation=generation)

    @classmethod
    def markers_only(
        cls,
        waypoints: Sequence[Waypoint],
        vehicle_id: Optional[str] = None,
        error: Optional[str] = None,
        generation: int = 0,
    ) -> ItineraryResult:
        """Zeroed metrics with markers but no path line."""
        return cls(
            geometry=None,
            ordered_waypoints=list(waypoints),
            vehicle_id=vehicle_id,
            error=error,
            generation=generation,
        )

    @property
    def following_waypoints(self) -> list[Waypoint]:
        return self.ordered_waypoints[1:]

    @property
    def stop_set(self) -> StopSet:
        """Stops in visiting order, origin first."""
        if not self.ordered_waypoints:
            return StopSet()
        return StopSet(
            origin=self.ordered_waypoints[0],
            following=tuple(self.ordered_waypoints[1:]),
        )

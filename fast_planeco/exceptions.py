"""Exceptions raised by the FastPlaneco planning engine."""

from __future__ import annotations

from typing import Optional


class FastPlanecoError(Exception):
    """Base exception for FastPlaneco."""


class ValidationError(FastPlanecoError):
    """Raised when the planning inputs cannot be routed as given."""


class VehicleNotSelectedError(ValidationError):
    """Raised when following stops exist but no travel mode was chosen."""

    def __init__(self):
        super().__init__("Please choose your type of vehicle.")


class UnknownVehicleError(ValidationError):
    """Raised for a vehicle id missing from the profile registry."""

    def __init__(self, vehicle_id: str):
        self.vehicle_id = vehicle_id
        super().__init__(f"Unknown vehicle: {vehicle_id!r}")


class StopLimitError(ValidationError):
    """Raised when there are too many following stops for exact optimization."""

    def __init__(self, count: int, limit: int):
        self.count = count
        self.limit = limit
        super().__init__(
            f"Too many following addresses ({count}). "
            f"At most {limit} can be optimized."
        )


class ProviderError(FastPlanecoError):
    """Raised when a routing provider call fails or returns unusable data."""

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: Optional[int] = None,
    ):
        self.provider = provider
        self.status_code = status_code
        super().__init__(f"Routing provider {provider} unreachable: {message}")


class PartialDegradation(FastPlanecoError):
    """Raised when a secondary duration lookup is unusable.

    Only used inside the metrics aggregator, which replaces the missing
    duration with a speed-based estimate.
    """

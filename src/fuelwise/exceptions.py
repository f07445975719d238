"""Custom exception hierarchy for fuelwise."""

from __future__ import annotations


class FuelwiseError(Exception):
    """Base exception for all fuelwise errors."""


class FuelwiseConfigError(FuelwiseError):
    """Invalid or missing configuration."""


class FuelwiseTransportError(FuelwiseError):
    """HTTP-level failure (network, timeout, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class FuelwiseApiError(FuelwiseError):
    """A provider answered, but with an application-level error code."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        url: str = "",
    ) -> None:
        self.code = code
        self.url = url
        super().__init__(message)


class VehicleStoreError(FuelwiseError):
    """Remote vehicle persistence failed.

    The in-memory vehicle list is left untouched when this is raised, so
    callers only need to tell the user that the change was not saved.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str = "",
        vehicle_id: str | None = None,
    ) -> None:
        self.operation = operation
        self.vehicle_id = vehicle_id
        super().__init__(message)


class GeolocationError(FuelwiseError):
    """The device could not provide a position (denied, unavailable, timed out)."""

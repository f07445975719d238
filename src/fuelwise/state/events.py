"""State transition events.

One event type per external occurrence. Events are immutable; the store
maps each of them to exactly one state transition.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from fuelwise.models.fuel_price import FuelPriceData
from fuelwise.models.location import LocationPoint
from fuelwise.models.route import RouteResult
from fuelwise.models.vehicle import Vehicle


class SearchChannel(StrEnum):
    ORIGIN = "origin"
    DESTINATION = "destination"


class StateEvent(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


# ------------------------------------------------------------------
# Vehicles
# ------------------------------------------------------------------


class VehiclesLoaded(StateEvent):
    vehicles: tuple[Vehicle, ...]
    preferred_id: str | None = Field(default=None, description="Persisted selection to restore if still present")


class VehicleSaved(StateEvent):
    vehicle: Vehicle


class VehicleDeleted(StateEvent):
    vehicle_id: str


class VehicleSelected(StateEvent):
    vehicle_id: str | None


# ------------------------------------------------------------------
# Search and trip points
# ------------------------------------------------------------------


class QueryChanged(StateEvent):
    channel: SearchChannel
    text: str


class SearchIssued(StateEvent):
    channel: SearchChannel
    seq: int


class SuggestionsReceived(StateEvent):
    channel: SearchChannel
    seq: int
    suggestions: tuple[LocationPoint, ...]


class SuggestionsCleared(StateEvent):
    channel: SearchChannel


class PointSelected(StateEvent):
    """A point was chosen (suggestion, device location) or cleared (``None``)."""

    channel: SearchChannel
    point: LocationPoint | None


class PointsSwapped(StateEvent):
    pass


class LocatingChanged(StateEvent):
    active: bool


# ------------------------------------------------------------------
# Routing
# ------------------------------------------------------------------


class RouteRequested(StateEvent):
    seq: int


class RouteCompleted(StateEvent):
    seq: int
    route: RouteResult | None
    error: str | None = None


# ------------------------------------------------------------------
# Fuel price
# ------------------------------------------------------------------


class PriceLoadingChanged(StateEvent):
    loading: bool


class FuelPriceChanged(StateEvent):
    fuel_price: FuelPriceData

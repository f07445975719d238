"""Application state and its transition function.

:func:`transition` is pure: given a state and an event it returns the
next state. :class:`StateStore` keeps the current state, applies events
through :func:`transition` and notifies subscribers. The trip estimate is
never stored; :attr:`StateStore.calculation` recomputes it on demand.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from fuelwise.calculator import calculate_trip
from fuelwise.models.fuel_price import FuelPriceData
from fuelwise.models.location import LocationPoint
from fuelwise.models.route import RouteResult
from fuelwise.models.trip import TripCalculation
from fuelwise.models.vehicle import Vehicle
from fuelwise.state.events import (
    FuelPriceChanged,
    LocatingChanged,
    PointSelected,
    PointsSwapped,
    PriceLoadingChanged,
    QueryChanged,
    RouteCompleted,
    RouteRequested,
    SearchChannel,
    SearchIssued,
    StateEvent,
    SuggestionsCleared,
    SuggestionsReceived,
    VehicleDeleted,
    VehicleSaved,
    VehicleSelected,
    VehiclesLoaded,
)

_logger = logging.getLogger(__name__)

Listener = Callable[["AppState", "AppState"], None]


class SearchState(BaseModel):
    """Text input, chosen point and dropdown for one search channel."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    query: str = ""
    point: LocationPoint | None = None
    suggestions: tuple[LocationPoint, ...] = ()
    seq: int = 0
    """Number of the latest search issued; older responses are discarded."""


class AppState(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    vehicles: tuple[Vehicle, ...] = ()
    selected_vehicle_id: str | None = None

    origin_search: SearchState = Field(default_factory=SearchState)
    destination_search: SearchState = Field(default_factory=SearchState)
    is_locating: bool = False

    route: RouteResult | None = None
    route_error: str | None = None
    is_routing: bool = False
    route_seq: int = 0

    fuel_price: FuelPriceData
    price_loading: bool = False

    # ------------------------------------------------------------------
    # Convenience accessors
    # ------------------------------------------------------------------

    @property
    def origin(self) -> LocationPoint | None:
        return self.origin_search.point

    @property
    def destination(self) -> LocationPoint | None:
        return self.destination_search.point

    @property
    def selected_vehicle(self) -> Vehicle | None:
        if self.selected_vehicle_id is None:
            return None
        for vehicle in self.vehicles:
            if vehicle.id == self.selected_vehicle_id:
                return vehicle
        return None

    def search(self, channel: SearchChannel) -> SearchState:
        return self.origin_search if channel == SearchChannel.ORIGIN else self.destination_search


def _with_search(state: AppState, channel: SearchChannel, **update: Any) -> AppState:
    current = state.search(channel)
    field_name = "origin_search" if channel == SearchChannel.ORIGIN else "destination_search"
    return state.model_copy(update={field_name: current.model_copy(update=update)})


def _invalidate_route(state: AppState) -> AppState:
    """Drop the current route and orphan any request still in flight."""
    return state.model_copy(
        update={
            "route": None,
            "route_error": None,
            "is_routing": False,
            "route_seq": state.route_seq + 1,
        }
    )


def _pick_selection(vehicles: tuple[Vehicle, ...], *candidates: str | None) -> str | None:
    ids = {vehicle.id for vehicle in vehicles}
    for candidate in candidates:
        if candidate is not None and candidate in ids:
            return candidate
    return vehicles[0].id if vehicles else None


def transition(state: AppState, event: StateEvent) -> AppState:
    """Return the state that results from applying *event* to *state*."""
    if isinstance(event, VehiclesLoaded):
        return state.model_copy(
            update={
                "vehicles": event.vehicles,
                "selected_vehicle_id": _pick_selection(event.vehicles, state.selected_vehicle_id, event.preferred_id),
            }
        )

    if isinstance(event, VehicleSaved):
        vehicles = list(state.vehicles)
        for index, existing in enumerate(vehicles):
            if existing.id == event.vehicle.id:
                vehicles[index] = event.vehicle
                break
        else:
            vehicles.append(event.vehicle)
        return state.model_copy(
            update={
                "vehicles": tuple(vehicles),
                "selected_vehicle_id": state.selected_vehicle_id or event.vehicle.id,
            }
        )

    if isinstance(event, VehicleDeleted):
        remaining = tuple(v for v in state.vehicles if v.id != event.vehicle_id)
        selected = None if state.selected_vehicle_id == event.vehicle_id else state.selected_vehicle_id
        return state.model_copy(update={"vehicles": remaining, "selected_vehicle_id": selected})

    if isinstance(event, VehicleSelected):
        if event.vehicle_id is not None and all(v.id != event.vehicle_id for v in state.vehicles):
            _logger.debug("Ignoring selection of unknown vehicle %s", event.vehicle_id)
            return state
        return state.model_copy(update={"selected_vehicle_id": event.vehicle_id})

    if isinstance(event, QueryChanged):
        return _with_search(state, event.channel, query=event.text)

    if isinstance(event, SearchIssued):
        return _with_search(state, event.channel, seq=event.seq, suggestions=())

    if isinstance(event, SuggestionsReceived):
        search = state.search(event.channel)
        if event.seq != search.seq:
            _logger.debug("Discarding stale %s suggestions (seq %d, current %d)", event.channel, event.seq, search.seq)
            return state
        return _with_search(state, event.channel, suggestions=event.suggestions)

    if isinstance(event, SuggestionsCleared):
        search = state.search(event.channel)
        return _with_search(state, event.channel, suggestions=(), seq=search.seq + 1)

    if isinstance(event, PointSelected):
        search = state.search(event.channel)
        query = event.point.label if event.point is not None else ""
        state = _with_search(state, event.channel, point=event.point, query=query, suggestions=(), seq=search.seq + 1)
        return _invalidate_route(state)

    if isinstance(event, PointsSwapped):
        origin, destination = state.origin_search, state.destination_search
        state = state.model_copy(
            update={
                "origin_search": destination.model_copy(update={"suggestions": (), "seq": origin.seq + 1}),
                "destination_search": origin.model_copy(update={"suggestions": (), "seq": destination.seq + 1}),
            }
        )
        return _invalidate_route(state)

    if isinstance(event, LocatingChanged):
        return state.model_copy(update={"is_locating": event.active})

    if isinstance(event, RouteRequested):
        return state.model_copy(
            update={"route": None, "route_error": None, "is_routing": True, "route_seq": event.seq},
        )

    if isinstance(event, RouteCompleted):
        if event.seq != state.route_seq:
            _logger.debug("Discarding stale route (seq %d, current %d)", event.seq, state.route_seq)
            return state
        if event.route is not None:
            return state.model_copy(update={"route": event.route, "route_error": None, "is_routing": False})
        return state.model_copy(
            update={"route": None, "route_error": event.error or "Route not found", "is_routing": False},
        )

    if isinstance(event, PriceLoadingChanged):
        return state.model_copy(update={"price_loading": event.loading})

    if isinstance(event, FuelPriceChanged):
        return state.model_copy(update={"fuel_price": event.fuel_price})

    raise TypeError(f"Unhandled state event: {type(event).__name__}")


class StateStore:
    """Holds the current :class:`AppState` and notifies subscribers on change."""

    def __init__(self, initial: AppState) -> None:
        self._state = initial
        self._listeners: list[Listener] = []

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def calculation(self) -> TripCalculation | None:
        state = self._state
        return calculate_trip(state.selected_vehicle, state.route, state.fuel_price)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener(previous, current)``; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def apply(self, event: StateEvent) -> AppState:
        previous = self._state
        current = transition(previous, event)
        if current is previous:
            return current
        self._state = current
        for listener in list(self._listeners):
            try:
                listener(previous, current)
            except Exception:
                _logger.debug("State listener failed for %s", type(event).__name__, exc_info=True)
        return current

from __future__ import annotations

import pytest

from fuelwise.models.fuel_price import FuelPriceData
from fuelwise.models.location import LocationPoint
from fuelwise.models.route import RouteResult
from fuelwise.models.vehicle import Vehicle
from fuelwise.state.events import (
    FuelPriceChanged,
    PointSelected,
    PointsSwapped,
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
from fuelwise.state.store import AppState, StateStore, transition

MADRID = LocationPoint(lat=40.4167, lon=-3.7033, label="Madrid, Spain")
BARCELONA = LocationPoint(lat=41.3874, lon=2.1686, label="Barcelona, Spain")
ROUTE = RouteResult(distance_km=100.0, duration_min=60.0, geometry="")


def _state(**update: object) -> AppState:
    return AppState(fuel_price=FuelPriceData(price=1.6)).model_copy(update=update)


def _routed() -> AppState:
    state = _state()
    state = transition(state, PointSelected(channel=SearchChannel.ORIGIN, point=MADRID))
    state = transition(state, PointSelected(channel=SearchChannel.DESTINATION, point=BARCELONA))
    state = transition(state, RouteRequested(seq=state.route_seq + 1))
    return transition(state, RouteCompleted(seq=state.route_seq, route=ROUTE))


class TestVehicles:
    def test_load_restores_preferred_selection(self, diesel_car: Vehicle, kml_car: Vehicle) -> None:
        state = transition(_state(), VehiclesLoaded(vehicles=(diesel_car, kml_car), preferred_id="car-2"))
        assert state.selected_vehicle_id == "car-2"

    def test_load_falls_back_to_first_vehicle(self, diesel_car: Vehicle, kml_car: Vehicle) -> None:
        state = transition(_state(), VehiclesLoaded(vehicles=(diesel_car, kml_car), preferred_id="gone"))
        assert state.selected_vehicle_id == "car-1"

    def test_load_empty_list_selects_nothing(self) -> None:
        state = transition(_state(), VehiclesLoaded(vehicles=()))
        assert state.selected_vehicle_id is None
        assert state.selected_vehicle is None

    def test_save_replaces_existing_and_keeps_selection(self, diesel_car: Vehicle, kml_car: Vehicle) -> None:
        state = transition(_state(), VehiclesLoaded(vehicles=(diesel_car, kml_car)))
        renamed = kml_car.model_copy(update={"name": "Renamed"})

        state = transition(state, VehicleSaved(vehicle=renamed))

        assert [v.name for v in state.vehicles] == ["Test Car", "Renamed"]
        assert state.selected_vehicle_id == "car-1"

    def test_first_saved_vehicle_becomes_selected(self, diesel_car: Vehicle) -> None:
        state = transition(_state(), VehicleSaved(vehicle=diesel_car))
        assert state.selected_vehicle == diesel_car

    def test_deleting_selected_vehicle_clears_selection(self, diesel_car: Vehicle, kml_car: Vehicle) -> None:
        state = transition(_state(), VehiclesLoaded(vehicles=(diesel_car, kml_car)))

        state = transition(state, VehicleDeleted(vehicle_id="car-1"))

        assert state.vehicles == (kml_car,)
        assert state.selected_vehicle_id is None

    def test_deleting_other_vehicle_keeps_selection(self, diesel_car: Vehicle, kml_car: Vehicle) -> None:
        state = transition(_state(), VehiclesLoaded(vehicles=(diesel_car, kml_car)))
        state = transition(state, VehicleDeleted(vehicle_id="car-2"))
        assert state.selected_vehicle_id == "car-1"

    def test_selecting_unknown_vehicle_is_ignored(self, diesel_car: Vehicle) -> None:
        state = transition(_state(), VehiclesLoaded(vehicles=(diesel_car,)))
        assert transition(state, VehicleSelected(vehicle_id="nope")) is state


class TestSearch:
    def test_stale_suggestions_are_discarded(self) -> None:
        state = transition(_state(), SearchIssued(channel=SearchChannel.ORIGIN, seq=1))
        state = transition(state, SearchIssued(channel=SearchChannel.ORIGIN, seq=2))

        stale = transition(state, SuggestionsReceived(channel=SearchChannel.ORIGIN, seq=1, suggestions=(MADRID,)))
        fresh = transition(state, SuggestionsReceived(channel=SearchChannel.ORIGIN, seq=2, suggestions=(BARCELONA,)))

        assert stale is state
        assert fresh.origin_search.suggestions == (BARCELONA,)

    def test_new_search_hides_previous_suggestions(self) -> None:
        state = transition(_state(), SearchIssued(channel=SearchChannel.ORIGIN, seq=1))
        state = transition(state, SuggestionsReceived(channel=SearchChannel.ORIGIN, seq=1, suggestions=(MADRID,)))

        state = transition(state, SearchIssued(channel=SearchChannel.ORIGIN, seq=2))

        assert state.origin_search.suggestions == ()
        assert state.origin_search.seq == 2

    def test_clearing_orphans_in_flight_search(self) -> None:
        state = transition(_state(), SearchIssued(channel=SearchChannel.DESTINATION, seq=1))
        state = transition(state, SuggestionsCleared(channel=SearchChannel.DESTINATION))

        after = transition(state, SuggestionsReceived(channel=SearchChannel.DESTINATION, seq=1, suggestions=(MADRID,)))

        assert after.destination_search.suggestions == ()

    def test_channels_are_independent(self) -> None:
        state = transition(_state(), QueryChanged(channel=SearchChannel.ORIGIN, text="Mad"))
        assert state.origin_search.query == "Mad"
        assert state.destination_search.query == ""

    def test_selecting_point_sets_query_to_label(self) -> None:
        state = transition(_state(), SearchIssued(channel=SearchChannel.ORIGIN, seq=1))
        state = transition(state, SuggestionsReceived(channel=SearchChannel.ORIGIN, seq=1, suggestions=(MADRID,)))

        state = transition(state, PointSelected(channel=SearchChannel.ORIGIN, point=MADRID))

        assert state.origin == MADRID
        assert state.origin_search.query == "Madrid, Spain"
        assert state.origin_search.suggestions == ()


class TestRoute:
    def test_route_completion_sets_route(self) -> None:
        state = _routed()
        assert state.route == ROUTE
        assert state.is_routing is False
        assert state.route_error is None

    def test_failure_clears_previous_route_and_sets_error(self) -> None:
        state = _routed()
        state = transition(state, RouteRequested(seq=state.route_seq + 1))
        state = transition(state, RouteCompleted(seq=state.route_seq, route=None, error="No road"))

        assert state.route is None
        assert state.route_error == "No road"
        assert state.is_routing is False

    def test_stale_route_is_discarded(self) -> None:
        state = _routed()
        state = transition(state, RouteRequested(seq=state.route_seq + 1))
        old_seq = state.route_seq
        state = transition(state, RouteRequested(seq=old_seq + 1))

        after = transition(state, RouteCompleted(seq=old_seq, route=ROUTE))

        assert after is state
        assert after.is_routing is True

    def test_changing_a_point_invalidates_route(self) -> None:
        state = _routed()
        seq = state.route_seq

        state = transition(state, PointSelected(channel=SearchChannel.DESTINATION, point=None))

        assert state.route is None
        assert state.destination is None
        assert state.destination_search.query == ""
        assert state.route_seq == seq + 1

    def test_swap_exchanges_points_and_drops_route(self) -> None:
        state = transition(_routed(), PointsSwapped())
        assert state.origin == BARCELONA
        assert state.destination == MADRID
        assert state.origin_search.query == "Barcelona, Spain"
        assert state.route is None


def test_unknown_event_raises() -> None:
    with pytest.raises(TypeError):
        transition(_state(), StateEvent())


class TestStateStore:
    def test_listeners_see_previous_and_current(self) -> None:
        store = StateStore(_state())
        seen: list[tuple[float, float]] = []
        store.subscribe(lambda prev, cur: seen.append((prev.fuel_price.price, cur.fuel_price.price)))

        store.apply(FuelPriceChanged(fuel_price=FuelPriceData(price=1.7)))

        assert seen == [(1.6, 1.7)]

    def test_unchanged_state_does_not_notify(self, diesel_car: Vehicle) -> None:
        store = StateStore(_state())
        store.apply(VehiclesLoaded(vehicles=(diesel_car,)))
        calls: list[object] = []
        store.subscribe(lambda prev, cur: calls.append(cur))

        store.apply(VehicleSelected(vehicle_id="unknown"))

        assert calls == []

    def test_unsubscribe(self) -> None:
        store = StateStore(_state())
        calls: list[object] = []
        unsubscribe = store.subscribe(lambda prev, cur: calls.append(cur))
        unsubscribe()
        unsubscribe()

        store.apply(FuelPriceChanged(fuel_price=FuelPriceData(price=2.0)))

        assert calls == []

    def test_failing_listener_does_not_block_others(self) -> None:
        store = StateStore(_state())
        calls: list[object] = []

        def _boom(prev: AppState, cur: AppState) -> None:
            raise RuntimeError("boom")

        store.subscribe(_boom)
        store.subscribe(lambda prev, cur: calls.append(cur))

        store.apply(FuelPriceChanged(fuel_price=FuelPriceData(price=2.0)))

        assert len(calls) == 1

    def test_calculation_follows_state(self, diesel_car: Vehicle) -> None:
        store = StateStore(_routed())
        assert store.calculation is None

        store.apply(VehiclesLoaded(vehicles=(diesel_car,)))

        calculation = store.calculation
        assert calculation is not None
        assert calculation.total_cost == pytest.approx(9.6)

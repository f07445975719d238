from __future__ import annotations

import json

import pytest

from fuelwise.map_view import (
    FIT_PADDING_PX,
    MARKERS_MAX_ZOOM,
    Bounds,
    GeoJsonMapSurface,
    MapView,
    iter_geometry_coordinates,
)
from fuelwise.models.fuel_price import FuelPriceData
from fuelwise.models.location import LocationPoint
from fuelwise.models.route import RouteResult
from fuelwise.state.events import PointSelected, RouteCompleted, RouteRequested, SearchChannel
from fuelwise.state.store import AppState, StateStore

MADRID = LocationPoint(lat=40.4167, lon=-3.7033, label="Madrid")
BARCELONA = LocationPoint(lat=41.3874, lon=2.1686, label="Barcelona")
LINE = {"type": "LineString", "coordinates": [[-3.7033, 40.4167], [-1.0, 42.5], [2.1686, 41.3874]]}


def _state() -> AppState:
    return AppState(fuel_price=FuelPriceData(price=1.6))


class _RecordingSurface(GeoJsonMapSurface):
    def __init__(self) -> None:
        super().__init__()
        self.calls: list[str] = []

    def set_markers(self, origin, destination) -> None:  # type: ignore[no-untyped-def]
        self.calls.append("markers")
        super().set_markers(origin, destination)

    def set_route(self, geometry) -> None:  # type: ignore[no-untyped-def]
        self.calls.append("route")
        super().set_route(geometry)


def test_bounds_from_no_points_is_none() -> None:
    assert Bounds.from_points([]) is None


def test_geometry_coordinates_are_lat_lon() -> None:
    assert list(iter_geometry_coordinates({"type": "Point", "coordinates": [2.0, 41.0]})) == [(41.0, 2.0)]
    collection = {"type": "GeometryCollection", "geometries": [LINE, {"type": "Point", "coordinates": [0, 1]}]}
    assert len(list(iter_geometry_coordinates(collection))) == 4


def test_single_marker_fits_with_zoom_cap() -> None:
    surface = GeoJsonMapSurface()
    view = MapView(surface)
    store = StateStore(_state())
    store.subscribe(view.on_state_change)

    store.apply(PointSelected(channel=SearchChannel.ORIGIN, point=MADRID))

    assert surface.viewport == Bounds(south=40.4167, west=-3.7033, north=40.4167, east=-3.7033)
    assert surface.padding == FIT_PADDING_PX
    assert surface.max_zoom == MARKERS_MAX_ZOOM
    features = surface.to_geojson()["features"]
    assert [f["properties"]["role"] for f in features] == ["origin"]
    assert features[0]["geometry"]["coordinates"] == [-3.7033, 40.4167]


def test_route_geometry_drives_viewport() -> None:
    surface = GeoJsonMapSurface()
    view = MapView(surface)
    store = StateStore(_state())
    store.subscribe(view.on_state_change)
    store.apply(PointSelected(channel=SearchChannel.ORIGIN, point=MADRID))
    store.apply(PointSelected(channel=SearchChannel.DESTINATION, point=BARCELONA))
    seq = store.state.route_seq + 1
    store.apply(RouteRequested(seq=seq))

    route = RouteResult(distance_km=620.0, duration_min=360.0, geometry=json.dumps(LINE))
    store.apply(RouteCompleted(seq=seq, route=route))

    assert surface.viewport == Bounds(south=40.4167, west=-3.7033, north=42.5, east=2.1686)
    assert surface.max_zoom is None
    roles = [f["properties"]["role"] for f in surface.to_geojson()["features"]]
    assert roles == ["route", "origin", "destination"]


def test_unparseable_geometry_falls_back_to_markers() -> None:
    surface = GeoJsonMapSurface()
    view = MapView(surface)
    state = _state().model_copy(
        update={
            "origin_search": _state().origin_search.model_copy(update={"point": MADRID}),
            "destination_search": _state().destination_search.model_copy(update={"point": BARCELONA}),
            "route": RouteResult(distance_km=1.0, duration_min=1.0, geometry="not json"),
        }
    )

    view.render(state)

    assert surface.viewport == Bounds(south=40.4167, west=-3.7033, north=41.3874, east=2.1686)
    assert surface.max_zoom == MARKERS_MAX_ZOOM
    assert [f["properties"]["role"] for f in surface.to_geojson()["features"]] == ["origin", "destination"]


def test_render_is_skipped_when_nothing_map_related_changed() -> None:
    surface = _RecordingSurface()
    view = MapView(surface)
    state = _state()

    view.render(state)
    view.render(state.model_copy(update={"price_loading": True}))

    assert surface.calls == ["markers", "route"]


@pytest.mark.parametrize("channel", list(SearchChannel))
def test_clearing_point_removes_marker(channel: SearchChannel) -> None:
    surface = GeoJsonMapSurface()
    view = MapView(surface)
    store = StateStore(_state())
    store.subscribe(view.on_state_change)

    store.apply(PointSelected(channel=channel, point=MADRID))
    store.apply(PointSelected(channel=channel, point=None))

    assert surface.to_geojson()["features"] == []

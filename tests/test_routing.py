"""Tests for the OSRM route adapter."""

from __future__ import annotations

import json

import pytest

from fuelwise._api.routing import build_route_url, compute_route, parse_route_response
from fuelwise.config import FuelwiseConfig
from fuelwise.exceptions import FuelwiseApiError
from fuelwise.models.location import LocationPoint

from conftest import FakeTransport

ORIGIN = LocationPoint(lat=40.4167, lon=-3.7033, label="Madrid")
DESTINATION = LocationPoint(lat=41.3874, lon=2.1686, label="Barcelona")


def test_url_encodes_lon_lat_pairs(config: FuelwiseConfig) -> None:
    url = build_route_url(config, ORIGIN, DESTINATION)
    assert url == "https://router.project-osrm.org/route/v1/driving/-3.7033,40.4167;2.1686,41.3874"


@pytest.mark.asyncio
async def test_first_route_is_normalized_to_km_and_minutes(config: FuelwiseConfig, transport: FakeTransport) -> None:
    route = await compute_route(config, transport, ORIGIN, DESTINATION)

    assert route is not None
    assert route.distance_km == pytest.approx(150.0)
    assert route.duration_min == pytest.approx(90.0)
    assert json.loads(route.geometry)["type"] == "LineString"

    call = transport.calls_of("route")[0]
    assert call.params == {"overview": "full", "geometries": "geojson"}


@pytest.mark.asyncio
async def test_non_ok_code_yields_none(config: FuelwiseConfig, transport: FakeTransport) -> None:
    transport.route_payload = {"code": "NoRoute", "message": "Impossible route between points", "routes": []}
    assert await compute_route(config, transport, ORIGIN, DESTINATION) is None


@pytest.mark.asyncio
async def test_empty_routes_yields_none(config: FuelwiseConfig, transport: FakeTransport) -> None:
    transport.route_payload = {"code": "Ok", "routes": []}
    assert await compute_route(config, transport, ORIGIN, DESTINATION) is None


@pytest.mark.asyncio
async def test_transport_failure_yields_none(config: FuelwiseConfig, transport: FakeTransport) -> None:
    transport.fail.add("route")
    assert await compute_route(config, transport, ORIGIN, DESTINATION) is None


def test_parse_reports_provider_code() -> None:
    with pytest.raises(FuelwiseApiError) as excinfo:
        parse_route_response({"code": "InvalidQuery", "message": "bad coords"})
    assert excinfo.value.code == "InvalidQuery"


def test_parse_rejects_missing_distance() -> None:
    with pytest.raises(FuelwiseApiError):
        parse_route_response({"code": "Ok", "routes": [{"duration": 10}]})


def test_parse_rejects_negative_distance() -> None:
    with pytest.raises(FuelwiseApiError):
        parse_route_response({"code": "Ok", "routes": [{"distance": -5, "duration": 10}]})


def test_parse_without_geometry() -> None:
    route = parse_route_response({"code": "Ok", "routes": [{"distance": 500, "duration": 30}]})
    assert route.distance_km == 0.5
    assert route.duration_min == 0.5
    assert route.geometry == ""

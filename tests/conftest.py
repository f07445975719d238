from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import unquote

import pytest

from fuelwise.config import FuelwiseConfig, VehicleStoreSettings
from fuelwise.exceptions import FuelwiseTransportError, VehicleStoreError
from fuelwise.models.vehicle import Vehicle

MADRID_RESULT = {"place_id": 1, "lat": "40.4167", "lon": "-3.7033", "display_name": "Madrid, Spain"}
BARCELONA_RESULT = {"place_id": 2, "lat": "41.3874", "lon": "2.1686", "display_name": "Barcelona, Spain"}

OSRM_OK_PAYLOAD: dict[str, Any] = {
    "code": "Ok",
    "routes": [
        {
            "distance": 150000.0,
            "duration": 5400.0,
            "geometry": {"type": "LineString", "coordinates": [[-3.7033, 40.4167], [-3.0, 40.9], [2.1686, 41.3874]]},
        },
        {"distance": 999999.0, "duration": 99999.0, "geometry": None},
    ],
}


@dataclass
class Call:
    method: str
    url: str
    params: dict[str, Any]
    json_body: Any
    headers: dict[str, str]


@dataclass
class FakeTransport:
    """In-memory stand-in for the geocoding, routing and document services."""

    search_results: dict[str, Any] = field(default_factory=dict)
    search_gates: dict[str, asyncio.Event] = field(default_factory=dict)
    reverse_payload: Any = field(default_factory=lambda: {"display_name": "Puerta del Sol, Madrid"})
    route_payload: Any = field(default_factory=lambda: OSRM_OK_PAYLOAD)
    route_gate: asyncio.Event | None = None
    fail: set[str] = field(default_factory=set)
    documents: dict[str, dict[str, Any]] = field(default_factory=dict)
    page_size: int | None = None
    calls: list[Call] = field(default_factory=list)

    @staticmethod
    def _kind(url: str) -> str:
        if url.endswith("/search"):
            return "search"
        if url.endswith("/reverse"):
            return "reverse"
        if "/route/v1/driving/" in url:
            return "route"
        if "/documents/" in url:
            return "store"
        raise AssertionError(f"Unexpected URL in fake transport: {url}")

    def calls_of(self, kind: str) -> list[Call]:
        return [c for c in self.calls if self._kind(c.url) == kind]

    async def request_json(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        json_body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        call = Call(method, url, dict(params or {}), json_body, dict(headers or {}))
        self.calls.append(call)
        kind = self._kind(url)
        if kind in self.fail or f"{kind}:{method}" in self.fail:
            raise FuelwiseTransportError(f"HTTP 503 from {url}", status_code=503, url=url)

        if kind == "search":
            query = call.params["q"]
            gate = self.search_gates.get(query)
            if gate is not None:
                await gate.wait()
            return self.search_results.get(query, [])
        if kind == "reverse":
            return self.reverse_payload
        if kind == "route":
            if self.route_gate is not None:
                await self.route_gate.wait()
            return self.route_payload
        return self._store(call)

    def _store(self, call: Call) -> Any:
        base, _, tail = call.url.partition("/documents/vehicles")
        doc_id = unquote(tail.lstrip("/")) if tail else ""
        if call.method == "GET":
            ordered = list(self.documents.items())
            start = int(call.params.get("pageToken") or 0)
            size = self.page_size or len(ordered) or 1
            page = ordered[start : start + size]
            payload: dict[str, Any] = {
                "documents": [
                    {"name": f"projects/p/databases/(default)/documents/vehicles/{key}", "fields": doc}
                    for key, doc in page
                ]
            }
            if start + size < len(ordered):
                payload["nextPageToken"] = str(start + size)
            return payload
        if call.method == "PATCH":
            self.documents[doc_id] = call.json_body["fields"]
            return {"name": f"vehicles/{doc_id}", "fields": call.json_body["fields"]}
        if call.method == "DELETE":
            self.documents.pop(doc_id, None)
            return None
        raise AssertionError(f"Unexpected store call: {call}")


@dataclass
class FakeVehicleStore:
    vehicles: list[Vehicle] = field(default_factory=list)
    fail_list: bool = False
    fail_write: bool = False
    deleted: list[str] = field(default_factory=list)

    async def list_vehicles(self) -> list[Vehicle]:
        if self.fail_list:
            raise VehicleStoreError("unavailable", operation="list")
        return list(self.vehicles)

    async def upsert_vehicle(self, vehicle: Vehicle) -> None:
        if self.fail_write:
            raise VehicleStoreError("unavailable", operation="upsert", vehicle_id=vehicle.id)
        self.vehicles = [v for v in self.vehicles if v.id != vehicle.id] + [vehicle]

    async def delete_vehicle(self, vehicle_id: str) -> None:
        if self.fail_write:
            raise VehicleStoreError("unavailable", operation="delete", vehicle_id=vehicle_id)
        self.deleted.append(vehicle_id)
        self.vehicles = [v for v in self.vehicles if v.id != vehicle_id]


@pytest.fixture
def config() -> FuelwiseConfig:
    return FuelwiseConfig(debounce_delay=0.02, price_delay=0.0)


@pytest.fixture
def store_config() -> FuelwiseConfig:
    return FuelwiseConfig(
        debounce_delay=0.02,
        price_delay=0.0,
        vehicle_store=VehicleStoreSettings(project_id="demo-project", api_key="api-key"),
    )


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport(
        search_results={
            "Madrid": [MADRID_RESULT],
            "Barcelona": [BARCELONA_RESULT],
        }
    )


@pytest.fixture
def vehicle_store() -> FakeVehicleStore:
    return FakeVehicleStore()


@pytest.fixture
def diesel_car() -> Vehicle:
    return Vehicle(
        id="car-1",
        name="Test Car",
        fuel_type="diesel",
        consumption_value=6,
        consumption_unit="L_PER_100KM",
    )


@pytest.fixture
def kml_car() -> Vehicle:
    return Vehicle(
        id="car-2",
        name="Efficient Car",
        fuel_type="gasoline",
        consumption_value=15,
        consumption_unit="KM_PER_L",
    )

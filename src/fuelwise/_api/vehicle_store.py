"""Vehicle store adapters.

The remote store is a document database with one document per vehicle,
keyed by the vehicle id. Operations are list-all, upsert-by-id and
delete-by-id; there is no cross-document transaction.

:class:`FirestoreVehicleStore` talks to the Firestore REST v1 documents
API. :class:`LocalVehicleStore` keeps the same contract on top of local
storage for setups without a remote database.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any, Protocol
from urllib.parse import quote

from pydantic import ValidationError

from fuelwise._transport import Transport
from fuelwise.config import VehicleStoreSettings
from fuelwise.exceptions import FuelwiseConfigError, FuelwiseTransportError, VehicleStoreError
from fuelwise.models.vehicle import Vehicle
from fuelwise.storage import LocalState

_logger = logging.getLogger(__name__)

_PAGE_SIZE = 300
_MAX_PAGES = 50


class VehicleStore(Protocol):
    async def list_vehicles(self) -> list[Vehicle]:
        ...

    async def upsert_vehicle(self, vehicle: Vehicle) -> None:
        ...

    async def delete_vehicle(self, vehicle_id: str) -> None:
        ...


# ------------------------------------------------------------------
# Firestore typed-value codec
# ------------------------------------------------------------------


def encode_value(value: Any) -> dict[str, Any]:
    """Encode a JSON scalar/list/dict as a Firestore ``Value``."""
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, Mapping):
        return {"mapValue": {"fields": encode_fields(value)}}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(v) for v in value]}}
    raise TypeError(f"cannot encode {type(value).__name__} as a Firestore value")


def encode_fields(document: Mapping[str, Any]) -> dict[str, Any]:
    return {str(key): encode_value(val) for key, val in document.items()}


def decode_value(value: Mapping[str, Any]) -> Any:
    """Decode a Firestore ``Value`` back into plain Python."""
    if "stringValue" in value:
        return value["stringValue"]
    if "doubleValue" in value:
        number = float(value["doubleValue"])
        return number if math.isfinite(number) else None
    if "integerValue" in value:
        return int(value["integerValue"])
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "nullValue" in value:
        return None
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields") or {})
    if "arrayValue" in value:
        return [decode_value(v) for v in value["arrayValue"].get("values") or []]
    if "timestampValue" in value:
        return value["timestampValue"]
    return None


def decode_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    return {key: decode_value(val) for key, val in fields.items() if isinstance(val, Mapping)}


def document_to_vehicle(document: Mapping[str, Any]) -> Vehicle | None:
    """Decode one Firestore document; returns ``None`` for invalid data."""
    fields = document.get("fields")
    if not isinstance(fields, Mapping):
        return None
    data = decode_fields(fields)
    if not data.get("id"):
        # Older documents may only carry the id in the resource name.
        name = document.get("name")
        if isinstance(name, str) and "/" in name:
            data["id"] = name.rsplit("/", 1)[-1]
    try:
        return Vehicle.model_validate(data)
    except ValidationError:
        _logger.warning("Skipping invalid vehicle document %s", document.get("name"))
        return None


class FirestoreVehicleStore:
    """Vehicle CRUD against the Firestore REST documents API."""

    def __init__(self, settings: VehicleStoreSettings, transport: Transport) -> None:
        if not settings.enabled:
            raise FuelwiseConfigError("Remote vehicle store requires a project id")
        self._settings = settings
        self._transport = transport

    def _params(self, **extra: Any) -> dict[str, Any]:
        params: dict[str, Any] = dict(extra)
        if self._settings.api_key:
            params["key"] = self._settings.api_key
        return params

    def _document_url(self, vehicle_id: str) -> str:
        return f"{self._settings.collection_url}/{quote(vehicle_id, safe='')}"

    async def list_vehicles(self) -> list[Vehicle]:
        url = self._settings.collection_url
        vehicles: list[Vehicle] = []
        page_token: str | None = None
        for _ in range(_MAX_PAGES):
            params = self._params(pageSize=_PAGE_SIZE)
            if page_token:
                params["pageToken"] = page_token
            try:
                payload = await self._transport.request_json("GET", url, params=params)
            except FuelwiseTransportError as exc:
                raise VehicleStoreError(f"Listing vehicles failed: {exc}", operation="list") from exc

            payload = payload if isinstance(payload, dict) else {}
            for document in payload.get("documents") or []:
                if not isinstance(document, Mapping):
                    continue
                vehicle = document_to_vehicle(document)
                if vehicle is not None:
                    vehicles.append(vehicle)

            page_token = payload.get("nextPageToken") or None
            if not page_token:
                break
        else:
            _logger.warning("Stopped listing vehicles after %d pages", _MAX_PAGES)
        return vehicles

    async def upsert_vehicle(self, vehicle: Vehicle) -> None:
        body = {"fields": encode_fields(vehicle.to_document())}
        try:
            await self._transport.request_json(
                "PATCH",
                self._document_url(vehicle.id),
                params=self._params(),
                json_body=body,
            )
        except FuelwiseTransportError as exc:
            raise VehicleStoreError(
                f"Saving vehicle {vehicle.id} failed: {exc}",
                operation="upsert",
                vehicle_id=vehicle.id,
            ) from exc

    async def delete_vehicle(self, vehicle_id: str) -> None:
        try:
            await self._transport.request_json(
                "DELETE",
                self._document_url(vehicle_id),
                params=self._params(),
            )
        except FuelwiseTransportError as exc:
            raise VehicleStoreError(
                f"Deleting vehicle {vehicle_id} failed: {exc}",
                operation="delete",
                vehicle_id=vehicle_id,
            ) from exc


class LocalVehicleStore:
    """Vehicle store backed by the local vehicle-list entry.

    Storage failures surface as :class:`VehicleStoreError`, the same as
    for the remote store.
    """

    def __init__(self, local: LocalState) -> None:
        self._local = local

    async def list_vehicles(self) -> list[Vehicle]:
        try:
            return self._local.load_vehicles()
        except OSError as exc:
            raise VehicleStoreError(f"Reading local vehicles failed: {exc}", operation="list") from exc

    async def upsert_vehicle(self, vehicle: Vehicle) -> None:
        try:
            vehicles = self._local.load_vehicles()
            for index, existing in enumerate(vehicles):
                if existing.id == vehicle.id:
                    vehicles[index] = vehicle
                    break
            else:
                vehicles.append(vehicle)
            self._local.save_vehicles(vehicles)
        except OSError as exc:
            raise VehicleStoreError(
                f"Saving vehicle {vehicle.id} locally failed: {exc}",
                operation="upsert",
                vehicle_id=vehicle.id,
            ) from exc

    async def delete_vehicle(self, vehicle_id: str) -> None:
        try:
            vehicles = self._local.load_vehicles()
            self._local.save_vehicles([v for v in vehicles if v.id != vehicle_id])
        except OSError as exc:
            raise VehicleStoreError(
                f"Deleting vehicle {vehicle_id} locally failed: {exc}",
                operation="delete",
                vehicle_id=vehicle_id,
            ) from exc

"""Local durable key-value storage.

Three independent string entries are kept: the serialized vehicle list,
the selected vehicle id and the last fuel price. Each one is written on
its own; there is no transaction across them.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from fuelwise._constants import (
    STORAGE_KEY_LAST_PRICE,
    STORAGE_KEY_SELECTED_VEHICLE_ID,
    STORAGE_KEY_VEHICLES,
)
from fuelwise.models.vehicle import Vehicle
from fuelwise.normalize import safe_float

_logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    """String-keyed, string-valued durable storage."""

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class MemoryStorage:
    """Volatile storage, useful for tests and ephemeral sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        return dict(self._data)


class JsonFileStorage:
    """Storage persisted as a single JSON object on disk.

    Writes go to a temporary file that replaces the target, so a crash
    leaves either the old or the new content behind.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._data: dict[str, str] | None = None

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if self._data is not None:
            return self._data
        data: dict[str, str] = {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raw = {}
        except (OSError, ValueError):
            # ValueError covers both JSONDecodeError and UnicodeDecodeError.
            _logger.warning("Local storage at %s is unreadable; starting empty", self._path, exc_info=True)
            raw = {}
        if isinstance(raw, dict):
            data = {str(k): v for k, v in raw.items() if isinstance(v, str)}
        self._data = data
        return data

    def _flush(self) -> None:
        data = self._load()
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=self._path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        self._load()[key] = value
        self._flush()

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._flush()


class LocalState:
    """Typed access to the three persisted entries."""

    def __init__(self, storage: KeyValueStorage) -> None:
        self._storage = storage

    # ------------------------------------------------------------------
    # Vehicles
    # ------------------------------------------------------------------

    def load_vehicles(self) -> list[Vehicle]:
        """Stored vehicle list; unreadable data reads as an empty list."""
        raw = self._storage.get(STORAGE_KEY_VEHICLES)
        if not raw:
            return []
        try:
            items = json.loads(raw)
        except json.JSONDecodeError:
            _logger.warning("Stored vehicle list is not JSON; ignoring it")
            return []
        if not isinstance(items, list):
            return []
        vehicles: list[Vehicle] = []
        for item in items:
            try:
                vehicles.append(Vehicle.model_validate(item))
            except ValidationError:
                _logger.warning("Dropping invalid stored vehicle: %r", item)
        return vehicles

    def save_vehicles(self, vehicles: Iterable[Vehicle]) -> None:
        payload = [vehicle.to_document() for vehicle in vehicles]
        self._storage.set(STORAGE_KEY_VEHICLES, json.dumps(payload, ensure_ascii=False))

    # ------------------------------------------------------------------
    # Selected vehicle
    # ------------------------------------------------------------------

    def load_selected_vehicle_id(self) -> str | None:
        value = self._storage.get(STORAGE_KEY_SELECTED_VEHICLE_ID)
        return value or None

    def save_selected_vehicle_id(self, vehicle_id: str | None) -> None:
        if vehicle_id:
            self._storage.set(STORAGE_KEY_SELECTED_VEHICLE_ID, vehicle_id)
        else:
            self._storage.remove(STORAGE_KEY_SELECTED_VEHICLE_ID)

    # ------------------------------------------------------------------
    # Fuel price
    # ------------------------------------------------------------------

    def load_price(self) -> float | None:
        price = safe_float(self._storage.get(STORAGE_KEY_LAST_PRICE))
        if price is None or price < 0:
            return None
        return price

    def save_price(self, price: float) -> None:
        self._storage.set(STORAGE_KEY_LAST_PRICE, repr(float(price)))

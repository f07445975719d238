"""fuelwise - Async trip fuel-cost estimator."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("fuelwise")
except PackageNotFoundError:
    __version__ = "0+local"
from fuelwise.calculator import calculate_trip, normalize_consumption, to_unit
from fuelwise.config import FuelwiseConfig, VehicleStoreSettings
from fuelwise.controller import DeviceLocator, FuelwiseController
from fuelwise.exceptions import (
    FuelwiseApiError,
    FuelwiseConfigError,
    FuelwiseError,
    FuelwiseTransportError,
    GeolocationError,
    VehicleStoreError,
)
from fuelwise.map_view import GeoJsonMapSurface, MapSurface, MapView
from fuelwise.models import (
    FuelPriceData,
    FuelType,
    FuelUnit,
    LocationPoint,
    RouteResult,
    TripCalculation,
    Vehicle,
)
from fuelwise.state.events import SearchChannel
from fuelwise.state.store import AppState
from fuelwise.storage import JsonFileStorage, MemoryStorage

__all__ = [
    "__version__",
    "AppState",
    "DeviceLocator",
    "FuelPriceData",
    "FuelType",
    "FuelUnit",
    "FuelwiseApiError",
    "FuelwiseConfig",
    "FuelwiseConfigError",
    "FuelwiseController",
    "FuelwiseError",
    "FuelwiseTransportError",
    "GeoJsonMapSurface",
    "GeolocationError",
    "JsonFileStorage",
    "LocationPoint",
    "MapSurface",
    "MapView",
    "MemoryStorage",
    "RouteResult",
    "SearchChannel",
    "TripCalculation",
    "Vehicle",
    "VehicleStoreError",
    "VehicleStoreSettings",
    "calculate_trip",
    "normalize_consumption",
    "to_unit",
]

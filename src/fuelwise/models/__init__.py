"""Data models for vehicles, locations, routes and prices."""

from fuelwise.models._base import FuelwiseBaseModel
from fuelwise.models.fuel_price import FuelPriceData
from fuelwise.models.location import LocationPoint
from fuelwise.models.route import RouteResult
from fuelwise.models.trip import TripCalculation
from fuelwise.models.vehicle import FuelType, FuelUnit, Vehicle

__all__ = [
    "FuelPriceData",
    "FuelType",
    "FuelUnit",
    "FuelwiseBaseModel",
    "LocationPoint",
    "RouteResult",
    "TripCalculation",
    "Vehicle",
]

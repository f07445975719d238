"""Consumption unit conversion and trip cost calculation.

Everything here is pure and deterministic: no I/O, no clock, no state.
"""

from __future__ import annotations

import math

from fuelwise.models.fuel_price import FuelPriceData
from fuelwise.models.route import RouteResult
from fuelwise.models.trip import TripCalculation
from fuelwise.models.vehicle import FuelUnit, Vehicle


def _require_positive(value: float, what: str) -> float:
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"{what} must be a positive number, got {value!r}")
    return value


def normalize_consumption(value: float, unit: FuelUnit) -> float:
    """Express a consumption figure in liters per 100 km.

    Raises :class:`ValueError` for zero, negative or non-finite values.
    """
    _require_positive(value, "consumption value")
    if unit == FuelUnit.KM_PER_L:
        return 100.0 / value
    return value


def to_unit(l_per_100km: float, unit: FuelUnit) -> float:
    """Convert a normalized L/100 km rate back to *unit*."""
    _require_positive(l_per_100km, "normalized consumption")
    if unit == FuelUnit.KM_PER_L:
        return 100.0 / l_per_100km
    return l_per_100km


def vehicle_l_per_100km(vehicle: Vehicle) -> float:
    return normalize_consumption(vehicle.consumption_value, vehicle.consumption_unit)


def estimate(distance_km: float, l_per_100km: float, price_per_liter: float) -> TripCalculation:
    """Cost of driving *distance_km* at a normalized consumption rate."""
    if not math.isfinite(distance_km) or distance_km < 0:
        raise ValueError(f"distance must be a non-negative number, got {distance_km!r}")
    if not math.isfinite(price_per_liter) or price_per_liter < 0:
        raise ValueError(f"price must be a non-negative number, got {price_per_liter!r}")

    liters_needed = distance_km * l_per_100km / 100.0
    return TripCalculation(
        liters_needed=liters_needed,
        total_cost=liters_needed * price_per_liter,
        cost_per_100km=l_per_100km * price_per_liter,
        normalized_l_per_100km=l_per_100km,
    )


def calculate_trip(
    vehicle: Vehicle | None,
    route: RouteResult | None,
    fuel_price: FuelPriceData | float,
) -> TripCalculation | None:
    """Estimate the fuel cost of *route* for *vehicle*.

    Returns ``None`` (not a zero-valued result) while there is no route
    or no vehicle, so callers can tell "no data yet" from "free trip".
    """
    if vehicle is None or route is None:
        return None
    price = fuel_price.price if isinstance(fuel_price, FuelPriceData) else float(fuel_price)
    return estimate(route.distance_km, vehicle_l_per_100km(vehicle), price)

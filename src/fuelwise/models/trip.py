"""Trip calculation model."""

from __future__ import annotations

from pydantic import Field

from fuelwise.models._base import FuelwiseBaseModel


class TripCalculation(FuelwiseBaseModel):
    """Derived cost estimate for the current route and vehicle. Never persisted."""

    liters_needed: float
    total_cost: float
    cost_per_100km: float = Field(alias="costPer100Km")
    normalized_l_per_100km: float = Field(alias="normalizedLPer100Km")

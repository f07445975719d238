"""Vehicle model."""

from __future__ import annotations

import math
import uuid
from enum import StrEnum

from pydantic import Field, field_validator

from fuelwise.models._base import FuelwiseBaseModel


class FuelType(StrEnum):
    DIESEL = "diesel"
    GASOLINE = "gasoline"


class FuelUnit(StrEnum):
    """Basis of a consumption figure."""

    L_PER_100KM = "L_PER_100KM"
    KM_PER_L = "KM_PER_L"


class Vehicle(FuelwiseBaseModel):
    """A vehicle profile with its fuel-consumption figure.

    ``consumption_value`` must be strictly positive: a value of zero would
    make a km/L figure normalize to an infinite L/100 km rate.
    """

    id: str = Field(min_length=1)
    """Stable unique identifier (also the remote document id)."""
    name: str = Field(min_length=1)
    """Display name."""
    fuel_type: FuelType = FuelType.GASOLINE
    consumption_value: float = Field(gt=0)
    consumption_unit: FuelUnit = FuelUnit.L_PER_100KM

    @field_validator("id", "name", mode="before")
    @classmethod
    def _strip_text(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("consumption_value")
    @classmethod
    def _require_finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("consumption_value must be finite")
        return value

    @classmethod
    def create(
        cls,
        name: str,
        consumption_value: float,
        consumption_unit: FuelUnit = FuelUnit.L_PER_100KM,
        fuel_type: FuelType = FuelType.GASOLINE,
    ) -> Vehicle:
        """Build a new vehicle with a freshly generated id."""
        return cls(
            id=str(uuid.uuid4()),
            name=name,
            fuel_type=fuel_type,
            consumption_value=consumption_value,
            consumption_unit=consumption_unit,
        )

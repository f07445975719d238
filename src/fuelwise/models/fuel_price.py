"""Fuel price model."""

from __future__ import annotations

import math
from datetime import UTC, datetime

from pydantic import Field, field_validator

from fuelwise.models._base import FuelwiseBaseModel


def _utcnow() -> datetime:
    return datetime.now(UTC)


class FuelPriceData(FuelwiseBaseModel):
    """Current price per liter and where it came from.

    ``is_auto`` is ``True`` after a refresh from the price source and
    ``False`` once the user typed a price.
    """

    price: float = Field(ge=0)
    last_updated: datetime = Field(default_factory=_utcnow)
    is_auto: bool = True

    @field_validator("price")
    @classmethod
    def _require_finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("price must be finite")
        return value

    @field_validator("last_updated")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @classmethod
    def refreshed(cls, price: float, *, now: datetime | None = None) -> FuelPriceData:
        return cls(price=price, last_updated=now or _utcnow(), is_auto=True)

    def with_manual_price(self, price: float) -> FuelPriceData:
        """Return a copy carrying a user-entered price.

        The timestamp is kept: it records the last automatic refresh.
        """
        return FuelPriceData(price=price, last_updated=self.last_updated, is_auto=False)

"""Location point model."""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from fuelwise.models._base import FuelwiseBaseModel
from fuelwise.normalize import format_coordinates, safe_float


class LocationPoint(FuelwiseBaseModel):
    """A geographic point with a human-readable label.

    ``lat``/``lon`` accept the string encoding used by Nominatim
    (``"40.4167"``).
    """

    lat: float = Field(ge=-90.0, le=90.0)
    lon: float = Field(ge=-180.0, le=180.0)
    label: str = ""

    @field_validator("lat", "lon", mode="before")
    @classmethod
    def _coerce_float(cls, value: Any) -> Any:
        parsed = safe_float(value)
        if parsed is None:
            raise ValueError(f"not a coordinate: {value!r}")
        return parsed

    @property
    def coordinate_label(self) -> str:
        return format_coordinates(self.lat, self.lon)

    def as_lon_lat(self) -> str:
        """``"lon,lat"`` pair as expected by OSRM."""
        return f"{self.lon},{self.lat}"

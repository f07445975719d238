"""Route result model."""

from __future__ import annotations

import json
from typing import Any

from pydantic import Field

from fuelwise.models._base import FuelwiseBaseModel


class RouteResult(FuelwiseBaseModel):
    """A computed driving route.

    Distance and duration are already normalized to kilometers and
    minutes. ``geometry`` is a serialized GeoJSON geometry that only the
    map view interprets.
    """

    distance_km: float = Field(ge=0)
    duration_min: float = Field(ge=0)
    geometry: str = ""

    def geometry_json(self) -> dict[str, Any] | None:
        if not self.geometry:
            return None
        try:
            parsed = json.loads(self.geometry)
        except json.JSONDecodeError:
            return None
        return parsed if isinstance(parsed, dict) else None

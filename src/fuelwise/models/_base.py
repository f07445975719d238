"""Base model shared by all fuelwise data models.

Every model inherits from :class:`FuelwiseBaseModel` which provides:

* ``alias_generator=to_camel`` so the camelCase keys used by the stored
  documents (``consumptionValue``, ``distanceKm`` ...) map automatically
  to snake_case fields.
* ``populate_by_name=True`` so code can construct models with the
  snake_case names.
* ``frozen=True``: entities are replaced wholesale, never mutated.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class FuelwiseBaseModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_document(self) -> dict[str, Any]:
        """JSON-compatible dict using the camelCase wire names."""
        return self.model_dump(mode="json", by_alias=True)

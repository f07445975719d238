"""Normalization helpers.

Centralizes defensive parsing of provider payloads and user input.
"""

from __future__ import annotations

import math
from typing import Any


def safe_float(value: Any) -> float | None:
    """Parse *value* as a finite float, returning ``None`` on failure."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def format_coordinates(lat: float, lon: float) -> str:
    """Fixed-precision ``"lat, lon"`` label used when no address is known."""
    return f"{lat:.4f}, {lon:.4f}"

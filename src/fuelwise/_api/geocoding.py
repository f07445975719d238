"""Location search adapter for Nominatim.

Endpoints:
  - /search (forward, free-text query)
  - /reverse (coordinates to display label)

Forward search fails open (empty list) and reverse lookup falls back to a
fixed-precision coordinate label, so callers never see an exception.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from fuelwise._transport import Transport
from fuelwise.config import FuelwiseConfig
from fuelwise.exceptions import FuelwiseTransportError
from fuelwise.models.location import LocationPoint
from fuelwise.normalize import format_coordinates, safe_str

_logger = logging.getLogger(__name__)


def _headers(config: FuelwiseConfig) -> dict[str, str]:
    return {"user-agent": config.user_agent}


def parse_search_results(payload: Any) -> list[LocationPoint]:
    """Map Nominatim search candidates to :class:`LocationPoint` objects.

    Candidates with missing or out-of-range coordinates are skipped.
    """
    if not isinstance(payload, list):
        return []
    points: list[LocationPoint] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        try:
            point = LocationPoint(
                lat=item.get("lat"),
                lon=item.get("lon"),
                label=safe_str(item.get("display_name")) or "",
            )
        except ValidationError:
            _logger.debug("Skipping malformed geocoding candidate: %r", item)
            continue
        if not point.label:
            point = point.model_copy(update={"label": point.coordinate_label})
        points.append(point)
    return points


async def search_location(
    config: FuelwiseConfig,
    transport: Transport,
    query: str,
) -> list[LocationPoint]:
    """Forward-geocode *query*; returns ``[]`` on any failure."""
    text = query.strip() if isinstance(query, str) else ""
    if not text:
        return []

    url = f"{config.geocoding_base_url}/search"
    params = {
        "format": "json",
        "q": text,
        "addressdetails": 1,
        "limit": config.search_limit,
    }
    try:
        payload = await transport.request_json("GET", url, params=params, headers=_headers(config))
    except FuelwiseTransportError as exc:
        _logger.warning("Geocoding search for %r failed: %s", text, exc)
        return []

    return parse_search_results(payload)


async def reverse_geocode(
    config: FuelwiseConfig,
    transport: Transport,
    lat: float,
    lon: float,
) -> str:
    """Resolve coordinates to a display label.

    Falls back to ``"lat, lon"`` with four decimals when the provider
    fails or returns no name.
    """
    fallback = format_coordinates(lat, lon)
    url = f"{config.geocoding_base_url}/reverse"
    params = {"format": "json", "lat": lat, "lon": lon}
    try:
        payload = await transport.request_json("GET", url, params=params, headers=_headers(config))
    except FuelwiseTransportError as exc:
        _logger.warning("Reverse geocoding %s failed: %s", fallback, exc)
        return fallback

    if not isinstance(payload, dict):
        return fallback
    return safe_str(payload.get("display_name")) or fallback

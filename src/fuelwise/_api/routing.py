"""Route adapter for OSRM.

Endpoint:
  - /route/v1/driving/{lon,lat;lon,lat}?overview=full&geometries=geojson

Distances come back in meters and durations in seconds; both are
converted here so the rest of the package only sees km and minutes.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from fuelwise._constants import OSRM_OK_CODE
from fuelwise._transport import Transport
from fuelwise.config import FuelwiseConfig
from fuelwise.exceptions import FuelwiseApiError, FuelwiseTransportError
from fuelwise.models.location import LocationPoint
from fuelwise.models.route import RouteResult
from fuelwise.normalize import safe_float

_logger = logging.getLogger(__name__)


def build_route_url(config: FuelwiseConfig, origin: LocationPoint, destination: LocationPoint) -> str:
    coords = f"{origin.as_lon_lat()};{destination.as_lon_lat()}"
    return f"{config.routing_base_url}/route/v1/driving/{coords}"


def parse_route_response(payload: Any, *, url: str = "") -> RouteResult:
    """Turn an OSRM response into a :class:`RouteResult` (first candidate only).

    Raises :class:`FuelwiseApiError` when the status code is not ``"Ok"``
    or no usable route is present.
    """
    if not isinstance(payload, dict):
        raise FuelwiseApiError("Routing response is not an object", code="invalid_payload", url=url)

    code = str(payload.get("code", ""))
    if code != OSRM_OK_CODE:
        message = str(payload.get("message", ""))
        raise FuelwiseApiError(f"Routing failed: code={code} message={message}", code=code, url=url)

    routes = payload.get("routes")
    if not isinstance(routes, list) or not routes or not isinstance(routes[0], dict):
        raise FuelwiseApiError("Routing returned no routes", code="NoRoute", url=url)

    first = routes[0]
    distance_m = safe_float(first.get("distance"))
    duration_s = safe_float(first.get("duration"))
    if distance_m is None or duration_s is None:
        raise FuelwiseApiError("Route is missing distance or duration", code="invalid_payload", url=url)

    geometry = first.get("geometry")
    try:
        return RouteResult(
            distance_km=distance_m / 1000.0,
            duration_min=duration_s / 60.0,
            geometry=json.dumps(geometry, separators=(",", ":")) if geometry is not None else "",
        )
    except ValidationError as exc:
        raise FuelwiseApiError(f"Route has invalid values: {exc}", code="invalid_payload", url=url) from exc


async def compute_route(
    config: FuelwiseConfig,
    transport: Transport,
    origin: LocationPoint,
    destination: LocationPoint,
) -> RouteResult | None:
    """Compute a driving route; returns ``None`` when no route is available."""
    url = build_route_url(config, origin, destination)
    params = {"overview": "full", "geometries": "geojson"}
    try:
        payload = await transport.request_json("GET", url, params=params)
        return parse_route_response(payload, url=url)
    except (FuelwiseTransportError, FuelwiseApiError) as exc:
        _logger.warning("Routing %s -> %s failed: %s", origin.coordinate_label, destination.coordinate_label, exc)
        return None

"""Map presentation.

:class:`MapView` translates application state into three calls on a
:class:`MapSurface`: place markers, draw the route, fit the viewport.
The surface is the only rendering-backend-specific piece and can be
swapped; :class:`GeoJsonMapSurface` is a headless backend that keeps the
scene as a GeoJSON ``FeatureCollection``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any, Protocol

from fuelwise.models.location import LocationPoint
from fuelwise.state.store import AppState

_logger = logging.getLogger(__name__)

FIT_PADDING_PX = 50
MARKERS_MAX_ZOOM = 13


@dataclass(frozen=True, slots=True)
class Bounds:
    south: float
    west: float
    north: float
    east: float

    @classmethod
    def from_points(cls, points: Iterable[tuple[float, float]]) -> Bounds | None:
        """Bounds of ``(lat, lon)`` pairs, or ``None`` for no points."""
        lats: list[float] = []
        lons: list[float] = []
        for lat, lon in points:
            lats.append(lat)
            lons.append(lon)
        if not lats:
            return None
        return cls(south=min(lats), west=min(lons), north=max(lats), east=max(lons))


class MapSurface(Protocol):
    def set_markers(self, origin: LocationPoint | None, destination: LocationPoint | None) -> None:
        ...

    def set_route(self, geometry: dict[str, Any] | None) -> None:
        ...

    def fit_bounds(self, bounds: Bounds, *, padding: int, max_zoom: int | None = None) -> None:
        ...


def iter_geometry_coordinates(geometry: dict[str, Any]) -> Iterator[tuple[float, float]]:
    """Yield ``(lat, lon)`` for every position of a GeoJSON geometry."""

    def _walk(node: Any) -> Iterator[tuple[float, float]]:
        if isinstance(node, (list, tuple)):
            if len(node) >= 2 and all(isinstance(v, (int, float)) for v in node[:2]):
                yield float(node[1]), float(node[0])
                return
            for child in node:
                yield from _walk(child)

    if geometry.get("type") == "GeometryCollection":
        for child in geometry.get("geometries") or []:
            if isinstance(child, dict):
                yield from iter_geometry_coordinates(child)
        return
    yield from _walk(geometry.get("coordinates"))


class MapView:
    """Renders origin, destination and route onto a surface."""

    def __init__(self, surface: MapSurface) -> None:
        self._surface = surface
        self._last_key: tuple[Any, ...] | None = None

    @property
    def surface(self) -> MapSurface:
        return self._surface

    def render(self, state: AppState) -> None:
        origin, destination = state.origin, state.destination
        route = state.route
        key = (origin, destination, route)
        if key == self._last_key:
            return
        self._last_key = key

        self._surface.set_markers(origin, destination)

        geometry = route.geometry_json() if route is not None else None
        self._surface.set_route(geometry)

        if geometry is not None:
            bounds = Bounds.from_points(iter_geometry_coordinates(geometry))
            if bounds is not None:
                self._surface.fit_bounds(bounds, padding=FIT_PADDING_PX)
                return
            _logger.debug("Route geometry has no coordinates; fitting to markers")

        markers = [(p.lat, p.lon) for p in (origin, destination) if p is not None]
        bounds = Bounds.from_points(markers)
        if bounds is not None:
            self._surface.fit_bounds(bounds, padding=FIT_PADDING_PX, max_zoom=MARKERS_MAX_ZOOM)

    def on_state_change(self, previous: AppState, current: AppState) -> None:
        if (
            previous.origin != current.origin
            or previous.destination != current.destination
            or previous.route != current.route
        ):
            self.render(current)


class GeoJsonMapSurface:
    """Headless surface keeping the scene as GeoJSON."""

    def __init__(self) -> None:
        self._markers: list[dict[str, Any]] = []
        self._route: dict[str, Any] | None = None
        self.viewport: Bounds | None = None
        self.padding: int = 0
        self.max_zoom: int | None = None

    @staticmethod
    def _marker(point: LocationPoint, role: str) -> dict[str, Any]:
        return {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [point.lon, point.lat]},
            "properties": {"role": role, "label": point.label},
        }

    def set_markers(self, origin: LocationPoint | None, destination: LocationPoint | None) -> None:
        markers: list[dict[str, Any]] = []
        if origin is not None:
            markers.append(self._marker(origin, "origin"))
        if destination is not None:
            markers.append(self._marker(destination, "destination"))
        self._markers = markers

    def set_route(self, geometry: dict[str, Any] | None) -> None:
        if geometry is None:
            self._route = None
            return
        self._route = {"type": "Feature", "geometry": geometry, "properties": {"role": "route"}}

    def fit_bounds(self, bounds: Bounds, *, padding: int, max_zoom: int | None = None) -> None:
        self.viewport = bounds
        self.padding = padding
        self.max_zoom = max_zoom

    def to_geojson(self) -> dict[str, Any]:
        features = list(self._markers)
        if self._route is not None:
            # Route first so markers draw on top.
            features.insert(0, self._route)
        return {"type": "FeatureCollection", "features": features}

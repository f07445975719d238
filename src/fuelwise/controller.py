"""Application controller: wires user input, adapters and state together."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable, Coroutine
from typing import Any, Protocol

import aiohttp
from pydantic import ValidationError

from fuelwise._api import geocoding as _geocoding_api
from fuelwise._api import routing as _routing_api
from fuelwise._api.fuel_price import FuelPriceSource, SimulatedPriceSource
from fuelwise._api.vehicle_store import FirestoreVehicleStore, LocalVehicleStore, VehicleStore
from fuelwise._constants import ROUTE_NOT_FOUND_MESSAGE
from fuelwise._debounce import Debouncer
from fuelwise._transport import HttpTransport, Transport
from fuelwise.config import FuelwiseConfig
from fuelwise.exceptions import FuelwiseError, GeolocationError, VehicleStoreError
from fuelwise.map_view import MapView
from fuelwise.models.fuel_price import FuelPriceData
from fuelwise.models.location import LocationPoint
from fuelwise.models.trip import TripCalculation
from fuelwise.models.vehicle import Vehicle
from fuelwise.state.events import (
    FuelPriceChanged,
    LocatingChanged,
    PointSelected,
    PointsSwapped,
    PriceLoadingChanged,
    QueryChanged,
    RouteCompleted,
    RouteRequested,
    SearchChannel,
    SearchIssued,
    SuggestionsCleared,
    SuggestionsReceived,
    VehicleDeleted,
    VehicleSaved,
    VehicleSelected,
    VehiclesLoaded,
)
from fuelwise.state.store import AppState, Listener, StateStore
from fuelwise.storage import JsonFileStorage, KeyValueStorage, LocalState, MemoryStorage

_logger = logging.getLogger(__name__)


class DeviceLocator(Protocol):
    """Source of the device position.

    Implementations raise :class:`GeolocationError` when no position is
    available.
    """

    async def current_position(self) -> tuple[float, float]:
        ...


class FuelwiseController:
    """Owns the live application state and drives every adapter.

    Usage::

        async with FuelwiseController(config) as app:
            await app.load()
            app.set_query(SearchChannel.ORIGIN, "Madrid")

    All collaborators can be injected; anything left out is built from
    ``config`` on entry.
    """

    def __init__(
        self,
        config: FuelwiseConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        vehicle_store: VehicleStore | None = None,
        storage: KeyValueStorage | None = None,
        price_source: FuelPriceSource | None = None,
        locator: DeviceLocator | None = None,
        map_view: MapView | None = None,
        on_alert: Callable[[str], None] | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport = transport
        self._vehicle_store = vehicle_store
        if storage is None:
            storage = JsonFileStorage(config.storage_path) if config.storage_path else MemoryStorage()
        self._local = LocalState(storage)
        self._price_source: FuelPriceSource = price_source or SimulatedPriceSource(config)
        self._locator = locator
        self._map_view = map_view
        self._on_alert = on_alert

        self._store = StateStore(AppState(fuel_price=FuelPriceData(price=config.default_fuel_price)))
        self._store.subscribe(self._persist)
        if map_view is not None:
            self._store.subscribe(map_view.on_state_change)

        self._debouncer = Debouncer(config.debounce_delay)
        self._tasks: set[asyncio.Task[Any]] = set()
        self._route_task: asyncio.Task[Any] | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> FuelwiseController:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(
                self._http_session,
                timeout=self._config.request_timeout,
                user_agent=self._config.user_agent,
            )
        if self._vehicle_store is None:
            if self._config.vehicle_store.enabled:
                self._vehicle_store = FirestoreVehicleStore(self._config.vehicle_store, self._transport)
            else:
                self._vehicle_store = LocalVehicleStore(self._local)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self._debouncer.aclose()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._tasks.clear()
        self._route_task = None
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def config(self) -> FuelwiseConfig:
        return self._config

    @property
    def state(self) -> AppState:
        return self._store.state

    @property
    def calculation(self) -> TripCalculation | None:
        """Current estimate, or ``None`` while there is no route or vehicle."""
        return self._store.calculation

    @property
    def map_view(self) -> MapView | None:
        return self._map_view

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener(previous, current)`` for every state change."""
        return self._store.subscribe(listener)

    async def wait_idle(self) -> None:
        """Wait until no debounced search or background call is pending."""
        while True:
            pending = [t for t in (*self._tasks, *self._debouncer.active_tasks()) if not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise FuelwiseError("Controller not initialized. Use 'async with FuelwiseController(...) as app:'")
        return self._transport

    def _require_vehicle_store(self) -> VehicleStore:
        if self._vehicle_store is None:
            raise FuelwiseError("Controller not initialized. Use 'async with FuelwiseController(...) as app:'")
        return self._vehicle_store

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _alert(self, message: str) -> None:
        if self._on_alert is None:
            _logger.warning("%s", message)
            return
        try:
            self._on_alert(message)
        except Exception:
            _logger.debug("on_alert callback failed", exc_info=True)

    def _persist(self, previous: AppState, current: AppState) -> None:
        """Write-through of the three locally persisted entries."""
        try:
            if previous.vehicles != current.vehicles:
                self._local.save_vehicles(current.vehicles)
            if previous.selected_vehicle_id != current.selected_vehicle_id:
                self._local.save_selected_vehicle_id(current.selected_vehicle_id)
            if previous.fuel_price.price != current.fuel_price.price:
                self._local.save_price(current.fuel_price.price)
        except OSError:
            _logger.warning("Writing local state failed", exc_info=True)

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """Load vehicles and the fuel price.

        Vehicles come from the remote store; an empty or failed fetch falls
        back to the locally stored list. A stored price is adopted as a
        manual price; otherwise an automatic refresh starts in the
        background.
        """
        vehicles = await self._fetch_vehicles()
        self._store.apply(
            VehiclesLoaded(
                vehicles=tuple(vehicles),
                preferred_id=self._local.load_selected_vehicle_id(),
            )
        )

        stored_price = self._local.load_price()
        if stored_price is not None:
            self._store.apply(FuelPriceChanged(fuel_price=self.state.fuel_price.with_manual_price(stored_price)))
        else:
            self._spawn(self.refresh_fuel_price())

    async def _fetch_vehicles(self) -> list[Vehicle]:
        store = self._require_vehicle_store()
        try:
            remote = await store.list_vehicles()
        except VehicleStoreError as exc:
            _logger.warning("Loading vehicles from the remote store failed, using local copy: %s", exc)
            return self._local.load_vehicles()
        if remote:
            return remote
        _logger.debug("Remote store has no vehicles; using local copy")
        return self._local.load_vehicles()

    # ------------------------------------------------------------------
    # Vehicles
    # ------------------------------------------------------------------

    async def save_vehicle(self, vehicle: Vehicle) -> bool:
        """Create or update *vehicle*.

        The in-memory list only changes after the store accepted the
        write. Returns ``False`` (after alerting) when it did not.
        """
        try:
            await self._require_vehicle_store().upsert_vehicle(vehicle)
        except VehicleStoreError:
            _logger.error("Saving vehicle %s failed", vehicle.id, exc_info=True)
            self._alert(f"Could not save vehicle '{vehicle.name}' to the cloud.")
            return False
        self._store.apply(VehicleSaved(vehicle=vehicle))
        return True

    async def delete_vehicle(self, vehicle_id: str) -> bool:
        """Delete a vehicle; clears the selection if it was selected."""
        try:
            await self._require_vehicle_store().delete_vehicle(vehicle_id)
        except VehicleStoreError:
            _logger.error("Deleting vehicle %s failed", vehicle_id, exc_info=True)
            self._alert("Could not delete the vehicle from the cloud.")
            return False
        self._store.apply(VehicleDeleted(vehicle_id=vehicle_id))
        return True

    def select_vehicle(self, vehicle_id: str | None) -> None:
        self._store.apply(VehicleSelected(vehicle_id=vehicle_id))

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def set_query(self, channel: SearchChannel, text: str) -> None:
        """Record typed text and (re)start the debounce window for *channel*."""
        self._store.apply(QueryChanged(channel=channel, text=text))
        self._debouncer.schedule(channel, lambda: self._search(channel, text))

    async def _search(self, channel: SearchChannel, text: str) -> None:
        search = self.state.search(channel)
        if search.point is not None and search.point.label == text:
            self._store.apply(SuggestionsCleared(channel=channel))
            return
        if len(text.strip()) < self._config.min_query_length:
            self._store.apply(SuggestionsCleared(channel=channel))
            return

        seq = search.seq + 1
        self._store.apply(SearchIssued(channel=channel, seq=seq))
        suggestions = await _geocoding_api.search_location(self._config, self._require_transport(), text)
        self._store.apply(SuggestionsReceived(channel=channel, seq=seq, suggestions=tuple(suggestions)))

    def select_suggestion(self, channel: SearchChannel, point: LocationPoint) -> None:
        """Adopt *point* for *channel*; its label becomes the query text."""
        self._debouncer.cancel(channel)
        self._store.apply(PointSelected(channel=channel, point=point))
        self._request_route()

    def clear_point(self, channel: SearchChannel) -> None:
        self._debouncer.cancel(channel)
        if self._route_task is not None and not self._route_task.done():
            self._route_task.cancel()
        self._store.apply(PointSelected(channel=channel, point=None))

    def swap_points(self) -> None:
        """Exchange origin and destination, including their query text."""
        self._debouncer.cancel(SearchChannel.ORIGIN)
        self._debouncer.cancel(SearchChannel.DESTINATION)
        self._store.apply(PointsSwapped())
        self._request_route()

    async def use_device_location(self, locator: DeviceLocator | None = None) -> LocationPoint | None:
        """Set the origin from the device position.

        Failures only clear the locating flag; the origin is left as is.
        """
        locator = locator or self._locator
        if locator is None:
            self._alert("Geolocation is not supported on this device.")
            return None

        self._store.apply(LocatingChanged(active=True))
        try:
            lat, lon = await locator.current_position()
            label = await _geocoding_api.reverse_geocode(self._config, self._require_transport(), lat, lon)
            point = LocationPoint(lat=lat, lon=lon, label=label)
        except (GeolocationError, TimeoutError, ValidationError):
            _logger.debug("Device location unavailable", exc_info=True)
            return None
        finally:
            self._store.apply(LocatingChanged(active=False))

        self._debouncer.cancel(SearchChannel.ORIGIN)
        self._store.apply(PointSelected(channel=SearchChannel.ORIGIN, point=point))
        self._request_route()
        return point

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    def _request_route(self) -> None:
        state = self.state
        origin, destination = state.origin, state.destination
        if origin is None or destination is None:
            return

        if self._route_task is not None and not self._route_task.done():
            self._route_task.cancel()

        seq = state.route_seq + 1
        self._store.apply(RouteRequested(seq=seq))
        self._route_task = self._spawn(self._compute_route(seq, origin, destination))

    async def _compute_route(self, seq: int, origin: LocationPoint, destination: LocationPoint) -> None:
        try:
            route = await _routing_api.compute_route(self._config, self._require_transport(), origin, destination)
        except Exception:
            # The request must always settle, or is_routing would stay set.
            _logger.exception("Route computation failed")
            route = None
        error = None if route is not None else ROUTE_NOT_FOUND_MESSAGE
        self._store.apply(RouteCompleted(seq=seq, route=route, error=error))

    async def recompute_route(self) -> None:
        """Re-run routing for the current points and wait for the result."""
        self._request_route()
        task = self._route_task
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    # ------------------------------------------------------------------
    # Fuel price
    # ------------------------------------------------------------------

    async def refresh_fuel_price(self) -> None:
        """Fetch a new automatic price; the current price stays on failure."""
        self._store.apply(PriceLoadingChanged(loading=True))
        try:
            price = await self._price_source()
            self._store.apply(FuelPriceChanged(fuel_price=FuelPriceData.refreshed(price)))
        except (FuelwiseError, ValueError):
            _logger.warning("Fuel price refresh failed", exc_info=True)
        finally:
            self._store.apply(PriceLoadingChanged(loading=False))

    def set_manual_price(self, price: float) -> FuelPriceData:
        """Override the price by hand.

        Raises :class:`pydantic.ValidationError` for negative or
        non-finite prices, leaving the state unchanged.
        """
        fuel_price = self.state.fuel_price.with_manual_price(price)
        self._store.apply(FuelPriceChanged(fuel_price=fuel_price))
        return fuel_price

"""Client configuration for fuelwise."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from fuelwise._constants import (
    DEBOUNCE_DELAY_S,
    DEFAULT_FUEL_PRICE,
    FIRESTORE_BASE_URL,
    MIN_QUERY_LENGTH,
    NOMINATIM_BASE_URL,
    OSRM_BASE_URL,
    REQUEST_TIMEOUT_S,
    SEARCH_RESULT_LIMIT,
    SIMULATED_PRICE_DELAY_S,
    SIMULATED_PRICE_MAX,
    SIMULATED_PRICE_MIN,
    USER_AGENT,
    VEHICLES_COLLECTION,
)
from fuelwise.exceptions import FuelwiseConfigError


@dataclasses.dataclass(frozen=True)
class VehicleStoreSettings:
    """Remote document store settings.

    The remote store is considered configured only when ``project_id`` is
    set; otherwise vehicles are kept in local storage.
    """

    base_url: str = FIRESTORE_BASE_URL
    project_id: str | None = None
    api_key: str | None = None
    database: str = "(default)"
    collection: str = VEHICLES_COLLECTION

    @property
    def enabled(self) -> bool:
        return bool(self.project_id)

    @property
    def collection_url(self) -> str:
        return f"{self.base_url}/projects/{self.project_id}/databases/{self.database}/documents/{self.collection}"


@dataclasses.dataclass(frozen=True)
class FuelwiseConfig:
    """Application configuration.

    Parameters
    ----------
    geocoding_base_url : str
        Nominatim-compatible geocoding endpoint.
    routing_base_url : str
        OSRM-compatible routing endpoint.
    user_agent : str
        Identification header sent to the public providers.
    search_limit : int
        Maximum number of suggestions requested per search.
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    debounce_delay : float
        Seconds of input quiescence before a search is issued.
    min_query_length : int
        Shortest query (after stripping) that triggers a search.
    default_fuel_price : float
        Price per liter shown before the first refresh completes.
    price_min : float
        Lower bound of the simulated fuel price.
    price_max : float
        Upper bound of the simulated fuel price.
    price_delay : float
        Artificial latency in seconds of the simulated price feed.
    storage_path : Path or None
        JSON file used for local durable storage. ``None`` keeps local
        state in memory only.
    vehicle_store : VehicleStoreSettings
        Remote document store settings.
    """

    geocoding_base_url: str = NOMINATIM_BASE_URL
    routing_base_url: str = OSRM_BASE_URL
    user_agent: str = USER_AGENT
    search_limit: int = SEARCH_RESULT_LIMIT
    request_timeout: float = REQUEST_TIMEOUT_S
    debounce_delay: float = DEBOUNCE_DELAY_S
    min_query_length: int = MIN_QUERY_LENGTH
    default_fuel_price: float = DEFAULT_FUEL_PRICE
    price_min: float = SIMULATED_PRICE_MIN
    price_max: float = SIMULATED_PRICE_MAX
    price_delay: float = SIMULATED_PRICE_DELAY_S
    storage_path: Path | None = None
    vehicle_store: VehicleStoreSettings = dataclasses.field(default_factory=VehicleStoreSettings)

    def __post_init__(self) -> None:
        if self.price_min < 0 or self.price_max < self.price_min:
            raise FuelwiseConfigError(
                f"invalid simulated price range: {self.price_min}..{self.price_max}",
            )
        if self.min_query_length < 1:
            raise FuelwiseConfigError("min_query_length must be at least 1")
        if self.request_timeout <= 0:
            raise FuelwiseConfigError("request_timeout must be positive")

    @classmethod
    def from_env(cls, **overrides: Any) -> FuelwiseConfig:
        """Create configuration from ``FUELWISE_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ

        store_kwargs: dict[str, str] = {}
        _ENV_STORE_MAP = {
            "FUELWISE_STORE_BASE_URL": "base_url",
            "FUELWISE_STORE_PROJECT_ID": "project_id",
            "FUELWISE_STORE_API_KEY": "api_key",
            "FUELWISE_STORE_DATABASE": "database",
            "FUELWISE_STORE_COLLECTION": "collection",
        }
        for env_key, field_name in _ENV_STORE_MAP.items():
            val = env.get(env_key)
            if val is not None:
                store_kwargs[field_name] = val

        store_overrides = overrides.pop("vehicle_store", None)
        if isinstance(store_overrides, dict):
            store_kwargs.update(store_overrides)
        elif isinstance(store_overrides, VehicleStoreSettings):
            store_kwargs = dataclasses.asdict(store_overrides)

        config_kwargs: dict[str, Any] = {"vehicle_store": VehicleStoreSettings(**store_kwargs)}

        _ENV_STR_MAP = {
            "FUELWISE_GEOCODING_URL": "geocoding_base_url",
            "FUELWISE_ROUTING_URL": "routing_base_url",
            "FUELWISE_USER_AGENT": "user_agent",
        }
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_NUMERIC_MAP: dict[str, tuple[str, type]] = {
            "FUELWISE_SEARCH_LIMIT": ("search_limit", int),
            "FUELWISE_MIN_QUERY_LENGTH": ("min_query_length", int),
            "FUELWISE_REQUEST_TIMEOUT": ("request_timeout", float),
            "FUELWISE_DEBOUNCE_DELAY": ("debounce_delay", float),
            "FUELWISE_DEFAULT_PRICE": ("default_fuel_price", float),
            "FUELWISE_PRICE_MIN": ("price_min", float),
            "FUELWISE_PRICE_MAX": ("price_max", float),
            "FUELWISE_PRICE_DELAY": ("price_delay", float),
        }
        for env_key, (field_name, caster) in _ENV_NUMERIC_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = caster(val)
            except ValueError as exc:
                raise FuelwiseConfigError(f"{env_key} is not a valid {caster.__name__}: {val!r}") from exc

        storage_env = env.get("FUELWISE_STORAGE_PATH")
        if storage_env and "storage_path" not in overrides:
            config_kwargs["storage_path"] = Path(storage_env).expanduser()

        config_kwargs.update(overrides)

        return cls(**config_kwargs)

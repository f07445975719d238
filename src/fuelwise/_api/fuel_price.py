"""Fuel price source.

There is no free real-time pricing feed, so :func:`fetch_simulated_price`
stands in for one: after a fixed delay it returns a value drawn uniformly
from a plausible range. A real source only has to honor the same
contract, see :class:`FuelPriceSource`.
"""

from __future__ import annotations

import asyncio
import random
from typing import Protocol

from fuelwise.config import FuelwiseConfig


class FuelPriceSource(Protocol):
    """Single async call returning a non-negative price per liter. Must not raise."""

    async def __call__(self) -> float:
        ...


async def fetch_simulated_price(
    config: FuelwiseConfig,
    *,
    rng: random.Random | None = None,
) -> float:
    """Return a price in ``[price_min, price_max]`` rounded to 3 decimals."""
    if config.price_delay > 0:
        await asyncio.sleep(config.price_delay)
    generator = rng or random
    price = config.price_min + generator.random() * (config.price_max - config.price_min)
    return round(price, 3)


class SimulatedPriceSource:
    """:class:`FuelPriceSource` backed by :func:`fetch_simulated_price`."""

    def __init__(self, config: FuelwiseConfig, *, rng: random.Random | None = None) -> None:
        self._config = config
        self._rng = rng

    async def __call__(self) -> float:
        return await fetch_simulated_price(self._config, rng=self._rng)

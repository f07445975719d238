#!/usr/bin/env python3
"""Live probe of the public geocoding and routing services.

Resolves two place names, routes between the best matches and prints the
fuel estimate for a given consumption and price. Useful to check that the
providers still answer in the shape fuelwise expects.

Environment overrides follow ``FuelwiseConfig.from_env`` (``FUELWISE_*``).

Example::

    python scripts/probe_services.py Madrid Barcelona --consumption 6 --price 1.6
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import aiohttp

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from fuelwise import FuelUnit, FuelwiseConfig, Vehicle, calculate_trip  # noqa: E402
from fuelwise._api.geocoding import search_location  # noqa: E402
from fuelwise._api.routing import compute_route  # noqa: E402
from fuelwise._transport import HttpTransport  # noqa: E402


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Probe live geocoding and routing providers")
    parser.add_argument("origin", help="Origin place name")
    parser.add_argument("destination", help="Destination place name")
    parser.add_argument("--consumption", type=float, default=6.0, help="Vehicle consumption value.")
    parser.add_argument(
        "--unit",
        choices=[unit.value for unit in FuelUnit],
        default=FuelUnit.L_PER_100KM.value,
        help="Unit of --consumption.",
    )
    parser.add_argument("--price", type=float, default=None, help="Fuel price per liter (default: config default).")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args()


async def _run(args: argparse.Namespace) -> int:
    config = FuelwiseConfig.from_env()
    async with aiohttp.ClientSession() as session:
        transport = HttpTransport(session, timeout=config.request_timeout, user_agent=config.user_agent)

        origins = await search_location(config, transport, args.origin)
        destinations = await search_location(config, transport, args.destination)
        if not origins:
            print(f"No match for origin {args.origin!r}")
            return 2
        if not destinations:
            print(f"No match for destination {args.destination!r}")
            return 2

        origin, destination = origins[0], destinations[0]
        print(f"Origin:      {origin.label} ({origin.coordinate_label})")
        print(f"Destination: {destination.label} ({destination.coordinate_label})")

        route = await compute_route(config, transport, origin, destination)
        if route is None:
            print("Route not found")
            return 1

    vehicle = Vehicle(id="probe", name="probe", consumption_value=args.consumption, consumption_unit=args.unit)
    price = config.default_fuel_price if args.price is None else args.price
    calculation = calculate_trip(vehicle, route, price)
    if calculation is None:
        print("No estimate")
        return 1

    if args.json:
        payload = {
            "route": {"distanceKm": route.distance_km, "durationMin": route.duration_min},
            "calculation": calculation.to_document(),
        }
        print(json.dumps(payload, indent=2, sort_keys=True))
        return 0

    print(f"Distance:    {route.distance_km:.1f} km")
    print(f"Duration:    {route.duration_min:.0f} min")
    print(f"Fuel:        {calculation.liters_needed:.2f} L at {price:.3f}/L")
    print(f"Cost:        {calculation.total_cost:.2f} ({calculation.cost_per_100km:.2f} per 100 km)")
    return 0


def main() -> int:
    args = _parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())

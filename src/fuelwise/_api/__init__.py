"""Remote service adapters (geocoding, routing, fuel price, vehicle store).

Internal to fuelwise and may change at any time.
"""

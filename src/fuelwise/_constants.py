"""Internal constants shared across the library."""

NOMINATIM_BASE_URL = "https://nominatim.openstreetmap.org"
OSRM_BASE_URL = "https://router.project-osrm.org"
FIRESTORE_BASE_URL = "https://firestore.googleapis.com/v1"

# Nominatim usage policy requires an identifying User-Agent.
USER_AGENT = "FuelWise-App/1.0"

#: OSRM response ``code`` for a successful route lookup.
OSRM_OK_CODE = "Ok"

VEHICLES_COLLECTION = "vehicles"

# ------------------------------------------------------------------
# Local storage keys
# ------------------------------------------------------------------

STORAGE_KEY_VEHICLES = "fuelwise_vehicles"
STORAGE_KEY_SELECTED_VEHICLE_ID = "fuelwise_selected_vehicle_id"
STORAGE_KEY_LAST_PRICE = "fuelwise_last_price"

# ------------------------------------------------------------------
# Search / fuel price defaults
# ------------------------------------------------------------------

DEBOUNCE_DELAY_S = 0.4
MIN_QUERY_LENGTH = 3
SEARCH_RESULT_LIMIT = 5
REQUEST_TIMEOUT_S = 10.0

DEFAULT_FUEL_PRICE = 1.60
SIMULATED_PRICE_MIN = 1.55
SIMULATED_PRICE_MAX = 1.70
SIMULATED_PRICE_DELAY_S = 1.0

ROUTE_NOT_FOUND_MESSAGE = "Route not found. Try points closer to a road."

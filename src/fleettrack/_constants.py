"""Internal constants shared across the library."""

USER_AGENT = "fleettrack/0.1"

# ------------------------------------------------------------------
# Signal freshness (seconds since last device message)
# ------------------------------------------------------------------

ONLINE_MAX_AGE_S = 120
STALE_MAX_AGE_S = 900

# Speeds strictly above this count as driving even without an is_moving flag.
MOVING_SPEED_KPH = 2.0

# ------------------------------------------------------------------
# Temperature plausibility (°C, inclusive)
# ------------------------------------------------------------------

TEMP_MIN_C = -60.0
TEMP_MAX_C = 130.0

SENSOR_OK_CODES: frozenset[str] = frozenset({"0", "ok", "none", "no_error"})

# ------------------------------------------------------------------
# Display labels
# ------------------------------------------------------------------

NO_SIGNAL_LABEL = "No signal"
EMPTY_LABEL = "-"
SENSOR_ERROR_LABEL = "--"
ONLINE_LABEL = "Online"

# ------------------------------------------------------------------
# Source tables
# ------------------------------------------------------------------

TRACTORS_TABLE = "vehicles"
TRAILERS_TABLE = "trailers"
FLEET_SETS_TABLE = "fleet_sets"
LIVE_STATE_TABLE = "ct_unit_live_state"
CAPABILITIES_TABLE = "connection_device"
DISPATCH_ORDERS_TABLE = "dispatch_orders"
CARRIERS_TABLE = "carriers"
DRIVERS_TABLE = "drivers"

EXECUTION_STAGE = "EXECUTION"

"""
Application-wide constants for wind measurement resolution.

Thresholds here are fixed properties of the station networks and are not
meant to be tuned through configuration.
"""

MINUTE_MS = 60_000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS

# Station kinds
AIR = "air"
GROUND = "ground"
STATION_KINDS = (AIR, GROUND)

# Source routing thresholds
AIR_FRESHNESS_MS = 4 * HOUR_MS  # younger than this -> live scrape
GROUND_STALENESS_MS = 12 * HOUR_MS  # older than this -> 6 day history view
GROUND_HORIZON_MS = 6 * DAY_MS  # older than this -> no source can serve it

# Timestamp rounding (minutes)
AIR_ROUNDING_MINUTES = 10
GROUND_ROUNDING_MINUTES = 60
GROUND_COARSE_ROUNDING_MINUTES = 180  # some ground stations report every 3h

# Resolution
MAX_RESOLUTION_CYCLES = 3
NEAREST_STATION_COUNT = 3
TRIANGLE_SIZE = 3

# Wind direction wraparound
DIRECTION_WRAP_THRESHOLD = 320.0
FULL_CIRCLE = 360.0

# Cache
CACHE_RETENTION_DAYS = 14
CACHE_RETENTION_MS = CACHE_RETENTION_DAYS * DAY_MS
CACHE_BUSY_TIMEOUT = 10.0  # seconds

# Ingestion
DEFAULT_REQUEST_DELAY = 5.0  # seconds between live requests
DEFAULT_INGESTION_INTERVAL_HOURS = 4

# Live source history views
SHORT_HISTORY_VIEW = "12h"
EXTENDED_HISTORY_VIEW = "6d"

# Result methods
METHOD_INTERPOLATION = "interpolation"
METHOD_NEAREST = "nearest"

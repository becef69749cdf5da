"""Constants for Ocean Fishing Score."""

PROFILES_FILENAME = "species_profiles.json"

# Score scale
DEFAULT_MAX_SCORE = 10.0
DEFAULT_UNSAFE_CEILING = 3.0

# Unit factors
KMH_TO_KNOTS = 0.539957
M_S_TO_KNOTS = 1.943844
KNOTS_TO_M_S = 0.514444

# Neutral defaults used when a context field is missing
DEFAULT_CLOUD_COVER_PCT = 50.0
DEFAULT_SWELL_HEIGHT_M = 0.5
DEFAULT_SWELL_PERIOD_S = 8.0
DEFAULT_TIDAL_RANGE_M = 3.0
DEFAULT_MINUTES_TO_SLACK = 180.0
DEFAULT_WIND_DIRECTION_DEG = 0.0
DEFAULT_CURRENT_DIRECTION_DEG = 180.0
DEFAULT_SUN_ELEVATION_DEG = 30.0
DEFAULT_AIR_TEMP_C = 15.0
DEFAULT_PRESSURE_SAMPLE_MINUTES = 15

# Stage names used in species stage_order
STAGE_MODIFIERS = "modifiers"
STAGE_SAFETY = "safety"
DEFAULT_STAGE_ORDER = (STAGE_MODIFIERS, STAGE_SAFETY)

# Default (canonical) safety limits. Species profiles override these per species
# and callers may override them again per engine.
DEFAULT_SAFETY_LIMITS = {
    "max_wind_kts": 25.0,
    "max_gust_kts": 35.0,
    "max_wave_height_m": 2.0,
    "max_current_kts": 4.5,
    "max_precip_mm": None,
    "min_water_temp_c": None,
}

"""voluptuous schemas for species profiles and raw context payloads."""
from __future__ import annotations

from typing import Any, Optional

import voluptuous as vol

from . import unit_helpers
from .const import DEFAULT_MAX_SCORE, DEFAULT_STAGE_ORDER, DEFAULT_UNSAFE_CEILING, STAGE_MODIFIERS, STAGE_SAFETY


def _lenient_float(v: Any) -> Optional[float]:
    """Numbers that fail to parse become missing rather than invalid."""
    return unit_helpers._to_float(v)


def _timestamp(v: Any):
    dt = unit_helpers.coerce_datetime(v)
    if dt is None:
        raise vol.Invalid(f"cannot interpret {v!r} as a timestamp")
    return dt


def _optional_timestamp(v: Any):
    return unit_helpers.coerce_datetime(v)


def _stage_order(value: Any):
    order = list(value)
    if sorted(order) != sorted(DEFAULT_STAGE_ORDER):
        raise vol.Invalid(f"stage_order must name {STAGE_MODIFIERS!r} and {STAGE_SAFETY!r} exactly once")
    return tuple(order)


Month = vol.All(vol.Coerce(int), vol.Range(min=1, max=12))
Weight = vol.All(vol.Coerce(float), vol.Range(min=0.0, max=1.0))

# ---- Raw context payload ----

WIND_SCHEMA = vol.Schema(
    {
        vol.Optional("speed"): _lenient_float,
        vol.Optional("direction"): _lenient_float,
        vol.Optional("gust"): _lenient_float,
    },
    extra=vol.REMOVE_EXTRA,
)

PRESSURE_SCHEMA = vol.Schema(
    {
        vol.Optional("current"): _lenient_float,
        vol.Optional("history", default=list): [_lenient_float],
        vol.Optional("sample_minutes"): vol.All(vol.Coerce(int), vol.Range(min=1)),
    },
    extra=vol.REMOVE_EXTRA,
)

SWELL_SCHEMA = vol.Schema(
    {
        vol.Optional("height"): _lenient_float,
        vol.Optional("period"): _lenient_float,
    },
    extra=vol.REMOVE_EXTRA,
)

TIDE_SCHEMA = vol.Schema(
    {
        vol.Optional("current_speed"): _lenient_float,
        vol.Optional("current_direction"): _lenient_float,
        vol.Optional("tidal_range"): _lenient_float,
        vol.Optional("is_rising"): vol.Any(None, vol.Boolean()),
        vol.Optional("minutes_to_slack"): _lenient_float,
        vol.Optional("water_temperature"): _lenient_float,
    },
    extra=vol.REMOVE_EXTRA,
)

OVERRIDES_SCHEMA = vol.Schema(
    {
        vol.Optional("sun_elevation_deg"): _lenient_float,
        vol.Optional("minutes_to_slack"): _lenient_float,
        vol.Optional("tidal_range_m"): _lenient_float,
        vol.Optional("precipitation_24h_mm"): _lenient_float,
        vol.Optional("max_air_temp_24h_c"): _lenient_float,
        vol.Optional("river_temp_c"): _lenient_float,
        vol.Optional("target_depth_ft"): _lenient_float,
        vol.Optional("soak_hours"): _lenient_float,
        vol.Optional("region"): vol.Any(None, vol.All(str, vol.Lower)),
        vol.Optional("in_conservation_area"): vol.Boolean(),
        vol.Optional("fishery_open"): vol.Any(None, vol.Boolean()),
    },
    extra=vol.REMOVE_EXTRA,
)

CONTEXT_SCHEMA = vol.Schema(
    {
        vol.Required("timestamp"): _timestamp,
        vol.Optional("sunrise"): _optional_timestamp,
        vol.Optional("sunset"): _optional_timestamp,
        vol.Optional("latitude"): _lenient_float,
        vol.Optional("longitude"): _lenient_float,
        vol.Optional("wind"): vol.Any(None, WIND_SCHEMA),
        vol.Optional("pressure"): vol.Any(None, PRESSURE_SCHEMA),
        vol.Optional("precipitation"): _lenient_float,
        vol.Optional("cloud_cover"): _lenient_float,
        vol.Optional("air_temperature"): _lenient_float,
        vol.Optional("swell"): vol.Any(None, SWELL_SCHEMA),
        vol.Optional("tide"): vol.Any(None, TIDE_SCHEMA),
        vol.Optional("bio_intel_text"): vol.Any(None, str),
        vol.Optional("overrides"): vol.Any(None, OVERRIDES_SCHEMA),
    },
    extra=vol.REMOVE_EXTRA,
)

# ---- Species profiles ----

MODE_SCHEMA = vol.Schema(
    {
        vol.Required("name"): str,
        vol.Required("months"): vol.All([Month], vol.Length(min=1)),
        vol.Optional("date_range", default=""): str,
        vol.Optional("behavior", default=""): str,
        vol.Required("weights"): vol.All({str: Weight}, vol.Length(min=1)),
        vol.Optional("attributes", default=dict): dict,
    }
)

FACTOR_SCHEMA = vol.Schema(
    {
        vol.Optional("calculator"): str,
        vol.Optional("params", default=dict): dict,
    }
)

STAGE_SCHEMA = vol.Schema(
    {
        vol.Required("type"): str,
        vol.Optional("params", default=dict): dict,
        vol.Optional("advisory", default=False): bool,
    }
)

GATEKEEPER_SCHEMA = vol.Schema(
    {
        vol.Required("type"): str,
        vol.Optional("params", default=dict): dict,
        vol.Optional("floor", default=0.0): vol.All(vol.Coerce(float), vol.Range(min=0.0)),
        vol.Optional("is_safe", default=True): bool,
        vol.Optional("in_season", default=None): vol.Any(None, bool),
    }
)

CURVE_SCHEMA = vol.Schema(
    {vol.Required("type"): vol.In(["month_table", "day_segments", "gaussian"])},
    extra=vol.ALLOW_EXTRA,
)

ADVISORIES_SCHEMA = vol.Schema(
    {
        vol.Optional("always", default=list): [str],
        vol.Optional("by_month", default=dict): {Month: [str]},
    }
)

SPECIES_SCHEMA = vol.Schema(
    {
        vol.Required("name"): str,
        vol.Optional("archetype", default=""): str,
        vol.Optional("habitat", default="saltwater"): str,
        vol.Optional("max_score", default=DEFAULT_MAX_SCORE): vol.All(vol.Coerce(float), vol.Range(min=1.0)),
        vol.Optional("unsafe_ceiling", default=DEFAULT_UNSAFE_CEILING): vol.All(vol.Coerce(float), vol.Range(min=0.0)),
        vol.Optional("precision", default=2): vol.All(int, vol.Range(min=0, max=6)),
        vol.Required("factors"): vol.All({str: FACTOR_SCHEMA}, vol.Length(min=1)),
        vol.Required("seasonal_modes"): vol.All([MODE_SCHEMA], vol.Length(min=1)),
        vol.Optional("season_curve", default=None): vol.Any(None, CURVE_SCHEMA),
        vol.Optional("in_season_threshold", default=0.0): vol.Coerce(float),
        vol.Optional("modifiers", default=list): [STAGE_SCHEMA],
        vol.Optional("safety", default=list): [STAGE_SCHEMA],
        vol.Optional("gatekeepers", default=list): [GATEKEEPER_SCHEMA],
        vol.Optional("stage_order", default=list(DEFAULT_STAGE_ORDER)): _stage_order,
        vol.Optional("safety_limits", default=dict): dict,
        vol.Optional("advisories", default=dict): ADVISORIES_SCHEMA,
    }
)

PROFILES_SCHEMA = vol.Schema(
    {
        vol.Required("version"): str,
        vol.Required("species"): vol.All({str: SPECIES_SCHEMA}, vol.Length(min=1)),
    }
)

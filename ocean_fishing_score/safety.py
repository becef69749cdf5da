"""Safety predicates.

Each check returns a warning string when conditions fail, else None. The
pipeline marks the result unsafe and caps the total for every failing check
unless the check is configured as advisory, in which case only the warning is
kept. Limits come from the merged safety limits on the state.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional

from . import physics
from .evaluation import EvaluationState
from .species_factors import drift_result, heave_result, jigging_result, retrieval_result, sea_state_result

SafetyCheck = Callable[[EvaluationState, Mapping[str, Any]], Optional[str]]

SAFETY_CHECKS: Dict[str, SafetyCheck] = {}


def safety_check(name: str) -> Callable[[SafetyCheck], SafetyCheck]:
    def register(fn: SafetyCheck) -> SafetyCheck:
        SAFETY_CHECKS[name] = fn
        return fn

    return register


@safety_check("sea_state")
def sea_state(state: EvaluationState, params: Mapping[str, Any]) -> Optional[str]:
    result = sea_state_result(state, params.get("wave_estimate_cap_m", 5.0))
    if result.is_safe:
        return None
    return result.warning


@safety_check("wind")
def wind(state: EvaluationState, params: Mapping[str, Any]) -> Optional[str]:
    limit = state.limit("max_wind_kts")
    speed = state.wind_kts()
    if limit is None or speed <= limit:
        return None
    return f"Wind {round(speed)} kts exceeds the {limit:g} kts limit"


@safety_check("current")
def current(state: EvaluationState, params: Mapping[str, Any]) -> Optional[str]:
    limit = state.limit("max_current_kts")
    speed = state.current_kts()
    if limit is None or speed <= limit:
        return None
    return f"Dangerous current: {speed:.1f} kts"


@safety_check("precipitation")
def precipitation(state: EvaluationState, params: Mapping[str, Any]) -> Optional[str]:
    limit = state.limit("max_precip_mm")
    rain = state.precipitation()
    if limit is None or rain <= limit:
        return None
    return f"Heavy rain: {rain:.0f} mm"


@safety_check("wind_over_current")
def wind_over_current(state: EvaluationState, params: Mapping[str, Any]) -> Optional[str]:
    """Fails on a dangerous wind-against-current interaction."""
    tide = state.context.tide
    if params.get("require_directions", False) and (
        tide is None or tide.current_direction_deg is None or state.context.wind.direction_deg is None
    ):
        return None
    result = state.wind_tide(bool(params.get("estimate_current_direction", False)))
    if result.severity != "dangerous":
        return None
    return result.warning


@safety_check("swell_dangerous")
def swell_dangerous(state: EvaluationState, params: Mapping[str, Any]) -> Optional[str]:
    result = state.swell_comfort()
    if result.label != "dangerous":
        return None
    return result.warning or "Dangerous swell"


@safety_check("jigging_unfishable")
def jigging_unfishable(state: EvaluationState, params: Mapping[str, Any]) -> Optional[str]:
    result = jigging_result(state, params.get("wave_estimate_cap_m", 2.0))
    if result.label != "unfishable":
        return None
    return result.warning or "Swell makes jigging unsafe"


@safety_check("heave_unfishable")
def heave_unfishable(state: EvaluationState, params: Mapping[str, Any]) -> Optional[str]:
    result = heave_result(state, params.get("wave_estimate_cap_m", 2.0), params.get("fallback_height_m", 0.3))
    if result.label != "unfishable":
        return None
    return result.warning or "Heavy heave"


@safety_check("cannot_hold_position")
def cannot_hold_position(state: EvaluationState, params: Mapping[str, Any]) -> Optional[str]:
    result: physics.DriftResult = drift_result(state)
    if result.can_hold_position:
        return None
    return result.warning


@safety_check("cold_water")
def cold_water(state: EvaluationState, params: Mapping[str, Any]) -> Optional[str]:
    limit = state.limit("min_water_temp_c")
    temp = state.water_temp()
    if limit is None or temp is None or temp >= limit:
        return None
    return f"Cold water warning: {temp:.1f} C - hypothermia risk"


@safety_check("night_visibility")
def night_visibility(state: EvaluationState, params: Mapping[str, Any]) -> Optional[str]:
    """Outside civil twilight there is no light to read the water or spot hazards."""
    offsets = state.sun_offsets()
    if offsets is None:
        return None
    twilight = float(params.get("twilight_minutes", 30.0))
    after_sunrise, before_sunset = offsets
    if after_sunrise >= -twilight and before_sunset >= -twilight:
        return None
    return "Dark: limited visibility for navigation and spotting hazards"


@safety_check("retrieval")
def retrieval(state: EvaluationState, params: Mapping[str, Any]) -> Optional[str]:
    """Fails when hauling loaded traps would be dangerous."""
    result = retrieval_result(state, params.get("wave_estimate_cap_m", 5.0))
    if result.is_safe:
        return None
    return result.warning

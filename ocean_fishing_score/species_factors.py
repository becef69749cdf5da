"""Factor calculators, keyed by the names used in species_profiles.json.

Each calculator reads the evaluation state, calls physics/light/bio-intel
primitives and returns a ``FactorScore`` in 0..1. The pipeline fills in the
weight from the active seasonal profile. Calculators may also add warnings,
recommendations, intermediate results and signals for later stages.
"""
from __future__ import annotations

from dataclasses import asdict
from datetime import date
from typing import Any, Callable, Dict, Mapping

from . import light, physics
from .astro import moon_illumination, solunar_period
from .bio_intel import BaitPresence, RunIntel, bait_presence_score, prey_multiplier
from .const import DEFAULT_MINUTES_TO_SLACK
from .evaluation import EvaluationState
from .models import FactorScore
from .unit_helpers import estimate_wave_height_m

FactorCalculator = Callable[[EvaluationState, Mapping[str, Any]], FactorScore]

FACTOR_CALCULATORS: Dict[str, FactorCalculator] = {}


def factor(name: str) -> Callable[[FactorCalculator], FactorCalculator]:
    def register(fn: FactorCalculator) -> FactorCalculator:
        FACTOR_CALCULATORS[name] = fn
        return fn

    return register


def _score(value: Any, score: float, description: str) -> FactorScore:
    return FactorScore(value=value, weight=0.0, score=max(0.0, min(1.0, float(score))), description=description)


def _no_tide() -> FactorScore:
    return _score(None, 0.5, "no_tide_data")


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------


@factor("seasonality")
def seasonality(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    season = state.season()
    if season is None:
        return _score(None, 1.0, "year_round")
    score, label = season
    return _score(score, score, label)


@factor("bait_presence")
def bait_presence(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    signal = state.bait()
    score, override, advice = bait_presence_score(signal)
    state.signals["bait_override"] = override
    if signal.level is not BaitPresence.NONE:
        state.recommend(advice)
    elif params.get("advise_when_none"):
        state.recommend(params["advise_when_none"])
    state.intermediate["bait"] = {"level": signal.level.value, "keywords": list(signal.keywords)}
    return _score(len(signal.keywords), score, signal.level.value)


@factor("pressure_trend")
def pressure_trend(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    pressure = state.context.pressure
    if pressure.current_hpa is None:
        return _score(None, 0.5, "no_data")
    result = physics.pressure_trend(pressure.current_hpa, pressure.history_hpa, pressure.sample_minutes)
    state.intermediate["pressure_trend"] = {
        "trend": result.label,
        "delta_3h": round(result.delta_3h, 2),
        "delta_6h": round(result.delta_6h, 2),
    }
    return _score(pressure.current_hpa, result.score, result.label)


@factor("wind_tide_safety")
def wind_tide_safety(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    result = state.wind_tide(bool(params.get("estimate_current_direction", False)))
    state.warn(result.warning)
    state.recommend(result.recommendation)
    return _score(round(state.wind_kts(), 1), result.score, result.severity)


@factor("swell_quality")
def swell_quality(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    result = state.swell_comfort()
    state.warn(result.warning)
    return _score(state.swell_height(), result.score, result.label)


# ---------------------------------------------------------------------------
# Trolling salmon
# ---------------------------------------------------------------------------


@factor("light_depth")
def light_depth(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    """Large salmon are not penalised for high sun; the advice moves the gear deeper instead."""
    elevation = state.sun_elevation()
    advice = light.depth_advice(elevation, state.cloud())
    penetration = light.light_penetration(elevation, state.cloud())
    state.intermediate["light_penetration"] = {
        "label": penetration.label,
        "effective_angle_deg": round(penetration.effective_angle_deg, 1),
    }
    state.intermediate["depth_advice"] = {
        "depth_range": advice.depth_range,
        "min_ft": advice.min_ft,
        "max_ft": advice.max_ft,
        "is_deep_bite": advice.is_deep_bite,
        "advice": advice.advice,
    }
    score = 0.7
    if advice.is_deep_bite:
        score = 0.85
        state.recommend(advice.advice)
    elif elevation < 25:
        score = 1.0
    state.recommend(f"Target depth {advice.depth_range}")
    description = "deep_bite" if advice.is_deep_bite else f"depth_{advice.depth_range}"
    return _score(round(elevation, 1), score, description)


@factor("tidal_current")
def tidal_current(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    if not state.has_tide:
        return _no_tide()
    result = physics.tidal_current(state.current_kts(), state.is_rising())
    return _score(state.current_kts(), result.score, result.label)


@factor("trollability")
def trollability(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    minutes = state.minutes_to_slack()
    result = physics.trollability(
        state.tidal_range(),
        params.get("default_minutes_to_slack", DEFAULT_MINUTES_TO_SLACK) if minutes is None else minutes,
        state.current_kts() if state.has_tide else None,
    )
    state.warn(result.warning)
    state.recommend(result.recommendation)
    state.intermediate["trollability"] = {"label": result.label, "depth_penalty_pct": result.depth_penalty_pct}
    return _score(state.tidal_range(), result.score, result.label)


@factor("solunar")
def solunar(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    period = solunar_period(state.context.timestamp, state.context.longitude)
    state.intermediate["solunar"] = asdict(period)
    value = {"major": 2, "minor": 1}.get(period.period_type, 0)
    return _score(value, period.score, period.period_type)


@factor("sea_state")
def sea_state(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    result = sea_state_result(state, params.get("wave_estimate_cap_m", 5.0))
    return _score(round(state.wind_kts(), 1), result.score, result.label)


def sea_state_result(state: EvaluationState, wave_cap_m: float = 5.0) -> physics.SeaStateResult:
    """Trolling sea state from wind with a wind-sea height estimate."""

    def compute() -> physics.SeaStateResult:
        wave = estimate_wave_height_m(state.wind_kts(), wave_cap_m) or 0.0
        return physics.sea_state(
            state.wind_kts(),
            state.gust_kts(),
            wave,
            max_wind_kts=state.limit("max_wind_kts") or 25.0,
            max_gust_kts=state.limit("max_gust_kts") or 35.0,
            max_wave_height_m=state.limit("max_wave_height_m") or 2.0,
        )

    return state.memo(("sea_state", wave_cap_m), compute)


@factor("precipitation")
def precipitation(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    result = physics.precipitation_score(state.precipitation())
    return _score(state.precipitation(), result.score, result.label)


@factor("water_temperature")
def water_temperature(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    result = physics.water_temperature_score(state.water_temp())
    return _score(state.water_temp(), result.score, result.label)


# ---------------------------------------------------------------------------
# Visual hunter
# ---------------------------------------------------------------------------


@factor("light_and_stealth")
def light_and_stealth(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    result = light.stealth_light(state.sun_offsets(), state.cloud(), state.sun_elevation())
    state.signals["sun_angle_penalty"] = result.sun_angle_penalty
    state.recommend(result.recommendation)
    return _score(state.cloud(), result.score, result.label)


@factor("current_flow")
def current_flow(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    if not state.has_tide:
        return _no_tide()
    result = physics.current_flow(state.current_kts(), state.minutes_to_slack())
    return _score(state.current_kts(), result.score, result.label)


@factor("sea_surface_state")
def sea_surface_state(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    wind_tide = state.wind_tide()
    swell = state.swell_comfort()
    state.warn(wind_tide.warning)
    state.warn(swell.warning)
    score = 0.6 * wind_tide.score + 0.4 * swell.score
    return _score(round(state.wind_kts(), 1), score, f"{wind_tide.severity}_{swell.label}")


@factor("river_turbidity")
def river_turbidity(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    result = state.freshet()
    state.warn(result.warning)
    return _score(state.precipitation_24h(), result.score, result.label)


# ---------------------------------------------------------------------------
# Schooling surface feeder
# ---------------------------------------------------------------------------


@factor("estuary_flush")
def estuary_flush(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    if not state.has_tide:
        return _no_tide()
    result = physics.estuary_flush(state.is_rising(), state.tidal_range())
    state.recommend(result.recommendation)
    return _score(state.tidal_range(), result.score, result.label)


@factor("surface_texture")
def surface_texture(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    result = physics.surface_texture(state.wind_kts())
    state.warn(result.warning)
    state.recommend(result.recommendation)
    return _score(round(state.wind_kts(), 1), result.score, result.label)


@factor("schooling_intel")
def schooling_intel(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    signal = state.schooling()
    state.intermediate["schooling"] = {"strength": signal.strength.value, "keywords": list(signal.keywords)}
    return _score(len(signal.keywords), 1.0 if signal.detected else 0.5, signal.strength.value)


@factor("hour_light")
def hour_light(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    result = light.hour_light(state.hour, state.cloud())
    return _score(state.hour, result.score, result.label)


@factor("water_clarity")
def water_clarity(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    result = physics.water_clarity(state.precipitation_24h())
    return _score(state.precipitation_24h(), result.score, result.label)


# ---------------------------------------------------------------------------
# Storm biter
# ---------------------------------------------------------------------------


@factor("storm_trigger")
def storm_trigger(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    pressure = state.context.pressure
    tendency = physics.pressure_tendency(pressure.current_hpa, pressure.history_hpa)
    result = physics.storm_trigger(tendency, state.precipitation())
    state.signals["storm_active"] = result.is_active
    state.recommend(result.recommendation)
    state.intermediate["pressure_tendency"] = tendency
    return _score(state.precipitation(), result.score, result.label)


@factor("staging_seams")
def staging_seams(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    result = physics.staging_seams(state.current_kts())
    state.signals["water_type"] = result.label
    state.recommend(result.recommendation)
    return _score(state.current_kts(), result.score, result.label)


@factor("thermal_gate")
def thermal_gate(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    temp = state.water_temp()
    if temp is None:
        temp = params.get("default_water_temp_c", 10.0)
    result = physics.thermal_gate(temp)
    state.signals["cold_water"] = result.is_cold
    return _score(temp, result.score, result.label)


@factor("run_reports")
def run_reports(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    matches = state.classifier.match_keywords(state.context.bio_intel_text, params.get("keywords", ()))
    if not matches:
        return _score(0, 0.5, "no_intel")
    state.recommend(f"Run activity reported: {', '.join(matches)}")
    return _score(len(matches), 1.0, "run_reported")


# ---------------------------------------------------------------------------
# Flatfish
# ---------------------------------------------------------------------------


@factor("tidal_slope")
def tidal_slope(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    minutes = state.minutes_to_slack()
    if minutes is None and not state.has_tide:
        return _no_tide()
    result = physics.tidal_slope(minutes, state.current_kts())
    return _score(minutes if minutes is not None else state.current_kts(), result.score, result.label)


@factor("tidal_range")
def tidal_range(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    result = physics.tidal_exchange(state.tidal_range())
    return _score(state.tidal_range(), result.score, result.label)


@factor("anchor_wind_tide")
def anchor_wind_tide(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    """Wind against current while anchored: capped once the wind starts dragging the anchor."""
    result = state.wind_tide()
    state.warn(result.warning)
    score, label = result.score, result.severity
    wind = state.wind_kts()
    if wind > params.get("no_anchor_wind_kts", 25.0):
        score, label = 0.0, "cannot_anchor"
    elif result.is_opposing and wind > params.get("drag_wind_kts", 15.0):
        score, label = min(score, params.get("drag_cap", 0.4)), "anchor_drag"
    return _score(round(wind, 1), score, label)


@factor("light_tide_interaction")
def light_tide_interaction(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    light_result = light.ambush_light(state.sun_offsets())
    minutes = state.minutes_to_slack()
    if minutes is not None:
        tide_factor = 1.0 if minutes <= 45 else 0.7 if minutes <= 90 else 0.4
    else:
        current = state.current_kts()
        tide_factor = 1.0 if current <= 0.5 else 0.7 if current <= 1.0 else 0.4
    score = (light_result.score + tide_factor) / 2.0
    if light_result.score >= 0.7 and tide_factor >= 0.7:
        score += 0.2
    tide_label = "near_slack" if tide_factor >= 0.7 else "moving_tide"
    return _score(tide_factor, min(score, 1.0), f"{light_result.label}_{tide_label}")


@factor("bait_scent")
def bait_scent(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    signal = state.bait()
    score, override, _advice = bait_presence_score(signal)
    state.signals["bait_override"] = override
    if signal.level in (BaitPresence.HIGH, BaitPresence.MASSIVE):
        state.recommend("Strong bait scent: anchor down-current of the bait")
    elif signal.level is BaitPresence.NONE:
        state.recommend("No bait reported: use fresh cut bait and a scent trail")
    return _score(signal.level.value, score, signal.level.value)


# ---------------------------------------------------------------------------
# Ambush bottom predator
# ---------------------------------------------------------------------------


@factor("tidal_shoulder")
def tidal_shoulder(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    if not state.has_tide:
        state.signals["tidal_phase"] = "unknown"
        return _no_tide()
    result = physics.tidal_shoulder(state.current_kts())
    state.signals["tidal_phase"] = result.label
    state.recommend(result.recommendation)
    state.intermediate["tidal_shoulder"] = {
        "phase": result.label,
        "feeding": result.feeding,
        "fishability": result.fishability,
    }
    return _score(state.current_kts(), result.score, result.label)


@factor("jigging_conditions")
def jigging_conditions(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    result = jigging_result(state, params.get("wave_estimate_cap_m", 2.0))
    state.signals["jigging"] = result.label
    state.warn(result.warning)
    return _score(round(state.swell_height(estimate_cap=params.get("wave_estimate_cap_m", 2.0)), 2), result.score, result.label)


def jigging_result(state: EvaluationState, wave_cap_m: float = 2.0) -> physics.SwellResult:
    return state.memo(
        ("jigging", wave_cap_m),
        lambda: physics.jigging_conditions(state.swell_height(estimate_cap=wave_cap_m), state.swell_period()),
    )


@factor("seasonal_strategy")
def seasonal_strategy(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    attrs = state.profile.attributes
    multiplier = float(attrs.get("multiplier", 1.0))
    depth_range = attrs.get("depth_range")
    if depth_range:
        state.recommend(f"Depth strategy: {depth_range} ({state.profile.mode_name})")
    state.intermediate["depth_strategy"] = {"mode": state.profile.mode_name, "depth_range": depth_range}
    return _score(multiplier, min(multiplier, 1.0), state.profile.mode_name)


@factor("prey_intel")
def prey_intel(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    signal = state.prey()
    state.signals["prey_detected"] = signal.detected
    if signal.detected:
        state.recommend(f"Prey reported ({', '.join(signal.keywords)}): predators likely nearby")
    return _score(
        len(signal.keywords),
        1.0 if signal.detected else 0.5,
        f"{signal.strength.value}_x{prey_multiplier(signal):g}",
    )


# ---------------------------------------------------------------------------
# Deep bottom dweller
# ---------------------------------------------------------------------------


def drift_result(state: EvaluationState) -> physics.DriftResult:
    return state.memo(
        "drift",
        lambda: physics.resultant_drift(
            state.wind_kts(),
            state.wind_direction(),
            state.current_kts(),
            state.current_direction(estimate_from_tide=True),
        ),
    )


def heave_result(state: EvaluationState, wave_cap_m: float = 2.0, fallback_m: float = 0.3) -> physics.HeaveResult:
    return state.memo(
        ("heave", wave_cap_m, fallback_m),
        lambda: physics.swell_heave(
            state.swell_height(fallback=fallback_m, estimate_cap=wave_cap_m), state.swell_period()
        ),
    )


@factor("resultant_drift")
def resultant_drift(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    result = drift_result(state)
    state.signals["drift_score"] = result.score
    state.warn(result.warning)
    state.recommend(result.recommendation)
    state.intermediate["drift"] = {
        "speed_kts": round(result.drift_speed_kts, 3),
        "direction_deg": round(result.drift_direction_deg, 1),
        "can_hold_position": result.can_hold_position,
    }
    return _score(round(result.drift_speed_kts, 2), result.score, result.label)


@factor("swell_heave")
def swell_heave(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    result = heave_result(state, params.get("wave_estimate_cap_m", 2.0), params.get("fallback_height_m", 0.3))
    state.signals["heave"] = result.label
    state.warn(result.warning)
    return _score(round(result.heave_rate, 3), result.score, result.label)


@factor("slack_tide")
def slack_tide(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    result = physics.slack_decay(state.current_kts())
    state.signals["slack_score"] = result.score
    return _score(state.current_kts(), result.score, result.label)


@factor("groundfish_light")
def groundfish_light(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    result = light.groundfish_light(state.hour, state.cloud())
    state.signals["light"] = result.label
    state.recommend(result.recommendation)
    return _score(state.cloud(), result.score, result.label)


@factor("barometric_stability")
def barometric_stability(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    pressure = state.context.pressure
    result = physics.barometric_stability(pressure.current_hpa, pressure.history_hpa, pressure.sample_minutes)
    state.warn(result.warning)
    return _score(round(result.rate_hpa_per_hour, 2), result.score, result.label)


@factor("wind_safety")
def wind_safety(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    limit = state.limit("max_wind_kts")
    wind = state.wind_kts()
    if limit is not None and wind > limit:
        return _score(round(wind, 1), 0.0, "too_windy")
    return _score(round(wind, 1), 1.0, "workable")


# ---------------------------------------------------------------------------
# Migrating interception
# ---------------------------------------------------------------------------


@factor("run_intel")
def run_intel(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    signal = state.run_intel()
    if signal.confidence is RunIntel.MASSIVE_RUN:
        state.recommend("Commercial opening or massive run confirmed: get on the water now")
    elif signal.confidence is RunIntel.CONFIRMED_SCHOOLS:
        state.recommend("Schools confirmed: fish are present")
    state.intermediate["run_intel"] = {"confidence": signal.confidence.value, "keywords": list(signal.keywords)}
    return _score(", ".join(signal.keywords) or "no reports", 1.0 if signal.detected else 0.5, signal.confidence.value)


@factor("thermal_blockade")
def thermal_blockade(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    river_temp = state.context.overrides.river_temp_c
    if river_temp is None:
        river_temp = params.get("default_river_temp_c", 15.0)
    result = physics.thermal_blockade(river_temp)
    state.signals["stacking"] = result.is_stacking
    state.recommend(result.recommendation)
    return _score(river_temp, result.score, result.label)


@factor("tidal_treadmill")
def tidal_treadmill(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    is_ebb = state.is_rising() is False
    result = physics.tidal_treadmill(is_ebb, state.current_kts())
    state.recommend(result.recommendation)
    state.intermediate["tidal_treadmill"] = {"quality": result.label, "ground_speed": result.ground_speed}
    return _score(f"{'ebb' if is_ebb else 'flood'} {state.current_kts():.1f} kts", result.score, result.label)


@factor("corridor_light")
def corridor_light(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    """Mostly depth advice; the light itself barely moves the score."""
    elevation = state.sun_elevation()
    result = light.interception_corridor(elevation, state.cloud())
    state.recommend(result.recommendation)
    state.recommend(result.leader_advice)
    if state.precipitation_24h() > params.get("plume_precip_mm", 20.0):
        state.recommend("Heavy river outflow: target the outer plume edges further offshore")
    state.intermediate["corridor"] = {"depth_range": result.depth_range, "label": result.label}
    return _score(round(elevation, 1), result.score, result.label)


# ---------------------------------------------------------------------------
# Trap fishing
# ---------------------------------------------------------------------------


def soak_hours(state: EvaluationState, params: Mapping[str, Any]) -> float:
    hours = state.context.overrides.soak_hours
    if hours is None or hours <= 0:
        return float(params.get("soak_hours", 12.0))
    return float(hours)


def retrieval_result(state: EvaluationState, wave_cap_m: float = 5.0) -> physics.RetrievalResult:
    """Haul conditions, using the current snapshot as the forecast for retrieval time."""
    return state.memo(
        ("retrieval", wave_cap_m),
        lambda: physics.retrieval_safety(
            state.wind_kts(),
            state.current_kts(),
            state.swell_height(fallback=0.0, estimate_cap=wave_cap_m),
        ),
    )


@factor("scent_hydraulics")
def scent_hydraulics(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    # TODO: score each hour of the soak once tide forecasts are part of the context
    result = physics.scent_hydraulics([state.current_kts()])
    state.warn(result.warning)
    state.recommend(result.recommendation)
    state.intermediate["scent_hydraulics"] = {
        "average_current_kts": result.average_current_kts,
        "max_current_kts": result.max_current_kts,
        "trap_roll_risk": result.trap_roll_risk,
    }
    return _score(result.average_current_kts, result.score, result.label)


@factor("molt_quality")
def molt_quality(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    temp = state.water_temp()
    if temp is None:
        temp = params.get("default_water_temp_c", 10.0)
    result = physics.molt_quality(temp)
    state.recommend(result.recommendation)
    return _score(temp, result.score, result.label)


@factor("tide_direction")
def tide_direction(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    rising = state.is_rising()
    is_flood = True if rising is None else rising
    state.signals["flood"] = is_flood
    if is_flood:
        return _score("flood", 1.0, "flood_moving_in")
    return _score("ebb", params.get("ebb_score", 0.7), "ebb_moving_out")


@factor("photoperiod")
def photoperiod(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    offsets = state.sun_offsets()
    if offsets is None:
        return _score(None, 0.5, "no_light_data")
    after_sunrise, before_sunset = offsets
    if after_sunrise < 0 or before_sunset < 0:
        return _score("night", 1.0, "night_soak")
    return _score("day", 0.5, "day_soak")


@factor("pressure_direction")
def pressure_direction(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    pressure = state.context.pressure
    tendency = physics.pressure_tendency(pressure.current_hpa, pressure.history_hpa)
    score = {"rising": 0.8, "stable": 0.6}.get(tendency, 0.4)
    return _score(tendency, score, tendency)


# ---------------------------------------------------------------------------
# Deep trap
# ---------------------------------------------------------------------------


def target_depth_ft(state: EvaluationState, params: Mapping[str, Any]) -> float:
    depth = state.context.overrides.target_depth_ft
    if depth is None or depth <= 0:
        return float(params.get("target_depth_ft", 300.0))
    return float(depth)


@factor("catenary_drag")
def catenary_drag(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    depth = target_depth_ft(state, params)
    result = physics.catenary_drag(state.current_kts(), depth)
    state.signals["blowback"] = result.label
    state.warn(result.warning)
    state.recommend(result.recommendation)
    state.recommend(f"Deploy heavy weights (15 lb+) for {depth:.0f} ft")
    return _score(f"{state.current_kts():.2f} kts @ {depth:.0f}ft", result.score, result.label)


def slack_window_result(state: EvaluationState) -> physics.SlackWindowResult:
    return state.memo("slack_window", lambda: physics.slack_window(state.tidal_range()))


@factor("slack_window")
def slack_window(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    result = slack_window_result(state)
    state.recommend(result.recommendation)
    state.recommend(f"Haul window: {result.minutes} min - plan trap count accordingly")
    return _score(round(state.tidal_range(), 1), result.score, f"{result.label}_{result.minutes}min")


@factor("intra_season")
def intra_season(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    """Catch rates fall every day after the opening as traps clear the grounds."""
    month, day = params.get("opens", (5, 15))
    opened = date(state.context.timestamp.year, int(month), int(day))
    days = max((state.context.timestamp.date() - opened).days, 0)
    score = max(params.get("floor", 0.2), 1.0 - days * params.get("daily_decay", 0.02))
    if days <= 7:
        label = "opening_week_peak"
        state.recommend("Opening week: peak prawn density")
    elif days <= 20:
        label = "mid_season"
    else:
        label = "late_season"
        if days > 30:
            state.recommend("Late season: density declining, look for untouched grounds")
    return _score(days, score, label)


@factor("darkness")
def darkness(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    moon = moon_illumination(state.context.timestamp)
    offsets = state.sun_offsets()
    is_night = offsets is not None and (offsets[0] < 0 or offsets[1] < 0)
    result = light.prawn_darkness(moon, is_night)
    state.recommend(result.recommendation)
    return _score(f"{moon}% moon, {'night' if is_night else 'day'}", result.score, result.label)


@factor("haul_wind")
def haul_wind(state: EvaluationState, params: Mapping[str, Any]) -> FactorScore:
    wind = state.wind_kts()
    if wind < 10:
        return _score(round(wind, 1), 1.0, "calm")
    if wind < 15:
        return _score(round(wind, 1), 0.7, "moderate")
    if wind < 20:
        return _score(round(wind, 1), 0.4, "rough")
    return _score(round(wind, 1), 0.0, "too_rough")

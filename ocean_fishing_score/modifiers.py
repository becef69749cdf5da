"""Post-score modifiers.

A modifier takes the running total and returns ``(new_total, detail)``. A
``detail`` of None means the modifier did not fire and the total is unchanged.
Modifiers read signals that the factor calculators left on the state, so they
never re-run a primitive.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from . import light, physics
from .bio_intel import predator_suppression as _predator_suppression
from .bio_intel import prey_multiplier as _prey_multiplier
from .bio_intel import run_intel_multiplier as _run_intel_multiplier
from .bio_intel import schooling_multiplier as _schooling_multiplier
from .evaluation import EvaluationState
from .species_factors import retrieval_result, slack_window_result, soak_hours

ModifierResult = Tuple[float, Optional[str]]
Modifier = Callable[[float, EvaluationState, Mapping[str, Any]], ModifierResult]

MODIFIERS: Dict[str, Modifier] = {}


def modifier(name: str) -> Callable[[Modifier], Modifier]:
    def register(fn: Modifier) -> Modifier:
        MODIFIERS[name] = fn
        return fn

    return register


@modifier("predator_suppression")
def predator_suppression(total: float, state: EvaluationState, params: Mapping[str, Any]) -> ModifierResult:
    signal = state.predator()
    multiplier, warning = _predator_suppression(signal)
    if multiplier >= 1.0:
        return total, None
    state.warn(warning)
    state.recommend(params.get("advice", "Move away from the predators or switch to bottom fish"))
    return total * multiplier, f"{signal.level.value} x{multiplier:g}"


@modifier("bait_floor")
def bait_floor(total: float, state: EvaluationState, params: Mapping[str, Any]) -> ModifierResult:
    """Massive bait lifts the total to a floor whatever the conditions."""
    if not state.signals.get("bait_override"):
        return total, None
    floor = float(params["floor"])
    state.recommend(params.get("advice", "Massive bait reported: fish are feeding, go now"), first=True)
    if total >= floor:
        return total, f"floor {floor:g} already met"
    return floor, f"raised to floor {floor:g}"


@modifier("sun_angle_penalty")
def sun_angle_penalty(total: float, state: EvaluationState, params: Mapping[str, Any]) -> ModifierResult:
    penalty = state.signals.get("sun_angle_penalty", 1.0)
    if penalty >= 1.0:
        return total, None
    return total * penalty, f"x{penalty:g}"


@modifier("glass_calm")
def glass_calm(total: float, state: EvaluationState, params: Mapping[str, Any]) -> ModifierResult:
    """Flat calm under a clear sky makes visual hunters spooky."""
    cloud = state.cloud()
    if state.wind_kts() >= params.get("max_wind_kts", 4.0):
        return total, None
    if cloud is not None and cloud >= params.get("max_cloud_pct", 50.0):
        return total, None
    factor = float(params.get("factor", 0.85))
    state.recommend("Glass calm and bright: use long leaders and lighter gear")
    return total * factor, f"x{factor:g}"


@modifier("blown_out")
def blown_out(total: float, state: EvaluationState, params: Mapping[str, Any]) -> ModifierResult:
    freshet = state.freshet()
    if not freshet.is_blown_out:
        return total, None
    factor = float(params.get("factor", 0.4))
    state.warn(freshet.warning)
    return total * factor, f"{freshet.cause} x{factor:g}"


@modifier("schooling_multiplier")
def schooling_multiplier(total: float, state: EvaluationState, params: Mapping[str, Any]) -> ModifierResult:
    signal = state.schooling()
    multiplier = _schooling_multiplier(signal)
    if multiplier == 1.0:
        return total, None
    if multiplier > 1.0:
        state.recommend("Schools reported: look for jumpers and cast ahead of them")
    return total * multiplier, f"{signal.strength.value} x{multiplier:g}"


@modifier("prey_multiplier")
def prey_multiplier(total: float, state: EvaluationState, params: Mapping[str, Any]) -> ModifierResult:
    multiplier = _prey_multiplier(state.prey())
    if multiplier <= 1.0:
        return total, None
    return total * multiplier, f"x{multiplier:g}"


@modifier("seasonal_multiplier")
def seasonal_multiplier(total: float, state: EvaluationState, params: Mapping[str, Any]) -> ModifierResult:
    """Mode-specific activity multiplier declared on the seasonal profile."""
    multiplier = float(state.profile.attributes.get("multiplier", 1.0))
    if multiplier == 1.0:
        return total, None
    return total * multiplier, f"{state.profile.mode_name} x{multiplier:g}"


def _requirement_met(state: EvaluationState, requirement: Mapping[str, Any]) -> bool:
    value = state.signals.get(requirement["signal"])
    if value is None:
        return False
    if "equals" in requirement:
        return value == requirement["equals"]
    if "at_least" in requirement:
        return float(value) >= float(requirement["at_least"])
    if "is" in requirement:
        return bool(value) is bool(requirement["is"])
    return bool(value)


@modifier("alignment_bonus")
def alignment_bonus(total: float, state: EvaluationState, params: Mapping[str, Any]) -> ModifierResult:
    """Bonus when every listed factor signal lines up at once."""
    requirements = params.get("requires", ())
    if not requirements or not all(_requirement_met(state, r) for r in requirements):
        return total, None
    factor = float(params.get("factor", 1.1))
    if params.get("advice"):
        state.recommend(params["advice"], first=True)
    return min(total * factor, state.species.max_score), f"x{factor:g}"


@modifier("closed_months_cap")
def closed_months_cap(total: float, state: EvaluationState, params: Mapping[str, Any]) -> ModifierResult:
    if state.month not in params.get("months", ()):
        return total, None
    cap = float(params.get("cap", 1.0))
    state.warn(params.get("warning", "Fishery closed this month"))
    if total <= cap:
        return total, f"closed, already under {cap:g}"
    return cap, f"closed, capped at {cap:g}"


@modifier("run_intel_multiplier")
def run_intel_multiplier(total: float, state: EvaluationState, params: Mapping[str, Any]) -> ModifierResult:
    signal = state.run_intel()
    multiplier = _run_intel_multiplier(signal)
    if multiplier <= 1.0:
        return total, None
    state.recommend(f"Run confirmed bonus: {(multiplier - 1.0) * 100:.0f}%")
    return total * multiplier, f"{signal.confidence.value} x{multiplier:g}"


@modifier("off_season_cap")
def off_season_cap(total: float, state: EvaluationState, params: Mapping[str, Any]) -> ModifierResult:
    season = state.season()
    if season is None or season[0] >= float(params.get("below", 0.3)):
        return total, None
    cap = float(params.get("cap", 2.0))
    if total <= cap:
        return total, f"off season, already under {cap:g}"
    return cap, f"off season, capped at {cap:g}"


@modifier("nocturnal_flood")
def nocturnal_flood(total: float, state: EvaluationState, params: Mapping[str, Any]) -> ModifierResult:
    """Scale the soak score by how much of the soak falls on a dark flood tide."""
    ctx = state.context
    fraction = light.night_fraction(ctx.timestamp, soak_hours(state, params), ctx.sunrise, ctx.sunset)
    night_pct = 0.0 if fraction is None else fraction * 100.0
    is_flood = bool(state.signals.get("flood", state.is_rising() is not False))
    result = physics.nocturnal_flood(night_pct, is_flood)
    state.recommend(result.recommendation)
    state.intermediate["nocturnal_flood"] = {"night_pct": round(night_pct), "is_flood": is_flood}
    if result.multiplier == 1.0:
        return total, None
    return total * result.multiplier, f"{result.label} x{result.multiplier:g}"


@modifier("haul_blend")
def haul_blend(total: float, state: EvaluationState, params: Mapping[str, Any]) -> ModifierResult:
    """Blend the soak score with how safely the traps can be hauled."""
    result = retrieval_result(state, params.get("wave_estimate_cap_m", 5.0))
    for warning in result.warnings:
        state.warn(warning)
    for advice in result.recommendations:
        state.recommend(advice)
    share = float(params.get("soak_share", 0.7))
    haul = result.score * state.species.max_score
    state.intermediate["haul"] = {"score": round(haul, 2), "label": result.label, "is_slack": result.is_slack}
    return total * share + haul * (1.0 - share), f"soak {share:g} / haul {haul:.2f}"


@modifier("slack_window_multiplier")
def slack_window_multiplier(total: float, state: EvaluationState, params: Mapping[str, Any]) -> ModifierResult:
    result = slack_window_result(state)
    if result.multiplier == 1.0:
        return total, None
    if result.multiplier > 1.0:
        state.recommend(f"Neap tide bonus: {(result.multiplier - 1.0) * 100:.0f}% - extra time for deep work")
    else:
        state.recommend(f"Spring tide penalty: {(1.0 - result.multiplier) * 100:.0f}% - short haul window")
    return total * result.multiplier, f"{result.label} x{result.multiplier:g}"

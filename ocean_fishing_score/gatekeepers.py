"""Gatekeepers: checks that make a species unfishable outright.

A triggered gatekeeper returns ``(warning, advice)``; the pipeline then skips
every other stage and reports the gatekeeper's floor score.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from .astro import day_of_year, is_odd_year
from .evaluation import EvaluationState

GateResult = Optional[Tuple[str, Optional[str]]]
Gatekeeper = Callable[[EvaluationState, Mapping[str, Any]], GateResult]

GATEKEEPERS: Dict[str, Gatekeeper] = {}


def gatekeeper(name: str) -> Callable[[Gatekeeper], Gatekeeper]:
    def register(fn: Gatekeeper) -> Gatekeeper:
        GATEKEEPERS[name] = fn
        return fn

    return register


@gatekeeper("even_year")
def even_year(state: EvaluationState, params: Mapping[str, Any]) -> GateResult:
    """Runs that only return in odd years."""
    when = state.context.timestamp
    if is_odd_year(when):
        return None
    return (
        f"Even year ({when.year}): no significant run expected",
        f"Next run expected in {when.year + 1}",
    )


@gatekeeper("closed_months")
def closed_months(state: EvaluationState, params: Mapping[str, Any]) -> GateResult:
    if state.month not in params.get("months", ()):
        return None
    return (
        params.get("warning", "Season closed"),
        params.get("advice"),
    )


@gatekeeper("short_period_swell")
def short_period_swell(state: EvaluationState, params: Mapping[str, Any]) -> GateResult:
    """Short steep swell makes anchoring unsafe. Only measured swell counts."""
    swell = state.context.swell
    if swell.height_m is None or swell.period_s is None:
        return None
    max_period = float(params.get("max_period_s", 6.0))
    min_height = float(params.get("min_height_m", 1.0))
    if swell.period_s < max_period and swell.height_m >= min_height:
        return (
            f"Dangerous short-period swell: {swell.height_m:.1f} m at {swell.period_s:.0f} s",
            params.get("advice", "Do not anchor in these conditions"),
        )
    return None


@gatekeeper("conservation_area")
def conservation_area(state: EvaluationState, params: Mapping[str, Any]) -> GateResult:
    if not state.context.overrides.in_conservation_area:
        return None
    return (
        params.get("warning", "Inside a conservation area: retention prohibited"),
        params.get("advice", "Move outside the conservation area boundary"),
    )


@gatekeeper("fishery_window")
def fishery_window(state: EvaluationState, params: Mapping[str, Any]) -> GateResult:
    """Fisheries that only open by announcement.

    An explicit ``fishery_open`` override decides; otherwise the fishery is
    assumed possible only inside the usual day-of-year window.
    """
    declared = state.context.overrides.fishery_open
    if declared is None:
        start, end = params.get("open_days", (196, 244))
        is_open = start <= day_of_year(state.context.timestamp) <= end
    else:
        is_open = declared
    if is_open:
        return None
    return (
        params.get("warning", "Fishery typically closed. Check for special openings."),
        params.get("advice"),
    )


@gatekeeper("season_window")
def season_window(state: EvaluationState, params: Mapping[str, Any]) -> GateResult:
    """A short fixed season, given as (month, day) bounds inclusive."""
    when = state.context.timestamp.date()
    open_month, open_day = params.get("opens", (5, 15))
    close_month, close_day = params.get("closes", (6, 30))
    if date(when.year, open_month, open_day) <= when <= date(when.year, close_month, close_day):
        return None
    return (
        params.get("warning", "Season closed"),
        params.get("advice"),
    )


@gatekeeper("rough_water")
def rough_water(state: EvaluationState, params: Mapping[str, Any]) -> GateResult:
    """Wind or sea (measured swell, else a wind-sea estimate) too rough to work heavy gear."""
    wind = state.wind_kts()
    max_wind = float(params.get("max_wind_kts", 20.0))
    advice = params.get("advice", "Wait for a calm weather window")
    if wind > max_wind:
        return f"Unsafe: wind {round(wind)} kts - too dangerous for heavy gear", advice
    wave = state.swell_height(fallback=0.0, estimate_cap=params.get("wave_estimate_cap_m", 5.0))
    if wave > float(params.get("max_wave_height_m", 1.5)):
        return f"Unsafe: wave height {wave:.1f} m - too rough for trap work", advice
    return None

"""Seasonal mode selection and seasonality curves.

Curves are declared in species_profiles.json and evaluated here:

- ``month_table``: a score per month, optionally split at mid-month
  (``[first_half, second_half]``) and optionally keyed by region.
- ``day_segments``: day-of-year segments, each either a constant score or a
  linear ramp between two anchor points; days outside every segment get the floor.
- ``gaussian``: bell curve around a peak day inside a season window.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Mapping, Optional, Tuple

import numpy as np

from .astro import day_of_year
from .models import SeasonalProfile, SpeciesConfig

_LOGGER = logging.getLogger(__name__)

DEFAULT_FLOOR = 0.1


def select_profile(species: SpeciesConfig, when: date) -> SeasonalProfile:
    """Return the seasonal mode whose months contain ``when``.

    The loader guarantees every month belongs to exactly one mode.
    """
    for profile in species.modes:
        if when.month in profile.months:
            return profile
    # unreachable for a validated config
    raise LookupError(f"No seasonal mode for {species.id} in month {when.month}")


def _label_for(score: float) -> str:
    if score >= 0.9:
        return "peak_season"
    if score >= 0.6:
        return "good_season"
    if score >= 0.35:
        return "shoulder_season"
    return "off_season"


def _month_table(curve: Mapping[str, Any], when: date, region: Optional[str]) -> Tuple[float, str]:
    tables = curve.get("tables")
    if tables:
        key = region if region in tables else curve.get("default_region")
        if region is not None and key != region:
            _LOGGER.debug("No season table for region %r, using %r", region, key)
        table = tables[key]
    else:
        table = curve["table"]

    entry = table.get(str(when.month), curve.get("floor", DEFAULT_FLOOR))
    if isinstance(entry, (list, tuple)):
        split_day = int(curve.get("split_day", 15))
        entry = entry[0] if when.day < split_day else entry[1]
    score = float(entry)
    return score, _label_for(score)


def _day_segments(curve: Mapping[str, Any], when: date) -> Tuple[float, str]:
    day = day_of_year(when)
    for segment in curve["segments"]:
        start, end = segment["days"]
        if not start <= day <= end:
            continue
        if "ramp" in segment:
            (d0, s0), (d1, s1) = segment["ramp"]
            score = float(np.interp(day, [d0, d1], [s0, s1]))
        else:
            score = float(segment["score"])
        return score, segment.get("label", _label_for(score))
    return float(curve.get("floor", DEFAULT_FLOOR)), curve.get("floor_label", "off_season")


def _gaussian(curve: Mapping[str, Any], when: date) -> Tuple[float, str]:
    day = day_of_year(when)
    floor = float(curve.get("floor", DEFAULT_FLOOR))
    start, end = curve["window"]
    if not start <= day <= end:
        return floor, "off_season"
    peak = float(curve["peak_day"])
    width = float(curve["width"])
    score = max(float(np.exp(-(((day - peak) / width) ** 2))), floor)
    if score >= 0.8:
        label = "peak_run"
    elif day < peak:
        label = "building_run"
    else:
        label = "fading_run"
    return score, label


_CURVES = {
    "month_table": lambda curve, when, region: _month_table(curve, when, region),
    "day_segments": lambda curve, when, region: _day_segments(curve, when),
    "gaussian": lambda curve, when, region: _gaussian(curve, when),
}


def season_score(curve: Mapping[str, Any], when: date, region: Optional[str] = None) -> Tuple[float, str]:
    """Evaluate a seasonality curve, returning (score in 0..1, label)."""
    score, label = _CURVES[curve["type"]](curve, when, region)
    return max(0.0, min(1.0, score)), label

"""Calendar and approximate lunar helpers.

The moon transit estimate is deliberately coarse (moonrise drifts ~50 minutes
per day of year, shifted by longitude). It is good enough to rank hours
against each other and is not an ephemeris.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional

# Moonrise reference meridian for the day-of-year drift estimate
REFERENCE_LONGITUDE = -123.0
MAJOR_WINDOW_MINUTES = 45
MINOR_WINDOW_MINUTES = 30
SYNODIC_MONTH_DAYS = 29.53059
REFERENCE_NEW_MOON = date(2000, 1, 6)


@dataclass(frozen=True)
class MoonTransits:
    major: List[datetime]  # moon overhead and underfoot
    minor: List[datetime]  # moonrise and moonset


@dataclass(frozen=True)
class SolunarPeriod:
    score: float
    period_type: str  # "major", "minor" or "none"
    minutes_to_next: Optional[int] = None


def day_of_year(when: date) -> int:
    """1 for January 1st."""
    return when.timetuple().tm_yday


def is_odd_year(when: date) -> bool:
    return when.year % 2 == 1


def moon_transit_times(when: datetime, longitude: Optional[float] = None) -> MoonTransits:
    lon = REFERENCE_LONGITUDE if longitude is None else float(longitude)
    base_rise = (day_of_year(when) * 50.0 / 60.0) % 24.0
    rise = (base_rise + (lon - REFERENCE_LONGITUDE) / 15.0) % 24.0
    moonset = (rise + 12.4) % 24.0
    overhead = (rise + 6.2) % 24.0
    underfoot = (overhead + 12.0) % 24.0

    midnight = when.replace(hour=0, minute=0, second=0, microsecond=0)
    return MoonTransits(
        major=[midnight + timedelta(hours=overhead), midnight + timedelta(hours=underfoot)],
        minor=[midnight + timedelta(hours=rise), midnight + timedelta(hours=moonset)],
    )


def solunar_period(when: datetime, longitude: Optional[float] = None) -> SolunarPeriod:
    """Major periods (+-45 min of transit) score 1.0, minor (+-30 min of rise/set) 0.7, else 0.3."""
    transits = moon_transit_times(when, longitude)
    upcoming: List[float] = []

    for period_type, times, window in (
        ("major", transits.major, MAJOR_WINDOW_MINUTES),
        ("minor", transits.minor, MINOR_WINDOW_MINUTES),
    ):
        for t in times:
            delta = (t - when).total_seconds() / 60.0
            if abs(delta) <= window:
                return SolunarPeriod(1.0 if period_type == "major" else 0.7, period_type)
            if delta > 0:
                upcoming.append(delta)

    return SolunarPeriod(0.3, "none", round(min(upcoming)) if upcoming else None)


def moon_phase(when: date) -> float:
    """Fraction of the synodic month elapsed: 0 new, 0.5 full."""
    days = when.toordinal() - REFERENCE_NEW_MOON.toordinal()
    return (days % SYNODIC_MONTH_DAYS) / SYNODIC_MONTH_DAYS


def moon_illumination(when: date) -> int:
    """Illuminated share of the disc in percent, from the phase alone."""
    return round((1.0 - math.cos(2.0 * math.pi * moon_phase(when))) / 2.0 * 100.0)

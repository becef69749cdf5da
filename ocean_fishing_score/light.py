"""Sun and light helpers: elevation estimate, light penetration and light windows."""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Tuple

from .const import DEFAULT_CLOUD_COVER_PCT
from .physics import PrimitiveResult
from .unit_helpers import align_to, clamp


@dataclass(frozen=True)
class LightPenetrationResult(PrimitiveResult):
    sun_elevation_deg: float = 0.0
    effective_angle_deg: float = 0.0


@dataclass(frozen=True)
class DepthAdvice:
    min_ft: int
    max_ft: int
    is_deep_bite: bool
    advice: str

    @property
    def depth_range(self) -> str:
        return f"{self.min_ft}-{self.max_ft}ft"


@dataclass(frozen=True)
class StealthLightResult(PrimitiveResult):
    sun_angle_penalty: float = 1.0


def _cloud(cloud_cover_pct: Optional[float]) -> float:
    if cloud_cover_pct is None:
        return DEFAULT_CLOUD_COVER_PCT
    return clamp(cloud_cover_pct, 0.0, 100.0)


def effective_sun_angle(sun_elevation_deg: float, cloud_cover_pct: Optional[float]) -> float:
    """Cloud dims penetration: 50% cover takes a quarter off the sun angle."""
    return float(sun_elevation_deg) * (1.0 - _cloud(cloud_cover_pct) * 0.005)


def minutes_between(later: datetime, earlier: datetime) -> float:
    return (later - earlier).total_seconds() / 60.0


def sun_offsets(
    timestamp: datetime, sunrise: Optional[datetime], sunset: Optional[datetime]
) -> Optional[Tuple[float, float]]:
    """Minutes since sunrise and minutes until sunset, or None without sun times."""
    if sunrise is None or sunset is None:
        return None
    sunrise, sunset = align_to(sunrise, timestamp), align_to(sunset, timestamp)
    return minutes_between(timestamp, sunrise), minutes_between(sunset, timestamp)


def estimate_sun_elevation(timestamp: datetime, sunrise: datetime, sunset: datetime) -> float:
    """Approximate sun elevation (degrees) from sun times for mid-latitudes.

    A half-sine through the day peaking at solar noon, scaled by a seasonal
    maximum of roughly 17 degrees at the winter solstice and 63 at midsummer.
    Before sunrise and after sunset the value falls 10 degrees per hour, floored at -10.
    """
    sunrise, sunset = align_to(sunrise, timestamp), align_to(sunset, timestamp)
    day_seconds = (sunset - sunrise).total_seconds()
    since_sunrise = (timestamp - sunrise).total_seconds()
    if since_sunrise < 0:
        return max(-10.0, since_sunrise / 3600.0 * 10.0)
    if day_seconds <= 0 or since_sunrise > day_seconds:
        since_sunset = (timestamp - sunset).total_seconds()
        return max(-10.0, -since_sunset / 3600.0 * 10.0)
    progress = since_sunrise / day_seconds
    seasonal_max = 40.0 - 23.0 * math.cos(timestamp.month * math.pi / 6.0)
    return math.sin(progress * math.pi) * seasonal_max


def light_penetration(sun_elevation_deg: float, cloud_cover_pct: Optional[float] = None) -> LightPenetrationResult:
    """High sun drives light (and fish) deep; low sun keeps them up."""
    cloud = _cloud(cloud_cover_pct)
    angle = effective_sun_angle(sun_elevation_deg, cloud)
    if angle < 10:
        score, label, rec = 1.0, "surface", "Low light: fish the top 30 ft"
    elif angle < 25:
        score, label, rec = 0.9, "shallow", "Moderate light: fish 20-50 ft"
    elif angle < 40:
        score, label, rec = 0.7, "mid", "Bright: fish 40-80 ft"
    elif angle < 55:
        score, label, rec = 0.5, "deep", "High sun: fish 60-100 ft on downriggers"
    else:
        score, label, rec = 0.3, "very_deep", "Peak sun: fish 80-120 ft or wait for evening"

    if cloud > 70 and angle > 25:
        score = min(score + 0.2, 1.0)
        rec = "Overcast: fish shallower than the sun angle suggests"
    return LightPenetrationResult(
        score, label, recommendation=rec, sun_elevation_deg=float(sun_elevation_deg), effective_angle_deg=angle
    )


def depth_advice(sun_elevation_deg: float, cloud_cover_pct: Optional[float] = None) -> DepthAdvice:
    """Trolling depth band for a large salmon given sun angle and cloud."""
    cloud = _cloud(cloud_cover_pct)
    angle = effective_sun_angle(sun_elevation_deg, cloud)
    if angle < 10:
        low, high, deep, advice = 40, 80, False, "Low light: fish may ride high in the water column"
    elif angle < 25:
        low, high, deep, advice = 60, 100, False, "Good light for mid-depth trolling"
    elif angle < 40:
        low, high, deep, advice = 80, 120, False, "Bright: target deeper structure and the thermocline"
    elif angle < 55:
        low, high, deep, advice = 100, 150, True, "Deep bite: high sun has pushed fish to 100-150 ft"
    else:
        low, high, deep, advice = 120, 180, True, "Deep bite: peak sun, run downriggers at 120-180 ft"

    if cloud > 70 and angle > 25:
        low, high, deep = low - 20, high - 20, False
        advice = "Overcast: fish may sit shallower than usual for this hour"
    return DepthAdvice(low, high, deep, advice)


def stealth_light(
    offsets: Optional[Tuple[float, float]],
    cloud_cover_pct: Optional[float],
    sun_elevation_deg: float,
) -> StealthLightResult:
    """Light score for a visual hunter, with a penalty factor for high bright sun.

    The penalty applies to the final total, not to this factor.
    """
    cloud = _cloud(cloud_cover_pct)
    if offsets is None:
        score, label = 0.5, "no_light_data"
    else:
        after_sunrise, before_sunset = offsets
        if 0 <= after_sunrise <= 90:
            score, label = 1.0, "golden_hour_dawn"
        elif 0 <= before_sunset <= 90:
            score, label = 1.0, "golden_hour_dusk"
        elif -35 <= after_sunrise < 0:
            score, label = 0.9, "twilight_dawn"
        elif -35 <= before_sunset < 0:
            score, label = 0.85, "twilight_dusk"
        elif 90 < after_sunrise <= 180 or 90 < before_sunset <= 180:
            score, label = 0.6, "shoulder_hours"
        elif after_sunrise > 180 and before_sunset > 180:
            score, label = 0.2, "midday"
            if cloud > 50:
                score += 0.5 * ((cloud - 50.0) / 50.0)
                label = "midday_overcast"
        else:
            score, label = 0.3, "night"

    penalty = 1.0
    rec = None
    if sun_elevation_deg > 45 and cloud < 25:
        penalty = 0.7
        label += "_high_sun"
        rec = "High bright sun: fish are deep, run gear below 60 ft or wait for evening"
    elif sun_elevation_deg > 45 and cloud < 50:
        penalty = 0.85
        rec = "High sun with some cloud: fish 40-80 ft"
    elif sun_elevation_deg > 30 and cloud < 30:
        rec = "Moderate sun penetration: fish 30-60 ft"
    return StealthLightResult(min(score, 1.0), label, recommendation=rec, sun_angle_penalty=penalty)


def ambush_light(offsets: Optional[Tuple[float, float]]) -> PrimitiveResult:
    """Low-light preference of a bottom ambush predator."""
    if offsets is None:
        return PrimitiveResult(0.5, "no_light_data")
    after_sunrise, before_sunset = offsets
    if 0 <= after_sunrise <= 90 or 0 <= before_sunset <= 90:
        return PrimitiveResult(1.0, "golden_hour")
    if -30 <= after_sunrise < 0 or -30 <= before_sunset < 0:
        return PrimitiveResult(0.9, "twilight")
    if 90 < after_sunrise <= 150 or 90 < before_sunset <= 150:
        return PrimitiveResult(0.6, "shoulder_hours")
    if after_sunrise > 150 and before_sunset > 150:
        return PrimitiveResult(0.3, "midday")
    return PrimitiveResult(0.4, "night")


def hour_light(hour: int, cloud_cover_pct: Optional[float]) -> PrimitiveResult:
    """Surface schools show at dawn and dusk; heavy cloud helps the midday lull."""
    cloud = _cloud(cloud_cover_pct)
    if 5 <= hour <= 8 or 18 <= hour <= 21:
        return PrimitiveResult(1.0, "low_light")
    if 9 <= hour <= 11 or 16 <= hour <= 17:
        return PrimitiveResult(0.7, "shoulder_hours")
    if 12 <= hour <= 15 and cloud > 60:
        return PrimitiveResult(0.7, "midday_overcast")
    return PrimitiveResult(0.6, "midday" if 12 <= hour <= 15 else "night")


def groundfish_light(hour: int, cloud_cover_pct: Optional[float]) -> PrimitiveResult:
    """Overcast lets structure fish suspend and feed; bright sun pins them down."""
    cloud = _cloud(cloud_cover_pct)
    if hour < 6 or hour > 20:
        return PrimitiveResult(0.5, "low_light")
    if cloud >= 70:
        return PrimitiveResult(1.0, "overcast_ideal")
    if cloud >= 40:
        return PrimitiveResult(0.8, "partly_cloudy")
    return PrimitiveResult(0.6, "bright", recommendation="Bright sun: fish tight to structure and in the shadows")


@dataclass(frozen=True)
class CorridorAdvice(PrimitiveResult):
    depth_range: str = ""
    leader_advice: str = ""


def interception_corridor(sun_elevation_deg: float, cloud_cover_pct: Optional[float]) -> CorridorAdvice:
    """Depth of the travel corridor a migrating school holds, set by light intensity.

    The score only ranks light conditions; the corridor depth is the useful part.
    """
    cloud = _cloud(cloud_cover_pct)
    elevation = float(sun_elevation_deg)
    if elevation < 10 or cloud > 80:
        depth, label = "25-45ft", "low_light_shallow"
    elif elevation < 30 or cloud > 50:
        depth, label = "40-60ft", "moderate_light"
    elif elevation > 40 and cloud < 30:
        depth, label = "65-90ft", "high_sun_deep"
    else:
        depth, label = "50-70ft", "standard_corridor"

    if elevation < 10 or cloud > 80:
        score = 1.0
    elif elevation > 40 and cloud < 30:
        score = 0.7
    else:
        score = 0.85
    return CorridorAdvice(
        score, label,
        recommendation=f"Target depth {depth} ({label.replace('_', ' ')})",
        depth_range=depth,
        leader_advice='Short leaders (18-24") and a slow troll (1.5-2.5 kts) for flossing',
    )


def night_fraction(
    start: datetime, hours: float, sunrise: Optional[datetime], sunset: Optional[datetime]
) -> Optional[float]:
    """Share (0..1) of ``hours`` from ``start`` spent between sunset and sunrise.

    Sunrise and sunset are taken as the same every day, so the night before
    and the night after the given day are both counted.
    """
    if sunrise is None or sunset is None or hours <= 0:
        return None
    sunrise, sunset = align_to(sunrise, start), align_to(sunset, start)
    end = start + timedelta(hours=hours)
    dark = 0.0
    for offset in (-1, 0, 1):
        night_start = sunset + timedelta(days=offset - 1)
        night_end = sunrise + timedelta(days=offset)
        overlap = (min(end, night_end) - max(start, night_start)).total_seconds()
        if overlap > 0:
            dark += overlap
    return min(dark / (hours * 3600.0), 1.0)


def prawn_darkness(moon_illumination_pct: float, is_night: bool) -> PrimitiveResult:
    """Prey that hides on bright nights: new moon and darkness fill the traps."""
    moon = float(moon_illumination_pct)
    if is_night and moon < 25:
        return PrimitiveResult(1.0, "new_moon_ideal", recommendation="New moon at night: peak prawn activity")
    if is_night and moon < 60:
        return PrimitiveResult(0.85, "dark", recommendation="Dark night: good trap activity")
    if moon >= 75:
        return PrimitiveResult(0.5, "bright", recommendation="Bright moon: prawns forage by sight and trap poorly")
    return PrimitiveResult(0.7, "moderate")

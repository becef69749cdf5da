"""Physics primitive library.

Pure functions that turn one or two physical measurements into a 0..1 score
plus a short label. Primitives do not know about species; factor calculators
in ``species_factors`` decide which ones to call and with what defaults.

Canonical units: knots for wind and current, metres for heights and tidal
range, seconds for periods, hPa for pressure, mm for precipitation, °C.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from .const import DEFAULT_PRESSURE_SAMPLE_MINUTES


@dataclass(frozen=True)
class PrimitiveResult:
    score: float
    label: str
    warning: Optional[str] = None
    recommendation: Optional[str] = None


@dataclass(frozen=True)
class WindTideResult(PrimitiveResult):
    is_opposing: bool = False
    severity: str = "calm"


@dataclass(frozen=True)
class SwellResult(PrimitiveResult):
    ratio: Optional[float] = None  # period / height, None when flat


@dataclass(frozen=True)
class FreshetResult(PrimitiveResult):
    is_blown_out: bool = False
    cause: Optional[str] = None


@dataclass(frozen=True)
class TrollabilityResult(PrimitiveResult):
    depth_penalty_pct: int = 0


@dataclass(frozen=True)
class DriftResult(PrimitiveResult):
    drift_speed_kts: float = 0.0
    drift_direction_deg: float = 0.0
    can_hold_position: bool = True


@dataclass(frozen=True)
class HeaveResult(PrimitiveResult):
    heave_rate: float = 0.0  # m/s of vertical motion


@dataclass(frozen=True)
class TidalShoulderResult(PrimitiveResult):
    feeding: float = 0.0
    fishability: float = 0.0


@dataclass(frozen=True)
class PressureTrendResult(PrimitiveResult):
    delta_3h: float = 0.0
    delta_6h: float = 0.0


@dataclass(frozen=True)
class BarometricResult(PrimitiveResult):
    rate_hpa_per_hour: float = 0.0


@dataclass(frozen=True)
class SeaStateResult(PrimitiveResult):
    is_safe: bool = True
    wave_height_m: float = 0.0


@dataclass(frozen=True)
class StormTriggerResult(PrimitiveResult):
    is_active: bool = False


@dataclass(frozen=True)
class ThermalGateResult(PrimitiveResult):
    is_cold: bool = False


@dataclass(frozen=True)
class ThermalBlockadeResult(PrimitiveResult):
    is_stacking: bool = False


@dataclass(frozen=True)
class TreadmillResult(PrimitiveResult):
    ground_speed: str = "slow"


@dataclass(frozen=True)
class ScentResult(PrimitiveResult):
    average_current_kts: float = 0.0
    max_current_kts: float = 0.0
    trap_roll_risk: bool = False


@dataclass(frozen=True)
class NocturnalFloodResult(PrimitiveResult):
    multiplier: float = 1.0
    night_pct: float = 0.0


@dataclass(frozen=True)
class RetrievalResult(PrimitiveResult):
    is_safe: bool = True
    is_slack: bool = False
    warnings: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CatenaryResult(PrimitiveResult):
    max_safe_current_kts: float = 0.0


@dataclass(frozen=True)
class SlackWindowResult(PrimitiveResult):
    minutes: int = 0
    multiplier: float = 1.0


def _speed(v: Optional[float]) -> float:
    if v is None or not math.isfinite(v):
        return 0.0
    return abs(float(v))


def _height(v: Optional[float]) -> float:
    if v is None or not math.isfinite(v):
        return 0.0
    return max(0.0, float(v))


def angle_difference(a: float, b: float) -> float:
    """Smallest angle between two bearings, 0..180."""
    diff = abs(float(a) - float(b)) % 360.0
    if diff > 180.0:
        diff = 360.0 - diff
    return diff


# ---------------------------------------------------------------------------
# Sea state
# ---------------------------------------------------------------------------


def wind_current_interaction(
    wind_direction_deg: float,
    wind_speed_kts: float,
    current_direction_deg: float,
    current_speed_kts: float,
) -> WindTideResult:
    """Score how wind and tidal current interact.

    Wind direction is where the wind comes FROM, current direction is where
    the water flows TOWARDS. When those differ by more than 135 degrees the
    wind blows against the flow and stands waves up.
    """
    wind = _speed(wind_speed_kts)
    current = _speed(current_speed_kts)
    diff = angle_difference(wind_direction_deg, current_direction_deg)
    opposing = diff > 135.0
    energy = wind * 0.7 + current * 0.3

    if opposing:
        if wind > 20 or energy > 25:
            return WindTideResult(
                0.2, "dangerous",
                warning="Wind against current: steep breaking seas, small craft should stay in",
                recommendation="Stay in sheltered water until the tide turns",
                is_opposing=True, severity="dangerous",
            )
        if wind > 15 or energy > 18:
            return WindTideResult(
                0.4, "rough",
                warning="Wind against current: expect steep, uncomfortable chop",
                recommendation="Fish the lee or wait for the tide to turn",
                is_opposing=True, severity="rough",
            )
        if wind > 10 or energy > 12:
            return WindTideResult(
                0.6, "moderate",
                warning="Wind against current: some chop",
                is_opposing=True, severity="moderate",
            )
        return WindTideResult(0.8, "moderate", is_opposing=True, severity="moderate")

    if diff < 45 and wind < 20:
        return WindTideResult(1.0, "calm", severity="calm")
    if wind > 25:
        return WindTideResult(
            0.5, "rough",
            warning="Strong wind even though it runs with the current",
            severity="rough",
        )
    if wind > 15:
        return WindTideResult(0.7, "moderate", severity="moderate")
    return WindTideResult(0.9, "calm", severity="calm")


def swell_comfort(height_m: float, period_s: float) -> SwellResult:
    """Score swell by period-to-height ratio with absolute height caps."""
    height = _height(height_m)
    if height <= 0.3:
        return SwellResult(1.0, "flat")

    period = _height(period_s)
    ratio = period / height
    warning = None
    if ratio >= 8.0:
        score, label = 1.0, "comfortable"
    elif ratio >= 5.0:
        score, label = 0.85, "comfortable"
    elif ratio >= 4.0:
        score, label = 0.7, "moderate"
    elif ratio >= 3.5:
        score, label = 0.5, "uncomfortable"
        warning = "Short-period swell: choppy ride"
    elif ratio >= 3.0:
        score, label = 0.3, "uncomfortable"
        warning = "Very short-period swell: uncomfortable, possibly hazardous"
    else:
        score, label = 0.1, "dangerous"
        warning = "Steep breaking swell: not suitable for small craft"

    if height > 3.0:
        score = min(score, 0.3)
        label = "dangerous"
        warning = f"Swell of {height:.1f} m is beyond a safe small-craft limit"
    elif height > 2.0 and ratio < 5.0:
        score = min(score, 0.4)
        if label != "dangerous":
            label = "uncomfortable"
        warning = warning or "Large swell with a short period: use caution"

    return SwellResult(score, label, warning=warning, ratio=ratio)


def sea_state(
    wind_speed_kts: Optional[float],
    gust_kts: Optional[float],
    wave_height_m: float,
    max_wind_kts: float = 25.0,
    max_gust_kts: float = 35.0,
    max_wave_height_m: float = 2.0,
) -> SeaStateResult:
    """Merged wind and wave score for trolling; light chop scores best."""
    wind = _speed(wind_speed_kts)
    gust = _speed(gust_kts)
    wave = _height(wave_height_m)

    if wind > max_wind_kts or gust > max_gust_kts:
        return SeaStateResult(
            0.0, "dangerous_wind",
            warning=f"Dangerous wind: {round(wind)} kts (gusts {round(gust)} kts)",
            is_safe=False, wave_height_m=wave,
        )
    if wave > max_wave_height_m:
        return SeaStateResult(
            0.0, "dangerous_waves",
            warning=f"Dangerous wave height: {wave:.1f} m",
            is_safe=False, wave_height_m=wave,
        )
    if 0.3 <= wave <= 0.8 and 5 <= wind <= 15:
        return SeaStateResult(1.0, "salmon_chop", wave_height_m=wave)
    if wave < 0.3 and wind < 5:
        return SeaStateResult(0.7, "calm_glassy", wave_height_m=wave)
    if wave <= 1.0 and wind <= 18:
        return SeaStateResult(0.8, "moderate_chop", wave_height_m=wave)
    if wave <= 1.5 and wind <= 22:
        return SeaStateResult(0.5, "rough", wave_height_m=wave)
    return SeaStateResult(0.25, "very_rough", wave_height_m=wave)


def surface_texture(wind_speed_kts: Optional[float]) -> PrimitiveResult:
    """Surface-feeding schools want a ripple: glass is spooky, whitecaps scatter them."""
    wind = _speed(wind_speed_kts)
    if wind < 4:
        return PrimitiveResult(0.5, "glass_calm", recommendation="Glassy water: lengthen leaders and keep noise down")
    if wind <= 12:
        return PrimitiveResult(1.0, "ideal_ripple")
    if wind <= 18:
        return PrimitiveResult(0.8, "choppy")
    return PrimitiveResult(0.4, "rough", warning="Whitecaps break up surface schools")


# ---------------------------------------------------------------------------
# Swell for bottom fishing
# ---------------------------------------------------------------------------


def jigging_conditions(height_m: float, period_s: float) -> SwellResult:
    """Boat motion as it affects keeping a jig in contact with the bottom."""
    height = _height(height_m)
    if height < 0.5:
        return SwellResult(1.0, "perfect")

    period = _height(period_s)
    ratio = period / height
    warning = None
    if ratio < 4.0:
        score, label = 0.2, "unfishable"
        warning = "Short steep swell: cannot keep bottom contact"
    elif ratio < 6.0:
        score, label = 0.5, "difficult"
    elif ratio < 8.0:
        score, label = 0.75, "good"
    else:
        score, label = 1.0, "perfect"

    if height > 2.0:
        score = min(score, 0.3)
        label = "unfishable"
        warning = f"Swell of {height:.1f} m: jigging not practical"
    return SwellResult(score, label, warning=warning, ratio=ratio)


def swell_heave(height_m: float, period_s: float) -> HeaveResult:
    """Vertical heave rate (pi * H / T) and how it affects holding bait on the bottom."""
    height = _height(height_m)
    if height < 0.3:
        return HeaveResult(1.0, "stable", heave_rate=0.0)

    period = max(_height(period_s), 1.0)
    rate = math.pi * height / period
    warning = None
    if rate < 0.3:
        score, label = 1.0 - (rate / 0.3) * 0.1, "stable"
    elif rate < 0.5:
        score, label = 0.8 - ((rate - 0.3) / 0.2) * 0.2, "manageable"
    elif rate < 0.8:
        score, label = 0.5 - ((rate - 0.5) / 0.3) * 0.2, "uncomfortable"
        warning = "Noticeable heave: hard to feel bites on the bottom"
    else:
        score, label = max(0.2 - ((rate - 0.8) / 0.5) * 0.2, 0.0), "unfishable"
        warning = "Heavy heave: bottom fishing impractical"

    if height > 2.0:
        score = min(score, 0.2)
        label = "unfishable"
        warning = f"Swell of {height:.1f} m: bottom fishing impractical"
    return HeaveResult(score, label, warning=warning, heave_rate=rate)


# ---------------------------------------------------------------------------
# River and runoff
# ---------------------------------------------------------------------------


def freshet_status(precip_24h_mm: Optional[float], max_temp_24h_c: Optional[float], month: int) -> FreshetResult:
    """River runoff state from 24 h rain and snowmelt heat.

    ``month`` is 1..12; snowmelt freshet season is April through July.
    """
    precip = _height(precip_24h_mm)
    max_temp = float(max_temp_24h_c) if max_temp_24h_c is not None else 0.0
    heavy = precip > 40
    moderate = precip > 25
    in_season = 4 <= month <= 7
    snowmelt = in_season and max_temp > 28

    if heavy and snowmelt:
        return FreshetResult(
            0.0, "blown_out",
            warning="Blown out: heavy rain on top of snowmelt, give the rivers 2-3 days",
            is_blown_out=True, cause="rain_and_snowmelt",
        )
    if heavy:
        return FreshetResult(
            0.1, "blown_out",
            warning="Blown out: heavy rain has muddied the river mouths",
            is_blown_out=True, cause="heavy_rain",
        )
    if snowmelt:
        return FreshetResult(
            0.15, "blown_out",
            warning="Freshet: hot weather is pushing glacial runoff",
            is_blown_out=True, cause="snowmelt",
        )
    if moderate:
        return FreshetResult(0.4, "muddy", warning="Rain may stain water near river mouths", cause="moderate_rain")
    if precip > 15:
        return FreshetResult(0.7, "stained", cause="light_rain")
    if in_season and max_temp > 20:
        return FreshetResult(0.6, "stained", cause="warm_runoff")
    return FreshetResult(1.0, "clear")


def precipitation_score(precip_mm: Optional[float]) -> PrimitiveResult:
    precip = _height(precip_mm)
    if precip <= 0.1:
        return PrimitiveResult(0.9, "dry")
    if precip <= 2:
        return PrimitiveResult(1.0, "light_rain")
    if precip <= 5:
        return PrimitiveResult(0.7, "moderate_rain")
    if precip <= 10:
        return PrimitiveResult(0.4, "heavy_rain")
    return PrimitiveResult(0.2, "very_heavy_rain")


def water_clarity(precip_24h_mm: Optional[float]) -> PrimitiveResult:
    if _height(precip_24h_mm) > 15:
        return PrimitiveResult(0.5, "stained")
    return PrimitiveResult(1.0, "clear")


# ---------------------------------------------------------------------------
# Tide and current
# ---------------------------------------------------------------------------


def trollability(
    tidal_range_m: float,
    minutes_to_slack: float,
    current_speed_kts: Optional[float],
) -> TrollabilityResult:
    """How well gear holds depth on a troll given the exchange size and timing."""
    tidal_range = _height(tidal_range_m)
    minutes = _height(minutes_to_slack)
    current = _speed(current_speed_kts)
    hours = minutes / 60.0
    large = tidal_range > 3.5
    near_slack = minutes <= 90

    if large and not near_slack:
        if hours > 4 or current > 3.5:
            return TrollabilityResult(
                0.2, "untrollable",
                warning="Big exchange mid-flood: gear will blow back badly",
                recommendation="Fish the slack window or add a lot of weight",
                depth_penalty_pct=70,
            )
        if hours > 3 or current > 2.5:
            return TrollabilityResult(
                0.35, "heavy_blowback",
                recommendation="Heavy blowback: drop gear 50% deeper than usual",
                depth_penalty_pct=50,
            )
        if hours > 2 or current > 1.5:
            return TrollabilityResult(
                0.55, "moderate_blowback",
                recommendation="Moderate blowback: drop gear 30% deeper",
                depth_penalty_pct=30,
            )
        return TrollabilityResult(
            0.75, "light_blowback",
            recommendation="Light blowback: drop gear 15% deeper",
            depth_penalty_pct=15,
        )
    if large and near_slack:
        return TrollabilityResult(
            1.0, "prime_time",
            recommendation="PRIME TIME: big exchange near slack, gear tracks true",
        )
    if tidal_range > 2.5 and minutes > 150:
        return TrollabilityResult(0.8, "light_blowback", depth_penalty_pct=10)
    return TrollabilityResult(1.0, "easy")


def tidal_current(current_speed_kts: Optional[float], is_rising: Optional[bool]) -> PrimitiveResult:
    """Trolling current preference: moving water, flood slightly favoured."""
    current = _speed(current_speed_kts)
    if 0.5 <= current <= 2.0:
        score, label = 1.0, "optimal_current"
    elif 0.3 <= current < 0.5:
        score, label = 0.75, "light_current"
    elif current < 0.3:
        score, label = 0.5, "slack_tide"
    elif current <= 3.5:
        score, label = 0.4, "strong_current"
    else:
        score, label = 0.1, "dangerous_current"

    if is_rising and score > 0.3:
        score = min(score + 0.1, 1.0)
        label += "_incoming"
    return PrimitiveResult(score, label)


def current_flow(current_speed_kts: Optional[float], minutes_to_slack: Optional[float]) -> PrimitiveResult:
    """Rip-line current for a visual hunter; a turning tide rescues slow water."""
    current = _speed(current_speed_kts)
    tide_turn = minutes_to_slack is not None and minutes_to_slack <= 45

    if 1.5 <= current <= 3.0:
        score, label = 1.0, "optimal_flow"
    elif 1.0 <= current < 1.5:
        score, label = 0.8, "good_flow"
    elif 3.0 < current <= 4.0:
        score, label = 0.5, "strong_flow"
    elif 0.5 <= current < 1.0:
        score, label = 0.6, "light_flow"
    elif current < 0.5:
        score, label = (0.8, "tide_turn") if tide_turn else (0.3, "slack")
    else:
        score, label = 0.2, "ripping"

    if tide_turn and score < 0.8:
        score = min(score + 0.15, 1.0)
        label += "_turning"
    return PrimitiveResult(score, label)


def tidal_shoulder(current_speed_kts: Optional[float]) -> TidalShoulderResult:
    """Ambush predators feed on the shoulder of the tide while gear still fishes."""
    current = _speed(current_speed_kts)
    if current < 0.3:
        feeding, fishability, phase = 0.7, 1.0, "dead_slack"
    elif current < 0.5:
        feeding, fishability, phase = 0.85, 0.9, "shoulder"
    elif current <= 1.5:
        feeding, fishability, phase = 1.0, 0.7, "shoulder"
    elif current <= 2.0:
        feeding, fishability, phase = 0.6, 0.4, "moderate_flow"
    else:
        feeding, fishability, phase = 0.2, 0.1, "ripping"

    recommendation = "Shoulder tide: bait is moving and gear still reaches bottom" if phase == "shoulder" else None
    score = 0.6 * feeding + 0.4 * fishability
    return TidalShoulderResult(score, phase, recommendation=recommendation, feeding=feeding, fishability=fishability)


def slack_decay(current_speed_kts: Optional[float]) -> PrimitiveResult:
    """Exponential preference for slack water when fishing straight down."""
    current = _speed(current_speed_kts)
    score = max(float(np.exp(-0.9 * current)), 0.05)
    if current <= 0.1:
        label = "perfect_slack"
    elif current <= 0.3:
        label = "near_slack"
    elif current <= 0.5:
        label = "good_window"
    elif current <= 1.0:
        label = "moderate_flow"
    elif current <= 1.5:
        label = "difficult"
    else:
        label = "not_fishable"
    return PrimitiveResult(score, label)


def tidal_slope(minutes_to_slack: Optional[float], current_speed_kts: Optional[float]) -> PrimitiveResult:
    """Flatfish bite best around the turn; use timing when known, else current."""
    if minutes_to_slack is not None:
        minutes = _height(minutes_to_slack)
        if minutes <= 30:
            return PrimitiveResult(1.0, "slack_window")
        if minutes <= 60:
            return PrimitiveResult(0.9, "near_slack")
        if minutes <= 90:
            return PrimitiveResult(0.7, "approaching_slack")
        if minutes <= 120:
            return PrimitiveResult(0.5, "mid_tide")
        return PrimitiveResult(0.3, "full_flow")

    current = _speed(current_speed_kts)
    if current <= 0.3:
        return PrimitiveResult(1.0, "slack_window")
    if current <= 0.8:
        return PrimitiveResult(0.85, "light_flow")
    if current <= 1.5:
        return PrimitiveResult(0.5, "moderate_flow")
    if current <= 2.5:
        return PrimitiveResult(0.3, "strong_flow")
    return PrimitiveResult(0.1, "ripping")


def tidal_exchange(tidal_range_m: Optional[float]) -> PrimitiveResult:
    """Moderate exchanges spread scent without making slack too short."""
    tidal_range = _height(tidal_range_m)
    if 2.5 <= tidal_range <= 4.0:
        return PrimitiveResult(1.0, "optimal_exchange")
    if 2.0 <= tidal_range < 2.5:
        return PrimitiveResult(0.9, "good_exchange")
    if 4.0 < tidal_range <= 5.0:
        return PrimitiveResult(0.8, "large_exchange")
    if 1.5 <= tidal_range < 2.0:
        return PrimitiveResult(0.7, "small_exchange")
    if tidal_range > 5.0:
        return PrimitiveResult(0.5, "extreme_exchange")
    return PrimitiveResult(0.4, "minimal_exchange")


def estuary_flush(is_rising: Optional[bool], tidal_range_m: Optional[float]) -> PrimitiveResult:
    """An ebb pulls estuary bait out to schooling fish; bigger ranges flush harder."""
    if is_rising:
        return PrimitiveResult(0.4, "flood_tide")
    tidal_range = _height(tidal_range_m)
    if tidal_range > 3.0:
        return PrimitiveResult(1.0, "strong_flush", recommendation="Strong ebb: fish the estuary rip lines")
    if tidal_range > 2.0:
        return PrimitiveResult(0.85, "good_flush")
    if tidal_range > 1.0:
        return PrimitiveResult(0.65, "moderate_flush")
    return PrimitiveResult(0.5, "weak_flush")


def staging_seams(current_speed_kts: Optional[float]) -> PrimitiveResult:
    """Staging fish hold in soft water off river mouths."""
    current = _speed(current_speed_kts)
    if current < 0.3:
        return PrimitiveResult(0.5, "dead_slack")
    if 0.5 <= current <= 1.5:
        return PrimitiveResult(1.0, "soft_water", recommendation="Soft water: fish the staging seams")
    if 1.5 < current <= 2.5:
        return PrimitiveResult(0.7, "moderate")
    return PrimitiveResult(0.3, "fast_water")


# ---------------------------------------------------------------------------
# Drift
# ---------------------------------------------------------------------------


def resultant_drift(
    wind_speed_kts: Optional[float],
    wind_direction_deg: float,
    current_speed_kts: Optional[float],
    current_direction_deg: float,
) -> DriftResult:
    """Boat drift from wind (about 4% of wind speed, downwind) plus current."""
    wind_drift = 0.04 * _speed(wind_speed_kts)
    current = _speed(current_speed_kts)
    bearings = np.radians([float(wind_direction_deg) + 180.0, float(current_direction_deg)])
    speeds = np.array([wind_drift, current])
    east = float(np.sum(speeds * np.sin(bearings)))
    north = float(np.sum(speeds * np.cos(bearings)))
    drift = float(np.hypot(east, north))
    direction = float(np.degrees(np.arctan2(east, north))) % 360.0

    if drift <= 0.3:
        score, label, hold = 1.0, "vertical", True
    elif drift <= 0.8:
        score, label, hold = 0.9 - ((drift - 0.3) / 0.5) * 0.1, "slow_drift", True
    elif drift <= 1.2:
        score, label, hold = 0.7 - ((drift - 0.8) / 0.4) * 0.2, "moderate_drift", True
    elif drift <= 1.5:
        score, label, hold = 0.4 - ((drift - 1.2) / 0.3) * 0.3, "fast_drift", True
    else:
        score, label, hold = max(0.1 - (drift - 1.5) * 0.1, 0.0), "uncontrollable", False

    warning = None
    recommendation = None
    if not hold:
        warning = f"Drift of {drift:.1f} kts: cannot hold over structure"
    elif label == "vertical":
        recommendation = "Near-vertical drift: gear stays in the strike zone"
    return DriftResult(
        score, label, warning=warning, recommendation=recommendation,
        drift_speed_kts=drift, drift_direction_deg=direction, can_hold_position=hold,
    )


# ---------------------------------------------------------------------------
# Pressure
# ---------------------------------------------------------------------------


def _lookback(history: Sequence[float], hours: float, sample_minutes: int) -> float:
    steps = int(round(hours * 60.0 / max(sample_minutes, 1)))
    if steps > 0 and len(history) >= steps:
        return float(history[len(history) - steps])
    return float(history[0])


def pressure_trend(
    current_hpa: float,
    history_hpa: Sequence[float] = (),
    sample_minutes: int = DEFAULT_PRESSURE_SAMPLE_MINUTES,
) -> PressureTrendResult:
    """Falling pressure ahead of weather triggers feeding; bluebird highs shut it down.

    ``history_hpa`` is ordered oldest to newest and is assumed to start about
    six hours back. Without at least two samples the absolute pressure is used.
    """
    current = float(current_hpa)
    if len(history_hpa) < 2:
        if current < 1008:
            score, label = 0.9, "low"
        elif current < 1013:
            score, label = 0.7, "below_normal"
        elif current <= 1017:
            score, label = 0.5, "normal"
        elif current <= 1022:
            score, label = 0.4, "high"
        else:
            score, label = 0.2, "very_high"
        return PressureTrendResult(score, label)

    delta_3h = current - _lookback(history_hpa, 3.0, sample_minutes)
    delta_6h = current - float(history_hpa[0])

    if delta_6h < -2.5 or delta_3h < -1.5:
        score, label = 1.0, "rapidly_falling"
    elif delta_6h < -1.0 or delta_3h < -0.5:
        score, label = 0.85, "falling"
    elif -1.0 <= delta_6h <= 1.0 and -0.5 <= delta_3h <= 0.5:
        score, label = 0.5, "stable"
    else:
        score, label = 0.25, "rising"
    return PressureTrendResult(score, label, delta_3h=delta_3h, delta_6h=delta_6h)


def pressure_tendency(current_hpa: Optional[float], history_hpa: Sequence[float] = ()) -> str:
    """Coarse tendency label over the whole history window."""
    if current_hpa is None or not history_hpa:
        return "stable"
    delta = float(current_hpa) - float(history_hpa[0])
    if delta < -2.0:
        return "crashing"
    if delta < -0.5:
        return "falling"
    if delta > 0.5:
        return "rising"
    return "stable"


def barometric_stability(
    current_hpa: Optional[float],
    history_hpa: Sequence[float] = (),
    sample_minutes: int = DEFAULT_PRESSURE_SAMPLE_MINUTES,
) -> BarometricResult:
    """Swim-bladder fish dislike any fast pressure change, falling worse than rising."""
    if current_hpa is None or not history_hpa:
        return BarometricResult(0.7, "no_history")

    span_hours = len(history_hpa) * max(sample_minutes, 1) / 60.0
    if span_hours <= 0:
        span_hours = 3.0
    rate = (float(current_hpa) - float(history_hpa[0])) / span_hours
    magnitude = abs(rate)

    warning = None
    if magnitude <= 0.5:
        score, label = 0.95, "stable"
    elif 0.5 < rate <= 1.5:
        score, label = 0.75 - (rate - 0.5) * 0.1, "slowly_rising"
    elif rate > 1.5:
        score, label = max(0.5 - ((rate - 1.5) / 2.0) * 0.2, 0.0), "rising_fast"
    elif -1.5 <= rate < -0.5:
        score, label = 0.7 - (magnitude - 0.5) * 0.2, "slowly_falling"
    elif -3.0 <= rate < -1.5:
        score, label = 0.4 - ((magnitude - 1.5) / 1.5) * 0.2, "falling"
    else:
        score, label = max(0.2 - ((magnitude - 3.0) / 2.0) * 0.2, 0.0), "crashing"
        warning = "Pressure crashing: fish likely off the bite"
    return BarometricResult(score, label, warning=warning, rate_hpa_per_hour=rate)


def storm_trigger(tendency: str, precip_mm: Optional[float]) -> StormTriggerResult:
    """Storm biters feed hardest on falling pressure with moderate rain."""
    rain = _height(precip_mm)
    falling = tendency in ("falling", "crashing")
    if falling and 5 <= rain <= 20:
        return StormTriggerResult(
            1.0, "strong", recommendation="Storm bite on: falling pressure and rain", is_active=True
        )
    if tendency == "falling" and 0 < rain < 5:
        return StormTriggerResult(0.9, "moderate", is_active=True)
    if 5 <= rain <= 20:
        return StormTriggerResult(0.8, "moderate", is_active=True)
    if falling:
        return StormTriggerResult(0.75, "light", is_active=True)
    if tendency == "rising" and rain < 1:
        return StormTriggerResult(0.5, "none")
    if rain > 25:
        return StormTriggerResult(0.3, "deluge")
    return StormTriggerResult(0.6, "light")


# ---------------------------------------------------------------------------
# Water temperature
# ---------------------------------------------------------------------------


def water_temperature_score(water_temp_c: Optional[float]) -> PrimitiveResult:
    if water_temp_c is None:
        return PrimitiveResult(0.5, "no_data")
    t = float(water_temp_c)
    if 9 <= t <= 13:
        return PrimitiveResult(1.0, "optimal")
    if 7 <= t < 9:
        return PrimitiveResult(0.75, "cool")
    if 13 < t <= 15:
        return PrimitiveResult(0.75, "warm")
    if 5 <= t < 7:
        return PrimitiveResult(0.5, "cold")
    if 15 < t <= 17:
        return PrimitiveResult(0.5, "too_warm")
    if t < 5:
        return PrimitiveResult(0.2, "very_cold")
    return PrimitiveResult(0.2, "too_hot")


def thermal_gate(water_temp_c: float) -> ThermalGateResult:
    t = float(water_temp_c)
    if t < 10:
        return ThermalGateResult(1.0, "cold_activation", is_cold=True)
    if t <= 12:
        return ThermalGateResult(0.9, "cold", is_cold=True)
    if t <= 14:
        return ThermalGateResult(0.6, "warming")
    return ThermalGateResult(0.3, "too_warm")


# ---------------------------------------------------------------------------
# Migrating interception
# ---------------------------------------------------------------------------


def thermal_blockade(river_temp_c: float) -> ThermalBlockadeResult:
    """A hot river stops the run and stacks fish in the salt; a cold one lets them straight through."""
    t = float(river_temp_c)
    if t >= 19.0:
        return ThermalBlockadeResult(
            1.0, "blocked",
            recommendation="Thermal blockade: river too hot, fish are stacking in the salt",
            is_stacking=True,
        )
    if t >= 17.0:
        return ThermalBlockadeResult(
            0.85, "holding",
            recommendation="Warm river: fish hesitating at the mouth, good saltwater fishing",
            is_stacking=True,
        )
    if t >= 15.0:
        return ThermalBlockadeResult(0.6, "passable", recommendation="Moderate river temperature: fish moving through, some holding")
    return ThermalBlockadeResult(0.3, "highway", recommendation="Cold river: fish run straight through, little holding")


def tidal_treadmill(is_ebb: bool, current_speed_kts: Optional[float]) -> TreadmillResult:
    """Fish swimming into an ebb hold position and are easy to intercept; a flood carries them past."""
    current = _speed(current_speed_kts)
    if is_ebb:
        if current > 1.5:
            return TreadmillResult(
                1.0, "excellent",
                recommendation="Ebb treadmill: fish holding against the current, near-zero ground speed",
                ground_speed="holding",
            )
        if current > 0.8:
            return TreadmillResult(0.85, "good", recommendation="Good ebb: fish moving slowly", ground_speed="slow")
        return TreadmillResult(0.6, "fair", recommendation="Light ebb: fish still mobile", ground_speed="slow")
    if current > 2.0:
        return TreadmillResult(
            0.3, "poor", recommendation="Strong flood: fish running fast, hard to intercept", ground_speed="fast"
        )
    if current > 1.0:
        return TreadmillResult(0.5, "fair", recommendation="Moderate flood: fish moving with the tide", ground_speed="moderate")
    return TreadmillResult(0.7, "good", recommendation="Light flood: fish assisted but still slow", ground_speed="slow")


# ---------------------------------------------------------------------------
# Trap fishing
# ---------------------------------------------------------------------------


def _scent_transport(current: float) -> float:
    if 0.8 <= current <= 1.5:
        return 1.0
    if 0.5 <= current < 0.8:
        return 0.7
    if 1.5 < current <= 2.5:
        return 0.5
    if 0.2 <= current < 0.5:
        return 0.4
    return 0.1


def scent_hydraulics(current_speeds_kts: Sequence[Optional[float]]) -> ScentResult:
    """How far a bait plume carries over a soak.

    Steady 0.8-1.5 kt current draws crabs from far down-current. Slack water
    pools the scent and fast water dilutes it. Any sample above 3 kts risks
    rolling the trap and cuts the score to 40%.
    """
    speeds = np.array([_speed(v) for v in current_speeds_kts], dtype=float)
    if speeds.size == 0:
        return ScentResult(0.5, "no_current_data", recommendation="No current data available")

    score = float(np.mean([_scent_transport(s) for s in speeds]))
    average = float(np.mean(speeds))
    peak = float(np.max(speeds))
    roll_risk = peak > 3.0
    warning = None
    if roll_risk:
        score *= 0.4
        label = "trap_roll_risk"
        warning = "Trap roll risk during soak - secure gear properly"
        rec = f"Current peaks at {peak:.1f} kts: shorten the soak or move to softer water"
    elif 0.8 <= average <= 1.5:
        label, rec = "optimal_plume", "Optimal scent dispersal: excellent recruitment"
    elif average < 0.5:
        label, rec = "pooling", "Low current: scent pools around the trap, time the set for moving water"
    elif average > 2.0:
        label, rec = "diluted", "Fast current: diluted scent and crabs struggle to walk up-current"
    else:
        label, rec = "moderate_plume", "Moderate scent dispersal"
    return ScentResult(
        score, label, warning=warning, recommendation=rec,
        average_current_kts=round(average, 2), max_current_kts=round(peak, 2), trap_roll_risk=roll_risk,
    )


def molt_quality(water_temp_c: float) -> PrimitiveResult:
    """Cold water means hard shells and full meat; warm water means molting."""
    t = float(water_temp_c)
    if t < 10:
        return PrimitiveResult(1.0, "hard_shell", recommendation="Cold water: hard shells with full meat")
    if t < 13:
        return PrimitiveResult(0.8, "good", recommendation="Moderate temperature: good meat fill, mostly hard shells")
    if t < 15:
        return PrimitiveResult(0.5, "fair", recommendation="Warming water: more soft shells, check traps often")
    return PrimitiveResult(0.3, "soft_shell", recommendation="Warm water: expect soft shells and molters, poor keeper ratio")


def nocturnal_flood(night_pct: float, is_flood: bool) -> NocturnalFloodResult:
    """Crabs ride the flood into the shallows, boldest in the dark."""
    night = float(night_pct)
    if is_flood and night > 50:
        return NocturnalFloodResult(
            1.0, "golden_window",
            recommendation="Golden window: flood tide and darkness, crabs moving into the shallows",
            multiplier=1.3, night_pct=night,
        )
    if is_flood and night > 25:
        return NocturnalFloodResult(
            0.8, "flood_partial_night",
            recommendation="Good timing: flood tide with some darkness",
            multiplier=1.15, night_pct=night,
        )
    if not is_flood and night > 50:
        return NocturnalFloodResult(
            0.7, "night_ebb",
            recommendation="Night feeding, but the ebb is carrying crabs out",
            multiplier=1.1, night_pct=night,
        )
    if is_flood:
        return NocturnalFloodResult(
            0.6, "day_flood", recommendation="Flood tide helps, but daytime activity is lower",
            multiplier=1.05, night_pct=night,
        )
    return NocturnalFloodResult(
        0.3, "day_ebb", recommendation="Ebb tide in daylight: the quietest crab period",
        multiplier=0.9, night_pct=night,
    )


def retrieval_safety(
    wind_speed_kts: Optional[float], current_speed_kts: Optional[float], wave_height_m: Optional[float]
) -> RetrievalResult:
    """Hauling a loaded pot: wind and waves decide safety, current how hard the haul is."""
    wind = _speed(wind_speed_kts)
    current = _speed(current_speed_kts)
    wave = _height(wave_height_m)
    warnings = []
    recommendations = []
    is_safe = True
    score = 1.0

    if wind > 25:
        is_safe, score = False, 0.0
        warnings.append(f"Dangerous: {round(wind)} kts wind - do not retrieve traps")
        recommendations.append("Wait for a weather window")
    elif wind > 20:
        is_safe, score = False, 0.2
        warnings.append(f"Unsafe wind {round(wind)} kts - difficult haul")
        recommendations.append("Consider waiting for better conditions")
    elif wind > 15:
        score = 0.5
        warnings.append(f"Challenging conditions: {round(wind)} kts wind")
        recommendations.append("Haul with care: secure footing essential")
    elif wind > 10:
        score = 0.7
        recommendations.append("Moderate wind: manageable with caution")

    if wave > 2.0:
        is_safe = False
        score = min(score, 0.1)
        warnings.append(f"Dangerous: {wave:.1f} m waves - hauling pots extremely hazardous")
    elif wave > 1.5:
        score = min(score, 0.4)
        warnings.append(f"Rough seas: {wave:.1f} m waves - difficult haul")

    is_slack = current < 0.5
    if is_slack:
        recommendations.append("Slack tide: ideal for retrieval, no prop tangle risk")
    elif current > 2.0:
        score *= 0.7
        warnings.append(f"Strong current {current:.1f} kts - pot will spin during the haul")
        recommendations.append("Retrieve at slack tide if possible")
    elif current > 1.5:
        score *= 0.85
        recommendations.append("Moderate current: control the pot during the haul")

    if not is_safe:
        label = "unsafe"
    elif score >= 0.7:
        label = "easy_haul"
    else:
        label = "hard_haul"
    return RetrievalResult(
        max(score, 0.0), label, warning=warnings[0] if warnings else None,
        is_safe=is_safe, is_slack=is_slack, warnings=tuple(warnings), recommendations=tuple(recommendations),
    )


def catenary_drag(current_speed_kts: Optional[float], depth_ft: float = 300.0) -> CatenaryResult:
    """Rope blowback on deep traps: the safe current drops 0.15 kts per 100 ft of depth."""
    current = _speed(current_speed_kts)
    depth = _height(depth_ft)
    max_safe = 1.1 - math.floor(depth / 100.0) * 0.15
    if current <= 0.2:
        return CatenaryResult(1.0, "slack", recommendation=f"Slack: traps hang vertical at {depth:.0f} ft", max_safe_current_kts=max_safe)
    if current <= max_safe:
        return CatenaryResult(
            0.8, "safe", recommendation=f"Manageable current for {depth:.0f} ft: minimal blowback", max_safe_current_kts=max_safe
        )
    if current <= max_safe + 0.15:
        return CatenaryResult(
            0.5, "moderate", recommendation=f"Moderate blowback at {depth:.0f} ft: add weight (15 lb+)", max_safe_current_kts=max_safe
        )
    warning = "Current too strong for safe retrieval - high gear loss risk"
    if current <= max_safe + 0.3:
        return CatenaryResult(
            0.2, "severe", warning=warning,
            recommendation="Severe blowback: rope angle over 30 degrees, traps walking",
            max_safe_current_kts=max_safe,
        )
    return CatenaryResult(
        0.05, "impossible", warning=warning,
        recommendation=f"Current {current:.1f} kts is too strong for {depth:.0f} ft",
        max_safe_current_kts=max_safe,
    )


def slack_window(tidal_range_m: Optional[float]) -> SlackWindowResult:
    """Neap tides leave a long slack to haul deep gear; springs leave a rush."""
    tidal_range = _height(tidal_range_m)
    if tidal_range < 2.0:
        return SlackWindowResult(1.0, "long", recommendation="Neap tide: long slack window, time for 4+ traps", minutes=70, multiplier=1.2)
    if tidal_range < 2.5:
        return SlackWindowResult(0.85, "moderate", recommendation="Moderate slack window: 3-4 traps", minutes=45, multiplier=1.1)
    if tidal_range < 3.5:
        return SlackWindowResult(0.6, "short", recommendation="Short slack window: 2-3 traps at most", minutes=30, multiplier=1.0)
    if tidal_range < 4.5:
        return SlackWindowResult(
            0.4, "very_short", recommendation="Spring tide: very short slack, risky for deep work", minutes=20, multiplier=0.8
        )
    return SlackWindowResult(
        0.2, "very_short", recommendation="Extreme spring tide: window too short for a safe deep haul", minutes=15, multiplier=0.7
    )

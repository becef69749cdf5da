"""Unit conversion helper utilities shared across the package.

All converters attempt to coerce to float and return None on failure.
Canonical units used by the scoring engine:
- wind, gusts and tidal current: knots (kts)
- swell height and tidal range: meters (m)
- swell period: seconds (s)
- temperature: Celsius (°C)
- pressure: hectopascals (hPa)
- precipitation: millimetres (mm)
- cloud cover: percent (0..100)
"""
from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from .const import DEFAULT_SAFETY_LIMITS, KMH_TO_KNOTS, KNOTS_TO_M_S, M_S_TO_KNOTS

_LOGGER = logging.getLogger(__name__)


def _to_float(v: Any) -> Optional[float]:
    try:
        if v is None or isinstance(v, bool):
            return None
        f = float(v)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(f):
        return None
    return f


# ---- Converters from source units -> canonical ----

def kmh_to_knots(v: Any) -> Optional[float]:
    """Convert km/h to knots."""
    f = _to_float(v)
    if f is None:
        return None
    return f * KMH_TO_KNOTS


def m_s_to_knots(v: Any) -> Optional[float]:
    """Convert m/s to knots."""
    f = _to_float(v)
    if f is None:
        return None
    return f * M_S_TO_KNOTS


def mph_to_knots(v: Any) -> Optional[float]:
    f = _to_float(v)
    if f is None:
        return None
    return f * 0.868976


def ft_to_m(v: Any) -> Optional[float]:
    """Convert feet to meters."""
    f = _to_float(v)
    if f is None:
        return None
    return f * 0.3048


def f_to_c(v: Any) -> Optional[float]:
    """Convert Fahrenheit to Celsius."""
    f = _to_float(v)
    if f is None:
        return None
    return (f - 32.0) * (5.0 / 9.0)


def inhg_to_hpa(v: Any) -> Optional[float]:
    """Convert inches of mercury to hectopascals (hPa)."""
    f = _to_float(v)
    if f is None:
        return None
    return f * 33.8638866667


# ---- Canonical -> other units ----

def knots_to_m_s(v: Any) -> Optional[float]:
    f = _to_float(v)
    if f is None:
        return None
    return f * KNOTS_TO_M_S


_WIND_CONVERTERS = {
    "kts": _to_float,
    "kmh": kmh_to_knots,
    "m_s": m_s_to_knots,
    "mph": mph_to_knots,
}
_HEIGHT_CONVERTERS = {"m": _to_float, "ft": ft_to_m}
_TEMP_CONVERTERS = {"c": _to_float, "f": f_to_c}
_PRESSURE_CONVERTERS = {"hpa": _to_float, "inhg": inhg_to_hpa}


def _convert(v: Any, unit: str, converters: Dict[str, Any], kind: str) -> Optional[float]:
    try:
        converter = converters[unit]
    except KeyError:
        raise ValueError(f"Unsupported {kind} unit: {unit!r}") from None
    return converter(v)


def wind_to_knots(v: Any, unit: str) -> Optional[float]:
    """Convert a wind/current speed given in ``unit`` to knots."""
    return _convert(v, unit, _WIND_CONVERTERS, "wind")


def height_to_m(v: Any, unit: str) -> Optional[float]:
    return _convert(v, unit, _HEIGHT_CONVERTERS, "height")


def temp_to_c(v: Any, unit: str) -> Optional[float]:
    return _convert(v, unit, _TEMP_CONVERTERS, "temperature")


def pressure_to_hpa(v: Any, unit: str) -> Optional[float]:
    return _convert(v, unit, _PRESSURE_CONVERTERS, "pressure")


def estimate_wave_height_m(wind_kts: Optional[float], cap_m: float) -> Optional[float]:
    """Rough wind-sea height estimate: 0.1 m per m/s of wind, capped."""
    wind_m_s = knots_to_m_s(wind_kts)
    if wind_m_s is None or wind_m_s <= 0:
        return None
    return min(wind_m_s * 0.1, cap_m)


# ---- Clamping ----

def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, float(value)))


def non_negative(v: Optional[float]) -> Optional[float]:
    """Clamp a magnitude to zero; None and non-finite values are missing."""
    f = _to_float(v)
    if f is None:
        return None
    return max(0.0, f)


def coerce_datetime(v: Any) -> Optional[datetime]:
    """Coerce ISO strings or epoch seconds/milliseconds to datetime.

    Aware datetimes keep their offset since local hour matters to scoring;
    naive values are returned unchanged.
    """
    if v is None:
        return None
    if isinstance(v, datetime):
        return v
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        val = float(v)
        if val > 1e12:
            val = val / 1000.0
        try:
            return datetime.fromtimestamp(val, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    s = str(v).strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        return None


# ---- Safety limits ----

# key -> (unit, min, max, default, optional)
_SAFETY_SCHEMA = {
    "max_wind_kts": ("kts", 0.0, 80.0, DEFAULT_SAFETY_LIMITS.get("max_wind_kts"), False),
    "max_gust_kts": ("kts", 0.0, 100.0, DEFAULT_SAFETY_LIMITS.get("max_gust_kts"), True),
    "max_wave_height_m": ("m", 0.0, 30.0, DEFAULT_SAFETY_LIMITS.get("max_wave_height_m"), True),
    "max_current_kts": ("kts", 0.0, 10.0, DEFAULT_SAFETY_LIMITS.get("max_current_kts"), True),
    "max_precip_mm": ("mm", 0.0, 200.0, DEFAULT_SAFETY_LIMITS.get("max_precip_mm"), True),
    "min_water_temp_c": ("°C", -2.0, 30.0, DEFAULT_SAFETY_LIMITS.get("min_water_temp_c"), True),
}


def align_to(value: Optional[datetime], reference: datetime) -> Optional[datetime]:
    """Express ``value`` on the same clock as ``reference`` so the two can be compared.

    A naive value is read in the reference's timezone. An aware value is
    converted to it, or keeps its wall-clock time when the reference is naive.
    """
    if value is None:
        return None
    tz = reference.tzinfo
    if value.tzinfo is None:
        return value if tz is None else value.replace(tzinfo=tz)
    if tz is None:
        return value.replace(tzinfo=None)
    return value.astimezone(tz)


def validate_and_normalize_safety_limits(
    safety_limits: Dict[str, Any],
    strict: bool = False,
    defaults: Optional[Dict[str, Any]] = None,
) -> Tuple[Dict[str, Any], List[str]]:
    """Validate and normalize safety limits given in canonical keys.

    Missing keys take the value from ``defaults`` (or the package defaults).
    On values that cannot be parsed the function warns and falls back to the
    default (warn-and-clamp mode); out-of-range values are clamped.
    If strict is True, ValueError is raised on parse failures and unknown keys.
    """
    base = dict(DEFAULT_SAFETY_LIMITS)
    if defaults:
        base.update(defaults)
    normalized: Dict[str, Any] = {}
    warnings: List[str] = []

    unknown = sorted(set(safety_limits) - set(_SAFETY_SCHEMA))
    if unknown:
        msg = f"unknown safety limit keys: {', '.join(unknown)}"
        if strict:
            raise ValueError(msg)
        warnings.append(msg + "; ignoring")

    for key, (unit, vmin, vmax, _default, optional) in _SAFETY_SCHEMA.items():
        default = base.get(key)
        raw = safety_limits.get(key)
        if raw is None:
            if default is None and not optional:
                msg = f"safety_limits[{key}] is required"
                if strict:
                    raise ValueError(msg)
                warnings.append(msg)
            normalized[key] = default
            continue
        val = _to_float(raw)
        if val is None:
            msg = f"safety_limits[{key}] could not be interpreted as number: {raw!r}"
            if strict:
                raise ValueError(msg)
            warnings.append(msg + "; using default/None")
            normalized[key] = default
            continue
        if val < vmin:
            warnings.append(f"safety_limits[{key}]={val} {unit} below min {vmin}; clamping to {vmin}")
            val = float(vmin)
        if val > vmax:
            warnings.append(f"safety_limits[{key}]={val} {unit} above max {vmax}; clamping to {vmax}")
            val = float(vmax)
        normalized[key] = float(val)

    for w in warnings:
        _LOGGER.warning("Safety limits: %s", w)
    return normalized, warnings

"""Data model for the scoring engine: environmental context in, score result out."""
from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

import voluptuous as vol

from . import unit_helpers
from .const import DEFAULT_PRESSURE_SAMPLE_MINUTES

_LOGGER = logging.getLogger(__name__)


class ContextError(ValueError):
    """Raised when a raw context payload is structurally invalid."""


# ---------------------------------------------------------------------------
# Environmental context
# ---------------------------------------------------------------------------


def _drop_non_finite(obj: Any) -> None:
    """Treat infinite or NaN readings as missing."""
    for f in fields(obj):
        value = getattr(obj, f.name)
        if isinstance(value, float) and not math.isfinite(value):
            object.__setattr__(obj, f.name, None)


@dataclass(frozen=True)
class Wind:
    speed_kts: Optional[float] = None
    direction_deg: Optional[float] = None  # direction the wind blows FROM
    gust_kts: Optional[float] = None

    def __post_init__(self) -> None:
        _drop_non_finite(self)


@dataclass(frozen=True)
class Pressure:
    current_hpa: Optional[float] = None
    history_hpa: Tuple[float, ...] = ()  # oldest -> newest
    sample_minutes: int = DEFAULT_PRESSURE_SAMPLE_MINUTES

    def __post_init__(self) -> None:
        _drop_non_finite(self)
        history = tuple(v for v in self.history_hpa if v is not None and math.isfinite(v))
        object.__setattr__(self, "history_hpa", history)


@dataclass(frozen=True)
class Swell:
    height_m: Optional[float] = None
    period_s: Optional[float] = None

    def __post_init__(self) -> None:
        _drop_non_finite(self)


@dataclass(frozen=True)
class Tide:
    current_speed_kts: Optional[float] = None
    current_direction_deg: Optional[float] = None  # direction the current flows TOWARDS
    tidal_range_m: Optional[float] = None
    is_rising: Optional[bool] = None
    minutes_to_slack: Optional[float] = None
    water_temp_c: Optional[float] = None

    def __post_init__(self) -> None:
        _drop_non_finite(self)


@dataclass(frozen=True)
class ContextOverrides:
    """Caller-supplied values that win over anything derived."""

    sun_elevation_deg: Optional[float] = None
    minutes_to_slack: Optional[float] = None
    tidal_range_m: Optional[float] = None
    precipitation_24h_mm: Optional[float] = None
    max_air_temp_24h_c: Optional[float] = None
    river_temp_c: Optional[float] = None
    target_depth_ft: Optional[float] = None
    soak_hours: Optional[float] = None
    region: Optional[str] = None
    in_conservation_area: bool = False
    fishery_open: Optional[bool] = None  # None: judge from the usual opening window

    def __post_init__(self) -> None:
        _drop_non_finite(self)


@dataclass(frozen=True)
class EnvironmentalContext:
    """A snapshot of the conditions at one instant and location.

    ``timestamp`` carries the local clock: hour-of-day and day-of-year are read
    from it as given. ``tide`` is None when no tide data is available.
    """

    timestamp: datetime
    sunrise: Optional[datetime] = None
    sunset: Optional[datetime] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    wind: Wind = field(default_factory=Wind)
    pressure: Pressure = field(default_factory=Pressure)
    precipitation_mm: Optional[float] = None
    cloud_cover_pct: Optional[float] = None
    air_temp_c: Optional[float] = None
    swell: Swell = field(default_factory=Swell)
    tide: Optional[Tide] = None
    bio_intel_text: Optional[str] = None
    overrides: ContextOverrides = field(default_factory=ContextOverrides)

    def __post_init__(self) -> None:
        _drop_non_finite(self)
        object.__setattr__(self, "sunrise", unit_helpers.align_to(self.sunrise, self.timestamp))
        object.__setattr__(self, "sunset", unit_helpers.align_to(self.sunset, self.timestamp))

    @classmethod
    def from_dict(
        cls,
        payload: Mapping[str, Any],
        wind_unit: str = "kts",
        height_unit: str = "m",
        temp_unit: str = "c",
        pressure_unit: str = "hpa",
    ) -> "EnvironmentalContext":
        """Build a context from a plain mapping.

        Numeric fields that cannot be parsed are treated as missing. Wind,
        gust and current speeds are converted from ``wind_unit`` to knots;
        swell height and tidal range from ``height_unit`` (m or ft); water
        and air temperature from ``temp_unit`` (c or f); pressure from
        ``pressure_unit`` (hpa or inhg).
        """
        from .schemas import CONTEXT_SCHEMA

        try:
            data = CONTEXT_SCHEMA(dict(payload))
        except vol.Invalid as exc:
            _LOGGER.error("Invalid context payload: %s", exc)
            raise ContextError(f"Invalid context payload: {exc}") from exc
        except TypeError as exc:
            raise ContextError("Context payload must be a mapping") from exc

        def _speed(v: Any) -> Optional[float]:
            return unit_helpers.wind_to_knots(v, wind_unit)

        def _height(v: Any) -> Optional[float]:
            return unit_helpers.height_to_m(v, height_unit)

        def _temp(v: Any) -> Optional[float]:
            return unit_helpers.temp_to_c(v, temp_unit)

        def _pressure(v: Any) -> Optional[float]:
            return unit_helpers.pressure_to_hpa(v, pressure_unit)

        wind_raw = data.get("wind") or {}
        pressure_raw = data.get("pressure") or {}
        swell_raw = data.get("swell") or {}
        tide_raw = data.get("tide")
        overrides_raw = data.get("overrides") or {}

        tide = None
        if tide_raw is not None:
            tide = Tide(
                current_speed_kts=_speed(tide_raw.get("current_speed")),
                current_direction_deg=tide_raw.get("current_direction"),
                tidal_range_m=_height(tide_raw.get("tidal_range")),
                is_rising=tide_raw.get("is_rising"),
                minutes_to_slack=tide_raw.get("minutes_to_slack"),
                water_temp_c=_temp(tide_raw.get("water_temperature")),
            )

        return cls(
            timestamp=data["timestamp"],
            sunrise=data.get("sunrise"),
            sunset=data.get("sunset"),
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
            wind=Wind(
                speed_kts=_speed(wind_raw.get("speed")),
                direction_deg=wind_raw.get("direction"),
                gust_kts=_speed(wind_raw.get("gust")),
            ),
            pressure=Pressure(
                current_hpa=_pressure(pressure_raw.get("current")),
                history_hpa=tuple(_pressure(v) for v in pressure_raw.get("history", []) if v is not None),
                sample_minutes=pressure_raw.get("sample_minutes", DEFAULT_PRESSURE_SAMPLE_MINUTES),
            ),
            precipitation_mm=data.get("precipitation"),
            cloud_cover_pct=data.get("cloud_cover"),
            air_temp_c=_temp(data.get("air_temperature")),
            swell=Swell(height_m=_height(swell_raw.get("height")), period_s=swell_raw.get("period")),
            tide=tide,
            bio_intel_text=data.get("bio_intel_text"),
            overrides=ContextOverrides(**overrides_raw),
        )


# ---------------------------------------------------------------------------
# Species configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SeasonalProfile:
    """One behavioural mode of a species and the weight table it uses."""

    mode_name: str
    date_range: str
    behavior_description: str
    weights: Mapping[str, float]
    months: Tuple[int, ...] = ()
    attributes: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))


@dataclass(frozen=True)
class FactorSpec:
    name: str
    calculator: str
    params: Mapping[str, Any]


@dataclass(frozen=True)
class StageSpec:
    """A configured modifier or safety predicate."""

    type: str
    params: Mapping[str, Any]
    advisory: bool = False


@dataclass(frozen=True)
class GatekeeperSpec:
    type: str
    params: Mapping[str, Any]
    floor: float = 0.0
    is_safe: bool = True
    in_season: Optional[bool] = None  # None: derive from the season curve


@dataclass(frozen=True)
class SpeciesConfig:
    id: str
    name: str
    archetype: str
    habitat: str
    max_score: float
    unsafe_ceiling: float
    precision: int
    factors: Mapping[str, FactorSpec]
    modes: Tuple[SeasonalProfile, ...]
    season_curve: Optional[Mapping[str, Any]]
    in_season_threshold: float
    modifiers: Tuple[StageSpec, ...]
    safety: Tuple[StageSpec, ...]
    gatekeepers: Tuple[GatekeeperSpec, ...]
    stage_order: Tuple[str, ...]
    safety_limits: Mapping[str, Any]
    advisories: Mapping[str, Any]


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FactorScore:
    value: Any
    weight: float
    score: float
    description: str


@dataclass(frozen=True)
class ModifierRecord:
    name: str
    fired: bool
    before: float
    after: float
    detail: Optional[str] = None


@dataclass(frozen=True)
class GatekeeperRecord:
    name: str
    triggered: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class Provenance:
    species: str
    seasonal_mode: Optional[str]
    weight_table: Dict[str, float]
    stages_run: Tuple[str, ...]
    base_score: Optional[float] = None
    modifiers: Tuple[ModifierRecord, ...] = ()
    safety_failures: Tuple[str, ...] = ()
    gatekeeper: Optional[GatekeeperRecord] = None
    intermediate: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ScoreResult:
    species: str
    total: float
    max_score: float
    factors: Dict[str, FactorScore]
    is_safe: bool
    is_in_season: bool
    safety_warnings: List[str]
    recommendations: List[str]
    advisories: List[str]
    seasonal_mode: Optional[str]
    provenance: Provenance

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

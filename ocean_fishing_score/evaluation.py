"""Per-call evaluation state shared by factor calculators, modifiers and safety checks.

A fresh ``EvaluationState`` is created for every scoring call and discarded
afterwards, so nothing leaks between calls. It resolves context fields to
clamped canonical values with neutral defaults, and memoizes the primitives
that more than one stage needs (wind against current, swell comfort, freshet).
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from . import light, physics
from .bio_intel import BaitSignal, BioIntelClassifier, PredatorSignal, PreySignal, RunIntelSignal, SchoolingSignal
from .const import (
    DEFAULT_AIR_TEMP_C,
    DEFAULT_CURRENT_DIRECTION_DEG,
    DEFAULT_SUN_ELEVATION_DEG,
    DEFAULT_SWELL_HEIGHT_M,
    DEFAULT_SWELL_PERIOD_S,
    DEFAULT_TIDAL_RANGE_M,
    DEFAULT_WIND_DIRECTION_DEG,
)
from .models import EnvironmentalContext, SeasonalProfile, SpeciesConfig
from .seasonal import season_score
from .unit_helpers import clamp, estimate_wave_height_m, non_negative


class EvaluationState:
    """Working state for one (species, context) evaluation."""

    def __init__(
        self,
        species: SpeciesConfig,
        profile: SeasonalProfile,
        context: EnvironmentalContext,
        classifier: BioIntelClassifier,
        safety_limits: Mapping[str, Any],
    ) -> None:
        self.species = species
        self.profile = profile
        self.context = context
        self.classifier = classifier
        self.safety_limits = safety_limits
        self.warnings: List[str] = []
        self.recommendations: List[str] = []
        self.signals: Dict[str, Any] = {}
        self.intermediate: Dict[str, Any] = {}
        self._memo: Dict[Any, Any] = {}

    # ---- bookkeeping ----

    def memo(self, key: Any, compute: Callable[[], Any]) -> Any:
        if key not in self._memo:
            self._memo[key] = compute()
        return self._memo[key]

    def warn(self, message: Optional[str]) -> None:
        if message and message not in self.warnings:
            self.warnings.append(message)

    def recommend(self, message: Optional[str], first: bool = False) -> None:
        if not message or message in self.recommendations:
            return
        if first:
            self.recommendations.insert(0, message)
        else:
            self.recommendations.append(message)

    def limit(self, key: str) -> Optional[float]:
        return self.safety_limits.get(key)

    # ---- time ----

    @property
    def month(self) -> int:
        return self.context.timestamp.month

    @property
    def hour(self) -> int:
        return self.context.timestamp.hour

    def sun_offsets(self) -> Optional[Tuple[float, float]]:
        ctx = self.context
        return light.sun_offsets(ctx.timestamp, ctx.sunrise, ctx.sunset)

    def sun_elevation(self) -> float:
        """Override, else an estimate from sun times, else a mid-morning default."""
        ctx = self.context
        if ctx.overrides.sun_elevation_deg is not None:
            return clamp(ctx.overrides.sun_elevation_deg, -90.0, 90.0)
        if ctx.sunrise is not None and ctx.sunset is not None:
            return self.memo(
                "sun_elevation",
                lambda: light.estimate_sun_elevation(ctx.timestamp, ctx.sunrise, ctx.sunset),
            )
        return DEFAULT_SUN_ELEVATION_DEG

    # ---- weather ----

    def wind_kts(self) -> float:
        return non_negative(self.context.wind.speed_kts) or 0.0

    def gust_kts(self) -> float:
        return non_negative(self.context.wind.gust_kts) or 0.0

    def wind_direction(self) -> float:
        d = self.context.wind.direction_deg
        return DEFAULT_WIND_DIRECTION_DEG if d is None else float(d) % 360.0

    def cloud(self) -> Optional[float]:
        c = self.context.cloud_cover_pct
        return None if c is None else clamp(c, 0.0, 100.0)

    def precipitation(self) -> float:
        return non_negative(self.context.precipitation_mm) or 0.0

    def precipitation_24h(self) -> float:
        override = self.context.overrides.precipitation_24h_mm
        if override is not None:
            return max(0.0, override)
        return self.precipitation()

    def max_air_temp_24h(self) -> float:
        ctx = self.context
        if ctx.overrides.max_air_temp_24h_c is not None:
            return ctx.overrides.max_air_temp_24h_c
        if ctx.air_temp_c is not None:
            return ctx.air_temp_c
        return DEFAULT_AIR_TEMP_C

    def swell_height(self, fallback: Optional[float] = None, estimate_cap: Optional[float] = None) -> float:
        """Measured swell, else a wind-sea estimate when a cap is given, else the fallback."""
        h = non_negative(self.context.swell.height_m)
        if h is not None:
            return h
        if estimate_cap is not None:
            estimate = estimate_wave_height_m(self.wind_kts(), estimate_cap)
            if estimate is not None:
                return estimate
        return DEFAULT_SWELL_HEIGHT_M if fallback is None else fallback

    def swell_period(self) -> float:
        p = non_negative(self.context.swell.period_s)
        return DEFAULT_SWELL_PERIOD_S if p is None else p

    # ---- tide ----

    @property
    def has_tide(self) -> bool:
        return self.context.tide is not None

    def current_kts(self) -> float:
        tide = self.context.tide
        if tide is None or tide.current_speed_kts is None:
            return 0.0
        return abs(float(tide.current_speed_kts))

    def is_rising(self) -> Optional[bool]:
        tide = self.context.tide
        return None if tide is None else tide.is_rising

    def current_direction(self, estimate_from_tide: bool = False) -> float:
        tide = self.context.tide
        if tide is not None and tide.current_direction_deg is not None:
            return float(tide.current_direction_deg) % 360.0
        if estimate_from_tide and tide is not None and tide.is_rising:
            return 0.0
        return DEFAULT_CURRENT_DIRECTION_DEG

    def minutes_to_slack(self) -> Optional[float]:
        ctx = self.context
        if ctx.overrides.minutes_to_slack is not None:
            return max(0.0, ctx.overrides.minutes_to_slack)
        if ctx.tide is not None and ctx.tide.minutes_to_slack is not None:
            return max(0.0, ctx.tide.minutes_to_slack)
        return None

    def tidal_range(self) -> float:
        ctx = self.context
        if ctx.overrides.tidal_range_m is not None:
            return max(0.0, ctx.overrides.tidal_range_m)
        if ctx.tide is not None and ctx.tide.tidal_range_m is not None:
            return abs(ctx.tide.tidal_range_m)
        return DEFAULT_TIDAL_RANGE_M

    def water_temp(self) -> Optional[float]:
        tide = self.context.tide
        return None if tide is None else tide.water_temp_c

    # ---- shared primitives ----

    def wind_tide(self, estimate_from_tide: bool = False) -> physics.WindTideResult:
        return self.memo(
            ("wind_tide", estimate_from_tide),
            lambda: physics.wind_current_interaction(
                self.wind_direction(),
                self.wind_kts(),
                self.current_direction(estimate_from_tide),
                self.current_kts(),
            ),
        )

    def swell_comfort(self) -> physics.SwellResult:
        return self.memo(
            "swell_comfort",
            lambda: physics.swell_comfort(self.swell_height(), self.swell_period()),
        )

    def freshet(self) -> physics.FreshetResult:
        return self.memo(
            "freshet",
            lambda: physics.freshet_status(self.precipitation_24h(), self.max_air_temp_24h(), self.month),
        )

    def season(self) -> Optional[Tuple[float, str]]:
        curve = self.species.season_curve
        if curve is None:
            return None
        return self.memo(
            "season",
            lambda: season_score(curve, self.context.timestamp.date(), self.context.overrides.region),
        )

    # ---- bio-intel ----

    def bait(self) -> BaitSignal:
        return self.memo("bait", lambda: self.classifier.classify_bait_presence(self.context.bio_intel_text))

    def predator(self) -> PredatorSignal:
        return self.memo("predator", lambda: self.classifier.detect_predator(self.context.bio_intel_text))

    def schooling(self) -> SchoolingSignal:
        return self.memo("schooling", lambda: self.classifier.detect_schooling(self.context.bio_intel_text))

    def prey(self) -> PreySignal:
        return self.memo("prey", lambda: self.classifier.detect_prey(self.context.bio_intel_text))

    def run_intel(self) -> RunIntelSignal:
        return self.memo("run_intel", lambda: self.classifier.detect_run_intel(self.context.bio_intel_text))

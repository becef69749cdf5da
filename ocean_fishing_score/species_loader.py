"""Species profile loader for Ocean Fishing Score (strict, no fallbacks)."""

from __future__ import annotations

import json
import logging
import os
from datetime import date
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

import numpy as np
import voluptuous as vol

from .const import PROFILES_FILENAME
from .gatekeepers import GATEKEEPERS
from .models import FactorSpec, GatekeeperSpec, SeasonalProfile, SpeciesConfig, StageSpec
from .modifiers import MODIFIERS
from .safety import SAFETY_CHECKS
from .schemas import PROFILES_SCHEMA
from .seasonal import season_score
from .species_factors import FACTOR_CALCULATORS
from .unit_helpers import validate_and_normalize_safety_limits

_LOGGER = logging.getLogger(__name__)

# Any fixed year works for checking that a curve evaluates for every month.
_CURVE_CHECK_YEAR = 2025


class SpeciesConfigError(RuntimeError):
    """Raised when species_profiles.json cannot be read or fails validation."""


def _freeze(value: Any) -> Any:
    """Recursively wrap mappings in read-only proxies and lists in tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


class SpeciesLoader:
    """Load and validate species profiles from the packaged JSON file.

    Strict behaviour: on any load or validation error this loader raises
    SpeciesConfigError and nothing is scored against a partial configuration.
    """

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = path or os.path.join(os.path.dirname(__file__), PROFILES_FILENAME)
        self._species: Optional[Dict[str, SpeciesConfig]] = None
        self._version: Optional[str] = None

    def load(self) -> "SpeciesLoader":
        """Read, validate and freeze every species profile. Returns self."""
        try:
            with open(self.path, "r", encoding="utf-8") as fp:
                raw = json.load(fp)
        except FileNotFoundError as exc:
            _LOGGER.exception("%s not found at %s", PROFILES_FILENAME, self.path)
            raise SpeciesConfigError(f"{PROFILES_FILENAME} missing") from exc
        except (OSError, ValueError) as exc:
            _LOGGER.exception("Failed to read %s: %s", self.path, exc)
            raise SpeciesConfigError(f"Failed to read {self.path}") from exc

        self._species, self._version = self.parse(raw)
        _LOGGER.info(
            "Loaded %s version %s with %d species", PROFILES_FILENAME, self._version, len(self._species)
        )
        return self

    @classmethod
    def parse(cls, raw: Any) -> Tuple[Dict[str, SpeciesConfig], str]:
        """Validate an already-decoded profiles document."""
        if not isinstance(raw, dict):
            _LOGGER.error("Species profiles root element is not a JSON object")
            raise SpeciesConfigError("Invalid species profiles: root not an object")
        try:
            data = PROFILES_SCHEMA(raw)
        except vol.Invalid as exc:
            _LOGGER.error("Species profiles failed schema validation: %s", exc)
            raise SpeciesConfigError(f"Invalid species profiles: {exc}") from exc

        species = {sid: cls._build_species(sid, sdata) for sid, sdata in data["species"].items()}
        return species, data["version"]

    # ---- validation ----

    @staticmethod
    def _fail(species_id: str, message: str) -> SpeciesConfigError:
        _LOGGER.error("Species %s: %s", species_id, message)
        return SpeciesConfigError(f"Species {species_id}: {message}")

    @classmethod
    def _build_species(cls, species_id: str, data: Dict[str, Any]) -> SpeciesConfig:
        factors: Dict[str, FactorSpec] = {}
        for name, spec in data["factors"].items():
            calculator = spec.get("calculator", name)
            if calculator not in FACTOR_CALCULATORS:
                raise cls._fail(species_id, f"unknown factor calculator {calculator!r}")
            factors[name] = FactorSpec(name, calculator, _freeze(spec["params"]))

        modes = tuple(cls._build_mode(species_id, mode, factors) for mode in data["seasonal_modes"])
        names = [mode.mode_name for mode in modes]
        if len(set(names)) != len(names):
            raise cls._fail(species_id, f"duplicate seasonal mode names {sorted(names)}")
        cls._check_month_partition(species_id, modes)

        modifiers = tuple(cls._build_stage(species_id, s, MODIFIERS, "modifier") for s in data["modifiers"])
        safety = tuple(cls._build_stage(species_id, s, SAFETY_CHECKS, "safety check") for s in data["safety"])

        gatekeepers = []
        for gate in data["gatekeepers"]:
            if gate["type"] not in GATEKEEPERS:
                raise cls._fail(species_id, f"unknown gatekeeper {gate['type']!r}")
            gatekeepers.append(
                GatekeeperSpec(
                    type=gate["type"],
                    params=_freeze(gate["params"]),
                    floor=gate["floor"],
                    is_safe=gate["is_safe"],
                    in_season=gate["in_season"],
                )
            )

        try:
            limits, _warnings = validate_and_normalize_safety_limits(data["safety_limits"], strict=True)
        except ValueError as exc:
            raise cls._fail(species_id, str(exc)) from exc

        curve = data["season_curve"]
        if curve is not None:
            cls._check_curve(species_id, curve)

        if data["unsafe_ceiling"] > data["max_score"]:
            raise cls._fail(species_id, "unsafe_ceiling exceeds max_score")

        return SpeciesConfig(
            id=species_id,
            name=data["name"],
            archetype=data["archetype"],
            habitat=data["habitat"],
            max_score=data["max_score"],
            unsafe_ceiling=data["unsafe_ceiling"],
            precision=data["precision"],
            factors=MappingProxyType(factors),
            modes=modes,
            season_curve=_freeze(curve) if curve is not None else None,
            in_season_threshold=data["in_season_threshold"],
            modifiers=modifiers,
            safety=safety,
            gatekeepers=tuple(gatekeepers),
            stage_order=tuple(data["stage_order"]),
            safety_limits=MappingProxyType(limits),
            advisories=_freeze(data["advisories"]),
        )

    @classmethod
    def _build_mode(
        cls, species_id: str, mode: Dict[str, Any], factors: Mapping[str, FactorSpec]
    ) -> SeasonalProfile:
        weights = mode["weights"]
        unknown = sorted(set(weights) - set(factors))
        if unknown:
            raise cls._fail(species_id, f"mode {mode['name']!r} weights unknown factors {unknown}")
        total = float(np.sum(list(weights.values())))
        if not np.isclose(total, 1.0, rtol=0.0, atol=1e-6):
            raise cls._fail(species_id, f"mode {mode['name']!r} weights sum to {total:.6f}, expected 1.0")
        return SeasonalProfile(
            mode_name=mode["name"],
            date_range=mode["date_range"],
            behavior_description=mode["behavior"],
            weights=MappingProxyType(dict(weights)),
            months=tuple(mode["months"]),
            attributes=_freeze(mode["attributes"]),
        )

    @classmethod
    def _check_month_partition(cls, species_id: str, modes: Tuple[SeasonalProfile, ...]) -> None:
        months: List[int] = [m for mode in modes for m in mode.months]
        if sorted(months) != list(range(1, 13)):
            raise cls._fail(species_id, "seasonal modes must cover each month exactly once")

    @classmethod
    def _build_stage(cls, species_id: str, spec: Dict[str, Any], registry: Mapping[str, Any], kind: str) -> StageSpec:
        if spec["type"] not in registry:
            raise cls._fail(species_id, f"unknown {kind} {spec['type']!r}")
        return StageSpec(type=spec["type"], params=_freeze(spec["params"]), advisory=spec["advisory"])

    @classmethod
    def _check_curve(cls, species_id: str, curve: Mapping[str, Any]) -> None:
        for month in range(1, 13):
            for day in (1, 15, 28):
                try:
                    season_score(curve, date(_CURVE_CHECK_YEAR, month, day))
                except (KeyError, TypeError, ValueError, IndexError) as exc:
                    raise cls._fail(species_id, f"season_curve cannot be evaluated: {exc!r}") from exc

    # ---- accessors ----

    def _ensure_loaded(self) -> Dict[str, SpeciesConfig]:
        if self._species is None:
            _LOGGER.error("SpeciesLoader used before profiles were loaded")
            raise SpeciesConfigError("Species profiles not loaded")
        return self._species

    @property
    def version(self) -> Optional[str]:
        return self._version

    def species_ids(self) -> List[str]:
        return list(self._ensure_loaded())

    def get_species(self, species_id: str) -> Optional[SpeciesConfig]:
        """Return the species configuration with the given id, or None."""
        return self._ensure_loaded().get(species_id)

    def get_all_species(self) -> List[SpeciesConfig]:
        return list(self._ensure_loaded().values())

    def get_species_by_habitat(self, habitat: str) -> List[SpeciesConfig]:
        """Return species by habitat type (e.g. 'saltwater' or 'estuary')."""
        return [s for s in self._ensure_loaded().values() if s.habitat == habitat]

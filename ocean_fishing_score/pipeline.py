"""The shared scoring pipeline.

gatekeepers -> weighted factors -> modifiers and safety (in the species'
stage order) -> clamp and round. Every species runs through ``evaluate``;
only the configuration differs.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional

import numpy as np

from .bio_intel import BioIntelClassifier
from .const import STAGE_MODIFIERS, STAGE_SAFETY
from .evaluation import EvaluationState
from .gatekeepers import GATEKEEPERS
from .models import (
    EnvironmentalContext,
    FactorScore,
    GatekeeperRecord,
    GatekeeperSpec,
    ModifierRecord,
    Provenance,
    ScoreResult,
    SpeciesConfig,
)
from .modifiers import MODIFIERS
from .safety import SAFETY_CHECKS
from .seasonal import select_profile
from .species_factors import FACTOR_CALCULATORS

_LOGGER = logging.getLogger(__name__)

UNSAFE_ADVICE = "Conditions unsafe - score capped"
STAGE_GATEKEEPERS = "gatekeepers"
STAGE_FACTORS = "factors"


def _finish(total: float, species: SpeciesConfig) -> float:
    return round(float(np.clip(total, 0.0, species.max_score)), species.precision)


def _advisories(species: SpeciesConfig, month: int) -> List[str]:
    advisories = list(species.advisories.get("always", ()))
    advisories.extend(species.advisories.get("by_month", {}).get(month, ()))
    return advisories


def _gatekeeper_result(
    species: SpeciesConfig, state: EvaluationState, gate: GatekeeperSpec, warning: str, advice: Optional[str]
) -> ScoreResult:
    _LOGGER.debug("%s: gatekeeper %s triggered: %s", species.id, gate.type, warning)
    return ScoreResult(
        species=species.id,
        total=_finish(gate.floor, species),
        max_score=species.max_score,
        factors={},
        is_safe=gate.is_safe,
        is_in_season=_in_season(species, state) if gate.in_season is None else gate.in_season,
        safety_warnings=[warning],
        recommendations=[advice] if advice else [],
        advisories=[],
        seasonal_mode=state.profile.mode_name,
        provenance=Provenance(
            species=species.id,
            seasonal_mode=state.profile.mode_name,
            weight_table=dict(state.profile.weights),
            stages_run=(STAGE_GATEKEEPERS,),
            gatekeeper=GatekeeperRecord(gate.type, True, warning),
        ),
    )


def _in_season(species: SpeciesConfig, state: EvaluationState) -> bool:
    season = state.season()
    if season is None:
        return True
    return season[0] > species.in_season_threshold


def evaluate(
    species: SpeciesConfig,
    context: EnvironmentalContext,
    classifier: BioIntelClassifier,
    safety_limits: Mapping[str, Any],
) -> ScoreResult:
    """Score one species against one context."""
    profile = select_profile(species, context.timestamp.date())
    state = EvaluationState(species, profile, context, classifier, safety_limits)

    # Gatekeepers
    for gate in species.gatekeepers:
        outcome = GATEKEEPERS[gate.type](state, gate.params)
        if outcome is not None:
            return _gatekeeper_result(species, state, gate, *outcome)

    if len(species.modes) > 1 and profile.behavior_description:
        state.recommend(f"{profile.mode_name.upper()} MODE ({profile.date_range}): {profile.behavior_description}")

    # Weighted factors
    factors: Dict[str, FactorScore] = {}
    for name, weight in profile.weights.items():
        spec = species.factors[name]
        result = FACTOR_CALCULATORS[spec.calculator](state, spec.params)
        factors[name] = replace(result, weight=float(weight))

    scores = np.array([f.score for f in factors.values()], dtype=float)
    weights = np.array([f.weight for f in factors.values()], dtype=float)
    base = float(np.dot(scores, weights)) * species.max_score
    total = base

    # Modifiers and safety
    modifier_records: List[ModifierRecord] = []
    failures: List[str] = []
    critical: List[str] = []
    for stage in species.stage_order:
        if stage == STAGE_MODIFIERS:
            for spec in species.modifiers:
                before = total
                total, detail = MODIFIERS[spec.type](total, state, spec.params)
                modifier_records.append(ModifierRecord(spec.type, detail is not None, before, total, detail))
                if detail is not None:
                    _LOGGER.debug("%s: modifier %s %.3f -> %.3f (%s)", species.id, spec.type, before, total, detail)
        elif stage == STAGE_SAFETY:
            for spec in species.safety:
                warning = SAFETY_CHECKS[spec.type](state, spec.params)
                if warning is None:
                    continue
                state.warn(warning)
                if spec.advisory:
                    continue
                failures.append(spec.type)
                if warning not in critical:
                    critical.append(warning)
            if failures:
                _LOGGER.debug("%s: unsafe (%s), capping at %.1f", species.id, ", ".join(failures), species.unsafe_ceiling)
                total = min(total, species.unsafe_ceiling)

    is_safe = not failures
    if not is_safe:
        state.recommend(UNSAFE_ADVICE, first=True)

    season = state.season()
    intermediate: Dict[str, Any] = dict(state.intermediate)
    if season is not None:
        intermediate["season"] = {"score": round(season[0], 3), "label": season[1]}
    intermediate["signals"] = dict(state.signals)

    warnings = critical + [w for w in state.warnings if w not in critical]

    return ScoreResult(
        species=species.id,
        total=_finish(total, species),
        max_score=species.max_score,
        factors=factors,
        is_safe=is_safe,
        is_in_season=_in_season(species, state),
        safety_warnings=warnings,
        recommendations=list(state.recommendations),
        advisories=_advisories(species, state.month),
        seasonal_mode=profile.mode_name,
        provenance=Provenance(
            species=species.id,
            seasonal_mode=profile.mode_name,
            weight_table=dict(profile.weights),
            stages_run=(STAGE_GATEKEEPERS, STAGE_FACTORS) + tuple(species.stage_order),
            base_score=round(base, 4),
            modifiers=tuple(modifier_records),
            safety_failures=tuple(failures),
            gatekeeper=None,
            intermediate=intermediate,
        ),
    )

"""Public scoring entry points."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .bio_intel import BioIntelClassifier, KeywordClassifier
from .models import EnvironmentalContext, ScoreResult, SpeciesConfig
from .pipeline import evaluate
from .species_loader import SpeciesLoader
from .unit_helpers import validate_and_normalize_safety_limits

_LOGGER = logging.getLogger(__name__)


class UnknownSpeciesError(ValueError):
    """Raised when scoring a species id that is not configured."""


class ScoringEngine:
    """Scores environmental contexts against the loaded species profiles.

    The engine holds only immutable configuration, so one instance can be
    shared between threads. ``safety_limits`` overrides the per-species limits
    for every species (warn-and-clamp normalization).
    """

    def __init__(
        self,
        loader: Optional[SpeciesLoader] = None,
        classifier: Optional[BioIntelClassifier] = None,
        safety_limits: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.loader = loader if loader is not None else SpeciesLoader().load()
        self.classifier = classifier if classifier is not None else KeywordClassifier()
        self._overrides: Dict[str, Any] = {}
        if safety_limits:
            normalized, _warnings = validate_and_normalize_safety_limits(dict(safety_limits))
            self._overrides = {k: v for k, v in normalized.items() if k in safety_limits}
        self._limits: Dict[str, Mapping[str, Any]] = {
            s.id: MappingProxyType({**s.safety_limits, **self._overrides}) for s in self.loader.get_all_species()
        }

    def _species(self, species_id: str) -> SpeciesConfig:
        species = self.loader.get_species(species_id)
        if species is None:
            raise UnknownSpeciesError(f"Unknown species: {species_id!r}")
        return species

    def available_species(self) -> List[str]:
        return self.loader.species_ids()

    def score(
        self, species_id: str, context: EnvironmentalContext, classifier: Optional[BioIntelClassifier] = None
    ) -> ScoreResult:
        species = self._species(species_id)
        return evaluate(species, context, classifier or self.classifier, self._limits[species.id])

    def score_many(
        self,
        context: EnvironmentalContext,
        species_ids: Optional[Iterable[str]] = None,
        max_workers: Optional[int] = None,
    ) -> Dict[str, ScoreResult]:
        """Score several species against one context.

        Evaluations are independent, so with ``max_workers`` > 1 they run on a
        thread pool; the result is the same as the sequential run.
        """
        ids = list(species_ids) if species_ids is not None else self.available_species()
        for species_id in ids:
            self._species(species_id)

        if max_workers is not None and max_workers > 1 and len(ids) > 1:
            _LOGGER.debug("Scoring %d species on %d workers", len(ids), max_workers)
            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                results = list(pool.map(lambda sid: self.score(sid, context), ids))
        else:
            results = [self.score(sid, context) for sid in ids]
        return dict(zip(ids, results))

    def score_series(
        self,
        species_id: str,
        contexts: Sequence[EnvironmentalContext],
        classifier: Optional[BioIntelClassifier] = None,
    ) -> List[ScoreResult]:
        """Score one species across a time series of contexts, in order."""
        species = self._species(species_id)
        limits = self._limits[species.id]
        chosen = classifier or self.classifier
        return [evaluate(species, ctx, chosen, limits) for ctx in contexts]


@lru_cache(maxsize=1)
def default_engine() -> ScoringEngine:
    return ScoringEngine()


def score(
    species_id: str, context: EnvironmentalContext, classifier: Optional[BioIntelClassifier] = None
) -> ScoreResult:
    return default_engine().score(species_id, context, classifier)


def score_many(
    context: EnvironmentalContext,
    species_ids: Optional[Iterable[str]] = None,
    max_workers: Optional[int] = None,
) -> Dict[str, ScoreResult]:
    return default_engine().score_many(context, species_ids, max_workers)


def score_series(
    species_id: str,
    contexts: Sequence[EnvironmentalContext],
    classifier: Optional[BioIntelClassifier] = None,
) -> List[ScoreResult]:
    return default_engine().score_series(species_id, contexts, classifier)

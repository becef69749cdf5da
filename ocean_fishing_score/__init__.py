"""Ocean Fishing Score: multi-species fishing suitability scoring."""
from __future__ import annotations

from .bio_intel import BioIntelClassifier, KeywordClassifier
from .models import (
    ContextError,
    ContextOverrides,
    EnvironmentalContext,
    FactorScore,
    Pressure,
    ScoreResult,
    Swell,
    Tide,
    Wind,
)
from .scoring import ScoringEngine, UnknownSpeciesError, score, score_many, score_series
from .species_loader import SpeciesConfigError, SpeciesLoader

__all__ = [
    "BioIntelClassifier",
    "ContextError",
    "ContextOverrides",
    "EnvironmentalContext",
    "FactorScore",
    "KeywordClassifier",
    "Pressure",
    "ScoreResult",
    "ScoringEngine",
    "SpeciesConfigError",
    "SpeciesLoader",
    "Swell",
    "Tide",
    "UnknownSpeciesError",
    "Wind",
    "score",
    "score_many",
    "score_series",
]

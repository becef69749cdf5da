"""Bio-intel extraction from free-text fishing reports.

Classification (text -> categorical signal) sits behind ``BioIntelClassifier``
so a different strategy can be injected into the engine. Mapping a signal to
a score or multiplier is done by the plain functions at the bottom of this
module and does not depend on how the signal was produced.
"""
from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple

_LOGGER = logging.getLogger(__name__)


class BaitPresence(str, Enum):
    NONE = "none"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    MASSIVE = "massive"


class PredatorLevel(str, Enum):
    NONE = "none"
    MENTIONED = "mentioned"
    SHUTDOWN = "shutdown"
    ORCA = "orca"
    ORCA_SHUTDOWN = "orca_shutdown"


class RunStrength(str, Enum):
    NONE = "none"
    SLOW = "slow"
    ACTIVE = "active"
    STRONG = "strong"


class RunIntel(str, Enum):
    NO_INTEL = "no_intel"
    SOME_ACTIVITY = "some_activity"
    CONFIRMED_SCHOOLS = "confirmed_schools"
    MASSIVE_RUN = "massive_run"


@dataclass(frozen=True)
class BaitSignal:
    level: BaitPresence
    keywords: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PredatorSignal:
    level: PredatorLevel
    keywords: Tuple[str, ...] = ()

    @property
    def detected(self) -> bool:
        return self.level is not PredatorLevel.NONE


@dataclass(frozen=True)
class SchoolingSignal:
    strength: RunStrength
    keywords: Tuple[str, ...] = ()

    @property
    def detected(self) -> bool:
        return bool(self.keywords)


@dataclass(frozen=True)
class PreySignal:
    strength: RunStrength
    keywords: Tuple[str, ...] = ()

    @property
    def detected(self) -> bool:
        return self.strength is not RunStrength.NONE


@dataclass(frozen=True)
class RunIntelSignal:
    confidence: RunIntel
    keywords: Tuple[str, ...] = ()

    @property
    def detected(self) -> bool:
        return bool(self.keywords)


BAIT_KEYWORDS = (
    "herring", "herring balls", "bait balls", "baitfish", "needle fish", "needlefish",
    "krill", "krill boils", "euphausiids", "anchovies", "sardines", "pilchards",
    "sandlance", "sand lance", "candlefish", "eulachon", "smelt",
    "bait", "feed", "feeding", "schools", "schooling", "marks", "marking",
)
HIGH_VALUE_BAIT = ("herring balls", "bait balls", "krill boils", "needle fish")
MASSIVE_INDICATORS = ("massive", "huge", "incredible", "everywhere", "thick", "packed")
HIGH_INDICATORS = ("lots", "plenty", "good", "strong", "abundant")
MODERATE_INDICATORS = ("some", "moderate", "decent", "present")
LOW_INDICATORS = ("scattered", "sparse", "few", "limited", "occasional")

ORCA_KEYWORDS = ("orca", "orcas", "killer whale", "killer whales", "blackfish", "biggs", "transient")
SHUTDOWN_KEYWORDS = ("shut down", "shutdown", "locked up", "no bites", "went quiet")
PREDATOR_KEYWORDS = ORCA_KEYWORDS + SHUTDOWN_KEYWORDS + (
    "whales pushed through", "whales came through", "pods",
    "t18", "t19", "t46", "t65", "t60",
)

SCHOOLING_POSITIVE = (
    "pink", "pinks", "humpy", "humpies", "humpback salmon",
    "school", "schools", "schooling", "millions", "thick", "stacked", "loaded",
    "non-stop", "nonstop", "limiting", "limiting on pinks", "jumping", "rolling", "splashing",
)
SCHOOLING_NEGATIVE = ("slow", "quiet", "ghost town", "no fish", "dead", "few pinks", "scattered")
SCHOOLING_STRONG = ("millions", "thick", "limiting", "nonstop")

PREY_KEYWORDS = (
    "rockfish", "rock fish", "sebastes", "yelloweye", "quillback", "copper rockfish",
    "china rockfish", "snapper", "red snapper", "greenling", "kelp greenling",
    "perch", "pile perch", "striped perch", "herring", "herring balls",
    "limiting on rockfish", "lots of rockfish", "rockfish bycatch", "small rockfish", "juvenile rockfish",
)
PREY_STRONG = ("limiting on rockfish", "lots of rockfish", "herring balls")

# Commercial or management activity is the strongest sign that a migrating run has arrived
RUN_COMMERCIAL_KEYWORDS = (
    "commercial opening", "test set", "seine fleet", "dfo opening", "commission", "escapement goal",
)
RUN_SCHOOL_KEYWORDS = (
    "sockeye", "sox", "red salmon", "reds", "school", "schools", "jumper", "jumpers",
    "millions", "massive run", "strong run", "stacking", "holding",
)
RUN_STRONG = ("millions", "massive run", "stacking")

_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: Optional[str]) -> str:
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text.lower()).strip()


def find_keywords(text: str, keywords: Iterable[str]) -> Tuple[str, ...]:
    """Keywords contained in already-normalized ``text``, in keyword order."""
    return tuple(k for k in keywords if k in text)


class BioIntelClassifier(ABC):
    """Turns report text into categorical signals.

    Implementations must return the no-signal level for empty or missing text.
    """

    @abstractmethod
    def classify_bait_presence(self, text: Optional[str]) -> BaitSignal:
        """Bait abundance reported in the text."""

    @abstractmethod
    def detect_predator(self, text: Optional[str]) -> PredatorSignal:
        """Predator (orca) activity or a reported shutdown."""

    @abstractmethod
    def detect_schooling(self, text: Optional[str]) -> SchoolingSignal:
        """Strength of a schooling surface run."""

    @abstractmethod
    def detect_prey(self, text: Optional[str]) -> PreySignal:
        """Prey species that bottom predators key on."""

    @abstractmethod
    def detect_run_intel(self, text: Optional[str]) -> RunIntelSignal:
        """Evidence that a migrating run has arrived."""

    @abstractmethod
    def match_keywords(self, text: Optional[str], keywords: Iterable[str]) -> Tuple[str, ...]:
        """Generic keyword lookup for species-specific run reports."""


class KeywordClassifier(BioIntelClassifier):
    """Case-insensitive substring matching against curated keyword sets."""

    def classify_bait_presence(self, text: Optional[str]) -> BaitSignal:
        normalized = normalize_text(text)
        keywords = find_keywords(normalized, BAIT_KEYWORDS)
        if not keywords:
            return BaitSignal(BaitPresence.NONE)

        if find_keywords(normalized, MASSIVE_INDICATORS):
            level = BaitPresence.MASSIVE
        elif find_keywords(normalized, HIGH_INDICATORS) or len(keywords) >= 3:
            level = BaitPresence.HIGH
        elif find_keywords(normalized, MODERATE_INDICATORS) or len(keywords) >= 2:
            level = BaitPresence.MODERATE
        elif find_keywords(normalized, LOW_INDICATORS):
            level = BaitPresence.LOW
        else:
            level = BaitPresence.MODERATE
        _LOGGER.debug("Bait presence %s from keywords %s", level.value, keywords)
        return BaitSignal(level, keywords)

    def detect_predator(self, text: Optional[str]) -> PredatorSignal:
        keywords = find_keywords(normalize_text(text), PREDATOR_KEYWORDS)
        if not keywords:
            return PredatorSignal(PredatorLevel.NONE)
        orca = any(k in ORCA_KEYWORDS for k in keywords)
        shutdown = any(k in SHUTDOWN_KEYWORDS for k in keywords)
        if orca and shutdown:
            level = PredatorLevel.ORCA_SHUTDOWN
        elif orca:
            level = PredatorLevel.ORCA
        elif shutdown:
            level = PredatorLevel.SHUTDOWN
        else:
            level = PredatorLevel.MENTIONED
        return PredatorSignal(level, keywords)

    def detect_schooling(self, text: Optional[str]) -> SchoolingSignal:
        normalized = normalize_text(text)
        positives = find_keywords(normalized, SCHOOLING_POSITIVE)
        negatives = find_keywords(normalized, SCHOOLING_NEGATIVE)
        if negatives:
            return SchoolingSignal(RunStrength.SLOW, positives)
        if not positives:
            return SchoolingSignal(RunStrength.NONE)
        if len(positives) >= 3 or any(k in SCHOOLING_STRONG for k in positives):
            return SchoolingSignal(RunStrength.STRONG, positives)
        return SchoolingSignal(RunStrength.ACTIVE, positives)

    def detect_prey(self, text: Optional[str]) -> PreySignal:
        keywords = find_keywords(normalize_text(text), PREY_KEYWORDS)
        if not keywords:
            return PreySignal(RunStrength.NONE)
        if len(keywords) >= 3 or any(s in k for k in keywords for s in PREY_STRONG):
            return PreySignal(RunStrength.STRONG, keywords)
        if len(keywords) == 2:
            return PreySignal(RunStrength.ACTIVE, keywords)
        return PreySignal(RunStrength.SLOW, keywords)

    def detect_run_intel(self, text: Optional[str]) -> RunIntelSignal:
        normalized = normalize_text(text)
        commercial = find_keywords(normalized, RUN_COMMERCIAL_KEYWORDS)
        keywords = commercial + find_keywords(normalized, RUN_SCHOOL_KEYWORDS)
        if commercial:
            return RunIntelSignal(RunIntel.MASSIVE_RUN, keywords)
        if len(keywords) >= 3 or any(k in RUN_STRONG for k in keywords):
            return RunIntelSignal(RunIntel.CONFIRMED_SCHOOLS, keywords)
        if keywords:
            return RunIntelSignal(RunIntel.SOME_ACTIVITY, keywords)
        return RunIntelSignal(RunIntel.NO_INTEL)

    def match_keywords(self, text: Optional[str], keywords: Iterable[str]) -> Tuple[str, ...]:
        return find_keywords(normalize_text(text), keywords)


# ---------------------------------------------------------------------------
# Signal -> score mappings
# ---------------------------------------------------------------------------

_BAIT_SCORES = {
    BaitPresence.MASSIVE: 1.0,
    BaitPresence.HIGH: 0.9,
    BaitPresence.MODERATE: 0.7,
    BaitPresence.LOW: 0.4,
    BaitPresence.NONE: 0.3,
}

_BAIT_ADVICE = {
    BaitPresence.MASSIVE: "Massive bait: predators are stacked, fish regardless of conditions",
    BaitPresence.HIGH: "Strong bait presence",
    BaitPresence.MODERATE: "Some bait around",
    BaitPresence.LOW: "Little bait reported: search for marks",
    BaitPresence.NONE: "No bait reported: use attractors and cover water",
}

_PREDATOR_SUPPRESSION = {
    PredatorLevel.ORCA_SHUTDOWN: (0.4, "Orcas reported with the bite shut down"),
    PredatorLevel.ORCA: (0.5, "Orcas reported in the area: salmon may be suppressed"),
    PredatorLevel.SHUTDOWN: (0.6, "Bite reportedly shut down, possibly by predators"),
    PredatorLevel.MENTIONED: (0.7, "Possible predator activity in reports"),
    PredatorLevel.NONE: (1.0, None),
}


def bait_presence_score(signal: BaitSignal) -> Tuple[float, bool, str]:
    """(score, override, advice). Massive bait sets the override flag."""
    score = _BAIT_SCORES[signal.level]
    if score < 0.9 and any(hv in k for k in signal.keywords for hv in HIGH_VALUE_BAIT):
        score = min(score + 0.15, 1.0)
    return score, signal.level is BaitPresence.MASSIVE, _BAIT_ADVICE[signal.level]


def predator_suppression(signal: PredatorSignal) -> Tuple[float, Optional[str]]:
    """(multiplier, warning)."""
    return _PREDATOR_SUPPRESSION[signal.level]


def schooling_multiplier(signal: SchoolingSignal) -> float:
    return {
        RunStrength.SLOW: 0.7,
        RunStrength.STRONG: 1.25,
        RunStrength.ACTIVE: 1.1,
        RunStrength.NONE: 1.0,
    }[signal.strength]


def prey_multiplier(signal: PreySignal) -> float:
    return {
        RunStrength.STRONG: 1.25,
        RunStrength.ACTIVE: 1.15,
        RunStrength.SLOW: 1.1,
        RunStrength.NONE: 1.0,
    }[signal.strength]


def run_intel_multiplier(signal: RunIntelSignal) -> float:
    return {
        RunIntel.MASSIVE_RUN: 1.5,
        RunIntel.CONFIRMED_SCHOOLS: 1.3,
        RunIntel.SOME_ACTIVITY: 1.15,
        RunIntel.NO_INTEL: 1.0,
    }[signal.confidence]

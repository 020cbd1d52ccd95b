"""
scoring.py - Flavor relevance scoring and vocabulary gap detection.

A ScoringStrategy supplies the base relevance of a flavor and the
synthesis approach for a stage. The default VocabularyScoringStrategy is
driven by a StageVocabulary; without one every flavor scores a neutral 0.5
and synthesis is merge-all.

The match phase composes the final score:

    clamp01(base + learning_boost + rule_adjustment + hint_boost)

Gap detection reports vocabulary keywords that appear in the bet but are
not covered by any selected flavor's name or description.
"""

from __future__ import annotations

import logging
import math
import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence, Set

from stageswarm.runtime.types import (
    Flavor,
    FlavorExecutionResult,
    GapReport,
    GapSeverity,
    OrchestratorContext,
    SynthesisStrategy,
)

from .rule_evaluator import bet_text

if TYPE_CHECKING:
    from stageswarm.config.vocabulary_registry import StageVocabulary

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 0.5
LEARNING_BOOST = 0.1
HINT_BOOST = 0.2

DEFAULT_SYNTHESIS_APPROACH = "merge-all"
DEFAULT_SYNTHESIS_ALTERNATIVES = ["merge-all", "first-wins", "cascade"]
DEFAULT_REASONING_TEMPLATE = (
    "Merging all {count} flavor synthesis artifact(s) into a single keyed "
    "record for downstream stage consumption."
)

_TOKEN_SPLIT = re.compile(r"[^a-z0-9]+")


def clamp01(value: float) -> float:
    """Clamp a score to [0, 1]."""
    return min(1.0, max(0.0, value))


def _enum_value(value: object) -> str:
    return str(getattr(value, "value", value))


def count_keyword_hits(
    flavor: Flavor, context: OrchestratorContext, keywords: Iterable[str]
) -> int:
    """Number of keywords found in the flavor's name, description or the bet."""
    text = bet_text(context)
    name = flavor.name.lower()
    description = (flavor.description or "").lower()

    hits = 0
    for kw in keywords:
        kw_lower = kw.lower()
        if kw_lower in name or kw_lower in description or kw_lower in text:
            hits += 1
    return hits


def keyword_score(
    flavor: Flavor, context: OrchestratorContext, keywords: Sequence[str]
) -> float:
    """Fraction of keywords hit, or the neutral score when there are none."""
    if not keywords:
        return NEUTRAL_SCORE
    return min(1.0, count_keyword_hits(flavor, context, keywords) / len(keywords))


def learning_boost(flavor: Flavor, context: OrchestratorContext) -> float:
    """Boost for flavors mentioned by name in any learning."""
    name = flavor.name.lower()
    if any(name in learning.lower() for learning in context.learnings):
        return LEARNING_BOOST
    return 0.0


class ScoringStrategy(ABC):
    """Pluggable scoring and synthesis policy for one stage."""

    @property
    def keywords(self) -> List[str]:
        """Vocabulary keywords, most important first. Empty disables gap detection."""
        return []

    @abstractmethod
    def score(self, flavor: Flavor, context: OrchestratorContext) -> float:
        """Base relevance of a flavor in [0, 1], before boosts and rules."""
        ...

    @abstractmethod
    def choose_synthesis(
        self, results: Sequence[FlavorExecutionResult], context: OrchestratorContext
    ) -> SynthesisStrategy:
        """Pick the synthesis approach for a set of flavor results."""
        ...


class VocabularyScoringStrategy(ScoringStrategy):
    """Keyword and artifact-boost scoring driven by a StageVocabulary."""

    def __init__(self, vocabulary: Optional["StageVocabulary"] = None):
        self.vocabulary = vocabulary

    @property
    def keywords(self) -> List[str]:
        if self.vocabulary is None:
            return []
        return list(self.vocabulary.keywords)

    def artifact_boost(self, context: OrchestratorContext) -> float:
        """Sum of boost-rule magnitudes whose pattern matches an available artifact."""
        if self.vocabulary is None:
            return 0.0
        total = 0.0
        for rule in self.vocabulary.boost_rules:
            if rule.artifact_pattern == "*":
                if context.available_artifacts:
                    total += rule.magnitude
            elif any(rule.artifact_pattern in a for a in context.available_artifacts):
                total += rule.magnitude
        return total

    def score(self, flavor: Flavor, context: OrchestratorContext) -> float:
        if self.vocabulary is None:
            return NEUTRAL_SCORE
        base = keyword_score(flavor, context, self.vocabulary.keywords)
        return min(1.0, base + self.artifact_boost(context))

    def choose_synthesis(
        self, results: Sequence[FlavorExecutionResult], context: OrchestratorContext
    ) -> SynthesisStrategy:
        if self.vocabulary is None:
            approach = DEFAULT_SYNTHESIS_APPROACH
            alternatives = list(DEFAULT_SYNTHESIS_ALTERNATIVES)
            template = DEFAULT_REASONING_TEMPLATE
        else:
            approach = _enum_value(self.vocabulary.synthesis_preference)
            alternatives = [_enum_value(a) for a in self.vocabulary.synthesis_alternatives]
            template = self.vocabulary.reasoning_template or DEFAULT_REASONING_TEMPLATE

        return SynthesisStrategy(
            approach=approach,
            alternatives=alternatives,
            reasoning=template.replace("{count}", str(len(results))),
        )


# =============================================================================
# Gap detection
# =============================================================================


def _tokens(text: str) -> Set[str]:
    return {t for t in _TOKEN_SPLIT.split(text.lower()) if t}


def coverage_tokens(flavors: Iterable[Flavor]) -> Set[str]:
    """Token set of the flavors' names and descriptions."""
    covered: Set[str] = set()
    for flavor in flavors:
        covered |= _tokens(flavor.name)
        covered |= _tokens(flavor.description or "")
    return covered


def keyword_covered(keyword: str, covered: Set[str]) -> bool:
    """True when every token of the keyword is in the covered set."""
    tokens = _tokens(keyword)
    return bool(tokens) and tokens <= covered


def gap_severity(index: int, total: int) -> GapSeverity:
    """Severity by position: first third high, second third medium, rest low."""
    high_cut = math.ceil(total / 3)
    medium_cut = math.ceil(2 * total / 3)
    if index < high_cut:
        return GapSeverity.HIGH
    if index < medium_cut:
        return GapSeverity.MEDIUM
    return GapSeverity.LOW


def detect_gaps(
    keywords: Sequence[str],
    context: OrchestratorContext,
    selected: Sequence[Flavor],
    candidates: Sequence[Flavor],
) -> List[GapReport]:
    """Report keywords the bet mentions that no selected flavor covers.

    Args:
        keywords: Vocabulary keywords, most important first.
        context: Run context; only the bet text is consulted.
        selected: Flavors chosen to run.
        candidates: Every resolvable flavor (candidates and pinned).

    Returns:
        One GapReport per uncovered keyword, in keyword order.
    """
    text = bet_text(context)
    if not keywords or not text:
        return []

    covered = coverage_tokens(selected)
    selected_names = {f.name for f in selected}
    unselected = [f for f in candidates if f.name not in selected_names]

    gaps: List[GapReport] = []
    for index, keyword in enumerate(keywords):
        kw = keyword.lower()
        if kw not in text or keyword_covered(kw, covered):
            continue
        suggested = [
            f.name
            for f in unselected
            if kw in f.name.lower() or kw in (f.description or "").lower()
        ]
        gaps.append(
            GapReport(
                description=(
                    f'Keyword "{keyword}" appears in the bet but no selected flavor covers it.'
                ),
                severity=gap_severity(index, len(keywords)),
                suggested_flavors=suggested,
            )
        )
    return gaps

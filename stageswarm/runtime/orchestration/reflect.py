"""
reflect.py - Reflect phase: outcomes, learnings and rule suggestions.

Everything here is best effort. A failed outcome update or suggestion
write is logged and skipped; reflection itself never fails a run.

Automatic reflection only grades a run as good or partial. A poor grade
can only arrive through generate_rule_suggestions called with externally
supplied outcomes, which is why the penalize branch exists.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from stageswarm.runtime.ports import DecisionRegistry, StageRuleRegistry
from stageswarm.runtime.types import (
    ArtifactQuality,
    Decision,
    DecisionOutcome,
    DecisionOutcomeRecord,
    DecisionType,
    FlavorExecutionResult,
    GateResult,
    ReflectionResult,
    RuleEffect,
    RuleInput,
    RuleSource,
    RuleSuggestionInput,
)

from .journal import RunJournal

SUGGESTION_MAGNITUDE = 0.1
SUGGESTION_CONFIDENCE = 0.5
CONDITION_MAX_CHARS = 50


def assess_quality(flavor_results: Sequence[FlavorExecutionResult]) -> ArtifactQuality:
    """Good when there are results and every one carries a synthesis value."""
    if flavor_results and all(r.has_synthesis_value for r in flavor_results):
        return ArtifactQuality.GOOD
    return ArtifactQuality.PARTIAL


def suggestion_condition(decision_context: Mapping[str, Any], stage_category: str) -> str:
    """Condition text for a suggested rule, from the bet recorded with a decision."""
    bet = decision_context.get("bet") or {}
    parts = []
    if isinstance(bet, Mapping):
        for key in ("title", "description"):
            value = bet.get(key)
            if isinstance(value, str):
                parts.append(value)
    condition = " ".join(parts).strip()[:CONDITION_MAX_CHARS].strip()
    return condition or stage_category


def reflect(
    decisions: Sequence[Decision],
    flavor_results: Sequence[FlavorExecutionResult],
    decision_registry: DecisionRegistry,
    stage_category: str,
    journal: RunJournal,
    rule_registry: Optional[StageRuleRegistry] = None,
) -> ReflectionResult:
    """Grade the run, push outcomes to every decision and propose rules."""
    quality = assess_quality(flavor_results)
    good = quality == ArtifactQuality.GOOD
    outcome = DecisionOutcome(
        artifact_quality=quality,
        gate_result=GateResult.PASSED if good else None,
        rework_required=not good,
    )

    outcomes: List[DecisionOutcomeRecord] = []
    for decision in decisions:
        try:
            decision_registry.update_outcome(decision.id, outcome)
        except Exception as exc:
            journal.warning(
                'Reflect: failed to update outcome for decision "%s": %s', decision.id, exc
            )
            continue
        outcomes.append(DecisionOutcomeRecord(decision_id=decision.id, outcome=outcome))

    if good:
        learning = (
            f"{stage_category} stage completed successfully with "
            f"{len(flavor_results)} flavor(s)."
        )
    else:
        learning = f"{stage_category} stage had partial results; review flavor outputs for quality."

    suggestions: List[str] = []
    if rule_registry is not None:
        suggestions = generate_rule_suggestions(
            decisions, outcomes, rule_registry, stage_category, journal
        )

    return ReflectionResult(
        decision_outcomes=outcomes,
        learnings=[learning],
        rule_suggestions=suggestions,
        overall_quality=quality,
    )


def generate_rule_suggestions(
    decisions: Sequence[Decision],
    outcomes: Sequence[DecisionOutcomeRecord],
    rule_registry: StageRuleRegistry,
    stage_category: str,
    journal: RunJournal,
) -> List[str]:
    """Propose a boost (good) or penalize (poor) rule per flavor-selection decision.

    Partial outcomes say nothing about the selected flavor, so they produce
    no suggestion.

    Returns:
        Ids of the suggestions the registry accepted for review.
    """
    by_decision: Dict[str, DecisionOutcome] = {rec.decision_id: rec.outcome for rec in outcomes}
    suggestion_ids: List[str] = []

    for decision in decisions:
        if decision.decision_type != DecisionType.FLAVOR_SELECTION:
            continue
        outcome = by_decision.get(decision.id)
        if outcome is None:
            continue
        if outcome.artifact_quality == ArtifactQuality.GOOD:
            effect = RuleEffect.BOOST
        elif outcome.artifact_quality == ArtifactQuality.POOR:
            effect = RuleEffect.PENALIZE
        else:
            continue

        condition = suggestion_condition(decision.context, stage_category)
        suggestion = RuleSuggestionInput(
            suggested_rule=RuleInput(
                category=decision.stage_category,
                name=decision.selection,
                condition=condition,
                effect=effect,
                magnitude=SUGGESTION_MAGNITUDE,
                confidence=SUGGESTION_CONFIDENCE,
                source=RuleSource.AUTO_DETECTED,
                evidence=[decision.id],
            ),
            trigger_decision_ids=[decision.id],
            observation_count=1,
            reasoning=(
                f'Flavor "{decision.selection}" produced {outcome.artifact_quality.value} '
                f'output for "{condition}"; suggest {effect.value} when this context recurs.'
            ),
        )
        try:
            created = rule_registry.suggest_rule(suggestion)
        except Exception as exc:
            journal.warning(
                'Reflect: failed to persist rule suggestion for decision "%s": %s',
                decision.id,
                exc,
            )
            continue
        suggestion_ids.append(created.id)

    return suggestion_ids

"""
registries.py - In-memory implementations of the registry ports.

These back tests and embedding callers that keep everything in process.
Durable storage is a caller concern; a persistent registry only needs to
implement the same ABCs from ``ports``.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Tuple

from .errors import (
    DecisionNotFoundError,
    FlavorNotFoundError,
    RuleNotFoundError,
    SuggestionNotFoundError,
)
from .ports import DecisionRegistry, FlavorRegistry, StageRuleRegistry
from .types import (
    Decision,
    DecisionInput,
    DecisionOutcome,
    DecisionStats,
    DecisionType,
    Flavor,
    RuleInput,
    RuleSuggestion,
    RuleSuggestionInput,
    RuleSuggestionStatus,
    StageRule,
    generate_id,
)
from .types._time import _utcnow

logger = logging.getLogger(__name__)


class InMemoryFlavorRegistry(FlavorRegistry):
    """Flavors keyed by (stage category, name)."""

    def __init__(self, flavors: Optional[Iterable[Flavor]] = None):
        self._flavors: Dict[Tuple[str, str], Flavor] = {}
        for flavor in flavors or []:
            self.register(flavor)

    def get(self, category: str, name: str) -> Flavor:
        try:
            return self._flavors[(category, name)]
        except KeyError:
            raise FlavorNotFoundError(category, name) from None

    def list(self, category: Optional[str] = None) -> List[Flavor]:
        return [
            flavor
            for (cat, _), flavor in self._flavors.items()
            if category is None or cat == category
        ]

    def register(self, flavor: Flavor) -> None:
        self._flavors[(flavor.stage_category, flavor.name)] = flavor


class InMemoryDecisionRegistry(DecisionRegistry):
    """Decisions kept in recording order."""

    def __init__(self) -> None:
        self._decisions: Dict[str, Decision] = {}

    def record(self, decision: DecisionInput) -> Decision:
        recorded = Decision(
            id=generate_id(),
            stage_category=decision.stage_category,
            decision_type=decision.decision_type,
            context=dict(decision.context),
            options=list(decision.options),
            selection=decision.selection,
            reasoning=decision.reasoning,
            confidence=decision.confidence,
            decided_at=_utcnow(),
        )
        self._decisions[recorded.id] = recorded
        return recorded

    def update_outcome(self, decision_id: str, outcome: DecisionOutcome) -> Decision:
        existing = self.get(decision_id)
        updated = replace(existing, outcome=outcome)
        self._decisions[decision_id] = updated
        return updated

    def get(self, decision_id: str) -> Decision:
        try:
            return self._decisions[decision_id]
        except KeyError:
            raise DecisionNotFoundError(decision_id) from None

    def list(
        self,
        stage_category: Optional[str] = None,
        decision_type: Optional[DecisionType] = None,
    ) -> List[Decision]:
        return [
            d
            for d in self._decisions.values()
            if (stage_category is None or d.stage_category == stage_category)
            and (decision_type is None or d.decision_type == decision_type)
        ]

    def get_stats(self, stage_category: Optional[str] = None) -> DecisionStats:
        decisions = self.list(stage_category=stage_category)
        stats = DecisionStats(count=len(decisions))
        if not decisions:
            return stats

        stats.avg_confidence = sum(d.confidence for d in decisions) / len(decisions)
        for d in decisions:
            key = d.decision_type.value
            stats.count_by_type[key] = stats.count_by_type.get(key, 0) + 1
            if d.outcome is None or d.outcome.artifact_quality is None:
                stats.outcome_distribution["no_outcome"] += 1
            else:
                stats.outcome_distribution[d.outcome.artifact_quality.value] += 1
        return stats


class InMemoryStageRuleRegistry(StageRuleRegistry):
    """Rules and suggestions held in dictionaries."""

    def __init__(self, rules: Optional[Iterable[StageRule]] = None):
        self._rules: Dict[str, StageRule] = {}
        self._suggestions: Dict[str, RuleSuggestion] = {}
        for rule in rules or []:
            self._rules[rule.id] = rule

    def load_rules(self, category: str) -> List[StageRule]:
        return [r for r in self._rules.values() if r.category == category]

    def add_rule(self, rule: RuleInput) -> StageRule:
        created = StageRule(
            id=generate_id(),
            category=rule.category,
            name=rule.name,
            condition=rule.condition,
            effect=rule.effect,
            magnitude=rule.magnitude,
            confidence=rule.confidence,
            source=rule.source,
            evidence=list(rule.evidence),
            created_at=_utcnow(),
        )
        self._rules[created.id] = created
        return created

    def remove_rule(self, rule_id: str) -> None:
        if rule_id not in self._rules:
            raise RuleNotFoundError(rule_id)
        del self._rules[rule_id]

    def suggest_rule(self, suggestion: RuleSuggestionInput) -> RuleSuggestion:
        created = RuleSuggestion(
            id=generate_id(),
            suggested_rule=suggestion.suggested_rule,
            trigger_decision_ids=list(suggestion.trigger_decision_ids),
            observation_count=suggestion.observation_count,
            reasoning=suggestion.reasoning,
            status=RuleSuggestionStatus.PENDING,
            created_at=_utcnow(),
        )
        self._suggestions[created.id] = created
        return created

    def get_pending_suggestions(self, category: Optional[str] = None) -> List[RuleSuggestion]:
        return [
            s
            for s in self._suggestions.values()
            if s.status == RuleSuggestionStatus.PENDING
            and (category is None or s.suggested_rule.category == category)
        ]

    def accept_suggestion(
        self, suggestion_id: str, edit_delta: Optional[str] = None
    ) -> StageRule:
        suggestion = self._pending(suggestion_id)
        rule = self.add_rule(suggestion.suggested_rule)
        self._suggestions[suggestion_id] = replace(
            suggestion, status=RuleSuggestionStatus.ACCEPTED, edit_delta=edit_delta
        )
        logger.info("Accepted rule suggestion %s as rule %s", suggestion_id, rule.id)
        return rule

    def reject_suggestion(self, suggestion_id: str, reason: str) -> RuleSuggestion:
        suggestion = self._pending(suggestion_id)
        rejected = replace(
            suggestion, status=RuleSuggestionStatus.REJECTED, rejection_reason=reason
        )
        self._suggestions[suggestion_id] = rejected
        return rejected

    def _pending(self, suggestion_id: str) -> RuleSuggestion:
        suggestion = self._suggestions.get(suggestion_id)
        if suggestion is None:
            raise SuggestionNotFoundError(suggestion_id)
        if suggestion.status != RuleSuggestionStatus.PENDING:
            raise SuggestionNotFoundError(
                suggestion_id, f"was already {suggestion.status.value}"
            )
        return suggestion

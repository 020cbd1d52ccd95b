"""Rule evaluation: decide which stage rules fire for a run.

Conditions are plain free text, not a DSL. A condition is split on
whitespace; short tokens and stop words are dropped, and the rule fires
when any remaining token occurs in the run's context text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Set

from stageswarm.runtime.types import (
    OrchestratorContext,
    RuleEffect,
    StageRule,
)

STOP_WORDS: FrozenSet[str] = frozenset(
    {
        "the", "a", "an", "is", "are", "was", "will", "it", "this",
        "that", "of", "in", "to", "for", "with", "by", "and", "or",
    }
)

# Tokens this short never carry meaning on their own.
MIN_TOKEN_LENGTH = 3


def bet_text(context: OrchestratorContext) -> str:
    """Lower-cased bet title, description and tags joined by spaces."""
    bet = context.bet
    if not bet:
        return ""
    parts: List[str] = []
    title = bet.get("title")
    if isinstance(title, str):
        parts.append(title)
    description = bet.get("description")
    if isinstance(description, str):
        parts.append(description)
    tags = bet.get("tags")
    if isinstance(tags, (list, tuple)):
        parts.extend(tag for tag in tags if isinstance(tag, str))
    return " ".join(parts).lower()


def condition_tokens(condition: str) -> List[str]:
    """Meaningful tokens of a rule condition."""
    return [
        token
        for token in condition.lower().split()
        if len(token) >= MIN_TOKEN_LENGTH and token not in STOP_WORDS
    ]


def rule_haystack(context: OrchestratorContext, stage_category: str) -> str:
    """Text a rule condition is matched against."""
    artifacts = " ".join(a.lower() for a in context.available_artifacts)
    return f"{bet_text(context)} {stage_category.lower()} {artifacts}"


def evaluate_rule(rule: StageRule, context: OrchestratorContext, stage_category: str) -> bool:
    """True when the rule's condition matches the run context."""
    tokens = condition_tokens(rule.condition)
    if not tokens:
        return False
    haystack = rule_haystack(context, stage_category)
    return any(token in haystack for token in tokens)


@dataclass
class RuleEffects:
    """Combined effect of every rule that fired.

    Attributes:
        excluded: Flavor names that must not run.
        required: Flavor names that must run unless also excluded.
        adjustments: Net score adjustment per flavor name.
        fired: Ids of the rules that fired, per flavor name.
    """

    excluded: Set[str] = field(default_factory=set)
    required: Set[str] = field(default_factory=set)
    adjustments: Dict[str, float] = field(default_factory=dict)
    fired: Dict[str, List[str]] = field(default_factory=dict)

    def adjustment_for(self, name: str) -> float:
        return self.adjustments.get(name, 0.0)


def classify_rules(
    rules: Iterable[StageRule],
    context: OrchestratorContext,
    stage_category: str,
) -> RuleEffects:
    """Evaluate every rule and fold the firing ones into a RuleEffects."""
    effects = RuleEffects()
    for rule in rules:
        if not evaluate_rule(rule, context, stage_category):
            continue

        effects.fired.setdefault(rule.name, []).append(rule.id)
        if rule.effect == RuleEffect.EXCLUDE:
            effects.excluded.add(rule.name)
        elif rule.effect == RuleEffect.REQUIRE:
            effects.required.add(rule.name)
        elif rule.effect == RuleEffect.BOOST:
            effects.adjustments[rule.name] = effects.adjustment_for(rule.name) + rule.weight
        elif rule.effect == RuleEffect.PENALIZE:
            effects.adjustments[rule.name] = effects.adjustment_for(rule.name) - rule.weight
    return effects

"""Stage rule types and rule-suggestion records.

Rules are data, never code: a free-text condition plus an effect on one
named flavor. Suggestions are rule proposals generated by reflection that
wait for a human to accept or reject them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ._time import _datetime_to_iso, _iso_to_datetime, _utcnow


class RuleEffect(str, Enum):
    """What a firing rule does to its target flavor."""

    EXCLUDE = "exclude"
    REQUIRE = "require"
    BOOST = "boost"
    PENALIZE = "penalize"


class RuleSource(str, Enum):
    """Where a rule came from."""

    AUTO_DETECTED = "auto-detected"
    USER_CREATED = "user-created"
    IMPORTED = "imported"


class RuleSuggestionStatus(str, Enum):
    """Review state of a rule suggestion."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True)
class RuleInput:
    """Rule fields without registry-assigned identity.

    Attributes:
        category: Stage category the rule applies to.
        name: Target flavor name.
        condition: Free-text condition matched against the run context.
        effect: exclude, require, boost or penalize.
        magnitude: Effect strength in [0, 1].
        confidence: Confidence in the rule in [0, 1].
        source: Origin of the rule.
        evidence: Decision ids or notes backing the rule.
    """

    category: str
    name: str
    condition: str
    effect: RuleEffect
    magnitude: float
    confidence: float
    source: RuleSource = RuleSource.USER_CREATED
    evidence: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class StageRule:
    """A persisted rule adjusting flavor eligibility or score."""

    id: str
    category: str
    name: str
    condition: str
    effect: RuleEffect
    magnitude: float
    confidence: float
    source: RuleSource = RuleSource.USER_CREATED
    evidence: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=_utcnow)

    @property
    def weight(self) -> float:
        """Unsigned strength of the rule: magnitude scaled by confidence."""
        return self.magnitude * self.confidence


@dataclass(frozen=True)
class RuleSuggestionInput:
    """What reflection hands to the rule registry when proposing a rule."""

    suggested_rule: RuleInput
    trigger_decision_ids: List[str]
    observation_count: int
    reasoning: str


@dataclass(frozen=True)
class RuleSuggestion:
    """A proposed rule awaiting review.

    Attributes:
        id: Suggestion id assigned by the registry.
        suggested_rule: The rule that would be created on acceptance.
        trigger_decision_ids: Decisions whose outcomes prompted the proposal.
        observation_count: How many observations back the proposal.
        reasoning: Why the rule was proposed.
        status: pending, accepted or rejected.
        created_at: When the suggestion was recorded.
        edit_delta: Reviewer's note of edits made when accepting.
        rejection_reason: Reviewer's reason when rejecting.
    """

    id: str
    suggested_rule: RuleInput
    trigger_decision_ids: List[str]
    observation_count: int
    reasoning: str
    status: RuleSuggestionStatus = RuleSuggestionStatus.PENDING
    created_at: datetime = field(default_factory=_utcnow)
    edit_delta: Optional[str] = None
    rejection_reason: Optional[str] = None


# =============================================================================
# Serialization Functions
# =============================================================================


def rule_input_to_dict(rule: RuleInput) -> Dict[str, Any]:
    """Convert RuleInput to a dictionary for serialization."""
    return {
        "category": rule.category,
        "name": rule.name,
        "condition": rule.condition,
        "effect": rule.effect.value,
        "magnitude": rule.magnitude,
        "confidence": rule.confidence,
        "source": rule.source.value,
        "evidence": list(rule.evidence),
    }


def rule_input_from_dict(data: Dict[str, Any]) -> RuleInput:
    """Create RuleInput from a dictionary."""
    return RuleInput(
        category=data["category"],
        name=data["name"],
        condition=data["condition"],
        effect=RuleEffect(data["effect"]),
        magnitude=float(data["magnitude"]),
        confidence=float(data["confidence"]),
        source=RuleSource(data.get("source", RuleSource.USER_CREATED.value)),
        evidence=list(data.get("evidence", [])),
    )


def stage_rule_to_dict(rule: StageRule) -> Dict[str, Any]:
    """Convert StageRule to a dictionary for serialization."""
    return {
        "id": rule.id,
        "category": rule.category,
        "name": rule.name,
        "condition": rule.condition,
        "effect": rule.effect.value,
        "magnitude": rule.magnitude,
        "confidence": rule.confidence,
        "source": rule.source.value,
        "evidence": list(rule.evidence),
        "created_at": _datetime_to_iso(rule.created_at),
    }


def stage_rule_from_dict(data: Dict[str, Any]) -> StageRule:
    """Create StageRule from a dictionary.

    Args:
        data: Dictionary as produced by stage_rule_to_dict.

    Returns:
        Parsed StageRule instance.
    """
    created_at = _iso_to_datetime(data.get("created_at")) or _utcnow()
    return StageRule(
        id=data["id"],
        category=data["category"],
        name=data["name"],
        condition=data["condition"],
        effect=RuleEffect(data["effect"]),
        magnitude=float(data["magnitude"]),
        confidence=float(data["confidence"]),
        source=RuleSource(data.get("source", RuleSource.USER_CREATED.value)),
        evidence=list(data.get("evidence", [])),
        created_at=created_at,
    )


def rule_suggestion_to_dict(suggestion: RuleSuggestion) -> Dict[str, Any]:
    """Convert RuleSuggestion to a dictionary for serialization."""
    result: Dict[str, Any] = {
        "id": suggestion.id,
        "suggested_rule": rule_input_to_dict(suggestion.suggested_rule),
        "trigger_decision_ids": list(suggestion.trigger_decision_ids),
        "observation_count": suggestion.observation_count,
        "reasoning": suggestion.reasoning,
        "status": suggestion.status.value,
        "created_at": _datetime_to_iso(suggestion.created_at),
    }
    if suggestion.edit_delta is not None:
        result["edit_delta"] = suggestion.edit_delta
    if suggestion.rejection_reason is not None:
        result["rejection_reason"] = suggestion.rejection_reason
    return result


def rule_suggestion_from_dict(data: Dict[str, Any]) -> RuleSuggestion:
    """Create RuleSuggestion from a dictionary."""
    return RuleSuggestion(
        id=data["id"],
        suggested_rule=rule_input_from_dict(data["suggested_rule"]),
        trigger_decision_ids=list(data.get("trigger_decision_ids", [])),
        observation_count=int(data.get("observation_count", 1)),
        reasoning=data.get("reasoning", ""),
        status=RuleSuggestionStatus(data.get("status", RuleSuggestionStatus.PENDING.value)),
        created_at=_iso_to_datetime(data.get("created_at")) or _utcnow(),
        edit_delta=data.get("edit_delta"),
        rejection_reason=data.get("rejection_reason"),
    )

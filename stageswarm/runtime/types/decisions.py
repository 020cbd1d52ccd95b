"""Decision records: the audit trail of every judgment the orchestrator makes.

A Decision is immutable once recorded. The only later change is attaching
an outcome, which the registry does by producing a new record.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ._time import _datetime_to_iso, _iso_to_datetime, _utcnow


class DecisionType(str, Enum):
    """Kinds of decisions an orchestrator run can record."""

    CAPABILITY_ANALYSIS = "capability-analysis"
    FLAVOR_SELECTION = "flavor-selection"
    EXECUTION_MODE = "execution-mode"
    SYNTHESIS_APPROACH = "synthesis-approach"
    GAP_ASSESSMENT = "gap-assessment"
    RETRY = "retry"
    CONFIDENCE_GATE = "confidence-gate"


# Every successful run records exactly these, in this order.
REQUIRED_DECISION_TYPES = (
    DecisionType.CAPABILITY_ANALYSIS,
    DecisionType.FLAVOR_SELECTION,
    DecisionType.EXECUTION_MODE,
    DecisionType.SYNTHESIS_APPROACH,
)


class ArtifactQuality(str, Enum):
    """Quality grade assigned to a stage's output."""

    GOOD = "good"
    PARTIAL = "partial"
    POOR = "poor"


class GateResult(str, Enum):
    """Result of a gate evaluated after the decision."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class DecisionOutcome:
    """What happened after a decision was acted on.

    At least one field must be set.
    """

    artifact_quality: Optional[ArtifactQuality] = None
    gate_result: Optional[GateResult] = None
    rework_required: Optional[bool] = None
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        if (
            self.artifact_quality is None
            and self.gate_result is None
            and self.rework_required is None
            and self.notes is None
        ):
            raise ValueError("DecisionOutcome requires at least one field")


@dataclass(frozen=True)
class DecisionInput:
    """A decision before the registry assigns its id and timestamp.

    Attributes:
        stage_category: Stage category the decision belongs to.
        decision_type: Kind of decision.
        context: Snapshot of the inputs the decision was made from.
        options: Choices that were available (non-empty).
        selection: The chosen option (non-empty).
        reasoning: Human-readable explanation.
        confidence: Confidence in the selection, in [0, 1].
    """

    stage_category: str
    decision_type: DecisionType
    context: Dict[str, Any]
    options: List[str]
    selection: str
    reasoning: str
    confidence: float

    def __post_init__(self) -> None:
        if not self.options:
            raise ValueError("Decision options must not be empty")
        if not self.selection:
            raise ValueError("Decision selection must not be empty")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Decision confidence {self.confidence} is outside [0, 1]")


@dataclass(frozen=True)
class Decision:
    """A recorded, immutable decision."""

    id: str
    stage_category: str
    decision_type: DecisionType
    context: Dict[str, Any]
    options: List[str]
    selection: str
    reasoning: str
    confidence: float
    decided_at: datetime = field(default_factory=_utcnow)
    outcome: Optional[DecisionOutcome] = None


@dataclass
class DecisionStats:
    """Aggregate view over recorded decisions.

    Attributes:
        count: Number of decisions considered.
        avg_confidence: Mean confidence, 0.0 when there are none.
        count_by_type: Decision count keyed by decision type value.
        outcome_distribution: Counts keyed by good, partial, poor and no_outcome.
    """

    count: int = 0
    avg_confidence: float = 0.0
    count_by_type: Dict[str, int] = field(default_factory=dict)
    outcome_distribution: Dict[str, int] = field(
        default_factory=lambda: {"good": 0, "partial": 0, "poor": 0, "no_outcome": 0}
    )


# =============================================================================
# Serialization Functions
# =============================================================================


def decision_outcome_to_dict(outcome: DecisionOutcome) -> Dict[str, Any]:
    """Convert DecisionOutcome to a dictionary, omitting unset fields."""
    result: Dict[str, Any] = {}
    if outcome.artifact_quality is not None:
        result["artifact_quality"] = outcome.artifact_quality.value
    if outcome.gate_result is not None:
        result["gate_result"] = outcome.gate_result.value
    if outcome.rework_required is not None:
        result["rework_required"] = outcome.rework_required
    if outcome.notes is not None:
        result["notes"] = outcome.notes
    return result


def decision_outcome_from_dict(data: Dict[str, Any]) -> DecisionOutcome:
    """Create DecisionOutcome from a dictionary."""
    quality = data.get("artifact_quality")
    gate = data.get("gate_result")
    return DecisionOutcome(
        artifact_quality=ArtifactQuality(quality) if quality is not None else None,
        gate_result=GateResult(gate) if gate is not None else None,
        rework_required=data.get("rework_required"),
        notes=data.get("notes"),
    )


def decision_to_dict(decision: Decision) -> Dict[str, Any]:
    """Convert Decision to a dictionary for serialization.

    Args:
        decision: The Decision to convert.

    Returns:
        Dictionary representation suitable for JSON/JSONL serialization.
    """
    result: Dict[str, Any] = {
        "id": decision.id,
        "stage_category": decision.stage_category,
        "decision_type": decision.decision_type.value,
        "context": dict(decision.context),
        "options": list(decision.options),
        "selection": decision.selection,
        "reasoning": decision.reasoning,
        "confidence": decision.confidence,
        "decided_at": _datetime_to_iso(decision.decided_at),
    }
    if decision.outcome is not None:
        result["outcome"] = decision_outcome_to_dict(decision.outcome)
    return result


def decision_from_dict(data: Dict[str, Any]) -> Decision:
    """Create Decision from a dictionary.

    Args:
        data: Dictionary as produced by decision_to_dict.

    Returns:
        Parsed Decision instance.
    """
    outcome_data = data.get("outcome")
    return Decision(
        id=data["id"],
        stage_category=data["stage_category"],
        decision_type=DecisionType(data["decision_type"]),
        context=dict(data.get("context", {})),
        options=list(data["options"]),
        selection=data["selection"],
        reasoning=data.get("reasoning", ""),
        confidence=float(data["confidence"]),
        decided_at=_iso_to_datetime(data.get("decided_at")) or _utcnow(),
        outcome=decision_outcome_from_dict(outcome_data) if outcome_data else None,
    )


def decision_stats_to_dict(stats: DecisionStats) -> Dict[str, Any]:
    """Convert DecisionStats to a dictionary for serialization."""
    return {
        "count": stats.count,
        "avg_confidence": stats.avg_confidence,
        "count_by_type": dict(stats.count_by_type),
        "outcome_distribution": dict(stats.outcome_distribution),
    }

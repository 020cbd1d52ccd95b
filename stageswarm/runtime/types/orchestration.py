"""Types flowing through a single orchestrator run.

Inputs (StageDefinition, OrchestratorContext) come from the caller. Every
other type here is created fresh inside one run and never mutated after
it is returned.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

from .decisions import (
    ArtifactQuality,
    Decision,
    DecisionOutcome,
    decision_outcome_to_dict,
    decision_to_dict,
)


class FlavorHintStrategy(str, Enum):
    """How a flavor hint affects candidates."""

    RESTRICT = "restrict"  # Only recommended flavors stay candidates
    PREFER = "prefer"  # Recommended flavors get a score boost


class ExecutionMode(str, Enum):
    """How selected flavors are dispatched."""

    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"


class GapSeverity(str, Enum):
    """Importance of an uncovered vocabulary keyword."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class FlavorHint:
    """Caller guidance on which flavors to favour."""

    recommended: List[str] = field(default_factory=list)
    strategy: FlavorHintStrategy = FlavorHintStrategy.PREFER


@dataclass(frozen=True)
class OrchestratorContext:
    """Per-run input describing the work and what is already available.

    Attributes:
        available_artifacts: Names of artifacts produced by earlier stages.
        bet: Optional task description (title, description, tags, ...).
        learnings: Free-text learnings from earlier runs.
        flavor_hint: Optional recommendation for which flavors to use.
        active_kataka_id: Agent currently driving the run, if any.
    """

    available_artifacts: List[str] = field(default_factory=list)
    bet: Optional[Dict[str, Any]] = None
    learnings: List[str] = field(default_factory=list)
    flavor_hint: Optional[FlavorHint] = None
    active_kataka_id: Optional[str] = None

    def with_kataka(self, kataka_id: Optional[str]) -> "OrchestratorContext":
        """Return a copy whose active agent is ``kataka_id`` when it is set."""
        if kataka_id is None:
            return self
        return replace(self, active_kataka_id=kataka_id)


@dataclass(frozen=True)
class OrchestratorConfig:
    """Per-stage orchestrator settings.

    The engine itself only reads max_parallel_flavors. type and
    confidence_threshold are carried for callers: type picks which
    orchestrator implementation to build, and confidence_threshold is the
    bar a caller holds recorded decision confidences against.

    Attributes:
        type: Orchestrator implementation name.
        confidence_threshold: Minimum confidence a caller expects, in [0, 1].
        max_parallel_flavors: Largest selection that still runs in parallel.
    """

    type: str = "scoring"
    confidence_threshold: float = 0.7
    max_parallel_flavors: int = 5

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ValueError(
                f"confidence_threshold {self.confidence_threshold} is outside [0, 1]"
            )
        if self.max_parallel_flavors < 1:
            raise ValueError(
                f"max_parallel_flavors must be >= 1, got {self.max_parallel_flavors}"
            )


@dataclass(frozen=True)
class StageDefinition:
    """A stage as configured by the caller."""

    category: str
    available_flavors: List[str] = field(default_factory=list)
    pinned_flavors: List[str] = field(default_factory=list)
    excluded_flavors: List[str] = field(default_factory=list)
    orchestrator: OrchestratorConfig = field(default_factory=OrchestratorConfig)


@dataclass(frozen=True)
class MatchReport:
    """How one candidate flavor scored against the run context."""

    flavor_name: str
    score: float
    keyword_hits: int
    rule_adjustments: float
    learning_boost: float
    hint_boost: float
    reasoning: str


@dataclass(frozen=True)
class CapabilityProfile:
    """Snapshot of the inputs the capability analysis was made from."""

    stage_category: str
    bet_context: Dict[str, Any]
    available_artifacts: List[str]
    active_rules: List[str]
    learnings: List[str]


@dataclass(frozen=True)
class GapReport:
    """A vocabulary keyword present in context but not covered by the selection."""

    description: str
    severity: GapSeverity
    suggested_flavors: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ArtifactValue:
    """A named artifact and its value. ``None`` means the value is missing."""

    name: str
    value: Any = None


@dataclass(frozen=True)
class FlavorExecutionResult:
    """What the executor returns for one flavor."""

    flavor_name: str
    artifacts: Dict[str, Any] = field(default_factory=dict)
    synthesis_artifact: Optional[ArtifactValue] = None

    @property
    def has_synthesis_value(self) -> bool:
        """True when the synthesis artifact carries a value (0 and False count)."""
        return self.synthesis_artifact is not None and self.synthesis_artifact.value is not None


@dataclass(frozen=True)
class SynthesisStrategy:
    """How per-flavor outputs are merged, with the options that were considered."""

    approach: str
    alternatives: List[str]
    reasoning: str


@dataclass(frozen=True)
class DecisionOutcomeRecord:
    """An outcome that was successfully attached to a decision."""

    decision_id: str
    outcome: DecisionOutcome


@dataclass(frozen=True)
class ReflectionResult:
    """Post-execution bookkeeping for one run."""

    decision_outcomes: List[DecisionOutcomeRecord]
    learnings: List[str]
    rule_suggestions: List[str]
    overall_quality: ArtifactQuality


@dataclass(frozen=True)
class OrchestratorResult:
    """Everything one successful run produced.

    Attributes:
        stage_category: Stage that ran.
        selected_flavors: Names of the flavors that were executed (non-empty).
        decisions: The four required decisions, in the order they were made.
        flavor_results: One result per selected flavor, in selection order.
        stage_artifact: The merged stage-level artifact.
        execution_mode: sequential or parallel.
        capability_profile: Inputs used for the capability analysis.
        match_reports: One report per scored candidate.
        reflection: Outcomes, learnings and rule suggestions.
        gaps: Uncovered vocabulary keywords.
        warnings: Recoverable problems encountered during the run.
    """

    stage_category: str
    selected_flavors: List[str]
    decisions: List[Decision]
    flavor_results: List[FlavorExecutionResult]
    stage_artifact: ArtifactValue
    execution_mode: ExecutionMode
    capability_profile: CapabilityProfile
    match_reports: List[MatchReport]
    reflection: ReflectionResult
    gaps: List[GapReport] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


# =============================================================================
# Serialization Functions
# =============================================================================


def orchestrator_context_from_dict(data: Dict[str, Any]) -> OrchestratorContext:
    """Create OrchestratorContext from a dictionary.

    Args:
        data: Dictionary with context fields; all keys are optional.

    Returns:
        Parsed OrchestratorContext instance.
    """
    hint_data = data.get("flavor_hint")
    hint = None
    if hint_data:
        hint = FlavorHint(
            recommended=list(hint_data.get("recommended", [])),
            strategy=FlavorHintStrategy(hint_data.get("strategy", "prefer")),
        )
    return OrchestratorContext(
        available_artifacts=list(data.get("available_artifacts", [])),
        bet=data.get("bet"),
        learnings=list(data.get("learnings", [])),
        flavor_hint=hint,
        active_kataka_id=data.get("active_kataka_id"),
    )


def stage_definition_from_dict(data: Dict[str, Any]) -> StageDefinition:
    """Create StageDefinition from a dictionary."""
    orch = data.get("orchestrator") or {}
    return StageDefinition(
        category=data["category"],
        available_flavors=list(data.get("available_flavors", [])),
        pinned_flavors=list(data.get("pinned_flavors", [])),
        excluded_flavors=list(data.get("excluded_flavors", [])),
        orchestrator=OrchestratorConfig(
            type=orch.get("type", "scoring"),
            confidence_threshold=float(orch.get("confidence_threshold", 0.7)),
            max_parallel_flavors=int(orch.get("max_parallel_flavors", 5)),
        ),
    )


def match_report_to_dict(report: MatchReport) -> Dict[str, Any]:
    """Convert MatchReport to a dictionary for serialization."""
    return {
        "flavor_name": report.flavor_name,
        "score": report.score,
        "keyword_hits": report.keyword_hits,
        "rule_adjustments": report.rule_adjustments,
        "learning_boost": report.learning_boost,
        "hint_boost": report.hint_boost,
        "reasoning": report.reasoning,
    }


def gap_report_to_dict(gap: GapReport) -> Dict[str, Any]:
    """Convert GapReport to a dictionary for serialization."""
    return {
        "description": gap.description,
        "severity": gap.severity.value,
        "suggested_flavors": list(gap.suggested_flavors),
    }


def orchestrator_result_to_dict(result: OrchestratorResult) -> Dict[str, Any]:
    """Convert OrchestratorResult to a dictionary for serialization.

    Args:
        result: The OrchestratorResult to convert.

    Returns:
        Dictionary representation suitable for JSON serialization, provided
        the artifact values themselves are JSON-serializable.
    """
    profile = result.capability_profile
    reflection = result.reflection
    return {
        "stage_category": result.stage_category,
        "selected_flavors": list(result.selected_flavors),
        "decisions": [decision_to_dict(d) for d in result.decisions],
        "flavor_results": [
            {
                "flavor_name": fr.flavor_name,
                "artifacts": dict(fr.artifacts),
                "synthesis_artifact": (
                    {"name": fr.synthesis_artifact.name, "value": fr.synthesis_artifact.value}
                    if fr.synthesis_artifact is not None
                    else None
                ),
            }
            for fr in result.flavor_results
        ],
        "stage_artifact": {
            "name": result.stage_artifact.name,
            "value": result.stage_artifact.value,
        },
        "execution_mode": result.execution_mode.value,
        "capability_profile": {
            "stage_category": profile.stage_category,
            "bet_context": dict(profile.bet_context),
            "available_artifacts": list(profile.available_artifacts),
            "active_rules": list(profile.active_rules),
            "learnings": list(profile.learnings),
        },
        "match_reports": [match_report_to_dict(r) for r in result.match_reports],
        "reflection": {
            "decision_outcomes": [
                {
                    "decision_id": rec.decision_id,
                    "outcome": decision_outcome_to_dict(rec.outcome),
                }
                for rec in reflection.decision_outcomes
            ],
            "learnings": list(reflection.learnings),
            "rule_suggestions": list(reflection.rule_suggestions),
            "overall_quality": reflection.overall_quality.value,
        },
        "gaps": [gap_report_to_dict(g) for g in result.gaps],
        "warnings": list(result.warnings),
    }

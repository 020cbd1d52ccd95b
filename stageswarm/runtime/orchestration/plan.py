"""
plan.py - Plan phase: choose the flavors to run and how to run them.

Selection is every pinned flavor plus the single top-scored candidate,
pinned first. The run is parallel only when more than one flavor is
selected and the count fits within max_parallel_flavors.

Records flavor-selection and execution-mode (required) and attempts
gap-assessment (optional).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from stageswarm.runtime.ports import DecisionRegistry
from stageswarm.runtime.types import (
    Decision,
    DecisionInput,
    DecisionType,
    ExecutionMode,
    Flavor,
    GapReport,
    OrchestratorConfig,
    OrchestratorContext,
    gap_report_to_dict,
)

from .journal import RunJournal
from .match import MatchPhaseResult
from .recording import record_optional, record_required
from .scoring import clamp01, detect_gaps

PHASE = "plan"

EXECUTION_MODE_CONFIDENCE = 0.95
GAP_ASSESSMENT_CONFIDENCE = 0.9


@dataclass
class PlanPhaseResult:
    """Output of the plan phase."""

    selected_flavors: List[Flavor]
    execution_mode: ExecutionMode
    selection_decision: Decision
    mode_decision: Decision
    gaps: List[GapReport] = field(default_factory=list)
    gap_decision: Optional[Decision] = None

    @property
    def decisions(self) -> List[Decision]:
        return [self.selection_decision, self.mode_decision]


def rank_candidates(match: MatchPhaseResult) -> List[Tuple[Flavor, float]]:
    """Candidates with their scores, best first. Ties keep candidate order."""
    scored = []
    for flavor in match.candidates:
        report = match.report_for(flavor.name)
        scored.append((flavor, report.score if report is not None else 0.0))
    return sorted(scored, key=lambda item: item[1], reverse=True)


def select_flavors(
    pinned_flavors: Sequence[Flavor], ranked: Sequence[Tuple[Flavor, float]]
) -> List[Flavor]:
    """Pinned flavors then the top candidate, deduplicated by name."""
    top = [ranked[0][0]] if ranked else []
    seen = set()
    selected: List[Flavor] = []
    for flavor in list(pinned_flavors) + top:
        if flavor.name not in seen:
            seen.add(flavor.name)
            selected.append(flavor)
    return selected


def choose_execution_mode(selected_count: int, max_parallel: int) -> Tuple[ExecutionMode, str]:
    """Execution mode plus the reasoning recorded with it."""
    if selected_count <= 1:
        return ExecutionMode.SEQUENTIAL, "Only one flavor selected; sequential is optimal."
    if selected_count <= max_parallel:
        return (
            ExecutionMode.PARALLEL,
            f"{selected_count} flavors fit within max_parallel_flavors={max_parallel}; "
            f"parallelizing for efficiency.",
        )
    return (
        ExecutionMode.SEQUENTIAL,
        f"{selected_count} flavors exceeds max_parallel_flavors={max_parallel}; "
        f"running sequentially to respect resource limits.",
    )


def plan_execution(
    match: MatchPhaseResult,
    context: OrchestratorContext,
    config: OrchestratorConfig,
    decision_registry: DecisionRegistry,
    keywords: Sequence[str],
    stage_category: str,
    journal: RunJournal,
) -> PlanPhaseResult:
    """Select flavors, decide the execution mode and look for vocabulary gaps.

    Raises:
        OrchestratorError: If a required decision cannot be recorded.
    """
    ranked = rank_candidates(match)
    selected = select_flavors(match.pinned_flavors, ranked)

    # No scored candidates means everything was pinned: nothing to be confident about.
    confidence = clamp01(ranked[0][1]) if ranked else 0.0

    options = list(dict.fromkeys(f.name for f in match.candidates + match.pinned_flavors))
    if ranked:
        selection = ranked[0][0].name
    elif match.pinned_flavors:
        selection = match.pinned_flavors[0].name
    else:
        selection = match.candidates[0].name
    if selection not in options:
        options.append(selection)

    score_summary = ", ".join(f"{f.name}({score:.2f})" for f, score in ranked[:3])
    selection_decision = record_required(
        decision_registry,
        DecisionInput(
            stage_category=stage_category,
            decision_type=DecisionType.FLAVOR_SELECTION,
            context={
                "available_artifacts": list(context.available_artifacts),
                "bet": dict(context.bet) if context.bet else None,
                "learning_count": len(context.learnings),
                "candidate_count": len(match.candidates),
                "pinned_flavors": list(match.pinned),
                "excluded_flavors": sorted(match.excluded),
            },
            options=options,
            selection=selection,
            reasoning=(
                f"Scored candidates: [{score_summary or 'none (all pinned)'}]. "
                f"Pinned: [{', '.join(match.pinned) or 'none'}]. "
                f'Selected: "{selection}" as primary, with '
                f"{len(match.pinned_flavors)} pinned flavor(s)."
            ),
            confidence=confidence,
        ),
        PHASE,
    )

    max_parallel = config.max_parallel_flavors
    mode, mode_reasoning = choose_execution_mode(len(selected), max_parallel)
    mode_decision = record_required(
        decision_registry,
        DecisionInput(
            stage_category=stage_category,
            decision_type=DecisionType.EXECUTION_MODE,
            context={
                "flavor_count": len(selected),
                "max_parallel_flavors": max_parallel,
                "selected_flavors": [f.name for f in selected],
            },
            options=[ExecutionMode.SEQUENTIAL.value, ExecutionMode.PARALLEL.value],
            selection=mode.value,
            reasoning=mode_reasoning,
            confidence=EXECUTION_MODE_CONFIDENCE,
        ),
        PHASE,
    )
    journal.debug(
        'Orchestrator: stage "%s" selected [%s], mode=%s',
        stage_category,
        ", ".join(f.name for f in selected),
        mode.value,
    )

    gaps = detect_gaps(keywords, context, selected, match.candidates + match.pinned_flavors)
    gap_decision = record_optional(
        decision_registry,
        DecisionInput(
            stage_category=stage_category,
            decision_type=DecisionType.GAP_ASSESSMENT,
            context={
                "selected_flavors": [f.name for f in selected],
                "keyword_count": len(keywords),
                "gaps": [gap_report_to_dict(g) for g in gaps],
            },
            options=["gaps-found", "no-gaps"],
            selection="gaps-found" if gaps else "no-gaps",
            reasoning=_gap_reasoning(gaps, keywords),
            confidence=GAP_ASSESSMENT_CONFIDENCE,
        ),
        journal,
    )

    return PlanPhaseResult(
        selected_flavors=selected,
        execution_mode=mode,
        selection_decision=selection_decision,
        mode_decision=mode_decision,
        gaps=gaps,
        gap_decision=gap_decision,
    )


def _gap_reasoning(gaps: Sequence[GapReport], keywords: Sequence[str]) -> str:
    if not keywords:
        return "No vocabulary keywords configured; gap detection found nothing to check."
    if not gaps:
        return "Every vocabulary keyword mentioned in the bet is covered by the selection."
    listed = "; ".join(f"{g.description} [{g.severity.value}]" for g in gaps)
    return f"{len(gaps)} vocabulary gap(s): {listed}"

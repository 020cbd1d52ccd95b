"""Decision recording helpers shared by the phases.

Required decisions must be persisted for a run to be auditable, so a
failed write aborts the run. Optional decisions are best effort.
"""

from __future__ import annotations

from typing import Optional

from stageswarm.runtime.errors import OrchestratorError
from stageswarm.runtime.ports import DecisionRegistry
from stageswarm.runtime.types import Decision, DecisionInput

from .journal import RunJournal


def record_required(
    registry: DecisionRegistry, decision: DecisionInput, phase: str
) -> Decision:
    """Record a decision the run cannot complete without.

    Raises:
        OrchestratorError: If the registry write fails.
    """
    try:
        return registry.record(decision)
    except Exception as exc:
        raise OrchestratorError(
            f'Stage "{decision.stage_category}" failed to record '
            f"{decision.decision_type.value} decision: {exc}",
            phase=phase,
            stage_category=decision.stage_category,
        ) from exc


def record_optional(
    registry: DecisionRegistry, decision: DecisionInput, journal: RunJournal
) -> Optional[Decision]:
    """Record a decision, logging and returning None if the write fails."""
    try:
        return registry.record(decision)
    except Exception as exc:
        journal.warning(
            'Orchestrator: failed to record optional %s decision for stage "%s": %s',
            decision.decision_type.value,
            decision.stage_category,
            exc,
        )
        return None

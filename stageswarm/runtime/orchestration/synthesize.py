"""Synthesize phase: merge per-flavor outputs into one stage artifact.

The merged artifact is always a record keyed by flavor name. The strategy
decides which approach is recorded for downstream consumers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Sequence

from stageswarm.runtime.errors import OrchestratorError
from stageswarm.runtime.ports import DecisionRegistry
from stageswarm.runtime.types import (
    ArtifactValue,
    Decision,
    DecisionInput,
    DecisionType,
    FlavorExecutionResult,
    OrchestratorContext,
)

from .recording import record_required
from .scoring import ScoringStrategy

PHASE = "synthesize"

SYNTHESIS_CONFIDENCE = 0.9


@dataclass
class SynthesisPhaseResult:
    stage_artifact: ArtifactValue
    synthesis_decision: Decision


def merge_results(
    results: Sequence[FlavorExecutionResult], stage_category: str
) -> ArtifactValue:
    """Keyed record of every flavor's synthesis value."""
    merged: Dict[str, Any] = {}
    for result in results:
        merged[result.flavor_name] = result.synthesis_artifact.value
    return ArtifactValue(name=f"{stage_category}-synthesis", value=merged)


def synthesize(
    results: Sequence[FlavorExecutionResult],
    context: OrchestratorContext,
    strategy: ScoringStrategy,
    decision_registry: DecisionRegistry,
    stage_category: str,
) -> SynthesisPhaseResult:
    """Validate flavor outputs, merge them and record the synthesis approach.

    Raises:
        OrchestratorError: If a flavor produced no synthesis value, if the
            strategy's approach is not one of its own alternatives, or if
            the decision cannot be recorded.
    """
    missing = [r.flavor_name for r in results if not r.has_synthesis_value]
    if missing:
        raise OrchestratorError(
            f'Stage "{stage_category}" synthesis failed: synthesis artifact missing '
            f"from flavor(s): {', '.join(missing)}.",
            phase=PHASE,
            stage_category=stage_category,
        )

    chosen = strategy.choose_synthesis(results, context)
    if chosen.approach not in chosen.alternatives:
        raise OrchestratorError(
            f'Stage "{stage_category}" synthesis strategy returned approach '
            f'"{chosen.approach}" which is not one of its alternatives: '
            f"[{', '.join(chosen.alternatives)}]. Fix the vocabulary configuration.",
            phase=PHASE,
            stage_category=stage_category,
        )

    stage_artifact = merge_results(results, stage_category)

    decision = record_required(
        decision_registry,
        DecisionInput(
            stage_category=stage_category,
            decision_type=DecisionType.SYNTHESIS_APPROACH,
            context={
                "flavor_count": len(results),
                "flavor_names": [r.flavor_name for r in results],
            },
            options=list(chosen.alternatives),
            selection=chosen.approach,
            reasoning=chosen.reasoning,
            confidence=SYNTHESIS_CONFIDENCE,
        ),
        PHASE,
    )
    return SynthesisPhaseResult(stage_artifact=stage_artifact, synthesis_decision=decision)

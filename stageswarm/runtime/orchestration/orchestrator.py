"""
orchestrator.py - StageOrchestrator: the six-phase orchestration loop.

    1. Analyze    - snapshot context and active rules into a capability profile
    2. Match      - resolve and score candidate flavors
    3. Plan       - select flavors, choose sequential or parallel execution
    4. Execute    - run the selected flavors through the injected executor
    5. Synthesize - merge per-flavor outputs into one stage artifact
    6. Reflect    - record outcomes, derive learnings, propose rules

Every non-deterministic judgment is recorded as a Decision through the
injected DecisionRegistry. A run either returns a complete
OrchestratorResult or raises a single error; partial results are never
returned as success.

Usage:
    from stageswarm.runtime.orchestration import StageOrchestrator, StageOrchestratorDeps

    orchestrator = StageOrchestrator("build", deps)
    result = await orchestrator.run(stage, context)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Tuple

from stageswarm.runtime.errors import OrchestratorError
from stageswarm.runtime.ports import (
    DecisionRegistry,
    FlavorExecutor,
    FlavorRegistry,
    StageRuleRegistry,
)
from stageswarm.runtime.types import (
    CapabilityProfile,
    Decision,
    DecisionInput,
    DecisionType,
    OrchestratorConfig,
    OrchestratorContext,
    OrchestratorResult,
    StageDefinition,
    StageRule,
)

from .execute import execute_flavors
from .journal import RunJournal
from .match import match_flavors
from .plan import plan_execution
from .recording import record_required
from .reflect import reflect
from .scoring import ScoringStrategy, VocabularyScoringStrategy
from .synthesize import synthesize

if TYPE_CHECKING:
    from stageswarm.config.vocabulary_registry import StageVocabulary

logger = logging.getLogger(__name__)

CAPABILITY_ANALYSIS_CONFIDENCE = 0.95


@dataclass
class StageOrchestratorDeps:
    """Collaborators injected into a StageOrchestrator.

    Attributes:
        flavor_registry: Resolves flavor names.
        decision_registry: Records decisions and outcomes.
        executor: Runs flavors.
        rule_registry: Optional; without it no rules apply and no
            suggestions are made.
    """

    flavor_registry: FlavorRegistry
    decision_registry: DecisionRegistry
    executor: FlavorExecutor
    rule_registry: Optional[StageRuleRegistry] = None


class StageOrchestrator:
    """Runs one stage category through the orchestration loop.

    Holds no state between runs; concurrent run() calls only share the
    injected collaborators.
    """

    def __init__(
        self,
        stage_category: str,
        deps: StageOrchestratorDeps,
        config: Optional[OrchestratorConfig] = None,
        vocabulary: Optional["StageVocabulary"] = None,
        strategy: Optional[ScoringStrategy] = None,
        log: Optional[logging.Logger] = None,
    ):
        """
        Args:
            stage_category: Stage category this orchestrator serves.
            deps: Injected registries and executor.
            config: Orchestrator settings; defaults to each stage's own
                ``orchestrator`` config at run time.
            vocabulary: Drives the default scoring strategy.
            strategy: Overrides scoring and synthesis entirely; takes
                precedence over ``vocabulary``.
            log: Logger for run messages; defaults to this module's logger.
        """
        self.stage_category = stage_category
        self.deps = deps
        self.config = config
        self.strategy = strategy or VocabularyScoringStrategy(vocabulary)
        self.log = log or logger

    async def run(self, stage: StageDefinition, context: OrchestratorContext) -> OrchestratorResult:
        """Run all six phases for one stage.

        Raises:
            OrchestratorError: On any fatal configuration, registry or
                parallel execution failure.
            Exception: The executor's own error, unchanged, when a flavor
                fails in sequential mode.
        """
        journal = RunJournal(self.log)
        if stage.category != self.stage_category:
            journal.warning(
                'Orchestrator: stage definition category "%s" does not match orchestrator '
                'category "%s"; using "%s".',
                stage.category,
                self.stage_category,
                self.stage_category,
            )
        config = self.config or stage.orchestrator
        decisions: List[Decision] = []

        rules = self._load_rules()
        profile, analysis_decision = self.analyze(stage, context, rules)
        decisions.append(analysis_decision)

        match = match_flavors(
            stage,
            context,
            rules,
            self.deps.flavor_registry,
            self.strategy,
            self.stage_category,
            journal,
        )

        plan = plan_execution(
            match,
            context,
            config,
            self.deps.decision_registry,
            self.strategy.keywords,
            self.stage_category,
            journal,
        )
        decisions.extend(plan.decisions)

        flavor_results = await execute_flavors(
            self.deps.executor,
            plan.selected_flavors,
            plan.execution_mode,
            context,
            self.stage_category,
            journal,
        )

        synthesis = synthesize(
            flavor_results,
            context,
            self.strategy,
            self.deps.decision_registry,
            self.stage_category,
        )
        decisions.append(synthesis.synthesis_decision)

        reflection = reflect(
            decisions,
            flavor_results,
            self.deps.decision_registry,
            self.stage_category,
            journal,
            rule_registry=self.deps.rule_registry,
        )

        journal.info(
            'Orchestrator: stage "%s" ran [%s] (%s), quality=%s',
            self.stage_category,
            ", ".join(f.name for f in plan.selected_flavors),
            plan.execution_mode.value,
            reflection.overall_quality.value,
        )

        return OrchestratorResult(
            stage_category=self.stage_category,
            selected_flavors=[f.name for f in plan.selected_flavors],
            decisions=decisions,
            flavor_results=flavor_results,
            stage_artifact=synthesis.stage_artifact,
            execution_mode=plan.execution_mode,
            capability_profile=profile,
            match_reports=match.match_reports,
            reflection=reflection,
            gaps=plan.gaps,
            warnings=list(journal.warnings),
        )

    def _load_rules(self) -> List[StageRule]:
        if self.deps.rule_registry is None:
            return []
        try:
            return list(self.deps.rule_registry.load_rules(self.stage_category))
        except Exception as exc:
            raise OrchestratorError(
                f'Stage "{self.stage_category}" failed to load rules: {exc}',
                phase="analyze",
                stage_category=self.stage_category,
            ) from exc

    def analyze(
        self,
        stage: StageDefinition,
        context: OrchestratorContext,
        rules: List[StageRule],
    ) -> Tuple[CapabilityProfile, Decision]:
        """Build the capability profile and record the capability-analysis decision."""
        rule_ids = [r.id for r in rules]
        profile = CapabilityProfile(
            stage_category=self.stage_category,
            bet_context=dict(context.bet or {}),
            available_artifacts=list(context.available_artifacts),
            active_rules=rule_ids,
            learnings=list(context.learnings),
        )

        decision = record_required(
            self.deps.decision_registry,
            DecisionInput(
                stage_category=self.stage_category,
                decision_type=DecisionType.CAPABILITY_ANALYSIS,
                context={
                    "available_artifacts": list(context.available_artifacts),
                    "bet": dict(context.bet) if context.bet else None,
                    "learning_count": len(context.learnings),
                    "active_rule_count": len(rule_ids),
                    "available_flavor_count": len(stage.available_flavors),
                },
                options=["proceed", "insufficient-context"],
                selection="proceed",
                reasoning=(
                    f"Analyzed context for {self.stage_category} stage: "
                    f"{len(context.available_artifacts)} artifact(s), "
                    f"{len(context.learnings)} learning(s), "
                    f"{len(rule_ids)} active rule(s), "
                    f"{len(stage.available_flavors)} available flavor(s)."
                ),
                confidence=CAPABILITY_ANALYSIS_CONFIDENCE,
            ),
            "analyze",
        )
        return profile, decision

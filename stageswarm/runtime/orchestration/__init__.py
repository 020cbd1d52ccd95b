# stageswarm/runtime/orchestration package
# The stage orchestration engine: rule evaluation, scoring and the six phases.
#
# Modules:
#   - rule_evaluator: free-text rule conditions -> exclude/require/boost/penalize
#   - scoring: ScoringStrategy, vocabulary scoring, gap detection
#   - match / plan / execute / synthesize / reflect: one module per phase
#   - orchestrator: StageOrchestrator.run()
#   - factory: create_stage_orchestrator()
#
# Usage:
#     from stageswarm.runtime.orchestration import create_stage_orchestrator
#     orchestrator = create_stage_orchestrator("build", deps)
#     result = await orchestrator.run(stage, context)

from .execute import execute_flavors
from .factory import create_stage_orchestrator
from .journal import RunJournal
from .match import MatchPhaseResult, match_flavors
from .orchestrator import StageOrchestrator, StageOrchestratorDeps
from .plan import PlanPhaseResult, plan_execution
from .reflect import generate_rule_suggestions, reflect
from .rule_evaluator import STOP_WORDS, RuleEffects, bet_text, classify_rules, evaluate_rule
from .scoring import (
    HINT_BOOST,
    LEARNING_BOOST,
    NEUTRAL_SCORE,
    ScoringStrategy,
    VocabularyScoringStrategy,
    detect_gaps,
)
from .synthesize import SynthesisPhaseResult, synthesize

__all__ = [
    # Orchestrator
    "StageOrchestrator",
    "StageOrchestratorDeps",
    "create_stage_orchestrator",
    "RunJournal",
    # Rules
    "STOP_WORDS",
    "RuleEffects",
    "bet_text",
    "evaluate_rule",
    "classify_rules",
    # Scoring
    "NEUTRAL_SCORE",
    "LEARNING_BOOST",
    "HINT_BOOST",
    "ScoringStrategy",
    "VocabularyScoringStrategy",
    "detect_gaps",
    # Phases
    "MatchPhaseResult",
    "match_flavors",
    "PlanPhaseResult",
    "plan_execution",
    "execute_flavors",
    "SynthesisPhaseResult",
    "synthesize",
    "reflect",
    "generate_rule_suggestions",
]

# stageswarm/runtime package
# Stage orchestration runtime: choose, run, merge and learn from flavors.
#
# Core components:
#   - types: dataclasses for flavors, rules, decisions and run results
#   - errors: exception taxonomy (OrchestratorError, FlavorNotFoundError, ...)
#   - ports: abstract registries and the flavor executor
#   - registries: in-memory registry implementations
#   - orchestration: the orchestration engine
#
# Usage:
#     from stageswarm.runtime import create_stage_orchestrator, StageOrchestratorDeps
#     orchestrator = create_stage_orchestrator("build", deps)
#     result = await orchestrator.run(stage, context)

from .errors import (
    DecisionNotFoundError,
    FlavorNotFoundError,
    OrchestratorError,
    RuleNotFoundError,
    StageSwarmError,
    SuggestionNotFoundError,
    VocabularyError,
)
from .orchestration import (
    ScoringStrategy,
    StageOrchestrator,
    StageOrchestratorDeps,
    VocabularyScoringStrategy,
    create_stage_orchestrator,
)
from .ports import DecisionRegistry, FlavorExecutor, FlavorRegistry, StageRuleRegistry
from .registries import (
    InMemoryDecisionRegistry,
    InMemoryFlavorRegistry,
    InMemoryStageRuleRegistry,
)
from .types import (
    Flavor,
    OrchestratorConfig,
    OrchestratorContext,
    OrchestratorResult,
    StageDefinition,
    StageRule,
)

__all__ = [
    # Errors
    "StageSwarmError",
    "FlavorNotFoundError",
    "OrchestratorError",
    "DecisionNotFoundError",
    "RuleNotFoundError",
    "SuggestionNotFoundError",
    "VocabularyError",
    # Ports
    "FlavorRegistry",
    "DecisionRegistry",
    "StageRuleRegistry",
    "FlavorExecutor",
    # Registries
    "InMemoryFlavorRegistry",
    "InMemoryDecisionRegistry",
    "InMemoryStageRuleRegistry",
    # Orchestration
    "StageOrchestrator",
    "StageOrchestratorDeps",
    "ScoringStrategy",
    "VocabularyScoringStrategy",
    "create_stage_orchestrator",
    # Types
    "Flavor",
    "StageRule",
    "StageDefinition",
    "OrchestratorConfig",
    "OrchestratorContext",
    "OrchestratorResult",
]

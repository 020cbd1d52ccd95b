"""
types - Core type definitions for stage orchestration.

Flavors and rules are owned by external registries; decisions are the
audit records every run produces; the orchestration types describe one
run's inputs and outputs.

All types are dataclasses with to_dict/from_dict helpers so callers can
persist or transmit them without depending on this package's internals.

Usage:
    from stageswarm.runtime.types import (
        Flavor, StageRule, RuleEffect, Decision, DecisionType,
        OrchestratorContext, StageDefinition, OrchestratorResult,
    )
"""

from __future__ import annotations

from ._ids import (
    STAGE_CATEGORIES,
    DecisionId,
    RuleId,
    StageCategory,
    SuggestionId,
    generate_id,
    is_stage_category,
)
from .decisions import (
    REQUIRED_DECISION_TYPES,
    ArtifactQuality,
    Decision,
    DecisionInput,
    DecisionOutcome,
    DecisionStats,
    DecisionType,
    GateResult,
    decision_from_dict,
    decision_outcome_from_dict,
    decision_outcome_to_dict,
    decision_stats_to_dict,
    decision_to_dict,
)
from .flavor import Flavor, FlavorStepRef, flavor_from_dict, flavor_to_dict
from .orchestration import (
    ArtifactValue,
    CapabilityProfile,
    DecisionOutcomeRecord,
    ExecutionMode,
    FlavorExecutionResult,
    FlavorHint,
    FlavorHintStrategy,
    GapReport,
    GapSeverity,
    MatchReport,
    OrchestratorConfig,
    OrchestratorContext,
    OrchestratorResult,
    ReflectionResult,
    StageDefinition,
    SynthesisStrategy,
    gap_report_to_dict,
    match_report_to_dict,
    orchestrator_context_from_dict,
    orchestrator_result_to_dict,
    stage_definition_from_dict,
)
from .rules import (
    RuleEffect,
    RuleInput,
    RuleSource,
    RuleSuggestion,
    RuleSuggestionInput,
    RuleSuggestionStatus,
    StageRule,
    rule_input_from_dict,
    rule_input_to_dict,
    rule_suggestion_from_dict,
    rule_suggestion_to_dict,
    stage_rule_from_dict,
    stage_rule_to_dict,
)

__all__ = [
    # IDs
    "STAGE_CATEGORIES",
    "StageCategory",
    "DecisionId",
    "RuleId",
    "SuggestionId",
    "generate_id",
    "is_stage_category",
    # Flavors
    "Flavor",
    "FlavorStepRef",
    "flavor_to_dict",
    "flavor_from_dict",
    # Rules
    "RuleEffect",
    "RuleSource",
    "RuleSuggestionStatus",
    "RuleInput",
    "StageRule",
    "RuleSuggestionInput",
    "RuleSuggestion",
    "rule_input_to_dict",
    "rule_input_from_dict",
    "stage_rule_to_dict",
    "stage_rule_from_dict",
    "rule_suggestion_to_dict",
    "rule_suggestion_from_dict",
    # Decisions
    "DecisionType",
    "REQUIRED_DECISION_TYPES",
    "ArtifactQuality",
    "GateResult",
    "DecisionOutcome",
    "DecisionInput",
    "Decision",
    "DecisionStats",
    "decision_to_dict",
    "decision_from_dict",
    "decision_outcome_to_dict",
    "decision_outcome_from_dict",
    "decision_stats_to_dict",
    # Orchestration
    "FlavorHintStrategy",
    "ExecutionMode",
    "GapSeverity",
    "FlavorHint",
    "OrchestratorContext",
    "OrchestratorConfig",
    "StageDefinition",
    "MatchReport",
    "CapabilityProfile",
    "GapReport",
    "ArtifactValue",
    "FlavorExecutionResult",
    "SynthesisStrategy",
    "DecisionOutcomeRecord",
    "ReflectionResult",
    "OrchestratorResult",
    "orchestrator_context_from_dict",
    "stage_definition_from_dict",
    "match_report_to_dict",
    "gap_report_to_dict",
    "orchestrator_result_to_dict",
]

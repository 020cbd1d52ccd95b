"""
Test fixtures and helpers for the stage orchestration tests.

Provides flavor factories, in-memory registries, scripted executors and
registry doubles that fail on demand.
"""

import itertools
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

import pytest

_REPO_ROOT = Path(__file__).resolve().parent.parent
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from stageswarm.config import orchestrator_config, vocabulary_registry
from stageswarm.runtime.orchestration import StageOrchestrator, StageOrchestratorDeps
from stageswarm.runtime.ports import FlavorExecutor
from stageswarm.runtime.registries import (
    InMemoryDecisionRegistry,
    InMemoryFlavorRegistry,
    InMemoryStageRuleRegistry,
)
from stageswarm.runtime.types import (
    ArtifactValue,
    Decision,
    DecisionInput,
    DecisionOutcome,
    DecisionType,
    Flavor,
    FlavorExecutionResult,
    FlavorStepRef,
    OrchestratorConfig,
    OrchestratorContext,
    RuleEffect,
    RuleSource,
    StageDefinition,
    StageRule,
)

_MISSING = object()
_rule_ids = itertools.count(1)


# ============================================================================
# Factories
# ============================================================================


def make_flavor(
    name: str,
    category: str = "build",
    description: Optional[str] = None,
    kataka: Optional[str] = None,
) -> Flavor:
    return Flavor(
        name=name,
        stage_category=category,
        steps=[FlavorStepRef(step_name=f"{name}-step", step_type="build")],
        synthesis_artifact=f"{name}-output",
        description=description,
        kataka=kataka,
    )


def make_rule(
    name: str,
    condition: str,
    effect: str,
    magnitude: float = 1.0,
    confidence: float = 1.0,
    category: str = "build",
    rule_id: Optional[str] = None,
) -> StageRule:
    return StageRule(
        id=rule_id or f"rule-{next(_rule_ids)}",
        category=category,
        name=name,
        condition=condition,
        effect=RuleEffect(effect),
        magnitude=magnitude,
        confidence=confidence,
        source=RuleSource.USER_CREATED,
    )


def make_stage(
    available: Iterable[str] = ("typescript-feature", "bug-fix"),
    pinned: Iterable[str] = (),
    excluded: Iterable[str] = (),
    max_parallel: int = 5,
    category: str = "build",
) -> StageDefinition:
    return StageDefinition(
        category=category,
        available_flavors=list(available),
        pinned_flavors=list(pinned),
        excluded_flavors=list(excluded),
        orchestrator=OrchestratorConfig(
            type="scoring", confidence_threshold=0.7, max_parallel_flavors=max_parallel
        ),
    )


def make_context(**kwargs: Any) -> OrchestratorContext:
    kwargs.setdefault("available_artifacts", [])
    return OrchestratorContext(**kwargs)


def make_decision(
    decision_type: DecisionType,
    selection: str = "typescript-feature",
    context: Optional[Dict[str, Any]] = None,
    decision_id: str = "decision-1",
) -> Decision:
    return Decision(
        id=decision_id,
        stage_category="build",
        decision_type=decision_type,
        context=context or {},
        options=[selection],
        selection=selection,
        reasoning="test",
        confidence=0.9,
    )


# ============================================================================
# Executors and registry doubles
# ============================================================================


class ScriptedExecutor(FlavorExecutor):
    """Executor returning canned synthesis values and raising canned errors."""

    def __init__(
        self,
        values: Optional[Dict[str, Any]] = None,
        failures: Optional[Dict[str, BaseException]] = None,
    ):
        self.values = values or {}
        self.failures = failures or {}
        self.calls: List[Tuple[str, OrchestratorContext]] = []

    async def execute(self, flavor: Flavor, context: OrchestratorContext) -> FlavorExecutionResult:
        self.calls.append((flavor.name, context))
        if flavor.name in self.failures:
            raise self.failures[flavor.name]
        value = self.values.get(flavor.name, _MISSING)
        if value is _MISSING:
            value = f"{flavor.name} result"
        return FlavorExecutionResult(
            flavor_name=flavor.name,
            artifacts={"log": f"{flavor.name} ran"},
            synthesis_artifact=ArtifactValue(name=flavor.synthesis_artifact, value=value),
        )

    @property
    def called_names(self) -> List[str]:
        return [name for name, _ in self.calls]


class FlakyDecisionRegistry(InMemoryDecisionRegistry):
    """Decision registry whose writes fail for chosen decision types."""

    def __init__(
        self,
        fail_types: Optional[Set[DecisionType]] = None,
        fail_updates: bool = False,
    ):
        super().__init__()
        self.fail_types = fail_types or set()
        self.fail_updates = fail_updates
        self.recorded: List[DecisionInput] = []

    def record(self, decision: DecisionInput) -> Decision:
        self.recorded.append(decision)
        if decision.decision_type in self.fail_types:
            raise IOError("persist failed")
        return super().record(decision)

    def update_outcome(self, decision_id: str, outcome: DecisionOutcome) -> Decision:
        if self.fail_updates:
            raise IOError("db write failed")
        return super().update_outcome(decision_id, outcome)


class BrokenFlavorRegistry(InMemoryFlavorRegistry):
    """Flavor registry that fails with a non-lookup error for chosen names."""

    def __init__(self, flavors: Iterable[Flavor], broken: Iterable[str]):
        super().__init__(flavors)
        self.broken = set(broken)

    def get(self, category: str, name: str) -> Flavor:
        if name in self.broken:
            raise IOError("registry unavailable")
        return super().get(category, name)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _reset_caches():
    """Each test starts from fresh config and vocabulary caches."""
    orchestrator_config.reset_config()
    vocabulary_registry.clear_vocabulary_cache()
    yield
    orchestrator_config.reset_config()
    vocabulary_registry.clear_vocabulary_cache()


@pytest.fixture
def flavors() -> List[Flavor]:
    return [
        make_flavor("typescript-feature", description="typescript feature implementation"),
        make_flavor("bug-fix", description="targeted defect repair"),
    ]


@pytest.fixture
def flavor_registry(flavors) -> InMemoryFlavorRegistry:
    return InMemoryFlavorRegistry(flavors)


@pytest.fixture
def decision_registry() -> InMemoryDecisionRegistry:
    return InMemoryDecisionRegistry()


@pytest.fixture
def rule_registry() -> InMemoryStageRuleRegistry:
    return InMemoryStageRuleRegistry()


@pytest.fixture
def executor() -> ScriptedExecutor:
    return ScriptedExecutor()


@pytest.fixture
def deps(flavor_registry, decision_registry, executor) -> StageOrchestratorDeps:
    return StageOrchestratorDeps(
        flavor_registry=flavor_registry,
        decision_registry=decision_registry,
        executor=executor,
    )


@pytest.fixture
def orchestrator(deps) -> StageOrchestrator:
    return StageOrchestrator("build", deps)

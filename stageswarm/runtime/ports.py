"""
ports.py - Abstract collaborators the stage orchestrator depends on.

The orchestrator never persists anything itself and never performs flavor
work. It talks to four ports:
- FlavorRegistry: resolves flavor names to definitions
- DecisionRegistry: records decisions and their outcomes
- StageRuleRegistry: loads rules and stores rule suggestions
- FlavorExecutor: runs one flavor and returns its output

Registries are called synchronously; only the executor is awaited. Registry
implementations may be shared by concurrently dispatched flavors and must
tolerate that without help from the orchestrator.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from .types import (
    Decision,
    DecisionInput,
    DecisionOutcome,
    DecisionStats,
    DecisionType,
    Flavor,
    FlavorExecutionResult,
    OrchestratorContext,
    RuleInput,
    RuleSuggestion,
    RuleSuggestionInput,
    StageRule,
)


class FlavorRegistry(ABC):
    """Source of flavor definitions."""

    @abstractmethod
    def get(self, category: str, name: str) -> Flavor:
        """Resolve a flavor.

        Raises:
            FlavorNotFoundError: If no flavor with that name exists in the
                category. Any other exception is treated as fatal by callers.
        """
        ...

    @abstractmethod
    def list(self, category: Optional[str] = None) -> List[Flavor]:
        """List flavors, optionally restricted to one stage category."""
        ...

    @abstractmethod
    def register(self, flavor: Flavor) -> None:
        """Add or replace a flavor definition."""
        ...


class DecisionRegistry(ABC):
    """Append-only store of decisions."""

    @abstractmethod
    def record(self, decision: DecisionInput) -> Decision:
        """Persist a decision, assigning its id and timestamp."""
        ...

    @abstractmethod
    def update_outcome(self, decision_id: str, outcome: DecisionOutcome) -> Decision:
        """Attach an outcome to a recorded decision.

        Raises:
            DecisionNotFoundError: If the decision id is unknown.
        """
        ...

    @abstractmethod
    def get(self, decision_id: str) -> Decision:
        """Fetch one decision by id."""
        ...

    @abstractmethod
    def list(
        self,
        stage_category: Optional[str] = None,
        decision_type: Optional[DecisionType] = None,
    ) -> List[Decision]:
        """List decisions in recording order, optionally filtered."""
        ...

    @abstractmethod
    def get_stats(self, stage_category: Optional[str] = None) -> DecisionStats:
        """Aggregate counts, mean confidence and outcome distribution."""
        ...


class StageRuleRegistry(ABC):
    """Store of stage rules and the suggestions that may become rules."""

    @abstractmethod
    def load_rules(self, category: str) -> List[StageRule]:
        """Load the active rules for a stage category."""
        ...

    @abstractmethod
    def add_rule(self, rule: RuleInput) -> StageRule:
        """Create a rule, assigning its id and timestamp."""
        ...

    @abstractmethod
    def remove_rule(self, rule_id: str) -> None:
        """Delete a rule.

        Raises:
            RuleNotFoundError: If the rule id is unknown.
        """
        ...

    @abstractmethod
    def suggest_rule(self, suggestion: RuleSuggestionInput) -> RuleSuggestion:
        """Store a pending rule suggestion, assigning id, status and time."""
        ...

    @abstractmethod
    def get_pending_suggestions(self, category: Optional[str] = None) -> List[RuleSuggestion]:
        """Suggestions still awaiting review."""
        ...

    @abstractmethod
    def accept_suggestion(
        self, suggestion_id: str, edit_delta: Optional[str] = None
    ) -> StageRule:
        """Turn a pending suggestion into a rule."""
        ...

    @abstractmethod
    def reject_suggestion(self, suggestion_id: str, reason: str) -> RuleSuggestion:
        """Mark a pending suggestion as rejected."""
        ...


class FlavorExecutor(ABC):
    """Performs the actual work a flavor represents."""

    @abstractmethod
    async def execute(
        self, flavor: Flavor, context: OrchestratorContext
    ) -> FlavorExecutionResult:
        """Run one flavor to completion.

        Args:
            flavor: The flavor to run.
            context: Run context with ``active_kataka_id`` already resolved
                for this flavor.

        Returns:
            The flavor's artifacts and its synthesis artifact.
        """
        ...

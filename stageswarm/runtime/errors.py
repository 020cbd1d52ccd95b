"""Exception taxonomy for stage orchestration.

FlavorNotFoundError is the only recoverable kind inside a run: the match
phase logs it and drops the flavor. Every other failure that aborts a run
surfaces as an OrchestratorError naming the phase that failed, except a
sequential executor failure, which propagates unchanged.
"""

from __future__ import annotations

from typing import Optional


class StageSwarmError(Exception):
    """Base exception for stage orchestration errors."""

    pass


class FlavorNotFoundError(StageSwarmError):
    """Raised by a flavor registry when a flavor name cannot be resolved."""

    def __init__(self, category: str, name: str):
        self.category = category
        self.name = name
        super().__init__(f"Flavor '{name}' not found in stage category '{category}'")


class OrchestratorError(StageSwarmError):
    """Raised when a run cannot complete.

    Attributes:
        phase: Phase that failed (analyze, match, plan, execute, synthesize).
        stage_category: Stage category of the failed run, if known.
    """

    def __init__(
        self,
        message: str,
        phase: Optional[str] = None,
        stage_category: Optional[str] = None,
    ):
        self.phase = phase
        self.stage_category = stage_category
        super().__init__(message)


class DecisionNotFoundError(StageSwarmError):
    """Raised when a decision id is unknown to the decision registry."""

    def __init__(self, decision_id: str):
        self.decision_id = decision_id
        super().__init__(f"Decision '{decision_id}' not found")


class RuleNotFoundError(StageSwarmError):
    """Raised when a rule id is unknown to the rule registry."""

    def __init__(self, rule_id: str):
        self.rule_id = rule_id
        super().__init__(f"Rule '{rule_id}' not found")


class SuggestionNotFoundError(StageSwarmError):
    """Raised when a rule suggestion id is unknown or already reviewed."""

    def __init__(self, suggestion_id: str, reason: str = "not found"):
        self.suggestion_id = suggestion_id
        super().__init__(f"Rule suggestion '{suggestion_id}' {reason}")


class VocabularyError(StageSwarmError):
    """Raised when a vocabulary file exists but fails schema validation."""

    def __init__(self, category: str, path: str, detail: str):
        self.category = category
        self.path = path
        super().__init__(f"Vocabulary for '{category}' at {path} is invalid: {detail}")

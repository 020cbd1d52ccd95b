"""ID aliases and generators for the types package."""

from __future__ import annotations

import uuid
from typing import Literal, Tuple

DecisionId = str
RuleId = str
SuggestionId = str

StageCategory = Literal["research", "plan", "build", "review"]

# Ordered as a workflow runs through them.
STAGE_CATEGORIES: Tuple[str, ...] = ("research", "plan", "build", "review")


def generate_id() -> str:
    """Generate a unique record id (UUID4)."""
    return str(uuid.uuid4())


def is_stage_category(value: str) -> bool:
    """True when ``value`` names one of the known stage categories."""
    return value in STAGE_CATEGORIES

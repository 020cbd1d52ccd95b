"""Flavor types: the competing execution strategies a stage chooses among.

A flavor is an immutable definition owned by the flavor registry. The
orchestrator only reads flavors; it never mutates them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class FlavorStepRef:
    """Reference to a step the flavor runs.

    Attributes:
        step_name: Name of the step within the flavor.
        step_type: Kind of step (resolved by the executor, opaque here).
    """

    step_name: str
    step_type: str


@dataclass(frozen=True)
class Flavor:
    """A named, concrete execution strategy for one stage category.

    Attributes:
        name: Flavor name, unique within its stage category.
        stage_category: The stage category the flavor belongs to.
        steps: Ordered step references the executor will run.
        synthesis_artifact: Name of the artifact this flavor hands to synthesis.
        description: Free-text description, used by keyword scoring and gap detection.
        kataka: Agent id this flavor has affinity for; overrides the run's
            active agent when the flavor is executed.
    """

    name: str
    stage_category: str
    steps: List[FlavorStepRef] = field(default_factory=list)
    synthesis_artifact: str = ""
    description: Optional[str] = None
    kataka: Optional[str] = None


def flavor_to_dict(flavor: Flavor) -> Dict[str, Any]:
    """Convert Flavor to a dictionary for serialization."""
    result: Dict[str, Any] = {
        "name": flavor.name,
        "stage_category": flavor.stage_category,
        "steps": [
            {"step_name": step.step_name, "step_type": step.step_type}
            for step in flavor.steps
        ],
        "synthesis_artifact": flavor.synthesis_artifact,
    }
    if flavor.description is not None:
        result["description"] = flavor.description
    if flavor.kataka is not None:
        result["kataka"] = flavor.kataka
    return result


def flavor_from_dict(data: Dict[str, Any]) -> Flavor:
    """Create Flavor from a dictionary.

    Args:
        data: Dictionary with flavor fields, as produced by flavor_to_dict.

    Returns:
        Parsed Flavor instance.
    """
    return Flavor(
        name=data["name"],
        stage_category=data["stage_category"],
        steps=[
            FlavorStepRef(step_name=s["step_name"], step_type=s["step_type"])
            for s in data.get("steps", [])
        ],
        synthesis_artifact=data.get("synthesis_artifact", ""),
        description=data.get("description"),
        kataka=data.get("kataka"),
    )

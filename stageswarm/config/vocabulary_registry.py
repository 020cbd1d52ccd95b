"""Stage vocabulary registry.

A vocabulary drives flavor scoring and synthesis for one stage category:
keywords matched against flavor names and the run context, artifact boost
rules, and the preferred synthesis approach.

Vocabularies are YAML files named ``<category>.yaml``. A custom directory
is searched first, then the builtin ``vocabularies/`` directory shipped
with this package. A missing or invalid file is logged and yields None,
which means neutral default scoring.

Usage:
    from stageswarm.config.vocabulary_registry import get_vocabulary

    vocab = get_vocabulary("build")
    if vocab is not None:
        vocab.keywords
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Dict, List, Literal, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from stageswarm.runtime.errors import VocabularyError

logger = logging.getLogger(__name__)

BUILTIN_VOCABULARY_DIR = Path(__file__).parent / "vocabularies"


class SynthesisApproach(str, Enum):
    """How per-flavor outputs are combined into one stage artifact."""
    MERGE_ALL = "merge-all"  # Keyed record of every flavor's output
    FIRST_WINS = "first-wins"  # Only the top-scored flavor's output
    CASCADE = "cascade"  # Each flavor sees prior results


DEFAULT_SYNTHESIS_ALTERNATIVES = [
    SynthesisApproach.MERGE_ALL,
    SynthesisApproach.FIRST_WINS,
    SynthesisApproach.CASCADE,
]


class BoostRule(BaseModel):
    """Score boost applied when an available artifact matches a pattern."""
    artifact_pattern: str = Field(
        min_length=1,
        description="Substring matched against artifact names; '*' matches any artifact",
    )
    magnitude: float = Field(ge=0.0, le=1.0, description="Additive score boost")


class StageVocabulary(BaseModel):
    """Domain vocabulary for one stage category."""
    category: Literal["research", "plan", "build", "review"] = Field(
        description="Stage category this vocabulary applies to"
    )
    keywords: List[str] = Field(
        min_length=1,
        description="Keywords ordered by importance, used for scoring and gap detection",
    )
    boost_rules: List[BoostRule] = Field(
        default_factory=list, description="Artifact pattern boosts, applied additively"
    )
    synthesis_preference: SynthesisApproach = Field(
        SynthesisApproach.MERGE_ALL, description="Preferred synthesis approach"
    )
    synthesis_alternatives: List[SynthesisApproach] = Field(
        default_factory=lambda: list(DEFAULT_SYNTHESIS_ALTERNATIVES),
        description="Synthesis approaches available for this category",
    )
    reasoning_template: Optional[str] = Field(
        None, description="Synthesis reasoning; '{count}' is replaced by the result count"
    )

    @field_validator("keywords")
    @classmethod
    def _keywords_not_blank(cls, value: List[str]) -> List[str]:
        if any(not k for k in value):
            raise ValueError("keywords must not contain empty strings")
        return value


def resolve_vocabulary_path(
    category: str, custom_dir: Optional[Union[str, Path]] = None
) -> Optional[Path]:
    """Find the vocabulary file for a category: custom dir first, then builtin."""
    if custom_dir:
        custom_path = Path(custom_dir) / f"{category}.yaml"
        if custom_path.exists():
            return custom_path

    builtin_path = BUILTIN_VOCABULARY_DIR / f"{category}.yaml"
    if builtin_path.exists():
        return builtin_path
    return None


def parse_vocabulary(category: str, path: Path) -> StageVocabulary:
    """Read and validate one vocabulary file.

    Raises:
        VocabularyError: If the file is not valid YAML or fails validation.
    """
    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise VocabularyError(category, str(path), str(exc)) from exc

    try:
        return StageVocabulary.model_validate(raw)
    except ValidationError as exc:
        raise VocabularyError(category, str(path), str(exc)) from exc


def load_vocabulary(
    category: str, custom_dir: Optional[Union[str, Path]] = None
) -> Optional[StageVocabulary]:
    """Load a category's vocabulary, returning None when absent or invalid."""
    path = resolve_vocabulary_path(category, custom_dir)
    if path is None:
        logger.warning(
            "No vocabulary file found for category '%s'. Using default scoring.", category
        )
        return None

    try:
        return parse_vocabulary(category, path)
    except VocabularyError as exc:
        logger.warning("Failed to load vocabulary: %s", exc)
        return None


_vocabulary_cache: Dict[Tuple[str, str], Optional[StageVocabulary]] = {}


def get_vocabulary(
    category: str, custom_dir: Optional[Union[str, Path]] = None
) -> Optional[StageVocabulary]:
    """Cached load_vocabulary, keyed by (category, custom_dir)."""
    key = (category, str(custom_dir) if custom_dir else "")
    if key not in _vocabulary_cache:
        _vocabulary_cache[key] = load_vocabulary(category, custom_dir)
    return _vocabulary_cache[key]


def clear_vocabulary_cache() -> None:
    """Drop cached vocabularies (for testing)."""
    _vocabulary_cache.clear()

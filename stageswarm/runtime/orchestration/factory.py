"""Factory for fully wired StageOrchestrators.

Validates the stage category, resolves configuration and loads the
category's vocabulary (custom directory first, then builtin).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from stageswarm.runtime.errors import OrchestratorError
from stageswarm.runtime.types import STAGE_CATEGORIES, OrchestratorConfig, is_stage_category

from .orchestrator import StageOrchestrator, StageOrchestratorDeps


def create_stage_orchestrator(
    stage_category: str,
    deps: StageOrchestratorDeps,
    config: Optional[OrchestratorConfig] = None,
    custom_vocabulary_dir: Optional[Union[str, Path]] = None,
    log: Optional[logging.Logger] = None,
) -> StageOrchestrator:
    """Create a StageOrchestrator for a stage category.

    Args:
        stage_category: One of research, plan, build or review.
        deps: Injected registries and executor.
        config: Orchestrator settings; defaults to orchestrator.yaml plus
            environment overrides for the category.
        custom_vocabulary_dir: Directory searched for ``<category>.yaml``
            before the builtin vocabularies; defaults to the configured one.
        log: Logger passed through to the orchestrator.

    Returns:
        A StageOrchestrator using vocabulary-driven scoring.

    Raises:
        OrchestratorError: If stage_category is not a known category.
    """
    if not is_stage_category(stage_category):
        raise OrchestratorError(
            f'Unknown stage category "{stage_category}". '
            f"Valid categories are: {', '.join(STAGE_CATEGORIES)}.",
            stage_category=stage_category,
        )

    # Imported here: the config modules import runtime types themselves.
    from stageswarm.config.orchestrator_config import get_orchestrator_config, get_vocabulary_dir
    from stageswarm.config.vocabulary_registry import get_vocabulary

    if config is None:
        config = get_orchestrator_config(stage_category)
    if custom_vocabulary_dir is None:
        custom_vocabulary_dir = get_vocabulary_dir()

    vocabulary = get_vocabulary(stage_category, custom_vocabulary_dir)
    return StageOrchestrator(stage_category, deps, config, vocabulary=vocabulary, log=log)

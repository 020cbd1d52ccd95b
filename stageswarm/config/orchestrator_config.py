"""Orchestrator configuration registry.

Provides per-stage orchestrator settings loaded from orchestrator.yaml.
Environment variables take precedence over YAML config.

Usage:
    from stageswarm.config.orchestrator_config import get_orchestrator_config

    config = get_orchestrator_config("build")
    config.max_parallel_flavors  # 5 unless overridden

Overrides:
    STAGESWARM_MAX_PARALLEL_FLAVORS  applies to every stage category
    STAGESWARM_CONFIDENCE_THRESHOLD  applies to every stage category
    STAGESWARM_VOCABULARY_DIR        directory searched before builtin vocabularies
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from stageswarm.runtime.types import OrchestratorConfig

logger = logging.getLogger(__name__)

_CONFIG_PATH = Path(__file__).parent / "orchestrator.yaml"
_cached_config: Optional[Dict[str, Any]] = None

ENV_MAX_PARALLEL = "STAGESWARM_MAX_PARALLEL_FLAVORS"
ENV_CONFIDENCE_THRESHOLD = "STAGESWARM_CONFIDENCE_THRESHOLD"
ENV_VOCABULARY_DIR = "STAGESWARM_VOCABULARY_DIR"

# Parallel fan-out bounds. More than this many concurrent flavors is almost
# certainly a typo in config.
MAX_PARALLEL_MIN = 1
MAX_PARALLEL_MAX = 32


def _clamp_int(value: int, name: str, min_val: int, max_val: int) -> int:
    """Clamp an integer setting to [min_val, max_val], logging when it moves."""
    if value < min_val:
        logger.warning(
            "Setting '%s' value %d is below minimum %d. Clamping to %d.",
            name,
            value,
            min_val,
            min_val,
        )
        return min_val
    if value > max_val:
        logger.warning(
            "Setting '%s' value %d exceeds maximum %d. Clamping to %d.",
            name,
            value,
            max_val,
            max_val,
        )
        return max_val
    return value


def _clamp_unit(value: float, name: str) -> float:
    """Clamp a float setting to [0, 1], logging when it moves."""
    if value < 0.0 or value > 1.0:
        clamped = min(1.0, max(0.0, value))
        logger.warning(
            "Setting '%s' value %s is outside [0, 1]. Clamping to %s.",
            name,
            value,
            clamped,
        )
        return clamped
    return value


def _load_config() -> Dict[str, Any]:
    """Load orchestrator.yaml configuration, with caching."""
    global _cached_config
    if _cached_config is not None:
        return _cached_config

    if _CONFIG_PATH.exists():
        with open(_CONFIG_PATH) as f:
            _cached_config = yaml.safe_load(f) or _default_config()
    else:
        _cached_config = _default_config()

    return _cached_config


def _default_config() -> Dict[str, Any]:
    """Return default configuration if orchestrator.yaml doesn't exist."""
    return {
        "version": "1.0",
        "defaults": {
            "type": "scoring",
            "confidence_threshold": 0.7,
            "max_parallel_flavors": 5,
            "vocabulary_dir": None,
        },
        "stages": {},
    }


def reset_config() -> None:
    """Reset cached config (for testing)."""
    global _cached_config
    _cached_config = None


def _stage_setting(category: Optional[str], key: str) -> Any:
    """Look up a setting: stage override first, then defaults.

    A key set to null in YAML counts as unset.
    """
    config = _load_config()
    if category:
        stage = (config.get("stages") or {}).get(category) or {}
        if stage.get(key) is not None:
            return stage[key]
    value = (config.get("defaults") or {}).get(key)
    if value is None:
        return _default_config()["defaults"][key]
    return value


def _env_value(name: str, cast: Any) -> Optional[Any]:
    """Read and convert an env var, ignoring (with a warning) unparsable values."""
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return None
    try:
        return cast(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a valid %s", name, raw, cast.__name__)
        return None


def get_max_parallel_flavors(category: Optional[str] = None) -> int:
    """Largest selection that still runs in parallel for a stage category."""
    value = _env_value(ENV_MAX_PARALLEL, int)
    if value is None:
        value = int(_stage_setting(category, "max_parallel_flavors"))
    return _clamp_int(value, "max_parallel_flavors", MAX_PARALLEL_MIN, MAX_PARALLEL_MAX)


def get_confidence_threshold(category: Optional[str] = None) -> float:
    """Confidence threshold for a stage category, in [0, 1].

    Read by callers gating on decision confidence; the orchestrator does not
    consult it.
    """
    value = _env_value(ENV_CONFIDENCE_THRESHOLD, float)
    if value is None:
        value = float(_stage_setting(category, "confidence_threshold"))
    return _clamp_unit(value, "confidence_threshold")


def get_orchestrator_type(category: Optional[str] = None) -> str:
    """Orchestrator implementation name for a stage category.

    Callers use it to choose an implementation; "scoring" is the only one.
    """
    return str(_stage_setting(category, "type"))


def get_vocabulary_dir() -> Optional[Path]:
    """Custom vocabulary directory, or None when only builtins are used."""
    env_dir = os.environ.get(ENV_VOCABULARY_DIR)
    if env_dir:
        return Path(env_dir)
    configured = _stage_setting(None, "vocabulary_dir")
    return Path(configured) if configured else None


def get_orchestrator_config(category: Optional[str] = None) -> OrchestratorConfig:
    """Resolve the effective OrchestratorConfig for a stage category.

    Resolution order: environment variable > stage override > defaults.
    """
    return OrchestratorConfig(
        type=get_orchestrator_type(category),
        confidence_threshold=get_confidence_threshold(category),
        max_parallel_flavors=get_max_parallel_flavors(category),
    )

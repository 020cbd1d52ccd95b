"""Per-run log sink.

A RunJournal wraps the injected logger and keeps every warning it emits,
so a run's recoverable problems are returned with the result instead of
only disappearing into process-wide logging.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

logger = logging.getLogger(__name__)


class RunJournal:
    """Collects warnings for one orchestrator run."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger
        self.warnings: List[str] = []

    def warning(self, msg: str, *args: Any) -> None:
        """Log a warning and keep its rendered text."""
        self.log.warning(msg, *args)
        self.warnings.append(msg % args if args else msg)

    def info(self, msg: str, *args: Any) -> None:
        self.log.info(msg, *args)

    def debug(self, msg: str, *args: Any) -> None:
        self.log.debug(msg, *args)

    def error(self, msg: str, *args: Any) -> None:
        self.log.error(msg, *args)

"""
execute.py - Execute phase: dispatch selected flavors to the executor.

Sequential mode awaits each flavor in selection order and lets the first
failure propagate untouched.

Parallel mode issues every executor call before awaiting any of them, then
waits for all to settle. Failures are collected rather than cancelling the
remaining flavors, and reported together as one OrchestratorError.
"""

from __future__ import annotations

import asyncio
from typing import List, Optional, Sequence

from stageswarm.runtime.errors import OrchestratorError
from stageswarm.runtime.ports import FlavorExecutor
from stageswarm.runtime.types import (
    ExecutionMode,
    Flavor,
    FlavorExecutionResult,
    OrchestratorContext,
)

from .journal import RunJournal

PHASE = "execute"


def flavor_context(flavor: Flavor, context: OrchestratorContext) -> OrchestratorContext:
    """Context for one flavor: its own agent affinity overrides the run's."""
    return context.with_kataka(flavor.kataka)


def _failure_message(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


def _dispatch(
    executor: FlavorExecutor, flavor: Flavor, context: OrchestratorContext
) -> "asyncio.Future[FlavorExecutionResult]":
    """Start one executor call. A synchronous raise becomes a failed future."""
    try:
        return asyncio.ensure_future(executor.execute(flavor, flavor_context(flavor, context)))
    except Exception as exc:
        failed: "asyncio.Future[FlavorExecutionResult]" = (
            asyncio.get_running_loop().create_future()
        )
        failed.set_exception(exc)
        return failed


async def execute_flavors(
    executor: FlavorExecutor,
    flavors: Sequence[Flavor],
    mode: ExecutionMode,
    context: OrchestratorContext,
    stage_category: str,
    journal: Optional[RunJournal] = None,
) -> List[FlavorExecutionResult]:
    """Run the selected flavors.

    Args:
        executor: Performs the work for one flavor.
        flavors: Selected flavors, in selection order.
        mode: Sequential or parallel dispatch.
        context: Run-level context.
        stage_category: Stage being run, for error messages.
        journal: Sink for per-flavor failure logs.

    Returns:
        One result per flavor, in selection order.

    Raises:
        OrchestratorError: In parallel mode, if any flavor fails.
        Exception: In sequential mode, the first executor failure as raised.
    """
    if mode == ExecutionMode.PARALLEL:
        return await _execute_parallel(
            executor, flavors, context, stage_category, journal or RunJournal()
        )

    results: List[FlavorExecutionResult] = []
    for flavor in flavors:
        results.append(await executor.execute(flavor, flavor_context(flavor, context)))
    return results


async def _execute_parallel(
    executor: FlavorExecutor,
    flavors: Sequence[Flavor],
    context: OrchestratorContext,
    stage_category: str,
    journal: RunJournal,
) -> List[FlavorExecutionResult]:
    # Every call is issued here, before the first await.
    tasks = [_dispatch(executor, flavor, context) for flavor in flavors]
    settled = await asyncio.gather(*tasks, return_exceptions=True)

    failures = [
        (flavor, outcome)
        for flavor, outcome in zip(flavors, settled)
        if isinstance(outcome, BaseException)
    ]
    if failures:
        for flavor, exc in failures:
            journal.error(
                'Flavor "%s/%s" failed during parallel execution: %s',
                stage_category,
                flavor.name,
                _failure_message(exc),
            )
        messages = "; ".join(_failure_message(exc) for _, exc in failures)
        raise OrchestratorError(
            f'Stage "{stage_category}" parallel execution failed '
            f"({len(failures)}/{len(flavors)} flavors): {messages}",
            phase=PHASE,
            stage_category=stage_category,
        )

    return list(settled)

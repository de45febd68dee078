"""Reverse-order rollback of completed workflow steps."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, List, Optional

from .context import ExecutionContext
from .contracts import ExecutedStep, ExecutionTrace, GroupRecord
from .errors import CompensationError
from .recording import ExecutionRecorder
from .steps import compensator_of
from .utils.awaitables import maybe_await

logger = logging.getLogger(__name__)


class CompensationCoordinator:
    """Replays an execution trace backwards, calling each step's compensator.

    Every record is compensated once. Groups are undone from last to first;
    members of a parallel group are compensated concurrently, and the whole
    group settles before the previous one is touched. Conditional records
    and nested workflow steps recurse into the child trace they carry.

    Compensator failures are collected as :class:`CompensationError`. With
    the ``abort`` policy the replay stops after the first group that
    produced a failure; with ``collect`` it always runs to the end.
    """

    def __init__(
        self,
        resolver: Any,
        *,
        failure_policy: str = "collect",
        recorder: Optional[ExecutionRecorder] = None,
    ) -> None:
        self._resolver = resolver
        self._failure_policy = failure_policy
        self._recorder = recorder

    async def compensate(
        self, trace: ExecutionTrace, context: ExecutionContext
    ) -> List[CompensationError]:
        """Undo everything in ``trace`` and return the failures encountered."""
        errors: List[CompensationError] = []
        await self._compensate_trace(trace, context, errors)
        return errors

    async def compensate_steps(
        self,
        steps: Iterable[ExecutedStep],
        context: ExecutionContext,
        run_id: Optional[str] = None,
    ) -> List[CompensationError]:
        """Concurrently undo ``steps``, e.g. the survivors of a failed parallel group."""
        errors: List[CompensationError] = []
        await asyncio.gather(
            *(self._compensate_step(step, context, errors, run_id) for step in steps)
        )
        return errors

    # ------------------------------------------------------------------
    async def _compensate_trace(
        self,
        trace: ExecutionTrace,
        context: ExecutionContext,
        errors: List[CompensationError],
    ) -> None:
        for record in trace.reversed_records():
            await self._compensate_record(record, context, errors, trace.run_id)
            if errors and self._failure_policy == "abort":
                logger.warning(
                    f"Aborting compensation of run {trace.run_id} "
                    f"after {len(errors)} failure(s)"
                )
                return

    async def _compensate_record(
        self,
        record: GroupRecord,
        context: ExecutionContext,
        errors: List[CompensationError],
        run_id: Optional[str],
    ) -> None:
        if record.kind == "sequential":
            for step in record.steps:
                await self._compensate_step(step, context, errors, run_id)
        elif record.kind == "parallel":
            await asyncio.gather(
                *(
                    self._compensate_step(step, context, errors, run_id)
                    for step in record.steps
                )
            )
        elif record.kind == "conditional":
            if record.children is not None:
                await self._compensate_trace(record.children, context, errors)
        else:
            raise TypeError(f"Unknown group record kind: {record.kind!r}")

    async def _compensate_step(
        self,
        executed: ExecutedStep,
        context: ExecutionContext,
        errors: List[CompensationError],
        run_id: Optional[str],
    ) -> None:
        if executed.children is not None:
            await self._compensate_nested(executed, context, errors, run_id)
            return

        compensate = compensator_of(executed.step)
        if compensate is None:
            return

        logger.debug(f"Compensating step '{executed.key}' of run {run_id}")
        try:
            await maybe_await(compensate(executed.output, context, self._resolver))
        except Exception as exc:
            logger.error(f"Compensation of step '{executed.key}' failed: {exc}")
            errors.append(CompensationError(executed.key, exc))
            await self._record(run_id, executed.key, "compensation_failed", str(exc))
            return
        await self._record(run_id, executed.key, "compensated")

    async def _compensate_nested(
        self,
        executed: ExecutedStep,
        context: ExecutionContext,
        errors: List[CompensationError],
        run_id: Optional[str],
    ) -> None:
        """Replay the child run recorded on a nested workflow step."""
        logger.debug(
            f"Compensating nested workflow '{executed.key}' of run {run_id} "
            f"(child run {executed.children.run_id})"
        )
        child_errors: List[CompensationError] = []
        await self._compensate_trace(executed.children, context, child_errors)
        errors.extend(child_errors)
        if child_errors:
            keys = ", ".join(error.key for error in child_errors)
            await self._record(
                run_id,
                executed.key,
                "compensation_failed",
                f"Nested compensation failed for: {keys}",
            )
        else:
            await self._record(run_id, executed.key, "compensated")

    async def _record(
        self, run_id: Optional[str], key: str, status: str, error: str | None = None
    ) -> None:
        if self._recorder is None or run_id is None:
            return
        await self._recorder.mark_step_compensated(run_id, key, status, error)

"""Execution engine: walks a workflow definition group by group."""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, List, Optional

from .compensation import CompensationCoordinator
from .composition import WorkflowStep
from .config import EngineConfig
from .context import ExecutionContext
from .contracts import (
    ConditionalGroup,
    ExecutedStep,
    ExecutionOutcome,
    ExecutionTrace,
    GroupRecord,
    ParallelGroup,
    SequentialGroup,
    StepGroup,
    StepSpec,
    WorkflowDefinition,
)
from .errors import attach_compensation_errors, compensation_errors
from .recording import ExecutionRecorder, NullExecutionRecorder
from .utils.awaitables import maybe_await

logger = logging.getLogger(__name__)


class WorkflowEngine:
    """Runs a :class:`WorkflowDefinition` against a capability resolver.

    The engine holds no per-run state: every call to :meth:`run` creates a
    fresh context and trace, so one engine (and one definition) can serve
    any number of sequential or concurrent executions.
    """

    def __init__(
        self,
        definition: WorkflowDefinition,
        resolver: Any = None,
        *,
        config: Optional[EngineConfig] = None,
        recorder: Optional[ExecutionRecorder] = None,
    ) -> None:
        self.definition = definition
        self.resolver = resolver
        self.config = config or EngineConfig()
        self.recorder = recorder or NullExecutionRecorder()

    def _coordinator(self) -> CompensationCoordinator:
        return CompensationCoordinator(
            self.resolver,
            failure_policy=self.config.compensation_failures,
            recorder=self.recorder,
        )

    async def run(self, input: Any, parent_run_id: Optional[str] = None) -> ExecutionOutcome:
        """Execute every group in order.

        On failure the groups completed so far are compensated in reverse
        and the original exception is re-raised unchanged, carrying any
        compensation failures as ``compensation_errors``.
        """
        run_id = str(uuid.uuid4())
        context = ExecutionContext(input, run_id=run_id)
        trace = ExecutionTrace(run_id=run_id)
        name = self.definition.name or "workflow"

        await self.recorder.create_run(run_id, self.definition.name, parent_run_id)
        logger.info(f"Starting {name} run {run_id}")

        try:
            for index, group in enumerate(self.definition.groups):
                logger.debug(f"Run {run_id}: processing {group.kind} group {index}")
                await self._process_group(group, context, trace)
        except Exception as exc:
            logger.warning(
                f"Run {run_id} failed with {exc!r}; compensating {len(trace)} group(s)"
            )
            errors = await self._coordinator().compensate(trace, context)
            attach_compensation_errors(exc, errors)
            status = "failed" if compensation_errors(exc) else "compensated"
            await self.recorder.mark_run_completed(run_id, status, error=str(exc))
            raise

        output = self._final_output(context)
        await self.recorder.mark_run_completed(run_id, "completed")
        logger.info(f"Completed {name} run {run_id}")
        return ExecutionOutcome(run_id=run_id, output=output, context=context, trace=trace)

    # ------------------------------------------------------------------
    async def _process_group(
        self, group: StepGroup, context: ExecutionContext, trace: ExecutionTrace
    ) -> None:
        if isinstance(group, SequentialGroup):
            await self._process_sequential(group, context, trace)
        elif isinstance(group, ParallelGroup):
            await self._process_parallel(group, context, trace)
        elif isinstance(group, ConditionalGroup):
            await self._process_conditional(group, context, trace)
        else:
            raise TypeError(f"Unknown step group: {group!r}")

    async def _run_step(self, spec: StepSpec, context: ExecutionContext) -> ExecutedStep:
        """Resolve input for ``spec`` from ``context`` and execute the step."""
        run_id = context.run_id
        await self.recorder.mark_step_started(run_id, spec.key)
        try:
            step_input = await context.resolve_input(spec.key, spec.input_resolver)
            if isinstance(spec.step, WorkflowStep):
                outcome = await spec.step.run(
                    step_input, context, self.resolver, config=self.config
                )
                executed = ExecutedStep(
                    key=spec.key,
                    output=outcome.output,
                    step=spec.step,
                    children=outcome.trace,
                )
            else:
                output = await maybe_await(
                    spec.step.execute(step_input, context, self.resolver)
                )
                executed = ExecutedStep(key=spec.key, output=output, step=spec.step)
        except Exception as exc:
            logger.error(f"Step '{spec.key}' failed in run {run_id}: {exc}")
            await self.recorder.mark_step_completed(
                run_id, spec.key, status="failed", error=str(exc)
            )
            raise
        await self.recorder.mark_step_completed(run_id, spec.key, status="completed")
        return executed

    async def _process_sequential(
        self, group: SequentialGroup, context: ExecutionContext, trace: ExecutionTrace
    ) -> None:
        executed = await self._run_step(group.member, context)
        context[executed.key] = executed.output
        trace.append(GroupRecord(kind="sequential", steps=(executed,)))

    async def _process_parallel(
        self, group: ParallelGroup, context: ExecutionContext, trace: ExecutionTrace
    ) -> None:
        snapshot = context.snapshot()
        completion_order: List[int] = []

        async def run_member(index: int, spec: StepSpec) -> ExecutedStep:
            try:
                return await self._run_step(spec, snapshot)
            finally:
                completion_order.append(index)

        results = await asyncio.gather(
            *(run_member(i, spec) for i, spec in enumerate(group.members)),
            return_exceptions=True,
        )

        # cancellation and interpreter exits propagate without rollback
        for result in results:
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result

        failed = [i for i, result in enumerate(results) if isinstance(result, Exception)]
        succeeded = [result for result in results if isinstance(result, ExecutedStep)]

        if failed:
            if self.config.parallel_failure == "chronological":
                failed.sort(key=completion_order.index)
            error = results[failed[0]]
            logger.warning(
                f"{len(failed)} of {len(results)} parallel step(s) failed in run "
                f"{context.run_id}; compensating {len(succeeded)} sibling(s)"
            )
            errors = await self._coordinator().compensate_steps(
                succeeded, context, context.run_id
            )
            attach_compensation_errors(error, errors)
            raise error

        for executed in succeeded:
            context[executed.key] = executed.output
        trace.append(GroupRecord(kind="parallel", steps=tuple(succeeded)))

    async def _process_conditional(
        self, group: ConditionalGroup, context: ExecutionContext, trace: ExecutionTrace
    ) -> None:
        should_run = await maybe_await(group.predicate(context.input, context))
        if not should_run:
            logger.debug(f"Run {context.run_id}: condition not met, skipping group")
            return

        child = WorkflowEngine(
            group.body,
            self.resolver,
            config=self.config,
            recorder=self.recorder,
        )
        outcome = await child.run(context.input, parent_run_id=context.run_id)
        context.merge(outcome.context)
        trace.append(GroupRecord(kind="conditional", children=outcome.trace))

    def _final_output(self, context: ExecutionContext) -> Any:
        last = self.definition.last_group
        if last is None:
            return context.as_dict()
        if isinstance(last, SequentialGroup):
            return context[last.key]
        if isinstance(last, ParallelGroup):
            return {key: context[key] for key in last.keys}
        return context.as_dict()

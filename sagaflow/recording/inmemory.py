"""In-memory implementation of the execution recorder."""

from __future__ import annotations

from collections import OrderedDict
from datetime import datetime

from .models import RunRecord, StepRecord
from .recorder import ExecutionRecorder


class InMemoryExecutionRecorder(ExecutionRecorder):
    """Keep run records in local memory.

    Useful for tests and for inspecting recent runs from the CLI. Only the
    ``max_runs`` most recent runs are kept; nothing survives the process.
    """

    def __init__(self, max_runs: int = 1000) -> None:
        self._runs: "OrderedDict[str, RunRecord]" = OrderedDict()
        self._max_runs = max_runs
        self._step_id = 0

    # ------------------------------------------------------------------
    async def create_run(
        self,
        run_id: str,
        workflow_name: str | None = None,
        parent_run_id: str | None = None,
    ) -> None:
        self._runs[run_id] = RunRecord(
            run_id=run_id,
            workflow_name=workflow_name,
            parent_run_id=parent_run_id,
        )
        while len(self._runs) > self._max_runs:
            self._runs.popitem(last=False)

    async def mark_step_started(self, run_id: str, step_key: str) -> None:
        run = self._runs.get(run_id)
        if not run:
            return
        # ignore duplicate starts for the same step
        if run.step(step_key) is not None:
            return
        self._step_id += 1
        run.steps.append(
            StepRecord(
                id=self._step_id,
                run_id=run_id,
                step_key=step_key,
                started_at=datetime.now(),
                status="running",
            )
        )

    async def mark_step_completed(
        self, run_id: str, step_key: str, status: str, error: str | None = None
    ) -> None:
        run = self._runs.get(run_id)
        if not run:
            return
        step = run.step(step_key)
        if step is None or step.completed_at is not None:
            return
        step.completed_at = datetime.now()
        step.status = status
        step.error = error

    async def mark_step_compensated(
        self, run_id: str, step_key: str, status: str, error: str | None = None
    ) -> None:
        run = self._runs.get(run_id)
        if not run:
            return
        step = run.step(step_key)
        if step is None:
            return
        step.compensated_at = datetime.now()
        step.status = status
        if error is not None:
            step.error = error

    async def mark_run_completed(
        self, run_id: str, status: str = "completed", error: str | None = None
    ) -> None:
        run = self._runs.get(run_id)
        if run:
            run.status = status
            run.completed_at = datetime.now()
            run.error = error

    async def get_run(self, run_id: str) -> RunRecord | None:
        return self._runs.get(run_id)

    async def list_runs(self) -> list[RunRecord]:
        return list(self._runs.values())

    async def child_runs(self, run_id: str) -> list[RunRecord]:
        return [run for run in self._runs.values() if run.parent_run_id == run_id]

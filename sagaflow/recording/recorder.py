"""Recorder abstraction for observing workflow runs."""

from __future__ import annotations

from typing import Protocol

from .models import RunRecord


class ExecutionRecorder(Protocol):
    """Protocol for run recording backends."""

    async def create_run(
        self,
        run_id: str,
        workflow_name: str | None = None,
        parent_run_id: str | None = None,
    ) -> None:
        """Record the start of a run."""

    async def mark_step_started(self, run_id: str, step_key: str) -> None:
        """Record start of a step."""

    async def mark_step_completed(
        self, run_id: str, step_key: str, status: str, error: str | None = None
    ) -> None:
        """Record completion (or failure) of a step."""

    async def mark_step_compensated(
        self, run_id: str, step_key: str, status: str, error: str | None = None
    ) -> None:
        """Record the outcome of a step's compensation."""

    async def mark_run_completed(
        self, run_id: str, status: str = "completed", error: str | None = None
    ) -> None:
        """Mark the run as finished."""

    async def get_run(self, run_id: str) -> RunRecord | None:
        """Retrieve the run by id."""

    async def list_runs(self) -> list[RunRecord]:
        """Return all recorded runs."""


class NullExecutionRecorder:
    """Recorder that discards every event."""

    async def create_run(
        self,
        run_id: str,
        workflow_name: str | None = None,
        parent_run_id: str | None = None,
    ) -> None:
        return None

    async def mark_step_started(self, run_id: str, step_key: str) -> None:
        return None

    async def mark_step_completed(
        self, run_id: str, step_key: str, status: str, error: str | None = None
    ) -> None:
        return None

    async def mark_step_compensated(
        self, run_id: str, step_key: str, status: str, error: str | None = None
    ) -> None:
        return None

    async def mark_run_completed(
        self, run_id: str, status: str = "completed", error: str | None = None
    ) -> None:
        return None

    async def get_run(self, run_id: str) -> RunRecord | None:
        return None

    async def list_runs(self) -> list[RunRecord]:
        return []

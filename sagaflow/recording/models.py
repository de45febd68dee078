"""Data models for recorded workflow runs."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class StepRecord(BaseModel):
    """Record of an individual step execution."""

    id: Optional[int] = None
    run_id: str
    step_key: str
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    compensated_at: Optional[datetime] = None
    status: Optional[str] = None
    error: Optional[str] = None


class RunRecord(BaseModel):
    """One execution of a workflow definition."""

    run_id: str
    workflow_name: Optional[str] = None
    parent_run_id: Optional[str] = None
    status: str = "running"
    started_at: datetime = Field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None
    error: Optional[str] = None
    steps: list[StepRecord] = Field(default_factory=list)

    def step(self, step_key: str) -> Optional[StepRecord]:
        """Return the record for ``step_key`` if the step was started."""
        return next((s for s in self.steps if s.step_key == step_key), None)

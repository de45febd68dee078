"""Run recording for sagaflow workflows."""

from __future__ import annotations

import os
from typing import Optional

from ..config import SagaflowConfig, load_config
from .inmemory import InMemoryExecutionRecorder
from .models import RunRecord, StepRecord
from .recorder import ExecutionRecorder, NullExecutionRecorder

_recorder_instance: ExecutionRecorder | None = None


def create_recorder(
    backend: Optional[str] = None, config: Optional[SagaflowConfig] = None
) -> ExecutionRecorder:
    """Build a new recorder without touching the process-wide instance.

    The backend is selected from ``backend``, the ``SAGAFLOW_RECORDER``
    environment variable or the loaded configuration.
    """

    config = config or load_config()
    backend = (
        backend or os.getenv("SAGAFLOW_RECORDER") or config.recorder.backend
    ).lower()

    if backend == "inmemory":
        return InMemoryExecutionRecorder(max_runs=config.recorder.max_runs)
    if backend == "none":
        return NullExecutionRecorder()
    raise ValueError(f"Unsupported recorder backend: {backend}")


def get_recorder(
    backend: Optional[str] = None, config: Optional[SagaflowConfig] = None
) -> ExecutionRecorder:
    """Factory function to obtain the process-wide execution recorder.

    Passing ``backend`` or ``config`` replaces the shared instance. Without
    any of those an in-memory recorder is created on first use.
    """

    global _recorder_instance
    if _recorder_instance is not None and backend is None and config is None:
        return _recorder_instance

    _recorder_instance = create_recorder(backend, config)
    return _recorder_instance


__all__ = [
    "RunRecord",
    "StepRecord",
    "ExecutionRecorder",
    "NullExecutionRecorder",
    "InMemoryExecutionRecorder",
    "create_recorder",
    "get_recorder",
]

"""Shared fixtures for sagaflow tests."""

from typing import Any, List, Optional

import pytest

import sagaflow.recording as recording
from sagaflow import FunctionStep
from sagaflow.recording import InMemoryExecutionRecorder


class EventLog:
    """Collects the order in which steps run and are compensated."""

    def __init__(self) -> None:
        self.events: List[str] = []

    def record(self, message: str) -> None:
        self.events.append(message)


@pytest.fixture(autouse=True)
def recorder(monkeypatch) -> InMemoryExecutionRecorder:
    """Give every test a fresh process-wide recorder and default config."""
    monkeypatch.delenv("SAGAFLOW_CONFIG", raising=False)
    monkeypatch.delenv("SAGAFLOW_RECORDER", raising=False)
    instance = InMemoryExecutionRecorder()
    monkeypatch.setattr(recording, "_recorder_instance", instance)
    return instance


@pytest.fixture
def event_log() -> EventLog:
    return EventLog()


@pytest.fixture
def make_step(event_log):
    """Build a step that logs '<name> executed' / '<name> compensated'."""

    def factory(
        name: str,
        output: Any = None,
        error: Optional[BaseException] = None,
        compensates: bool = True,
    ) -> FunctionStep:
        async def execute(input, context, resolver):
            event_log.record(f"{name} executed")
            if error is not None:
                raise error
            return output

        async def compensate(output, context, resolver):
            event_log.record(f"{name} compensated")

        return FunctionStep(
            execute, compensate=compensate if compensates else None, name=name
        )

    return factory

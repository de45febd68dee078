"""Executable workflow: an immutable definition bound to a resolver."""

from __future__ import annotations

from typing import Any, Callable, Optional

from .composition import WorkflowStep
from .config import SagaflowConfig, load_config
from .context import ExecutionContext
from .contracts import ExecutionOutcome, WorkflowDefinition
from .engine import WorkflowEngine
from .recording import ExecutionRecorder, create_recorder, get_recorder

_UNSET: Any = object()


class Workflow:
    """A built workflow ready to be executed any number of times.

    Each :meth:`execute` call gets its own context and trace; nothing from
    one run is visible to the next.

    Without an explicit ``recorder`` the process-wide one from
    :func:`~sagaflow.recording.get_recorder` is used. A workflow given its
    own ``config`` gets a private recorder built from that config instead,
    leaving the shared instance untouched.
    """

    def __init__(
        self,
        definition: WorkflowDefinition,
        resolver: Any = None,
        *,
        config: Optional[SagaflowConfig] = None,
        recorder: Optional[ExecutionRecorder] = None,
    ) -> None:
        self.definition = definition
        self.resolver = resolver
        self.config = config or load_config()
        if recorder is None and config is not None:
            recorder = create_recorder(config=config)
        self.recorder = recorder or get_recorder()

    @property
    def name(self) -> Optional[str]:
        return self.definition.name

    def _engine(self, resolver: Any) -> WorkflowEngine:
        return WorkflowEngine(
            self.definition,
            resolver,
            config=self.config.engine,
            recorder=self.recorder,
        )

    async def run(
        self,
        input: Any = None,
        *,
        resolver: Any = _UNSET,
        parent_run_id: Optional[str] = None,
    ) -> ExecutionOutcome:
        """Execute and return the output together with the final context and trace."""
        if resolver is _UNSET:
            resolver = self.resolver
        return await self._engine(resolver).run(input, parent_run_id=parent_run_id)

    async def execute(self, input: Any = None) -> Any:
        """Execute the workflow and return its output.

        Raises:
            Exception: The first unrecovered step, predicate or input
                resolver error, after completed steps were compensated.
        """
        outcome = await self.run(input)
        return outcome.output

    def run_as_step(
        self,
        key: str,
        input_resolver: Optional[Callable[[ExecutionContext], Any]] = None,
    ) -> WorkflowStep:
        """Expose this workflow as a step of another workflow."""
        return WorkflowStep(self, key, input_resolver)

    def __repr__(self) -> str:
        return f"Workflow(name={self.name!r}, groups={len(self.definition)})"

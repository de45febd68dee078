"""Wrapping a whole workflow as a single step of another workflow."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Optional

from .config import EngineConfig
from .context import ExecutionContext
from .contracts import INPUT_KEY, ExecutionOutcome
from .steps import BaseStep
from .utils.awaitables import maybe_await

if TYPE_CHECKING:
    from .workflow import Workflow

logger = logging.getLogger(__name__)


class WorkflowStep(BaseStep):
    """Runs a child workflow as one step of a parent workflow.

    The child runs as an independent execution with the resolver the
    parent passes in. The engine keeps the child's trace on the executed
    step it records, so a later parent failure replays exactly that run.
    The child's output is stored under ``key``; its other context values
    are merged into the parent (the parent engine's ``nested_merge``
    decides who wins on a collision). Inside a parallel group the parent
    context is a read-only snapshot, so only the output is kept.
    """

    def __init__(
        self,
        workflow: "Workflow",
        key: str,
        input_resolver: Optional[Callable[[ExecutionContext], Any]] = None,
    ) -> None:
        self.workflow = workflow
        self.key = key
        self.input_resolver = input_resolver
        self.name = workflow.name or key

    async def run(
        self,
        input: Any,
        context: ExecutionContext,
        resolver: Any,
        config: Optional[EngineConfig] = None,
    ) -> ExecutionOutcome:
        """Run the child workflow and fold its context into ``context``."""
        config = config or self.workflow.config.engine
        if self.input_resolver is not None:
            input = await maybe_await(self.input_resolver(context))

        outcome = await self.workflow.run(
            input, resolver=resolver, parent_run_id=context.run_id
        )

        if context.frozen:
            logger.debug(
                f"Nested workflow '{self.key}' ran against a snapshot; "
                "child context values are not merged"
            )
            return outcome

        child_values = {k: v for k, v in outcome.context.items() if k != INPUT_KEY}
        context.merge(child_values, overwrite=config.nested_merge == "child")
        context[self.key] = outcome.output
        return outcome

    async def execute(self, input: Any, context: ExecutionContext, resolver: Any) -> Any:
        outcome = await self.run(input, context, resolver)
        return outcome.output

    def __repr__(self) -> str:
        return f"WorkflowStep({self.key!r})"

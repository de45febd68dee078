"""Fluent builder for workflow definitions."""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .config import SagaflowConfig
from .context import ExecutionContext
from .contracts import (
    INPUT_KEY,
    ConditionalGroup,
    ParallelGroup,
    SequentialGroup,
    StepGroup,
    StepSpec,
    WorkflowDefinition,
)
from .errors import WorkflowDefinitionError
from .recording import ExecutionRecorder
from .steps import as_step
from .workflow import Workflow

InputResolver = Callable[[ExecutionContext], Any]
Predicate = Callable[[Any, ExecutionContext], Any]


class WorkflowBuilder:
    """Assemble a workflow from sequential, parallel and conditional groups.

    Every ``add_*`` method returns the builder so calls can be chained.
    Mistakes that are visible without running anything (duplicate keys,
    non-callable steps, empty bodies) are reported by :meth:`build`.

    Example::

        workflow = (
            WorkflowBuilder(container)
            .add_step("user", create_user)
            .add_parallel(
                {"profile": create_profile, "subscription": create_subscription},
                {"subscription": lambda ctx: ctx["user"]["id"]},
            )
            .build()
        )
        result = await workflow.execute({"name": "John"})
    """

    def __init__(
        self,
        resolver: Any = None,
        *,
        name: Optional[str] = None,
        config: Optional[SagaflowConfig] = None,
        recorder: Optional[ExecutionRecorder] = None,
    ) -> None:
        self.resolver = resolver
        self.name = name
        self._config = config
        self._recorder = recorder
        self._groups: List[StepGroup] = []
        self._problems: List[str] = []

    # ------------------------------------------------------------------
    def add_step(
        self, key: str, step: Any, input_resolver: Optional[InputResolver] = None
    ) -> "WorkflowBuilder":
        """Append a step whose output is stored under ``key``."""
        spec = self._spec(key, step, input_resolver)
        if spec is not None:
            self._groups.append(SequentialGroup(member=spec))
        return self

    def add_parallel(
        self,
        steps: Union[Mapping[str, Any], Iterable[Tuple[str, Any]]],
        input_resolvers: Optional[Mapping[str, InputResolver]] = None,
    ) -> "WorkflowBuilder":
        """Append a group of steps that run concurrently.

        ``steps`` is a mapping or a sequence of ``(key, step)`` pairs; its
        iteration order is the declared member order.
        """
        pairs = list(steps.items()) if isinstance(steps, Mapping) else list(steps)
        input_resolvers = dict(input_resolvers or {})
        keys = {key for key, _ in pairs}
        unknown = [key for key in input_resolvers if key not in keys]
        if unknown:
            self._problems.append(
                f"Input resolvers given for keys outside the parallel group: {unknown}"
            )
        if not pairs:
            self._problems.append("Parallel group has no steps")
            return self

        members = []
        for key, step in pairs:
            spec = self._spec(key, step, input_resolvers.get(key))
            if spec is not None:
                members.append(spec)
        self._groups.append(ParallelGroup(members=tuple(members)))
        return self

    def add_conditional(
        self,
        predicate: Predicate,
        body: Callable[["WorkflowBuilder"], Optional["WorkflowBuilder"]],
    ) -> "WorkflowBuilder":
        """Append a group that only runs when ``predicate(input, context)`` holds.

        ``body`` receives a fresh builder sharing this builder's resolver and
        returns it (or ``None``) after adding the conditional steps.
        """
        if not callable(predicate):
            self._problems.append(f"Condition {predicate!r} is not callable")
            return self

        sub_builder = WorkflowBuilder(
            self.resolver, config=self._config, recorder=self._recorder
        )
        sub_builder = body(sub_builder) or sub_builder
        try:
            definition = sub_builder.definition()
        except WorkflowDefinitionError as exc:
            self._problems.append(f"Conditional body: {exc}")
            return self
        self._groups.append(ConditionalGroup(predicate=predicate, body=definition))
        return self

    # ------------------------------------------------------------------
    def _spec(
        self, key: str, step: Any, input_resolver: Optional[InputResolver]
    ) -> Optional[StepSpec]:
        if not isinstance(key, str) or not key:
            self._problems.append(f"Step key must be a non-empty string, got {key!r}")
            return None
        if key == INPUT_KEY:
            self._problems.append(f"Step key '{INPUT_KEY}' is reserved for the workflow input")
            return None
        if input_resolver is not None and not callable(input_resolver):
            self._problems.append(f"Input resolver for '{key}' is not callable")
            return None
        try:
            step = as_step(step)
        except TypeError as exc:
            self._problems.append(f"Step '{key}': {exc}")
            return None
        return StepSpec(key=key, step=step, input_resolver=input_resolver)

    def _validate(self) -> None:
        problems = list(self._problems)
        if not self._groups and not problems:
            problems.append("Workflow has no steps")

        seen: Dict[str, int] = {}
        for group in self._groups:
            if isinstance(group, (SequentialGroup, ParallelGroup)):
                for member in group.members:
                    seen[member.key] = seen.get(member.key, 0) + 1
        duplicates = [key for key, count in seen.items() if count > 1]
        if duplicates:
            problems.append(f"Duplicate step keys: {', '.join(duplicates)}")

        if problems:
            raise WorkflowDefinitionError("; ".join(problems))

    def definition(self) -> WorkflowDefinition:
        """Validate and return the immutable definition built so far."""
        self._validate()
        return WorkflowDefinition(name=self.name, groups=tuple(self._groups))

    def build(self) -> Workflow:
        """Validate and return an executable :class:`Workflow`."""
        return Workflow(
            self.definition(),
            self.resolver,
            config=self._config,
            recorder=self._recorder,
        )

    # ------------------------------------------------------------------
    async def execute(self, input: Any = None) -> Any:
        """Build and execute in one go."""
        return await self.build().execute(input)

    def run_as_step(
        self, key: str, input_resolver: Optional[InputResolver] = None
    ) -> Any:
        """Build and expose the workflow as a step of another workflow."""
        return self.build().run_as_step(key, input_resolver)

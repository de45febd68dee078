"""Core data contracts for sagaflow workflow definitions and traces."""

from __future__ import annotations

from typing import Annotated, Any, Callable, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

INPUT_KEY = "input"


class StepSpec(BaseModel):
    """A step bound to the context key its output is stored under."""

    key: str
    step: Any
    input_resolver: Optional[Callable[..., Any]] = None

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class SequentialGroup(BaseModel):
    """Runs a single step and waits for it before moving on."""

    kind: Literal["sequential"] = "sequential"
    member: StepSpec

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def key(self) -> str:
        return self.member.key

    @property
    def members(self) -> tuple[StepSpec, ...]:
        return (self.member,)


class ParallelGroup(BaseModel):
    """Runs every member concurrently against one context snapshot.

    Member order is significant: it fixes fan-out order, the order outputs
    are merged in and which failure is reported when several members fail.
    """

    kind: Literal["parallel"] = "parallel"
    members: tuple[StepSpec, ...]

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def keys(self) -> list[str]:
        return [member.key for member in self.members]


class ConditionalGroup(BaseModel):
    """Runs ``body`` as a child workflow when ``predicate`` holds."""

    kind: Literal["conditional"] = "conditional"
    predicate: Callable[..., Any]
    body: "WorkflowDefinition"

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


StepGroup = Annotated[
    Union[SequentialGroup, ParallelGroup, ConditionalGroup],
    Field(discriminator="kind"),
]


class WorkflowDefinition(BaseModel):
    """Immutable, ordered sequence of step groups."""

    name: Optional[str] = None
    groups: tuple[StepGroup, ...] = ()

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    def __len__(self) -> int:
        return len(self.groups)

    @property
    def last_group(self) -> Optional[StepGroup]:
        return self.groups[-1] if self.groups else None

    def output_keys(self) -> list[str]:
        """Keys written by sequential and parallel groups of this scope."""
        keys: list[str] = []
        for group in self.groups:
            if isinstance(group, (SequentialGroup, ParallelGroup)):
                keys.extend(member.key for member in group.members)
        return keys


class ExecutedStep(BaseModel):
    """A step that completed, together with the output it produced.

    ``children`` holds the trace of a nested workflow run as this step.
    """

    key: str
    output: Any = None
    step: Any
    children: Optional["ExecutionTrace"] = None

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class GroupRecord(BaseModel):
    """One processed step group in an execution trace."""

    kind: Literal["sequential", "parallel", "conditional"]
    steps: tuple[ExecutedStep, ...] = ()
    children: Optional["ExecutionTrace"] = None

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class ExecutionTrace(BaseModel):
    """Append-only log of the groups that actually ran in one execution."""

    run_id: Optional[str] = None
    records: List[GroupRecord] = Field(default_factory=list)

    def append(self, record: GroupRecord) -> None:
        self.records.append(record)

    def reversed_records(self) -> list[GroupRecord]:
        """Return a reversed copy; the trace itself is never reordered."""
        return list(reversed(self.records))

    def __len__(self) -> int:
        return len(self.records)


class ExecutionOutcome(BaseModel):
    """Result of one successful run: output plus the state that produced it."""

    run_id: str
    output: Any = None
    context: Any
    trace: ExecutionTrace

    model_config = ConfigDict(arbitrary_types_allowed=True)


ConditionalGroup.model_rebuild()
WorkflowDefinition.model_rebuild()
ExecutedStep.model_rebuild()
GroupRecord.model_rebuild()
ExecutionTrace.model_rebuild()

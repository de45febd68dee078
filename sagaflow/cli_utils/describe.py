"""Render workflow definitions as indented text trees."""

from __future__ import annotations

from typing import Iterator

from sagaflow.composition import WorkflowStep
from sagaflow.contracts import (
    ConditionalGroup,
    ParallelGroup,
    SequentialGroup,
    StepSpec,
    WorkflowDefinition,
)
from sagaflow.steps import compensator_of, step_name


def _predicate_name(group: ConditionalGroup) -> str:
    return getattr(group.predicate, "__name__", type(group.predicate).__name__)


def _describe_spec(spec: StepSpec, indent: str) -> Iterator[str]:
    flags = []
    if compensator_of(spec.step) is not None:
        flags.append("compensates")
    if spec.input_resolver is not None:
        flags.append("resolver")
    suffix = f" [{', '.join(flags)}]" if flags else ""
    if isinstance(spec.step, WorkflowStep):
        yield f"{indent}{spec.key}: workflow {spec.step.name}{suffix}"
        yield from describe_definition(spec.step.workflow.definition, indent + "    ")
    else:
        yield f"{indent}{spec.key}: {step_name(spec.step)}{suffix}"


def describe_definition(definition: WorkflowDefinition, indent: str = "") -> Iterator[str]:
    """Yield one line per group and step of ``definition``."""

    for group in definition.groups:
        if isinstance(group, SequentialGroup):
            yield from _describe_spec(group.member, indent)
        elif isinstance(group, ParallelGroup):
            yield f"{indent}parallel:"
            for member in group.members:
                yield from _describe_spec(member, indent + "  ")
        elif isinstance(group, ConditionalGroup):
            yield f"{indent}if {_predicate_name(group)}:"
            yield from describe_definition(group.body, indent + "  ")

"""Sagaflow: in-process saga workflows with automatic compensation."""

from .builder import WorkflowBuilder
from .composition import WorkflowStep
from .context import ExecutionContext
from .contracts import (
    ConditionalGroup,
    ExecutedStep,
    ExecutionOutcome,
    ExecutionTrace,
    GroupRecord,
    ParallelGroup,
    SequentialGroup,
    StepSpec,
    WorkflowDefinition,
)
from .engine import WorkflowEngine
from .errors import (
    CompensationError,
    SagaflowError,
    WorkflowDefinitionError,
    compensation_errors,
)
from .recording import get_recorder
from .steps import BaseStep, FunctionStep
from .workflow import Workflow

__version__ = "0.1.0"
__all__ = [
    "BaseStep",
    "CompensationError",
    "ConditionalGroup",
    "ExecutedStep",
    "ExecutionContext",
    "ExecutionOutcome",
    "ExecutionTrace",
    "FunctionStep",
    "GroupRecord",
    "ParallelGroup",
    "SagaflowError",
    "SequentialGroup",
    "StepSpec",
    "Workflow",
    "WorkflowBuilder",
    "WorkflowDefinition",
    "WorkflowDefinitionError",
    "WorkflowEngine",
    "WorkflowStep",
    "compensation_errors",
    "get_recorder",
]

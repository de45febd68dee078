"""Step abstractions: the unit of work a workflow is made of."""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional, Union

if TYPE_CHECKING:
    from .context import ExecutionContext

StepCallable = Callable[[Any, "ExecutionContext", Any], Union[Any, Awaitable[Any]]]
CompensateCallable = Callable[[Any, "ExecutionContext", Any], Union[None, Awaitable[None]]]


class BaseStep(metaclass=abc.ABCMeta):
    """Abstract base for steps.

    Subclasses implement :meth:`execute` and may define a ``compensate``
    method with the signature ``compensate(output, context, resolver)``.
    Steps must not keep per-run state: the same instance can be used by
    many concurrent executions.
    """

    @abc.abstractmethod
    async def execute(self, input: Any, context: "ExecutionContext", resolver: Any) -> Any:
        """Run the step and return its output."""
        raise NotImplementedError


class FunctionStep:
    """Step assembled from plain (sync or async) callables."""

    def __init__(
        self,
        execute: StepCallable,
        compensate: Optional[CompensateCallable] = None,
        name: Optional[str] = None,
    ) -> None:
        self._execute = execute
        self.compensate = compensate
        self.name = name or getattr(execute, "__name__", type(self).__name__)

    def execute(self, input: Any, context: "ExecutionContext", resolver: Any) -> Any:
        return self._execute(input, context, resolver)

    def __repr__(self) -> str:
        return f"FunctionStep({self.name!r})"


def as_step(obj: Any) -> Any:
    """Return ``obj`` as a step, wrapping bare callables in :class:`FunctionStep`."""
    if callable(getattr(obj, "execute", None)):
        return obj
    if callable(obj):
        return FunctionStep(obj)
    raise TypeError(f"{obj!r} is not a step: it has no callable 'execute'")


def compensator_of(step: Any) -> Optional[CompensateCallable]:
    """Return the step's compensating callable, or ``None`` if it has none."""
    compensate = getattr(step, "compensate", None)
    return compensate if callable(compensate) else None


def step_name(step: Any) -> str:
    return getattr(step, "name", None) or type(step).__name__

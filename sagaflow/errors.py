"""Exception types raised by the sagaflow engine."""

from __future__ import annotations

from typing import Iterable, List


class SagaflowError(Exception):
    """Base class for errors raised by sagaflow itself."""


class WorkflowDefinitionError(SagaflowError, ValueError):
    """The workflow definition is invalid and cannot be built."""


class FrozenContextError(SagaflowError, TypeError):
    """A write was attempted on a read-only context snapshot."""


class CompensationError(SagaflowError):
    """A step's compensator raised while rolling back a failed run."""

    def __init__(self, key: str, cause: BaseException) -> None:
        self.key = key
        self.cause = cause
        super().__init__(f"Compensation of step '{key}' failed: {cause!r}")


def attach_compensation_errors(
    exc: BaseException, errors: Iterable[CompensationError]
) -> None:
    """Attach compensation failures to the error that triggered the rollback.

    The exception object itself is left as-is so it can be re-raised
    unchanged; failures accumulate across nested scopes.
    """

    errors = list(errors)
    if not errors:
        return
    existing = getattr(exc, "compensation_errors", None)
    if existing is None:
        existing = []
        exc.compensation_errors = existing  # type: ignore[attr-defined]
    for error in errors:
        existing.append(error)
        exc.add_note(str(error))


def compensation_errors(exc: BaseException) -> List[CompensationError]:
    """Return the compensation failures attached to ``exc`` (if any)."""

    return list(getattr(exc, "compensation_errors", None) or [])


__all__ = [
    "SagaflowError",
    "WorkflowDefinitionError",
    "FrozenContextError",
    "CompensationError",
    "attach_compensation_errors",
    "compensation_errors",
]

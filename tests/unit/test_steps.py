"""Step wrappers and error helpers."""

import pytest

from sagaflow import BaseStep, FunctionStep
from sagaflow.errors import (
    CompensationError,
    attach_compensation_errors,
    compensation_errors,
)
from sagaflow.steps import as_step, compensator_of, step_name


class Greet(BaseStep):
    async def execute(self, input, context, resolver):
        return f"hello {input}"


def test_base_step_requires_execute():
    class Incomplete(BaseStep):
        pass

    with pytest.raises(TypeError):
        Incomplete()


def test_as_step_keeps_objects_with_execute():
    step = Greet()

    assert as_step(step) is step
    assert compensator_of(step) is None
    assert step_name(step) == "Greet"


def test_as_step_wraps_callables():
    def create_user(input, context, resolver):
        return input

    step = as_step(create_user)

    assert isinstance(step, FunctionStep)
    assert step.name == "create_user"
    assert step.execute("x", None, None) == "x"


def test_as_step_rejects_other_objects():
    with pytest.raises(TypeError, match="not a step"):
        as_step("create_user")


def test_function_step_compensator():
    def undo(output, context, resolver):
        return None

    step = FunctionStep(lambda i, c, r: i, compensate=undo, name="custom")

    assert compensator_of(step) is undo
    assert step_name(step) == "custom"


def test_compensation_errors_accumulate_as_notes():
    exc = RuntimeError("boom")
    first = CompensationError("a", ValueError("x"))
    second = CompensationError("b", ValueError("y"))

    attach_compensation_errors(exc, [])
    assert compensation_errors(exc) == []
    assert not hasattr(exc, "__notes__")

    attach_compensation_errors(exc, [first])
    attach_compensation_errors(exc, [second])

    assert compensation_errors(exc) == [first, second]
    assert exc.__notes__ == [str(first), str(second)]
    assert "Compensation of step 'a' failed" in str(first)

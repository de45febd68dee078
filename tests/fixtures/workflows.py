"""Workflows loaded by path in the CLI tests."""

from sagaflow import FunctionStep, WorkflowBuilder


def add_one(input, context, resolver):
    return input + 1


def double(input, context, resolver):
    return input * 2


def explode(input, context, resolver):
    raise RuntimeError("boom")


def undo(output, context, resolver):
    return None


def is_positive(input, context):
    return input > 0


workflow = (
    WorkflowBuilder(name="arithmetic")
    .add_step("increment", FunctionStep(add_one, compensate=undo))
    .add_parallel({"doubled": double, "again": add_one})
    .add_conditional(is_positive, lambda b: b.add_step("positive", add_one))
)

failing_workflow = (
    WorkflowBuilder(name="failing")
    .add_step("increment", FunctionStep(add_one, compensate=undo))
    .add_step("explode", explode)
    .build()
)

not_a_workflow = 42

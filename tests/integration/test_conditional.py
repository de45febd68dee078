"""Conditional groups."""

from unittest.mock import AsyncMock

import pytest

from sagaflow import WorkflowBuilder


class MockStep:
    def __init__(self, execute, compensate=None):
        self.execute = AsyncMock(side_effect=execute)
        if compensate is not None:
            self.compensate = compensate


def mock_step(execute, compensate=None):
    return MockStep(execute, compensate)


@pytest.mark.asyncio
async def test_executes_body_when_condition_is_true():
    container = object()
    step1 = mock_step(lambda input, context, resolver: f"{input} processed")
    condition = AsyncMock(return_value=True)

    workflow = (
        WorkflowBuilder(container)
        .add_conditional(condition, lambda builder: builder.add_step("step1", step1))
        .build()
    )

    result = await workflow.execute("test input")

    condition.assert_awaited_once()
    assert condition.await_args.args[0] == "test input"
    step1.execute.assert_awaited_once()
    input_arg, context_arg, resolver_arg = step1.execute.await_args.args
    assert input_arg == "test input"
    assert context_arg["input"] == "test input"
    assert resolver_arg is container
    assert result == {"input": "test input", "step1": "test input processed"}


@pytest.mark.asyncio
async def test_skips_body_when_condition_is_false():
    step1 = mock_step(lambda input, context, resolver: f"{input} processed")
    condition = AsyncMock(return_value=False)

    workflow = (
        WorkflowBuilder()
        .add_conditional(condition, lambda builder: builder.add_step("step1", step1))
        .build()
    )

    outcome = await workflow.run("test input")

    assert condition.await_args.args[0] == "test input"
    step1.execute.assert_not_awaited()
    assert outcome.output == {"input": "test input"}
    assert len(outcome.trace) == 0


@pytest.mark.asyncio
async def test_sync_predicates_are_supported():
    workflow = (
        WorkflowBuilder()
        .add_conditional(lambda input, context: input > 1, lambda b: b.add_step("big", lambda i, c, r: True))
        .build()
    )

    assert await workflow.execute(5) == {"input": 5, "big": True}
    assert await workflow.execute(0) == {"input": 0}


@pytest.mark.asyncio
async def test_compensates_when_step_in_conditional_group_fails():
    compensate = AsyncMock()
    step1 = mock_step(lambda input, context, resolver: f"{input} processed", compensate)

    def fail(input, context, resolver):
        raise RuntimeError("Step 2 failed")

    step2 = mock_step(fail)

    workflow = (
        WorkflowBuilder()
        .add_conditional(
            AsyncMock(return_value=True),
            lambda builder: builder.add_step("step1", step1).add_step("step2", step2),
        )
        .build()
    )

    with pytest.raises(RuntimeError, match="Step 2 failed"):
        await workflow.execute("test input")

    assert step2.execute.await_args.args[0] == "test input"
    compensate.assert_awaited_once()
    assert compensate.await_args.args[0] == "test input processed"


@pytest.mark.asyncio
async def test_nested_conditionals():
    step1 = mock_step(lambda input, context, resolver: f"{input} step1")
    step2 = mock_step(lambda input, context, resolver: f"{input} step2")
    outer = AsyncMock(return_value=True)
    inner = AsyncMock(return_value=True)

    workflow = (
        WorkflowBuilder()
        .add_conditional(
            outer,
            lambda builder: builder.add_conditional(
                inner,
                lambda inner_builder: inner_builder.add_step("step1", step1).add_step(
                    "step2", step2
                ),
            ),
        )
        .build()
    )

    result = await workflow.execute("test")

    assert outer.await_args.args[0] == "test"
    assert inner.await_args.args[0] == "test"
    assert step1.execute.await_args.args[0] == "test"
    assert step2.execute.await_args.args[0] == "test"
    assert result == {"input": "test", "step1": "test step1", "step2": "test step2"}


@pytest.mark.asyncio
async def test_nested_conditional_compensation():
    compensate = AsyncMock()
    step1 = mock_step(lambda input, context, resolver: f"{input} step1", compensate)

    def fail(input, context, resolver):
        raise RuntimeError("Nested step failed")

    workflow = (
        WorkflowBuilder()
        .add_conditional(
            AsyncMock(return_value=True),
            lambda builder: builder.add_conditional(
                AsyncMock(return_value=True),
                lambda inner: inner.add_step("step1", step1).add_step("step2", mock_step(fail)),
            ),
        )
        .build()
    )

    with pytest.raises(RuntimeError, match="Nested step failed"):
        await workflow.execute("test")

    compensate.assert_awaited_once()
    assert compensate.await_args.args[0] == "test step1"


@pytest.mark.asyncio
async def test_completed_conditional_is_compensated_by_later_failure(event_log, make_step):
    workflow = (
        WorkflowBuilder()
        .add_step("before", make_step("before"))
        .add_conditional(
            lambda input, context: True,
            lambda b: b.add_step("inside_a", make_step("inside_a")).add_step(
                "inside_b", make_step("inside_b")
            ),
        )
        .add_step("after", make_step("after", error=RuntimeError("after failed")))
        .build()
    )

    with pytest.raises(RuntimeError, match="after failed"):
        await workflow.execute(None)

    assert event_log.events[-3:] == [
        "inside_b compensated",
        "inside_a compensated",
        "before compensated",
    ]


@pytest.mark.asyncio
async def test_predicate_error_compensates_prior_groups(event_log, make_step):
    def broken_predicate(input, context):
        raise LookupError("predicate exploded")
    workflow = (
        WorkflowBuilder()
        .add_step("first", make_step("first"))
        .add_conditional(broken_predicate, lambda b: b.add_step("never", make_step("never")))
        .build()
    )

    with pytest.raises(LookupError, match="predicate exploded"):
        await workflow.execute(None)

    assert event_log.events == ["first executed", "first compensated"]


@pytest.mark.asyncio
async def test_conditional_outputs_are_visible_to_later_groups():
    workflow = (
        WorkflowBuilder()
        .add_conditional(
            lambda input, context: True,
            lambda b: b.add_step("discount", lambda i, c, r: 0.1),
        )
        .add_step("price", lambda i, c, r: 100 * (1 - c.get("discount", 0)))
        .build()
    )

    assert await workflow.execute(None) == pytest.approx(90.0)


@pytest.mark.asyncio
async def test_repeated_runs_leave_definition_intact(event_log, make_step):
    """Compensation must not reorder the shared conditional body."""

    workflow = (
        WorkflowBuilder()
        .add_conditional(
            lambda input, context: True,
            lambda b: b.add_step("a", make_step("a")).add_step("b", make_step("b")),
        )
        .add_step("fail", make_step("fail", error=RuntimeError("x")))
        .build()
    )
    body_keys = [g.key for g in workflow.definition.groups[0].body.groups]

    for _ in range(2):
        with pytest.raises(RuntimeError):
            await workflow.execute(None)

    assert [g.key for g in workflow.definition.groups[0].body.groups] == body_keys
    run = ["a executed", "b executed", "fail executed", "b compensated", "a compensated"]
    assert event_log.events == run + run

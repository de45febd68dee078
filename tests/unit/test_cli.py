"""Command line interface."""

import json
from pathlib import Path

from typer.testing import CliRunner

from sagaflow.cli import app

runner = CliRunner()

FIXTURES = Path(__file__).parents[1] / "fixtures" / "workflows.py"


def target(attr: str) -> str:
    return f"{FIXTURES}:{attr}"


def test_describe_prints_group_tree():
    result = runner.invoke(app, ["workflow", "describe", target("workflow")])

    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines == [
        "Workflow arithmetic",
        "  increment: add_one [compensates]",
        "  parallel:",
        "    doubled: double",
        "    again: add_one",
        "  if is_positive:",
        "    positive: add_one",
    ]


def test_run_prints_output_and_step_status():
    result = runner.invoke(app, ["workflow", "run", target("workflow"), "--input", "3"])

    assert result.exit_code == 0
    json_text = result.output.split("\nRun ")[0]
    assert json.loads(json_text) == {
        "input": 3,
        "increment": 4,
        "doubled": 6,
        "again": 4,
        "positive": 4,
    }
    assert ": completed" in result.output
    assert "- increment: completed" in result.output


def test_run_failure_exits_with_error():
    result = runner.invoke(app, ["workflow", "run", target("failing_workflow"), "--input", "1"])

    assert result.exit_code == 1
    assert "Workflow failed: boom" in result.output
    assert ": compensated" in result.output
    assert "- increment: compensated" in result.output
    assert "- explode: failed" in result.output


def test_run_rejects_invalid_json():
    result = runner.invoke(app, ["workflow", "run", target("workflow"), "--input", "{nope"])

    assert result.exit_code == 1
    assert "Invalid JSON input" in result.output


def test_load_errors():
    for bad in (target("not_a_workflow"), target("missing"), "no-colon", "missing.py:workflow"):
        result = runner.invoke(app, ["workflow", "describe", bad])

        assert result.exit_code == 1, bad
        assert "Cannot load workflow" in result.output

"""Command line interface for inspecting and running sagaflow workflows."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Optional

import typer

from sagaflow.cli_utils.describe import describe_definition
from sagaflow.cli_utils.loader import load_workflow
from sagaflow.errors import compensation_errors

app = typer.Typer(help="CLI for sagaflow workflows")

workflow_app = typer.Typer(help="Commands for inspecting and running workflows")

app.add_typer(workflow_app, name="workflow")


@app.callback()
def main() -> None:
    """Sagaflow CLI entry point."""
    pass


def _load(target: str):
    try:
        return load_workflow(target)
    except (ImportError, FileNotFoundError, ValueError) as exc:
        typer.secho(f"Cannot load workflow: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1)


@workflow_app.command("describe")
def workflow_describe(target: str) -> None:
    """
    Print the group structure of a workflow.

    Args:
        target: ``module:attribute`` (or ``path/to/file.py:attribute``) naming a
            Workflow, a WorkflowBuilder or a factory returning one

    Example:
        sagaflow workflow describe myapp.onboarding:workflow
        # Output: user: create_user [compensates]
        #         parallel:
        #           profile: create_profile [compensates]
        #           subscription: create_subscription [compensates, resolver]
    """
    workflow = _load(target)
    typer.echo(f"Workflow {workflow.name or target}")
    for line in describe_definition(workflow.definition, indent="  "):
        typer.echo(line)


@workflow_app.command("run")
def workflow_run(
    target: str,
    input: Optional[str] = typer.Option(None, help="Workflow input as a JSON document"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine activity"),
) -> None:
    """
    Execute a workflow once and print its output as JSON.

    On failure the original error is printed together with any compensation
    failures, and the command exits with code 1. The recorded status of
    each step is listed afterwards.

    Example:
        sagaflow workflow run myapp.onboarding:workflow --input '{"name": "John"}'
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    workflow = _load(target)
    try:
        payload = json.loads(input) if input is not None else None
    except json.JSONDecodeError as exc:
        typer.secho(f"Invalid JSON input: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    async def _run():
        try:
            outcome = await workflow.run(payload)
        except Exception as exc:
            roots = [r for r in await workflow.recorder.list_runs() if r.parent_run_id is None]
            return None, exc, roots[-1] if roots else None
        return outcome, None, await workflow.recorder.get_run(outcome.run_id)

    outcome, error, run = asyncio.run(_run())

    if error is None:
        typer.echo(json.dumps(outcome.output, default=str, indent=2))
    else:
        typer.secho(f"Workflow failed: {error}", fg=typer.colors.RED)
        for failure in compensation_errors(error):
            typer.secho(f"  {failure}", fg=typer.colors.YELLOW)

    if run is not None:
        typer.echo(f"Run {run.run_id}: {run.status}")
        for step in run.steps:
            typer.echo(f"- {step.step_key}: {step.status}")

    if error is not None:
        raise typer.Exit(code=1)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()

"""cloverbuild run command - execute tasks."""

from __future__ import annotations

from contextlib import ExitStack
from pathlib import Path

import click

from cloverbuild.cli.utils import find_project_dir, load_project
from cloverbuild.config.loader import load_config
from cloverbuild.core.errors import CloverBuildError
from cloverbuild.core.logging import configure_logging
from cloverbuild.core.progress import pluralize, spinner, status
from cloverbuild.host.build import TaskOutcome, TaskResult, run_build
from cloverbuild.host.tasks import Task

_OUTCOME_MARKERS = {
    TaskOutcome.EXECUTED: "ok",
    TaskOutcome.FAILED: "failed",
    TaskOutcome.SKIPPED: "skipped",
    TaskOutcome.NOT_RUN: "skipped",
}


class _StatusListener:
    """Shows a spinner while a task runs and a status line when it finishes."""

    def __init__(self) -> None:
        self._stack = ExitStack()

    def task_started(self, task: Task) -> None:
        self._stack.enter_context(spinner(f"> Task {task.path}"))

    def task_finished(self, task: Task, result: TaskResult) -> None:
        self._stack.close()
        label = f"{task.path}"
        if result.outcome is TaskOutcome.EXECUTED:
            label += f" ({result.duration_seconds:.1f}s)"
        elif result.outcome is TaskOutcome.SKIPPED:
            label += " SKIPPED (dependency failed)"
        elif result.error is not None:
            label += f" FAILED: {result.error.message}"
        status(label, marker=_OUTCOME_MARKERS[result.outcome])


@click.command()
@click.argument("task_names", nargs=-1, required=True)
@click.option(
    "--project-dir",
    "-p",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Project directory (default: nearest parent with cloverbuild.yaml)",
)
@click.option(
    "--continue",
    "continue_on_failure",
    is_flag=True,
    help="Keep running tasks that do not depend on a failed task",
)
@click.pass_context
def run_command(
    ctx: click.Context,
    task_names: tuple[str, ...],
    project_dir: Path | None,
    continue_on_failure: bool,
) -> None:
    """Run TASK_NAMES and everything they depend on.

    Clover instrumentation is only added to test tasks when
    cloverGenerateReport is one of the tasks that will run.
    """
    project_dir = find_project_dir(project_dir)

    try:
        config = load_config(project_dir)
        if not ctx.obj.get("verbose"):
            configure_logging(config=config.logging)
        project = load_project(project_dir, config)
        result = run_build(
            project,
            task_names,
            continue_on_failure=continue_on_failure,
            listener=_StatusListener(),
        )
    except CloverBuildError as e:
        raise click.ClickException(str(e)) from e

    executed = pluralize(len(result.executed), "task")
    summary = f"{executed} executed in {result.duration_seconds:.1f}s"
    if result.success:
        status(f"BUILD SUCCESSFUL · {summary}", marker="ok")
        return

    status(f"BUILD FAILED · {summary}", marker="failed")
    for failure in result.failures:
        if failure.error is not None:
            status(f"{failure.task_name}: {failure.error}", indent=2)
    ctx.exit(1)

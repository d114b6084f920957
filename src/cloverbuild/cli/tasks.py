"""cloverbuild tasks command - list tasks of the project."""

from pathlib import Path

import click

from cloverbuild.cli.utils import find_project_dir, load_project
from cloverbuild.config.loader import load_config
from cloverbuild.core.errors import CloverBuildError
from cloverbuild.core.progress import get_console, make_table


@click.command()
@click.option(
    "--project-dir",
    "-p",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Project directory (default: nearest parent with cloverbuild.yaml)",
)
def tasks_command(project_dir: Path | None) -> None:
    """List the project's tasks with their group and description."""
    project_dir = find_project_dir(project_dir)
    try:
        project = load_project(project_dir, load_config(project_dir))
    except CloverBuildError as e:
        raise click.ClickException(str(e)) from e

    rows = [
        [task.name, task.group or "", task.description or ""]
        for task in sorted(project.tasks, key=lambda t: (t.group or "~", t.name))
    ]
    table = make_table(f"Tasks of {project.name}", ["Task", "Group", "Description"], rows)
    get_console().print(table)

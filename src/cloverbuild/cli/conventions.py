"""cloverbuild conventions command - show resolved clover settings."""

import json
from pathlib import Path
from typing import Any

import click

from cloverbuild.cli.utils import find_project_dir, load_project
from cloverbuild.config.loader import load_config
from cloverbuild.core.errors import CloverBuildError
from cloverbuild.core.progress import get_console, make_table
from cloverbuild.plugin.convention import ConventionResolver
from cloverbuild.plugin.plugin import CONVENTION_NAME, CloverPlugin


def _render(value: Any) -> str:
    if isinstance(value, list):
        return ", ".join(str(v) for v in value) or "-"
    if value is None:
        return "-"
    return str(value)


@click.command()
@click.option(
    "--project-dir",
    "-p",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Project directory (default: nearest parent with cloverbuild.yaml)",
)
@click.option("--json", "as_json", is_flag=True, help="Print as JSON")
def conventions_command(project_dir: Path | None, as_json: bool) -> None:
    """Show every clover setting as it resolves right now.

    Values set in the clover section of cloverbuild.yaml win; everything
    else is computed from the project layout.
    """
    project_dir = find_project_dir(project_dir)
    try:
        project = load_project(project_dir, load_config(project_dir))
    except CloverBuildError as e:
        raise click.ClickException(str(e)) from e

    if not project.plugins.has_plugin(CloverPlugin.id):
        raise click.ClickException("The clover plugin is not applied to this project")

    values = ConventionResolver(project, project.extensions[CONVENTION_NAME]).as_dict()

    if as_json:
        click.echo(json.dumps(values, indent=2, default=str))
        return

    rows = [[name, _render(value)] for name, value in values.items()]
    get_console().print(make_table("Clover conventions", ["Setting", "Value"], rows))

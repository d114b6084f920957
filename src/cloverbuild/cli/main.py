"""cloverbuild CLI."""

import click

from cloverbuild.cli.conventions import conventions_command
from cloverbuild.cli.run import run_command
from cloverbuild.cli.tasks import tasks_command
from cloverbuild.core.logging import configure_logging


@click.group()
@click.version_option(package_name="cloverbuild", prog_name="cloverbuild")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """cloverbuild - Clover code coverage wired into test tasks."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "INFO")


cli.add_command(run_command, name="run")
cli.add_command(tasks_command, name="tasks")
cli.add_command(conventions_command, name="conventions")


if __name__ == "__main__":
    cli()

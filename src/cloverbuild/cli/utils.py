"""CLI utilities."""

from pathlib import Path

import click

from cloverbuild.clover.tool import CloverTool
from cloverbuild.config.loader import PROJECT_CONFIG_NAME
from cloverbuild.config.models import CloverBuildConfig
from cloverbuild.host.project import Project, SourceSet
from cloverbuild.host.tasks import TestTask
from cloverbuild.plugin.plugin import CONVENTION_NAME, CloverPlugin


def find_project_dir(start_path: Path | None = None) -> Path:
    """Find the project directory from the given path.

    Walks up the directory tree looking for cloverbuild.yaml.
    If start_path is None, uses the current working directory.

    Raises:
        click.ClickException: If no cloverbuild.yaml is found
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()

    while current != current.parent:
        if (current / PROJECT_CONFIG_NAME).exists():
            return current
        current = current.parent

    if (current / PROJECT_CONFIG_NAME).exists():
        return current

    raise click.ClickException(
        f"No {PROJECT_CONFIG_NAME} found in {start_path} or any parent directory."
    )


def load_project(project_dir: Path, config: CloverBuildConfig) -> Project:
    """Build a Project from the ``project`` section and apply its plugins.

    The ``clover`` section becomes the project's clover convention; ``tools``
    configures the Clover tool the plugin invokes.
    """
    layout = config.project
    project = Project(project_dir, name=layout.name, build_dir=layout.build_dir)
    project.source_compatibility = layout.source_compatibility
    project.target_compatibility = layout.target_compatibility

    for name, source_set in layout.source_sets.items():
        if source_set.classes_dir is None:
            classes_dir = project.build_dir / "classes" / name
        else:
            classes_dir = project.file(source_set.classes_dir)
        project.source_sets[name] = SourceSet(
            name=name,
            classes_dir=classes_dir,
            java_src_dirs=[project.file(d) for d in source_set.java],
            groovy_src_dirs=[project.file(d) for d in source_set.groovy],
        )
    for name, entries in layout.configurations.items():
        project.configurations[name] = [project.file(e) for e in entries]

    # Paths in the config file are relative to the project dir, like source sets.
    convention = config.clover
    if convention.classes_backup_dir is not None:
        convention.classes_backup_dir = project.file(convention.classes_backup_dir)
    if convention.license_file is not None:
        convention.license_file = project.file(convention.license_file)
    project.extensions[CONVENTION_NAME] = convention

    for plugin_id in layout.plugins:
        if plugin_id == CloverPlugin.id:
            project.plugins.apply(CloverPlugin(CloverTool(config.tools)))
        else:
            project.plugins.apply(plugin_id)

    for name, command in layout.tests.items():
        task = project.tasks.find_by_name(name)
        if task is None:
            task = project.tasks.add(name, TestTask)
        if not isinstance(task, TestTask):
            raise click.ClickException(f"Task '{name}' exists and is not a test task")
        task.command = list(command)
        task.timeout_sec = config.tools.timeout_sec

    return project

"""Project model: directories, source sets, configurations, plugins and tasks."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from cloverbuild.host.graph import TaskExecutionGraph
from cloverbuild.host.plugins import PluginContainer
from cloverbuild.host.tasks import TaskContainer


@dataclass
class SourceSet:
    """Source and output directories of one source set."""

    name: str
    classes_dir: Path
    java_src_dirs: list[Path] = field(default_factory=list)
    groovy_src_dirs: list[Path] = field(default_factory=list)


class Project:
    """A buildable project.

    Holds everything plugins query or extend: the directory layout, source
    sets, named file collections (configurations), compatibility levels,
    extensions contributed by plugins, the task container and the execution
    graph of the current build.
    """

    def __init__(
        self,
        project_dir: Path,
        *,
        name: str | None = None,
        root_dir: Path | None = None,
        build_dir: str | Path = "build",
    ) -> None:
        self.project_dir = project_dir.resolve()
        self.name = name or self.project_dir.name
        self.root_dir = (root_dir or self.project_dir).resolve()
        self.build_dir = self.file(build_dir)
        self.source_sets: dict[str, SourceSet] = {}
        self.configurations: dict[str, list[Path]] = {}
        self.source_compatibility: str | None = None
        self.target_compatibility: str | None = None
        self.extensions: dict[str, Any] = {}
        self.tasks = TaskContainer(self)
        self.graph = TaskExecutionGraph()
        self.plugins = PluginContainer(self)

    @property
    def reports_dir(self) -> Path:
        return self.build_dir / "reports"

    def file(self, path: str | Path) -> Path:
        """Resolve a path against the project directory."""
        p = Path(path).expanduser()
        return p if p.is_absolute() else self.project_dir / p

    def __repr__(self) -> str:
        return f"<Project '{self.name}' at {self.project_dir}>"

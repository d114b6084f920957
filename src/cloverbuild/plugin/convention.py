"""Convention resolution for the clover plugin.

Each setting is resolved the same way: an explicit override on the
``CloverConvention`` wins; otherwise a default is computed from the current
state of the project. Nothing is cached, so every call reflects the project
as it is at the point of use.
"""

from __future__ import annotations

import fnmatch
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from cloverbuild.config.models import CloverConvention
from cloverbuild.core.errors import ConfigError
from cloverbuild.core.logging import get_logger
from cloverbuild.host.plugins import TEST_RUNTIME_CONFIGURATION

if TYPE_CHECKING:
    from cloverbuild.host.project import Project, SourceSet

log = get_logger("plugin.convention")

JAVA_INCLUDES = "**/*.java"
GROOVY_INCLUDES = "**/*.groovy"
LICENSE_FILE_NAME = "clover.license"
BACKUP_SUFFIX = "-bak"
GROOVY_PLUGIN_ID = "groovy"


@dataclass(frozen=True, slots=True)
class InstrumentSettings:
    """Everything the instrumentation step needs, resolved at one instant."""

    compile_groovy: bool
    classpath: tuple[Path, ...]
    classes_dir: Path
    classes_backup_dir: Path
    license_file: Path
    src_dirs: tuple[Path, ...]
    source_compatibility: str | None
    target_compatibility: str | None
    includes: tuple[str, ...]
    excludes: tuple[str, ...]
    database: Path
    instrumented_src_dir: Path


@dataclass(frozen=True, slots=True)
class ReportSettings:
    """Everything the report task needs, resolved at one instant."""

    classes_dir: Path
    classes_backup_dir: Path
    reports_dir: Path
    classpath: tuple[Path, ...]
    license_file: Path
    database: Path
    target_percentage: float | None
    xml: bool
    json: bool
    html: bool
    pdf: bool
    work_dir: Path

    @property
    def formats(self) -> list[str]:
        """Enabled report formats, xml first."""
        enabled = {"xml": self.xml, "json": self.json, "html": self.html, "pdf": self.pdf}
        return [name for name, on in enabled.items() if on]


def matches_glob(rel_path: str, pattern: str) -> bool:
    """Check if a ``/``-separated path matches an Ant-style pattern.

    ``**`` matches zero or more directories; ``*`` and ``?`` never cross a
    ``/``. A pattern ending in ``/`` matches everything below that directory.
    Matching is case-sensitive.
    """
    if pattern.endswith("/"):
        pattern += "**"
    return _match_segments(rel_path.split("/"), pattern.split("/"))


def _match_segments(parts: list[str], patterns: list[str]) -> bool:
    if not patterns:
        return not parts
    head, rest = patterns[0], patterns[1:]
    if head == "**":
        return any(_match_segments(parts[i:], rest) for i in range(len(parts) + 1))
    if not parts or not fnmatch.fnmatchcase(parts[0], head):
        return False
    return _match_segments(parts[1:], rest)


def collect_sources(
    src_dirs: Iterable[Path], includes: Sequence[str], excludes: Sequence[str]
) -> dict[Path, list[Path]]:
    """Map each source dir to its files matching ``includes`` and no ``excludes``.

    Source dirs without matching files are left out.
    """
    selected: dict[Path, list[Path]] = {}
    for src_dir in src_dirs:
        files = []
        for path in sorted(src_dir.rglob("*")):
            if not path.is_file():
                continue
            rel = path.relative_to(src_dir).as_posix()
            if not any(matches_glob(rel, p) for p in includes):
                continue
            if any(matches_glob(rel, p) for p in excludes):
                continue
            files.append(path)
        if files:
            selected[src_dir] = files
    return selected


class ConventionResolver:
    """Resolve clover settings with override-then-default precedence.

    Holds explicit references to the project and the convention object; the
    convention may be mutated after the plugin is applied and later reads see
    the change.
    """

    def __init__(self, project: Project, convention: CloverConvention) -> None:
        self.project = project
        self.convention = convention
        self._resolvers: dict[str, Callable[[], Any]] = {
            "compile_groovy": self.compile_groovy,
            "classpath": self.classpath,
            "classes_dir": self.classes_dir,
            "classes_backup_dir": self.classes_backup_dir,
            "license_file": self.license_file,
            "src_dirs": self.source_directories,
            "source_compatibility": self.source_compatibility,
            "target_compatibility": self.target_compatibility,
            "includes": self.includes,
            "excludes": self.excludes,
            "reports_dir": self.reports_dir,
            "target_percentage": self.target_percentage,
            "xml": lambda: self.convention.report.xml,
            "json": lambda: self.convention.report.json_,
            "html": lambda: self.convention.report.html,
            "pdf": lambda: self.convention.report.pdf,
        }

    @property
    def setting_names(self) -> list[str]:
        return list(self._resolvers)

    def resolve(self, name: str) -> Any:
        """Resolve one setting by name.

        Raises:
            ConfigError: If ``name`` is not a known setting.
        """
        resolver = self._resolvers.get(name)
        if resolver is None:
            raise ConfigError.unknown_setting(name, self.setting_names)
        return resolver()

    def as_dict(self) -> dict[str, Any]:
        return {name: resolver() for name, resolver in self._resolvers.items()}

    # -- individual settings ------------------------------------------------

    def _main(self) -> SourceSet:
        return self.project.source_sets["main"]

    def has_groovy_plugin(self) -> bool:
        return self.project.plugins.has_plugin(GROOVY_PLUGIN_ID)

    def compile_groovy(self) -> bool:
        return self.has_groovy_plugin()

    def classpath(self) -> list[Path]:
        return list(self.project.configurations.get(TEST_RUNTIME_CONFIGURATION, []))

    def classes_dir(self) -> Path:
        return self._main().classes_dir

    def classes_backup_dir(self) -> Path:
        """The override as given, else the classes dir with a ``-bak`` suffix."""
        if self.convention.classes_backup_dir is not None:
            return self.convention.classes_backup_dir
        classes_dir = self.classes_dir()
        return classes_dir.with_name(classes_dir.name + BACKUP_SUFFIX)

    def license_file(self) -> Path:
        if self.convention.license_file is not None:
            return self.convention.license_file
        return self.project.root_dir / LICENSE_FILE_NAME

    def source_directories(self) -> list[Path]:
        """Existing main source dirs: java, plus groovy if the groovy plugin is applied.

        Missing directories are skipped with a warning each.
        """
        src_dirs: list[Path] = []
        main = self._main()
        _add_existing_source_directories(src_dirs, main.java_src_dirs)
        if self.has_groovy_plugin():
            _add_existing_source_directories(src_dirs, main.groovy_src_dirs)
        return src_dirs

    def source_compatibility(self) -> str | None:
        level = self.project.source_compatibility
        return str(level) if level is not None else None

    def target_compatibility(self) -> str | None:
        level = self.project.target_compatibility
        return str(level) if level is not None else None

    def includes(self) -> list[str]:
        if self.convention.includes:
            return list(self.convention.includes)
        if self.has_groovy_plugin():
            return [JAVA_INCLUDES, GROOVY_INCLUDES]
        return [JAVA_INCLUDES]

    def excludes(self) -> list[str]:
        return list(self.convention.excludes or [])

    def reports_dir(self) -> Path:
        return self.project.reports_dir

    def target_percentage(self) -> float | None:
        return self.convention.target_percentage

    def database(self) -> Path:
        return self.project.build_dir / ".clover" / "clover.db"

    def work_dir(self) -> Path:
        return self.project.build_dir / "clover"

    # -- bundles ------------------------------------------------------------

    def instrument_settings(self) -> InstrumentSettings:
        return InstrumentSettings(
            compile_groovy=self.compile_groovy(),
            classpath=tuple(self.classpath()),
            classes_dir=self.classes_dir(),
            classes_backup_dir=self.classes_backup_dir(),
            license_file=self.license_file(),
            src_dirs=tuple(self.source_directories()),
            source_compatibility=self.source_compatibility(),
            target_compatibility=self.target_compatibility(),
            includes=tuple(self.includes()),
            excludes=tuple(self.excludes()),
            database=self.database(),
            instrumented_src_dir=self.work_dir() / "src-instrumented",
        )

    def report_settings(self) -> ReportSettings:
        report = self.convention.report
        return ReportSettings(
            classes_dir=self.classes_dir(),
            classes_backup_dir=self.classes_backup_dir(),
            reports_dir=self.reports_dir(),
            classpath=tuple(self.classpath()),
            license_file=self.license_file(),
            database=self.database(),
            target_percentage=self.target_percentage(),
            xml=report.xml,
            json=report.json_,
            html=report.html,
            pdf=report.pdf,
            work_dir=self.work_dir(),
        )


def _add_existing_source_directories(target: list[Path], source: Iterable[Path]) -> None:
    for src_dir in source:
        if src_dir.exists():
            if src_dir not in target:
                target.append(src_dir)
        else:
            log.warning(
                "source_dir_missing",
                path=str(src_dir.resolve()),
                detail="directory does not exist and won't be included in Clover instrumentation",
            )

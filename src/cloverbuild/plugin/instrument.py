"""Instrumentation action prepended to test tasks.

The action swaps the compiled main classes for Clover-instrumented ones:
original classes are copied to the backup dir, sources are instrumented and
recompiled into the classes dir. The report task moves the originals back.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from cloverbuild.clover.tool import CloverTool
from cloverbuild.core.errors import CoverageError
from cloverbuild.core.logging import get_logger
from cloverbuild.plugin.convention import InstrumentSettings, collect_sources, matches_glob

if TYPE_CHECKING:
    from cloverbuild.host.tasks import Task

log = get_logger("plugin.instrument")


def backup_classes(classes_dir: Path, backup_dir: Path) -> None:
    """Copy ``classes_dir`` to ``backup_dir``.

    A backup left over from a coverage build that never reached its report
    holds the original classes, while ``classes_dir`` still holds instrumented
    ones. The leftover is moved back into ``classes_dir`` before copying.
    """
    if backup_dir.exists():
        log.warning("classes_backup_left_over", backup_dir=str(backup_dir))
        restore_classes(classes_dir, backup_dir)
    backup_dir.parent.mkdir(parents=True, exist_ok=True)
    if classes_dir.exists():
        shutil.copytree(classes_dir, backup_dir)
    else:
        backup_dir.mkdir()
        classes_dir.mkdir(parents=True)
    log.debug("classes_backed_up", classes_dir=str(classes_dir), backup_dir=str(backup_dir))


def restore_classes(classes_dir: Path, backup_dir: Path) -> bool:
    """Put the original classes back. Returns False when there is no backup."""
    if not backup_dir.exists():
        log.debug("classes_backup_absent", backup_dir=str(backup_dir))
        return False
    if classes_dir.exists():
        shutil.rmtree(classes_dir)
    shutil.move(str(backup_dir), str(classes_dir))
    log.info("classes_restored", classes_dir=str(classes_dir))
    return True


class InstrumentCodeAction:
    """Clover instrumentation step, run before a test task's body.

    Settings come from ``settings_provider`` each time the action runs, so
    they reflect the project at execution time rather than when the action
    was attached. The same action is shared by every test task of a build;
    once the classes are instrumented, later test tasks reuse them.
    """

    def __init__(
        self, settings_provider: Callable[[], InstrumentSettings], tool: CloverTool
    ) -> None:
        self._settings_provider = settings_provider
        self.tool = tool
        self._instrumented: set[Path] = set()

    def __call__(self, task: Task) -> None:
        settings = self._settings_provider()
        if settings.classes_dir in self._instrumented:
            log.debug("clover_already_instrumented", task=task.name)
            return

        log.info(
            "clover_instrumentation_started",
            task=task.name,
            src_dirs=[str(d) for d in settings.src_dirs],
            groovy=settings.compile_groovy,
        )

        if not settings.license_file.exists():
            raise CoverageError.license_missing(str(settings.license_file))

        sources = collect_sources(settings.src_dirs, settings.includes, settings.excludes)
        if not sources:
            log.warning("clover_no_sources", task=task.name, detail="nothing to instrument")
            return

        jar = self.tool.locate_jar(settings.classpath)
        backup_classes(settings.classes_dir, settings.classes_backup_dir)
        try:
            compiled = self._instrument_and_compile(settings, sources, jar)
        except Exception:
            restore_classes(settings.classes_dir, settings.classes_backup_dir)
            raise

        self._instrumented.add(settings.classes_dir)
        log.info("clover_instrumentation_done", task=task.name, files=compiled)

    def _instrument_and_compile(
        self, settings: InstrumentSettings, sources: dict[Path, list[Path]], jar: Path
    ) -> int:
        out_dir = settings.instrumented_src_dir
        if out_dir.exists():
            shutil.rmtree(out_dir)
        out_dir.mkdir(parents=True)
        settings.database.parent.mkdir(parents=True, exist_ok=True)

        for src_dir, files in sources.items():
            self.tool.instrument(
                jar=jar,
                license_file=settings.license_file,
                database=settings.database,
                src_dir=src_dir,
                files=files,
                output_dir=out_dir,
                source_level=settings.source_compatibility,
            )

        instrumented = [
            p
            for p in sorted(out_dir.rglob("*"))
            if p.is_file()
            and any(matches_glob(p.relative_to(out_dir).as_posix(), i) for i in settings.includes)
        ]
        self.tool.compile(
            sources=instrumented,
            classpath=[*settings.classpath, jar],
            destination=settings.classes_dir,
            source_level=settings.source_compatibility,
            target_level=settings.target_compatibility,
            groovy=settings.compile_groovy,
        )
        return len(instrumented)

    def __repr__(self) -> str:
        return "<InstrumentCodeAction>"

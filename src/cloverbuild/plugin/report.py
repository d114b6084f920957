"""The cloverGenerateReport task."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from cloverbuild.clover.coverage import CoverageParseError, parse_clover_xml
from cloverbuild.clover.tool import CloverTool, ReportFormat
from cloverbuild.core.errors import CoverageError, InternalError
from cloverbuild.core.logging import get_logger
from cloverbuild.host.tasks import Task
from cloverbuild.plugin.convention import ReportSettings
from cloverbuild.plugin.instrument import restore_classes

if TYPE_CHECKING:
    from cloverbuild.host.project import Project

log = get_logger("plugin.report")

REPORT_OUTPUTS: dict[str, str] = {
    "xml": "clover.xml",
    "json": "json",
    "html": "html",
    "pdf": "clover.pdf",
}


def report_output(report_dir: Path, report_format: str) -> Path:
    return report_dir / REPORT_OUTPUTS[report_format]


class GenerateCoverageReportTask(Task):
    """Writes Clover reports, checks the coverage target, restores original classes.

    ``settings_provider`` and ``tool`` are injected by the clover plugin when
    the task is added to the project.
    """

    def __init__(
        self,
        name: str,
        project: Project,
        *,
        description: str | None = None,
        group: str | None = None,
    ) -> None:
        super().__init__(name, project, description=description, group=group)
        self.settings_provider: Callable[[], ReportSettings] | None = None
        self.tool: CloverTool | None = None

    def run(self) -> None:
        if self.settings_provider is None or self.tool is None:
            raise InternalError.unexpected(f"task '{self.name}' was not configured by the plugin")

        settings = self.settings_provider()
        try:
            self._generate(settings, self.tool)
        finally:
            restore_classes(settings.classes_dir, settings.classes_backup_dir)

    def _generate(self, settings: ReportSettings, tool: CloverTool) -> None:
        # No database means instrumentation found no sources; only a target makes it fatal.
        if not settings.database.exists():
            if settings.target_percentage is not None:
                raise CoverageError.database_missing(str(settings.database))
            log.warning("clover_report_skipped", database=str(settings.database))
            return

        jar = tool.locate_jar(settings.classpath)
        report_dir = settings.reports_dir / "clover"
        for report_format in settings.formats:
            output = report_output(report_dir, report_format)
            self._render(tool, report_format, settings, jar, output)  # type: ignore[arg-type]
            log.info("clover_report_written", format=report_format, path=str(output))

        if settings.target_percentage is None:
            return

        if settings.xml:
            xml_path = report_output(report_dir, "xml")
        else:
            xml_path = settings.work_dir / "clover.xml"
            self._render(tool, "xml", settings, jar, xml_path)
        self._check_target(xml_path, settings.target_percentage)

    @staticmethod
    def _render(
        tool: CloverTool,
        report_format: ReportFormat,
        settings: ReportSettings,
        jar: Path,
        output: Path,
    ) -> None:
        tool.report(
            report_format,
            jar=jar,
            license_file=settings.license_file,
            database=settings.database,
            output=output,
        )

    @staticmethod
    def _check_target(xml_path: Path, target: float) -> None:
        try:
            report = parse_clover_xml(xml_path)
        except CoverageParseError as e:
            raise CoverageError.report_missing(str(xml_path)) from e

        actual = report.total_percentage
        log.info("clover_coverage_total", percentage=round(actual, 2), target=target)
        if actual < target:
            raise CoverageError.below_target(actual, target)

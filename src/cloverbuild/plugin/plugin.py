"""The clover plugin: wires Clover coverage into a project's test lifecycle."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from cloverbuild.clover.tool import CloverTool
from cloverbuild.config.models import CloverConvention
from cloverbuild.core.logging import get_logger
from cloverbuild.host.plugins import JavaPlugin
from cloverbuild.host.tasks import TestTask
from cloverbuild.plugin.convention import ConventionResolver
from cloverbuild.plugin.instrument import InstrumentCodeAction
from cloverbuild.plugin.report import GenerateCoverageReportTask

if TYPE_CHECKING:
    from cloverbuild.host.graph import TaskExecutionGraph
    from cloverbuild.host.project import Project

log = get_logger("plugin.clover")

GENERATE_REPORT_TASK_NAME = "cloverGenerateReport"
CONVENTION_NAME = "clover"


class CloverPlugin:
    """Provides a task for creating a code coverage report using Clover.

    Applying the plugin:

    1. applies the java plugin and registers the ``clover`` convention
       (reusing one already present in ``project.extensions``);
    2. adds ``cloverGenerateReport``, which depends on every test task;
    3. registers a one-shot task graph hook that prepends Clover
       instrumentation to every test task, but only when
       ``cloverGenerateReport`` is part of the build.
    """

    id: ClassVar[str] = "clover"

    def __init__(self, tool: CloverTool | None = None) -> None:
        self.tool = tool or CloverTool()

    def apply(self, project: Project) -> None:
        project.plugins.apply(JavaPlugin.id)

        convention = project.extensions.setdefault(CONVENTION_NAME, CloverConvention())
        resolver = ConventionResolver(project, convention)

        self._configure_generate_report_task(project, resolver)
        self._configure_test_tasks(project, resolver)

    def _configure_test_tasks(self, project: Project, resolver: ConventionResolver) -> None:
        instrument = InstrumentCodeAction(resolver.instrument_settings, self.tool)

        def on_graph_ready(graph: TaskExecutionGraph) -> None:
            report_task = project.tasks.get_by_name(GENERATE_REPORT_TASK_NAME)

            # Only instrument when the report task is going to run
            if not graph.has_task(report_task):
                log.debug("clover_instrumentation_skipped", reason="report_task_not_scheduled")
                return

            test_tasks = [t for t in project.tasks.with_type(TestTask) if graph.has_task(t)]
            for test in test_tasks:
                test.do_first(instrument)
            log.info("clover_instrumentation_enabled", tasks=[t.name for t in test_tasks])

        project.graph.when_ready(on_graph_ready)

    def _configure_generate_report_task(
        self, project: Project, resolver: ConventionResolver
    ) -> None:
        def configure(task: GenerateCoverageReportTask) -> None:
            task.depends_on(project.tasks.with_type(TestTask))
            task.settings_provider = resolver.report_settings
            task.tool = self.tool

        project.tasks.with_type(GenerateCoverageReportTask).when_task_added(configure)

        project.tasks.add(
            GENERATE_REPORT_TASK_NAME,
            GenerateCoverageReportTask,
            description="Generates Clover code coverage report.",
            group="report",
        )

"""Clover plugin: report task, conditional instrumentation, conventions."""

from cloverbuild.plugin.convention import (
    GROOVY_INCLUDES,
    JAVA_INCLUDES,
    ConventionResolver,
    InstrumentSettings,
    ReportSettings,
)
from cloverbuild.plugin.instrument import InstrumentCodeAction
from cloverbuild.plugin.plugin import GENERATE_REPORT_TASK_NAME, CloverPlugin
from cloverbuild.plugin.report import GenerateCoverageReportTask

__all__ = [
    "GENERATE_REPORT_TASK_NAME",
    "GROOVY_INCLUDES",
    "JAVA_INCLUDES",
    "CloverPlugin",
    "ConventionResolver",
    "GenerateCoverageReportTask",
    "InstrumentCodeAction",
    "InstrumentSettings",
    "ReportSettings",
]

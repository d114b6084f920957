"""Clover tool front end and Clover XML coverage parsing."""

from cloverbuild.clover.coverage import (
    CoverageParseError,
    CoverageReport,
    CoverageSummary,
    FileCoverage,
    parse_clover_xml,
)
from cloverbuild.clover.tool import REPORTERS, CloverTool, ReportFormat, ToolRun, find_clover_jar

__all__ = [
    "CloverTool",
    "CoverageParseError",
    "CoverageReport",
    "CoverageSummary",
    "FileCoverage",
    "REPORTERS",
    "ReportFormat",
    "ToolRun",
    "find_clover_jar",
    "parse_clover_xml",
]

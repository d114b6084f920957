"""Config module exports."""

from cloverbuild.config.loader import load_config
from cloverbuild.config.models import (
    CloverBuildConfig,
    CloverConvention,
    CloverReportConfig,
    LoggingConfig,
    ProjectConfig,
    ToolsConfig,
)

__all__ = [
    "load_config",
    "CloverBuildConfig",
    "CloverConvention",
    "CloverReportConfig",
    "LoggingConfig",
    "ProjectConfig",
    "ToolsConfig",
]

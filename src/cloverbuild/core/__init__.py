"""Core module exports."""

from cloverbuild.core.errors import (
    CloverBuildError,
    ConfigError,
    CoverageError,
    ErrorCode,
    InternalError,
    TaskError,
)
from cloverbuild.core.logging import (
    build_context,
    configure_logging,
    get_build_id,
    get_logger,
    task_context,
)
from cloverbuild.core.progress import spinner, status

__all__ = [
    # Errors
    "CloverBuildError",
    "ConfigError",
    "CoverageError",
    "ErrorCode",
    "InternalError",
    "TaskError",
    # Logging
    "build_context",
    "configure_logging",
    "get_build_id",
    "get_logger",
    "task_context",
    # Progress
    "spinner",
    "status",
]

"""cloverbuild error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 6xxx: Task
- 7xxx: Coverage (Clover tool)
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_MISSING_REQUIRED = 2003
    CONFIG_UNKNOWN_SETTING = 2004

    # Task (6xxx)
    TASK_NOT_FOUND = 6001
    TASK_DUPLICATE = 6002
    TASK_CYCLE = 6003
    TASK_GRAPH_POPULATED = 6004
    TASK_EXECUTION_FAILED = 6005

    # Coverage (7xxx)
    COVERAGE_TOOL_NOT_FOUND = 7001
    COVERAGE_TOOL_FAILED = 7002
    COVERAGE_LICENSE_MISSING = 7003
    COVERAGE_BELOW_TARGET = 7005
    COVERAGE_REPORT_MISSING = 7006
    COVERAGE_DATABASE_MISSING = 7007

    # Internal (9xxx)
    INTERNAL_ERROR = 9001
    INTERNAL_TIMEOUT = 9002


@dataclass(frozen=True, slots=True)
class CloverBuildError(Exception):
    """Base error with structured context for CLI and log output."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'TASK_NOT_FOUND')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(CloverBuildError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def missing_required(cls, field: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_MISSING_REQUIRED,
            message=f"Missing required config field: {field}",
            details={"field": field},
        )

    @classmethod
    def unknown_setting(cls, name: str, known: list[str]) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_UNKNOWN_SETTING,
            message=f"Unknown clover setting: {name!r}",
            details={"name": name, "known": known},
        )


class TaskError(CloverBuildError):
    """Task container, graph and execution errors."""

    @classmethod
    def not_found(cls, name: str) -> "TaskError":
        return cls(
            code=ErrorCode.TASK_NOT_FOUND,
            message=f"Task '{name}' not found in project",
            details={"task": name},
        )

    @classmethod
    def duplicate(cls, name: str) -> "TaskError":
        return cls(
            code=ErrorCode.TASK_DUPLICATE,
            message=f"Cannot add task '{name}': a task with that name already exists",
            details={"task": name},
        )

    @classmethod
    def cycle(cls, path: list[str]) -> "TaskError":
        return cls(
            code=ErrorCode.TASK_CYCLE,
            message=f"Circular task dependency: {' -> '.join(path)}",
            details={"cycle": path},
        )

    @classmethod
    def graph_already_populated(cls) -> "TaskError":
        return cls(
            code=ErrorCode.TASK_GRAPH_POPULATED,
            message="Task execution graph is already populated for this build",
        )

    @classmethod
    def execution_failed(cls, name: str, reason: str) -> "TaskError":
        return cls(
            code=ErrorCode.TASK_EXECUTION_FAILED,
            message=f"Execution failed for task '{name}': {reason}",
            details={"task": name, "reason": reason},
        )


class CoverageError(CloverBuildError):
    """Clover instrumentation and reporting errors."""

    @classmethod
    def tool_not_found(cls, what: str) -> "CoverageError":
        return cls(
            code=ErrorCode.COVERAGE_TOOL_NOT_FOUND,
            message=f"Could not locate {what}",
            details={"tool": what},
        )

    @classmethod
    def tool_failed(cls, command: list[str], exit_code: int, stderr: str) -> "CoverageError":
        return cls(
            code=ErrorCode.COVERAGE_TOOL_FAILED,
            message=f"{command[0]} exited with code {exit_code}",
            details={"command": command, "exit_code": exit_code, "stderr": stderr[-2000:]},
        )

    @classmethod
    def license_missing(cls, path: str) -> "CoverageError":
        return cls(
            code=ErrorCode.COVERAGE_LICENSE_MISSING,
            message=f"Clover license file not found: {path}",
            details={"path": path},
        )

    @classmethod
    def below_target(cls, actual: float, target: float) -> "CoverageError":
        return cls(
            code=ErrorCode.COVERAGE_BELOW_TARGET,
            message=f"Total coverage {actual:.2f}% is below the target of {target:.2f}%",
            details={"actual": actual, "target": target},
        )

    @classmethod
    def report_missing(cls, path: str) -> "CoverageError":
        return cls(
            code=ErrorCode.COVERAGE_REPORT_MISSING,
            message=f"Clover XML report missing or unreadable: {path}",
            details={"path": path},
        )

    @classmethod
    def database_missing(cls, path: str) -> "CoverageError":
        return cls(
            code=ErrorCode.COVERAGE_DATABASE_MISSING,
            message=f"Clover database not found: {path}. Were instrumented tests run?",
            details={"path": path},
        )


class InternalError(CloverBuildError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )

    @classmethod
    def timeout(cls, what: str, seconds: float) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_TIMEOUT,
            message=f"{what} timed out after {seconds:g}s",
            details={"what": what, "timeout_sec": seconds},
        )

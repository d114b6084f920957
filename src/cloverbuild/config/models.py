"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (CLOVERBUILD__SECTION__KEY)
3. Project YAML (<project>/cloverbuild.yaml)
4. Global YAML (~/.config/cloverbuild/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    CLOVERBUILD__<SECTION>__<KEY>=<VALUE>

Examples:
    CLOVERBUILD__LOGGING__LEVEL=DEBUG
    CLOVERBUILD__CLOVER__TARGET_PERCENTAGE=80
    CLOVERBUILD__TOOLS__CLOVER_JAR=/opt/clover/lib/clover.jar
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        CLOVERBUILD__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG includes every tool command line.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class CloverReportConfig(BaseModel):
    """Report formats written by cloverGenerateReport."""

    xml: bool = Field(default=True, description="Write clover.xml.")
    json_: bool = Field(default=False, alias="json", description="Write a JSON report.")
    html: bool = Field(default=False, description="Write an HTML report.")
    pdf: bool = Field(default=False, description="Write clover.pdf.")

    model_config = ConfigDict(populate_by_name=True)


class CloverConvention(BaseModel):
    """User overrides for the clover plugin.

    Every field is optional. Unset fields fall back to defaults computed from
    the project model when an action runs.

    Env vars:
        CLOVERBUILD__CLOVER__LICENSE_FILE: Clover license location
        CLOVERBUILD__CLOVER__TARGET_PERCENTAGE: Minimum total coverage
    """

    classes_backup_dir: Path | None = Field(
        default=None,
        description="Where original classes are kept while instrumented ones are in place. "
        "Default: <main classes dir>-bak.",
    )
    license_file: Path | None = Field(
        default=None,
        description="Clover license file. Default: <root dir>/clover.license.",
    )
    includes: list[str] | None = Field(
        default=None,
        description="Source patterns to instrument. Default: **/*.java (+ **/*.groovy).",
    )
    excludes: list[str] | None = Field(
        default=None,
        description="Source patterns never instrumented.",
    )
    target_percentage: float | None = Field(
        default=None,
        description="Fail the report task when total coverage is below this value.",
    )
    report: CloverReportConfig = Field(default_factory=CloverReportConfig)

    @field_validator("target_percentage")
    @classmethod
    def validate_target(cls, v: float | None) -> float | None:
        if v is not None and not (0 <= v <= 100):
            raise ValueError(f"Target percentage must be 0-100, got {v}")
        return v


class SourceSetConfig(BaseModel):
    """Directories of one source set, relative to the project dir."""

    java: list[str] = Field(default_factory=lambda: ["src/main/java"])
    groovy: list[str] = Field(default_factory=lambda: ["src/main/groovy"])
    classes_dir: str | None = Field(
        default=None,
        description="Compiled classes. Default: <build_dir>/classes/<source set name>.",
    )


class ProjectConfig(BaseModel):
    """Project model definition.

    Env vars:
        CLOVERBUILD__PROJECT__SOURCE_COMPATIBILITY: javac -source level
        CLOVERBUILD__PROJECT__TARGET_COMPATIBILITY: javac -target level
    """

    name: str | None = Field(default=None, description="Default: project dir name.")
    plugins: list[str] = Field(
        default_factory=lambda: ["java", "clover"],
        description="Plugins applied in order. Known: java, groovy, clover.",
    )
    build_dir: str = Field(default="build")
    source_compatibility: str | None = None
    target_compatibility: str | None = None
    source_sets: dict[str, SourceSetConfig] = Field(
        default_factory=lambda: {"main": SourceSetConfig()}
    )
    configurations: dict[str, list[str]] = Field(
        default_factory=lambda: {"test_runtime": []},
        description="Named file collections. test_runtime is the instrumentation classpath.",
    )
    tests: dict[str, list[str]] = Field(
        default_factory=lambda: {"test": []},
        description="Test task name -> command. Empty command means nothing to run.",
    )


class ToolsConfig(BaseModel):
    """External executables.

    Env vars:
        CLOVERBUILD__TOOLS__JAVA: java executable
        CLOVERBUILD__TOOLS__CLOVER_JAR: explicit clover.jar
        CLOVERBUILD__TOOLS__TIMEOUT_SEC: Per-command timeout
    """

    java: str = Field(default="java")
    javac: str = Field(default="javac")
    groovyc: str = Field(default="groovyc")
    clover_jar: Path | None = Field(
        default=None,
        description="Explicit clover.jar. "
        "Default: first clover*.jar on the test_runtime classpath.",
    )
    timeout_sec: int = Field(
        default=600,
        description="Timeout for each external command. "
        "RISK: Too low kills large instrumentation runs.",
    )

    @field_validator("timeout_sec")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"Timeout must be positive, got {v}")
        return v


class CloverBuildConfig(BaseModel):
    """Root configuration for cloverbuild."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    project: ProjectConfig = Field(default_factory=ProjectConfig)
    clover: CloverConvention = Field(default_factory=CloverConvention)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)

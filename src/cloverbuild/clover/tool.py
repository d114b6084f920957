"""Invocation of the external Clover tool and the Java/Groovy compilers.

Clover runs as ``java -cp <clover.jar> -Dclover.license.path=<file> <main class>``.
Everything Clover does internally is opaque here: a command either succeeds
or raises ``CoverageError``.
"""

from __future__ import annotations

import os
import subprocess
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from cloverbuild.config.models import ToolsConfig
from cloverbuild.core.errors import CoverageError, InternalError
from cloverbuild.core.logging import get_logger

log = get_logger("clover.tool")

ReportFormat = Literal["xml", "json", "html", "pdf"]

CLOVER_INSTR = "com.atlassian.clover.CloverInstr"

REPORTERS: dict[str, str] = {
    "xml": "com.atlassian.clover.reporters.xml.XMLReporter",
    "json": "com.atlassian.clover.reporters.json.JSONReporter",
    "html": "com.atlassian.clover.reporters.html.HtmlReporter",
    "pdf": "com.atlassian.clover.reporters.pdf.PDFReporter",
}


@dataclass
class ToolRun:
    """Result of one successful external command."""

    command: list[str]
    exit_code: int
    stdout: str
    stderr: str
    duration_seconds: float


def find_clover_jar(classpath: Sequence[Path]) -> Path | None:
    """First ``clover*.jar`` on the classpath, if any."""
    for entry in classpath:
        name = entry.name.lower()
        if name.startswith("clover") and name.endswith(".jar"):
            return entry
    return None


class CloverTool:
    """Thin command-line front end for Clover, javac and groovyc."""

    def __init__(self, config: ToolsConfig | None = None) -> None:
        self.config = config or ToolsConfig()

    def locate_jar(self, classpath: Sequence[Path]) -> Path:
        """Resolve clover.jar from config or the classpath.

        Raises:
            CoverageError: If no jar can be found.
        """
        if self.config.clover_jar is not None:
            if not self.config.clover_jar.is_file():
                raise CoverageError.tool_not_found(f"clover.jar at {self.config.clover_jar}")
            return self.config.clover_jar
        jar = find_clover_jar(classpath)
        if jar is None:
            raise CoverageError.tool_not_found("clover.jar on the test_runtime classpath")
        return jar

    def _java(self, jar: Path, license_file: Path, main_class: str) -> list[str]:
        return [
            self.config.java,
            f"-Dclover.license.path={license_file}",
            "-cp",
            str(jar),
            main_class,
        ]

    def instrument(
        self,
        *,
        jar: Path,
        license_file: Path,
        database: Path,
        src_dir: Path,
        files: Sequence[Path],
        output_dir: Path,
        source_level: str | None = None,
    ) -> ToolRun:
        """Instrument ``files`` (all under ``src_dir``) into ``output_dir``."""
        command = self._java(jar, license_file, CLOVER_INSTR)
        command += ["-i", str(database), "-s", str(src_dir), "-d", str(output_dir)]
        if source_level:
            command += ["--source", source_level]
        command += [str(f) for f in files]
        return self._run(command)

    def compile(
        self,
        *,
        sources: Sequence[Path],
        classpath: Sequence[Path],
        destination: Path,
        source_level: str | None = None,
        target_level: str | None = None,
        groovy: bool = False,
    ) -> ToolRun:
        """Compile sources into ``destination`` with javac, or groovyc for joint compilation."""
        destination.mkdir(parents=True, exist_ok=True)
        cp = os.pathsep.join(str(p) for p in classpath)
        if groovy:
            command = [self.config.groovyc, "-j", "-d", str(destination), "-cp", cp]
            if source_level:
                command.append(f"-Jsource={source_level}")
            if target_level:
                command.append(f"-Jtarget={target_level}")
        else:
            command = [self.config.javac, "-d", str(destination), "-cp", cp]
            if source_level:
                command += ["-source", source_level]
            if target_level:
                command += ["-target", target_level]
        command += [str(s) for s in sources]
        return self._run(command)

    def report(
        self,
        report_format: ReportFormat,
        *,
        jar: Path,
        license_file: Path,
        database: Path,
        output: Path,
    ) -> ToolRun:
        """Render one report format from the coverage database."""
        main_class = REPORTERS.get(report_format)
        if main_class is None:
            raise InternalError.unexpected(f"unknown report format {report_format!r}")
        output.parent.mkdir(parents=True, exist_ok=True)
        command = self._java(jar, license_file, main_class)
        command += ["-i", str(database), "-o", str(output)]
        return self._run(command)

    def _run(self, command: list[str]) -> ToolRun:
        log.debug("tool_command", command=command)
        start = time.perf_counter()
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.config.timeout_sec,
            )
        except subprocess.TimeoutExpired as e:
            raise InternalError.timeout(command[0], self.config.timeout_sec) from e
        except FileNotFoundError as e:
            raise CoverageError.tool_not_found(command[0]) from e

        elapsed = time.perf_counter() - start
        if result.returncode != 0:
            log.error(
                "tool_failed",
                command=command[:5],
                exit_code=result.returncode,
                stderr=result.stderr[-2000:],
            )
            raise CoverageError.tool_failed(command, result.returncode, result.stderr)

        log.debug("tool_done", executable=command[0], elapsed_s=round(elapsed, 3))
        return ToolRun(
            command=command,
            exit_code=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            duration_seconds=elapsed,
        )

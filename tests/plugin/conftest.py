"""Fixtures for clover plugin tests: a fake Clover tool and a small Java project."""

from __future__ import annotations

import shutil
from collections.abc import Sequence
from pathlib import Path

import pytest

from cloverbuild.clover.tool import CloverTool, ReportFormat, ToolRun
from cloverbuild.core.errors import CoverageError
from cloverbuild.host.project import Project

FAKE_JAR = Path("/fake/lib/clover.jar")
INSTRUMENTED_MARKER = "INSTRUMENTED"


def _run(command: list[str]) -> ToolRun:
    return ToolRun(command=command, exit_code=0, stdout="", stderr="", duration_seconds=0.0)


class FakeCloverTool(CloverTool):
    """Stands in for java/javac/groovyc and records every call.

    Instrumenting copies sources and creates the database, compiling drops a
    marker file into the destination, and the xml reporter writes a report
    with the configured total coverage.
    """

    def __init__(self, *, coverage: float = 80.0, fail_on: str | None = None) -> None:
        super().__init__()
        self.coverage = coverage
        self.fail_on = fail_on
        self.calls: list[tuple[str, dict]] = []

    def _record(self, name: str, **kwargs: object) -> None:
        self.calls.append((name, kwargs))
        if self.fail_on == name:
            raise CoverageError.tool_failed([name], 1, f"{name} failed")

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def locate_jar(self, classpath: Sequence[Path]) -> Path:
        self._record("locate_jar", classpath=list(classpath))
        return FAKE_JAR

    def instrument(
        self, *, jar, license_file, database, src_dir, files, output_dir, source_level=None
    ) -> ToolRun:
        self._record(
            "instrument",
            src_dir=src_dir,
            files=[f.relative_to(src_dir).as_posix() for f in files],
            output_dir=output_dir,
            source_level=source_level,
        )
        database.touch()
        for f in files:
            target = output_dir / f.relative_to(src_dir)
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(f, target)
        return _run(["instrument"])

    def compile(
        self, *, sources, classpath, destination, source_level=None, target_level=None, groovy=False
    ) -> ToolRun:
        self._record(
            "compile",
            sources=list(sources),
            classpath=list(classpath),
            destination=destination,
            source_level=source_level,
            target_level=target_level,
            groovy=groovy,
        )
        destination.mkdir(parents=True, exist_ok=True)
        (destination / INSTRUMENTED_MARKER).write_text("1")
        return _run(["compile"])

    def report(
        self, report_format: ReportFormat, *, jar, license_file, database, output
    ) -> ToolRun:
        self._record("report", format=report_format, output=output)
        output.parent.mkdir(parents=True, exist_ok=True)
        if report_format == "xml":
            covered = round(self.coverage * 10)
            output.write_text(
                '<coverage clover="4.4.1"><project>'
                f'<metrics elements="1000" coveredelements="{covered}"/>'
                "</project></coverage>"
            )
        elif report_format in ("json", "html"):
            output.mkdir(parents=True, exist_ok=True)
        else:
            output.write_text(report_format)
        return _run(["report"])


@pytest.fixture
def fake_tool() -> FakeCloverTool:
    return FakeCloverTool()


@pytest.fixture
def make_tool() -> type[FakeCloverTool]:
    """The fake tool class, for tests that need non-default coverage or failures."""
    return FakeCloverTool


@pytest.fixture
def java_project(tmp_path: Path) -> Project:
    """Project with one Java source, compiled classes and a license file."""
    project_dir = tmp_path / "demo"
    project_dir.mkdir()
    project = Project(project_dir)
    project.plugins.apply("java")

    src = project.project_dir / "src" / "main" / "java" / "com" / "example"
    src.mkdir(parents=True)
    (src / "Foo.java").write_text("package com.example; class Foo {}")
    (src / "FooTest.java").write_text("package com.example; class FooTest {}")

    classes = project.source_sets["main"].classes_dir
    classes.mkdir(parents=True)
    (classes / "Foo.class").write_text("original")

    (project.project_dir / "clover.license").write_text("license")
    return project

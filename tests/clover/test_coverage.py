"""Tests for Clover XML parsing and the coverage summary."""

from pathlib import Path

import pytest

from cloverbuild.clover.coverage import (
    CoverageParseError,
    CoverageReport,
    FileCoverage,
    parse_clover_xml,
)

CLOVER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<coverage generated="1700000000000" clover="4.4.1">
  <project timestamp="1700000000000" name="demo">
    <metrics elements="10" coveredelements="7" statements="5" coveredstatements="4"/>
    <package name="com.example">
      <file name="Foo.java" path="/work/demo/src/main/java/com/example/Foo.java">
        <class name="Foo"/>
        <line num="3" type="method" name="bar" signature="bar() : void" count="2"/>
        <line num="4" type="stmt" count="2"/>
        <line num="5" type="cond" truecount="1" falsecount="0"/>
        <line num="6" type="stmt" count="0"/>
        <metrics statements="2" coveredstatements="1"/>
      </file>
      <file name="Baz.java" path="/work/demo/src/main/java/com/example/Baz.java">
        <line num="1" type="method" name="baz" count="0"/>
        <line num="2" type="stmt" count="0"/>
      </file>
    </package>
  </project>
</coverage>
"""


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "clover.xml"
    path.write_text(content)
    return path


class TestParseCloverXml:
    """Tests for parse_clover_xml."""

    def test_parses_files(self, tmp_path: Path) -> None:
        report = parse_clover_xml(_write(tmp_path, CLOVER_XML))

        assert set(report.files) == {
            "/work/demo/src/main/java/com/example/Foo.java",
            "/work/demo/src/main/java/com/example/Baz.java",
        }

    def test_line_types(self, tmp_path: Path) -> None:
        report = parse_clover_xml(_write(tmp_path, CLOVER_XML))
        foo = report.files["/work/demo/src/main/java/com/example/Foo.java"]

        assert foo.lines == {4: 2, 6: 0}
        assert [(b.branch_id, b.hits) for b in foo.branches] == [(0, 1), (1, 0)]
        assert foo.functions["bar() : void"].hits == 2
        assert foo.uncovered_lines == [6]

    def test_relativizes_paths(self, tmp_path: Path) -> None:
        report = parse_clover_xml(
            _write(tmp_path, CLOVER_XML), base_path=Path("/work/demo")
        )
        assert "src/main/java/com/example/Foo.java" in report.files

    def test_accepts_directory(self, tmp_path: Path) -> None:
        _write(tmp_path, CLOVER_XML)
        assert len(parse_clover_xml(tmp_path).files) == 2

    def test_project_metrics_are_authoritative(self, tmp_path: Path) -> None:
        report = parse_clover_xml(_write(tmp_path, CLOVER_XML))

        summary = report.summary
        assert summary.elements == 10
        assert summary.covered_elements == 7
        assert report.total_percentage == pytest.approx(70.0)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(CoverageParseError, match="not found"):
            parse_clover_xml(tmp_path / "missing.xml")

    def test_invalid_xml(self, tmp_path: Path) -> None:
        with pytest.raises(CoverageParseError, match="Invalid"):
            parse_clover_xml(_write(tmp_path, "<coverage><project>"))


class TestCoverageSummary:
    """Element counting without project-level metrics."""

    def test_counts_statements_branches_and_methods(self, tmp_path: Path) -> None:
        xml = CLOVER_XML.replace(
            '<metrics elements="10" coveredelements="7" statements="5" coveredstatements="4"/>',
            "",
        )
        report = parse_clover_xml(_write(tmp_path, xml))

        # Foo: 2 stmts (1 hit) + 2 branches (1 hit) + 1 method (hit)
        # Baz: 1 stmt (0 hit) + 1 method (0 hit)
        summary = report.summary
        assert summary.elements == 7
        assert summary.covered_elements == 3
        assert summary.percentage == pytest.approx(100 * 3 / 7)

    def test_empty_report_is_zero(self) -> None:
        assert CoverageReport().total_percentage == 0.0

    def test_file_counters(self) -> None:
        cov = FileCoverage(path="A.java", lines={1: 1, 2: 0, 3: 5})
        assert cov.lines_found == 3
        assert cov.lines_hit == 2

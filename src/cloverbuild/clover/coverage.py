"""Clover XML coverage model and parser.

Structure:
<coverage generated="..." clover="...">
  <project timestamp="...">
    <metrics elements="..." coveredelements="..." .../>
    <package name="com.example">
      <file name="Foo.java" path="/path/to/Foo.java">
        <class name="Foo" .../>
        <line num="1" type="stmt" count="1"/>
        <line num="5" type="cond" count="0" truecount="1" falsecount="0"/>
        <line num="10" type="method" name="bar" .../>
        <metrics ...file stats.../>
      </file>
    </package>
  </project>
</coverage>

Line types:
- stmt: statement line
- cond: conditional (branch)
- method: method declaration

Clover's "total coverage percentage" counts elements: statements,
both outcomes of every conditional, and methods.
"""

from __future__ import annotations

import contextlib
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path


class CoverageParseError(Exception):
    """Error parsing coverage data."""

    pass


@dataclass(frozen=True, slots=True)
class BranchCoverage:
    """One outcome of a conditional at a specific line."""

    line: int
    branch_id: int
    hits: int


@dataclass(frozen=True, slots=True)
class FunctionCoverage:
    """Method coverage."""

    name: str
    start_line: int
    hits: int


@dataclass(slots=True)
class FileCoverage:
    """Coverage data for a single source file.

    Lines map line number → hit count for statement lines. Conditionals are
    tracked as two ``branches`` (true and false outcome), method declarations
    in ``functions``, so the three add up to Clover's element count.
    """

    path: str
    lines: dict[int, int] = field(default_factory=dict)
    branches: list[BranchCoverage] = field(default_factory=list)
    functions: dict[str, FunctionCoverage] = field(default_factory=dict)

    @property
    def lines_found(self) -> int:
        return len(self.lines)

    @property
    def lines_hit(self) -> int:
        return sum(1 for hits in self.lines.values() if hits > 0)

    @property
    def branches_found(self) -> int:
        return len(self.branches)

    @property
    def branches_hit(self) -> int:
        return sum(1 for b in self.branches if b.hits > 0)

    @property
    def functions_found(self) -> int:
        return len(self.functions)

    @property
    def functions_hit(self) -> int:
        return sum(1 for f in self.functions.values() if f.hits > 0)

    @property
    def uncovered_lines(self) -> list[int]:
        """Sorted list of line numbers with zero hits."""
        return sorted(line for line, hits in self.lines.items() if hits == 0)


@dataclass(frozen=True, slots=True)
class CoverageSummary:
    """Aggregate element counts. Percentages are 0-100."""

    elements: int
    covered_elements: int
    percentage: float


@dataclass(slots=True)
class CoverageReport:
    """Parsed Clover report, files keyed by (optionally relativized) path.

    ``project_elements``/``project_covered_elements`` come from the
    project-level ``<metrics>`` element when the report has one; they are the
    authoritative totals.
    """

    files: dict[str, FileCoverage] = field(default_factory=dict)
    project_elements: int | None = None
    project_covered_elements: int | None = None

    @property
    def summary(self) -> CoverageSummary:
        if self.project_elements is not None and self.project_covered_elements is not None:
            elements = self.project_elements
            covered = self.project_covered_elements
        else:
            elements = sum(
                f.lines_found + f.branches_found + f.functions_found for f in self.files.values()
            )
            covered = sum(
                f.lines_hit + f.branches_hit + f.functions_hit for f in self.files.values()
            )
        percentage = 100.0 * covered / elements if elements > 0 else 0.0
        return CoverageSummary(elements=elements, covered_elements=covered, percentage=percentage)

    @property
    def total_percentage(self) -> float:
        return self.summary.percentage


def _int_attr(elem: ET.Element, name: str) -> int | None:
    value = elem.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def parse_clover_xml(path: Path, *, base_path: Path | None = None) -> CoverageReport:
    """Parse a Clover XML report.

    Args:
        path: clover.xml, or a directory containing one.
        base_path: Root for relativizing file paths. If None, paths are kept as-is.

    Raises:
        CoverageParseError: If the file is missing or not valid XML.
    """
    if path.is_dir():
        path = path / "clover.xml"
    if not path.exists():
        raise CoverageParseError(f"Clover XML not found: {path}")

    try:
        tree = ET.parse(path)
    except ET.ParseError as e:
        raise CoverageParseError(f"Invalid Clover XML: {e}") from e

    root = tree.getroot()
    report = CoverageReport()

    project = root.find("project")
    if project is not None:
        metrics = project.find("metrics")
        if metrics is not None:
            report.project_elements = _int_attr(metrics, "elements")
            report.project_covered_elements = _int_attr(metrics, "coveredelements")

    for file_elem in root.iter("file"):
        file_path = file_elem.get("path") or file_elem.get("name", "")
        if not file_path:
            continue

        normalized_path = file_path.replace("\\", "/")
        if base_path:
            with contextlib.suppress(ValueError):
                normalized_path = Path(normalized_path).relative_to(base_path).as_posix()

        file_cov = FileCoverage(path=normalized_path)

        for line in file_elem.findall("line"):
            num = _int_attr(line, "num") or 0
            if num <= 0:
                continue

            line_type = line.get("type", "stmt")
            count = _int_attr(line, "count") or 0

            if line_type == "method":
                method_name = line.get("signature") or line.get("name") or f"method_{num}"
                file_cov.functions[method_name] = FunctionCoverage(
                    name=method_name,
                    start_line=num,
                    hits=count,
                )
            elif line_type == "cond":
                file_cov.branches.append(
                    BranchCoverage(line=num, branch_id=0, hits=_int_attr(line, "truecount") or 0)
                )
                file_cov.branches.append(
                    BranchCoverage(line=num, branch_id=1, hits=_int_attr(line, "falsecount") or 0)
                )
            else:
                file_cov.lines[num] = count

        report.files[normalized_path] = file_cov

    return report

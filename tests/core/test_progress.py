"""Tests for console feedback helpers."""

from __future__ import annotations

import logging
from unittest.mock import patch

import pytest

from cloverbuild.core.progress import (
    MARKERS,
    console_log_filter,
    get_console,
    make_table,
    pluralize,
    spinner,
    spinner_active,
    status,
)


def _record() -> logging.LogRecord:
    return logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)


class TestStatus:
    """One line per call, with an optional outcome marker."""

    def test_prints_message(self) -> None:
        with patch("cloverbuild.core.progress._console") as mock_console:
            status("Test message")
            mock_console.print.assert_called_once()
            assert mock_console.print.call_args[0][0] == "Test message"

    @pytest.mark.parametrize(
        ("marker", "glyph"), [("ok", "✓"), ("failed", "✗"), ("skipped", "-")]
    )
    def test_marker_prefix(self, marker: str, glyph: str) -> None:
        with patch("cloverbuild.core.progress._console") as mock_console:
            status("Done", marker=marker)
            line = mock_console.print.call_args[0][0]
            assert line.startswith(MARKERS[marker])
            assert glyph in line and line.endswith(" Done")

    def test_unknown_marker_has_no_prefix(self) -> None:
        with patch("cloverbuild.core.progress._console") as mock_console:
            status("Plain", marker="no-such-marker")
            assert mock_console.print.call_args[0][0] == "Plain"

    def test_with_indent(self) -> None:
        with patch("cloverbuild.core.progress._console") as mock_console:
            status("Indented", indent=4)
            assert mock_console.print.call_args[0][0] == "    Indented"


class TestPluralize:
    def test_singular(self) -> None:
        assert pluralize(1, "task") == "1 task"

    def test_plural(self) -> None:
        assert pluralize(3, "task") == "3 tasks"

    def test_zero_is_plural(self) -> None:
        assert pluralize(0, "file") == "0 files"

    def test_custom_plural(self) -> None:
        assert pluralize(2, "class", "classes") == "2 classes"


class TestSpinner:
    """Spinner display and the console log filter it drives."""

    def test_non_tty_prints_message_once(self) -> None:
        with (
            patch("cloverbuild.core.progress._is_tty", return_value=False),
            patch("cloverbuild.core.progress._console") as mock_console,
        ):
            with spinner("> Task :test"):
                pass
            mock_console.print.assert_called_once()
            assert mock_console.print.call_args[0][0] == "> Task :test..."
            mock_console.status.assert_not_called()

    def test_non_tty_keeps_console_logs(self) -> None:
        with patch("cloverbuild.core.progress._is_tty", return_value=False):
            with spinner("work"):
                assert spinner_active() is False
                assert console_log_filter(_record()) is True

    def test_tty_silences_console_logs_while_active(self) -> None:
        with (
            patch("cloverbuild.core.progress._is_tty", return_value=True),
            patch("cloverbuild.core.progress._console") as mock_console,
        ):
            with spinner("> Task :cloverGenerateReport"):
                assert spinner_active() is True
                assert console_log_filter(_record()) is False
            mock_console.status.assert_called_once()

        assert spinner_active() is False
        assert console_log_filter(_record()) is True

    def test_tty_restores_after_exception(self) -> None:
        with (
            patch("cloverbuild.core.progress._is_tty", return_value=True),
            patch("cloverbuild.core.progress._console"),
        ):
            with pytest.raises(RuntimeError), spinner("work"):
                raise RuntimeError("boom")

        assert spinner_active() is False


class TestMakeTable:
    def test_columns_and_rows(self) -> None:
        table = make_table("Tasks", ["Task", "Group"], [["test", "verification"]])
        assert [c.header for c in table.columns] == ["Task", "Group"]
        assert table.row_count == 1

    def test_shared_console(self) -> None:
        assert get_console() is get_console()

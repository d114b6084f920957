"""Console feedback for builds: task spinners, outcome lines and tables.

Everything goes to stderr through one shared rich console. While a spinner
is on screen, console log handlers drop their records (see
``console_log_filter``) so log lines do not tear the live display; file
outputs keep logging.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from rich.console import Console
from rich.table import Table

_console = Console(stderr=True)

MARKERS = {
    "ok": "[green]✓[/green]",
    "failed": "[red]✗[/red]",
    "skipped": "[dim]-[/dim]",
}

_spinner_active: ContextVar[bool] = ContextVar("spinner_active", default=False)


def get_console() -> Console:
    return _console


def _is_tty() -> bool:
    return sys.stderr.isatty()


def spinner_active() -> bool:
    return _spinner_active.get()


def console_log_filter(record: logging.LogRecord) -> bool:  # noqa: ARG001
    """Handler filter for console outputs: drop records while a spinner runs."""
    return not _spinner_active.get()


def status(message: str, *, marker: str | None = None, indent: int = 0) -> None:
    """Print one line, prefixed by the named marker if it exists."""
    prefix = MARKERS.get(marker or "")
    line = f"{prefix} {message}" if prefix else message
    _console.print(" " * indent + line, highlight=False)


@contextmanager
def spinner(message: str) -> Iterator[None]:
    """Show ``message`` with a spinner; on a non-TTY print it once instead."""
    if not _is_tty():
        _console.print(f"{message}...", highlight=False)
        yield
        return

    token = _spinner_active.set(True)
    try:
        with _console.status(f"[cyan]{message}[/cyan]", spinner="dots"):
            yield
    finally:
        _spinner_active.reset(token)


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """``pluralize(1, "task")`` is "1 task"; ``pluralize(3, "task")`` is "3 tasks"."""
    word = singular if count == 1 else (plural or singular + "s")
    return f"{count} {word}"


def make_table(title: str, columns: list[str], rows: list[list[str]]) -> Table:
    table = Table(title=title, title_justify="left", header_style="dim", box=None)
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*row)
    return table

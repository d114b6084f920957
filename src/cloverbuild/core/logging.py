"""Structured logging for builds.

Every record is rendered by structlog through stdlib handlers, one handler per
configured output. While a build runs, records carry its ``build_id``; while a
task runs they also carry ``task``. Console handlers go quiet while a spinner
is on screen.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING
from uuid import uuid4

import structlog

from cloverbuild.core.progress import console_log_filter

if TYPE_CHECKING:
    from cloverbuild.config.models import LoggingConfig, LogOutputConfig

_CONSOLE_DESTINATIONS = ("stderr", "stdout")


@contextmanager
def build_context(build_id: str | None = None) -> Iterator[str]:
    """Tag records logged inside the block with a build ID (generated if not given)."""
    bid = build_id or uuid4().hex[:12]
    with structlog.contextvars.bound_contextvars(build_id=bid):
        yield bid


@contextmanager
def task_context(task_name: str) -> Iterator[None]:
    """Tag records logged inside the block with the running task."""
    with structlog.contextvars.bound_contextvars(task=task_name):
        yield


def get_build_id() -> str | None:
    return structlog.contextvars.get_contextvars().get("build_id")


def _level(name: str | None, default: int) -> int:
    if name is None:
        return default
    return logging.getLevelNamesMapping().get(name.upper(), default)


_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
]


def configure_logging(
    *,
    config: LoggingConfig | None = None,
    json_format: bool = False,
    level: str = "INFO",
) -> None:
    """Route structlog through stdlib handlers built from ``config``.

    Without a config a single stderr output is used, in JSON or console
    format, at ``level``. Calling this again replaces all handlers.
    """
    from cloverbuild.config.models import LoggingConfig, LogOutputConfig

    if config is None:
        output = LogOutputConfig(format="json" if json_format else "console")
        config = LoggingConfig(level=level, outputs=[output])

    root_level = _level(config.level, logging.INFO)
    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Not cached so reconfiguring takes effect for loggers bound at import time
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    for existing in root.handlers:
        existing.close()
    root.handlers.clear()
    root.setLevel(root_level)
    for output in config.outputs:
        root.addHandler(_handler_for(output, _level(output.level, root_level)))


def _handler_for(output: LogOutputConfig, level: int) -> logging.Handler:
    handler: logging.Handler
    on_console = output.destination in _CONSOLE_DESTINATIONS
    if output.destination == "stdout":
        handler = logging.StreamHandler(sys.stdout)
    elif output.destination == "stderr":
        handler = logging.StreamHandler(sys.stderr)
    else:
        path = Path(output.destination)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode="a")

    renderer: structlog.types.Processor
    if output.format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=on_console and sys.stderr.isatty(), pad_event_to=0, pad_level=False
        )
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer, foreign_pre_chain=_SHARED_PROCESSORS
        )
    )
    handler.setLevel(level)

    if on_console:
        handler.addFilter(console_log_filter)
    return handler


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger=name)
    return logger  # type: ignore[no-any-return]

"""structlog setup for the reporter, the pytest plugin and the CLI."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog


def _renderer(json_format: bool) -> structlog.typing.Processor:
    if json_format:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def configure_logging(
    log_level: str = "INFO",
    json_format: bool = False,
    stream: TextIO | None = None,
) -> None:
    """
    Route reporter logs to ``stream`` (stderr by default).

    stdout is left to the test runner; reporter lines go to stderr unless a
    stream is given.

    Args:
        log_level: Minimum level name, e.g. ``"WARNING"``. Unknown names fall
            back to INFO.
        json_format: Emit one JSON object per line instead of console text.
        stream: Output stream.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
            structlog.processors.format_exc_info,
            _renderer(json_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    """Return a lazy logger tagged with ``logger_name``.

    The logger resolves the current configuration on every call, so loggers
    created at import time follow later ``configure_logging`` calls.
    """
    return structlog.get_logger(logger_name=name)

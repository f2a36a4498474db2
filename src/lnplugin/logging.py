"""structlog setup for plugin processes.

stdout carries protocol bytes, so log output must never go there. Output
goes to stderr until ``Plugin.start`` decides otherwise.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog

LOG_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def configure_logging(stream: TextIO | None = None, level: str = "info") -> None:
    """Route structlog output to stream at the given minimum level.

    Args:
        stream: Destination for log lines (default: ``sys.stderr``)
        level: Minimum level name

    Raises:
        ValueError: If level is not a known level name
    """
    if level not in LOG_LEVELS:
        raise ValueError(f"Unknown log level: {level}")

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(
                key_order=["timestamp", "level", "event"], drop_missing=True
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(LOG_LEVELS[level]),
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        # Plugin.start reconfigures output after module loggers exist.
        cache_logger_on_first_use=False,
    )

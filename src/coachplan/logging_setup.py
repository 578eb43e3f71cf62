"""
Structured logging setup.

Every module logs through ``structlog.get_logger(__name__)`` with an
event name and key/value context:

    log = get_logger(__name__)
    log.info("session_committed", day="Tuesday", location="CLT", size=4)

``configure_logging`` picks the renderer once at process start. Logs go
to stderr so that text exports written to stdout stay clean.
"""

import logging
import sys
from typing import Any

import structlog


def configure_logging(json_output: bool = False, level: str = "INFO") -> None:
    """
    Configure structlog for the application.

    Args:
        json_output: If True, emit one JSON object per line (for pipelines).
                     If False, use human-readable console output.
        level: Minimum level name, e.g. "DEBUG" or "WARNING".
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level!r}")

    if json_output:
        renderer = structlog.processors.JSONRenderer()
        timestamper = structlog.processors.TimeStamper(fmt="iso")
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
        timestamper = structlog.processors.TimeStamper(fmt="%H:%M:%S")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            timestamper,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> Any:
    """Get a structured logger bound to ``name``."""
    return structlog.get_logger(name)

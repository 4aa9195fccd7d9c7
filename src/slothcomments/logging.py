"""
structlog setup for sloth-comments.

Log events go to stderr through the standard library bridge, so they never mix
with a specification written to stdout. ``run_context`` tags every event of a
run (command, language) via contextvars.
"""

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator

import structlog

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def configure_logging(level: int | str = logging.INFO, json_logs: bool = False) -> None:
    """
    Configure structlog/standard logging bridge.

    Args:
        level: Level number or name (case-insensitive)
        json_logs: Render one JSON object per event instead of console lines

    Raises:
        ValueError: Unknown level name
    """
    renderer: Any = (
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        level=resolve_level(level), format="%(message)s", stream=sys.stderr, force=True
    )


def resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {level!r}, expected one of {', '.join(LOG_LEVELS)}")
    return logging.getLevelName(name)


@contextmanager
def run_context(**kwargs: Any) -> Iterator[None]:
    """Bind fields to every log event emitted inside the block."""
    with structlog.contextvars.bound_contextvars(**kwargs):
        yield

"""
Run-level errors and exit codes for sloth-comments.

Directive problems never reach this module: the aggregator turns them into
``directive_parse_failed`` events and keeps going. The errors here end a run:
bad configuration, an unreadable source tree or output directory, or a
strict-mode rejection.

Exit Codes:
- 0: Success
- 10: Configuration error
- 11: Source error (unreadable source tree or output destination)
- 12: Validation error (strict mode rejected the run)
- 127: Unknown/internal error
- 130: Interrupted
"""

from __future__ import annotations

import functools
from enum import IntEnum
from typing import Any, Callable, TypeVar

import structlog

logger = structlog.get_logger()


class ExitCode(IntEnum):
    SUCCESS = 0
    CONFIG_ERROR = 10
    SOURCE_ERROR = 11
    VALIDATION_ERROR = 12
    UNKNOWN_ERROR = 127
    INTERRUPTED = 130


class SlothCommentsError(Exception):
    """Base error; subclasses pick the process exit code."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(SlothCommentsError):
    """Invalid settings, config file, language or output format."""

    exit_code = ExitCode.CONFIG_ERROR


class SourceError(SlothCommentsError):
    """Source roots or the output destination cannot be read or written."""

    exit_code = ExitCode.SOURCE_ERROR


class ValidationError(SlothCommentsError):
    """Strict mode found rejected directives."""

    exit_code = ExitCode.VALIDATION_ERROR


F = TypeVar("F", bound=Callable[..., int])
Reporter = Callable[[str], None]


def main_with_error_handling(
    *,
    report: Reporter | None = None,
) -> Callable[[F], F]:
    """
    Wrap a command so every failure becomes an exit code.

    Errors are logged as ``command_error`` / ``unexpected_error`` events and,
    when ``report`` is given, shown to the user through it.

    Args:
        report: Callback receiving a one-line message for the user
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except SlothCommentsError as e:
                logger.error(
                    "command_error",
                    error_type=type(e).__name__,
                    message=e.message,
                    exit_code=int(e.exit_code),
                    **e.details,
                )
                if report is not None:
                    report(format_error_message(e))
                return e.exit_code
            except KeyboardInterrupt:
                logger.info("command_interrupted")
                return ExitCode.INTERRUPTED
            except Exception as e:
                logger.error(
                    "unexpected_error",
                    error_type=type(e).__name__,
                    message=str(e),
                    exit_code=int(ExitCode.UNKNOWN_ERROR),
                )
                if report is not None:
                    report(f"Unexpected {type(e).__name__}: {e}")
                return ExitCode.UNKNOWN_ERROR

        return wrapper  # type: ignore[return-value]

    return decorator


def format_error_message(error: SlothCommentsError) -> str:
    """``message (key=value, ...)`` for display."""
    if not error.details:
        return error.message
    details = ", ".join(f"{key}={value}" for key, value in error.details.items())
    return f"{error.message} ({details})"

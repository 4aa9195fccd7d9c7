"""Core modules for sloth-comments - centralized error definitions."""

from slothcomments.core.errors import (
    ConfigurationError,
    ExitCode,
    SlothCommentsError,
    SourceError,
    ValidationError,
    format_error_message,
    main_with_error_handling,
)

__all__ = [
    "ExitCode",
    "SlothCommentsError",
    "ConfigurationError",
    "SourceError",
    "ValidationError",
    "main_with_error_handling",
    "format_error_message",
]

"""
Application settings using Pydantic.

Provides environment-based configuration loading with SLOTH_COMMENTS_ prefix,
optionally layered under a YAML config file and explicit overrides.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import PositiveInt
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings

from slothcomments.aggregator import ServicePolicy
from slothcomments.core.errors import ConfigurationError

DEFAULT_CONFIG_FILE = ".sloth-comments.yaml"


class Settings(BaseSettings):
    """Application settings."""

    # Sources
    language: str = "go"
    include_dirs: list[str] = ["."]

    # Output
    formats: list[Literal["yaml", "json"]] = ["yaml"]
    stdout: bool = False

    # Aggregation
    service_policy: ServicePolicy = ServicePolicy.LAST_WRITE_WINS
    workers: PositiveInt = 1

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    class Config:
        env_prefix = "SLOTH_COMMENTS_"


def load_settings(config_file: str | Path | None = None, **overrides: Any) -> Settings:
    """
    Load settings.

    Priority, lowest first: defaults, SLOTH_COMMENTS_* environment variables,
    the YAML config file, then non-None ``overrides``.

    Search order for the config file:
    1. Provided config_file (must exist)
    2. .sloth-comments.yaml (cwd)

    Raises:
        ConfigurationError: If the config file is missing, unreadable or invalid
    """
    data = _read_config_file(config_file)
    data.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return Settings(**data)
    except PydanticValidationError as exc:
        raise ConfigurationError(
            "Invalid configuration",
            details={"errors": "; ".join(_format_errors(exc))},
        ) from exc


def _read_config_file(config_file: str | Path | None) -> dict[str, Any]:
    if config_file is not None:
        path = Path(config_file)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")
    else:
        path = Path.cwd() / DEFAULT_CONFIG_FILE
        if not path.exists():
            return {}

    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Expected a mapping in {path}")
    return {str(key).replace("-", "_"): value for key, value in data.items()}


def _format_errors(exc: PydanticValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    ]

"""
Specification writer.

Renders a ``Specification`` as a Sloth ``prometheus/v1`` document and writes
it to standard output and/or an output directory.

Example output (checkout.yaml):
    version: prometheus/v1
    service: checkout
    labels:
      team: payments
    slos:
    - name: availability
      objective: 99.9
      sli:
        raw:
          error_ratio_query: sum(rate(...[{{.window}}])) / sum(rate(...[{{.window}}]))
      time_window: 30d
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, TextIO

import structlog
import yaml

from slothcomments.core.errors import ConfigurationError, SourceError
from slothcomments.specs.models import Specification

logger = structlog.get_logger()

FORMAT_EXTENSIONS = {
    "yaml": "yaml",
    "json": "json",
}
DEFAULT_FILE_STEM = "sloth"


class SpecificationLoadError(Exception):
    """Raised when a rendered specification cannot be read back."""


def render_specification(spec: Specification, fmt: str = "yaml") -> str:
    data = spec.to_dict()
    if fmt == "yaml":
        return yaml.dump(data, sort_keys=False, default_flow_style=False)
    if fmt == "json":
        return json.dumps(data, indent=2) + "\n"
    raise ConfigurationError(
        f"Unsupported output format: {fmt}",
        details={"supported": ", ".join(FORMAT_EXTENSIONS)},
    )


def write_specification(
    spec: Specification,
    stdout: bool,
    output_dir: str | Path | None,
    *formats: str,
    stream: TextIO | None = None,
) -> list[Path]:
    """
    Write the specification in every requested format.

    Args:
        spec: Specification to write
        stdout: Write to ``stream`` (standard output by default) instead of files
        output_dir: Directory for ``<service>.<ext>`` files when not using stdout
        formats: Output formats, ``yaml`` when none are given

    Returns:
        Paths of written files (empty when writing to stdout)

    Raises:
        ConfigurationError: Unknown format or missing output directory
        SourceError: Output directory or file cannot be written
    """
    formats = formats or ("yaml",)
    rendered = [(fmt, render_specification(spec, fmt)) for fmt in formats]

    if stdout:
        out = stream if stream is not None else sys.stdout
        for _, text in rendered:
            out.write(text)
        return []

    if output_dir is None:
        raise ConfigurationError("An output directory is required when not writing to stdout")

    stem = spec.service.name if spec.service else DEFAULT_FILE_STEM
    directory = Path(output_dir)
    written: list[Path] = []
    try:
        directory.mkdir(parents=True, exist_ok=True)
        for fmt, text in rendered:
            path = directory / f"{stem}.{FORMAT_EXTENSIONS[fmt]}"
            path.write_text(text, encoding="utf-8")
            written.append(path)
            logger.info("specification_written", file=str(path), format=fmt)
    except OSError as exc:
        raise SourceError(
            f"Cannot write specification to {directory}: {exc}",
            details={"output_dir": str(directory)},
        ) from exc

    return written


def parse_specification(text: str, fmt: str = "yaml") -> Specification:
    """Read a rendered document back into a ``Specification``."""
    try:
        if fmt == "json":
            data: Any = json.loads(text)
        elif fmt == "yaml":
            data = yaml.safe_load(text)
        else:
            raise SpecificationLoadError(f"Unsupported format: {fmt}")
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise SpecificationLoadError(f"Invalid {fmt} document: {exc}") from exc

    if not isinstance(data, dict):
        raise SpecificationLoadError("Expected a mapping at the document root")

    try:
        return Specification.from_dict(data)
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise SpecificationLoadError(f"Invalid specification document: {exc}") from exc


def load_specification(file_path: str | Path) -> Specification:
    """Load a specification file, picking the format from its extension."""
    path = Path(file_path)
    fmt = "json" if path.suffix == ".json" else "yaml"
    return parse_specification(path.read_text(encoding="utf-8"), fmt)

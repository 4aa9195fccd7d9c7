"""
Specification output.

Renders the aggregated specification to YAML or JSON and reads it back.
"""

from slothcomments.generate.writer import (
    FORMAT_EXTENSIONS,
    SpecificationLoadError,
    load_specification,
    parse_specification,
    render_specification,
    write_specification,
)

__all__ = [
    "FORMAT_EXTENSIONS",
    "SpecificationLoadError",
    "load_specification",
    "parse_specification",
    "render_specification",
    "write_specification",
]

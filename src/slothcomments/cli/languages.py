"""
List source languages command.
"""

from __future__ import annotations

from slothcomments.cli.ux import print_table
from slothcomments.core.errors import ExitCode
from slothcomments.sources import list_adapters


def list_languages_command() -> int:
    rows = [
        [adapter.name, ", ".join(adapter.extensions), adapter.description]
        for adapter in list_adapters()
    ]
    print_table("Source languages", ["Language", "Extensions", "Description"], rows)
    return ExitCode.SUCCESS

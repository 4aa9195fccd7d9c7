"""
Console output for sloth-comments.

Everything here prints to stderr: with ``--stdout`` the specification document
owns standard output. Colors follow the Nord palette and honour NO_COLOR /
FORCE_COLOR.
"""

from __future__ import annotations

import os
from typing import Iterable

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from slothcomments.aggregator import DirectiveProblem
from slothcomments.specs.models import SLI, Specification

# Nord aurora / frost
SLOTH_THEME = Theme(
    {
        "info": "#88C0D0",
        "success": "#A3BE8C",
        "warning": "#EBCB8B",
        "error": "#BF616A bold",
        "muted": "#D8DEE9",
    }
)

_SYMBOLS = {
    "success": "✓",
    "error": "✗",
    "warning": "⚠",
    "info": "ℹ",
}

console = Console(
    theme=SLOTH_THEME,
    stderr=True,
    force_terminal=os.environ.get("FORCE_COLOR") is not None,
    no_color=os.environ.get("NO_COLOR") is not None,
)


def status(style: str, message: str) -> None:
    """Print one status line in the given theme style."""
    console.print(f"[{style}]{_SYMBOLS[style]} {message}[/{style}]", highlight=False)


def success(message: str) -> None:
    status("success", message)


def error(message: str) -> None:
    status("error", message)


def warning(message: str) -> None:
    status("warning", message)


def info(message: str) -> None:
    status("info", message)


def print_run_header(language: str, roots: Iterable[str]) -> None:
    console.print()
    console.print("[bold]sloth-comments generate[/bold]")
    console.print(f"[muted]language:[/muted] {language}")
    console.print(f"[muted]sources:[/muted]  {', '.join(roots)}")
    console.print()


def print_specification_summary(spec: Specification) -> None:
    """Show the service identity and one row per collected SLO."""
    if spec.service is None:
        warning("No service directive found")
    else:
        success(f"Service {spec.service.name} ({spec.version})")

    if not spec.slos:
        info("No SLO directives found")
        return

    table = Table(title="SLOs")
    for column in ("Name", "Objective", "Window", "SLI"):
        table.add_column(column)
    for slo in spec.slos:
        table.add_row(slo.name, f"{slo.objective:g}%", slo.window, describe_sli(slo.sli))
    console.print(table)


def print_problems(problems: list[DirectiveProblem]) -> None:
    """Show every dropped directive with its file location."""
    warning(f"{len(problems)} directive(s) skipped")
    table = Table(title="Skipped directives")
    for column in ("Location", "Directive", "Kind", "Detail"):
        table.add_column(column)
    for problem in problems:
        table.add_row(
            f"{problem.file}:{problem.line}",
            problem.directive,
            problem.kind.value,
            problem.detail,
        )
    console.print(table)


def print_table(title: str, columns: list[str], rows: list[list[str]]) -> None:
    table = Table(title=title)
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*row)
    console.print(table)


def describe_sli(sli: SLI | None) -> str:
    if sli is None:
        return "-"
    if sli.plugin is not None:
        return f"plugin {sli.plugin}"
    if sli.raw is not None:
        return "raw"
    return "events"

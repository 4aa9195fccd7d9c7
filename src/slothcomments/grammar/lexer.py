"""
Directive lexer.

Finds ``@sloth service`` / ``@sloth slo`` groups inside one comment block and
loads their indented YAML bodies into plain mappings.

A group starts at a marker line and owns every following non-blank line that
is indented deeper than the marker. A blank line, or a line back at the
marker's column, closes it:

    @sloth slo
      - name: availability
        objective: 99.9
        sli: sum(rate(http_requests_total{code=~"5.."}[5m])) / sum(rate(http_requests_total[5m]))

    Ordinary documentation resumes here.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

import yaml

from slothcomments.grammar.outcome import DirectiveError, FailureKind

MARKER_PATTERN = re.compile(r"^@sloth(?:\.|\s+)(?P<kind>service|slo)(?:\s+(?P<header>.*?))?\s*$")

TAB_SIZE = 4
MAX_NESTING = 32


class DirectiveKind(str, Enum):
    NONE = "none"
    SERVICE = "service"
    SLO = "slo"


@dataclass(frozen=True)
class BodyLine:
    line: int  # offset inside the comment block
    indent: int
    text: str


@dataclass(frozen=True)
class DirectiveGroup:
    """One marker line plus the indented body it owns."""

    kind: DirectiveKind
    line: int
    header: str
    body: tuple[BodyLine, ...]

    @property
    def end_line(self) -> int:
        return self.body[-1].line if self.body else self.line


def _indent(raw: str) -> int:
    return len(raw) - len(raw.lstrip())


def scan_directives(text: str) -> list[DirectiveGroup]:
    """
    Split a comment block into directive groups.

    Args:
        text: Comment text with comment syntax already removed

    Returns:
        Groups in source order; an empty list means the block is not a directive
    """
    lines = text.expandtabs(TAB_SIZE).splitlines()
    groups: list[DirectiveGroup] = []

    pos = 0
    while pos < len(lines):
        raw = lines[pos]
        match = MARKER_PATTERN.match(raw.strip())
        if not match:
            pos += 1
            continue

        column = _indent(raw)
        marker_line = pos
        body: list[BodyLine] = []
        pos += 1
        while pos < len(lines):
            candidate = lines[pos]
            if not candidate.strip() or _indent(candidate) <= column:
                break
            body.append(BodyLine(line=pos, indent=_indent(candidate), text=candidate.strip()))
            pos += 1

        groups.append(
            DirectiveGroup(
                kind=DirectiveKind(match.group("kind")),
                line=marker_line,
                header=match.group("header") or "",
                body=tuple(body),
            )
        )

    return groups


def classify(text: str) -> DirectiveKind:
    """Return the kind of the first directive group in ``text``, if any."""
    groups = scan_directives(text)
    if not groups:
        return DirectiveKind.NONE
    return groups[0].kind


class DirectiveLoader(yaml.BaseLoader):
    """
    YAML loader for directive bodies.

    Every scalar stays a string (``version: 1.2`` is ``"1.2"``), an empty
    plain value is ``None``, and a mapping that repeats a key is rejected.
    """

    def construct_scalar(self, node):
        value = super().construct_scalar(node)
        if value == "" and node.style is None:
            return None
        return value

    def construct_mapping(self, node, deep=False):
        seen = set()
        for key_node, _ in node.value:
            key = self.construct_object(key_node, deep=deep)
            if not isinstance(key, str):
                continue
            if key in seen:
                raise DirectiveError(
                    FailureKind.DUPLICATE_KEY_IN_ENTRY,
                    f"duplicate key {key!r}",
                    key_node.start_mark.line,
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def read_records(body: tuple[BodyLine, ...] | list[BodyLine]) -> dict[str, Any] | list[Any]:
    """
    Read a directive body into nested mappings and sequences.

    The body is dedented and loaded as YAML with ``DirectiveLoader``.
    Scalars stay strings; typing is left to the grammars.

    Raises:
        DirectiveError: MalformedDirective for syntax problems,
            DuplicateKeyInEntry when a mapping repeats a key
    """
    if not body:
        return {}

    depth = nesting_depth(body)
    if depth > MAX_NESTING:
        raise DirectiveError(
            FailureKind.MALFORMED_DIRECTIVE,
            f"directive body is nested {depth} levels deep, at most {MAX_NESTING} allowed",
            body[0].line,
        )

    margin = min(line.indent for line in body)
    text = "\n".join(" " * (line.indent - margin) + line.text for line in body)
    try:
        records = yaml.load(text, Loader=DirectiveLoader)
    except DirectiveError as exc:
        raise DirectiveError(exc.kind, exc.detail, _body_line(body, exc.line)) from None
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None) or getattr(exc, "context_mark", None)
        detail = " ".join(
            part for part in (getattr(exc, "context", None), getattr(exc, "problem", None)) if part
        )
        raise DirectiveError(
            FailureKind.MALFORMED_DIRECTIVE,
            detail or "invalid directive body",
            _body_line(body, mark.line if mark is not None else 0),
        ) from None
    except RecursionError:
        # flow collections nest without indentation
        raise DirectiveError(
            FailureKind.MALFORMED_DIRECTIVE, "directive body is nested too deeply", body[0].line
        ) from None

    if not isinstance(records, (dict, list)):
        raise DirectiveError(
            FailureKind.MALFORMED_DIRECTIVE,
            f"expected 'key: value' lines, got {body[0].text!r}",
            body[0].line,
        )
    return records


def nesting_depth(body: tuple[BodyLine, ...] | list[BodyLine]) -> int:
    """Number of indentation levels open at the deepest body line."""
    stack: list[int] = []
    deepest = 0
    for line in body:
        while stack and stack[-1] >= line.indent:
            stack.pop()
        stack.append(line.indent)
        deepest = max(deepest, len(stack))
    return deepest


def item_lines(body: tuple[BodyLine, ...] | list[BodyLine]) -> list[int]:
    """Offsets of the top-level ``-`` items of a body."""
    if not body:
        return []
    margin = min(line.indent for line in body)
    return [
        line.line
        for line in body
        if line.indent == margin and (line.text == "-" or line.text.startswith("- "))
    ]


def _body_line(body: tuple[BodyLine, ...] | list[BodyLine], index: int | None) -> int:
    index = min(max(index or 0, 0), len(body) - 1)
    return body[index].line


def scalar_field(records: dict[str, Any], key: str, context: str, line: int) -> str | None:
    """Fetch ``key`` as a stripped string; nested blocks are rejected."""
    value = records.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise DirectiveError(
            FailureKind.MALFORMED_DIRECTIVE,
            f"{context} '{key}' must be a single value",
            line,
        )
    return value.strip()


def string_map(value: Any, context: str, line: int) -> dict[str, str]:
    """Validate a nested block of ``key: value`` lines with scalar values."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DirectiveError(
            FailureKind.MALFORMED_DIRECTIVE,
            f"{context} must be a block of 'key: value' lines",
            line,
        )
    result: dict[str, str] = {}
    for key, item in value.items():
        if item is not None and not isinstance(item, str):
            raise DirectiveError(
                FailureKind.MALFORMED_DIRECTIVE,
                f"{context} '{key}' must be a single value",
                line,
            )
        result[key] = item or ""
    return result

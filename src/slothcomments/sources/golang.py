"""
Go source adapter.

Groups comments the way ``go/ast`` does: comments on adjacent lines with no
code between them form one group. Group text follows ``CommentGroup.Text``:
comment markers and the first space of a line comment are removed, tool
directives such as ``//go:generate`` are dropped, and leading and trailing
blank lines are trimmed.
"""

from __future__ import annotations

import re
import textwrap
from dataclasses import dataclass, field

from slothcomments.sources.base import CommentBlock, SourceAdapter, SourceParseError

DIRECTIVE_PATTERN = re.compile(r"^(?:go:|line |export |extern )")


@dataclass
class _Group:
    line: int
    end_line: int
    lines: list[str] = field(default_factory=list)


class GoSourceAdapter(SourceAdapter):
    name = "go"
    description = "Go comment groups"
    extensions = (".go",)

    def extract_comments(self, source: str) -> list[CommentBlock]:
        groups: list[_Group] = []
        current: _Group | None = None
        code_since_comment = False

        line = 1
        pos = 0
        length = len(source)
        while pos < length:
            char = source[pos]

            if char == "\n":
                line += 1
                pos += 1
                continue

            if source.startswith("//", pos):
                end = source.find("\n", pos)
                if end == -1:
                    end = length
                text = source[pos + 2 : end].rstrip("\r")
                if current is None or code_since_comment or line > current.end_line + 1:
                    current = _Group(line=line, end_line=line)
                    groups.append(current)
                current.end_line = line
                if not DIRECTIVE_PATTERN.match(text):
                    current.lines.append(text[1:] if text.startswith(" ") else text)
                code_since_comment = False
                pos = end
                continue

            if source.startswith("/*", pos):
                end = source.find("*/", pos + 2)
                if end == -1:
                    raise SourceParseError(f"unterminated block comment at line {line}")
                body = source[pos + 2 : end]
                if current is None or code_since_comment or line > current.end_line + 1:
                    current = _Group(line=line, end_line=line)
                    groups.append(current)
                current.lines.extend(textwrap.dedent(body).splitlines())
                line += body.count("\n")
                current.end_line = line
                code_since_comment = False
                pos = end + 2
                continue

            if char in "\"'`":
                pos, line = _skip_literal(source, pos, line)
                code_since_comment = True
                continue

            if not char.isspace():
                code_since_comment = True
            pos += 1

        blocks = []
        for group in groups:
            text = _group_text(group.lines)
            if text:
                blocks.append(CommentBlock(text=text, line=group.line))
        return blocks


def _skip_literal(source: str, pos: int, line: int) -> tuple[int, int]:
    """Return the position just past the string or rune literal at ``pos``."""
    quote = source[pos]
    start_line = line
    pos += 1
    while pos < len(source):
        char = source[pos]
        if quote == "`":
            if char == "\n":
                line += 1
            elif char == "`":
                return pos + 1, line
            pos += 1
            continue
        if char == "\\":
            pos += 2
            continue
        if char == "\n":
            break
        if char == quote:
            return pos + 1, line
        pos += 1
    raise SourceParseError(f"unterminated literal at line {start_line}")


def _group_text(lines: list[str]) -> str:
    stripped = [line.rstrip() for line in lines]
    while stripped and not stripped[0]:
        stripped.pop(0)
    while stripped and not stripped[-1]:
        stripped.pop()

    collapsed: list[str] = []
    for line in stripped:
        if not line and collapsed and not collapsed[-1]:
            continue
        collapsed.append(line)
    return "\n".join(collapsed)

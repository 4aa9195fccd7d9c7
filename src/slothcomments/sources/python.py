"""
Python source adapter.

Collects ``#`` comment runs (consecutive comment-only lines, or a trailing
comment followed by such lines) through ``tokenize`` and module, class and
function docstrings through ``ast``. Blocks are returned in source order.
"""

from __future__ import annotations

import ast
import io
import tokenize

from slothcomments.sources.base import CommentBlock, SourceAdapter, SourceParseError


class PythonSourceAdapter(SourceAdapter):
    name = "python"
    description = "Python comments and docstrings"
    extensions = (".py",)

    def extract_comments(self, source: str) -> list[CommentBlock]:
        blocks = self._comment_blocks(source) + self._docstring_blocks(source)
        return sorted(blocks, key=lambda block: block.line)

    def _comment_blocks(self, source: str) -> list[CommentBlock]:
        runs: list[tuple[int, list[str]]] = []
        last_line = -1
        try:
            for token in tokenize.generate_tokens(io.StringIO(source).readline):
                if token.type != tokenize.COMMENT:
                    continue
                line = token.start[0]
                text = token.string[1:]
                text = text[1:] if text.startswith(" ") else text
                if runs and line == last_line + 1:
                    runs[-1][1].append(text.rstrip())
                else:
                    runs.append((line, [text.rstrip()]))
                last_line = line
        except (tokenize.TokenError, IndentationError, SyntaxError) as exc:
            raise SourceParseError(str(exc)) from exc

        return [CommentBlock(text="\n".join(lines), line=line) for line, lines in runs]

    def _docstring_blocks(self, source: str) -> list[CommentBlock]:
        try:
            tree = ast.parse(source)
        except SyntaxError as exc:
            raise SourceParseError(str(exc)) from exc

        blocks = []
        for node in ast.walk(tree):
            if not isinstance(
                node, (ast.Module, ast.ClassDef, ast.FunctionDef, ast.AsyncFunctionDef)
            ):
                continue
            docstring = ast.get_docstring(node, clean=True)
            if docstring:
                start = node.body[0]
                line = start.lineno + _leading_blank_lines(start.value.value)
                blocks.append(CommentBlock(text=docstring, line=line))
        return blocks


def _leading_blank_lines(raw: str) -> int:
    """Blank lines that cleaning removes from the top of a docstring."""
    count = 0
    for line in raw.split("\n"):
        if line.strip():
            break
        count += 1
    return count

"""
Source adapter contract.

An adapter turns a set of root directories into an ordered stream of
``SourceFile`` records, each carrying the comment blocks of one file in
source order. The aggregator never looks at file contents directly.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator

import structlog

logger = structlog.get_logger()

SKIPPED_DIRS = frozenset({"vendor", "testdata", "node_modules", "__pycache__"})


class SourceParseError(Exception):
    """Raised by an adapter when a single file cannot be tokenized."""


@dataclass(frozen=True)
class CommentBlock:
    """Comment text with comment syntax removed."""

    text: str
    line: int  # 1-based line of the first comment line in the file


@dataclass(frozen=True)
class SourceFile:
    path: Path
    blocks: list[CommentBlock] = field(default_factory=list)


class SourceAdapter(ABC):
    """Collects comment blocks from one kind of source file."""

    name: str = ""
    extensions: tuple[str, ...] = ()
    description: str = ""

    @abstractmethod
    def extract_comments(self, source: str) -> list[CommentBlock]:
        """
        Split file contents into comment blocks.

        Raises:
            SourceParseError: If the file cannot be tokenized
        """

    def collect(self, roots: Iterable[str | Path]) -> Iterator[SourceFile]:
        """
        Yield every matching file under ``roots`` with its comment blocks.

        Roots that do not exist are skipped. Files are visited once, in
        lexicographic path order per root. ``OSError`` from reading propagates.
        """
        seen: set[Path] = set()
        for root in roots:
            root_path = Path(root)
            if not root_path.exists():
                logger.info("source_root_missing", root=str(root_path))
                continue

            for path in self.iter_files(root_path):
                resolved = path.resolve()
                if resolved in seen:
                    continue
                seen.add(resolved)

                source_file = self.read_file(path)
                if source_file is not None:
                    yield source_file

    def iter_files(self, root: Path) -> Iterator[Path]:
        if root.is_file():
            if self.matches(root):
                yield root
            return

        for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
            dirnames[:] = sorted(
                d for d in dirnames if not d.startswith(".") and d not in SKIPPED_DIRS
            )
            for filename in sorted(filenames):
                path = Path(dirpath) / filename
                if self.matches(path):
                    yield path

    def matches(self, path: Path) -> bool:
        return path.suffix in self.extensions

    def read_file(self, path: Path) -> SourceFile | None:
        source = path.read_text(encoding="utf-8", errors="replace")
        try:
            blocks = self.extract_comments(source)
        except SourceParseError as exc:
            logger.info("source_file_skipped", file=str(path), reason=str(exc))
            return None
        return SourceFile(path=path, blocks=blocks)


def _raise(error: OSError) -> None:
    raise error

"""
Tagged results for directive parsing.

Every grammar entry point answers with exactly one of:
    - Skip: the text holds no directive of that kind (expected, silent)
    - Failure: a directive was found but could not be decoded
    - Success: the decoded value
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Iterable, TypeVar, Union

T = TypeVar("T")


class FailureKind(str, Enum):
    """Why a directive was rejected."""

    MALFORMED_DIRECTIVE = "MalformedDirective"
    MISSING_REQUIRED_FIELD = "MissingRequiredField"
    OUT_OF_RANGE_VALUE = "OutOfRangeValue"
    DUPLICATE_KEY_IN_ENTRY = "DuplicateKeyInEntry"
    CONFLICTING_SERVICE = "ConflictingService"


class DirectiveError(Exception):
    """Raised inside the grammar; converted to a ``Failure`` at the boundary."""

    def __init__(self, kind: FailureKind, detail: str, line: int | None = None):
        super().__init__(detail)
        self.kind = kind
        self.detail = detail
        self.line = line

    def to_failure(self) -> Failure:
        return Failure(kind=self.kind, detail=self.detail, line=self.line)


@dataclass(frozen=True)
class Skip:
    pass


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    detail: str
    line: int | None = None  # 0-based offset inside the comment block
    siblings: tuple[Failure, ...] = ()  # failures of later groups in the same block

    def failures(self) -> tuple[Failure, ...]:
        return (self, *self.siblings)


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


Outcome = Union[Skip, Failure, Success[T]]

SKIP = Skip()


def collect_failures(errors: Iterable[DirectiveError]) -> Failure:
    """Fold the errors of several groups into one Failure, first error leading."""
    first, *rest = [error.to_failure() for error in errors]
    return Failure(first.kind, first.detail, first.line, siblings=tuple(rest))

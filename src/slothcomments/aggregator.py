"""
Spec aggregator.

Folds the directive outcomes of every comment block, file by file and block
by block, into one ``Specification``:

    spec = Specification()
    for each block: spec = apply(spec, block)

Service directives replace the service identity, SLO directives append.
A malformed directive is logged and only its own contribution is dropped; the
aggregator never raises for directive content.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable

import structlog

from slothcomments.grammar.lexer import scan_directives
from slothcomments.grammar.outcome import SKIP, Failure, FailureKind, Outcome, Success
from slothcomments.grammar.service import eval_service_groups
from slothcomments.grammar.slo import eval_slo_groups
from slothcomments.sources.base import CommentBlock, SourceFile
from slothcomments.specs.models import ServiceDeclaration, SLODeclaration, Specification

logger = structlog.get_logger()

IN_MEMORY = "<memory>"


class ServicePolicy(str, Enum):
    """How a second service declaration is treated."""

    LAST_WRITE_WINS = "last-write-wins"
    REJECT_CONFLICT = "reject-conflict"


@dataclass(frozen=True)
class DirectiveProblem:
    """A directive that was found but dropped."""

    file: str
    line: int
    directive: str
    kind: FailureKind
    detail: str


@dataclass(frozen=True)
class BlockOutcome:
    block: CommentBlock
    service: Outcome[ServiceDeclaration]
    slos: Outcome[list[SLODeclaration]]


def evaluate_block(block: CommentBlock) -> BlockOutcome:
    """Run both grammars over one comment block without touching any spec."""
    groups = scan_directives(block.text)
    if not groups:
        return BlockOutcome(block=block, service=SKIP, slos=SKIP)
    return BlockOutcome(
        block=block,
        service=eval_service_groups(groups),
        slos=eval_slo_groups(groups),
    )


def evaluate_file(source_file: SourceFile) -> list[BlockOutcome]:
    return [evaluate_block(block) for block in source_file.blocks]


class SpecAggregator:
    """
    Builds a ``Specification`` from source files.

    Args:
        policy: Service redeclaration policy
        workers: Number of threads used to parse files. Parsing results are
            always folded in file order on the calling thread.
    """

    def __init__(
        self,
        policy: ServicePolicy = ServicePolicy.LAST_WRITE_WINS,
        workers: int = 1,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be at least 1")
        self.policy = ServicePolicy(policy)
        self.workers = workers
        self.problems: list[DirectiveProblem] = []

    def aggregate(
        self,
        files: Iterable[SourceFile],
        initial: Specification | None = None,
    ) -> Specification:
        spec = initial if initial is not None else Specification()

        if self.workers == 1:
            for source_file in files:
                spec = self._fold_file(spec, source_file, evaluate_file(source_file))
            return spec

        ordered = list(files)
        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            for source_file, outcomes in zip(ordered, pool.map(evaluate_file, ordered)):
                spec = self._fold_file(spec, source_file, outcomes)
        return spec

    def apply_block(
        self,
        spec: Specification,
        block: CommentBlock,
        path: str | Path = IN_MEMORY,
    ) -> Specification:
        """Return ``spec`` with one comment block's directives applied."""
        return self.apply_outcome(spec, evaluate_block(block), str(path))

    def apply_outcome(self, spec: Specification, outcome: BlockOutcome, path: str) -> Specification:
        if isinstance(outcome.service, Success):
            spec = self._apply_service(spec, outcome.service.value, outcome.block, path)
        elif isinstance(outcome.service, Failure):
            self._report(outcome.service, outcome.block, path, "service")

        if isinstance(outcome.slos, Success):
            spec = spec.with_slos(outcome.slos.value)
        elif isinstance(outcome.slos, Failure):
            self._report(outcome.slos, outcome.block, path, "slo")

        return spec

    def _fold_file(
        self, spec: Specification, source_file: SourceFile, outcomes: list[BlockOutcome]
    ) -> Specification:
        path = str(source_file.path)
        for outcome in outcomes:
            spec = self.apply_outcome(spec, outcome, path)
        return spec

    def _apply_service(
        self,
        spec: Specification,
        service: ServiceDeclaration,
        block: CommentBlock,
        path: str,
    ) -> Specification:
        current = spec.service
        if current is None or current == service:
            return spec.with_service(service)

        if self.policy == ServicePolicy.REJECT_CONFLICT:
            failure = Failure(
                kind=FailureKind.CONFLICTING_SERVICE,
                detail=f"service '{service.name}' conflicts with earlier declaration "
                f"of '{current.name}'",
            )
            self._report(failure, block, path, "service")
            return spec

        logger.info(
            "service_redeclared",
            file=path,
            line=block.line,
            previous=current.name,
            service=service.name,
        )
        return spec.with_service(service)

    def _report(self, failure: Failure, block: CommentBlock, path: str, directive: str) -> None:
        for each in failure.failures():
            line = block.line + (each.line or 0)
            self.problems.append(
                DirectiveProblem(
                    file=path,
                    line=line,
                    directive=directive,
                    kind=each.kind,
                    detail=each.detail,
                )
            )
            logger.warning(
                "directive_parse_failed",
                file=path,
                line=line,
                directive=directive,
                kind=each.kind.value,
                detail=each.detail,
            )

"""
Directive grammar.

Finds ``@sloth`` directives in comment text and decodes them into
service and SLO declarations.
"""

from slothcomments.grammar.lexer import DirectiveGroup, DirectiveKind, classify, scan_directives
from slothcomments.grammar.outcome import (
    SKIP,
    DirectiveError,
    Failure,
    FailureKind,
    Outcome,
    Skip,
    Success,
)
from slothcomments.grammar.service import eval_service, eval_service_groups
from slothcomments.grammar.slo import eval_slo_groups, eval_slos

__all__ = [
    "DirectiveGroup",
    "DirectiveKind",
    "classify",
    "scan_directives",
    "eval_service",
    "eval_service_groups",
    "eval_slos",
    "eval_slo_groups",
    "DirectiveError",
    "Failure",
    "FailureKind",
    "Outcome",
    "Skip",
    "SKIP",
    "Success",
]

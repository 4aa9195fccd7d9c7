"""
Service directive grammar.

    @sloth service checkout
      version: "1.2"
      labels:
        team: payments
        tier: critical

The name may sit on the marker line or under a ``name:`` key (not both).
Keys other than name, version and labels are ignored.
"""

from __future__ import annotations

from slothcomments.grammar.lexer import (
    DirectiveGroup,
    DirectiveKind,
    read_records,
    scalar_field,
    scan_directives,
    string_map,
)
from slothcomments.grammar.outcome import (
    SKIP,
    DirectiveError,
    FailureKind,
    Outcome,
    Success,
    collect_failures,
)
from slothcomments.specs.models import DEFAULT_SPEC_VERSION, ServiceDeclaration


def eval_service(text: str) -> Outcome[ServiceDeclaration]:
    """Parse the service directive carried by one comment block."""
    return eval_service_groups(scan_directives(text))


def eval_service_groups(groups: list[DirectiveGroup]) -> Outcome[ServiceDeclaration]:
    """
    Parse the service groups among already scanned directive groups.

    Returns:
        Skip when there is no service group, a Failure carrying every invalid
        group if any is invalid, otherwise Success with the last declaration
        of the block
    """
    declaration: ServiceDeclaration | None = None
    errors: list[DirectiveError] = []
    for group in groups:
        if group.kind != DirectiveKind.SERVICE:
            continue
        try:
            declaration = parse_service_group(group)
        except DirectiveError as exc:
            errors.append(exc)

    if errors:
        return collect_failures(errors)
    if declaration is None:
        return SKIP
    return Success(declaration)


def parse_service_group(group: DirectiveGroup) -> ServiceDeclaration:
    records = read_records(group.body)
    if not isinstance(records, dict):
        raise DirectiveError(
            FailureKind.MALFORMED_DIRECTIVE,
            "service directive body must be 'key: value' lines",
            group.line,
        )

    inline_name = group.header.strip()
    declared_name = scalar_field(records, "name", "service", group.line)
    if inline_name and declared_name is not None:
        raise DirectiveError(
            FailureKind.DUPLICATE_KEY_IN_ENTRY,
            "service name given both inline and as 'name:'",
            group.line,
        )

    name = inline_name or declared_name
    if not name:
        raise DirectiveError(
            FailureKind.MISSING_REQUIRED_FIELD,
            "service directive requires a name",
            group.line,
        )

    return ServiceDeclaration(
        name=name,
        version=scalar_field(records, "version", "service", group.line) or DEFAULT_SPEC_VERSION,
        labels=string_map(records.get("labels"), "service labels", group.line),
    )

"""
SLO directive grammar.

A ``@sloth slo`` group holds one or more entries:

    @sloth slo
      - name: availability
        objective: 99.9
        description: Checkout requests served without 5xx
        sli: sum(rate(http_requests_total{code=~"5.."}[5m])) / sum(rate(http_requests_total[5m]))
      - name: latency
        objective: 99
        window: 28d
        sli:
          error_query: sum(rate(http_request_duration_seconds_count{le="0.5"}[5m]))
          total_query: sum(rate(http_request_duration_seconds_count[5m]))
        alerting:
          name: CheckoutLatency
          page_alert:
            labels:
              severity: critical
          ticket_alert:
            disable: true

A body without ``-`` items is a single entry, and a single entry may take its
name from the marker line (``@sloth slo availability``).

The group is parsed eagerly: if any entry is invalid the whole group fails and
none of its SLOs are produced.
"""

from __future__ import annotations

import math
import re
from typing import Any

from slothcomments.grammar.lexer import (
    DirectiveGroup,
    DirectiveKind,
    item_lines,
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
from slothcomments.specs.models import (
    DEFAULT_WINDOW,
    SLI,
    AlertThreshold,
    Alerting,
    SLODeclaration,
)

# Prometheus duration, e.g. 30d, 4w, 1h30m
WINDOW_PATTERN = re.compile(r"^(?:\d+(?:ms|s|m|h|d|w|y))+$")

TRUE_VALUES = {"true", "yes", "on"}
FALSE_VALUES = {"false", "no", "off"}


def eval_slos(text: str) -> Outcome[list[SLODeclaration]]:
    """Parse every SLO directive group carried by one comment block."""
    return eval_slo_groups(scan_directives(text))


def eval_slo_groups(groups: list[DirectiveGroup]) -> Outcome[list[SLODeclaration]]:
    """
    Parse the SLO groups among already scanned directive groups.

    Returns:
        Skip when there is no SLO group, a Failure carrying every invalid group
        if any is invalid, otherwise Success with all entries in source order
    """
    found = False
    slos: list[SLODeclaration] = []
    errors: list[DirectiveError] = []
    for group in groups:
        if group.kind != DirectiveKind.SLO:
            continue
        found = True
        try:
            slos.extend(parse_slo_group(group))
        except DirectiveError as exc:
            errors.append(exc)

    if errors:
        return collect_failures(errors)
    if not found:
        return SKIP
    return Success(slos)


def parse_slo_group(group: DirectiveGroup) -> list[SLODeclaration]:
    records = read_records(group.body)
    inline_name = group.header.strip()

    if isinstance(records, list):
        if inline_name:
            raise DirectiveError(
                FailureKind.MALFORMED_DIRECTIVE,
                "an inline SLO name cannot be combined with '-' entries",
                group.line,
            )
        entries = records
    else:
        if inline_name:
            if "name" in records:
                raise DirectiveError(
                    FailureKind.DUPLICATE_KEY_IN_ENTRY,
                    "SLO name given both inline and as 'name:'",
                    group.line,
                )
            records = {"name": inline_name, **records}
        entries = [records] if records else []

    if not entries:
        raise DirectiveError(
            FailureKind.MALFORMED_DIRECTIVE, "SLO directive has no entries", group.line
        )

    lines = _entry_lines(group, len(entries))
    return [
        _parse_entry(entry, index, line)
        for index, (entry, line) in enumerate(zip(entries, lines), 1)
    ]


def _entry_lines(group: DirectiveGroup, count: int) -> list[int]:
    """First body line of each entry, or the marker line when it cannot be told."""
    lines = item_lines(group.body)
    if len(lines) == count:
        return lines
    if count == 1 and group.body:
        return [group.body[0].line]
    return [group.line] * count


def _parse_entry(entry: Any, index: int, line: int) -> SLODeclaration:
    if not isinstance(entry, dict):
        raise DirectiveError(
            FailureKind.MALFORMED_DIRECTIVE,
            f"SLO entry #{index} must be a block of 'key: value' lines",
            line,
        )

    name = scalar_field(entry, "name", f"SLO entry #{index}", line)
    if not name:
        raise DirectiveError(
            FailureKind.MISSING_REQUIRED_FIELD, f"SLO entry #{index} requires a name", line
        )
    context = f"SLO '{name}'"

    window = scalar_field(entry, "window", context, line) or DEFAULT_WINDOW
    if not WINDOW_PATTERN.match(window):
        raise DirectiveError(
            FailureKind.MALFORMED_DIRECTIVE,
            f"{context} has invalid window {window!r}, expected a duration such as 30d",
            line,
        )

    sli = entry.get("sli")
    alerting = entry.get("alerting")

    return SLODeclaration(
        name=name,
        objective=parse_objective(entry.get("objective"), context, line),
        description=scalar_field(entry, "description", context, line),
        sli=_parse_sli(sli, context, line) if sli is not None else None,
        window=window,
        labels=string_map(entry.get("labels"), f"{context} labels", line),
        alerting=_parse_alerting(alerting, context, line) if alerting is not None else None,
    )


def parse_objective(value: Any, context: str, line: int) -> float:
    """
    Parse an objective percentage.

    Accepts an optional trailing ``%``. Valid range is ``0 < objective <= 100``.
    """
    if value is None or value == "":
        raise DirectiveError(
            FailureKind.MISSING_REQUIRED_FIELD, f"{context} requires an objective", line
        )
    if not isinstance(value, str):
        raise DirectiveError(
            FailureKind.MALFORMED_DIRECTIVE, f"{context} objective must be a number", line
        )

    raw = value.strip().rstrip("%").strip()
    try:
        objective = float(raw)
    except ValueError:
        raise DirectiveError(
            FailureKind.MALFORMED_DIRECTIVE,
            f"{context} objective {value!r} is not a number",
            line,
        ) from None

    if math.isnan(objective) or not 0 < objective <= 100:
        raise DirectiveError(
            FailureKind.OUT_OF_RANGE_VALUE,
            f"{context} objective {raw} must be greater than 0 and at most 100",
            line,
        )
    return objective


def _parse_sli(value: Any, context: str, line: int) -> SLI:
    if isinstance(value, str):
        if not value.strip():
            raise DirectiveError(
                FailureKind.MALFORMED_DIRECTIVE, f"{context} has an empty sli", line
            )
        return SLI(raw=value.strip())

    if not isinstance(value, dict):
        raise DirectiveError(
            FailureKind.MALFORMED_DIRECTIVE,
            f"{context} sli must be a query or a block of 'key: value' lines",
            line,
        )

    forms = [
        form
        for form, keys in (
            ("raw", ("error_ratio_query",)),
            ("events", ("error_query", "total_query")),
            ("plugin", ("plugin",)),
        )
        if any(key in value for key in keys)
    ]
    if len(forms) != 1:
        raise DirectiveError(
            FailureKind.MALFORMED_DIRECTIVE,
            f"{context} sli must define exactly one of error_ratio_query, "
            "error_query/total_query or plugin",
            line,
        )

    sli_context = f"{context} sli"
    form = forms[0]
    if form == "raw":
        return SLI(raw=_required(value, "error_ratio_query", sli_context, line))
    if form == "events":
        return SLI(
            error_query=_required(value, "error_query", sli_context, line),
            total_query=_required(value, "total_query", sli_context, line),
        )
    return SLI(
        plugin=_required(value, "plugin", sli_context, line),
        options=string_map(value.get("options"), f"{sli_context} options", line),
    )


def _parse_alerting(value: Any, context: str, line: int) -> Alerting:
    if not isinstance(value, dict):
        raise DirectiveError(
            FailureKind.MALFORMED_DIRECTIVE,
            f"{context} alerting must be a block of 'key: value' lines",
            line,
        )

    alert_context = f"{context} alerting"
    page = value.get("page_alert")
    ticket = value.get("ticket_alert")
    return Alerting(
        name=scalar_field(value, "name", alert_context, line),
        labels=string_map(value.get("labels"), f"{alert_context} labels", line),
        annotations=string_map(value.get("annotations"), f"{alert_context} annotations", line),
        page_alert=_parse_threshold(page, f"{alert_context} page_alert", line)
        if "page_alert" in value
        else None,
        ticket_alert=_parse_threshold(ticket, f"{alert_context} ticket_alert", line)
        if "ticket_alert" in value
        else None,
    )


def _parse_threshold(value: Any, context: str, line: int) -> AlertThreshold:
    if value is None:
        return AlertThreshold()
    if not isinstance(value, dict):
        raise DirectiveError(
            FailureKind.MALFORMED_DIRECTIVE,
            f"{context} must be a block of 'key: value' lines",
            line,
        )
    return AlertThreshold(
        disable=_parse_bool(scalar_field(value, "disable", context, line), context, line),
        labels=string_map(value.get("labels"), f"{context} labels", line),
        annotations=string_map(value.get("annotations"), f"{context} annotations", line),
    )


def _parse_bool(value: str | None, context: str, line: int) -> bool:
    if value is None:
        return False
    lowered = value.lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise DirectiveError(
        FailureKind.MALFORMED_DIRECTIVE,
        f"{context} disable must be true or false, got {value!r}",
        line,
    )


def _required(records: dict[str, Any], key: str, context: str, line: int) -> str:
    value = scalar_field(records, key, context, line)
    if not value:
        raise DirectiveError(
            FailureKind.MISSING_REQUIRED_FIELD, f"{context} requires '{key}'", line
        )
    return value

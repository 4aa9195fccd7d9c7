"""Tests for the SLO directive grammar.

Covers required fields, objective bounds, SLI forms, alerting blocks and the
whole-group failure policy.
"""

import pytest

from slothcomments.grammar.outcome import Failure, FailureKind, Skip, Success
from slothcomments.grammar.slo import eval_slos
from slothcomments.specs.models import (
    DEFAULT_WINDOW,
    SLI,
    AlertThreshold,
    Alerting,
    SLODeclaration,
)

AVAILABILITY_QUERY = (
    'sum(rate(http_requests_total{code=~"5.."}[{{.window}}])) '
    "/ sum(rate(http_requests_total[{{.window}}]))"
)


def _slo_block(objective: str) -> str:
    return f"@sloth slo\n  name: availability\n  objective: {objective}"


class TestEvalSlos:
    """Tests for eval_slos."""

    def test_no_marker_is_skip(self):
        """Text without an SLO marker is skipped silently."""
        assert isinstance(eval_slos("Availability is measured elsewhere."), Skip)

    def test_service_only_block_is_skip(self):
        """A service group is not an SLO directive."""
        assert isinstance(eval_slos("@sloth service checkout"), Skip)

    def test_single_entry_without_items(self):
        """A body with no '-' items is one entry with defaults applied."""
        outcome = eval_slos(_slo_block("99.9"))

        assert outcome == Success([SLODeclaration(name="availability", objective=99.9)])
        assert outcome.value[0].window == DEFAULT_WINDOW
        assert outcome.value[0].sli is None
        assert outcome.value[0].alerting is None

    def test_inline_name(self):
        """A single entry can take its name from the marker line."""
        outcome = eval_slos("@sloth slo availability\n  objective: 99")

        assert outcome == Success([SLODeclaration(name="availability", objective=99.0)])

    def test_multiple_entries_keep_order(self):
        """Entries are produced in source order."""
        outcome = eval_slos(
            "@sloth slo\n"
            "  - name: availability\n"
            "    objective: 99.9\n"
            "  - name: latency\n"
            "    objective: 99\n"
            "  - name: availability\n"
            "    objective: 95\n"
        )

        assert isinstance(outcome, Success)
        assert [(slo.name, slo.objective) for slo in outcome.value] == [
            ("availability", 99.9),
            ("latency", 99.0),
            ("availability", 95.0),
        ]

    def test_full_entry(self):
        """Every optional field is decoded."""
        outcome = eval_slos(
            "@sloth slo\n"
            "  - name: availability\n"
            "    objective: 99.95%\n"
            "    description: Checkout requests served without errors\n"
            f"    sli: {AVAILABILITY_QUERY}\n"
            "    window: 28d\n"
            "    labels:\n"
            "      category: availability\n"
            "    alerting:\n"
            "      name: CheckoutAvailability\n"
            "      labels:\n"
            "        team: payments\n"
            "      annotations:\n"
            "        runbook: https://runbooks.example.com/checkout\n"
            "      page_alert:\n"
            "        labels:\n"
            "          severity: critical\n"
            "      ticket_alert:\n"
            "        disable: true\n"
        )

        assert outcome == Success(
            [
                SLODeclaration(
                    name="availability",
                    objective=99.95,
                    description="Checkout requests served without errors",
                    sli=SLI(raw=AVAILABILITY_QUERY),
                    window="28d",
                    labels={"category": "availability"},
                    alerting=Alerting(
                        name="CheckoutAvailability",
                        labels={"team": "payments"},
                        annotations={"runbook": "https://runbooks.example.com/checkout"},
                        page_alert=AlertThreshold(labels={"severity": "critical"}),
                        ticket_alert=AlertThreshold(disable=True),
                    ),
                )
            ]
        )

    def test_events_sli(self):
        """Error and total queries build an events SLI."""
        outcome = eval_slos(
            "@sloth slo\n"
            "  name: latency\n"
            "  objective: 99\n"
            "  sli:\n"
            "    error_query: sum(rate(slow[5m]))\n"
            "    total_query: sum(rate(all[5m]))\n"
        )

        assert isinstance(outcome, Success)
        assert outcome.value[0].sli == SLI(
            error_query="sum(rate(slow[5m]))", total_query="sum(rate(all[5m]))"
        )

    def test_plugin_sli(self):
        """A plugin id with options builds a plugin SLI."""
        outcome = eval_slos(
            "@sloth slo\n"
            "  name: availability\n"
            "  objective: 99\n"
            "  sli:\n"
            "    plugin: sloth-common/kubernetes/apiserver/availability\n"
            "    options:\n"
            '      filter: job="apiserver"\n'
        )

        assert isinstance(outcome, Success)
        assert outcome.value[0].sli == SLI(
            plugin="sloth-common/kubernetes/apiserver/availability",
            options={"filter": 'job="apiserver"'},
        )

    def test_unknown_keys_are_ignored(self):
        """Keys outside the grammar do not fail the entry."""
        outcome = eval_slos(_slo_block("99") + "\n  owner: payments")

        assert outcome == Success([SLODeclaration(name="availability", objective=99.0)])

    def test_groups_across_block_are_concatenated(self):
        """Several SLO groups in one block all contribute, in order."""
        outcome = eval_slos(
            "@sloth slo a\n  objective: 99\n\nSome prose.\n\n@sloth slo b\n  objective: 98"
        )

        assert isinstance(outcome, Success)
        assert [slo.name for slo in outcome.value] == ["a", "b"]


class TestObjectiveBounds:
    """Objective must satisfy 0 < objective <= 100."""

    @pytest.mark.parametrize("objective", ["100", "0.001", "50", "99.999"])
    def test_valid(self, objective):
        """Values inside the range are accepted."""
        outcome = eval_slos(_slo_block(objective))

        assert isinstance(outcome, Success)
        assert outcome.value[0].objective == float(objective)

    @pytest.mark.parametrize("objective", ["0", "-1", "100.01", "250", "nan", "inf"])
    def test_out_of_range(self, objective):
        """Zero, negatives and values above 100 are out of range."""
        outcome = eval_slos(_slo_block(objective))

        assert isinstance(outcome, Failure)
        assert outcome.kind == FailureKind.OUT_OF_RANGE_VALUE

    def test_not_a_number(self):
        """Non-numeric objectives are malformed."""
        outcome = eval_slos(_slo_block("high"))

        assert isinstance(outcome, Failure)
        assert outcome.kind == FailureKind.MALFORMED_DIRECTIVE


class TestSloFailures:
    """Hard failures of the SLO grammar."""

    def test_missing_objective(self):
        """Objective is required."""
        outcome = eval_slos("@sloth slo\n  name: availability")

        assert isinstance(outcome, Failure)
        assert outcome.kind == FailureKind.MISSING_REQUIRED_FIELD

    def test_missing_name(self):
        """Name is required."""
        outcome = eval_slos("@sloth slo\n  objective: 99")

        assert isinstance(outcome, Failure)
        assert outcome.kind == FailureKind.MISSING_REQUIRED_FIELD

    def test_duplicate_key_in_entry(self):
        """Repeating a field inside one entry fails the group."""
        outcome = eval_slos("@sloth slo\n  - name: a\n    objective: 99\n    objective: 98")

        assert isinstance(outcome, Failure)
        assert outcome.kind == FailureKind.DUPLICATE_KEY_IN_ENTRY

    def test_empty_group(self):
        """A marker with no entries is malformed."""
        outcome = eval_slos("@sloth slo")

        assert isinstance(outcome, Failure)
        assert outcome.kind == FailureKind.MALFORMED_DIRECTIVE

    def test_invalid_window(self):
        """Windows must be Prometheus durations."""
        outcome = eval_slos(_slo_block("99") + "\n  window: a month")

        assert isinstance(outcome, Failure)
        assert outcome.kind == FailureKind.MALFORMED_DIRECTIVE

    def test_ambiguous_sli(self):
        """An SLI block must choose exactly one form."""
        outcome = eval_slos(
            _slo_block("99") + "\n  sli:\n    error_ratio_query: a\n    plugin: b"
        )

        assert isinstance(outcome, Failure)
        assert outcome.kind == FailureKind.MALFORMED_DIRECTIVE

    def test_incomplete_events_sli(self):
        """Events SLIs need both queries."""
        outcome = eval_slos(_slo_block("99") + "\n  sli:\n    error_query: a")

        assert isinstance(outcome, Failure)
        assert outcome.kind == FailureKind.MISSING_REQUIRED_FIELD

    def test_invalid_disable_flag(self):
        """Alert disable flags must be booleans."""
        outcome = eval_slos(
            _slo_block("99") + "\n  alerting:\n    page_alert:\n      disable: sometimes"
        )

        assert isinstance(outcome, Failure)
        assert outcome.kind == FailureKind.MALFORMED_DIRECTIVE

    def test_malformed_entry_fails_whole_group(self):
        """One valid and one objective-less entry produce no SLOs at all."""
        outcome = eval_slos(
            "@sloth slo\n"
            "  - name: availability\n"
            "    objective: 99.9\n"
            "  - name: latency\n"
            "    description: objective omitted\n"
        )

        assert isinstance(outcome, Failure)
        assert outcome.kind == FailureKind.MISSING_REQUIRED_FIELD
        assert "latency" in outcome.detail

    def test_entry_must_be_mapping(self):
        """Scalar list items are not entries."""
        outcome = eval_slos("@sloth slo\n  - availability")

        assert isinstance(outcome, Failure)
        assert outcome.kind == FailureKind.MALFORMED_DIRECTIVE

    def test_entry_failure_points_at_entry(self):
        """Entry-level failures carry the line of the failing '-' item."""
        outcome = eval_slos(
            "@sloth slo\n"
            "  - name: availability\n"
            "    objective: 99.9\n"
            "  - name: latency\n"
            "    window: 7d\n"
        )

        assert isinstance(outcome, Failure)
        assert outcome.kind == FailureKind.MISSING_REQUIRED_FIELD
        assert outcome.line == 3

    def test_single_entry_failure_points_at_body(self):
        """A mapping entry fails at its first body line, not the marker."""
        outcome = eval_slos("Docs.\n@sloth slo\n  name: a\n  objective: 0")

        assert isinstance(outcome, Failure)
        assert outcome.line == 2

    def test_every_failing_group_is_kept(self):
        """Later failing groups ride along with the first failure."""
        outcome = eval_slos(
            "@sloth slo a\n  objective: 0\n"
            "@sloth slo b\n  objective: 99\n"
            "@sloth slo\n  objective: 1"
        )

        assert isinstance(outcome, Failure)
        assert [(failure.kind, failure.line) for failure in outcome.failures()] == [
            (FailureKind.OUT_OF_RANGE_VALUE, 1),
            (FailureKind.MISSING_REQUIRED_FIELD, 5),
        ]

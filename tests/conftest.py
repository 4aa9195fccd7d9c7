"""Root test configuration."""

import logging

import pytest
import structlog

CHECKOUT_GO = """// Package checkout handles payments.
//
// @sloth service checkout
//   version: v1
//   labels:
//     team: payments
package checkout

// Handle serves checkout requests.
//
// @sloth slo
//   - name: availability
//     objective: 99.9
//     sli: sum(rate(errors[{{.window}}])) / sum(rate(total[{{.window}}]))
//   - name: latency
//     objective: 99
//     window: 7d
func Handle() {}
"""

BROKEN_GO = """package checkout

// @sloth slo
//   name: refunds
//   objective: 250
func Refund() {}
"""


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


@pytest.fixture
def go_tree(tmp_path):
    """A Go source tree with one service and two SLO directives."""
    root = tmp_path / "src"
    (root / "checkout").mkdir(parents=True)
    (root / "checkout" / "checkout.go").write_text(CHECKOUT_GO)
    return root


@pytest.fixture
def broken_go_tree(go_tree):
    """The Go tree plus a file whose SLO directive is out of range."""
    (go_tree / "checkout" / "refund.go").write_text(BROKEN_GO)
    return go_tree

"""
Pytest fixtures for the ledger renderer test suite.

Provides:
- Structured logging configured for the whole session
- A shared BasicRenderer and a ``render`` helper returning text
- Common domain objects (dates, accounts, amounts)
- Log capture as parsed JSON dicts
"""

import json
import logging
from collections.abc import Callable
from datetime import date
from decimal import Decimal
from io import StringIO

import pytest

from ledger_kernel.domain import Account, AccountType, Amount
from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from ledger_render import BasicRenderer


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture ledger_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, renderer):
            renderer.render(ledger, StringIO())
            logs = captured_logs()
            assert any(r["message"] == "ledger_render_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("ledger_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Renderer fixtures
# =============================================================================


@pytest.fixture
def renderer() -> BasicRenderer:
    return BasicRenderer()


@pytest.fixture
def render(renderer) -> Callable[[object], str]:
    """Render a node into a fresh buffer and return the text."""

    def _render(node: object) -> str:
        buffer = StringIO()
        renderer.render(node, buffer)
        return buffer.getvalue()

    return _render


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def day() -> date:
    return date(2023, 1, 1)


@pytest.fixture
def checking() -> Account:
    return Account(AccountType.ASSETS, ("Bank", "Checking"))


@pytest.fixture
def food() -> Account:
    return Account(AccountType.EXPENSES, ("Food",))


@pytest.fixture
def usd_100() -> Amount:
    return Amount(Decimal("100.00"), "USD")

"""
Pytest fixtures for the back-office finance test suite.

Provides:
- Structured logging configured once per session, with LogContext reset
  between tests and a ``captured_logs`` fixture for asserting on events
- A deterministic clock and sequential id factory
- The hotel chart of accounts
- A ledger wired to both, plus a helper for posting balanced entries
"""

import itertools
import json
import logging
from collections.abc import Callable
from datetime import date, datetime, timezone
from decimal import Decimal
from io import StringIO

import pytest

from backoffice_kernel.domain.accounts import (
    Account,
    AccountType,
    ChartOfAccountsRegistry,
    NormalBalance,
)
from backoffice_kernel.domain.clock import DeterministicClock
from backoffice_kernel.domain.journal import (
    JournalEntry,
    JournalEntryDraft,
    JournalEntryStatus,
    JournalLineDraft,
)
from backoffice_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from backoffice_kernel.services.journal_ledger import JournalEntryLedger
from backoffice_kernel.services.reversal_service import ReversalEngine

TEST_ACTOR_ID = "user-accountant"

FIXED_NOW = datetime(2024, 3, 15, 9, 0, 0, tzinfo=timezone.utc)

# (code, name, type)
HOTEL_CHART: tuple[tuple[str, str, AccountType], ...] = (
    ("1000", "Cash on Hand", AccountType.ASSET),
    ("1010", "Bank - Operating", AccountType.ASSET),
    ("1200", "Accounts Receivable", AccountType.ASSET),
    ("1300", "Inventory", AccountType.ASSET),
    ("1400", "Prepaid Expenses", AccountType.ASSET),
    ("1600", "Furniture & Equipment", AccountType.ASSET),
    ("2000", "Accounts Payable", AccountType.LIABILITY),
    ("2100", "Tax Payable", AccountType.LIABILITY),
    ("2200", "Accrued Expenses", AccountType.LIABILITY),
    ("2300", "Service Charge Payable", AccountType.LIABILITY),
    ("2500", "Bank Loan", AccountType.LIABILITY),
    ("3000", "Owner's Equity", AccountType.EQUITY),
    ("4100", "Room Revenue", AccountType.REVENUE),
    ("4200", "F&B Revenue", AccountType.REVENUE),
    ("4300", "Other Revenue", AccountType.REVENUE),
    ("5100", "Food Cost", AccountType.EXPENSE),
    ("6100", "Salaries & Wages", AccountType.EXPENSE),
    ("6200", "Utilities", AccountType.EXPENSE),
    ("6300", "Depreciation Expense", AccountType.EXPENSE),
)


def account_id(code: str) -> str:
    return f"acc-{code}"


def build_hotel_chart() -> ChartOfAccountsRegistry:
    chart = ChartOfAccountsRegistry(
        Account(
            id=account_id(code),
            code=code,
            name=name,
            account_type=account_type,
            normal_balance=NormalBalance.for_type(account_type),
        )
        for code, name, account_type in HOTEL_CHART
    )
    chart.register(Account(
        id=account_id("6900"),
        code="6900",
        name="Legacy Expense",
        account_type=AccountType.EXPENSE,
        normal_balance=NormalBalance.DEBIT,
        is_active=False,
    ))
    return chart


def sequential_ids(prefix: str = "id") -> Callable[[], str]:
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter):04d}"


def make_draft(
    lines: list[tuple[str, str | int, str | int]],
    transaction_date: date | str | None = date(2024, 3, 10),
    description: str | None = "Test entry",
    **kwargs,
) -> JournalEntryDraft:
    """Build a draft from ``(account_code, debit, credit)`` tuples."""
    return JournalEntryDraft(
        description=description,
        transaction_date=transaction_date,
        lines=[
            JournalLineDraft(
                account_id=account_id(code) if code else None,
                debit=Decimal(str(debit)),
                credit=Decimal(str(credit)),
            )
            for code, debit, credit in lines
        ],
        **kwargs,
    )


def post(
    ledger: JournalEntryLedger,
    draft: JournalEntryDraft,
    actor_id: str = TEST_ACTOR_ID,
) -> JournalEntry:
    """Create a draft entry and walk it through approval to POSTED."""
    entry = ledger.create(draft, actor_id)
    for status in (
        JournalEntryStatus.PENDING_APPROVAL,
        JournalEntryStatus.APPROVED,
        JournalEntryStatus.POSTED,
    ):
        entry = ledger.transition(entry.id, status, actor_id)
    return entry


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
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
    Capture backoffice logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, ledger):
            ...
            logs = captured_logs()
            assert any(r["message"] == "journal_entry_posted" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("backoffice")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(FIXED_NOW)


@pytest.fixture
def chart() -> ChartOfAccountsRegistry:
    return build_hotel_chart()


@pytest.fixture
def ledger(chart, deterministic_clock) -> JournalEntryLedger:
    return JournalEntryLedger(
        chart=chart,
        clock=deterministic_clock,
        id_factory=sequential_ids(),
    )


@pytest.fixture
def reversal_engine(ledger) -> ReversalEngine:
    return ReversalEngine(ledger)

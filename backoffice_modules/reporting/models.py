"""
Financial Reporting Domain Models (``backoffice_modules.reporting.models``).

Responsibility
--------------
Frozen dataclass value objects for the statement outputs: trial balance,
profit and loss, balance sheet and cash-flow statement.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Returned by the
builders in this package and rendered to plain dicts with
``render_to_dict`` for the presentation layer.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* Section totals are computed once at construction by the builders and
  always equal the sum of their lines.

Audit relevance
---------------
* Every report carries the ``DataIntegrityWarning`` values found while
  building it; warnings never block a report.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from backoffice_kernel.domain.integrity import DataIntegrityWarning
from backoffice_kernel.domain.periods import ReportingPeriod
from backoffice_modules.reporting.config import CashFlowMethod

_ZERO = Decimal("0")


class ReportType(str, Enum):
    """Types of financial reports."""

    TRIAL_BALANCE = "trial_balance"
    PROFIT_AND_LOSS = "profit_and_loss"
    BALANCE_SHEET = "balance_sheet"
    CASH_FLOW = "cash_flow"


# =========================================================================
# Shared building blocks
# =========================================================================


@dataclass(frozen=True)
class StatementLine:
    """A labelled amount.  ``key`` is stable; ``label`` is for display."""

    key: str
    label: str
    amount: Decimal


@dataclass(frozen=True)
class StatementSection:
    """A titled group of lines with their total."""

    label: str
    lines: tuple[StatementLine, ...]
    total: Decimal

    def amount(self, key: str) -> Decimal:
        """Amount of the line with ``key`` (0 if absent)."""
        for line in self.lines:
            if line.key == key:
                return line.amount
        return _ZERO


def make_section(label: str, lines: list[StatementLine] | tuple[StatementLine, ...]) -> StatementSection:
    lines = tuple(lines)
    return StatementSection(
        label=label,
        lines=lines,
        total=sum((line.amount for line in lines), _ZERO),
    )


# =========================================================================
# Trial Balance
# =========================================================================


@dataclass(frozen=True)
class TrialBalanceRow:
    """
    One account in the trial balance.

    ``balance`` is signed by the account's normal side (positive when the
    account carries its expected balance).  ``debit_balance`` /
    ``credit_balance`` present the same figure on one side only.
    """

    account_code: str
    account_name: str
    account_type: str | None  # None for unmapped codes
    normal_balance: str
    debit_total: Decimal
    credit_total: Decimal
    balance: Decimal
    debit_balance: Decimal
    credit_balance: Decimal
    account_id: str | None = None
    is_unmapped: bool = False


@dataclass(frozen=True)
class TrialBalanceReport:
    """Complete trial balance."""

    as_of: date | None
    rows: tuple[TrialBalanceRow, ...]
    total_debits: Decimal
    total_credits: Decimal
    total_debit_balances: Decimal
    total_credit_balances: Decimal
    warnings: tuple[DataIntegrityWarning, ...] = ()

    @property
    def difference(self) -> Decimal:
        return self.total_debit_balances - self.total_credit_balances

    @property
    def is_balanced(self) -> bool:
        return abs(self.difference) < Decimal("0.01")

    def row_for(self, account_code: str) -> TrialBalanceRow | None:
        for row in self.rows:
            if row.account_code == account_code:
                return row
        return None


# =========================================================================
# Profit and Loss
# =========================================================================


@dataclass(frozen=True)
class ProfitAndLossReport:
    """
    Transactional P&L.

    Revenue - Cost of Sales = Gross Profit
    Gross Profit - Operating Expenses = Operating Income = Net Income
    """

    period: ReportingPeriod
    revenue: StatementSection
    cost_of_sales: StatementSection
    gross_profit: Decimal
    operating_expenses: StatementSection
    operating_income: Decimal
    net_income: Decimal
    gross_margin: Decimal
    operating_margin: Decimal
    net_margin: Decimal
    warnings: tuple[DataIntegrityWarning, ...] = ()

    @property
    def total_revenue(self) -> Decimal:
        return self.revenue.total


# =========================================================================
# Balance Sheet
# =========================================================================


@dataclass(frozen=True)
class BalanceSheetReport:
    """
    Classified balance sheet.

    Assets = Liabilities + Equity is checked, not enforced; a mismatch is
    reported through ``warnings``.
    """

    as_of: date | None
    current_assets: StatementSection
    non_current_assets: StatementSection
    total_assets: Decimal
    current_liabilities: StatementSection
    non_current_liabilities: StatementSection
    total_liabilities: Decimal
    equity: StatementSection
    total_equity: Decimal
    total_liabilities_and_equity: Decimal
    is_balanced: bool
    warnings: tuple[DataIntegrityWarning, ...] = ()


# =========================================================================
# Cash Flow (indirect method)
# =========================================================================


@dataclass(frozen=True)
class CashFlowReport:
    """
    Cash-flow statement.

    beginning_cash + net_cash_flow == ending_cash by construction.
    """

    period: ReportingPeriod
    method: CashFlowMethod
    operating: StatementSection
    investing: StatementSection
    financing: StatementSection
    net_cash_flow: Decimal
    beginning_cash: Decimal
    ending_cash: Decimal
    warnings: tuple[DataIntegrityWarning, ...] = ()

    @property
    def net_income(self) -> Decimal:
        return self.operating.amount("net_income")

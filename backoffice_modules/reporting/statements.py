"""
Pure financial statement builders: profit and loss, balance sheet.

The P&L is transactional: it is derived from guest invoices, orders,
supplier invoices and expenses dated inside the reporting period.  The
balance sheet is derived from a trial balance.

All monetary values are Decimal. All inputs/outputs are frozen dataclasses.

Functions and builders in this module:
- No database access
- No clock access (periods are resolved by the caller)
- Deterministic: same inputs always produce same outputs
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from enum import Enum

from backoffice_kernel.domain.accounts import AccountType
from backoffice_kernel.domain.integrity import (
    BALANCE_SHEET_OUT_OF_BALANCE,
    DataIntegrityWarning,
    empty_period_warning,
    integrity_warning,
)
from backoffice_kernel.domain.journal import BALANCE_TOLERANCE
from backoffice_kernel.domain.periods import ReportingPeriod
from backoffice_kernel.logging_config import LogContext, get_logger
from backoffice_modules.documents.models import (
    Expense,
    ExpenseCategory,
    ExpenseStatus,
    GuestInvoice,
    GuestInvoiceStatus,
    LineItemType,
    Order,
    OrderStatus,
    SupplierInvoice,
    SupplierInvoiceCategory,
    SupplierInvoiceStatus,
)
from backoffice_modules.reporting.config import ReportingConfig
from backoffice_modules.reporting.models import (
    BalanceSheetReport,
    ProfitAndLossReport,
    ReportType,
    StatementLine,
    TrialBalanceReport,
    TrialBalanceRow,
    make_section,
)

logger = get_logger("modules.reporting.statements")

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")

# Documents in these states never count towards reported figures.
VOID_GUEST_INVOICE_STATUSES = frozenset({GuestInvoiceStatus.CANCELLED, GuestInvoiceStatus.REFUNDED})
VOID_SUPPLIER_INVOICE_STATUSES = frozenset({SupplierInvoiceStatus.CANCELLED, SupplierInvoiceStatus.REJECTED})
VOID_EXPENSE_STATUSES = frozenset({ExpenseStatus.REJECTED})
VOID_ORDER_STATUSES = frozenset({OrderStatus.CANCELLED})

OPERATING_EXPENSE_CATEGORIES: tuple[tuple[str, str, ExpenseCategory | None], ...] = (
    ("salaries", "Salaries & Wages", ExpenseCategory.SALARIES),
    ("utilities", "Utilities", ExpenseCategory.UTILITIES),
    ("maintenance", "Maintenance & Repairs", ExpenseCategory.MAINTENANCE),
    ("marketing", "Marketing", ExpenseCategory.MARKETING),
    ("administrative", "Administrative", ExpenseCategory.ADMINISTRATIVE),
    ("other", "Other Expenses", None),
)


def margin(value: Decimal, revenue: Decimal) -> Decimal:
    """``value / revenue * 100``, or 0 when revenue is not positive."""
    if revenue <= _ZERO:
        return _ZERO
    return value / revenue * _HUNDRED


# =========================================================================
# Profit and Loss
# =========================================================================


class ProfitAndLossBuilder:
    """
    Builds the transactional P&L for a period.

    Contract:
        Revenue: room charges and extra-service/misc line items from guest
        invoices, F&B from orders.  Cost of sales: food-beverage supplier
        invoices split by ``food_cost_ratio``, amenities as room supplies.
        Operating expenses: expenses grouped by category.
    Non-goals:
        - Does NOT read the ledger; see BalanceSheetBuilder for the
          ledger-derived view.
    """

    def __init__(self, config: ReportingConfig | None = None):
        self._config = config or ReportingConfig()

    def build(
        self,
        period: ReportingPeriod,
        guest_invoices: Iterable[GuestInvoice] = (),
        orders: Iterable[Order] = (),
        supplier_invoices: Iterable[SupplierInvoice] = (),
        expenses: Iterable[Expense] = (),
    ) -> ProfitAndLossReport:
        invoices = [
            i for i in guest_invoices
            if period.contains(i.invoice_date) and i.status not in VOID_GUEST_INVOICE_STATUSES
        ]
        period_orders = [
            o for o in orders
            if period.contains(o.order_date) and o.status not in VOID_ORDER_STATUSES
        ]
        bills = [
            s for s in supplier_invoices
            if period.contains(s.invoice_date) and s.status not in VOID_SUPPLIER_INVOICE_STATUSES
        ]
        period_expenses = [
            e for e in expenses
            if period.contains(e.expense_date) and e.status not in VOID_EXPENSE_STATUSES
        ]

        room_revenue = _ZERO
        other_revenue = _ZERO
        for invoice in invoices:
            for item in invoice.line_items:
                if item.item_type == LineItemType.ROOM_CHARGE:
                    room_revenue += item.line_grand_total
                elif item.item_type in (LineItemType.EXTRA_SERVICE, LineItemType.MISC):
                    other_revenue += item.line_grand_total
        fnb_revenue = sum((o.total for o in period_orders), _ZERO)

        revenue = make_section("Revenue", [
            StatementLine("room_revenue", "Room Revenue", room_revenue),
            StatementLine("fnb_revenue", "Food & Beverage Revenue", fnb_revenue),
            StatementLine("other_revenue", "Other Revenue", other_revenue),
        ])

        food_beverage = sum(
            (s.total for s in bills if s.category == SupplierInvoiceCategory.FOOD_BEVERAGE),
            _ZERO,
        )
        room_supplies = sum(
            (s.total for s in bills if s.category == SupplierInvoiceCategory.AMENITIES),
            _ZERO,
        )
        food_cost = food_beverage * self._config.food_cost_ratio
        cost_of_sales = make_section("Cost of Sales", [
            StatementLine("food_cost", "Food Cost", food_cost),
            StatementLine("beverage_cost", "Beverage Cost", food_beverage - food_cost),
            StatementLine("room_supplies", "Room Supplies", room_supplies),
        ])

        by_category = {key: _ZERO for key, _, _ in OPERATING_EXPENSE_CATEGORIES}
        named = {category: key for key, _, category in OPERATING_EXPENSE_CATEGORIES if category}
        for expense in period_expenses:
            by_category[named.get(expense.category, "other")] += expense.amount
        operating_expenses = make_section("Operating Expenses", [
            StatementLine(key, label, by_category[key])
            for key, label, _ in OPERATING_EXPENSE_CATEGORIES
        ])

        gross_profit = revenue.total - cost_of_sales.total
        operating_income = gross_profit - operating_expenses.total
        net_income = operating_income

        warnings: list[DataIntegrityWarning] = []
        if not (invoices or period_orders or bills or period_expenses):
            warnings.append(empty_period_warning(
                ReportType.PROFIT_AND_LOSS.value,
                period_start=period.start.isoformat(),
                period_end=period.end.isoformat(),
            ))

        with LogContext.bind(report_type=ReportType.PROFIT_AND_LOSS.value):
            logger.info(
                "profit_and_loss_built",
                extra={
                    "period_start": period.start.isoformat(),
                    "period_end": period.end.isoformat(),
                    "total_revenue": str(revenue.total),
                    "net_income": str(net_income),
                },
            )

        return ProfitAndLossReport(
            period=period,
            revenue=revenue,
            cost_of_sales=cost_of_sales,
            gross_profit=gross_profit,
            operating_expenses=operating_expenses,
            operating_income=operating_income,
            net_income=net_income,
            gross_margin=margin(gross_profit, revenue.total),
            operating_margin=margin(operating_income, revenue.total),
            net_margin=margin(net_income, revenue.total),
            warnings=tuple(warnings),
        )


# =========================================================================
# Balance Sheet
# =========================================================================


def compute_net_income_from_tb(rows: Iterable[TrialBalanceRow]) -> Decimal:
    """
    Net income = sum(REVENUE natural balances) - sum(EXPENSE natural balances).

    Unmapped rows are ignored.
    """
    revenue = _ZERO
    expense = _ZERO
    for row in rows:
        if row.account_type == AccountType.REVENUE.value:
            revenue += row.balance
        elif row.account_type == AccountType.EXPENSE.value:
            expense += row.balance
    return revenue - expense


def _line(row: TrialBalanceRow) -> StatementLine:
    return StatementLine(row.account_code, row.account_name, row.balance)


class BalanceSheetBuilder:
    """
    Builds a classified balance sheet from a trial balance.

    Contract:
        Assets and liabilities are split current / non-current by code
        prefix (unmatched codes count as current).  Equity includes the
        current-period earnings line.
    Guarantees:
        - ``is_balanced`` reflects |assets - (liabilities + equity)| < 0.01.
        - A violation is reported as balance_sheet_out_of_balance, never
          raised.
    """

    def __init__(self, config: ReportingConfig | None = None):
        self._config = config or ReportingConfig()

    def build(self, trial_balance: TrialBalanceReport) -> BalanceSheetReport:
        clf = self._config.classification
        current_assets: list[StatementLine] = []
        non_current_assets: list[StatementLine] = []
        current_liabilities: list[StatementLine] = []
        non_current_liabilities: list[StatementLine] = []
        equity_lines: list[StatementLine] = []

        for row in trial_balance.rows:
            if row.balance == _ZERO:
                continue
            if row.account_type == AccountType.ASSET.value:
                if clf.matches_prefix(row.account_code, clf.non_current_asset_prefixes):
                    non_current_assets.append(_line(row))
                else:
                    current_assets.append(_line(row))
            elif row.account_type == AccountType.LIABILITY.value:
                if clf.matches_prefix(row.account_code, clf.non_current_liability_prefixes):
                    non_current_liabilities.append(_line(row))
                else:
                    current_liabilities.append(_line(row))
            elif row.account_type == AccountType.EQUITY.value:
                equity_lines.append(_line(row))

        equity_lines.append(StatementLine(
            "current_period_earnings",
            "Current Period Earnings",
            compute_net_income_from_tb(trial_balance.rows),
        ))

        current_assets_section = make_section("Current Assets", current_assets)
        non_current_assets_section = make_section("Non-Current Assets", non_current_assets)
        current_liabilities_section = make_section("Current Liabilities", current_liabilities)
        non_current_liabilities_section = make_section(
            "Non-Current Liabilities", non_current_liabilities,
        )
        equity = make_section("Equity", equity_lines)

        total_assets = current_assets_section.total + non_current_assets_section.total
        total_liabilities = current_liabilities_section.total + non_current_liabilities_section.total
        total_l_and_e = total_liabilities + equity.total
        is_balanced = abs(total_assets - total_l_and_e) < BALANCE_TOLERANCE

        warnings: list[DataIntegrityWarning] = []
        if not is_balanced:
            warnings.append(integrity_warning(
                BALANCE_SHEET_OUT_OF_BALANCE,
                "Total assets differ from total liabilities and equity",
                total_assets=str(total_assets),
                total_liabilities_and_equity=str(total_l_and_e),
            ))

        with LogContext.bind(report_type=ReportType.BALANCE_SHEET.value):
            logger.info(
                "balance_sheet_built",
                extra={
                    "as_of": trial_balance.as_of.isoformat() if trial_balance.as_of else None,
                    "total_assets": str(total_assets),
                    "total_liabilities_and_equity": str(total_l_and_e),
                    "is_balanced": is_balanced,
                },
            )

        return BalanceSheetReport(
            as_of=trial_balance.as_of,
            current_assets=current_assets_section,
            non_current_assets=non_current_assets_section,
            total_assets=total_assets,
            current_liabilities=current_liabilities_section,
            non_current_liabilities=non_current_liabilities_section,
            total_liabilities=total_liabilities,
            equity=equity,
            total_equity=equity.total,
            total_liabilities_and_equity=total_l_and_e,
            is_balanced=is_balanced,
            warnings=tuple(warnings),
        )


# =========================================================================
# Rendering
# =========================================================================


def render_to_dict(obj: object) -> dict | list | str | int | float | bool | None:
    """
    Convert any report dataclass to plain JSON-safe values.

    Handles:
    - Decimal -> str (preserving precision)
    - date/datetime -> ISO format string
    - Enum -> .value
    - Nested frozen dataclasses -> nested dicts
    - Tuples -> lists
    - None preserved
    """
    if obj is None:
        return None
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple, set, frozenset)):
        items = sorted(obj, key=str) if isinstance(obj, (set, frozenset)) else obj
        return [render_to_dict(item) for item in items]
    if isinstance(obj, dict):
        return {str(render_to_dict(k)): render_to_dict(v) for k, v in obj.items()}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: render_to_dict(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, (str, int, float, bool)):
        return obj
    return str(obj)

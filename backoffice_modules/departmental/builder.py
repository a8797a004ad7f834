"""
DepartmentalPLBuilder -- profit and loss per hotel department.

Responsibility:
    Attribute period revenue, cost of sales and operating expenses to
    departments and derive gross profit, operating income, net income and
    margins for each, plus a consolidated total.

Architecture position:
    Modules > Departmental.  Pure function of its inputs; periods are
    resolved by the caller.

Revenue sources (by department):
    - Folio charges dated in the period: amount x quantity.
    - Orders dated in the period: total, in the order's own department.
    - Guest-invoice line items on invoices dated in the period:
      line_grand_total.
    - GL postings to revenue accounts: credit - debit.

Cost sources (by department):
    - GL postings to cost-of-sales accounts and expenses in a
      cost-of-sales category: cost of sales.
    - GL postings to operating-expense accounts and all other expenses:
      operating expenses.

Invariants enforced:
    - Every margin is value / revenue x 100, or 0 when revenue is 0.
    - The consolidated row is the sum of the department rows shown.
    - Void documents (cancelled, refunded, rejected) are ignored.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from backoffice_kernel.domain.integrity import DataIntegrityWarning, empty_period_warning
from backoffice_kernel.domain.ledger_entries import GLEntry
from backoffice_kernel.domain.periods import ReportingPeriod
from backoffice_kernel.logging_config import LogContext, get_logger
from backoffice_modules.departmental.config import DEPARTMENT_LABELS, DepartmentalConfig
from backoffice_modules.departmental.models import DepartmentalPLReport, DepartmentPL
from backoffice_modules.documents.models import (
    Department,
    Expense,
    ExpenseCategory,
    Folio,
    GuestInvoice,
    Order,
)
from backoffice_modules.reporting.config import AccountClassification
from backoffice_modules.reporting.statements import (
    VOID_EXPENSE_STATUSES,
    VOID_GUEST_INVOICE_STATUSES,
    VOID_ORDER_STATUSES,
    margin,
)

logger = get_logger("modules.departmental.builder")

_ZERO = Decimal("0")

REPORT_NAME = "departmental_pl"


@dataclass
class _Accumulator:
    revenue: Decimal = _ZERO
    cost_of_sales: Decimal = _ZERO
    operating_expenses: Decimal = _ZERO
    transactions: int = 0


def _department_of(value: str | None) -> Department | None:
    if value is None:
        return None
    try:
        return Department(value)
    except ValueError:
        return None


def _to_pl(
    department: Department | None,
    label: str,
    is_revenue_department: bool,
    acc: _Accumulator,
) -> DepartmentPL:
    gross_profit = acc.revenue - acc.cost_of_sales
    operating_income = gross_profit - acc.operating_expenses
    net_income = operating_income
    return DepartmentPL(
        department=department,
        label=label,
        is_revenue_department=is_revenue_department,
        revenue=acc.revenue,
        cost_of_sales=acc.cost_of_sales,
        gross_profit=gross_profit,
        operating_expenses=acc.operating_expenses,
        operating_income=operating_income,
        net_income=net_income,
        gross_margin=margin(gross_profit, acc.revenue),
        operating_margin=margin(operating_income, acc.revenue),
        net_margin=margin(net_income, acc.revenue),
        transactions=acc.transactions,
    )


class DepartmentalPLBuilder:
    """
    Builds departmental P&L reports.

    Non-goals:
        - Does NOT allocate undistributed costs (GL postings without a
          department) to departments; they are left out.
    """

    def __init__(
        self,
        config: DepartmentalConfig | None = None,
        classification: AccountClassification | None = None,
    ):
        self._config = config or DepartmentalConfig()
        self._clf = classification or AccountClassification()

    def build(
        self,
        period: ReportingPeriod,
        folios: Iterable[Folio] = (),
        orders: Iterable[Order] = (),
        guest_invoices: Iterable[GuestInvoice] = (),
        expenses: Iterable[Expense] = (),
        gl_entries: Iterable[GLEntry] = (),
    ) -> DepartmentalPLReport:
        cfg = self._config
        clf = self._clf
        departments = [Department(d) for d in cfg.departments]
        revenue_departments = {Department(d) for d in cfg.revenue_departments}
        cost_of_sales_categories = {ExpenseCategory(c) for c in cfg.cost_of_sales_categories}
        acc = {d: _Accumulator() for d in departments}

        for folio in folios:
            for charge in folio.charges:
                if charge.department in acc and period.contains(charge.charge_date):
                    acc[charge.department].revenue += charge.extended_amount
                    acc[charge.department].transactions += 1

        for order in orders:
            if order.status in VOID_ORDER_STATUSES or not period.contains(order.order_date):
                continue
            if order.department in acc:
                acc[order.department].revenue += order.total
                acc[order.department].transactions += 1

        for invoice in guest_invoices:
            if invoice.status in VOID_GUEST_INVOICE_STATUSES or not period.contains(invoice.invoice_date):
                continue
            for item in invoice.line_items:
                if item.department in acc:
                    acc[item.department].revenue += item.line_grand_total
                    acc[item.department].transactions += 1

        for expense in expenses:
            if expense.status in VOID_EXPENSE_STATUSES or not period.contains(expense.expense_date):
                continue
            if expense.department not in acc:
                continue
            if expense.category in cost_of_sales_categories:
                acc[expense.department].cost_of_sales += expense.amount
            else:
                acc[expense.department].operating_expenses += expense.amount

        for posting in gl_entries:
            if not period.contains(posting.transaction_date):
                continue
            department = _department_of(posting.department)
            if department not in acc:
                continue
            code = posting.account_code
            if clf.matches_prefix(code, clf.revenue_prefixes):
                acc[department].revenue += posting.credit - posting.debit
            elif clf.matches_prefix(code, clf.cost_of_sales_prefixes):
                acc[department].cost_of_sales += posting.debit - posting.credit
            elif clf.matches_prefix(code, clf.operating_expense_prefixes):
                acc[department].operating_expenses += posting.debit - posting.credit

        shown = [
            d for d in departments
            if not cfg.revenue_departments_only or d in revenue_departments
        ]
        rows = tuple(
            _to_pl(d, DEPARTMENT_LABELS.get(d, d.value), d in revenue_departments, acc[d])
            for d in shown
        )
        total = _Accumulator(
            revenue=sum((acc[d].revenue for d in shown), _ZERO),
            cost_of_sales=sum((acc[d].cost_of_sales for d in shown), _ZERO),
            operating_expenses=sum((acc[d].operating_expenses for d in shown), _ZERO),
            transactions=sum(acc[d].transactions for d in shown),
        )
        consolidated = _to_pl(None, "Consolidated", False, total)

        warnings: list[DataIntegrityWarning] = []
        if not any(
            a.transactions or a.cost_of_sales or a.operating_expenses or a.revenue
            for a in acc.values()
        ):
            warnings.append(empty_period_warning(
                REPORT_NAME,
                period_start=period.start.isoformat(),
                period_end=period.end.isoformat(),
            ))

        with LogContext.bind(report_type=REPORT_NAME):
            logger.info(
                "departmental_pl_built",
                extra={
                    "period_start": period.start.isoformat(),
                    "period_end": period.end.isoformat(),
                    "department_count": len(rows),
                    "total_revenue": str(total.revenue),
                    "net_income": str(consolidated.net_income),
                },
            )

        return DepartmentalPLReport(
            period=period,
            departments=rows,
            consolidated=consolidated,
            warnings=tuple(warnings),
        )

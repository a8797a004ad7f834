"""
BudgetVarianceAnalyzer -- budget versus actual spend per department and category.

Responsibility:
    For a resolved reporting period, prorate every included budget by the
    number of days it shares with the period, total the counted expenses
    per (department, category) and classify each variance.

Architecture position:
    Modules > Budget.  Arithmetic and classification are delegated to
    ``backoffice_engines.variance.BudgetVarianceCalculator``.

Invariants enforced:
    - variance = budgeted - actual (positive = under budget, favorable).
    - Actual spend for a (department, category) is counted once even when
      several budgets for that department overlap the period; their
      prorated allocations are added together.
    - Rows are ordered by absolute variance descending, then by label.

Failure modes:
    - None raised for data.  A period with no overlapping budgets yields no
      rows and an empty_period warning.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from decimal import Decimal

from backoffice_engines.variance import BudgetVarianceCalculator, percent_of
from backoffice_kernel.domain.integrity import DataIntegrityWarning, empty_period_warning
from backoffice_kernel.domain.periods import ReportingPeriod
from backoffice_kernel.logging_config import LogContext, get_logger
from backoffice_modules.budget.config import BudgetConfig
from backoffice_modules.budget.models import (
    Budget,
    BudgetStatus,
    BudgetVarianceReport,
    BudgetVarianceRow,
)
from backoffice_modules.documents.models import (
    Department,
    Expense,
    ExpenseCategory,
    ExpenseStatus,
)

logger = get_logger("modules.budget.analyzer")

_ZERO = Decimal("0")

REPORT_NAME = "budget_variance"


def actual_spend(
    expenses: Iterable[Expense],
    period: ReportingPeriod,
    counted_statuses: Iterable[ExpenseStatus],
) -> dict[tuple[Department, ExpenseCategory], Decimal]:
    """Counted expense totals inside ``period`` keyed by (department, category)."""
    counted = set(counted_statuses)
    totals: dict[tuple[Department, ExpenseCategory], Decimal] = defaultdict(lambda: _ZERO)
    for expense in expenses:
        if expense.status in counted and period.contains(expense.expense_date):
            totals[(expense.department, expense.category)] += expense.amount
    return dict(totals)


class BudgetVarianceAnalyzer:
    """
    Compares budgets against actual spend.

    Contract:
        ``analyze`` is a pure function of (period, budgets, expenses,
        config).
    Non-goals:
        - Does NOT write actuals back into the budgets; use
          ``Budget.with_actual`` on the result if the host wants that.
        - Expenses in a (department, category) with no budget allocation
          are not reported.
    """

    def __init__(
        self,
        config: BudgetConfig | None = None,
        calculator: BudgetVarianceCalculator | None = None,
    ):
        self._config = config or BudgetConfig()
        self._calculator = calculator or BudgetVarianceCalculator()

    def analyze(
        self,
        period: ReportingPeriod,
        budgets: Iterable[Budget],
        expenses: Iterable[Expense],
    ) -> BudgetVarianceReport:
        cfg = self._config
        included = {BudgetStatus(s) for s in cfg.included_budget_statuses}
        actuals = actual_spend(
            expenses, period, (ExpenseStatus(s) for s in cfg.counted_statuses),
        )

        allocated: dict[tuple[Department, ExpenseCategory], Decimal] = {}
        for budget in budgets:
            if budget.status not in included:
                continue
            overlap = period.overlap_days(budget.start_date, budget.end_date)
            if overlap <= 0:
                continue
            for allocation in budget.categories:
                key = (budget.department, allocation.category)
                share = self._calculator.prorate(
                    allocation.budgeted_amount, overlap, budget.total_days,
                )
                allocated[key] = allocated.get(key, _ZERO) + share

        rows = []
        for (department, category), budgeted in allocated.items():
            result = self._calculator.compare(
                budgeted=budgeted,
                actual=actuals.get((department, category), _ZERO),
                threshold_percent=cfg.threshold_percent,
            )
            rows.append(BudgetVarianceRow(
                department=department,
                category=category,
                budgeted=result.budgeted,
                actual=result.actual,
                variance=result.variance,
                variance_percent=result.variance_percent,
                status=result.status,
            ))
        rows.sort(key=lambda r: (-abs(r.variance), r.label))

        total_budgeted = sum((r.budgeted for r in rows), _ZERO)
        total_actual = sum((r.actual for r in rows), _ZERO)
        total_variance = total_budgeted - total_actual

        warnings: list[DataIntegrityWarning] = []
        if not rows:
            warnings.append(empty_period_warning(
                REPORT_NAME,
                period_start=period.start.isoformat(),
                period_end=period.end.isoformat(),
            ))

        report = BudgetVarianceReport(
            period=period,
            rows=tuple(rows),
            total_budgeted=total_budgeted,
            total_actual=total_actual,
            total_variance=total_variance,
            total_variance_percent=percent_of(total_variance, total_budgeted),
            warnings=tuple(warnings),
        )

        with LogContext.bind(report_type=REPORT_NAME):
            logger.info(
                "budget_variance_built",
                extra={
                    "period_start": period.start.isoformat(),
                    "period_end": period.end.isoformat(),
                    "row_count": len(rows),
                    "total_variance": str(total_variance),
                },
            )
        return report

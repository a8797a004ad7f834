"""
Cost and profit center analyzers.

Responsibility:
    CostCenterAnalyzer compares each cost center's budget with the
    period's spend in its department.  ProfitCenterAnalyzer sets each
    profit center's revenue against the spend of the departments of its
    linked cost centers and rates the resulting margin against target.

Architecture position:
    Modules > Centers.  Variance arithmetic is delegated to
    ``backoffice_engines.variance``; periods are resolved by the caller.

Invariants enforced:
    - Cost centers: variance = budget - actual; ranked by variance
      ascending (largest overrun first), then by code.
    - Profit centers: profit = revenue - costs; margin = profit / revenue
      x 100 (0 when revenue is 0); ranked by profit descending, then code.
    - An expense is counted at most once per profit center even when
      several linked cost centers share its department.

Failure modes:
    - None raised for data.  No centers yields an empty_period warning.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from decimal import Decimal

from backoffice_engines.variance import BudgetVarianceCalculator, percent_of
from backoffice_kernel.domain.integrity import DataIntegrityWarning, empty_period_warning
from backoffice_kernel.domain.periods import ReportingPeriod
from backoffice_kernel.logging_config import LogContext, get_logger
from backoffice_modules.budget.models import Budget, BudgetStatus
from backoffice_modules.centers.config import CenterConfig
from backoffice_modules.centers.models import (
    CategoryShare,
    CostCenter,
    CostCenterPerformance,
    CostCenterReport,
    MonthlyAmount,
    PerformanceRating,
    ProfitCenter,
    ProfitCenterPerformance,
    ProfitCenterReport,
)
from backoffice_modules.documents.models import Department, Expense, ExpenseStatus

logger = get_logger("modules.centers.analyzer")

_ZERO = Decimal("0")


def _monthly(expenses: list[Expense]) -> tuple[MonthlyAmount, ...]:
    months: dict[str, Decimal] = defaultdict(lambda: _ZERO)
    for expense in expenses:
        months[expense.expense_date.strftime("%Y-%m")] += expense.amount
    return tuple(MonthlyAmount(month, months[month]) for month in sorted(months))


class _CenterAnalyzerBase:
    def __init__(
        self,
        config: CenterConfig | None = None,
        calculator: BudgetVarianceCalculator | None = None,
    ):
        self._config = config or CenterConfig()
        self._calculator = calculator or BudgetVarianceCalculator()

    def _period_expenses(
        self,
        expenses: Iterable[Expense],
        period: ReportingPeriod,
    ) -> list[Expense]:
        excluded = {ExpenseStatus(s) for s in self._config.excluded_expense_statuses}
        return [
            e for e in expenses
            if e.status not in excluded and period.contains(e.expense_date)
        ]

    def _empty_warning(self, report: str, period: ReportingPeriod) -> DataIntegrityWarning:
        return empty_period_warning(
            report,
            period_start=period.start.isoformat(),
            period_end=period.end.isoformat(),
        )


class CostCenterAnalyzer(_CenterAnalyzerBase):
    """
    Budget versus actual per cost center.

    Contract:
        The budget is the center's own budget; when it has none, the
        prorated totals of the department's active budgets overlapping the
        period are used.
    """

    REPORT_NAME = "cost_center_performance"

    def analyze(
        self,
        period: ReportingPeriod,
        cost_centers: Iterable[CostCenter],
        expenses: Iterable[Expense],
        budgets: Iterable[Budget] = (),
    ) -> CostCenterReport:
        cfg = self._config
        spend = self._period_expenses(expenses, period)
        budgets = list(budgets)

        rows = []
        for center in cost_centers:
            if not center.is_active and not cfg.include_inactive:
                continue
            own = [e for e in spend if e.department == center.department]
            actual = sum((e.amount for e in own), _ZERO)
            budget = (
                center.budget if center.budget is not None
                else self._department_budget(center.department, budgets, period)
            )
            result = self._calculator.compare(
                budgeted=budget,
                actual=actual,
                threshold_percent=cfg.variance_threshold_percent,
            )

            by_category: dict = defaultdict(lambda: _ZERO)
            for expense in own:
                by_category[expense.category] += expense.amount
            shares = tuple(sorted(
                (CategoryShare(c, amount, percent_of(amount, actual))
                 for c, amount in by_category.items()),
                key=lambda s: (-s.amount, s.category.value),
            ))

            rows.append(CostCenterPerformance(
                cost_center=center,
                budget=budget,
                actual=actual,
                variance=result.variance,
                variance_percent=result.variance_percent,
                utilization_percent=result.utilization_percent,
                status=result.status,
                by_category=shares,
                monthly_trend=_monthly(own),
            ))
        rows.sort(key=lambda r: (r.variance, r.cost_center.code))

        total_budget = sum((r.budget for r in rows), _ZERO)
        total_actual = sum((r.actual for r in rows), _ZERO)
        warnings = [] if rows else [self._empty_warning(self.REPORT_NAME, period)]

        with LogContext.bind(report_type=self.REPORT_NAME):
            logger.info(
                "cost_center_analysis_built",
                extra={
                    "period_start": period.start.isoformat(),
                    "period_end": period.end.isoformat(),
                    "center_count": len(rows),
                    "total_variance": str(total_budget - total_actual),
                },
            )

        return CostCenterReport(
            period=period,
            centers=tuple(rows),
            total_budget=total_budget,
            total_actual=total_actual,
            total_variance=total_budget - total_actual,
            warnings=tuple(warnings),
        )

    def _department_budget(
        self,
        department: Department,
        budgets: list[Budget],
        period: ReportingPeriod,
    ) -> Decimal:
        total = _ZERO
        for budget in budgets:
            if budget.department != department or budget.status != BudgetStatus.ACTIVE:
                continue
            overlap = period.overlap_days(budget.start_date, budget.end_date)
            if overlap > 0:
                total += self._calculator.prorate(
                    budget.total_budgeted, overlap, budget.total_days,
                )
        return total


class ProfitCenterAnalyzer(_CenterAnalyzerBase):
    """Profit, margin and rating per profit center."""

    REPORT_NAME = "profit_center_performance"

    def rate(self, margin: Decimal, target_margin: Decimal) -> PerformanceRating:
        cfg = self._config
        diff = margin - target_margin
        if diff >= cfg.excellent_threshold:
            return PerformanceRating.EXCELLENT
        if diff >= cfg.good_threshold:
            return PerformanceRating.GOOD
        if diff >= cfg.average_threshold:
            return PerformanceRating.AVERAGE
        if diff >= cfg.below_average_threshold:
            return PerformanceRating.BELOW_AVERAGE
        return PerformanceRating.POOR

    def analyze(
        self,
        period: ReportingPeriod,
        profit_centers: Iterable[ProfitCenter],
        cost_centers: Iterable[CostCenter],
        expenses: Iterable[Expense],
    ) -> ProfitCenterReport:
        cfg = self._config
        spend = self._period_expenses(expenses, period)
        centers_by_id = {c.id: c for c in cost_centers}

        rows = []
        for center in profit_centers:
            if not center.is_active and not cfg.include_inactive:
                continue
            departments = {
                centers_by_id[cc_id].department
                for cc_id in center.cost_center_ids
                if cc_id in centers_by_id
            }
            linked = [e for e in spend if e.department in departments]
            costs = sum((e.amount for e in linked), _ZERO)
            revenue = center.actual_revenue
            if revenue == _ZERO and cfg.revenue_falls_back_to_target:
                revenue = center.target_revenue
            profit = revenue - costs
            margin = percent_of(profit, revenue)
            rows.append(ProfitCenterPerformance(
                profit_center=center,
                revenue=revenue,
                costs=costs,
                profit=profit,
                margin=margin,
                revenue_variance=revenue - center.target_revenue,
                profit_variance=profit - center.target_profit,
                margin_variance=margin - center.target_margin,
                rating=self.rate(margin, center.target_margin),
                monthly_costs=_monthly(linked),
            ))
        rows.sort(key=lambda r: (-r.profit, r.profit_center.code))

        total_revenue = sum((r.revenue for r in rows), _ZERO)
        total_costs = sum((r.costs for r in rows), _ZERO)
        warnings = [] if rows else [self._empty_warning(self.REPORT_NAME, period)]

        with LogContext.bind(report_type=self.REPORT_NAME):
            logger.info(
                "profit_center_analysis_built",
                extra={
                    "period_start": period.start.isoformat(),
                    "period_end": period.end.isoformat(),
                    "center_count": len(rows),
                    "total_profit": str(total_revenue - total_costs),
                },
            )

        return ProfitCenterReport(
            period=period,
            centers=tuple(rows),
            total_revenue=total_revenue,
            total_costs=total_costs,
            total_profit=total_revenue - total_costs,
            warnings=tuple(warnings),
        )

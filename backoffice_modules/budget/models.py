"""
Budget Domain Models (``backoffice_modules.budget.models``).

Budgets are frozen records.  Totals are derived properties recomputed on
every access, so they can never drift from the category allocations;
``with_category`` and ``with_actual`` return new budgets.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from enum import Enum

from backoffice_engines.variance import VarianceStatus
from backoffice_kernel.domain.integrity import DataIntegrityWarning
from backoffice_kernel.domain.periods import ReportingPeriod
from backoffice_modules.documents.models import Department, ExpenseCategory

_ZERO = Decimal("0")


class BudgetStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    CLOSED = "closed"


@dataclass(frozen=True)
class BudgetCategory:
    """One category allocation inside a budget."""

    category: ExpenseCategory
    budgeted_amount: Decimal
    actual_amount: Decimal = _ZERO

    @property
    def variance(self) -> Decimal:
        """Actual minus budgeted (positive = overspent)."""
        return self.actual_amount - self.budgeted_amount


@dataclass(frozen=True)
class Budget:
    """
    A departmental budget over an inclusive date range.

    Guarantees:
        - At most one allocation per category.
        - ``total_budgeted``/``total_actual``/``total_variance`` always
          equal the sums over ``categories``.
    """

    id: str
    budget_name: str
    department: Department
    period: str
    start_date: date
    end_date: date
    status: BudgetStatus = BudgetStatus.DRAFT
    categories: tuple[BudgetCategory, ...] = ()

    def __post_init__(self) -> None:
        if self.end_date < self.start_date:
            raise ValueError(
                f"budget {self.budget_name!r} ends before it starts"
            )
        seen = [c.category for c in self.categories]
        if len(seen) != len(set(seen)):
            raise ValueError(
                f"budget {self.budget_name!r} has duplicate categories"
            )

    @property
    def total_budgeted(self) -> Decimal:
        return sum((c.budgeted_amount for c in self.categories), _ZERO)

    @property
    def total_actual(self) -> Decimal:
        return sum((c.actual_amount for c in self.categories), _ZERO)

    @property
    def total_variance(self) -> Decimal:
        return self.total_actual - self.total_budgeted

    @property
    def total_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def category(self, category: ExpenseCategory) -> BudgetCategory | None:
        for allocation in self.categories:
            if allocation.category == category:
                return allocation
        return None

    def with_category(self, category: ExpenseCategory, budgeted_amount: Decimal) -> Budget:
        """Set the allocation for ``category``, keeping any recorded actual."""
        existing = self.category(category)
        if existing is None:
            return replace(
                self,
                categories=self.categories + (BudgetCategory(category, budgeted_amount),),
            )
        return replace(self, categories=tuple(
            replace(c, budgeted_amount=budgeted_amount) if c.category == category else c
            for c in self.categories
        ))

    def with_actual(self, category: ExpenseCategory, actual_amount: Decimal) -> Budget:
        """Record actual spend for an existing allocation."""
        if self.category(category) is None:
            raise KeyError(f"budget {self.budget_name!r} has no {category.value} allocation")
        return replace(self, categories=tuple(
            replace(c, actual_amount=actual_amount) if c.category == category else c
            for c in self.categories
        ))

    def overlaps(self, period: ReportingPeriod) -> bool:
        return period.overlap_days(self.start_date, self.end_date) > 0


@dataclass(frozen=True)
class BudgetVarianceRow:
    """Budget versus actual for one (department, category) pair."""

    department: Department
    category: ExpenseCategory
    budgeted: Decimal
    actual: Decimal
    variance: Decimal
    variance_percent: Decimal
    status: VarianceStatus

    @property
    def label(self) -> str:
        return f"{self.department.value} - {self.category.value}"

    @property
    def utilization_percent(self) -> Decimal:
        if self.budgeted <= _ZERO:
            return _ZERO
        return self.actual / self.budgeted * Decimal("100")


@dataclass(frozen=True)
class BudgetVarianceReport:
    period: ReportingPeriod
    rows: tuple[BudgetVarianceRow, ...]
    total_budgeted: Decimal
    total_actual: Decimal
    total_variance: Decimal
    total_variance_percent: Decimal
    warnings: tuple[DataIntegrityWarning, ...] = ()

    def count(self, status: VarianceStatus) -> int:
        return sum(1 for r in self.rows if r.status == status)

    def row_for(self, department: Department, category: ExpenseCategory) -> BudgetVarianceRow | None:
        for row in self.rows:
            if row.department == department and row.category == category:
                return row
        return None

"""
Cost and Profit Center Models (``backoffice_modules.centers.models``).

A ProfitCenter references CostCenters by id; it does not own them.  The
performance records are the analyzers' output view-models.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from backoffice_engines.variance import VarianceStatus
from backoffice_kernel.domain.integrity import DataIntegrityWarning
from backoffice_kernel.domain.periods import ReportingPeriod
from backoffice_modules.documents.models import Department, ExpenseCategory

_ZERO = Decimal("0")


class PerformanceRating(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    BELOW_AVERAGE = "below-average"
    POOR = "poor"


@dataclass(frozen=True)
class CostCenter:
    id: str
    code: str
    name: str
    department: Department
    budget: Decimal | None = None
    actual_cost: Decimal = _ZERO
    is_active: bool = True
    description: str = ""


@dataclass(frozen=True)
class ProfitCenter:
    id: str
    code: str
    name: str
    department: Department
    target_revenue: Decimal = _ZERO
    actual_revenue: Decimal = _ZERO
    target_profit: Decimal = _ZERO
    target_margin: Decimal = _ZERO
    cost_center_ids: frozenset[str] = frozenset()
    is_active: bool = True
    description: str = ""


@dataclass(frozen=True)
class CategoryShare:
    category: ExpenseCategory
    amount: Decimal
    percentage: Decimal


@dataclass(frozen=True)
class MonthlyAmount:
    """Spend in one calendar month ("YYYY-MM")."""

    month: str
    amount: Decimal


@dataclass(frozen=True)
class CostCenterPerformance:
    """Budget versus actual spend for one cost center."""

    cost_center: CostCenter
    budget: Decimal
    actual: Decimal
    variance: Decimal
    variance_percent: Decimal
    utilization_percent: Decimal
    status: VarianceStatus
    by_category: tuple[CategoryShare, ...] = ()
    monthly_trend: tuple[MonthlyAmount, ...] = ()


@dataclass(frozen=True)
class CostCenterReport:
    period: ReportingPeriod
    centers: tuple[CostCenterPerformance, ...]
    total_budget: Decimal
    total_actual: Decimal
    total_variance: Decimal
    warnings: tuple[DataIntegrityWarning, ...] = ()

    def for_code(self, code: str) -> CostCenterPerformance | None:
        for row in self.centers:
            if row.cost_center.code == code:
                return row
        return None


@dataclass(frozen=True)
class ProfitCenterPerformance:
    """Revenue, linked costs and margin for one profit center."""

    profit_center: ProfitCenter
    revenue: Decimal
    costs: Decimal
    profit: Decimal
    margin: Decimal
    revenue_variance: Decimal
    profit_variance: Decimal
    margin_variance: Decimal
    rating: PerformanceRating
    monthly_costs: tuple[MonthlyAmount, ...] = ()


@dataclass(frozen=True)
class ProfitCenterReport:
    period: ReportingPeriod
    centers: tuple[ProfitCenterPerformance, ...]
    total_revenue: Decimal
    total_costs: Decimal
    total_profit: Decimal
    warnings: tuple[DataIntegrityWarning, ...] = ()

    def for_code(self, code: str) -> ProfitCenterPerformance | None:
        for row in self.centers:
            if row.profit_center.code == code:
                return row
        return None

"""Departmental P&L view-models."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from backoffice_kernel.domain.integrity import DataIntegrityWarning
from backoffice_kernel.domain.periods import ReportingPeriod
from backoffice_modules.documents.models import Department


@dataclass(frozen=True)
class DepartmentPL:
    """
    Profit and loss for one department, or the consolidated total when
    ``department`` is None.
    """

    department: Department | None
    label: str
    is_revenue_department: bool
    revenue: Decimal
    cost_of_sales: Decimal
    gross_profit: Decimal
    operating_expenses: Decimal
    operating_income: Decimal
    net_income: Decimal
    gross_margin: Decimal
    operating_margin: Decimal
    net_margin: Decimal
    transactions: int


@dataclass(frozen=True)
class DepartmentalPLReport:
    period: ReportingPeriod
    departments: tuple[DepartmentPL, ...]
    consolidated: DepartmentPL
    warnings: tuple[DataIntegrityWarning, ...] = ()

    def for_department(self, department: Department) -> DepartmentPL | None:
        for row in self.departments:
            if row.department == department:
                return row
        return None

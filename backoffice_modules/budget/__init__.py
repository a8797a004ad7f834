"""
Budget Module (``backoffice_modules.budget``).

Departmental budgets with per-category allocations, and the budget versus
actual variance analysis over a reporting period.
"""

from backoffice_modules.budget.analyzer import BudgetVarianceAnalyzer, actual_spend
from backoffice_modules.budget.config import BudgetConfig
from backoffice_modules.budget.models import (
    Budget,
    BudgetCategory,
    BudgetStatus,
    BudgetVarianceReport,
    BudgetVarianceRow,
)

__all__ = [
    "Budget",
    "BudgetCategory",
    "BudgetConfig",
    "BudgetStatus",
    "BudgetVarianceAnalyzer",
    "BudgetVarianceReport",
    "BudgetVarianceRow",
    "actual_spend",
]

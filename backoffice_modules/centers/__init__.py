"""
Cost and Profit Center Module (``backoffice_modules.centers``).

Cost centers are compared with their budgets; profit centers set revenue
against the spend of their linked cost centers' departments and are rated
on margin versus target.
"""

from backoffice_modules.centers.analyzer import CostCenterAnalyzer, ProfitCenterAnalyzer
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

__all__ = [
    "CategoryShare",
    "CenterConfig",
    "CostCenter",
    "CostCenterAnalyzer",
    "CostCenterPerformance",
    "CostCenterReport",
    "MonthlyAmount",
    "PerformanceRating",
    "ProfitCenter",
    "ProfitCenterAnalyzer",
    "ProfitCenterPerformance",
    "ProfitCenterReport",
]

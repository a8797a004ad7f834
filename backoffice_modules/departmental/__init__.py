"""
Departmental P&L Module (``backoffice_modules.departmental``).

Profit and loss per hotel department from folios, orders, guest invoices,
expenses and departmental GL postings.
"""

from backoffice_modules.departmental.builder import DepartmentalPLBuilder
from backoffice_modules.departmental.config import DEPARTMENT_LABELS, DepartmentalConfig
from backoffice_modules.departmental.models import DepartmentalPLReport, DepartmentPL

__all__ = [
    "DEPARTMENT_LABELS",
    "DepartmentPL",
    "DepartmentalConfig",
    "DepartmentalPLBuilder",
    "DepartmentalPLReport",
]

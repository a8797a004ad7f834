"""Departmental P&L configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Self

from backoffice_kernel.logging_config import get_logger
from backoffice_modules.documents.models import Department

logger = get_logger("modules.departmental.config")

DEPARTMENT_LABELS: dict[Department, str] = {
    Department.FRONT_OFFICE: "Front Office (Rooms)",
    Department.HOUSEKEEPING: "Housekeeping",
    Department.FNB: "Food & Beverage",
    Department.KITCHEN: "Kitchen Operations",
    Department.ENGINEERING: "Engineering & Maintenance",
    Department.FINANCE: "Finance & Accounts",
    Department.HR: "Human Resources",
    Department.ADMIN: "Administration",
}


@dataclass
class DepartmentalConfig:
    """
    Configuration schema for the departmental P&L.

    Department and category values are the string values of the
    ``Department`` and ``ExpenseCategory`` enums.
    """

    departments: tuple[str, ...] = tuple(d.value for d in Department)
    revenue_departments: tuple[str, ...] = ("front-office", "fnb", "kitchen")

    # Expense categories booked as cost of sales; all others are
    # operating expenses.
    cost_of_sales_categories: tuple[str, ...] = ("food-beverage",)

    # Report only the revenue departments
    revenue_departments_only: bool = False

    def __post_init__(self):
        self.departments = tuple(self.departments)
        self.revenue_departments = tuple(self.revenue_departments)
        self.cost_of_sales_categories = tuple(self.cost_of_sales_categories)
        unknown = set(self.revenue_departments) - set(self.departments)
        if unknown:
            raise ValueError(
                f"revenue departments not in department list: {sorted(unknown)}"
            )

    @classmethod
    def with_defaults(cls) -> Self:
        logger.info("departmental_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        logger.info(
            "departmental_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)

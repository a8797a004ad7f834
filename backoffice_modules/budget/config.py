"""Budget variance configuration."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Self

from backoffice_engines.variance import DEFAULT_THRESHOLD_PERCENT
from backoffice_kernel.logging_config import get_logger

logger = get_logger("modules.budget.config")


@dataclass
class BudgetConfig:
    """
    Configuration schema for budget variance analysis.

    ``threshold_percent`` is applied symmetrically: a row is favorable
    above +threshold and unfavorable below -threshold.
    """

    threshold_percent: Decimal = DEFAULT_THRESHOLD_PERCENT

    # Expense statuses that count as actual spend
    counted_statuses: tuple[str, ...] = ("approved", "paid")

    # Budget statuses taken into the comparison
    included_budget_statuses: tuple[str, ...] = ("active",)

    def __post_init__(self):
        self.threshold_percent = Decimal(str(self.threshold_percent))
        if self.threshold_percent < 0:
            raise ValueError("threshold_percent cannot be negative")
        self.counted_statuses = tuple(self.counted_statuses)
        self.included_budget_statuses = tuple(self.included_budget_statuses)

    @classmethod
    def with_defaults(cls) -> Self:
        logger.info("budget_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        logger.info(
            "budget_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)

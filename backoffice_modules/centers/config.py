"""Cost and profit center configuration."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Self

from backoffice_engines.variance import DEFAULT_THRESHOLD_PERCENT
from backoffice_kernel.logging_config import get_logger

logger = get_logger("modules.centers.config")


@dataclass
class CenterConfig:
    """
    Configuration schema for the center analyzers.

    Ratings compare a profit center's margin with its target margin: the
    difference (in percentage points) must reach the threshold for the
    rating, checked from excellent downwards; anything lower is poor.
    """

    excellent_threshold: Decimal = Decimal("10")
    good_threshold: Decimal = Decimal("5")
    average_threshold: Decimal = Decimal("0")
    below_average_threshold: Decimal = Decimal("-5")

    variance_threshold_percent: Decimal = DEFAULT_THRESHOLD_PERCENT

    # Expense statuses never counted as center spend
    excluded_expense_statuses: tuple[str, ...] = ("rejected",)

    # Use target revenue when a profit center has recorded no actual revenue
    revenue_falls_back_to_target: bool = False

    include_inactive: bool = False

    def __post_init__(self):
        for name in (
            "excellent_threshold",
            "good_threshold",
            "average_threshold",
            "below_average_threshold",
            "variance_threshold_percent",
        ):
            setattr(self, name, Decimal(str(getattr(self, name))))
        if not (
            self.excellent_threshold
            >= self.good_threshold
            >= self.average_threshold
            >= self.below_average_threshold
        ):
            raise ValueError("rating thresholds must be in descending order")
        self.excluded_expense_statuses = tuple(self.excluded_expense_statuses)

    @classmethod
    def with_defaults(cls) -> Self:
        logger.info("center_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        logger.info(
            "center_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)

"""
backoffice_engines.variance -- Budget-versus-actual variance calculations.

Responsibility:
    Compare budgeted and actual amounts, express the difference as a
    percentage of budget and classify it against a symmetric threshold.
    Also prorates a budget amount over a partial period.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumed by the budget, cost-center and profit-center analyzers.

Invariants enforced:
    - ``variance = budgeted - actual``: positive means under budget.
    - ``variance_percent = variance / budgeted * 100`` when budgeted > 0,
      otherwise 0.
    - Status: favorable above +threshold, unfavorable below -threshold,
      otherwise on track.  The same threshold is used on both sides.
    - Decimal-only arithmetic; identical inputs give identical outputs.

Failure modes:
    - ValueError from ``prorate`` when total_days is not positive.
    - ValueError from ``compare`` when the threshold is negative.

Usage:
    from backoffice_engines.variance import BudgetVarianceCalculator

    calculator = BudgetVarianceCalculator()
    result = calculator.compare(
        budgeted=Decimal("1000"), actual=Decimal("1200"),
        threshold_percent=Decimal("10"),
    )
    result.variance          # Decimal("-200")
    result.variance_percent  # Decimal("-20")
    result.status            # VarianceStatus.UNFAVORABLE
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from backoffice_engines.tracer import traced_engine
from backoffice_kernel.logging_config import get_logger

logger = get_logger("engines.variance")

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")
DEFAULT_THRESHOLD_PERCENT = Decimal("10")


class VarianceStatus(str, Enum):
    """Classification of a budget variance."""

    FAVORABLE = "favorable"
    UNFAVORABLE = "unfavorable"
    ON_TRACK = "ontrack"


@dataclass(frozen=True)
class BudgetVarianceResult:
    """
    Result of one budget-versus-actual comparison.

    All fields are immutable.
    """

    budgeted: Decimal
    actual: Decimal
    variance: Decimal
    variance_percent: Decimal
    status: VarianceStatus

    @property
    def is_favorable(self) -> bool:
        return self.status == VarianceStatus.FAVORABLE

    @property
    def utilization_percent(self) -> Decimal:
        """Actual as a percentage of budget (0 when nothing was budgeted)."""
        if self.budgeted <= _ZERO:
            return _ZERO
        return self.actual / self.budgeted * _HUNDRED


def percent_of(value: Decimal, base: Decimal) -> Decimal:
    """``value / base * 100``, or 0 when base is not positive."""
    if base <= _ZERO:
        return _ZERO
    return value / base * _HUNDRED


class BudgetVarianceCalculator:
    """
    Pure calculator for budget variances.

    Contract:
        No I/O, no database access, fully deterministic.
    Guarantees:
        - ``compare`` formula: variance = budgeted - actual.
        - ``prorate`` formula: amount * overlap_days / total_days.
    Non-goals:
        - Does not decide which expenses count as actual spend.
    """

    def classify(
        self,
        variance_percent: Decimal,
        threshold_percent: Decimal = DEFAULT_THRESHOLD_PERCENT,
    ) -> VarianceStatus:
        if threshold_percent < _ZERO:
            raise ValueError("threshold_percent cannot be negative")
        if variance_percent > threshold_percent:
            return VarianceStatus.FAVORABLE
        if variance_percent < -threshold_percent:
            return VarianceStatus.UNFAVORABLE
        return VarianceStatus.ON_TRACK

    @traced_engine("budget_variance", "1.0", fingerprint_fields=("budgeted", "actual", "threshold_percent"))
    def compare(
        self,
        budgeted: Decimal,
        actual: Decimal,
        threshold_percent: Decimal = DEFAULT_THRESHOLD_PERCENT,
    ) -> BudgetVarianceResult:
        """
        Compare budgeted with actual spend.

        Postconditions:
            variance_percent is 0 when budgeted <= 0, so a zero budget is
            always reported as on track regardless of spend.
        """
        variance = budgeted - actual
        variance_percent = percent_of(variance, budgeted)
        status = self.classify(variance_percent, threshold_percent)

        logger.debug("budget_variance_calculated", extra={
            "budgeted": str(budgeted),
            "actual": str(actual),
            "variance": str(variance),
            "variance_status": status.value,
        })

        return BudgetVarianceResult(
            budgeted=budgeted,
            actual=actual,
            variance=variance,
            variance_percent=variance_percent,
            status=status,
        )

    def prorate(self, amount: Decimal, overlap_days: int, total_days: int) -> Decimal:
        """Share of ``amount`` attributable to ``overlap_days`` of ``total_days``."""
        if total_days <= 0:
            raise ValueError("total_days must be positive")
        if overlap_days >= total_days:
            return amount
        if overlap_days <= 0:
            return _ZERO
        return amount * Decimal(overlap_days) / Decimal(total_days)

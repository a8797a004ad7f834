"""Tax reconciliation view-models."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from backoffice_kernel.domain.integrity import DataIntegrityWarning
from backoffice_kernel.domain.periods import ReportingPeriod


class TaxPosition(str, Enum):
    PAYABLE = "payable"
    REFUNDABLE = "refundable"
    NIL = "nil"


@dataclass(frozen=True)
class TaxLine:
    """Tax collected or paid under one key (rate, service charge, purchases)."""

    key: str
    rate: Decimal
    base_amount: Decimal
    tax_amount: Decimal
    transaction_count: int


@dataclass(frozen=True)
class TaxTrendPoint:
    month: str
    period: ReportingPeriod
    collected: Decimal
    paid: Decimal

    @property
    def net(self) -> Decimal:
        return self.collected - self.paid


@dataclass(frozen=True)
class TaxReconciliationReport:
    """
    Output tax versus input tax for a period.

    ``net_tax_liability`` is positive when tax is owed to the authority and
    negative when a refund is due.
    """

    period: ReportingPeriod
    collected: tuple[TaxLine, ...]
    paid: tuple[TaxLine, ...]
    total_collected: Decimal
    total_paid: Decimal
    net_tax_liability: Decimal
    position: TaxPosition
    effective_rate: Decimal
    invoice_count: int
    purchase_count: int
    monthly_trend: tuple[TaxTrendPoint, ...] = ()
    warnings: tuple[DataIntegrityWarning, ...] = ()

    def collected_line(self, key: str) -> TaxLine | None:
        for line in self.collected:
            if line.key == key:
                return line
        return None

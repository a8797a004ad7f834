"""
Aging Domain Models (``backoffice_modules.aging.models``).

Frozen dataclass value objects for AP/AR aging schedules: per-bucket
tables, per-counterparty breakdowns and the collection summary.
All monetary fields are ``Decimal``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from backoffice_kernel.domain.integrity import DataIntegrityWarning


class AgingKind(str, Enum):
    PAYABLES = "AP"
    RECEIVABLES = "AR"


@dataclass(frozen=True)
class AgingInvoice:
    """One outstanding invoice with its age."""

    document_id: str
    invoice_number: str
    counterparty_name: str
    invoice_date: date
    reference_date: date
    original_amount: Decimal
    amount_due: Decimal
    days_overdue: int
    bucket: str


@dataclass(frozen=True)
class AgingBucketSummary:
    """Totals for one aging bucket."""

    name: str
    min_days: int
    max_days: int | None
    count: int
    total_amount: Decimal
    percent_of_total: Decimal
    invoices: tuple[AgingInvoice, ...] = ()


@dataclass(frozen=True)
class CounterpartyAging:
    """Outstanding balance of one supplier or guest."""

    name: str
    total_due: Decimal
    bucket_amounts: dict[str, Decimal] = field(default_factory=dict)
    invoice_count: int = 0
    oldest_days_overdue: int = 0


@dataclass(frozen=True)
class AgingSummary:
    """Collection-oriented summary of an aging schedule."""

    total_outstanding: Decimal
    invoice_count: int
    overdue_amount: Decimal
    overdue_percent: Decimal
    counterparties_with_overdue: int
    high_risk: tuple[CounterpartyAging, ...] = ()


@dataclass(frozen=True)
class AgingAnalysis:
    """Complete AP or AR aging schedule."""

    kind: AgingKind
    as_of: datetime
    buckets: tuple[AgingBucketSummary, ...]
    counterparties: tuple[CounterpartyAging, ...]
    summary: AgingSummary
    warnings: tuple[DataIntegrityWarning, ...] = ()

    def bucket(self, name: str) -> AgingBucketSummary | None:
        for bucket in self.buckets:
            if bucket.name == name:
                return bucket
        return None

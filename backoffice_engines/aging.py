"""
Aging -- days overdue and bucket classification for open documents.

Responsibility:
    Turns a (reference date, as-of instant) pair into a whole number of
    days and places that number in one of an ordered set of buckets.  The
    AP and AR analyzers decide which documents are open and what their
    reference date is; this engine only does the arithmetic.

Architecture position:
    Engines.  Pure, no clock access, no I/O beyond the trace record.

Invariants enforced:
    - days overdue = floor((as_of - reference) / 1 day); a bare date is
      midnight UTC and a naive datetime is UTC.
    - A negative age (not yet due) lands in the bucket starting at 0.
    - Report bucket totals always sum to the report total.

Failure modes:
    - ValueError when an age falls in a gap between buckets, or when a
      bucket is built with a negative lower bound or inverted bounds.

Usage:
    calculator = AgingCalculator()
    calculator.calculate_age(date(2024, 1, 15), datetime(2024, 2, 15, tzinfo=UTC))  # 31
    calculator.classify(31).name  # "31-60 Days"
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

from backoffice_engines.tracer import traced_engine
from backoffice_kernel.logging_config import get_logger

logger = get_logger("engines.aging")

_DAY = timedelta(days=1)


@dataclass(frozen=True)
class AgeBucket:
    """Inclusive day range; ``max_days=None`` means open-ended."""

    name: str
    min_days: int
    max_days: int | None

    def __post_init__(self) -> None:
        if self.min_days < 0:
            raise ValueError(f"Bucket {self.name!r}: min_days cannot be negative")
        if self.max_days is not None and self.max_days < self.min_days:
            raise ValueError(f"Bucket {self.name!r}: max_days is below min_days")

    def contains(self, age_days: int) -> bool:
        return self.min_days <= age_days and (self.max_days is None or age_days <= self.max_days)

    @property
    def is_unbounded(self) -> bool:
        return self.max_days is None


HOTEL_BUCKETS: tuple[AgeBucket, ...] = (
    AgeBucket("Current", 0, 0),
    AgeBucket("1-30 Days", 1, 30),
    AgeBucket("31-60 Days", 31, 60),
    AgeBucket("61-90 Days", 61, 90),
    AgeBucket("90+ Days", 91, None),
)


@dataclass(frozen=True)
class AgedItem:
    """One open document after classification."""

    document_id: str
    document_type: str
    reference_date: date | datetime
    amount: Decimal
    age_days: int
    bucket: AgeBucket
    counterparty_name: str
    reference: str | None = None

    @property
    def is_overdue(self) -> bool:
        return self.age_days > 0

    @property
    def days_past_due(self) -> int:
        return max(0, self.age_days)


@dataclass(frozen=True)
class AgingReport:
    """
    Aged items plus the bucket set they were classified against.

    Every per-bucket view lists all buckets in their configured order,
    including empty ones.
    """

    as_of: datetime
    buckets: tuple[AgeBucket, ...]
    items: tuple[AgedItem, ...]
    report_type: str = "standard"

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def total_amount(self) -> Decimal:
        return _sum_amounts(self.items)

    def total_by_bucket(self) -> dict[str, Decimal]:
        return self._per_bucket(lambda name: _sum_amounts(
            i for i in self.items if i.bucket.name == name
        ))

    def count_by_bucket(self) -> dict[str, int]:
        counts = Counter(i.bucket.name for i in self.items)
        return self._per_bucket(lambda name: counts[name])

    def items_for_counterparty(self, name: str) -> tuple[AgedItem, ...]:
        return tuple(i for i in self.items if i.counterparty_name == name)

    def overdue_amount(self) -> Decimal:
        return _sum_amounts(i for i in self.items if i.is_overdue)

    def _per_bucket(self, value_of: Callable[[str], object]) -> dict:
        return {bucket.name: value_of(bucket.name) for bucket in self.buckets}


def _sum_amounts(items: Iterable[AgedItem]) -> Decimal:
    return sum((i.amount for i in items), Decimal("0"))


def _instant(value: date | datetime) -> datetime:
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


class AgingCalculator:
    """Stateless; one instance can serve any number of reports."""

    DEFAULT_BUCKETS = HOTEL_BUCKETS

    def calculate_age(self, reference: date | datetime, as_of: date | datetime) -> int:
        """Whole days from ``reference`` to ``as_of``; negative when not yet due."""
        return (_instant(as_of) - _instant(reference)) // _DAY

    def classify(self, age_days: int, buckets: Sequence[AgeBucket] | None = None) -> AgeBucket:
        buckets = buckets or self.DEFAULT_BUCKETS
        if age_days < 0:
            return next((b for b in buckets if b.min_days == 0), buckets[0])

        match = next((b for b in buckets if b.contains(age_days)), None)
        if match is None:
            logger.warning("aging_bucket_gap", extra={
                "age_days": age_days,
                "bucket_count": len(buckets),
            })
            raise ValueError(f"Age {age_days} does not fit any bucket")
        return match

    def age_item(
        self,
        document_id: str,
        document_type: str,
        reference_date: date | datetime,
        amount: Decimal,
        as_of: date | datetime,
        counterparty_name: str,
        reference: str | None = None,
        buckets: Sequence[AgeBucket] | None = None,
    ) -> AgedItem:
        age_days = self.calculate_age(reference_date, as_of)
        return AgedItem(
            document_id=document_id,
            document_type=document_type,
            reference_date=reference_date,
            amount=amount,
            age_days=age_days,
            bucket=self.classify(age_days, buckets),
            counterparty_name=counterparty_name,
            reference=reference,
        )

    @traced_engine("aging", "1.0", fingerprint_fields=("items", "as_of", "report_type"))
    def generate_report(
        self,
        items: Sequence[AgedItem],
        as_of: datetime,
        buckets: Sequence[AgeBucket] | None = None,
        report_type: str = "standard",
    ) -> AgingReport:
        report = AgingReport(
            as_of=as_of,
            buckets=tuple(buckets or self.DEFAULT_BUCKETS),
            items=tuple(items),
            report_type=report_type,
        )
        logger.info("aging_report_generated", extra={
            "report_type": report_type,
            "item_count": report.item_count,
            "bucket_count": len(report.buckets),
        })
        return report

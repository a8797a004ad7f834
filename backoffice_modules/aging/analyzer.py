"""
AgingAnalyzer -- AP and AR aging schedules.

Responsibility:
    Select the outstanding supplier invoices (payables) or guest invoices
    (receivables), age each one against an as-of instant and roll the
    results up per bucket and per counterparty.

Architecture position:
    Modules > Aging.  Eligibility rules live here; day counting and bucket
    classification are delegated to ``backoffice_engines.aging``.

Invariants enforced:
    - Partition: every eligible invoice appears in exactly one bucket, so
      the bucket totals add up to the total outstanding.
    - Counterparties are ordered by total due descending, then by name.
    - The as-of instant is a parameter; the analyzer only falls back to
      its injected clock when none is given.

Failure modes:
    - ValueError from the calculator when the configured buckets leave a
      gap (prevented by ``AgingConfig`` validation).
    - An empty population is not an error; the schedule carries an
      empty_period warning.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal

from backoffice_engines.aging import AgedItem, AgingCalculator
from backoffice_engines.variance import percent_of
from backoffice_kernel.domain.clock import Clock, SystemClock
from backoffice_kernel.domain.integrity import DataIntegrityWarning, empty_period_warning
from backoffice_kernel.logging_config import LogContext, get_logger
from backoffice_modules.aging.config import AgingConfig
from backoffice_modules.aging.models import (
    AgingAnalysis,
    AgingBucketSummary,
    AgingInvoice,
    AgingKind,
    AgingSummary,
    CounterpartyAging,
)
from backoffice_modules.documents.models import (
    GuestInvoice,
    GuestInvoiceStatus,
    SupplierInvoice,
    SupplierInvoiceStatus,
)

logger = get_logger("modules.aging.analyzer")

_ZERO = Decimal("0")


class AgingAnalyzer:
    """
    Builds AP and AR aging schedules.

    Contract:
        ``analyze_payables`` and ``analyze_receivables`` are pure over their
        inputs and ``as_of``.
    Guarantees:
        - Sum of bucket totals == summary.total_outstanding.
        - Each counterparty's bucket amounts add up to its total_due.
    Non-goals:
        - Does NOT compute an allowance for doubtful accounts.
    """

    def __init__(
        self,
        config: AgingConfig | None = None,
        calculator: AgingCalculator | None = None,
        clock: Clock | None = None,
    ):
        self._config = config or AgingConfig()
        self._calculator = calculator or AgingCalculator()
        self._clock = clock or SystemClock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def analyze_payables(
        self,
        invoices: Iterable[SupplierInvoice],
        as_of: datetime | None = None,
    ) -> AgingAnalysis:
        """Aging of unpaid supplier invoices, aged from their due date."""
        as_of = as_of or self._clock.now()
        excluded = {SupplierInvoiceStatus(s) for s in self._config.ap_excluded_statuses}
        rows: list[tuple[AgedItem, AgingInvoice]] = []
        for invoice in invoices:
            if invoice.status in excluded or invoice.balance <= _ZERO:
                continue
            name = invoice.supplier_name or self._config.unknown_supplier_name
            reference_date = invoice.due_date or invoice.invoice_date
            rows.append(self._age(
                document_id=invoice.id,
                document_type="supplier_invoice",
                invoice_number=invoice.invoice_number,
                counterparty_name=name,
                invoice_date=invoice.invoice_date,
                reference_date=reference_date,
                original_amount=invoice.total,
                amount_due=invoice.balance,
                as_of=as_of,
            ))
        return self._analyze(AgingKind.PAYABLES, rows, as_of)

    def analyze_receivables(
        self,
        invoices: Iterable[GuestInvoice],
        as_of: datetime | None = None,
    ) -> AgingAnalysis:
        """Aging of unsettled guest invoices, aged from their invoice date."""
        as_of = as_of or self._clock.now()
        excluded = {GuestInvoiceStatus(s) for s in self._config.ar_excluded_statuses}
        rows: list[tuple[AgedItem, AgingInvoice]] = []
        for invoice in invoices:
            if invoice.status in excluded or invoice.amount_due <= _ZERO:
                continue
            name = invoice.guest_name or self._config.unknown_guest_name
            rows.append(self._age(
                document_id=invoice.id,
                document_type="guest_invoice",
                invoice_number=invoice.invoice_number,
                counterparty_name=name,
                invoice_date=invoice.invoice_date,
                reference_date=invoice.invoice_date,
                original_amount=invoice.grand_total,
                amount_due=invoice.amount_due,
                as_of=as_of,
            ))
        return self._analyze(AgingKind.RECEIVABLES, rows, as_of)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _age(
        self,
        document_id,
        document_type,
        invoice_number,
        counterparty_name,
        invoice_date,
        reference_date,
        original_amount,
        amount_due,
        as_of,
    ) -> tuple[AgedItem, AgingInvoice]:
        item = self._calculator.age_item(
            document_id=document_id,
            document_type=document_type,
            reference_date=reference_date,
            amount=amount_due,
            as_of=as_of,
            counterparty_name=counterparty_name,
            reference=invoice_number,
            buckets=self._config.buckets,
        )
        detail = AgingInvoice(
            document_id=document_id,
            invoice_number=invoice_number,
            counterparty_name=counterparty_name,
            invoice_date=invoice_date,
            reference_date=reference_date,
            original_amount=original_amount,
            amount_due=amount_due,
            days_overdue=item.days_past_due,
            bucket=item.bucket.name,
        )
        return item, detail

    def _analyze(
        self,
        kind: AgingKind,
        rows: list[tuple[AgedItem, AgingInvoice]],
        as_of: datetime,
    ) -> AgingAnalysis:
        buckets = self._config.buckets
        report = self._calculator.generate_report(
            items=[item for item, _ in rows],
            as_of=as_of,
            buckets=buckets,
            report_type=kind.value,
        )
        total = report.total_amount
        totals = report.total_by_bucket()
        counts = report.count_by_bucket()

        by_bucket: dict[str, list[AgingInvoice]] = defaultdict(list)
        for _, detail in rows:
            by_bucket[detail.bucket].append(detail)

        bucket_summaries = tuple(
            AgingBucketSummary(
                name=bucket.name,
                min_days=bucket.min_days,
                max_days=bucket.max_days,
                count=counts[bucket.name],
                total_amount=totals[bucket.name],
                percent_of_total=percent_of(totals[bucket.name], total),
                invoices=tuple(sorted(
                    by_bucket[bucket.name],
                    key=lambda d: (-d.days_overdue, d.invoice_number),
                )),
            )
            for bucket in buckets
        )

        counterparties = self._counterparties(rows)
        current_name = buckets[0].name
        overdue_amount = total - totals[current_name]
        high_risk = tuple(sorted(
            (c for c in counterparties
             if c.bucket_amounts.get(self._config.high_risk_bucket, _ZERO) > _ZERO),
            key=lambda c: (-c.total_due, c.name),
        ))
        summary = AgingSummary(
            total_outstanding=total,
            invoice_count=report.item_count,
            overdue_amount=overdue_amount,
            overdue_percent=percent_of(overdue_amount, total),
            counterparties_with_overdue=sum(
                1 for c in counterparties
                if c.total_due - c.bucket_amounts.get(current_name, _ZERO) > _ZERO
            ),
            high_risk=high_risk,
        )

        warnings: list[DataIntegrityWarning] = []
        if not rows:
            warnings.append(empty_period_warning(
                f"{kind.value.lower()}_aging", as_of=as_of.isoformat(),
            ))

        with LogContext.bind(report_type=f"{kind.value.lower()}_aging"):
            logger.info(
                "aging_analysis_built",
                extra={
                    "aging_kind": kind.value,
                    "as_of": as_of.isoformat(),
                    "invoice_count": report.item_count,
                    "total_outstanding": str(total),
                    "high_risk_count": len(high_risk),
                },
            )

        return AgingAnalysis(
            kind=kind,
            as_of=as_of,
            buckets=bucket_summaries,
            counterparties=counterparties,
            summary=summary,
            warnings=tuple(warnings),
        )

    def _counterparties(
        self,
        rows: list[tuple[AgedItem, AgingInvoice]],
    ) -> tuple[CounterpartyAging, ...]:
        bucket_names = [b.name for b in self._config.buckets]
        grouped: dict[str, list[AgingInvoice]] = defaultdict(list)
        for _, detail in rows:
            grouped[detail.counterparty_name].append(detail)

        result = []
        for name, details in grouped.items():
            amounts = {b: _ZERO for b in bucket_names}
            for detail in details:
                amounts[detail.bucket] += detail.amount_due
            result.append(CounterpartyAging(
                name=name,
                total_due=sum((d.amount_due for d in details), _ZERO),
                bucket_amounts=amounts,
                invoice_count=len(details),
                oldest_days_overdue=max(d.days_overdue for d in details),
            ))
        result.sort(key=lambda c: (-c.total_due, c.name))
        return tuple(result)

"""
TaxReconciliationEngine -- output tax versus input tax.

Responsibility:
    Separate tax collected from guests (line-item tax and service charges
    on guest invoices) from tax paid to suppliers (supplier-invoice tax),
    group each side by key and derive the net liability.

Architecture position:
    Modules > Tax.  Pure function of (period, guest invoices, supplier
    invoices); periods are resolved by the caller or by ``tax_period``.

Invariants enforced:
    - net_tax_liability = total_collected - total_paid.
    - Output keys are "Tax {rate}%" per distinct line-item rate plus
      "Service Charge"; the single input key is "Input Tax (Purchase)".
    - Collected lines are ordered by rate then key; void invoices are
      ignored.
    - A calendar-year period also gets a twelve-month trend.

Failure modes:
    - InvalidPeriodError from ``tax_period`` for an unknown kind or a
      missing month/quarter.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from backoffice_kernel.domain.integrity import DataIntegrityWarning, empty_period_warning
from backoffice_kernel.domain.periods import (
    ReportingPeriod,
    month_period,
    quarter_period,
    year_period,
)
from backoffice_kernel.exceptions import InvalidPeriodError
from backoffice_kernel.logging_config import LogContext, get_logger
from backoffice_modules.documents.models import GuestInvoice, SupplierInvoice
from backoffice_modules.reporting.statements import (
    VOID_GUEST_INVOICE_STATUSES,
    VOID_SUPPLIER_INVOICE_STATUSES,
)
from backoffice_modules.tax.models import (
    TaxLine,
    TaxPosition,
    TaxReconciliationReport,
    TaxTrendPoint,
)

logger = get_logger("modules.tax.engine")

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")

SERVICE_CHARGE_KEY = "Service Charge"
INPUT_TAX_KEY = "Input Tax (Purchase)"
REPORT_NAME = "tax_reconciliation"


def tax_period(
    kind: str,
    year: int,
    month: int | None = None,
    quarter: int | None = None,
) -> ReportingPeriod:
    """
    Filing period for a tax return.

    ``kind`` is "month" (with ``month`` 1-12), "quarter" (with ``quarter``
    1-4) or "year".
    """
    if kind == "month":
        if month is None or not 1 <= month <= 12:
            raise InvalidPeriodError(kind, "month must be 1-12")
        return month_period(year, month)
    if kind == "quarter":
        if quarter is None:
            raise InvalidPeriodError(kind, "quarter is required")
        return quarter_period(year, quarter)
    if kind == "year":
        return year_period(year)
    raise InvalidPeriodError(kind, "tax period must be month, quarter or year")


def rate_key(rate: Decimal) -> str:
    """Output-tax key for a rate: ``Tax 10%`` for Decimal("10.00")."""
    text = format(Decimal(rate).normalize(), "f")
    return f"Tax {text}%"


@dataclass
class _Bucket:
    rate: Decimal
    base_amount: Decimal = _ZERO
    tax_amount: Decimal = _ZERO
    transaction_count: int = 0

    def freeze(self, key: str) -> TaxLine:
        return TaxLine(
            key=key,
            rate=self.rate,
            base_amount=self.base_amount,
            tax_amount=self.tax_amount,
            transaction_count=self.transaction_count,
        )


class TaxReconciliationEngine:
    """
    Reconciles output and input tax.

    Non-goals:
        - Does NOT compute tax on documents; it only totals the amounts
          the documents carry.
        - Does NOT post the settlement journal entry.
    """

    def reconcile(
        self,
        period: ReportingPeriod,
        guest_invoices: Iterable[GuestInvoice] = (),
        supplier_invoices: Iterable[SupplierInvoice] = (),
    ) -> TaxReconciliationReport:
        guests = [
            inv for inv in guest_invoices
            if inv.status not in VOID_GUEST_INVOICE_STATUSES
        ]
        suppliers = [
            inv for inv in supplier_invoices
            if inv.status not in VOID_SUPPLIER_INVOICE_STATUSES
        ]
        period_guests = [inv for inv in guests if period.contains(inv.invoice_date)]
        period_suppliers = [inv for inv in suppliers if period.contains(inv.invoice_date)]

        collected: dict[str, _Bucket] = {}
        for invoice in period_guests:
            for item in invoice.line_items:
                if item.tax_amount > _ZERO:
                    key = rate_key(item.tax_rate)
                    bucket = collected.setdefault(key, _Bucket(rate=item.tax_rate))
                    bucket.tax_amount += item.tax_amount
                    bucket.base_amount += item.subtotal
                    bucket.transaction_count += 1
            if invoice.service_charge > _ZERO:
                bucket = collected.setdefault(SERVICE_CHARGE_KEY, _Bucket(rate=_ZERO))
                bucket.tax_amount += invoice.service_charge
                bucket.transaction_count += 1

        paid: dict[str, _Bucket] = {}
        for invoice in period_suppliers:
            if invoice.tax > _ZERO:
                bucket = paid.setdefault(INPUT_TAX_KEY, _Bucket(rate=_ZERO))
                bucket.tax_amount += invoice.tax
                bucket.base_amount += invoice.subtotal
                bucket.transaction_count += 1

        collected_lines = tuple(sorted(
            (b.freeze(k) for k, b in collected.items()),
            key=lambda line: (line.key == SERVICE_CHARGE_KEY, line.rate, line.key),
        ))
        paid_lines = tuple(b.freeze(k) for k, b in sorted(paid.items()))

        total_collected = sum((line.tax_amount for line in collected_lines), _ZERO)
        total_paid = sum((line.tax_amount for line in paid_lines), _ZERO)
        net = total_collected - total_paid
        if net > _ZERO:
            position = TaxPosition.PAYABLE
        elif net < _ZERO:
            position = TaxPosition.REFUNDABLE
        else:
            position = TaxPosition.NIL

        collected_base = sum((line.base_amount for line in collected_lines), _ZERO)
        effective_rate = (
            total_collected / collected_base * _HUNDRED if collected_base > _ZERO else _ZERO
        )

        trend: tuple[TaxTrendPoint, ...] = ()
        if period.is_calendar_year:
            trend = self._monthly_trend(period.start.year, guests, suppliers)

        warnings: list[DataIntegrityWarning] = []
        if not period_guests and not period_suppliers:
            warnings.append(empty_period_warning(
                REPORT_NAME,
                period_start=period.start.isoformat(),
                period_end=period.end.isoformat(),
            ))

        with LogContext.bind(report_type=REPORT_NAME):
            logger.info(
                "tax_reconciliation_built",
                extra={
                    "period_start": period.start.isoformat(),
                    "period_end": period.end.isoformat(),
                    "total_collected": str(total_collected),
                    "total_paid": str(total_paid),
                    "tax_position": position.value,
                },
            )

        return TaxReconciliationReport(
            period=period,
            collected=collected_lines,
            paid=paid_lines,
            total_collected=total_collected,
            total_paid=total_paid,
            net_tax_liability=net,
            position=position,
            effective_rate=effective_rate,
            invoice_count=len(period_guests),
            purchase_count=len(period_suppliers),
            monthly_trend=trend,
            warnings=tuple(warnings),
        )

    def _monthly_trend(
        self,
        year: int,
        guests: list[GuestInvoice],
        suppliers: list[SupplierInvoice],
    ) -> tuple[TaxTrendPoint, ...]:
        points = []
        for month in range(1, 13):
            window = month_period(year, month)
            collected = _ZERO
            for invoice in guests:
                if window.contains(invoice.invoice_date):
                    collected += sum(
                        (i.tax_amount for i in invoice.line_items if i.tax_amount > _ZERO),
                        _ZERO,
                    )
                    if invoice.service_charge > _ZERO:
                        collected += invoice.service_charge
            paid = sum(
                (inv.tax for inv in suppliers
                 if window.contains(inv.invoice_date) and inv.tax > _ZERO),
                _ZERO,
            )
            points.append(TaxTrendPoint(
                month=calendar.month_abbr[month],
                period=window,
                collected=collected,
                paid=paid,
            ))
        return tuple(points)

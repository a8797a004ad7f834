"""
AP/AR Aging Module (``backoffice_modules.aging``).

Responsibility
--------------
Aging schedules for unpaid supplier invoices (payables, aged from the due
date) and unsettled guest invoices (receivables, aged from the invoice
date): bucket tables, counterparty breakdowns and a collection summary.

Architecture position
---------------------
**Modules layer** -- read-only.  Day counting and bucket classification
come from ``backoffice_engines.aging``.
"""

from backoffice_modules.aging.analyzer import AgingAnalyzer
from backoffice_modules.aging.config import AgingConfig
from backoffice_modules.aging.models import (
    AgingAnalysis,
    AgingBucketSummary,
    AgingInvoice,
    AgingKind,
    AgingSummary,
    CounterpartyAging,
)

__all__ = [
    "AgingAnalysis",
    "AgingAnalyzer",
    "AgingBucketSummary",
    "AgingConfig",
    "AgingInvoice",
    "AgingKind",
    "AgingSummary",
    "CounterpartyAging",
]

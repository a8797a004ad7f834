"""
Pure domain layer.

This package contains immutable data types and pure rules with NO
dependencies on:
- ORM (SQLAlchemy)
- Database
- Wall-clock time (a Clock is always injected)
- I/O
"""

from backoffice_kernel.domain.accounts import (
    Account,
    AccountType,
    ChartOfAccountsRegistry,
    NormalBalance,
)
from backoffice_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from backoffice_kernel.domain.integrity import DataIntegrityWarning
from backoffice_kernel.domain.journal import (
    ALLOWED_TRANSITIONS,
    BALANCE_TOLERANCE,
    AuditRecord,
    JournalEntry,
    JournalEntryDraft,
    JournalEntryLine,
    JournalEntryStatus,
    JournalLineDraft,
    JournalType,
    PostingSource,
    collect_violations,
    fiscal_period_of,
    fiscal_year_of,
)
from backoffice_kernel.domain.ledger_entries import GLEntry, materialize_postings
from backoffice_kernel.domain.numbering import JournalNumberGenerator
from backoffice_kernel.domain.periods import (
    PeriodToken,
    ReportingPeriod,
    month_period,
    quarter_period,
    resolve_period,
    year_period,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "BALANCE_TOLERANCE",
    "Account",
    "AccountType",
    "AuditRecord",
    "ChartOfAccountsRegistry",
    "Clock",
    "DataIntegrityWarning",
    "DeterministicClock",
    "GLEntry",
    "JournalEntry",
    "JournalEntryDraft",
    "JournalEntryLine",
    "JournalEntryStatus",
    "JournalLineDraft",
    "JournalNumberGenerator",
    "JournalType",
    "NormalBalance",
    "PeriodToken",
    "PostingSource",
    "ReportingPeriod",
    "SystemClock",
    "collect_violations",
    "fiscal_period_of",
    "fiscal_year_of",
    "materialize_postings",
    "month_period",
    "quarter_period",
    "resolve_period",
    "year_period",
]

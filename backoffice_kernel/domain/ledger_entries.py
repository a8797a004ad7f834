"""
GL postings -- the append-only read model every report consumes.

A GLEntry is materialized once per journal line at the moment the entry
posts, and never changes afterwards.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from backoffice_kernel.domain.journal import JournalEntry, ZERO


@dataclass(frozen=True)
class GLEntry:
    """A single immutable ledger posting derived from a posted line."""

    id: str
    journal_entry_id: str
    journal_number: str
    line_number: int
    account_id: str
    account_code: str
    debit: Decimal
    credit: Decimal
    transaction_date: date
    posting_date: datetime
    fiscal_period: str
    department: str | None = None
    description: str = ""
    source_document_number: str | None = None

    @property
    def net_debit(self) -> Decimal:
        """Debit minus credit."""
        return self.debit - self.credit

    @property
    def is_debit(self) -> bool:
        return self.debit > ZERO


def materialize_postings(
    entry: JournalEntry,
    id_factory: Callable[[], str],
) -> tuple[GLEntry, ...]:
    """
    Build one GLEntry per line of a posted entry, in line order.

    The line description wins over the entry description when present.
    """
    if entry.posting_date is None:
        raise ValueError(f"Entry {entry.id} has no posting_date")

    return tuple(
        GLEntry(
            id=id_factory(),
            journal_entry_id=entry.id,
            journal_number=entry.journal_number,
            line_number=line.line_number,
            account_id=line.account_id,
            account_code=line.account_code,
            debit=line.debit,
            credit=line.credit,
            transaction_date=entry.transaction_date,
            posting_date=entry.posting_date,
            fiscal_period=entry.fiscal_period,
            department=line.department,
            description=line.description or entry.description,
            source_document_number=entry.reference or entry.journal_number,
        )
        for line in entry.lines
    )

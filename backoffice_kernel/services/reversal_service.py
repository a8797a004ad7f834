"""
ReversalEngine -- derives a reversing journal entry from a posted one.

Responsibility:
    Validates reversal preconditions, builds the mirror entry (debits and
    credits swapped line for line), posts it immediately and links the
    original to it.

Architecture position:
    Kernel > Services -- thin orchestrator over ``JournalEntryLedger``.

Invariants enforced:
    - Only POSTED entries with no existing reversal can be reversed.
    - reversal.total_debit == original.total_credit and vice versa, so the
      pair nets to zero on every account touched.
    - Same accounts, same line order, same departments.
    - Reversals are self-approving: status POSTED on creation.
    - All-or-nothing: the reversal, the original's link and the new GL
      postings are committed together or not at all.

Failure modes:
    - NotPostedError: original is not posted.
    - AlreadyReversedError: original already has ``reversed_by_entry_id``.
    - EntryNotFoundError: unknown entry id.

Audit relevance:
    The reversal records ``reversal_of_entry_id`` and the original records
    ``reversed_by_entry_id``; both entries gain audit records naming the
    actor.  Posted lines of the original are never touched.
"""

from __future__ import annotations

from dataclasses import dataclass

from backoffice_kernel.domain.journal import (
    AuditRecord,
    JournalEntry,
    JournalEntryLine,
    JournalEntryStatus,
    PostingSource,
    fiscal_period_of,
    fiscal_year_of,
)
from backoffice_kernel.exceptions import AlreadyReversedError, NotPostedError
from backoffice_kernel.logging_config import LogContext, get_logger
from backoffice_kernel.services.journal_ledger import JournalEntryLedger

logger = get_logger("services.reversal")


@dataclass(frozen=True)
class ReversalResult:
    """The linked original and the newly posted reversal."""

    original: JournalEntry
    reversal: JournalEntry


class ReversalEngine:
    """
    Reverses posted journal entries.

    Contract:
        ``reverse`` either returns a ReversalResult with both records
        updated in the ledger, or raises without changing anything.

    Non-goals:
        - Does NOT support partial (line-level) reversals.
        - Does NOT choose an effective date; the reversal is dated "now".
    """

    def __init__(self, ledger: JournalEntryLedger):
        self._ledger = ledger

    def reverse(
        self,
        entry_id: str,
        actor_id: str,
        reason: str | None = None,
    ) -> ReversalResult:
        """
        Reverse a posted entry.

        Raises:
            NotPostedError: entry status is not POSTED.
            AlreadyReversedError: entry was already reversed.
        """
        original = self._ledger.get(entry_id)

        if original.status != JournalEntryStatus.POSTED:
            logger.warning(
                "reversal_rejected_not_posted",
                extra={"entry_id": entry_id, "status": original.status.value},
            )
            raise NotPostedError(entry_id, original.status.value)

        if original.reversed_by_entry_id is not None:
            logger.warning(
                "reversal_rejected_already_reversed",
                extra={
                    "entry_id": entry_id,
                    "reversed_by_entry_id": original.reversed_by_entry_id,
                },
            )
            raise AlreadyReversedError(entry_id, original.reversed_by_entry_id)

        reversal = self._build_reversal(original, actor_id, reason)
        linked = self._ledger.record_reversal(original.id, reversal, actor_id)

        with LogContext.bind(entry_id=reversal.id, journal_number=reversal.journal_number, actor_id=actor_id):
            logger.info(
                "reversal_completed",
                extra={
                    "original_entry_id": original.id,
                    "original_journal_number": original.journal_number,
                    "line_count": len(reversal.lines),
                    "total_debit": str(reversal.total_debit),
                    "reason": reason,
                },
            )
        return ReversalResult(original=linked, reversal=reversal)

    def _build_reversal(
        self,
        original: JournalEntry,
        actor_id: str,
        reason: str | None,
    ) -> JournalEntry:
        now = self._ledger.clock.now()
        today = now.date()

        lines = tuple(
            JournalEntryLine(
                line_number=line.line_number,
                account_id=line.account_id,
                account_code=line.account_code,
                account_name=line.account_name,
                debit=line.credit,
                credit=line.debit,
                description=line.description,
                department=line.department,
            )
            for line in original.lines
        )

        return JournalEntry(
            id=self._ledger.new_id(),
            journal_number=self._ledger.next_journal_number(),
            journal_type=original.journal_type,
            status=JournalEntryStatus.POSTED,
            transaction_date=today,
            fiscal_period=fiscal_period_of(today),
            fiscal_year=fiscal_year_of(today),
            source=PostingSource.REVERSAL,
            description=f"Reversal of {original.journal_number}: {original.description}",
            lines=lines,
            posting_date=now,
            reference=original.journal_number,
            notes=reason,
            is_reversal=True,
            reversal_of_entry_id=original.id,
            created_by=actor_id,
            created_at=now,
            updated_at=now,
            audit_trail=(
                AuditRecord(
                    action="posted",
                    actor_id=actor_id,
                    timestamp=now,
                    to_status=JournalEntryStatus.POSTED,
                    note=reason,
                ),
            ),
        )

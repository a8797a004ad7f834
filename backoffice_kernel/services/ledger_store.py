"""
LedgerStore -- optional relational persistence for the journal ledger.

Responsibility:
    Saves journal entries (with lines and audit trail) and GL postings to a
    SQLAlchemy session and loads them back as frozen domain records, so a
    ``JournalEntryLedger`` can be rebuilt with ``entries=`` / ``gl_entries=``.

Architecture position:
    Kernel > Services.  Adapter between the in-memory ledger and
    backoffice_kernel.models.  The caller owns the session and the
    transaction boundary (see ``db.engine.session_scope``).

Invariants enforced:
    - GL postings are insert-only; saving an existing posting is a no-op.
    - A stored posted entry only ever receives its reversal link and audit
      trail; the immutability listeners reject anything else.

Failure modes:
    - ImmutabilityViolationError from the ORM listeners on forbidden writes.
    - IntegrityError on duplicate journal numbers.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from backoffice_kernel.domain.journal import JournalEntry
from backoffice_kernel.domain.ledger_entries import GLEntry
from backoffice_kernel.logging_config import get_logger
from backoffice_kernel.models.journal import (
    GLEntryModel,
    JournalEntryModel,
    JournalLineModel,
    _audit_to_json,
)

logger = get_logger("services.ledger_store")


class LedgerStore:
    """Reads and writes ledger records through one session."""

    def __init__(self, session: Session):
        self._session = session

    def save_entry(self, entry: JournalEntry) -> JournalEntryModel:
        """Insert or update one entry.  Flushes but does not commit."""
        model = self._session.get(JournalEntryModel, entry.id)

        if model is None:
            model = JournalEntryModel.from_dto(entry)
            self._session.add(model)
        elif model.is_posted:
            model.reversed_by_entry_id = entry.reversed_by_entry_id
            model.audit_trail = [_audit_to_json(r) for r in entry.audit_trail]
            model.updated_at = entry.updated_at
        else:
            model.apply(entry)
            self._sync_lines(model, entry)

        self._session.flush()
        logger.debug(
            "journal_entry_saved",
            extra={"entry_id": entry.id, "journal_number": entry.journal_number},
        )
        return model

    def save_gl_entries(self, postings: Iterable[GLEntry]) -> int:
        """Insert postings not yet stored.  Returns the number inserted."""
        postings = list(postings)
        if not postings:
            return 0
        existing = set(
            self._session.scalars(
                select(GLEntryModel.id).where(GLEntryModel.id.in_([p.id for p in postings]))
            )
        )
        inserted = 0
        for posting in postings:
            if posting.id in existing:
                continue
            self._session.add(GLEntryModel.from_dto(posting))
            inserted += 1
        self._session.flush()
        logger.info("gl_entries_saved", extra={"inserted": inserted})
        return inserted

    def save_ledger(self, entries: Iterable[JournalEntry], postings: Iterable[GLEntry]) -> None:
        """Save a ledger snapshot, typically ``ledger.entries()`` and ``ledger.gl_entries()``."""
        for entry in entries:
            self.save_entry(entry)
        self.save_gl_entries(postings)

    def load_entries(self) -> tuple[JournalEntry, ...]:
        rows = self._session.scalars(
            select(JournalEntryModel).order_by(JournalEntryModel.journal_number)
        )
        return tuple(row.to_dto() for row in rows)

    def load_gl_entries(self) -> tuple[GLEntry, ...]:
        rows = self._session.scalars(
            select(GLEntryModel).order_by(
                GLEntryModel.posting_date,
                GLEntryModel.journal_number,
                GLEntryModel.line_number,
            )
        )
        return tuple(row.to_dto() for row in rows)

    def _sync_lines(self, model: JournalEntryModel, entry: JournalEntry) -> None:
        # Update in place by line number; same-key delete+insert in one flush
        # would collide on the identity map.
        by_number = {line.line_number: line for line in model.lines}
        wanted = {line.line_number for line in entry.lines}

        for line in entry.lines:
            row = by_number.get(line.line_number)
            if row is None:
                model.lines.append(JournalLineModel.from_dto(entry.id, line))
                continue
            row.account_id = line.account_id
            row.account_code = line.account_code
            row.account_name = line.account_name
            row.debit = line.debit
            row.credit = line.credit
            row.description = line.description
            row.department = line.department

        for number, row in by_number.items():
            if number not in wanted:
                model.lines.remove(row)

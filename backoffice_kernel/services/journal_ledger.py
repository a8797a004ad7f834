"""
JournalEntryLedger -- validates, balances and transitions journal entries.

Responsibility:
    Turns ``JournalEntryDraft`` input into fully populated ``JournalEntry``
    records, drives the approval state machine, and at posting time
    materializes the immutable GL postings every report reads.

Architecture position:
    Kernel > Services -- imperative shell over the pure domain types.
    Depends on ChartOfAccountsRegistry for account lookups and on an
    injected Clock for every timestamp.

Invariants enforced:
    - Every posted entry is balanced (|debits - credits| < 0.01).
    - Posted entries are immutable; their lines can never be edited.
    - GL postings are appended only at posting (one per line), never changed.
    - Journal numbers are unique.
    - All-or-nothing: a rejected operation leaves entries and postings
      exactly as they were.

Failure modes:
    - ValidationError: draft has one or more violations (all reported).
    - UnbalancedEntryError: posting an unbalanced entry.
    - ImmutableEntryError: editing a posted entry.
    - InvalidTransitionError: status change not in the allowed map.
    - EntryNotFoundError: unknown entry id.
    - DuplicateJournalNumberError: host supplied entries with clashing numbers.

Audit relevance:
    Each create/update/transition appends an AuditRecord naming the actor.
    The host is expected to serialize calls; there is no internal locking.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import replace
from uuid import uuid4

from backoffice_kernel.domain.accounts import ChartOfAccountsRegistry
from backoffice_kernel.domain.clock import Clock, SystemClock
from backoffice_kernel.domain.journal import (
    AuditRecord,
    JournalEntry,
    JournalEntryDraft,
    JournalEntryLine,
    JournalEntryStatus,
    can_transition,
    collect_violations,
    fiscal_period_of,
    fiscal_year_of,
    parse_transaction_date,
    to_amount,
)
from backoffice_kernel.domain.ledger_entries import GLEntry, materialize_postings
from backoffice_kernel.domain.numbering import JournalNumberGenerator
from backoffice_kernel.exceptions import (
    DuplicateJournalNumberError,
    EntryNotFoundError,
    ImmutableEntryError,
    InvalidTransitionError,
    UnbalancedEntryError,
    ValidationError,
    Violation,
)
from backoffice_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.journal_ledger")


def _default_id() -> str:
    return str(uuid4())


class JournalEntryLedger:
    """
    Authoritative in-memory store of journal entries and GL postings.

    Contract:
        Every mutating method takes the acting user's id explicitly and
        returns the new frozen record.  Reports are computed from
        ``gl_entries()`` on demand; nothing is cached.

    Guarantees:
        - ``create`` and ``update`` only ever store fully validated entries.
        - ``transition`` to POSTED sets ``posting_date`` from the clock and
          appends one GLEntry per line.
        - Entries are returned in insertion order.

    Non-goals:
        - Does NOT persist anything (see ``LedgerStore``).
        - Does NOT lock; the host serializes calls.
    """

    def __init__(
        self,
        chart: ChartOfAccountsRegistry,
        clock: Clock | None = None,
        id_factory: Callable[[], str] | None = None,
        number_generator: JournalNumberGenerator | None = None,
        entries: Iterable[JournalEntry] = (),
        gl_entries: Iterable[GLEntry] = (),
    ):
        self._chart = chart
        self._clock = clock or SystemClock()
        self._new_id = id_factory or _default_id
        self._numbers = number_generator or JournalNumberGenerator()
        self._entries: dict[str, JournalEntry] = {}
        self._by_number: dict[str, str] = {}
        self._gl: list[GLEntry] = list(gl_entries)

        for entry in entries:
            if entry.journal_number in self._by_number:
                raise DuplicateJournalNumberError(entry.journal_number)
            self._entries[entry.id] = entry
            self._by_number[entry.journal_number] = entry.id
        self._numbers.observe(self._by_number)

        logger.info(
            "journal_ledger_initialized",
            extra={
                "entry_count": len(self._entries),
                "gl_entry_count": len(self._gl),
                "account_count": len(chart),
            },
        )

    @property
    def chart(self) -> ChartOfAccountsRegistry:
        return self._chart

    @property
    def clock(self) -> Clock:
        return self._clock

    # =========================================================================
    # Validation
    # =========================================================================

    def collect_violations(self, draft: JournalEntryDraft) -> tuple[Violation, ...]:
        """All problems with a draft, without raising."""
        return collect_violations(draft, self._chart)

    def validate(self, draft: JournalEntryDraft) -> None:
        """
        Validate a draft entry.

        Raises:
            ValidationError: listing every violation found.
        """
        violations = self.collect_violations(draft)
        if violations:
            logger.warning(
                "journal_entry_validation_failed",
                extra={
                    "violation_count": len(violations),
                    "violation_codes": [v.code for v in violations],
                },
            )
            raise ValidationError(violations)

    # =========================================================================
    # Mutations
    # =========================================================================

    def create(self, draft: JournalEntryDraft, actor_id: str) -> JournalEntry:
        """
        Validate a draft and store it as a new DRAFT entry.

        Postconditions:
            - A unique journal number is assigned.
            - fiscal_period / fiscal_year derive from transaction_date.
            - Lines are numbered 1..n in input order.
        """
        self.validate(draft)

        now = self._clock.now()
        transaction_date = parse_transaction_date(draft.transaction_date)
        entry_id = self._new_id()
        journal_number = self._numbers.next()

        entry = JournalEntry(
            id=entry_id,
            journal_number=journal_number,
            journal_type=draft.journal_type,
            status=JournalEntryStatus.DRAFT,
            transaction_date=transaction_date,
            fiscal_period=fiscal_period_of(transaction_date),
            fiscal_year=fiscal_year_of(transaction_date),
            source=draft.source,
            description=draft.description.strip(),
            lines=self._build_lines(draft),
            reference=draft.reference,
            notes=draft.notes,
            created_by=actor_id,
            created_at=now,
            updated_at=now,
            audit_trail=(
                AuditRecord(
                    action="created",
                    actor_id=actor_id,
                    timestamp=now,
                    to_status=JournalEntryStatus.DRAFT,
                ),
            ),
        )
        self._store(entry)

        with LogContext.bind(entry_id=entry_id, journal_number=journal_number, actor_id=actor_id):
            logger.info(
                "journal_entry_created",
                extra={
                    "journal_type": entry.journal_type.value,
                    "fiscal_period": entry.fiscal_period,
                    "line_count": len(entry.lines),
                    "total_debit": str(entry.total_debit),
                },
            )
        return entry

    def update(
        self,
        entry_id: str,
        draft: JournalEntryDraft,
        actor_id: str,
    ) -> JournalEntry:
        """
        Replace the header and lines of a non-posted entry.

        Status, journal number and audit history are kept.

        Raises:
            ImmutableEntryError: entry is posted.
            ValidationError: draft has violations.
        """
        current = self.get(entry_id)
        if current.is_posted:
            logger.warning(
                "journal_entry_edit_blocked",
                extra={"entry_id": entry_id, "journal_number": current.journal_number},
            )
            raise ImmutableEntryError(entry_id, current.journal_number)

        self.validate(draft)

        now = self._clock.now()
        transaction_date = parse_transaction_date(draft.transaction_date)
        updated = replace(
            current,
            journal_type=draft.journal_type,
            transaction_date=transaction_date,
            fiscal_period=fiscal_period_of(transaction_date),
            fiscal_year=fiscal_year_of(transaction_date),
            source=draft.source,
            description=draft.description.strip(),
            lines=self._build_lines(draft),
            reference=draft.reference,
            notes=draft.notes,
            updated_at=now,
            audit_trail=current.audit_trail + (
                AuditRecord(action="updated", actor_id=actor_id, timestamp=now),
            ),
        )
        self._entries[entry_id] = updated

        logger.info(
            "journal_entry_updated",
            extra={
                "entry_id": entry_id,
                "journal_number": updated.journal_number,
                "line_count": len(updated.lines),
            },
        )
        return updated

    def transition(
        self,
        entry_id: str,
        target_status: JournalEntryStatus,
        actor_id: str,
        note: str | None = None,
    ) -> JournalEntry:
        """
        Move an entry along the approval state machine.

        Posting additionally requires a balanced entry, stamps
        ``posting_date`` and materializes GL postings.

        Raises:
            InvalidTransitionError: not an allowed transition.
            UnbalancedEntryError: posting an unbalanced entry.
        """
        target_status = JournalEntryStatus(target_status)
        current = self.get(entry_id)

        if not can_transition(current.status, target_status):
            logger.warning(
                "journal_entry_transition_rejected",
                extra={
                    "entry_id": entry_id,
                    "from_status": current.status.value,
                    "to_status": target_status.value,
                },
            )
            raise InvalidTransitionError(
                entry_id, current.status.value, target_status.value,
            )

        if target_status == JournalEntryStatus.POSTED and not current.is_balanced:
            logger.warning(
                "journal_entry_post_unbalanced",
                extra={
                    "entry_id": entry_id,
                    "total_debit": str(current.total_debit),
                    "total_credit": str(current.total_credit),
                },
            )
            raise UnbalancedEntryError(
                entry_id, str(current.total_debit), str(current.total_credit),
            )

        now = self._clock.now()
        record = AuditRecord(
            action="posted" if target_status == JournalEntryStatus.POSTED else "status_changed",
            actor_id=actor_id,
            timestamp=now,
            from_status=current.status,
            to_status=target_status,
            note=note,
        )
        changes: dict = {
            "status": target_status,
            "updated_at": now,
            "audit_trail": current.audit_trail + (record,),
        }
        if target_status == JournalEntryStatus.POSTED:
            changes["posting_date"] = now
        updated = replace(current, **changes)

        postings: tuple[GLEntry, ...] = ()
        if updated.is_posted:
            postings = materialize_postings(updated, self._new_id)

        # Commit both together
        self._entries[entry_id] = updated
        self._gl.extend(postings)

        with LogContext.bind(entry_id=entry_id, journal_number=updated.journal_number, actor_id=actor_id):
            logger.info(
                "journal_entry_posted" if updated.is_posted else "journal_entry_transitioned",
                extra={
                    "from_status": current.status.value,
                    "to_status": target_status.value,
                    "gl_entries_created": len(postings),
                },
            )
        return updated

    def record_reversal(
        self,
        original_id: str,
        reversal: JournalEntry,
        actor_id: str,
    ) -> JournalEntry:
        """
        Store a posted reversal and link the original to it.

        Called by ``ReversalEngine`` after it has checked preconditions and
        built the reversal.  Returns the updated original.
        """
        original = self.get(original_id)
        now = self._clock.now()
        linked = replace(
            original,
            reversed_by_entry_id=reversal.id,
            updated_at=now,
            audit_trail=original.audit_trail + (
                AuditRecord(
                    action="reversed",
                    actor_id=actor_id,
                    timestamp=now,
                    note=f"Reversed by {reversal.journal_number}",
                ),
            ),
        )
        postings = materialize_postings(reversal, self._new_id)

        self._store(reversal)
        self._entries[original_id] = linked
        self._gl.extend(postings)
        return linked

    def next_journal_number(self) -> str:
        return self._numbers.next()

    def new_id(self) -> str:
        return self._new_id()

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self, entry_id: str) -> JournalEntry:
        entry = self._entries.get(entry_id)
        if entry is None:
            raise EntryNotFoundError(entry_id)
        return entry

    def find_by_number(self, journal_number: str) -> JournalEntry | None:
        entry_id = self._by_number.get(journal_number)
        return self._entries.get(entry_id) if entry_id else None

    def entries(
        self,
        status: JournalEntryStatus | None = None,
    ) -> tuple[JournalEntry, ...]:
        if status is None:
            return tuple(self._entries.values())
        return tuple(e for e in self._entries.values() if e.status == status)

    def gl_entries(self) -> tuple[GLEntry, ...]:
        return tuple(self._gl)

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _store(self, entry: JournalEntry) -> None:
        if entry.journal_number in self._by_number:
            raise DuplicateJournalNumberError(entry.journal_number)
        self._entries[entry.id] = entry
        self._by_number[entry.journal_number] = entry.id

    def _build_lines(self, draft: JournalEntryDraft) -> tuple[JournalEntryLine, ...]:
        lines = []
        for number, line in enumerate(draft.lines, start=1):
            account = self._chart.get(line.account_id)
            lines.append(
                JournalEntryLine(
                    line_number=number,
                    account_id=account.id,
                    account_code=account.code,
                    account_name=account.name,
                    debit=to_amount(line.debit),
                    credit=to_amount(line.credit),
                    description=line.description or "",
                    department=line.department,
                )
            )
        return tuple(lines)

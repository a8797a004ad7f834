"""
Module: backoffice_kernel.domain.journal
Responsibility: Pure journal-entry types -- drafts (unvalidated input),
    fully populated entries and lines, the status state machine, fiscal
    period derivation, and the validation rules applied to drafts.
Architecture position: Kernel > Domain.  Pure, zero I/O.  Consumed by
    ``JournalEntryLedger`` and ``ReversalEngine``.

Invariants enforced:
    - A JournalEntry is frozen; the ledger replaces records rather than
      mutating them.
    - Totals and ``is_balanced`` are derived from lines on every access and
      cannot drift from them.
    - Balanced means |total_debit - total_credit| < 0.01.
    - Allowed transitions: draft -> pending-approval -> approved -> posted,
      and draft / pending-approval / approved -> rejected.

Failure modes:
    - ``collect_violations`` never raises; it returns every problem found.

Audit relevance:
    Each entry carries an append-only audit trail of who did what and when.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from backoffice_kernel.domain.accounts import ChartOfAccountsRegistry
from backoffice_kernel.exceptions import Violation

BALANCE_TOLERANCE = Decimal("0.01")
ZERO = Decimal("0")


class JournalEntryStatus(str, Enum):
    """Lifecycle status of a journal entry."""

    DRAFT = "draft"
    PENDING_APPROVAL = "pending-approval"
    APPROVED = "approved"
    POSTED = "posted"
    REJECTED = "rejected"


class JournalType(str, Enum):
    """Book of original entry."""

    GENERAL = "general"
    SALES = "sales"
    PURCHASE = "purchase"
    CASH_RECEIPTS = "cash-receipts"
    CASH_PAYMENTS = "cash-payments"
    PAYROLL = "payroll"
    DEPRECIATION = "depreciation"
    ACCRUAL = "accrual"
    ADJUSTMENT = "adjustment"


class PostingSource(str, Enum):
    """Where an entry came from."""

    MANUAL = "manual"
    SYSTEM = "system"
    NIGHT_AUDIT = "night-audit"
    REVERSAL = "reversal"
    IMPORT = "import"


ALLOWED_TRANSITIONS: dict[JournalEntryStatus, frozenset[JournalEntryStatus]] = {
    JournalEntryStatus.DRAFT: frozenset(
        {JournalEntryStatus.PENDING_APPROVAL, JournalEntryStatus.REJECTED}
    ),
    JournalEntryStatus.PENDING_APPROVAL: frozenset(
        {JournalEntryStatus.APPROVED, JournalEntryStatus.REJECTED}
    ),
    JournalEntryStatus.APPROVED: frozenset(
        {JournalEntryStatus.POSTED, JournalEntryStatus.REJECTED}
    ),
    JournalEntryStatus.POSTED: frozenset(),
    JournalEntryStatus.REJECTED: frozenset(),
}


def can_transition(
    from_status: JournalEntryStatus,
    to_status: JournalEntryStatus,
) -> bool:
    return to_status in ALLOWED_TRANSITIONS.get(from_status, frozenset())


def fiscal_period_of(value: date) -> str:
    """Year-month bucket, e.g. ``"2024-03"``."""
    return f"{value.year:04d}-{value.month:02d}"


def fiscal_year_of(value: date) -> str:
    return f"{value.year:04d}"


def parse_transaction_date(value: Any) -> date | None:
    """
    Normalize a transaction date.

    Returns None when the value is missing.  Accepts ``date``, ``datetime``
    (reduced to its date) and ISO-8601 strings.

    Raises:
        ValueError: if a value is present but is not a valid date.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip()[:10])
    raise ValueError(f"Cannot parse date from {value!r}")


def to_amount(value: Any) -> Decimal:
    """Coerce a line amount to Decimal.  Floats go through ``str``."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


# =========================================================================
# Drafts (unvalidated input)
# =========================================================================


@dataclass(frozen=True)
class JournalLineDraft:
    """One proposed line of a journal entry."""

    account_id: str | None
    debit: Any = ZERO
    credit: Any = ZERO
    description: str = ""
    department: str | None = None


@dataclass(frozen=True)
class JournalEntryDraft:
    """
    Input to ``JournalEntryLedger.create`` / ``update``.

    A draft is never stored.  The ledger validates it and produces a fully
    populated ``JournalEntry``.
    """

    description: str | None
    transaction_date: Any
    lines: Sequence[JournalLineDraft]
    journal_type: JournalType = JournalType.GENERAL
    source: PostingSource = PostingSource.MANUAL
    reference: str | None = None
    notes: str | None = None


# =========================================================================
# Entries
# =========================================================================


@dataclass(frozen=True)
class JournalEntryLine:
    """A validated journal line.  Exactly one of debit/credit is non-zero."""

    line_number: int
    account_id: str
    account_code: str
    account_name: str
    debit: Decimal
    credit: Decimal
    description: str = ""
    department: str | None = None

    @property
    def is_debit(self) -> bool:
        return self.debit > ZERO


@dataclass(frozen=True)
class AuditRecord:
    """One step in an entry's audit trail."""

    action: str
    actor_id: str
    timestamp: datetime
    from_status: JournalEntryStatus | None = None
    to_status: JournalEntryStatus | None = None
    note: str | None = None


@dataclass(frozen=True)
class JournalEntry:
    """
    A journal entry as held by the ledger.

    Contract:
        Frozen.  Lines are immutable once ``status`` is POSTED; the only
        later change a posted entry may receive is ``reversed_by_entry_id``.
    Guarantees:
        - ``total_debit``/``total_credit``/``is_balanced`` are derived from
          ``lines`` on access.
        - ``posting_date`` is set if and only if the entry is posted.
    """

    id: str
    journal_number: str
    journal_type: JournalType
    status: JournalEntryStatus
    transaction_date: date
    fiscal_period: str
    fiscal_year: str
    source: PostingSource
    description: str
    lines: tuple[JournalEntryLine, ...]
    posting_date: datetime | None = None
    reference: str | None = None
    notes: str | None = None
    is_reversal: bool = False
    reversal_of_entry_id: str | None = None
    reversed_by_entry_id: str | None = None
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    audit_trail: tuple[AuditRecord, ...] = field(default=())

    @property
    def total_debit(self) -> Decimal:
        return sum((line.debit for line in self.lines), ZERO)

    @property
    def total_credit(self) -> Decimal:
        return sum((line.credit for line in self.lines), ZERO)

    @property
    def difference(self) -> Decimal:
        return self.total_debit - self.total_credit

    @property
    def is_balanced(self) -> bool:
        return abs(self.difference) < BALANCE_TOLERANCE

    @property
    def is_posted(self) -> bool:
        return self.status == JournalEntryStatus.POSTED

    @property
    def is_reversed(self) -> bool:
        return self.reversed_by_entry_id is not None


# =========================================================================
# Validation
# =========================================================================


def collect_violations(
    draft: JournalEntryDraft,
    chart: ChartOfAccountsRegistry,
) -> tuple[Violation, ...]:
    """
    Run every validation rule against a draft.

    Rules are not short-circuited; the result lists all problems found, in
    header -> line -> balance order.
    """
    violations: list[Violation] = []

    if not (draft.description or "").strip():
        violations.append(Violation(
            "description", "missing_description", "Description is required",
        ))

    try:
        parsed = parse_transaction_date(draft.transaction_date)
    except (ValueError, TypeError):
        violations.append(Violation(
            "transaction_date", "invalid_transaction_date",
            f"Transaction date {draft.transaction_date!r} is not a valid date",
        ))
    else:
        if parsed is None:
            violations.append(Violation(
                "transaction_date", "missing_transaction_date",
                "Transaction date is required",
            ))

    lines = list(draft.lines or ())
    if len(lines) < 2:
        violations.append(Violation(
            "lines", "too_few_lines",
            f"At least 2 lines are required, got {len(lines)}",
        ))

    total_debit = ZERO
    total_credit = ZERO
    for index, line in enumerate(lines, start=1):
        prefix = f"lines[{index}]"

        if not line.account_id:
            violations.append(Violation(
                f"{prefix}.account_id", "missing_account",
                f"Line {index}: account is required",
            ))
        else:
            account = chart.find(line.account_id)
            if account is None:
                violations.append(Violation(
                    f"{prefix}.account_id", "unknown_account",
                    f"Line {index}: account {line.account_id} does not exist",
                ))
            elif not account.is_active:
                violations.append(Violation(
                    f"{prefix}.account_id", "inactive_account",
                    f"Line {index}: account {account.code} is inactive",
                ))

        try:
            debit = to_amount(line.debit)
            credit = to_amount(line.credit)
        except (InvalidOperation, ValueError, TypeError):
            violations.append(Violation(
                f"{prefix}.amount", "invalid_amount",
                f"Line {index}: amounts must be numeric",
            ))
            continue
        if not (debit.is_finite() and credit.is_finite()):
            violations.append(Violation(
                f"{prefix}.amount", "invalid_amount",
                f"Line {index}: amounts must be finite",
            ))
            continue

        if debit < ZERO or credit < ZERO:
            violations.append(Violation(
                f"{prefix}.amount", "negative_amount",
                f"Line {index}: amounts cannot be negative",
            ))
        if debit == ZERO and credit == ZERO:
            violations.append(Violation(
                f"{prefix}.amount", "zero_amount",
                f"Line {index}: either debit or credit must be non-zero",
            ))
        elif debit != ZERO and credit != ZERO:
            violations.append(Violation(
                f"{prefix}.amount", "both_debit_and_credit",
                f"Line {index}: a line cannot carry both debit and credit",
            ))

        total_debit += debit
        total_credit += credit

    if abs(total_debit - total_credit) >= BALANCE_TOLERANCE:
        violations.append(Violation(
            "lines", "unbalanced_entry",
            f"Entry is not balanced: debits={total_debit}, credits={total_credit}",
        ))

    return tuple(violations)

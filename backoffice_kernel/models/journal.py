"""
Module: backoffice_kernel.models.journal
Responsibility: ORM persistence for journal entries, their lines, and the GL
    postings materialized at posting time.
Architecture position: Kernel > Models.  May import from db/base.py and the
    domain types it converts to and from.
Invariants enforced:
    - journal_number is unique (uq_journal_number).
    - Lines are ordered by line_number and owned by their entry.
    - Posted entries, their lines and GL postings are immutable
      (db/immutability.py listeners).
Failure modes:
    - IntegrityError on duplicate journal numbers.
Audit relevance:
    The audit trail is stored with the entry as JSON so a reload reproduces
    the full history.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import JSON, Boolean, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backoffice_kernel.db.base import Base
from backoffice_kernel.domain.journal import (
    AuditRecord,
    JournalEntry,
    JournalEntryLine,
    JournalEntryStatus,
    JournalType,
    PostingSource,
)
from backoffice_kernel.domain.ledger_entries import GLEntry


def _utc(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo on the way back
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class JournalEntryModel(Base):
    """Stored journal entry header."""

    __tablename__ = "journal_entries"

    __table_args__ = (
        UniqueConstraint("journal_number", name="uq_journal_number"),
        Index("idx_journal_status", "status"),
        Index("idx_journal_fiscal_period", "fiscal_period"),
    )

    journal_number: Mapped[str] = mapped_column(String(32), nullable=False)
    journal_type: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    transaction_date: Mapped[date] = mapped_column(nullable=False)
    posting_date: Mapped[datetime | None] = mapped_column(nullable=True)
    fiscal_period: Mapped[str] = mapped_column(String(7), nullable=False)
    fiscal_year: Mapped[str] = mapped_column(String(4), nullable=False)
    source: Mapped[str] = mapped_column(String(32), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    reference: Mapped[str | None] = mapped_column(String(100), nullable=True)
    notes: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    is_reversal: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reversal_of_entry_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    reversed_by_entry_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime | None] = mapped_column(nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(nullable=True)
    audit_trail: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    lines: Mapped[list["JournalLineModel"]] = relationship(
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="JournalLineModel.line_number",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<JournalEntryModel {self.journal_number} status={self.status}>"

    @property
    def is_posted(self) -> bool:
        return self.status == JournalEntryStatus.POSTED.value

    def to_dto(self) -> JournalEntry:
        """Convert ORM model to the frozen domain entry."""
        return JournalEntry(
            id=self.id,
            journal_number=self.journal_number,
            journal_type=JournalType(self.journal_type),
            status=JournalEntryStatus(self.status),
            transaction_date=self.transaction_date,
            fiscal_period=self.fiscal_period,
            fiscal_year=self.fiscal_year,
            source=PostingSource(self.source),
            description=self.description,
            lines=tuple(line.to_dto() for line in self.lines),
            posting_date=_utc(self.posting_date),
            reference=self.reference,
            notes=self.notes,
            is_reversal=self.is_reversal,
            reversal_of_entry_id=self.reversal_of_entry_id,
            reversed_by_entry_id=self.reversed_by_entry_id,
            created_by=self.created_by,
            created_at=_utc(self.created_at),
            updated_at=_utc(self.updated_at),
            audit_trail=tuple(_audit_from_json(r) for r in self.audit_trail or ()),
        )

    @classmethod
    def from_dto(cls, entry: JournalEntry) -> "JournalEntryModel":
        """Build a new ORM row (with lines) from a domain entry."""
        model = cls(id=entry.id, journal_number=entry.journal_number)
        model.apply(entry)
        model.lines = [JournalLineModel.from_dto(entry.id, line) for line in entry.lines]
        return model

    def apply(self, entry: JournalEntry) -> None:
        """Copy header fields from a domain entry onto this row."""
        self.journal_type = entry.journal_type.value
        self.status = entry.status.value
        self.transaction_date = entry.transaction_date
        self.posting_date = entry.posting_date
        self.fiscal_period = entry.fiscal_period
        self.fiscal_year = entry.fiscal_year
        self.source = entry.source.value
        self.description = entry.description
        self.reference = entry.reference
        self.notes = entry.notes
        self.is_reversal = entry.is_reversal
        self.reversal_of_entry_id = entry.reversal_of_entry_id
        self.reversed_by_entry_id = entry.reversed_by_entry_id
        self.created_by = entry.created_by
        self.created_at = entry.created_at
        self.updated_at = entry.updated_at
        self.audit_trail = [_audit_to_json(r) for r in entry.audit_trail]


class JournalLineModel(Base):
    """Stored journal line."""

    __tablename__ = "journal_lines"

    __table_args__ = (
        UniqueConstraint("entry_id", "line_number", name="uq_journal_line_number"),
    )

    entry_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("journal_entries.id"), nullable=False,
    )
    line_number: Mapped[int] = mapped_column(Integer, nullable=False)
    account_id: Mapped[str] = mapped_column(String(64), nullable=False)
    account_code: Mapped[str] = mapped_column(String(32), nullable=False)
    account_name: Mapped[str] = mapped_column(String(255), nullable=False)
    debit: Mapped[Decimal] = mapped_column(nullable=False)
    credit: Mapped[Decimal] = mapped_column(nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    department: Mapped[str | None] = mapped_column(String(64), nullable=True)

    entry: Mapped["JournalEntryModel"] = relationship(back_populates="lines")

    def to_dto(self) -> JournalEntryLine:
        return JournalEntryLine(
            line_number=self.line_number,
            account_id=self.account_id,
            account_code=self.account_code,
            account_name=self.account_name,
            debit=Decimal(self.debit),
            credit=Decimal(self.credit),
            description=self.description,
            department=self.department,
        )

    @classmethod
    def from_dto(cls, entry_id: str, line: JournalEntryLine) -> "JournalLineModel":
        return cls(
            id=f"{entry_id}:{line.line_number}",
            entry_id=entry_id,
            line_number=line.line_number,
            account_id=line.account_id,
            account_code=line.account_code,
            account_name=line.account_name,
            debit=line.debit,
            credit=line.credit,
            description=line.description,
            department=line.department,
        )


class GLEntryModel(Base):
    """Stored GL posting.  Insert-only."""

    __tablename__ = "gl_entries"

    __table_args__ = (
        Index("idx_gl_account_code", "account_code"),
        Index("idx_gl_transaction_date", "transaction_date"),
    )

    journal_entry_id: Mapped[str] = mapped_column(String(64), nullable=False)
    journal_number: Mapped[str] = mapped_column(String(32), nullable=False)
    line_number: Mapped[int] = mapped_column(Integer, nullable=False)
    account_id: Mapped[str] = mapped_column(String(64), nullable=False)
    account_code: Mapped[str] = mapped_column(String(32), nullable=False)
    debit: Mapped[Decimal] = mapped_column(nullable=False)
    credit: Mapped[Decimal] = mapped_column(nullable=False)
    transaction_date: Mapped[date] = mapped_column(nullable=False)
    posting_date: Mapped[datetime] = mapped_column(nullable=False)
    fiscal_period: Mapped[str] = mapped_column(String(7), nullable=False)
    department: Mapped[str | None] = mapped_column(String(64), nullable=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    source_document_number: Mapped[str | None] = mapped_column(String(100), nullable=True)

    def to_dto(self) -> GLEntry:
        return GLEntry(
            id=self.id,
            journal_entry_id=self.journal_entry_id,
            journal_number=self.journal_number,
            line_number=self.line_number,
            account_id=self.account_id,
            account_code=self.account_code,
            debit=Decimal(self.debit),
            credit=Decimal(self.credit),
            transaction_date=self.transaction_date,
            posting_date=_utc(self.posting_date),
            fiscal_period=self.fiscal_period,
            department=self.department,
            description=self.description,
            source_document_number=self.source_document_number,
        )

    @classmethod
    def from_dto(cls, posting: GLEntry) -> "GLEntryModel":
        return cls(
            id=posting.id,
            journal_entry_id=posting.journal_entry_id,
            journal_number=posting.journal_number,
            line_number=posting.line_number,
            account_id=posting.account_id,
            account_code=posting.account_code,
            debit=posting.debit,
            credit=posting.credit,
            transaction_date=posting.transaction_date,
            posting_date=posting.posting_date,
            fiscal_period=posting.fiscal_period,
            department=posting.department,
            description=posting.description,
            source_document_number=posting.source_document_number,
        )


def _audit_to_json(record: AuditRecord) -> dict:
    return {
        "action": record.action,
        "actor_id": record.actor_id,
        "timestamp": record.timestamp.isoformat(),
        "from_status": record.from_status.value if record.from_status else None,
        "to_status": record.to_status.value if record.to_status else None,
        "note": record.note,
    }


def _audit_from_json(data: dict) -> AuditRecord:
    return AuditRecord(
        action=data["action"],
        actor_id=data["actor_id"],
        timestamp=datetime.fromisoformat(data["timestamp"]),
        from_status=JournalEntryStatus(data["from_status"]) if data.get("from_status") else None,
        to_status=JournalEntryStatus(data["to_status"]) if data.get("to_status") else None,
        note=data.get("note"),
    )

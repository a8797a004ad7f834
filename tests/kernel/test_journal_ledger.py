"""
Tests for JournalEntryLedger.

Covers:
- Draft validation (all violations reported at once)
- Creation: numbering, fiscal period, line numbering, audit trail
- Update of non-posted entries, rejection for posted ones
- The approval state machine and posting side effects
- Loading host-supplied entries
"""

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

import pytest

from backoffice_kernel.domain.journal import (
    JournalEntry,
    JournalEntryDraft,
    JournalEntryStatus,
    JournalLineDraft,
    JournalType,
    PostingSource,
)
from backoffice_kernel.exceptions import (
    DuplicateJournalNumberError,
    EntryNotFoundError,
    ImmutableEntryError,
    InvalidTransitionError,
    UnbalancedEntryError,
    ValidationError,
)
from backoffice_kernel.services.journal_ledger import JournalEntryLedger
from tests.conftest import TEST_ACTOR_ID, account_id, make_draft, post, sequential_ids


def _codes(exc: ValidationError) -> list[str]:
    return [v.code for v in exc.violations]


class TestValidation:
    """Tests for draft validation."""

    def test_valid_draft_has_no_violations(self, ledger):
        """A balanced two-line draft passes."""
        draft = make_draft([("1000", 500, 0), ("4100", 0, 500)])

        assert ledger.collect_violations(draft) == ()
        ledger.validate(draft)

    def test_all_violations_reported_together(self, ledger):
        """Every rule runs; nothing is short-circuited."""
        draft = JournalEntryDraft(
            description="  ",
            transaction_date=None,
            lines=[JournalLineDraft(account_id=None, debit=0, credit=0)],
        )

        with pytest.raises(ValidationError) as exc_info:
            ledger.validate(draft)

        assert _codes(exc_info.value) == [
            "missing_description",
            "missing_transaction_date",
            "too_few_lines",
            "missing_account",
            "zero_amount",
        ]

    def test_unbalanced_draft(self, ledger):
        """Debits and credits differing by 0.01 or more are rejected."""
        draft = make_draft([("1000", "100.00", 0), ("4100", 0, "99.99")])

        with pytest.raises(ValidationError) as exc_info:
            ledger.validate(draft)

        assert _codes(exc_info.value) == ["unbalanced_entry"]

    def test_difference_below_tolerance_is_balanced(self, ledger):
        """A sub-cent difference is within tolerance."""
        draft = make_draft([("1000", "100.005", 0), ("4100", 0, "100.00")])

        assert ledger.collect_violations(draft) == ()

    def test_invalid_transaction_date(self, ledger):
        """An unparseable date is its own violation."""
        draft = make_draft(
            [("1000", 10, 0), ("4100", 0, 10)],
            transaction_date="not-a-date",
        )

        assert _codes(pytest.raises(ValidationError, ledger.validate, draft).value) == [
            "invalid_transaction_date",
        ]

    def test_unknown_and_inactive_accounts(self, ledger):
        """Lines must reference existing, active accounts."""
        draft = JournalEntryDraft(
            description="Bad accounts",
            transaction_date=date(2024, 3, 1),
            lines=[
                JournalLineDraft(account_id="acc-missing", debit=Decimal("10")),
                JournalLineDraft(account_id=account_id("6900"), credit=Decimal("10")),
            ],
        )

        codes = [v.code for v in ledger.collect_violations(draft)]

        assert codes == ["unknown_account", "inactive_account"]

    def test_line_with_both_sides(self, ledger):
        """A line may not carry both debit and credit."""
        draft = make_draft([("1000", 10, 10), ("4100", 0, 0)])

        codes = [v.code for v in ledger.collect_violations(draft)]

        assert "both_debit_and_credit" in codes
        assert "zero_amount" in codes

    def test_negative_amount(self, ledger):
        """Negative amounts are rejected."""
        draft = make_draft([("1000", -10, 0), ("4100", 0, -10)])

        codes = [v.code for v in ledger.collect_violations(draft)]

        assert codes.count("negative_amount") == 2

    @pytest.mark.parametrize("amount", [float("nan"), "Infinity", Decimal("-Infinity")])
    def test_non_finite_amount(self, ledger, amount):
        """NaN and infinite amounts come back as violations."""
        draft = JournalEntryDraft(
            description="Non-finite",
            transaction_date=date(2024, 3, 10),
            lines=[
                JournalLineDraft(account_id=account_id("1000"), debit=amount),
                JournalLineDraft(account_id=account_id("4100"), credit=Decimal("10")),
            ],
        )

        with pytest.raises(ValidationError) as exc_info:
            ledger.validate(draft)

        assert _codes(exc_info.value) == ["invalid_amount", "unbalanced_entry"]

    def test_violation_fields_name_the_line(self, ledger):
        """Line violations point at the offending line."""
        draft = make_draft([("1000", 10, 0), ("", 0, 10)])

        violation = ledger.collect_violations(draft)[0]

        assert violation.field == "lines[2].account_id"


class TestCreate:
    """Tests for entry creation."""

    def test_create_assigns_number_and_period(self, ledger):
        """New entries are numbered and bucketed by transaction date."""
        entry = ledger.create(
            make_draft([("1000", 500, 0), ("4100", 0, 500)], transaction_date="2024-02-29"),
            TEST_ACTOR_ID,
        )

        assert entry.journal_number == "JE-000001"
        assert entry.status == JournalEntryStatus.DRAFT
        assert entry.transaction_date == date(2024, 2, 29)
        assert entry.fiscal_period == "2024-02"
        assert entry.fiscal_year == "2024"
        assert entry.posting_date is None

    def test_lines_numbered_in_order(self, ledger):
        """Lines get contiguous 1-based numbers and account details."""
        entry = ledger.create(
            make_draft([("1000", 300, 0), ("1010", 200, 0), ("4100", 0, 500)]),
            TEST_ACTOR_ID,
        )

        assert [line.line_number for line in entry.lines] == [1, 2, 3]
        assert [line.account_code for line in entry.lines] == ["1000", "1010", "4100"]
        assert entry.lines[2].account_name == "Room Revenue"
        assert entry.total_debit == Decimal("500")
        assert entry.total_credit == Decimal("500")
        assert entry.is_balanced

    def test_numbers_are_unique(self, ledger):
        """Each created entry gets the next number."""
        first = ledger.create(make_draft([("1000", 1, 0), ("4100", 0, 1)]), TEST_ACTOR_ID)
        second = ledger.create(make_draft([("1000", 2, 0), ("4100", 0, 2)]), TEST_ACTOR_ID)

        assert first.journal_number != second.journal_number
        assert ledger.find_by_number(second.journal_number) == second

    def test_created_audit_record(self, ledger, deterministic_clock):
        """Creation is recorded with actor and clock time."""
        entry = ledger.create(make_draft([("1000", 1, 0), ("4100", 0, 1)]), TEST_ACTOR_ID)

        assert len(entry.audit_trail) == 1
        record = entry.audit_trail[0]
        assert record.action == "created"
        assert record.actor_id == TEST_ACTOR_ID
        assert record.timestamp == deterministic_clock.now()
        assert entry.created_by == TEST_ACTOR_ID

    def test_invalid_draft_is_not_stored(self, ledger):
        """A failed create leaves the ledger unchanged."""
        with pytest.raises(ValidationError):
            ledger.create(make_draft([("1000", 1, 0)]), TEST_ACTOR_ID)

        assert ledger.entries() == ()

    def test_header_fields_carried(self, ledger):
        """Journal type, source, reference and notes come from the draft."""
        entry = ledger.create(
            make_draft(
                [("6300", 100, 0), ("1600", 0, 100)],
                description="  Monthly depreciation  ",
                journal_type=JournalType.DEPRECIATION,
                source=PostingSource.NIGHT_AUDIT,
                reference="NA-2024-03",
                notes="auto",
            ),
            TEST_ACTOR_ID,
        )

        assert entry.description == "Monthly depreciation"
        assert entry.journal_type == JournalType.DEPRECIATION
        assert entry.source == PostingSource.NIGHT_AUDIT
        assert entry.reference == "NA-2024-03"
        assert entry.notes == "auto"


class TestUpdate:
    """Tests for editing non-posted entries."""

    def test_update_replaces_lines(self, ledger):
        """Draft entries can be edited; number and status are kept."""
        entry = ledger.create(make_draft([("1000", 100, 0), ("4100", 0, 100)]), TEST_ACTOR_ID)

        updated = ledger.update(
            entry.id,
            make_draft([("1010", 250, 0), ("4200", 0, 250)], description="Edited"),
            TEST_ACTOR_ID,
        )

        assert updated.journal_number == entry.journal_number
        assert updated.status == JournalEntryStatus.DRAFT
        assert updated.description == "Edited"
        assert [line.account_code for line in updated.lines] == ["1010", "4200"]
        assert updated.audit_trail[-1].action == "updated"
        assert ledger.get(entry.id) == updated

    def test_update_posted_entry_rejected(self, ledger):
        """Posted entries are immutable."""
        entry = post(ledger, make_draft([("1000", 100, 0), ("4100", 0, 100)]))

        with pytest.raises(ImmutableEntryError):
            ledger.update(
                entry.id,
                make_draft([("1000", 1, 0), ("4100", 0, 1)]),
                TEST_ACTOR_ID,
            )

        assert ledger.get(entry.id) == entry

    def test_invalid_update_keeps_previous_version(self, ledger):
        """A failed update leaves the entry untouched."""
        entry = ledger.create(make_draft([("1000", 100, 0), ("4100", 0, 100)]), TEST_ACTOR_ID)

        with pytest.raises(ValidationError):
            ledger.update(entry.id, make_draft([("1000", 100, 0)]), TEST_ACTOR_ID)

        assert ledger.get(entry.id) == entry


class TestTransitions:
    """Tests for the approval state machine."""

    def test_full_path_to_posted(self, ledger, deterministic_clock):
        """draft -> pending-approval -> approved -> posted."""
        entry = post(ledger, make_draft([("1000", 500, 0), ("4100", 0, 500)]))

        assert entry.status == JournalEntryStatus.POSTED
        assert entry.posting_date == deterministic_clock.now()
        assert [r.to_status for r in entry.audit_trail[1:]] == [
            JournalEntryStatus.PENDING_APPROVAL,
            JournalEntryStatus.APPROVED,
            JournalEntryStatus.POSTED,
        ]
        assert entry.audit_trail[-1].action == "posted"

    def test_posting_materializes_gl_entries(self, ledger):
        """One GL posting per line, only when the entry posts."""
        entry = ledger.create(
            make_draft([("1000", 500, 0), ("4100", 0, 500)], reference="INV-1"),
            TEST_ACTOR_ID,
        )
        ledger.transition(entry.id, JournalEntryStatus.PENDING_APPROVAL, TEST_ACTOR_ID)
        ledger.transition(entry.id, JournalEntryStatus.APPROVED, TEST_ACTOR_ID)
        assert ledger.gl_entries() == ()

        posted = ledger.transition(entry.id, JournalEntryStatus.POSTED, TEST_ACTOR_ID)

        postings = ledger.gl_entries()
        assert len(postings) == 2
        assert [g.account_code for g in postings] == ["1000", "4100"]
        assert postings[0].debit == Decimal("500")
        assert postings[1].credit == Decimal("500")
        assert all(g.journal_entry_id == posted.id for g in postings)
        assert all(g.posting_date == posted.posting_date for g in postings)
        assert all(g.source_document_number == "INV-1" for g in postings)
        assert all(g.fiscal_period == "2024-03" for g in postings)

    @pytest.mark.parametrize(
        "target",
        [JournalEntryStatus.APPROVED, JournalEntryStatus.POSTED, JournalEntryStatus.DRAFT],
    )
    def test_skipping_steps_rejected(self, ledger, target):
        """Only the listed transitions are allowed from draft."""
        entry = ledger.create(make_draft([("1000", 1, 0), ("4100", 0, 1)]), TEST_ACTOR_ID)

        with pytest.raises(InvalidTransitionError):
            ledger.transition(entry.id, target, TEST_ACTOR_ID)

        assert ledger.get(entry.id) == entry

    @pytest.mark.parametrize(
        "path",
        [
            [],
            [JournalEntryStatus.PENDING_APPROVAL],
            [JournalEntryStatus.PENDING_APPROVAL, JournalEntryStatus.APPROVED],
        ],
    )
    def test_reject_from_any_open_status(self, ledger, path):
        """draft, pending-approval and approved can all be rejected."""
        entry = ledger.create(make_draft([("1000", 1, 0), ("4100", 0, 1)]), TEST_ACTOR_ID)
        for status in path:
            ledger.transition(entry.id, status, TEST_ACTOR_ID)

        rejected = ledger.transition(
            entry.id, JournalEntryStatus.REJECTED, TEST_ACTOR_ID, note="wrong account",
        )

        assert rejected.status == JournalEntryStatus.REJECTED
        assert rejected.audit_trail[-1].note == "wrong account"

    def test_rejected_is_terminal(self, ledger):
        """Nothing leaves the rejected state."""
        entry = ledger.create(make_draft([("1000", 1, 0), ("4100", 0, 1)]), TEST_ACTOR_ID)
        ledger.transition(entry.id, JournalEntryStatus.REJECTED, TEST_ACTOR_ID)

        with pytest.raises(InvalidTransitionError):
            ledger.transition(entry.id, JournalEntryStatus.PENDING_APPROVAL, TEST_ACTOR_ID)

    def test_posted_is_terminal(self, ledger):
        """A posted entry cannot be rejected."""
        entry = post(ledger, make_draft([("1000", 1, 0), ("4100", 0, 1)]))

        with pytest.raises(InvalidTransitionError):
            ledger.transition(entry.id, JournalEntryStatus.REJECTED, TEST_ACTOR_ID)

    def test_status_string_accepted(self, ledger):
        """Target status may be given as its string value."""
        entry = ledger.create(make_draft([("1000", 1, 0), ("4100", 0, 1)]), TEST_ACTOR_ID)

        moved = ledger.transition(entry.id, "pending-approval", TEST_ACTOR_ID)

        assert moved.status == JournalEntryStatus.PENDING_APPROVAL

    def test_posting_unbalanced_loaded_entry(self, chart, deterministic_clock):
        """An unbalanced entry supplied by the host cannot be posted."""
        from backoffice_kernel.domain.journal import JournalEntryLine

        loaded = JournalEntry(
            id="host-1",
            journal_number="JE-000042",
            journal_type=JournalType.GENERAL,
            status=JournalEntryStatus.APPROVED,
            transaction_date=date(2024, 3, 1),
            fiscal_period="2024-03",
            fiscal_year="2024",
            source=PostingSource.IMPORT,
            description="Imported",
            lines=(
                JournalEntryLine(1, account_id("1000"), "1000", "Cash on Hand", Decimal("100"), Decimal("0")),
                JournalEntryLine(2, account_id("4100"), "4100", "Room Revenue", Decimal("0"), Decimal("90")),
            ),
        )
        ledger = JournalEntryLedger(chart, deterministic_clock, entries=[loaded])

        with pytest.raises(UnbalancedEntryError):
            ledger.transition("host-1", JournalEntryStatus.POSTED, TEST_ACTOR_ID)

        assert ledger.get("host-1").status == JournalEntryStatus.APPROVED
        assert ledger.gl_entries() == ()

    def test_posting_logs_event(self, ledger, captured_logs):
        """Posting emits journal_entry_posted with the entry in context."""
        entry = post(ledger, make_draft([("1000", 1, 0), ("4100", 0, 1)]))

        posted = [r for r in captured_logs() if r["message"] == "journal_entry_posted"]
        assert len(posted) == 1
        assert posted[0]["journal_number"] == entry.journal_number
        assert posted[0]["gl_entries_created"] == 2


class TestQueriesAndLoading:
    """Tests for lookups and host-supplied state."""

    def test_get_unknown_entry(self, ledger):
        with pytest.raises(EntryNotFoundError):
            ledger.get("nope")

    def test_entries_filtered_by_status(self, ledger):
        """entries(status) returns only matching entries."""
        draft_entry = ledger.create(make_draft([("1000", 1, 0), ("4100", 0, 1)]), TEST_ACTOR_ID)
        posted_entry = post(ledger, make_draft([("1000", 2, 0), ("4100", 0, 2)]))

        assert ledger.entries(JournalEntryStatus.DRAFT) == (draft_entry,)
        assert ledger.entries(JournalEntryStatus.POSTED) == (posted_entry,)
        assert len(ledger.entries()) == 2

    def test_numbering_continues_after_loaded_entries(self, chart, deterministic_clock):
        """The number generator is seeded past loaded numbers."""
        source = JournalEntryLedger(chart, deterministic_clock, id_factory=sequential_ids("a"))
        for _ in range(3):
            source.create(make_draft([("1000", 1, 0), ("4100", 0, 1)]), TEST_ACTOR_ID)

        reloaded = JournalEntryLedger(
            chart,
            deterministic_clock,
            id_factory=sequential_ids("b"),
            entries=source.entries(),
        )
        entry = reloaded.create(make_draft([("1000", 1, 0), ("4100", 0, 1)]), TEST_ACTOR_ID)

        assert entry.journal_number == "JE-000004"

    def test_duplicate_loaded_numbers_rejected(self, chart, deterministic_clock, ledger):
        """Two loaded entries may not share a journal number."""
        entry = ledger.create(make_draft([("1000", 1, 0), ("4100", 0, 1)]), TEST_ACTOR_ID)
        clash = replace(entry, id="other-id")

        with pytest.raises(DuplicateJournalNumberError):
            JournalEntryLedger(chart, deterministic_clock, entries=[entry, clash])

    def test_clock_time_used_for_timestamps(self, ledger, deterministic_clock):
        """Timestamps come from the injected clock."""
        entry = ledger.create(make_draft([("1000", 1, 0), ("4100", 0, 1)]), TEST_ACTOR_ID)
        deterministic_clock.set_time(datetime(2024, 4, 1, 8, 0, 0))

        moved = ledger.transition(entry.id, JournalEntryStatus.PENDING_APPROVAL, TEST_ACTOR_ID)

        assert moved.updated_at.date() == date(2024, 4, 1)
        assert moved.created_at == entry.created_at

"""
Tests for ReversalEngine.

Verifies:
- Mirror lines (debit/credit swapped, same accounts, order, departments)
- Bidirectional linking and audit records
- The pair nets to zero in the GL
- Rejections for non-posted and already reversed entries
"""

from collections import defaultdict
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from backoffice_kernel.domain.journal import (
    JournalEntryStatus,
    JournalLineDraft,
    PostingSource,
)
from backoffice_kernel.exceptions import (
    AlreadyReversedError,
    EntryNotFoundError,
    NotPostedError,
)
from tests.conftest import TEST_ACTOR_ID, account_id, make_draft, post


def _net_by_account(gl_entries):
    totals = defaultdict(Decimal)
    for g in gl_entries:
        totals[g.account_code] += g.debit - g.credit
    return dict(totals)


class TestReverse:
    """Tests for reversing posted entries."""

    def test_reversal_swaps_sides(self, ledger, reversal_engine):
        """Each reversal line mirrors the original line."""
        original = post(ledger, make_draft([
            ("6100", "1200.00", 0),
            ("1010", 0, "1000.00"),
            ("2200", 0, "200.00"),
        ]))

        result = reversal_engine.reverse(original.id, TEST_ACTOR_ID, reason="duplicate payroll")
        reversal = result.reversal

        assert [line.account_code for line in reversal.lines] == ["6100", "1010", "2200"]
        for orig_line, rev_line in zip(original.lines, reversal.lines):
            assert rev_line.debit == orig_line.credit
            assert rev_line.credit == orig_line.debit
        assert reversal.total_debit == original.total_credit
        assert reversal.total_credit == original.total_debit

    def test_reversal_is_posted_immediately(self, ledger, reversal_engine, deterministic_clock):
        """Reversals are self-approving and dated from the clock."""
        original = post(ledger, make_draft([("1000", 50, 0), ("4300", 0, 50)]))
        deterministic_clock.set_time(datetime(2024, 4, 2, 10, 30, tzinfo=timezone.utc))

        reversal = reversal_engine.reverse(original.id, TEST_ACTOR_ID).reversal

        assert reversal.status == JournalEntryStatus.POSTED
        assert reversal.source == PostingSource.REVERSAL
        assert reversal.is_reversal
        assert reversal.transaction_date == date(2024, 4, 2)
        assert reversal.fiscal_period == "2024-04"
        assert reversal.posting_date == deterministic_clock.now()
        assert reversal.journal_number == "JE-000002"
        assert reversal.description.startswith(f"Reversal of {original.journal_number}")

    def test_bidirectional_link(self, ledger, reversal_engine):
        """Original and reversal point at each other."""
        original = post(ledger, make_draft([("1000", 50, 0), ("4300", 0, 50)]))

        result = reversal_engine.reverse(original.id, TEST_ACTOR_ID)

        assert result.reversal.reversal_of_entry_id == original.id
        assert result.original.reversed_by_entry_id == result.reversal.id
        assert ledger.get(original.id).is_reversed
        assert result.original.audit_trail[-1].action == "reversed"
        assert result.original.lines == original.lines

    def test_departments_carried(self, ledger, reversal_engine):
        """Line departments survive the reversal."""
        draft = make_draft([("5100", 80, 0), ("2000", 0, 80)])
        draft = draft.__class__(
            description=draft.description,
            transaction_date=draft.transaction_date,
            lines=[
                JournalLineDraft(account_id("5100"), Decimal("80"), department="kitchen"),
                JournalLineDraft(account_id("2000"), credit=Decimal("80")),
            ],
        )
        original = post(ledger, draft)

        reversal = reversal_engine.reverse(original.id, TEST_ACTOR_ID).reversal

        assert [line.department for line in reversal.lines] == ["kitchen", None]

    def test_pair_nets_to_zero(self, ledger, reversal_engine):
        """Every account touched nets to zero across the pair."""
        original = post(ledger, make_draft([
            ("1200", "575.50", 0),
            ("4100", 0, "500.00"),
            ("2100", 0, "75.50"),
        ]))

        reversal_engine.reverse(original.id, TEST_ACTOR_ID)

        assert len(ledger.gl_entries()) == 6
        assert set(_net_by_account(ledger.gl_entries()).values()) == {Decimal("0")}


class TestReverseRejections:
    """Tests for reversal preconditions."""

    @pytest.mark.parametrize(
        "path",
        [
            [],
            [JournalEntryStatus.PENDING_APPROVAL],
            [JournalEntryStatus.PENDING_APPROVAL, JournalEntryStatus.APPROVED],
        ],
    )
    def test_only_posted_entries(self, ledger, reversal_engine, path):
        """Entries that are not posted cannot be reversed."""
        entry = ledger.create(make_draft([("1000", 1, 0), ("4100", 0, 1)]), TEST_ACTOR_ID)
        for status in path:
            entry = ledger.transition(entry.id, status, TEST_ACTOR_ID)

        with pytest.raises(NotPostedError):
            reversal_engine.reverse(entry.id, TEST_ACTOR_ID)

        assert len(ledger.entries()) == 1

    def test_double_reversal_rejected(self, ledger, reversal_engine):
        """A second reversal of the same entry fails and changes nothing."""
        original = post(ledger, make_draft([("1000", 1, 0), ("4100", 0, 1)]))
        reversal_engine.reverse(original.id, TEST_ACTOR_ID)
        gl_before = ledger.gl_entries()

        with pytest.raises(AlreadyReversedError):
            reversal_engine.reverse(original.id, TEST_ACTOR_ID)

        assert ledger.gl_entries() == gl_before
        assert len(ledger.entries()) == 2

    def test_reversal_itself_can_be_reversed(self, ledger, reversal_engine):
        """A reversal is an ordinary posted entry."""
        original = post(ledger, make_draft([("1000", 1, 0), ("4100", 0, 1)]))
        reversal = reversal_engine.reverse(original.id, TEST_ACTOR_ID).reversal

        again = reversal_engine.reverse(reversal.id, TEST_ACTOR_ID).reversal

        assert again.lines[0].debit == original.lines[0].debit

    def test_unknown_entry(self, reversal_engine):
        with pytest.raises(EntryNotFoundError):
            reversal_engine.reverse("missing", TEST_ACTOR_ID)

    def test_rejection_is_logged(self, ledger, reversal_engine, captured_logs):
        entry = ledger.create(make_draft([("1000", 1, 0), ("4100", 0, 1)]), TEST_ACTOR_ID)

        with pytest.raises(NotPostedError):
            reversal_engine.reverse(entry.id, TEST_ACTOR_ID)

        assert any(
            r["message"] == "reversal_rejected_not_posted" and r["status"] == "draft"
            for r in captured_logs()
        )

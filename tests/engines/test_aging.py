"""
Tests for Aging Calculator.

Covers:
- Age calculation from dates and instants
- Bucket classification at the boundaries
- Aging report totals
- Custom buckets and error handling
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from backoffice_engines.aging import (
    HOTEL_BUCKETS,
    AgeBucket,
    AgedItem,
    AgingCalculator,
)

AS_OF = datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc)


class TestAgeCalculation:
    """Tests for age calculation."""

    def setup_method(self):
        self.calculator = AgingCalculator()

    def test_whole_days_from_date(self):
        """A date reference counts from midnight UTC."""
        age = self.calculator.calculate_age(reference=date(2024, 2, 14), as_of=AS_OF)

        assert age == 30

    def test_partial_day_is_floored(self):
        """Less than a full day elapsed is still day zero."""
        age = self.calculator.calculate_age(
            reference=datetime(2024, 3, 14, 12, 0, tzinfo=timezone.utc),
            as_of=AS_OF,
        )

        assert age == 0

    def test_future_reference_is_negative(self):
        """Not yet due gives a negative age."""
        age = self.calculator.calculate_age(reference=date(2024, 3, 25), as_of=AS_OF)

        assert age == -10

    def test_naive_datetimes_treated_as_utc(self):
        age = self.calculator.calculate_age(
            reference=datetime(2024, 1, 15),
            as_of=datetime(2024, 2, 15, 9, 30),
        )

        assert age == 31


class TestClassification:
    """Tests for bucket classification."""

    def setup_method(self):
        self.calculator = AgingCalculator()

    @pytest.mark.parametrize(
        "age,expected",
        [
            (-5, "Current"),
            (0, "Current"),
            (1, "1-30 Days"),
            (30, "1-30 Days"),
            (31, "31-60 Days"),
            (60, "31-60 Days"),
            (61, "61-90 Days"),
            (90, "61-90 Days"),
            (91, "90+ Days"),
            (400, "90+ Days"),
        ],
    )
    def test_hotel_buckets(self, age, expected):
        assert self.calculator.classify(age).name == expected

    def test_custom_buckets(self):
        weekly = (
            AgeBucket("This week", 0, 7),
            AgeBucket("Older", 8, None),
        )

        assert self.calculator.classify(9, weekly).name == "Older"

    def test_gap_raises(self):
        """An age falling between buckets is an error."""
        gappy = (AgeBucket("A", 0, 10), AgeBucket("B", 20, None))

        with pytest.raises(ValueError, match="does not fit"):
            self.calculator.classify(15, gappy)

    def test_inverted_bucket_rejected(self):
        with pytest.raises(ValueError):
            AgeBucket("Bad", 10, 5)

    def test_negative_min_rejected(self):
        with pytest.raises(ValueError):
            AgeBucket("Bad", -1, 5)


class TestAgingReport:
    """Tests for report generation."""

    def setup_method(self):
        self.calculator = AgingCalculator()

    def _item(self, document_id, reference_date, amount, name="Acme Linen"):
        return self.calculator.age_item(
            document_id=document_id,
            document_type="supplier_invoice",
            reference_date=reference_date,
            amount=Decimal(amount),
            as_of=AS_OF,
            counterparty_name=name,
        )

    def test_age_item(self):
        item = self._item("d1", date(2024, 1, 1), "150.00")

        assert isinstance(item, AgedItem)
        assert item.age_days == 74
        assert item.bucket.name == "61-90 Days"
        assert item.is_overdue
        assert item.days_past_due == 74

    def test_days_past_due_never_negative(self):
        item = self._item("d1", date(2024, 4, 1), "10")

        assert item.days_past_due == 0
        assert not item.is_overdue

    def test_bucket_totals_partition_total(self):
        items = [
            self._item("d1", date(2024, 3, 15), "100"),
            self._item("d2", date(2024, 3, 1), "200"),
            self._item("d3", date(2023, 11, 1), "300", name="Blue Laundry"),
        ]

        report = self.calculator.generate_report(items=items, as_of=AS_OF, report_type="AP")

        totals = report.total_by_bucket()
        assert list(totals) == [b.name for b in HOTEL_BUCKETS]
        assert totals["Current"] == Decimal("100")
        assert totals["1-30 Days"] == Decimal("200")
        assert totals["90+ Days"] == Decimal("300")
        assert sum(totals.values()) == report.total_amount == Decimal("600")
        assert report.count_by_bucket()["31-60 Days"] == 0
        assert report.overdue_amount() == Decimal("500")
        assert len(report.items_for_counterparty("Blue Laundry")) == 1

    def test_empty_report(self):
        report = self.calculator.generate_report(items=[], as_of=AS_OF)

        assert report.item_count == 0
        assert report.total_amount == Decimal("0")
        assert set(report.total_by_bucket().values()) == {Decimal("0")}

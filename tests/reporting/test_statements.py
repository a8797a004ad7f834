"""
Tests for the P&L and balance sheet builders.

Covers:
- Transactional P&L sections, void-document exclusion and margins
- Classified balance sheet from a trial balance
- Accounting equation check
- render_to_dict
"""

from datetime import date, datetime, timezone
from decimal import Decimal

from backoffice_kernel.domain.ledger_entries import GLEntry
from backoffice_kernel.domain.periods import month_period
from backoffice_modules.documents.models import (
    ExpenseCategory,
    ExpenseStatus,
    GuestInvoiceStatus,
    LineItemType,
    OrderStatus,
    SupplierInvoiceCategory,
    SupplierInvoiceStatus,
)
from backoffice_modules.reporting.config import ReportingConfig
from backoffice_modules.reporting.statements import (
    BalanceSheetBuilder,
    ProfitAndLossBuilder,
    render_to_dict,
)
from backoffice_modules.reporting.trial_balance import TrialBalanceBuilder
from tests.conftest import make_draft, post
from tests.modules.conftest import (
    expense,
    guest_invoice,
    invoice_line,
    order,
    supplier_invoice,
)

MARCH = month_period(2024, 3)


def _march_documents():
    invoices = [
        guest_invoice("GI-1", lines=(
            invoice_line("1000", "10"),
            invoice_line("200", "0", item_type=LineItemType.EXTRA_SERVICE, description="Spa"),
        )),
        guest_invoice("GI-2", status=GuestInvoiceStatus.CANCELLED),
        guest_invoice("GI-3", invoice_date=date(2024, 2, 28)),
    ]
    orders = [
        order("O-1", "300"),
        order("O-2", "50", status=OrderStatus.CANCELLED),
    ]
    bills = [
        supplier_invoice("SI-1", "500", category=SupplierInvoiceCategory.FOOD_BEVERAGE),
        supplier_invoice("SI-2", "100", category=SupplierInvoiceCategory.AMENITIES),
        supplier_invoice("SI-3", "900", category=SupplierInvoiceCategory.FOOD_BEVERAGE,
                         status=SupplierInvoiceStatus.REJECTED),
    ]
    expenses = [
        expense("400", ExpenseCategory.SALARIES),
        expense("100", ExpenseCategory.UTILITIES),
        expense("50", ExpenseCategory.FOOD_BEVERAGE),
        expense("999", ExpenseCategory.MARKETING, status=ExpenseStatus.REJECTED),
    ]
    return invoices, orders, bills, expenses


class TestProfitAndLoss:
    """Tests for the transactional P&L."""

    def setup_method(self):
        self.builder = ProfitAndLossBuilder()

    def _build(self):
        invoices, orders, bills, expenses = _march_documents()
        return self.builder.build(
            MARCH,
            guest_invoices=invoices,
            orders=orders,
            supplier_invoices=bills,
            expenses=expenses,
        )

    def test_revenue_lines(self):
        report = self._build()

        assert report.revenue.amount("room_revenue") == Decimal("1100")
        assert report.revenue.amount("fnb_revenue") == Decimal("300")
        assert report.revenue.amount("other_revenue") == Decimal("200")
        assert report.total_revenue == Decimal("1600")

    def test_cost_of_sales_split(self):
        """Food-beverage bills split 60/40 by default."""
        report = self._build()

        assert report.cost_of_sales.amount("food_cost") == Decimal("300")
        assert report.cost_of_sales.amount("beverage_cost") == Decimal("200")
        assert report.cost_of_sales.amount("room_supplies") == Decimal("100")
        assert report.cost_of_sales.total == Decimal("600")

    def test_operating_expenses_by_category(self):
        """Unlisted categories fall into other."""
        report = self._build()

        opex = report.operating_expenses
        assert opex.amount("salaries") == Decimal("400")
        assert opex.amount("utilities") == Decimal("100")
        assert opex.amount("marketing") == Decimal("0")
        assert opex.amount("other") == Decimal("50")
        assert opex.total == Decimal("550")

    def test_profit_lines_and_margins(self):
        report = self._build()

        assert report.gross_profit == Decimal("1000")
        assert report.operating_income == Decimal("450")
        assert report.net_income == report.operating_income
        assert report.gross_margin == Decimal("62.5")
        assert report.net_margin == Decimal("28.125")
        assert report.warnings == ()

    def test_food_cost_ratio_configurable(self):
        invoices, orders, bills, expenses = _march_documents()

        report = ProfitAndLossBuilder(ReportingConfig(food_cost_ratio="0.5")).build(
            MARCH, supplier_invoices=bills,
        )

        assert report.cost_of_sales.amount("food_cost") == Decimal("250")

    def test_empty_period(self):
        report = self.builder.build(month_period(2024, 7))

        assert report.total_revenue == Decimal("0")
        assert report.gross_margin == Decimal("0")
        assert [w.code for w in report.warnings] == ["empty_period"]


def _post_hotel_position(ledger):
    post(ledger, make_draft([("1000", 10000, 0), ("3000", 0, 10000)], description="Capital"))
    post(ledger, make_draft([("1600", 4000, 0), ("2500", 0, 4000)], description="Kitchen equipment on loan"))
    post(ledger, make_draft([("1200", 1500, 0), ("4100", 0, 1500)], description="Room sales on account"))
    post(ledger, make_draft([("6100", 600, 0), ("2200", 0, 600)], description="Accrued wages"))


class TestBalanceSheet:
    """Tests for the classified balance sheet."""

    def test_classification(self, ledger, chart):
        _post_hotel_position(ledger)
        tb = TrialBalanceBuilder().build(ledger.gl_entries(), chart)

        report = BalanceSheetBuilder().build(tb)

        assert report.current_assets.amount("1000") == Decimal("10000")
        assert report.current_assets.amount("1200") == Decimal("1500")
        assert report.non_current_assets.amount("1600") == Decimal("4000")
        assert report.current_liabilities.amount("2200") == Decimal("600")
        assert report.non_current_liabilities.amount("2500") == Decimal("4000")
        assert report.total_assets == Decimal("15500")
        assert report.total_liabilities == Decimal("4600")

    def test_earnings_close_the_equation(self, ledger, chart):
        _post_hotel_position(ledger)
        tb = TrialBalanceBuilder().build(ledger.gl_entries(), chart)

        report = BalanceSheetBuilder().build(tb)

        assert report.equity.amount("current_period_earnings") == Decimal("900")
        assert report.total_equity == Decimal("10900")
        assert report.total_liabilities_and_equity == report.total_assets
        assert report.is_balanced
        assert report.warnings == ()

    def test_zero_balances_omitted(self, ledger, chart):
        _post_hotel_position(ledger)
        tb = TrialBalanceBuilder().build(ledger.gl_entries(), chart)

        report = BalanceSheetBuilder().build(tb)

        assert "1010" not in [line.key for line in report.current_assets.lines]

    def test_out_of_balance_reported(self, chart):
        posting = GLEntry(
            id="g-1",
            journal_entry_id="je-x",
            journal_number="JE-999999",
            line_number=1,
            account_id="acc-1000",
            account_code="1000",
            debit=Decimal("75"),
            credit=Decimal("0"),
            transaction_date=date(2024, 3, 1),
            posting_date=datetime(2024, 3, 1, tzinfo=timezone.utc),
            fiscal_period="2024-03",
        )
        tb = TrialBalanceBuilder().build([posting], chart)

        report = BalanceSheetBuilder().build(tb)

        assert not report.is_balanced
        assert [w.code for w in report.warnings] == ["balance_sheet_out_of_balance"]


class TestRenderToDict:
    def test_json_safe_values(self, ledger, chart):
        _post_hotel_position(ledger)
        tb = TrialBalanceBuilder().build(ledger.gl_entries(), chart, as_of=date(2024, 3, 31))

        rendered = render_to_dict(BalanceSheetBuilder().build(tb))

        assert rendered["as_of"] == "2024-03-31"
        assert rendered["total_assets"] == "15500"
        assert rendered["current_assets"]["lines"][0]["key"] == "1000"
        assert rendered["is_balanced"] is True


class TestRepeatability:
    """The same inputs always render the same statement."""

    def test_profit_and_loss(self):
        invoices, orders, bills, expenses = _march_documents()
        builder = ProfitAndLossBuilder()

        def build():
            return builder.build(
                MARCH,
                guest_invoices=invoices,
                orders=orders,
                supplier_invoices=bills,
                expenses=expenses,
            )

        assert render_to_dict(build()) == render_to_dict(build())

    def test_balance_sheet(self, ledger, chart):
        _post_hotel_position(ledger)
        builder = BalanceSheetBuilder()

        first = builder.build(TrialBalanceBuilder().build(ledger.gl_entries(), chart))
        second = builder.build(TrialBalanceBuilder().build(ledger.gl_entries(), chart))

        assert render_to_dict(first) == render_to_dict(second)

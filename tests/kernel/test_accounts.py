"""Tests for the chart of accounts registry."""

import pytest

from backoffice_kernel.domain.accounts import (
    Account,
    AccountType,
    ChartOfAccountsRegistry,
    NormalBalance,
)
from backoffice_kernel.exceptions import (
    AccountInactiveError,
    AccountNotFoundError,
    DuplicateAccountError,
)
from tests.conftest import account_id


class TestNormalBalance:
    """Conventional normal sides."""

    @pytest.mark.parametrize(
        "account_type,expected",
        [
            (AccountType.ASSET, NormalBalance.DEBIT),
            (AccountType.EXPENSE, NormalBalance.DEBIT),
            (AccountType.LIABILITY, NormalBalance.CREDIT),
            (AccountType.EQUITY, NormalBalance.CREDIT),
            (AccountType.REVENUE, NormalBalance.CREDIT),
        ],
    )
    def test_for_type(self, account_type, expected):
        assert NormalBalance.for_type(account_type) == expected


class TestRegistry:
    """Lookup and registration rules."""

    def test_accounts_ordered_by_code(self, chart):
        codes = [a.code for a in chart.accounts()]

        assert codes == sorted(codes)
        assert len(chart) == 20

    def test_lookup_by_id_and_code(self, chart):
        cash = chart.get(account_id("1000"))

        assert cash.name == "Cash on Hand"
        assert chart.by_code("1000") == cash
        assert account_id("1000") in chart
        assert chart.find("acc-nope") is None
        assert chart.by_code("9999") is None

    def test_get_unknown_raises(self, chart):
        with pytest.raises(AccountNotFoundError):
            chart.get("acc-nope")

    def test_of_type(self, chart):
        revenue = chart.of_type(AccountType.REVENUE)

        assert [a.code for a in revenue] == ["4100", "4200", "4300"]

    def test_ensure_postable_rejects_inactive(self, chart):
        with pytest.raises(AccountInactiveError) as exc_info:
            chart.ensure_postable(account_id("6900"))

        assert exc_info.value.account_code == "6900"
        assert chart.ensure_postable(account_id("1000")).code == "1000"

    @pytest.mark.parametrize(
        "dup_id,dup_code",
        [(account_id("1000"), "1999"), ("acc-new", "1000")],
    )
    def test_duplicate_id_or_code(self, chart, dup_id, dup_code):
        with pytest.raises(DuplicateAccountError):
            chart.register(Account(
                id=dup_id,
                code=dup_code,
                name="Duplicate",
                account_type=AccountType.ASSET,
                normal_balance=NormalBalance.DEBIT,
            ))

    def test_empty_registry(self):
        registry = ChartOfAccountsRegistry()

        assert len(registry) == 0
        assert list(registry) == []

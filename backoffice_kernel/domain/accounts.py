"""
Module: backoffice_kernel.domain.accounts
Responsibility: Chart of accounts -- the catalogue every journal line and
    GL posting refers to.  Accounts are created and edited by the host; the
    ledger only reads them.
Architecture position: Kernel > Domain.  Leaf module, no dependencies beyond
    exceptions and logging.

Invariants enforced:
    - Account ids and codes are unique within a registry.
    - Only active accounts can receive new journal lines (``ensure_postable``).

Failure modes:
    - AccountNotFoundError for unknown ids.
    - AccountInactiveError when a line targets a deactivated account.
    - DuplicateAccountError on re-registration of an id or code.

Audit relevance:
    account_type and normal_balance drive every sign convention in the
    trial balance and statements.  The registry does not enforce that they
    agree with accounting convention (assets/expenses debit, the rest
    credit); ``NormalBalance.for_type`` documents the expectation.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from backoffice_kernel.exceptions import (
    AccountInactiveError,
    AccountNotFoundError,
    DuplicateAccountError,
)
from backoffice_kernel.logging_config import get_logger

logger = get_logger("domain.accounts")


class AccountType(str, Enum):
    """Types of accounts in the chart of accounts."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"


class NormalBalance(str, Enum):
    """Normal balance side for an account."""

    DEBIT = "debit"
    CREDIT = "credit"

    @classmethod
    def for_type(cls, account_type: AccountType) -> "NormalBalance":
        """Conventional normal side for an account type."""
        if account_type in (AccountType.ASSET, AccountType.EXPENSE):
            return cls.DEBIT
        return cls.CREDIT


@dataclass(frozen=True)
class Account:
    """
    A single chart-of-accounts entry.

    ``current_balance`` is the host's stored figure and is informational
    only; reports derive balances from GL postings.
    """

    id: str
    code: str
    name: str
    account_type: AccountType
    normal_balance: NormalBalance
    current_balance: Decimal = Decimal("0")
    is_active: bool = True
    description: str | None = None
    parent_id: str | None = None

    @property
    def is_debit_normal(self) -> bool:
        return self.normal_balance == NormalBalance.DEBIT


class ChartOfAccountsRegistry:
    """
    In-memory chart of accounts keyed by id, with code lookup.

    Contract:
        Read-only from the ledger's point of view; ``register`` exists for
        the host (and tests) to populate it.
    Guarantees:
        - ``accounts()`` is ordered by account code.
        - ids and codes are unique.
    Non-goals:
        - Does not persist accounts or enforce type/normal-balance agreement.
    """

    def __init__(self, accounts: Iterable[Account] = ()):
        self._by_id: dict[str, Account] = {}
        self._by_code: dict[str, Account] = {}
        for account in accounts:
            self.register(account)

    def register(self, account: Account) -> None:
        if account.id in self._by_id or account.code in self._by_code:
            raise DuplicateAccountError(account.id, account.code)
        self._by_id[account.id] = account
        self._by_code[account.code] = account
        logger.debug(
            "account_registered",
            extra={
                "account_id": account.id,
                "account_code": account.code,
                "account_type": account.account_type.value,
            },
        )

    def get(self, account_id: str) -> Account:
        """Look up an account by id, raising if absent."""
        account = self._by_id.get(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    def find(self, account_id: str) -> Account | None:
        return self._by_id.get(account_id)

    def by_code(self, code: str) -> Account | None:
        return self._by_code.get(code)

    def ensure_postable(self, account_id: str) -> Account:
        """Return the account if it exists and is active."""
        account = self.get(account_id)
        if not account.is_active:
            raise AccountInactiveError(account.id, account.code)
        return account

    def accounts(self) -> tuple[Account, ...]:
        return tuple(sorted(self._by_id.values(), key=lambda a: a.code))

    def of_type(self, account_type: AccountType) -> tuple[Account, ...]:
        return tuple(a for a in self.accounts() if a.account_type == account_type)

    def __contains__(self, account_id: object) -> bool:
        return account_id in self._by_id

    def __iter__(self) -> Iterator[Account]:
        return iter(self.accounts())

    def __len__(self) -> int:
        return len(self._by_id)

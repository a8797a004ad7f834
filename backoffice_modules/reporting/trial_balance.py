"""
TrialBalanceBuilder -- per-account totals from GL postings.

Responsibility:
    Sum debits and credits per account from GL postings up to an optional
    ``as_of`` date, reduce each account to a signed balance using its normal
    side, and total debit-side and credit-side balances.

Architecture position:
    Modules > Reporting.  Pure function of (postings, chart, as_of).
    Feeds the balance sheet builder.

Invariants enforced:
    - Rows are sorted by account code.
    - Postings dated after ``as_of`` are excluded.
    - total_debits == sum of row debit totals (and likewise for credits).

Failure modes:
    None raised.  Findings are attached as DataIntegrityWarning:
    - trial_balance_out_of_balance: debit-side != credit-side balances.
    - unknown_account_in_ledger: postings to a code missing from the chart
      (still totalled, in unmapped rows).
    - empty_period: no postings at all.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from datetime import date, datetime
from decimal import Decimal

from backoffice_kernel.domain.accounts import Account, ChartOfAccountsRegistry, NormalBalance
from backoffice_kernel.domain.integrity import (
    TRIAL_BALANCE_OUT_OF_BALANCE,
    UNKNOWN_ACCOUNT_IN_LEDGER,
    DataIntegrityWarning,
    empty_period_warning,
    integrity_warning,
)
from backoffice_kernel.domain.journal import BALANCE_TOLERANCE
from backoffice_kernel.domain.ledger_entries import GLEntry
from backoffice_kernel.logging_config import LogContext, get_logger
from backoffice_modules.reporting.config import ReportingConfig
from backoffice_modules.reporting.models import ReportType, TrialBalanceReport, TrialBalanceRow

logger = get_logger("modules.reporting.trial_balance")

_ZERO = Decimal("0")


def compute_natural_balance(
    debit_total: Decimal,
    credit_total: Decimal,
    normal_balance: NormalBalance,
) -> Decimal:
    """
    Compute balance adjusted for normal balance side.

    DEBIT-normal (ASSET, EXPENSE): balance = debit_total - credit_total
    CREDIT-normal (LIABILITY, EQUITY, REVENUE): balance = credit_total - debit_total
    """
    if normal_balance == NormalBalance.DEBIT:
        return debit_total - credit_total
    return credit_total - debit_total


def present_balance(balance: Decimal, normal_balance: NormalBalance) -> tuple[Decimal, Decimal]:
    """Split a natural balance into (debit_side, credit_side)."""
    if normal_balance == NormalBalance.DEBIT:
        return (balance, _ZERO) if balance >= _ZERO else (_ZERO, -balance)
    return (_ZERO, balance) if balance >= _ZERO else (-balance, _ZERO)


def postings_as_of(
    gl_entries: Iterable[GLEntry],
    as_of: date | datetime | None,
) -> list[GLEntry]:
    if as_of is None:
        return list(gl_entries)
    if isinstance(as_of, datetime):
        as_of = as_of.date()
    return [g for g in gl_entries if g.transaction_date <= as_of]


class TrialBalanceBuilder:
    """
    Builds trial balances.

    Contract:
        ``build`` never raises on data problems and never caches; calling it
        twice with the same inputs gives equal reports.
    """

    def __init__(self, config: ReportingConfig | None = None):
        self._config = config or ReportingConfig()

    def build(
        self,
        gl_entries: Iterable[GLEntry],
        chart: ChartOfAccountsRegistry,
        as_of: date | datetime | None = None,
    ) -> TrialBalanceReport:
        postings = postings_as_of(gl_entries, as_of)
        if isinstance(as_of, datetime):
            as_of = as_of.date()

        debits: dict[str, Decimal] = defaultdict(lambda: _ZERO)
        credits: dict[str, Decimal] = defaultdict(lambda: _ZERO)
        for posting in postings:
            debits[posting.account_code] += posting.debit
            credits[posting.account_code] += posting.credit

        warnings: list[DataIntegrityWarning] = []
        rows: list[TrialBalanceRow] = []

        codes = set(debits) | set(credits)
        if self._config.include_zero_balances:
            codes |= {a.code for a in chart.accounts()}

        unknown: list[str] = []
        for code in codes:
            account = chart.by_code(code)
            if account is None:
                unknown.append(code)
                rows.append(self._unmapped_row(code, debits[code], credits[code]))
            else:
                rows.append(self._row(account, debits[code], credits[code]))
        rows.sort(key=lambda r: r.account_code)

        if unknown:
            warnings.append(integrity_warning(
                UNKNOWN_ACCOUNT_IN_LEDGER,
                f"Postings reference {len(unknown)} account code(s) missing from the chart",
                account_codes=sorted(unknown),
            ))

        total_debit_balances = sum((r.debit_balance for r in rows), _ZERO)
        total_credit_balances = sum((r.credit_balance for r in rows), _ZERO)
        difference = total_debit_balances - total_credit_balances

        if not postings:
            warnings.append(empty_period_warning(
                ReportType.TRIAL_BALANCE.value,
                as_of=as_of.isoformat() if as_of else None,
            ))
        elif abs(difference) >= BALANCE_TOLERANCE:
            warnings.append(integrity_warning(
                TRIAL_BALANCE_OUT_OF_BALANCE,
                "Debit-side and credit-side balances differ",
                total_debit_balances=str(total_debit_balances),
                total_credit_balances=str(total_credit_balances),
                difference=str(difference),
            ))

        with LogContext.bind(report_type=ReportType.TRIAL_BALANCE.value):
            logger.info(
                "trial_balance_built",
                extra={
                    "row_count": len(rows),
                    "posting_count": len(postings),
                    "total_debit_balances": str(total_debit_balances),
                    "total_credit_balances": str(total_credit_balances),
                    "warning_count": len(warnings),
                },
            )

        return TrialBalanceReport(
            as_of=as_of,
            rows=tuple(rows),
            total_debits=sum((r.debit_total for r in rows), _ZERO),
            total_credits=sum((r.credit_total for r in rows), _ZERO),
            total_debit_balances=total_debit_balances,
            total_credit_balances=total_credit_balances,
            warnings=tuple(warnings),
        )

    def _row(self, account: Account, debit_total: Decimal, credit_total: Decimal) -> TrialBalanceRow:
        balance = compute_natural_balance(debit_total, credit_total, account.normal_balance)
        debit_side, credit_side = present_balance(balance, account.normal_balance)
        return TrialBalanceRow(
            account_id=account.id,
            account_code=account.code,
            account_name=account.name,
            account_type=account.account_type.value,
            normal_balance=account.normal_balance.value,
            debit_total=debit_total,
            credit_total=credit_total,
            balance=balance,
            debit_balance=debit_side,
            credit_balance=credit_side,
        )

    def _unmapped_row(self, code: str, debit_total: Decimal, credit_total: Decimal) -> TrialBalanceRow:
        balance = debit_total - credit_total
        debit_side, credit_side = present_balance(balance, NormalBalance.DEBIT)
        return TrialBalanceRow(
            account_code=code,
            account_name=f"Unmapped account {code}",
            account_type=None,
            normal_balance=NormalBalance.DEBIT.value,
            debit_total=debit_total,
            credit_total=credit_total,
            balance=balance,
            debit_balance=debit_side,
            credit_balance=credit_side,
            is_unmapped=True,
        )

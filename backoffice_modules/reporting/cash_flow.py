"""
CashFlowBuilder -- indirect-method cash-flow statement.

Responsibility:
    Start from the period's net income, add back non-cash charges, adjust
    for working capital, and add investing and financing movements.  Two
    derivation methods are supported (see ``CashFlowMethod``):

    - ``estimated``: working capital as a fixed coefficient of each
      classified balance at period end; equipment purchases and loan
      repayments as fixed fractions of period expenses / payments.
    - ``ledger_delta``: working capital, equipment purchases and loan
      repayments from the actual period movements on the classified
      accounts.

Architecture position:
    Modules > Reporting.  Pure function of (period, postings, chart,
    expenses, payments, config).

Invariants enforced:
    - net_cash_flow == operating.total + investing.total + financing.total.
    - beginning_cash + net_cash_flow == ending_cash (by construction:
      ending cash is the cash-account balance at period end and beginning
      cash is derived from it).
    - Keyword matching never looks at cash-account postings; those are
      the other side of the movement being classified.

Failure modes:
    None raised.  An empty period yields zero sections and an
    empty_period warning.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime
from decimal import Decimal

from backoffice_kernel.domain.accounts import AccountType, ChartOfAccountsRegistry
from backoffice_kernel.domain.integrity import DataIntegrityWarning, empty_period_warning
from backoffice_kernel.domain.ledger_entries import GLEntry
from backoffice_kernel.domain.periods import PeriodToken, ReportingPeriod, resolve_period
from backoffice_kernel.logging_config import LogContext, get_logger
from backoffice_modules.documents.models import (
    Expense,
    ExpenseStatus,
    Payment,
    PaymentStatus,
)
from backoffice_modules.reporting.config import (
    CashFlowConfig,
    CashFlowMethod,
    ReportingConfig,
)
from backoffice_modules.reporting.models import (
    CashFlowReport,
    ReportType,
    StatementLine,
    make_section,
)

logger = get_logger("modules.reporting.cash_flow")

_ZERO = Decimal("0")


def _matches(text: str, keywords: tuple[str, ...]) -> bool:
    lowered = (text or "").lower()
    return any(k in lowered for k in keywords)


class CashFlowBuilder:
    """
    Builds cash-flow statements.

    Contract:
        ``build`` takes an already resolved period and never reads the
        clock itself.  ``build_for`` resolves a period token against a
        given ``now`` first, with weeks starting on the configured
        ``week_start``.
    Non-goals:
        - Does NOT reconcile against bank statements.
    """

    def __init__(
        self,
        config: CashFlowConfig | None = None,
        reporting_config: ReportingConfig | None = None,
    ):
        self._config = config or CashFlowConfig()
        self._clf = (reporting_config or ReportingConfig()).classification

    def build(
        self,
        period: ReportingPeriod,
        gl_entries: Iterable[GLEntry],
        chart: ChartOfAccountsRegistry,
        expenses: Iterable[Expense] = (),
        payments: Iterable[Payment] = (),
    ) -> CashFlowReport:
        cfg = self._config
        clf = self._clf
        postings = list(gl_entries)
        to_date = [g for g in postings if g.transaction_date <= period.end]
        in_period = [g for g in postings if period.contains(g.transaction_date)]
        non_cash = [g for g in in_period if not clf.matches_prefix(g.account_code, clf.cash_prefixes)]
        period_expenses = [
            e for e in expenses
            if period.contains(e.expense_date) and e.status != ExpenseStatus.REJECTED
        ]
        period_payments = [
            p for p in payments
            if period.contains(p.payment_date) and p.status == PaymentStatus.COMPLETED
        ]

        # Operating
        net_income = self._net_income(in_period, chart)
        depreciation = sum(
            (g.debit for g in non_cash if _matches(g.description, cfg.depreciation_keywords)),
            _ZERO,
        )
        amortization = sum(
            (g.debit for g in non_cash if _matches(g.description, cfg.amortization_keywords)),
            _ZERO,
        )

        if cfg.method == CashFlowMethod.ESTIMATED:
            working_capital = [
                ("accounts_receivable", "Change in Accounts Receivable",
                 self._asset_balance(to_date, clf.receivable_prefixes) * cfg.receivable_factor),
                ("inventory", "Change in Inventory",
                 self._asset_balance(to_date, clf.inventory_prefixes) * cfg.inventory_factor),
                ("prepaid_expenses", "Change in Prepaid Expenses",
                 self._asset_balance(to_date, clf.prepaid_prefixes) * cfg.prepaid_factor),
                ("accounts_payable", "Change in Accounts Payable",
                 self._liability_balance(to_date, clf.payable_prefixes) * cfg.payable_factor),
                ("accrued_expenses", "Change in Accrued Expenses",
                 self._liability_balance(to_date, clf.accrued_prefixes) * cfg.accrued_factor),
            ]
        else:
            # Asset increases use cash; liability increases provide it.
            working_capital = [
                ("accounts_receivable", "Change in Accounts Receivable",
                 -self._asset_balance(in_period, clf.receivable_prefixes)),
                ("inventory", "Change in Inventory",
                 -self._asset_balance(in_period, clf.inventory_prefixes)),
                ("prepaid_expenses", "Change in Prepaid Expenses",
                 -self._asset_balance(in_period, clf.prepaid_prefixes)),
                ("accounts_payable", "Change in Accounts Payable",
                 self._liability_balance(in_period, clf.payable_prefixes)),
                ("accrued_expenses", "Change in Accrued Expenses",
                 self._liability_balance(in_period, clf.accrued_prefixes)),
            ]

        operating = make_section("Operating Activities", [
            StatementLine("net_income", "Net Income", net_income),
            StatementLine("depreciation", "Depreciation", depreciation),
            StatementLine("amortization", "Amortization", amortization),
            *(StatementLine(key, label, amount) for key, label, amount in working_capital),
        ])

        # Investing
        property_postings = [
            g for g in non_cash
            if g.debit > _ZERO and _matches(g.description, cfg.property_keywords)
        ]
        property_purchases = -sum((g.debit for g in property_postings), _ZERO)
        if cfg.method == CashFlowMethod.ESTIMATED:
            equipment_purchases = -sum(
                (e.amount * cfg.equipment_expense_ratio for e in period_expenses), _ZERO,
            )
        else:
            claimed = {g.id for g in property_postings}
            equipment_purchases = -sum(
                (g.debit - g.credit for g in non_cash
                 if g.id not in claimed
                 and clf.matches_prefix(g.account_code, clf.equipment_prefixes)
                 and not _matches(g.description, cfg.disposal_keywords)
                 and not _matches(g.description, cfg.depreciation_keywords)),
                _ZERO,
            )
        asset_disposals = sum(
            (g.credit for g in non_cash
             if g.credit > _ZERO and _matches(g.description, cfg.disposal_keywords)),
            _ZERO,
        )
        investing = make_section("Investing Activities", [
            StatementLine("property_purchases", "Purchase of Property", property_purchases),
            StatementLine("equipment_purchases", "Purchase of Equipment", equipment_purchases),
            StatementLine("asset_disposals", "Proceeds from Asset Disposals", asset_disposals),
        ])

        # Financing
        loan_proceeds = sum(
            (g.credit for g in non_cash
             if g.credit > _ZERO and _matches(g.description, cfg.loan_keywords)),
            _ZERO,
        )
        if cfg.method == CashFlowMethod.ESTIMATED:
            loan_repayments = -sum(
                (p.amount * cfg.loan_repayment_ratio for p in period_payments
                 if _matches(p.notes, cfg.loan_keywords)
                 or p.method.value in cfg.repayment_methods),
                _ZERO,
            )
        else:
            loan_repayments = -sum(
                (g.debit for g in non_cash
                 if clf.matches_prefix(g.account_code, clf.loan_prefixes)),
                _ZERO,
            )
        financing = make_section("Financing Activities", [
            StatementLine("loan_proceeds", "Loan Proceeds", loan_proceeds),
            StatementLine("loan_repayments", "Loan Repayments", loan_repayments),
        ])

        net_cash_flow = operating.total + investing.total + financing.total
        ending_cash = self._asset_balance(to_date, clf.cash_prefixes)
        beginning_cash = ending_cash - net_cash_flow

        warnings: list[DataIntegrityWarning] = []
        if not (in_period or period_expenses or period_payments):
            warnings.append(empty_period_warning(
                ReportType.CASH_FLOW.value,
                period_start=period.start.isoformat(),
                period_end=period.end.isoformat(),
            ))

        with LogContext.bind(report_type=ReportType.CASH_FLOW.value):
            logger.info(
                "cash_flow_built",
                extra={
                    "period_start": period.start.isoformat(),
                    "period_end": period.end.isoformat(),
                    "method": cfg.method.value,
                    "net_cash_flow": str(net_cash_flow),
                    "ending_cash": str(ending_cash),
                },
            )

        return CashFlowReport(
            period=period,
            method=cfg.method,
            operating=operating,
            investing=investing,
            financing=financing,
            net_cash_flow=net_cash_flow,
            beginning_cash=beginning_cash,
            ending_cash=ending_cash,
            warnings=tuple(warnings),
        )

    def build_for(
        self,
        token: PeriodToken | str,
        now: date | datetime,
        gl_entries: Iterable[GLEntry],
        chart: ChartOfAccountsRegistry,
        expenses: Iterable[Expense] = (),
        payments: Iterable[Payment] = (),
        custom_start: date | None = None,
        custom_end: date | None = None,
    ) -> CashFlowReport:
        """
        Resolve ``token`` relative to ``now`` and build for that period.

        Raises:
            InvalidPeriodError: unknown token or bad custom bounds.
        """
        period = resolve_period(
            token,
            now,
            custom_start=custom_start,
            custom_end=custom_end,
            week_start=self._config.week_start,
        )
        return self.build(period, gl_entries, chart, expenses, payments)

    def _net_income(self, postings: list[GLEntry], chart: ChartOfAccountsRegistry) -> Decimal:
        """Revenue minus expense postings; codes missing from the chart are skipped."""
        revenue = _ZERO
        expense = _ZERO
        for posting in postings:
            account = chart.by_code(posting.account_code)
            if account is None:
                continue
            if account.account_type == AccountType.REVENUE:
                revenue += posting.credit - posting.debit
            elif account.account_type == AccountType.EXPENSE:
                expense += posting.debit - posting.credit
        return revenue - expense

    def _asset_balance(self, postings: list[GLEntry], prefixes: tuple[str, ...]) -> Decimal:
        return sum(
            (g.debit - g.credit for g in postings
             if self._clf.matches_prefix(g.account_code, prefixes)),
            _ZERO,
        )

    def _liability_balance(self, postings: list[GLEntry], prefixes: tuple[str, ...]) -> Decimal:
        return sum(
            (g.credit - g.debit for g in postings
             if self._clf.matches_prefix(g.account_code, prefixes)),
            _ZERO,
        )

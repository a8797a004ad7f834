"""
Reporting Configuration Schema.

Defines account classification rules, P&L options and the cash-flow
estimation settings.  Account classification uses code prefixes consistent
with the hotel chart of accounts (1xxx assets, 2xxx liabilities, 3xxx
equity, 4xxx revenue, 5xxx cost of sales, 6xxx operating expenses).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Self

from backoffice_kernel.domain.periods import SUNDAY
from backoffice_kernel.logging_config import get_logger

logger = get_logger("modules.reporting.config")


@dataclass
class AccountClassification:
    """
    Rules for classifying accounts into statement sections.

    Prefix matching: an account matches a section if its code starts with
    any of the configured prefixes.
    """

    # Balance sheet
    current_asset_prefixes: tuple[str, ...] = ("10", "11", "12", "13", "14")
    non_current_asset_prefixes: tuple[str, ...] = ("15", "16", "17", "18", "19")
    current_liability_prefixes: tuple[str, ...] = ("20", "21", "22", "23", "24")
    non_current_liability_prefixes: tuple[str, ...] = ("25", "26", "27", "28", "29")
    equity_prefixes: tuple[str, ...] = ("3",)

    # Income statement
    revenue_prefixes: tuple[str, ...] = ("4",)
    cost_of_sales_prefixes: tuple[str, ...] = ("5",)
    operating_expense_prefixes: tuple[str, ...] = ("6",)

    # Cash flow -- cash and working-capital accounts
    cash_prefixes: tuple[str, ...] = ("10",)
    receivable_prefixes: tuple[str, ...] = ("12",)
    inventory_prefixes: tuple[str, ...] = ("13",)
    prepaid_prefixes: tuple[str, ...] = ("14",)
    payable_prefixes: tuple[str, ...] = ("20",)
    accrued_prefixes: tuple[str, ...] = ("22",)
    equipment_prefixes: tuple[str, ...] = ("16",)
    loan_prefixes: tuple[str, ...] = ("25",)

    def matches_prefix(self, code: str, prefixes: tuple[str, ...]) -> bool:
        """Check if an account code matches any of the given prefixes."""
        return any(code.startswith(p) for p in prefixes)


@dataclass
class ReportingConfig:
    """
    Configuration schema for the reporting module.

    Controls account classification and P&L presentation.
    """

    classification: AccountClassification = field(
        default_factory=AccountClassification,
    )

    # Entity name shown on reports
    entity_name: str = "Hotel"

    # Whether trial balance rows are emitted for accounts with no postings
    include_zero_balances: bool = True

    # Share of food-beverage supplier invoices treated as food cost;
    # the remainder is beverage cost.
    food_cost_ratio: Decimal = Decimal("0.6")

    def __post_init__(self):
        self.food_cost_ratio = Decimal(str(self.food_cost_ratio))
        if not Decimal("0") <= self.food_cost_ratio <= Decimal("1"):
            raise ValueError("food_cost_ratio must be between 0 and 1")

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with standard defaults."""
        logger.info("reporting_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Create config from dictionary."""
        data = dict(data)
        if "classification" in data and isinstance(data["classification"], dict):
            data["classification"] = AccountClassification(**{
                key: tuple(value) for key, value in data["classification"].items()
            })
        logger.info(
            "reporting_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)


class CashFlowMethod(str, Enum):
    """How working-capital and capital movements are derived."""

    ESTIMATED = "estimated"  # fixed coefficients over balances
    LEDGER_DELTA = "ledger_delta"  # true period movements from postings


@dataclass
class CashFlowConfig:
    """
    Cash-flow statement settings.

    The estimation coefficients are heuristics and need confirmation by the
    hotel's accountants before the ``estimated`` figures are relied on.
    Signs are applied as stored: a negative coefficient turns an asset
    balance into a use of cash.
    """

    method: CashFlowMethod = CashFlowMethod.ESTIMATED

    receivable_factor: Decimal = Decimal("-0.10")
    inventory_factor: Decimal = Decimal("-0.05")
    prepaid_factor: Decimal = Decimal("-0.02")
    payable_factor: Decimal = Decimal("0.08")
    accrued_factor: Decimal = Decimal("0.03")
    equipment_expense_ratio: Decimal = Decimal("0.20")
    loan_repayment_ratio: Decimal = Decimal("0.10")

    depreciation_keywords: tuple[str, ...] = ("depreciation",)
    amortization_keywords: tuple[str, ...] = ("amortization",)
    property_keywords: tuple[str, ...] = ("property", "building")
    disposal_keywords: tuple[str, ...] = ("disposal", "sale of asset")
    loan_keywords: tuple[str, ...] = ("loan",)
    repayment_methods: tuple[str, ...] = ("bank-transfer",)

    # date.weekday() number of the first day of a reporting week
    week_start: int = SUNDAY

    _DECIMAL_FIELDS = (
        "receivable_factor",
        "inventory_factor",
        "prepaid_factor",
        "payable_factor",
        "accrued_factor",
        "equipment_expense_ratio",
        "loan_repayment_ratio",
    )

    def __post_init__(self):
        self.method = CashFlowMethod(self.method)
        for name in self._DECIMAL_FIELDS:
            setattr(self, name, Decimal(str(getattr(self, name))))
        if not 0 <= self.week_start <= 6:
            raise ValueError("week_start must be a weekday number 0-6")

    @classmethod
    def with_defaults(cls) -> Self:
        logger.info("cash_flow_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        data = dict(data)
        for key, value in data.items():
            if key.endswith(("_keywords", "_methods")):
                data[key] = tuple(value)
        logger.info(
            "cash_flow_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)

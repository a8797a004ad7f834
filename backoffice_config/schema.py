"""
Configuration Schema (``backoffice_config.schema``).

Responsibility
--------------
Typed, frozen container for a loaded configuration document.  Each
section is the module's own config dataclass; this module only bundles
them with the document identity (config_id, version, checksum).

Architecture position
---------------------
**Config layer** -- sits above the kernel and the modules it configures.
The kernel never imports from ``backoffice_config``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from backoffice_kernel.domain.numbering import JournalNumberGenerator
from backoffice_modules.aging.config import AgingConfig
from backoffice_modules.budget.config import BudgetConfig
from backoffice_modules.centers.config import CenterConfig
from backoffice_modules.departmental.config import DepartmentalConfig
from backoffice_modules.reporting.config import CashFlowConfig, ReportingConfig


@dataclass(frozen=True)
class LedgerSettings:
    """Journal numbering for newly created entries."""

    journal_number_prefix: str = "JE"
    journal_number_width: int = 6

    def __post_init__(self):
        if not self.journal_number_prefix:
            raise ValueError("journal_number_prefix cannot be empty")
        if self.journal_number_width < 1:
            raise ValueError("journal_number_width must be positive")

    def number_generator(self) -> JournalNumberGenerator:
        return JournalNumberGenerator(
            prefix=self.journal_number_prefix,
            width=self.journal_number_width,
        )


@dataclass(frozen=True)
class BackofficeSettings:
    """
    The complete runtime configuration.

    Guarantees:
        - ``checksum`` is the SHA-256 of the canonical JSON form of the
          source document, so two settings objects with the same checksum
          were loaded from equivalent documents.
    """

    config_id: str
    version: str
    checksum: str
    ledger: LedgerSettings = field(default_factory=LedgerSettings)
    reporting: ReportingConfig = field(default_factory=ReportingConfig)
    cash_flow: CashFlowConfig = field(default_factory=CashFlowConfig)
    aging: AgingConfig = field(default_factory=AgingConfig)
    budget: BudgetConfig = field(default_factory=BudgetConfig)
    departmental: DepartmentalConfig = field(default_factory=DepartmentalConfig)
    centers: CenterConfig = field(default_factory=CenterConfig)

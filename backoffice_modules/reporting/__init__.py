"""
Financial Reporting Module (``backoffice_modules.reporting``).

Responsibility
--------------
Read-only module that derives financial statements: trial balance from GL
postings, transactional profit and loss, classified balance sheet (from
the trial balance) and the indirect-method cash-flow statement.

Architecture position
---------------------
**Modules layer** -- pure builders with no posting side effects.  All
statement generation is a fresh projection of its inputs; nothing is
cached.

Invariants enforced
-------------------
* No journal entries are created by this module (read-only guarantee).
* Identical inputs produce identical reports.

Failure modes
-------------
* None raised for questionable data; ``DataIntegrityWarning`` values are
  attached to the report instead.
"""

from backoffice_modules.reporting.cash_flow import CashFlowBuilder
from backoffice_modules.reporting.config import (
    AccountClassification,
    CashFlowConfig,
    CashFlowMethod,
    ReportingConfig,
)
from backoffice_modules.reporting.models import (
    BalanceSheetReport,
    CashFlowReport,
    ProfitAndLossReport,
    ReportType,
    StatementLine,
    StatementSection,
    TrialBalanceReport,
    TrialBalanceRow,
)
from backoffice_modules.reporting.statements import (
    BalanceSheetBuilder,
    ProfitAndLossBuilder,
    render_to_dict,
)
from backoffice_modules.reporting.trial_balance import TrialBalanceBuilder

__all__ = [
    # Builders
    "BalanceSheetBuilder",
    "CashFlowBuilder",
    "ProfitAndLossBuilder",
    "TrialBalanceBuilder",
    "render_to_dict",
    # Config
    "AccountClassification",
    "CashFlowConfig",
    "CashFlowMethod",
    "ReportingConfig",
    # Models
    "BalanceSheetReport",
    "CashFlowReport",
    "ProfitAndLossReport",
    "ReportType",
    "StatementLine",
    "StatementSection",
    "TrialBalanceReport",
    "TrialBalanceRow",
]

"""
Back-Office Modules.

Read-only report builders over the kernel's ledger output and the host's
transactional documents.  Each module contains:
- View-models (frozen dataclasses, Decimal money)
- A configuration schema (with_defaults / from_dict)
- A builder or analyzer that is a pure function of its inputs

Modules:
- Documents: Supplier and guest invoices, expenses, payments, folios, orders
- Reporting: Trial balance, profit and loss, balance sheet, cash flow
- Aging: AP and AR aging schedules
- Budget: Departmental budgets and budget variance
- Centers: Cost center and profit center performance
- Departmental: Profit and loss per hotel department
- Tax: Output versus input tax reconciliation

Calculations shared between modules live in backoffice_engines.
"""

from backoffice_modules import (
    documents,
    reporting,
    aging,
    budget,
    centers,
    departmental,
    tax,
)

__all__ = [
    "documents",
    "reporting",
    "aging",
    "budget",
    "centers",
    "departmental",
    "tax",
]

"""
Tax Reconciliation Module (``backoffice_modules.tax``).

Output tax collected on guest invoices against input tax paid on supplier
invoices, with the resulting net liability for a filing period.
"""

from backoffice_modules.tax.engine import (
    INPUT_TAX_KEY,
    SERVICE_CHARGE_KEY,
    TaxReconciliationEngine,
    rate_key,
    tax_period,
)
from backoffice_modules.tax.models import (
    TaxLine,
    TaxPosition,
    TaxReconciliationReport,
    TaxTrendPoint,
)

__all__ = [
    "INPUT_TAX_KEY",
    "SERVICE_CHARGE_KEY",
    "TaxLine",
    "TaxPosition",
    "TaxReconciliationEngine",
    "TaxReconciliationReport",
    "TaxTrendPoint",
    "rate_key",
    "tax_period",
]

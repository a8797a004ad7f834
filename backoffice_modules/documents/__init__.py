"""
Transactional documents (``backoffice_modules.documents``).

Read-only input records supplied by the host application: supplier and
guest invoices, expenses, payments, folios and orders.
"""

from backoffice_modules.documents.models import (
    REVENUE_DEPARTMENTS,
    Department,
    Expense,
    ExpenseCategory,
    ExpenseStatus,
    Folio,
    FolioCharge,
    GuestInvoice,
    GuestInvoiceLine,
    GuestInvoiceStatus,
    LineItemType,
    Order,
    OrderStatus,
    Payment,
    PaymentMethod,
    PaymentStatus,
    SupplierInvoice,
    SupplierInvoiceCategory,
    SupplierInvoiceStatus,
)

__all__ = [
    "REVENUE_DEPARTMENTS",
    "Department",
    "Expense",
    "ExpenseCategory",
    "ExpenseStatus",
    "Folio",
    "FolioCharge",
    "GuestInvoice",
    "GuestInvoiceLine",
    "GuestInvoiceStatus",
    "LineItemType",
    "Order",
    "OrderStatus",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
    "SupplierInvoice",
    "SupplierInvoiceCategory",
    "SupplierInvoiceStatus",
]

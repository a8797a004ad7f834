"""
Transactional Document Models (``backoffice_modules.documents.models``).

Responsibility
--------------
Frozen dataclass value objects for the records a host hands to the report
builders: supplier invoices, guest invoices (with line items), expenses,
payments, folios (with charges) and restaurant orders.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Read-only inputs
to the aging, P&L, cash-flow, budget, departmental, tax and center
builders.  Persistence of these records belongs to the host.

Invariants enforced
-------------------
* All models are ``frozen=True``.
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* Statuses, categories, methods and departments are closed enums.

Failure modes
-------------
* Construction with an unknown enum value raises ``ValueError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

_ZERO = Decimal("0")


# =========================================================================
# Enums
# =========================================================================


class Department(str, Enum):
    """Hotel departments."""

    FRONT_OFFICE = "front-office"
    HOUSEKEEPING = "housekeeping"
    FNB = "fnb"
    KITCHEN = "kitchen"
    ENGINEERING = "engineering"
    FINANCE = "finance"
    HR = "hr"
    ADMIN = "admin"


REVENUE_DEPARTMENTS: frozenset[Department] = frozenset({
    Department.FRONT_OFFICE,
    Department.FNB,
    Department.KITCHEN,
})


class SupplierInvoiceStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    POSTED = "posted"
    PARTIALLY_PAID = "partially-paid"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"
    REJECTED = "rejected"


class SupplierInvoiceCategory(str, Enum):
    FOOD_BEVERAGE = "food-beverage"
    AMENITIES = "amenities"
    MAINTENANCE = "maintenance"
    UTILITIES = "utilities"
    SERVICES = "services"
    OTHER = "other"


class GuestInvoiceStatus(str, Enum):
    DRAFT = "draft"
    FINAL = "final"
    POSTED = "posted"
    PARTIALLY_PAID = "partially-paid"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class LineItemType(str, Enum):
    ROOM_CHARGE = "room-charge"
    FNB = "fnb"
    EXTRA_SERVICE = "extra-service"
    MISC = "misc"


class ExpenseCategory(str, Enum):
    SALARIES = "salaries"
    UTILITIES = "utilities"
    MAINTENANCE = "maintenance"
    MARKETING = "marketing"
    ADMINISTRATIVE = "administrative"
    FOOD_BEVERAGE = "food-beverage"
    AMENITIES = "amenities"
    OTHER = "other"


class ExpenseStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    PAID = "paid"
    REJECTED = "rejected"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    BANK_TRANSFER = "bank-transfer"
    MOBILE_PAYMENT = "mobile-payment"
    CHEQUE = "cheque"
    CREDIT = "credit"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class OrderStatus(str, Enum):
    PENDING = "pending"
    PREPARING = "preparing"
    SERVED = "served"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# =========================================================================
# Payables
# =========================================================================


@dataclass(frozen=True)
class SupplierInvoice:
    """A bill received from a supplier."""

    id: str
    invoice_number: str
    supplier_id: str
    invoice_date: date
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    balance: Decimal
    status: SupplierInvoiceStatus
    category: SupplierInvoiceCategory = SupplierInvoiceCategory.OTHER
    supplier_name: str | None = None
    due_date: date | None = None
    department: Department | None = None


# =========================================================================
# Receivables
# =========================================================================


@dataclass(frozen=True)
class GuestInvoiceLine:
    """One line item on a guest invoice."""

    description: str
    item_type: LineItemType
    department: Department
    subtotal: Decimal
    tax_rate: Decimal = _ZERO
    tax_amount: Decimal = _ZERO
    line_grand_total: Decimal = _ZERO
    quantity: Decimal = Decimal("1")


@dataclass(frozen=True)
class GuestInvoice:
    """An invoice issued to a guest."""

    id: str
    invoice_number: str
    guest_id: str
    invoice_date: date
    grand_total: Decimal
    amount_due: Decimal
    status: GuestInvoiceStatus
    line_items: tuple[GuestInvoiceLine, ...] = ()
    service_charge: Decimal = _ZERO
    guest_name: str | None = None
    due_date: date | None = None

    @property
    def total_tax(self) -> Decimal:
        return sum((line.tax_amount for line in self.line_items), _ZERO)


# =========================================================================
# Spend and cash movements
# =========================================================================


@dataclass(frozen=True)
class Expense:
    """An operating expense claim or bill."""

    id: str
    expense_date: date
    category: ExpenseCategory
    department: Department
    amount: Decimal
    status: ExpenseStatus
    description: str = ""


@dataclass(frozen=True)
class Payment:
    """A payment made or received."""

    id: str
    payment_date: date
    amount: Decimal
    method: PaymentMethod
    status: PaymentStatus = PaymentStatus.COMPLETED
    notes: str = ""
    reference: str | None = None


# =========================================================================
# Point-of-sale
# =========================================================================


@dataclass(frozen=True)
class FolioCharge:
    """A charge posted to a guest folio."""

    department: Department
    description: str
    amount: Decimal
    charge_date: date
    quantity: Decimal = Decimal("1")

    @property
    def extended_amount(self) -> Decimal:
        return self.amount * self.quantity


@dataclass(frozen=True)
class Folio:
    """A guest folio (running bill during a stay)."""

    id: str
    folio_number: str
    charges: tuple[FolioCharge, ...] = ()
    guest_name: str | None = None


@dataclass(frozen=True)
class Order:
    """A restaurant, bar or room-service order."""

    id: str
    order_number: str
    order_date: date
    total: Decimal
    status: OrderStatus = OrderStatus.COMPLETED
    department: Department = Department.FNB

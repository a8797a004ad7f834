"""
Shared document factories for module and reporting tests.

Each factory fills the fields a test does not care about with plausible
hotel data, so a test only spells out what it asserts on.
"""

from datetime import date
from decimal import Decimal

import pytest

from backoffice_kernel.domain.periods import month_period
from backoffice_modules.documents.models import (
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


def D(value) -> Decimal:
    return Decimal(str(value))


def supplier_invoice(
    number: str = "SI-001",
    total="1000",
    balance=None,
    invoice_date: date = date(2024, 3, 1),
    due_date: date | None = None,
    status: SupplierInvoiceStatus = SupplierInvoiceStatus.APPROVED,
    category: SupplierInvoiceCategory = SupplierInvoiceCategory.OTHER,
    supplier_name: str | None = "Acme Linen",
    tax="0",
    department: Department | None = None,
) -> SupplierInvoice:
    total = D(total)
    tax = D(tax)
    return SupplierInvoice(
        id=f"si-{number}",
        invoice_number=number,
        supplier_id=f"sup-{supplier_name or 'none'}",
        invoice_date=invoice_date,
        subtotal=total - tax,
        tax=tax,
        total=total,
        balance=total if balance is None else D(balance),
        status=status,
        category=category,
        supplier_name=supplier_name,
        due_date=due_date,
        department=department,
    )


def invoice_line(
    subtotal="100",
    tax_rate="10",
    item_type: LineItemType = LineItemType.ROOM_CHARGE,
    department: Department = Department.FRONT_OFFICE,
    description: str = "Deluxe room",
) -> GuestInvoiceLine:
    subtotal = D(subtotal)
    tax_rate = D(tax_rate)
    tax_amount = subtotal * tax_rate / Decimal("100")
    return GuestInvoiceLine(
        description=description,
        item_type=item_type,
        department=department,
        subtotal=subtotal,
        tax_rate=tax_rate,
        tax_amount=tax_amount,
        line_grand_total=subtotal + tax_amount,
    )


def guest_invoice(
    number: str = "GI-001",
    lines: tuple[GuestInvoiceLine, ...] | None = None,
    amount_due=None,
    invoice_date: date = date(2024, 3, 5),
    status: GuestInvoiceStatus = GuestInvoiceStatus.FINAL,
    guest_name: str | None = "Ada Guest",
    service_charge="0",
) -> GuestInvoice:
    if lines is None:
        lines = (invoice_line(),)
    service_charge = D(service_charge)
    grand_total = sum((line.line_grand_total for line in lines), Decimal("0")) + service_charge
    return GuestInvoice(
        id=f"gi-{number}",
        invoice_number=number,
        guest_id=f"guest-{guest_name or 'none'}",
        invoice_date=invoice_date,
        grand_total=grand_total,
        amount_due=grand_total if amount_due is None else D(amount_due),
        status=status,
        line_items=tuple(lines),
        service_charge=service_charge,
        guest_name=guest_name,
    )


def expense(
    amount="100",
    category: ExpenseCategory = ExpenseCategory.UTILITIES,
    department: Department = Department.ENGINEERING,
    expense_date: date = date(2024, 3, 10),
    status: ExpenseStatus = ExpenseStatus.APPROVED,
    description: str = "",
    expense_id: str | None = None,
) -> Expense:
    return Expense(
        id=expense_id or f"exp-{category.value}-{department.value}-{expense_date.isoformat()}-{amount}",
        expense_date=expense_date,
        category=category,
        department=department,
        amount=D(amount),
        status=status,
        description=description,
    )


def order(
    number: str = "ORD-001",
    total="50",
    order_date: date = date(2024, 3, 8),
    status: OrderStatus = OrderStatus.COMPLETED,
    department: Department = Department.FNB,
) -> Order:
    return Order(
        id=f"ord-{number}",
        order_number=number,
        order_date=order_date,
        total=D(total),
        status=status,
        department=department,
    )


def folio(number: str = "F-001", *charges: FolioCharge) -> Folio:
    return Folio(id=f"folio-{number}", folio_number=number, charges=tuple(charges))


def charge(
    amount="100",
    department: Department = Department.FRONT_OFFICE,
    charge_date: date = date(2024, 3, 3),
    quantity="1",
    description: str = "Room night",
) -> FolioCharge:
    return FolioCharge(
        department=department,
        description=description,
        amount=D(amount),
        charge_date=charge_date,
        quantity=D(quantity),
    )


def payment(
    amount="100",
    method: PaymentMethod = PaymentMethod.BANK_TRANSFER,
    payment_date: date = date(2024, 3, 12),
    notes: str = "",
    status: PaymentStatus = PaymentStatus.COMPLETED,
) -> Payment:
    return Payment(
        id=f"pay-{payment_date.isoformat()}-{amount}",
        payment_date=payment_date,
        amount=D(amount),
        method=method,
        status=status,
        notes=notes,
    )


@pytest.fixture
def march():
    return month_period(2024, 3)

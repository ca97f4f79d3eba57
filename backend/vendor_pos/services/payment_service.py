"""
Payment Processing Service

Payments are appended to a sale and the sale's payment state is recomputed
from the full payment history in the same transaction.

DESIGN PRINCIPLES:
- Payments are separate from sales (many-to-one relationship)
- Split payments: one sale can have several payments in different methods
- Partial payments: a payment may be less than the amount still due
- Append-only: payments are never edited, only removed with their sale

PAYMENT STATUS:
- pending: no payments
- partial: 0 < total_paid < total
- paid: total_paid >= total
"""
from __future__ import annotations

from decimal import Decimal

from flask import current_app

from ..extensions import db
from ..models import Payment, Sale
from ..money import ZERO, to_money
from ..validation import PAYMENT_METHODS, require_amount, require_choice
from .concurrency import lock_for_update, run_with_retry
from .sales_service import (
    PAYMENT_STATUS_PAID,
    PAYMENT_STATUS_PARTIAL,
    PAYMENT_STATUS_PENDING,
    serialize_sale,
)
from .tenant_service import TenantAccessError, require_owned, scoped_query


class PaymentError(Exception):
    """Raised for payment operation errors."""
    pass


def add_payment(vendor_id: str, sale_id: str, amount, payment_method) -> tuple[Payment, dict]:
    """
    Record a payment against one of the vendor's sales and reconcile it.

    The sale row is locked and version-checked; on a concurrent update the
    whole append + reconcile is rolled back and retried.

    Returns:
        (payment, serialized sale after reconciliation)

    Raises:
        ValidationError: bad amount or payment method
        TenantAccessError: sale not found for this vendor
        PaymentError: sale is already paid
    """
    amount = require_amount(amount, "amount")
    payment_method = require_choice(payment_method, PAYMENT_METHODS, "payment_method")

    def _op():
        sale = lock_for_update(scoped_query(Sale, vendor_id).filter(Sale.id == sale_id)).first()
        if sale is None:
            raise TenantAccessError("Sale not found")

        if sale.is_paid:
            raise PaymentError("Sale is already paid")

        payment = Payment(
            sale_id=sale.id,
            amount=amount,
            payment_method=payment_method,
        )
        db.session.add(payment)
        db.session.flush()

        # Most recent payment decides the method shown on the sale
        sale.payment_method = payment_method
        _update_sale_payment_status(sale)

        db.session.commit()
        return payment

    payment = run_with_retry(_op)

    sale = db.session.get(Sale, payment.sale_id)
    current_app.logger.info(
        "Payment recorded: %s %s on sale %s -> %s vendor=%s",
        f"{amount:.2f}", payment_method, sale.id, sale.payment_status, vendor_id,
    )
    return payment, serialize_sale(sale)


def total_paid(sale_id: str) -> Decimal:
    """Sum of all payments recorded against a sale."""
    value = db.session.query(
        db.func.coalesce(db.func.sum(Payment.amount), 0)
    ).filter(Payment.sale_id == sale_id).scalar()
    return to_money(value)


def _update_sale_payment_status(sale: Sale) -> None:
    """
    Recalculate and update sale payment status from its payments.

    Must run inside the caller's transaction after the new payment is
    flushed, with the sale row already locked.
    """
    paid = total_paid(sale.id)
    total_due = to_money(sale.total)

    if paid <= ZERO:
        payment_status = PAYMENT_STATUS_PENDING
    elif paid < total_due:
        payment_status = PAYMENT_STATUS_PARTIAL
    else:
        payment_status = PAYMENT_STATUS_PAID

    sale.payment_status = payment_status
    sale.is_paid = payment_status == PAYMENT_STATUS_PAID


def get_sale_payments(vendor_id: str, sale_id: str) -> list[Payment]:
    """Payment history of a vendor's sale, oldest first."""
    sale = require_owned(Sale, sale_id, vendor_id)
    return (
        db.session.query(Payment)
        .filter(Payment.sale_id == sale.id)
        .order_by(Payment.created_at.asc(), Payment.id.asc())
        .all()
    )

"""
Sales Service - sale ledger

A sale is written once, together with its line items, and afterwards only
its payment state changes: through payments (payment_service) or through
an explicit status override by the vendor. Deleting a sale removes its
payments and items with it.

INVARIANTS:
- is_paid is True exactly when payment_status == "paid"
- total == sum(item.subtotal) == sum(item.product_price * item.quantity)
- every read and write is filtered by vendor_id
"""
from __future__ import annotations

from datetime import datetime

from flask import current_app
from sqlalchemy.orm import selectinload

from ..extensions import db
from ..models import Customer, Payment, Product, Sale, SaleItem
from ..money import MAX_AMOUNT, ZERO, to_money
from ..validation import (
    PAYMENT_METHODS,
    PAYMENT_STATUSES,
    ValidationError,
    optional_bool,
    optional_str,
    require_amount,
    require_choice,
    require_quantity,
)
from .concurrency import lock_for_update, run_with_retry
from .tenant_service import get_owned, scoped_query


PAYMENT_STATUS_PENDING = "pending"
PAYMENT_STATUS_PARTIAL = "partial"
PAYMENT_STATUS_PAID = "paid"

SALE_DRAFT_FIELDS = {"customer_id", "customer_name", "payment_method", "is_paid", "total"}
SALE_ITEM_FIELDS = {"product_id", "product_name", "product_price", "quantity", "subtotal"}

MAX_ITEMS_PER_SALE = 500


class SaleError(Exception):
    """Raised for sale operation errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


def _reject_unknown(payload: dict, allowed: set[str], where: str) -> None:
    for key in payload:
        if key not in allowed:
            raise ValidationError(f"Field not allowed in {where}: {key}")


def serialize_sale(sale: Sale) -> dict:
    """
    Sale with its items, payment history and customer.

    Each item carries the product as it is now (None once deleted); the
    snapshotted product_name/product_price stay authoritative for history.
    """
    data = sale.to_dict()
    items = []
    for item in sale.items:
        row = item.to_dict()
        row["product"] = item.product.to_dict() if item.product is not None else None
        items.append(row)
    data["items"] = items
    data["payments"] = [p.to_dict() for p in sale.payments]
    data["customer"] = sale.customer.to_dict() if sale.customer is not None else None
    return data


def _with_details(query):
    return query.options(
        selectinload(Sale.items).selectinload(SaleItem.product),
        selectinload(Sale.payments),
        selectinload(Sale.customer),
    )


def _build_items(vendor_id: str, raw_items) -> list[SaleItem]:
    """
    Validate the cart and turn it into unsaved SaleItem rows.

    Subtotals are always recomputed here; a caller-supplied subtotal that
    disagrees is an error rather than something to store.
    """
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError("Sale must have at least one item")
    if len(raw_items) > MAX_ITEMS_PER_SALE:
        raise ValidationError(f"Sale cannot have more than {MAX_ITEMS_PER_SALE} items")

    items: list[SaleItem] = []
    for line_number, raw in enumerate(raw_items, start=1):
        if not isinstance(raw, dict):
            raise ValidationError(f"Item {line_number} must be an object")
        _reject_unknown(raw, SALE_ITEM_FIELDS, f"item {line_number}")

        product_id = raw.get("product_id")
        if not product_id:
            raise ValidationError(f"Item {line_number}: product_id is required")
        product = get_owned(Product, product_id, vendor_id)
        if product is None:
            raise SaleError(
                f"Item {line_number}: product not found",
                details={"line_number": line_number, "product_id": product_id},
            )

        quantity = require_quantity(raw.get("quantity"), f"item {line_number} quantity")

        name = optional_str(raw.get("product_name"), f"item {line_number} product_name") or product.name
        if raw.get("product_price") is None:
            price = to_money(product.price)
        else:
            price = require_amount(raw["product_price"], f"item {line_number} product_price", positive=False)

        subtotal = price * quantity
        if subtotal > MAX_AMOUNT:
            raise ValidationError(f"Item {line_number}: subtotal cannot exceed {MAX_AMOUNT}")

        if raw.get("subtotal") is not None:
            claimed = require_amount(raw["subtotal"], f"item {line_number} subtotal", positive=False)
            if claimed != subtotal:
                raise SaleError(
                    f"Item {line_number}: subtotal does not match price x quantity",
                    details={"line_number": line_number, "expected": f"{subtotal:.2f}", "got": f"{claimed:.2f}"},
                )

        items.append(SaleItem(
            product_id=product.id,
            line_number=line_number,
            product_name=name,
            product_price=price,
            quantity=quantity,
            subtotal=subtotal,
        ))
    return items


def create_sale(vendor_id: str, sale_draft: dict | None, raw_items) -> dict:
    """
    Create a sale and all of its items in one transaction.

    sale_draft: customer_id?, customer_name?, payment_method?, is_paid?, total?
    raw_items: [{product_id, quantity, product_name?, product_price?, subtotal?}, ...]

    Returns the serialized sale (items, empty payments, customer).

    Raises:
        ValidationError: malformed input
        SaleError: unknown product/customer, subtotal or total mismatch
    """
    if sale_draft is None:
        sale_draft = {}
    if not isinstance(sale_draft, dict):
        raise ValidationError("sale must be an object")
    _reject_unknown(sale_draft, SALE_DRAFT_FIELDS, "sale")

    payment_method = require_choice(
        sale_draft.get("payment_method"), PAYMENT_METHODS, "payment_method", allow_none=True
    )
    is_paid = bool(optional_bool(sale_draft.get("is_paid"), "is_paid"))
    customer_name = optional_str(sale_draft.get("customer_name"), "customer_name")

    customer_id = optional_str(sale_draft.get("customer_id"), "customer_id")
    if customer_id is not None:
        customer = get_owned(Customer, customer_id, vendor_id)
        if customer is None:
            raise SaleError("Customer not found", details={"customer_id": customer_id})
        customer_name = customer_name or customer.name

    items = _build_items(vendor_id, raw_items)
    total = sum((item.subtotal for item in items), ZERO)
    if total > MAX_AMOUNT:
        raise ValidationError(f"total cannot exceed {MAX_AMOUNT}")

    if sale_draft.get("total") is not None:
        claimed_total = require_amount(sale_draft["total"], "total", positive=False)
        if claimed_total != total:
            raise SaleError(
                "Sale total does not match the sum of item subtotals",
                details={"expected": f"{total:.2f}", "got": f"{claimed_total:.2f}"},
            )

    sale = Sale(
        vendor_id=vendor_id,
        customer_id=customer_id,
        customer_name=customer_name,
        total=total,
        payment_status=PAYMENT_STATUS_PAID if is_paid else PAYMENT_STATUS_PENDING,
        payment_method=payment_method,
        is_paid=is_paid,
    )

    try:
        db.session.add(sale)
        db.session.flush()  # Get sale ID
        for item in items:
            item.sale_id = sale.id
            db.session.add(item)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(
        "Sale created: %s total=%s items=%d status=%s vendor=%s",
        sale.id, f"{total:.2f}", len(items), sale.payment_status, vendor_id,
    )
    return get_sale(vendor_id, sale.id)


def get_sale(vendor_id: str, sale_id: str) -> dict | None:
    sale = _with_details(scoped_query(Sale, vendor_id).filter(Sale.id == sale_id)).first()
    return serialize_sale(sale) if sale else None


def _list_sales(vendor_id: str, start: datetime | None, end: datetime | None, *, pending_only: bool) -> list[dict]:
    query = scoped_query(Sale, vendor_id)
    if pending_only:
        query = query.filter(Sale.is_paid.is_(False))
    if start is not None:
        query = query.filter(Sale.created_at >= start)
    if end is not None:
        query = query.filter(Sale.created_at <= end)

    sales = _with_details(query).order_by(Sale.created_at.desc(), Sale.id.desc()).all()
    return [serialize_sale(s) for s in sales]


def get_sales(vendor_id: str, start: datetime | None = None, end: datetime | None = None) -> list[dict]:
    """All of the vendor's sales in the inclusive window, newest first."""
    return _list_sales(vendor_id, start, end, pending_only=False)


def get_pending_sales(vendor_id: str, start: datetime | None = None, end: datetime | None = None) -> list[dict]:
    """Unsettled sales (pending or partial), newest first."""
    return _list_sales(vendor_id, start, end, pending_only=True)


def update_sale_status(
    vendor_id: str,
    sale_id: str,
    payment_status,
    is_paid=None,
    payment_method=None,
) -> dict | None:
    """
    Administrative override of a sale's payment state ("mark as paid").

    is_paid is derived from payment_status when omitted; when given it must
    agree with it. Returns None if the sale is not the vendor's.
    """
    payment_status = require_choice(payment_status, PAYMENT_STATUSES, "payment_status")
    is_paid = optional_bool(is_paid, "is_paid")
    derived = payment_status == PAYMENT_STATUS_PAID
    if is_paid is not None and is_paid != derived:
        raise ValidationError("is_paid must be true exactly when payment_status is 'paid'")
    payment_method = require_choice(payment_method, PAYMENT_METHODS, "payment_method", allow_none=True)

    def _op():
        sale = lock_for_update(scoped_query(Sale, vendor_id).filter(Sale.id == sale_id)).first()
        if sale is None:
            return None

        previous = sale.payment_status
        sale.payment_status = payment_status
        sale.is_paid = derived
        if payment_method is not None:
            sale.payment_method = payment_method
        db.session.commit()

        current_app.logger.info(
            "Sale status override: %s %s -> %s vendor=%s", sale.id, previous, payment_status, vendor_id
        )
        return sale.id

    updated_id = run_with_retry(_op)
    if updated_id is None:
        return None
    return get_sale(vendor_id, updated_id)


def delete_sale(vendor_id: str, sale_id: str) -> bool:
    """
    Delete a sale with its payments and items, in one transaction.

    Returns False if the sale does not exist or is not the vendor's.
    """
    sale = get_owned(Sale, sale_id, vendor_id)
    if sale is None:
        return False

    try:
        db.session.query(Payment).filter(Payment.sale_id == sale.id).delete()
        db.session.query(SaleItem).filter(SaleItem.sale_id == sale.id).delete()
        db.session.query(Sale).filter(Sale.id == sale.id, Sale.vendor_id == vendor_id).delete()
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info("Sale deleted: %s vendor=%s", sale_id, vendor_id)
    return True


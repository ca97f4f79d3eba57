"""Customer master data, scoped to a vendor."""
from __future__ import annotations

from ..extensions import db
from ..models import Customer
from ..validation import ValidationError
from .tenant_service import get_owned, scoped_query

SEARCH_LIMIT = 50


def list_customers(vendor_id: str) -> list[dict]:
    customers = (
        scoped_query(Customer, vendor_id)
        .order_by(Customer.name.asc(), Customer.id.asc())
        .all()
    )
    return [c.to_dict() for c in customers]


def get_customer(vendor_id: str, customer_id: str) -> dict | None:
    c = get_owned(Customer, customer_id, vendor_id)
    return c.to_dict() if c else None


def create_customer(vendor_id: str, patch: dict) -> dict:
    c = Customer(vendor_id=vendor_id, **patch)
    db.session.add(c)
    db.session.commit()
    return c.to_dict()


def search_customers(vendor_id: str, q: str) -> list[dict]:
    """Case-insensitive substring match on name."""
    q = (q or "").strip()
    if not q:
        raise ValidationError("q is required")

    # Escape LIKE wildcards so "%" and "_" match literally
    escaped = q.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    customers = (
        scoped_query(Customer, vendor_id)
        .filter(Customer.name.ilike(f"%{escaped}%", escape="\\"))
        .order_by(Customer.name.asc())
        .limit(SEARCH_LIMIT)
        .all()
    )
    return [c.to_dict() for c in customers]

# backend/vendor_pos/services/products_service.py
"""
Products Service

All product operations are vendor-scoped. Routes validate the payload with
validate_payload(PRODUCT_POLICY) before calling in here.
"""
from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Product, SaleItem
from .tenant_service import get_owned, scoped_query

PRODUCT_MUTABLE_FIELDS = {"name", "price", "stock"}


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def list_products(vendor_id: str) -> list[dict]:
    products = (
        scoped_query(Product, vendor_id)
        .order_by(Product.name.asc(), Product.id.asc())
        .all()
    )
    return [p.to_dict() for p in products]


def create_product(vendor_id: str, patch: dict) -> dict:
    p = Product(vendor_id=vendor_id)
    apply_product_patch(p, patch)
    if p.stock is None:
        p.stock = 0

    db.session.add(p)
    db.session.commit()
    current_app.logger.info("Product created: %s (%s) for vendor %s", p.name, p.id, vendor_id)
    return p.to_dict()


def update_product(vendor_id: str, product_id: str, patch: dict) -> dict | None:
    """Apply a validated patch. Returns None when the product is not the vendor's."""
    p = get_owned(Product, product_id, vendor_id)
    if p is None:
        return None

    apply_product_patch(p, patch)
    db.session.commit()
    return p.to_dict()


def delete_product(vendor_id: str, product_id: str) -> bool:
    """
    Hard delete. Sale items that referenced the product keep their
    snapshotted name and price; only their product_id is cleared.
    """
    p = get_owned(Product, product_id, vendor_id)
    if p is None:
        return False

    db.session.query(SaleItem).filter(SaleItem.product_id == p.id).update(
        {SaleItem.product_id: None}, synchronize_session=False
    )
    db.session.delete(p)
    db.session.commit()
    current_app.logger.info("Product deleted: %s for vendor %s", product_id, vendor_id)
    return True

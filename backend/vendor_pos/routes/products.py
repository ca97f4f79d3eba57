# backend/vendor_pos/routes/products.py
"""
Product management routes.

All product operations are scoped to the caller's vendor account, taken
from g.vendor_id (set by @require_auth). Another vendor's product id
answers 404 exactly like a missing one.
"""
from flask import Blueprint, request, g, current_app

from ..services import products_service
from ..services.products_service import PRODUCT_MUTABLE_FIELDS
from ..models import Product
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    ValidationError,
)
from ..decorators import require_auth

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields=PRODUCT_MUTABLE_FIELDS,
    required_on_create={"name", "price"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_auth
def list_products():
    try:
        return products_service.list_products(g.vendor_id)
    except Exception:
        current_app.logger.exception("Failed to list products")
        return {"error": "Failed to fetch products"}, 500


@products_bp.post("")
@require_auth
def create_product():
    payload = request.get_json(silent=True)

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    return products_service.create_product(g.vendor_id, patch), 201


@products_bp.put("/<product_id>")
@require_auth
def update_product(product_id: str):
    payload = request.get_json(silent=True)

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
        enforce_rules_product(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    product = products_service.update_product(g.vendor_id, product_id, patch)
    if product is None:
        return {"error": "Product not found"}, 404
    return product


@products_bp.delete("/<product_id>")
@require_auth
def delete_product(product_id: str):
    if not products_service.delete_product(g.vendor_id, product_id):
        return {"error": "Product not found"}, 404
    return "", 204

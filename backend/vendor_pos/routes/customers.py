# backend/vendor_pos/routes/customers.py
from flask import Blueprint, request, g, current_app

from ..services import customer_service
from ..models import Customer
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_customer,
    ValidationError,
)
from ..decorators import require_auth

CUSTOMER_POLICY = ModelValidationPolicy(
    writable_fields={"name", "email", "phone"},
    required_on_create={"name"},
)

customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("")
@require_auth
def list_customers():
    try:
        return customer_service.list_customers(g.vendor_id)
    except Exception:
        current_app.logger.exception("Failed to list customers")
        return {"error": "Failed to fetch customers"}, 500


@customers_bp.get("/search")
@require_auth
def search_customers():
    """Case-insensitive name search: GET /api/customers/search?q=ana"""
    try:
        return customer_service.search_customers(g.vendor_id, request.args.get("q", ""))
    except ValidationError as e:
        return {"error": str(e)}, 400


@customers_bp.get("/<customer_id>")
@require_auth
def get_customer(customer_id: str):
    customer = customer_service.get_customer(g.vendor_id, customer_id)
    if customer is None:
        return {"error": "Customer not found"}, 404
    return customer


@customers_bp.post("")
@require_auth
def create_customer():
    payload = request.get_json(silent=True)

    try:
        patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=False)
        enforce_rules_customer(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    return customer_service.create_customer(g.vendor_id, patch), 201

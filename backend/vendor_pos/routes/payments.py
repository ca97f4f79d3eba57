# backend/vendor_pos/routes/payments.py
"""
Payment API routes

A payment is appended to one of the caller's sales and the sale's
payment_status is reconciled in the same transaction.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..services import payment_service
from ..services.payment_service import PaymentError
from ..services.tenant_service import TenantAccessError
from ..validation import ValidationError
from ..decorators import require_auth


payments_bp = Blueprint("payments", __name__, url_prefix="/api/payments")


@payments_bp.post("")
@require_auth
def add_payment_route():
    """
    Add a payment to a sale.

    Request body:
    {
        "sale_id": "...",
        "amount": "10.00",
        "payment_method": "pix" | "credit" | "debit" | "cash"
    }

    Returns:
        201: the payment plus the reconciled sale under "sale"
        400: invalid input or sale already paid
        404: sale not found
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    sale_id = data.get("sale_id")
    if not sale_id:
        return jsonify({"error": "sale_id required"}), 400

    try:
        payment, sale = payment_service.add_payment(
            g.vendor_id,
            sale_id,
            data.get("amount"),
            data.get("payment_method"),
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except PaymentError as e:
        return jsonify({"error": str(e)}), 400
    except TenantAccessError:
        return jsonify({"error": "Sale not found"}), 404
    except Exception:
        current_app.logger.exception("Failed to add payment")
        return jsonify({"error": "Internal server error"}), 500

    body = payment.to_dict()
    body["sale"] = sale
    return jsonify(body), 201


@payments_bp.get("/sale/<sale_id>")
@require_auth
def list_sale_payments_route(sale_id: str):
    """Payment history of one sale, oldest first."""
    try:
        payments = payment_service.get_sale_payments(g.vendor_id, sale_id)
    except TenantAccessError:
        return jsonify({"error": "Sale not found"}), 404
    return jsonify([p.to_dict() for p in payments])

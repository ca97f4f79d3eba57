# backend/vendor_pos/routes/sales.py
"""
Sales API routes

Every handler works on g.vendor_id only. Date filters accept
startDate/endDate as YYYY-MM-DD (a calendar day in REPORTING_TIMEZONE)
or full ISO-8601 datetimes.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..services import sales_service
from ..services.sales_service import SaleError
from ..time_utils import parse_date_window
from ..validation import ValidationError
from ..decorators import require_auth


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


def _window():
    return parse_date_window(request.args, current_app.config["REPORTING_TIMEZONE"])


@sales_bp.get("")
@require_auth
def list_sales_route():
    try:
        start, end = _window()
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    try:
        return jsonify(sales_service.get_sales(g.vendor_id, start, end))
    except Exception:
        current_app.logger.exception("Failed to list sales")
        return jsonify({"error": "Failed to fetch sales"}), 500


@sales_bp.get("/pending")
@require_auth
def list_pending_sales_route():
    """Sales not yet fully paid (pending or partial)."""
    try:
        start, end = _window()
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    try:
        return jsonify(sales_service.get_pending_sales(g.vendor_id, start, end))
    except Exception:
        current_app.logger.exception("Failed to list pending sales")
        return jsonify({"error": "Failed to fetch pending sales"}), 500


@sales_bp.get("/<sale_id>")
@require_auth
def get_sale_route(sale_id: str):
    sale = sales_service.get_sale(g.vendor_id, sale_id)
    if sale is None:
        return jsonify({"error": "Sale not found"}), 404
    return jsonify(sale)


@sales_bp.post("")
@require_auth
def create_sale_route():
    """
    Create a sale with its items.

    Request body:
    {
        "sale": {"customer_id": "...", "customer_name": "...", "payment_method": "pix",
                 "is_paid": false, "total": "25.00"},
        "items": [{"product_id": "...", "quantity": 2, "product_price": "10.00"}, ...]
    }

    total, subtotal, product_name and product_price are optional: the server
    computes totals itself and rejects values that disagree.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    try:
        sale = sales_service.create_sale(g.vendor_id, data.get("sale"), data.get("items"))
        return jsonify(sale), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except SaleError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except Exception:
        current_app.logger.exception("Failed to create sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.put("/<sale_id>/status")
@require_auth
def update_sale_status_route(sale_id: str):
    """
    Override payment state, e.g. {"payment_status": "paid", "is_paid": true}.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    try:
        sale = sales_service.update_sale_status(
            g.vendor_id,
            sale_id,
            data.get("payment_status"),
            is_paid=data.get("is_paid"),
            payment_method=data.get("payment_method"),
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to update sale status")
        return jsonify({"error": "Failed to update sale status"}), 500

    if sale is None:
        return jsonify({"error": "Sale not found"}), 404
    return jsonify(sale)


@sales_bp.delete("/<sale_id>")
@require_auth
def delete_sale_route(sale_id: str):
    try:
        deleted = sales_service.delete_sale(g.vendor_id, sale_id)
    except Exception:
        current_app.logger.exception("Failed to delete sale")
        return jsonify({"error": "Failed to delete sale"}), 500

    if not deleted:
        return jsonify({"error": "Sale not found"}), 404
    return "", 204

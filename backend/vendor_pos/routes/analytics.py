# backend/vendor_pos/routes/analytics.py
from flask import Blueprint, request, jsonify, g, current_app

from ..services import reporting_service
from ..time_utils import parse_date_window
from ..decorators import require_auth


analytics_bp = Blueprint("analytics", __name__, url_prefix="/api/analytics")


@analytics_bp.get("/stats")
@require_auth
def sales_stats_route():
    """
    Aggregate figures for the caller's sales in an optional date window.

    Query params: startDate, endDate (YYYY-MM-DD or ISO-8601)
    """
    tz_name = current_app.config["REPORTING_TIMEZONE"]
    try:
        start, end = parse_date_window(request.args, tz_name)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    try:
        stats = reporting_service.get_sales_stats(g.vendor_id, start, end, tz_name=tz_name)
    except Exception:
        current_app.logger.exception("Failed to compute sales stats")
        return jsonify({"error": "Failed to fetch analytics"}), 500

    return jsonify(stats.to_dict())

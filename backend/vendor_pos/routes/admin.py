# backend/vendor_pos/routes/admin.py
from flask import Blueprint, jsonify

from ..services import auth_service
from ..decorators import require_auth, require_admin


admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.get("/vendors")
@require_auth
@require_admin
def list_vendors_route():
    """All vendor accounts. Admin only."""
    return jsonify(auth_service.list_vendors())

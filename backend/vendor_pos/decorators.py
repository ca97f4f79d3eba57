from functools import wraps
from flask import current_app, request, jsonify, g

from .services import session_service


def get_request_token() -> str | None:
    """Session token from the auth cookie, falling back to a Bearer header."""
    token = request.cookies.get(current_app.config["AUTH_COOKIE_NAME"])
    if token:
        return token

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1].strip() or None
    return None


def require_auth(f):
    """
    Require authentication and establish tenant context.

    Sets the following Flask g attributes:
    - g.current_vendor: The authenticated Vendor object
    - g.vendor_id: The tenant every query in the request is scoped to
    - g.session_context: The full SessionContext object

    Returns 401 if the token is missing, unknown, revoked or expired.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = get_request_token()
        if not token:
            return jsonify({"error": "Authentication required"}), 401

        context = session_service.validate_session(token)
        if not context:
            return jsonify({"error": "Invalid or expired session"}), 401

        g.current_vendor = context.vendor
        g.vendor_id = context.vendor_id
        g.session_context = context

        return f(*args, **kwargs)

    return decorated_function


def require_admin(f):
    """Allow only admin vendors. Must be applied after @require_auth."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        vendor = getattr(g, "current_vendor", None)
        if vendor is None:
            return jsonify({"error": "Authentication required"}), 401
        if not vendor.is_admin:
            return jsonify({"error": "Admin access required"}), 403
        return f(*args, **kwargs)

    return decorated_function

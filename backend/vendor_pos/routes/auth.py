# backend/vendor_pos/routes/auth.py
"""
Authentication API routes

Register and login both open a session: the plaintext token is set as an
HttpOnly cookie and also returned in the body for Bearer-header clients.
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service
from ..services import session_service
from ..services.auth_service import PasswordValidationError
from ..validation import ValidationError, ConflictError
from ..decorators import require_auth, get_request_token


auth_bp = Blueprint("auth", __name__, url_prefix="/api")


def _session_response(vendor, status: int):
    session, token = session_service.create_session(
        vendor_id=vendor.id,
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )
    response = jsonify({
        "user": vendor.to_dict(),
        "token": token,
        "session": session.to_dict(),
    })
    response.status_code = status
    response.set_cookie(
        current_app.config["AUTH_COOKIE_NAME"],
        token,
        max_age=current_app.config["SESSION_ABSOLUTE_TIMEOUT_HOURS"] * 3600,
        httponly=True,
        secure=current_app.config["AUTH_COOKIE_SECURE"],
        samesite="Lax",
    )
    return response


@auth_bp.post("/register")
def register_route():
    """
    Create a vendor account and log it in.

    Request body: {"username": ..., "password": ..., "display_name": ...}
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400
    username = data.get("username")
    password = data.get("password")

    if not username or not password:
        return jsonify({"error": "username and password required"}), 400

    try:
        vendor = auth_service.register_vendor(
            username,
            password,
            data.get("display_name") or data.get("displayName"),
        )
        return _session_response(vendor, 201)
    except (ValidationError, PasswordValidationError) as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to register vendor")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/login")
def login_route():
    try:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return jsonify({"error": "Invalid JSON payload"}), 400
        username = data.get("username")
        password = data.get("password")

        if not username or not password:
            return jsonify({"error": "username and password required"}), 400

        vendor = auth_service.authenticate(username, password)
        if not vendor:
            return jsonify({"error": "Invalid credentials"}), 401

        return _session_response(vendor, 200)

    except Exception:
        current_app.logger.exception("Failed to login vendor")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
@require_auth
def logout_route():
    session_service.revoke_session(get_request_token())
    response = jsonify({"message": "Logged out"})
    response.delete_cookie(current_app.config["AUTH_COOKIE_NAME"])
    return response


@auth_bp.get("/user")
@require_auth
def current_user_route():
    return jsonify(g.current_vendor.to_dict())

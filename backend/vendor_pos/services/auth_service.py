"""
Vendor account service.

Vendors are the tenants of the system: registering one creates a new,
empty shop. Passwords are hashed with bcrypt and must meet a minimum
strength policy. Session tokens are handled in session_service.py.
"""
from __future__ import annotations

import re

import bcrypt
from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Vendor
from ..time_utils import utcnow
from ..validation import ConflictError, ValidationError


USERNAME_RE = re.compile(r"^[A-Za-z0-9_.@-]{3,64}$")


class PasswordValidationError(Exception):
    """Raised when password doesn't meet strength requirements."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character (!@#$%^&*(),.'":{}|<>)

    Raises PasswordValidationError if requirements not met.
    """
    if len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")

    if not re.search(r"[!@#$%^&*(),.'\":{}|<>]", password):
        raise PasswordValidationError("Password must contain at least one special character")


def hash_password(password: str) -> str:
    """Validate strength, then hash with bcrypt (cost factor 12)."""
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Timing-safe bcrypt check. Malformed hashes never match."""
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def register_vendor(
    username: str,
    password: str,
    display_name: str | None = None,
    *,
    is_admin: bool = False,
) -> Vendor:
    """
    Create a vendor account.

    Raises:
        ValidationError: malformed username or display name
        PasswordValidationError: weak password
        ConflictError: username already taken
    """
    if not isinstance(username, str) or not USERNAME_RE.match(username.strip()):
        raise ValidationError(
            "username must be 3-64 characters of letters, digits, '.', '_', '-' or '@'"
        )
    username = username.strip()

    if not isinstance(password, str):
        raise PasswordValidationError("Password is required")

    if display_name is not None and not isinstance(display_name, str):
        raise ValidationError("display_name must be a string")
    display_name = (display_name or "").strip() or username
    if len(display_name) > 120:
        raise ValidationError("display_name exceeds max length 120")

    if db.session.query(Vendor).filter_by(username=username).first():
        raise ConflictError("Username already exists")

    vendor = Vendor(
        username=username,
        password_hash=hash_password(password),
        display_name=display_name,
        is_admin=is_admin,
    )
    db.session.add(vendor)
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race against a concurrent registration
        db.session.rollback()
        raise ConflictError("Username already exists")

    current_app.logger.info("Vendor registered: %s (%s)", vendor.username, vendor.id)
    return vendor


def authenticate(username: str, password: str) -> Vendor | None:
    """
    Check credentials. Returns the vendor on success, None otherwise.

    Updates last_login_at on success.
    """
    if not isinstance(username, str) or not isinstance(password, str):
        return None

    vendor = db.session.query(Vendor).filter_by(username=username.strip()).first()
    if not vendor or not verify_password(password, vendor.password_hash):
        current_app.logger.info("Failed login for username %r", username)
        return None

    vendor.last_login_at = utcnow()
    db.session.commit()
    return vendor


def list_vendors() -> list[dict]:
    vendors = db.session.query(Vendor).order_by(Vendor.username.asc()).all()
    return [v.to_dict() for v in vendors]

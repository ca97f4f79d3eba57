"""
Session Token Management Service

Sessions are rows in session_tokens, so every worker process sees the same
set and a restart does not log anyone out.

SECURITY FEATURES:
- Cryptographically secure random tokens (32 bytes)
- Tokens hashed with SHA-256 before storage
- Absolute timeout (SESSION_ABSOLUTE_TIMEOUT_HOURS, default 24)
- Idle timeout (SESSION_IDLE_TIMEOUT_HOURS, default 2)
- Revocable on logout
- Tracks client IP and user agent
"""
from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta

from flask import current_app

from ..extensions import db
from ..models import SessionToken, Vendor
from ..time_utils import utcnow


@dataclass
class SessionContext:
    """Result of validate_session: who is calling, through which session."""
    vendor: Vendor
    session: SessionToken

    @property
    def vendor_id(self) -> str:
        return self.vendor.id


def _absolute_timeout() -> timedelta:
    return timedelta(hours=current_app.config.get("SESSION_ABSOLUTE_TIMEOUT_HOURS", 24))


def _idle_timeout() -> timedelta:
    return timedelta(hours=current_app.config.get("SESSION_IDLE_TIMEOUT_HOURS", 2))


def generate_token() -> str:
    """64-character hex string (32 bytes of entropy). Never stored."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """
    Hash token for database storage using SHA-256.

    Tokens are already high-entropy, so a fast hash is sufficient.
    """
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def create_session(
    vendor_id: str,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[SessionToken, str]:
    """
    Create a new session for a vendor.

    Returns (session_record, plaintext_token).
    Client receives plaintext_token, database stores only the hash.
    """
    vendor = db.session.get(Vendor, vendor_id)
    if not vendor:
        raise ValueError("Vendor not found")

    plaintext_token = generate_token()
    now = utcnow()

    session = SessionToken(
        vendor_id=vendor.id,
        token_hash=hash_token(plaintext_token),
        created_at=now,
        last_used_at=now,
        expires_at=now + _absolute_timeout(),
        user_agent=user_agent[:255] if user_agent else None,
        ip_address=ip_address[:64] if ip_address else None,
        is_revoked=False,
    )

    db.session.add(session)
    db.session.commit()

    return session, plaintext_token


def _revoke(session: SessionToken, reason: str) -> None:
    session.is_revoked = True
    session.revoked_at = utcnow()
    session.revoked_reason = reason
    db.session.commit()


def validate_session(token: str | None) -> SessionContext | None:
    """
    Validate a plaintext token and return its SessionContext.

    Returns None if the token is unknown, revoked, past its absolute
    lifetime, or idle for too long (idle sessions are revoked on the spot).
    Updates last_used_at on success.
    """
    if not token:
        return None

    now = utcnow()
    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()

    if not session:
        return None

    if session.expires_at < now:
        return None

    if now - session.last_used_at > _idle_timeout():
        _revoke(session, "Idle timeout")
        return None

    vendor = session.vendor
    if vendor is None:
        return None

    session.last_used_at = now
    db.session.commit()

    return SessionContext(vendor=vendor, session=session)


def revoke_session(token: str, reason: str = "User logout") -> bool:
    """
    Revoke session token.

    Returns True if session was revoked, False if not found.
    """
    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()

    if not session:
        return False

    _revoke(session, reason)
    return True


def revoke_all_vendor_sessions(vendor_id: str, reason: str = "Revoke all sessions") -> int:
    """Revoke every active session of a vendor. Returns count revoked."""
    now = utcnow()
    sessions = db.session.query(SessionToken).filter_by(
        vendor_id=vendor_id,
        is_revoked=False,
    ).all()

    for session in sessions:
        session.is_revoked = True
        session.revoked_at = now
        session.revoked_reason = reason

    db.session.commit()
    return len(sessions)

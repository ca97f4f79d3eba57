from __future__ import annotations

from datetime import timedelta

from sqlalchemy import or_

from ..extensions import db
from ..models import SessionToken
from ..time_utils import utcnow


def cleanup_expired_sessions(*, retention_days: int = 7) -> int:
    """
    Delete session rows that expired or were revoked more than
    retention_days ago. Active sessions are never touched.
    """
    cutoff = utcnow() - timedelta(days=retention_days)
    deleted = db.session.query(SessionToken).filter(
        or_(
            SessionToken.expires_at < cutoff,
            (SessionToken.is_revoked.is_(True)) & (SessionToken.revoked_at < cutoff),
        )
    ).delete(synchronize_session=False)
    db.session.commit()
    return deleted

"""Session token lifecycle tests."""

from datetime import timedelta

import pytest
from vendor_pos.models import SessionToken
from vendor_pos.services import auth_service, maintenance_service, session_service
from vendor_pos.services.auth_service import PasswordValidationError
from vendor_pos.time_utils import utcnow
from vendor_pos.validation import ConflictError, ValidationError


class TestSessionLifecycle:
    def test_token_stored_hashed(self, db_session, vendor_a):
        session, token = session_service.create_session(vendor_a.id, user_agent="pytest")

        assert len(token) == 64
        assert session.token_hash == session_service.hash_token(token)
        assert db_session.query(SessionToken).filter_by(token_hash=token).count() == 0

    def test_validate_returns_vendor_context(self, db_session, vendor_a, token_a):
        context = session_service.validate_session(token_a)
        assert context is not None
        assert context.vendor_id == vendor_a.id

    def test_unknown_token(self, db_session):
        assert session_service.validate_session("0" * 64) is None
        assert session_service.validate_session(None) is None

    def test_expired_session(self, db_session, vendor_a):
        session, token = session_service.create_session(vendor_a.id)
        session.expires_at = utcnow() - timedelta(seconds=1)
        db_session.commit()

        assert session_service.validate_session(token) is None

    def test_idle_session_is_revoked(self, db_session, vendor_a):
        session, token = session_service.create_session(vendor_a.id)
        session.last_used_at = utcnow() - timedelta(hours=3)
        db_session.commit()

        assert session_service.validate_session(token) is None
        db_session.expire_all()
        assert db_session.get(SessionToken, session.id).revoked_reason == "Idle timeout"

    def test_revoke(self, db_session, token_a):
        assert session_service.revoke_session(token_a) is True
        assert session_service.revoke_session(token_a) is False
        assert session_service.validate_session(token_a) is None

    def test_revoke_all(self, db_session, vendor_a):
        tokens = [session_service.create_session(vendor_a.id)[1] for _ in range(3)]
        assert session_service.revoke_all_vendor_sessions(vendor_a.id) == 3
        assert all(session_service.validate_session(t) is None for t in tokens)

    def test_cleanup_removes_only_old_dead_sessions(self, db_session, vendor_a):
        live, _ = session_service.create_session(vendor_a.id)
        expired, _ = session_service.create_session(vendor_a.id)
        expired.expires_at = utcnow() - timedelta(days=30)
        db_session.commit()

        assert maintenance_service.cleanup_expired_sessions(retention_days=7) == 1
        db_session.expire_all()
        assert db_session.get(SessionToken, live.id) is not None


class TestVendorAccounts:
    def test_register_and_authenticate(self, db_session):
        vendor = auth_service.register_vendor("market_stall", "Str0ng!pass", "Market Stall")
        assert vendor.display_name == "Market Stall"
        assert vendor.password_hash != "Str0ng!pass"

        assert auth_service.authenticate("market_stall", "Str0ng!pass").id == vendor.id
        assert auth_service.authenticate("market_stall", "wrong") is None

    def test_display_name_defaults_to_username(self, db_session):
        assert auth_service.register_vendor("solo", "Str0ng!pass").display_name == "solo"

    def test_duplicate_username(self, db_session, vendor_a):
        with pytest.raises(ConflictError):
            auth_service.register_vendor("vendor_a", "Str0ng!pass")

    @pytest.mark.parametrize("username", ["ab", "has space", "", None])
    def test_bad_username(self, db_session, username):
        with pytest.raises(ValidationError):
            auth_service.register_vendor(username, "Str0ng!pass")

    @pytest.mark.parametrize("password", ["Short1!", "alllower1!", "ALLUPPER1!", "NoDigits!!", "NoSpecial12"])
    def test_weak_passwords(self, password):
        with pytest.raises(PasswordValidationError):
            auth_service.validate_password_strength(password)

    def test_verify_password_rejects_malformed_hash(self):
        assert auth_service.verify_password("anything", "not-a-bcrypt-hash") is False

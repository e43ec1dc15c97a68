# auth/tests/test_auth.py
"""
Tests for authentication module.

Tests:
- User model
- Session model
- Password hashing
- User service (create, lookup, authenticate)
- Session service (create, validate, refresh, invalidate)
"""

from __future__ import annotations

import pytest
from datetime import datetime, timedelta, timezone


# =============================================================================
# Model Tests
# =============================================================================


class TestUserModel:
    """Tests for User model."""

    def test_user_new_generates_id(self):
        """User.new() generates a unique ID."""
        from auth.models import User

        user1 = User.new(email="a@example.com", password_hash="hash")
        user2 = User.new(email="b@example.com", password_hash="hash")

        assert user1.id
        assert user1.id != user2.id

    def test_user_new_normalizes_email(self):
        from auth.models import User

        user = User.new(email="  Buyer@Example.COM ", password_hash="hash")
        assert user.email == "buyer@example.com"

    def test_to_dict_excludes_password_hash(self):
        from auth.models import User

        data = User.new(email="a@example.com", password_hash="secret").to_dict()
        assert "password_hash" not in data
        assert data["email"] == "a@example.com"


class TestSessionModel:
    """Tests for Session model."""

    def test_new_session_is_valid(self):
        from auth.models import Session

        session = Session.new(user_id="user-1")
        assert session.is_valid

    def test_expired_session_is_invalid(self):
        from auth.models import Session

        session = Session.new(user_id="user-1")
        session.expires_at = datetime.now(timezone.utc) - timedelta(seconds=1)
        assert not session.is_valid

    def test_needs_refresh_after_half_lifetime(self):
        from auth.models import Session

        session = Session.new(user_id="user-1", duration_days=7)
        assert not session.needs_refresh(7)

        session.expires_at = datetime.now(timezone.utc) + timedelta(days=1)
        assert session.needs_refresh(7)

    def test_to_dict_nests_user(self):
        from auth.models import Session, User

        user = User.new(email="a@example.com", password_hash="hash")
        session = Session.new(user_id=user.id)

        data = session.to_dict(user)
        assert data["user"]["id"] == user.id
        assert "user" not in session.to_dict()


# =============================================================================
# Password Tests
# =============================================================================


class TestPassword:
    """Tests for bcrypt helpers."""

    def test_hash_and_verify(self):
        from auth.password import hash_password, verify_password

        hashed = hash_password("hunter22")
        assert hashed != "hunter22"
        assert verify_password("hunter22", hashed)
        assert not verify_password("wrong-pass", hashed)

    def test_hash_is_salted(self):
        from auth.password import hash_password

        assert hash_password("hunter22") != hash_password("hunter22")

    def test_hash_empty_raises(self):
        from auth.password import hash_password

        with pytest.raises(ValueError):
            hash_password("")

    def test_verify_malformed_hash(self):
        from auth.password import verify_password

        assert verify_password("hunter22", "not-a-bcrypt-hash") is False
        assert verify_password("", "whatever") is False

    @pytest.mark.parametrize(
        "password,ok",
        [
            ("", False),
            ("      ", False),
            ("abc", False),
            ("abcdef", True),
            ("x" * 72, True),
            ("x" * 73, False),
        ],
    )
    def test_is_password_strong(self, password, ok):
        from auth.password import is_password_strong

        valid, message = is_password_strong(password)
        assert valid is ok
        assert bool(message) is not ok


# =============================================================================
# User Service Tests
# =============================================================================


class TestUserService:
    """Tests for account creation and login."""

    def test_create_and_authenticate(self):
        from auth.service import authenticate_user, create_user

        user = create_user("buyer@example.com", "hunter22")
        assert authenticate_user("buyer@example.com", "hunter22").id == user.id

    def test_email_lookup_is_case_insensitive(self):
        from auth.service import create_user, get_user_by_email

        user = create_user("Buyer@Example.com", "hunter22")
        assert get_user_by_email("BUYER@example.com").id == user.id

    def test_duplicate_email_rejected(self):
        from auth.service import UserExistsError, create_user

        create_user("buyer@example.com", "hunter22")
        with pytest.raises(UserExistsError):
            create_user("buyer@example.com", "another1")

    def test_weak_password_rejected(self):
        from auth.service import WeakPasswordError, create_user

        with pytest.raises(WeakPasswordError):
            create_user("buyer@example.com", "123")

    def test_invalid_email_rejected(self):
        from auth.service import AuthError, create_user

        with pytest.raises(AuthError):
            create_user("not-an-email", "hunter22")

    def test_wrong_password(self):
        from auth.service import InvalidCredentialsError, authenticate_user, create_user

        create_user("buyer@example.com", "hunter22")
        with pytest.raises(InvalidCredentialsError):
            authenticate_user("buyer@example.com", "nope-nope")

    def test_unknown_user(self):
        from auth.service import InvalidCredentialsError, authenticate_user

        with pytest.raises(InvalidCredentialsError):
            authenticate_user("ghost@example.com", "hunter22")


# =============================================================================
# Session Service Tests
# =============================================================================


def _expire(session_id):
    from persistence.db import get_db

    past = (datetime.now(timezone.utc) - timedelta(minutes=1)).isoformat()
    with get_db() as conn:
        conn.execute("UPDATE sessions SET expires_at = ? WHERE id = ?", (past, session_id))


class TestSessionService:
    """Tests for server-side sessions."""

    def test_create_and_get_session(self):
        from auth.service import create_session, create_user, get_current_user, get_session

        user = create_user("buyer@example.com", "hunter22")
        session = create_session(user.id, ip_address="127.0.0.1", user_agent="pytest")

        stored = get_session(session.id)
        assert stored.user_id == user.id
        assert stored.ip_address == "127.0.0.1"
        assert get_current_user(session.id).email == "buyer@example.com"

    def test_default_duration_is_seven_days(self, monkeypatch):
        from auth.service import create_session

        monkeypatch.delenv("SESSION_DURATION_DAYS", raising=False)
        session = create_session("user-1")
        lifetime = session.expires_at - session.created_at
        assert lifetime == timedelta(days=7)

    def test_duration_from_environment(self, monkeypatch):
        from auth.service import create_session, get_session_duration_days

        monkeypatch.setenv("SESSION_DURATION_DAYS", "2")
        assert get_session_duration_days() == 2
        session = create_session("user-1")
        assert session.expires_at - session.created_at == timedelta(days=2)

    def test_bad_duration_falls_back(self, monkeypatch):
        from auth.service import get_session_duration_days

        monkeypatch.setenv("SESSION_DURATION_DAYS", "soon")
        assert get_session_duration_days() == 7

    def test_expired_session_is_removed(self):
        from auth.service import create_session, get_current_user, get_session

        session = create_session("user-1")
        _expire(session.id)

        assert get_session(session.id) is None
        assert get_current_user(session.id) is None

    def test_refresh_extends_expiry(self):
        from auth.service import create_session, get_session, refresh_session
        from persistence.db import get_db

        session = create_session("user-1")
        soon = (datetime.now(timezone.utc) + timedelta(hours=1)).isoformat()
        with get_db() as conn:
            conn.execute("UPDATE sessions SET expires_at = ? WHERE id = ?", (soon, session.id))

        refreshed = refresh_session(session.id)

        assert refreshed is not None
        assert refreshed.expires_at > datetime.now(timezone.utc) + timedelta(days=6)
        assert get_session(session.id).expires_at == refreshed.expires_at

    def test_refresh_expired_session(self):
        from auth.service import create_session, refresh_session

        session = create_session("user-1")
        _expire(session.id)
        assert refresh_session(session.id) is None

    def test_invalidate_session(self):
        from auth.service import create_session, get_session, invalidate_session

        session = create_session("user-1")
        assert invalidate_session(session.id) is True
        assert get_session(session.id) is None
        assert invalidate_session(session.id) is False

    def test_cleanup_expired_sessions(self):
        from auth.service import cleanup_expired_sessions, create_session

        live = create_session("user-1")
        dead = create_session("user-1")
        _expire(dead.id)

        assert cleanup_expired_sessions() == 1

        from auth.service import get_session
        assert get_session(live.id) is not None

    def test_current_user_without_session_id(self):
        from auth.service import get_current_user

        assert get_current_user(None) is None
        assert get_current_user("") is None
        assert get_current_user("missing") is None

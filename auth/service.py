# auth/service.py
"""
Authentication service.

Handles:
- Account creation and lookup (email is the login name)
- Password verification
- Server-side sessions: create, look up, slide the expiry, end
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Optional

from auth.models import DEFAULT_SESSION_DAYS, User, Session
from auth.password import hash_password, verify_password, is_password_strong
from persistence.db import get_db, init_db

_logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Base authentication error."""
    pass


class UserExistsError(AuthError):
    """Email is already registered."""
    pass


class WeakPasswordError(AuthError):
    """Password is rejected by is_password_strong."""
    pass


class InvalidCredentialsError(AuthError):
    """Unknown email or wrong password."""
    pass


def get_session_duration_days() -> int:
    """Session lifetime in days (SESSION_DURATION_DAYS, default 7)."""
    try:
        days = int(os.environ.get("SESSION_DURATION_DAYS", DEFAULT_SESSION_DAYS))
    except ValueError:
        return DEFAULT_SESSION_DAYS
    return days if days > 0 else DEFAULT_SESSION_DAYS


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Row mapping
# =============================================================================


def _fetch_one(sql: str, *params):
    init_db()
    with get_db() as conn:
        return conn.execute(sql, params).fetchone()


def _user_from_row(row) -> Optional[User]:
    if row is None:
        return None
    return User(
        id=row["id"],
        email=row["email"],
        password_hash=row["password_hash"],
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


def _session_from_row(row) -> Optional[Session]:
    if row is None:
        return None
    return Session(
        id=row["id"],
        user_id=row["user_id"],
        created_at=datetime.fromisoformat(row["created_at"]),
        expires_at=datetime.fromisoformat(row["expires_at"]),
        ip_address=row["ip_address"],
        user_agent=row["user_agent"],
    )


# =============================================================================
# Users
# =============================================================================


def create_user(email: str, password: str) -> User:
    """
    Register an account.

    Raises:
        WeakPasswordError: Password too short, blank or over 72 bytes
        AuthError: Email missing or without "@"
        UserExistsError: Email already registered
    """
    ok, reason = is_password_strong(password)
    if not ok:
        raise WeakPasswordError(reason)

    email = _normalize_email(email)
    if "@" not in email:
        raise AuthError("A valid email address is required")
    if get_user_by_email(email) is not None:
        raise UserExistsError(f"An account for {email} already exists")

    user = User.new(email=email, password_hash=hash_password(password))
    with get_db() as conn:
        conn.execute(
            "INSERT INTO users (id, email, password_hash, created_at, updated_at) "
            "VALUES (:id, :email, :password_hash, :created_at, :updated_at)",
            {
                "id": user.id,
                "email": user.email,
                "password_hash": user.password_hash,
                "created_at": user.created_at.isoformat(),
                "updated_at": user.updated_at.isoformat(),
            },
        )

    _logger.info(f"Registered user {user.id}")
    return user


def get_user_by_email(email: str) -> Optional[User]:
    return _user_from_row(
        _fetch_one("SELECT * FROM users WHERE email = ?", _normalize_email(email))
    )


def get_user_by_id(user_id: str) -> Optional[User]:
    return _user_from_row(_fetch_one("SELECT * FROM users WHERE id = ?", user_id))


def authenticate_user(email: str, password: str) -> User:
    """
    Check an email/password pair.

    Unknown email and wrong password raise the same error so callers
    cannot tell which one failed.
    """
    user = get_user_by_email(email)
    if user is None or not verify_password(password, user.password_hash):
        _logger.warning("Rejected sign-in attempt")
        raise InvalidCredentialsError("Invalid email or password")

    _logger.info(f"Signed in user {user.id}")
    return user


# =============================================================================
# Sessions
# =============================================================================


def create_session(
    user_id: str,
    duration_days: Optional[int] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> Session:
    """Start a session; its id is the cookie value."""
    init_db()
    session = Session.new(
        user_id=user_id,
        duration_days=duration_days or get_session_duration_days(),
        ip_address=ip_address,
        user_agent=user_agent,
    )

    with get_db() as conn:
        conn.execute(
            "INSERT INTO sessions (id, user_id, created_at, expires_at, ip_address, user_agent) "
            "VALUES (:id, :user_id, :created_at, :expires_at, :ip_address, :user_agent)",
            {
                "id": session.id,
                "user_id": session.user_id,
                "created_at": session.created_at.isoformat(),
                "expires_at": session.expires_at.isoformat(),
                "ip_address": session.ip_address,
                "user_agent": session.user_agent,
            },
        )

    _logger.debug(f"Started session for user {user_id}")
    return session


def get_session(session_id: str) -> Optional[Session]:
    """Live session by id; an expired one is deleted and reported as None."""
    session = _session_from_row(_fetch_one("SELECT * FROM sessions WHERE id = ?", session_id))
    if session is not None and not session.is_valid:
        invalidate_session(session_id)
        return None
    return session


def refresh_session(session_id: str, duration_days: Optional[int] = None) -> Optional[Session]:
    """
    Slide a live session's expiry to a full lifetime from now.

    Returns None when the session is gone or already expired.
    """
    session = get_session(session_id)
    if session is None:
        return None

    session.expires_at = datetime.now(timezone.utc) + timedelta(
        days=duration_days or get_session_duration_days()
    )
    with get_db() as conn:
        conn.execute(
            "UPDATE sessions SET expires_at = ? WHERE id = ?",
            (session.expires_at.isoformat(), session.id),
        )

    _logger.debug(f"Refreshed session for user {session.user_id}")
    return session


def _delete_sessions(where: str, value: str) -> int:
    init_db()
    with get_db() as conn:
        return conn.execute(f"DELETE FROM sessions WHERE {where}", (value,)).rowcount


def invalidate_session(session_id: str) -> bool:
    """End one session. True if it existed."""
    return _delete_sessions("id = ?", session_id) > 0


def cleanup_expired_sessions() -> int:
    """Delete sessions past their expiry; returns how many were removed."""
    removed = _delete_sessions("expires_at < ?", _now_iso())
    if removed:
        _logger.info(f"Removed {removed} expired sessions")
    return removed


def get_current_user(session_id: Optional[str]) -> Optional[User]:
    """User behind a session cookie value, or None when signed out."""
    if not session_id:
        return None
    session = get_session(session_id)
    return get_user_by_id(session.user_id) if session else None

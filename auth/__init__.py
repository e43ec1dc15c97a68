# auth/__init__.py
"""
Accounts and sessions for ValueMatrix.

Email/password accounts (bcrypt), server-side sessions referenced by the
HTTP-only vm_session cookie, and the helpers pages use to require one.
"""

from auth.models import User, Session
from auth.service import (
    AuthError,
    InvalidCredentialsError,
    UserExistsError,
    WeakPasswordError,
    authenticate_user,
    create_session,
    create_user,
    get_current_user,
    get_session,
    invalidate_session,
    refresh_session,
)

__all__ = [
    "User",
    "Session",
    "AuthError",
    "InvalidCredentialsError",
    "UserExistsError",
    "WeakPasswordError",
    "authenticate_user",
    "create_session",
    "create_user",
    "get_current_user",
    "get_session",
    "invalidate_session",
    "refresh_session",
]

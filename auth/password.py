# auth/password.py
"""
Password hashing using bcrypt.
"""

from __future__ import annotations

import bcrypt
import logging
import os

_logger = logging.getLogger(__name__)

# Work factor; tests lower it through the environment
BCRYPT_ROUNDS = int(os.environ.get("VALUEMATRIX_BCRYPT_ROUNDS", "12"))

# bcrypt only looks at the first 72 bytes of input
MAX_PASSWORD_BYTES = 72
MIN_PASSWORD_LENGTH = 6


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password
        rounds: bcrypt work factor

    Returns:
        Bcrypt hash string (includes salt)
    """
    if not password:
        raise ValueError("Password cannot be empty")

    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against its hash.

    Returns:
        True if password matches, False otherwise (including malformed hashes)
    """
    if not password or not password_hash:
        return False

    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError as e:
        _logger.warning(f"Password verification error: {e}")
        return False


def is_password_strong(password: str) -> tuple[bool, str]:
    """
    Check a sign-up password.

    Requirements:
    - At least 6 characters, not only whitespace
    - At most 72 bytes once UTF-8 encoded

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not password or not password.strip():
        return False, "Password cannot be empty"

    if len(password) < MIN_PASSWORD_LENGTH:
        return False, f"Password must be at least {MIN_PASSWORD_LENGTH} characters"

    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return False, f"Password must be at most {MAX_PASSWORD_BYTES} bytes"

    return True, ""

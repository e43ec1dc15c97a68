# auth/models.py
"""
User and Session models for authentication.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional
import uuid

DEFAULT_SESSION_DAYS = 7


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class User:
    """
    User account model.

    Attributes:
        id: Unique user ID (UUID), used as owner of prediction records
        email: User's email (unique, used for login)
        password_hash: Bcrypt-hashed password
        created_at: Account creation timestamp
        updated_at: Last update timestamp
    """
    id: str
    email: str
    password_hash: str
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def new(cls, email: str, password_hash: str) -> User:
        """Create a new user with generated ID."""
        now = _utcnow()
        return cls(
            id=str(uuid.uuid4()),
            email=email.lower().strip(),
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary (excludes password_hash)."""
        return {
            "id": self.id,
            "email": self.email,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class Session:
    """
    User session model.

    Attributes:
        id: Unique session ID (used as cookie value)
        user_id: Associated user ID
        created_at: Session creation timestamp
        expires_at: Session expiration timestamp
        ip_address: Client IP (optional, for audit)
        user_agent: Client user agent (optional, for audit)
    """
    id: str
    user_id: str
    created_at: datetime = field(default_factory=_utcnow)
    expires_at: datetime = field(
        default_factory=lambda: _utcnow() + timedelta(days=DEFAULT_SESSION_DAYS)
    )
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    @classmethod
    def new(
        cls,
        user_id: str,
        duration_days: int = DEFAULT_SESSION_DAYS,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Session:
        """Create a new session with generated ID."""
        now = _utcnow()
        return cls(
            id=str(uuid.uuid4()),
            user_id=user_id,
            created_at=now,
            expires_at=now + timedelta(days=duration_days),
            ip_address=ip_address,
            user_agent=user_agent,
        )

    @property
    def is_valid(self) -> bool:
        """Check if session is still valid (not expired)."""
        return _utcnow() < self.expires_at

    def needs_refresh(self, duration_days: int = DEFAULT_SESSION_DAYS) -> bool:
        """True once less than half of the session lifetime remains."""
        remaining = self.expires_at - _utcnow()
        return remaining < timedelta(days=duration_days) / 2

    def to_dict(self, user: Optional[User] = None) -> dict:
        """
        Convert to dictionary.

        When the owning user is given it is nested under "user", which is
        the shape pages read the current user id from.
        """
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
        }
        if user is not None:
            data["user"] = user.to_dict()
        return data

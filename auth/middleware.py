# auth/middleware.py
"""
Session cookie plumbing for FastAPI routes.

JSON routes depend on get_required_user (401 when signed out);
HTML pages call page_user() and send anonymous visitors to /auth.
"""

from __future__ import annotations

from typing import Optional
from fastapi import Request, Response, HTTPException
from fastapi.responses import RedirectResponse

from auth.models import User
from auth.service import get_current_user, get_session_duration_days

SESSION_COOKIE_NAME = "vm_session"
AUTH_PAGE_PATH = "/auth"

# Shared by set and delete so the browser matches the same cookie
_COOKIE_FLAGS = {"httponly": True, "samesite": "lax"}


def get_session_id(request: Request) -> Optional[str]:
    return request.cookies.get(SESSION_COOKIE_NAME)


def set_session_cookie(response: Response, session_id: str) -> None:
    """Attach the session id; the cookie lives as long as the session."""
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=session_id,
        max_age=get_session_duration_days() * 86400,
        secure=False,  # Set True in production with HTTPS
        **_COOKIE_FLAGS,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=SESSION_COOKIE_NAME, **_COOKIE_FLAGS)


def page_user(request: Request) -> Optional[User]:
    """Signed-in user for a page request, or None."""
    return get_current_user(get_session_id(request))


async def get_required_user(request: Request) -> User:
    """FastAPI dependency: the signed-in user; 401 otherwise."""
    user = page_user(request)
    if user is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user


def redirect_to_auth() -> RedirectResponse:
    """Where pages send visitors without an active session."""
    return RedirectResponse(url=AUTH_PAGE_PATH, status_code=302)

"""
Authentication API endpoints.

Sessions live server-side; the browser only holds the HTTP-only cookie.
"""

import logging

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from app.correlation import get_client_ip, get_request_id
from auth.middleware import clear_session_cookie, get_session_id, set_session_cookie
from auth.service import (
    AuthError,
    InvalidCredentialsError,
    UserExistsError,
    WeakPasswordError,
    authenticate_user,
    create_session,
    create_user,
    get_session,
    get_session_duration_days,
    get_user_by_id,
    invalidate_session,
    refresh_session,
)

_logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


# =============================================================================
# Request Schemas
# =============================================================================


class SignupRequest(BaseModel):
    email: str = Field(..., description="User email address")
    password: str = Field(..., description="Password (min 6 chars)")


class LoginRequest(BaseModel):
    email: str = Field(..., description="User email address")
    password: str = Field(..., description="Password")


# =============================================================================
# Routes
# =============================================================================


def _start_session(user, raw_request: Request, response: Response):
    session = create_session(
        user_id=user.id,
        ip_address=get_client_ip(raw_request),
        user_agent=raw_request.headers.get("user-agent"),
    )
    set_session_cookie(response, session.id)
    return session


@router.post("/signup")
async def signup(request: SignupRequest, raw_request: Request, response: Response):
    """Create an account and sign it in."""
    request_id = get_request_id(raw_request) or "unknown"

    try:
        user = create_user(email=request.email, password=request.password)
    except UserExistsError as e:
        return JSONResponse(
            status_code=409,
            content={"request_id": request_id, "error": "user_exists", "detail": str(e)},
        )
    except WeakPasswordError as e:
        return JSONResponse(
            status_code=400,
            content={"request_id": request_id, "error": "weak_password", "detail": str(e)},
        )
    except AuthError as e:
        return JSONResponse(
            status_code=400,
            content={"request_id": request_id, "error": "invalid_signup", "detail": str(e)},
        )

    session = _start_session(user, raw_request, response)
    return {
        "request_id": request_id,
        "success": True,
        "session": session.to_dict(user),
    }


@router.post("/login")
async def login(request: LoginRequest, raw_request: Request, response: Response):
    """Authenticate and start a session."""
    request_id = get_request_id(raw_request) or "unknown"

    try:
        user = authenticate_user(request.email, request.password)
    except InvalidCredentialsError:
        return JSONResponse(
            status_code=401,
            content={
                "request_id": request_id,
                "error": "invalid_credentials",
                "detail": "Invalid email or password",
            },
        )

    session = _start_session(user, raw_request, response)
    return {
        "request_id": request_id,
        "success": True,
        "session": session.to_dict(user),
    }


@router.post("/logout")
async def logout(raw_request: Request, response: Response):
    """Invalidate the session and clear the cookie."""
    request_id = get_request_id(raw_request) or "unknown"

    session_id = get_session_id(raw_request)
    if session_id:
        invalidate_session(session_id)
    clear_session_cookie(response)

    return {
        "request_id": request_id,
        "success": True,
        "message": "Signed out successfully",
    }


@router.get("/session")
async def current_session(raw_request: Request, response: Response):
    """
    Current session with its user, or null when signed out.

    Pages poll this to notice sign-outs and expiry. A session past half its
    lifetime is slid forward here, so an open tab keeps its user signed in.
    """
    request_id = get_request_id(raw_request) or "unknown"
    session_id = get_session_id(raw_request)
    session = get_session(session_id) if session_id else None
    user = get_user_by_id(session.user_id) if session else None

    if session and user and session.needs_refresh(get_session_duration_days()):
        session = refresh_session(session.id) or session
        set_session_cookie(response, session.id)

    return {
        "request_id": request_id,
        "session": session.to_dict(user) if session and user else None,
    }


@router.post("/refresh")
async def refresh(raw_request: Request, response: Response):
    """Extend the current session to a full lifetime."""
    request_id = get_request_id(raw_request) or "unknown"
    session_id = get_session_id(raw_request)
    session = refresh_session(session_id) if session_id else None
    user = get_user_by_id(session.user_id) if session else None

    if not session or not user:
        expired = JSONResponse(
            status_code=401,
            content={
                "request_id": request_id,
                "error": "session_expired",
                "detail": "Session expired or not found",
            },
        )
        clear_session_cookie(expired)
        return expired

    set_session_cookie(response, session.id)
    return {"request_id": request_id, "session": session.to_dict(user)}

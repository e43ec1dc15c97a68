# app/routers/pages.py
"""
Web UI Router - server-rendered pages.

Every predictive page and the history page require a signed-in user and
redirect to /auth otherwise. Predictions go through the shared
PredictionFlow: gate, proxy call, result card, best-effort history write.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse

from app.correlation import get_client_ip
from app.pages.history import get_history_page_html
from app.pages.home import get_auth_page_html, get_home_page_html
from app.pages.predict import get_image_page_html, get_manual_page_html, get_voice_page_html
from app.prediction_flow import (
    Notification,
    PredictionFlow,
    check_image_selected,
    check_manual_form,
    check_voice_transcript,
)
from app.uploads import UploadError, validate_image_upload
from auth.middleware import (
    clear_session_cookie,
    get_session_id,
    page_user,
    redirect_to_auth,
    set_session_cookie,
)
from auth.service import (
    AuthError,
    authenticate_user,
    create_session,
    create_user,
    invalidate_session,
)
from persistence.predictions import delete_prediction, list_predictions

_logger = logging.getLogger(__name__)

router = APIRouter(tags=["Web UI"])


# =============================================================================
# Home / Auth
# =============================================================================


@router.get("/", response_class=HTMLResponse)
async def home_page(raw_request: Request):
    """Landing page with the three prediction modes."""
    return HTMLResponse(content=get_home_page_html(user=page_user(raw_request)))


@router.get("/auth", response_class=HTMLResponse)
async def auth_page(raw_request: Request, signed_out: bool = False):
    """Sign-in / sign-up page. Signed-in users go straight home."""
    if page_user(raw_request):
        return RedirectResponse(url="/", status_code=302)

    notification = None
    if signed_out:
        notification = Notification(
            title="Signed out",
            description="You have been signed out successfully",
        )
    return HTMLResponse(content=get_auth_page_html(notification=notification))


@router.post("/auth", response_class=HTMLResponse)
async def auth_submit(
    raw_request: Request,
    email: str = Form(default=""),
    password: str = Form(default=""),
    mode: str = Form(default="signin"),
):
    """Sign in (mode=signin) or create an account (mode=signup)."""
    try:
        if mode == "signup":
            user = create_user(email=email, password=password)
        else:
            user = authenticate_user(email, password)
    except AuthError as e:
        return HTMLResponse(
            status_code=400 if mode == "signup" else 401,
            content=get_auth_page_html(
                notification=Notification.error(str(e)),
                email=email,
                mode=mode,
            ),
        )

    session = create_session(
        user_id=user.id,
        ip_address=get_client_ip(raw_request),
        user_agent=raw_request.headers.get("user-agent"),
    )
    response = RedirectResponse(url="/", status_code=303)
    set_session_cookie(response, session.id)
    return response


@router.post("/signout")
async def signout(raw_request: Request):
    """End the session and return to the sign-in page."""
    session_id = get_session_id(raw_request)
    if session_id:
        invalidate_session(session_id)

    response = RedirectResponse(url="/auth?signed_out=true", status_code=303)
    clear_session_cookie(response)
    return response


# =============================================================================
# Predictive Pages
# =============================================================================


@router.get("/predict/manual", response_class=HTMLResponse)
async def manual_page(raw_request: Request):
    user = page_user(raw_request)
    if not user:
        return redirect_to_auth()
    return HTMLResponse(content=get_manual_page_html(user))


@router.post("/predict/manual", response_class=HTMLResponse)
async def manual_submit(
    raw_request: Request,
    bedrooms: str = Form(default=""),
    floors: str = Form(default=""),
    area_sqft: str = Form(default=""),
    location: str = Form(default=""),
    amenities: Optional[List[str]] = Form(default=None),
):
    user = page_user(raw_request)
    if not user:
        return redirect_to_auth()

    form = {
        "bedrooms": bedrooms,
        "floors": floors,
        "area_sqft": area_sqft,
        "location": location,
    }
    gate = check_manual_form(form, amenities)
    outcome = await PredictionFlow("manual", user.id).submit(gate)

    return HTMLResponse(
        content=get_manual_page_html(
            user,
            outcome=outcome,
            form=form,
            selected_amenities=amenities,
        )
    )


@router.get("/predict/image", response_class=HTMLResponse)
async def image_page(raw_request: Request):
    user = page_user(raw_request)
    if not user:
        return redirect_to_auth()
    return HTMLResponse(content=get_image_page_html(user))


@router.post("/predict/image", response_class=HTMLResponse)
async def image_submit(
    raw_request: Request,
    image: Optional[UploadFile] = File(default=None),
):
    user = page_user(raw_request)
    if not user:
        return redirect_to_auth()

    image_data_uri = None
    if image is not None:
        data = await image.read()
        if data:
            try:
                upload = validate_image_upload(image.filename, image.content_type, data)
            except UploadError as e:
                return HTMLResponse(
                    content=get_image_page_html(user, notification=Notification.error(str(e)))
                )
            image_data_uri = upload.to_data_uri()

    gate = check_image_selected(image_data_uri)
    outcome = await PredictionFlow("image", user.id).submit(gate)

    return HTMLResponse(
        content=get_image_page_html(user, outcome=outcome, image_data_uri=image_data_uri)
    )


@router.get("/predict/voice", response_class=HTMLResponse)
async def voice_page(raw_request: Request):
    user = page_user(raw_request)
    if not user:
        return redirect_to_auth()
    return HTMLResponse(content=get_voice_page_html(user))


@router.post("/predict/voice", response_class=HTMLResponse)
async def voice_submit(raw_request: Request, transcript: str = Form(default="")):
    user = page_user(raw_request)
    if not user:
        return redirect_to_auth()

    gate = check_voice_transcript(transcript)
    outcome = await PredictionFlow("voice", user.id).submit(gate)

    return HTMLResponse(content=get_voice_page_html(user, outcome=outcome, transcript=transcript))


# =============================================================================
# History
# =============================================================================


@router.get("/history", response_class=HTMLResponse)
async def history_page(raw_request: Request, deleted: bool = False):
    """The user's predictions, newest first."""
    user = page_user(raw_request)
    if not user:
        return redirect_to_auth()

    notification = None
    if deleted:
        notification = Notification(title="Deleted", description="Prediction removed from history")

    try:
        records = list_predictions(user.id)
    except Exception:
        _logger.exception(f"Error loading history for user {user.id}")
        records = []
        notification = Notification.error("Failed to load history")

    return HTMLResponse(content=get_history_page_html(user, records, notification=notification))


@router.post("/history/{prediction_id}/delete")
async def history_delete(prediction_id: str, raw_request: Request):
    """Form fallback for deleting one record (the page deletes via the API when JS runs)."""
    user = page_user(raw_request)
    if not user:
        return redirect_to_auth()

    if not delete_prediction(prediction_id, user.id):
        return HTMLResponse(
            status_code=404,
            content=get_history_page_html(
                user,
                list_predictions(user.id),
                notification=Notification.error("Failed to delete prediction"),
            ),
        )

    return RedirectResponse(url="/history?deleted=true", status_code=303)

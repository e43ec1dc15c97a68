# app/routers/predictions.py
"""
Prediction history API.

All endpoints act on the signed-in user's own records only.

GET    /api/predictions        - list, newest first
POST   /api/predictions        - store a record for the current user
DELETE /api/predictions/{id}   - delete one of the current user's records
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.correlation import get_request_id
from app.schemas.prediction import PredictionRecordCreate
from auth.middleware import get_required_user
from auth.models import User
from persistence.predictions import (
    PredictionStoreError,
    delete_prediction,
    list_predictions,
    save_prediction,
)

_logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/predictions", tags=["history"])


@router.get("")
async def get_predictions(raw_request: Request, user: User = Depends(get_required_user)):
    """
    Get the current user's prediction history.

    Response:
        {"request_id": ..., "items": [...], "count": N}
    """
    request_id = get_request_id(raw_request) or "unknown"
    records = list_predictions(user.id)
    return {
        "request_id": request_id,
        "items": [record.to_dict() for record in records],
        "count": len(records),
    }


@router.post("", status_code=201)
async def create_prediction(
    request: PredictionRecordCreate,
    raw_request: Request,
    user: User = Depends(get_required_user),
):
    """Store a prediction record owned by the current user."""
    request_id = get_request_id(raw_request) or "unknown"

    try:
        record = save_prediction(user_id=user.id, **request.model_dump())
    except PredictionStoreError as e:
        return JSONResponse(
            status_code=400,
            content={
                "request_id": request_id,
                "error": "invalid_record",
                "detail": str(e),
            },
        )

    return {"request_id": request_id, "item": record.to_dict()}


@router.delete("/{prediction_id}")
async def remove_prediction(
    prediction_id: str,
    raw_request: Request,
    user: User = Depends(get_required_user),
):
    """Delete one record; 404 if it does not exist or is not the user's."""
    request_id = get_request_id(raw_request) or "unknown"

    if not delete_prediction(prediction_id, user.id):
        return JSONResponse(
            status_code=404,
            content={
                "request_id": request_id,
                "error": "not_found",
                "detail": f"Prediction {prediction_id} not found",
            },
        )

    return {"request_id": request_id, "deleted": prediction_id}

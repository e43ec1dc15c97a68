# app/routers/predict.py
"""
Price prediction proxy endpoint.

POST /functions/v1/predict-price
    body:     {"type": "manual" | "image" | "voice", "data": {...}}
    200:      the model's JSON reply, unchanged
              {"predicted_price": ..., "explanation": ..., "price_range": {"min": ..., "max": ...}}
    500:      {"error": "<message>"} for any failure

The endpoint does not persist anything; saving history is the caller's job.
"""
from __future__ import annotations

import logging
import time
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.correlation import get_request_id
from app.predictor import PredictionError, InvalidPredictionRequest, predict_price

_logger = logging.getLogger(__name__)

router = APIRouter(tags=["Prediction"])


def _log_request(
    request_id: str,
    prediction_type: Optional[str],
    status_code: int,
    latency_ms: float,
    error_type: Optional[str] = None,
) -> None:
    """
    Log one structured line per proxy call.

    Never logs prompt contents, transcripts or image data.
    """
    _logger.info(
        "request_id=%s route=/functions/v1/predict-price type=%s status_code=%d latency_ms=%.2f%s",
        request_id,
        prediction_type or "-",
        status_code,
        latency_ms,
        f" error_type={error_type}" if error_type else "",
    )


@router.post("/functions/v1/predict-price")
async def predict_price_proxy(raw_request: Request):
    """Forward a typed prediction request to the AI gateway."""
    request_id = get_request_id(raw_request) or "unknown"
    start_time = time.perf_counter()
    prediction_type = None

    try:
        try:
            body = await raw_request.json()
        except ValueError as e:
            raise InvalidPredictionRequest("Request body must be JSON") from e

        if not isinstance(body, dict):
            raise InvalidPredictionRequest("Request body must be an object")

        prediction_type = body.get("type")
        prediction = await predict_price(prediction_type, body.get("data"))

    except PredictionError as e:
        latency_ms = (time.perf_counter() - start_time) * 1000
        _log_request(request_id, prediction_type, 500, latency_ms, type(e).__name__)
        _logger.error(f"Error in predict-price: {e}")
        return JSONResponse(status_code=500, content={"error": str(e)})

    latency_ms = (time.perf_counter() - start_time) * 1000
    _log_request(request_id, prediction_type, 200, latency_ms)
    return JSONResponse(content=prediction)

# app/predictor/client.py
"""
AI gateway client for house price predictions.

Sends one chat-completion request per prediction and returns the model's
JSON reply unchanged. No retries, no caching, no timeout.
"""
from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from app.predictor.config import get_gateway_api_key, get_gateway_model, get_gateway_url
from app.predictor.errors import (
    GENERIC_FAILURE_MESSAGE,
    GatewayConfigurationError,
    GatewayPayloadError,
    GatewayResponseError,
    GatewayUnavailableError,
)
from app.predictor.prompts import build_messages

_logger = logging.getLogger(__name__)


def _upstream_error_message(body: Any) -> str:
    """Pull error.message out of a gateway error body, if there is one."""
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
    return GENERIC_FAILURE_MESSAGE


def _strip_code_fences(content: str) -> str:
    """Remove a ```json ... ``` wrapper if the model added one."""
    content = content.strip()
    if content.startswith("```json"):
        content = content[7:]
    if content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    return content.strip()


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not JSON and cannot be sent back to the caller
    raise GatewayPayloadError(f"Invalid JSON response: non-finite number {name}")


def parse_completion(body: Any) -> Any:
    """
    Extract and decode the JSON prediction from a chat-completion body.

    Raises:
        GatewayPayloadError: Missing message content or content that is not JSON
    """
    try:
        content = body["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise GatewayPayloadError(f"Unexpected response from AI gateway: {e!r}") from e

    if not isinstance(content, str) or not content.strip():
        raise GatewayPayloadError("Empty response from AI gateway")

    try:
        return json.loads(_strip_code_fences(content), parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        _logger.error(f"Failed to parse gateway reply as JSON ({len(content)} chars)")
        raise GatewayPayloadError(f"Invalid JSON response: {e}") from e


async def predict_price(prediction_type: str, data: Any) -> Any:
    """
    Ask the AI gateway for a price prediction.

    Args:
        prediction_type: manual, image or voice
        data: Type-specific payload (see app.schemas.prediction)

    Returns:
        The decoded JSON reply, normally
        {"predicted_price": ..., "explanation": ..., "price_range": {"min": ..., "max": ...}}

    Raises:
        InvalidPredictionRequest: Bad type or payload
        GatewayConfigurationError: No API key configured
        GatewayUnavailableError: Network failure
        GatewayResponseError: Non-2xx answer from the gateway
        GatewayPayloadError: Reply could not be decoded
    """
    api_key = get_gateway_api_key()
    if not api_key:
        raise GatewayConfigurationError("AI_GATEWAY_API_KEY not configured")

    messages = build_messages(prediction_type, data)

    request_body = {
        "model": get_gateway_model(),
        "messages": messages,
        "response_format": {"type": "json_object"},
    }
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }

    try:
        async with httpx.AsyncClient(timeout=None) as client:
            response = await client.post(
                get_gateway_url(),
                headers=headers,
                json=request_body,
            )
    except httpx.HTTPError as e:
        _logger.error(f"AI gateway request failed: {e}")
        raise GatewayUnavailableError(f"AI gateway unreachable: {e}") from e

    try:
        body = response.json()
    except ValueError:
        body = None

    if not 200 <= response.status_code < 300:
        _logger.error(f"AI gateway error: status={response.status_code} body={body}")
        raise GatewayResponseError(_upstream_error_message(body), response.status_code)

    if body is None:
        raise GatewayPayloadError("AI gateway returned a non-JSON body")

    return parse_completion(body)

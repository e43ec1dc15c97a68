# app/predictor/prompts.py
"""
Prompt templates for house price prediction.

Each request type gets a fixed system prompt plus a user prompt carrying the
type-specific payload. All prompts ask for the same JSON reply shape.
"""
from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from app.predictor.errors import InvalidPredictionRequest
from app.schemas.prediction import (
    PAYLOAD_SCHEMAS,
    ManualPredictionInput,
    VoicePredictionInput,
)

RESPONSE_FORMAT_INSTRUCTION = (
    "Format your response as JSON with keys: predicted_price (number), "
    "explanation (string), price_range (object with min and max)."
)

MANUAL_SYSTEM_PROMPT = (
    "You are a house price prediction AI for Indian real estate. You predict prices "
    "in Indian Rupees based on property features using regression analysis principles. "
    "Consider location value, size, amenities, and market trends. Be realistic and "
    "provide detailed reasoning."
)

IMAGE_SYSTEM_PROMPT = (
    "You are a house price prediction AI analyzing property images. Assess the ambiance, "
    "quality, location type, architectural style, and condition to predict the price in "
    "Indian Rupees. Consider visible amenities, finishes, and overall appeal."
)

VOICE_SYSTEM_PROMPT = (
    "You are a house price prediction AI. A user has described a property verbally. "
    "Extract relevant details and predict the price in Indian Rupees. Handle multilingual "
    "descriptions and informal language. Use regression analysis principles."
)


def _format_number(value: float) -> str:
    """1200.0 -> '1200', 1200.5 -> '1200.5'."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def build_manual_prompt(data: ManualPredictionInput) -> str:
    amenities = ", ".join(data.amenities) if data.amenities else "None specified"
    return f"""Predict the house price in Rupees for the following property:
- Bedrooms: {data.bedrooms}
- Floors: {data.floors}
- Area: {_format_number(data.area_sqft)} sq ft
- Location: {data.location}
- Amenities: {amenities}

Provide:
1. Predicted price in Rupees (as a number)
2. Brief explanation of key price factors
3. Price range (min-max)

{RESPONSE_FORMAT_INSTRUCTION}"""


def build_image_prompt() -> str:
    return f"""Analyze this house image and predict its price in Indian Rupees. Provide:
1. Predicted price in Rupees (as a number)
2. Analysis of visible features affecting price
3. Price range (min-max)

{RESPONSE_FORMAT_INSTRUCTION}"""


def build_voice_prompt(data: VoicePredictionInput) -> str:
    return f"""User's voice description: "{data.transcript}"

Based on this description, predict the house price in Indian Rupees. Provide:
1. Predicted price in Rupees (as a number)
2. Key features extracted from description
3. Price range (min-max)

{RESPONSE_FORMAT_INSTRUCTION}"""


def parse_payload(prediction_type: str, data: Any):
    """
    Validate the type-specific payload.

    Raises:
        InvalidPredictionRequest: Unknown type or missing/invalid fields
    """
    schema = PAYLOAD_SCHEMAS.get(prediction_type) if isinstance(prediction_type, str) else None
    if schema is None:
        raise InvalidPredictionRequest(f"Unsupported prediction type: {prediction_type}")
    if not isinstance(data, dict):
        raise InvalidPredictionRequest(f"Invalid {prediction_type} payload: expected an object")

    try:
        return schema.model_validate(data)
    except ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise InvalidPredictionRequest(
            f"Invalid {prediction_type} payload: {', '.join(fields)}"
        ) from e


def build_messages(prediction_type: str, data: Any) -> list[dict]:
    """
    Build the chat-completion messages for a request.

    Image requests send the picture as an image_url content part next to
    the text instruction.
    """
    payload = parse_payload(prediction_type, data)

    if prediction_type == "manual":
        return [
            {"role": "system", "content": MANUAL_SYSTEM_PROMPT},
            {"role": "user", "content": build_manual_prompt(payload)},
        ]

    if prediction_type == "image":
        return [
            {"role": "system", "content": IMAGE_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": build_image_prompt()},
                    {"type": "image_url", "image_url": {"url": payload.image_url}},
                ],
            },
        ]

    return [
        {"role": "system", "content": VOICE_SYSTEM_PROMPT},
        {"role": "user", "content": build_voice_prompt(payload)},
    ]

# app/predictor/config.py
"""
Configuration for the AI gateway used for price predictions.

Environment variables:
- AI_GATEWAY_API_KEY: Gateway credential (falls back to LOVABLE_API_KEY)
- AI_GATEWAY_URL: Chat-completion endpoint
- AI_GATEWAY_MODEL: Model to request (default: google/gemini-2.5-flash)

Values are read on every call so a running process picks up changes
(and tests can patch os.environ).
"""

import os

DEFAULT_GATEWAY_URL = "https://ai.gateway.lovable.dev/v1/chat/completions"
DEFAULT_GATEWAY_MODEL = "google/gemini-2.5-flash"


def get_gateway_api_key() -> str | None:
    """Get the gateway API key, or None when unset/empty."""
    key = os.environ.get("AI_GATEWAY_API_KEY") or os.environ.get("LOVABLE_API_KEY")
    if not key or not key.strip():
        return None
    return key.strip()


def is_gateway_configured() -> bool:
    """Check if a gateway API key is configured."""
    return get_gateway_api_key() is not None


def get_gateway_url() -> str:
    """Get the chat-completion endpoint URL."""
    return os.environ.get("AI_GATEWAY_URL") or DEFAULT_GATEWAY_URL


def get_gateway_model() -> str:
    """Get the model requested from the gateway."""
    return os.environ.get("AI_GATEWAY_MODEL") or DEFAULT_GATEWAY_MODEL

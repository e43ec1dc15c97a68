# app/predictor/errors.py
"""
Errors raised while producing a price prediction.

Every subclass is reported to HTTP callers as {"error": str(exc)} with
status 500; the classes exist so callers and logs can tell causes apart.
"""
from __future__ import annotations

GENERIC_FAILURE_MESSAGE = "AI prediction failed"


class PredictionError(Exception):
    """Base exception for prediction failures."""
    pass


class InvalidPredictionRequest(PredictionError):
    """Unknown request type or missing/invalid payload fields."""
    pass


class GatewayConfigurationError(PredictionError):
    """Raised when the gateway credential is missing."""
    pass


class GatewayUnavailableError(PredictionError):
    """Raised when the gateway cannot be reached."""
    pass


class GatewayResponseError(PredictionError):
    """Raised when the gateway answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class GatewayPayloadError(PredictionError):
    """Raised when the gateway reply is not the JSON we asked for."""
    pass

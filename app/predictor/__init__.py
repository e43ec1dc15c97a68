# app/predictor/__init__.py
"""
House price prediction through a hosted LLM gateway.

Builds a prompt per input type (manual, image, voice) and returns the
model's JSON estimate.
"""

from .client import predict_price
from .config import is_gateway_configured
from .errors import PredictionError, InvalidPredictionRequest

__all__ = [
    "predict_price",
    "is_gateway_configured",
    "PredictionError",
    "InvalidPredictionRequest",
]

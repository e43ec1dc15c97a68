# persistence/__init__.py
"""
Persistence layer.

Provides SQLite-backed storage for:
- Users and sessions (see auth/)
- Per-user prediction history
"""

from persistence.db import get_db, init_db, close_db
from persistence.predictions import (
    PredictionRecord,
    PredictionStoreError,
    save_prediction,
    list_predictions,
    delete_prediction,
)

__all__ = [
    "get_db",
    "init_db",
    "close_db",
    "PredictionRecord",
    "PredictionStoreError",
    "save_prediction",
    "list_predictions",
    "delete_prediction",
]

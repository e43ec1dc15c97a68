# persistence/predictions.py
"""
Prediction history storage.

One row per successful price estimate. Every read and delete is scoped to
the owning user, so a user can never see or remove another user's rows.
Rows are never updated in place.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from persistence.db import get_db, init_db

_logger = logging.getLogger(__name__)

PREDICTION_TYPES = ("manual", "image", "voice")


class PredictionStoreError(Exception):
    """Raised when a record cannot be stored as given."""

    pass


@dataclass
class PredictionRecord:
    """
    A persisted prediction owned by a single user.

    Attributes:
        id: Record ID (UUID), generated by the store
        user_id: Owning user ID
        prediction_type: manual, image or voice
        predicted_price: Estimated price in Rupees
        bedrooms, floors, area_sqft, location, amenities: manual inputs
        image_url: Data URI of the uploaded image (image predictions)
        voice_transcript: Spoken description (voice predictions)
        created_at: ISO-8601 UTC timestamp set by the store
    """
    id: str
    user_id: str
    prediction_type: str
    predicted_price: float
    created_at: str
    bedrooms: Optional[int] = None
    floors: Optional[int] = None
    area_sqft: Optional[float] = None
    location: Optional[str] = None
    amenities: list[str] = field(default_factory=list)
    image_url: Optional[str] = None
    voice_transcript: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "prediction_type": self.prediction_type,
            "predicted_price": self.predicted_price,
            "bedrooms": self.bedrooms,
            "floors": self.floors,
            "area_sqft": self.area_sqft,
            "location": self.location,
            "amenities": list(self.amenities),
            "image_url": self.image_url,
            "voice_transcript": self.voice_transcript,
            "created_at": self.created_at,
        }


def save_prediction(
    user_id: str,
    prediction_type: str,
    predicted_price: float,
    bedrooms: Optional[int] = None,
    floors: Optional[int] = None,
    area_sqft: Optional[float] = None,
    location: Optional[str] = None,
    amenities: Optional[list[str]] = None,
    image_url: Optional[str] = None,
    voice_transcript: Optional[str] = None,
) -> PredictionRecord:
    """
    Insert a prediction record for a user.

    Args:
        user_id: Owning user ID
        prediction_type: manual, image or voice
        predicted_price: Estimated price returned by the model
        bedrooms..voice_transcript: Type-specific inputs (optional)

    Returns:
        The stored PredictionRecord with id and created_at filled in

    Raises:
        PredictionStoreError: If the type is unknown or required fields are missing
    """
    if not user_id:
        raise PredictionStoreError("user_id is required")
    if prediction_type not in PREDICTION_TYPES:
        raise PredictionStoreError(f"Invalid prediction type: {prediction_type}")
    if predicted_price is None:
        raise PredictionStoreError("predicted_price is required")

    init_db()

    record = PredictionRecord(
        id=str(uuid4()),
        user_id=user_id,
        prediction_type=prediction_type,
        predicted_price=float(predicted_price),
        created_at=datetime.now(timezone.utc).isoformat(),
        bedrooms=bedrooms,
        floors=floors,
        area_sqft=area_sqft,
        location=location,
        amenities=list(amenities or []),
        image_url=image_url,
        voice_transcript=voice_transcript,
    )

    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO predictions
            (id, user_id, prediction_type, predicted_price, bedrooms, floors,
             area_sqft, location, amenities_json, image_url, voice_transcript, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.id,
                record.user_id,
                record.prediction_type,
                record.predicted_price,
                record.bedrooms,
                record.floors,
                record.area_sqft,
                record.location,
                json.dumps(record.amenities) if record.amenities else None,
                record.image_url,
                record.voice_transcript,
                record.created_at,
            ),
        )

    _logger.debug(f"Saved {prediction_type} prediction {record.id} for user {user_id}")
    return record


def list_predictions(user_id: str) -> list[PredictionRecord]:
    """
    Get every record owned by user_id, newest first.

    Ties on created_at fall back to insertion order, newest first.
    """
    init_db()

    with get_db() as conn:
        rows = conn.execute(
            """
            SELECT * FROM predictions
            WHERE user_id = ?
            ORDER BY created_at DESC, rowid DESC
            """,
            (user_id,),
        ).fetchall()

    return [_row_to_record(row) for row in rows]


def delete_prediction(prediction_id: str, user_id: str) -> bool:
    """
    Delete one record owned by user_id.

    Returns:
        True if deleted, False if not found or owned by someone else
    """
    init_db()

    with get_db() as conn:
        cursor = conn.execute(
            "DELETE FROM predictions WHERE id = ? AND user_id = ?",
            (prediction_id, user_id),
        )
        deleted = cursor.rowcount > 0

    if deleted:
        _logger.info(f"Deleted prediction {prediction_id} for user {user_id}")
    return deleted


def _row_to_record(row) -> PredictionRecord:
    """Convert a database row to a PredictionRecord."""
    amenities = json.loads(row["amenities_json"]) if row["amenities_json"] else []
    return PredictionRecord(
        id=row["id"],
        user_id=row["user_id"],
        prediction_type=row["prediction_type"],
        predicted_price=row["predicted_price"],
        created_at=row["created_at"],
        bedrooms=row["bedrooms"],
        floors=row["floors"],
        area_sqft=row["area_sqft"],
        location=row["location"],
        amenities=amenities,
        image_url=row["image_url"],
        voice_transcript=row["voice_transcript"],
    )

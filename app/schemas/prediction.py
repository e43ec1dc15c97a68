# app/schemas/prediction.py
"""
Pydantic schemas for the price prediction proxy and history API.

Uses snake_case field names, matching the stored prediction records.
"""
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


PredictionType = Literal["manual", "image", "voice"]


# =============================================================================
# Proxy Request Schemas
# =============================================================================


class ManualPredictionInput(BaseModel):
    """Property details typed into the manual form."""
    bedrooms: int = Field(ge=1)
    floors: int = Field(ge=1)
    area_sqft: float = Field(gt=0)
    location: str = Field(min_length=1)
    amenities: List[str] = Field(default_factory=list)

    @field_validator("location")
    @classmethod
    def location_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("location cannot be blank")
        return v


class ImagePredictionInput(BaseModel):
    """Photo of the property, as a data URI or reachable URL."""
    image_url: str = Field(min_length=1)


class VoicePredictionInput(BaseModel):
    """Spoken description of the property."""
    transcript: str

    @field_validator("transcript")
    @classmethod
    def transcript_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("transcript cannot be empty")
        return v


PAYLOAD_SCHEMAS = {
    "manual": ManualPredictionInput,
    "image": ImagePredictionInput,
    "voice": VoicePredictionInput,
}


# =============================================================================
# History Schemas
# =============================================================================


class PredictionRecordCreate(BaseModel):
    """Body of POST /api/predictions; user_id always comes from the session."""
    prediction_type: PredictionType
    predicted_price: float = Field(allow_inf_nan=False)
    bedrooms: Optional[int] = None
    floors: Optional[int] = None
    area_sqft: Optional[float] = Field(default=None, allow_inf_nan=False)
    location: Optional[str] = None
    amenities: List[str] = Field(default_factory=list)
    image_url: Optional[str] = None
    voice_transcript: Optional[str] = None

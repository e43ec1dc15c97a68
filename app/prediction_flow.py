# app/prediction_flow.py
"""
Shared submit flow for the manual, image and voice prediction pages.

State machine (one flow per submission):

    IDLE -> SUBMITTING -> SUCCESS -> IDLE
                       -> FAILURE -> IDLE

Input gates run before anything leaves the page: a gate failure produces a
notification and the proxy is never called. On SUCCESS the result is
rendered and a history record is written best-effort; a failed write is
logged and never changes the rendered result.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from starlette.concurrency import run_in_threadpool

from app.formatting import format_inr, format_price_range
from app.predictor import PredictionError, predict_price
from persistence.predictions import save_prediction

_logger = logging.getLogger(__name__)

GENERIC_ERROR_DESCRIPTION = "Failed to predict price"
MIN_AREA_SQFT = 100

AMENITIES = [
    "Parking",
    "Swimming Pool",
    "Gym",
    "Garden",
    "Security",
    "Elevator",
    "Balcony",
    "Power Backup",
    "Water Supply",
]


class PredictionState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILURE = "failure"


_ALLOWED_TRANSITIONS = {
    PredictionState.IDLE: {PredictionState.SUBMITTING},
    PredictionState.SUBMITTING: {PredictionState.SUCCESS, PredictionState.FAILURE},
    PredictionState.SUCCESS: {PredictionState.IDLE},
    PredictionState.FAILURE: {PredictionState.IDLE},
}


class InvalidTransitionError(Exception):
    """Flow moved between states out of order."""
    pass


@dataclass
class Notification:
    """A dismissible toast shown on the page."""
    title: str
    description: str
    variant: str = "default"  # default | destructive

    @classmethod
    def error(cls, description: str) -> Notification:
        return cls(title="Error", description=description, variant="destructive")


@dataclass
class GateResult:
    """
    Outcome of the pre-submission check.

    payload is what goes to the proxy; record_fields are stored with the
    history row next to the predicted price.
    """
    ok: bool
    payload: Dict[str, Any] = field(default_factory=dict)
    record_fields: Dict[str, Any] = field(default_factory=dict)
    notification: Optional[Notification] = None

    @classmethod
    def reject(cls, description: str) -> GateResult:
        return cls(ok=False, notification=Notification.error(description))


@dataclass
class PredictionOutcome:
    """What a page renders after a submission."""
    state: PredictionState
    result: Optional[dict] = None
    notification: Optional[Notification] = None
    record_id: Optional[str] = None

    @property
    def formatted_price(self) -> Optional[str]:
        if self.result is None:
            return None
        return format_inr(self.result["predicted_price"])

    @property
    def formatted_range(self) -> Optional[str]:
        if self.result is None:
            return None
        return format_price_range(self.result.get("price_range"))

    @property
    def explanation(self) -> Optional[str]:
        if self.result is None:
            return None
        explanation = self.result.get("explanation")
        return str(explanation) if explanation is not None else None


# =============================================================================
# Gates
# =============================================================================


def _parse_int(raw: Any) -> Optional[int]:
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        return None


def _parse_float(raw: Any) -> Optional[float]:
    try:
        value = float(str(raw).strip())
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def check_manual_form(form: Mapping[str, Any], amenities: Optional[List[str]] = None) -> GateResult:
    """
    Gate for the manual form.

    bedrooms, floors, area_sqft and location are required; numbers honour
    the form's min constraints (1 bedroom, 1 floor, MIN_AREA_SQFT). Unknown
    amenities are dropped.
    """
    required = ("bedrooms", "floors", "area_sqft", "location")
    missing = [name for name in required if not str(form.get(name) or "").strip()]
    if missing:
        return GateResult.reject("Please fill in all required fields")

    bedrooms = _parse_int(form["bedrooms"])
    floors = _parse_int(form["floors"])
    area_sqft = _parse_float(form["area_sqft"])
    location = str(form["location"]).strip()

    if bedrooms is None or floors is None or area_sqft is None:
        return GateResult.reject("Bedrooms, floors and area must be numbers")
    if bedrooms < 1 or floors < 1:
        return GateResult.reject("Bedrooms and floors must be at least 1")
    if area_sqft < MIN_AREA_SQFT:
        return GateResult.reject(f"Area must be at least {MIN_AREA_SQFT} sq ft")

    selected = [a for a in (amenities or []) if a in AMENITIES]
    fields = {
        "bedrooms": bedrooms,
        "floors": floors,
        "area_sqft": area_sqft,
        "location": location,
        "amenities": selected,
    }
    return GateResult(ok=True, payload=dict(fields), record_fields=dict(fields))


def check_image_selected(image_data_uri: Optional[str]) -> GateResult:
    """Gate for the image page: a file must have been selected."""
    if not image_data_uri:
        return GateResult.reject("Please select an image first")
    return GateResult(
        ok=True,
        payload={"image_url": image_data_uri},
        record_fields={"image_url": image_data_uri},
    )


def check_voice_transcript(transcript: Optional[str]) -> GateResult:
    """Gate for the voice page: the transcript must not be empty."""
    text = (transcript or "").strip()
    if not text:
        return GateResult.reject("Please record a description first")
    return GateResult(
        ok=True,
        payload={"transcript": text},
        record_fields={"voice_transcript": text},
    )


# =============================================================================
# Flow
# =============================================================================


Predictor = Callable[[str, Any], Awaitable[Any]]
Recorder = Callable[..., Any]


class PredictionFlow:
    """
    Drives one page's submission through the shared state machine.

    Args:
        prediction_type: manual, image or voice
        user_id: Owner of the history record
        predictor: Proxy call (defaults to app.predictor.predict_price)
        recorder: History writer (defaults to persistence.predictions.save_prediction)
    """

    def __init__(
        self,
        prediction_type: str,
        user_id: str,
        predictor: Optional[Predictor] = None,
        recorder: Optional[Recorder] = None,
    ):
        self.prediction_type = prediction_type
        self.user_id = user_id
        self._predictor = predictor
        self._recorder = recorder
        self._state = PredictionState.IDLE

    @property
    def state(self) -> PredictionState:
        return self._state

    def _transition(self, new_state: PredictionState) -> None:
        if new_state not in _ALLOWED_TRANSITIONS[self._state]:
            raise InvalidTransitionError(f"{self._state.value} -> {new_state.value}")
        self._state = new_state

    async def submit(self, gate: GateResult) -> PredictionOutcome:
        """
        Run one submission.

        A rejected gate returns a FAILURE outcome without calling the proxy
        and leaves the flow IDLE.
        """
        if not gate.ok:
            return PredictionOutcome(state=PredictionState.FAILURE, notification=gate.notification)

        self._transition(PredictionState.SUBMITTING)
        predictor = self._predictor or predict_price

        try:
            result = await predictor(self.prediction_type, gate.payload)
            _require_price(result)
        except PredictionError as e:
            return self._fail(str(e) or GENERIC_ERROR_DESCRIPTION)

        self._transition(PredictionState.SUCCESS)
        outcome = PredictionOutcome(
            state=PredictionState.SUCCESS,
            result=result,
            notification=Notification(
                title="Prediction Complete!",
                description=f"Estimated price: {format_inr(result['predicted_price'])}",
            ),
        )
        outcome.record_id = await self._record(result, gate.record_fields)

        self._transition(PredictionState.IDLE)
        return outcome

    def _fail(self, description: str) -> PredictionOutcome:
        self._transition(PredictionState.FAILURE)
        outcome = PredictionOutcome(
            state=PredictionState.FAILURE,
            notification=Notification.error(description),
        )
        self._transition(PredictionState.IDLE)
        return outcome

    async def _record(self, result: dict, record_fields: Dict[str, Any]) -> Optional[str]:
        """Write the history row off the event loop; failures are logged and otherwise ignored."""
        recorder = self._recorder or save_prediction
        try:
            record = await run_in_threadpool(
                recorder,
                user_id=self.user_id,
                prediction_type=self.prediction_type,
                predicted_price=result["predicted_price"],
                **record_fields,
            )
        except Exception:
            _logger.exception(
                f"Error saving {self.prediction_type} prediction for user {self.user_id}"
            )
            return None
        return getattr(record, "id", None)


class MissingPriceError(PredictionError):
    """Gateway reply has no numeric predicted_price."""
    pass


def _require_price(result: Any) -> None:
    if not isinstance(result, dict):
        raise MissingPriceError(GENERIC_ERROR_DESCRIPTION)
    price = result.get("predicted_price")
    if not isinstance(price, (int, float)) or isinstance(price, bool):
        raise MissingPriceError(GENERIC_ERROR_DESCRIPTION)
    if isinstance(price, float) and not math.isfinite(price):
        raise MissingPriceError(GENERIC_ERROR_DESCRIPTION)

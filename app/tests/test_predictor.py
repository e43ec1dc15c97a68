# app/tests/test_predictor.py
"""
Tests for the price prediction proxy.

Covers:
- Prompt construction per request type
- Gateway client (request shape, reply decoding, error mapping)
- POST /functions/v1/predict-price
"""
from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.predictor.errors import GatewayPayloadError, InvalidPredictionRequest
from app.predictor.prompts import (
    IMAGE_SYSTEM_PROMPT,
    MANUAL_SYSTEM_PROMPT,
    VOICE_SYSTEM_PROMPT,
    build_messages,
    parse_payload,
)
from app.predictor.client import parse_completion


PREDICT_URL = "/functions/v1/predict-price"

MANUAL_DATA = {
    "bedrooms": 3,
    "floors": 2,
    "area_sqft": 1200,
    "location": "Pune",
    "amenities": ["Parking", "Gym"],
}

PREDICTION = {
    "predicted_price": 7500000,
    "explanation": "Mid-size home in a growing suburb",
    "price_range": {"min": 7000000, "max": 8000000},
}


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def client():
    """Test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture
def gateway_key():
    with patch.dict("os.environ", {"AI_GATEWAY_API_KEY": "gw-test-key"}):
        yield


def _completion(content) -> dict:
    if not isinstance(content, str):
        content = json.dumps(content)
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def _mock_gateway(mock_client, status_code=200, body=None, json_error=False):
    """Wire the patched AsyncClient to answer once with the given body."""
    mock_response = MagicMock()
    mock_response.status_code = status_code
    if json_error:
        mock_response.json.side_effect = ValueError("not json")
    else:
        mock_response.json.return_value = body
    post = AsyncMock(return_value=mock_response)
    mock_client.return_value.__aenter__.return_value.post = post
    return post


# =============================================================================
# Prompts
# =============================================================================


class TestPrompts:
    """Tests for prompt construction."""

    def test_manual_messages(self):
        messages = build_messages("manual", MANUAL_DATA)

        assert messages[0] == {"role": "system", "content": MANUAL_SYSTEM_PROMPT}
        user = messages[1]["content"]
        assert "- Bedrooms: 3" in user
        assert "- Floors: 2" in user
        assert "- Area: 1200 sq ft" in user
        assert "- Location: Pune" in user
        assert "- Amenities: Parking, Gym" in user
        assert "predicted_price (number)" in user

    def test_manual_without_amenities(self):
        data = dict(MANUAL_DATA, amenities=[])
        user = build_messages("manual", data)[1]["content"]
        assert "- Amenities: None specified" in user

    def test_fractional_area_kept(self):
        data = dict(MANUAL_DATA, area_sqft=1250.5)
        user = build_messages("manual", data)[1]["content"]
        assert "- Area: 1250.5 sq ft" in user

    def test_image_messages_carry_picture(self):
        messages = build_messages("image", {"image_url": "data:image/png;base64,AAAA"})

        assert messages[0]["content"] == IMAGE_SYSTEM_PROMPT
        parts = messages[1]["content"]
        assert parts[0]["type"] == "text"
        assert parts[1] == {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAA"}}

    def test_voice_messages_quote_transcript(self):
        messages = build_messages("voice", {"transcript": "2BHK flat near Koregaon Park"})

        assert messages[0]["content"] == VOICE_SYSTEM_PROMPT
        assert 'User\'s voice description: "2BHK flat near Koregaon Park"' in messages[1]["content"]

    @pytest.mark.parametrize("prediction_type", ["commercial", "", None, 5, ["manual"]])
    def test_unknown_type_rejected(self, prediction_type):
        with pytest.raises(InvalidPredictionRequest, match="Unsupported prediction type"):
            parse_payload(prediction_type, MANUAL_DATA)

    def test_missing_manual_fields_rejected(self):
        with pytest.raises(InvalidPredictionRequest) as exc:
            parse_payload("manual", {"bedrooms": 3})
        assert "location" in str(exc.value)

    def test_blank_transcript_rejected(self):
        with pytest.raises(InvalidPredictionRequest):
            parse_payload("voice", {"transcript": "   "})

    def test_non_object_payload_rejected(self):
        with pytest.raises(InvalidPredictionRequest):
            parse_payload("image", "data:image/png;base64,AAAA")


class TestParseCompletion:
    """Tests for decoding the gateway reply."""

    def test_plain_json(self):
        assert parse_completion(_completion(PREDICTION)) == PREDICTION

    def test_code_fenced_json(self):
        fenced = "```json\n" + json.dumps(PREDICTION) + "\n```"
        assert parse_completion(_completion(fenced)) == PREDICTION

    def test_reply_passed_through_unchanged(self):
        odd = {"predicted_price": "lots", "extra": [1, 2, 3]}
        assert parse_completion(_completion(odd)) == odd

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_numbers_rejected(self, literal):
        content = '{"predicted_price": ' + literal + ', "explanation": "x"}'
        with pytest.raises(GatewayPayloadError):
            parse_completion(_completion(content))


# =============================================================================
# Proxy endpoint
# =============================================================================


class TestPredictPriceEndpoint:
    """Tests for POST /functions/v1/predict-price."""

    @pytest.mark.parametrize(
        "prediction_type,data",
        [
            ("manual", MANUAL_DATA),
            ("image", {"image_url": "data:image/jpeg;base64,/9j/AAAA"}),
            ("voice", {"transcript": "Three bedroom villa in Baner with a garden"}),
        ],
    )
    def test_reply_returned_verbatim(self, client, gateway_key, prediction_type, data):
        with patch("app.predictor.client.httpx.AsyncClient") as mock_client:
            _mock_gateway(mock_client, body=_completion(PREDICTION))

            response = client.post(PREDICT_URL, json={"type": prediction_type, "data": data})

        assert response.status_code == 200
        assert response.json() == PREDICTION

    def test_request_sent_to_gateway(self, client, gateway_key):
        with patch("app.predictor.client.httpx.AsyncClient") as mock_client:
            post = _mock_gateway(mock_client, body=_completion(PREDICTION))

            client.post(PREDICT_URL, json={"type": "manual", "data": MANUAL_DATA})

        # One call, no timeout configured on the client
        mock_client.assert_called_once_with(timeout=None)
        post.assert_awaited_once()
        _, kwargs = post.call_args
        assert kwargs["headers"]["Authorization"] == "Bearer gw-test-key"
        assert kwargs["json"]["model"] == "google/gemini-2.5-flash"
        assert kwargs["json"]["response_format"] == {"type": "json_object"}
        assert kwargs["json"]["messages"][0]["content"] == MANUAL_SYSTEM_PROMPT

    def test_missing_key(self, client):
        with patch.dict("os.environ", {"AI_GATEWAY_API_KEY": "", "LOVABLE_API_KEY": ""}):
            with patch("app.predictor.client.httpx.AsyncClient") as mock_client:
                response = client.post(PREDICT_URL, json={"type": "manual", "data": MANUAL_DATA})

        assert response.status_code == 500
        assert response.json() == {"error": "AI_GATEWAY_API_KEY not configured"}
        mock_client.assert_not_called()

    def test_upstream_error_message_surfaced(self, client, gateway_key):
        with patch("app.predictor.client.httpx.AsyncClient") as mock_client:
            _mock_gateway(
                mock_client,
                status_code=429,
                body={"error": {"message": "Rate limit exceeded"}},
            )

            response = client.post(PREDICT_URL, json={"type": "manual", "data": MANUAL_DATA})

        assert response.status_code == 500
        assert response.json() == {"error": "Rate limit exceeded"}

    def test_upstream_error_without_message(self, client, gateway_key):
        with patch("app.predictor.client.httpx.AsyncClient") as mock_client:
            _mock_gateway(mock_client, status_code=502, json_error=True)

            response = client.post(PREDICT_URL, json={"type": "voice", "data": {"transcript": "flat"}})

        assert response.status_code == 500
        assert response.json() == {"error": "AI prediction failed"}

    def test_malformed_model_reply(self, client, gateway_key):
        with patch("app.predictor.client.httpx.AsyncClient") as mock_client:
            _mock_gateway(mock_client, body=_completion("the house costs a lot"))

            response = client.post(PREDICT_URL, json={"type": "manual", "data": MANUAL_DATA})

        assert response.status_code == 500
        assert response.json()["error"].startswith("Invalid JSON response")

    def test_nan_price_returns_error_body(self, client, gateway_key):
        content = '{"predicted_price": NaN, "explanation": "unsure"}'
        with patch("app.predictor.client.httpx.AsyncClient") as mock_client:
            _mock_gateway(mock_client, body=_completion(content))

            response = client.post(PREDICT_URL, json={"type": "manual", "data": MANUAL_DATA})

        assert response.status_code == 500
        assert "non-finite" in response.json()["error"]

    def test_missing_choices(self, client, gateway_key):
        with patch("app.predictor.client.httpx.AsyncClient") as mock_client:
            _mock_gateway(mock_client, body={"choices": []})

            response = client.post(PREDICT_URL, json={"type": "manual", "data": MANUAL_DATA})

        assert response.status_code == 500
        assert set(response.json()) == {"error"}

    def test_network_failure(self, client, gateway_key):
        with patch("app.predictor.client.httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                side_effect=httpx.ConnectError("connection refused")
            )

            response = client.post(PREDICT_URL, json={"type": "manual", "data": MANUAL_DATA})

        assert response.status_code == 500
        assert "unreachable" in response.json()["error"]

    def test_unknown_type(self, client, gateway_key):
        with patch("app.predictor.client.httpx.AsyncClient") as mock_client:
            response = client.post(PREDICT_URL, json={"type": "commercial", "data": {}})

        assert response.status_code == 500
        assert "Unsupported prediction type" in response.json()["error"]
        mock_client.assert_not_called()

    def test_body_not_json(self, client, gateway_key):
        response = client.post(
            PREDICT_URL,
            content=b"bedrooms=3",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Request body must be JSON"}

    def test_body_not_object(self, client, gateway_key):
        response = client.post(PREDICT_URL, json=["manual"])

        assert response.status_code == 500
        assert response.json() == {"error": "Request body must be an object"}

    def test_proxy_does_not_persist(self, client, gateway_key):
        with patch("app.predictor.client.httpx.AsyncClient") as mock_client, \
                patch("persistence.predictions.save_prediction") as mock_save:
            _mock_gateway(mock_client, body=_completion(PREDICTION))

            client.post(PREDICT_URL, json={"type": "manual", "data": MANUAL_DATA})

        mock_save.assert_not_called()

    def test_proxy_needs_no_session(self, client, gateway_key):
        """The proxy is callable without signing in."""
        with patch("app.predictor.client.httpx.AsyncClient") as mock_client:
            _mock_gateway(mock_client, body=_completion(PREDICTION))
            response = client.post(
                PREDICT_URL,
                json={"type": "manual", "data": MANUAL_DATA},
                follow_redirects=False,
            )

        assert response.status_code == 200

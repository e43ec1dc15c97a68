"""Tests for persistence layer."""

import pytest

from persistence.db import init_db, get_db
from persistence.predictions import (
    PredictionStoreError,
    delete_prediction,
    list_predictions,
    save_prediction,
)


def _manual(user_id="user-1", price=7500000, **overrides):
    fields = dict(
        user_id=user_id,
        prediction_type="manual",
        predicted_price=price,
        bedrooms=3,
        floors=2,
        area_sqft=1200.0,
        location="Pune",
        amenities=["Parking"],
    )
    fields.update(overrides)
    return save_prediction(**fields)


def _stored(record, user_id="user-1"):
    """Read a saved record back through the history listing."""
    return next(r for r in list_predictions(user_id) if r.id == record.id)


class TestDatabaseInit:
    """Test database initialization."""

    def test_init_creates_tables(self):
        init_db()
        with get_db() as conn:
            tables = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table'"
            ).fetchall()
            table_names = [t["name"] for t in tables]

        assert "users" in table_names
        assert "sessions" in table_names
        assert "predictions" in table_names

    def test_init_is_idempotent(self):
        init_db()
        init_db()  # Should not raise

    def test_type_constraint_enforced_by_schema(self):
        import sqlite3

        with pytest.raises(sqlite3.IntegrityError):
            with get_db() as conn:
                conn.execute(
                    "INSERT INTO predictions (id, user_id, prediction_type, predicted_price, created_at) "
                    "VALUES ('x', 'u', 'psychic', 1, '2026-01-01T00:00:00+00:00')"
                )


class TestSavePrediction:
    """Test inserting records."""

    def test_save_manual_prediction(self):
        record = _manual()

        assert record.id
        assert record.prediction_type == "manual"
        assert record.predicted_price == 7500000.0
        assert record.created_at

        stored = _stored(record)
        assert stored.bedrooms == 3
        assert stored.floors == 2
        assert stored.area_sqft == 1200.0
        assert stored.location == "Pune"
        assert stored.amenities == ["Parking"]
        assert stored.image_url is None
        assert stored.voice_transcript is None

    def test_save_image_prediction(self):
        record = save_prediction(
            user_id="user-1",
            prediction_type="image",
            predicted_price=5000000,
            image_url="data:image/png;base64,AAAA",
        )
        stored = _stored(record)
        assert stored.image_url == "data:image/png;base64,AAAA"
        assert stored.amenities == []
        assert stored.bedrooms is None

    def test_save_voice_prediction(self):
        record = save_prediction(
            user_id="user-1",
            prediction_type="voice",
            predicted_price=9000000,
            voice_transcript="Three bedroom flat in Baner with a balcony",
        )
        stored = _stored(record)
        assert stored.voice_transcript == "Three bedroom flat in Baner with a balcony"

    def test_unknown_type_rejected(self):
        with pytest.raises(PredictionStoreError):
            save_prediction(user_id="user-1", prediction_type="psychic", predicted_price=1)

    def test_missing_price_rejected(self):
        with pytest.raises(PredictionStoreError):
            save_prediction(user_id="user-1", prediction_type="manual", predicted_price=None)

    def test_missing_owner_rejected(self):
        with pytest.raises(PredictionStoreError):
            save_prediction(user_id="", prediction_type="manual", predicted_price=1)

    def test_to_dict_shape(self):
        data = _manual().to_dict()
        assert set(data) == {
            "id", "user_id", "prediction_type", "predicted_price", "bedrooms",
            "floors", "area_sqft", "location", "amenities", "image_url",
            "voice_transcript", "created_at",
        }


class TestListPredictions:
    """Test history listing."""

    def test_newest_first(self):
        first = _manual(price=1)
        second = _manual(price=2)
        third = _manual(price=3)

        records = list_predictions("user-1")

        assert [r.id for r in records] == [third.id, second.id, first.id]

    def test_created_at_non_increasing(self):
        for price in range(10):
            _manual(price=price)

        stamps = [r.created_at for r in list_predictions("user-1")]
        assert stamps == sorted(stamps, reverse=True)

    def test_identical_timestamps_fall_back_to_insertion_order(self):
        first = _manual(price=1)
        second = _manual(price=2)
        with get_db() as conn:
            conn.execute("UPDATE predictions SET created_at = '2026-01-01T00:00:00+00:00'")

        assert [r.id for r in list_predictions("user-1")] == [second.id, first.id]

    def test_only_owners_records(self):
        mine = _manual(user_id="user-1")
        _manual(user_id="user-2")

        records = list_predictions("user-1")

        assert [r.id for r in records] == [mine.id]

    def test_empty_history(self):
        assert list_predictions("nobody") == []


class TestDeletePrediction:
    """Test owner-only deletion."""

    def test_delete_removes_exactly_one(self):
        keep_a = _manual(price=1)
        gone = _manual(price=2)
        keep_b = _manual(price=3)

        assert delete_prediction(gone.id, "user-1") is True

        remaining = [r.id for r in list_predictions("user-1")]
        assert remaining == [keep_b.id, keep_a.id]

    def test_delete_other_users_record_is_refused(self):
        theirs = _manual(user_id="user-2")

        assert delete_prediction(theirs.id, "user-1") is False
        assert [r.id for r in list_predictions("user-2")] == [theirs.id]

    def test_delete_unknown(self):
        assert delete_prediction("missing", "user-1") is False

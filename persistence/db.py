# persistence/db.py
"""
SQLite connection handling and schema.

One file holds users, sessions and prediction history. Set
VALUEMATRIX_DB_PATH to a persistent volume in deployments; the default
lives under data/ next to the packages.
"""

from __future__ import annotations

import logging
import os
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path

_logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path(__file__).resolve().parent.parent / "data" / "valuematrix.db"
DB_PATH = Path(os.environ.get("VALUEMATRIX_DB_PATH", str(DEFAULT_DB_PATH)))

# (table, DDL) in creation order; reset drops them in reverse
_TABLES = [
    (
        "users",
        """
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            email TEXT NOT NULL UNIQUE,
            password_hash TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
        """,
    ),
    (
        "sessions",
        """
        CREATE TABLE IF NOT EXISTS sessions (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            created_at TEXT NOT NULL,
            expires_at TEXT NOT NULL,
            ip_address TEXT,
            user_agent TEXT
        )
        """,
    ),
    (
        "predictions",
        """
        CREATE TABLE IF NOT EXISTS predictions (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            prediction_type TEXT NOT NULL
                CHECK (prediction_type IN ('manual', 'image', 'voice')),
            predicted_price REAL NOT NULL,
            bedrooms INTEGER,
            floors INTEGER,
            area_sqft REAL,
            location TEXT,
            amenities_json TEXT,
            image_url TEXT,
            voice_transcript TEXT,
            created_at TEXT NOT NULL
        )
        """,
    ),
]

_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_sessions_user ON sessions(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_predictions_user_created "
    "ON predictions(user_id, created_at DESC)",
]

_local = threading.local()
_schema_lock = threading.Lock()
_schema_ready = False


def _connect() -> sqlite3.Connection:
    if str(DB_PATH) != ":memory:":
        DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(DB_PATH), timeout=30.0, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


def _connection() -> sqlite3.Connection:
    """This thread's connection, opened on first use."""
    conn = getattr(_local, "connection", None)
    if conn is None:
        conn = _local.connection = _connect()
    return conn


@contextmanager
def get_db():
    """
    Yield this thread's connection as one transaction.

    Commits when the block finishes, rolls back and re-raises on error.

        with get_db() as conn:
            conn.execute("SELECT ...")
    """
    conn = _connection()
    try:
        yield conn
    except Exception:
        conn.rollback()
        raise
    conn.commit()


def init_db() -> None:
    """Create missing tables and indexes. Cheap after the first call."""
    global _schema_ready

    with _schema_lock:
        if _schema_ready:
            return
        with get_db() as conn:
            for _, ddl in _TABLES:
                conn.execute(ddl)
            for ddl in _INDEXES:
                conn.execute(ddl)
        _schema_ready = True
        _logger.info(f"Database ready at {DB_PATH}")


def close_db() -> None:
    """Close this thread's connection, if open."""
    conn = getattr(_local, "connection", None)
    if conn is not None:
        conn.close()
        _local.connection = None


def reset_db() -> None:
    """Drop every table (tests only); the next init_db recreates them."""
    global _schema_ready

    with _schema_lock:
        with get_db() as conn:
            for table, _ in reversed(_TABLES):
                conn.execute(f"DROP TABLE IF EXISTS {table}")
        _schema_ready = False


def get_db_path() -> Path:
    return DB_PATH

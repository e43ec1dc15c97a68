"""Configure pytest for ValueMatrix."""
import os
import sys
import tempfile
from pathlib import Path

import pytest

# =============================================================================
# Test Environment Configuration
# =============================================================================
# Set environment for tests BEFORE any app imports: the database path and
# bcrypt cost are read at import time.
os.environ.setdefault("ENV", "test")
os.environ.setdefault(
    "VALUEMATRIX_DB_PATH",
    str(Path(tempfile.gettempdir()) / f"valuematrix-test-{os.getpid()}.db"),
)
os.environ.setdefault("VALUEMATRIX_BCRYPT_ROUNDS", "4")

# Project root on the path so app/auth/persistence import without install
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


@pytest.fixture(autouse=True)
def reset_database():
    """Fresh tables for every test."""
    from persistence.db import init_db, reset_db

    reset_db()
    init_db()
    yield
    reset_db()

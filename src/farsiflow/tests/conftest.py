"""Test configuration."""
import os
import tempfile
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Set test environment before any imports
os.environ["ENV"] = "test"
os.environ["DATA_DIR"] = tempfile.mkdtemp(prefix="farsiflow-test-")

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path, override=True)
os.environ.setdefault("DATABASE_URL", "sqlite://")

# Import after environment setup
from farsiflow.config import ensure_directories
from farsiflow.models.base import Base, SessionLocal, engine, init_db


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Set up test environment before each test."""
    ensure_directories()
    yield


@pytest.fixture
def db():
    """Create a fresh database session with empty tables."""
    init_db()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

"""
Pytest configuration and fixtures.
"""

from __future__ import annotations

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from tests.test_constants import TEST_EMAIL, TEST_NAME, TEST_PASSWORD, TEST_SECRET_KEY

# In-memory SQLite shared across threads (StaticPool); don't inherit from .env.
# Empty strings read as unset and keep load_dotenv from filling them in.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["SECRET_KEY"] = TEST_SECRET_KEY
for _name in (
    "BUILD_TIME",
    "OPENROUTER_API_KEY",
    "TOMTOM_API_KEY",
    "CALENDAR_URL_PRIMARY",
    "CALENDAR_URL_SECONDARY",
    "SPOTIFY_CLIENT_ID",
    "SPOTIFY_CLIENT_SECRET",
    "SPOTIFY_REFRESH_TOKEN",
):
    os.environ[_name] = ""


@pytest.fixture
def db() -> Session:
    """Fresh schema per test on the shared in-memory engine."""
    import mirror.models  # noqa: F401  (register mappers)
    from mirror.db.session import Base, SessionLocal, engine

    Base.metadata.create_all(engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


@pytest.fixture
def admin_user(db: Session):
    """Persisted admin user."""
    from mirror.services.auth import create_user

    return create_user(db, TEST_EMAIL, TEST_PASSWORD, name=TEST_NAME)


@pytest.fixture
def anon_client(db: Session) -> TestClient:
    """TestClient with only get_db overridden; admin routes answer 401."""
    from mirror.db.session import get_db
    from mirror.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    c = TestClient(app)
    yield c
    app.dependency_overrides.clear()


@pytest.fixture
def api_client(db: Session, admin_user) -> TestClient:
    """TestClient authenticated as admin_user, sharing the test db session."""
    from mirror.api.deps import require_auth
    from mirror.db.session import get_db
    from mirror.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[require_auth] = lambda: admin_user
    c = TestClient(app)
    yield c
    app.dependency_overrides.clear()


@pytest.fixture
def config_version(db: Session):
    """Callable returning the current config version (0 when absent)."""
    from mirror.services.config_version import get_config_version

    def _read() -> int:
        db.expire_all()
        row = get_config_version(db)
        return row.version if row else 0

    return _read

"""
CrudCamp Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.

Fixture Hierarchy:
    Function-scoped:
    ├── mock_db_session: Mock AsyncSession (service unit tests, no DB)
    ├── db_schema:       Creates/drops tables in the temporary SQLite database
    ├── test_client:     HTTPX AsyncClient bound to the FastAPI app (needs db_schema)
    ├── register_user:   Helper coroutine that registers + logs in a user
    └── auth_headers:    Authorization header for a freshly registered user
"""

import os
import tempfile

# Settings are read at import time, so the environment must be prepared
# before anything under `app` is imported
_TEST_DIR = tempfile.mkdtemp(prefix="crudcamp_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/test.db"
os.environ["JWT_SECRET"] = "test-secret-that-is-definitely-longer-than-32-chars"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"
os.environ["AUTH_RATE_LIMIT_REQUESTS"] = "1000"
os.environ["DB_CONNECT_ATTEMPTS"] = "1"

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

TEST_PASSWORD = "correct-horse-42"


# ══════════════════════════════════════════════════════════════════════════
# Unit-test fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = task
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def make_task():
    """Factory for attribute bags that look like Task rows."""
    def _make(**overrides):
        now = datetime.now(timezone.utc)
        data = {
            "id": uuid4(),
            "owner_id": uuid4(),
            "title": "Write lesson notes",
            "description": None,
            "completed": False,
            "due_date": None,
            "created_at": now,
            "updated_at": now,
        }
        data.update(overrides)
        return SimpleNamespace(**data)
    return _make


@pytest.fixture
def result_returning():
    """Factory: a mock `Result` whose scalar_one_or_none() returns `value`."""
    def _result(value):
        result = MagicMock()
        result.scalar_one_or_none.return_value = value
        return result
    return _result


# ══════════════════════════════════════════════════════════════════════════
# API fixtures (temporary SQLite database)
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_schema():
    """Creates every table before the test and drops them afterwards."""
    import app.models  # noqa: F401
    from app.database import Base, engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # Pooled connections belong to this test's event loop
    await engine.dispose()


@pytest_asyncio.fixture
async def test_client(db_schema):
    """
    HTTPX AsyncClient routed straight into the ASGI app (no server).

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
    """
    from app.main import app
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def register_user(test_client):
    """Returns a coroutine: register + login, yielding (user_json, headers)."""
    async def _register(email=None, password=TEST_PASSWORD, display_name="Test User"):
        email = email or f"user-{uuid4().hex[:8]}@example.com"
        response = await test_client.post(
            "/api/auth/register",
            json={"email": email, "password": password, "display_name": display_name},
        )
        assert response.status_code == 201, response.text
        login = await test_client.post(
            "/api/auth/login", json={"email": email, "password": password}
        )
        assert login.status_code == 200, login.text
        token = login.json()["access_token"]
        return response.json(), {"Authorization": f"Bearer {token}"}
    return _register


@pytest_asyncio.fixture
async def auth_headers(register_user):
    _, headers = await register_user()
    return headers

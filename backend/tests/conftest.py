"""
LawDesk Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Each test gets its own SQLite file (aiosqlite) with the schema created
       from the ORM models, plus a fresh upload directory.

Fixtures:
    ├── database:           Database on a temporary SQLite file, tables created
    ├── db_session:         AsyncSession bound to that database
    ├── mock_db_session:    AsyncMock session for driver-failure tests
    ├── image_storage:      ImageStorage writing to a temp directory
    ├── test_settings:      Settings pointing at the temp database/uploads
    ├── app / test_client:  FastAPI app + HTTPX AsyncClient (no server needed)
    └── admin_client:       Same, with ADMIN_API_KEY configured
"""

import os
import tempfile
from unittest.mock import AsyncMock, MagicMock

# Override settings BEFORE any lawdesk import: lawdesk.main builds an app
# from the environment at import time
_TEST_ROOT = tempfile.mkdtemp(prefix="lawdesk_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT}/import.db"
os.environ["UPLOAD_DIR"] = os.path.join(_TEST_ROOT, "uploads")
os.environ["ADMIN_API_KEY"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from lawdesk.config import Settings  # noqa: E402
from lawdesk.database import Database  # noqa: E402
from lawdesk.main import create_app  # noqa: E402
from lawdesk.services.image_storage import ImageStorage  # noqa: E402

ADMIN_KEY = "test-admin-key"

# Smallest useful PNG prefix; ImageStorage checks extension, content type and size
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest_asyncio.fixture
async def database(db_url):
    db = Database(db_url)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    async with database.session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Usage:
        mock_db_session.execute.side_effect = OperationalError(...)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.get = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def image_storage(upload_dir):
    return ImageStorage(upload_dir=str(upload_dir), max_size=1024 * 1024)


@pytest.fixture
def sample_image_bytes():
    return PNG_BYTES


@pytest.fixture
def test_settings(db_url, upload_dir):
    return Settings(
        database_url=db_url,
        upload_dir=str(upload_dir),
        admin_api_key="",
        log_level="WARNING",
    )


@pytest.fixture
def app(test_settings, database):
    return create_app(settings=test_settings, database=database)


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed straight into the ASGI app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def admin_client(test_settings, database):
    """Client for an app with ADMIN_API_KEY set (moderation gate enabled)."""
    settings = test_settings.model_copy(update={"admin_api_key": ADMIN_KEY})
    app = create_app(settings=settings, database=database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def admin_key():
    """The X-Admin-Key value accepted by admin_client."""
    return ADMIN_KEY

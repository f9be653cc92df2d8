"""
CatHealth Backend — Test Configuration (conftest.py)
======================================================

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session:   AsyncMock session for service unit tests
    ├── temp_storage:      empty storage root under tmp_path
    ├── sample_image_bytes / sample_png_bytes / sample_pdf_bytes
    ├── database:          real SQLite database (aiosqlite) with all tables
    ├── app:               create_app() wired to `database` and `temp_storage`
    ├── test_client:       HTTPX AsyncClient over ASGITransport
    └── make_user:         registers a user, returns {token, user, headers}
"""

import os
import tempfile

# Must be set before cathealth is imported: settings load at import time
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="cathealth_db_"), "import.db"
)
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="cathealth_test_")
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from cathealth.config import settings  # noqa: E402
from cathealth.database import Database  # noqa: E402
from cathealth.services.file_service import FileService  # noqa: E402

# Smallest byte strings that look like the real formats
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00\xff\xd9"
PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<<>>\n%%EOF\n"
PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00\x1f\x15\xc4\x89"
    b"\x00\x00\x00\nIDATx\x9cc\x00\x01\x00\x00\x05\x00\x01\r\n-\xb4\x00\x00\x00\x00IEND\xaeB`\x82"
)


@pytest.fixture
def mock_db_session():
    """
    AsyncMock standing in for AsyncSession.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = user
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_image_bytes():
    return JPEG_BYTES


@pytest.fixture
def sample_pdf_bytes():
    return PDF_BYTES


@pytest.fixture
def sample_png_bytes():
    return PNG_BYTES


@pytest_asyncio.fixture
async def database(tmp_path):
    """A fresh SQLite database per test, schema created from the models."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'cathealth.db'}", settings)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def app(database, temp_storage):
    from cathealth.main import create_app

    return create_app(
        config=settings,
        database=database,
        file_service=FileService(storage_root=temp_storage),
    )


@pytest_asyncio.fixture
async def test_client(app):
    """
    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def make_user(test_client):
    """
    Factory registering a user through the API.

        alice = await make_user("Alice", "alice@example.com")
        await test_client.get("/api/cats", headers=alice["headers"])
    """

    async def _make(name: str, email: str, password: str = "secret123") -> dict:
        response = await test_client.post(
            "/api/register",
            json={"name": name, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        body = response.json()
        return {
            "token": body["token"],
            "user": body["user"],
            "headers": {"Authorization": f"Bearer {body['token']}"},
        }

    return _make


@pytest_asyncio.fixture
async def alice(make_user):
    return await make_user("Alice", "alice@example.com")


@pytest_asyncio.fixture
async def bob(make_user):
    return await make_user("Bob", "bob@example.com")

"""
CatHealth Backend — Error Envelope & Health Tests
===================================================
"""

import pytest

from cathealth.config import settings
from cathealth.database import Database
from cathealth.main import create_app
from cathealth.services.file_service import FileService


@pytest.mark.asyncio
async def test_unknown_route_is_endpoint_not_found(test_client):
    response = await test_client.get("/api/does-not-exist")

    assert response.status_code == 404
    assert response.json()["message"] == "Endpoint not found"


@pytest.mark.asyncio
async def test_error_body_carries_request_id(test_client):
    response = await test_client.get("/api/cats", headers={"X-Request-ID": "trace-123"})

    assert response.status_code == 401
    assert response.headers["X-Request-ID"] == "trace-123"
    assert response.json() == {"message": "Access token required", "request_id": "trace-123"}


@pytest.mark.asyncio
async def test_generated_request_id_when_header_is_unusable(test_client):
    response = await test_client.get("/health", headers={"X-Request-ID": "bad id with spaces"})

    assert response.headers["X-Request-ID"] != "bad id with spaces"
    assert len(response.headers["X-Request-ID"]) == 8


@pytest.mark.asyncio
async def test_error_detail_only_in_development(database, temp_storage):
    from httpx import ASGITransport, AsyncClient

    dev_settings = settings.model_copy(update={"app_env": "development"})
    app = create_app(
        config=dev_settings,
        database=database,
        file_service=FileService(storage_root=temp_storage),
    )
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/api/register", json={"name": "x"})

    assert response.status_code == 400
    assert "error" in response.json()


@pytest.mark.asyncio
async def test_validation_message_names_the_field(test_client):
    response = await test_client.post("/api/register", json={"name": "Alice", "password": "secret123"})

    assert response.status_code == 400
    body = response.json()
    assert body["message"].startswith("email")
    assert "error" not in body


@pytest.mark.asyncio
async def test_health_reports_database(test_client):
    response = await test_client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"


@pytest.mark.asyncio
async def test_health_unhealthy_when_database_down(tmp_path, temp_storage):
    from httpx import ASGITransport, AsyncClient

    # Parent directory doesn't exist, so SQLite can't open the file
    broken = Database(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'db.sqlite'}", settings)
    app = create_app(config=settings, database=broken, file_service=FileService(storage_root=temp_storage))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/health")
    await broken.dispose()

    assert response.status_code == 503
    assert response.json()["database"] == "disconnected"

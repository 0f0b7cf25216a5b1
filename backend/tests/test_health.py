from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_session
from app.main import app

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


async def test_health_ok(async_client: AsyncClient) -> None:
    response = await async_client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["database"] == "ok"
    assert data["service"] == "Employee Space TOIL"
    assert data["version"] == "0.1.0"


async def test_health_needs_no_auth_headers(async_client: AsyncClient) -> None:
    response = await async_client.get("/health")
    assert set(response.json().keys()) == {"status", "service", "version", "environment", "database"}


async def test_health_degraded_when_database_unreachable() -> None:
    mock_session = AsyncMock(spec=AsyncSession)
    mock_session.execute.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))

    async def _broken_session() -> AsyncIterator[AsyncSession]:
        yield mock_session

    app.dependency_overrides[get_session] = _broken_session
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert response.json()["database"] == "unreachable"
    finally:
        app.dependency_overrides.clear()

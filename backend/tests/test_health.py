from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from service_desk import main as main_module
from service_desk.db import get_session
from service_desk.main import app
from service_desk.services import identity as identity_module
from service_desk.services.identity import InMemoryIdentityProvider

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


async def test_health_returns_200(async_client: AsyncClient) -> None:
    response = await async_client.get("/health")
    assert response.status_code == 200


async def test_health_needs_no_token(async_client: AsyncClient) -> None:
    response = await async_client.get("/health")
    data = response.json()
    assert data["status"] == "ok"
    assert data["version"] == "0.1.0"
    assert data["environment"] == "development"


async def test_health_response_schema(async_client: AsyncClient) -> None:
    response = await async_client.get("/health")
    assert set(response.json().keys()) == {"status", "version", "environment"}


async def test_health_degraded_on_db_failure() -> None:
    """GET /health reports degraded when the store cannot be reached."""
    mock_session = AsyncMock(spec=AsyncSession)
    mock_session.execute.side_effect = OperationalError("SELECT 1", {}, Exception("unable to open database file"))

    async def _broken_session() -> AsyncIterator[AsyncSession]:
        yield mock_session

    app.dependency_overrides[get_session] = _broken_session
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health")
        data = response.json()
        assert response.status_code == 200
        assert data["status"] == "degraded"
    finally:
        app.dependency_overrides.clear()


async def test_startup_keeps_dev_tokens_out_of_info_logs(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    provider = InMemoryIdentityProvider()
    monkeypatch.setattr(identity_module, "_identity_provider", provider)
    monkeypatch.setattr(main_module, "dispose_engine", AsyncMock())

    with caplog.at_level(logging.INFO):
        async with main_module.lifespan(app):
            tokens = list(provider._sessions)

    assert tokens
    assert "Dev sessions opened for" in caplog.text
    assert all(token not in caplog.text for token in tokens)

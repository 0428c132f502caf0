"""Tests for health check endpoints and the index page."""

from unittest import mock

import pytest
from httpx import AsyncClient

from review_assistant.api.pages import FALLBACK_PAGE, load_index_page
from review_assistant.dependencies import get_session_store
from review_assistant.main import app
from review_assistant.memory.backends import NullSessionBackend
from review_assistant.memory.session_store import SessionStore


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient) -> None:
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "ai-code-review-assistant"
    assert data["version"] == "1.0.0"
    assert "timestamp" in data


@pytest.mark.asyncio
async def test_detailed_health_check(client: AsyncClient, session_store: SessionStore) -> None:
    await session_store.create()

    response = await client.get("/health/detailed")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["components"] == {
        "session_storage": "available",
        "completion_api": "configured",
        "completion_model": "stub-model",
        "rate_limiting": "enabled",
    }
    assert data["services"]["session_store"] == {"status": "healthy", "backend": "memory"}
    assert data["stats"]["sessions"] == {"total_sessions": 1}


@pytest.mark.asyncio
async def test_detailed_health_without_storage(client: AsyncClient) -> None:
    app.dependency_overrides[get_session_store] = lambda: SessionStore(NullSessionBackend())

    data = (await client.get("/health/detailed")).json()

    assert data["status"] == "healthy"
    assert data["components"]["session_storage"] == "unavailable"
    assert data["services"]["session_store"]["status"] == "unavailable"


@pytest.mark.asyncio
async def test_detailed_health_degraded_when_ping_fails(
    client: AsyncClient, session_store: SessionStore
) -> None:
    with mock.patch.object(
        session_store.backend, "ping", side_effect=ConnectionError("connection refused")
    ):
        data = (await client.get("/health/detailed")).json()

    assert data["status"] == "degraded"
    assert data["services"]["session_store"] == {
        "status": "unhealthy",
        "backend": "memory",
        "error": "connection refused",
    }


@pytest.mark.asyncio
async def test_index_page(client: AsyncClient) -> None:
    response = await client.get("/")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "<form" in response.text


def test_index_page_fallback(tmp_path) -> None:
    assert load_index_page(tmp_path / "missing.html") == FALLBACK_PAGE

"""Shared test fixtures for the code review assistant backend."""

import os

# Settings are read at import time; configure before importing the app.
os.environ["GOOGLE_API_KEY"] = "test-google-api-key"
os.environ["SESSION_BACKEND"] = "memory"
os.environ["RATE_LIMIT_REQUESTS"] = "1000"
os.environ["ACCESS_TOKEN"] = ""

from collections.abc import AsyncGenerator, Sequence
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from review_assistant.config import settings
from review_assistant.dependencies import get_completion_client, get_session_store
from review_assistant.errors import AIServiceError
from review_assistant.main import app
from review_assistant.memory.backends import InMemorySessionBackend
from review_assistant.memory.session_store import SessionStore
from review_assistant.models.messages import Message
from review_assistant.ratelimit.limiter import RateLimiter
from review_assistant.review.completion import CompletionClient, CompletionOptions


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class StubCompletionClient(CompletionClient):
    """Deterministic completion client that records every call."""

    def __init__(self, reply: str = "Looks fine overall.") -> None:
        self.reply = reply
        self.error: Exception | None = None
        self.calls: list[tuple[list[Message], CompletionOptions]] = []

    @property
    def model_name(self) -> str:
        return "stub-model"

    async def complete(
        self,
        messages: Sequence[Message],
        options: CompletionOptions = CompletionOptions(),
    ) -> str:
        self.calls.append((list(messages), options))
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def stub_completion() -> StubCompletionClient:
    return StubCompletionClient()


@pytest.fixture
def failing_completion() -> StubCompletionClient:
    stub = StubCompletionClient()
    stub.error = AIServiceError("upstream quota exceeded", {"original_error": "429"})
    return stub


@pytest.fixture
def session_store(clock: FakeClock) -> SessionStore:
    return SessionStore(InMemorySessionBackend(clock=clock), clock=clock)


def open_client(application: FastAPI) -> AsyncClient:
    transport = ASGITransport(app=application)
    return AsyncClient(transport=transport, base_url="http://test")


@pytest_asyncio.fixture
async def client(
    stub_completion: StubCompletionClient, session_store: SessionStore
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints."""
    app.dependency_overrides[get_completion_client] = lambda: stub_completion
    app.dependency_overrides[get_session_store] = lambda: session_store
    app.state.rate_limiter = RateLimiter(
        settings.rate_limit_requests, settings.rate_limit_window
    )
    async with open_client(app) as ac:
        yield ac
    app.dependency_overrides.clear()

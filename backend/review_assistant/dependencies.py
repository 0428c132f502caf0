"""Dependency injection providers for FastAPI."""

from fastapi import Depends

from review_assistant.config import Settings, settings
from review_assistant.memory.backends import (
    InMemorySessionBackend,
    MongoSessionBackend,
    NullSessionBackend,
    SessionBackend,
)
from review_assistant.memory.session_store import SessionStore
from review_assistant.review.completion import CompletionClient, GeminiCompletionClient
from review_assistant.review.context import ReviewContext
from review_assistant.review.orchestrator import ReviewOrchestrator

# Global singleton instances (safe within a single event loop)
_session_store: SessionStore | None = None
_completion_client: CompletionClient | None = None
_review_context: ReviewContext | None = None


def build_session_backend(app_settings: Settings) -> SessionBackend:
    """Select the session backend named by configuration."""
    if app_settings.session_backend == "mongodb":
        return MongoSessionBackend(
            app_settings.mongodb_uri, app_settings.mongodb_database
        )
    if app_settings.session_backend == "memory":
        return InMemorySessionBackend()
    return NullSessionBackend()


def get_session_store() -> SessionStore:
    """Return singleton SessionStore instance."""
    global _session_store
    if _session_store is None:
        _session_store = SessionStore(
            build_session_backend(settings),
            ttl_seconds=settings.session_ttl_seconds,
            max_messages=settings.max_session_messages,
        )
    return _session_store


def get_completion_client() -> CompletionClient:
    """Return singleton completion client."""
    global _completion_client
    if _completion_client is None:
        _completion_client = GeminiCompletionClient(
            api_key=settings.google_api_key, model=settings.gemini_model
        )
    return _completion_client


def get_review_context() -> ReviewContext:
    """Return singleton ReviewContext instance."""
    global _review_context
    if _review_context is None:
        _review_context = ReviewContext()
    return _review_context


def get_orchestrator(
    context: ReviewContext = Depends(get_review_context),
    completion: CompletionClient = Depends(get_completion_client),
    sessions: SessionStore = Depends(get_session_store),
) -> ReviewOrchestrator:
    """Compose the turn orchestrator from the shared services."""
    return ReviewOrchestrator(context, completion, sessions)

"""Code review chat endpoints."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends

from review_assistant.config import Settings, get_settings
from review_assistant.dependencies import get_orchestrator, get_session_store
from review_assistant.errors import ValidationError
from review_assistant.memory.session_store import SessionStore
from review_assistant.models.review import ReviewRequest, envelope
from review_assistant.models.sessions import SessionCreated, SessionSummary
from review_assistant.review.orchestrator import ReviewOrchestrator

logger = logging.getLogger(__name__)
router = APIRouter()


def validate_code(code: Any, max_length: int) -> str:
    """Reject missing, empty or oversized input before any side effect."""
    if not code or not isinstance(code, str):
        raise ValidationError("Code is required and must be a string")
    if len(code) > max_length:
        raise ValidationError(
            f"Code exceeds maximum length of {max_length} characters",
            {"max_length": max_length, "length": len(code)},
        )
    if not code.strip():
        raise ValidationError("Code cannot be empty")
    return code


@router.post("/session")
async def create_session(
    sessions: SessionStore = Depends(get_session_store),
) -> dict[str, Any]:
    """Start a new chat session."""
    session = await sessions.create()
    return envelope(SessionCreated(session_id=session.id, expires_at=session.expires_at))


@router.post("/review")
async def review_code(
    request_data: ReviewRequest,
    orchestrator: ReviewOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """Review submitted code, or answer it as chat when it is not code.

    An unknown or expired ``session_id`` silently starts a new session; the
    id to use next is always returned.
    """
    code = validate_code(request_data.code, settings.max_code_length)

    outcome = await orchestrator.process_turn(
        request_data.session_id,
        code,
        language=request_data.language,
        user_context=request_data.context,
    )

    return envelope(
        {
            "session_id": outcome.session_id,
            "review": outcome.review,
            "severity": outcome.severity.value,
            "suggestions": outcome.suggestions,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    )


@router.get("/session/{session_id}")
async def get_session(
    session_id: str,
    sessions: SessionStore = Depends(get_session_store),
) -> dict[str, Any]:
    """Return session metadata. Fails with 404 when missing or expired."""
    session = await sessions.get(session_id)
    return envelope(SessionSummary.from_session(session))


@router.delete("/session/{session_id}")
async def delete_session(
    session_id: str,
    sessions: SessionStore = Depends(get_session_store),
) -> dict[str, Any]:
    """Delete a session. Deleting an unknown session also succeeds."""
    await sessions.delete(session_id)
    return envelope({"message": "Session deleted successfully"})

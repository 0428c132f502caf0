"""Health check endpoints for infrastructure monitoring."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends

from review_assistant.config import Settings, get_settings
from review_assistant.dependencies import get_completion_client, get_session_store
from review_assistant.memory.session_store import SessionStore
from review_assistant.review.completion import CompletionClient

logger = logging.getLogger(__name__)
router = APIRouter()


def _base_status(settings: Settings) -> dict[str, Any]:
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


async def _check_session_store(sessions: SessionStore) -> dict[str, Any]:
    """Ping the session backend and return status."""
    if not sessions.backend_available:
        return {"status": "unavailable", "backend": sessions.backend.name}
    try:
        await sessions.backend.ping()
        return {"status": "healthy", "backend": sessions.backend.name}
    except Exception as exc:
        logger.warning("Session store health check failed: %s", exc)
        return {"status": "unhealthy", "backend": sessions.backend.name, "error": str(exc)}


@router.get("")
async def health_check(
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """Liveness probe."""
    return _base_status(settings)


@router.get("/detailed")
async def detailed_health_check(
    settings: Settings = Depends(get_settings),
    sessions: SessionStore = Depends(get_session_store),
    completion: CompletionClient = Depends(get_completion_client),
) -> dict[str, Any]:
    """Liveness plus backing-store availability and session stats."""
    store_status = await _check_session_store(sessions)

    stats = {"total_sessions": 0}
    if store_status["status"] == "healthy":
        try:
            stats = await sessions.get_stats()
        except Exception as exc:
            logger.warning("Could not read session stats: %s", exc)

    result = _base_status(settings)
    if store_status["status"] == "unhealthy":
        result["status"] = "degraded"

    result.update(
        {
            "components": {
                "session_storage": "available" if sessions.backend_available else "unavailable",
                "completion_api": "configured" if settings.google_api_key else "missing",
                "completion_model": completion.model_name,
                "rate_limiting": "enabled",
            },
            "services": {"session_store": store_status},
            "stats": {"sessions": stats},
        }
    )
    return result

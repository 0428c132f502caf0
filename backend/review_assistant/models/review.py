"""Models for review requests, outcomes and the response envelope."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel


class Severity(str, Enum):
    """Coarse triage label derived from model output."""

    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class ReviewRequest(BaseModel):
    """Body of ``POST /api/chat/review``.

    Presence, emptiness and length of ``code`` are checked in the route so
    that every failure maps to a 400 validation error.
    """

    session_id: Optional[str] = None
    code: Optional[str] = None
    language: Optional[str] = None
    context: Optional[str] = None


@dataclass
class ReviewOutcome:
    """Result of one orchestrated turn."""

    review: str
    severity: Severity
    session_id: str
    suggestions: list[str] = field(default_factory=list)
    is_code: bool = True


class ErrorBody(BaseModel):
    message: str
    code: str
    details: Optional[Any] = None


class APIResponse(BaseModel):
    """Standard JSON envelope for every API response."""

    success: bool
    data: Optional[Any] = None
    error: Optional[ErrorBody] = None


def envelope(data: Any) -> dict[str, Any]:
    """Wrap a successful payload in the response envelope."""
    return APIResponse(success=True, data=data).model_dump(
        mode="json", exclude_none=True
    )

"""Session models for conversation management."""

from datetime import datetime

from pydantic import BaseModel, Field

from review_assistant.models.messages import Message


class Session(BaseModel):
    """A bounded, TTL-expiring conversation history.

    Stored in the backing store as ``model_dump(mode="json")`` under the key
    ``session:<id>``.
    """

    id: str
    messages: list[Message] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    expires_at: datetime


class SessionCreated(BaseModel):
    """Payload returned when a session is created."""

    session_id: str
    expires_at: datetime


class SessionSummary(BaseModel):
    """Session metadata for the lookup endpoint."""

    session_id: str
    message_count: int = 0
    created_at: datetime
    updated_at: datetime
    expires_at: datetime

    @classmethod
    def from_session(cls, session: Session) -> "SessionSummary":
        return cls(
            session_id=session.id,
            message_count=len(session.messages),
            created_at=session.created_at,
            updated_at=session.updated_at,
            expires_at=session.expires_at,
        )

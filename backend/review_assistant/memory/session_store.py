"""Session lifecycle over a ``SessionBackend``.

Sessions are stored under ``session:<id>`` with a sliding TTL: every write
pushes ``expires_at`` forward by ``ttl_seconds``. Without a backend
(``NullSessionBackend``) sessions are created in memory for the current turn
only, updates and deletes do nothing, and lookups always fail.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from review_assistant.errors import SessionError
from review_assistant.memory.backends import Clock, SessionBackend, utcnow
from review_assistant.models.messages import Message, MessageRole
from review_assistant.models.sessions import Session

logger = logging.getLogger(__name__)

KEY_PREFIX = "session:"


def _key(session_id: str) -> str:
    return f"{KEY_PREFIX}{session_id}"


class SessionStore:
    """Create, read, update and delete conversation sessions."""

    def __init__(
        self,
        backend: SessionBackend,
        ttl_seconds: int = 3600,
        max_messages: int = 10,
        clock: Clock = utcnow,
    ) -> None:
        self._backend = backend
        self.ttl_seconds = ttl_seconds
        self.max_messages = max_messages
        self._clock = clock
        logger.info(
            "Session store initialized: backend=%s available=%s ttl=%ds",
            backend.name,
            backend.available,
            ttl_seconds,
        )

    @property
    def backend(self) -> SessionBackend:
        return self._backend

    @property
    def backend_available(self) -> bool:
        return self._backend.available

    async def create(self) -> Session:
        """Create and persist an empty session."""
        now = self._clock()
        session = Session(
            id=str(uuid4()),
            messages=[],
            created_at=now,
            updated_at=now,
            expires_at=now + timedelta(seconds=self.ttl_seconds),
        )
        await self._backend.put(
            _key(session.id), session.model_dump(mode="json"), self.ttl_seconds
        )
        logger.info("Session created: %s", session.id)
        return session

    async def get(self, session_id: str) -> Session:
        """Load a session.

        Raises:
            SessionError: If storage is unavailable or the session is missing
                or expired.
        """
        if not self._backend.available:
            raise SessionError("Session storage not available")

        data = await self._backend.get(_key(session_id))
        if data is None:
            raise SessionError("Session not found or expired", {"session_id": session_id})

        try:
            return Session.model_validate(data)
        except PydanticValidationError:
            logger.warning("Discarding unreadable session payload for %s", session_id)
            raise SessionError("Session not found or expired", {"session_id": session_id})

    async def update(self, session: Session) -> Session:
        """Persist ``session`` and slide its expiry forward."""
        if not self._backend.available:
            logger.warning("Session storage not available, session %s not persisted", session.id)
            return session

        now = self._clock()
        session.updated_at = now
        session.expires_at = now + timedelta(seconds=self.ttl_seconds)
        await self._backend.put(
            _key(session.id), session.model_dump(mode="json"), self.ttl_seconds
        )
        logger.debug("Session updated: %s (%d messages)", session.id, len(session.messages))
        return session

    async def delete(self, session_id: str) -> None:
        """Remove a session. Missing sessions are ignored."""
        if not self._backend.available:
            return
        await self._backend.delete(_key(session_id))
        logger.info("Session deleted: %s", session_id)

    async def load_or_create(self, session_id: str | None) -> Session:
        """Return the stored session, or a new one when it cannot be loaded."""
        if session_id:
            try:
                return await self.get(session_id)
            except SessionError as exc:
                logger.info("Session %s unavailable (%s), creating a new one", session_id, exc.message)
        return await self.create()

    def _truncate(self, session: Session) -> None:
        if len(session.messages) > self.max_messages:
            session.messages = session.messages[-self.max_messages :]

    async def add_message(
        self, session_id: str, role: MessageRole, content: str
    ) -> Session:
        """Append one message, creating the session if it cannot be loaded."""
        session = await self.load_or_create(session_id)
        session.messages.append(Message(role=role, content=content))
        self._truncate(session)
        return await self.update(session)

    async def append_turn(
        self, session: Session, user_content: str, assistant_content: str
    ) -> Session:
        """Record one user/assistant exchange and persist it."""
        session.messages.append(Message(role=MessageRole.USER, content=user_content))
        session.messages.append(
            Message(role=MessageRole.ASSISTANT, content=assistant_content)
        )
        self._truncate(session)
        return await self.update(session)

    async def get_stats(self) -> dict[str, Any]:
        return {"total_sessions": await self._backend.count()}

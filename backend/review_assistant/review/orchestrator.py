"""Turn processing: classify, prompt, complete, persist."""

from __future__ import annotations

import logging
from typing import Optional

from review_assistant.memory.session_store import SessionStore
from review_assistant.models.messages import Message, MessageRole
from review_assistant.models.review import ReviewOutcome, Severity
from review_assistant.review.classifier import classify
from review_assistant.review.completion import (
    REVIEW_OPTIONS,
    CompletionClient,
    sanitize_response,
)
from review_assistant.review.context import ReviewContext

logger = logging.getLogger(__name__)


class ReviewOrchestrator:
    """Runs one review or chat turn against a session.

    A turn either completes and is persisted, or fails with the typed error
    from the completion client or session store and leaves the session as it
    was. An unknown or expired session id is not an error here: a fresh
    session is created instead.
    """

    def __init__(
        self,
        context: ReviewContext,
        completion: CompletionClient,
        sessions: SessionStore,
    ) -> None:
        self._context = context
        self._completion = completion
        self._sessions = sessions

    async def process_turn(
        self,
        session_id: Optional[str],
        code: str,
        language: Optional[str] = None,
        user_context: Optional[str] = None,
    ) -> ReviewOutcome:
        sanitized = self._context.sanitize_code(code)

        session = await self._sessions.load_or_create(session_id)

        classification = classify(sanitized)
        if classification.is_code:
            system_prompt = self._context.build_system_prompt(language)
            user_prompt = self._context.build_user_prompt(sanitized, user_context)
        else:
            system_prompt = self._context.build_chat_system_prompt()
            user_prompt = self._context.build_chat_user_prompt(sanitized)

        history = [m for m in session.messages if m.role != MessageRole.SYSTEM]
        messages = [
            Message(role=MessageRole.SYSTEM, content=system_prompt),
            *history,
            Message(role=MessageRole.USER, content=user_prompt),
        ]

        raw = await self._completion.complete(messages, REVIEW_OPTIONS)
        review = sanitize_response(raw)

        severity = (
            self._context.extract_severity(review)
            if classification.is_code
            else Severity.INFO
        )
        suggestions = self._context.extract_suggestions(review)

        await self._sessions.append_turn(session, user_prompt, review)

        logger.info(
            "%s completed: session=%s rule=%s input_chars=%d severity=%s response_chars=%d",
            "Code review" if classification.is_code else "Chat response",
            session.id,
            classification.rule,
            len(code),
            severity.value,
            len(review),
        )

        return ReviewOutcome(
            review=review,
            severity=severity,
            session_id=session.id,
            suggestions=suggestions,
            is_code=classification.is_code,
        )

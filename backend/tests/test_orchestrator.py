"""Tests for review/chat turn processing."""

import pytest

from conftest import StubCompletionClient
from review_assistant.errors import AIServiceError
from review_assistant.memory.session_store import SessionStore
from review_assistant.models.messages import MessageRole
from review_assistant.models.review import Severity
from review_assistant.review.completion import REVIEW_OPTIONS
from review_assistant.review.context import ReviewContext
from review_assistant.review.orchestrator import ReviewOrchestrator

CODE = "def add(a, b):\n    return a + b"


@pytest.fixture
def orchestrator(
    stub_completion: StubCompletionClient, session_store: SessionStore
) -> ReviewOrchestrator:
    return ReviewOrchestrator(ReviewContext(), stub_completion, session_store)


@pytest.mark.asyncio
async def test_code_turn_uses_review_prompts(
    orchestrator: ReviewOrchestrator,
    stub_completion: StubCompletionClient,
    session_store: SessionStore,
) -> None:
    stub_completion.reply = (
        "**Severity**: WARNING\n"
        "Possible overflow here.\n"
        "1. Validate the inputs\n"
        "2. Add type hints"
    )

    outcome = await orchestrator.process_turn(None, CODE, language="Python")

    assert outcome.is_code is True
    assert outcome.severity == Severity.WARNING
    assert outcome.suggestions == ["Validate the inputs", "Add type hints"]

    messages, options = stub_completion.calls[0]
    assert options == REVIEW_OPTIONS
    assert [m.role for m in messages] == [MessageRole.SYSTEM, MessageRole.USER]
    assert "PROGRAMMING LANGUAGE: Python" in messages[0].content
    assert "Please review the following code:" in messages[1].content
    assert CODE in messages[1].content

    stored = await session_store.get(outcome.session_id)
    assert [m.role for m in stored.messages] == [MessageRole.USER, MessageRole.ASSISTANT]
    assert stored.messages[0].content == messages[1].content
    assert stored.messages[1].content == outcome.review


@pytest.mark.asyncio
async def test_chat_turn_is_always_info(
    orchestrator: ReviewOrchestrator, stub_completion: StubCompletionClient
) -> None:
    stub_completion.reply = "CRITICAL: nothing to worry about, just saying hi."

    outcome = await orchestrator.process_turn(None, "hello there")

    assert outcome.is_code is False
    assert outcome.severity == Severity.INFO
    messages, _ = stub_completion.calls[0]
    assert "Please review the following code:" not in messages[-1].content
    assert "hello there" in messages[-1].content


@pytest.mark.asyncio
async def test_unknown_session_is_replaced(orchestrator: ReviewOrchestrator) -> None:
    outcome = await orchestrator.process_turn("does-not-exist", CODE)
    assert outcome.session_id != "does-not-exist"


@pytest.mark.asyncio
async def test_history_is_sent_on_follow_up(
    orchestrator: ReviewOrchestrator, stub_completion: StubCompletionClient
) -> None:
    first = await orchestrator.process_turn(None, CODE)
    second = await orchestrator.process_turn(first.session_id, "what about naming?")

    assert second.session_id == first.session_id
    messages, _ = stub_completion.calls[1]
    assert [m.role for m in messages] == [
        MessageRole.SYSTEM,
        MessageRole.USER,
        MessageRole.ASSISTANT,
        MessageRole.USER,
    ]
    assert messages[2].content == "Looks fine overall."


@pytest.mark.asyncio
async def test_failed_completion_leaves_session_untouched(
    session_store: SessionStore, failing_completion: StubCompletionClient
) -> None:
    session = await session_store.create()
    orchestrator = ReviewOrchestrator(ReviewContext(), failing_completion, session_store)

    with pytest.raises(AIServiceError, match="upstream quota exceeded"):
        await orchestrator.process_turn(session.id, CODE)

    assert (await session_store.get(session.id)).messages == []


@pytest.mark.asyncio
async def test_input_and_output_are_sanitized(
    orchestrator: ReviewOrchestrator, stub_completion: StubCompletionClient
) -> None:
    stub_completion.reply = "Fine.<script>alert(1)</script>"

    outcome = await orchestrator.process_turn(
        None, "<script>alert('x')</script>\nconst a = 1;"
    )

    messages, _ = stub_completion.calls[0]
    assert "<script>" not in messages[-1].content
    assert "[REMOVED: script tag]" in messages[-1].content
    assert outcome.review == "Fine."

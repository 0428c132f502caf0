"""Completion client for the upstream language model.

The rest of the service only sees ``CompletionClient.complete``; the Gemini
implementation goes through LangChain's ``ChatGoogleGenerativeAI``. Every
upstream failure surfaces as ``AIServiceError``. There is a single attempt per
call: no retry and no client-side timeout.
"""

from __future__ import annotations

import html
import logging
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from review_assistant.errors import AIServiceError
from review_assistant.models.messages import Message, MessageRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompletionOptions:
    max_tokens: int = 1000
    temperature: float = 0.3
    top_p: float = 0.9


REVIEW_OPTIONS = CompletionOptions(max_tokens=1500, temperature=0.3, top_p=0.9)


class CompletionClient(ABC):
    """Abstract interface for text completion backends."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model identifier reported by the detailed health check."""

    @abstractmethod
    async def complete(
        self,
        messages: Sequence[Message],
        options: CompletionOptions = CompletionOptions(),
    ) -> str:
        """Return the model's reply to ``messages``.

        Raises:
            AIServiceError: On any upstream failure or an empty reply.
        """


def to_langchain_message(message: Message) -> BaseMessage:
    """Convert a stored message to the LangChain message type for its role."""
    if message.role == MessageRole.SYSTEM:
        return SystemMessage(content=message.content)
    if message.role == MessageRole.ASSISTANT:
        return AIMessage(content=message.content)
    return HumanMessage(content=message.content)


def _content_text(content: Any) -> str:
    """Flatten a LangChain message content (string or list of parts) to text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type", "text") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return ""


class GeminiCompletionClient(CompletionClient):
    """Completion client backed by Google Gemini via LangChain."""

    def __init__(self, api_key: str, model: str = "gemini-2.5-flash") -> None:
        self._api_key = api_key
        self._model = model
        logger.info("Gemini completion client initialised with model=%s", model)

    @property
    def model_name(self) -> str:
        return self._model

    def _build_llm(self, options: CompletionOptions) -> ChatGoogleGenerativeAI:
        return ChatGoogleGenerativeAI(
            model=self._model,
            google_api_key=self._api_key,
            temperature=options.temperature,
            top_p=options.top_p,
            max_output_tokens=options.max_tokens,
        )

    async def complete(
        self,
        messages: Sequence[Message],
        options: CompletionOptions = CompletionOptions(),
    ) -> str:
        started = time.perf_counter()
        request_size = sum(len(m.content) for m in messages)
        logger.info(
            "Sending completion request: model=%s messages=%d chars=%d max_tokens=%d",
            self._model,
            len(messages),
            request_size,
            options.max_tokens,
        )

        try:
            llm = self._build_llm(options)
            result = await llm.ainvoke([to_langchain_message(m) for m in messages])

            if result is None:
                logger.error("No response from model %s", self._model)
                raise AIServiceError("No response from model")

            content = _content_text(result.content)
            if not content.strip():
                logger.error("Empty content from model %s", self._model)
                raise AIServiceError("Empty response from model")

        except AIServiceError:
            raise
        except Exception as exc:
            logger.exception("Completion request failed")
            raise AIServiceError(
                str(exc) or "Unknown error occurred",
                details={"original_error": str(exc)},
            ) from exc

        logger.info(
            "Completion received: chars=%d duration=%.0fms",
            len(content),
            (time.perf_counter() - started) * 1000,
        )
        return content


# ----------------------------------------------------------------------
# Response post-processing
# ----------------------------------------------------------------------

_SCRIPT_BLOCK = re.compile(
    r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE
)
_IFRAME_BLOCK = re.compile(
    r"<iframe\b[^<]*(?:(?!</iframe>)<[^<]*)*</iframe>", re.IGNORECASE
)
_EVENT_HANDLER = re.compile(r"""\bon\w+\s*=\s*("[^"]*"|'[^']*')""", re.IGNORECASE)

_FENCED_BLOCK = re.compile(r"```(\w+)?\n([\s\S]*?)```")
_INLINE_CODE = re.compile(r"`([^`]+)`")
_BOLD = re.compile(r"\*\*([^*]+)\*\*")
_ITALIC = re.compile(r"\*([^*]+)\*")


def sanitize_response(text: str) -> str:
    """Strip script/iframe blocks and inline event handlers from model output."""
    text = _SCRIPT_BLOCK.sub("", text)
    text = _IFRAME_BLOCK.sub("", text)
    text = _EVENT_HANDLER.sub("", text)
    return text.strip()


def escape_html(text: str) -> str:
    """Escape the five HTML-significant characters."""
    return html.escape(text, quote=True)


def _format_inline(segment: str) -> str:
    segment = _INLINE_CODE.sub(r"<code>\1</code>", segment)
    segment = _BOLD.sub(r"<strong>\1</strong>", segment)
    return _ITALIC.sub(r"<em>\1</em>", segment)


def format_review(review: str) -> str:
    """Render the supported markdown subset as escaped HTML.

    Supported: fenced code blocks, inline code, bold and italic. Inline
    formatting is not applied inside fenced blocks.
    """
    escaped = escape_html(review)

    parts: list[str] = []
    position = 0
    for match in _FENCED_BLOCK.finditer(escaped):
        parts.append(_format_inline(escaped[position : match.start()]))
        lang = match.group(1) or "text"
        parts.append(
            f'<pre><code class="language-{lang}">{match.group(2).strip()}</code></pre>'
        )
        position = match.end()
    parts.append(_format_inline(escaped[position:]))

    return sanitize_response("".join(parts))

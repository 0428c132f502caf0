"""Prompt construction and review post-processing.

``ReviewContext`` owns the review and chat templates (loaded from the
guidelines YAML) and the text heuristics applied to model output.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from review_assistant.guidelines.loader import load_guidelines
from review_assistant.models.review import Severity

logger = logging.getLogger(__name__)

# Checked in order: the first severity with a matching keyword wins.
SEVERITY_RULES: tuple[tuple[Severity, tuple[str, ...]], ...] = (
    (Severity.CRITICAL, ("critical", "security vulnerability", "sql injection", "xss")),
    (Severity.WARNING, ("warning", "bug", "issue")),
)

_NUMBERED_LINE = re.compile(r"^\d+\.\s+(.+)$", re.MULTILINE)
_BULLET_LINE = re.compile(r"^[-*]\s+(.+)$", re.MULTILINE)

_SCRIPT_BLOCK = re.compile(
    r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE
)
_IFRAME_BLOCK = re.compile(
    r"<iframe\b[^<]*(?:(?!</iframe>)<[^<]*)*</iframe>", re.IGNORECASE
)


class ReviewContext:
    """Builds prompts for review and chat turns."""

    def __init__(self, guidelines: Optional[dict[str, Any]] = None) -> None:
        self._guidelines = guidelines if guidelines is not None else load_guidelines()
        logger.info("Review context initialized")

    @property
    def common_issues(self) -> list[str]:
        return list(self._guidelines.get("common_issues", []))

    @property
    def best_practices(self) -> list[str]:
        return list(self._guidelines.get("best_practices", []))

    # ------------------------------------------------------------------
    # Prompts
    # ------------------------------------------------------------------

    def build_system_prompt(self, language: Optional[str] = None) -> str:
        """Review guidelines, plus a language focus clause when a hint is given."""
        prompt = self._guidelines["review_guidelines"].strip()
        if language:
            focus = self._guidelines["language_focus"].strip().format(language=language)
            prompt = f"{prompt}\n\n{focus}"
        return prompt

    def build_user_prompt(self, code: str, user_context: Optional[str] = None) -> str:
        context_note = f"\n\nADDITIONAL CONTEXT:\n{user_context}\n" if user_context else ""
        return (
            f"Please review the following code:{context_note}\n\n"
            f"```\n{code}\n```\n\n"
            "Provide a thorough review covering security, bugs, performance "
            "and best practices."
        )

    def build_chat_system_prompt(self) -> str:
        return self._guidelines["chat_prompt"].strip()

    def build_chat_user_prompt(self, message: str) -> str:
        return message

    # ------------------------------------------------------------------
    # Output heuristics
    # ------------------------------------------------------------------

    def extract_severity(self, response: str) -> Severity:
        """Triage label from free text; critical keywords outrank warning ones."""
        lowered = response.lower()
        for severity, keywords in SEVERITY_RULES:
            if any(keyword in lowered for keyword in keywords):
                return severity
        return Severity.INFO

    def extract_suggestions(self, response: str) -> list[str]:
        """Numbered list items, falling back to bullet items when there are none."""
        suggestions = [m.strip() for m in _NUMBERED_LINE.findall(response)]
        if not suggestions:
            suggestions = [m.strip() for m in _BULLET_LINE.findall(response)]
        return suggestions

    # ------------------------------------------------------------------
    # Input handling
    # ------------------------------------------------------------------

    def sanitize_code(self, code: str) -> str:
        """Replace script and iframe blocks with a marker.

        Best effort for display only, not an HTML sanitizer.
        """
        code = _SCRIPT_BLOCK.sub("[REMOVED: script tag]", code)
        code = _IFRAME_BLOCK.sub("[REMOVED: iframe tag]", code)
        return code.strip()

    def validate_code_length(self, code: str, max_length: int) -> bool:
        return 0 < len(code) <= max_length

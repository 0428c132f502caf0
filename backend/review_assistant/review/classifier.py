"""Heuristic code-vs-conversation classifier.

Rule-based, no LLM call. The rules are ordered lists so each one can be
tested on its own and their priority is visible in one place:

1. a fenced block marker decides immediately;
2. any strong rule decides immediately;
3. otherwise weak indicators are counted, each at most once, and the message
   is code when at least ``MIN_WEAK_INDICATORS`` match. Short messages
   (under ``SHORT_MESSAGE_LENGTH``) below that threshold are never code.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Pattern

FENCE_MARKER = "```"
SHORT_MESSAGE_LENGTH = 50
MIN_WEAK_INDICATORS = 2


@dataclass(frozen=True)
class Rule:
    name: str
    pattern: Pattern[str]

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


STRONG_RULES: tuple[Rule, ...] = (
    Rule(
        "sql_statement",
        re.compile(
            r"\b(SELECT|INSERT|UPDATE|DELETE)\b[\s\S]*\b(FROM|INTO|SET|WHERE)\b",
            re.IGNORECASE,
        ),
    ),
    Rule("function_header", re.compile(r"\b(function|def|async\s+function)\s+\w+\s*\(")),
    Rule("paired_markup", re.compile(r"<\w+[^>]*>[\s\S]*</\w+>")),
)

WEAK_INDICATORS: tuple[Rule, ...] = (
    Rule(
        "keyword",
        re.compile(
            r"\b(function|const|let|var|class|import|export|return"
            r"|if|else|for|while|switch|case)\b"
        ),
    ),
    Rule("punctuation", re.compile(r"[{}\[\]();]")),
    Rule("assignment", re.compile(r"\w+\s*=\s*[\w\"'`]")),
    Rule("arrow_function", re.compile(r"=>")),
    Rule("method_call", re.compile(r"\w+\.\w+\(")),
    Rule("type_annotation", re.compile(r":\s*(string|number|boolean|any|void|Array)")),
    Rule("markup_tag", re.compile(r"</?[a-z][\s\S]*>", re.IGNORECASE)),
    Rule(
        "sql_keyword",
        re.compile(
            r"\b(SELECT|INSERT|UPDATE|DELETE|FROM|WHERE|JOIN|LIMIT|ORDER BY)\b",
            re.IGNORECASE,
        ),
    ),
    Rule("comment_marker", re.compile(r"//|/\*|\*/|#\s")),
)


@dataclass(frozen=True)
class ClassificationResult:
    """Why a message was (or was not) treated as code."""

    is_code: bool
    rule: str
    indicator_count: int = 0


def count_indicators(text: str) -> int:
    """Number of distinct weak indicators present in ``text``."""
    return sum(1 for rule in WEAK_INDICATORS if rule.matches(text))


def classify(text: str) -> ClassificationResult:
    """Classify ``text`` as code or conversation."""
    trimmed = text.strip()

    if FENCE_MARKER in trimmed:
        return ClassificationResult(is_code=True, rule="fenced_block")

    for rule in STRONG_RULES:
        if rule.matches(trimmed):
            return ClassificationResult(is_code=True, rule=rule.name)

    count = count_indicators(trimmed)

    if len(trimmed) < SHORT_MESSAGE_LENGTH and count < MIN_WEAK_INDICATORS:
        return ClassificationResult(is_code=False, rule="short_message", indicator_count=count)

    if count >= MIN_WEAK_INDICATORS:
        return ClassificationResult(is_code=True, rule="weak_indicators", indicator_count=count)
    return ClassificationResult(is_code=False, rule="weak_indicators", indicator_count=count)


def is_code(text: str) -> bool:
    return classify(text).is_code

"""Tests for the code-vs-conversation classifier."""

import pytest

from review_assistant.review.classifier import (
    STRONG_RULES,
    WEAK_INDICATORS,
    classify,
    count_indicators,
    is_code,
)


def _rule(rules, name):
    return next(r for r in rules if r.name == name)


def test_fenced_block_is_code() -> None:
    result = classify("```\nlet x = 1\n```")
    assert result.is_code is True
    assert result.rule == "fenced_block"


def test_plain_question_is_not_code() -> None:
    assert is_code("hello, how are you?") is False


def test_sql_statement_is_code() -> None:
    result = classify("SELECT * FROM users WHERE id=1")
    assert result.is_code is True
    assert result.rule == "sql_statement"


def test_short_text_with_one_indicator_is_not_code() -> None:
    text = "x = 5 + y!"
    assert len(text) == 10
    assert count_indicators(text) == 1

    result = classify(text)
    assert result.is_code is False
    assert result.rule == "short_message"


@pytest.mark.parametrize(
    "text",
    [
        "def add(a, b):\n    return a + b",
        "function greet(name) { return name }",
        "async function load() {}",
    ],
)
def test_function_headers_are_code(text: str) -> None:
    assert classify(text).rule == "function_header"


def test_paired_markup_is_code() -> None:
    assert classify("<div class='x'>hi</div>").rule == "paired_markup"


def test_two_weak_indicators_in_short_text_are_code() -> None:
    result = classify("const total = 3")
    assert result.is_code is True
    assert result.rule == "weak_indicators"
    assert result.indicator_count >= 2


def test_long_prose_with_one_indicator_is_not_code() -> None:
    text = (
        "I was wondering whether you could explain the difference between "
        "processes and threads (in simple words please)"
    )
    assert len(text) >= 50
    assert count_indicators(text) == 1
    assert is_code(text) is False


def test_classification_is_deterministic() -> None:
    text = "items.map(x => x * 2); // double everything"
    assert {classify(text) for _ in range(5)} == {classify(text)}


def test_surrounding_whitespace_is_ignored() -> None:
    assert is_code("   \n```py\nprint(1)\n```\n  ") is True


def test_strong_rules_are_checked_independently() -> None:
    sql = _rule(STRONG_RULES, "sql_statement")
    assert sql.matches("delete from sessions where id = 3")
    assert not sql.matches("please select a file")


@pytest.mark.parametrize(
    "name,sample",
    [
        ("keyword", "return"),
        ("punctuation", "f(x)"),
        ("assignment", "a = 'b'"),
        ("arrow_function", "=>"),
        ("method_call", "obj.run("),
        ("type_annotation", "name: string"),
        ("markup_tag", "<br>"),
        ("sql_keyword", "order by"),
        ("comment_marker", "// note"),
    ],
)
def test_each_weak_indicator_matches_its_sample(name: str, sample: str) -> None:
    assert _rule(WEAK_INDICATORS, name).matches(sample)

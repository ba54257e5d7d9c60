"""Tests for relevance response parsing."""

from feedscore.analysis.parser import (
    NO_EXPLANATION,
    clamp_score,
    parse_batch_response,
    parse_fallback,
    parse_primary,
)

WELL_FORMED = """\
ARTICLE_ID: 1
RELEVANCE_SCORE: 85
EXPLANATION: Directly about the transit budget.

ARTICLE_ID: 2
RELEVANCE_SCORE: 10
EXPLANATION: Sports coverage, unrelated.
"""


def test_primary_parses_well_formed() -> None:
    results = parse_primary(WELL_FORMED)
    assert results[1].score == 85
    assert results[1].explanation == "Directly about the transit budget."
    assert results[2].score == 10
    assert results[2].explanation == "Sports coverage, unrelated."


def test_primary_first_block_wins() -> None:
    text = WELL_FORMED + "\nARTICLE_ID: 1\nRELEVANCE_SCORE: 5\nEXPLANATION: again\n"
    assert parse_primary(text)[1].score == 85


def test_batch_response_reordered() -> None:
    text = """\
ARTICLE_ID: 2
RELEVANCE_SCORE: 40
EXPLANATION: second

ARTICLE_ID: 1
RELEVANCE_SCORE: 60
EXPLANATION: first
"""
    results = parse_batch_response(text, [1, 2])
    assert results[1].score == 60
    assert results[1].explanation == "first"
    assert results[2].score == 40


def test_batch_response_missing_id() -> None:
    text = "ARTICLE_ID: 1\nRELEVANCE_SCORE: 70\nEXPLANATION: ok\n"
    results = parse_batch_response(text, [1, 2])
    assert set(results) == {1}


def test_batch_response_ignores_unexpected_ids() -> None:
    text = WELL_FORMED + "\nARTICLE_ID: 3\nRELEVANCE_SCORE: 99\nEXPLANATION: invented\n"
    assert set(parse_batch_response(text, [1, 2])) == {1, 2}


def test_batch_response_decorated_markers() -> None:
    text = """\
**Article ID 1**
Relevance Score: 72
Explanation: Mentions the council vote.

**Article ID 2**
Relevance Score: 15
Explanation: Only a passing reference.
"""
    results = parse_batch_response(text, [1, 2])
    assert results[1].score == 72
    assert results[1].explanation == "Mentions the council vote."
    assert results[2].score == 15
    assert results[2].explanation == "Only a passing reference."


def test_single_article_without_marker() -> None:
    text = "RELEVANCE_SCORE: 55\nEXPLANATION: Somewhat related."
    results = parse_batch_response(text, [1])
    assert results[1].score == 55
    assert results[1].explanation == "Somewhat related."


def test_unmarked_text_not_assigned_in_multi_article_batch() -> None:
    assert parse_batch_response("RELEVANCE_SCORE: 55", [1, 2]) == {}


def test_scores_are_clamped() -> None:
    text = """\
ARTICLE_ID: 1
RELEVANCE_SCORE: 150
EXPLANATION: very
ARTICLE_ID: 2
RELEVANCE_SCORE: -20
EXPLANATION: not at all
"""
    results = parse_batch_response(text, [1, 2])
    assert results[1].score == 100
    assert results[2].score == 0


def test_fractional_score_is_rounded() -> None:
    results = parse_batch_response("ARTICLE_ID: 1\nRELEVANCE_SCORE: 72.6\n", [1])
    assert results[1].score == 73


def test_non_numeric_score() -> None:
    text = "ARTICLE_ID: 1\nRELEVANCE_SCORE: high\nEXPLANATION: unclear\n"
    result = parse_batch_response(text, [1])[1]
    assert result.score == 0
    assert result.score_found is False
    assert result.explanation == "unclear"


def test_missing_explanation() -> None:
    result = parse_batch_response("ARTICLE_ID: 1\nRELEVANCE_SCORE: 30\n", [1])[1]
    assert result.explanation == NO_EXPLANATION


def test_multiline_explanation() -> None:
    text = "ARTICLE_ID: 1\nRELEVANCE_SCORE: 30\nEXPLANATION: line one\nline two\n"
    assert parse_batch_response(text, [1])[1].explanation == "line one\nline two"


def test_empty_response() -> None:
    assert parse_batch_response("", [1, 2]) == {}
    assert parse_batch_response(None, [1]) == {}


def test_fallback_only_expected_ids() -> None:
    text = "Article 2\nRELEVANCE_SCORE: 33\nEXPLANATION: x\n"
    results = parse_fallback(text, [1, 2])
    assert set(results) == {2}
    assert results[2].score == 33


def test_clamp_score() -> None:
    assert clamp_score(-1) == 0
    assert clamp_score(101) == 100
    assert clamp_score(72.6) == 73

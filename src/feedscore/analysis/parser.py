"""Parsing of semi-structured relevance responses.

The model is asked to answer with repeated blocks::

    ARTICLE_ID: 1
    RELEVANCE_SCORE: 85
    EXPLANATION: ...

Models drift from that format (reordered or missing blocks, decorated labels,
out-of-range scores), so parsing runs in two stages. The primary parser splits
on the exact ``ARTICLE_ID:`` marker. The fallback searches for each expected
ID with a looser marker. Both return a mapping from batch-local ID to result;
IDs neither stage finds are left to the caller.
"""

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

MIN_SCORE = 0
MAX_SCORE = 100
NO_EXPLANATION = "No explanation provided"

_PRIMARY_SPLIT = re.compile(r"ARTICLE_ID:\s*(\d+)")
_SCORE = re.compile(r"RELEVANCE[_ ]SCORE\W*?(-?\d+(?:\.\d+)?)", re.IGNORECASE)
_EXPLANATION = re.compile(
    r"EXPLANATION\W*?:\s*(.+?)(?=^\W*ARTICLE[_ ]?ID|\Z)",
    re.IGNORECASE | re.DOTALL | re.MULTILINE,
)
_LOOSE_MARKER = r"^\W*ARTICLE(?:[_ -]?ID)?\W*"
_ANY_LOOSE_MARKER = re.compile(_LOOSE_MARKER + r"\d+\b", re.IGNORECASE | re.MULTILINE)


@dataclass(frozen=True)
class ParsedScore:
    """One article's result as read from the response."""

    score: int
    explanation: str
    score_found: bool = True


def clamp_score(value: float) -> int:
    """Round ``value`` and clamp it to the 0-100 scale."""
    return max(MIN_SCORE, min(MAX_SCORE, round(value)))


def _parse_segment(segment: str, article_id: int) -> ParsedScore:
    score_match = _SCORE.search(segment)
    if score_match:
        score = clamp_score(float(score_match.group(1)))
    else:
        logger.warning("Failed to extract score for article ID %d", article_id)
        score = 0

    explanation_match = _EXPLANATION.search(segment)
    explanation = explanation_match.group(1).strip() if explanation_match else ""
    return ParsedScore(
        score=score,
        explanation=explanation or NO_EXPLANATION,
        score_found=score_match is not None,
    )


def parse_primary(text: str) -> dict[int, ParsedScore]:
    """Split the response on ``ARTICLE_ID:`` markers and parse each block.

    When an ID appears more than once, the first block wins.
    """
    results: dict[int, ParsedScore] = {}
    parts = _PRIMARY_SPLIT.split(text)
    # parts = [preamble, id_1, body_1, id_2, body_2, ...]
    for i in range(1, len(parts) - 1, 2):
        article_id = int(parts[i])
        if article_id in results:
            continue
        results[article_id] = _parse_segment(parts[i + 1], article_id)
    return results


def _segment_for(text: str, article_id: int) -> str | None:
    marker = re.compile(_LOOSE_MARKER + rf"{article_id}\b", re.IGNORECASE | re.MULTILINE)
    match = marker.search(text)
    if match is None:
        return None
    following = _ANY_LOOSE_MARKER.search(text, match.end())
    end = following.start() if following else len(text)
    return text[match.end() : end]


def parse_fallback(text: str, expected_ids: list[int]) -> dict[int, ParsedScore]:
    """Search the raw response for each expected ID individually.

    Tolerates reordered blocks, decorated markers such as ``**Article ID 2**``
    and omitted blocks. A single-article batch answered without any marker is
    accepted when the response still carries a score.
    """
    results: dict[int, ParsedScore] = {}
    for article_id in expected_ids:
        segment = _segment_for(text, article_id)
        if segment is not None:
            results[article_id] = _parse_segment(segment, article_id)

    if (
        not results
        and expected_ids == [1]
        and _ANY_LOOSE_MARKER.search(text) is None
        and _SCORE.search(text)
    ):
        results[1] = _parse_segment(text, 1)
    return results


def parse_batch_response(text: str | None, expected_ids: list[int]) -> dict[int, ParsedScore]:
    """Parse a batch response, falling back per ID where the primary parse missed.

    Args:
        text: Raw response text (None or empty yields no results).
        expected_ids: The batch-local IDs that were sent.

    Returns:
        Mapping of expected IDs to parsed results. IDs absent from the
        mapping could not be recovered by either strategy.
    """
    if not text:
        logger.error("Empty response from model")
        return {}

    expected = set(expected_ids)
    results = {k: v for k, v in parse_primary(text).items() if k in expected}

    missing = [article_id for article_id in expected_ids if article_id not in results]
    if missing:
        if results:
            logger.warning("Primary parse missed article IDs %s, trying fallback", missing)
        else:
            logger.warning("Primary parse found no articles, trying fallback")
        results.update(parse_fallback(text, missing))

    return results

"""Tests for batch partitioning and prompt construction."""

import pytest

from feedscore.analysis.prompts import (
    TRUNCATION_MARKER,
    build_batch_prompt,
    build_system_prompt,
    partition,
    truncate_content,
)
from feedscore.data import ScrapedArticle


def _article(n: int, content: str = "body") -> ScrapedArticle:
    return ScrapedArticle(
        source_label=f"alert {n}", title=f"Title {n}", url=f"https://a.com/{n}", content=content
    )


def test_partition_sizes_and_positions() -> None:
    items = [(i * 10, _article(i)) for i in range(5)]
    batches = partition(items, 2)
    assert [len(b) for b in batches] == [2, 2, 1]
    assert [b.index for b in batches] == [0, 1, 2]
    assert batches[1].positions == (20, 30)
    assert batches[2].ids == [1]


def test_partition_empty() -> None:
    assert partition([], 2) == []


def test_partition_rejects_zero() -> None:
    with pytest.raises(ValueError):
        partition([(0, _article(0))], 0)


def test_truncate_content() -> None:
    assert truncate_content("short", 10) == "short"
    assert truncate_content("x" * 10, 10) == "x" * 10
    assert truncate_content("x" * 11, 10) == "x" * 10 + TRUNCATION_MARKER


def test_system_prompt_carries_rubric_and_format() -> None:
    prompt = build_system_prompt("  Local transit news  ", 2)
    assert "Local transit news" in prompt
    assert "2 articles" in prompt
    assert "ARTICLE_ID: [id]" in prompt
    assert "RELEVANCE_SCORE: [score]" in prompt
    assert "EXPLANATION:" in prompt
    assert "between 0 and 100" in prompt


def test_system_prompt_singular() -> None:
    assert "1 article and" in build_system_prompt("r", 1)


def test_batch_prompt_lists_articles_by_local_id() -> None:
    batch = partition([(7, _article(7)), (9, _article(9, "x" * 50))], 2)[0]
    prompt = build_batch_prompt(batch, max_chars=20)
    assert prompt.startswith("Articles to analyze:\n\n")
    assert "ARTICLE_ID: 1\nTITLE: Title 7\nURL: https://a.com/7\nSOURCE: alert 7" in prompt
    assert "ARTICLE_ID: 2\nTITLE: Title 9" in prompt
    assert "x" * 20 + TRUNCATION_MARKER in prompt
    assert "x" * 21 not in prompt


def test_batch_prompt_placeholders() -> None:
    article = ScrapedArticle(source_label="", title="", url="", content="body")
    prompt = build_batch_prompt(partition([(0, article)], 1)[0])
    assert "No title available" in prompt
    assert "No URL available" in prompt
    assert "Unknown source" in prompt

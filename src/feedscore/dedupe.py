"""Duplicate article detection by normalized URL and content prefix."""

import logging
import re
from collections.abc import Sequence
from typing import TypeVar

from feedscore.data import ArticleLink, ScrapedArticle
from feedscore.url import normalize_url

logger = logging.getLogger(__name__)

FINGERPRINT_LENGTH = 200

STOPWORDS = ("the", "and", "or", "but", "a", "an", "in", "on", "at", "for", "to", "of", "with", "by")

_WHITESPACE = re.compile(r"\s+")
_STOPWORD_PATTERN = re.compile(r"\b(?:" + "|".join(STOPWORDS) + r")\b")

A = TypeVar("A", bound=ArticleLink)


def content_fingerprint(content: str) -> str:
    """Reduce article text to a short key for near-duplicate comparison.

    Lowercases, collapses whitespace, drops a small stopword list and keeps
    the first ``FINGERPRINT_LENGTH`` characters. Articles that share the same
    opening text collide; this is a cheap heuristic, not a similarity score.
    """
    normalized = _WHITESPACE.sub(" ", content.lower())
    normalized = _STOPWORD_PATTERN.sub("", normalized)
    normalized = _WHITESPACE.sub(" ", normalized).strip()
    return normalized[:FINGERPRINT_LENGTH]


def dedupe(articles: Sequence[A], *, compare_content: bool = True) -> list[A]:
    """Remove duplicate articles, keeping the first occurrence.

    Two articles are duplicates when their normalized URLs match, or when
    both have non-empty content with equal fingerprints. Articles without a
    URL are always kept.

    Args:
        articles: Articles in input order.
        compare_content: Also compare content fingerprints of scraped articles.

    Returns:
        The unique articles, in input order.
    """
    unique: list[A] = []
    seen_urls: set[str] = set()
    seen_fingerprints: set[str] = set()

    for article in articles:
        if not article.url.strip():
            unique.append(article)
            continue

        key = normalize_url(article.url)
        if key in seen_urls:
            logger.debug("Duplicate URL: %s", article.url)
            continue

        if compare_content and isinstance(article, ScrapedArticle) and article.content.strip():
            fingerprint = content_fingerprint(article.content)
            if fingerprint in seen_fingerprints:
                logger.debug("Duplicate content: %s", article.title)
                continue
            seen_fingerprints.add(fingerprint)

        seen_urls.add(key)
        unique.append(article)

    logger.info("Deduplication: %d in, %d unique", len(articles), len(unique))
    return unique

"""Article fetching and content extraction module."""

from feedscore.scraper.base import ContentFetcher
from feedscore.scraper.extractor import ExtractedArticle, extract_article, sanitize_html
from feedscore.scraper.fetcher import HttpContentFetcher

__all__ = [
    "ContentFetcher",
    "ExtractedArticle",
    "HttpContentFetcher",
    "extract_article",
    "sanitize_html",
]

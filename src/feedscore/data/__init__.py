"""Data models for feedscore."""

from feedscore.data.models import (
    AnalyzedArticle,
    APICallUsage,
    ArticleLink,
    FeedSource,
    ScrapedArticle,
    Usage,
)

__all__ = [
    "APICallUsage",
    "AnalyzedArticle",
    "ArticleLink",
    "FeedSource",
    "ScrapedArticle",
    "Usage",
]

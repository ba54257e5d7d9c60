"""feedscore: rank RSS feed articles by relevance to a rubric using Claude."""

from feedscore.analysis import ClaudeRelevanceAnalyzer, RelevanceAnalyzer, RequestQueue
from feedscore.config import FeedscoreConfig, create_from_config, load_config
from feedscore.data import (
    AnalyzedArticle,
    APICallUsage,
    ArticleLink,
    FeedSource,
    ScrapedArticle,
    Usage,
)
from feedscore.dedupe import dedupe
from feedscore.export import ExportFormat, ExportOptions, export_articles
from feedscore.feeds import FeedReader
from feedscore.ledger import CostLedger, InMemoryLedgerStore, JsonLedgerStore
from feedscore.pipeline import FeedScorePipeline, PipelineResult
from feedscore.pricing import ModelPricing
from feedscore.run_logger import RunLogger
from feedscore.scraper import ContentFetcher, HttpContentFetcher
from feedscore.url import normalize_url

__all__ = [
    "APICallUsage",
    "AnalyzedArticle",
    "ArticleLink",
    "ClaudeRelevanceAnalyzer",
    "ContentFetcher",
    "CostLedger",
    "ExportFormat",
    "ExportOptions",
    "FeedReader",
    "FeedScorePipeline",
    "FeedSource",
    "FeedscoreConfig",
    "HttpContentFetcher",
    "InMemoryLedgerStore",
    "JsonLedgerStore",
    "ModelPricing",
    "PipelineResult",
    "RelevanceAnalyzer",
    "RequestQueue",
    "RunLogger",
    "ScrapedArticle",
    "Usage",
    "create_from_config",
    "dedupe",
    "export_articles",
    "load_config",
    "normalize_url",
]

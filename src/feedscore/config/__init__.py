"""Configuration module for feedscore."""

from feedscore.config.factory import (
    create_analyzer,
    create_feed_reader,
    create_fetcher,
    create_from_config,
    create_ledger,
)
from feedscore.config.loader import apply_env_overrides, get_default_config_path, load_config
from feedscore.config.models import (
    AnalysisConfig,
    ClaudeConfig,
    ExportConfig,
    FeedscoreConfig,
    FeedsConfig,
    LoggingConfig,
    ScraperConfig,
    ServerConfig,
)

__all__ = [
    "AnalysisConfig",
    "ClaudeConfig",
    "ExportConfig",
    "FeedsConfig",
    "FeedscoreConfig",
    "LoggingConfig",
    "ScraperConfig",
    "ServerConfig",
    "apply_env_overrides",
    "create_analyzer",
    "create_feed_reader",
    "create_fetcher",
    "create_from_config",
    "create_ledger",
    "get_default_config_path",
    "load_config",
]

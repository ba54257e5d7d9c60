"""Pydantic configuration models for feedscore components."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, SecretStr

from feedscore.analysis.claude import DEFAULT_MODEL
from feedscore.export.base import ExportFormat

# ============================================================
# Ingestion Configs
# ============================================================


class FeedsConfig(BaseModel):
    """Configuration for FeedReader."""

    max_concurrent: int = Field(default=5, ge=1)
    request_timeout: float = Field(default=30.0, gt=0)
    request_delay: float = Field(default=2.0, ge=0)
    retries: int = Field(default=3, ge=0)

    model_config = {"frozen": True}


class ScraperConfig(BaseModel):
    """Configuration for HttpContentFetcher."""

    max_concurrent: int = Field(default=10, ge=1)
    request_timeout: float = Field(default=30.0, gt=0)
    request_delay: float = Field(default=1.0, ge=0)
    retries: int = Field(default=3, ge=0)
    max_backoff: float = Field(default=10.0, gt=0)

    model_config = {"frozen": True}


# ============================================================
# Analysis Configs
# ============================================================


class ClaudeConfig(BaseModel):
    """Configuration for the Claude client, rate limits and spend ceiling.

    Per-1k token prices default to the published price of ``model``.
    """

    api_key: SecretStr | None = None
    model: str = DEFAULT_MODEL
    max_tokens: int = Field(default=2000, ge=1)
    monthly_cost_limit: float = Field(default=20.0, ge=0)
    input_cost_per_1k: float | None = Field(default=None, ge=0)
    output_cost_per_1k: float | None = Field(default=None, ge=0)
    requests_per_minute: int = Field(default=15, ge=1)
    max_concurrent: int = Field(default=5, ge=1)

    model_config = {"frozen": True}


class AnalysisConfig(BaseModel):
    """Configuration for ClaudeRelevanceAnalyzer batching."""

    batch_size: int = Field(default=2, ge=1)
    max_content_chars: int = Field(default=7500, ge=1)

    model_config = {"frozen": True}


# ============================================================
# Output Configs
# ============================================================


class ExportConfig(BaseModel):
    """Report defaults."""

    default_format: ExportFormat = ExportFormat.HTML
    include_full_content: bool = True
    min_relevance_score: int = Field(default=0, ge=0, le=100)

    model_config = {"frozen": True}


class ServerConfig(BaseModel):
    """Report server bind address."""

    host: str = "127.0.0.1"
    port: int = Field(default=3000, ge=1, le=65535)

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Console log level and intermediate pipeline logging."""

    level: Literal["debug", "info", "warning", "error"] = "info"
    enabled: bool = False
    log_dir: str = "logs"

    model_config = {"frozen": True}


# ============================================================
# Root Config
# ============================================================


class FeedscoreConfig(BaseModel):
    """Root configuration for feedscore."""

    input_dir: Path = Path("input")
    output_dir: Path = Path("output")
    rubric_path: Path | None = None
    feeds: FeedsConfig = Field(default_factory=FeedsConfig)
    scraper: ScraperConfig = Field(default_factory=ScraperConfig)
    claude: ClaudeConfig = Field(default_factory=ClaudeConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}

"""Factory functions to create components from configuration."""

from pathlib import Path

from feedscore.analysis.claude import ClaudeRelevanceAnalyzer
from feedscore.analysis.queue import RequestQueue
from feedscore.config.models import (
    AnalysisConfig,
    ClaudeConfig,
    FeedscoreConfig,
    FeedsConfig,
    ScraperConfig,
)
from feedscore.export.base import ExportFormat
from feedscore.feeds.reader import FeedReader
from feedscore.ledger import LEDGER_FILENAME, CostLedger, JsonLedgerStore
from feedscore.pipeline.orchestrator import FeedScorePipeline
from feedscore.pricing import resolve_pricing
from feedscore.run_logger import RunLogger
from feedscore.scraper.fetcher import HttpContentFetcher


def create_feed_reader(config: FeedsConfig) -> FeedReader:
    """Create a feed reader from config."""
    return FeedReader(
        timeout=config.request_timeout,
        retries=config.retries,
        max_concurrent=config.max_concurrent,
        request_delay=config.request_delay,
    )


def create_fetcher(config: ScraperConfig) -> HttpContentFetcher:
    """Create a content fetcher from config."""
    return HttpContentFetcher(
        timeout=config.request_timeout,
        max_retries=config.retries,
        max_concurrent=config.max_concurrent,
        request_delay=config.request_delay,
        max_backoff=config.max_backoff,
    )


def create_ledger(config: ClaudeConfig, output_dir: Path) -> CostLedger:
    """Create the cost ledger persisted under ``output_dir``."""
    pricing = resolve_pricing(config.model, config.input_cost_per_1k, config.output_cost_per_1k)
    ledger = CostLedger(
        JsonLedgerStore(output_dir / LEDGER_FILENAME),
        pricing,
        config.monthly_cost_limit,
    )
    ledger.load()
    return ledger


def create_analyzer(
    claude: ClaudeConfig,
    analysis: AnalysisConfig,
    ledger: CostLedger,
) -> ClaudeRelevanceAnalyzer:
    """Create the relevance analyzer.

    Raises:
        ValueError: If no Claude API key is configured.
    """
    if claude.api_key is None or not claude.api_key.get_secret_value():
        raise ValueError("Claude API key required. Set CLAUDE_API_KEY (or ANTHROPIC_API_KEY).")
    return ClaudeRelevanceAnalyzer(
        ledger,
        model=claude.model,
        api_key=claude.api_key.get_secret_value(),
        batch_size=analysis.batch_size,
        max_content_chars=analysis.max_content_chars,
        max_tokens=claude.max_tokens,
        queue=RequestQueue(
            max_concurrent=claude.max_concurrent,
            requests_per_minute=claude.requests_per_minute,
        ),
    )


def create_from_config(
    config: FeedscoreConfig,
    *,
    output_dir_override: Path | None = None,
    log_override: bool | None = None,
    log_dir_override: str | None = None,
) -> tuple[FeedScorePipeline, RunLogger | None, CostLedger]:
    """Create a complete pipeline from root config.

    Args:
        config: Root configuration.
        output_dir_override: Override the config's output_dir.
        log_override: Override the config's logging.enabled setting.
        log_dir_override: Override the config's logging.log_dir setting.

    Returns:
        Tuple of (pipeline, run_logger, ledger).
        run_logger is None if logging is disabled.

    Raises:
        ValueError: If no Claude API key is configured.
    """
    log_enabled = log_override if log_override is not None else config.logging.enabled
    log_dir = Path(log_dir_override if log_dir_override is not None else config.logging.log_dir)
    output_dir = output_dir_override or config.output_dir

    run_logger: RunLogger | None = None
    if log_enabled:
        run_logger = RunLogger(log_dir=log_dir, enabled=True)

    ledger = create_ledger(config.claude, output_dir)
    pipeline = FeedScorePipeline(
        fetcher=create_fetcher(config.scraper),
        analyzer=create_analyzer(config.claude, config.analysis, ledger),
        output_dir=output_dir,
        feed_reader=create_feed_reader(config.feeds),
        export_format=ExportFormat(config.export.default_format),
        include_full_content=config.export.include_full_content,
        min_relevance_score=config.export.min_relevance_score,
        run_logger=run_logger,
    )
    return (pipeline, run_logger, ledger)

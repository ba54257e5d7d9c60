"""Tests for configuration loading and factory functions."""

from __future__ import annotations

from pathlib import Path
from tempfile import NamedTemporaryFile

import pytest
from pydantic import ValidationError

from feedscore.analysis.claude import ClaudeRelevanceAnalyzer
from feedscore.config import (
    AnalysisConfig,
    ClaudeConfig,
    FeedscoreConfig,
    FeedsConfig,
    ScraperConfig,
    create_analyzer,
    create_from_config,
    create_ledger,
    get_default_config_path,
    load_config,
)
from feedscore.export import ExportFormat
from feedscore.feeds import FeedReader
from feedscore.ledger import LEDGER_FILENAME
from feedscore.pipeline import FeedScorePipeline
from feedscore.scraper import HttpContentFetcher


class TestConfigModels:
    """Tests for Pydantic config models."""

    def test_feeds_config_defaults(self) -> None:
        config = FeedsConfig()
        assert config.max_concurrent == 5
        assert config.request_timeout == 30.0
        assert config.request_delay == 2.0
        assert config.retries == 3

    def test_scraper_config_defaults(self) -> None:
        config = ScraperConfig()
        assert config.max_concurrent == 10
        assert config.request_delay == 1.0
        assert config.max_backoff == 10.0

    def test_claude_config_defaults(self) -> None:
        config = ClaudeConfig()
        assert config.api_key is None
        assert config.model == "claude-haiku-4-5-20251001"
        assert config.max_tokens == 2000
        assert config.monthly_cost_limit == 20.0
        assert config.requests_per_minute == 15
        assert config.max_concurrent == 5

    def test_root_config_defaults(self) -> None:
        config = FeedscoreConfig()
        assert config.output_dir == Path("output")
        assert config.analysis.batch_size == 2
        assert config.export.default_format == ExportFormat.HTML
        assert config.export.include_full_content is True
        assert config.server.port == 3000
        assert config.logging.level == "info"
        assert config.logging.enabled is False

    def test_invalid_min_score(self) -> None:
        with pytest.raises(ValidationError):
            FeedscoreConfig.model_validate({"export": {"min_relevance_score": 101}})

    def test_api_key_is_secret(self) -> None:
        config = ClaudeConfig(api_key="sk-test")
        assert "sk-test" not in repr(config)


class TestLoadConfig:
    """Tests for YAML loading and environment overrides."""

    def test_load_without_file(self) -> None:
        config = load_config(env={})
        assert config == FeedscoreConfig()

    def test_load_yaml(self) -> None:
        yaml_content = """\
output_dir: reports
claude:
  monthly_cost_limit: 5.5
analysis:
  batch_size: 1
export:
  default_format: markdown
"""
        with NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            f.write(yaml_content)
            f.flush()
            config = load_config(f.name, env={})

        assert config.output_dir == Path("reports")
        assert config.claude.monthly_cost_limit == 5.5
        assert config.analysis.batch_size == 1
        assert config.export.default_format == ExportFormat.MARKDOWN

    def test_env_overrides_yaml(self, tmp_path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("claude:\n  monthly_cost_limit: 5\n")
        env = {
            "MONTHLY_COST_LIMIT": "12.5",
            "BATCH_SIZE": "1",
            "DEFAULT_EXPORT_FORMAT": "json",
            "INCLUDE_FULL_CONTENT": "false",
            "MIN_RELEVANCE_SCORE": "40",
            "PORT": "8080",
            "LOG_LEVEL": "WARN",
            "OUTPUT_DIR": "/tmp/out",
            "CRITERIA_FILE_PATH": "rubric.txt",
            "RSS_TIMEOUT": "12",
            "SCRAPER_RETRIES": "1",
            "CLAUDE_MODEL": "claude-3-haiku-20240307",
        }
        config = load_config(path, env=env)

        assert config.claude.monthly_cost_limit == 12.5
        assert config.analysis.batch_size == 1
        assert config.export.default_format == ExportFormat.JSON
        assert config.export.include_full_content is False
        assert config.export.min_relevance_score == 40
        assert config.server.port == 8080
        assert config.logging.level == "warning"
        assert config.output_dir == Path("/tmp/out")
        assert config.rubric_path == Path("rubric.txt")
        assert config.feeds.request_timeout == 12.0
        assert config.scraper.retries == 1
        assert config.claude.model == "claude-3-haiku-20240307"

    def test_api_key_from_env(self) -> None:
        config = load_config(env={"ANTHROPIC_API_KEY": "sk-anthropic"})
        assert config.claude.api_key is not None
        assert config.claude.api_key.get_secret_value() == "sk-anthropic"

        config = load_config(env={"CLAUDE_API_KEY": "sk-claude", "ANTHROPIC_API_KEY": "sk-other"})
        assert config.claude.api_key.get_secret_value() == "sk-claude"  # type: ignore[union-attr]

    def test_empty_env_values_ignored(self) -> None:
        assert load_config(env={"BATCH_SIZE": "  "}).analysis.batch_size == 2

    def test_invalid_env_value(self) -> None:
        with pytest.raises(ValidationError):
            load_config(env={"BATCH_SIZE": "many"})

    def test_non_mapping_yaml(self, tmp_path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ValueError):
            load_config(path, env={})

    def test_missing_file(self) -> None:
        with pytest.raises(FileNotFoundError):
            load_config("/nonexistent/config.yaml", env={})

    def test_default_config_file_loads(self) -> None:
        path = get_default_config_path()
        assert path.exists()
        config = load_config(path, env={})
        assert config.claude.monthly_cost_limit == 20.0
        assert config.export.default_format == ExportFormat.HTML


class TestFactory:
    """Tests for factory functions."""

    def test_create_ledger_uses_output_dir(self, tmp_path) -> None:
        ledger = create_ledger(ClaudeConfig(monthly_cost_limit=3.0), tmp_path)
        assert ledger.monthly_cost_limit == 3.0
        assert (tmp_path / LEDGER_FILENAME).exists()

    def test_create_ledger_pricing_override(self, tmp_path) -> None:
        ledger = create_ledger(ClaudeConfig(input_cost_per_1k=0.5), tmp_path)
        assert ledger.pricing.input_per_1k == 0.5
        assert ledger.pricing.output_per_1k == 0.005

    def test_create_analyzer_requires_key(self, tmp_path) -> None:
        ledger = create_ledger(ClaudeConfig(), tmp_path)
        with pytest.raises(ValueError, match="API key required"):
            create_analyzer(ClaudeConfig(), AnalysisConfig(), ledger)

    def test_create_analyzer(self, tmp_path) -> None:
        ledger = create_ledger(ClaudeConfig(), tmp_path)
        analyzer = create_analyzer(
            ClaudeConfig(api_key="sk-test"), AnalysisConfig(batch_size=1), ledger
        )
        assert isinstance(analyzer, ClaudeRelevanceAnalyzer)
        assert analyzer.batch_size == 1

    def test_create_from_config(self, tmp_path) -> None:
        config = FeedscoreConfig.model_validate(
            {"output_dir": str(tmp_path / "out"), "claude": {"api_key": "sk-test"}}
        )
        pipeline, run_logger, ledger = create_from_config(config)
        assert isinstance(pipeline, FeedScorePipeline)
        assert isinstance(pipeline._fetcher, HttpContentFetcher)
        assert isinstance(pipeline._feed_reader, FeedReader)
        assert run_logger is None
        assert (tmp_path / "out" / LEDGER_FILENAME).exists()
        assert ledger.monthly_cost_limit == 20.0

    def test_create_from_config_with_log_override(self, tmp_path) -> None:
        config = FeedscoreConfig.model_validate({"claude": {"api_key": "sk-test"}})
        _, run_logger, _ = create_from_config(
            config,
            output_dir_override=tmp_path,
            log_override=True,
            log_dir_override=str(tmp_path / "logs"),
        )
        assert run_logger is not None
        assert run_logger.enabled

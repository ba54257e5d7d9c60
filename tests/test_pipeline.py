"""Tests for the end-to-end pipeline."""

import csv
import json
from datetime import datetime
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from feedscore.analysis.claude import ClaudeRelevanceAnalyzer
from feedscore.csv_io import read_scraped_articles
from feedscore.data import AnalyzedArticle, ArticleLink, FeedSource, ScrapedArticle, Usage
from feedscore.export import ExportFormat
from feedscore.ledger import CostLedger, InMemoryLedgerStore
from feedscore.pipeline import FeedScorePipeline
from feedscore.pricing import ModelPricing
from feedscore.run_logger import RunLogger

NOW = datetime(2026, 2, 12, 14, 30, 0)
RUBRIC = "Municipal transit funding."

LINKS = [
    ArticleLink(source_label="Transit", title="Bus budget", url="https://a.com/bus"),
    ArticleLink(source_label="Transit", title="Match report", url="https://b.com/match"),
    ArticleLink(source_label="Transit", title="Tram delay", url="https://c.com/tram"),
]


def _scraped(link: ArticleLink) -> ScrapedArticle:
    return ScrapedArticle.from_link(link, content=f"Full text about {link.title.lower()}.")


def _mock_response(text: str) -> MagicMock:
    block = MagicMock()
    block.text = text
    response = MagicMock()
    response.content = [block]
    response.usage.input_tokens = 400
    response.usage.output_tokens = 100
    return response


class TestFeedScorePipeline:
    """Tests for FeedScorePipeline with mocked components."""

    @pytest.fixture
    def mock_fetcher(self) -> MagicMock:
        fetcher = MagicMock()
        fetcher.fetch_all = AsyncMock(side_effect=lambda links: [_scraped(link) for link in links])
        return fetcher

    @pytest.fixture
    def mock_analyzer(self) -> MagicMock:
        analyzer = MagicMock()

        async def analyze(articles, rubric):
            scored = [
                AnalyzedArticle.from_scraped(a, 10 * (i + 1), f"reason {i}")
                for i, a in enumerate(articles)
            ]
            scored.sort(key=lambda a: -a.relevance_score)
            return scored, Usage(estimated_cost=0.01)

        analyzer.analyze = AsyncMock(side_effect=analyze)
        return analyzer

    @pytest.fixture
    def pipeline(self, tmp_path: Path, mock_fetcher, mock_analyzer) -> FeedScorePipeline:
        return FeedScorePipeline(
            fetcher=mock_fetcher,
            analyzer=mock_analyzer,
            output_dir=tmp_path,
            export_format=ExportFormat.JSON,
            clock=lambda: NOW,
        )

    async def test_run_from_links(self, pipeline, tmp_path: Path, mock_fetcher) -> None:
        result = await pipeline.run(RUBRIC, links=LINKS)

        mock_fetcher.fetch_all.assert_awaited_once_with(LINKS)
        assert [a.relevance_score for a in result.articles] == [30, 20, 10]
        assert result.report_path == tmp_path / "analyzed-articles-2026-02-12T14-30-00.json"
        assert len(json.loads(result.report_path.read_text())) == 3
        assert result.scraped_path == tmp_path / "scraped-articles-2026-02-12T14-30-00.csv"
        assert len(read_scraped_articles(result.scraped_path)) == 3
        assert result.usage.estimated_cost == 0.01

    async def test_duplicates_removed_before_analysis(self, pipeline, mock_analyzer) -> None:
        links = LINKS + [
            ArticleLink(source_label="Other", title="Bus budget", url="https://a.com/bus/?utm_source=x")
        ]
        result = await pipeline.run(RUBRIC, links=links)

        analyzed_input = mock_analyzer.analyze.await_args.args[0]
        assert len(analyzed_input) == 3
        assert result.duplicates_removed == 1

    async def test_run_from_scraped_skips_fetch(self, pipeline, mock_fetcher) -> None:
        scraped = [_scraped(link) for link in LINKS]
        result = await pipeline.run(RUBRIC, scraped=scraped)

        mock_fetcher.fetch_all.assert_not_called()
        assert result.scraped_path is None
        assert len(result.articles) == 3

    async def test_run_from_feeds(self, tmp_path: Path, mock_fetcher, mock_analyzer) -> None:
        reader = MagicMock()
        reader.fetch_all = AsyncMock(return_value=LINKS[:2])
        pipeline = FeedScorePipeline(
            mock_fetcher, mock_analyzer, tmp_path, feed_reader=reader, clock=lambda: NOW
        )
        sources = [FeedSource(url="https://feeds.example.com/a", source_label="Transit")]

        result = await pipeline.run(RUBRIC, sources=sources)

        reader.fetch_all.assert_awaited_once_with(sources)
        assert len(result.articles) == 2
        assert result.report_path.suffix == ".html"

    async def test_feeds_require_reader(self, pipeline) -> None:
        with pytest.raises(ValueError, match="feed reader"):
            await pipeline.run(RUBRIC, sources=[FeedSource(url="https://feeds.example.com/a")])

    async def test_exactly_one_input(self, pipeline) -> None:
        with pytest.raises(ValueError):
            await pipeline.run(RUBRIC)
        with pytest.raises(ValueError):
            await pipeline.run(RUBRIC, links=LINKS, scraped=[])

    async def test_per_run_overrides(self, pipeline) -> None:
        result = await pipeline.run(
            RUBRIC,
            links=LINKS,
            export_format=ExportFormat.CSV,
            min_relevance_score=20,
            include_full_content=False,
        )
        with result.report_path.open(newline="") as f:
            rows = list(csv.reader(f))
        assert result.report_path.suffix == ".csv"
        assert "Content" not in rows[0]
        assert len(rows) == 3
        assert len(result.articles) == 3

    async def test_run_logging(self, tmp_path: Path, mock_fetcher, mock_analyzer) -> None:
        run_logger = RunLogger(log_dir=tmp_path / "logs", enabled=True)
        pipeline = FeedScorePipeline(
            mock_fetcher, mock_analyzer, tmp_path / "out", run_logger=run_logger, clock=lambda: NOW
        )
        await pipeline.run(RUBRIC, links=LINKS)

        assert run_logger.last_log_path is not None
        data = json.loads(run_logger.last_log_path.read_text())
        assert data["pipeline_type"] == "links"
        assert [s["stage"] for s in data["stages"]] == [
            "fetch",
            "deduplication",
            "analysis",
            "export",
        ]
        assert data["final_article_count"] == 3


async def test_end_to_end_with_claude_analyzer(tmp_path: Path) -> None:
    """Three links through a mocked Claude client into a CSV report."""
    ledger = CostLedger(InMemoryLedgerStore(), ModelPricing(0.001, 0.005), 20.0)
    ledger.load()
    analyzer = ClaudeRelevanceAnalyzer(ledger, api_key="test-key", batch_size=1)
    scores = {"Bus budget": 88, "Match report": 3, "Tram delay": 64}

    async def create(**kwargs):
        prompt = kwargs["messages"][0]["content"]
        title = next(t for t in scores if f"TITLE: {t}" in prompt)
        return _mock_response(
            f"ARTICLE_ID: 1\nRELEVANCE_SCORE: {scores[title]}\nEXPLANATION: About {title}."
        )

    object.__setattr__(analyzer._client.messages, "create", AsyncMock(side_effect=create))
    fetcher = MagicMock()
    fetcher.fetch_all = AsyncMock(side_effect=lambda links: [_scraped(link) for link in links])

    pipeline = FeedScorePipeline(
        fetcher, analyzer, tmp_path, export_format=ExportFormat.CSV, clock=lambda: NOW
    )
    result = await pipeline.run(RUBRIC, links=LINKS)

    assert [a.title for a in result.articles] == ["Bus budget", "Tram delay", "Match report"]
    with result.report_path.open(newline="") as f:
        rows = list(csv.reader(f))
    assert len(rows) == 4
    assert [row[0] for row in rows[1:]] == ["88", "64", "3"]
    assert rows[1][4] == "About Bus budget."
    assert ledger.state.request_count == 3
    assert result.usage.input_tokens == 1200

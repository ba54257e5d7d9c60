"""End-to-end pipeline: ingest, fetch, dedupe, analyze, export."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from feedscore.analysis.base import RelevanceAnalyzer
from feedscore.csv_io import write_scraped_articles
from feedscore.data import AnalyzedArticle, ArticleLink, FeedSource, ScrapedArticle, Usage
from feedscore.dedupe import dedupe
from feedscore.export import ExportFormat, ExportOptions, export_articles
from feedscore.export.base import default_output_path, file_timestamp
from feedscore.feeds.reader import FeedReader
from feedscore.run_logger import RunLogger
from feedscore.scraper.base import ContentFetcher

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Outcome of one pipeline run."""

    articles: list[AnalyzedArticle]
    report_path: Path
    scraped_path: Path | None = None
    usage: Usage = field(default_factory=Usage)
    duplicates_removed: int = 0


class FeedScorePipeline:
    """Linear pipeline wiring the components together.

    Flow:
    1. Feeds are ingested into article links (when feeds are the input)
    2. Links are fetched and the scraped articles saved as CSV
    3. Duplicates are removed by normalized URL and content prefix
    4. Articles are scored against the rubric
    5. The ranked list is exported as a report

    Exactly one of ``sources``, ``links`` or ``scraped`` is passed to ``run``;
    later inputs skip the earlier stages.

    Args:
        fetcher: Content fetcher for article pages.
        analyzer: Relevance analyzer.
        output_dir: Directory for the scraped CSV and the report.
        feed_reader: Feed reader, required for runs that start from feeds.
        export_format: Default report format.
        include_full_content: Default for including article bodies in reports.
        min_relevance_score: Default inclusive report score threshold.
        run_logger: Optional RunLogger for intermediate result logging.
        clock: Source of the timestamp used in output file names.
    """

    def __init__(
        self,
        fetcher: ContentFetcher,
        analyzer: RelevanceAnalyzer,
        output_dir: Path,
        *,
        feed_reader: FeedReader | None = None,
        export_format: ExportFormat = ExportFormat.HTML,
        include_full_content: bool = True,
        min_relevance_score: int = 0,
        run_logger: RunLogger | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._fetcher = fetcher
        self._analyzer = analyzer
        self._output_dir = output_dir
        self._feed_reader = feed_reader
        self._export_format = export_format
        self._include_full_content = include_full_content
        self._min_score = min_relevance_score
        self._run_logger = run_logger
        self._clock = clock

    async def run(
        self,
        rubric: str,
        *,
        sources: list[FeedSource] | None = None,
        links: list[ArticleLink] | None = None,
        scraped: list[ScrapedArticle] | None = None,
        export_format: ExportFormat | None = None,
        include_full_content: bool | None = None,
        min_relevance_score: int | None = None,
    ) -> PipelineResult:
        """Execute the pipeline.

        Args:
            rubric: Relevance criteria for the analyzer.
            sources: Feeds to ingest.
            links: Article links to fetch.
            scraped: Previously scraped articles (fetching is skipped).
            export_format: Report format (defaults to the pipeline's).
            include_full_content: Include article bodies (defaults to the pipeline's).
            min_relevance_score: Report threshold (defaults to the pipeline's).

        Returns:
            PipelineResult with every analyzed article, sorted by score.

        Raises:
            ValueError: If not exactly one input is given, or feeds are given
                without a feed reader.
            OSError: If an output file cannot be written.
        """
        given = [x for x in (sources, links, scraped) if x is not None]
        if len(given) != 1:
            raise ValueError("Pass exactly one of sources, links or scraped")

        run_type = "feeds" if sources is not None else "links" if links is not None else "scraped"
        if self._run_logger:
            self._run_logger.start_run(
                run_type,
                {
                    "input_count": len(given[0]),
                    "rubric": rubric,
                    "output_dir": self._output_dir,
                },
            )

        timestamp = self._clock()
        scraped_path: Path | None = None

        if sources is not None:
            links = await self._ingest(sources)

        if scraped is None:
            assert links is not None
            scraped = await self._fetch(links)
            scraped_path = self._output_dir / f"scraped-articles-{file_timestamp(timestamp)}.csv"
            write_scraped_articles(scraped_path, scraped)
            logger.info("Scraped articles saved to %s", scraped_path)

        t0 = time.monotonic()
        unique = dedupe(scraped)
        removed = len(scraped) - len(unique)
        if removed:
            logger.info("Removed %d duplicate articles", removed)
        if self._run_logger:
            self._run_logger.log_stage(
                stage="deduplication",
                component="url_and_content_dedupe",
                input_data={"article_count": len(scraped)},
                output_data={"article_count": len(unique)},
                usage=None,
                duration_seconds=time.monotonic() - t0,
            )

        t0 = time.monotonic()
        analyzed, usage = await self._analyzer.analyze(unique, rubric)
        if self._run_logger:
            self._run_logger.log_stage(
                stage="analysis",
                component=type(self._analyzer).__name__,
                input_data={"article_count": len(unique)},
                output_data=[
                    {
                        "url": a.url,
                        "relevance_score": a.relevance_score,
                        "relevance_explanation": a.relevance_explanation,
                    }
                    for a in analyzed
                ],
                usage=usage,
                duration_seconds=time.monotonic() - t0,
            )

        fmt = export_format or self._export_format
        options = ExportOptions(
            format=fmt,
            output_path=default_output_path(self._output_dir, fmt, timestamp),
            include_full_content=(
                self._include_full_content if include_full_content is None else include_full_content
            ),
            min_relevance_score=(
                self._min_score if min_relevance_score is None else min_relevance_score
            ),
        )
        t0 = time.monotonic()
        report_path = export_articles(analyzed, options)
        if self._run_logger:
            self._run_logger.log_stage(
                stage="export",
                component=fmt.value,
                input_data={
                    "article_count": len(analyzed),
                    "min_relevance_score": options.min_relevance_score,
                },
                output_data={"path": report_path},
                usage=None,
                duration_seconds=time.monotonic() - t0,
            )
            self._run_logger.finish_run(analyzed, usage)

        return PipelineResult(
            articles=analyzed,
            report_path=report_path,
            scraped_path=scraped_path,
            usage=usage,
            duplicates_removed=removed,
        )

    async def _ingest(self, sources: list[FeedSource]) -> list[ArticleLink]:
        if self._feed_reader is None:
            raise ValueError("A feed reader is required to run from feeds")
        t0 = time.monotonic()
        links = await self._feed_reader.fetch_all(sources)
        if self._run_logger:
            self._run_logger.log_stage(
                stage="feed_ingest",
                component=type(self._feed_reader).__name__,
                input_data=sources,
                output_data={"link_count": len(links)},
                usage=None,
                duration_seconds=time.monotonic() - t0,
            )
        return links

    async def _fetch(self, links: list[ArticleLink]) -> list[ScrapedArticle]:
        t0 = time.monotonic()
        scraped = await self._fetcher.fetch_all(links)
        if self._run_logger:
            self._run_logger.log_stage(
                stage="fetch",
                component=type(self._fetcher).__name__,
                input_data={"link_count": len(links)},
                output_data=[
                    {"url": a.url, "content_chars": len(a.content), "error": a.extraction_error}
                    for a in scraped
                ],
                usage=None,
                duration_seconds=time.monotonic() - t0,
            )
        return scraped

"""Shared export types: formats, options and the report summary."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from pathlib import Path

from feedscore.data import AnalyzedArticle

HIGH_SCORE = 75
MEDIUM_SCORE = 50
LOW_SCORE = 25


class ExportFormat(StrEnum):
    """Supported report encodings."""

    CSV = "csv"
    EXCEL = "excel"
    JSON = "json"
    MARKDOWN = "markdown"
    HTML = "html"

    @property
    def extension(self) -> str:
        return _EXTENSIONS[self]


_EXTENSIONS = {
    ExportFormat.CSV: "csv",
    ExportFormat.EXCEL: "xlsx",
    ExportFormat.JSON: "json",
    ExportFormat.MARKDOWN: "md",
    ExportFormat.HTML: "html",
}


@dataclass(frozen=True)
class ExportOptions:
    """How and where to write a report.

    ``min_relevance_score`` is an inclusive lower bound applied before rendering.
    """

    format: ExportFormat
    output_path: Path
    include_full_content: bool = True
    min_relevance_score: int = 0


@dataclass(frozen=True)
class ReportSummary:
    """Aggregate figures shown in spreadsheet, outline and HTML reports."""

    total: int
    average_score: float
    above_75: int
    above_50: int
    above_25: int
    high: int
    medium: int
    low: int
    generated_at: datetime


def summarize(articles: list[AnalyzedArticle], now: datetime | None = None) -> ReportSummary:
    """Compute report totals. The average of an empty list is 0."""
    scores = [a.relevance_score for a in articles]
    return ReportSummary(
        total=len(scores),
        average_score=sum(scores) / len(scores) if scores else 0.0,
        above_75=sum(1 for s in scores if s > HIGH_SCORE),
        above_50=sum(1 for s in scores if s > MEDIUM_SCORE),
        above_25=sum(1 for s in scores if s > LOW_SCORE),
        high=sum(1 for s in scores if s > HIGH_SCORE),
        medium=sum(1 for s in scores if MEDIUM_SCORE <= s <= HIGH_SCORE),
        low=sum(1 for s in scores if s < MEDIUM_SCORE),
        generated_at=now or datetime.now(),
    )


def file_timestamp(now: datetime | None = None) -> str:
    """Timestamp for output file names, e.g. ``2026-02-12T14-30-00``."""
    return (now or datetime.now()).replace(microsecond=0, tzinfo=None).isoformat().replace(":", "-")


def default_output_path(output_dir: Path, fmt: ExportFormat, now: datetime | None = None) -> Path:
    """``<output_dir>/analyzed-articles-<timestamp>.<ext>``."""
    return output_dir / f"analyzed-articles-{file_timestamp(now)}.{fmt.extension}"


def display_time(when: datetime) -> str:
    return when.strftime("%Y-%m-%d %H:%M:%S")

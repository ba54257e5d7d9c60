"""Report export module."""

import logging
from pathlib import Path

from feedscore.data import AnalyzedArticle
from feedscore.export.base import (
    ExportFormat,
    ExportOptions,
    ReportSummary,
    default_output_path,
    file_timestamp,
    summarize,
)
from feedscore.export.csv_export import write_csv
from feedscore.export.excel_export import write_excel
from feedscore.export.html_export import render_html, write_html
from feedscore.export.json_export import write_json
from feedscore.export.markdown_export import render_markdown, write_markdown

logger = logging.getLogger(__name__)


def export_articles(articles: list[AnalyzedArticle], options: ExportOptions) -> Path:
    """Filter articles by minimum score and write them in the requested format.

    Args:
        articles: Analyzed articles, already in report order.
        options: Format, destination and filtering options.

    Returns:
        Path of the written report.

    Raises:
        ValueError: If the format is not supported.
        OSError: If the report cannot be written.
    """
    fmt = ExportFormat(options.format)
    selected = [a for a in articles if a.relevance_score >= options.min_relevance_score]
    logger.info(
        "Exporting %d of %d articles to %s (min score %d)",
        len(selected),
        len(articles),
        fmt.value,
        options.min_relevance_score,
    )

    path = options.output_path
    content = options.include_full_content
    if fmt is ExportFormat.CSV:
        write_csv(selected, path, content)
    elif fmt is ExportFormat.JSON:
        write_json(selected, path, content)
    elif fmt is ExportFormat.EXCEL:
        write_excel(selected, path, summarize(selected), content)
    elif fmt is ExportFormat.MARKDOWN:
        write_markdown(selected, path, summarize(selected), content)
    else:
        write_html(selected, path, summarize(selected), content)

    logger.info("Report written to %s", path)
    return path


__all__ = [
    "ExportFormat",
    "ExportOptions",
    "ReportSummary",
    "default_output_path",
    "export_articles",
    "file_timestamp",
    "render_html",
    "render_markdown",
    "summarize",
]

"""Spreadsheet report: an article sheet plus a summary sheet."""

import logging
from pathlib import Path

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Font, PatternFill

from feedscore.atomic import atomic_path
from feedscore.data import AnalyzedArticle
from feedscore.export.base import ReportSummary, display_time

logger = logging.getLogger(__name__)

MAX_CELL_CHARS = 30000
CELL_TRUNCATION_MARKER = "... [truncated]"

HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill(fill_type="solid", fgColor="4F81BD")
HEADER_ALIGNMENT = Alignment(horizontal="center")

COLUMN_WIDTHS = {"Relevance Score": 16, "Alert Name": 24, "Title": 50, "Link": 50}
DEFAULT_WIDTH = 60


def cell_text(value: str) -> str:
    """Make a string safe for a worksheet cell, truncating oversized bodies."""
    value = ILLEGAL_CHARACTERS_RE.sub("", value)
    if len(value) > MAX_CELL_CHARS:
        return value[:MAX_CELL_CHARS] + CELL_TRUNCATION_MARKER
    return value


def write_excel(
    articles: list[AnalyzedArticle],
    path: Path,
    summary: ReportSummary,
    include_full_content: bool,
) -> Path:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Analyzed Articles"

    headers = ["Relevance Score", "Alert Name", "Title", "Link", "Relevance Explanation"]
    if include_full_content:
        headers.append("Content")
    sheet.append(headers)
    for index, cell in enumerate(sheet[1]):
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = HEADER_ALIGNMENT
        sheet.column_dimensions[cell.column_letter].width = COLUMN_WIDTHS.get(
            headers[index], DEFAULT_WIDTH
        )
    sheet.freeze_panes = "A2"

    truncated = 0
    for article in articles:
        row: list[object] = [
            article.relevance_score,
            cell_text(article.source_label),
            cell_text(article.title),
            cell_text(article.url),
            cell_text(article.relevance_explanation),
        ]
        if include_full_content:
            if len(article.content) > MAX_CELL_CHARS:
                truncated += 1
            row.append(cell_text(article.content))
        sheet.append(row)
        # Article text is never a formula, even when it starts with "=".
        for cell in sheet[sheet.max_row]:
            if cell.data_type == "f":
                cell.data_type = "s"
    if truncated:
        logger.info("Truncated content of %d articles to fit spreadsheet cells", truncated)

    summary_sheet = workbook.create_sheet("Summary")
    for row in (
        ("Analysis Summary", ""),
        ("Total Articles", summary.total),
        ("Average Relevance Score", round(summary.average_score, 2)),
        ("Articles with Score > 75", summary.above_75),
        ("Articles with Score > 50", summary.above_50),
        ("Articles with Score > 25", summary.above_25),
        ("Generated On", display_time(summary.generated_at)),
    ):
        summary_sheet.append(row)
    summary_sheet["A1"].font = Font(bold=True)
    summary_sheet.column_dimensions["A"].width = 28
    summary_sheet.column_dimensions["B"].width = 22

    with atomic_path(path) as tmp:
        workbook.save(tmp)
    return path

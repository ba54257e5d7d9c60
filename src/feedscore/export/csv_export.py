"""Delimited-text report."""

from pathlib import Path

from feedscore.csv_io import write_rows
from feedscore.data import AnalyzedArticle


def write_csv(articles: list[AnalyzedArticle], path: Path, include_full_content: bool) -> Path:
    columns = ["Relevance Score", "Alert Name", "Title", "Link", "Relevance Explanation"]
    if include_full_content:
        columns.append("Content")
    columns.append("Error")

    def row(article: AnalyzedArticle) -> list[object]:
        values: list[object] = [
            article.relevance_score,
            article.source_label,
            article.title,
            article.url,
            article.relevance_explanation,
        ]
        if include_full_content:
            values.append(article.content)
        values.append(article.extraction_error or "")
        return values

    return write_rows(path, columns, (row(a) for a in articles))

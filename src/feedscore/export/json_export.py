"""Structured-record report: a JSON array with one object per article."""

import json
from pathlib import Path

from feedscore.atomic import write_text_atomic
from feedscore.data import AnalyzedArticle


def article_record(article: AnalyzedArticle, include_full_content: bool) -> dict[str, object]:
    record: dict[str, object] = {
        "relevance_score": article.relevance_score,
        "alert_name": article.source_label,
        "title": article.title,
        "link": article.url,
        "relevance_explanation": article.relevance_explanation,
    }
    if include_full_content:
        record["content"] = article.content
    if article.extraction_error:
        record["error"] = article.extraction_error
    return record


def write_json(articles: list[AnalyzedArticle], path: Path, include_full_content: bool) -> Path:
    records = [article_record(a, include_full_content) for a in articles]
    return write_text_atomic(path, json.dumps(records, indent=2, ensure_ascii=False))

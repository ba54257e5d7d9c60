"""Reading and writing of the pipeline's CSV interchange files.

Three layouts are used:

- feed list: ``Feed URL`` (or ``URL``), ``Alert Name`` (or ``Name``)
- link list: ``Alert Name, Title, Link``
- scraped articles: ``Alert Name, Title, Link, Content, Error``
"""

import csv
import io
import logging
from collections.abc import Iterable
from pathlib import Path

from feedscore.atomic import write_text_atomic
from feedscore.data import ArticleLink, FeedSource, ScrapedArticle

logger = logging.getLogger(__name__)

LINK_COLUMNS = ("Alert Name", "Title", "Link")
SCRAPED_COLUMNS = (*LINK_COLUMNS, "Content", "Error")


def _read_rows(path: Path) -> list[dict[str, str]]:
    with path.open(newline="", encoding="utf-8-sig") as f:
        return [
            {(k or "").strip(): (v or "").strip() for k, v in row.items()}
            for row in csv.DictReader(f)
        ]


def _first(row: dict[str, str], *columns: str) -> str:
    for column in columns:
        value = row.get(column, "")
        if value:
            return value
    return ""


def write_rows(path: Path, columns: Iterable[str], rows: Iterable[Iterable[object]]) -> Path:
    """Atomically write a CSV file with a header row.

    Fields containing delimiters, quotes or newlines are quoted by ``csv``.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(list(columns))
    writer.writerows(rows)
    return write_text_atomic(path, buffer.getvalue())


def read_feed_sources(path: Path) -> list[FeedSource]:
    """Read the list of feeds to ingest. Rows without a URL are skipped."""
    sources: list[FeedSource] = []
    for row in _read_rows(path):
        url = _first(row, "Feed URL", "URL")
        if not url:
            logger.warning("Skipping feed row without a URL: %s", row)
            continue
        sources.append(FeedSource(url=url, source_label=_first(row, "Alert Name", "Name") or "Unknown"))
    logger.info("Read %d feed sources from %s", len(sources), path)
    return sources


def read_article_links(path: Path) -> list[ArticleLink]:
    """Read a link list CSV."""
    links = [
        ArticleLink(
            source_label=row.get("Alert Name", ""),
            title=row.get("Title", ""),
            url=row.get("Link", ""),
        )
        for row in _read_rows(path)
    ]
    logger.info("Read %d article links from %s", len(links), path)
    return links


def write_article_links(path: Path, links: Iterable[ArticleLink]) -> Path:
    """Write a link list CSV."""
    return write_rows(
        path, LINK_COLUMNS, ((link.source_label, link.title, link.url) for link in links)
    )


def read_scraped_articles(path: Path) -> list[ScrapedArticle]:
    """Read articles previously written by ``write_scraped_articles``."""
    articles = [
        ScrapedArticle(
            source_label=row.get("Alert Name", ""),
            title=row.get("Title", ""),
            url=row.get("Link", ""),
            content=row.get("Content", ""),
            extraction_error=row.get("Error") or None,
        )
        for row in _read_rows(path)
    ]
    logger.info("Read %d scraped articles from %s", len(articles), path)
    return articles


def write_scraped_articles(path: Path, articles: Iterable[ScrapedArticle]) -> Path:
    """Write scraped articles, including their content and any extraction error."""
    return write_rows(
        path,
        SCRAPED_COLUMNS,
        (
            (a.source_label, a.title, a.url, a.content, a.extraction_error or "")
            for a in articles
        ),
    )

"""RSS/Atom feed ingestion."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path

import feedparser
import httpx

from feedscore.csv_io import read_feed_sources, write_article_links
from feedscore.data import ArticleLink, FeedSource
from feedscore.retry import DEFAULT_MAX_BACKOFF, backoff_delay
from feedscore.url import unwrap_redirect

logger = logging.getLogger(__name__)

FEED_HEADERS = {
    "User-Agent": "feedscore/0.1 (RSS reader)",
    "Accept": "application/rss+xml, application/atom+xml, application/xml;q=0.9, */*;q=0.8",
}


class FeedParseError(Exception):
    """Raised when a feed body cannot be parsed into entries."""


class FeedReader:
    """Fetch feeds and turn their entries into article links.

    A feed that still fails after ``retries`` retries contributes no links;
    it never aborts the other feeds.

    Args:
        timeout: Per-request timeout in seconds.
        retries: Retries after the first attempt.
        max_concurrent: Maximum feeds fetched at once.
        request_delay: Seconds between feed dispatches.
        max_backoff: Ceiling for the exponential retry delay.
        client: Shared HTTP client (one is created per call if omitted).
        sleep: Coroutine used for delays (injectable for tests).
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        retries: int = 3,
        max_concurrent: int = 5,
        request_delay: float = 2.0,
        max_backoff: float = DEFAULT_MAX_BACKOFF,
        client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be at least 1, got {max_concurrent}")
        self._timeout = timeout
        self._retries = max(0, retries)
        self._max_concurrent = max_concurrent
        self._request_delay = request_delay
        self._max_backoff = max_backoff
        self._client = client
        self._sleep = sleep

    async def fetch_feed(self, source: FeedSource) -> list[ArticleLink]:
        """Fetch one feed, returning [] if it cannot be read."""
        if self._client is not None:
            return await self._fetch_with(self._client, source)
        async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=True) as client:
            return await self._fetch_with(client, source)

    async def fetch_all(self, sources: list[FeedSource]) -> list[ArticleLink]:
        """Fetch every feed and concatenate their links in feed order."""
        if not sources:
            return []
        if self._client is not None:
            return await self._fetch_all_with(self._client, sources)
        async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=True) as client:
            return await self._fetch_all_with(client, sources)

    async def _fetch_all_with(
        self, client: httpx.AsyncClient, sources: list[FeedSource]
    ) -> list[ArticleLink]:
        semaphore = asyncio.Semaphore(self._max_concurrent)

        async def bounded(source: FeedSource) -> list[ArticleLink]:
            async with semaphore:
                return await self._fetch_with(client, source)

        logger.info("Processing %d feeds", len(sources))
        tasks: list[asyncio.Task[list[ArticleLink]]] = []
        for i, source in enumerate(sources):
            if i > 0 and self._request_delay > 0:
                await self._sleep(self._request_delay)
            tasks.append(asyncio.create_task(bounded(source)))
        results = await asyncio.gather(*tasks)

        links = [link for feed_links in results for link in feed_links]
        logger.info("Completed %d feeds, found %d articles", len(sources), len(links))
        return links

    async def _fetch_with(self, client: httpx.AsyncClient, source: FeedSource) -> list[ArticleLink]:
        for attempt in range(self._retries + 1):
            try:
                response = await client.get(source.url, headers=FEED_HEADERS)
                response.raise_for_status()
                return self._parse(response.content, source)
            except httpx.InvalidURL as e:
                logger.warning("Skipping feed with invalid URL %s (%s)", source.url, e)
                return []
            except (httpx.HTTPError, FeedParseError) as e:
                if attempt < self._retries:
                    delay = backoff_delay(attempt, self._max_backoff)
                    logger.warning(
                        "Error fetching feed %s (%s), retrying in %.0fs (%d/%d)",
                        source.url,
                        e,
                        delay,
                        attempt + 1,
                        self._retries,
                    )
                    await self._sleep(delay)
                else:
                    logger.warning(
                        "Failed to fetch feed after %d retries: %s (%s)", self._retries, source.url, e
                    )
        return []

    @staticmethod
    def _parse(content: bytes, source: FeedSource) -> list[ArticleLink]:
        feed = feedparser.parse(content)
        if feed.bozo and not feed.entries:
            raise FeedParseError(str(feed.get("bozo_exception", "malformed feed")))

        links = []
        for entry in feed.entries:
            url = unwrap_redirect(entry.get("link", "").strip())
            if not url:
                continue
            links.append(
                ArticleLink(
                    source_label=source.source_label,
                    title=entry.get("title", "").strip() or "Untitled",
                    url=url,
                )
            )
        logger.debug("Feed %s yielded %d links", source.url, len(links))
        return links


async def process_feeds(
    feed_file: Path,
    output_path: Path,
    reader: FeedReader | None = None,
) -> Path:
    """Read a feed list, fetch every feed and write the resulting link CSV.

    Args:
        feed_file: CSV of feeds (``Feed URL``, ``Alert Name``).
        output_path: Where to write the link CSV.
        reader: Feed reader to use (a default one is built if omitted).

    Returns:
        ``output_path``.
    """
    sources = read_feed_sources(feed_file)
    links = await (reader or FeedReader()).fetch_all(sources)
    write_article_links(output_path, links)
    logger.info("Exported %d article links to %s", len(links), output_path)
    return output_path

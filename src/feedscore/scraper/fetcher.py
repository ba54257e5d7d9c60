"""HTTP content fetcher with bounded retries."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

import httpx

from feedscore.data import ArticleLink, ScrapedArticle
from feedscore.retry import DEFAULT_MAX_BACKOFF, backoff_delay
from feedscore.scraper.extractor import extract_article

logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Cache-Control": "no-cache",
}


class HttpContentFetcher:
    """Fetch article pages over HTTP and extract their readable text.

    Args:
        timeout: Per-request timeout in seconds.
        max_retries: Retries after the first attempt on network errors or non-2xx statuses.
        max_concurrent: Maximum simultaneous requests in ``fetch_all``.
        request_delay: Seconds to wait between dispatches in ``fetch_all``.
        max_backoff: Ceiling for the exponential retry delay.
        client: Shared HTTP client (one is created per call if omitted).
        sleep: Coroutine used for delays (injectable for tests).
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        max_retries: int = 3,
        max_concurrent: int = 10,
        request_delay: float = 1.0,
        max_backoff: float = DEFAULT_MAX_BACKOFF,
        client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be at least 1, got {max_concurrent}")
        self._timeout = timeout
        self._max_retries = max(0, max_retries)
        self._max_concurrent = max_concurrent
        self._request_delay = request_delay
        self._max_backoff = max_backoff
        self._client = client
        self._sleep = sleep

    async def fetch(self, link: ArticleLink) -> ScrapedArticle:
        """Fetch one article. Never raises; see ``ScrapedArticle.extraction_error``."""
        if self._client is not None:
            return await self._fetch_with(self._client, link)
        async with self._new_client() as client:
            return await self._fetch_with(client, link)

    async def fetch_all(self, links: list[ArticleLink]) -> list[ScrapedArticle]:
        """Fetch every link concurrently, preserving input order in the result."""
        if not links:
            return []
        if self._client is not None:
            return await self._fetch_all_with(self._client, links)
        async with self._new_client() as client:
            return await self._fetch_all_with(client, links)

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._timeout, headers=BROWSER_HEADERS, follow_redirects=True
        )

    async def _fetch_all_with(
        self, client: httpx.AsyncClient, links: list[ArticleLink]
    ) -> list[ScrapedArticle]:
        semaphore = asyncio.Semaphore(self._max_concurrent)

        async def bounded(link: ArticleLink) -> ScrapedArticle:
            async with semaphore:
                return await self._fetch_with(client, link)

        logger.info("Fetching %d articles (max %d concurrent)", len(links), self._max_concurrent)
        tasks: list[asyncio.Task[ScrapedArticle]] = []
        for i, link in enumerate(links):
            if i > 0 and self._request_delay > 0:
                await self._sleep(self._request_delay)
            tasks.append(asyncio.create_task(bounded(link)))
        articles = list(await asyncio.gather(*tasks))

        failed = sum(1 for a in articles if a.extraction_error)
        logger.info("Fetched %d articles, %d failed", len(articles) - failed, failed)
        return articles

    async def _fetch_with(self, client: httpx.AsyncClient, link: ArticleLink) -> ScrapedArticle:
        if not link.url:
            return ScrapedArticle.from_link(link, extraction_error="Missing URL")

        html: str | None = None
        last_error = ""
        for attempt in range(self._max_retries + 1):
            try:
                response = await client.get(link.url, headers=BROWSER_HEADERS)
                response.raise_for_status()
                html = response.text
                break
            except httpx.InvalidURL as e:
                logger.error("Skipping %s: invalid URL (%s)", link.url, e)
                return ScrapedArticle.from_link(link, extraction_error=f"Invalid URL: {e}")
            except httpx.HTTPError as e:
                last_error = str(e) or type(e).__name__
                if attempt < self._max_retries:
                    delay = backoff_delay(attempt, self._max_backoff)
                    logger.warning(
                        "Fetch of %s failed (%s), retrying in %.0fs (attempt %d/%d)",
                        link.url,
                        last_error,
                        delay,
                        attempt + 1,
                        self._max_retries,
                    )
                    await self._sleep(delay)

        if html is None:
            logger.error("Giving up on %s: %s", link.url, last_error)
            return ScrapedArticle.from_link(link, extraction_error=last_error)

        try:
            extracted = extract_article(html, link.url)
        except Exception as e:
            logger.warning("Extraction failed for %s: %s", link.url, e)
            return ScrapedArticle.from_link(link, extraction_error=f"Extraction failed: {e}")

        logger.debug("Extracted %d chars from %s", len(extracted.text), link.url)
        return ScrapedArticle(
            source_label=link.source_label,
            title=link.title or extracted.title,
            url=link.url,
            content=extracted.text,
            extraction_error=None if extracted.text else "No readable content found",
            byline=extracted.byline,
            site_name=extracted.site_name,
            published_at=extracted.published_at,
            excerpt=extracted.excerpt,
        )

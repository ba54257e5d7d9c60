"""Protocol for article content fetching."""

from typing import Protocol

from feedscore.data import ArticleLink, ScrapedArticle


class ContentFetcher(Protocol):
    """Interface for turning article links into scraped articles."""

    async def fetch(self, link: ArticleLink) -> ScrapedArticle:
        """Fetch one article page and extract its text.

        Never raises: failures are reported through ``extraction_error``.
        """
        ...

    async def fetch_all(self, links: list[ArticleLink]) -> list[ScrapedArticle]:
        """Fetch every link, returning one scraped article per link in input order."""
        ...

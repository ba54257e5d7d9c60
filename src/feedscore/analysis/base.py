"""Protocol for relevance analysis."""

from typing import Protocol

from feedscore.data import AnalyzedArticle, ScrapedArticle, Usage


class RelevanceAnalyzer(Protocol):
    """Interface for scoring articles against a rubric."""

    async def analyze(
        self,
        articles: list[ScrapedArticle],
        rubric: str,
    ) -> tuple[list[AnalyzedArticle], Usage]:
        """Score every article against the rubric.

        Args:
            articles: Scraped articles to score.
            rubric: Free-text relevance criteria.

        Returns:
            Tuple of (one analyzed article per input, sorted by descending
            score, usage).
        """
        ...

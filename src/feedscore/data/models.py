"""Core data models for feedscore."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class FeedSource:
    """An RSS/Atom feed to ingest, labelled with the alert it belongs to."""

    url: str
    source_label: str = "Unknown"


@dataclass(frozen=True)
class ArticleLink:
    """A link to an article, as read from a feed or a link CSV.

    Identity is the normalized URL (see ``feedscore.url.normalize_url``).
    """

    source_label: str
    title: str
    url: str


@dataclass(frozen=True)
class ScrapedArticle(ArticleLink):
    """An article link plus the plain text extracted from its page.

    ``content`` is empty when extraction failed, in which case
    ``extraction_error`` says why. The metadata fields are best-effort.
    """

    content: str = ""
    extraction_error: str | None = None
    byline: str = ""
    site_name: str = ""
    published_at: str = ""
    excerpt: str = ""

    @classmethod
    def from_link(cls, link: ArticleLink, **kwargs: object) -> "ScrapedArticle":
        return cls(
            source_label=link.source_label,
            title=link.title,
            url=link.url,
            **kwargs,  # type: ignore[arg-type]
        )


@dataclass(frozen=True)
class AnalyzedArticle(ScrapedArticle):
    """A scraped article with its rubric relevance score (0-100)."""

    relevance_score: int = 0
    relevance_explanation: str = ""

    @classmethod
    def from_scraped(
        cls, article: ScrapedArticle, score: int, explanation: str
    ) -> "AnalyzedArticle":
        return cls(
            source_label=article.source_label,
            title=article.title,
            url=article.url,
            content=article.content,
            extraction_error=article.extraction_error,
            byline=article.byline,
            site_name=article.site_name,
            published_at=article.published_at,
            excerpt=article.excerpt,
            relevance_score=score,
            relevance_explanation=explanation,
        )


@dataclass(frozen=True)
class APICallUsage:
    """Usage from a single inference call."""

    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    estimated: bool = False


@dataclass
class Usage:
    """Accumulated API usage across pipeline components."""

    api_calls: list[APICallUsage] = field(default_factory=list)
    estimated_cost: float = 0.0

    @property
    def input_tokens(self) -> int:
        return sum(c.input_tokens for c in self.api_calls)

    @property
    def output_tokens(self) -> int:
        return sum(c.output_tokens for c in self.api_calls)

    def __add__(self, other: "Usage") -> "Usage":
        return Usage(
            api_calls=self.api_calls + other.api_calls,
            estimated_cost=self.estimated_cost + other.estimated_cost,
        )

    def __iadd__(self, other: "Usage") -> "Usage":
        self.api_calls.extend(other.api_calls)
        self.estimated_cost += other.estimated_cost
        return self

"""Batch partitioning and prompt construction for relevance scoring."""

from dataclasses import dataclass

from feedscore.data import ScrapedArticle

DEFAULT_MAX_CONTENT_CHARS = 7500
TRUNCATION_MARKER = "...[truncated]"

SYSTEM_PROMPT = """\
You are an expert content analyzer. Your task is to analyze {count} \
article{plural} and determine their relevance based on the following criteria:

{rubric}

Each article is given a unique ARTICLE_ID. For each article, provide:
1. A relevance score between 0 and 100, where 100 is extremely relevant and \
0 is not relevant at all.
2. A brief explanation (2-3 sentences) of why you assigned this score.

Evaluate EACH article independently based on the criteria.

Format your response EXACTLY like this for EACH article:
ARTICLE_ID: [id]
RELEVANCE_SCORE: [score]
EXPLANATION: [your brief explanation]

Include ALL article IDs in your response, using exactly these labels and the \
article IDs you were given. Only focus on the criteria provided. Be objective \
and consistent in your evaluation.\
"""


@dataclass(frozen=True)
class AnalysisBatch:
    """Articles scored together in one inference call.

    Members are addressed by 1-based batch-local IDs in the prompt and the
    model response. ``positions`` holds each member's index in the caller's
    input list.
    """

    index: int
    articles: tuple[ScrapedArticle, ...]
    positions: tuple[int, ...]

    @property
    def ids(self) -> list[int]:
        return list(range(1, len(self.articles) + 1))

    def __len__(self) -> int:
        return len(self.articles)


def partition(
    articles: list[tuple[int, ScrapedArticle]],
    batch_size: int,
) -> list[AnalysisBatch]:
    """Split ``(position, article)`` pairs into batches of at most ``batch_size``."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")
    batches: list[AnalysisBatch] = []
    for start in range(0, len(articles), batch_size):
        chunk = articles[start : start + batch_size]
        batches.append(
            AnalysisBatch(
                index=len(batches),
                articles=tuple(article for _, article in chunk),
                positions=tuple(position for position, _ in chunk),
            )
        )
    return batches


def truncate_content(content: str, max_chars: int = DEFAULT_MAX_CONTENT_CHARS) -> str:
    """Cut ``content`` to ``max_chars`` characters, marking the cut."""
    if len(content) <= max_chars:
        return content
    return content[:max_chars] + TRUNCATION_MARKER


def build_system_prompt(rubric: str, count: int) -> str:
    """Instructions carrying the rubric, the 0-100 scale and the reply format."""
    return SYSTEM_PROMPT.format(
        count=count,
        plural="" if count == 1 else "s",
        rubric=rubric.strip(),
    )


def _article_block(article_id: int, article: ScrapedArticle, max_chars: int) -> str:
    content = truncate_content(article.content, max_chars)
    return (
        f"ARTICLE_ID: {article_id}\n"
        f"TITLE: {article.title or 'No title available'}\n"
        f"URL: {article.url or 'No URL available'}\n"
        f"SOURCE: {article.source_label or 'Unknown source'}\n"
        f"CONTENT:\n{content or 'No content available'}"
    )


def build_batch_prompt(
    batch: AnalysisBatch,
    max_chars: int = DEFAULT_MAX_CONTENT_CHARS,
) -> str:
    """User message listing every article in the batch under its local ID."""
    blocks = [
        _article_block(article_id, article, max_chars)
        for article_id, article in zip(batch.ids, batch.articles, strict=True)
    ]
    return "Articles to analyze:\n\n" + "\n\n".join(blocks)

"""Claude-based relevance analyzer using batched, ID-tagged prompts."""

import asyncio
import logging
import os
from dataclasses import dataclass, field
from enum import StrEnum

import anthropic

from feedscore.analysis.parser import ParsedScore, parse_batch_response
from feedscore.analysis.prompts import (
    DEFAULT_MAX_CONTENT_CHARS,
    AnalysisBatch,
    build_batch_prompt,
    build_system_prompt,
    partition,
)
from feedscore.analysis.queue import RequestQueue
from feedscore.data import AnalyzedArticle, APICallUsage, ScrapedArticle, Usage
from feedscore.ledger import CostLedger, estimate_tokens

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-haiku-4-5-20251001"
MAX_SAFE_BATCH_SIZE = 2


class BatchStatus(StrEnum):
    """Lifecycle of one batch."""

    PENDING = "pending"
    IN_FLIGHT = "in_flight"
    PARSED_OK = "parsed_ok"
    PARSED_PARTIAL = "parsed_partial"
    FAILED = "failed"
    BUDGET_EXCEEDED = "budget_exceeded"


@dataclass
class BatchResult:
    """Outcome of one batch: a record for every member article."""

    batch: AnalysisBatch
    status: BatchStatus = BatchStatus.PENDING
    articles: list[AnalyzedArticle] = field(default_factory=list)
    usage: Usage = field(default_factory=Usage)


def _zero_scored(batch: AnalysisBatch, explanation: str) -> list[AnalyzedArticle]:
    return [AnalyzedArticle.from_scraped(article, 0, explanation) for article in batch.articles]


class ClaudeRelevanceAnalyzer:
    """Score articles against a rubric with Claude.

    Articles are split into small batches, each sent as one prompt whose
    members carry batch-local IDs. Batches are dispatched concurrently
    through a ``RequestQueue``. Before a batch takes a rate-window entry it
    checks the cost ledger and reserves its estimated cost, so concurrent
    batches cannot all pass the check before any spend is recorded. Every input article yields exactly one output record: unparsed,
    failed and over-budget articles are scored 0 with a diagnostic
    explanation rather than dropped.

    Args:
        ledger: Cost ledger checked before and updated after every call.
        model: Anthropic model to use.
        api_key: API key (defaults to CLAUDE_API_KEY, then ANTHROPIC_API_KEY).
        batch_size: Max articles per call (capped at ``MAX_SAFE_BATCH_SIZE``).
        max_content_chars: Per-article content ceiling in the prompt.
        max_tokens: Response token ceiling per call.
        queue: Dispatch queue (a default one is built if omitted).
    """

    def __init__(
        self,
        ledger: CostLedger,
        *,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        batch_size: int = MAX_SAFE_BATCH_SIZE,
        max_content_chars: int = DEFAULT_MAX_CONTENT_CHARS,
        max_tokens: int = 2000,
        queue: RequestQueue | None = None,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        if batch_size > MAX_SAFE_BATCH_SIZE:
            logger.warning(
                "Reducing batch size from %d to %d to keep ID correlation reliable",
                batch_size,
                MAX_SAFE_BATCH_SIZE,
            )
            batch_size = MAX_SAFE_BATCH_SIZE
        resolved_key = (
            api_key or os.environ.get("CLAUDE_API_KEY") or os.environ.get("ANTHROPIC_API_KEY")
        )
        self._client = anthropic.AsyncAnthropic(api_key=resolved_key)
        self._ledger = ledger
        self._model = model
        self._batch_size = batch_size
        self._max_content_chars = max_content_chars
        self._max_tokens = max_tokens
        self._queue = queue or RequestQueue()
        self._budget_changed = asyncio.Condition()

    @property
    def batch_size(self) -> int:
        return self._batch_size

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
            Tuple of (analyzed articles sorted by descending score with input
            order kept among ties, usage).
        """
        if not articles:
            return ([], Usage())

        records: dict[int, AnalyzedArticle] = {}
        analyzable: list[tuple[int, ScrapedArticle]] = []
        for position, article in enumerate(articles):
            if article.content.strip():
                analyzable.append((position, article))
            else:
                reason = article.extraction_error or "empty page"
                records[position] = AnalyzedArticle.from_scraped(
                    article, 0, f"Not analyzed: no content was extracted ({reason})."
                )

        batches = partition(analyzable, self._batch_size)
        logger.info(
            "Analyzing %d articles in %d batches (max %d per batch); %d without content",
            len(analyzable),
            len(batches),
            self._batch_size,
            len(records),
        )

        tasks = [self._run_batch(batch, rubric) for batch in batches]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        total_usage = Usage()
        counts: dict[BatchStatus, int] = {}
        for batch, result in zip(batches, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning("Analysis batch %d failed: %s", batch.index + 1, result)
                result = BatchResult(
                    batch=batch,
                    status=BatchStatus.FAILED,
                    articles=_zero_scored(batch, f"Error during batch analysis: {result}"),
                )
            counts[result.status] = counts.get(result.status, 0) + 1
            total_usage += result.usage
            for position, analyzed in zip(batch.positions, result.articles, strict=True):
                records[position] = analyzed

        ordered = sorted(records.items(), key=lambda item: (-item[1].relevance_score, item[0]))
        analyzed = [article for _, article in ordered]

        logger.info(
            "Analysis complete: %s; %d articles scored above 0",
            ", ".join(f"{status.value}={count}" for status, count in counts.items()) or "no batches",
            sum(1 for a in analyzed if a.relevance_score > 0),
        )
        return (analyzed, total_usage)

    async def _run_batch(self, batch: AnalysisBatch, rubric: str) -> BatchResult:
        """Dispatch one batch through the queue and map the reply to its articles."""
        result = BatchResult(batch=batch)
        system_prompt = build_system_prompt(rubric, len(batch))
        user_prompt = build_batch_prompt(batch, self._max_content_chars)
        reservation = self._ledger.pricing.cost(
            estimate_tokens(system_prompt + user_prompt), self._max_tokens
        )
        reserved = False

        async def admit() -> bool:
            nonlocal reserved
            reserved = await self._reserve_budget(reservation)
            return reserved

        try:
            async with self._queue.slot(admit) as admitted:
                if not admitted:
                    result.status = BatchStatus.BUDGET_EXCEEDED
                    result.articles = _zero_scored(
                        batch,
                        "Not analyzed: monthly cost limit of "
                        f"${self._ledger.monthly_cost_limit:.2f} reached.",
                    )
                    return result

                result.status = BatchStatus.IN_FLIGHT
                logger.debug("Dispatching batch %d (%d articles)", batch.index + 1, len(batch))
                try:
                    response = await self._client.messages.create(
                        model=self._model,
                        max_tokens=self._max_tokens,
                        system=system_prompt,
                        messages=[{"role": "user", "content": user_prompt}],
                    )
                except anthropic.APIError as e:
                    logger.warning("Batch %d request failed: %s", batch.index + 1, e)
                    result.status = BatchStatus.FAILED
                    result.articles = _zero_scored(batch, f"Error during batch analysis: {e}")
                    return result

            response_text = ""
            for block in response.content:
                if hasattr(block, "text"):
                    response_text += block.text

            result.usage = self._record_usage(response, system_prompt + user_prompt, response_text)
        finally:
            if reserved:
                await self._release_budget(reservation)

        parsed = parse_batch_response(response_text, batch.ids)
        result.articles = [
            self._to_analyzed(article_id, article, parsed.get(article_id), batch)
            for article_id, article in zip(batch.ids, batch.articles, strict=True)
        ]
        complete = all(
            article_id in parsed and parsed[article_id].score_found for article_id in batch.ids
        )
        result.status = BatchStatus.PARSED_OK if complete else BatchStatus.PARSED_PARTIAL
        return result

    async def _reserve_budget(self, amount: float) -> bool:
        """Wait until ``amount`` can be reserved, or the budget is spent.

        While calls are in flight their reservations may block a new one even
        though recorded spend is under the limit; the batch then waits for
        them to settle and checks again against the recorded total.
        """
        async with self._budget_changed:
            while True:
                if not self._ledger.check_budget():
                    return False
                if self._ledger.reserve(amount):
                    return True
                await self._budget_changed.wait()

    async def _release_budget(self, amount: float) -> None:
        async with self._budget_changed:
            self._ledger.release(amount)
            self._budget_changed.notify_all()

    def _record_usage(self, response: object, prompt: str, response_text: str) -> Usage:
        """Charge the ledger for a completed call, estimating missing counts."""
        reported = getattr(response, "usage", None)
        input_tokens = getattr(reported, "input_tokens", None)
        output_tokens = getattr(reported, "output_tokens", None)
        estimated = not isinstance(input_tokens, int) or not isinstance(output_tokens, int)
        if not isinstance(input_tokens, int):
            input_tokens = estimate_tokens(prompt)
        if not isinstance(output_tokens, int):
            output_tokens = estimate_tokens(response_text)

        cost = self._ledger.record_usage(input_tokens, output_tokens)
        return Usage(
            api_calls=[
                APICallUsage(
                    model=self._model,
                    input_tokens=input_tokens,
                    output_tokens=output_tokens,
                    estimated=estimated,
                )
            ],
            estimated_cost=cost,
        )

    @staticmethod
    def _to_analyzed(
        article_id: int,
        article: ScrapedArticle,
        parsed: ParsedScore | None,
        batch: AnalysisBatch,
    ) -> AnalyzedArticle:
        if parsed is None:
            logger.error("Missing result for article ID %d in batch %d", article_id, batch.index + 1)
            return AnalyzedArticle.from_scraped(
                article,
                0,
                "Error: failed to extract an analysis result for this article "
                "from the model response.",
            )
        return AnalyzedArticle.from_scraped(article, parsed.score, parsed.explanation)

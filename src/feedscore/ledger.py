"""Persistent monthly cost ledger for inference spend.

The ledger is an explicit object owned by the caller. Persistence goes through
a ``LedgerStore`` so tests can swap in ``InMemoryLedgerStore``. Every mutation
is saved synchronously before the call returns; within one event loop the
awaited call sites serialize writes, so no lock is taken. Calls in flight
hold a reservation of their estimated cost until their usage is recorded.
"""

import logging
import math
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, Field, ValidationError

from feedscore.atomic import write_text_atomic
from feedscore.pricing import ModelPricing

logger = logging.getLogger(__name__)

LEDGER_FILENAME = "claude_cost_tracking.json"
CHARS_PER_TOKEN = 4


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class LedgerState(BaseModel):
    """Running totals for the current calendar month."""

    total_cost_usd: float = 0.0
    input_tokens: int = 0
    output_tokens: int = 0
    request_count: int = 0
    last_updated: datetime = Field(default_factory=_utcnow)

    def same_month(self, when: datetime) -> bool:
        last = self.last_updated
        if last.tzinfo is None:
            last = last.replace(tzinfo=UTC)
        if when.tzinfo is None:
            when = when.replace(tzinfo=UTC)
        last = last.astimezone(UTC)
        when = when.astimezone(UTC)
        return (last.year, last.month) == (when.year, when.month)


class LedgerStore(Protocol):
    """Persistence boundary for ``CostLedger``."""

    def load(self) -> LedgerState | None:
        """Return the persisted state, or None if nothing is stored."""
        ...

    def save(self, state: LedgerState) -> None:
        """Persist ``state``, replacing whatever was stored."""
        ...


class JsonLedgerStore:
    """Stores the ledger as a JSON document, replaced atomically on save.

    Args:
        path: Location of the JSON document.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> LedgerState | None:
        if not self._path.exists():
            return None
        try:
            return LedgerState.model_validate_json(self._path.read_text(encoding="utf-8"))
        except (ValidationError, ValueError):
            logger.warning("Unreadable cost ledger at %s, starting fresh", self._path)
            return None

    def save(self, state: LedgerState) -> None:
        write_text_atomic(self._path, state.model_dump_json(indent=2))


class InMemoryLedgerStore:
    """Keeps the ledger in memory. Used in tests and dry runs."""

    def __init__(self, state: LedgerState | None = None) -> None:
        self.state = state
        self.save_count = 0

    def load(self) -> LedgerState | None:
        return self.state.model_copy() if self.state is not None else None

    def save(self, state: LedgerState) -> None:
        self.state = state.model_copy()
        self.save_count += 1


class CostLedger:
    """Tracks inference spend and enforces a monthly ceiling.

    Args:
        store: Where the ledger is persisted.
        pricing: Token prices used to cost each call.
        monthly_cost_limit: Spend ceiling in USD for the calendar month.
        clock: Returns the current time (injectable for tests).
    """

    def __init__(
        self,
        store: LedgerStore,
        pricing: ModelPricing,
        monthly_cost_limit: float,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._pricing = pricing
        self._limit = monthly_cost_limit
        self._clock = clock
        self._state = LedgerState(last_updated=clock())
        self._reserved = 0.0

    @property
    def state(self) -> LedgerState:
        """A copy of the current totals."""
        return self._state.model_copy()

    @property
    def monthly_cost_limit(self) -> float:
        return self._limit

    @property
    def pricing(self) -> ModelPricing:
        return self._pricing

    def load(self) -> LedgerState:
        """Read persisted totals, resetting them if the month has changed.

        A missing document and a document from a previous month both yield
        zeroed totals, which are persisted immediately.
        """
        now = self._clock()
        stored = self._store.load()
        if stored is None:
            logger.info("No existing cost ledger, starting a new one")
            self._reset(now)
        elif not stored.same_month(now):
            logger.info("New month detected, resetting cost ledger")
            self._reset(now)
        else:
            self._state = stored
        return self.state

    def record_usage(self, input_tokens: int, output_tokens: int) -> float:
        """Add one completed call to the totals and persist them.

        Returns:
            The cost in USD of this call.
        """
        now = self._clock()
        if not self._state.same_month(now):
            self._reset(now)

        input_tokens = max(0, input_tokens)
        output_tokens = max(0, output_tokens)
        cost = self._pricing.cost(input_tokens, output_tokens)

        self._state = self._state.model_copy(
            update={
                "total_cost_usd": self._state.total_cost_usd + cost,
                "input_tokens": self._state.input_tokens + input_tokens,
                "output_tokens": self._state.output_tokens + output_tokens,
                "request_count": self._state.request_count + 1,
                "last_updated": now,
            }
        )
        self._store.save(self._state)

        logger.info(
            "Request cost: $%.4f, total this month: $%.4f",
            cost,
            self._state.total_cost_usd,
        )
        return cost

    def check_budget(self) -> bool:
        """Reload the totals and report whether spending may continue.

        Returns:
            False once the month's spend has reached the configured limit.
        """
        self.load()
        if self._state.total_cost_usd >= self._limit:
            logger.error("Monthly cost limit of $%.2f reached", self._limit)
            return False
        return True

    @property
    def reserved_usd(self) -> float:
        """Estimated spend held for calls that have not completed."""
        return self._reserved

    def reserve(self, amount: float) -> bool:
        """Hold an estimated cost against the limit before dispatching a call.

        Nothing is reserved when recorded spend plus outstanding reservations
        has already reached the limit.

        Returns:
            True if the reservation was taken.
        """
        if self._state.total_cost_usd + self._reserved >= self._limit:
            return False
        self._reserved += max(0.0, amount)
        return True

    def release(self, amount: float) -> None:
        """Drop a reservation once its call has been recorded or abandoned."""
        self._reserved = max(0.0, self._reserved - max(0.0, amount))

    def _reset(self, now: datetime) -> None:
        self._state = LedgerState(last_updated=now)
        self._store.save(self._state)


def estimate_tokens(text: str) -> int:
    """Rough token count for ``text`` (about four characters per token)."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)

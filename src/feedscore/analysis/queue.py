"""Concurrency- and rate-limited dispatch for inference calls."""

import asyncio
import contextlib
import logging
import time
from collections import deque
from collections.abc import AsyncIterator, Awaitable, Callable

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60.0


class RequestQueue:
    """Bounds in-flight requests and requests per rolling window.

    A caller holds a slot for the duration of its request. Entering a slot
    waits for a free concurrency permit, then for capacity in the rolling
    window; a request that would exceed ``requests_per_minute`` suspends
    until the oldest request in the window ages out.

    Args:
        max_concurrent: Maximum simultaneous slots.
        requests_per_minute: Maximum slot entries per window.
        window_seconds: Length of the rolling window.
        clock: Monotonic time source (injectable for tests).
        sleep: Coroutine used to wait (injectable for tests).
    """

    def __init__(
        self,
        max_concurrent: int = 5,
        requests_per_minute: int = 15,
        *,
        window_seconds: float = WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be at least 1, got {max_concurrent}")
        if requests_per_minute < 1:
            raise ValueError(
                f"requests_per_minute must be at least 1, got {requests_per_minute}"
            )
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._window_lock = asyncio.Lock()
        self._rpm = requests_per_minute
        self._window = window_seconds
        self._clock = clock
        self._sleep = sleep
        self._started: deque[float] = deque()

    @contextlib.asynccontextmanager
    async def slot(
        self, admit: Callable[[], Awaitable[bool]] | None = None
    ) -> AsyncIterator[bool]:
        """Hold a concurrency permit and a window entry for one request.

        When ``admit`` is given it is awaited once the permit is held. If it
        returns False the slot yields False without taking a window entry.
        """
        async with self._semaphore:
            if admit is not None and not await admit():
                yield False
                return
            await self._wait_for_window()
            yield True

    async def _wait_for_window(self) -> None:
        async with self._window_lock:
            while True:
                now = self._clock()
                while self._started and now - self._started[0] >= self._window:
                    self._started.popleft()
                if len(self._started) < self._rpm:
                    self._started.append(now)
                    return
                delay = self._window - (now - self._started[0])
                logger.info("Rate limit of %d requests/min reached, waiting %.1fs", self._rpm, delay)
                await self._sleep(delay)

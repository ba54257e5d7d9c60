"""Backoff schedule shared by the feed reader and the content fetcher."""

DEFAULT_MAX_BACKOFF = 10.0


def backoff_delay(attempt: int, max_delay: float = DEFAULT_MAX_BACKOFF) -> float:
    """Seconds to wait after failed attempt ``attempt`` (0-based).

    Doubles each attempt starting at one second, capped at ``max_delay``.
    """
    if attempt < 0:
        return 0.0
    return min(float(2**attempt), max_delay)

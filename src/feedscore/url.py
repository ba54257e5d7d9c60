"""URL handling utilities."""

from __future__ import annotations

import logging
from urllib.parse import parse_qs, parse_qsl, urlencode, urlparse, urlunparse

logger = logging.getLogger(__name__)

TRACKING_PARAMS = frozenset(
    {
        "fbclid",
        "gclid",
        "ocid",
        "msclkid",
        "ref",
        "source",
        "ref_src",
    }
)
TRACKING_PREFIXES = ("utm_",)

_REDIRECT_HOSTS = ("google.com", "www.google.com")


def _is_tracking_param(name: str) -> bool:
    lowered = name.lower()
    return lowered in TRACKING_PARAMS or lowered.startswith(TRACKING_PREFIXES)


def normalize_url(url: str) -> str:
    """Normalize a URL for duplicate detection.

    Drops tracking query parameters (``utm_*``, ``fbclid``, ``gclid``, ...),
    lowercases scheme and host and removes the trailing slash from the path.
    Remaining query parameters keep their original order.

    Args:
        url: The URL to normalize.

    Returns:
        The normalized URL, or the stripped input if it cannot be parsed.
    """
    url = url.strip()
    try:
        parsed = urlparse(url)
    except ValueError:
        return url
    if not parsed.scheme or not parsed.netloc:
        return url

    query = [
        (name, value)
        for name, value in parse_qsl(parsed.query, keep_blank_values=True)
        if not _is_tracking_param(name)
    ]
    return urlunparse(
        (
            parsed.scheme.lower(),
            parsed.netloc.lower(),
            parsed.path.rstrip("/"),
            parsed.params,
            urlencode(query),
            parsed.fragment,
        )
    )


def unwrap_redirect(url: str) -> str:
    """Return the target of a Google redirect link, or the link unchanged.

    Google Alerts feeds wrap every article as
    ``https://www.google.com/url?rct=j&sa=t&url=<target>&ct=ga...``.
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return url
    if parsed.hostname not in _REDIRECT_HOSTS or parsed.path != "/url":
        return url
    targets = parse_qs(parsed.query).get("url")
    if not targets or not targets[0]:
        return url
    return targets[0]


def extract_domain(url: str) -> str:
    """Extract domain name from URL.

    Args:
        url: The URL to extract the domain from.

    Returns:
        The domain name (without 'www.' prefix), or "Unknown" if extraction fails.
    """
    try:
        parsed = urlparse(url)
        domain = parsed.netloc
        if not domain:
            logger.warning("Could not get domain from url %s", url)
            return "Unknown"
        if domain.startswith("www."):
            domain = domain[4:]
        return domain
    except ValueError:
        return "Unknown"

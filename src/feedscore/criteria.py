"""Loading of the relevance rubric."""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_RUBRIC_FILE = Path("promptCriteria.txt")

FALLBACK_RUBRIC = """\
Evaluate this article for general relevance and quality.
Consider:
1. Information accuracy and factual content
2. Depth of analysis and insight
3. Writing quality and clarity
4. Credibility of sources
5. Timeliness and newsworthiness

The most relevant articles will contain specific, accurate, and insightful information \
from credible sources."""


def load_rubric(
    path: Path | None = None,
    *,
    configured_path: Path | None = None,
    default_path: Path = DEFAULT_RUBRIC_FILE,
) -> str:
    """Load the rubric from the first readable, non-empty candidate file.

    Candidates are tried in order: ``path``, ``configured_path`` (from
    config or ``CRITERIA_FILE_PATH``), then ``default_path``. If none can be
    read, a built-in general-quality rubric is returned.
    """
    for candidate in (path, configured_path, default_path):
        if candidate is None:
            continue
        try:
            text = candidate.read_text(encoding="utf-8").strip()
        except OSError:
            logger.warning("Could not load rubric from %s", candidate)
            continue
        if text:
            logger.info("Loaded rubric from %s", candidate)
            return text
        logger.warning("Rubric file %s is empty", candidate)

    logger.warning("Using fallback rubric; consider creating %s", default_path)
    return FALLBACK_RUBRIC

"""Configuration loading: YAML file, then environment overrides."""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from feedscore.config.models import FeedscoreConfig

logger = logging.getLogger(__name__)

# Environment variable -> path of the field it overrides.
ENV_OVERRIDES: dict[str, tuple[str, ...]] = {
    "INPUT_DIR": ("input_dir",),
    "OUTPUT_DIR": ("output_dir",),
    "CRITERIA_FILE_PATH": ("rubric_path",),
    "RSS_MAX_CONCURRENT": ("feeds", "max_concurrent"),
    "RSS_TIMEOUT": ("feeds", "request_timeout"),
    "RSS_DELAY": ("feeds", "request_delay"),
    "RSS_RETRIES": ("feeds", "retries"),
    "SCRAPER_MAX_CONCURRENT": ("scraper", "max_concurrent"),
    "SCRAPER_TIMEOUT": ("scraper", "request_timeout"),
    "SCRAPER_DELAY": ("scraper", "request_delay"),
    "SCRAPER_RETRIES": ("scraper", "retries"),
    "SCRAPER_MAX_BACKOFF": ("scraper", "max_backoff"),
    "CLAUDE_MODEL": ("claude", "model"),
    "CLAUDE_MAX_TOKENS": ("claude", "max_tokens"),
    "MONTHLY_COST_LIMIT": ("claude", "monthly_cost_limit"),
    "CLAUDE_INPUT_COST_PER_1K": ("claude", "input_cost_per_1k"),
    "CLAUDE_OUTPUT_COST_PER_1K": ("claude", "output_cost_per_1k"),
    "CLAUDE_REQUESTS_PER_MINUTE": ("claude", "requests_per_minute"),
    "CLAUDE_MAX_CONCURRENT": ("claude", "max_concurrent"),
    "BATCH_SIZE": ("analysis", "batch_size"),
    "DEFAULT_EXPORT_FORMAT": ("export", "default_format"),
    "INCLUDE_FULL_CONTENT": ("export", "include_full_content"),
    "MIN_RELEVANCE_SCORE": ("export", "min_relevance_score"),
    "PORT": ("server", "port"),
    "LOG_LEVEL": ("logging", "level"),
}
API_KEY_VARS = ("CLAUDE_API_KEY", "ANTHROPIC_API_KEY")

_LOG_LEVEL_ALIASES = {"warn": "warning"}


def _set_path(raw: dict[str, Any], path: tuple[str, ...], value: str) -> None:
    node = raw
    for key in path[:-1]:
        child = node.get(key)
        if not isinstance(child, dict):
            child = {}
            node[key] = child
        node = child
    node[path[-1]] = value


def apply_env_overrides(raw: dict[str, Any], env: Mapping[str, str]) -> dict[str, Any]:
    """Overlay environment values onto a raw config mapping.

    Values stay strings; pydantic coerces them during validation. Empty
    values are ignored.
    """
    for var, path in ENV_OVERRIDES.items():
        value = env.get(var, "").strip()
        if value:
            if var == "LOG_LEVEL":
                value = value.lower()
                value = _LOG_LEVEL_ALIASES.get(value, value)
            _set_path(raw, path, value)

    for var in API_KEY_VARS:
        value = env.get(var, "").strip()
        if value:
            _set_path(raw, ("claude", "api_key"), value)
            break
    return raw


def load_config(
    path: Path | str | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> FeedscoreConfig:
    """Load configuration from an optional YAML file plus the environment.

    Args:
        path: Path to a YAML config file. If None, only defaults and the
            environment are used.
        env: Environment mapping (defaults to ``os.environ``).

    Returns:
        Validated FeedscoreConfig.

    Raises:
        FileNotFoundError: If ``path`` is given and doesn't exist.
        pydantic.ValidationError: If the merged config is invalid.
    """
    raw: dict[str, Any] = {}
    if path is not None:
        path = Path(path)
        with path.open() as f:
            loaded = yaml.safe_load(f)
        if loaded is not None and not isinstance(loaded, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        raw = loaded or {}
        logger.debug("Loaded config file %s", path)

    raw = apply_env_overrides(raw, os.environ if env is None else env)
    return FeedscoreConfig.model_validate(raw)


def get_default_config_path() -> Path:
    """Get path to default config file."""
    return Path(__file__).parent.parent.parent.parent / "configs" / "default.yaml"

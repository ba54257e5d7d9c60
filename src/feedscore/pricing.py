"""Per-model token pricing for Anthropic models.

Prices are USD per 1,000 tokens. Explicit overrides from configuration take
precedence over the built-in table.
"""

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelPricing:
    """Per-model pricing in USD per thousand tokens."""

    input_per_1k: float
    output_per_1k: float

    def cost(self, input_tokens: int, output_tokens: int) -> float:
        """Cost in USD of a call with the given token counts."""
        return (input_tokens / 1000) * self.input_per_1k + (
            output_tokens / 1000
        ) * self.output_per_1k


MODEL_PRICES: dict[str, ModelPricing] = {
    "claude-3-haiku": ModelPricing(0.00025, 0.00125),
    "claude-3-5-haiku": ModelPricing(0.0008, 0.004),
    "claude-haiku-4-5": ModelPricing(0.001, 0.005),
    "claude-3-5-sonnet": ModelPricing(0.003, 0.015),
    "claude-3-7-sonnet": ModelPricing(0.003, 0.015),
    "claude-sonnet-4": ModelPricing(0.003, 0.015),
    "claude-sonnet-4-5": ModelPricing(0.003, 0.015),
    "claude-3-opus": ModelPricing(0.015, 0.075),
    "claude-opus-4": ModelPricing(0.015, 0.075),
    "claude-opus-4-1": ModelPricing(0.015, 0.075),
    "claude-opus-4-5": ModelPricing(0.005, 0.025),
}

_DEFAULT_KEY = "claude-haiku-4-5"


def get_model_pricing(
    model_id: str,
    prices: dict[str, ModelPricing] | None = None,
) -> ModelPricing:
    """Look up pricing by model ID using prefix matching.

    E.g. ``'claude-haiku-4-5-20251001'`` matches ``'claude-haiku-4-5'``.
    Falls back to Haiku 4.5 pricing if no match is found.
    """
    table = MODEL_PRICES if prices is None else prices
    if model_id in table:
        return table[model_id]

    best_match: str | None = None
    for key in table:
        if model_id.startswith(key) and (best_match is None or len(key) > len(best_match)):
            best_match = key

    if best_match is not None:
        return table[best_match]

    logger.warning("No pricing found for model '%s', using Haiku 4.5 fallback", model_id)
    return MODEL_PRICES[_DEFAULT_KEY]


def resolve_pricing(
    model_id: str,
    input_per_1k: float | None = None,
    output_per_1k: float | None = None,
) -> ModelPricing:
    """Pricing for ``model_id`` with optional per-side overrides."""
    base = get_model_pricing(model_id)
    return ModelPricing(
        input_per_1k=base.input_per_1k if input_per_1k is None else input_per_1k,
        output_per_1k=base.output_per_1k if output_per_1k is None else output_per_1k,
    )

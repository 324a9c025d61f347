"""Token usage and cost estimation logging for generation calls."""

import logging
from typing import Any

from ..utils.logging import get_logger, log_event

LOGGER = get_logger(__name__)

# Estimates only; the provider's billing is authoritative.
PRICING_TABLE: dict[str, dict[str, float]] = {
    "gemini-2.5-flash-image": {
        "input": 0.35 / 1_000_000,
        "output": 1.05 / 1_000_000,
        "image_input": 0.0025,
    },
}


def estimate_cost(model: str, prompt_tokens: int, output_tokens: int, image_inputs: int) -> float | None:
    """Estimated USD cost of one call, or None for unknown models."""
    pricing = PRICING_TABLE.get(model)
    if pricing is None:
        return None
    token_cost = prompt_tokens * pricing["input"] + output_tokens * pricing["output"]
    return token_cost + image_inputs * pricing.get("image_input", 0.0)


def log_api_usage(context: str, model: str, usage: Any, image_inputs: int = 0) -> None:
    """Log token counts and estimated cost from a response's usage metadata."""
    if usage is None:
        log_event(LOGGER, logging.INFO, "api_usage_missing", context=context, model=model)
        return

    prompt_tokens = getattr(usage, "prompt_token_count", None)
    output_tokens = getattr(usage, "candidates_token_count", None)
    cost = estimate_cost(model, prompt_tokens or 0, output_tokens or 0, image_inputs)

    log_event(
        LOGGER,
        logging.INFO,
        "api_usage",
        context=context,
        model=model,
        prompt_tokens=prompt_tokens,
        output_tokens=output_tokens,
        total_tokens=getattr(usage, "total_token_count", None),
        image_inputs=image_inputs,
        estimated_cost_usd=round(cost, 6) if cost is not None else None,
    )

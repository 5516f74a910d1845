"""Per-model token pricing used when costs are computed locally."""

from typing import Dict, Optional

from ..models import CostMode

# USD per million tokens
DEFAULT_PRICING = {
    "input_per_mtok": 3.0,
    "output_per_mtok": 15.0,
    "cache_write_per_mtok": 3.75,
    "cache_read_per_mtok": 0.30,
}

MODEL_PRICING: Dict[str, Dict[str, float]] = {
    "claude-opus-4": {
        "input_per_mtok": 15.0,
        "output_per_mtok": 75.0,
        "cache_write_per_mtok": 18.75,
        "cache_read_per_mtok": 1.50,
    },
    "claude-opus-4-5": {
        "input_per_mtok": 5.0,
        "output_per_mtok": 25.0,
        "cache_write_per_mtok": 6.25,
        "cache_read_per_mtok": 0.50,
    },
    "claude-sonnet-4": DEFAULT_PRICING,
    "claude-sonnet-4-5": DEFAULT_PRICING,
    "claude-3-7-sonnet": DEFAULT_PRICING,
    "claude-3-5-sonnet": DEFAULT_PRICING,
    "claude-haiku-4-5": {
        "input_per_mtok": 1.0,
        "output_per_mtok": 5.0,
        "cache_write_per_mtok": 1.25,
        "cache_read_per_mtok": 0.10,
    },
    "claude-3-5-haiku": {
        "input_per_mtok": 0.80,
        "output_per_mtok": 4.0,
        "cache_write_per_mtok": 1.0,
        "cache_read_per_mtok": 0.08,
    },
}


def get_pricing_for_model(model: Optional[str]) -> Dict[str, float]:
    """
    Get pricing for a model id.

    Model ids carry date suffixes (``claude-sonnet-4-5-20250929``), so the
    longest known prefix wins.

    Args:
        model: Model id as recorded in the transcript

    Returns:
        Pricing dict; DEFAULT_PRICING when the model is unknown
    """
    if not model:
        return DEFAULT_PRICING
    matches = [name for name in MODEL_PRICING if model.startswith(name)]
    if not matches:
        return DEFAULT_PRICING
    return MODEL_PRICING[max(matches, key=len)]


def calculate_cost(
    model: Optional[str],
    input_tokens: int = 0,
    output_tokens: int = 0,
    cache_creation_tokens: int = 0,
    cache_read_tokens: int = 0,
) -> float:
    """Compute the USD cost of a set of token counts for a model."""
    pricing = get_pricing_for_model(model)
    return (
        input_tokens / 1_000_000 * pricing["input_per_mtok"]
        + output_tokens / 1_000_000 * pricing["output_per_mtok"]
        + cache_creation_tokens / 1_000_000 * pricing["cache_write_per_mtok"]
        + cache_read_tokens / 1_000_000 * pricing["cache_read_per_mtok"]
    )


def resolve_cost(
    mode: CostMode,
    recorded_cost: Optional[float],
    model: Optional[str],
    input_tokens: int = 0,
    output_tokens: int = 0,
    cache_creation_tokens: int = 0,
    cache_read_tokens: int = 0,
) -> float:
    """
    Pick the cost of an entry according to the cost mode.

    ``display`` trusts only the recorded cost, ``calculate`` always prices
    the tokens, ``auto`` prefers the recorded cost when there is one.
    """
    if mode is CostMode.DISPLAY:
        return recorded_cost or 0.0
    if mode is CostMode.AUTO and recorded_cost is not None:
        return recorded_cost
    return calculate_cost(
        model, input_tokens, output_tokens, cache_creation_tokens, cache_read_tokens
    )

"""Request cost calculation and display formatting."""

from __future__ import annotations

from deepseek_bridge.catalog import DEFAULT_MODEL, MODELS_BY_ID, ModelInfo, get_model_info


def _pricing_for(model: str) -> ModelInfo:
    # Unknown models are billed at chat-tier rates.
    return get_model_info(model) or MODELS_BY_ID[DEFAULT_MODEL]


def calculate_cost(prompt_tokens: int, completion_tokens: int, model: str) -> float:
    """Cost in USD of a request with the given token counts."""
    pricing = _pricing_for(model)
    prompt_cost = prompt_tokens / 1_000_000 * pricing.input_cost_per_million
    completion_cost = completion_tokens / 1_000_000 * pricing.output_cost_per_million
    return prompt_cost + completion_cost


def format_cost(cost: float) -> str:
    if cost < 0.01:
        return f"${cost:.4f}"
    return f"${cost:.2f}"

"""Model catalog: ModelInfo and lookup functions."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ModelInfo:
    """Metadata about a DeepSeek model."""

    id: str
    display_name: str
    max_output: int
    input_cost_per_million: float
    output_cost_per_million: float
    supports_tools: bool = True
    supports_reasoning: bool = False


DEFAULT_MODEL = "deepseek-chat"

MODELS: list[ModelInfo] = [
    ModelInfo(
        id="deepseek-chat",
        display_name="DeepSeek Chat",
        max_output=8_192,
        input_cost_per_million=0.14,
        output_cost_per_million=0.28,
        supports_tools=True,
        supports_reasoning=False,
    ),
    ModelInfo(
        id="deepseek-reasoner",
        display_name="DeepSeek Reasoner (R1)",
        max_output=32_768,
        input_cost_per_million=0.55,
        output_cost_per_million=2.19,
        supports_tools=True,
        supports_reasoning=True,
    ),
]

MODELS_BY_ID: dict[str, ModelInfo] = {m.id: m for m in MODELS}


def get_model_info(model_id: str) -> ModelInfo | None:
    """Look up a model by its ID. Returns None if not found."""
    return MODELS_BY_ID.get(model_id)


def list_models(
    *,
    supports_reasoning: bool | None = None,
    supports_tools: bool | None = None,
) -> list[ModelInfo]:
    """List models, optionally filtered by capability."""
    result = MODELS
    if supports_reasoning is not None:
        result = [m for m in result if m.supports_reasoning == supports_reasoning]
    if supports_tools is not None:
        result = [m for m in result if m.supports_tools == supports_tools]
    return result

"""Build the /chat/completions request body from ChatCompletionParams."""

from __future__ import annotations

from typing import Any

from deepseek_bridge.types import ChatCompletionParams

DEFAULT_TEMPERATURE = 1.0


def build_request_payload(params: ChatCompletionParams, *, stream: bool) -> dict[str, Any]:
    """Return the upstream request body.

    Sampling fields are always present, ``None`` when unset. ``tools`` is only
    included when non-empty and ``tool_choice`` only when given.
    """
    payload: dict[str, Any] = {
        "model": params.model,
        "messages": [message.to_dict() for message in params.messages],
        "temperature": (
            params.temperature if params.temperature is not None else DEFAULT_TEMPERATURE
        ),
        "max_tokens": params.max_tokens,
        "top_p": params.top_p,
        "frequency_penalty": params.frequency_penalty,
        "presence_penalty": params.presence_penalty,
        "stop": params.stop,
        "stream": stream,
    }

    if params.tools:
        payload["tools"] = [tool.to_dict() for tool in params.tools]

    if params.tool_choice is not None:
        payload["tool_choice"] = params.tool_choice.to_wire()

    return payload


def compact_payload(payload: dict[str, Any]) -> dict[str, Any]:
    """Drop unset (``None``) fields before the body goes on the wire."""
    return {key: value for key, value in payload.items() if value is not None}

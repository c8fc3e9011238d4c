"""Raw upstream payload shapes and the non-streaming response reducer.

Upstream JSON is loosely typed. Each shape is converted into a narrow frozen
dataclass at the boundary (``RawCompletion``, ``StreamChunk``) so the reducer
and the stream accumulator never touch raw dicts.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping

from deepseek_bridge.errors import ApiError
from deepseek_bridge.types import ChatCompletionResponse, ToolCall, Usage

NO_RESPONSE_MESSAGE = "No response from DeepSeek API"


def has_reasoning_content(message: Mapping[str, Any]) -> bool:
    """True when a message or delta carries the reasoning text extension field."""
    return isinstance(message.get("reasoning_content"), str)


# --- Non-streaming ---


@dataclass(frozen=True)
class RawChoice:
    content: str | None
    reasoning_content: str | None
    tool_calls: list[ToolCall]
    finish_reason: str | None


@dataclass(frozen=True)
class RawCompletion:
    """A /chat/completions response body, narrowed to the fields we read."""

    choices: list[RawChoice]
    model: str
    usage: Usage | None

    @classmethod
    def from_dict(cls, raw: Any) -> RawCompletion:
        data = _as_mapping(raw)
        choices: list[RawChoice] = []
        raw_choices = data.get("choices")
        if isinstance(raw_choices, list):
            for raw_choice in raw_choices:
                choice = _as_mapping(raw_choice)
                message = _as_mapping(choice.get("message"))
                content = message.get("content")
                choices.append(
                    RawChoice(
                        content=content if isinstance(content, str) else None,
                        reasoning_content=(
                            message["reasoning_content"]
                            if has_reasoning_content(message)
                            else None
                        ),
                        tool_calls=_parse_tool_calls(message.get("tool_calls")),
                        finish_reason=_optional_str(choice.get("finish_reason")),
                    )
                )
        return cls(
            choices=choices,
            model=str(data.get("model") or ""),
            usage=parse_usage(data.get("usage")),
        )


def reduce_response(raw: Any, *, model: str = "") -> ChatCompletionResponse:
    """Map a non-streaming response body into a ChatCompletionResponse.

    *model* is used only when the body does not name one.
    """
    completion = raw if isinstance(raw, RawCompletion) else RawCompletion.from_dict(raw)
    if not completion.choices:
        raise ApiError(NO_RESPONSE_MESSAGE)

    choice = completion.choices[0]
    return ChatCompletionResponse(
        content=choice.content or "",
        reasoning_content=choice.reasoning_content,
        model=completion.model or model,
        usage=completion.usage or Usage(),
        finish_reason=choice.finish_reason or "stop",
        tool_calls=choice.tool_calls or None,
    )


# --- Streaming ---


@dataclass(frozen=True)
class ToolCallDelta:
    """One fragment of a streamed tool call."""

    index: int
    id: str | None = None
    name: str | None = None
    arguments: str | None = None


@dataclass(frozen=True)
class ChunkChoice:
    content: str | None = None
    reasoning_content: str | None = None
    tool_calls: list[ToolCallDelta] = field(default_factory=list)
    finish_reason: str | None = None


@dataclass(frozen=True)
class StreamChunk:
    """A single ``chat.completion.chunk`` event, narrowed to the fields we read."""

    choices: list[ChunkChoice] = field(default_factory=list)
    model: str | None = None
    usage: Usage | None = None

    @classmethod
    def from_dict(cls, raw: Any) -> StreamChunk:
        data = _as_mapping(raw)
        choices: list[ChunkChoice] = []
        raw_choices = data.get("choices")
        if isinstance(raw_choices, list):
            for raw_choice in raw_choices:
                choice = _as_mapping(raw_choice)
                delta = _as_mapping(choice.get("delta"))
                content = delta.get("content")
                choices.append(
                    ChunkChoice(
                        content=content if isinstance(content, str) else None,
                        reasoning_content=(
                            delta["reasoning_content"]
                            if has_reasoning_content(delta)
                            else None
                        ),
                        tool_calls=_parse_tool_call_deltas(delta.get("tool_calls")),
                        finish_reason=_optional_str(choice.get("finish_reason")),
                    )
                )
        model = data.get("model")
        return cls(
            choices=choices,
            model=model if isinstance(model, str) and model else None,
            usage=parse_usage(data.get("usage")),
        )


# --- Helpers ---


def parse_usage(raw: Any) -> Usage | None:
    """Parse a usage block. Returns None when the payload has none."""
    if not isinstance(raw, Mapping):
        return None
    return Usage(
        prompt_tokens=_to_int(raw.get("prompt_tokens")),
        completion_tokens=_to_int(raw.get("completion_tokens")),
        total_tokens=_to_int(raw.get("total_tokens")),
    )


def _parse_tool_calls(raw: Any) -> list[ToolCall]:
    if not isinstance(raw, list):
        return []
    calls: list[ToolCall] = []
    for raw_call in raw:
        call = _as_mapping(raw_call)
        function = _as_mapping(call.get("function"))
        calls.append(
            ToolCall(
                id=str(call.get("id") or ""),
                name=_as_text(function.get("name")),
                arguments=_as_text(function.get("arguments")),
            )
        )
    return calls


def _parse_tool_call_deltas(raw: Any) -> list[ToolCallDelta]:
    if not isinstance(raw, list):
        return []
    deltas: list[ToolCallDelta] = []
    for raw_delta in raw:
        delta = _as_mapping(raw_delta)
        function = _as_mapping(delta.get("function"))
        call_id = delta.get("id")
        name = function.get("name")
        arguments = function.get("arguments")
        deltas.append(
            ToolCallDelta(
                index=_to_int(delta.get("index")),
                id=call_id if isinstance(call_id, str) and call_id else None,
                name=name if isinstance(name, str) else None,
                arguments=arguments if isinstance(arguments, str) else None,
            )
        )
    return deltas


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def _to_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0

"""Fold a stream of chat completion chunks into a single ChatCompletionResponse."""

from __future__ import annotations

from contextlib import aclosing, nullcontext
from dataclasses import dataclass
from typing import Any, AsyncContextManager, AsyncIterable

from deepseek_bridge.errors import wrap_api_error
from deepseek_bridge.response import StreamChunk, ToolCallDelta
from deepseek_bridge.types import ChatCompletionResponse, ToolCall, Usage

STREAM_ERROR_CONTEXT = "DeepSeek Streaming API Error"


@dataclass
class _ToolCallBuilder:
    id: str
    name: str
    arguments: str

    def build(self) -> ToolCall:
        return ToolCall(id=self.id, name=self.name, arguments=self.arguments)


class StreamAccumulator:
    """Accumulate stream chunks into a final response.

    Tool-call fragments are keyed by their ``index``. The first fragment for an
    index fixes the call id; later fragments append to the name and arguments.
    Calls are emitted in ascending index order whatever order they arrived in.
    """

    def __init__(self, *, model: str):
        self._model = model
        self._text_parts: list[str] = []
        self._reasoning_parts: list[str] = []
        self._tool_calls: dict[int, _ToolCallBuilder] = {}
        self._finish_reason: str | None = None
        self._usage: Usage | None = None

    def process(self, chunk: StreamChunk) -> None:
        if not chunk.choices:
            return

        choice = chunk.choices[0]
        if choice.content:
            self._text_parts.append(choice.content)
        if choice.reasoning_content:
            self._reasoning_parts.append(choice.reasoning_content)
        for delta in choice.tool_calls:
            self._merge_tool_call(delta)

        if choice.finish_reason:
            self._finish_reason = choice.finish_reason
        if chunk.model:
            self._model = chunk.model
        if chunk.usage is not None:
            self._usage = chunk.usage

    def response(self) -> ChatCompletionResponse:
        reasoning = "".join(self._reasoning_parts)
        tool_calls = [self._tool_calls[index].build() for index in sorted(self._tool_calls)]

        return ChatCompletionResponse(
            content="".join(self._text_parts),
            reasoning_content=reasoning or None,
            model=self._model,
            usage=self._usage or Usage(),
            finish_reason=self._finish_reason or "stop",
            tool_calls=tool_calls or None,
        )

    def _merge_tool_call(self, delta: ToolCallDelta) -> None:
        state = self._tool_calls.get(delta.index)
        if state is None:
            self._tool_calls[delta.index] = _ToolCallBuilder(
                id=delta.id or "",
                name=delta.name or "",
                arguments=delta.arguments or "",
            )
            return

        if delta.name:
            state.name += delta.name
        if delta.arguments:
            state.arguments += delta.arguments


async def accumulate(
    chunks: AsyncIterable[StreamChunk | dict[str, Any]],
    *,
    model: str,
) -> ChatCompletionResponse:
    """Consume *chunks* and return the folded response.

    Raw dict chunks are narrowed with ``StreamChunk.from_dict``. Any failure
    while iterating is raised as an ApiError; nothing partial is returned.
    """
    accumulator = StreamAccumulator(model=model)
    try:
        async with _closing(chunks) as stream:
            async for chunk in stream:
                if not isinstance(chunk, StreamChunk):
                    chunk = StreamChunk.from_dict(chunk)
                accumulator.process(chunk)
    except Exception as exc:
        raise wrap_api_error(STREAM_ERROR_CONTEXT, exc) from exc
    return accumulator.response()


def _closing(chunks: AsyncIterable[Any]) -> AsyncContextManager[AsyncIterable[Any]]:
    # Async generators are closed on exit so the upstream response is released.
    if hasattr(chunks, "aclose"):
        return aclosing(chunks)
    return nullcontext(chunks)

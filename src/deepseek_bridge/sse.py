"""Server-Sent Events (SSE) parsing for streamed chat completions."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, AsyncIterator

DONE_SENTINEL = "[DONE]"


@dataclass(frozen=True)
class SSEEvent:
    event: str | None
    data: str

    @property
    def is_done(self) -> bool:
        return self.data == DONE_SENTINEL

    def json(self) -> Any:
        return json.loads(self.data)


async def parse_sse_events(lines: AsyncIterator[str]) -> AsyncIterator[SSEEvent]:
    """Group an SSE line stream into events, stopping at ``data: [DONE]``.

    DeepSeek interleaves ``: keep-alive`` comments with chunks. Comments and
    the ``id``/``retry`` fields are dropped. Consecutive ``data:`` lines are
    joined with newlines. An event still pending when input ends is emitted.
    """
    event_type: str | None = None
    data_lines: list[str] = []

    async for raw_line in lines:
        line = raw_line.rstrip("\r\n")
        if line:
            name, value = _split_field(line)
            if name == "event":
                event_type = value
            elif name == "data":
                data_lines.append(value)
            continue

        if data_lines:
            event = SSEEvent(event=event_type, data="\n".join(data_lines))
            if event.is_done:
                return
            yield event
        event_type, data_lines = None, []

    if data_lines:
        event = SSEEvent(event=event_type, data="\n".join(data_lines))
        if not event.is_done:
            yield event


def _split_field(line: str) -> tuple[str, str]:
    # Comment lines start with ':' and so have an empty field name.
    name, _, value = line.partition(":")
    return name, value.removeprefix(" ")

"""HTTP transport for the DeepSeek /chat/completions endpoint."""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator

import httpx

from deepseek_bridge.errors import (
    APIConnectionError,
    ApiError,
    error_from_status_code,
)
from deepseek_bridge.request import compact_payload
from deepseek_bridge.retry import RetryPolicy, retry
from deepseek_bridge.sse import parse_sse_events

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.deepseek.com"


class ChatCompletionsTransport:
    """Sends chat completion bodies and returns raw JSON (or raw chunks).

    HTTP errors are classified with ``error_from_status_code``; network
    failures become ``APIConnectionError``. Retryable failures are retried up
    to ``max_retries`` times. A stream is only retried while it is being
    opened, never after chunks have started arriving.
    """

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 60.0,
        max_retries: int = 2,
        retry_policy: RetryPolicy | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._retry_policy = retry_policy or RetryPolicy(max_retries=max_retries)
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    @property
    def url(self) -> str:
        return f"{self._base_url}/chat/completions"

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _build_headers(self, *, stream: bool = False) -> dict[str, str]:
        return {
            "authorization": f"Bearer {self._api_key}",
            "content-type": "application/json",
            "accept": "text/event-stream" if stream else "application/json",
        }

    # ------------------------------------------------------------------
    # Non-streaming
    # ------------------------------------------------------------------

    async def create(self, payload: dict[str, Any]) -> dict[str, Any]:
        """POST *payload* and return the decoded response body."""
        return await retry(lambda: self._post(payload), self._retry_policy)

    async def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self._client.post(
                self.url,
                json=compact_payload(payload),
                headers=self._build_headers(),
            )
        except httpx.TransportError as exc:
            raise _connection_error(exc) from exc

        if response.status_code >= 400:
            raise _error_from_response(response)

        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(
                "Invalid JSON in response body",
                status_code=response.status_code,
                cause=exc,
            ) from exc

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    async def stream(self, payload: dict[str, Any]) -> AsyncIterator[dict[str, Any]]:
        """POST *payload* with streaming enabled and yield each raw chunk."""
        response = await retry(lambda: self._open_stream(payload), self._retry_policy)
        try:
            async for event in parse_sse_events(response.aiter_lines()):
                try:
                    data = event.json()
                except json.JSONDecodeError as exc:
                    raise ApiError(
                        f"Malformed stream chunk: {event.data[:200]}", cause=exc
                    ) from exc

                if event.event == "error" or (
                    isinstance(data, dict) and "error" in data and "choices" not in data
                ):
                    raise ApiError(_extract_message(data, "Stream error"), raw=data)

                yield data
        except httpx.TransportError as exc:
            raise _connection_error(exc) from exc
        finally:
            await response.aclose()

    async def _open_stream(self, payload: dict[str, Any]) -> httpx.Response:
        request = self._client.build_request(
            "POST",
            self.url,
            json=compact_payload(payload),
            headers=self._build_headers(stream=True),
        )
        try:
            response = await self._client.send(request, stream=True)
        except httpx.TransportError as exc:
            raise _connection_error(exc) from exc

        if response.status_code >= 400:
            # Read the body so the error message is available, then release.
            await response.aread()
            await response.aclose()
            raise _error_from_response(response)

        return response


def _connection_error(exc: httpx.TransportError) -> APIConnectionError:
    if isinstance(exc, httpx.TimeoutException):
        return APIConnectionError("Request timed out", cause=exc)
    return APIConnectionError(f"Connection error: {exc}", cause=exc)


def _error_from_response(response: httpx.Response) -> ApiError:
    retry_after: float | None = None
    header = response.headers.get("retry-after")
    if header is not None:
        try:
            retry_after = float(header)
        except ValueError:
            retry_after = None

    raw: dict[str, Any]
    try:
        body = response.json()
        raw = body if isinstance(body, dict) else {"body": body}
    except ValueError:
        raw = {"body": response.text}

    message = _extract_message(raw, response.reason_phrase or "API error")
    logger.debug("DeepSeek API returned HTTP %d: %s", response.status_code, message)

    return error_from_status_code(
        status_code=response.status_code,
        message=f"{response.status_code} {message}",
        retry_after=retry_after,
        raw=raw,
    )


def _extract_message(raw: Any, default: str) -> str:
    if isinstance(raw, dict):
        error = raw.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        if isinstance(error, str):
            return error
        if isinstance(raw.get("message"), str):
            return raw["message"]
    return default

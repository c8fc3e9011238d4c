"""DeepSeek chat completion client."""

from __future__ import annotations

import logging

import httpx

from deepseek_bridge.accumulator import STREAM_ERROR_CONTEXT, accumulate
from deepseek_bridge.catalog import DEFAULT_MODEL
from deepseek_bridge.config import BridgeConfig
from deepseek_bridge.errors import ApiError, wrap_api_error
from deepseek_bridge.request import build_request_payload
from deepseek_bridge.response import reduce_response
from deepseek_bridge.transport import ChatCompletionsTransport
from deepseek_bridge.types import ChatCompletionParams, ChatCompletionResponse, Message

logger = logging.getLogger(__name__)

API_ERROR_CONTEXT = "DeepSeek API Error"


class DeepSeekClient:
    """Sends chat completions to DeepSeek and returns ChatCompletionResponse.

    Holds only the configuration it was built with; calls share no mutable
    state and may run concurrently. Every failure reaches the caller as an
    ApiError (or subclass) whose ``cause`` is the underlying exception.
    """

    def __init__(
        self,
        config: BridgeConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._config = config
        self._transport = ChatCompletionsTransport(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout_seconds,
            max_retries=config.max_retries,
            http_client=http_client,
        )

    @property
    def config(self) -> BridgeConfig:
        return self._config

    async def close(self) -> None:
        await self._transport.close()

    async def __aenter__(self) -> DeepSeekClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def create_chat_completion(
        self, params: ChatCompletionParams
    ) -> ChatCompletionResponse:
        payload = build_request_payload(params, stream=False)
        _log_request(params, stream=False)

        try:
            raw = await self._transport.create(payload)
            response = reduce_response(raw, model=params.model)
        except Exception as exc:
            logger.error("%s: %s", API_ERROR_CONTEXT, exc, exc_info=True)
            raise wrap_api_error(API_ERROR_CONTEXT, exc) from exc

        _log_response(response)
        return response

    async def create_streaming_chat_completion(
        self, params: ChatCompletionParams
    ) -> ChatCompletionResponse:
        """Stream the completion and return it once the stream is exhausted."""
        payload = build_request_payload(params, stream=True)
        _log_request(params, stream=True)

        try:
            response = await accumulate(self._transport.stream(payload), model=params.model)
        except ApiError as exc:
            logger.error("%s: %s", STREAM_ERROR_CONTEXT, exc, exc_info=True)
            raise

        _log_response(response)
        return response

    async def test_connection(self) -> bool:
        """Liveness probe. Never raises; any failure is logged and returns False."""
        try:
            response = await self.create_chat_completion(
                ChatCompletionParams(
                    model=DEFAULT_MODEL,
                    messages=[Message.user("Hi")],
                    max_tokens=10,
                )
            )
        except Exception as exc:
            logger.error("Connection test failed: %s", exc)
            return False
        return bool(response.content)


def _log_request(params: ChatCompletionParams, *, stream: bool) -> None:
    logger.info(
        "Request: model=%s messages=%d stream=%s tools=%d",
        params.model,
        len(params.messages),
        stream,
        len(params.tools or []),
    )


def _log_response(response: ChatCompletionResponse) -> None:
    logger.info(
        "Response: tokens=%d finish_reason=%s tool_calls=%d",
        response.usage.total_tokens,
        response.finish_reason,
        len(response.tool_calls or []),
    )

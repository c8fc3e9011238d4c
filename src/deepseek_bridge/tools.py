"""The deepseek_chat tool: validate arguments, call DeepSeek, render the result."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from deepseek_bridge.client import DeepSeekClient
from deepseek_bridge.cost import calculate_cost, format_cost
from deepseek_bridge.errors import get_error_message
from deepseek_bridge.schemas import ChatInput, validate_chat_input
from deepseek_bridge.types import ChatCompletionResponse

logger = logging.getLogger(__name__)

TOOL_NAME = "deepseek_chat"

TOOL_DEFINITION: dict[str, Any] = {
    "name": TOOL_NAME,
    "title": "DeepSeek Chat Completion",
    "description": (
        "Chat with DeepSeek AI models. Supports deepseek-chat for general conversations and "
        "deepseek-reasoner (R1) for complex reasoning tasks with chain-of-thought explanations. "
        "Supports function calling via the tools parameter for structured tool use. "
        "The reasoner model provides both reasoning_content (thinking process) and "
        "content (final answer)."
    ),
    "input_schema": ChatInput.model_json_schema(),
}


@dataclass
class ToolResult:
    """What the protocol layer sends back for a tool invocation."""

    content: list[dict[str, str]]
    structured_content: dict[str, Any] | None = None
    is_error: bool = False

    @property
    def text(self) -> str:
        return "".join(part["text"] for part in self.content if part.get("type") == "text")


@dataclass
class ChatToolHandler:
    """Runs deepseek_chat invocations against one client."""

    client: DeepSeekClient
    show_cost_info: bool = True
    max_message_length: int = 100_000

    @classmethod
    def from_client(cls, client: DeepSeekClient) -> ChatToolHandler:
        config = client.config
        return cls(
            client=client,
            show_cost_info=config.show_cost_info,
            max_message_length=config.max_message_length,
        )

    async def __call__(self, arguments: Mapping[str, Any]) -> ToolResult:
        return await deepseek_chat(
            self.client,
            arguments,
            show_cost_info=self.show_cost_info,
            max_message_length=self.max_message_length,
        )


async def deepseek_chat(
    client: DeepSeekClient,
    arguments: Mapping[str, Any],
    *,
    show_cost_info: bool = True,
    max_message_length: int = 100_000,
) -> ToolResult:
    """Handle one deepseek_chat call. Failures become ``is_error`` results."""
    try:
        chat_input = validate_chat_input(arguments, max_message_length=max_message_length)
        params = chat_input.to_params()

        if chat_input.stream:
            response = await client.create_streaming_chat_completion(params)
        else:
            response = await client.create_chat_completion(params)

        cost = calculate_cost(
            response.usage.prompt_tokens,
            response.usage.completion_tokens,
            response.model,
        )
    except Exception as exc:
        logger.error("%s failed: %s", TOOL_NAME, exc)
        return ToolResult(
            content=[{"type": "text", "text": f"Error: {get_error_message(exc)}"}],
            is_error=True,
        )

    structured = response.to_dict()
    structured["cost_usd"] = round(cost, 6)

    return ToolResult(
        content=[{"type": "text", "text": render_response(response, cost, show_cost_info)}],
        structured_content=structured,
    )


def render_response(
    response: ChatCompletionResponse,
    cost: float,
    show_cost_info: bool = True,
) -> str:
    text = ""

    if response.reasoning_content:
        text += f"<thinking>\n{response.reasoning_content}\n</thinking>\n\n"

    text += response.content

    if response.tool_calls:
        text += "\n\n**Function Calls:**\n"
        for tc in response.tool_calls:
            text += f"`{tc.name}`\n"
            text += f"- Call ID: {tc.id}\n"
            text += f"- Arguments: {tc.arguments}\n\n"

    if show_cost_info:
        usage = response.usage
        text += "\n---\n**Request Information:**\n"
        text += (
            f"- **Tokens:** {usage.total_tokens} "
            f"({usage.prompt_tokens} prompt + {usage.completion_tokens} completion)\n"
        )
        text += f"- **Model:** {response.model}\n"
        text += f"- **Cost:** {format_cost(cost)}"
        if response.tool_calls:
            text += f"\n- **Tool Calls:** {len(response.tool_calls)}"

    return text

"""Input schemas for the deepseek_chat tool."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal, Union

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from deepseek_bridge.catalog import MODELS
from deepseek_bridge.errors import Issue, ValidationError, issues_from_validation_error
from deepseek_bridge.types import (
    ChatCompletionParams,
    Message,
    Role,
    ToolChoice,
    ToolDefinition,
)

ModelName = Literal["deepseek-chat", "deepseek-reasoner"]

MAX_TOOLS = 128
MAX_OUTPUT_TOKENS = max(m.max_output for m in MODELS)


class MessageInput(BaseModel):
    role: Literal["system", "user", "assistant", "tool"]
    content: str
    tool_call_id: str | None = None

    def to_message(self) -> Message:
        return Message(
            role=Role(self.role),
            content=self.content,
            tool_call_id=self.tool_call_id,
        )


class FunctionDefinitionInput(BaseModel):
    name: str = Field(min_length=1)
    description: str | None = None
    parameters: dict[str, Any] | None = None
    strict: bool | None = None


class ToolDefinitionInput(BaseModel):
    type: Literal["function"]
    function: FunctionDefinitionInput

    def to_definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.function.name,
            description=self.function.description,
            parameters=self.function.parameters,
            strict=self.function.strict,
        )


class NamedFunction(BaseModel):
    name: str = Field(min_length=1)


class NamedToolChoiceInput(BaseModel):
    type: Literal["function"]
    function: NamedFunction


ToolChoiceInput = Union[Literal["auto", "none", "required"], NamedToolChoiceInput]


class ChatInput(BaseModel):
    """Arguments accepted by the deepseek_chat tool."""

    messages: list[MessageInput] = Field(min_length=1)
    model: ModelName = "deepseek-chat"
    temperature: float | None = Field(default=None, ge=0, le=2)
    max_tokens: int | None = Field(default=None, ge=1, le=MAX_OUTPUT_TOKENS)
    stream: bool = False
    tools: list[ToolDefinitionInput] | None = Field(default=None, max_length=MAX_TOOLS)
    tool_choice: ToolChoiceInput | None = None

    def to_params(self) -> ChatCompletionParams:
        tool_choice: ToolChoice | None = None
        if isinstance(self.tool_choice, NamedToolChoiceInput):
            tool_choice = ToolChoice.named(self.tool_choice.function.name)
        elif self.tool_choice is not None:
            tool_choice = ToolChoice(mode=self.tool_choice)

        return ChatCompletionParams(
            model=self.model,
            messages=[m.to_message() for m in self.messages],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            tools=[t.to_definition() for t in self.tools] if self.tools else None,
            tool_choice=tool_choice,
        )


def validate_chat_input(raw: Mapping[str, Any], *, max_message_length: int) -> ChatInput:
    """Validate raw tool arguments.

    Message length is checked before the schema so an oversized message is
    reported as such even when other fields are also invalid.
    """
    _check_message_length(raw, max_message_length)
    try:
        return ChatInput.model_validate(raw)
    except PydanticValidationError as exc:
        issues = issues_from_validation_error(exc)
        summary = "; ".join(f"{i['path'] or '<root>'}: {i['message']}" for i in issues)
        raise ValidationError(f"Invalid input: {summary}", issues, cause=exc) from exc


def _check_message_length(raw: Mapping[str, Any], max_length: int) -> None:
    messages = raw.get("messages") if isinstance(raw, Mapping) else None
    if not isinstance(messages, list):
        return
    for i, message in enumerate(messages):
        content = message.get("content") if isinstance(message, Mapping) else None
        if isinstance(content, str) and len(content) > max_length:
            text = f"Message content exceeds maximum length of {max_length} characters"
            raise ValidationError(text, [Issue(path=f"messages.{i}.content", message=text)])

"""Tests for deepseek_chat argument validation."""

import pytest

from deepseek_bridge.catalog import MODELS
from deepseek_bridge.errors import ValidationError
from deepseek_bridge.schemas import MAX_OUTPUT_TOKENS, ChatInput, validate_chat_input
from deepseek_bridge.types import Message, Role, ToolChoice, ToolDefinition

LIMIT = 100_000


def _valid(**overrides):
    raw = {"messages": [{"role": "user", "content": "Hello"}]}
    raw.update(overrides)
    return raw


class TestValidateChatInput:
    def test_defaults(self):
        chat_input = validate_chat_input(_valid(), max_message_length=LIMIT)
        assert chat_input.model == "deepseek-chat"
        assert chat_input.stream is False
        assert chat_input.temperature is None
        assert chat_input.max_tokens is None
        assert chat_input.tools is None
        assert chat_input.tool_choice is None

    def test_full_input(self):
        chat_input = validate_chat_input(
            _valid(
                model="deepseek-reasoner",
                temperature=0.7,
                max_tokens=1024,
                stream=True,
                tools=[
                    {
                        "type": "function",
                        "function": {
                            "name": "get_weather",
                            "description": "Get weather",
                            "parameters": {"type": "object", "properties": {}},
                            "strict": True,
                        },
                    }
                ],
                tool_choice={"type": "function", "function": {"name": "get_weather"}},
            ),
            max_message_length=LIMIT,
        )
        assert chat_input.model == "deepseek-reasoner"
        assert chat_input.stream is True
        assert chat_input.tools[0].function.name == "get_weather"

    def test_empty_messages_rejected(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_chat_input({"messages": []}, max_message_length=LIMIT)

        err = excinfo.value
        assert str(err).startswith("Invalid input: messages:")
        assert [issue["path"] for issue in err.issues] == ["messages"]

    def test_missing_messages_rejected(self):
        with pytest.raises(ValidationError):
            validate_chat_input({}, max_message_length=LIMIT)

    def test_unknown_model_rejected(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_chat_input(_valid(model="gpt-4"), max_message_length=LIMIT)
        assert excinfo.value.issues[0]["path"] == "model"

    def test_unknown_role_rejected(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_chat_input(
                {"messages": [{"role": "robot", "content": "beep"}]},
                max_message_length=LIMIT,
            )
        assert excinfo.value.issues[0]["path"] == "messages.0.role"

    @pytest.mark.parametrize("temperature", [-0.1, 2.1])
    def test_temperature_out_of_range(self, temperature):
        with pytest.raises(ValidationError) as excinfo:
            validate_chat_input(_valid(temperature=temperature), max_message_length=LIMIT)
        assert excinfo.value.issues[0]["path"] == "temperature"

    @pytest.mark.parametrize("temperature", [0, 2])
    def test_temperature_bounds_accepted(self, temperature):
        chat_input = validate_chat_input(_valid(temperature=temperature), max_message_length=LIMIT)
        assert chat_input.temperature == temperature

    @pytest.mark.parametrize("max_tokens", [0, 32_769])
    def test_max_tokens_out_of_range(self, max_tokens):
        with pytest.raises(ValidationError):
            validate_chat_input(_valid(max_tokens=max_tokens), max_message_length=LIMIT)

    def test_too_many_tools(self):
        tool = {"type": "function", "function": {"name": "t"}}
        with pytest.raises(ValidationError):
            validate_chat_input(_valid(tools=[tool] * 129), max_message_length=LIMIT)

    def test_tool_with_empty_name(self):
        tool = {"type": "function", "function": {"name": ""}}
        with pytest.raises(ValidationError):
            validate_chat_input(_valid(tools=[tool]), max_message_length=LIMIT)

    def test_invalid_tool_choice(self):
        with pytest.raises(ValidationError):
            validate_chat_input(_valid(tool_choice="sometimes"), max_message_length=LIMIT)

    def test_message_too_long(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_chat_input(
                {"messages": [{"role": "user", "content": "x" * 11}]},
                max_message_length=10,
            )

        err = excinfo.value
        assert str(err) == "Message content exceeds maximum length of 10 characters"
        assert err.issues[0]["path"] == "messages.0.content"

    def test_length_checked_before_schema(self):
        with pytest.raises(ValidationError, match="exceeds maximum length"):
            validate_chat_input(
                {
                    "model": "not-a-model",
                    "messages": [
                        {"role": "user", "content": "ok"},
                        {"role": "user", "content": "x" * 11},
                    ],
                },
                max_message_length=10,
            )

    def test_message_at_limit_accepted(self):
        chat_input = validate_chat_input(
            {"messages": [{"role": "user", "content": "x" * 10}]},
            max_message_length=10,
        )
        assert len(chat_input.messages) == 1


class TestToParams:
    def test_messages_and_defaults(self):
        params = ChatInput.model_validate(
            {
                "messages": [
                    {"role": "system", "content": "Be brief."},
                    {"role": "tool", "content": "20C", "tool_call_id": "call_1"},
                ]
            }
        ).to_params()
        assert params.model == "deepseek-chat"
        assert params.messages == [
            Message.system("Be brief."),
            Message(role=Role.TOOL, content="20C", tool_call_id="call_1"),
        ]
        assert params.tools is None
        assert params.tool_choice is None

    def test_tools_and_mode_choice(self):
        params = ChatInput.model_validate(
            _valid(
                tools=[{"type": "function", "function": {"name": "ping"}}],
                tool_choice="required",
            )
        ).to_params()
        assert params.tools == [ToolDefinition(name="ping")]
        assert params.tool_choice == ToolChoice(mode="required")

    def test_named_choice(self):
        params = ChatInput.model_validate(
            _valid(tool_choice={"type": "function", "function": {"name": "ping"}})
        ).to_params()
        assert params.tool_choice == ToolChoice.named("ping")

    def test_empty_tools_become_none(self):
        params = ChatInput.model_validate(_valid(tools=[])).to_params()
        assert params.tools is None

    def test_json_schema(self):
        schema = ChatInput.model_json_schema()
        assert "messages" in schema["required"]
        assert set(schema["properties"]) >= {"messages", "model", "tools", "tool_choice"}

    def test_max_tokens_bound_follows_catalog(self):
        assert MAX_OUTPUT_TOKENS == max(m.max_output for m in MODELS)
        chat_input = validate_chat_input(
            _valid(max_tokens=MAX_OUTPUT_TOKENS), max_message_length=LIMIT
        )
        assert chat_input.max_tokens == 32_768

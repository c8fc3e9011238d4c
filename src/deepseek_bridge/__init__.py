"""Bridge between tool-invocation clients and the DeepSeek chat completion API."""

from deepseek_bridge.accumulator import StreamAccumulator, accumulate
from deepseek_bridge.catalog import DEFAULT_MODEL, ModelInfo, get_model_info, list_models
from deepseek_bridge.client import DeepSeekClient
from deepseek_bridge.config import BridgeConfig, load_config
from deepseek_bridge.cost import calculate_cost, format_cost
from deepseek_bridge.errors import (
    APIConnectionError,
    ApiError,
    AuthenticationError,
    BridgeError,
    ConfigurationError,
    RateLimitError,
    ValidationError,
)
from deepseek_bridge.request import build_request_payload
from deepseek_bridge.response import reduce_response
from deepseek_bridge.tools import ChatToolHandler, ToolResult, deepseek_chat
from deepseek_bridge.types import (
    ChatCompletionParams,
    ChatCompletionResponse,
    Message,
    Role,
    ToolCall,
    ToolChoice,
    ToolDefinition,
    Usage,
)

__all__ = [
    "APIConnectionError",
    "ApiError",
    "AuthenticationError",
    "BridgeConfig",
    "BridgeError",
    "ChatCompletionParams",
    "ChatCompletionResponse",
    "ChatToolHandler",
    "ConfigurationError",
    "DEFAULT_MODEL",
    "DeepSeekClient",
    "Message",
    "ModelInfo",
    "RateLimitError",
    "Role",
    "StreamAccumulator",
    "ToolCall",
    "ToolChoice",
    "ToolDefinition",
    "ToolResult",
    "Usage",
    "ValidationError",
    "accumulate",
    "build_request_payload",
    "calculate_cost",
    "deepseek_chat",
    "format_cost",
    "get_model_info",
    "list_models",
    "load_config",
    "reduce_response",
]

"""Bridge configuration, loaded once from the environment and validated."""

from __future__ import annotations

import os
from collections.abc import Mapping

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from deepseek_bridge.errors import ConfigurationError, issues_from_validation_error
from deepseek_bridge.transport import DEFAULT_BASE_URL

API_KEY_HINT = (
    "\nPlease set your DeepSeek API key:\n"
    '  export DEEPSEEK_API_KEY="your-api-key-here"'
)


class BridgeConfig(BaseModel):
    """Resolved configuration. Built once at startup and passed to the client."""

    model_config = ConfigDict(frozen=True)

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    show_cost_info: bool = True
    request_timeout: int = Field(default=60_000, gt=0)  # milliseconds
    max_retries: int = Field(default=2, ge=0, le=10)
    skip_connection_test: bool = False
    max_message_length: int = Field(default=100_000, gt=0)

    @field_validator("api_key")
    @classmethod
    def _require_api_key(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError("missing_api_key", "DEEPSEEK_API_KEY is required")
        return value

    @field_validator("base_url")
    @classmethod
    def _require_http_url(cls, value: str) -> str:
        try:
            url = httpx.URL(value)
        except httpx.InvalidURL:
            url = None
        if url is None or url.scheme not in ("http", "https") or not url.host:
            raise PydanticCustomError("invalid_url", "Invalid url")
        return value

    @property
    def timeout_seconds(self) -> float:
        return self.request_timeout / 1000


def load_config(environ: Mapping[str, str] | None = None) -> BridgeConfig:
    """Build a BridgeConfig from environment variables.

    Raises ConfigurationError listing every invalid setting.
    """
    env = os.environ if environ is None else environ

    raw = {
        "api_key": env.get("DEEPSEEK_API_KEY") or "",
        "base_url": env.get("DEEPSEEK_BASE_URL") or DEFAULT_BASE_URL,
        "show_cost_info": env.get("SHOW_COST_INFO") != "false",
        "skip_connection_test": env.get("SKIP_CONNECTION_TEST") == "true",
    }
    for key, env_var in (
        ("request_timeout", "REQUEST_TIMEOUT"),
        ("max_retries", "MAX_RETRIES"),
        ("max_message_length", "MAX_MESSAGE_LENGTH"),
    ):
        value = env.get(env_var)
        if value:
            raw[key] = value

    try:
        return BridgeConfig.model_validate(raw)
    except PydanticValidationError as exc:
        hint = API_KEY_HINT if not raw["api_key"] else ""
        raise ConfigurationError(
            f"Configuration validation failed{hint}",
            issues_from_validation_error(exc),
            cause=exc,
        ) from exc

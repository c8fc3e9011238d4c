"""Tests for loading and validating bridge configuration."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from deepseek_bridge.config import BridgeConfig, load_config
from deepseek_bridge.errors import ConfigurationError

ENV_VARS = [
    "DEEPSEEK_API_KEY",
    "DEEPSEEK_BASE_URL",
    "SHOW_COST_INFO",
    "REQUEST_TIMEOUT",
    "MAX_RETRIES",
    "SKIP_CONNECTION_TEST",
    "MAX_MESSAGE_LENGTH",
]


class TestLoadConfig:
    def test_defaults(self):
        config = load_config({"DEEPSEEK_API_KEY": "sk-test"})
        assert config.api_key == "sk-test"
        assert config.base_url == "https://api.deepseek.com"
        assert config.show_cost_info is True
        assert config.request_timeout == 60_000
        assert config.timeout_seconds == 60.0
        assert config.max_retries == 2
        assert config.skip_connection_test is False
        assert config.max_message_length == 100_000

    def test_overrides(self):
        config = load_config(
            {
                "DEEPSEEK_API_KEY": "sk-test",
                "DEEPSEEK_BASE_URL": "https://proxy.example.com/v1",
                "SHOW_COST_INFO": "false",
                "REQUEST_TIMEOUT": "30000",
                "MAX_RETRIES": "5",
                "SKIP_CONNECTION_TEST": "true",
                "MAX_MESSAGE_LENGTH": "500",
            }
        )
        assert config.base_url == "https://proxy.example.com/v1"
        assert config.show_cost_info is False
        assert config.request_timeout == 30_000
        assert config.timeout_seconds == 30.0
        assert config.max_retries == 5
        assert config.skip_connection_test is True
        assert config.max_message_length == 500

    @pytest.mark.parametrize("value", ["true", "0", "no", "FALSE", ""])
    def test_show_cost_info_only_disabled_by_literal_false(self, value):
        config = load_config({"DEEPSEEK_API_KEY": "sk-test", "SHOW_COST_INFO": value})
        assert config.show_cost_info is True

    @pytest.mark.parametrize("value", ["1", "yes", "TRUE", ""])
    def test_skip_connection_test_only_enabled_by_literal_true(self, value):
        config = load_config({"DEEPSEEK_API_KEY": "sk-test", "SKIP_CONNECTION_TEST": value})
        assert config.skip_connection_test is False

    def test_empty_numeric_values_use_defaults(self):
        config = load_config({"DEEPSEEK_API_KEY": "sk-test", "REQUEST_TIMEOUT": ""})
        assert config.request_timeout == 60_000

    def test_missing_api_key(self):
        with pytest.raises(ConfigurationError) as excinfo:
            load_config({})

        err = excinfo.value
        assert str(err).startswith("Configuration validation failed")
        assert "export DEEPSEEK_API_KEY" in str(err)
        assert {"path": "api_key", "message": "DEEPSEEK_API_KEY is required"} in err.issues
        assert isinstance(err.cause, PydanticValidationError)

    def test_invalid_base_url(self):
        with pytest.raises(ConfigurationError) as excinfo:
            load_config({"DEEPSEEK_API_KEY": "sk-test", "DEEPSEEK_BASE_URL": "not-a-url"})

        err = excinfo.value
        assert err.issues == [{"path": "base_url", "message": "Invalid url"}]
        assert "export DEEPSEEK_API_KEY" not in str(err)

    @pytest.mark.parametrize("value", ["-1", "11", "abc"])
    def test_max_retries_out_of_range(self, value):
        with pytest.raises(ConfigurationError) as excinfo:
            load_config({"DEEPSEEK_API_KEY": "sk-test", "MAX_RETRIES": value})
        assert [issue["path"] for issue in excinfo.value.issues] == ["max_retries"]

    @pytest.mark.parametrize("value", ["0", "10"])
    def test_max_retries_bounds_accepted(self, value):
        config = load_config({"DEEPSEEK_API_KEY": "sk-test", "MAX_RETRIES": value})
        assert config.max_retries == int(value)

    def test_non_positive_timeout(self):
        with pytest.raises(ConfigurationError) as excinfo:
            load_config({"DEEPSEEK_API_KEY": "sk-test", "REQUEST_TIMEOUT": "0"})
        assert excinfo.value.issues[0]["path"] == "request_timeout"

    def test_collects_every_issue(self):
        with pytest.raises(ConfigurationError) as excinfo:
            load_config({"MAX_RETRIES": "99", "MAX_MESSAGE_LENGTH": "0"})
        paths = {issue["path"] for issue in excinfo.value.issues}
        assert paths == {"api_key", "max_retries", "max_message_length"}

    def test_reads_process_environment(self, monkeypatch):
        for name in ENV_VARS:
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("DEEPSEEK_API_KEY", "sk-env")
        monkeypatch.setenv("MAX_RETRIES", "4")

        config = load_config()
        assert config.api_key == "sk-env"
        assert config.max_retries == 4


class TestBridgeConfig:
    def test_frozen(self):
        config = BridgeConfig(api_key="sk-test")
        with pytest.raises(PydanticValidationError):
            config.api_key = "other"

    def test_http_base_url_accepted(self):
        config = BridgeConfig(api_key="sk-test", base_url="http://localhost:8080")
        assert config.base_url == "http://localhost:8080"

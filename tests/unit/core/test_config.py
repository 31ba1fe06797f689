# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import pytest

from forcemap.core.config import ForceConfig


class TestForceConfig:
    def test_defaults(self):
        config = ForceConfig()
        assert config.api_version == "58.0"
        assert config.token_scope == "api"
        assert config.http_retries is None
        assert config.telemetry is None

    def test_immutability(self):
        config = ForceConfig()
        with pytest.raises(AttributeError):
            config.api_version = "59.0"

    def test_from_env_empty(self):
        assert ForceConfig.from_env({}) == ForceConfig()

    def test_from_env_reads_variables(self):
        config = ForceConfig.from_env(
            {
                "FORCEMAP_API_VERSION": "60.0",
                "FORCEMAP_TOKEN_SCOPE": "api refresh_token",
                "FORCEMAP_HTTP_RETRIES": "2",
                "FORCEMAP_HTTP_BACKOFF": "0.25",
                "FORCEMAP_HTTP_MAX_BACKOFF": "4",
                "FORCEMAP_HTTP_TIMEOUT": "30",
                "FORCEMAP_HTTP_JITTER": "false",
            }
        )
        assert config.api_version == "60.0"
        assert config.token_scope == "api refresh_token"
        assert config.http_retries == 2
        assert config.http_backoff == 0.25
        assert config.http_max_backoff == 4.0
        assert config.http_timeout == 30.0
        assert config.http_jitter is False

    def test_from_env_log_level_enables_logging(self):
        config = ForceConfig.from_env({"FORCEMAP_LOG_LEVEL": "DEBUG"})
        assert config.telemetry.enable_logging is True
        assert config.telemetry.log_level == "DEBUG"

    def test_from_env_rejects_bad_numbers(self):
        with pytest.raises(ValueError):
            ForceConfig.from_env({"FORCEMAP_HTTP_RETRIES": "many"})

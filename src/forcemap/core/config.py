# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .telemetry import TelemetryConfig

DEFAULT_API_VERSION = "58.0"
DEFAULT_TOKEN_SCOPE = "api"


def _env_float(env: Mapping[str, str], key: str) -> Optional[float]:
    raw = env.get(key)
    if raw is None or raw == "":
        return None
    return float(raw)


def _env_int(env: Mapping[str, str], key: str) -> Optional[int]:
    raw = env.get(key)
    if raw is None or raw == "":
        return None
    return int(raw)


def _env_bool(env: Mapping[str, str], key: str) -> Optional[bool]:
    raw = env.get(key)
    if raw is None or raw == "":
        return None
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ForceConfig:
    """
    Configuration settings for :class:`~forcemap.client.ForceClient`.

    :param api_version: REST API version used to build ``/services/data/v{version}`` paths.
    :type api_version: str
    :param token_scope: Scope passed to the credential when acquiring access tokens.
    :type token_scope: str
    :param http_retries: Maximum number of attempts for HTTP requests (default: 5).
    :type http_retries: int or None
    :param http_backoff: Base delay in seconds for exponential backoff (default: 0.5).
    :type http_backoff: float or None
    :param http_max_backoff: Maximum delay between attempts in seconds (default: 60.0).
    :type http_max_backoff: float or None
    :param http_timeout: Request timeout in seconds (default: method-dependent).
    :type http_timeout: float or None
    :param http_jitter: Whether to add jitter to retry delays (default: True).
    :type http_jitter: bool or None
    :param http_retry_transient_errors: Whether to retry 429, 502, 503, 504 (default: True).
    :type http_retry_transient_errors: bool or None
    :param telemetry: Optional logging/tracing configuration.
    :type telemetry: ~forcemap.core.telemetry.TelemetryConfig or None
    """

    api_version: str = DEFAULT_API_VERSION
    token_scope: str = DEFAULT_TOKEN_SCOPE

    # HTTP retry and resilience configuration
    http_retries: Optional[int] = None
    http_backoff: Optional[float] = None
    http_max_backoff: Optional[float] = None
    http_timeout: Optional[float] = None
    http_jitter: Optional[bool] = None
    http_retry_transient_errors: Optional[bool] = None

    telemetry: Optional[TelemetryConfig] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ForceConfig":
        """
        Create a configuration from ``FORCEMAP_*`` environment variables.

        Recognized variables: ``FORCEMAP_API_VERSION``, ``FORCEMAP_TOKEN_SCOPE``,
        ``FORCEMAP_HTTP_RETRIES``, ``FORCEMAP_HTTP_BACKOFF``, ``FORCEMAP_HTTP_MAX_BACKOFF``,
        ``FORCEMAP_HTTP_TIMEOUT``, ``FORCEMAP_HTTP_JITTER``, ``FORCEMAP_LOG_LEVEL``.
        Unset variables keep the defaults.

        :param environ: Mapping to read instead of :data:`os.environ`.
        :return: Configuration instance.
        :rtype: ForceConfig
        """
        env = os.environ if environ is None else environ
        log_level = env.get("FORCEMAP_LOG_LEVEL")
        telemetry = TelemetryConfig(enable_logging=True, log_level=log_level) if log_level else None
        return cls(
            api_version=env.get("FORCEMAP_API_VERSION") or DEFAULT_API_VERSION,
            token_scope=env.get("FORCEMAP_TOKEN_SCOPE") or DEFAULT_TOKEN_SCOPE,
            http_retries=_env_int(env, "FORCEMAP_HTTP_RETRIES"),
            http_backoff=_env_float(env, "FORCEMAP_HTTP_BACKOFF"),
            http_max_backoff=_env_float(env, "FORCEMAP_HTTP_MAX_BACKOFF"),
            http_timeout=_env_float(env, "FORCEMAP_HTTP_TIMEOUT"),
            http_jitter=_env_bool(env, "FORCEMAP_HTTP_JITTER"),
            http_retry_transient_errors=None,
            telemetry=telemetry,
        )

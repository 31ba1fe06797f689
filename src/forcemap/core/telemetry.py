# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Telemetry infrastructure for forcemap.

Provides logging and OpenTelemetry-based tracing and metrics for transport
requests, with a hook protocol for custom telemetry providers.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import (
    Any,
    Dict,
    Generator,
    List,
    Optional,
    Protocol,
    Union,
    runtime_checkable,
)

from ..common.constants import (
    OTEL_ATTR_DB_SYSTEM,
    OTEL_ATTR_DB_OPERATION,
    OTEL_ATTR_HTTP_METHOD,
    OTEL_ATTR_HTTP_URL,
    OTEL_ATTR_HTTP_STATUS_CODE,
    OTEL_ATTR_SOBJECT_TYPE,
    OTEL_ATTR_REQUEST_ID,
)

# Optional OpenTelemetry imports
try:
    from opentelemetry import trace, metrics
    from opentelemetry.trace import Status, StatusCode

    _OTEL_AVAILABLE = True
except ImportError:
    _OTEL_AVAILABLE = False
    trace = None  # type: ignore
    metrics = None  # type: ignore
    Status = None  # type: ignore
    StatusCode = None  # type: ignore


@dataclass(frozen=True)
class TelemetryConfig:
    """Configuration for transport telemetry.

    Telemetry is opt-in. Logging uses the standard :mod:`logging` module;
    tracing and metrics require the ``opentelemetry-api`` package.

    Example::

        config = ForceConfig(
            telemetry=TelemetryConfig(enable_logging=True, log_level="DEBUG")
        )
    """

    enable_tracing: bool = False
    enable_metrics: bool = False
    enable_logging: bool = False

    log_level: str = "WARNING"
    logger_name: str = "forcemap"

    hooks: List["TelemetryHook"] = field(default_factory=list)


@dataclass
class RequestContext:
    """Context passed to telemetry hooks for each HTTP request."""

    client_request_id: str
    method: str
    url: str
    operation: str  # e.g. "describe", "query", "create"
    sobject_type: Optional[str] = None

    start_time: float = field(default_factory=time.perf_counter)
    custom_data: Dict[str, Any] = field(default_factory=dict)

    _span: Any = field(default=None, repr=False)


@dataclass
class ResponseContext:
    """Response information passed to telemetry hooks."""

    status_code: int
    duration_ms: float
    error: Optional[Exception] = None
    retry_count: int = 0


@runtime_checkable
class TelemetryHook(Protocol):
    """Protocol for custom telemetry hooks. Implement only what you need."""

    def on_request_start(self, context: RequestContext) -> None:
        ...

    def on_request_end(self, request: RequestContext, response: ResponseContext) -> None:
        ...

    def on_request_error(self, request: RequestContext, error: Exception) -> None:
        ...


class TelemetryManager:
    """Manages telemetry instrumentation for the transport.

    This class is internal and not part of the public API.
    """

    def __init__(self, config: Optional[TelemetryConfig] = None) -> None:
        self._config = config or TelemetryConfig()
        self._tracer: Optional[Any] = None
        self._meter: Optional[Any] = None
        self._logger: Optional[logging.Logger] = None
        self._hooks = list(self._config.hooks)

        self._request_duration: Optional[Any] = None
        self._request_count: Optional[Any] = None
        self._error_count: Optional[Any] = None

        self._initialize()

    @property
    def is_tracing_enabled(self) -> bool:
        return self._config.enable_tracing and _OTEL_AVAILABLE

    @property
    def logger(self) -> Optional[logging.Logger]:
        return self._logger

    def _initialize(self) -> None:
        if self._config.enable_tracing and _OTEL_AVAILABLE:
            self._tracer = trace.get_tracer("forcemap")

        if self._config.enable_metrics and _OTEL_AVAILABLE:
            self._meter = metrics.get_meter("forcemap")
            self._request_duration = self._meter.create_histogram(
                name="forcemap.client.request.duration",
                description="Duration of record service requests",
                unit="ms",
            )
            self._request_count = self._meter.create_counter(
                name="forcemap.client.request.count",
                description="Number of record service requests",
                unit="1",
            )
            self._error_count = self._meter.create_counter(
                name="forcemap.client.error.count",
                description="Number of failed record service requests",
                unit="1",
            )

        if self._config.enable_logging:
            self._logger = logging.getLogger(self._config.logger_name)
            self._logger.setLevel(getattr(logging, self._config.log_level.upper()))

    @contextmanager
    def trace_request(
        self,
        operation: str,
        method: str,
        url: str,
        client_request_id: str,
        sobject_type: Optional[str] = None,
    ) -> Generator[RequestContext, None, None]:
        """Create a traced request context.

        Usage::

            with telemetry.trace_request("query", "GET", url, req_id) as ctx:
                response = self._http._request(...)
                telemetry.record_response(ctx, response.status_code)
        """
        ctx = RequestContext(
            client_request_id=client_request_id,
            method=method,
            url=url,
            operation=operation,
            sobject_type=sobject_type,
        )
        self._dispatch("on_request_start", ctx)

        span = None
        if self._tracer:
            span_name = f"forcemap {operation}"
            if sobject_type:
                span_name = f"{span_name} {sobject_type}"
            attributes = {
                OTEL_ATTR_DB_SYSTEM: "salesforce",
                OTEL_ATTR_DB_OPERATION: operation,
                OTEL_ATTR_HTTP_METHOD: method,
                OTEL_ATTR_HTTP_URL: url,
                OTEL_ATTR_REQUEST_ID: client_request_id,
            }
            if sobject_type:
                attributes[OTEL_ATTR_SOBJECT_TYPE] = sobject_type
            span = self._tracer.start_span(span_name, kind=trace.SpanKind.CLIENT, attributes=attributes)
            ctx._span = span

        try:
            yield ctx
        except Exception as e:
            if span:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                span.record_exception(e)
            if self._logger:
                self._logger.error("%s %s failed: %s", ctx.operation, ctx.method, e)
            self._dispatch("on_request_error", ctx, e)
            raise
        finally:
            if span:
                span.end()

    def record_response(
        self,
        ctx: RequestContext,
        status_code: int,
        error: Optional[Exception] = None,
        retry_count: int = 0,
    ) -> None:
        """Record response metrics, log the outcome, and dispatch to hooks."""
        duration_ms = (time.perf_counter() - ctx.start_time) * 1000
        response = ResponseContext(
            status_code=status_code,
            duration_ms=duration_ms,
            error=error,
            retry_count=retry_count,
        )

        if ctx._span:
            ctx._span.set_attribute(OTEL_ATTR_HTTP_STATUS_CODE, status_code)

        if self._request_duration:
            attributes: Dict[str, Any] = {
                "operation": ctx.operation,
                "method": ctx.method,
                "status_code": status_code,
            }
            if ctx.sobject_type:
                attributes["sobject_type"] = ctx.sobject_type
            self._request_duration.record(duration_ms, attributes)
            self._request_count.add(1, attributes)
            if status_code >= 400:
                self._error_count.add(1, attributes)

        if self._logger:
            level = logging.WARNING if status_code >= 400 else logging.DEBUG
            self._logger.log(
                level,
                "%s %s %s %.1fms",
                ctx.operation,
                ctx.method,
                status_code,
                duration_ms,
                extra={"client_request_id": ctx.client_request_id, "retry_count": retry_count},
            )

        self._dispatch("on_request_end", ctx, response)

    def _dispatch(self, method_name: str, *args: Any) -> None:
        for hook in self._hooks:
            callback = getattr(hook, method_name, None)
            if callback is None:
                continue
            try:
                callback(*args)
            except Exception:
                # Hooks never break requests
                if self._logger:
                    self._logger.exception("telemetry hook %r failed in %s", hook, method_name)


class NoOpTelemetryManager:
    """No-op telemetry manager when telemetry is disabled."""

    logger = None

    @contextmanager
    def trace_request(
        self,
        operation: str,
        method: str,
        url: str,
        client_request_id: str,
        sobject_type: Optional[str] = None,
    ) -> Generator[RequestContext, None, None]:
        yield RequestContext(
            client_request_id=client_request_id,
            method=method,
            url=url,
            operation=operation,
            sobject_type=sobject_type,
        )

    def record_response(self, *args: Any, **kwargs: Any) -> None:
        pass


def create_telemetry_manager(
    config: Optional[TelemetryConfig],
) -> Union[TelemetryManager, NoOpTelemetryManager]:
    """Factory to create the appropriate telemetry manager."""
    if config is None:
        return NoOpTelemetryManager()
    if not (config.enable_tracing or config.enable_metrics or config.enable_logging or config.hooks):
        return NoOpTelemetryManager()
    return TelemetryManager(config)


__all__ = [
    "TelemetryConfig",
    "TelemetryHook",
    "TelemetryManager",
    "NoOpTelemetryManager",
    "RequestContext",
    "ResponseContext",
    "create_telemetry_manager",
]

"""Tracing and structured logging for the Identity SDK.

Every HTTP exchange runs inside an OpenTelemetry span; log records go
through structlog. Nothing is configured globally unless the application
calls ``configure_telemetry``.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

if TYPE_CHECKING:
    from collections.abc import Iterator

    import httpx

    from .config import TelemetryConfig

INSTRUMENTATION_NAME = "identity-sdk"
INSTRUMENTATION_VERSION = "0.1.0"

_LEVELS = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40, "CRITICAL": 50}

_tracer: trace.Tracer | None = None
_logger: structlog.BoundLogger | None = None


def get_tracer() -> trace.Tracer:
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(INSTRUMENTATION_NAME, INSTRUMENTATION_VERSION)
    return _tracer


def get_logger() -> structlog.BoundLogger:
    global _logger
    if _logger is None:
        _logger = structlog.get_logger(INSTRUMENTATION_NAME)
    return _logger


def configure_telemetry(config: TelemetryConfig) -> None:
    """Install structlog processors and the SDK tracer.

    Disabling telemetry swaps in a no-op tracer and leaves logging alone.

    Args:
        config: Telemetry configuration.
    """
    global _tracer, _logger

    if not config.enabled:
        _tracer = trace.NoOpTracer()
        return

    renderer = (
        structlog.processors.JSONRenderer()
        if config.json_logs
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_log_level_to_int(config.log_level)),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _tracer = trace.get_tracer(config.service_name, INSTRUMENTATION_VERSION)
    _logger = structlog.get_logger(config.service_name)


def _log_level_to_int(level: str) -> int:
    return _LEVELS.get(level.upper(), _LEVELS["INFO"])


@contextmanager
def trace_operation(
    name: str,
    *,
    attributes: dict[str, Any] | None = None,
    tracer: trace.Tracer | None = None,
) -> Iterator[trace.Span]:
    """Run the block inside a span.

    An exception leaving the block is recorded on the span and re-raised.
    """
    with (tracer or get_tracer()).start_as_current_span(name, attributes=attributes) as span:
        yield span


@contextmanager
def trace_request(
    request: httpx.Request,
    *,
    tracer: trace.Tracer | None = None,
) -> Iterator[trace.Span]:
    """Trace one HTTP exchange without recording query strings or headers."""
    with trace_operation(
        "http_request",
        attributes={
            "http.method": request.method,
            "http.url": redact_url(request.url),
            "server.address": request.url.host,
        },
        tracer=tracer,
    ) as span:
        yield span


def record_status(span: trace.Span, status_code: int) -> None:
    """Tag ``span`` with the response status; non-2xx marks it as failed."""
    span.set_attribute("http.status_code", status_code)
    if not 200 <= status_code < 300:
        span.set_status(Status(StatusCode.ERROR, f"HTTP {status_code}"))


def redact_url(url: httpx.URL) -> str:
    """Render a URL without its query string."""
    return str(url).split("?", 1)[0]

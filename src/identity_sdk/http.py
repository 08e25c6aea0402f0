"""HTTP transport for the Identity SDK.

Sends one request per call on an ``httpx.AsyncClient`` and classifies the
outcome. There are no retries at this layer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeAlias

import httpx
from opentelemetry import trace

from .core.errors import ErrorFactory, is_success_status
from .telemetry import get_logger, get_tracer, record_status, redact_url, trace_request

if TYPE_CHECKING:
    from .config import IdentityClientConfig, TelemetryConfig

# Raw body plus the response it was read from (status, headers).
HTTPResult: TypeAlias = tuple[bytes, httpx.Response]


def create_async_http_client(
    config: IdentityClientConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create configured async HTTP client.

    Args:
        config: SDK configuration.
        transport: Optional httpx transport, e.g. ``httpx.MockTransport``.

    Returns:
        Configured httpx.AsyncClient.
    """
    return httpx.AsyncClient(
        timeout=httpx.Timeout(
            connect=config.connect_timeout,
            read=config.timeout,
            write=config.timeout,
            pool=config.timeout,
        ),
        headers={
            "User-Agent": config.user_agent,
            "Accept": "application/json",
        },
        follow_redirects=False,
        transport=transport,
    )


class HTTPTransport:
    """Issues HTTP requests and classifies their outcome.

    ``send`` returns the raw body and response, or raises one of
    ``InvalidResponseError``, ``StatusCodeError``, ``OIDCError`` or
    ``DataTaskError``.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        telemetry: TelemetryConfig | None = None,
    ) -> None:
        self._client = client
        enabled = telemetry is None or telemetry.enabled
        self._tracer = get_tracer() if enabled else trace.NoOpTracer()
        self._logger = get_logger()
        if telemetry is not None:
            self._logger = self._logger.bind(service=telemetry.service_name)

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    @property
    def tracer(self) -> trace.Tracer:
        return self._tracer

    def build_request(self, method: str, url: str, **kwargs: Any) -> httpx.Request:
        """Build a request using the client's default headers and timeouts."""
        return self._client.build_request(method, url, **kwargs)

    async def send(self, request: httpx.Request) -> HTTPResult:
        """Send ``request`` and classify the outcome.

        A non-2xx status is reported as ``OIDCError``/``StatusCodeError`` even
        if reading the body also failed; a read failure on a 2xx response is
        reported as ``DataTaskError``.
        """
        with trace_request(request, tracer=self._tracer) as span:
            try:
                response = await self._client.send(request, stream=True)
            except httpx.HTTPError as e:
                raise ErrorFactory.from_exception(e) from e

            read_error: Exception | None = None
            body: bytes | None
            try:
                body = await response.aread()
            except (httpx.HTTPError, httpx.StreamError) as e:
                read_error = e
                body = None
            finally:
                await response.aclose()

            record_status(span, response.status_code)

            if not is_success_status(response.status_code):
                error = ErrorFactory.from_status(response.status_code, body)
                self._logger.warning(
                    "Request failed",
                    method=request.method,
                    url=redact_url(request.url),
                    status_code=response.status_code,
                    code=error.code,
                )
                raise error

            if read_error is not None:
                raise ErrorFactory.from_exception(read_error, response=response) from read_error

            return body or b"", response

    async def aclose(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

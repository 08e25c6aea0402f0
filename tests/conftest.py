"""
Shared test fixtures for Identity SDK tests.

Provides a stub identity provider served through ``httpx.MockTransport``,
client configuration, and sample payloads.
"""

from __future__ import annotations

import threading
from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
from typing import Any

import httpx
import pytest

from identity_sdk.async_client import AsyncIdentityAPIClient
from identity_sdk.client import IdentityAPIClient
from identity_sdk.config import IdentityClientConfig

ENDPOINT = "https://auth.example.com"

Responder = (
    httpx.Response
    | Callable[[httpx.Request], httpx.Response]
    | Callable[[httpx.Request], Awaitable[httpx.Response]]
)


class ProviderStub:
    """Routes requests by ``(method, path)`` and records every request seen.

    A callable responder may be a coroutine function; ``httpx.MockTransport``
    awaits its result.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Responder] = {}
        self.requests: list[httpx.Request] = []
        self._lock = threading.Lock()

    def add(self, method: str, path: str, responder: Responder) -> None:
        self.routes[(method.upper(), path)] = responder

    def calls(self, path: str) -> list[httpx.Request]:
        with self._lock:
            return [r for r in self.requests if r.url.path == path]

    def __call__(self, request: httpx.Request) -> Any:
        with self._lock:
            self.requests.append(request)
        responder = self.routes.get((request.method, request.url.path))
        if responder is None:
            return httpx.Response(404, json={"error": "not_found", "error_description": "no route"})
        if callable(responder):
            return responder(request)
        # Fresh copy so a route can be served more than once
        return httpx.Response(
            responder.status_code,
            headers=responder.headers,
            content=responder.content,
        )


class FailingStream(httpx.AsyncByteStream):
    """Response body that fails part-way through reading."""

    async def __aiter__(self) -> AsyncIterator[bytes]:
        yield b'{"partial":'
        raise httpx.ReadError("connection reset while reading body")


def discovery_document(endpoint: str = ENDPOINT) -> dict[str, Any]:
    return {
        "issuer": endpoint,
        "authorization_endpoint": f"{endpoint}/oauth2/authorize",
        "token_endpoint": f"{endpoint}/oauth2/token",
        "userinfo_endpoint": f"{endpoint}/oauth2/userinfo",
        "revocation_endpoint": f"{endpoint}/oauth2/revoke",
        "end_session_endpoint": f"{endpoint}/oauth2/end_session",
        "jwks_uri": f"{endpoint}/oauth2/jwks",
        "scopes_supported": ["openid", "offline_access"],
    }


@pytest.fixture
def base_config() -> IdentityClientConfig:
    """Provide a basic SDK configuration for testing."""
    return IdentityClientConfig(endpoint=ENDPOINT)


@pytest.fixture
def stub() -> ProviderStub:
    """Provide a stub provider that already serves discovery."""
    provider = ProviderStub()
    provider.add(
        "GET",
        "/.well-known/openid-configuration",
        httpx.Response(200, json=discovery_document()),
    )
    return provider


@pytest.fixture
def async_client(
    base_config: IdentityClientConfig,
    stub: ProviderStub,
) -> Iterator[AsyncIdentityAPIClient]:
    """Provide a callback client wired to the stub provider."""
    client = AsyncIdentityAPIClient(base_config, transport=httpx.MockTransport(stub))
    yield client
    client.close()


@pytest.fixture
def sync_client(
    base_config: IdentityClientConfig,
    stub: ProviderStub,
) -> Iterator[IdentityAPIClient]:
    """Provide a blocking client wired to the stub provider."""
    client = IdentityAPIClient(base_config, transport=httpx.MockTransport(stub), timeout=5.0)
    yield client
    client.close()


@pytest.fixture
def sample_token_response() -> dict[str, Any]:
    """Provide a sample token endpoint response."""
    return {
        "token_type": "Bearer",
        "access_token": "a1",
        "expires_in": 3600,
        "refresh_token": "r2",
    }


@pytest.fixture
def sample_server_error() -> dict[str, Any]:
    """Provide a sample ``error`` envelope body."""
    return {
        "error": {
            "name": "Unauthorized",
            "message": "invalid refresh token",
            "reason": "InvalidRefreshToken",
            "info": {"cause": "expired"},
        }
    }


class FakeDelegate:
    """In-memory session owner for authenticated request tests."""

    def __init__(
        self,
        access_token: str | None = "at-1",
        *,
        should_refresh: bool = False,
        refreshed_token: str | None = "at-2",
        refresh_error: Exception | None = None,
        should_refresh_error: Exception | None = None,
    ) -> None:
        self.access_token = access_token
        self.should_refresh = should_refresh
        self.refreshed_token = refreshed_token
        self.refresh_error = refresh_error
        self.should_refresh_error = should_refresh_error
        self.refresh_calls = 0

    def get_access_token(self) -> str | None:
        return self.access_token

    def should_refresh_access_token(self) -> bool:
        if self.should_refresh_error is not None:
            raise self.should_refresh_error
        return self.should_refresh

    def refresh_access_token(self, handler: Callable[[Exception | None], None]) -> None:
        self.refresh_calls += 1
        if self.refresh_error is not None:
            handler(self.refresh_error)
            return
        self.access_token = self.refreshed_token
        self.should_refresh = False
        handler(None)


@pytest.fixture
def make_delegate() -> type[FakeDelegate]:
    """Provide the fake delegate class; tests keep their own reference."""
    return FakeDelegate


@pytest.fixture
def failing_stream() -> FailingStream:
    """Provide a body stream that raises while being read."""
    return FailingStream()

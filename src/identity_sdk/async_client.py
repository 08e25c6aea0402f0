"""Callback-style identity API client.

Every operation returns a ``concurrent.futures.Future`` and accepts an
optional ``handler`` that is called once with the completed future.
Requests run on an ``httpx.AsyncClient`` driven by an event loop the client
owns; nothing blocks the calling thread. Handlers run on the loop thread,
except for results that are already known when the call is made.
"""

from __future__ import annotations

import threading
from concurrent import futures
from concurrent.futures import Future
from typing import TYPE_CHECKING, Any, Self

import httpx

from .config import IdentityClientConfig
from .core.auth_pipeline import AuthenticatedRequestPipeline
from .core.envelope import decode_json
from .core.futures import attach, completed, failed
from .core.metadata_cache import DISCOVERY_PATH, ProviderMetadataCache
from .core.runner import LoopThread
from .core.token_ops import TokenOperations, build_token_form
from .core.typed_fetch import TypedFetcher
from .errors import InvalidResponseError
from .http import HTTPTransport, create_async_http_client
from .models import (
    AppSessionToken,
    ChallengeToken,
    ProviderMetadata,
    TokenResult,
    UserInfo,
)
from .telemetry import get_logger
from .types import GrantType, KeyDecoding

if TYPE_CHECKING:
    from collections.abc import Coroutine

    from pydantic import BaseModel

    from .http import HTTPResult
    from .types import AuthAPIClientDelegate, Handler


class AsyncIdentityAPIClient:
    """Identity provider client with callback/future completion."""

    def __init__(
        self,
        config: IdentityClientConfig,
        *,
        delegate: AuthAPIClientDelegate | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: SDK configuration.
            delegate: Session owner consulted by authenticated requests. Held
                weakly; keep your own reference to it.
            transport: Optional async httpx transport, mainly for tests.
        """
        self.config = config
        self._runner = LoopThread()
        self._http = create_async_http_client(config, transport=transport)
        self._transport = HTTPTransport(self._http, telemetry=config.telemetry)
        self._fetcher = TypedFetcher(self._transport)
        self._metadata = ProviderMetadataCache(
            self._fetcher, config.endpoint_url(DISCOVERY_PATH)
        )
        self._pipeline = AuthenticatedRequestPipeline(self._transport, delegate)
        self._ops = TokenOperations(self._transport, config)
        self._logger = get_logger()

        self._lock = threading.Lock()
        self._pending: set[Future[Any]] = set()
        self._closed = False

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Wait for in-flight operations, then close the HTTP client and the loop.

        Operations started after ``close`` fail with ``InvalidResponseError``.
        Calling it again is a no-op. Must not be called from a handler.
        """
        if self._runner.in_loop_thread():
            msg = "close() cannot be called from a completion handler"
            raise RuntimeError(msg)

        with self._lock:
            if self._closed:
                return
            self._closed = True
            pending = list(self._pending)

        if pending:
            self._logger.debug("Draining in-flight operations", count=len(pending))
            futures.wait(pending)
        try:
            self._runner.run(self._transport.aclose())
        finally:
            self._runner.stop()

    def _submit(self, coro: Coroutine[Any, Any, Any], handler: Handler | None) -> Future[Any]:
        with self._lock:
            closed = self._closed
            if not closed:
                future = self._runner.submit(coro)
                self._pending.add(future)
        if closed:
            coro.close()
            return attach(failed(InvalidResponseError("Client is closed")), handler)
        future.add_done_callback(self._forget)
        return attach(future, handler)

    def _forget(self, future: Future[Any]) -> None:
        with self._lock:
            self._pending.discard(future)

    @property
    def endpoint(self) -> str:
        return self.config.endpoint_str

    @property
    def delegate(self) -> AuthAPIClientDelegate | None:
        return self._pipeline.delegate

    @delegate.setter
    def delegate(self, delegate: AuthAPIClientDelegate | None) -> None:
        self._pipeline.delegate = delegate

    @property
    def metadata_cache(self) -> ProviderMetadataCache:
        return self._metadata

    # Generic request helpers

    def build_request(self, method: str, url: str, **kwargs: Any) -> httpx.Request:
        """Build a request carrying the client's default headers."""
        return self._transport.build_request(method, url, **kwargs)

    def send(self, request: httpx.Request, handler: Handler | None = None) -> Future[HTTPResult]:
        """Send ``request`` and resolve to its raw body and response."""
        return self._submit(self._transport.send(request), handler)

    def fetch(
        self,
        request: httpx.Request,
        model: type[BaseModel],
        *,
        key_decoding: KeyDecoding = KeyDecoding.CONVERT_FROM_SNAKE_CASE,
        handler: Handler | None = None,
    ) -> Future[Any]:
        """Send ``request`` and decode its JSON body into ``model``."""
        return self._submit(
            self._fetcher.fetch(request, model, key_decoding=key_decoding), handler
        )

    def send_authenticated(
        self,
        request: httpx.Request,
        handler: Handler | None = None,
    ) -> Future[HTTPResult]:
        """Send ``request`` with the delegate's bearer token, refreshing first if due."""
        return self._submit(self._pipeline.send(request), handler)

    def fetch_authenticated(
        self,
        request: httpx.Request,
        model: type[BaseModel],
        *,
        key_decoding: KeyDecoding = KeyDecoding.CONVERT_FROM_SNAKE_CASE,
        handler: Handler | None = None,
    ) -> Future[Any]:
        """Authenticated variant of ``fetch``."""
        return self._submit(self._fetch_authenticated(request, model, key_decoding), handler)

    async def _fetch_authenticated(
        self,
        request: httpx.Request,
        model: type[BaseModel],
        key_decoding: KeyDecoding,
    ) -> Any:
        body, _ = await self._pipeline.send(request)
        return decode_json(body, model, key_decoding)

    # Identity provider operations

    def fetch_oidc_configuration(self, handler: Handler | None = None) -> Future[ProviderMetadata]:
        """Resolve the provider's discovery metadata (cached after first success).

        A cache hit returns an already completed future, so ``handler`` runs
        on the calling thread.
        """
        cached = self._metadata.metadata
        if cached is not None and not self._closed:
            return attach(completed(cached), handler)
        return self._submit(self._metadata.get(), handler)

    def request_token(
        self,
        grant_type: GrantType,
        client_id: str,
        *,
        redirect_uri: str | None = None,
        code: str | None = None,
        code_verifier: str | None = None,
        refresh_token: str | None = None,
        jwt: str | None = None,
        handler: Handler | None = None,
    ) -> Future[TokenResult]:
        """Exchange a grant for tokens at the discovered token endpoint.

        This never goes through the authenticated pipeline: it is how the
        credential is obtained in the first place.
        """
        form = build_token_form(
            grant_type,
            client_id,
            redirect_uri=redirect_uri,
            code=code,
            code_verifier=code_verifier,
            refresh_token=refresh_token,
            jwt=jwt,
        )
        self._logger.debug("Requesting token", grant_type=str(grant_type), client_id=client_id)
        return self._submit(self._request_token(form), handler)

    async def _request_token(self, form: dict[str, str]) -> TokenResult:
        metadata = await self._metadata.get()
        return await self._fetcher.fetch(self._ops.token_request(metadata, form), TokenResult)

    def request_user_info(
        self,
        access_token: str,
        handler: Handler | None = None,
    ) -> Future[UserInfo]:
        """Fetch userinfo claims, keeping the provider's exact claim names."""
        return self._submit(self._request_user_info(access_token), handler)

    async def _request_user_info(self, access_token: str) -> UserInfo:
        metadata = await self._metadata.get()
        return await self._fetcher.fetch(
            self._ops.user_info_request(metadata, access_token),
            UserInfo,
            key_decoding=KeyDecoding.USE_DEFAULT_KEYS,
        )

    def request_revocation(
        self,
        refresh_token: str,
        handler: Handler | None = None,
    ) -> Future[None]:
        """Revoke a refresh token. Any 2xx response counts as success."""
        return self._submit(self._request_revocation(refresh_token), handler)

    async def _request_revocation(self, refresh_token: str) -> None:
        metadata = await self._metadata.get()
        await self._transport.send(self._ops.revocation_request(metadata, refresh_token))

    def request_challenge(
        self,
        purpose: str,
        handler: Handler | None = None,
    ) -> Future[ChallengeToken]:
        """Request a short-lived challenge token for ``purpose``."""
        return self._submit(
            self._fetcher.fetch_envelope(self._ops.challenge_request(purpose), ChallengeToken),
            handler,
        )

    def request_app_session_token(
        self,
        refresh_token: str,
        handler: Handler | None = None,
    ) -> Future[AppSessionToken]:
        """Exchange a refresh token for an app session token."""
        return self._submit(
            self._fetcher.fetch_envelope(
                self._ops.app_session_token_request(refresh_token),
                AppSessionToken,
            ),
            handler,
        )

    def request_sso_callback(
        self,
        code: str,
        state: str,
        handler: Handler | None = None,
    ) -> Future[None]:
        """Relay a third-party SSO authorization result. The body is discarded."""
        return self._submit(self._request_sso_callback(code, state), handler)

    async def _request_sso_callback(self, code: str, state: str) -> None:
        await self._transport.send(self._ops.sso_callback_request(code, state))

"""Blocking identity API client.

Each method runs the matching callback-style operation of
``AsyncIdentityAPIClient`` through ``wait_for``. Do not call these methods
from a completion handler, which runs on the client's event loop thread.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self

from .async_client import AsyncIdentityAPIClient
from .core.sync_bridge import wait_for
from .types import KeyDecoding

if TYPE_CHECKING:
    import httpx
    from pydantic import BaseModel

    from .config import IdentityClientConfig
    from .http import HTTPResult
    from .models import (
        AppSessionToken,
        ChallengeToken,
        ProviderMetadata,
        TokenResult,
        UserInfo,
    )
    from .types import AuthAPIClientDelegate, GrantType


class IdentityAPIClient:
    """Synchronous identity provider client."""

    def __init__(
        self,
        config: IdentityClientConfig,
        *,
        delegate: AuthAPIClientDelegate | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
        client: AsyncIdentityAPIClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: SDK configuration.
            delegate: Session owner, held weakly.
            transport: Optional httpx transport, mainly for tests.
            timeout: Optional bound on each blocking wait, in seconds. The
                HTTP timeouts in ``config`` still apply underneath.
            client: Existing callback client to wrap instead of creating one.
                A wrapped client stays open when this client is closed.
        """
        self._owns_client = client is None
        self._client = client or AsyncIdentityAPIClient(
            config, delegate=delegate, transport=transport
        )
        self.timeout = timeout

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying client if this instance created it."""
        if self._owns_client:
            self._client.close()

    @property
    def async_client(self) -> AsyncIdentityAPIClient:
        return self._client

    @property
    def config(self) -> IdentityClientConfig:
        return self._client.config

    @property
    def delegate(self) -> AuthAPIClientDelegate | None:
        return self._client.delegate

    @delegate.setter
    def delegate(self, delegate: AuthAPIClientDelegate | None) -> None:
        self._client.delegate = delegate

    def send(self, request: httpx.Request) -> HTTPResult:
        return wait_for(lambda h: self._client.send(request, handler=h), timeout=self.timeout)

    def send_authenticated(self, request: httpx.Request) -> HTTPResult:
        return wait_for(
            lambda h: self._client.send_authenticated(request, handler=h),
            timeout=self.timeout,
        )

    def fetch_authenticated(
        self,
        request: httpx.Request,
        model: type[BaseModel],
        *,
        key_decoding: KeyDecoding = KeyDecoding.CONVERT_FROM_SNAKE_CASE,
    ) -> Any:
        return wait_for(
            lambda h: self._client.fetch_authenticated(
                request, model, key_decoding=key_decoding, handler=h
            ),
            timeout=self.timeout,
        )

    def fetch_oidc_configuration(self) -> ProviderMetadata:
        return wait_for(
            lambda h: self._client.fetch_oidc_configuration(handler=h),
            timeout=self.timeout,
        )

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
    ) -> TokenResult:
        """Exchange a grant for tokens.

        Raises:
            OIDCError: If the token endpoint rejected the grant.
            StatusCodeError: On any other non-2xx response.
            DecodeError: If the response is not a token document.
        """
        return wait_for(
            lambda h: self._client.request_token(
                grant_type,
                client_id,
                redirect_uri=redirect_uri,
                code=code,
                code_verifier=code_verifier,
                refresh_token=refresh_token,
                jwt=jwt,
                handler=h,
            ),
            timeout=self.timeout,
        )

    def request_user_info(self, access_token: str) -> UserInfo:
        return wait_for(
            lambda h: self._client.request_user_info(access_token, handler=h),
            timeout=self.timeout,
        )

    def request_revocation(self, refresh_token: str) -> None:
        wait_for(
            lambda h: self._client.request_revocation(refresh_token, handler=h),
            timeout=self.timeout,
        )

    def request_challenge(self, purpose: str) -> ChallengeToken:
        """Request a challenge token.

        Raises:
            ServerError: If the service answered with an ``error`` envelope.
        """
        return wait_for(
            lambda h: self._client.request_challenge(purpose, handler=h),
            timeout=self.timeout,
        )

    def request_app_session_token(self, refresh_token: str) -> AppSessionToken:
        return wait_for(
            lambda h: self._client.request_app_session_token(refresh_token, handler=h),
            timeout=self.timeout,
        )

    def request_sso_callback(self, code: str, state: str) -> None:
        wait_for(
            lambda h: self._client.request_sso_callback(code, state, handler=h),
            timeout=self.timeout,
        )

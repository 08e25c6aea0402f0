"""Authenticated request pipeline.

Before an authenticated request is sent the delegate is asked whether the
access token needs refreshing; after any refresh, the current access token
is attached as a bearer credential.
"""

from __future__ import annotations

import asyncio
import weakref
from typing import TYPE_CHECKING

from ..telemetry import get_logger

if TYPE_CHECKING:
    import httpx

    from ..http import HTTPResult, HTTPTransport
    from ..types import AuthAPIClientDelegate


class AuthenticatedRequestPipeline:
    """Refresh-then-authorize-then-send, holding the delegate weakly.

    A released or unset delegate means "no refresh requested" and "no token
    available"; the request is then sent without credentials. Every delegate
    call happens inside the coroutine, so a delegate that raises fails the
    operation instead of escaping to the caller.
    """

    def __init__(
        self,
        transport: HTTPTransport,
        delegate: AuthAPIClientDelegate | None = None,
    ) -> None:
        self._transport = transport
        self._delegate_ref: weakref.ReferenceType[AuthAPIClientDelegate] | None = None
        self._logger = get_logger()
        self.delegate = delegate

    @property
    def delegate(self) -> AuthAPIClientDelegate | None:
        """The delegate, or ``None`` if unset or already garbage collected."""
        if self._delegate_ref is None:
            return None
        return self._delegate_ref()

    @delegate.setter
    def delegate(self, delegate: AuthAPIClientDelegate | None) -> None:
        self._delegate_ref = weakref.ref(delegate) if delegate is not None else None

    async def refresh_access_token_if_needed(self) -> None:
        """Ask the delegate to refresh when it says a refresh is due.

        The delegate may complete from any thread, synchronously or later.
        Its failure is propagated unchanged; repeated completions are ignored.
        """
        delegate = self.delegate
        if delegate is None or not delegate.should_refresh_access_token():
            return

        self._logger.debug("Refreshing access token before request")
        loop = asyncio.get_running_loop()
        refreshed: asyncio.Future[None] = loop.create_future()

        def _settle(error: Exception | None) -> None:
            if refreshed.done():
                self._logger.debug("Ignored repeated refresh completion")
            elif error is not None:
                refreshed.set_exception(error)
            else:
                refreshed.set_result(None)

        def _on_refreshed(error: Exception | None) -> None:
            loop.call_soon_threadsafe(_settle, error)

        delegate.refresh_access_token(_on_refreshed)
        await refreshed

    def authorize(self, request: httpx.Request) -> httpx.Request:
        """Attach the delegate's current access token, if any."""
        delegate = self.delegate
        access_token = delegate.get_access_token() if delegate is not None else None
        if access_token:
            request.headers["authorization"] = f"Bearer {access_token}"
        return request

    async def send(self, request: httpx.Request) -> HTTPResult:
        """Send ``request`` with a bearer credential, refreshing first if needed."""
        await self.refresh_access_token_if_needed()
        return await self._transport.send(self.authorize(request))

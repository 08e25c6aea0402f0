"""Typed fetch: JSON decoding layered on the HTTP transport."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from pydantic import BaseModel

from ..types import KeyDecoding
from .envelope import decode_envelope, decode_json

if TYPE_CHECKING:
    import httpx

    from ..http import HTTPTransport

M = TypeVar("M", bound=BaseModel)


class TypedFetcher:
    """Decodes successful transport payloads into pydantic models.

    Transport and status failures pass through untouched; a body that cannot
    be decoded fails with ``DecodeError``.
    """

    def __init__(self, transport: HTTPTransport) -> None:
        self._transport = transport

    @property
    def transport(self) -> HTTPTransport:
        return self._transport

    async def fetch(
        self,
        request: httpx.Request,
        model: type[M],
        *,
        key_decoding: KeyDecoding = KeyDecoding.CONVERT_FROM_SNAKE_CASE,
    ) -> M:
        body, _ = await self._transport.send(request)
        return decode_json(body, model, key_decoding)

    async def fetch_envelope(
        self,
        request: httpx.Request,
        model: type[M],
        *,
        key_decoding: KeyDecoding = KeyDecoding.CONVERT_FROM_SNAKE_CASE,
    ) -> M:
        """Fetch a ``result``/``error`` envelope and unwrap it.

        The ``error`` branch raises ``ServerError``.
        """
        body, _ = await self._transport.send(request)
        return decode_envelope(body, model, key_decoding).unwrap()

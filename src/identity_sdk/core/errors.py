"""Centralized error factory for the Identity SDK.

Provides consistent classification of HTTP outcomes into SDK errors.
"""

from __future__ import annotations

import httpx

from ..errors import (
    DataTaskError,
    IdentityAPIError,
    InvalidResponseError,
    OIDCError,
    StatusCodeError,
)
from ..models import ProviderErrorDetail
from ..types import KeyDecoding
from .envelope import decode_json


def is_success_status(status_code: int) -> bool:
    """Check whether a status code is in [200, 300)."""
    return 200 <= status_code < 300


class ErrorFactory:
    """Centralized error creation with consistent structure."""

    @staticmethod
    def from_status(status_code: int, body: bytes | None) -> IdentityAPIError:
        """Create SDK error for a non-2xx response.

        The body is tried as an OAuth error document first; anything else
        becomes a ``StatusCodeError`` carrying the raw body.

        Args:
            status_code: HTTP status code.
            body: Raw response body, if one was read.

        Returns:
            ``OIDCError`` or ``StatusCodeError``.
        """
        if body:
            try:
                detail = decode_json(body, ProviderErrorDetail, KeyDecoding.CONVERT_FROM_SNAKE_CASE)
            except IdentityAPIError:
                pass
            else:
                return OIDCError(detail, status_code=status_code)
        return StatusCodeError(status_code, body)

    @staticmethod
    def from_exception(
        exc: Exception,
        *,
        response: httpx.Response | None = None,
    ) -> IdentityAPIError:
        """Create SDK error from a transport exception.

        Args:
            exc: Exception raised by httpx.
            response: Response whose headers were already received, if any.

        Returns:
            ``DataTaskError`` when a response exists, else ``InvalidResponseError``.
        """
        if isinstance(exc, IdentityAPIError):
            return exc

        if response is None:
            return InvalidResponseError(f"Request failed: {exc}", cause=exc)

        return DataTaskError(exc)

"""Error classes for the Identity SDK.

Flat, non-retrying taxonomy surfaced by every client operation. Each error
carries a stable error code and a ``to_dict`` view for structured logging.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import ProviderErrorDetail, ServerErrorDetail


class ErrorCode(StrEnum):
    """Standardized error codes for the Identity SDK."""

    # Transport errors (1xxx)
    INVALID_RESPONSE = "NET_1001"
    DATA_TASK_ERROR = "NET_1002"

    # Payload errors (2xxx)
    DECODE_ERROR = "DEC_2001"

    # Server-reported errors (3xxx)
    SERVER_ERROR = "SRV_3001"
    STATUS_CODE = "SRV_3002"
    OIDC_ERROR = "SRV_3003"

    # Client configuration (4xxx)
    INVALID_CONFIG = "CFG_4001"


class IdentityAPIError(Exception):
    """Base error for the Identity SDK with structured error information."""

    def __init__(
        self,
        message: str,
        code: ErrorCode | str,
        *,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code if isinstance(code, str) else code.value
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error": self.message,
            "code": self.code,
            "status_code": self.status_code,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class InvalidResponseError(IdentityAPIError):
    """No HTTP response could be obtained for the request."""

    def __init__(
        self,
        message: str = "No HTTP response was received",
        *,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(
            message,
            ErrorCode.INVALID_RESPONSE,
            details={"cause": str(cause)} if cause else None,
        )
        self.__cause__ = cause


class DataTaskError(IdentityAPIError):
    """Transport error raised while receiving an otherwise successful response."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(
            f"Transport error: {cause}",
            ErrorCode.DATA_TASK_ERROR,
            details={"cause": str(cause)},
        )
        self.cause = cause
        self.__cause__ = cause


class DecodeError(IdentityAPIError):
    """Response body did not match the expected JSON shape."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(
            f"Failed to decode response: {cause}",
            ErrorCode.DECODE_ERROR,
            details={"cause": str(cause)},
        )
        self.cause = cause
        self.__cause__ = cause


class ServerError(IdentityAPIError):
    """Error branch of a ``{"result": ...} | {"error": ...}`` envelope."""

    def __init__(self, detail: ServerErrorDetail) -> None:
        super().__init__(
            detail.message,
            ErrorCode.SERVER_ERROR,
            details={"name": detail.name, "reason": detail.reason},
        )
        self.detail = detail

    @property
    def reason(self) -> str:
        return self.detail.reason


class StatusCodeError(IdentityAPIError):
    """Non-2xx response whose body is not an OAuth error document."""

    def __init__(self, status_code: int, body: bytes | None = None) -> None:
        super().__init__(
            f"Unexpected status code: {status_code}",
            ErrorCode.STATUS_CODE,
            status_code=status_code,
        )
        self.body = body


class OIDCError(IdentityAPIError):
    """Non-2xx response carrying an ``{error, error_description}`` document."""

    def __init__(self, detail: ProviderErrorDetail, *, status_code: int | None = None) -> None:
        super().__init__(
            detail.error_description or detail.error,
            ErrorCode.OIDC_ERROR,
            status_code=status_code,
            details={
                "error": detail.error,
                "error_description": detail.error_description,
            },
        )
        self.detail = detail

    @property
    def error(self) -> str:
        return self.detail.error

    @property
    def error_description(self) -> str:
        return self.detail.error_description


class InvalidConfigError(IdentityAPIError):
    """Invalid SDK configuration."""

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
    ) -> None:
        super().__init__(
            message,
            ErrorCode.INVALID_CONFIG,
            details={"field": field} if field else None,
        )

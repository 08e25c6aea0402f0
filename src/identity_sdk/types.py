"""Type definitions for the Identity SDK."""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Future
from enum import Enum, StrEnum
from typing import Any, Protocol, TypeAlias, TypeVar, runtime_checkable

T = TypeVar("T")

# Invoked exactly once with the completed future of an operation.
Handler: TypeAlias = Callable[[Future[Any]], object]

RefreshHandler: TypeAlias = Callable[[Exception | None], None]


class GrantType(StrEnum):
    """Grant types accepted by the token endpoint."""

    AUTHORIZATION_CODE = "authorization_code"
    REFRESH_TOKEN = "refresh_token"
    ANONYMOUS = "urn:authgear:params:oauth:grant-type:anonymous-request"


class KeyDecoding(Enum):
    """How JSON object keys are bound to model attributes."""

    CONVERT_FROM_SNAKE_CASE = "convert_from_snake_case"
    USE_DEFAULT_KEYS = "use_default_keys"


@runtime_checkable
class AuthAPIClientDelegate(Protocol):
    """Session owner consulted before authenticated requests.

    The client only holds a weak reference to its delegate. The delegate
    decides refresh policy and owns token storage.
    """

    def get_access_token(self) -> str | None:
        ...

    def should_refresh_access_token(self) -> bool:
        ...

    def refresh_access_token(self, handler: RefreshHandler) -> None:
        """Refresh the session and call ``handler(None)`` or ``handler(error)`` once."""
        ...

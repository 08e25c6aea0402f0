"""Identity SDK: OAuth 2.0 / OpenID Connect client core."""

from .async_client import AsyncIdentityAPIClient
from .client import IdentityAPIClient
from .config import IdentityClientConfig, TelemetryConfig
from .core.sync_bridge import wait_for
from .errors import (
    DataTaskError,
    DecodeError,
    ErrorCode,
    IdentityAPIError,
    InvalidConfigError,
    InvalidResponseError,
    OIDCError,
    ServerError,
    StatusCodeError,
)
from .models import (
    AppSessionToken,
    ChallengeToken,
    PKCEChallenge,
    ProviderErrorDetail,
    ProviderMetadata,
    ServerErrorDetail,
    TokenResult,
    UserInfo,
)
from .pkce import (
    create_pkce_challenge,
    generate_code_challenge,
    generate_code_verifier,
    generate_state,
    verify_code_challenge,
)
from .telemetry import configure_telemetry
from .types import AuthAPIClientDelegate, GrantType, KeyDecoding

__all__ = [
    "AppSessionToken",
    "AsyncIdentityAPIClient",
    "AuthAPIClientDelegate",
    "ChallengeToken",
    "DataTaskError",
    "DecodeError",
    "ErrorCode",
    "GrantType",
    "IdentityAPIClient",
    "IdentityAPIError",
    "IdentityClientConfig",
    "InvalidConfigError",
    "InvalidResponseError",
    "KeyDecoding",
    "OIDCError",
    "PKCEChallenge",
    "ProviderErrorDetail",
    "ProviderMetadata",
    "ServerError",
    "ServerErrorDetail",
    "StatusCodeError",
    "TelemetryConfig",
    "TokenResult",
    "UserInfo",
    "configure_telemetry",
    "create_pkce_challenge",
    "generate_code_challenge",
    "generate_code_verifier",
    "generate_state",
    "verify_code_challenge",
    "wait_for",
]

__version__ = "0.1.0"

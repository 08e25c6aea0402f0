"""Request construction for the identity provider endpoints.

Provides the request building shared by the callback and blocking
clients; the clients only decide how each request is dispatched.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..types import GrantType

if TYPE_CHECKING:
    import httpx

    from ..config import IdentityClientConfig
    from ..http import HTTPTransport
    from ..models import ProviderMetadata

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json"

CHALLENGE_PATH = "/oauth2/challenge"
APP_SESSION_TOKEN_PATH = "/oauth2/app_session_token"
SSO_CALLBACK_PATH = "/sso/wechat/callback"

SSO_PLATFORM = "ios"


def build_token_form(
    grant_type: GrantType,
    client_id: str,
    *,
    redirect_uri: str | None = None,
    code: str | None = None,
    code_verifier: str | None = None,
    refresh_token: str | None = None,
    jwt: str | None = None,
) -> dict[str, str]:
    """Build the token endpoint form body.

    ``client_id`` and ``grant_type`` are always present; every other
    parameter is omitted when not supplied.
    """
    data: dict[str, str] = {
        "client_id": client_id,
        "grant_type": GrantType(grant_type).value,
    }
    optional = {
        "code": code,
        "redirect_uri": redirect_uri,
        "code_verifier": code_verifier,
        "refresh_token": refresh_token,
        "jwt": jwt,
    }
    data.update({key: value for key, value in optional.items() if value is not None})
    return data


class TokenOperations:
    """Builds one ``httpx.Request`` per identity provider operation."""

    def __init__(self, transport: HTTPTransport, config: IdentityClientConfig) -> None:
        """Initialize token operations.

        Args:
            transport: Transport whose client defaults are applied to requests.
            config: SDK configuration; fixed paths are joined onto its endpoint.
        """
        self._transport = transport
        self._config = config

    def _form_post(self, url: str, data: dict[str, str]) -> httpx.Request:
        return self._transport.build_request(
            "POST",
            url,
            data=data,
            headers={"content-type": FORM_CONTENT_TYPE},
        )

    def _json_post(self, url: str, body: dict[str, Any]) -> httpx.Request:
        return self._transport.build_request(
            "POST",
            url,
            json=body,
            headers={"content-type": JSON_CONTENT_TYPE},
        )

    def token_request(self, metadata: ProviderMetadata, form: dict[str, str]) -> httpx.Request:
        return self._form_post(str(metadata.token_endpoint), form)

    def user_info_request(self, metadata: ProviderMetadata, access_token: str) -> httpx.Request:
        return self._transport.build_request(
            "GET",
            str(metadata.userinfo_endpoint),
            headers={"authorization": f"Bearer {access_token}"},
        )

    def revocation_request(self, metadata: ProviderMetadata, refresh_token: str) -> httpx.Request:
        return self._form_post(str(metadata.revocation_endpoint), {"token": refresh_token})

    def challenge_request(self, purpose: str) -> httpx.Request:
        return self._json_post(self._config.endpoint_url(CHALLENGE_PATH), {"purpose": purpose})

    def app_session_token_request(self, refresh_token: str) -> httpx.Request:
        return self._json_post(
            self._config.endpoint_url(APP_SESSION_TOKEN_PATH),
            {"refresh_token": refresh_token},
        )

    def sso_callback_request(self, code: str, state: str) -> httpx.Request:
        return self._form_post(
            self._config.endpoint_url(SSO_CALLBACK_PATH),
            {"code": code, "state": state, "x_platform": SSO_PLATFORM},
        )

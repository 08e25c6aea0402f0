"""Pydantic models for the Identity SDK.

Frozen models for every payload exchanged with the identity provider.
Attributes use Python snake_case names; see ``KeyDecoding`` for how wire
keys are bound to them.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Annotated, Any

import jwt
from pydantic import (
    AliasChoices,
    AliasGenerator,
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .types import KeyDecoding

_CLAIM_PREFIX = "https://authgear.com/claims/user/"


def _wire_names(field_name: str) -> AliasChoices:
    return AliasChoices(field_name, to_camel(field_name))


class WireModel(BaseModel):
    """Base for payloads decoded from the provider.

    A field binds to its snake_case name or its camelCase form, e.g.
    ``expire_at`` or ``expireAt``. Keys are never rewritten, so free-form
    values such as ``ServerErrorDetail.info`` keep the exact keys sent.
    Validating with ``context={"key_decoding": KeyDecoding.USE_DEFAULT_KEYS}``
    disables the camelCase forms.
    """

    model_config = ConfigDict(alias_generator=AliasGenerator(validation_alias=_wire_names))

    @model_validator(mode="before")
    @classmethod
    def _verbatim_keys_only(cls, data: Any, info: ValidationInfo) -> Any:
        context = info.context or {}
        if context.get("key_decoding") is not KeyDecoding.USE_DEFAULT_KEYS:
            return data
        if not isinstance(data, dict):
            return data
        camel_only = {to_camel(name) for name in cls.model_fields} - set(cls.model_fields)
        return {key: value for key, value in data.items() if key not in camel_only}


class ProviderMetadata(WireModel):
    """OpenID Connect discovery document (``/.well-known/openid-configuration``)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    token_endpoint: HttpUrl
    userinfo_endpoint: HttpUrl
    revocation_endpoint: HttpUrl

    issuer: str | None = None
    authorization_endpoint: HttpUrl | None = None
    end_session_endpoint: HttpUrl | None = None
    jwks_uri: HttpUrl | None = None


class TokenResult(WireModel):
    """Token endpoint response."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    token_type: str
    access_token: str = Field(..., min_length=1)
    expires_in: Annotated[int, Field(ge=0)]
    refresh_token: str | None = None
    id_token: str | None = None

    def expires_at(self, now: datetime | None = None) -> datetime:
        """Absolute expiry of the access token relative to ``now``."""
        return (now or datetime.now(UTC)) + timedelta(seconds=self.expires_in)

    def id_token_claims(self) -> dict[str, Any] | None:
        """Decode the ID token payload without verifying its signature.

        The token was received directly from the token endpoint over TLS, so
        the claims are read for display and session bookkeeping only.
        """
        if self.id_token is None:
            return None
        return jwt.decode(
            self.id_token,
            options={"verify_signature": False, "verify_aud": False, "verify_exp": False},
        )


class UserInfo(BaseModel):
    """Claims returned by the userinfo endpoint.

    Claim names are chosen by the provider, so the model binds them by their
    exact wire names. Unrecognised claims are kept as extra fields.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    sub: str
    iss: str | None = None
    is_anonymous: bool | None = Field(default=None, alias=f"{_CLAIM_PREFIX}is_anonymous")
    is_verified: bool | None = Field(default=None, alias=f"{_CLAIM_PREFIX}is_verified")

    @property
    def claims(self) -> dict[str, Any]:
        """All claims keyed by their wire names."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ChallengeToken(WireModel):
    """Short-lived challenge issued by ``/oauth2/challenge``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    token: str
    expire_at: str


class AppSessionToken(WireModel):
    """Token issued by ``/oauth2/app_session_token``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    app_session_token: str
    expire_at: str


class ServerErrorDetail(WireModel):
    """Structured error reported under the ``error`` envelope key."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    message: str
    reason: str
    info: dict[str, Any] | None = None


class ProviderErrorDetail(WireModel):
    """OAuth 2.0 error document (RFC 6749 section 5.2)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    error: str
    error_description: str


class PKCEChallenge(BaseModel):
    """PKCE challenge data for authorization code flow."""

    model_config = ConfigDict(frozen=True)

    code_verifier: str = Field(..., min_length=43, max_length=128)
    code_challenge: str = Field(..., min_length=43)
    code_challenge_method: str = Field(default="S256")

    @field_validator("code_challenge_method")
    @classmethod
    def validate_method(cls, v: str) -> str:
        """Validate PKCE method is S256 (plain is insecure)."""
        if v != "S256":
            msg = "Only S256 code_challenge_method is supported"
            raise ValueError(msg)
        return v

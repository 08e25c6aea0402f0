"""PKCE helpers (RFC 7636) for the authorization-code grant.

The verifier produced here is later passed as ``code_verifier`` to
``request_token`` with ``GrantType.AUTHORIZATION_CODE``.
"""

from __future__ import annotations

import base64
import hashlib
import secrets

from .models import PKCEChallenge

MIN_VERIFIER_LENGTH = 43
MAX_VERIFIER_LENGTH = 128


def _b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def generate_code_verifier(length: int = 64) -> str:
    """Generate a random code verifier of ``length`` URL-safe characters.

    Raises:
        ValueError: If length is outside 43..128.
    """
    if not MIN_VERIFIER_LENGTH <= length <= MAX_VERIFIER_LENGTH:
        msg = "Code verifier length must be between 43 and 128 characters"
        raise ValueError(msg)
    # 3 random bytes encode to 4 characters
    return _b64url(secrets.token_bytes(length * 3 // 4 + 1))[:length]


def generate_code_challenge(code_verifier: str) -> str:
    """S256 challenge: base64url(SHA-256(verifier)) without padding."""
    return _b64url(hashlib.sha256(code_verifier.encode("ascii")).digest())


def create_pkce_challenge(verifier_length: int = 64) -> PKCEChallenge:
    code_verifier = generate_code_verifier(verifier_length)
    return PKCEChallenge(
        code_verifier=code_verifier,
        code_challenge=generate_code_challenge(code_verifier),
    )


def verify_code_challenge(code_verifier: str, code_challenge: str) -> bool:
    """Constant-time check that ``code_verifier`` produces ``code_challenge``."""
    return secrets.compare_digest(generate_code_challenge(code_verifier), code_challenge)


def generate_state(length: int = 32) -> str:
    """Random ``state`` value, also used to correlate SSO callbacks."""
    return secrets.token_urlsafe(length)

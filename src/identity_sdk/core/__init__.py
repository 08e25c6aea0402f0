"""Core components for the Identity SDK.

Request pipeline pieces shared by the callback and blocking clients.
"""

from __future__ import annotations

from .auth_pipeline import AuthenticatedRequestPipeline
from .envelope import EnvelopeError, EnvelopeResult, ResponseEnvelope, decode_envelope, decode_json
from .errors import ErrorFactory
from .metadata_cache import ProviderMetadataCache
from .runner import LoopThread
from .sync_bridge import wait_for
from .token_ops import TokenOperations, build_token_form
from .typed_fetch import TypedFetcher

__all__ = [
    "AuthenticatedRequestPipeline",
    "EnvelopeError",
    "EnvelopeResult",
    "ErrorFactory",
    "LoopThread",
    "ProviderMetadataCache",
    "ResponseEnvelope",
    "TokenOperations",
    "TypedFetcher",
    "build_token_form",
    "decode_envelope",
    "decode_json",
    "wait_for",
]

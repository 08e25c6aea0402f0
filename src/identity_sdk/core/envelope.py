"""JSON decoding and the ``result``/``error`` response envelope.

The identity service wraps its own endpoints' payloads as either
``{"result": ...}`` or ``{"error": {...}}``. The ``error`` key is checked
first and wins even when ``result`` is also present.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..errors import DecodeError, ServerError
from ..models import ServerErrorDetail
from ..types import KeyDecoding

M = TypeVar("M", bound=BaseModel)


def parse_json(data: bytes | None) -> Any:
    """Parse raw bytes as JSON.

    Raises:
        DecodeError: If the body is missing or not valid JSON.
    """
    if not data:
        raise DecodeError(ValueError("Response body is empty"))
    try:
        payload = json.loads(data)
    except (ValueError, UnicodeDecodeError) as e:
        raise DecodeError(e) from e
    return payload


def validate(
    model: type[M],
    payload: Any,
    key_decoding: KeyDecoding = KeyDecoding.CONVERT_FROM_SNAKE_CASE,
) -> M:
    """Validate an already-parsed payload against ``model``.

    The payload is never rewritten; ``key_decoding`` only selects which of
    the model's declared names may bind.
    """
    try:
        return model.model_validate(payload, context={"key_decoding": key_decoding})
    except PydanticValidationError as e:
        raise DecodeError(e) from e


def decode_json(
    data: bytes | None,
    model: type[M],
    key_decoding: KeyDecoding = KeyDecoding.CONVERT_FROM_SNAKE_CASE,
) -> M:
    """Decode a JSON body into ``model``.

    Raises:
        DecodeError: If the body is malformed or does not match the model.
    """
    return validate(model, parse_json(data), key_decoding)


class ResponseEnvelope(Generic[M]):
    """Tagged value decoded from a ``result``/``error`` envelope."""

    def unwrap(self) -> M:
        """Return the payload, or raise ``ServerError`` for the error branch."""
        raise NotImplementedError


@dataclass(frozen=True)
class EnvelopeResult(ResponseEnvelope[M]):
    value: M

    def unwrap(self) -> M:
        return self.value


@dataclass(frozen=True)
class EnvelopeError(ResponseEnvelope[Any]):
    detail: ServerErrorDetail

    def unwrap(self) -> Any:
        raise ServerError(self.detail)


def decode_envelope(
    data: bytes | None,
    model: type[M],
    key_decoding: KeyDecoding = KeyDecoding.CONVERT_FROM_SNAKE_CASE,
) -> ResponseEnvelope[M]:
    """Decode a ``{"result": ...}`` or ``{"error": ...}`` body.

    Raises:
        DecodeError: If the body is not an object, carries neither key, or the
            present key's payload does not match its expected shape.
    """
    payload = parse_json(data)
    if not isinstance(payload, dict):
        raise DecodeError(TypeError("Response envelope is not a JSON object"))

    if "error" in payload:
        return EnvelopeError(validate(ServerErrorDetail, payload["error"], key_decoding))
    if "result" in payload:
        return EnvelopeResult(validate(model, payload["result"], key_decoding))
    raise DecodeError(KeyError("Response envelope has neither 'result' nor 'error'"))

"""
Property-based tests for response decoding.

Property 7: Error Precedence
Property 8: Key Binding
Property 9: Status Classification
"""

import asyncio
import json

import httpx
import pytest
from hypothesis import given, settings, strategies as st

from identity_sdk.core.envelope import EnvelopeError, EnvelopeResult, decode_envelope, decode_json
from identity_sdk.errors import DataTaskError, DecodeError, OIDCError, StatusCodeError
from identity_sdk.http import HTTPTransport
from identity_sdk.models import AppSessionToken, ChallengeToken, ServerErrorDetail
from identity_sdk.types import KeyDecoding

snake_key = st.from_regex(r"[a-z][a-z0-9_]{0,20}", fullmatch=True)
json_scalar = st.none() | st.booleans() | st.integers() | st.text(max_size=20)
json_value = st.recursive(
    json_scalar,
    lambda children: st.lists(children, max_size=3) | st.dictionaries(st.text(max_size=10), children, max_size=3),
    max_leaves=8,
)

error_detail = st.fixed_dictionaries({
    "name": st.text(min_size=1, max_size=20),
    "message": st.text(max_size=40),
    "reason": st.text(min_size=1, max_size=20),
})


class TestEnvelopeProperties:
    """Property tests for the result/error envelope."""

    @given(detail=error_detail, result=st.dictionaries(snake_key, json_scalar, max_size=4))
    @settings(max_examples=100)
    def test_error_wins_over_result(self, detail: dict, result: dict) -> None:
        """
        Property 7: Error Precedence
        A body carrying a valid ``error`` decodes to the error branch whatever
        ``result`` holds.
        """
        body = json.dumps({"result": result, "error": detail}).encode()

        envelope = decode_envelope(body, ChallengeToken)

        assert isinstance(envelope, EnvelopeError)
        assert envelope.detail.reason == detail["reason"]

    @given(token=st.text(max_size=40), expire_at=st.text(max_size=40))
    @settings(max_examples=50)
    def test_result_branch_keeps_values(self, token: str, expire_at: str) -> None:
        body = json.dumps({"result": {"token": token, "expireAt": expire_at}}).encode()

        envelope = decode_envelope(body, ChallengeToken)

        assert isinstance(envelope, EnvelopeResult)
        assert envelope.unwrap() == ChallengeToken(token=token, expire_at=expire_at)


class TestKeyBindingProperties:
    """Property tests for binding snake_case and camelCase keys to fields."""

    @given(
        token=st.text(max_size=40),
        expire_at=st.text(max_size=40),
        camel=st.booleans(),
    )
    @settings(max_examples=100)
    def test_both_spellings_bind(self, token: str, expire_at: str, camel: bool) -> None:
        """
        Property 8: Key Binding
        A field binds from its snake_case name and from its camelCase name.
        """
        payload = (
            {"appSessionToken": token, "expireAt": expire_at}
            if camel
            else {"app_session_token": token, "expire_at": expire_at}
        )

        decoded = decode_json(json.dumps(payload).encode(), AppSessionToken)

        assert decoded == AppSessionToken(app_session_token=token, expire_at=expire_at)

    @given(snake=st.text(max_size=20), camel=st.text(max_size=20))
    @settings(max_examples=50)
    def test_snake_case_key_wins_when_both_are_present(self, snake: str, camel: str) -> None:
        body = json.dumps({"token": "t", "expire_at": snake, "expireAt": camel}).encode()

        assert decode_json(body, ChallengeToken).expire_at == snake

    @given(info=st.dictionaries(st.text(max_size=20), json_value, max_size=6))
    @settings(max_examples=100)
    def test_error_info_is_returned_verbatim(self, info: dict) -> None:
        body = json.dumps({
            "error": {"name": "Invalid", "message": "m", "reason": "R", "info": info}
        }).encode()

        envelope = decode_envelope(body, ChallengeToken)

        assert isinstance(envelope, EnvelopeError)
        assert envelope.detail == ServerErrorDetail(name="Invalid", message="m", reason="R", info=info)
        assert envelope.detail.info == info

    @given(token=st.text(max_size=40), expire_at=st.text(max_size=40))
    @settings(max_examples=50)
    def test_default_keys_ignore_camel_case(self, token: str, expire_at: str) -> None:
        body = json.dumps({"token": token, "expireAt": expire_at}).encode()

        with pytest.raises(DecodeError):
            decode_json(body, ChallengeToken, KeyDecoding.USE_DEFAULT_KEYS)


class TestStatusClassificationProperties:
    """Property tests for transport outcome classification."""

    @staticmethod
    def _perform(response: httpx.Response):
        async def _send():
            client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: response))
            transport = HTTPTransport(client)
            try:
                return await transport.send(client.build_request("GET", "https://auth.example.com/x"))
            finally:
                await transport.aclose()

        return asyncio.run(_send())

    @given(status=st.integers(min_value=200, max_value=299), body=st.binary(max_size=64))
    @settings(max_examples=50)
    def test_2xx_returns_body(self, status: int, body: bytes) -> None:
        """
        Property 9: Status Classification
        Any 2xx response resolves to its exact body.
        """
        data, response = self._perform(httpx.Response(status, content=body))

        assert data == body
        assert response.status_code == status

    @given(
        status=st.integers(min_value=300, max_value=599),
        body=st.binary(max_size=64).filter(lambda b: b"error_description" not in b),
    )
    @settings(max_examples=50)
    def test_non_2xx_without_oauth_document(self, status: int, body: bytes) -> None:
        with pytest.raises(StatusCodeError) as exc_info:
            self._perform(httpx.Response(status, content=body))

        assert exc_info.value.status_code == status
        assert exc_info.value.body == body

    @given(
        status=st.integers(min_value=400, max_value=599),
        error=st.text(min_size=1, max_size=20),
        description=st.text(max_size=40),
    )
    @settings(max_examples=50)
    def test_non_2xx_with_oauth_document(self, status: int, error: str, description: str) -> None:
        document = {"error": error, "error_description": description}

        with pytest.raises(OIDCError) as exc_info:
            self._perform(httpx.Response(status, json=document))

        assert (exc_info.value.error, exc_info.value.error_description) == (error, description)

    def test_read_failure_only_matters_on_success(self, failing_stream) -> None:
        with pytest.raises(DataTaskError):
            self._perform(httpx.Response(200, stream=failing_stream))

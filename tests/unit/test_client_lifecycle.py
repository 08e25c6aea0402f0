"""Unit tests for client lifetime, ownership and wiring."""

from __future__ import annotations

import asyncio
import threading

import httpx
import pytest
from opentelemetry import trace

import identity_sdk
from identity_sdk.async_client import AsyncIdentityAPIClient
from identity_sdk.client import IdentityAPIClient
from identity_sdk.config import IdentityClientConfig, TelemetryConfig
from identity_sdk.errors import InvalidResponseError
from identity_sdk.types import GrantType

DISCOVERY = "/.well-known/openid-configuration"


@pytest.fixture
def slow_stub(stub, sample_token_response):
    document = stub.routes[("GET", DISCOVERY)]

    async def slow_discovery(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(0.2)
        return httpx.Response(200, headers=document.headers, content=document.content)

    stub.add("GET", DISCOVERY, slow_discovery)
    stub.add("POST", "/oauth2/token", httpx.Response(200, json=sample_token_response))
    return stub


class TestClose:
    """Tests for closing a client with work in flight."""

    def test_close_waits_for_in_flight_operation(self, base_config, slow_stub) -> None:
        client = AsyncIdentityAPIClient(base_config, transport=httpx.MockTransport(slow_stub))

        future = client.request_token(GrantType.REFRESH_TOKEN, "client-a", refresh_token="r1")
        client.close()

        assert future.done()
        assert future.result().access_token == "a1"
        assert len(slow_stub.calls("/oauth2/token")) == 1

    def test_operation_after_close_fails_with_typed_error(self, base_config, stub) -> None:
        client = AsyncIdentityAPIClient(base_config, transport=httpx.MockTransport(stub))
        client.close()

        future = client.request_challenge("anonymous")

        with pytest.raises(InvalidResponseError, match="closed"):
            future.result(timeout=5)
        assert stub.requests == []

    def test_handler_is_called_after_close(self, base_config, stub) -> None:
        client = AsyncIdentityAPIClient(base_config, transport=httpx.MockTransport(stub))
        client.close()
        delivered: list = []

        client.request_revocation("r2", handler=delivered.append)

        assert len(delivered) == 1
        assert isinstance(delivered[0].exception(), InvalidResponseError)

    def test_cached_metadata_is_not_served_after_close(self, base_config, stub) -> None:
        client = AsyncIdentityAPIClient(base_config, transport=httpx.MockTransport(stub))
        client.fetch_oidc_configuration().result(timeout=5)
        client.close()

        with pytest.raises(InvalidResponseError):
            client.fetch_oidc_configuration().result(timeout=5)

    def test_blocking_client_raises_after_close(self, base_config, stub) -> None:
        client = IdentityAPIClient(base_config, transport=httpx.MockTransport(stub), timeout=5.0)
        client.close()

        with pytest.raises(InvalidResponseError):
            client.fetch_oidc_configuration()

    def test_close_is_idempotent(self, base_config, stub) -> None:
        client = AsyncIdentityAPIClient(base_config, transport=httpx.MockTransport(stub))

        client.close()
        client.close()

        assert client.closed is True

    def test_close_from_handler_is_rejected(self, async_client) -> None:
        errors: list[Exception] = []
        fired = threading.Event()

        def handler(future) -> None:
            try:
                async_client.close()
            except RuntimeError as e:
                errors.append(e)
            finally:
                fired.set()

        async_client.request_challenge("anonymous", handler=handler)

        assert fired.wait(timeout=5)
        assert len(errors) == 1
        assert async_client.closed is False


class TestOwnership:
    """Tests for closing a wrapped callback client."""

    def test_wrapped_client_stays_open(self, async_client) -> None:
        wrapper = IdentityAPIClient(async_client.config, client=async_client, timeout=5.0)

        wrapper.close()

        assert async_client.closed is False
        assert async_client.fetch_oidc_configuration().result(timeout=5) is not None

    def test_created_client_is_closed(self, base_config, stub) -> None:
        wrapper = IdentityAPIClient(base_config, transport=httpx.MockTransport(stub))

        wrapper.close()

        assert wrapper.async_client.closed is True


class TestWiring:
    """Tests for configuration reaching the transport and endpoints."""

    def test_disabled_telemetry_gives_noop_tracer(self, stub) -> None:
        config = IdentityClientConfig(
            endpoint="https://auth.example.com",
            telemetry=TelemetryConfig(enabled=False),
        )

        with AsyncIdentityAPIClient(config, transport=httpx.MockTransport(stub)) as client:
            assert isinstance(client._transport.tracer, trace.NoOpTracer)
            client.fetch_oidc_configuration().result(timeout=5)

        assert len(stub.calls(DISCOVERY)) == 1

    def test_fixed_paths_join_onto_endpoint_prefix(self, stub) -> None:
        config = IdentityClientConfig(endpoint="https://auth.example.com/tenant/")
        stub.add(
            "POST",
            "/tenant/oauth2/challenge",
            httpx.Response(200, json={"result": {"token": "abc", "expire_at": "x"}}),
        )

        with AsyncIdentityAPIClient(config, transport=httpx.MockTransport(stub)) as client:
            assert client.metadata_cache.discovery_url == (
                "https://auth.example.com/tenant/.well-known/openid-configuration"
            )
            assert client.request_challenge("anonymous").result(timeout=5).token == "abc"

    def test_pkce_helpers_are_exported(self) -> None:
        challenge = identity_sdk.create_pkce_challenge()

        assert identity_sdk.verify_code_challenge(challenge.code_verifier, challenge.code_challenge)
        assert "generate_state" in identity_sdk.__all__

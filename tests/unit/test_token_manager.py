"""Tests for token caching and single-flight refresh."""

import asyncio
import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from truelayer_client.auth.credentials import ClientCredentials, StaticTokenCredentials
from truelayer_client.auth.manager import TokenManager
from truelayer_client.exceptions import AuthError, AuthErrorKind

TOKEN_ENDPOINT = "https://auth.tl.test/connect/token"


class FakeAuthServer:
    """Token endpoint that counts exchanges and can be held open."""

    def __init__(self, expires_in: int = 3600, status: int = 200):
        self.expires_in = expires_in
        self.status = status
        self.calls = 0
        self.refresh_token = None
        self.gate = asyncio.Event()
        self.gate.set()

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        await self.gate.wait()
        if self.status != 200:
            return httpx.Response(self.status, json={"error": "invalid_client"})
        body = {
            "access_token": f"token-{self.calls}",
            "expires_in": self.expires_in,
            "token_type": "Bearer",
        }
        if self.refresh_token:
            body["refresh_token"] = self.refresh_token
        return httpx.Response(200, json=body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


def make_manager(server: FakeAuthServer, **kwargs) -> TokenManager:
    credentials = ClientCredentials(client_id="test-client", client_secret="test-secret")
    return TokenManager(credentials, TOKEN_ENDPOINT, server.client(), **kwargs)


class TestTokenCaching:
    """Test cached tokens are reused while valid."""

    @pytest.mark.asyncio
    async def test_first_call_fetches_token(self):
        """Test an empty cache triggers one exchange."""
        server = FakeAuthServer()
        manager = make_manager(server)

        token = await manager.get_token()

        assert token.value == "token-1"
        assert manager.cached_token is token
        assert server.calls == 1

    @pytest.mark.asyncio
    async def test_hour_long_token_is_reused(self):
        """Test a token valid for an hour causes no further exchanges."""
        server = FakeAuthServer(expires_in=3600)
        manager = make_manager(server)

        tokens = [await manager.get_token() for _ in range(10)]

        assert server.calls == 1
        assert all(t is tokens[0] for t in tokens)

    @pytest.mark.asyncio
    async def test_token_inside_margin_is_refreshed(self):
        """Test tokens expiring within the refresh margin are replaced."""
        server = FakeAuthServer(expires_in=10)
        manager = make_manager(server, refresh_margin=timedelta(seconds=30))

        first = await manager.get_token()
        second = await manager.get_token()

        assert server.calls == 2
        assert first.value == "token-1"
        assert second.value == "token-2"


class TestSingleFlight:
    """Test concurrent callers share one refresh."""

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_exchange(self):
        """Test N concurrent callers cause exactly one token request."""
        server = FakeAuthServer()
        server.gate.clear()
        manager = make_manager(server)

        callers = [asyncio.create_task(manager.get_token()) for _ in range(20)]
        await asyncio.sleep(0)
        assert manager.refresh_in_progress
        server.gate.set()
        tokens = await asyncio.gather(*callers)

        assert server.calls == 1
        assert {t.value for t in tokens} == {"token-1"}
        assert not manager.refresh_in_progress

    @pytest.mark.asyncio
    async def test_failure_is_shared_by_all_waiters(self):
        """Test every waiter receives the same AuthError from one exchange."""
        server = FakeAuthServer(status=401)
        manager = make_manager(server)

        results = await asyncio.gather(
            *(manager.get_token() for _ in range(5)), return_exceptions=True
        )

        assert server.calls == 1
        assert all(isinstance(r, AuthError) for r in results)
        assert all(r is results[0] for r in results)
        assert results[0].kind == AuthErrorKind.REJECTED

    @pytest.mark.asyncio
    async def test_failure_is_not_cached(self):
        """Test the next call after a failed refresh starts a new exchange."""
        server = FakeAuthServer(status=503)
        manager = make_manager(server)

        with pytest.raises(AuthError):
            await manager.get_token()

        server.status = 200
        token = await manager.get_token()

        assert server.calls == 2
        assert token.value == "token-2"

    @pytest.mark.asyncio
    async def test_cancelled_caller_does_not_cancel_refresh(self):
        """Test cancelling one waiter leaves the shared refresh running."""
        server = FakeAuthServer()
        server.gate.clear()
        manager = make_manager(server)

        first = asyncio.create_task(manager.get_token())
        second = asyncio.create_task(manager.get_token())
        await asyncio.sleep(0)

        first.cancel()
        with pytest.raises(asyncio.CancelledError):
            await first

        server.gate.set()
        token = await second

        assert token.value == "token-1"
        assert server.calls == 1
        assert manager.cached_token is token

    @pytest.mark.asyncio
    async def test_close_cancels_in_flight_refresh(self):
        """Test close() cancels a pending exchange."""
        server = FakeAuthServer()
        server.gate.clear()
        manager = make_manager(server)

        waiter = asyncio.create_task(manager.get_token())
        await asyncio.sleep(0)
        assert manager.refresh_in_progress

        await manager.close()

        with pytest.raises(asyncio.CancelledError):
            await waiter
        assert not manager.refresh_in_progress


class TestInvalidation:
    """Test dropping rejected tokens."""

    @pytest.mark.asyncio
    async def test_invalidate_forces_new_exchange(self):
        """Test an invalidated token is replaced on the next call."""
        server = FakeAuthServer()
        manager = make_manager(server)

        first = await manager.get_token()
        manager.invalidate(first)
        assert manager.cached_token is None

        second = await manager.get_token()
        assert second.value == "token-2"
        assert server.calls == 2

    @pytest.mark.asyncio
    async def test_stale_invalidation_keeps_newer_token(self):
        """Test invalidating an already replaced token is a no-op."""
        server = FakeAuthServer()
        manager = make_manager(server)

        stale = await manager.get_token()
        manager.invalidate()
        current = await manager.get_token()

        manager.invalidate(stale)

        assert manager.cached_token is current
        assert server.calls == 2

    def test_invalidate_on_empty_cache(self):
        """Test invalidating an empty cache does nothing."""
        manager = make_manager(FakeAuthServer())
        manager.invalidate()
        assert manager.cached_token is None


class TestGrantSwitching:
    """Test the manager follows refresh tokens issued by the server."""

    @pytest.mark.asyncio
    async def test_refresh_token_switches_grant(self):
        """Test a returned refresh token is used for the next exchange."""
        server = FakeAuthServer()
        server.refresh_token = "rt-1"
        seen = []

        async def recording_handler(request):
            seen.append(request)
            return await server.handler(request)

        manager = TokenManager(
            ClientCredentials(client_id="test-client", client_secret="test-secret"),
            TOKEN_ENDPOINT,
            httpx.AsyncClient(transport=httpx.MockTransport(recording_handler)),
        )

        assert manager.grant_type == "client_credentials"
        await manager.get_token()
        assert manager.grant_type == "refresh_token"

        manager.invalidate()
        await manager.get_token()

        bodies = [json.loads(r.content) for r in seen]
        assert bodies[0]["grant_type"] == "client_credentials"
        assert bodies[1]["grant_type"] == "refresh_token"
        assert bodies[1]["refresh_token"] == "rt-1"

    @pytest.mark.asyncio
    async def test_static_token_cannot_be_renewed(self):
        """Test a rejected pre-fetched token surfaces as AuthError."""
        manager = TokenManager(
            StaticTokenCredentials(access_token="prefetched"),
            TOKEN_ENDPOINT,
            httpx.AsyncClient(),
        )

        token = await manager.get_token()
        assert token.value == "prefetched"

        manager.invalidate(token)
        with pytest.raises(AuthError) as exc_info:
            await manager.get_token()
        assert exc_info.value.kind == AuthErrorKind.REJECTED

    @pytest.mark.asyncio
    async def test_static_token_inside_margin_is_reused(self):
        """Test a pre-fetched token close to expiry is served until it expires."""
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=10)
        manager = TokenManager(
            StaticTokenCredentials(access_token="prefetched", expires_at=expires_at),
            TOKEN_ENDPOINT,
            httpx.AsyncClient(),
            refresh_margin=timedelta(seconds=30),
        )

        first = await manager.get_token()
        second = await manager.get_token()

        assert second is first
        assert not manager.refresh_in_progress

    @pytest.mark.asyncio
    async def test_static_token_rejected_after_expiry(self):
        """Test a pre-fetched token stops being served once it has expired."""
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=0.2)
        manager = TokenManager(
            StaticTokenCredentials(access_token="prefetched", expires_at=expires_at),
            TOKEN_ENDPOINT,
            httpx.AsyncClient(),
        )

        await manager.get_token()
        await asyncio.sleep(0.3)

        with pytest.raises(AuthError) as exc_info:
            await manager.get_token()
        assert exc_info.value.kind == AuthErrorKind.REJECTED

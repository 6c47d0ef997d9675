import json
import sys
from pathlib import Path
from typing import Callable, Dict, List, Tuple

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from truelayer_client import (  # noqa: E402
    ClientConfig,
    ClientCredentials,
    Environment,
    RetryPolicy,
    SigningKey,
    TrueLayerClient,
)

BASE_URL = "https://tl.test"
TOKEN_PATH = "/connect/token"
KEY_ID = "test-kid"

# Retries without noticeable sleeps
FAST_RETRY = RetryPolicy(
    max_attempts=3, initial_delay=0.001, max_delay=0.005, total_timeout=5.0
)


def pytest_configure(config):
    # Register the asyncio marker so pytest doesn't warn when it's used.
    config.addinivalue_line(
        "markers", "asyncio: mark test to run in an asyncio event loop"
    )
    # Add custom markers for test organization
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


@pytest.fixture(autouse=True)
def mock_env_vars(monkeypatch):
    """Set required environment variables for tests.

    This fixture automatically sets up the minimum required environment
    variables needed for the Settings class to initialize properly during tests.
    """
    # Authentication configuration
    monkeypatch.setenv("TRUELAYER_CLIENT_ID", "test-client-id")
    monkeypatch.setenv("TRUELAYER_CLIENT_SECRET", "test-client-secret")

    # Variables a developer machine might export
    for name in (
        "TRUELAYER_ACCESS_TOKEN",
        "TRUELAYER_SIGNING_KEY_ID",
        "TRUELAYER_KID",
        "TRUELAYER_SIGNING_PRIVATE_KEY",
        "TRUELAYER_SIGNING_PRIVATE_KEY_PATH",
        "TRUELAYER_ENVIRONMENT",
        "TRUELAYER_AUTH_URL",
        "TRUELAYER_PAYMENTS_URL",
        "TRUELAYER_HPP_URL",
    ):
        monkeypatch.delenv(name, raising=False)

    # Logging
    monkeypatch.setenv("TRUELAYER_LOG_LEVEL", "INFO")

    yield


def _pem(private_key) -> bytes:
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


@pytest.fixture(scope="session")
def p521_private_key():
    """EC P-521 private key, generated once per test session."""
    return ec.generate_private_key(ec.SECP521R1())


@pytest.fixture(scope="session")
def p521_pem(p521_private_key) -> bytes:
    """PEM encoding of the session P-521 key."""
    return _pem(p521_private_key)


@pytest.fixture(scope="session")
def p256_pem() -> bytes:
    """PEM encoding of a key on the wrong curve for ES512."""
    return _pem(ec.generate_private_key(ec.SECP256R1()))


@pytest.fixture
def signing_key(p521_pem):
    """Signing key backed by the session P-521 key."""
    return SigningKey(KEY_ID, p521_pem)


def respond(status: int = 200, json_body=None, headers=None):
    """Return a handler that builds a fresh response on every call."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json=json_body, headers=headers)

    return handler


def snapshot(request: httpx.Request) -> httpx.Request:
    """Copy a request as it was sent.

    The pipeline resends the same request object and updates its headers
    in place, so recording the live object would make every attempt look
    like the last one.
    """
    return httpx.Request(
        request.method,
        request.url,
        headers=request.headers.copy(),
        content=request.content,
    )


class MockTrueLayer:
    """In-memory stand-in for the auth server and the payments API.

    Token requests are answered with ``access-token-<n>``; API routes are
    registered per ``(method, path)`` with a sequence of handlers, the
    last of which repeats.
    """

    def __init__(self, expires_in: int = 3600):
        self.expires_in = expires_in
        self.token_response: Callable = self._issue_token
        self.auth_requests: List[httpx.Request] = []
        self.api_requests: List[httpx.Request] = []
        self.routes: Dict[Tuple[str, str], List[Callable]] = {}

    def _issue_token(self, request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "access_token": f"access-token-{len(self.auth_requests)}",
                "expires_in": self.expires_in,
                "token_type": "Bearer",
                "scope": "payments",
            },
        )

    def route(self, method: str, path: str, *handlers: Callable) -> None:
        self.routes[(method.upper(), path)] = list(handlers)

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == TOKEN_PATH:
            self.auth_requests.append(snapshot(request))
            return self.token_response(request)

        self.api_requests.append(snapshot(request))
        handlers = self.routes.get((request.method, request.url.path))
        if not handlers:
            return httpx.Response(
                404,
                json={"type": "not_found", "title": "Not Found", "status": 404},
            )
        current = handlers.pop(0) if len(handlers) > 1 else handlers[0]
        return current(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def auth_bodies(self) -> List[dict]:
        return [json.loads(r.content) for r in self.auth_requests]


@pytest.fixture
def mock_truelayer():
    """Fresh mock auth server and payments API."""
    return MockTrueLayer()


@pytest.fixture
def make_client(signing_key):
    """Factory building a TrueLayerClient wired to a MockTrueLayer."""

    def factory(server: MockTrueLayer, **overrides) -> TrueLayerClient:
        options = {
            "credentials": ClientCredentials(
                client_id="test-client-id", client_secret="test-client-secret"
            ),
            "signing_key": signing_key,
            "environment": Environment.from_single_url(BASE_URL),
            "retry_policy": FAST_RETRY,
        }
        options.update(overrides)
        return TrueLayerClient(ClientConfig(**options), transport=server.transport)

    return factory


@pytest.fixture
def payment_json():
    """Payment resource as returned by GET /payments/{id}."""

    def build(status: str = "executed", payment_id: str = "pay-1") -> dict:
        return {
            "id": payment_id,
            "amount_in_minor": 100,
            "currency": "GBP",
            "user": {"id": "user-1"},
            "payment_method": {
                "type": "bank_transfer",
                "provider_selection": {"type": "user_selected"},
                "beneficiary": {
                    "type": "merchant_account",
                    "merchant_account_id": "ma-1",
                },
            },
            "created_at": "2026-01-01T10:00:00Z",
            "status": status,
        }

    return build

"""TrueLayer API client package.

This package provides an asynchronous client for the TrueLayer payments
APIs. It includes OAuth2 token management, request signing, retrying
delivery and typed request/response models.

:var __version__: Current package version
:type __version__: str
"""

__version__ = "0.1.0"

from .auth.credentials import (  # noqa: E402
    ClientCredentials,
    RefreshTokenCredentials,
    StaticTokenCredentials,
)
from .client import TrueLayerClient  # noqa: E402
from .config import ClientConfig, Environment, Settings  # noqa: E402
from .exceptions import (  # noqa: E402
    ApiError,
    AuthError,
    AuthErrorKind,
    ConfigurationError,
    DecodeError,
    PollTimeoutError,
    SigningError,
    SigningErrorKind,
    TransportError,
    TrueLayerError,
)
from .pollable import PollOptions, poll_until, poll_until_terminal_state  # noqa: E402
from .signing.keys import SigningKey  # noqa: E402
from .utils.http.retry import RetryPolicy  # noqa: E402

__all__ = [
    "__version__",
    "TrueLayerClient",
    "ClientConfig",
    "Environment",
    "Settings",
    "ClientCredentials",
    "RefreshTokenCredentials",
    "StaticTokenCredentials",
    "SigningKey",
    "RetryPolicy",
    "PollOptions",
    "poll_until",
    "poll_until_terminal_state",
    "TrueLayerError",
    "ApiError",
    "AuthError",
    "AuthErrorKind",
    "ConfigurationError",
    "DecodeError",
    "PollTimeoutError",
    "SigningError",
    "SigningErrorKind",
    "TransportError",
]

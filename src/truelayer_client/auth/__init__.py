"""Authentication module for the TrueLayer client.

This module provides access token acquisition and caching. Credentials
variants are served by pluggable token providers registered by grant type.

:var __all__: List of public exports from this module
:type __all__: List[str]
"""

# Import providers to trigger registration
from . import (  # noqa: F401  # imported for side effects (provider registration)
    providers,
)
from .base import BaseTokenProvider, OAuthTokenProvider
from .credentials import (
    ClientCredentials,
    Credentials,
    RefreshTokenCredentials,
    StaticTokenCredentials,
)
from .manager import TokenManager
from .registry import TokenProviderRegistry, register_provider

__all__ = [
    "TokenManager",
    "TokenProviderRegistry",
    "register_provider",
    "BaseTokenProvider",
    "OAuthTokenProvider",
    "Credentials",
    "ClientCredentials",
    "RefreshTokenCredentials",
    "StaticTokenCredentials",
]

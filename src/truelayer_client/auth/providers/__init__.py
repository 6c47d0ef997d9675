"""Token providers package.

This package contains one provider per supported credentials variant.
Each provider is automatically registered when imported.
"""

# Import providers to trigger auto-registration
from .client_credentials import ClientCredentialsProvider
from .refresh_token import RefreshTokenProvider
from .static import StaticTokenProvider

__all__ = [
    "ClientCredentialsProvider",
    "RefreshTokenProvider",
    "StaticTokenProvider",
]

"""Manage registration and discovery of token providers.

Providers are keyed by the ``grant_type`` tag of the credentials they
accept, so resolving a provider for a credentials value is a single
dictionary lookup performed once per token manager.

Examples
--------
.. code-block:: python

   from truelayer_client.auth.registry import register_provider, TokenProviderRegistry
   from truelayer_client.auth.base import BaseTokenProvider

   @register_provider("example")
   class ExampleProvider(BaseTokenProvider):
       def __init__(self, credentials, token_endpoint):
           super().__init__(token_endpoint)

       @property
       def grant_type(self) -> str:
           return "example"

       async def fetch_token(self, client):
           raise NotImplementedError
"""

import logging
from typing import Any, Dict, Optional, Type

from .base import BaseTokenProvider

logger = logging.getLogger(__name__)


class TokenProviderRegistry:
    """Registry for token providers.

    Manage registration, lookup, and instantiation of providers.
    """

    _providers: Dict[str, Type[BaseTokenProvider]] = {}

    @classmethod
    def register(
        cls, grant_type: str, provider_class: Type[BaseTokenProvider]
    ) -> None:
        """Register a provider class.

        :param grant_type: Credentials tag handled by the provider.
        :param provider_class: Provider class to register.
        :raises ValueError: If the grant type is already registered.
        """
        if grant_type in cls._providers:
            raise ValueError(f"Grant type '{grant_type}' is already registered")

        cls._providers[grant_type] = provider_class
        logger.debug(f"Registered token provider: {grant_type} -> {provider_class.__name__}")

    @classmethod
    def unregister(cls, grant_type: str) -> None:
        """Unregister a provider.

        :param grant_type: Grant type to unregister.
        """
        if grant_type in cls._providers:
            del cls._providers[grant_type]
            logger.debug(f"Unregistered token provider: {grant_type}")

    @classmethod
    def get_provider_class(cls, grant_type: str) -> Optional[Type[BaseTokenProvider]]:
        """Return a registered provider class.

        :param grant_type: Grant type to look up.
        :return: Provider class if registered, otherwise None.
        """
        return cls._providers.get(grant_type)

    @classmethod
    def create_provider(cls, credentials: Any, token_endpoint: str) -> BaseTokenProvider:
        """Create the provider matching a credentials value.

        :param credentials: Credentials carrying a ``grant_type`` tag.
        :param token_endpoint: OAuth2 token endpoint URL.
        :return: Provider instance.
        :raises ValueError: If no provider handles the credentials' grant type.
        """
        grant_type = getattr(credentials, "grant_type", None)
        provider_class = cls.get_provider_class(grant_type) if grant_type else None
        if not provider_class:
            available = ", ".join(cls._providers.keys())
            raise ValueError(
                f"Unknown grant type: '{grant_type}'. "
                f"Available providers: {available or 'none'}"
            )

        return provider_class(credentials, token_endpoint)

    @classmethod
    def list_providers(cls) -> Dict[str, Type[BaseTokenProvider]]:
        """List all registered providers.

        :return: Mapping of grant types to provider classes.
        """
        return cls._providers.copy()


def register_provider(grant_type: str):
    """Return a decorator to auto-register a provider class.

    Usage
    -----
    .. code-block:: python

       @register_provider("client_credentials")
       class ClientCredentialsProvider(OAuthTokenProvider):
           ...

    :param grant_type: Credentials tag handled by the provider.
    :return: Decorator function.
    """

    def decorator(cls: Type[BaseTokenProvider]) -> Type[BaseTokenProvider]:
        TokenProviderRegistry.register(grant_type, cls)
        return cls

    return decorator

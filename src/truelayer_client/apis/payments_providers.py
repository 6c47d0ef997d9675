"""Payments providers API."""

from typing import Optional

from ..config.environment import Environment
from ..models.providers import Provider
from ..utils.http.client import AuthenticatedClient
from .base import BaseApi, resource_path


class PaymentsProvidersApi(BaseApi):
    """Typed access to the payments providers API.

    Lookups are scoped to ``client_id`` when one is known, so only the
    capabilities available to this client are returned.

    :param client: Pipeline client
    :type client: AuthenticatedClient
    :param environment: Environment providing base URLs
    :type environment: Environment
    :param client_id: Client identifier sent with every lookup
    :type client_id: Optional[str]
    """

    def __init__(
        self,
        client: AuthenticatedClient,
        environment: Environment,
        client_id: Optional[str] = None,
    ):
        super().__init__(client, environment)
        self.client_id = client_id

    async def get_by_id(self, provider_id: str) -> Optional[Provider]:
        """Fetch a provider; None if it does not exist."""
        params = {"client_id": self.client_id} if self.client_id else None
        return await self._get_optional(
            resource_path("payments-providers", provider_id), Provider, params=params
        )

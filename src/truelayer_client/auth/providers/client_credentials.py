"""Client-credentials token provider.

Authenticates the application itself with its client id and secret.
When the authorization server also issues a refresh token, later
refreshes switch to the refresh-token grant.
"""

import logging
from typing import Any, Dict

from ..base import BaseTokenProvider, OAuthTokenProvider
from ..credentials import ClientCredentials, RefreshTokenCredentials
from ..registry import register_provider
from .refresh_token import RefreshTokenProvider

logger = logging.getLogger(__name__)


@register_provider("client_credentials")
class ClientCredentialsProvider(OAuthTokenProvider):
    """Exchange a client id and secret for an access token.

    :param credentials: Client credentials to present
    :type credentials: ClientCredentials
    :param token_endpoint: OAuth2 token endpoint URL
    :type token_endpoint: str
    """

    def __init__(self, credentials: ClientCredentials, token_endpoint: str):
        super().__init__(token_endpoint)
        self.credentials = credentials

    @property
    def grant_type(self) -> str:
        """
        Return the grant type identifier.

        :return: Grant type 'client_credentials'
        :rtype: str
        """
        return "client_credentials"

    def build_request_body(self) -> Dict[str, Any]:
        return {
            "grant_type": self.grant_type,
            "client_id": self.credentials.client_id,
            "client_secret": self.credentials.client_secret.get_secret_value(),
            "scope": self.credentials.scope,
        }

    def with_refresh_token(self, refresh_token: str) -> BaseTokenProvider:
        logger.debug("Switching to refresh_token grant for subsequent refreshes")
        return RefreshTokenProvider(
            RefreshTokenCredentials(
                client_id=self.credentials.client_id,
                client_secret=self.credentials.client_secret,
                refresh_token=refresh_token,
            ),
            self.token_endpoint,
        )

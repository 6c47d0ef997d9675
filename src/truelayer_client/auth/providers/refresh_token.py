"""Refresh-token provider.

This module implements the OAuth2 refresh-token grant, used either when
the caller supplies a refresh token up front or after a client-credentials
grant returned one.
"""

from typing import Any, Dict

from ..base import BaseTokenProvider, OAuthTokenProvider
from ..credentials import RefreshTokenCredentials
from ..registry import register_provider


@register_provider("refresh_token")
class RefreshTokenProvider(OAuthTokenProvider):
    """Exchange a refresh token for a new access token.

    :param credentials: Client id, secret and refresh token
    :type credentials: RefreshTokenCredentials
    :param token_endpoint: OAuth2 token endpoint URL
    :type token_endpoint: str
    """

    def __init__(self, credentials: RefreshTokenCredentials, token_endpoint: str):
        super().__init__(token_endpoint)
        self.credentials = credentials

    @property
    def grant_type(self) -> str:
        return "refresh_token"

    def build_request_body(self) -> Dict[str, Any]:
        return {
            "grant_type": self.grant_type,
            "client_id": self.credentials.client_id,
            "client_secret": self.credentials.client_secret.get_secret_value(),
            "refresh_token": self.credentials.refresh_token.get_secret_value(),
        }

    def with_refresh_token(self, refresh_token: str) -> BaseTokenProvider:
        # Refresh tokens may be rotated on every use
        if refresh_token == self.credentials.refresh_token.get_secret_value():
            return self
        return RefreshTokenProvider(
            RefreshTokenCredentials(
                client_id=self.credentials.client_id,
                client_secret=self.credentials.client_secret,
                refresh_token=refresh_token,
            ),
            self.token_endpoint,
        )

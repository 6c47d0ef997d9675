"""Provider for access tokens obtained outside of this client."""

import logging

import httpx

from ...exceptions import AuthError, AuthErrorKind
from ...models.auth import AccessToken
from ..base import BaseTokenProvider
from ..credentials import StaticTokenCredentials
from ..registry import register_provider

logger = logging.getLogger(__name__)


@register_provider("static")
class StaticTokenProvider(BaseTokenProvider):
    """Hand out a pre-fetched access token.

    The token is issued once. A pre-fetched token cannot be renewed, so any
    later fetch (after expiry or after the API rejected it) fails with
    ``AuthError(kind=REJECTED)``.

    :param credentials: The pre-fetched token and its optional expiry
    :type credentials: StaticTokenCredentials
    :param token_endpoint: Unused; accepted for registry compatibility
    :type token_endpoint: str
    """

    def __init__(self, credentials: StaticTokenCredentials, token_endpoint: str):
        super().__init__(token_endpoint)
        self.credentials = credentials
        self._issued = False

    @property
    def grant_type(self) -> str:
        return "static"

    @property
    def renewable(self) -> bool:
        return False

    async def fetch_token(self, client: httpx.AsyncClient) -> AccessToken:
        if self._issued:
            logger.warning("Pre-fetched access token is no longer usable")
            raise AuthError(
                "The supplied access token expired or was rejected and cannot be renewed",
                kind=AuthErrorKind.REJECTED,
            )
        self._issued = True
        token = AccessToken(
            value=self.credentials.access_token.get_secret_value(),
            expires_at=self.credentials.expires_at,
        )
        if not token.is_valid():
            raise AuthError(
                "The supplied access token has already expired",
                kind=AuthErrorKind.REJECTED,
            )
        return token

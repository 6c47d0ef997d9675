"""Define the token provider interface.

A token provider knows how to exchange one kind of credentials for an
access token. Providers do not cache anything: caching and single-flight
coalescing live in :class:`~truelayer_client.auth.manager.TokenManager`.

Examples
--------
See :mod:`truelayer_client.auth.providers.client_credentials` for a
complete provider implementation.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict

import httpx
from pydantic import ValidationError

from ..exceptions import AuthError, AuthErrorKind
from ..models.auth import AccessToken, TokenResponse
from ..utils.http.errors import api_error_from_response

logger = logging.getLogger(__name__)


class BaseTokenProvider(ABC):
    """Provide the core token acquisition interface.

    :param token_endpoint: Absolute URL of the OAuth2 token endpoint
    :type token_endpoint: str
    """

    def __init__(self, token_endpoint: str):
        self.token_endpoint = token_endpoint

    @property
    @abstractmethod
    def grant_type(self) -> str:
        """Return the grant type identifier.

        :return: Grant type (e.g., "client_credentials", "refresh_token").
        """
        pass

    @property
    def renewable(self) -> bool:
        """Return whether a new token can be fetched once one was issued."""
        return True

    @abstractmethod
    async def fetch_token(self, client: httpx.AsyncClient) -> AccessToken:
        """Obtain a fresh access token.

        :param client: HTTP client used to reach the authorization server.
        :return: Newly issued access token.
        :raises AuthError: If the token could not be obtained.
        """
        pass

    def with_refresh_token(self, refresh_token: str) -> "BaseTokenProvider":
        """Return the provider to use once a refresh token has been issued.

        Providers that cannot take advantage of a refresh token return
        themselves.

        :param refresh_token: Refresh token returned by the last grant.
        :return: Provider for subsequent refreshes.
        """
        return self


class OAuthTokenProvider(BaseTokenProvider):
    """Shared token exchange against ``POST /connect/token``.

    Subclasses only describe the grant body; posting, status handling and
    response validation are common to every OAuth2 grant.
    """

    @abstractmethod
    def build_request_body(self) -> Dict[str, Any]:
        """Return the JSON body for the token request."""
        pass

    async def fetch_token(self, client: httpx.AsyncClient) -> AccessToken:
        """
        Exchange the configured grant for an access token.

        :param client: HTTP client used to reach the authorization server
        :type client: httpx.AsyncClient
        :return: Newly issued access token
        :rtype: AccessToken
        :raises AuthError: On network failure, rejection or malformed response
        """
        logger.debug(f"Requesting access token with {self.grant_type} grant")

        try:
            response = await client.post(
                self.token_endpoint, json=self.build_request_body()
            )
        except httpx.HTTPError as e:
            logger.error(f"Token request to {self.token_endpoint} failed: {e}")
            raise AuthError(
                f"Could not reach the authorization server: {e}",
                kind=AuthErrorKind.NETWORK_FAILURE,
            ) from e

        if not response.is_success:
            api_error = api_error_from_response(response)
            logger.error(
                f"Token request rejected: {response.status_code} - {api_error.message}"
            )
            raise AuthError(
                f"Authorization server rejected the {self.grant_type} grant: "
                f"{api_error.message}",
                kind=AuthErrorKind.REJECTED,
                status_code=response.status_code,
                details={"error": api_error.code},
            )

        return self._parse_token_response(response)

    def _parse_token_response(self, response: httpx.Response) -> AccessToken:
        try:
            token_response = TokenResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise AuthError(
                f"Malformed token response: {e.error_count()} validation error(s)",
                kind=AuthErrorKind.MALFORMED_RESPONSE,
                status_code=response.status_code,
            ) from e

        if token_response.token_type.lower() != "bearer":
            raise AuthError(
                f"Unsupported token type '{token_response.token_type}'",
                kind=AuthErrorKind.MALFORMED_RESPONSE,
                status_code=response.status_code,
            )

        token = token_response.to_access_token()
        logger.info(f"Access token obtained, expires at {token.expires_at}")
        return token


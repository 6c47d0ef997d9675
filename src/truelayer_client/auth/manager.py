"""Access token caching with single-flight refresh.

The :class:`TokenManager` owns the only shared mutable state of a client:
the cached access token. Reads are plain attribute reads. Refreshes run
in a dedicated task so that every concurrent caller awaits the same
exchange, and a caller being cancelled never cancels the refresh that
other callers are waiting on.
"""

import asyncio
import logging
from datetime import timedelta
from typing import Optional

import httpx

from ..models.auth import AccessToken
from . import providers  # noqa: F401  # imported for side effects (provider registration)
from .base import BaseTokenProvider
from .credentials import Credentials
from .registry import TokenProviderRegistry

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_MARGIN = timedelta(seconds=30)


class TokenManager:
    """Cache an access token and coalesce concurrent refreshes.

    :param credentials: Credentials used to obtain tokens
    :type credentials: Credentials
    :param token_endpoint: OAuth2 token endpoint URL
    :type token_endpoint: str
    :param http_client: HTTP client used to reach the authorization server
    :type http_client: httpx.AsyncClient
    :param refresh_margin: Tokens expiring within this margin are refreshed
    :type refresh_margin: timedelta

    .. example::
       >>> manager = TokenManager(credentials, env.token_endpoint(), httpx.AsyncClient())
       >>> token = await manager.get_token()
    """

    def __init__(
        self,
        credentials: Credentials,
        token_endpoint: str,
        http_client: httpx.AsyncClient,
        refresh_margin: timedelta = DEFAULT_REFRESH_MARGIN,
    ):
        # Resolved once; credentials never change for the life of the manager
        self._provider: BaseTokenProvider = TokenProviderRegistry.create_provider(
            credentials, token_endpoint
        )
        self._http_client = http_client
        self.refresh_margin = refresh_margin
        self._token: Optional[AccessToken] = None
        self._refresh_task: Optional[asyncio.Task] = None

    @property
    def grant_type(self) -> str:
        """Return the grant type used for the next refresh."""
        return self._provider.grant_type

    @property
    def cached_token(self) -> Optional[AccessToken]:
        """Return the cached token without validating or refreshing it."""
        return self._token

    @property
    def refresh_in_progress(self) -> bool:
        """Return whether a token refresh is currently in flight."""
        return self._refresh_task is not None and not self._refresh_task.done()

    async def get_token(self) -> AccessToken:
        """Return a valid access token, refreshing it if necessary.

        A cached token that stays valid beyond the refresh margin is returned
        without suspending, as is a still valid token from a provider that
        cannot renew it. Otherwise the caller joins the in-flight refresh,
        starting one if none is running.

        :return: Valid access token
        :rtype: AccessToken
        :raises AuthError: If the shared refresh failed
        """
        token = self._token
        if token is not None and token.is_valid(self.refresh_margin):
            return token
        # A token that cannot be renewed is used until it actually expires
        if token is not None and not self._provider.renewable and token.is_valid():
            return token

        task = self._refresh_task
        if task is None or task.done():
            task = asyncio.get_running_loop().create_task(self._refresh())
            task.add_done_callback(self._on_refresh_done)
            self._refresh_task = task
        else:
            logger.debug("Joining in-flight token refresh")

        # Waiters may be cancelled; the refresh itself keeps running
        return await asyncio.shield(task)

    def invalidate(self, token: Optional[AccessToken] = None) -> None:
        """Drop the cached token so the next :meth:`get_token` refreshes.

        Never waits on an in-flight refresh. When ``token`` is given, the
        cache is only cleared if that token is still the current one, so a
        stale rejection cannot discard a token that was already replaced.

        :param token: The token that was rejected, if known
        :type token: Optional[AccessToken]
        """
        current = self._token
        if current is None:
            return
        if token is not None and current is not token:
            logger.debug("Rejected token already replaced; keeping current token")
            return
        logger.info("Invalidating cached access token")
        self._token = None

    async def close(self) -> None:
        """Cancel any in-flight refresh."""
        task = self._refresh_task
        if task is not None and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        self._refresh_task = None

    async def _refresh(self) -> AccessToken:
        provider = self._provider
        logger.debug(f"Refreshing access token with {provider.grant_type} grant")
        token = await provider.fetch_token(self._http_client)
        self._token = token
        if token.refresh_token:
            self._provider = provider.with_refresh_token(token.refresh_token)
        return token

    def _on_refresh_done(self, task: asyncio.Task) -> None:
        if self._refresh_task is task:
            self._refresh_task = None
        # Mark the outcome as observed even if every waiter was cancelled
        if not task.cancelled() and task.exception() is not None:
            logger.warning(f"Token refresh failed: {task.exception()}")

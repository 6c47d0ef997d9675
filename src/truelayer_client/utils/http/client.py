"""Authenticated, signing, retrying HTTP client for the TrueLayer APIs.

Every logical call goes through :meth:`AuthenticatedClient.send`, which
runs the delivery pipeline:

1. attach the ``User-Agent`` and a bearer token from the token manager
2. for mutating methods, ensure an ``Idempotency-Key`` and sign the exact
   body bytes once
3. dispatch, retrying connection failures, 5xx and 429 with backoff while
   resending the very same request (same key, same signature)
4. on a 401, invalidate the token, re-authenticate and resend once

Examples:
    >>> client = AuthenticatedClient(token_manager=manager, signer=signer)
    >>> response = await client.post(url, content=body)
"""

import asyncio
import logging
import uuid
from typing import Optional

import httpx

from ... import __version__
from ...auth.manager import TokenManager
from ...exceptions import ConfigurationError, TransportError
from ...models.auth import AccessToken
from ...signing.signer import RequestSigner, requires_signature
from ..security import sanitize_headers
from .errors import api_error_from_response
from .retry import (
    IDEMPOTENCY_KEY_HEADER,
    RetryPolicy,
    RetryState,
    is_idempotent_request,
    parse_retry_after,
    should_retry_status,
)

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = f"truelayer-client/{__version__}"


class AuthenticatedClient(httpx.AsyncClient):
    """HTTP client that authenticates, signs and retries TrueLayer requests.

    The client extends :class:`httpx.AsyncClient` and intercepts
    :meth:`send`, so ``get``/``post``/``request`` all run through the
    pipeline.

    :param token_manager: Source of bearer tokens
    :type token_manager: TokenManager
    :param signer: Signer for mutating requests; None disables them
    :type signer: Optional[RequestSigner]
    :param retry_policy: Backoff and budget for transient failures
    :type retry_policy: Optional[RetryPolicy]
    :param user_agent: Value of the ``User-Agent`` header
    :type user_agent: str
    :raises ConfigurationError: When a mutating request is sent without a signer
    :raises TransportError: When delivery fails after the retry policy gives up
    :raises SigningError: When the signing key is unusable
    :raises AuthError: When no token can be obtained
    """

    def __init__(
        self,
        *args,
        token_manager: TokenManager,
        signer: Optional[RequestSigner] = None,
        retry_policy: Optional[RetryPolicy] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.token_manager = token_manager
        self.signer = signer
        self.retry_policy = retry_policy or RetryPolicy()
        self.user_agent = user_agent

    async def send(self, request: httpx.Request, **kwargs) -> httpx.Response:
        """Run one logical call through the delivery pipeline.

        :param request: The HTTP request to send
        :type request: httpx.Request
        :param kwargs: Additional arguments to pass to the parent send method
        :return: The final HTTP response; non-transient errors are returned as-is
        :rtype: httpx.Response
        """
        state = self.retry_policy.start()
        mutating = requires_signature(request.method)
        if mutating and self.signer is None:
            raise ConfigurationError(
                f"A signing key is required for {request.method} requests",
                config_key="signing_key",
            )

        request.headers["User-Agent"] = self.user_agent
        target = f"{request.method} {request.url.path}"
        token = await self._get_token(state, target)
        self._authorize(request, token)

        if mutating:
            await request.aread()
            if not request.headers.get(IDEMPOTENCY_KEY_HEADER):
                request.headers[IDEMPOTENCY_KEY_HEADER] = str(uuid.uuid4())
            # Signed exactly once; every attempt below resends these bytes
            self.signer.sign_request(request)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"=== SEND: {request.method} {request.url}")
            logger.debug(f"    Headers: {sanitize_headers(dict(request.headers))}")

        response = await self._dispatch(request, state, **kwargs)

        if response.status_code == 401:
            logger.info(
                f"Access token rejected for {request.method} {request.url.path}, "
                "re-authenticating once"
            )
            await response.aclose()
            self.token_manager.invalidate(token)
            token = await self._get_token(state, target)
            self._authorize(request, token)
            state.restart_attempts()
            response = await self._dispatch(request, state, **kwargs)

        return response

    async def _get_token(self, state: RetryState, target: str) -> AccessToken:
        """Fetch a token within what is left of the whole-call budget.

        Only this caller stops waiting on timeout; a shared refresh keeps
        running for the other callers.
        """
        remaining = state.remaining()
        if remaining is not None and remaining <= 0:
            raise self._budget_exceeded(target, state)
        try:
            return await asyncio.wait_for(
                self.token_manager.get_token(), timeout=remaining
            )
        except asyncio.TimeoutError as e:
            logger.warning(f"{target} exceeded the total timeout waiting for a token")
            raise self._budget_exceeded(target, state) from e

    def _budget_exceeded(self, target: str, state: RetryState) -> TransportError:
        return TransportError(
            f"{target} exceeded the total timeout of "
            f"{self.retry_policy.total_timeout}s",
            attempts=state.attempts,
        )

    def _authorize(self, request: httpx.Request, token: AccessToken) -> None:
        request.headers["Authorization"] = token.authorization_header()

    async def _dispatch(
        self, request: httpx.Request, state: RetryState, **kwargs
    ) -> httpx.Response:
        """Send ``request`` until it succeeds or the retry policy gives up."""
        replayable = is_idempotent_request(request)
        target = f"{request.method} {request.url.path}"

        while True:
            remaining = state.remaining()
            if remaining is not None and remaining <= 0:
                raise self._budget_exceeded(target, state)
            state.attempts += 1

            try:
                response = await asyncio.wait_for(
                    super().send(request, **kwargs), timeout=remaining
                )
            except asyncio.TimeoutError as e:
                logger.warning(f"{target} exceeded the total timeout")
                raise self._budget_exceeded(target, state) from e
            except httpx.TransportError as e:
                delay = self.retry_policy.compute_delay(state.attempts)
                if replayable and state.can_retry_after(delay):
                    logger.info(
                        f"{type(e).__name__} on {target}, retrying in {delay:.2f}s "
                        f"(attempt {state.attempts}/{self.retry_policy.max_attempts})"
                    )
                    await asyncio.sleep(delay)
                    continue
                logger.error(f"{target} failed after {state.attempts} attempt(s): {e}")
                raise TransportError(
                    f"{target} failed: {e}", attempts=state.attempts
                ) from e

            if not should_retry_status(response.status_code):
                if state.attempts > 1:
                    logger.info(f"{target} succeeded after {state.attempts} attempts")
                return response

            delay = self.retry_policy.compute_delay(
                state.attempts, parse_retry_after(response)
            )
            if replayable and state.can_retry_after(delay):
                logger.info(
                    f"{response.status_code} from {target}, retrying in {delay:.2f}s "
                    f"(attempt {state.attempts}/{self.retry_policy.max_attempts})"
                )
                await response.aclose()
                await asyncio.sleep(delay)
                continue

            error = api_error_from_response(response)
            logger.error(
                f"{target} failed with {response.status_code} after "
                f"{state.attempts} attempt(s): {error.message}"
            )
            raise TransportError(
                f"{target} failed with status {response.status_code}: {error.message}",
                status_code=response.status_code,
                attempts=state.attempts,
            )

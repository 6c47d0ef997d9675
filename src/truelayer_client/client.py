"""TrueLayer API client.

Wires the token manager, request signer and delivery pipeline together
and exposes the typed APIs:

- ``auth``: current access token
- ``payments``: payments, authorization flow, refunds, hosted payment page
- ``payouts``: payouts from merchant accounts
- ``merchant_accounts``: merchant accounts and balances

Examples:
    >>> config = ClientConfig(
    ...     credentials=ClientCredentials(client_id="id", client_secret="secret"),
    ...     signing_key=SigningKey("kid", pem_bytes),
    ...     environment="sandbox",
    ... )
    >>> async with TrueLayerClient(config) as tl:
    ...     created = await tl.payments.create(request)
"""

import logging
from datetime import timedelta
from typing import Optional

import httpx

from .apis.auth import AuthApi
from .apis.merchant_accounts import MerchantAccountsApi
from .apis.payments import PaymentsApi
from .apis.payments_providers import PaymentsProvidersApi
from .apis.payouts import PayoutsApi
from .auth.manager import TokenManager
from .config.client_config import ClientConfig
from .config.settings import Settings
from .signing.signer import RequestSigner
from .utils.http.client import AuthenticatedClient

logger = logging.getLogger(__name__)


class TrueLayerClient:
    """Entry point for the TrueLayer APIs.

    One instance owns one token cache; share it between concurrent tasks
    rather than creating one per call.

    :param config: Client configuration
    :type config: ClientConfig
    :param transport: Optional httpx transport, shared by the auth and API
        clients (e.g. ``httpx.MockTransport`` in tests)
    :type transport: Optional[httpx.AsyncBaseTransport]
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        environment = config.environment
        timeout = httpx.Timeout(config.request_timeout)
        headers = {"User-Agent": config.user_agent}

        self._auth_http = httpx.AsyncClient(
            timeout=timeout, headers=headers, transport=transport
        )
        self.token_manager = TokenManager(
            config.credentials,
            environment.token_endpoint(),
            self._auth_http,
            refresh_margin=timedelta(seconds=config.token_refresh_margin),
        )

        signer = RequestSigner(config.signing_key) if config.signing_key else None
        if signer is None:
            logger.info("No signing key configured; mutating requests are disabled")

        self._http = AuthenticatedClient(
            token_manager=self.token_manager,
            signer=signer,
            retry_policy=config.retry_policy,
            user_agent=config.user_agent,
            timeout=timeout,
            transport=transport,
        )

        self.auth = AuthApi(self.token_manager)
        self.payments = PaymentsApi(self._http, environment)
        self.payouts = PayoutsApi(self._http, environment)
        self.merchant_accounts = MerchantAccountsApi(self._http, environment)
        self.payments_providers = PaymentsProvidersApi(
            self._http,
            environment,
            client_id=getattr(config.credentials, "client_id", None),
        )

        logger.debug(
            f"TrueLayer client ready for {environment.name} "
            f"({self.token_manager.grant_type} grant)"
        )

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "TrueLayerClient":
        """Build a client from ``TRUELAYER_*`` environment variables.

        :param settings: Pre-loaded settings; loaded from the environment if None
        :param transport: Optional httpx transport
        :return: Configured client
        :rtype: TrueLayerClient
        """
        settings = settings or Settings()
        return cls(settings.to_client_config(), transport=transport)

    @property
    def http_client(self) -> AuthenticatedClient:
        """Return the pipeline client used by the typed APIs."""
        return self._http

    async def close(self) -> None:
        """Cancel pending token refreshes and close HTTP connections."""
        await self.token_manager.close()
        await self._http.aclose()
        await self._auth_http.aclose()

    async def __aenter__(self) -> "TrueLayerClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

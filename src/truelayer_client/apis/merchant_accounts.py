"""Merchant accounts API: accounts, sweeping, transactions and payment sources."""

import logging
from typing import List, Optional

from ..models.common import ItemList
from ..models.merchant_accounts import (
    ListPaymentSourcesRequest,
    ListTransactionsRequest,
    MerchantAccount,
    SetupSweepingRequest,
    SweepingSettings,
    Transaction,
)
from ..models.payments import PaymentSource
from .base import BaseApi, resource_path

logger = logging.getLogger(__name__)


class MerchantAccountsApi(BaseApi):
    """Typed access to the merchant accounts API."""

    async def list(self) -> List[MerchantAccount]:
        """List all merchant accounts of the client."""
        accounts = await self._call(
            "GET", resource_path("merchant-accounts"), ItemList[MerchantAccount]
        )
        return accounts.items

    async def get_by_id(self, merchant_account_id: str) -> Optional[MerchantAccount]:
        """Fetch a merchant account; None if it does not exist."""
        return await self._get_optional(
            resource_path("merchant-accounts", merchant_account_id), MerchantAccount
        )

    async def setup_sweeping(
        self, merchant_account_id: str, request: SetupSweepingRequest
    ) -> None:
        """Enable or update automatic sweeping to the merchant's business account.

        :param merchant_account_id: Merchant account to sweep
        :param request: Threshold, currency and frequency of the sweep
        """
        await self._execute(
            "POST",
            resource_path("merchant-accounts", merchant_account_id, "sweeping"),
            request,
        )
        logger.info(
            f"Sweeping set up for merchant account {merchant_account_id} "
            f"({request.frequency.value})"
        )

    async def disable_sweeping(self, merchant_account_id: str) -> None:
        """Disable automatic sweeping for a merchant account."""
        await self._execute(
            "DELETE", resource_path("merchant-accounts", merchant_account_id, "sweeping")
        )
        logger.info(f"Sweeping disabled for merchant account {merchant_account_id}")

    async def get_sweeping_settings(
        self, merchant_account_id: str
    ) -> Optional[SweepingSettings]:
        """Fetch the active sweeping settings.

        :return: The settings, or None if the account does not exist or
            sweeping is not enabled
        :rtype: Optional[SweepingSettings]
        """
        return await self._get_optional(
            resource_path("merchant-accounts", merchant_account_id, "sweeping"),
            SweepingSettings,
        )

    async def list_transactions(
        self, merchant_account_id: str, request: ListTransactionsRequest
    ) -> List[Transaction]:
        """List the transactions of a merchant account within a time window."""
        transactions = await self._call(
            "GET",
            resource_path("merchant-accounts", merchant_account_id, "transactions"),
            ItemList[Transaction],
            params=request.to_query(),
        )
        return transactions.items

    async def list_payment_sources(
        self, merchant_account_id: str, request: ListPaymentSourcesRequest
    ) -> List[PaymentSource]:
        """List the accounts a user has paid into a merchant account from."""
        sources = await self._call(
            "GET",
            resource_path("merchant-accounts", merchant_account_id, "payment-sources"),
            ItemList[PaymentSource],
            params=request.to_query(),
        )
        return sources.items

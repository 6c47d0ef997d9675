"""Payouts API."""

import logging
from typing import Optional

from ..models.payouts import CreatePayoutRequest, CreatePayoutResponse, Payout
from .base import BaseApi, resource_path

logger = logging.getLogger(__name__)


class PayoutsApi(BaseApi):
    """Typed access to the payouts API."""

    async def create(self, request: CreatePayoutRequest) -> CreatePayoutResponse:
        """Pay out funds from a merchant account.

        :param request: Payout to create
        :type request: CreatePayoutRequest
        :return: Identifier of the new payout
        :rtype: CreatePayoutResponse
        """
        response = await self._call(
            "POST", resource_path("payouts"), CreatePayoutResponse, request
        )
        logger.info(
            f"Created payout {response.id} from merchant account "
            f"{request.merchant_account_id}"
        )
        return response

    async def get_by_id(self, payout_id: str) -> Optional[Payout]:
        """Fetch a payout; None if it does not exist."""
        return await self._get_optional(resource_path("payouts", payout_id), Payout)

"""Payments API: payments, authorization flow, provider return and refunds."""

import logging
from typing import List, Optional

from ..models.common import ItemList
from ..models.payments import (
    AuthorizationFlowResponse,
    CreatePaymentRequest,
    CreatePaymentResponse,
    CreateRefundRequest,
    CreateRefundResponse,
    Payment,
    Refund,
    StartAuthorizationFlowRequest,
    SubmitProviderReturnParametersRequest,
    SubmitProviderReturnParametersResponse,
    SubmitProviderSelectionActionRequest,
)
from .base import BaseApi, resource_path

logger = logging.getLogger(__name__)


class PaymentsApi(BaseApi):
    """Typed access to the payments API.

    .. example::
       >>> created = await tl.payments.create(request)
       >>> link = tl.payments.get_hosted_payments_page_link(
       ...     created.id, created.resource_token, "https://example.com/return"
       ... )
    """

    async def create(self, request: CreatePaymentRequest) -> CreatePaymentResponse:
        """Create a new payment.

        :param request: Payment to create
        :type request: CreatePaymentRequest
        :return: Identifier, resource token and initial status of the payment
        :rtype: CreatePaymentResponse
        """
        response = await self._call(
            "POST", resource_path("payments"), CreatePaymentResponse, request
        )
        logger.info(f"Created payment {response.id} ({response.status.value})")
        return response

    async def get_by_id(self, payment_id: str) -> Optional[Payment]:
        """Fetch a payment; None if it does not exist.

        :param payment_id: Payment identifier
        :return: The payment, or None on 404
        :rtype: Optional[Payment]
        """
        return await self._get_optional(resource_path("payments", payment_id), Payment)

    async def start_authorization_flow(
        self, payment_id: str, request: StartAuthorizationFlowRequest
    ) -> AuthorizationFlowResponse:
        """Start the authorization flow of a payment."""
        return await self._call(
            "POST",
            resource_path("payments", payment_id, "authorization-flow"),
            AuthorizationFlowResponse,
            request,
        )

    async def submit_provider_selection(
        self, payment_id: str, request: SubmitProviderSelectionActionRequest
    ) -> AuthorizationFlowResponse:
        """Submit the provider chosen in the provider selection step."""
        return await self._call(
            "POST",
            resource_path(
                "payments",
                payment_id,
                "authorization-flow",
                "actions",
                "provider-selection",
            ),
            AuthorizationFlowResponse,
            request,
        )

    async def submit_provider_return_parameters(
        self, request: SubmitProviderReturnParametersRequest
    ) -> SubmitProviderReturnParametersResponse:
        """Forward the parameters the provider appended to the return URI.

        Used when the payer was redirected straight back to the merchant
        rather than to TrueLayer's own return page.
        """
        return await self._call(
            "POST",
            resource_path("payments-provider-return"),
            SubmitProviderReturnParametersResponse,
            request,
        )

    def get_hosted_payments_page_link(
        self, payment_id: str, resource_token: str, return_uri: str
    ) -> str:
        """Build the hosted payment page URL for a payment.

        No request is made; the parameters travel in the URL fragment with
        their values unescaped, which is the form the hosted page reads.

        :param payment_id: Payment identifier
        :param resource_token: Resource token returned on creation
        :param return_uri: Where the payer lands after authorization
        :return: Hosted payment page URL
        :rtype: str
        """
        fragment = (
            f"payment_id={payment_id}"
            f"&resource_token={resource_token}"
            f"&return_uri={return_uri}"
        )
        return f"{self._environment.hpp_url}/payments#{fragment}"

    async def create_refund(
        self, payment_id: str, request: CreateRefundRequest
    ) -> CreateRefundResponse:
        """Refund all or part of an executed payment."""
        response = await self._call(
            "POST",
            resource_path("payments", payment_id, "refunds"),
            CreateRefundResponse,
            request,
        )
        logger.info(f"Created refund {response.id} for payment {payment_id}")
        return response

    async def list_refunds(self, payment_id: str) -> List[Refund]:
        """List the refunds of a payment."""
        refunds = await self._call(
            "GET", resource_path("payments", payment_id, "refunds"), ItemList[Refund]
        )
        return refunds.items

    async def get_refund_by_id(self, payment_id: str, refund_id: str) -> Optional[Refund]:
        """Fetch a refund; None if it does not exist."""
        return await self._get_optional(
            resource_path("payments", payment_id, "refunds", refund_id), Refund
        )

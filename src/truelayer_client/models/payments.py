"""Pydantic models for the payments API.

Covers payment creation and retrieval, the authorization flow, the
provider return endpoint and refunds.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import Field, model_validator

from .common import AccountIdentifier, ApiModel, Currency

# =============================================================================
# Payment method
# =============================================================================


class Remitter(ApiModel):
    account_holder_name: Optional[str] = None
    account_identifier: Optional[AccountIdentifier] = None


class UserSelectedProviderSelection(ApiModel):
    """Let the payer pick their bank on the hosted payment page."""

    type: Literal["user_selected"] = "user_selected"
    filter: Optional[Dict[str, Any]] = None
    scheme_selection: Optional[Dict[str, Any]] = None


class PreselectedProviderSelection(ApiModel):
    """Use a provider chosen by the merchant."""

    type: Literal["preselected"] = "preselected"
    provider_id: str
    scheme_id: Optional[str] = None
    remitter: Optional[Remitter] = None


ProviderSelection = Annotated[
    Union[UserSelectedProviderSelection, PreselectedProviderSelection],
    Field(discriminator="type"),
]


class MerchantAccountBeneficiary(ApiModel):
    """Pay into one of the merchant's TrueLayer accounts."""

    type: Literal["merchant_account"] = "merchant_account"
    merchant_account_id: str
    account_holder_name: Optional[str] = None
    reference: Optional[str] = None


class ExternalAccountBeneficiary(ApiModel):
    """Pay into any external bank account."""

    type: Literal["external_account"] = "external_account"
    account_holder_name: str
    account_identifier: AccountIdentifier
    reference: str


Beneficiary = Annotated[
    Union[MerchantAccountBeneficiary, ExternalAccountBeneficiary],
    Field(discriminator="type"),
]


class BankTransferPaymentMethod(ApiModel):
    type: Literal["bank_transfer"] = "bank_transfer"
    provider_selection: ProviderSelection
    beneficiary: Beneficiary


# =============================================================================
# Payment creation and retrieval
# =============================================================================


class PaymentUser(ApiModel):
    """Payer details: either an existing user ``id`` or new-user details.

    :param id: Identifier of a user returned by a previous payment
    :param name: Full name of a new user
    :param email: Email of a new user
    :param phone: Phone number of a new user
    """

    id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    @model_validator(mode="after")
    def _identify_user(self) -> "PaymentUser":
        if self.id is None and not (self.name and (self.email or self.phone)):
            raise ValueError(
                "A user needs either an existing 'id' or a 'name' with an 'email' or 'phone'"
            )
        return self


class CreatePaymentRequest(ApiModel):
    """Body of ``POST /payments``."""

    amount_in_minor: int = Field(gt=0)
    currency: Currency
    payment_method: BankTransferPaymentMethod
    user: PaymentUser
    metadata: Optional[Dict[str, str]] = None


class CreatePaymentStatus(str, Enum):
    AUTHORIZATION_REQUIRED = "authorization_required"
    AUTHORIZED = "authorized"
    FAILED = "failed"


class UserId(ApiModel):
    id: str


class CreatePaymentResponse(ApiModel):
    """Response of ``POST /payments``.

    ``resource_token`` is needed to send the payer to the hosted payment page.
    """

    id: str
    resource_token: str = Field(repr=False)
    user: UserId
    status: CreatePaymentStatus = CreatePaymentStatus.AUTHORIZATION_REQUIRED
    failure_stage: Optional[str] = None
    failure_reason: Optional[str] = None


class PaymentStatus(str, Enum):
    AUTHORIZATION_REQUIRED = "authorization_required"
    AUTHORIZING = "authorizing"
    AUTHORIZED = "authorized"
    EXECUTED = "executed"
    SETTLED = "settled"
    FAILED = "failed"


TERMINAL_PAYMENT_STATUSES = frozenset(
    {PaymentStatus.EXECUTED, PaymentStatus.SETTLED, PaymentStatus.FAILED}
)


class Payment(ApiModel):
    """A payment as returned by ``GET /payments/{id}``."""

    id: str
    amount_in_minor: int
    currency: Currency
    user: UserId
    payment_method: BankTransferPaymentMethod
    created_at: datetime
    status: PaymentStatus
    metadata: Optional[Dict[str, str]] = None
    authorization_flow: Optional[Dict[str, Any]] = None
    executed_at: Optional[datetime] = None
    settled_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
    failure_stage: Optional[str] = None
    failure_reason: Optional[str] = None

    def is_in_terminal_state(self) -> bool:
        return self.status in TERMINAL_PAYMENT_STATUSES


# =============================================================================
# Authorization flow
# =============================================================================


class Redirect(ApiModel):
    return_uri: str
    direct_return_uri: Optional[str] = None


class StartAuthorizationFlowRequest(ApiModel):
    """Body of ``POST /payments/{id}/authorization-flow``.

    An empty ``provider_selection`` object advertises support for the
    provider selection step.
    """

    provider_selection: Optional[Dict[str, Any]] = Field(default_factory=dict)
    redirect: Optional[Redirect] = None
    form: Optional[Dict[str, Any]] = None


class AuthorizationFlowActions(ApiModel):
    next: Dict[str, Any]


class AuthorizationFlow(ApiModel):
    actions: Optional[AuthorizationFlowActions] = None


class AuthorizationFlowResponseStatus(str, Enum):
    AUTHORIZING = "authorizing"
    AUTHORIZED = "authorized"
    FAILED = "failed"


class AuthorizationFlowResponse(ApiModel):
    """Response of the authorization flow endpoints.

    ``authorization_flow.actions.next`` describes the next step (provider
    selection, redirect, form, ...).
    """

    status: AuthorizationFlowResponseStatus
    authorization_flow: Optional[AuthorizationFlow] = None
    failure_stage: Optional[str] = None
    failure_reason: Optional[str] = None

    @property
    def next_action(self) -> Optional[Dict[str, Any]]:
        if self.authorization_flow and self.authorization_flow.actions:
            return self.authorization_flow.actions.next
        return None


StartAuthorizationFlowResponse = AuthorizationFlowResponse
SubmitProviderSelectionActionResponse = AuthorizationFlowResponse


class SubmitProviderSelectionActionRequest(ApiModel):
    provider_id: str


class SubmitProviderReturnParametersRequest(ApiModel):
    """Body of ``POST /payments-provider-return``: the redirect's query and fragment."""

    query: str = ""
    fragment: str = ""


class ProviderReturnResource(ApiModel):
    type: Literal["payment"] = "payment"
    payment_id: str


class SubmitProviderReturnParametersResponse(ApiModel):
    resource: ProviderReturnResource


# =============================================================================
# Refunds
# =============================================================================


class CreateRefundRequest(ApiModel):
    """Body of ``POST /payments/{id}/refunds``."""

    amount_in_minor: int = Field(gt=0)
    reference: str
    metadata: Optional[Dict[str, str]] = None


class CreateRefundResponse(ApiModel):
    id: str


class RefundStatus(str, Enum):
    PENDING = "pending"
    AUTHORIZED = "authorized"
    EXECUTED = "executed"
    FAILED = "failed"


class Refund(ApiModel):
    id: str
    amount_in_minor: int
    currency: Currency
    reference: str
    created_at: datetime
    status: RefundStatus
    metadata: Optional[Dict[str, str]] = None
    executed_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
    failure_reason: Optional[str] = None

    def is_in_terminal_state(self) -> bool:
        return self.status in (RefundStatus.EXECUTED, RefundStatus.FAILED)


# =============================================================================
# Payment sources
# =============================================================================


class PaymentSource(ApiModel):
    """Account a payment into a merchant account was made from."""

    id: str
    user_id: Optional[str] = None
    account_identifiers: List[AccountIdentifier] = Field(default_factory=list)
    account_holder_name: Optional[str] = None

"""Pydantic models for the payouts API."""

from datetime import datetime
from enum import Enum
from typing import Annotated, Dict, Literal, Optional, Union

from pydantic import Field

from .common import AccountIdentifier, ApiModel, Currency


class ExternalAccountPayoutBeneficiary(ApiModel):
    type: Literal["external_account"] = "external_account"
    account_holder_name: str
    account_identifier: AccountIdentifier
    reference: str


class PaymentSourcePayoutBeneficiary(ApiModel):
    """Pay back the account a previous payment came from."""

    type: Literal["payment_source"] = "payment_source"
    payment_source_id: str
    user_id: str
    reference: str


class BusinessAccountPayoutBeneficiary(ApiModel):
    """Pay into the merchant's own business account."""

    type: Literal["business_account"] = "business_account"
    reference: str


PayoutBeneficiary = Annotated[
    Union[
        ExternalAccountPayoutBeneficiary,
        PaymentSourcePayoutBeneficiary,
        BusinessAccountPayoutBeneficiary,
    ],
    Field(discriminator="type"),
]


class CreatePayoutRequest(ApiModel):
    """Body of ``POST /payouts``."""

    merchant_account_id: str
    amount_in_minor: int = Field(gt=0)
    currency: Currency
    beneficiary: PayoutBeneficiary
    metadata: Optional[Dict[str, str]] = None


class CreatePayoutResponse(ApiModel):
    id: str


class PayoutStatus(str, Enum):
    PENDING = "pending"
    AUTHORIZED = "authorized"
    EXECUTED = "executed"
    FAILED = "failed"


class Payout(ApiModel):
    id: str
    merchant_account_id: str
    amount_in_minor: int
    currency: Currency
    beneficiary: PayoutBeneficiary
    created_at: datetime
    status: PayoutStatus
    metadata: Optional[Dict[str, str]] = None
    executed_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
    failure_reason: Optional[str] = None

    def is_in_terminal_state(self) -> bool:
        return self.status in (PayoutStatus.EXECUTED, PayoutStatus.FAILED)

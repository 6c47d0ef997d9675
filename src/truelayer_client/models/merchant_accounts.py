"""Pydantic models for the merchant accounts API.

Covers merchant accounts, automatic sweeping, account transactions and
the payment sources an account has received money from.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import Field

from .common import AccountIdentifier, ApiModel, Currency
from .payments import PaymentSource
from .payouts import PayoutBeneficiary


class MerchantAccount(ApiModel):
    """A TrueLayer merchant account and its balances.

    :param id: Merchant account identifier
    :param currency: Account currency
    :param account_identifiers: Ways to address the account (sort code, IBAN, ...)
    :param available_balance_in_minor: Balance available for payouts
    :param current_balance_in_minor: Balance including pending transactions
    :param account_holder_name: Name on the account
    """

    id: str
    currency: Currency
    account_identifiers: List[AccountIdentifier]
    available_balance_in_minor: int
    current_balance_in_minor: int
    account_holder_name: str


# =============================================================================
# Sweeping
# =============================================================================


class SweepingFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    FORTNIGHTLY = "fortnightly"


class SetupSweepingRequest(ApiModel):
    """Body of ``POST /merchant-accounts/{id}/sweeping``.

    Balance above ``max_amount_in_minor`` is moved to the merchant's
    verified business account at the given frequency.
    """

    max_amount_in_minor: int = Field(ge=0)
    currency: Currency
    frequency: SweepingFrequency


class SweepingSettings(ApiModel):
    max_amount_in_minor: int
    currency: Currency
    frequency: SweepingFrequency
    destination: AccountIdentifier


# =============================================================================
# Transactions
# =============================================================================


def _format_query_time(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class TransactionTypeFilter(str, Enum):
    PAYIN = "payin"
    PAYOUT = "payout"


class ListTransactionsRequest(ApiModel):
    """Query of ``GET /merchant-accounts/{id}/transactions``.

    :param from_: Start of the time window (``from`` on the wire)
    :param to: End of the time window
    :param type: Only return pay-ins or payouts
    """

    from_: datetime = Field(alias="from")
    to: datetime
    type: Optional[TransactionTypeFilter] = None

    def to_query(self) -> Dict[str, str]:
        query = {"from": _format_query_time(self.from_), "to": _format_query_time(self.to)}
        if self.type is not None:
            query["type"] = self.type.value
        return query


class TransactionRemitter(ApiModel):
    account_holder_name: Optional[str] = None
    account_identifier: Optional[AccountIdentifier] = None
    reference: Optional[str] = None


class MerchantAccountPaymentTransaction(ApiModel):
    """A payment received from a payer through TrueLayer."""

    type: Literal["merchant_account_payment"] = "merchant_account_payment"
    id: str
    currency: Currency
    amount_in_minor: int
    status: str
    settled_at: Optional[datetime] = None
    payment_source: PaymentSource
    payment_id: str


class ExternalPaymentTransaction(ApiModel):
    """A bank transfer into the account made outside of TrueLayer."""

    type: Literal["external_payment"] = "external_payment"
    id: str
    currency: Currency
    amount_in_minor: int
    status: str
    settled_at: Optional[datetime] = None
    remitter: TransactionRemitter


class PayoutTransaction(ApiModel):
    type: Literal["payout"] = "payout"
    id: str
    currency: Currency
    amount_in_minor: int
    status: str
    created_at: datetime
    executed_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
    failure_reason: Optional[str] = None
    beneficiary: PayoutBeneficiary
    context_code: Optional[str] = None
    payout_id: Optional[str] = None


class RefundTransaction(ApiModel):
    type: Literal["refund"] = "refund"
    id: str
    currency: Currency
    amount_in_minor: int
    status: str
    created_at: datetime
    executed_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
    failure_reason: Optional[str] = None
    beneficiary: Optional[PayoutBeneficiary] = None
    context_code: Optional[str] = None
    refund_id: Optional[str] = None
    payment_id: Optional[str] = None


Transaction = Annotated[
    Union[
        MerchantAccountPaymentTransaction,
        ExternalPaymentTransaction,
        PayoutTransaction,
        RefundTransaction,
    ],
    Field(discriminator="type"),
]


class ListPaymentSourcesRequest(ApiModel):
    """Query of ``GET /merchant-accounts/{id}/payment-sources``."""

    user_id: str

    def to_query(self) -> Dict[str, str]:
        return {"user_id": self.user_id}

"""TrueLayer client models package.

This package contains all Pydantic models used by the client, organized
by API domain.
"""

from .auth import AccessToken, TokenResponse
from .common import (
    AccountIdentifier,
    ApiModel,
    Bban,
    Currency,
    Iban,
    ItemList,
    Nrb,
    SortCodeAccountNumber,
)
from .merchant_accounts import (
    ExternalPaymentTransaction,
    ListPaymentSourcesRequest,
    ListTransactionsRequest,
    MerchantAccount,
    MerchantAccountPaymentTransaction,
    PayoutTransaction,
    RefundTransaction,
    SetupSweepingRequest,
    SweepingFrequency,
    SweepingSettings,
    Transaction,
    TransactionRemitter,
    TransactionTypeFilter,
)
from .payments import (
    AuthorizationFlowResponse,
    BankTransferPaymentMethod,
    CreatePaymentRequest,
    CreatePaymentResponse,
    CreatePaymentStatus,
    CreateRefundRequest,
    CreateRefundResponse,
    ExternalAccountBeneficiary,
    MerchantAccountBeneficiary,
    Payment,
    PaymentSource,
    PaymentStatus,
    PaymentUser,
    PreselectedProviderSelection,
    Redirect,
    Refund,
    RefundStatus,
    Remitter,
    StartAuthorizationFlowRequest,
    StartAuthorizationFlowResponse,
    SubmitProviderReturnParametersRequest,
    SubmitProviderReturnParametersResponse,
    SubmitProviderSelectionActionRequest,
    SubmitProviderSelectionActionResponse,
    UserSelectedProviderSelection,
)
from .payouts import (
    BusinessAccountPayoutBeneficiary,
    CreatePayoutRequest,
    CreatePayoutResponse,
    ExternalAccountPayoutBeneficiary,
    PaymentSourcePayoutBeneficiary,
    Payout,
    PayoutStatus,
)
from .providers import (
    BankTransferCapabilities,
    PaymentCapabilities,
    PaymentScheme,
    Provider,
    ProviderCapabilities,
    ReleaseChannel,
)

__all__ = [
    # Auth
    "AccessToken",
    "TokenResponse",
    # Common
    "AccountIdentifier",
    "ApiModel",
    "Bban",
    "Currency",
    "Iban",
    "ItemList",
    "Nrb",
    "SortCodeAccountNumber",
    # Merchant accounts
    "ExternalPaymentTransaction",
    "ListPaymentSourcesRequest",
    "ListTransactionsRequest",
    "MerchantAccount",
    "MerchantAccountPaymentTransaction",
    "PayoutTransaction",
    "RefundTransaction",
    "SetupSweepingRequest",
    "SweepingFrequency",
    "SweepingSettings",
    "Transaction",
    "TransactionRemitter",
    "TransactionTypeFilter",
    # Payments
    "AuthorizationFlowResponse",
    "BankTransferPaymentMethod",
    "CreatePaymentRequest",
    "CreatePaymentResponse",
    "CreatePaymentStatus",
    "CreateRefundRequest",
    "CreateRefundResponse",
    "ExternalAccountBeneficiary",
    "MerchantAccountBeneficiary",
    "Payment",
    "PaymentSource",
    "PaymentStatus",
    "PaymentUser",
    "PreselectedProviderSelection",
    "Redirect",
    "Refund",
    "RefundStatus",
    "Remitter",
    "StartAuthorizationFlowRequest",
    "StartAuthorizationFlowResponse",
    "SubmitProviderReturnParametersRequest",
    "SubmitProviderReturnParametersResponse",
    "SubmitProviderSelectionActionRequest",
    "SubmitProviderSelectionActionResponse",
    "UserSelectedProviderSelection",
    # Payouts
    "BusinessAccountPayoutBeneficiary",
    "CreatePayoutRequest",
    "CreatePayoutResponse",
    "ExternalAccountPayoutBeneficiary",
    "PaymentSourcePayoutBeneficiary",
    "Payout",
    "PayoutStatus",
    # Providers
    "BankTransferCapabilities",
    "PaymentCapabilities",
    "PaymentScheme",
    "Provider",
    "ProviderCapabilities",
    "ReleaseChannel",
]

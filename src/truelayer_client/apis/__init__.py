"""Typed API surface of the TrueLayer client."""

from .auth import AuthApi
from .merchant_accounts import MerchantAccountsApi
from .payments import PaymentsApi
from .payments_providers import PaymentsProvidersApi
from .payouts import PayoutsApi

__all__ = [
    "AuthApi",
    "MerchantAccountsApi",
    "PaymentsApi",
    "PaymentsProvidersApi",
    "PayoutsApi",
]

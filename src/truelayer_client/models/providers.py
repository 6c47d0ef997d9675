"""Pydantic models for the payments providers API."""

from enum import Enum
from typing import List, Optional

from pydantic import Field

from .common import ApiModel


class ReleaseChannel(str, Enum):
    GENERAL_AVAILABILITY = "general_availability"
    PUBLIC_BETA = "public_beta"
    PRIVATE_BETA = "private_beta"


class PaymentScheme(ApiModel):
    id: str


class BankTransferCapabilities(ApiModel):
    release_channel: ReleaseChannel
    schemes: List[PaymentScheme] = Field(default_factory=list)


class PaymentCapabilities(ApiModel):
    bank_transfer: Optional[BankTransferCapabilities] = None


class ProviderCapabilities(ApiModel):
    payments: PaymentCapabilities


class Provider(ApiModel):
    """A bank or other payments provider and what it supports.

    :param id: Provider identifier, as used in provider selection
    :param display_name: Name shown to payers
    :param country_code: ISO 3166-1 alpha-2 country of the provider
    :param capabilities: Payment methods and schemes available to this client
    """

    id: str
    display_name: Optional[str] = None
    icon_uri: Optional[str] = None
    logo_uri: Optional[str] = None
    bg_color: Optional[str] = None
    country_code: Optional[str] = None
    capabilities: ProviderCapabilities

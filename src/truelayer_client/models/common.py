"""Models shared by the payments, payouts and merchant account APIs."""

from enum import Enum
from typing import Annotated, Generic, List, Literal, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class Currency(str, Enum):
    """Currencies supported by the payments API."""

    GBP = "GBP"
    EUR = "EUR"
    NOK = "NOK"
    PLN = "PLN"


class ApiModel(BaseModel):
    """Base for API payloads.

    Unknown response fields are ignored so that additive API changes do
    not break decoding.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class SortCodeAccountNumber(ApiModel):
    type: Literal["sort_code_account_number"] = "sort_code_account_number"
    sort_code: str
    account_number: str


class Iban(ApiModel):
    type: Literal["iban"] = "iban"
    iban: str


class Bban(ApiModel):
    type: Literal["bban"] = "bban"
    bban: str


class Nrb(ApiModel):
    type: Literal["nrb"] = "nrb"
    nrb: str


AccountIdentifier = Annotated[
    Union[SortCodeAccountNumber, Iban, Bban, Nrb],
    Field(discriminator="type"),
]


class ItemList(ApiModel, Generic[T]):
    """Envelope of list endpoints: ``{"items": [...]}``."""

    items: List[T] = Field(default_factory=list)

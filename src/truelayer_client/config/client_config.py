"""Programmatic construction surface of :class:`TrueLayerClient`."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..auth.credentials import Credentials
from ..signing.keys import SigningKey
from ..utils.http.client import DEFAULT_USER_AGENT
from ..utils.http.retry import RetryPolicy
from .environment import Environment


class ClientConfig(BaseModel):
    """Everything needed to build a client.

    :param credentials: How to obtain access tokens
    :type credentials: Credentials
    :param signing_key: Key for signing mutating requests; required to create resources
    :type signing_key: Optional[SigningKey]
    :param environment: Target environment (default: live)
    :type environment: Environment
    :param retry_policy: Backoff and total budget for transient failures
    :type retry_policy: RetryPolicy
    :param request_timeout: Timeout of a single physical attempt, in seconds
    :type request_timeout: float
    :param token_refresh_margin: Refresh tokens expiring within this many seconds
    :type token_refresh_margin: float
    :param user_agent: Value of the ``User-Agent`` header
    :type user_agent: str
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    credentials: Credentials
    signing_key: Optional[SigningKey] = Field(default=None, repr=False)
    environment: Environment = Field(default_factory=Environment.live)
    retry_policy: RetryPolicy = Field(default_factory=RetryPolicy)
    request_timeout: float = Field(30.0, gt=0)
    token_refresh_margin: float = Field(30.0, ge=0)
    user_agent: str = DEFAULT_USER_AGENT

    @field_validator("environment", mode="before")
    @classmethod
    def _resolve_environment(cls, value):
        if isinstance(value, str):
            return Environment.from_name(value)
        return value

"""Credential variants accepted by the token manager.

Credentials are a tagged union keyed by ``grant_type``. The token manager
resolves the matching token provider once, at construction, through the
provider registry.
"""

from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class ClientCredentials(BaseModel):
    """OAuth2 client-credentials grant.

    :param client_id: Client identifier issued in the TrueLayer console
    :param client_secret: Client secret
    :param scope: Space separated scopes to request
    """

    model_config = ConfigDict(frozen=True)

    grant_type: Literal["client_credentials"] = "client_credentials"
    client_id: str = Field(min_length=1)
    client_secret: SecretStr
    scope: str = "payments"


class RefreshTokenCredentials(BaseModel):
    """OAuth2 refresh-token grant.

    :param client_id: Client identifier issued in the TrueLayer console
    :param client_secret: Client secret
    :param refresh_token: Refresh token obtained from a previous grant
    """

    model_config = ConfigDict(frozen=True)

    grant_type: Literal["refresh_token"] = "refresh_token"
    client_id: str = Field(min_length=1)
    client_secret: SecretStr
    refresh_token: SecretStr


class StaticTokenCredentials(BaseModel):
    """Access token obtained outside of this client.

    :param access_token: Bearer token to attach to every request
    :param expires_at: Optional expiry; tokens without one are used until rejected
    """

    model_config = ConfigDict(frozen=True)

    grant_type: Literal["static"] = "static"
    access_token: SecretStr
    expires_at: Optional[datetime] = None


Credentials = Annotated[
    Union[ClientCredentials, RefreshTokenCredentials, StaticTokenCredentials],
    Field(discriminator="grant_type"),
]

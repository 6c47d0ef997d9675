"""Authentication models for the TrueLayer client.

This module contains the access token cached by the token manager and
the wire shape of the authorization server's token response.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AccessToken(BaseModel):
    """OAuth2 access token issued by the TrueLayer authorization server.

    Instances are immutable and replaced as a whole on refresh, so a
    reference held by an in-flight request never changes underneath it.

    :param value: The bearer token string
    :type value: str
    :param expires_at: When the token expires; None for tokens with unknown expiry
    :type expires_at: Optional[datetime]
    :param token_type: Type of token (always "Bearer")
    :type token_type: str
    :param refresh_token: Refresh token returned alongside the access token, if any
    :type refresh_token: Optional[str]
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(repr=False)
    expires_at: Optional[datetime] = None
    token_type: str = "Bearer"
    refresh_token: Optional[str] = Field(default=None, repr=False)

    def is_valid(
        self, margin: timedelta = timedelta(0), now: Optional[datetime] = None
    ) -> bool:
        """Return whether the token stays valid for at least ``margin``.

        :param margin: Safety margin before expiry
        :type margin: timedelta
        :param now: Reference time; defaults to the current UTC time
        :type now: Optional[datetime]
        :return: True if the token can still be used
        :rtype: bool
        """
        if self.expires_at is None:
            return True
        now = now or datetime.now(timezone.utc)
        expiry = self.expires_at
        # Ensure both datetimes are timezone-aware for comparison
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=timezone.utc)
        return now + margin < expiry

    def authorization_header(self) -> str:
        """Return the value for the ``Authorization`` request header."""
        return f"Bearer {self.value}"


class TokenResponse(BaseModel):
    """Body returned by ``POST /connect/token``."""

    model_config = ConfigDict(extra="ignore")

    access_token: str = Field(min_length=1, repr=False)
    expires_in: int = Field(ge=0)
    token_type: str
    refresh_token: Optional[str] = Field(default=None, repr=False)
    scope: Optional[str] = None

    def to_access_token(self, issued_at: Optional[datetime] = None) -> AccessToken:
        """Convert the wire response into a cacheable :class:`AccessToken`."""
        issued_at = issued_at or datetime.now(timezone.utc)
        return AccessToken(
            value=self.access_token,
            expires_at=issued_at + timedelta(seconds=self.expires_in),
            token_type="Bearer",
            refresh_token=self.refresh_token,
        )

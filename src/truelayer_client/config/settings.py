"""Configuration settings for the TrueLayer client.

This module defines settings read from ``TRUELAYER_*`` environment
variables and turns them into a :class:`ClientConfig`. Only the process
environment is consulted; no configuration files are read.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import AliasChoices, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..auth.credentials import ClientCredentials, StaticTokenCredentials
from ..exceptions import ConfigurationError
from ..signing.keys import SigningKey
from ..utils.http.retry import RetryPolicy
from ..utils.security import setup_secure_logging
from .client_config import ClientConfig
from .environment import Environment


class Settings(BaseSettings):
    """Client settings loaded from environment variables.

    Either client credentials (``TRUELAYER_CLIENT_ID`` and
    ``TRUELAYER_CLIENT_SECRET``) or a pre-fetched ``TRUELAYER_ACCESS_TOKEN``
    must be set. The signing key may be given inline or as a file path.

    :param client_id: OAuth2 client id
    :type client_id: Optional[str]
    :param client_secret: OAuth2 client secret
    :type client_secret: Optional[SecretStr]
    :param scope: Scopes requested with the client-credentials grant
    :type scope: str
    :param access_token: Pre-fetched access token, used instead of client credentials
    :type access_token: Optional[SecretStr]
    :param signing_key_id: Identifier of the uploaded public key
    :type signing_key_id: Optional[str]
    :param signing_private_key: PEM private key
    :type signing_private_key: Optional[SecretStr]
    :param signing_private_key_path: Path to a PEM private key file
    :type signing_private_key_path: Optional[Path]
    :param environment: Target environment
    :type environment: Literal["live", "sandbox"]
    :param log_level: Logging level for the application
    :type log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    """

    model_config = SettingsConfigDict(
        env_prefix="TRUELAYER_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Credentials
    client_id: Optional[str] = Field(None, description="OAuth2 client id")
    client_secret: Optional[SecretStr] = Field(None, description="OAuth2 client secret")
    scope: str = Field("payments", description="Scopes for the client-credentials grant")
    access_token: Optional[SecretStr] = Field(
        None, description="Pre-fetched access token (skips the client-credentials grant)"
    )

    # Request signing
    signing_key_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("TRUELAYER_SIGNING_KEY_ID", "TRUELAYER_KID"),
        description="Identifier of the public key uploaded to the console",
    )
    signing_private_key: Optional[SecretStr] = Field(
        None, description="PEM encoded EC P-521 private key"
    )
    signing_private_key_path: Optional[Path] = Field(
        None, description="Path to a PEM encoded EC P-521 private key"
    )

    # Environment
    environment: Literal["live", "sandbox"] = Field("live", description="Target environment")
    auth_url: Optional[str] = Field(None, description="Override the auth server URL")
    payments_url: Optional[str] = Field(None, description="Override the payments API URL")
    hpp_url: Optional[str] = Field(None, description="Override the hosted payment page URL")

    # Delivery
    request_timeout: float = Field(30.0, gt=0, description="Per-attempt timeout (s)")
    total_timeout: Optional[float] = Field(
        60.0, gt=0, description="Budget for a whole call including retries (s)"
    )
    max_attempts: int = Field(4, ge=1, description="Attempts per call, including the first")
    token_refresh_margin: float = Field(
        30.0, ge=0, description="Refresh tokens this many seconds before expiry"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Logging level"
    )

    @model_validator(mode="after")
    def _check_credentials(self) -> "Settings":
        if self.access_token is None and not (self.client_id and self.client_secret):
            raise ValueError(
                "Set TRUELAYER_CLIENT_ID and TRUELAYER_CLIENT_SECRET, "
                "or TRUELAYER_ACCESS_TOKEN"
            )
        return self

    def configure_logging(self) -> None:
        """Install redacting log output at ``log_level``.

        Intended for applications; library code never calls it.
        """
        setup_secure_logging(self.log_level)

    def build_environment(self) -> Environment:
        """Return the named environment with any URL overrides applied."""
        base = Environment.from_name(self.environment)
        overrides = {
            "auth_url": self.auth_url,
            "payments_url": self.payments_url,
            "hpp_url": self.hpp_url,
        }
        overrides = {k: v for k, v in overrides.items() if v}
        if not overrides:
            return base
        return Environment.custom(
            auth_url=overrides.get("auth_url", base.auth_url),
            payments_url=overrides.get("payments_url", base.payments_url),
            hpp_url=overrides.get("hpp_url", base.hpp_url),
        )

    def build_signing_key(self) -> Optional[SigningKey]:
        """Return the configured signing key, if any.

        :raises ConfigurationError: If key material is set without a key id,
            or the key file cannot be read
        """
        if self.signing_private_key is None and self.signing_private_key_path is None:
            return None
        if not self.signing_key_id:
            raise ConfigurationError(
                "TRUELAYER_SIGNING_KEY_ID is required when a signing key is configured",
                config_key="signing_key_id",
            )
        if self.signing_private_key is not None:
            return SigningKey(
                self.signing_key_id, self.signing_private_key.get_secret_value()
            )
        try:
            return SigningKey.from_file(self.signing_key_id, self.signing_private_key_path)
        except OSError as e:
            raise ConfigurationError(
                f"Cannot read signing key file: {e}",
                config_key="signing_private_key_path",
            ) from e

    def to_client_config(self) -> ClientConfig:
        """Build a :class:`ClientConfig` from these settings."""
        if self.access_token is not None:
            credentials = StaticTokenCredentials(access_token=self.access_token)
        else:
            credentials = ClientCredentials(
                client_id=self.client_id,
                client_secret=self.client_secret,
                scope=self.scope,
            )
        return ClientConfig(
            credentials=credentials,
            signing_key=self.build_signing_key(),
            environment=self.build_environment(),
            retry_policy=RetryPolicy(
                max_attempts=self.max_attempts, total_timeout=self.total_timeout
            ),
            request_timeout=self.request_timeout,
            token_refresh_margin=self.token_refresh_margin,
        )

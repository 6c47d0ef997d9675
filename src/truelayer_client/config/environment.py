"""Centralized environment configuration for the TrueLayer APIs.

This module provides a single source of truth for the base URLs of the
authorization server, the payments API and the hosted payment page in
each TrueLayer environment. All components should resolve URLs through
:class:`Environment` instead of hard-coding them.
"""

from typing import ClassVar, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator

# Type alias for named environments
EnvironmentName = Literal["live", "sandbox"]


class Environment(BaseModel):
    """Base URLs for one TrueLayer environment.

    :param name: Environment label ("live", "sandbox" or "custom")
    :type name: str
    :param auth_url: Authorization server base URL
    :type auth_url: str
    :param payments_url: Payments API base URL, including the version prefix
    :type payments_url: str
    :param hpp_url: Hosted payment page base URL
    :type hpp_url: str
    """

    model_config = ConfigDict(frozen=True)

    name: str = "custom"
    auth_url: str
    payments_url: str
    hpp_url: str

    # Single source of truth for the named environments
    AUTH_URLS: ClassVar[Dict[str, str]] = {
        "live": "https://auth.truelayer.com",
        "sandbox": "https://auth.truelayer-sandbox.com",
    }
    PAYMENTS_URLS: ClassVar[Dict[str, str]] = {
        "live": "https://api.truelayer.com/v3",
        "sandbox": "https://api.truelayer-sandbox.com/v3",
    }
    HPP_URLS: ClassVar[Dict[str, str]] = {
        "live": "https://payment.truelayer.com",
        "sandbox": "https://payment.truelayer-sandbox.com",
    }

    DEFAULT_ENVIRONMENT: ClassVar[EnvironmentName] = "live"

    @field_validator("auth_url", "payments_url", "hpp_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"Expected an absolute http(s) URL, got '{value}'")
        return value.rstrip("/")

    @classmethod
    def from_name(cls, name: Optional[str] = None) -> "Environment":
        """Return the environment with the given name.

        :param name: "live" or "sandbox"; None for the default (live)
        :type name: Optional[str]
        :return: Resolved environment
        :rtype: Environment
        :raises ValueError: If the name is not a known environment

        Example:
            >>> Environment.from_name("sandbox").auth_url
            'https://auth.truelayer-sandbox.com'
        """
        key = (name or cls.DEFAULT_ENVIRONMENT).lower()
        if key not in cls.AUTH_URLS:
            raise ValueError(
                f"Unknown environment '{name}'. "
                f"Available environments: {', '.join(cls.AUTH_URLS)}"
            )
        return cls(
            name=key,
            auth_url=cls.AUTH_URLS[key],
            payments_url=cls.PAYMENTS_URLS[key],
            hpp_url=cls.HPP_URLS[key],
        )

    @classmethod
    def live(cls) -> "Environment":
        """Return the production environment."""
        return cls.from_name("live")

    @classmethod
    def sandbox(cls) -> "Environment":
        """Return the sandbox environment."""
        return cls.from_name("sandbox")

    @classmethod
    def custom(cls, auth_url: str, payments_url: str, hpp_url: str) -> "Environment":
        """Return an environment with explicit base URLs.

        :param auth_url: Authorization server base URL
        :param payments_url: Payments API base URL
        :param hpp_url: Hosted payment page base URL
        :return: Custom environment
        :rtype: Environment
        """
        return cls(
            name="custom", auth_url=auth_url, payments_url=payments_url, hpp_url=hpp_url
        )

    @classmethod
    def from_single_url(cls, url: str) -> "Environment":
        """Return an environment serving every API from the same base URL.

        Mostly useful for pointing the client at a local mock server.

        :param url: Base URL for all APIs
        :return: Custom environment
        :rtype: Environment
        """
        return cls.custom(auth_url=url, payments_url=url, hpp_url=url)

    def token_endpoint(self) -> str:
        """Return the OAuth2 token endpoint URL."""
        return f"{self.auth_url}/connect/token"

    def api_url(self, path: str) -> str:
        """Join a resource path onto the payments API base URL.

        :param path: Resource path, with or without a leading slash
        :return: Absolute URL
        """
        return f"{self.payments_url}/{path.lstrip('/')}"

"""Shared plumbing for the typed API classes.

Each domain operation maps to exactly one call through the
:class:`~truelayer_client.utils.http.client.AuthenticatedClient`
pipeline: serialize the typed request, send it, then decode the typed
response or raise the mapped error.
"""

import logging
from typing import Any, Dict, Optional, Type, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from ..config.environment import Environment
from ..utils.http.client import AuthenticatedClient
from ..utils.http.errors import decode_response, raise_for_api_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


def resource_path(*segments: str) -> str:
    """Join path segments, percent-encoding each one.

    >>> resource_path("payments", "a/b")
    '/payments/a%2Fb'
    """
    return "/" + "/".join(quote(str(segment), safe="") for segment in segments)


class BaseApi:
    """Base class for the payments, payouts and merchant account APIs.

    :param client: Pipeline client shared by all APIs of one TrueLayer client
    :type client: AuthenticatedClient
    :param environment: Environment providing base URLs
    :type environment: Environment
    """

    def __init__(self, client: AuthenticatedClient, environment: Environment):
        self._client = client
        self._environment = environment

    async def _send(
        self,
        method: str,
        path: str,
        body: Optional[BaseModel] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        url = self._environment.api_url(path)
        headers = {"Accept": "application/json"}
        content = None
        if body is not None:
            # These exact bytes are what gets signed and transmitted
            content = body.model_dump_json(exclude_none=True).encode("utf-8")
            headers["Content-Type"] = "application/json"
        logger.debug(f"{method} {path}")
        return await self._client.request(
            method, url, content=content, headers=headers, params=params
        )

    async def _call(
        self,
        method: str,
        path: str,
        response_model: Type[T],
        body: Optional[BaseModel] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> T:
        """Send a request and decode its successful response.

        :raises ApiError: If the API rejected the request
        :raises DecodeError: If the response body has an unexpected shape
        """
        response = await self._send(method, path, body, params)
        raise_for_api_error(response)
        return decode_response(response, response_model)

    async def _execute(
        self, method: str, path: str, body: Optional[BaseModel] = None
    ) -> None:
        """Send a request whose successful response carries no content.

        :raises ApiError: If the API rejected the request
        """
        response = await self._send(method, path, body)
        raise_for_api_error(response)

    async def _get_optional(
        self,
        path: str,
        response_model: Any,
        params: Optional[Dict[str, str]] = None,
    ) -> Optional[Any]:
        """GET a resource, returning None when it does not exist."""
        response = await self._send("GET", path, params=params)
        if response.status_code == 404:
            logger.debug(f"{path} not found")
            return None
        raise_for_api_error(response)
        return decode_response(response, response_model)

"""Map HTTP responses onto the client's error taxonomy.

The TrueLayer APIs report failures in two shapes:

- problem+json (current APIs): ``type``, ``title``, ``status``,
  ``trace_id``, ``detail`` and ``errors`` (field name to list of messages)
- legacy OAuth style: ``error``, ``error_description`` and
  ``error_details`` (field name to message)

Anything else is reported verbatim, falling back to the HTTP reason
phrase when the body is empty.
"""

import json
import logging
from typing import Any, Dict, List, Type, TypeVar, Union

import httpx
from pydantic import TypeAdapter, ValidationError

from ...exceptions import ApiError, DecodeError

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRACE_ID_HEADER = "tl-trace-id"


def _normalize_errors(raw: Any) -> Dict[str, List[str]]:
    if not isinstance(raw, dict):
        return {}
    normalized: Dict[str, List[str]] = {}
    for field, messages in raw.items():
        if isinstance(messages, list):
            normalized[str(field)] = [str(m) for m in messages]
        else:
            normalized[str(field)] = [str(messages)]
    return normalized


def api_error_from_response(response: httpx.Response) -> ApiError:
    """Build an :class:`ApiError` from a non-success response.

    :param response: Response whose status indicates failure
    :type response: httpx.Response
    :return: Parsed API error
    :rtype: ApiError
    """
    status = response.status_code
    trace_id = response.headers.get(TRACE_ID_HEADER)
    text = response.text.strip()

    try:
        body = json.loads(text) if text else None
    except json.JSONDecodeError:
        body = None

    if isinstance(body, dict) and ("title" in body or "type" in body):
        return ApiError(
            status=status,
            message=str(body.get("title") or body.get("type")),
            code=body.get("type"),
            trace_id=body.get("trace_id") or trace_id,
            detail=body.get("detail"),
            errors=_normalize_errors(body.get("errors")),
        )

    if isinstance(body, dict) and "error" in body:
        return ApiError(
            status=status,
            message=str(body.get("error_description") or body["error"]),
            code=str(body["error"]),
            trace_id=trace_id,
            errors=_normalize_errors(body.get("error_details")),
        )

    message = text or response.reason_phrase or f"HTTP {status}"
    return ApiError(status=status, message=message, trace_id=trace_id)


def raise_for_api_error(response: httpx.Response) -> None:
    """Raise :class:`ApiError` unless the response indicates success.

    :param response: Final response of a logical call
    :raises ApiError: If the status is not 2xx
    """
    if response.is_success:
        return
    error = api_error_from_response(response)
    logger.warning(
        f"API error for {response.request.method} {response.request.url.path}: "
        f"{error} (trace_id={error.trace_id})"
    )
    raise error


def decode_response(response: httpx.Response, model: Union[Type[T], Any]) -> T:
    """Decode a JSON response body into ``model``.

    ``model`` may be a pydantic model or any type understood by
    :class:`pydantic.TypeAdapter` (e.g. ``List[Payment]``).

    :param response: Successful response
    :param model: Target type
    :return: Decoded value
    :raises DecodeError: If the body is not valid JSON for ``model``
    """
    try:
        return TypeAdapter(model).validate_json(response.content)
    except ValidationError as e:
        logger.error(
            f"Unexpected response body for {response.request.method} "
            f"{response.request.url.path}: {e.error_count()} validation error(s)"
        )
        raise DecodeError(
            f"Response body did not match {getattr(model, '__name__', model)}: {e}",
            status_code=response.status_code,
        ) from e

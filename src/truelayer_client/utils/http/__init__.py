"""HTTP utilities public API (barrel module).

This package provides:
- Retry policy with jittered backoff and idempotency rules
- Mapping of error responses onto the client's exceptions

The authenticated client lives in :mod:`truelayer_client.utils.http.client`
and is imported from there directly, since it depends on the auth and
signing packages.

Recommended import pattern for consumers:
    from truelayer_client.utils.http import RetryPolicy, raise_for_api_error
    from truelayer_client.utils.http.client import AuthenticatedClient
"""

from .errors import api_error_from_response, decode_response, raise_for_api_error
from .retry import (
    IDEMPOTENCY_KEY_HEADER,
    RetryPolicy,
    RetryState,
    is_idempotent_request,
    parse_retry_after,
    should_retry_status,
)

__all__ = [
    "IDEMPOTENCY_KEY_HEADER",
    "RetryPolicy",
    "RetryState",
    "is_idempotent_request",
    "parse_retry_after",
    "should_retry_status",
    "api_error_from_response",
    "decode_response",
    "raise_for_api_error",
]

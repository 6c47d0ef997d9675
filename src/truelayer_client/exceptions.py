"""Structured exception classes for the TrueLayer client."""

import json
from enum import Enum
from typing import Any, Dict, List, Optional


class TrueLayerError(Exception):
    """Base exception for all TrueLayer client errors.

    This exception serves as the parent class for every error surfaced by
    the client, providing a consistent interface for error handling by
    callers regardless of which pipeline stage failed.

    :param message: Human-readable error message
    :param code: Optional error code for programmatic handling
    :param details: Optional dictionary containing additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize the exception with message, code, and details."""
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format.

        :return: Dictionary containing error code, message, and details
        """
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }

    def to_json(self) -> str:
        """Convert exception to JSON string.

        :return: JSON-encoded string representation of the exception
        """
        return json.dumps(self.to_dict())


class AuthErrorKind(str, Enum):
    """Reasons an access token could not be acquired."""

    NETWORK_FAILURE = "network_failure"
    REJECTED = "rejected"
    MALFORMED_RESPONSE = "malformed_response"


class AuthError(TrueLayerError):
    """Raised when token acquisition fails.

    Every caller awaiting the same in-flight refresh receives the same
    instance of this exception.

    :param message: Description of the authentication failure
    :param kind: Which stage of the token exchange failed
    :param status_code: HTTP status returned by the authorization server, if any
    :param details: Optional additional context about the failure
    """

    def __init__(
        self,
        message: str,
        kind: AuthErrorKind,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize authentication error with its failure kind."""
        details = dict(details or {})
        details["kind"] = kind.value
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message=message, code="AUTH_ERROR", details=details)
        self.kind = kind
        self.status_code = status_code


class SigningErrorKind(str, Enum):
    """Reasons a request could not be signed."""

    INVALID_KEY = "invalid_key"


class SigningError(TrueLayerError):
    """Raised when a request cannot be signed.

    Signing failures are fatal for the logical call and are never retried.

    :param message: Description of the signing failure
    :param kind: Category of the signing failure
    """

    def __init__(
        self,
        message: str,
        kind: SigningErrorKind = SigningErrorKind.INVALID_KEY,
    ):
        """Initialize signing error with message and kind."""
        super().__init__(
            message=message, code="SIGNING_ERROR", details={"kind": kind.value}
        )
        self.kind = kind


class TransportError(TrueLayerError):
    """Raised when a request could not be delivered.

    Covers connection failures, timeouts and transient upstream statuses
    (5xx, 429) that were still failing once the retry policy gave up.

    :param message: Description of the transport failure
    :param status_code: Last HTTP status observed, if a response was received
    :param attempts: Number of physical attempts made for the logical call
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        attempts: Optional[int] = None,
    ):
        """Initialize transport error with the last observed status."""
        details: Dict[str, Any] = {}
        if status_code is not None:
            details["status_code"] = status_code
        if attempts is not None:
            details["attempts"] = attempts
        super().__init__(message=message, code="TRANSPORT_ERROR", details=details)
        self.status_code = status_code
        self.attempts = attempts


class ApiError(TrueLayerError):
    """Raised when the API rejected a request.

    ``code`` carries the machine-readable error type reported by the API
    (``type`` for problem+json bodies, ``error`` for legacy bodies).

    :param status: HTTP status code of the response
    :param message: Error title reported by the API
    :param code: Machine-readable error type
    :param trace_id: Trace identifier to quote when contacting support
    :param detail: Longer description of the failure
    :param errors: Per-field validation errors
    """

    def __init__(
        self,
        status: int,
        message: str,
        code: Optional[str] = None,
        trace_id: Optional[str] = None,
        detail: Optional[str] = None,
        errors: Optional[Dict[str, List[str]]] = None,
    ):
        """Initialize API error from the parsed response body."""
        details: Dict[str, Any] = {"status": status}
        if trace_id:
            details["trace_id"] = trace_id
        if detail:
            details["detail"] = detail
        if errors:
            details["errors"] = errors
        super().__init__(message=message, code=code or "API_ERROR", details=details)
        self.status = status
        self.trace_id = trace_id
        self.detail = detail
        self.errors = errors or {}

    def __str__(self) -> str:
        return f"[{self.status}] {self.message}"


class DecodeError(TrueLayerError):
    """Raised when a response body does not match the expected shape.

    :param message: Description of the decoding failure
    :param status_code: HTTP status of the undecodable response
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        """Initialize decode error with message and response status."""
        details = {}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message=message, code="DECODE_ERROR", details=details)
        self.status_code = status_code


class ConfigurationError(TrueLayerError):
    """Raised for configuration-related errors.

    :param message: Description of the configuration error
    :param config_key: Optional configuration key that caused the error
    """

    def __init__(self, message: str, config_key: Optional[str] = None):
        """Initialize configuration error with message and optional key."""
        details = {}
        if config_key:
            details["config_key"] = config_key
        super().__init__(message=message, code="CONFIGURATION_ERROR", details=details)


class PollTimeoutError(TrueLayerError):
    """Raised when polling gives up before the resource reaches the wanted state.

    :param message: Description of the timeout
    :param attempts: Number of polls performed
    :param last_result: Last resource observed before giving up
    """

    def __init__(self, message: str, attempts: int, last_result: Any = None):
        """Initialize poll timeout with the number of polls made."""
        super().__init__(
            message=message, code="POLL_TIMEOUT", details={"attempts": attempts}
        )
        self.attempts = attempts
        self.last_result = last_result

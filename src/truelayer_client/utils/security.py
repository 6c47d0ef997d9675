"""Security utilities for log sanitization.

Access tokens, client secrets, request signatures and private keys must
never reach a log sink. This module provides:
- Pattern based redaction of sensitive values inside strings
- Header redaction for request/response debugging
- A logging formatter that redacts every record it formats
"""

import copy
import logging
import re
import sys
from typing import Any, Dict

# Patterns for sensitive data detection
SENSITIVE_PATTERNS = {
    "private_key": re.compile(
        r"-----BEGIN [A-Z ]*PRIVATE KEY-----.*?-----END [A-Z ]*PRIVATE KEY-----",
        re.DOTALL,
    ),
    "detached_jws": re.compile(r"eyJ[A-Za-z0-9_-]+\.\.[A-Za-z0-9_-]+"),
    "jwt_token": re.compile(r"eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+"),
    "bearer_token": re.compile(r"Bearer\s+[A-Za-z0-9._~+/=-]+", re.IGNORECASE),
    "client_secret": re.compile(
        r"(\"?(?:client_secret|refresh_token|access_token)\"?\s*[:=]\s*\"?)[^\",&\s]+",
        re.IGNORECASE,
    ),
}

# Headers that should never be logged
SENSITIVE_HEADERS = {
    "authorization",
    "tl-signature",
    "cookie",
    "set-cookie",
}

# =============================================================================
# String and Log Sanitization
# =============================================================================


def sanitize_string(value: str) -> str:
    """Redact sensitive values from a string.

    Each match is replaced by a ``<name:REDACTED>`` marker so the rest of
    the message stays readable.

    :param value: String to sanitize
    :type value: str
    :return: Sanitized string with sensitive data redacted
    :rtype: str
    """
    if not value:
        return value
    for pattern_name, pattern in SENSITIVE_PATTERNS.items():
        if pattern_name == "client_secret":
            value = pattern.sub(rf"\1<{pattern_name}:REDACTED>", value)
        else:
            value = pattern.sub(f"<{pattern_name}:REDACTED>", value)
    return value


def sanitize_headers(headers: Dict[str, Any]) -> Dict[str, Any]:
    """Sanitize HTTP headers for logging.

    :param headers: Dictionary of HTTP headers
    :type headers: Dict[str, Any]
    :return: Sanitized headers dictionary
    :rtype: Dict[str, Any]
    """
    if not headers:
        return headers
    sanitized = copy.deepcopy(headers)
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS:
            if isinstance(value, str) and len(value) > 0:
                sanitized[key] = f"<REDACTED:length={len(value)}>"
            else:
                sanitized[key] = "<REDACTED>"
        elif isinstance(value, str):
            sanitized[key] = sanitize_string(value)
    return sanitized


class SanitizingFormatter(logging.Formatter):
    """Formatter that automatically sanitizes sensitive data.

    The message is rendered with its arguments first, then redacted, so
    secrets passed as ``%s`` arguments are covered too.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with automatic sanitization.

        :param record: Log record to format
        :type record: logging.LogRecord
        :return: Sanitized log message
        :rtype: str
        """
        record.msg = sanitize_string(record.getMessage())
        record.args = None
        return super().format(record)


# Global flag to track if logging has been set up
_LOGGING_CONFIGURED = False


def setup_secure_logging(level: str = "INFO") -> None:
    """Set up logging with automatic sanitization.

    Uses a singleton pattern to prevent duplicate handlers.

    :param level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    :type level: str
    :return: None
    :rtype: None
    """
    global _LOGGING_CONFIGURED

    # Skip if already configured (singleton pattern)
    if _LOGGING_CONFIGURED:
        logging.getLogger(__name__).debug(
            "Logging already configured, skipping duplicate setup"
        )
        return

    formatter = SanitizingFormatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        handlers=[handler],
        force=True,  # Override any existing configuration
    )

    # httpx logs full request lines at INFO; keep them behind our own debug logs
    for logger_name in ["httpx", "httpcore"]:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    _LOGGING_CONFIGURED = True

"""Retry policy for the delivery pipeline.

This module decides which failures are worth another attempt and how long
to wait before it:

- Exponential backoff with full jitter
- Retry-After header support
- A maximum attempt count and an elapsed-time ceiling per logical call
- Idempotency rules so that mutating calls are only replayed when the
  server can deduplicate them
"""

import logging
import random
import time
from dataclasses import dataclass, field
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

IDEMPOTENCY_KEY_HEADER = "Idempotency-Key"

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})
MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


def parse_retry_after(response: httpx.Response) -> Optional[float]:
    """Parse Retry-After header from response.

    Supports both delta-seconds and HTTP-date formats.
    """
    retry_after = response.headers.get("retry-after", "").strip()
    if not retry_after:
        return None

    if retry_after.isdigit():
        delay = float(retry_after)
        logger.debug(f"Parsed Retry-After as delta-seconds: {delay}")
        return delay

    try:
        retry_date = parsedate_to_datetime(retry_after)
    except (TypeError, ValueError) as e:
        logger.warning(f"Failed to parse Retry-After header '{retry_after}': {e}")
        return None
    delay = max(0.0, (retry_date - datetime.now(retry_date.tzinfo)).total_seconds())
    logger.debug(f"Parsed Retry-After as HTTP-date: {delay}s")
    return delay


def should_retry_status(status_code: int) -> bool:
    """Determine if status code is retryable."""
    # Retry: 429 and every 5xx
    return status_code == 429 or 500 <= status_code < 600


def is_idempotent_request(request: httpx.Request) -> bool:
    """Check if request can be replayed safely.

    Safe methods are always replayable. Mutating methods are replayable
    only when they carry a non-empty idempotency key.
    """
    method = request.method.upper()
    if method in SAFE_METHODS:
        return True
    return bool(request.headers.get(IDEMPOTENCY_KEY_HEADER, "").strip())


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff with full jitter.

    ``total_timeout`` bounds the whole logical call (every attempt plus the
    sleeps between them) and is independent of the per-attempt timeout
    configured on the HTTP client.

    :param max_attempts: Maximum physical attempts, including the first
    :param initial_delay: Backoff ceiling before the first retry, in seconds
    :param max_delay: Upper bound for any single backoff, in seconds
    :param backoff_multiplier: Growth factor of the backoff ceiling
    :param total_timeout: Elapsed-time budget for the logical call; None disables it
    """

    max_attempts: int = 4
    initial_delay: float = 0.5
    max_delay: float = 10.0
    backoff_multiplier: float = 2.0
    total_timeout: Optional[float] = 60.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.total_timeout is not None and self.total_timeout <= 0:
            raise ValueError("total_timeout must be positive")

    @classmethod
    def no_retry(cls, total_timeout: Optional[float] = None) -> "RetryPolicy":
        """Return a policy that makes a single attempt."""
        return cls(max_attempts=1, total_timeout=total_timeout)

    def compute_delay(self, attempt: int, retry_after: Optional[float] = None) -> float:
        """Return the sleep before the attempt following ``attempt``.

        :param attempt: 1-based number of the attempt that just failed
        :param retry_after: Server supplied delay, which takes precedence
        :return: Delay in seconds
        """
        if retry_after is not None:
            return min(retry_after, self.max_delay)
        ceiling = min(
            self.max_delay,
            self.initial_delay * (self.backoff_multiplier ** (attempt - 1)),
        )
        # Full jitter
        return random.uniform(0, ceiling)

    def start(self) -> "RetryState":
        """Begin tracking a new logical call."""
        return RetryState(policy=self)


@dataclass
class RetryState:
    """Attempt counter and elapsed-time budget of one logical call."""

    policy: RetryPolicy
    attempts: int = 0
    started_at: float = field(default_factory=time.monotonic)

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started_at

    def remaining(self) -> Optional[float]:
        """Return the seconds left in the budget, or None when unbounded."""
        if self.policy.total_timeout is None:
            return None
        return max(0.0, self.policy.total_timeout - self.elapsed)

    def restart_attempts(self) -> None:
        """Reset the attempt counter while keeping the elapsed-time budget."""
        self.attempts = 0

    def can_retry_after(self, delay: float) -> bool:
        """Return whether another attempt fits after sleeping ``delay``."""
        if self.attempts >= self.policy.max_attempts:
            return False
        remaining = self.remaining()
        return remaining is None or delay < remaining

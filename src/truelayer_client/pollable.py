"""Poll a resource until it reaches a wanted state.

Payments, refunds and payouts settle asynchronously. These helpers fetch
a resource repeatedly, with exponential backoff between fetches, until a
predicate holds or the time budget runs out.

Examples:
    >>> payment = await poll_until_terminal_state(
    ...     lambda: tl.payments.get_by_id(payment_id)
    ... )
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from .exceptions import ApiError, PollTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class PollOptions:
    """Backoff between polls and the overall time budget.

    :param initial_delay: Delay before the second poll, in seconds
    :param max_delay: Upper bound for any delay, in seconds
    :param backoff_multiplier: Growth factor of the delay
    :param timeout: Give up after this many seconds
    """

    initial_delay: float = 1.0
    max_delay: float = 30.0
    backoff_multiplier: float = 2.0
    timeout: float = 300.0

    def delay_for(self, attempt: int) -> float:
        return min(
            self.max_delay, self.initial_delay * (self.backoff_multiplier ** (attempt - 1))
        )


async def poll_until(
    fetch: Callable[[], Awaitable[Optional[T]]],
    predicate: Callable[[T], bool],
    options: Optional[PollOptions] = None,
) -> T:
    """Fetch until ``predicate`` holds for the result.

    :param fetch: Coroutine function returning the resource, or None if it does not exist
    :param predicate: Condition the resource must meet
    :param options: Backoff and timeout; defaults to 1s..30s over 5 minutes
    :return: The first resource satisfying ``predicate``
    :raises PollTimeoutError: If the budget ran out first
    :raises ApiError: If the resource does not exist (404)
    """
    options = options or PollOptions()
    deadline = time.monotonic() + options.timeout
    attempt = 0
    result: Optional[T] = None

    while True:
        attempt += 1
        result = await fetch()
        if result is None:
            raise ApiError(status=404, message="Polled resource was not found")
        if predicate(result):
            logger.debug(f"Poll condition met after {attempt} attempt(s)")
            return result

        delay = options.delay_for(attempt)
        remaining = deadline - time.monotonic()
        if delay >= remaining:
            logger.warning(f"Polling gave up after {attempt} attempt(s)")
            raise PollTimeoutError(
                f"Condition not met within {options.timeout}s",
                attempts=attempt,
                last_result=result,
            )
        await asyncio.sleep(delay)


async def poll_until_terminal_state(
    fetch: Callable[[], Awaitable[Optional[T]]],
    options: Optional[PollOptions] = None,
) -> T:
    """Fetch until the resource's ``is_in_terminal_state()`` returns True.

    Works with :class:`~truelayer_client.models.payments.Payment`,
    :class:`~truelayer_client.models.payments.Refund` and
    :class:`~truelayer_client.models.payouts.Payout`.
    """
    return await poll_until(fetch, lambda resource: resource.is_in_terminal_state(), options)

"""Caller-side retry of conflicting appends.

Stores never retry internally. Callers that want the usual
"query, decide, append, retry on conflict" loop wrap the whole
read-decide-write step in a `ConflictRetryPolicy`.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from ..domain import ConcurrencyError

LOGGER = logging.getLogger(__name__)
T = TypeVar("T")


class ConflictRetryPolicy:
    """Re-runs an operation that fails with `ConcurrencyError`.

    The operation must re-query its scope on every attempt so that each
    append carries a fresh watermark.

    Attributes:
        max_attempts: The maximum number of attempts (initial + retries).
            Must be positive.
        retry_delay: The delay in seconds between attempts.
            Must be non-negative.

    Examples:
        >>> async def enroll() -> None:
        ...     result = await store.query(scope)
        ...     decide(result.events)
        ...     await store.append([event], scope, result.max_sequence_number)
        >>>
        >>> await ConflictRetryPolicy(max_attempts=3, retry_delay=0.05).run(enroll)
    """

    __slots__ = ("max_attempts", "retry_delay")

    def __init__(self, max_attempts: int, retry_delay: float = 0.0):
        """Initialize the retry policy.

        Raises:
            ValueError: If max_attempts <= 0 or retry_delay < 0.
        """
        if max_attempts <= 0:
            raise ValueError("max_attempts must be positive")
        if retry_delay < 0:
            raise ValueError("retry_delay must be non-negative")
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run ``operation`` until it succeeds or attempts are exhausted.

        Raises:
            ConcurrencyError: If every attempt conflicted.
            Exception: Any other error is re-raised immediately.
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                return await operation()
            except ConcurrencyError as e:
                LOGGER.warning(f"Append conflict on attempt {attempt}/{self.max_attempts}: {e}")
                if attempt >= self.max_attempts:
                    raise ConcurrencyError(e.expected, e.actual) from e
            await asyncio.sleep(self.retry_delay)

"""Conflict Retry — re-runs a whole command after an optimistic-concurrency conflict.

Invariants:
    - Only ConcurrencyError is retried; every other error propagates on first raise
    - The operation is re-invoked from scratch (fresh unit of work, fresh reads)
    - After `attempts` tries the last ConcurrencyError propagates, carrying a
      retry_after_ms hint (the next backoff) unless it already has one
    - Cancellation is never retried

Design Decisions:
    - Exponential backoff with jitter, same shape as an upstream API client retry
    - Retry sits above the service, not inside it: services stay single-attempt
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from storycompass.core.errors import ConcurrencyError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _backoff_ms(attempt: int, base_delay_ms: int, max_delay_ms: int) -> int:
    delay = min(max_delay_ms, (2 ** attempt) * base_delay_ms)
    return int(delay * random.uniform(0.75, 1.25))  # nosec B311


async def retry_on_conflict(
    operation: Callable[[], Awaitable[T]],
    attempts: int = 3,
    base_delay_ms: int = 10,
    max_delay_ms: int = 200,
) -> T:
    """Await operation(); on ConcurrencyError try again, `attempts` tries in total."""
    for attempt in range(max(1, attempts) - 1):
        try:
            return await operation()
        except ConcurrencyError as e:
            delay = _backoff_ms(attempt, base_delay_ms, max_delay_ms)
            logger.info(
                f"Conflict, retrying in {delay}ms",
                extra={"error_code": e.code, "attempt": attempt + 1},
            )
            await asyncio.sleep(delay / 1000)
    try:
        return await operation()
    except ConcurrencyError as e:
        if e.context.retry_after_ms is None:
            e.context.retry_after_ms = max(1, _backoff_ms(
                max(1, attempts) - 1, base_delay_ms, max_delay_ms,
            ))
        raise

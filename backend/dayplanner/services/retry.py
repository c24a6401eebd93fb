"""Linear-backoff retry loop for the completion call."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int = 3,
    base_delay: float = 1.0,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Await ``operation`` up to ``attempts`` times.

    Failures before the last attempt are logged and followed by a wait of
    ``base_delay * attempt_number`` seconds; the last attempt's exception
    propagates unchanged. Cancellation is never retried.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    for attempt in range(1, attempts + 1):
        try:
            logger.debug("Completion attempt %d/%d", attempt, attempts)
            return await operation()
        except Exception as exc:
            if attempt == attempts:
                logger.error("Completion attempt %d/%d failed, giving up: %s", attempt, attempts, exc)
                raise
            delay = base_delay * attempt
            logger.warning("Completion attempt %d/%d failed: %s; retrying in %.1fs", attempt, attempts, exc, delay)
            await sleep(delay)

    raise AssertionError("unreachable")  # pragma: no cover

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from ...domain.models import RetryPolicy
from .exceptions import BackendError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    sleep: Sleep = asyncio.sleep,
    label: str = "request",
) -> T:
    """Run ``operation`` until it succeeds, a non-retryable error occurs, or
    ``policy.max_attempts`` is exhausted.

    Only ``BackendError`` subclasses with ``retryable`` set are retried.
    Anything else, including ``asyncio.CancelledError``, propagates at once.
    """
    attempts = max(1, policy.max_attempts)
    for attempt in range(attempts):
        try:
            return await operation()
        except BackendError as e:
            if not e.retryable or attempt == attempts - 1:
                raise
            delay = policy.delay_for(attempt)
            logger.warning(
                "%s attempt %d/%d failed: %s (retrying in %.1fs)",
                label,
                attempt + 1,
                attempts,
                e,
                delay,
            )
            await sleep(delay)
    raise AssertionError("unreachable")

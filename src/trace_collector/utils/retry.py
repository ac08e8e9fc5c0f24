"""Retry helper for trace samples."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """How often to retry a failing sample.

    The default retries forever with no delay. A collection run is watched
    by an operator who stops it by hand if a URL can never succeed.
    """

    max_attempts: Optional[int] = None
    backoff_seconds: float = 0.0


async def repeat_until_success(
    operation: Callable[[], Awaitable[T]],
    policy: Optional[RetryPolicy] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Await `operation()` until it returns without raising.

    Every failure is logged. The last error is re-raised only when the
    policy has a finite `max_attempts` and it is used up.
    """
    policy = policy or RetryPolicy()
    attempt = 0
    while True:
        attempt += 1
        try:
            return await operation()
        except Exception as e:
            logger.error(
                f"Attempt {attempt} failed: {e}",
                extra={"attempt": attempt, "error_type": type(e).__name__},
            )
            if policy.max_attempts is not None and attempt >= policy.max_attempts:
                raise
            if policy.backoff_seconds > 0:
                await sleep(policy.backoff_seconds)

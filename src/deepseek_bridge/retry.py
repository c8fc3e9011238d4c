"""Retry policy with exponential backoff and jitter."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from deepseek_bridge.errors import BridgeError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Configuration for automatic retries."""

    max_retries: int = 2
    base_delay: float = 0.5
    max_delay: float = 8.0
    backoff_multiplier: float = 2.0
    jitter: bool = True


def delay_for_attempt(
    attempt: int,
    policy: RetryPolicy,
    retry_after: float | None = None,
) -> float:
    """Seconds to wait before retry *attempt* (0-indexed).

    A server-supplied ``retry_after`` is used as-is. Otherwise the backoff
    grows by ``backoff_multiplier`` per attempt up to ``max_delay``, then
    jitter scales it by a random factor between 0.5 and 1.5.
    """
    if retry_after is not None:
        return retry_after
    backoff = min(policy.base_delay * policy.backoff_multiplier**attempt, policy.max_delay)
    return backoff * random.uniform(0.5, 1.5) if policy.jitter else backoff


def is_retryable(error: BaseException) -> bool:
    return isinstance(error, BridgeError) and bool(getattr(error, "retryable", False))


async def retry(
    fn: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
) -> T:
    """Execute fn, retrying BridgeErrors flagged ``retryable``.

    Anything else, and the final failure once retries are exhausted, is raised
    unchanged.
    """
    attempt = 0
    while True:
        try:
            return await fn()
        except BridgeError as e:
            if not is_retryable(e) or attempt >= policy.max_retries:
                raise

            retry_after = getattr(e, "retry_after", None)
            if retry_after is not None and retry_after > policy.max_delay:
                raise

            wait = delay_for_attempt(attempt, policy, retry_after)
            attempt += 1
            logger.warning(
                "Retrying after %s (attempt %d/%d, waiting %.2fs)",
                e, attempt, policy.max_retries, wait,
            )
            await asyncio.sleep(wait)

"""Exponential-backoff retry executor for flaky asynchronous operations.

Delays are deterministic (no jitter): the wait after failed attempt ``n`` is
``min(initial_delay * backoff_factor ** (n - 1), max_delay)``. After the last
attempt the original exception is re-raised as-is.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from dpcheck.core import constants
from dpcheck.utils.logging import get_logger

T = TypeVar("T")

logger = get_logger("retry")


class RetryPolicy(BaseModel):
    """Backoff policy; all delays are in milliseconds."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    max_attempts: int = Field(constants.RETRY_MAX_ATTEMPTS, ge=1)
    initial_delay_ms: float = Field(constants.RETRY_INITIAL_DELAY_MS, ge=0)
    backoff_factor: float = Field(constants.RETRY_BACKOFF_FACTOR, ge=1)
    max_delay_ms: float = Field(constants.RETRY_MAX_DELAY_MS, ge=0)

    def delay_for(self, attempt: int) -> float:
        """Delay in ms to wait after the given (1-based) failed attempt."""
        if attempt < 1:
            raise ValueError(f"attempt must be >= 1, got {attempt}")
        try:
            raw = self.initial_delay_ms * self.backoff_factor ** (attempt - 1)
        except OverflowError:
            return self.max_delay_ms
        return min(raw, self.max_delay_ms)

    def wait_strategy(self) -> wait_exponential:
        return wait_exponential(
            multiplier=self.initial_delay_ms / 1000,
            exp_base=self.backoff_factor,
            max=self.max_delay_ms / 1000,
        )


async def retry_with_policy(
    action: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    log: Optional[logging.Logger] = None,
) -> T:
    """Run ``action`` under ``policy``.

    Only exceptions matching ``retry_on`` are retried; anything else propagates
    from the attempt that raised it. ``sleep`` receives the delay in seconds.
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=policy.wait_strategy(),
        retry=retry_if_exception_type(retry_on),
        sleep=sleep,
        reraise=True,
        before_sleep=before_sleep_log(log or logger, logging.WARNING),
    )
    return await retrying(action)


async def retry(
    action: Callable[[], Awaitable[T]],
    max_attempts: int = constants.RETRY_MAX_ATTEMPTS,
    initial_delay: float = constants.RETRY_INITIAL_DELAY_MS,
    backoff_factor: float = constants.RETRY_BACKOFF_FACTOR,
    max_delay: float = constants.RETRY_MAX_DELAY_MS,
    *,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Invoke ``action`` up to ``max_attempts`` times with exponential backoff.

    Args:
        action: Zero-argument coroutine function to run
        max_attempts: Total number of invocations allowed
        initial_delay: Delay after the first failure, in ms
        backoff_factor: Multiplier applied per further failure
        max_delay: Upper bound for any single delay, in ms
        retry_on: Exception types that trigger another attempt
        sleep: Awaitable sleep taking seconds (injectable for tests)

    Returns:
        The first successful result of ``action``

    Raises:
        The exception raised by the final attempt, unchanged
    """
    policy = RetryPolicy(
        max_attempts=max_attempts,
        initial_delay_ms=initial_delay,
        backoff_factor=backoff_factor,
        max_delay_ms=max_delay,
    )
    return await retry_with_policy(action, policy, retry_on=retry_on, sleep=sleep)

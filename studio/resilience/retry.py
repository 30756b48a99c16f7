"""Retry policies with exponential backoff.

Retries always wrap a whole operation, never part of one. Only errors that
declare themselves retryable (write and load failures) are retried;
authorization and state errors are facts and are raised immediately.

Usage:
    policy = RetryPolicy(max_retries=2, backoff_base=0.2)

    outcome = policy.call(machine.approve, ctx, post_id)

    # Or async
    account = await policy.call_async(session.sign_in, token)
"""

import asyncio
import random
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from studio import config
from studio.errors import StudioError
from studio.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class RetryPolicy:
    """Configuration for retry behavior.

    Attributes:
        max_retries: Retries after the first attempt (default WRITE_RETRY_ATTEMPTS)
        backoff_base: Base delay in seconds
        backoff_factor: Multiplier for exponential backoff
        backoff_max: Maximum delay in seconds
        jitter: Add random jitter to delays
    """

    max_retries: int = config.WRITE_RETRY_ATTEMPTS
    backoff_base: float = 0.2
    backoff_factor: float = 2.0
    backoff_max: float = 5.0
    jitter: bool = True

    def get_delay(self, attempt: int) -> float:
        """Calculate delay for a given attempt number (0-indexed)."""
        delay = self.backoff_base * (self.backoff_factor**attempt)
        delay = min(delay, self.backoff_max)

        if self.jitter:
            # Add up to 25% jitter
            delay = delay * (0.75 + random.random() * 0.5)

        return delay

    def should_retry(self, exception: Exception, attempt: int) -> bool:
        """Determine if we should retry for this exception."""
        if attempt >= self.max_retries:
            return False
        return isinstance(exception, StudioError) and exception.retryable

    def _log_retry(self, operation: str, exception: StudioError, attempt: int, delay: float) -> None:
        logger.warning(
            "operation_retry",
            operation=operation,
            attempt=attempt + 1,
            max_retries=self.max_retries,
            delay=round(delay, 3),
            error_code=exception.error_code,
        )

    def call(self, func: Callable[..., T], *args, **kwargs) -> T:
        """Run `func`, retrying the whole call on retryable errors."""
        operation = getattr(func, "__name__", repr(func))
        attempt = 0
        while True:
            try:
                return func(*args, **kwargs)
            except StudioError as e:
                if not self.should_retry(e, attempt):
                    raise
                delay = self.get_delay(attempt)
                self._log_retry(operation, e, attempt, delay)
                time.sleep(delay)
                attempt += 1

    async def call_async(self, func: Callable[..., Awaitable[T]], *args, **kwargs) -> T:
        """Async variant of call()."""
        operation = getattr(func, "__name__", repr(func))
        attempt = 0
        while True:
            try:
                return await func(*args, **kwargs)
            except StudioError as e:
                if not self.should_retry(e, attempt):
                    raise
                delay = self.get_delay(attempt)
                self._log_retry(operation, e, attempt, delay)
                await asyncio.sleep(delay)
                attempt += 1


# No retries: the caller sees the first failure
NO_RETRY = RetryPolicy(max_retries=0)

DEFAULT_POLICY = RetryPolicy()

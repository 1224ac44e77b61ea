"""
Retry and timeout handling for persistence calls.

Transient store failures and per-attempt timeouts are retried with
exponential backoff; anything else propagates on the first attempt.
"""

import asyncio
import random
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Type, TypeVar, Union

from taskscope.core.logging import get_logger
from taskscope.core.config import RetryConfig
from taskscope.core.exceptions import RetryExhaustedError, TransientPersistenceError

logger = get_logger("retry")

T = TypeVar("T")
RetryableException = Union[Type[Exception], Tuple[Type[Exception], ...]]


class RetryStatistics:
    """Statistics tracking for retry operations."""

    def __init__(self) -> None:
        self.total_attempts: int = 0
        self.successful_attempts: int = 0
        self.failed_attempts: int = 0
        self.total_delay: float = 0.0
        self.exception_counts: Dict[str, int] = {}

    def record_attempt(self, success: bool, delay: float = 0.0, exception: Optional[Exception] = None) -> None:
        self.total_attempts += 1
        self.total_delay += delay

        if success:
            self.successful_attempts += 1
        else:
            self.failed_attempts += 1
            if exception:
                exc_name = type(exception).__name__
                self.exception_counts[exc_name] = self.exception_counts.get(exc_name, 0) + 1

    @property
    def success_rate(self) -> float:
        """Success rate as percentage."""
        if self.total_attempts == 0:
            return 0.0
        return (self.successful_attempts / self.total_attempts) * 100.0


class ExponentialBackoff:
    """Exponential backoff delays with optional ±25% jitter."""

    def __init__(self, config: RetryConfig, rng: Optional[random.Random] = None) -> None:
        self.config = config
        self.rng = rng or random.Random()

    def calculate_delay(self, attempt: int) -> float:
        """
        Calculate backoff delay for given attempt number.

        Attempt 1 waits ``base_delay``, each later attempt multiplies by
        ``exponential_base``, capped at ``max_delay``.
        """
        if attempt <= 0:
            return 0.0

        delay = self.config.base_delay * (self.config.exponential_base ** (attempt - 1))
        delay = min(delay, self.config.max_delay)

        if self.config.jitter and delay > 0:
            jitter_range = delay * 0.25
            delay = max(0.0, delay + self.rng.uniform(-jitter_range, jitter_range))

        return delay


class RetryHandler:
    """
    Runs async operations with a per-attempt timeout and backoff retries.

    Retries on the configured exception types (transient store failures and
    timeouts by default) up to ``max_retries`` times after the first attempt.
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        exceptions: RetryableException = (TransientPersistenceError, asyncio.TimeoutError),
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config or RetryConfig()
        self.exceptions = exceptions if isinstance(exceptions, tuple) else (exceptions,)
        self.backoff = ExponentialBackoff(self.config, rng=rng)
        self.statistics = RetryStatistics()

    def should_retry(self, exception: Exception, attempt: int) -> bool:
        if attempt > self.config.max_retries:
            return False
        return isinstance(exception, self.exceptions)

    async def _attempt(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        if self.config.operation_timeout is None:
            return await func(*args, **kwargs)
        return await asyncio.wait_for(func(*args, **kwargs), timeout=self.config.operation_timeout)

    async def run(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """
        Await ``func(*args, **kwargs)`` with retries.

        Raises:
            RetryExhaustedError: When every attempt failed with a retryable error
        """
        operation = getattr(func, "__name__", repr(func))
        start_time = time.monotonic()

        for attempt in range(1, self.config.max_retries + 2):
            try:
                result = await self._attempt(func, *args, **kwargs)
            except Exception as exc:
                if not isinstance(exc, self.exceptions):
                    raise

                if not self.should_retry(exc, attempt):
                    self.statistics.record_attempt(success=False, exception=exc)
                    logger.warning("Giving up after retries exhausted",
                                   operation=operation,
                                   attempts=attempt,
                                   error=type(exc).__name__,
                                   elapsed=round(time.monotonic() - start_time, 3))
                    raise RetryExhaustedError(
                        f"{operation} failed after {attempt} attempts",
                        operation=operation,
                        attempts=attempt,
                        last_error=exc,
                    ) from exc

                wait_time = self.backoff.calculate_delay(attempt)
                self.statistics.record_attempt(success=False, delay=wait_time, exception=exc)
                logger.info("Backing off",
                            operation=operation,
                            attempt=attempt,
                            wait=round(wait_time, 3),
                            error=type(exc).__name__)
                if wait_time > 0:
                    await asyncio.sleep(wait_time)
                continue

            self.statistics.record_attempt(success=True)
            if attempt > 1:
                logger.debug("Operation succeeded after retry", operation=operation, attempt=attempt)
            return result

        # Unreachable: the final attempt either returns or raises
        raise RetryExhaustedError(f"{operation} failed", operation=operation)

"""
Tests for retry, backoff and per-attempt timeouts.
"""

import asyncio
import random

import pytest

from taskscope.core.config import RetryConfig
from taskscope.core.exceptions import EntityNotFoundError, RetryExhaustedError, TransientPersistenceError
from taskscope.tasks.retry import ExponentialBackoff, RetryHandler


def no_wait_config(**overrides) -> RetryConfig:
    values = dict(max_retries=3, base_delay=0.0, max_delay=0.0, jitter=False, operation_timeout=1.0)
    values.update(overrides)
    return RetryConfig(**values)


class Flaky:
    """Async callable failing a fixed number of times before succeeding"""

    def __init__(self, failures: int, error: Exception = None):
        self.failures = failures
        self.error = error or TransientPersistenceError("Network error")
        self.calls = 0
        self.__name__ = "flaky_operation"

    async def __call__(self, value="ok"):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return value


class TestExponentialBackoff:

    def test_delays_grow_and_cap(self):
        backoff = ExponentialBackoff(RetryConfig(base_delay=1.0, max_delay=5.0, exponential_base=2.0, jitter=False))
        assert [backoff.calculate_delay(n) for n in range(0, 5)] == [0.0, 1.0, 2.0, 4.0, 5.0]

    def test_jitter_stays_within_quarter(self):
        backoff = ExponentialBackoff(
            RetryConfig(base_delay=1.0, max_delay=10.0, jitter=True),
            rng=random.Random(42),
        )
        for _ in range(50):
            assert 0.75 <= backoff.calculate_delay(1) <= 1.25


class TestRetryHandler:

    @pytest.mark.asyncio
    async def test_success_without_retry(self):
        handler = RetryHandler(no_wait_config())
        operation = Flaky(failures=0)

        assert await handler.run(operation, value="done") == "done"
        assert operation.calls == 1
        assert handler.statistics.successful_attempts == 1

    @pytest.mark.asyncio
    async def test_transient_failures_are_retried(self):
        handler = RetryHandler(no_wait_config())
        operation = Flaky(failures=2)

        assert await handler.run(operation) == "ok"
        assert operation.calls == 3
        assert handler.statistics.failed_attempts == 2
        assert handler.statistics.exception_counts == {"TransientPersistenceError": 2}

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self):
        handler = RetryHandler(no_wait_config(max_retries=2))
        operation = Flaky(failures=10)

        with pytest.raises(RetryExhaustedError) as exc_info:
            await handler.run(operation)

        assert operation.calls == 3
        assert exc_info.value.context["attempts"] == 3
        assert exc_info.value.context["operation"] == "flaky_operation"
        assert isinstance(exc_info.value.last_error, TransientPersistenceError)

    @pytest.mark.asyncio
    async def test_non_retryable_errors_propagate_immediately(self):
        handler = RetryHandler(no_wait_config())
        operation = Flaky(failures=5, error=EntityNotFoundError("gone", entity_type="task", entity_id="t1"))

        with pytest.raises(EntityNotFoundError):
            await handler.run(operation)
        assert operation.calls == 1

    @pytest.mark.asyncio
    async def test_zero_retries_means_single_attempt(self):
        handler = RetryHandler(no_wait_config(max_retries=0))
        operation = Flaky(failures=1)

        with pytest.raises(RetryExhaustedError):
            await handler.run(operation)
        assert operation.calls == 1

    @pytest.mark.asyncio
    async def test_timeouts_are_retried(self):
        handler = RetryHandler(no_wait_config(max_retries=1, operation_timeout=0.05))
        calls = []

        async def slow_then_fast():
            calls.append(1)
            if len(calls) == 1:
                await asyncio.sleep(1)
            return "fast"

        assert await handler.run(slow_then_fast) == "fast"
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_backoff_sleeps_between_attempts(self, monkeypatch):
        sleeps = []

        async def fake_sleep(seconds):
            sleeps.append(seconds)

        monkeypatch.setattr("taskscope.tasks.retry.asyncio.sleep", fake_sleep)
        handler = RetryHandler(RetryConfig(
            max_retries=3, base_delay=0.5, max_delay=10.0, exponential_base=2.0,
            jitter=False, operation_timeout=None,
        ))

        await handler.run(Flaky(failures=3))

        assert sleeps == [0.5, 1.0, 2.0]

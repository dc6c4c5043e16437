"""Tests for the retry policy and backoff helper."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, call

import pytest

from pyiosense.exceptions import (
    HttpStatusError,
    InvalidParameterError,
    NetworkError,
    RequestCancelledError,
    RetriesExhaustedError,
)
from pyiosense.resilience import RetryPolicy, retry_with_backoff


class TestRetryPolicy:
    """Test RetryPolicy configuration."""

    def test_defaults(self) -> None:
        """Test the platform defaults."""
        policy = RetryPolicy()
        assert policy.max_attempts == 15
        assert policy.base_delay == 2.0
        assert policy.max_delay == 4.0
        assert policy.retry_client_errors is True

    def test_default_delay_sequence(self) -> None:
        """Test that the default backoff is 2s then capped at 4s."""
        policy = RetryPolicy()
        assert [policy.calculate_delay(n) for n in range(1, 6)] == [2.0, 4.0, 4.0, 4.0, 4.0]

    def test_worst_case_total_delay(self) -> None:
        """Test total sleep time of a call that never succeeds."""
        policy = RetryPolicy()
        total = sum(policy.calculate_delay(n) for n in range(1, policy.max_attempts))
        assert total == 54.0

    @pytest.mark.parametrize(
        ("attempt", "expected"),
        [(1, 0.5), (2, 1.0), (3, 2.0), (4, 4.0), (5, 8.0), (6, 8.0)],
    )
    def test_delay_formula(self, attempt: int, expected: float) -> None:
        """Test min(base * 2^(n-1), max)."""
        policy = RetryPolicy(base_delay=0.5, max_delay=8.0)
        assert policy.calculate_delay(attempt) == expected

    @pytest.mark.parametrize("base_delay", [0.0, 2.0])
    def test_delay_for_very_late_attempt(self, base_delay: float) -> None:
        """Test that huge attempt numbers return the cap instead of overflowing."""
        policy = RetryPolicy(max_attempts=5000, base_delay=base_delay, max_delay=4.0)
        assert policy.calculate_delay(2000) == 4.0
        assert policy.calculate_delay(65) == 4.0

    @pytest.mark.parametrize(
        ("kwargs", "parameter"),
        [
            ({"max_attempts": 0}, "max_attempts"),
            ({"base_delay": -1.0}, "base_delay"),
            ({"base_delay": 5.0, "max_delay": 4.0}, "max_delay"),
        ],
    )
    def test_invalid_values(self, kwargs: dict[str, float], parameter: str) -> None:
        """Test that out-of-range values are rejected."""
        with pytest.raises(InvalidParameterError) as exc_info:
            RetryPolicy(**kwargs)

        assert exc_info.value.parameter_name == parameter

    def test_should_retry_everything_by_default(self) -> None:
        """Test that client errors are retried unless disabled."""
        policy = RetryPolicy()
        assert policy.should_retry(HttpStatusError("u", 404)) is True
        assert policy.should_retry(NetworkError("down")) is True

    def test_should_retry_without_client_errors(self) -> None:
        """Test that only transient statuses are retried when client errors are excluded."""
        policy = RetryPolicy(retry_client_errors=False)
        assert policy.should_retry(HttpStatusError("u", 404)) is False
        assert policy.should_retry(HttpStatusError("u", 401)) is False
        assert policy.should_retry(HttpStatusError("u", 429)) is True
        assert policy.should_retry(HttpStatusError("u", 503)) is True
        assert policy.should_retry(NetworkError("down")) is True


class TestRetryWithBackoff:
    """Test retry_with_backoff()."""

    async def test_success_first_try(self) -> None:
        """Test that a successful call is made once without sleeping."""
        func = AsyncMock(return_value="ok")
        sleep = AsyncMock()

        result = await retry_with_backoff(func, sleep=sleep)

        assert result == "ok"
        assert func.await_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.parametrize("failures", [1, 2, 4])
    async def test_n_failures_then_success(self, failures: int) -> None:
        """Test n failures give n+1 dispatches and sleeps delay(1..n)."""
        policy = RetryPolicy(max_attempts=5, base_delay=1.0, max_delay=4.0)
        func = AsyncMock(side_effect=[NetworkError("down")] * failures + ["ok"])
        sleep = AsyncMock()

        result = await retry_with_backoff(func, policy=policy, sleep=sleep)

        assert result == "ok"
        assert func.await_count == failures + 1
        assert sleep.await_args_list == [call(policy.calculate_delay(n)) for n in range(1, failures + 1)]

    async def test_exhaustion(self) -> None:
        """Test that an always-failing call is made exactly max_attempts times."""
        policy = RetryPolicy(max_attempts=4, base_delay=1.0, max_delay=4.0)
        error = HttpStatusError("https://h/x", 500, "boom")
        func = AsyncMock(side_effect=error)
        sleep = AsyncMock()

        with pytest.raises(RetriesExhaustedError) as exc_info:
            await retry_with_backoff(func, policy=policy, sleep=sleep)

        assert func.await_count == 4
        assert sleep.await_count == 3
        assert exc_info.value.attempts == 4
        assert exc_info.value.last_error is error
        assert exc_info.value.__cause__ is error
        assert exc_info.value.status == 500
        assert exc_info.value.url == "https://h/x"

    async def test_exhaustion_with_many_attempts(self) -> None:
        """Test that a large attempt budget still ends in RetriesExhaustedError."""
        policy = RetryPolicy(max_attempts=1100)
        func = AsyncMock(side_effect=NetworkError("down"))
        sleep = AsyncMock()

        with pytest.raises(RetriesExhaustedError) as exc_info:
            await retry_with_backoff(func, policy=policy, sleep=sleep)

        assert func.await_count == 1100
        assert sleep.await_args_list[-1] == call(4.0)
        assert exc_info.value.attempts == 1100

    async def test_single_attempt_policy(self) -> None:
        """Test max_attempts=1 fails without sleeping."""
        func = AsyncMock(side_effect=NetworkError("down"))
        sleep = AsyncMock()

        with pytest.raises(RetriesExhaustedError):
            await retry_with_backoff(func, policy=RetryPolicy(max_attempts=1), sleep=sleep)

        assert func.await_count == 1
        sleep.assert_not_awaited()

    async def test_unlisted_exception_propagates(self) -> None:
        """Test that exceptions outside retryable_exceptions are not retried."""
        func = AsyncMock(side_effect=ValueError("bad"))
        sleep = AsyncMock()

        with pytest.raises(ValueError, match="bad"):
            await retry_with_backoff(func, retryable_exceptions=(NetworkError,), sleep=sleep)

        assert func.await_count == 1

    async def test_client_error_not_retried_when_disabled(self) -> None:
        """Test that a 404 ends the call after one attempt when client errors are excluded."""
        policy = RetryPolicy(max_attempts=5, retry_client_errors=False)
        func = AsyncMock(side_effect=HttpStatusError("u", 404))
        sleep = AsyncMock()

        with pytest.raises(RetriesExhaustedError) as exc_info:
            await retry_with_backoff(func, policy=policy, sleep=sleep)

        assert func.await_count == 1
        assert exc_info.value.attempts == 1
        assert exc_info.value.status == 404

    async def test_rate_limit_retried_when_client_errors_disabled(self) -> None:
        """Test that 429 stays retryable."""
        policy = RetryPolicy(max_attempts=3, retry_client_errors=False)
        func = AsyncMock(side_effect=[HttpStatusError("u", 429), "ok"])

        assert await retry_with_backoff(func, policy=policy, sleep=AsyncMock()) == "ok"
        assert func.await_count == 2

    async def test_cancelled_before_first_attempt(self) -> None:
        """Test that a pre-set cancel event skips every attempt."""
        event = asyncio.Event()
        event.set()
        func = AsyncMock(return_value="ok")

        with pytest.raises(RequestCancelledError) as exc_info:
            await retry_with_backoff(func, cancel_event=event, sleep=AsyncMock())

        func.assert_not_awaited()
        assert exc_info.value.attempts == 0

    async def test_cancelled_during_backoff(self) -> None:
        """Test that setting the event during a backoff sleep skips remaining retries."""
        event = asyncio.Event()
        func = AsyncMock(side_effect=NetworkError("down"))

        async def sleep(delay: float) -> None:
            event.set()
            await asyncio.sleep(10)

        with pytest.raises(RequestCancelledError) as exc_info:
            await retry_with_backoff(func, cancel_event=event, sleep=sleep)

        assert func.await_count == 1
        assert exc_info.value.attempts == 1
        assert isinstance(exc_info.value.last_error, NetworkError)

    async def test_cancelled_during_attempt(self) -> None:
        """Test that setting the event aborts an in-flight attempt."""
        event = asyncio.Event()
        started = asyncio.Event()

        async def func() -> str:
            started.set()
            await asyncio.sleep(10)
            return "late"

        async def cancel_when_started() -> None:
            await started.wait()
            event.set()

        canceller = asyncio.create_task(cancel_when_started())

        with pytest.raises(RequestCancelledError) as exc_info:
            await retry_with_backoff(func, cancel_event=event, sleep=AsyncMock())

        await canceller
        assert exc_info.value.attempts == 1

    async def test_deadline_during_backoff(self) -> None:
        """Test that an elapsed deadline keeps the attempt count and last failure."""
        error = HttpStatusError("https://h/x", 500, "boom")
        func = AsyncMock(side_effect=error)

        async def slow_sleep(delay: float) -> None:
            await asyncio.sleep(10)

        with pytest.raises(RequestCancelledError, match="deadline") as exc_info:
            await retry_with_backoff(func, deadline=0.05, sleep=slow_sleep)

        assert func.await_count == 1
        assert exc_info.value.attempts == 1
        assert exc_info.value.last_error is error

    async def test_deadline_during_first_attempt(self) -> None:
        """Test that a deadline hit by the first attempt reports no failure."""

        async def func() -> str:
            await asyncio.sleep(10)
            return "late"

        with pytest.raises(RequestCancelledError) as exc_info:
            await retry_with_backoff(func, deadline=0.05, sleep=AsyncMock())

        assert exc_info.value.attempts == 1
        assert exc_info.value.last_error is None

    async def test_attempt_timeout_is_not_a_deadline(self) -> None:
        """Test that a TimeoutError raised by an attempt is handled as a normal failure."""
        func = AsyncMock(side_effect=[TimeoutError(), "ok"])

        assert await retry_with_backoff(func, deadline=30, sleep=AsyncMock()) == "ok"
        assert func.await_count == 2

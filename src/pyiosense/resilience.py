"""Retry policy and exponential backoff for API requests."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from http import HTTPStatus
from typing import TYPE_CHECKING, Any, TypeVar

from pyiosense.const import MAX_RETRIES, RETRY_BASE_DELAY, RETRY_MAX_DELAY
from pyiosense.exceptions import (
    HttpStatusError,
    InvalidParameterError,
    RequestCancelledError,
    RetriesExhaustedError,
)


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

_LOGGER = logging.getLogger(__name__)

_T = TypeVar("_T")


@dataclass(frozen=True)
class RetryPolicy:
    """Configuration for bounded retries with capped exponential backoff.

    With the defaults (base 2s, cap 4s, 15 attempts) the delay sequence is
    2, 4, 4, 4, ... seconds, so a call that never succeeds sleeps about 54s in total.

    Attributes:
        max_attempts: Maximum number of dispatches per logical call (>= 1).
        base_delay: Delay in seconds after the first failed attempt.
        max_delay: Upper bound for any single delay, in seconds.
        retry_client_errors: If False, 4xx responses other than 429 end the
            call after the attempt that received them.

    Example:
        policy = RetryPolicy(max_attempts=3, base_delay=1.0, max_delay=2.0)

        for attempt in range(1, policy.max_attempts + 1):
            try:
                return await make_request()
            except Exception:
                if attempt == policy.max_attempts:
                    raise
                await asyncio.sleep(policy.calculate_delay(attempt))
    """

    max_attempts: int = MAX_RETRIES
    base_delay: float = RETRY_BASE_DELAY
    max_delay: float = RETRY_MAX_DELAY
    retry_client_errors: bool = True

    def __post_init__(self) -> None:
        """Validate policy values.

        Raises:
            InvalidParameterError: If any value is out of range.
        """
        if self.max_attempts < 1:
            msg = f"max_attempts must be at least 1, got {self.max_attempts}"
            raise InvalidParameterError(msg, parameter_name="max_attempts", value=self.max_attempts)
        if self.base_delay < 0:
            msg = f"base_delay cannot be negative, got {self.base_delay}"
            raise InvalidParameterError(msg, parameter_name="base_delay", value=self.base_delay)
        if self.max_delay < self.base_delay:
            msg = f"max_delay ({self.max_delay}) must not be below base_delay ({self.base_delay})"
            raise InvalidParameterError(msg, parameter_name="max_delay", value=self.max_delay)

    def calculate_delay(self, attempt: int) -> float:
        """Calculate the delay that follows a failed attempt.

        Args:
            attempt: Number of the attempt that just failed (1-indexed).

        Returns:
            ``min(base_delay * 2 ** (attempt - 1), max_delay)`` in seconds.
        """
        exponent = attempt - 1
        # Past 2**64 every finite base reaches the cap; float(2**n) overflows near n=1024
        if exponent >= 64:
            return self.max_delay
        return min(self.base_delay * 2.0**exponent, self.max_delay)

    def should_retry(self, exc: BaseException) -> bool:
        """Check whether a failure is worth another attempt.

        Args:
            exc: The error raised by the failed attempt.

        Returns:
            True unless client errors are excluded and exc is a non-429 4xx.
        """
        if self.retry_client_errors or not isinstance(exc, HttpStatusError):
            return True

        status = exc.status
        is_client_error = HTTPStatus.BAD_REQUEST <= status < HTTPStatus.INTERNAL_SERVER_ERROR
        return not is_client_error or status == HTTPStatus.TOO_MANY_REQUESTS


class _CancelSignal(Exception):
    """Raised internally when the cancel event wins a race."""


async def _until_cancelled(awaitable: Awaitable[_T], cancel_event: asyncio.Event | None) -> _T:
    """Await ``awaitable`` unless ``cancel_event`` is set first.

    Raises:
        _CancelSignal: If the event was set before the awaitable finished.
    """
    if cancel_event is None:
        return await awaitable

    task = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(cancel_event.wait())
    try:
        done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.cancel()
        waiter.cancel()
        raise

    if task in done:
        waiter.cancel()
        return task.result()

    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
    raise _CancelSignal


async def retry_with_backoff(
    func: Callable[[], Awaitable[_T]],
    *,
    policy: RetryPolicy | None = None,
    retryable_exceptions: tuple[type[Exception], ...] = (Exception,),
    cancel_event: asyncio.Event | None = None,
    deadline: float | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    description: str = "request",
) -> _T:
    """Execute ``func`` with bounded, strictly sequential retries.

    Attempt n+1 never starts before attempt n has failed and its backoff
    delay has elapsed.

    Args:
        func: Async function performing one attempt.
        policy: Retry policy. Defaults to ``RetryPolicy()``.
        retryable_exceptions: Exception types that trigger a retry. Anything
            else propagates unchanged.
        cancel_event: Optional event that aborts the current attempt or
            backoff sleep and skips remaining retries.
        deadline: Optional limit in seconds for all attempts and delays together.
        sleep: Coroutine function used for backoff delays.
        description: Label used in log and error messages.

    Returns:
        Result of the first successful attempt.

    Raises:
        RetriesExhaustedError: If every attempt failed, or a failure was not
            retryable under the policy. Wraps the last error.
        RequestCancelledError: If ``cancel_event`` was set or ``deadline`` elapsed.

    Example:
        policy = RetryPolicy(max_attempts=5, base_delay=0.5, max_delay=4.0)

        async def fetch():
            return await api.dispatch(spec)

        data = await retry_with_backoff(
            fetch,
            policy=policy,
            retryable_exceptions=(NetworkError, HttpStatusError, DecodeError),
            deadline=30.0,
        )
    """
    if policy is None:
        policy = RetryPolicy()

    last_exception: Exception | None = None
    attempt = 0

    try:
        async with asyncio.timeout(deadline) as scope:
            for attempt in range(1, policy.max_attempts + 1):
                if cancel_event is not None and cancel_event.is_set():
                    msg = f"{description} cancelled before attempt {attempt}"
                    raise RequestCancelledError(msg, attempts=attempt - 1, last_error=last_exception)

                try:
                    return await _until_cancelled(func(), cancel_event)
                except _CancelSignal:
                    msg = f"{description} cancelled during attempt {attempt}"
                    raise RequestCancelledError(msg, attempts=attempt, last_error=last_exception) from None
                except retryable_exceptions as exc:
                    last_exception = exc

                    if not policy.should_retry(exc):
                        _LOGGER.error(
                            "Attempt %d/%d for %s failed with a non-retryable error",
                            attempt,
                            policy.max_attempts,
                            description,
                        )
                        msg = f"{description} failed after {attempt} attempt(s): {exc}"
                        raise RetriesExhaustedError(msg, attempts=attempt, last_error=exc) from exc

                    if attempt < policy.max_attempts:
                        delay = policy.calculate_delay(attempt)
                        _LOGGER.warning(
                            "Attempt %d/%d for %s failed: %s. Retrying in %.1f seconds",
                            attempt,
                            policy.max_attempts,
                            description,
                            exc,
                            delay,
                        )
                        try:
                            await _until_cancelled(sleep(delay), cancel_event)
                        except _CancelSignal:
                            msg = f"{description} cancelled while waiting to retry"
                            raise RequestCancelledError(msg, attempts=attempt, last_error=exc) from exc
    except TimeoutError as exc:
        if not scope.expired():
            raise
        _LOGGER.error("Deadline of %.1fs elapsed for %s after %d attempt(s)", deadline, description, attempt)
        msg = f"{description} exceeded its deadline of {deadline:.1f}s after {attempt} attempt(s)"
        if last_exception is not None:
            msg = f"{msg}: {last_exception}"
        raise RequestCancelledError(msg, attempts=attempt, last_error=last_exception) from exc

    _LOGGER.error("All %d attempts exhausted for %s", policy.max_attempts, description)
    msg = f"{description} failed after {policy.max_attempts} attempt(s): {last_exception}"
    raise RetriesExhaustedError(msg, attempts=policy.max_attempts, last_error=last_exception) from last_exception

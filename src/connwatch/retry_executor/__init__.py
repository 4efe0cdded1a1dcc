"""Run asynchronous operations with bounded exponential-backoff retries."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

from connwatch.diagnostics import ConnectionDiagnostics
from connwatch.exceptions import NonRetryableError, RetryAbortedError, RetryExhaustedError
from connwatch.retry_executor_helpers import RetryPolicy
from connwatch.retry_executor_helpers.delay_calculator import DelayCalculator
from connwatch.retry_executor_helpers.retry_counter import RetryCounter

__all__ = ["RetryExecutor", "RetryPolicy", "RetryCounter"]

logger = logging.getLogger(__name__)

T = TypeVar("T")

Operation = Callable[[], Union[Awaitable[T], T]]
SleepFn = Callable[[float], Awaitable[Any]]


def _operation_name(operation: Callable[..., Any]) -> str:
    return getattr(operation, "__qualname__", None) or getattr(operation, "__name__", None) or "unknown"


class RetryExecutor:
    """
    Higher-order runner that retries a failing operation per a RetryPolicy.

    The executor publishes nothing; it only updates the RetryCounter it is
    handed and, when given one, records steps in the diagnostics log.
    """

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        *,
        sleep: SleepFn = asyncio.sleep,
        diagnostics: Optional[ConnectionDiagnostics] = None,
    ):
        self.policy = policy if policy is not None else RetryPolicy()
        self._sleep = sleep
        self._diagnostics = diagnostics

    def calculate_delay(self, attempt: int) -> float:
        """Delay in seconds to wait after ``attempt`` failed."""
        return DelayCalculator.calculate_full_delay(self.policy, attempt)

    def _record(self, kind: str, **details: Any) -> None:
        if self._diagnostics is not None:
            self._diagnostics.record(kind, **details)

    async def run(
        self,
        operation: Operation[T],
        *,
        counter: Optional[RetryCounter] = None,
        should_abort: Optional[Callable[[], bool]] = None,
    ) -> T:
        """
        Execute ``operation`` until it succeeds or the policy is exhausted.

        Args:
            operation: Zero-argument callable returning a value or an awaitable
            counter: Shared retry counter to update, if any
            should_abort: Checked before every attempt after the first; when it
                returns True the sequence stops with RetryAbortedError

        Returns:
            The result of the first successful attempt

        Raises:
            RetryExhaustedError: All ``max_attempts`` attempts failed
            RetryAbortedError: ``should_abort`` stopped the sequence
            NonRetryableError: Raised by the operation; propagated untouched
        """
        name = _operation_name(operation)
        max_attempts = self.policy.max_attempts
        last_error: Optional[BaseException] = None
        attempt = 1

        while True:
            if attempt > 1 and should_abort is not None and should_abort():
                logger.warning("Retry sequence for %s aborted before attempt %s/%s", name, attempt, max_attempts)
                self._record("RETRY_ABORTED", attempt=attempt - 1, function=name)
                raise RetryAbortedError(attempts=attempt - 1, last_error=last_error)

            self._record("RETRY_ATTEMPT", attempt=attempt, max_attempts=max_attempts, function=name)
            try:
                result = operation()
                if inspect.isawaitable(result):
                    result = await result
            except NonRetryableError:
                raise
            except Exception as exc:
                last_error = exc
                if counter is not None:
                    counter.record_failure(attempt)
                logger.info("Attempt %s/%s of %s failed: %s", attempt, max_attempts, name, exc)

                if attempt >= max_attempts:
                    error = RetryExhaustedError(attempts=attempt, last_error=exc)
                    logger.warning("%s", error)
                    self._record("RETRY_FAILED", attempts=attempt, final_error=str(error), function=name)
                    raise error from exc

                delay = self.calculate_delay(attempt)
                logger.info("Retrying %s in %.3fs", name, delay)
                self._record("RETRY_DELAY", attempt=attempt, delay_seconds=delay, function=name)
                await self._sleep(delay)
                attempt += 1
                continue

            if counter is not None and counter.reset():
                self._record("RETRY_COUNT_RESET")
            self._record("RETRY_SUCCESS", attempt=attempt, function=name)
            return result

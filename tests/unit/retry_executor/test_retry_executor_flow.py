"""Tests for the retry executor."""

import pytest

from connwatch.diagnostics import ConnectionDiagnostics
from connwatch.exceptions import (
    NonRetryableError,
    RequestRejectedError,
    RetryAbortedError,
    RetryExhaustedError,
    TransientNetworkError,
)
from connwatch.retry_executor import RetryCounter, RetryExecutor, RetryPolicy


class FlakyOperation:
    """Fails a fixed number of times, then returns a value."""

    def __init__(self, failures, result="done", error_factory=lambda n: TransientNetworkError(f"failure {n}")):
        self.failures = failures
        self.result = result
        self.error_factory = error_factory
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error_factory(self.calls)
        return f"{self.result}-{self.calls}"


@pytest.fixture(autouse=True)
def _no_jitter(monkeypatch):
    monkeypatch.setattr("connwatch.retry_executor.random.random", lambda: 0.0)


@pytest.mark.asyncio
async def test_fails_twice_then_succeeds_with_doubling_delays(recording_sleep):
    policy = RetryPolicy(max_attempts=3, base_delay_seconds=0.1, max_delay_seconds=1.0, jitter_fraction=0.0)
    executor = RetryExecutor(policy, sleep=recording_sleep)
    operation = FlakyOperation(failures=2)

    result = await executor.run(operation)

    assert result == "done-3"
    assert operation.calls == 3
    assert recording_sleep.delays == pytest.approx([0.1, 0.2])


@pytest.mark.asyncio
async def test_exhaustion_raises_aggregated_error(recording_sleep):
    policy = RetryPolicy(max_attempts=4, base_delay_seconds=0.5, max_delay_seconds=1.0)
    executor = RetryExecutor(policy, sleep=recording_sleep)
    operation = FlakyOperation(failures=10)

    with pytest.raises(RetryExhaustedError) as excinfo:
        await executor.run(operation)

    assert operation.calls == 4
    assert excinfo.value.attempts == 4
    assert str(excinfo.value) == "All 4 attempts failed. Last error: failure 4"
    assert isinstance(excinfo.value.last_error, TransientNetworkError)
    assert excinfo.value.__cause__ is excinfo.value.last_error
    assert recording_sleep.delays == pytest.approx([0.5, 1.0, 1.0])


@pytest.mark.asyncio
async def test_single_attempt_policy_still_aggregates(recording_sleep):
    executor = RetryExecutor(RetryPolicy(max_attempts=1), sleep=recording_sleep)

    with pytest.raises(RetryExhaustedError) as excinfo:
        await executor.run(FlakyOperation(failures=1))

    assert excinfo.value.attempts == 1
    assert recording_sleep.delays == []


@pytest.mark.asyncio
async def test_non_retryable_error_propagates_immediately(recording_sleep):
    executor = RetryExecutor(RetryPolicy(max_attempts=5), sleep=recording_sleep)
    operation = FlakyOperation(failures=3, error_factory=lambda n: RequestRejectedError("HTTP 404", status=404))

    with pytest.raises(NonRetryableError):
        await executor.run(operation)

    assert operation.calls == 1
    assert recording_sleep.delays == []


@pytest.mark.asyncio
async def test_counter_tracks_failures_and_resets_on_success(recording_sleep):
    policy = RetryPolicy(max_attempts=5, base_delay_seconds=0.0, max_delay_seconds=0.0)
    counter = RetryCounter(policy.max_attempts)
    observed = []

    class Operation(FlakyOperation):
        async def __call__(self):
            observed.append(counter.value)
            return await super().__call__()

    executor = RetryExecutor(policy, sleep=recording_sleep)
    await executor.run(Operation(failures=3), counter=counter)

    assert observed == [0, 1, 2, 3]
    assert counter.value == 0


@pytest.mark.asyncio
async def test_counter_never_exceeds_max_attempts(recording_sleep):
    policy = RetryPolicy(max_attempts=3, base_delay_seconds=0.0, max_delay_seconds=0.0)
    counter = RetryCounter(policy.max_attempts)
    executor = RetryExecutor(policy, sleep=recording_sleep)

    with pytest.raises(RetryExhaustedError):
        await executor.run(FlakyOperation(failures=10), counter=counter)

    assert counter.value == 3


@pytest.mark.asyncio
async def test_should_abort_stops_before_next_attempt(recording_sleep):
    policy = RetryPolicy(max_attempts=5, base_delay_seconds=0.0, max_delay_seconds=0.0)
    executor = RetryExecutor(policy, sleep=recording_sleep)
    operation = FlakyOperation(failures=10)

    with pytest.raises(RetryAbortedError) as excinfo:
        await executor.run(operation, should_abort=lambda: operation.calls >= 2)

    assert operation.calls == 2
    assert excinfo.value.attempts == 2
    assert str(excinfo.value.last_error) == "failure 2"


@pytest.mark.asyncio
async def test_sync_operations_are_supported(recording_sleep):
    executor = RetryExecutor(RetryPolicy(), sleep=recording_sleep)

    assert await executor.run(lambda: 42) == 42


@pytest.mark.asyncio
async def test_diagnostics_record_each_step(recording_sleep, fake_clock):
    diagnostics = ConnectionDiagnostics(clock=fake_clock)
    policy = RetryPolicy(max_attempts=3, base_delay_seconds=0.1, max_delay_seconds=1.0)
    executor = RetryExecutor(policy, sleep=recording_sleep, diagnostics=diagnostics)
    counter = RetryCounter(policy.max_attempts)

    await executor.run(FlakyOperation(failures=1), counter=counter)

    kinds = [entry.kind for entry in diagnostics.entries()]
    assert kinds == ["RETRY_ATTEMPT", "RETRY_DELAY", "RETRY_ATTEMPT", "RETRY_COUNT_RESET", "RETRY_SUCCESS"]
    assert diagnostics.entries("RETRY_DELAY")[0].details["delay_seconds"] == pytest.approx(0.1)


def test_calculate_delay_applies_jitter(monkeypatch):
    monkeypatch.setattr("connwatch.retry_executor.random.random", lambda: 0.5)
    executor = RetryExecutor(RetryPolicy(base_delay_seconds=1.0, max_delay_seconds=30.0, jitter_fraction=0.2))

    assert executor.calculate_delay(1) == pytest.approx(1.1)
    assert executor.calculate_delay(3) == pytest.approx(4.4)
    assert executor.calculate_delay(10) == 30.0

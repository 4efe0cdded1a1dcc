"""Tests for the exception hierarchy."""

from connwatch.exceptions import (
    ApplicationError,
    ConfigurationError,
    NonRetryableError,
    OfflineError,
    ProbeError,
    RequestRejectedError,
    RetryAbortedError,
    RetryExhaustedError,
    TransientNetworkError,
)


def test_default_messages():
    assert str(OfflineError()) == "No network connection available"
    assert str(TransientNetworkError()) == "Transient network failure"
    assert str(ProbeError()) == "Health probe failed"


def test_context_is_stored_as_attributes():
    cause = TransientNetworkError("HTTP 502", status=502, url="http://api.test/tasks")
    error = RetryExhaustedError(attempts=5, last_error=cause)

    assert error.attempts == 5
    assert error.last_error is cause
    assert cause.status == 502
    assert str(error) == "All 5 attempts failed. Last error: HTTP 502"


def test_hierarchy():
    assert issubclass(OfflineError, NonRetryableError)
    assert issubclass(RequestRejectedError, NonRetryableError)
    assert not issubclass(TransientNetworkError, NonRetryableError)
    assert not issubclass(RetryExhaustedError, TransientNetworkError)
    for error_type in (ConfigurationError, RetryAbortedError, ProbeError):
        assert issubclass(error_type, ApplicationError)


def test_offline_error_reports_attempts_made():
    assert OfflineError().attempts_made == 0
    assert OfflineError(attempts_made=2).attempts_made == 2


def test_invalid_value_factory():
    error = ConfigurationError.invalid_value("max_attempts", 0, "Must be at least 1")

    assert str(error) == "Invalid value for max_attempts: 0. Must be at least 1"
    assert error.param_name == "max_attempts"

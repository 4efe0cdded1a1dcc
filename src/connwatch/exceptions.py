"""Exception hierarchy for the connection-resilience layer.

All custom exceptions inherit from ApplicationError so callers can catch the
whole family in one place.

Exception classes support two patterns:
1. No-argument raise: raise OfflineError()
2. Contextual attributes: err = RetryExhaustedError(attempts=3, last_error=exc); raise err
"""

from __future__ import annotations

from typing import Any, Optional


class ApplicationError(Exception):
    """Base exception for all connwatch errors.

    Supports keyword arguments that are stored as attributes for debugging.
    """

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = self.__class__.__doc__ or "Application error occurred"
        super().__init__(message)
        for key, value in kwargs.items():
            setattr(self, key, value)


class ConfigurationError(ApplicationError):
    """Configuration is invalid or missing."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = "Configuration is invalid or missing"
        super().__init__(message, **kwargs)

    @classmethod
    def invalid_value(cls, param_name: str, value: Any, reason: str = "") -> "ConfigurationError":
        """Create error for invalid value."""
        msg = f"Invalid value for {param_name}: {value!r}"
        if reason:
            msg += f". {reason}"
        return cls(msg, param_name=param_name, value=value)


class NonRetryableError(ApplicationError):
    """Failure that must not be retried."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = "Operation failed and must not be retried"
        super().__init__(message, **kwargs)


class TransientNetworkError(ApplicationError):
    """A single attempt failed for a recoverable network reason."""

    def __init__(self, message: str = "", *, status: Optional[int] = None, url: Optional[str] = None, **kwargs: Any) -> None:
        if not message:
            message = "Transient network failure"
        super().__init__(message, status=status, url=url, **kwargs)


class RequestRejectedError(NonRetryableError):
    """The server rejected the request in a way retrying cannot fix."""

    def __init__(self, message: str = "", *, status: Optional[int] = None, url: Optional[str] = None, **kwargs: Any) -> None:
        if not message:
            message = "Request rejected by server"
        super().__init__(message, status=status, url=url, **kwargs)


class RetryExhaustedError(ApplicationError):
    """Every attempt of a retry sequence failed."""

    def __init__(self, message: str = "", *, attempts: int = 0, last_error: Optional[BaseException] = None, **kwargs: Any) -> None:
        if not message:
            message = f"All {attempts} attempts failed. Last error: {last_error}"
        super().__init__(message, attempts=attempts, last_error=last_error, **kwargs)


class RetryAbortedError(ApplicationError):
    """A retry sequence was stopped between attempts by its abort check."""

    def __init__(self, message: str = "", *, attempts: int = 0, last_error: Optional[BaseException] = None, **kwargs: Any) -> None:
        if not message:
            message = f"Retry sequence aborted after {attempts} attempt(s). Last error: {last_error}"
        super().__init__(message, attempts=attempts, last_error=last_error, **kwargs)


class OfflineError(NonRetryableError):
    """The device is offline; the call was not attempted further."""

    def __init__(self, message: str = "", *, attempts_made: int = 0, **kwargs: Any) -> None:
        if not message:
            message = "No network connection available"
        super().__init__(message, attempts_made=attempts_made, **kwargs)


class ProbeError(ApplicationError):
    """Health probe failure. Never escapes HealthProbe."""

    def __init__(self, message: str = "", *, status: Optional[int] = None, **kwargs: Any) -> None:
        if not message:
            message = "Health probe failed"
        super().__init__(message, status=status, **kwargs)


__all__ = [
    "ApplicationError",
    "ConfigurationError",
    "NonRetryableError",
    "OfflineError",
    "ProbeError",
    "RequestRejectedError",
    "RetryAbortedError",
    "RetryExhaustedError",
    "TransientNetworkError",
]

"""Type definitions and defaults for retry execution."""

from dataclasses import dataclass

from ..exceptions import ConfigurationError

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_BASE_DELAY_SECONDS = 1.0
DEFAULT_MAX_DELAY_SECONDS = 30.0
DEFAULT_JITTER_FRACTION = 0.1


@dataclass(frozen=True)
class RetryPolicy:
    """Configuration for exponential backoff with jitter.

    One instance per service; it is never mutated after construction.
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    base_delay_seconds: float = DEFAULT_BASE_DELAY_SECONDS
    max_delay_seconds: float = DEFAULT_MAX_DELAY_SECONDS
    jitter_fraction: float = DEFAULT_JITTER_FRACTION  # up to +10% randomization

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ConfigurationError.invalid_value("max_attempts", self.max_attempts, "Must be at least 1")
        if self.base_delay_seconds < 0:
            raise ConfigurationError.invalid_value("base_delay_seconds", self.base_delay_seconds, "Must be non-negative")
        if self.max_delay_seconds < self.base_delay_seconds:
            raise ConfigurationError.invalid_value(
                "max_delay_seconds",
                self.max_delay_seconds,
                f"Must not be below base_delay_seconds ({self.base_delay_seconds})",
            )
        # Jitter above 1.0 could make delay(n) exceed delay(n+1).
        if not 0.0 <= self.jitter_fraction <= 1.0:
            raise ConfigurationError.invalid_value("jitter_fraction", self.jitter_fraction, "Must be between 0 and 1")

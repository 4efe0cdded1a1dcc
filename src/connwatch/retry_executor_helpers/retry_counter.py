"""Caller-visible retry counter shared between a service and its executor."""

import logging

logger = logging.getLogger(__name__)


class RetryCounter:
    """
    Counts failed attempts of the current retry sequence.

    The value never exceeds ``max_attempts`` and drops back to 0 on any
    success. Concurrent sequences share one counter; the last write wins.
    Once frozen the value no longer changes.
    """

    def __init__(self, max_attempts: int):
        self.max_attempts = max_attempts
        self.value = 0
        self.frozen = False

    def record_failure(self, attempt: int) -> int:
        """Record that ``attempt`` failed and return the new count."""
        if not self.frozen:
            self.value = max(0, min(attempt, self.max_attempts))
        return self.value

    def reset(self) -> bool:
        """Reset to 0. Returns True when there was something to reset."""
        if self.frozen or self.value == 0:
            return False
        logger.debug("Retry count reset from %s", self.value)
        self.value = 0
        return True

    def freeze(self) -> None:
        self.frozen = True

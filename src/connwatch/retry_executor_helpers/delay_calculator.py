"""Delay calculation helpers for retry execution."""

import logging
from typing import List

from connwatch.retry_executor import random as retry_random

from .types import RetryPolicy

logger = logging.getLogger(__name__)


class DelayCalculator:
    """Calculates exponential backoff delays with jitter."""

    @staticmethod
    def calculate_base_delay(policy: RetryPolicy, attempt: int) -> float:
        """
        Calculate the un-jittered exponential delay after a failed attempt.

        Args:
            policy: Retry policy
            attempt: Number of the attempt that just failed (1-based)

        Returns:
            Base delay in seconds
        """
        return policy.base_delay_seconds * (2 ** (attempt - 1))

    @staticmethod
    def apply_jitter(base_delay: float, jitter_fraction: float) -> float:
        """
        Stretch a delay by a random fraction to prevent thundering herd.

        Jitter only ever lengthens the delay, never shortens it.
        """
        return base_delay * (1 + jitter_fraction * retry_random.random())

    @classmethod
    def calculate_full_delay(cls, policy: RetryPolicy, attempt: int) -> float:
        """
        Calculate the delay to wait after ``attempt`` failed, capped at the policy maximum.

        Args:
            policy: Retry policy
            attempt: Number of the attempt that just failed (1-based)

        Returns:
            Final delay in seconds
        """
        base_delay = cls.calculate_base_delay(policy, attempt)
        final_delay = min(cls.apply_jitter(base_delay, policy.jitter_fraction), policy.max_delay_seconds)

        logger.debug(
            "[RetryExecutor] Calculated backoff: attempt=%s, base_delay=%.3fs, final_delay=%.3fs",
            attempt,
            base_delay,
            final_delay,
        )
        return final_delay

    @classmethod
    def delay_bounds(cls, policy: RetryPolicy) -> List[tuple[float, float]]:
        """Return the (min, max) delay window after each retryable failure of a sequence."""
        bounds: List[tuple[float, float]] = []
        for attempt in range(1, policy.max_attempts):
            base_delay = cls.calculate_base_delay(policy, attempt)
            upper = base_delay * (1 + policy.jitter_fraction)
            bounds.append((min(base_delay, policy.max_delay_seconds), min(upper, policy.max_delay_seconds)))
        return bounds

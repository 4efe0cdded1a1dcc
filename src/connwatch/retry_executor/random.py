"""Deterministic-friendly random helpers for the retry executor."""

from __future__ import annotations

import random as _random
from typing import Final

_SECURE_RANDOM: Final = _random.SystemRandom()


def random() -> float:
    """Delegate to SystemRandom.random so callers can monkeypatch in tests."""

    return _SECURE_RANDOM.random()

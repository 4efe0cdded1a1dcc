"""Recognize the "ok" marker in a health endpoint response body."""

from typing import Any


def has_ok_marker(body: Any, field: str = "status", expected: str = "ok") -> bool:
    """
    Check whether a decoded health body reports the service as ok.

    The marker comparison is case-insensitive and ignores surrounding
    whitespace, so ``{"status": "OK "}`` is accepted.
    """
    if not isinstance(body, dict):
        return False
    marker = body.get(field)
    if not isinstance(marker, str):
        return False
    return marker.strip().lower() == expected.strip().lower()

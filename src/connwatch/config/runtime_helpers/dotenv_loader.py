"""Read fallback settings from .env files."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

from ...exceptions import ConfigurationError

_ASSIGNMENT = re.compile(r"^(?:export\s+)?(?P<key>[A-Za-z_][A-Za-z0-9_]*)\s*=\s*(?P<value>.*)$")


class DotenvLoader:
    """Parses ``KEY=value`` files the way shells source them, minus interpolation."""

    @staticmethod
    def load_from_file(path: Path) -> Dict[str, str]:
        """
        Load settings from ``path``.

        Returns:
            Mapping of keys to values; empty when the file does not exist

        Raises:
            ConfigurationError: If the file exists but cannot be read
        """
        if not path.exists():
            return {}
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"Failed to read settings from {path}") from exc
        return dict(DotenvLoader.parse_lines(text.splitlines()))

    @staticmethod
    def parse_lines(lines: Iterable[str]) -> Iterable[Tuple[str, str]]:
        for line in lines:
            parsed = DotenvLoader.parse_line(line)
            if parsed is not None:
                yield parsed

    @staticmethod
    def parse_line(line: str) -> Optional[Tuple[str, str]]:
        """Return ``(key, value)`` for an assignment, None for blanks, comments and junk."""
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            return None
        match = _ASSIGNMENT.match(stripped)
        if match is None:
            return None
        return match.group("key"), _unquote(match.group("value").strip())


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    # Unquoted values may carry a trailing comment.
    return value.split(" #", 1)[0].rstrip()

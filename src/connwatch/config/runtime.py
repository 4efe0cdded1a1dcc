"""Typed access to environment settings with .env fallbacks."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Dict, Optional, TypeVar

from ..exceptions import ConfigurationError
from .runtime_helpers import DotenvLoader

T = TypeVar("T")

_TRUE_VALUES = frozenset({"1", "true", "t", "yes", "y", "on"})
_FALSE_VALUES = frozenset({"0", "false", "f", "no", "n", "off"})

# Searched in order; the first file defining a key wins.
_DOTENV_CANDIDATES = (Path(".env"),)

_fallback_cache: Optional[Dict[str, str]] = None


def _fallback_values() -> Dict[str, str]:
    global _fallback_cache
    if _fallback_cache is None:
        merged: Dict[str, str] = {}
        for path in _DOTENV_CANDIDATES:
            for key, value in DotenvLoader.load_from_file(path).items():
                merged.setdefault(key, value)
        _fallback_cache = merged
    return _fallback_cache


def reset_default_values() -> None:
    """Drop cached .env values so the next lookup reads the files again."""
    global _fallback_cache
    _fallback_cache = None


def _lookup(name: str, *, strip: bool, allow_blank: bool) -> Optional[str]:
    for source in (os.environ.get(name), _fallback_values().get(name)):
        if source is None:
            continue
        value = source.strip() if strip else source
        if value or allow_blank:
            return value
    return None


def _missing(name: str) -> ConfigurationError:
    return ConfigurationError(f"Required environment variable {name!r} is not set", param_name=name)


def env_str(
    name: str,
    or_value: Optional[str] = None,
    *,
    required: bool = False,
    strip: bool = True,
    allow_blank: bool = False,
) -> Optional[str]:
    """Read ``name`` from the environment, then from .env files, then ``or_value``."""
    value = _lookup(name, strip=strip, allow_blank=allow_blank)
    if value is not None:
        return value
    if required:
        raise _missing(name)
    return or_value


def _env_typed(
    name: str,
    or_value: Optional[T],
    required: bool,
    cast: Callable[[str], T],
    type_label: str,
) -> Optional[T]:
    raw = env_str(name)
    if raw is None:
        if required and or_value is None:
            raise _missing(name)
        return or_value
    try:
        return cast(raw)
    except ValueError as exc:
        raise ConfigurationError(
            f"Environment variable {name!r} must be {type_label} (got {raw!r})", param_name=name, value=raw
        ) from exc


def env_int(name: str, or_value: Optional[int] = None, *, required: bool = False) -> Optional[int]:
    return _env_typed(name, or_value, required, int, "an integer")


def env_float(name: str, or_value: Optional[float] = None, *, required: bool = False) -> Optional[float]:
    return _env_typed(name, or_value, required, float, "a float")


def _parse_bool(raw: str) -> bool:
    lowered = raw.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(raw)


def env_bool(name: str, or_value: Optional[bool] = None, *, required: bool = False) -> Optional[bool]:
    """Read a boolean; accepts 1/0, true/false, yes/no, on/off in any case."""
    return _env_typed(name, or_value, required, _parse_bool, "a boolean")

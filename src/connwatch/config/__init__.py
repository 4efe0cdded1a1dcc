"""Environment-backed configuration helpers."""

from ..exceptions import ConfigurationError
from .runtime import (
    env_bool,
    env_float,
    env_int,
    env_str,
    reset_default_values,
)

__all__ = [
    "ConfigurationError",
    "env_bool",
    "env_float",
    "env_int",
    "env_str",
    "reset_default_values",
]

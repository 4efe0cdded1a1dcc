"""Lazily created process-wide ConnectionService."""

from __future__ import annotations

import logging
from typing import Optional

from .connection_config import ConnectionServiceConfig
from .connection_service import ConnectionService

logger = logging.getLogger(__name__)

_default_service: Optional[ConnectionService] = None


def get_default_service() -> ConnectionService:
    """
    Return the shared service, building it from ``CONNWATCH_*`` settings on first use.

    Must be called from inside a running event loop. A destroyed default
    service is replaced by a fresh one.
    """
    global _default_service
    if _default_service is None or _default_service.destroyed:
        _default_service = ConnectionService(ConnectionServiceConfig.from_env())
        logger.debug("Created default connection service for %s", _default_service.config.health_url)
    return _default_service


def reset_default_service() -> None:
    """Destroy the shared service, if any."""
    global _default_service
    if _default_service is not None:
        _default_service.destroy()
        _default_service = None

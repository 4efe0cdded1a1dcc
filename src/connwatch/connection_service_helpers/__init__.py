"""Helper modules for ConnectionService."""

from .probe_scheduler import ProbeScheduler
from .state_manager import StatusStateManager

__all__ = ["ProbeScheduler", "StatusStateManager"]

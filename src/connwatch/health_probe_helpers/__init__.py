"""Helper modules for the health probe."""

from .payload_checker import has_ok_marker
from .types import PROBE_SOURCE, OPERATION_SOURCE, ProbeResult

__all__ = ["OPERATION_SOURCE", "PROBE_SOURCE", "ProbeResult", "has_ok_marker"]

"""
Classification of transport failures.

The health probe and the API client both need to tell "the network is
down" apart from "the server answered badly"; both ask this module.
"""

import asyncio
import socket

import aiohttp

_CONNECT_FAILURES = (
    aiohttp.ClientConnectorError,
    aiohttp.ClientProxyConnectionError,
    aiohttp.ClientHttpProxyError,
    aiohttp.ClientConnectorSSLError,
    aiohttp.ClientConnectorCertificateError,
    socket.gaierror,
)
_TRANSPORT_FAILURES = (
    aiohttp.ServerDisconnectedError,
    aiohttp.ServerTimeoutError,
    asyncio.TimeoutError,
    OSError,
)
NETWORK_ERROR_TYPES = _CONNECT_FAILURES + _TRANSPORT_FAILURES


def is_network_unreachable_error(exception: BaseException) -> bool:
    """True when ``exception`` (or the OS error it wraps) means the host could not be reached."""
    if isinstance(exception, NETWORK_ERROR_TYPES):
        return True
    return isinstance(getattr(exception, "os_error", None), OSError)


def describe_network_error(exception: BaseException) -> str:
    """Short human-readable description used in logs and probe results."""
    if isinstance(exception, asyncio.TimeoutError):
        return "Request timed out"
    detail = str(exception).strip() or type(exception).__name__
    if is_network_unreachable_error(exception):
        return f"Network unreachable: {detail}"
    return detail


__all__ = ["describe_network_error", "is_network_unreachable_error", "NETWORK_ERROR_TYPES"]

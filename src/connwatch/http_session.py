"""HTTP session management shared by the health probe and the API client."""

import asyncio
import logging
from typing import Optional

import aiohttp

DEFAULT_USER_AGENT = "connwatch-client/1.0"
_CLOSE_TIMEOUT_SECONDS = 5.0
_CONNECTOR_LIMIT = 100
_CONNECTOR_LIMIT_PER_HOST = 30
_DNS_CACHE_TTL_SECONDS = 300


class HttpSessionManager:
    """
    Owns the single aiohttp session of a ConnectionService.

    The session is opened on first use; concurrent first callers share the
    same session instead of racing to open two.
    """

    def __init__(
        self,
        name: str,
        connection_timeout: float,
        request_timeout: float,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.name = name
        self.connection_timeout = connection_timeout
        self.request_timeout = request_timeout
        self.user_agent = user_agent
        self.session: Optional[aiohttp.ClientSession] = None
        self.logger = logging.getLogger(f"{__name__}.{name}")
        self._open_lock: Optional[asyncio.Lock] = None

    def _build_session(self) -> aiohttp.ClientSession:
        connector = aiohttp.TCPConnector(
            limit=_CONNECTOR_LIMIT,
            limit_per_host=_CONNECTOR_LIMIT_PER_HOST,
            ttl_dns_cache=_DNS_CACHE_TTL_SECONDS,
            use_dns_cache=True,
        )
        return aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.request_timeout, connect=self.connection_timeout),
            headers={"User-Agent": self.user_agent},
            connector=connector,
        )

    async def create_session(self) -> aiohttp.ClientSession:
        """Open a new session, closing the current one first."""
        if self.get_session() is not None:
            await self.close_session()
        self.session = self._build_session()
        self.logger.info("HTTP session created")
        return self.session

    async def ensure_session(self) -> aiohttp.ClientSession:
        """Return the open session, opening one if needed."""
        session = self.get_session()
        if session is not None:
            return session
        if self._open_lock is None:
            self._open_lock = asyncio.Lock()
        async with self._open_lock:
            session = self.get_session()
            if session is None:
                session = await self.create_session()
            return session

    async def close_session(self) -> None:
        """Close the session if one is open. Safe to repeat."""
        session, self.session = self.session, None
        if session is None:
            return
        if session.closed:
            self.logger.debug("HTTP session already closed")
            return
        self.logger.info("Closing HTTP session")
        try:
            await asyncio.wait_for(session.close(), timeout=_CLOSE_TIMEOUT_SECONDS)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError):
            self.logger.warning("Error closing HTTP session", exc_info=True)

    def get_session(self) -> Optional[aiohttp.ClientSession]:
        if self.session is None or self.session.closed:
            return None
        return self.session

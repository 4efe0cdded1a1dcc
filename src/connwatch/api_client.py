"""JSON API client whose calls run through a ConnectionService."""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Dict, Mapping, Optional

import aiohttp

from .connection_config import join_url
from .connection_service import ConnectionService
from .exceptions import RequestRejectedError, TransientNetworkError
from .network_errors import describe_network_error

_HTTP_CLIENT_ERROR = 400
_HTTP_SERVER_ERROR = 500
_RETRYABLE_CLIENT_STATUSES = frozenset({408, 429})
_ERROR_BODY_PREVIEW = 200


def is_retryable_status(status: int) -> bool:
    """True for statuses worth another attempt: 5xx, 408 and 429."""
    return status >= _HTTP_SERVER_ERROR or status in _RETRYABLE_CLIENT_STATUSES


class ResilientApiClient:
    """
    Sends JSON requests with the service's health awareness and retry policy.

    Every attempt gets its own ``X-Request-ID``. Transport failures and
    retryable statuses raise TransientNetworkError so the executor retries
    them; other 4xx responses raise RequestRejectedError and are not retried.
    """

    def __init__(self, service: ConnectionService, base_url: Optional[str] = None):
        self.service = service
        self.base_url = base_url if base_url is not None else service.config.base_url
        self.logger = logging.getLogger(f"{__name__}.{service.name}")

    async def request_json(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """
        Perform one logical request, retried per the service policy.

        Returns:
            Decoded JSON body, or None for an empty body
        """
        url = join_url(self.base_url, path)
        method = method.upper()

        async def attempt() -> Any:
            return await self._send_once(method, url, json=json, params=params, headers=headers)

        attempt.__qualname__ = f"{method} {url}"
        return await self.service.execute(attempt)

    async def get_json(self, path: str, **kwargs: Any) -> Any:
        return await self.request_json("GET", path, **kwargs)

    async def post_json(self, path: str, payload: Any = None, **kwargs: Any) -> Any:
        return await self.request_json("POST", path, json=payload, **kwargs)

    async def put_json(self, path: str, payload: Any = None, **kwargs: Any) -> Any:
        return await self.request_json("PUT", path, json=payload, **kwargs)

    async def delete_json(self, path: str, **kwargs: Any) -> Any:
        return await self.request_json("DELETE", path, **kwargs)

    async def _send_once(
        self,
        method: str,
        url: str,
        *,
        json: Any,
        params: Optional[Mapping[str, Any]],
        headers: Optional[Mapping[str, str]],
    ) -> Any:
        request_id = uuid.uuid4().hex
        request_headers: Dict[str, str] = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-Request-ID": request_id,
        }
        if headers:
            request_headers.update(headers)

        session = await self.service.session_manager.ensure_session()
        self.logger.debug("%s %s [%s]", method, url, request_id)
        try:
            async with session.request(method, url, json=json, params=params, headers=request_headers) as response:
                if response.status >= _HTTP_CLIENT_ERROR:
                    body = await response.text()
                    self._raise_for_status(response.status, url, body)
                try:
                    return await response.json(content_type=None)
                except ValueError as exc:
                    raise RequestRejectedError(
                        f"Malformed JSON response from {url}", status=response.status, url=url
                    ) from exc
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            self.logger.warning("%s %s failed [%s]: %s", method, url, request_id, describe_network_error(exc))
            raise TransientNetworkError(describe_network_error(exc), url=url) from exc

    def _raise_for_status(self, status: int, url: str, body: str) -> None:
        preview = body[:_ERROR_BODY_PREVIEW]
        message = f"HTTP {status} from {url}: {preview}" if preview else f"HTTP {status} from {url}"
        if is_retryable_status(status):
            raise TransientNetworkError(message, status=status, url=url)
        raise RequestRejectedError(message, status=status, url=url)


__all__ = ["ResilientApiClient", "is_retryable_status"]

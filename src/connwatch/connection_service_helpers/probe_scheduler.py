"""Periodic health probe scheduling."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional


class ProbeScheduler:
    """
    Runs a probe immediately and then once per interval.

    Each probe is awaited before the next sleep starts, so ticks never
    overlap. ``stop`` cancels the loop task; no tick fires afterwards, even
    one whose sleep was already pending.
    """

    def __init__(
        self,
        service_name: str,
        run_probe: Callable[[], Awaitable[Any]],
        interval_seconds: float,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.service_name = service_name
        self.run_probe = run_probe
        self.interval_seconds = interval_seconds
        self._sleep = sleep
        self._task: Optional[asyncio.Task[None]] = None
        self.stopped = False
        self.logger = logging.getLogger(f"{__name__}.{service_name}")

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task[None]:
        """Start the loop on the running event loop."""
        if self.stopped:
            raise RuntimeError(f"Probe scheduler for {self.service_name} was stopped")
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self._run(), name=f"{self.service_name}-health-probe")
        return self._task

    async def _run(self) -> None:
        self.logger.info("Starting periodic health checks every %.1fs", self.interval_seconds)
        while not self.stopped:
            try:
                await self.run_probe()
            except asyncio.CancelledError:
                raise
            except Exception:
                self.logger.exception("Periodic health check failed")
            if self.stopped:
                break
            await self._sleep(self.interval_seconds)

    def stop(self) -> None:
        """Stop the loop. Safe to call more than once."""
        if self.stopped:
            return
        self.stopped = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self.logger.info("Stopped periodic health checks")

    async def wait_stopped(self) -> None:
        """Wait until the loop task has finished after ``stop``."""
        if self._task is None or self._task.done():
            return
        await asyncio.wait([self._task])

"""Composition root of the connection-resilience layer."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional, Set, TypeVar, Union

from .connection_config import ConnectionServiceConfig
from .connection_service_helpers import ProbeScheduler, StatusStateManager
from .connection_state import ConnectionQuality, ConnectionSnapshot, EventKind, HealthStatus, NetworkTransition
from .diagnostics import ConnectionDiagnostics, DiagnosticEntry
from .exceptions import OfflineError, RetryAbortedError
from .health_probe import HealthProbe
from .health_probe_helpers import ProbeResult
from .http_session import HttpSessionManager
from .network_signal import NetworkSignal
from .platform_capabilities import ManualNetworkCapabilities, NetworkCapabilities
from .retry_executor import RetryCounter, RetryExecutor
from .status_broadcaster import ListenerRegistration, StatusBroadcaster, StatusCallback

T = TypeVar("T")

DEFAULT_SERVICE_NAME = "connwatch"
_RECENT_DIAGNOSTICS = 20


@dataclass(frozen=True)
class DiagnosticsReport:
    """Result of ConnectionService.run_diagnostics()."""

    timestamp: float
    snapshot: ConnectionSnapshot
    probe: ProbeResult
    recent_entries: List[DiagnosticEntry]

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "snapshot": self.snapshot.to_dict(),
            "probe": self.probe.to_dict(),
            "recent_entries": [entry.to_dict() for entry in self.recent_entries],
        }


class ConnectionService:
    """
    Tracks reachability of one remote API and runs calls against it with retries.

    Construction wires platform signals into the broadcaster, starts the
    periodic health probe on the running event loop and runs one probe
    immediately. The service lives until ``destroy`` (or ``aclose``); after
    that ``get_snapshot`` keeps returning the resting snapshot and
    ``execute`` still runs operations without touching any state.
    """

    def __init__(
        self,
        config: Optional[ConnectionServiceConfig] = None,
        *,
        capabilities: Optional[NetworkCapabilities] = None,
        session_manager: Optional[HttpSessionManager] = None,
        broadcaster: Optional[StatusBroadcaster] = None,
        diagnostics: Optional[ConnectionDiagnostics] = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        name: str = DEFAULT_SERVICE_NAME,
    ):
        try:
            self._loop = asyncio.get_running_loop()
        except RuntimeError as exc:
            raise RuntimeError("ConnectionService must be created inside a running event loop") from exc

        self.config = config if config is not None else ConnectionServiceConfig()
        self.name = name
        self._clock = clock
        self.logger = logging.getLogger(f"{__name__}.{name}")
        self._diagnostics = (
            diagnostics if diagnostics is not None else ConnectionDiagnostics(self.config.diagnostics_capacity, clock)
        )
        self._capabilities = capabilities if capabilities is not None else ManualNetworkCapabilities()
        self._broadcaster = broadcaster if broadcaster is not None else StatusBroadcaster()
        if session_manager is None:
            session_manager = HttpSessionManager(
                name,
                connection_timeout=self.config.probe_timeout_seconds,
                request_timeout=self.config.request_timeout_seconds,
                user_agent=self.config.user_agent,
            )
        self.session_manager = session_manager

        policy = self.config.retry_policy
        self._retry_counter = RetryCounter(policy.max_attempts)
        self._executor = RetryExecutor(policy, sleep=sleep, diagnostics=self._diagnostics)
        self._probe = HealthProbe(
            self.config.health_url,
            self.session_manager,
            self._capabilities,
            timeout_seconds=self.config.probe_timeout_seconds,
            ok_marker_field=self.config.ok_marker_field,
            ok_marker_value=self.config.ok_marker_value,
            clock=clock,
            diagnostics=self._diagnostics,
        )
        self._state = StatusStateManager(name, self._broadcaster, self._retry_counter, clock=clock)

        self._probe_task: Optional[asyncio.Task[ProbeResult]] = None
        self._background_tasks: Set[asyncio.Task[Any]] = set()
        self._last_probe_result: Optional[ProbeResult] = None
        self._destroyed = False

        # Internal handlers go first so subscribers observe the updated state.
        self._internal_handlers = (
            (EventKind.ONLINE, self._handle_online),
            (EventKind.OFFLINE, self._handle_offline),
            (EventKind.CONNECTION_CHANGE, self._handle_connection_change),
        )
        for event_kind, handler in self._internal_handlers:
            self._broadcaster.subscribe(event_kind, handler)

        self._signal = NetworkSignal(self._capabilities, self._broadcaster, diagnostics=self._diagnostics, clock=clock)
        self._state.is_online = self._signal.is_online
        self._state.quality = self._signal.quality
        if not self._signal.is_online:
            self._state.mark_offline()

        self._scheduler = ProbeScheduler(
            name, self._run_scheduled_probe, self.config.probe_interval_seconds, sleep=sleep
        )
        self._scheduler.start()
        self._diagnostics.record("PERIODIC_HEALTH_STARTED", interval_seconds=self.config.probe_interval_seconds)

    @property
    def status(self) -> HealthStatus:
        return self._state.status

    @property
    def diagnostics(self) -> ConnectionDiagnostics:
        return self._diagnostics

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def get_snapshot(self) -> ConnectionSnapshot:
        """Current connection state as an immutable value. Never raises."""
        return self._state.build_snapshot()

    def subscribe(self, event_kind: Union[EventKind, str], callback: StatusCallback) -> ListenerRegistration:
        return self._broadcaster.subscribe(EventKind(event_kind), callback)

    def unsubscribe(self, event_kind: Union[EventKind, str], callback: StatusCallback) -> bool:
        return self._broadcaster.unsubscribe(EventKind(event_kind), callback)

    async def check_health(self, force: bool = False) -> ProbeResult:
        """
        Run a health probe now and apply its result.

        Concurrent callers share the probe already in flight; ``force``
        starts a fresh one regardless.
        """
        if self._destroyed:
            return self._resting_probe_result()

        task = self._probe_task
        if force or task is None or task.done():
            task = self._spawn(self._probe_and_apply())
            self._probe_task = task
        return await asyncio.shield(task)

    async def execute(self, operation: Callable[[], Union[Awaitable[T], T]]) -> T:
        """
        Run ``operation`` with the service's retry policy.

        Raises:
            OfflineError: The platform is offline, before any call or between attempts
            RetryExhaustedError: Every attempt failed
            NonRetryableError: Raised by the operation itself
        """
        if self._destroyed:
            return await self._executor.run(operation)

        if self._is_offline():
            self.logger.warning("Rejecting operation, no network connection")
            self._diagnostics.record("EXECUTE_REJECTED_OFFLINE")
            raise OfflineError()

        if self.config.precheck_health:
            await self.check_health()
            if self._is_offline():
                self._diagnostics.record("EXECUTE_REJECTED_OFFLINE", precheck=True)
                raise OfflineError()

        try:
            result = await self._executor.run(
                operation,
                counter=self._retry_counter,
                should_abort=self._is_offline,
            )
        except RetryAbortedError as exc:
            raise OfflineError(attempts_made=exc.attempts, last_error=exc.last_error) from exc

        if not self._destroyed:
            self._state.apply_operation_success()
        return result

    async def run_diagnostics(self) -> DiagnosticsReport:
        """Force a probe and bundle it with the current snapshot and recent log entries."""
        probe = await self.check_health(force=True)
        return DiagnosticsReport(
            timestamp=self._clock(),
            snapshot=self.get_snapshot(),
            probe=probe,
            recent_entries=self._diagnostics.entries()[-_RECENT_DIAGNOSTICS:],
        )

    def destroy(self) -> None:
        """
        Stop the periodic probe, drop every listener and release the HTTP session.

        Safe to call more than once and from synchronous code.
        """
        if self._destroyed:
            return
        self._destroyed = True
        self._state.freeze()
        self._scheduler.stop()
        for task in list(self._background_tasks):
            task.cancel()
        self._signal.close()
        self._broadcaster.clear()
        self._diagnostics.record("PERIODIC_HEALTH_STOPPED")
        self._diagnostics.record("SERVICE_DESTROYED")
        if self.session_manager.get_session() is not None:
            self._close_session_soon()
        self.logger.info("Connection service destroyed")

    async def aclose(self) -> None:
        """Destroy the service and wait for its background work to finish."""
        self.destroy()
        await self._scheduler.wait_stopped()
        pending = [task for task in self._background_tasks if not task.done()]
        if pending:
            await asyncio.wait(pending)
        await self.session_manager.close_session()

    async def __aenter__(self) -> "ConnectionService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def _is_offline(self) -> bool:
        return self._state.status is HealthStatus.OFFLINE

    async def _run_scheduled_probe(self) -> None:
        await self.check_health()

    async def _probe_and_apply(self) -> ProbeResult:
        result = await self._probe.probe()
        if not self._destroyed:
            self._last_probe_result = result
            self._state.apply_probe_result(result)
        return result

    def _resting_probe_result(self) -> ProbeResult:
        if self._last_probe_result is not None:
            return self._last_probe_result
        return ProbeResult(self._state.status, self._clock(), error_message="Service destroyed")

    def _spawn(self, coro: Awaitable[T]) -> asyncio.Task[T]:
        task = self._loop.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        return task

    def _close_session_soon(self) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            if not self._loop.is_closed():
                self._loop.call_soon_threadsafe(lambda: self._spawn(self.session_manager.close_session()))
            return
        self._spawn(self.session_manager.close_session())

    def _handle_online(self, transition: NetworkTransition) -> None:
        self._state.mark_online()
        if not self._destroyed:
            self._spawn(self.check_health())

    def _handle_offline(self, transition: NetworkTransition) -> None:
        self._state.mark_offline()

    def _handle_connection_change(self, quality: Optional[ConnectionQuality]) -> None:
        self._state.update_quality(quality)

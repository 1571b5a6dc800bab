"""
service_lifecycle/services/lifecycle.py
Service lifecycle state machine.

    STOPPED -> STARTING -> RUNNING -> STOPPING -> STOPPED
                  |                      |
                  +------> ERROR <-------+

ERROR is terminal: the process is expected to be restarted externally.

Transitions are serialized by an asyncio lock; status and start time are
read and written under a thread lock so HTTP handlers always observe a
consistent pair.
"""

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from threading import RLock
from typing import Any, Awaitable, Callable, Dict, Optional

from ..core.config import ServiceConfig
from ..core.exceptions import (
    CollaboratorException,
    InvalidTransitionException,
    LifecycleException,
    ListenerException,
    TimeoutException,
)
from ..core.logging import get_logger
from ..core.metrics import observe_call, record_transition
from .collaborators import Cache, Database


class ServiceStatus(Enum):
    """Lifecycle states. Values are what the HTTP surface reports."""
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    ERROR = "error"


_ALL_STATUSES = [s.value for s in ServiceStatus]


@dataclass(frozen=True)
class StatusSnapshot:
    """Read-only projection of the lifecycle exposed over HTTP."""
    service: str
    status: ServiceStatus
    uptime: float
    version: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "service": self.service,
            "status": self.status.value,
            "uptime": self.uptime,
            "version": self.version,
        }


class ServiceLifecycle:
    """
    Sequences the startup and shutdown of a service process.

    start(): database connect -> cache connect -> listener bind
    stop():  listener close -> database close -> cache close

    The database and cache are borrowed, not owned: the lifecycle calls
    connect()/close() on them but never creates or destroys them. The
    listener is owned and is the only resource released on shutdown.

    Any failure (or timeout) in either sequence moves the service to
    ERROR and re-raises as a LifecycleException with the original error
    chained as __cause__.
    """

    def __init__(
        self,
        config: ServiceConfig,
        database: Optional[Database] = None,
        cache: Optional[Cache] = None,
        *,
        listener,
        logger=None,
    ):
        """
        Args:
            config: Immutable service configuration
            database: Optional database collaborator
            cache: Optional cache collaborator
            listener: HTTP listener (see api.listener.Listener)
            logger: structlog-compatible logger; defaults to the package logger
        """
        self._config = config
        self._database = database
        self._cache = cache
        self._listener = listener
        self._logger = (logger or get_logger("lifecycle")).bind(
            service=config.service_name
        )

        self._status = ServiceStatus.STOPPED
        self._start_time: Optional[datetime] = None
        self._connected: Dict[str, bool] = {"database": False, "cache": False}

        self._state_lock = RLock()
        self._transition_lock = asyncio.Lock()

    # ------------------------------------------------------------------ #
    # Read-only accessors
    # ------------------------------------------------------------------ #

    @property
    def config(self) -> ServiceConfig:
        return self._config

    @property
    def listener(self):
        return self._listener

    @property
    def status(self) -> ServiceStatus:
        with self._state_lock:
            return self._status

    @property
    def start_time(self) -> Optional[datetime]:
        with self._state_lock:
            return self._start_time

    @property
    def uptime(self) -> float:
        return self.get_status().uptime

    def get_status(self) -> StatusSnapshot:
        """Snapshot of service name, status, uptime (seconds) and version."""
        with self._state_lock:
            status = self._status
            start_time = self._start_time

        uptime = 0.0
        if start_time is not None:
            uptime = max(0.0, (datetime.now(timezone.utc) - start_time).total_seconds())

        return StatusSnapshot(
            service=self._config.service_name,
            status=status,
            uptime=uptime,
            version=self._config.version,
        )

    def collaborators(self) -> Dict[str, str]:
        """Connection state of each collaborator ("connected"/"disconnected")."""
        with self._state_lock:
            return {
                name: "connected" if connected else "disconnected"
                for name, connected in self._connected.items()
            }

    # ------------------------------------------------------------------ #
    # Transitions
    # ------------------------------------------------------------------ #

    async def start(self) -> None:
        """
        Connect collaborators and bind the listener.

        Returns once the listener is accepting connections.

        Raises:
            InvalidTransitionException: not STOPPED, or a transition is in flight
            CollaboratorException, ListenerException, TimeoutException: startup failed
        """
        if self._transition_lock.locked():
            raise InvalidTransitionException(
                "start", self.status.value, "another transition is in progress"
            )

        async with self._transition_lock:
            current = self.status
            if current is not ServiceStatus.STOPPED:
                raise InvalidTransitionException("start", current.value)

            self._logger.info(
                "service_starting",
                host=self._config.host,
                port=self._config.port,
                database=self._database is not None,
                cache=self._cache is not None,
            )
            self._set_status(ServiceStatus.STARTING)
            timeout = self._config.startup_timeout

            try:
                if self._database is not None:
                    await self._call("database", "connect", self._database.connect, timeout)
                    self._mark_connected("database", True)

                if self._cache is not None:
                    await self._call("cache", "connect", self._cache.connect, timeout)
                    self._mark_connected("cache", True)

                await self._call("listener", "start", self._listener.start, timeout)

            except (LifecycleException, asyncio.CancelledError) as e:
                self._logger.error(
                    "service_start_failed",
                    error=str(e),
                    error_type=type(e).__name__,
                    exc_info=True,
                )
                await self._release_listener()
                self._set_status(ServiceStatus.ERROR)
                raise

            self._set_status(ServiceStatus.RUNNING)
            self._logger.info(
                "service_started",
                host=self._config.host,
                port=self._config.port,
                version=self._config.version,
            )

    async def stop(self) -> None:
        """
        Close the listener, then the database, then the cache.

        Raises:
            InvalidTransitionException: not RUNNING, or a transition is in flight
            CollaboratorException, ListenerException, TimeoutException: shutdown failed
        """
        if self._transition_lock.locked():
            raise InvalidTransitionException(
                "stop", self.status.value, "another transition is in progress"
            )

        async with self._transition_lock:
            current = self.status
            if current is not ServiceStatus.RUNNING:
                raise InvalidTransitionException("stop", current.value)

            self._logger.info("service_stopping")
            self._set_status(ServiceStatus.STOPPING)
            timeout = self._config.shutdown_timeout

            try:
                await self._call("listener", "close", self._listener.close, timeout)

                if self._database is not None:
                    await self._call("database", "close", self._database.close, timeout)
                    self._mark_connected("database", False)

                if self._cache is not None:
                    await self._call("cache", "close", self._cache.close, timeout)
                    self._mark_connected("cache", False)

            except (LifecycleException, asyncio.CancelledError) as e:
                self._set_status(ServiceStatus.ERROR)
                self._logger.error(
                    "service_stop_failed",
                    error=str(e),
                    error_type=type(e).__name__,
                    exc_info=True,
                )
                raise

            self._set_status(ServiceStatus.STOPPED)
            self._logger.info("service_stopped")

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _set_status(self, new_status: ServiceStatus) -> None:
        with self._state_lock:
            old_status = self._status
            self._status = new_status
            if new_status is ServiceStatus.RUNNING:
                self._start_time = datetime.now(timezone.utc)
            elif new_status is ServiceStatus.STOPPED:
                self._start_time = None

        record_transition(old_status.value, new_status.value, _ALL_STATUSES)
        self._logger.debug(
            "status_changed",
            from_status=old_status.value,
            to_status=new_status.value,
        )

    def _mark_connected(self, name: str, connected: bool) -> None:
        with self._state_lock:
            self._connected[name] = connected

    async def _call(
        self,
        target: str,
        operation: str,
        call: Callable[[], Awaitable[Any]],
        timeout: Optional[float],
    ) -> None:
        """Run one connect/close/bind step, mapping failures onto the taxonomy."""

        # Callee errors are mapped before wait_for sees them, so a
        # TimeoutError escaping wait_for always means our own bound expired.
        async def guarded() -> None:
            try:
                await call()
            except LifecycleException:
                raise
            except Exception as e:
                if target == "listener":
                    raise ListenerException(
                        operation, str(e), f"{self._config.host}:{self._config.port}"
                    ) from e
                raise CollaboratorException(target, operation, str(e)) from e

        started = time.perf_counter()
        try:
            if timeout is None:
                await guarded()
            else:
                await asyncio.wait_for(guarded(), timeout)
        except asyncio.TimeoutError as e:
            raise TimeoutException(target, operation, timeout) from e
        finally:
            observe_call(target, operation, time.perf_counter() - started)

    async def _release_listener(self) -> None:
        """Best-effort close of a listener left behind by a failed start."""
        try:
            await self._call("listener", "close", self._listener.close, self._config.shutdown_timeout)
        except LifecycleException as e:
            self._logger.warning("listener_release_failed", error=str(e))


__all__ = ["ServiceStatus", "StatusSnapshot", "ServiceLifecycle"]

"""
service_lifecycle/api/listener.py
HTTP listener owned by ServiceLifecycle.

Responsibilities:
- Bind the listening socket (bind errors surface before uvicorn starts)
- Serve the FastAPI app with uvicorn in a background task
- Stop serving and release the socket

Lifecycle sequencing (WHEN to bind/close) lives in ServiceLifecycle;
this module only knows HOW.
"""

import asyncio
import contextlib
import socket
from abc import ABC, abstractmethod
from typing import Optional

import structlog
import uvicorn
from uvicorn.config import LOG_LEVELS

from ..core.exceptions import ListenerException

logger = structlog.get_logger("service_lifecycle.listener")

_LOG_LEVEL_ALIASES = {"warn": "warning", "fatal": "critical"}


def uvicorn_log_level(level: str) -> str:
    """
    Map a free-form log level name onto one uvicorn accepts.

    ServiceConfig.log_level is informational, so unknown names fall back
    to "info" instead of failing the listener start.
    """
    name = level.strip().lower()
    name = _LOG_LEVEL_ALIASES.get(name, name)
    if name not in LOG_LEVELS:
        logger.warning("unknown_log_level", log_level=level, using="info")
        return "info"
    return name


class Listener(ABC):
    """Something that accepts connections between start() and close()."""

    @abstractmethod
    async def start(self) -> None:
        """Bind and start accepting. Return only once accepting."""

    @abstractmethod
    async def close(self) -> None:
        """Stop accepting and release the socket. Safe to call when not started."""


class _EmbeddedServer(uvicorn.Server):
    """uvicorn server that leaves process signal handling to the caller."""

    def install_signal_handlers(self) -> None:  # uvicorn < 0.29
        pass

    @contextlib.contextmanager
    def capture_signals(self):  # uvicorn >= 0.29
        yield


class UvicornListener(Listener):
    """
    Serves an ASGI app on host:port.

    The socket is bound here rather than by uvicorn so that "address in
    use" is raised to the caller as a ListenerException instead of
    terminating the process.
    """

    def __init__(
        self,
        app,
        host: str,
        port: int,
        log_level: str = "info",
        poll_interval: float = 0.01,
    ) -> None:
        self.app = app
        self.host = host
        self.port = port
        self.log_level = uvicorn_log_level(log_level)
        self.poll_interval = poll_interval

        self._socket: Optional[socket.socket] = None
        self._server: Optional[_EmbeddedServer] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    def is_serving(self) -> bool:
        return (
            self._server is not None
            and self._server.started
            and self._task is not None
            and not self._task.done()
        )

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def start(self) -> None:
        if self._task is not None:
            logger.warning("listener_already_started", address=self.address)
            return

        logger.info("binding_listener", address=self.address)
        self._socket = self._bind()

        config = uvicorn.Config(
            self.app,
            log_level=self.log_level,
            log_config=None,
            lifespan="off",
            access_log=False,
        )
        self._server = _EmbeddedServer(config)
        self._task = asyncio.create_task(self._server.serve(sockets=[self._socket]))

        # Wait until uvicorn reports it is accepting connections
        while not self._server.started:
            if self._task.done():
                error = self._task.exception()
                self._task = None
                self._close_socket()
                raise ListenerException(
                    "start",
                    str(error) if error else "server exited before accepting connections",
                    self.address,
                )
            await asyncio.sleep(self.poll_interval)

        logger.info("listener_started", address=self.address)

    async def close(self) -> None:
        if self._task is None:
            self._close_socket()
            return

        logger.info("closing_listener", address=self.address)
        self._server.should_exit = True
        task, self._task = self._task, None
        try:
            await task
        except Exception as e:
            raise ListenerException("close", str(e), self.address) from e
        finally:
            self._server = None
            self._close_socket()

        logger.info("listener_closed", address=self.address)

    # ------------------------------------------------------------------ #
    # Socket handling
    # ------------------------------------------------------------------ #

    def _bind(self) -> socket.socket:
        family = socket.AF_INET6 if ":" in self.host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self.host, self.port))
        except OSError as e:
            sock.close()
            logger.error("listener_bind_failed", address=self.address, error=str(e))
            raise ListenerException("bind", str(e), self.address) from e
        return sock

    def _close_socket(self) -> None:
        if self._socket is not None:
            self._socket.close()
            self._socket = None


__all__ = ["Listener", "UvicornListener", "uvicorn_log_level"]

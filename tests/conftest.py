import asyncio
import socket
from typing import Any, List, Optional

import pytest
import structlog
from structlog.testing import CapturingLogger

from service_lifecycle.api.listener import Listener
from service_lifecycle.core.config import DatabaseConfig, ServiceConfig
from service_lifecycle.services.collaborators import Cache, Database
from service_lifecycle.services.lifecycle import ServiceLifecycle


# ============================================================================
# Stub collaborators
# ============================================================================

class _Recorder:
    """Records each call as (name, lifecycle status at the time of the call)."""

    def __init__(self, name: str, calls: List[tuple]):
        self.name = name
        self.calls = calls
        self.lifecycle: Optional[ServiceLifecycle] = None

    def _record(self, operation: str) -> None:
        status = self.lifecycle.status.value if self.lifecycle else None
        self.calls.append((f"{self.name}.{operation}", status))


class StubDatabase(_Recorder, Database):
    def __init__(
        self, calls, connect_error=None, close_error=None,
        connect_delay=0.0, close_delay=0.0, connect_gate=None,
    ):
        super().__init__("database", calls)
        self.connect_error = connect_error
        self.close_error = close_error
        self.connect_delay = connect_delay
        self.close_delay = close_delay
        self.connect_gate: Optional[asyncio.Event] = connect_gate

    async def connect(self) -> None:
        self._record("connect")
        if self.connect_gate is not None:
            await self.connect_gate.wait()
        if self.connect_delay:
            await asyncio.sleep(self.connect_delay)
        if self.connect_error:
            raise self.connect_error

    async def close(self) -> None:
        self._record("close")
        if self.close_delay:
            await asyncio.sleep(self.close_delay)
        if self.close_error:
            raise self.close_error

    async def query(self, query: str, *params: Any) -> Any:
        raise AssertionError("lifecycle must not query the database")

    async def execute(self, query: str, *params: Any) -> None:
        raise AssertionError("lifecycle must not execute statements")


class StubCache(_Recorder, Cache):
    def __init__(self, calls, connect_error=None, close_error=None):
        super().__init__("cache", calls)
        self.connect_error = connect_error
        self.close_error = close_error

    async def connect(self) -> None:
        self._record("connect")
        if self.connect_error:
            raise self.connect_error

    async def close(self) -> None:
        self._record("close")
        if self.close_error:
            raise self.close_error

    async def get(self, key):
        raise AssertionError("lifecycle must not read the cache")

    async def set(self, key, value, ttl=None):
        raise AssertionError("lifecycle must not write the cache")

    async def delete(self, key):
        raise AssertionError("lifecycle must not delete cache keys")


class FakeListener(_Recorder, Listener):
    def __init__(self, calls, start_error=None, close_error=None, start_delay=0.0):
        super().__init__("listener", calls)
        self.start_error = start_error
        self.close_error = close_error
        self.start_delay = start_delay
        self.accepting = False

    async def start(self) -> None:
        self._record("start")
        if self.start_delay:
            await asyncio.sleep(self.start_delay)
        if self.start_error:
            raise self.start_error
        self.accepting = True

    async def close(self) -> None:
        self._record("close")
        if self.close_error:
            raise self.close_error
        self.accepting = False


# ============================================================================
# Fixtures
# ============================================================================

def make_config(**overrides) -> ServiceConfig:
    values = {
        "service_name": "api",
        "port": 8080,
        "host": "127.0.0.1",
        "database": DatabaseConfig(
            host="localhost", port=5432, username="user", password="password", database="apidb"
        ),
    }
    values.update(overrides)
    return ServiceConfig(**values)


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def calls():
    return []


@pytest.fixture
def captured():
    """CapturingLogger plus a structlog logger that writes into it."""
    cap = CapturingLogger()
    return cap, structlog.wrap_logger(cap, processors=[])


@pytest.fixture
def build(calls, captured):
    """
    Factory for a ServiceLifecycle wired to stubs.

    Usage:
        lifecycle, database, cache, listener = build(database=StubDatabase(calls))
    """
    _, logger = captured

    def _build(config=None, database="default", cache=None, listener=None):
        if database == "default":
            database = StubDatabase(calls)
        listener = listener or FakeListener(calls)
        lifecycle = ServiceLifecycle(
            config or make_config(),
            database,
            cache,
            listener=listener,
            logger=logger,
        )
        for collaborator in (database, cache, listener):
            if collaborator is not None:
                collaborator.lifecycle = lifecycle
        return lifecycle, database, cache, listener

    return _build

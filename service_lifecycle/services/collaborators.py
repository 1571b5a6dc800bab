"""Abstract interfaces for the collaborators sequenced by ServiceLifecycle."""
from abc import ABC, abstractmethod
from typing import Any, Optional


class Database(ABC):
    """
    Database capability.

    The lifecycle only ever calls connect() and close(); query() and
    execute() belong to the application code that uses the connection.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Open the connection. Raise on failure."""

    @abstractmethod
    async def close(self) -> None:
        """Close the connection. Raise on failure."""

    @abstractmethod
    async def query(self, query: str, *params: Any) -> Any:
        pass

    @abstractmethod
    async def execute(self, query: str, *params: Any) -> None:
        pass


class Cache(ABC):
    """Cache capability. Same connect/close contract as Database."""

    @abstractmethod
    async def connect(self) -> None:
        pass

    @abstractmethod
    async def close(self) -> None:
        pass

    @abstractmethod
    async def get(self, key: str) -> Any:
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store value under key; ttl in seconds, None for no expiry."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        pass


__all__ = ["Database", "Cache"]

"""
Base classes for caching.

Consumers (for example a GraphQL execution layer) program against these
interfaces and stay unaware of the backing store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class CacheSetOptions:
    """Per-write options. `ttl` is in seconds; None means the cache default."""

    ttl: int | None = None


class KeyValueCache(ABC):
    """Abstract interface for string key-value caches."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Get a value from the cache."""
        ...

    @abstractmethod
    async def set(
        self, key: str, value: str, options: CacheSetOptions | None = None
    ) -> None:
        """Set a value in the cache."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a value from the cache."""
        ...


class TestableKeyValueCache(KeyValueCache):
    """Cache that can also be emptied, for test isolation."""

    @abstractmethod
    async def flush(self) -> None:
        """Remove every entry."""
        ...

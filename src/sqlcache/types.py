"""
Core types for the SQL cache.

- Dialect enum for the supported SQL flavors
- CacheRow dataclass for a row read back from the cache table
- now_ms() clock helper used for expiry checks
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping


def now_ms(clock: Callable[[], float] = time.time) -> int:
    """Current time in milliseconds from a clock returning unix seconds."""
    return int(clock() * 1000)


class Dialect(str, Enum):
    """SQL dialects the cache can generate queries for."""

    SQLITE = "sqlite"
    MYSQL = "mysql"


@dataclass(frozen=True)
class CacheRow:
    """A cache entry as returned by the read query.

    `expiry_ts` is computed by the database as `ttl + created_at` in unix
    seconds; it is never stored.
    """

    key: str
    value: str
    expiry_ts: int

    @classmethod
    def from_record(cls, key: str, record: Mapping[str, Any]) -> CacheRow:
        """Build a row from a driver record (dict or sqlite Row)."""
        return cls(key=key, value=record["value"], expiry_ts=int(record["expiry_ts"]))

    def is_expired(self, current_ms: int) -> bool:
        """Whether the entry is expired at `current_ms` (unix milliseconds)."""
        return current_ms >= self.expiry_ts * 1000

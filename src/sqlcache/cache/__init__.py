"""
Cache package.

- Base interfaces (base.py): KeyValueCache and TestableKeyValueCache
- SQL-backed cache (sql_cache.py): TTL expiry with read-repair deletes
"""

from sqlcache.cache.base import CacheSetOptions, KeyValueCache, TestableKeyValueCache
from sqlcache.cache.sql_cache import SqlCache, SqlCacheOptions

__all__ = [
    "CacheSetOptions",
    "KeyValueCache",
    "SqlCache",
    "SqlCacheOptions",
    "TestableKeyValueCache",
]

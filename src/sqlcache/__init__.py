"""
SQL-backed key-value cache with TTL expiry.
"""

from sqlcache.cache import (
    CacheSetOptions,
    KeyValueCache,
    SqlCache,
    SqlCacheOptions,
    TestableKeyValueCache,
)
from sqlcache.exceptions import ConfigurationError, QueryError, SqlCacheError
from sqlcache.executor import CallbackExecutor, QueryExecutor

__version__ = "0.1.0"

__all__ = [
    "CacheSetOptions",
    "CallbackExecutor",
    "ConfigurationError",
    "KeyValueCache",
    "QueryError",
    "QueryExecutor",
    "SqlCache",
    "SqlCacheError",
    "SqlCacheOptions",
    "TestableKeyValueCache",
    "__version__",
]

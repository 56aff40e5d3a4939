"""
SQL-backed key-value cache.

Rows live in a `<database>.<table>` relation with columns `key` (unique),
`value`, `ttl` (seconds) and `created_at` (set by the column default).
Expiry is computed at read time as `ttl + created_at`; expired rows are
deleted by the read that finds them unless `delete_expired_items` is off.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable

from sqlcache.cache.base import CacheSetOptions, TestableKeyValueCache
from sqlcache.dialects import SqlDialect, get_dialect, validate_identifier
from sqlcache.exceptions import ConfigurationError, QueryError
from sqlcache.executor import (
    CallbackConnection,
    CallbackExecutor,
    QueryExecutor,
    QueryParameters,
    Rows,
)
from sqlcache.logging import get_logger, log_context
from sqlcache.types import CacheRow, Dialect, now_ms

logger = get_logger(__name__)

DEFAULT_TABLE_NAME = "cache"
DEFAULT_TTL_SECONDS = 300


@dataclass(frozen=True)
class SqlCacheOptions:
    """Configuration for `SqlCache`.

    Attributes:
        client: Query executor, or a callback-style connection to wrap.
        database_name: Database (schema) holding the cache table.
        table_name: Cache table name.
        delete_expired_items: Delete expired rows when a read finds them.
        default_ttl: TTL in seconds for writes that do not set one.
        dialect: SQL flavor used to render queries.
        clock: Returns the current unix time in seconds.
    """

    client: Any = None
    database_name: str | None = None
    table_name: str = DEFAULT_TABLE_NAME
    delete_expired_items: bool | None = True
    default_ttl: int = DEFAULT_TTL_SECONDS
    dialect: Dialect | str = Dialect.SQLITE
    clock: Callable[[], float] = time.time


def _resolve_client(client: Any) -> QueryExecutor:
    if client is None:
        raise ConfigurationError("`client` must be set when initializing SqlCache")
    if isinstance(client, QueryExecutor):
        return client
    if isinstance(client, CallbackConnection):
        return CallbackExecutor(client)
    raise ConfigurationError(
        "`client` must provide execute() or a callback-style query()",
        context={"client_type": type(client).__name__},
    )


class SqlCache(TestableKeyValueCache):
    """Key-value cache stored in a relational table with TTL expiry.

    Each operation issues one statement and awaits it. The delete that
    `get` performs on an expired row is awaited after the read; the pair is
    not atomic.
    """

    def __init__(self, options: SqlCacheOptions | None) -> None:
        if options is None:
            raise ConfigurationError(
                "configuration object with `client` and `database_name` must be set "
                "when initializing SqlCache"
            )

        self.client = _resolve_client(options.client)

        if not options.database_name:
            raise ConfigurationError("`database_name` must be set when initializing SqlCache")

        self.database_name = validate_identifier(options.database_name, "database_name")
        self.table_name = validate_identifier(
            options.table_name or DEFAULT_TABLE_NAME, "table_name"
        )
        self.delete_expired_items = (
            True if options.delete_expired_items is None else bool(options.delete_expired_items)
        )

        default_ttl = options.default_ttl
        if isinstance(default_ttl, bool) or not isinstance(default_ttl, int) or default_ttl < 0:
            raise ConfigurationError(
                "`default_ttl` must be a non-negative number of seconds",
                context={"default_ttl": default_ttl},
            )
        self.default_ttl = default_ttl

        self.dialect: SqlDialect = get_dialect(options.dialect)
        self._clock = options.clock
        self._table = self.dialect.table_identifier(self.database_name, self.table_name)
        self._key_column = self.dialect.quote("key")

    @property
    def table_identifier(self) -> str:
        """Quoted `<database>.<table>` used in every query."""
        return self._table

    async def get(self, key: str) -> str | None:
        """Retrieve an item from the cache.

        Returns:
            The stored value, or None when there is no row or the row
            expired and was deleted. With `delete_expired_items` off an
            expired value is still returned.
        """
        rows = await self._query(
            "get",
            f"""
            SELECT
                value,
                (ttl + {self.dialect.epoch("created_at")}) AS expiry_ts
            FROM {self._table} AS cache_table
            WHERE cache_table.{self._key_column} = {self.dialect.positional}
            """,
            [key],
            key=key,
        )

        if not rows:
            logger.debug("Cache miss", key=key)
            return None

        row = CacheRow.from_record(key, rows[0])

        if row.is_expired(now_ms(self._clock)):
            if self.delete_expired_items:
                await self.delete(key)
                logger.debug("Deleted expired cache item", key=key, expiry_ts=row.expiry_ts)
                return None
            logger.debug("Serving expired cache item", key=key, expiry_ts=row.expiry_ts)
        else:
            logger.debug("Cache hit", key=key)

        return row.value

    async def set(
        self, key: str, value: str, options: CacheSetOptions | None = None
    ) -> None:
        """Put a new item in the cache.

        The insert is unconditional; a duplicate key fails on the table's
        unique constraint and surfaces as QueryError.
        """
        ttl = self.default_ttl
        if options is not None and options.ttl is not None:
            ttl = options.ttl

        named = self.dialect.named
        await self._query(
            "set",
            f"INSERT INTO {self._table} ({self._key_column}, value, ttl) "
            f"VALUES ({named('key')}, {named('value')}, {named('ttl')})",
            {"key": key, "value": value, "ttl": ttl},
            key=key,
        )
        logger.debug("Cached item", key=key, ttl=ttl)

    async def delete(self, key: str) -> bool:
        """Delete a cached item. Returns True even if no row existed."""
        await self._query(
            "delete",
            f"DELETE FROM {self._table} WHERE {self._key_column} = {self.dialect.positional}",
            [key],
            key=key,
        )
        logger.debug("Deleted cache item", key=key)
        return True

    async def flush(self) -> None:
        """Delete every cached item."""
        await self._query("flush", f"DELETE FROM {self._table}", [])
        logger.debug("Flushed cache table")

    async def _query(
        self,
        operation: str,
        query: str,
        parameters: QueryParameters,
        key: str | None = None,
    ) -> Rows:
        """Run one statement, converting driver failures to QueryError."""
        with log_context(
            database=self.database_name, table=self.table_name, operation=operation
        ):
            try:
                rows = await self.client.execute(query, parameters)
            except Exception as e:
                context: dict[str, Any] = {"operation": operation, "table": self._table}
                if key is not None:
                    context["key"] = key
                context["error"] = str(e) or type(e).__name__
                raise QueryError(f"Cache {operation} query failed", context=context) from e

        if not isinstance(rows, (list, tuple)):
            raise QueryError(
                "Query executor returned an unsupported result",
                context={
                    "operation": operation,
                    "table": self._table,
                    "result_type": type(rows).__name__,
                },
            )
        return rows

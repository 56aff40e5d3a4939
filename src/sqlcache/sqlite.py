"""
SQLite backend for the SQL cache.

`AiosqliteExecutor` runs cache queries on an aiosqlite connection. SQLite
addresses tables as `<schema>.<table>`: the main file is schema `main`
and further files can be attached under their own schema names.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any, Mapping

import aiosqlite

from sqlcache.dialects import get_dialect, validate_identifier
from sqlcache.exceptions import QueryError
from sqlcache.executor import QueryExecutor, QueryParameters, Rows
from sqlcache.logging import get_logger
from sqlcache.types import Dialect

logger = get_logger(__name__)


class AiosqliteExecutor:
    """Query executor backed by a single aiosqlite connection.

    Every statement is committed as soon as it runs; the cache issues one
    independent statement per operation.
    """

    def __init__(
        self,
        path: str | Path,
        attach: Mapping[str, str | Path] | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            path: SQLite database file (or ":memory:").
            attach: Extra database files keyed by schema name.
        """
        self.path = path if str(path) == ":memory:" else Path(path)
        self.attach = dict(attach or {})
        self._db: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open the connection and attach extra schemas."""
        for schema in self.attach:
            validate_identifier(schema, "schema")

        try:
            if isinstance(self.path, Path):
                self.path.parent.mkdir(parents=True, exist_ok=True)

            self._db = await aiosqlite.connect(self.path)
            self._db.row_factory = aiosqlite.Row

            for schema, schema_path in self.attach.items():
                if str(schema_path) != ":memory:":
                    Path(schema_path).parent.mkdir(parents=True, exist_ok=True)
                await self._db.execute(f'ATTACH DATABASE ? AS "{schema}"', (str(schema_path),))
        except (sqlite3.Error, OSError) as e:
            await self.close()
            raise QueryError(
                "Could not open SQLite database",
                context={"path": str(self.path), "error": str(e)},
            ) from e

        logger.debug("SQLite connection opened", path=str(self.path), attached=list(self.attach))

    async def close(self) -> None:
        """Close the database connection."""
        if self._db:
            await self._db.close()
            self._db = None

    async def __aenter__(self) -> AiosqliteExecutor:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def execute(self, query: str, parameters: QueryParameters) -> Rows:
        """Run one statement and commit it.

        Returns:
            Rows produced by the statement as aiosqlite.Row mappings.
        """
        if not self._db:
            raise RuntimeError("AiosqliteExecutor not connected. Call connect() first.")

        async with self._db.execute(query, parameters) as cursor:
            rows = await cursor.fetchall()
        await self._db.commit()
        return list(rows)


async def create_cache_table(
    executor: QueryExecutor,
    database_name: str = "main",
    table_name: str = "cache",
    dialect: Dialect | str = Dialect.SQLITE,
) -> None:
    """Create the cache table if it does not exist.

    Columns: `key` (unique), `value`, `ttl` (seconds), `created_at`
    (defaults to insertion time, UTC).
    """
    sql_dialect = get_dialect(dialect)
    table = sql_dialect.table_identifier(
        validate_identifier(database_name, "database_name"),
        validate_identifier(table_name, "table_name"),
    )
    key_column = sql_dialect.quote("key")

    if sql_dialect.name is Dialect.MYSQL:
        ddl = f"""
            CREATE TABLE IF NOT EXISTS {table} (
                {key_column} VARCHAR(255) NOT NULL UNIQUE,
                value LONGTEXT NOT NULL,
                ttl INT NOT NULL,
                created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
            )
        """
    else:
        ddl = f"""
            CREATE TABLE IF NOT EXISTS {table} (
                {key_column} TEXT NOT NULL UNIQUE,
                value TEXT NOT NULL,
                ttl INTEGER NOT NULL,
                created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
            )
        """

    try:
        await executor.execute(ddl, [])
    except Exception as e:
        raise QueryError(
            "Could not create cache table",
            context={"operation": "create_table", "table": table, "error": str(e)},
        ) from e
    logger.info("Cache table ready", table=table)

"""
Query execution primitive.

The cache talks to its database through one narrow capability: execute a
parameterized statement and get rows back, or an error. `QueryExecutor` is
that capability. `CallbackExecutor` adapts drivers that report results
through a `callback(error, rows)` instead of returning an awaitable.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Mapping, Protocol, Sequence, Union, runtime_checkable

from sqlcache.exceptions import QueryError

QueryParameters = Union[Sequence[Any], Mapping[str, Any]]
Rows = Sequence[Mapping[str, Any]]
QueryCallback = Callable[[Any, Any], None]


@runtime_checkable
class QueryExecutor(Protocol):
    """Anything that can run a parameterized query and return its rows."""

    async def execute(self, query: str, parameters: QueryParameters) -> Rows:
        """Run `query` with bound `parameters`.

        Returns:
            Result rows as mappings (empty for statements without results).

        Raises:
            Exception: Whatever the backend raises; the cache wraps it.
        """
        ...


@runtime_checkable
class CallbackConnection(Protocol):
    """Connection that reports query results through a callback."""

    def query(self, query: str, parameters: QueryParameters, callback: QueryCallback) -> Any:
        ...


class CallbackExecutor:
    """Wrap a callback-style connection into a `QueryExecutor`.

    Each call resolves a single future with the rows, or fails it with the
    reported error. Callbacks may fire synchronously or from a driver
    thread. No retries or timeouts are applied here.
    """

    def __init__(self, connection: CallbackConnection) -> None:
        self.connection = connection

    async def execute(self, query: str, parameters: QueryParameters) -> Rows:
        loop = asyncio.get_running_loop()
        future: asyncio.Future[Any] = loop.create_future()

        def settle(error: Any, rows: Any) -> None:
            if future.done():
                return
            if error:
                if isinstance(error, BaseException):
                    future.set_exception(error)
                else:
                    future.set_exception(
                        QueryError("Connection reported an error", context={"error": error})
                    )
                return
            future.set_result(rows)

        def callback(error: Any, rows: Any = None) -> None:
            loop.call_soon_threadsafe(settle, error, rows)

        self.connection.query(query, parameters, callback)
        rows = await future
        # Write statements may report a status object instead of rows
        if isinstance(rows, (list, tuple)):
            return list(rows)
        return []

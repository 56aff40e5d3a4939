"""
Tests for the callback-to-future query primitive.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Any

import pytest

from sqlcache.exceptions import QueryError
from sqlcache.executor import CallbackConnection, CallbackExecutor, QueryExecutor


class ThreadedConnection:
    """Connection that reports results from a driver thread."""

    def __init__(self, error: Any = None, results: Any = None) -> None:
        self.error = error
        self.results = results

    def query(self, query: str, parameters: Any, callback: Any) -> None:
        thread = threading.Thread(target=callback, args=(self.error, self.results))
        thread.start()


class TestCallbackExecutor:
    """Tests for CallbackExecutor."""

    async def test_resolves_with_rows(self, callback_connection: Any) -> None:
        callback_connection.results = [{"value": "v", "expiry_ts": 1}]
        executor = CallbackExecutor(callback_connection)

        rows = await executor.execute("SELECT 1", ["k"])

        assert rows == [{"value": "v", "expiry_ts": 1}]
        assert callback_connection.calls == [("SELECT 1", ["k"])]

    async def test_passes_named_parameters_through(self, callback_connection: Any) -> None:
        executor = CallbackExecutor(callback_connection)

        await executor.execute("INSERT", {"key": "k", "value": "v", "ttl": 5})

        assert callback_connection.calls[0][1] == {"key": "k", "value": "v", "ttl": 5}

    async def test_status_result_becomes_empty_rows(self, callback_connection: Any) -> None:
        callback_connection.results = {"affectedRows": 1}
        executor = CallbackExecutor(callback_connection)

        assert await executor.execute("DELETE", ["k"]) == []

    async def test_reraises_exception_errors(self, callback_connection: Any) -> None:
        error = ConnectionError("server has gone away")
        callback_connection.error = error
        executor = CallbackExecutor(callback_connection)

        with pytest.raises(ConnectionError) as exc_info:
            await executor.execute("SELECT 1", [])

        assert exc_info.value is error

    async def test_wraps_non_exception_errors(self, callback_connection: Any) -> None:
        callback_connection.error = "ER_DUP_ENTRY"
        executor = CallbackExecutor(callback_connection)

        with pytest.raises(QueryError) as exc_info:
            await executor.execute("INSERT", {})

        assert exc_info.value.context["error"] == "ER_DUP_ENTRY"

    async def test_callback_from_driver_thread(self) -> None:
        executor = CallbackExecutor(ThreadedConnection(results=[{"value": "v"}]))

        rows = await asyncio.wait_for(executor.execute("SELECT 1", []), timeout=5)

        assert rows == [{"value": "v"}]

    async def test_error_from_driver_thread(self) -> None:
        executor = CallbackExecutor(ThreadedConnection(error=RuntimeError("lost")))

        with pytest.raises(RuntimeError, match="lost"):
            await asyncio.wait_for(executor.execute("SELECT 1", []), timeout=5)

    async def test_second_callback_is_ignored(self) -> None:
        class DoubleCallbackConnection:
            def query(self, query: str, parameters: Any, callback: Any) -> None:
                callback(None, [{"value": "first"}])
                callback(RuntimeError("late"), None)

        executor = CallbackExecutor(DoubleCallbackConnection())

        assert await executor.execute("SELECT 1", []) == [{"value": "first"}]


class TestProtocols:
    """Tests for structural protocol checks."""

    def test_callback_connection_protocol(self, callback_connection: Any) -> None:
        assert isinstance(callback_connection, CallbackConnection)
        assert not isinstance(callback_connection, QueryExecutor)

    def test_callback_executor_is_query_executor(self, callback_connection: Any) -> None:
        assert isinstance(CallbackExecutor(callback_connection), QueryExecutor)

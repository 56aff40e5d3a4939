"""
Pytest configuration and fixtures for SQL cache tests.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Generator
from unittest.mock import patch

import pytest

from sqlcache.cache import SqlCache, SqlCacheOptions
from sqlcache.config import clear_settings_cache


class RecordingExecutor:
    """Query executor double that records every statement.

    `results` is returned for every query; setting `error` makes every
    query fail with it.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.results: list[dict[str, Any]] = []
        self.error: Exception | None = None

    async def execute(self, query: str, parameters: Any) -> list[dict[str, Any]]:
        self.calls.append((query.strip(), parameters))
        if self.error is not None:
            raise self.error
        return self.results

    def queries_starting_with(self, prefix: str) -> list[tuple[str, Any]]:
        return [call for call in self.calls if call[0].startswith(prefix)]


class FakeCallbackConnection:
    """Connection double reporting results through a callback."""

    def __init__(self) -> None:
        self.results: Any = []
        self.error: Any = None
        self.calls: list[tuple[str, Any]] = []

    def query(self, query: str, parameters: Any, callback: Any) -> None:
        self.calls.append((query.strip(), parameters))
        callback(self.error, self.results)


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test outputs."""
    return tmp_path


@pytest.fixture
def executor() -> RecordingExecutor:
    """Provide a recording query executor."""
    return RecordingExecutor()


@pytest.fixture
def callback_connection() -> FakeCallbackConnection:
    """Provide a callback-style connection double."""
    return FakeCallbackConnection()


@pytest.fixture
def cache(executor: RecordingExecutor) -> SqlCache:
    """Provide a cache with default options over the recording executor."""
    return SqlCache(SqlCacheOptions(client=executor, database_name="cache"))


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Remove cache and logging variables from the environment."""
    keys = [key for key in os.environ if key.startswith(("CACHE_", "LOG_"))]
    with patch.dict(os.environ, {}, clear=False):
        for key in keys:
            del os.environ[key]
        clear_settings_cache()
        yield


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Automatically reset settings cache before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()

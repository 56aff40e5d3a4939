"""
Custom exception hierarchy for the SQL cache.

All exceptions inherit from SqlCacheError, which provides optional context
for structured error handling and logging.
"""

from __future__ import annotations

from typing import Any


class SqlCacheError(Exception):
    """Base exception for all SQL cache errors.

    Attributes:
        message: Human-readable error message.
        context: Optional structured context for logging/debugging.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context!r})"


class ConfigurationError(SqlCacheError):
    """Raised when cache configuration is invalid or missing.

    Examples:
        - Missing query executor (`client`)
        - Missing or empty `database_name`
        - Table or database names that are not plain identifiers
        - Negative default TTL
    """

    pass


class QueryError(SqlCacheError):
    """Raised when the underlying connection reports a failed query.

    The original driver error is chained as ``__cause__``.

    Context should include:
        - operation: The cache operation (get, set, delete, flush)
        - table: The composed table identifier
        - key: The cache key, when the operation has one
    """

    pass

"""
SQL dialect helpers.

Identifiers come from operator configuration, not user input, but they are
still validated and quoted before being composed into query text. Values
always travel as bound parameters.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from sqlcache.exceptions import ConfigurationError
from sqlcache.types import Dialect

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,63}$")


def validate_identifier(name: str, field: str) -> str:
    """Validate a database or table name.

    Args:
        name: The identifier to check.
        field: Config field name, used in the error context.

    Returns:
        The identifier unchanged.

    Raises:
        ConfigurationError: If the name is not a plain SQL identifier.
    """
    if not isinstance(name, str) or not IDENTIFIER_PATTERN.match(name):
        raise ConfigurationError(
            f"`{field}` must be a plain SQL identifier",
            context={"field": field, "value": name},
        )
    return name


@dataclass(frozen=True)
class SqlDialect:
    """Query text conventions for one SQL flavor."""

    name: Dialect
    quote_char: str
    positional: str
    named_template: str
    epoch_template: str

    def quote(self, identifier: str) -> str:
        """Quote an already validated identifier."""
        return f"{self.quote_char}{identifier}{self.quote_char}"

    def table_identifier(self, database_name: str, table_name: str) -> str:
        """Compose `<database>.<table>` with both parts quoted."""
        return f"{self.quote(database_name)}.{self.quote(table_name)}"

    def named(self, param: str) -> str:
        """Placeholder for a named parameter."""
        return self.named_template.format(name=param)

    def epoch(self, column: str) -> str:
        """Expression converting a timestamp column to unix seconds."""
        return self.epoch_template.format(column=column)


SQLITE = SqlDialect(
    name=Dialect.SQLITE,
    quote_char='"',
    positional="?",
    named_template=":{name}",
    epoch_template="CAST(strftime('%s', {column}) AS INTEGER)",
)

MYSQL = SqlDialect(
    name=Dialect.MYSQL,
    quote_char="`",
    positional="%s",
    named_template="%({name})s",
    epoch_template="UNIX_TIMESTAMP({column})",
)

_DIALECTS: dict[Dialect, SqlDialect] = {
    Dialect.SQLITE: SQLITE,
    Dialect.MYSQL: MYSQL,
}


def get_dialect(dialect: Dialect | str) -> SqlDialect:
    """Look up dialect conventions by enum or name.

    Raises:
        ConfigurationError: If the dialect is unknown.
    """
    try:
        return _DIALECTS[Dialect(dialect)]
    except ValueError as e:
        raise ConfigurationError(
            "Unknown SQL dialect",
            context={"dialect": dialect, "supported": [d.value for d in Dialect]},
        ) from e

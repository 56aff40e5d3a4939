"""
CLI for the SQL cache.

Operates on a SQLite cache file described by the settings.

Commands:
    sqlcache init - Create the cache table
    sqlcache get KEY - Print a cached value
    sqlcache set KEY VALUE - Store a value
    sqlcache delete KEY - Remove a value
    sqlcache flush - Remove every value
    sqlcache config - Show current configuration
    sqlcache version - Print version
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated, Any, Awaitable, Callable, Optional, TypeVar

import typer
from rich.console import Console
from rich.table import Table

from sqlcache import __version__
from sqlcache.cache import CacheSetOptions, SqlCache
from sqlcache.config import Settings, clear_settings_cache, get_settings
from sqlcache.exceptions import ConfigurationError, SqlCacheError
from sqlcache.logging import setup_logging
from sqlcache.sqlite import AiosqliteExecutor, create_cache_table
from sqlcache.types import Dialect

app = typer.Typer(
    name="sqlcache",
    help="SQL-backed key-value cache with TTL expiry",
    no_args_is_help=True,
)

console = Console()
error_console = Console(stderr=True)

T = TypeVar("T")

DbPathOption = Annotated[
    Optional[Path],
    typer.Option("--db-path", "-d", help="SQLite database file"),
]


def _get_settings_safe() -> Settings | None:
    """Get settings, returning None if configuration is invalid."""
    try:
        clear_settings_cache()
        return get_settings()
    except Exception:
        return None


def _load_settings() -> Settings:
    settings = _get_settings_safe()
    if settings is None:
        error_console.print(
            "[red]Error:[/red] Configuration is invalid. "
            "Run 'sqlcache config' to see what's wrong."
        )
        raise typer.Exit(1)
    setup_logging(settings.LOG_LEVEL, log_file=settings.LOG_FILE)
    return settings


def _executor_for(settings: Settings, db_path: Path | None) -> AiosqliteExecutor:
    if settings.CACHE_DIALECT is not Dialect.SQLITE:
        raise ConfigurationError(
            "The CLI only manages SQLite caches",
            context={"dialect": settings.CACHE_DIALECT.value},
        )
    path = db_path or settings.CACHE_DB_PATH
    attach: dict[str, Path] = {}
    # Non-main schemas live in sibling files
    if settings.CACHE_DATABASE_NAME != "main":
        attach[settings.CACHE_DATABASE_NAME] = path.parent / f"{settings.CACHE_DATABASE_NAME}.db"
    return AiosqliteExecutor(path, attach=attach)


def _run(
    settings: Settings,
    db_path: Path | None,
    action: Callable[[SqlCache, AiosqliteExecutor], Awaitable[T]],
) -> T:
    """Open the cache, run one action against it and close the connection."""

    async def runner() -> T:
        async with _executor_for(settings, db_path) as executor:
            cache = SqlCache(settings.cache_options(executor))
            return await action(cache, executor)

    try:
        return asyncio.run(runner())
    except SqlCacheError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def init(db_path: DbPathOption = None) -> None:
    """Create the cache table if it does not exist."""
    settings = _load_settings()

    async def action(cache: SqlCache, executor: AiosqliteExecutor) -> None:
        await create_cache_table(
            executor, cache.database_name, cache.table_name, settings.CACHE_DIALECT
        )

    _run(settings, db_path, action)
    console.print(
        f"[green]Cache table ready:[/green] "
        f"{settings.CACHE_DATABASE_NAME}.{settings.CACHE_TABLE_NAME}"
    )


@app.command()
def get(
    key: Annotated[str, typer.Argument(help="Cache key")],
    db_path: DbPathOption = None,
) -> None:
    """Print the value stored under KEY."""
    settings = _load_settings()

    async def action(cache: SqlCache, executor: AiosqliteExecutor) -> str | None:
        return await cache.get(key)

    value = _run(settings, db_path, action)
    if value is None:
        error_console.print("[dim](absent)[/dim]")
        raise typer.Exit(1)
    console.print(value, markup=False, highlight=False)


@app.command("set")
def set_(
    key: Annotated[str, typer.Argument(help="Cache key")],
    value: Annotated[str, typer.Argument(help="Value to store")],
    ttl: Annotated[
        Optional[int],
        typer.Option("--ttl", "-t", min=0, help="TTL in seconds (defaults to CACHE_DEFAULT_TTL)"),
    ] = None,
    db_path: DbPathOption = None,
) -> None:
    """Store VALUE under KEY."""
    settings = _load_settings()

    async def action(cache: SqlCache, executor: AiosqliteExecutor) -> None:
        await cache.set(key, value, CacheSetOptions(ttl=ttl))

    _run(settings, db_path, action)
    effective_ttl = ttl if ttl is not None else settings.CACHE_DEFAULT_TTL
    console.print(f"[green]Stored[/green] {key} [dim](ttl {effective_ttl}s)[/dim]")


@app.command()
def delete(
    key: Annotated[str, typer.Argument(help="Cache key")],
    db_path: DbPathOption = None,
) -> None:
    """Remove KEY from the cache."""
    settings = _load_settings()

    async def action(cache: SqlCache, executor: AiosqliteExecutor) -> bool:
        return await cache.delete(key)

    _run(settings, db_path, action)
    console.print(f"[green]Deleted[/green] {key}")


@app.command()
def flush(db_path: DbPathOption = None) -> None:
    """Remove every entry from the cache table."""
    settings = _load_settings()

    async def action(cache: SqlCache, executor: AiosqliteExecutor) -> None:
        await cache.flush()

    _run(settings, db_path, action)
    console.print("[green]Cache flushed[/green]")


@app.command()
def config() -> None:
    """Show current configuration."""
    console.print()
    console.print("[bold]SQL Cache Configuration[/bold]")
    console.print()

    settings = _get_settings_safe()

    if settings is None:
        error_console.print("[red]Configuration is invalid.[/red]")
        error_console.print()
        error_console.print("Check these environment variables:")
        error_console.print("  - CACHE_DATABASE_NAME, CACHE_TABLE_NAME (plain identifiers)")
        error_console.print("  - CACHE_DEFAULT_TTL (non-negative integer)")
        error_console.print("  - CACHE_DIALECT (sqlite or mysql)")
        raise typer.Exit(1)

    table = Table(title="Settings", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    values: dict[str, Any] = settings.display()
    for key, value in values.items():
        display_value = str(value) if value is not None else "[dim]not set[/dim]"
        table.add_row(key, display_value)

    console.print(table)
    console.print()


@app.command()
def version() -> None:
    """Print the version number."""
    console.print(f"sqlcache version {__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()

"""
Diagnostic command line for connkit.

Reads descriptors from the environment (and .env), then either prints the
resolved connection settings with passwords masked or opens the client and
pings it.

Usage:
    python -m connkit resolve relational
    python -m connkit resolve kv --prefix CACHE
    python -m connkit ping relational --env-file deploy/.env
"""

from enum import Enum
from typing import Optional

import typer
from pymongo.errors import PyMongoError
from rich.console import Console
from rich.table import Table
from rich import box

from .cache import factory as kv_factory
from .core.durations import format_duration
from .core.dsn import redact_dsn
from .core.resolver import resolve_document, resolve_key_value, resolve_relational
from .database.factory import open_relational
from .document.factory import open_document
from .exceptions import ConnectionResolutionError
from .models.enums import DurationStyle
from .models.pool import PoolSettings
from .utils.config import ConnkitSettings, configure_logging, load_settings
from .utils.env import document_from_env, key_value_from_env, relational_from_env

app = typer.Typer(
    help="Resolve and check database connections configured through the environment",
    add_completion=False,
)
console = Console()


class Target(str, Enum):
    relational = "relational"
    document = "document"
    kv = "kv"


def _prefix(settings: ConnkitSettings, target: Target, prefix: Optional[str]) -> str:
    if prefix:
        return prefix
    return {
        Target.relational: settings.relational_prefix,
        Target.document: settings.document_prefix,
        Target.kv: settings.key_value_prefix,
    }[target]


def _pool_rows(table: Table, pool: PoolSettings) -> None:
    table.add_row("max_pool_size", str(pool.max_pool_size))
    table.add_row("min_pool_size", str(pool.min_pool_size))
    table.add_row("max_idle_conns", str(pool.max_idle_conns))
    table.add_row("min_idle_conns", str(pool.min_idle_conns))
    for name in ("conn_max_lifetime", "conn_max_idle_time", "connect_timeout",
                 "read_timeout", "write_timeout"):
        table.add_row(name, format_duration(getattr(pool, name), DurationStyle.TOKEN))


@app.command()
def resolve(
    target: Target = typer.Argument(..., help="Backend kind to resolve"),
    prefix: Optional[str] = typer.Option(None, "--prefix", "-p", help="Environment variable prefix"),
    env_file: Optional[str] = typer.Option(None, "--env-file", help="Path to .env file"),
):
    """Print the resolved connection settings without connecting."""
    settings = load_settings(env_file)
    configure_logging(settings.log_level, settings.log_format)
    prefix = _prefix(settings, target, prefix)

    table = Table(title=f"{target.value} ({prefix}_*)", box=box.ROUNDED)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    try:
        if target is Target.relational:
            resolved = resolve_relational(relational_from_env(prefix))
            table.add_row("family", resolved.family.value)
            table.add_row("primary", redact_dsn(resolved.primary.dsn))
            for index, node in enumerate(resolved.replicas, start=1):
                table.add_row(f"replica {index}", redact_dsn(node.dsn))
            behavior = resolved.behavior
            table.add_row("skip_default_transaction", str(behavior.skip_default_transaction))
            table.add_row("prepare_statements", str(behavior.prepare_statements))
            table.add_row("statement_cache_capacity", str(behavior.statement_cache_capacity))
            table.add_row("simple_protocol", str(behavior.simple_protocol))
            _pool_rows(table, resolved.pool)
            warnings = resolved.warnings
        elif target is Target.document:
            resolved = resolve_document(document_from_env(prefix))
            table.add_row("uri", redact_dsn(resolved.uri))
            _pool_rows(table, resolved.pool)
            warnings = resolved.warnings
        else:
            resolved = resolve_key_value(key_value_from_env(prefix))
            table.add_row("family", resolved.family.value)
            table.add_row("addresses", ", ".join(resolved.addresses))
            if resolved.master_name:
                table.add_row("master_name", resolved.master_name)
            table.add_row("db", str(resolved.db))
            _pool_rows(table, resolved.pool)
            warnings = ()
    except ConnectionResolutionError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)

    console.print(table)
    for warning in warnings:
        console.print(f"[yellow]⚠ {warning}[/yellow]")


@app.command()
def ping(
    target: Target = typer.Argument(..., help="Backend kind to check"),
    prefix: Optional[str] = typer.Option(None, "--prefix", "-p", help="Environment variable prefix"),
    env_file: Optional[str] = typer.Option(None, "--env-file", help="Path to .env file"),
):
    """Open the client and check that the server answers."""
    settings = load_settings(env_file)
    configure_logging(settings.log_level, settings.log_format)
    prefix = _prefix(settings, target, prefix)

    try:
        if target is Target.relational:
            with open_relational(relational_from_env(prefix), verify=settings.verify_on_open) as client:
                ok = client.ping()
        elif target is Target.document:
            client = open_document(document_from_env(prefix))
            try:
                client.admin.command("ping")
                ok = True
            except PyMongoError as e:
                console.print(f"[red]{e}[/red]")
                ok = False
            finally:
                client.close()
        else:
            client = kv_factory.open_key_value(key_value_from_env(prefix))
            try:
                ok = kv_factory.ping(client)
            finally:
                kv_factory.close(client)
    except ConnectionResolutionError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)

    if ok:
        console.print(f"[green]✓ {target.value} ({prefix}) is reachable[/green]")
    else:
        console.print(f"[red]✗ {target.value} ({prefix}) did not answer[/red]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()

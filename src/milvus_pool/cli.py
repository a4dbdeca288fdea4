"""Command line tool for inspecting configured Milvus connections.

Connections are read from the YAML file named by ``--config`` (or
``MP_CONFIG_PATH``) and opened through a :class:`HandlePool`, which is
closed before the command exits. Failures exit with code 1, an unknown
connection name with code 2.
"""

from __future__ import annotations

import uuid
from pathlib import Path
from typing import Optional

import structlog
import typer
from pymilvus import MilvusClient
from rich.console import Console
from rich.table import Table

from milvus_pool.client.errors import MilvusOperationError
from milvus_pool.client.factory import create_pool
from milvus_pool.config.client import load_pool_config
from milvus_pool.config.settings import get_settings
from milvus_pool.pool.errors import PoolCloseError, PoolError
from milvus_pool.utils.logging import bind_correlation_id, configure_logging, reset_correlation_id

app = typer.Typer(help="Milvus connection pool tool")
console = Console()
logger = structlog.get_logger(__name__)


def _load(config: Optional[Path]):
    settings = get_settings()
    configure_logging(settings=settings.logging)
    try:
        pool_config = load_pool_config(config or settings.config_path, defaults=settings.defaults)
    except ValueError as exc:
        logger.error("cli.config.invalid", error=str(exc))
        console.print(f"Invalid configuration: {exc}", style="red")
        raise typer.Exit(code=1) from exc
    pool = create_pool(
        name=settings.service_name,
        client_cls=MilvusClient,
        metrics_enabled=settings.metrics.enabled,
    )
    return pool_config, pool


def _close_failed(exc: PoolCloseError) -> typer.Exit:
    names = sorted(exc.failures)
    logger.error("cli.pool.close_failed", connections=names, error=str(exc))
    console.print(f"Failed to close connections: {', '.join(names)}", style="red")
    return typer.Exit(code=1)


@app.command()
def connections(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Pool configuration file"),
) -> None:
    """Connect every configured connection and report its collections."""
    token = bind_correlation_id(uuid.uuid4().hex)
    try:
        pool_config, pool = _load(config)
        if not pool_config.connections:
            console.print("No connections configured", style="yellow")
            return

        table = Table(title="Milvus Connections")
        table.add_column("Name", style="cyan")
        table.add_column("Address")
        table.add_column("Status")
        table.add_column("Collections", justify="right")

        failed = 0
        try:
            with pool:
                for name, options in sorted(pool_config.connections.items()):
                    try:
                        handle = pool.must_get(name, options)
                        count = len(handle.list_collections())
                    except (PoolError, MilvusOperationError) as exc:
                        failed += 1
                        logger.warning("cli.connection.failed", connection=name, error=str(exc))
                        table.add_row(name, options.address, "[red]unreachable[/red]", "-")
                        continue
                    table.add_row(name, options.address, "[green]ok[/green]", str(count))
        except PoolCloseError as exc:
            console.print(table)
            raise _close_failed(exc) from exc

        console.print(table)
        if failed:
            raise typer.Exit(code=1)
    finally:
        reset_correlation_id(token)


@app.command()
def collections(
    name: str = typer.Argument(..., help="Connection name from the configuration file"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Pool configuration file"),
) -> None:
    """List the collections available on one connection."""
    token = bind_correlation_id(uuid.uuid4().hex)
    try:
        pool_config, pool = _load(config)
        options = pool_config.connections.get(name)
        if options is None:
            console.print(f"Unknown connection '{name}'", style="red")
            raise typer.Exit(code=2)

        try:
            with pool:
                try:
                    names = pool.must_get(name, options).list_collections()
                except (PoolError, MilvusOperationError) as exc:
                    console.print(f"Failed to list collections: {exc}", style="red")
                    raise typer.Exit(code=1) from exc
        except PoolCloseError as exc:
            raise _close_failed(exc) from exc

        table = Table(title=f"Collections on {name}")
        table.add_column("Collection", style="cyan")
        for collection in sorted(names):
            table.add_row(collection)
        console.print(table)
    finally:
        reset_correlation_id(token)


def main() -> None:  # pragma: no cover - console script entry point
    app()


if __name__ == "__main__":  # pragma: no cover
    main()

from __future__ import annotations

import asyncio
import importlib
import sys

import typer

from modeller.config import get_settings
from modeller.connection import connect
from modeller.errors import ConfigurationError
from modeller.model import Record
from modeller.reporter import print_model
from modeller.utils.logging import configure_logging

app = typer.Typer(help="modeller: schema-validated CRUD models over PostgreSQL.")


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user or '<unset>'}@{settings.db_host}:{settings.db_port}/"
        f"{settings.db_name or '<unset>'} | "
        f"pool=({settings.db_pool_min_size},{settings.db_pool_max_size}) "
        f"connect_attempts={settings.db_connect_attempts} log_level={settings.log_level}"
    )


async def _ping() -> list:
    async with connect() as db:
        rows, _ = await db.get_query_executor().raw("SELECT 1 AS ok")
        return rows


@app.command()
def ping() -> None:
    """
    Open a connection with the configured settings and run SELECT 1.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    try:
        rows = asyncio.run(_ping())
    except ConfigurationError as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(code=2)
    typer.echo(f"OK ({rows[0]['ok'] if rows else 'no rows'})")


def _load_model(target: str) -> type[Record]:
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise typer.BadParameter("expected MODULE:ATTRIBUTE, e.g. myapp.models:Movie")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise typer.BadParameter(f"cannot import '{module_name}': {exc}") from exc
    model = getattr(module, attr, None)
    if not (isinstance(model, type) and issubclass(model, Record)):
        raise typer.BadParameter(f"'{target}' is not a model defined with define_model()")
    return model


@app.command()
def inspect(
    target: str = typer.Argument(..., help="Model to describe, as MODULE:ATTRIBUTE."),
) -> None:
    """
    Print the schema of a model: fields, types, defaults and flags.
    """
    print_model(_load_model(target))


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()

from __future__ import annotations

from typing import Any, List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from modeller.model import Record
from modeller.schema.fields import FieldDefinition


def _field_flags(name: str, definition: FieldDefinition, primary_key: Optional[str]) -> str:
    flags: List[str] = []
    if name == primary_key:
        flags.append("primary key")
    if definition.auto_increment:
        flags.append("auto increment")
    if definition.nullable:
        flags.append("nullable")
    if definition.validator is not None:
        flags.append("validated")
    if definition.transform is not None:
        flags.append("transformed")
    return ", ".join(flags)


def _describe_default(definition: FieldDefinition) -> str:
    if not definition.has_default:
        return "-"
    default: Any = definition.default
    if callable(default):
        return f"{getattr(default, '__name__', type(default).__name__)}()"
    return repr(default)


def render_model(model: type[Record]) -> Table:
    """
    Build a rich table describing a generated model's schema.

    One row per field in declaration order; the caption notes the primary key
    and whether deletes are soft.
    """
    schema = model._schema
    caption_parts = [f"primary key: {schema.primary_key or 'none'}"]
    caption_parts.append("soft delete" if schema.soft_delete else "hard delete")

    table = Table(
        title=f"{model.__name__} [dim]({model._table})[/dim]",
        box=box.ROUNDED,
        caption=" │ ".join(caption_parts),
    )

    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Type", style="magenta")
    table.add_column("Default", style="green")
    table.add_column("Flags", style="yellow")

    for name, definition in schema.fields.items():
        table.add_row(
            name,
            definition.type,
            _describe_default(definition),
            _field_flags(name, definition, schema.primary_key),
        )

    return table


def print_model(model: type[Record], console: Optional[Console] = None) -> None:
    """Render a model's schema to the console."""
    console = console or Console()
    if not model._schema.fields:
        console.print(f"[yellow]{model.__name__} has no fields.[/yellow]")
        return
    console.print(render_model(model))


__all__ = ["print_model", "render_model"]

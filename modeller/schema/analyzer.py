"""
One-time analysis of a raw schema mapping.

Runs when a model is defined: strips the reserved keys, parses each field
definition and derives the metadata the generated operations close over.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from modeller.errors import DuplicatePrimaryKeyError, SchemaDefinitionError
from modeller.schema.fields import FieldDefinition, parse_field

STATICS_KEY = "_statics"
OVERRIDES_KEY = "_overrides"
RESERVED_KEYS = (STATICS_KEY, OVERRIDES_KEY)

SOFT_DELETE_FIELD = "deleted"


@dataclass(frozen=True)
class SchemaInfo:
    """
    Result of analysing a schema.

    Attributes
    ----------
    fields : dict[str, FieldDefinition]
        Field definitions in declaration order, reserved keys removed.
    primary_key : str | None
        Field addressing single records, if any.
    soft_delete : bool
        True when a field named ``deleted`` exists.
    statics : dict[str, Callable]
        Helpers to install as static methods on the model.
    overrides : Any
        The raw ``_overrides`` entry, validated later by the override registry.
    """

    fields: Dict[str, FieldDefinition]
    primary_key: Optional[str] = None
    soft_delete: bool = False
    statics: Dict[str, Callable[..., Any]] = field(default_factory=dict)
    overrides: Any = None

    @property
    def auto_increment_fields(self) -> tuple[str, ...]:
        return tuple(name for name, d in self.fields.items() if d.auto_increment)


def _infer_primary_key(table: str, fields: Mapping[str, FieldDefinition]) -> Optional[str]:
    primary_key: Optional[str] = None
    for name, definition in fields.items():
        if not definition.primary_id:
            continue
        if primary_key is not None:
            raise DuplicatePrimaryKeyError(table, (primary_key, name))
        primary_key = name

    if primary_key is None:
        candidates = [name for name, d in fields.items() if d.auto_increment]
        if len(candidates) == 1:
            primary_key = candidates[0]
    return primary_key


def _extract_statics(table: str, raw: Any) -> Dict[str, Callable[..., Any]]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise SchemaDefinitionError(
            f"{STATICS_KEY} on model {table} must be a mapping, got {type(raw).__name__}",
            table=table,
        )
    statics: Dict[str, Callable[..., Any]] = {}
    for name, func in raw.items():
        if not isinstance(name, str) or not name.isidentifier():
            raise SchemaDefinitionError(
                f"Static helper name {name!r} on model {table} is not a valid identifier",
                table=table,
            )
        if not callable(func):
            raise SchemaDefinitionError(
                f"Static helper {name} on model {table} must be callable",
                table=table,
            )
        statics[name] = func
    return statics


def analyze_schema(table: str, schema: Mapping[str, Any]) -> SchemaInfo:
    """
    Split a raw schema into fields and reserved entries and derive its metadata.

    Raises
    ------
    SchemaDefinitionError
        For malformed field definitions or ``_statics`` entries.
    DuplicatePrimaryKeyError
        If more than one field declares ``primary_id``.
    """
    fields: Dict[str, FieldDefinition] = {}
    for name, definition in schema.items():
        if name in RESERVED_KEYS:
            continue
        if not isinstance(name, str) or not name:
            raise SchemaDefinitionError(
                f"Field names on model {table} must be non-empty strings, got {name!r}",
                table=table,
            )
        fields[name] = parse_field(name, definition, table)

    return SchemaInfo(
        fields=fields,
        primary_key=_infer_primary_key(table, fields),
        soft_delete=SOFT_DELETE_FIELD in fields,
        statics=_extract_statics(table, schema.get(STATICS_KEY)),
        overrides=schema.get(OVERRIDES_KEY),
    )


__all__ = [
    "OVERRIDES_KEY",
    "RESERVED_KEYS",
    "SOFT_DELETE_FIELD",
    "STATICS_KEY",
    "SchemaInfo",
    "analyze_schema",
]

"""
Field definitions for model schemas.

A schema maps field names to :class:`FieldDefinition` records. Plain mappings
(``{"type": "string", "default": "Untitled"}``) are parsed into the record with
:func:`parse_field`; both camelCase (``autoIncrement``, ``primaryId``) and
snake_case keys are accepted.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from modeller.errors import SchemaDefinitionError
from modeller.schema.types import available_types, is_known_type


class FieldDefinition(BaseModel):
    """
    Metadata for one schema field.
    """

    type: str = Field(..., description="Name of the type predicate the value must satisfy.")
    default: Any = Field(None, description="Literal default or zero-argument producer.")
    nullable: bool = Field(False, description="Missing values are skipped instead of rejected.")
    auto_increment: bool = Field(
        False,
        alias="autoIncrement",
        description="Assigned by the database; never sent on insert.",
    )
    primary_id: bool = Field(
        False,
        alias="primaryId",
        description="Key used to address single records.",
    )
    validator: Optional[Callable[[Any], Any]] = Field(
        None,
        alias="validate",
        description="Custom predicate over the resolved value; must return a bool.",
    )
    transform: Optional[Callable[[Any], Any]] = Field(
        None,
        description="Applied to provided values before type checking.",
    )

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="forbid",
    )

    @field_validator("type")
    @classmethod
    def _known_type(cls, value: str) -> str:
        if not is_known_type(value):
            raise ValueError(
                f"unknown type '{value}' (available: {', '.join(available_types())})"
            )
        return value

    @property
    def has_default(self) -> bool:
        # presence, not truthiness: a literal None/0/"" default still counts
        return "default" in self.model_fields_set


def parse_field(name: str, definition: Any, table: str) -> FieldDefinition:
    """
    Coerce a raw field definition into a :class:`FieldDefinition`.

    Raises
    ------
    SchemaDefinitionError
        If the definition is not a mapping or does not describe a valid field.
    """
    if isinstance(definition, FieldDefinition):
        return definition
    if not isinstance(definition, Mapping):
        raise SchemaDefinitionError(
            f"Definition of field {name} on model {table} must be a mapping, "
            f"got {type(definition).__name__}",
            table=table,
        )
    try:
        return FieldDefinition.model_validate(dict(definition))
    except PydanticValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or name}: {err['msg']}" for err in exc.errors()
        )
        raise SchemaDefinitionError(
            f"Invalid definition of field {name} on model {table}: {problems}",
            table=table,
        ) from exc


__all__ = ["FieldDefinition", "parse_field"]

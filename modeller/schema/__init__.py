"""
Schema package for modeller.

Field definitions, named type predicates, the type checker and the one-time
schema analyzer. Nothing here touches storage.
"""

from modeller.schema.analyzer import SOFT_DELETE_FIELD, SchemaInfo, analyze_schema
from modeller.schema.checker import check_types, resolve_default
from modeller.schema.fields import FieldDefinition, parse_field
from modeller.schema.types import available_types, get_type_check, register_type

__all__ = [
    "FieldDefinition",
    "SOFT_DELETE_FIELD",
    "SchemaInfo",
    "analyze_schema",
    "available_types",
    "check_types",
    "get_type_check",
    "parse_field",
    "register_type",
    "resolve_default",
]

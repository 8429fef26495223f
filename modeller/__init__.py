"""
modeller - schema-validated CRUD models over a query builder.

Given a table name and a declarative field schema, `define_model` generates a
record class with:

- typed field validation and default resolution
- generated get / get_one / insert / update / delete / delete_where operations
- soft deletes for tables with a `deleted` column
- per-model overrides of the replaceable operations and static helpers

Queries are issued through an injected query executor; `connect()` builds the
default psycopg-backed one from environment settings.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from modeller.config import Settings, get_settings
from modeller.connection import Modeller, connect
from modeller.errors import (
    ConfigurationError,
    CustomValidationError,
    DuplicatePrimaryKeyError,
    InvalidOverrideError,
    MissingPrimaryKeyError,
    MissingPropertyError,
    ModellerError,
    SchemaDefinitionError,
    ValidationError,
    ValidatorReturnError,
    WrongTypeError,
)
from modeller.infrastructure.executor import PsycopgExecutor, QueryBuilder, QueryExecutor
from modeller.model import Record, define_model
from modeller.schema import FieldDefinition, check_types, register_type
from modeller.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Models
    "FieldDefinition",
    "Modeller",
    "Record",
    "check_types",
    "connect",
    "define_model",
    "register_type",
    # Executors
    "PsycopgExecutor",
    "QueryBuilder",
    "QueryExecutor",
    # Errors
    "ConfigurationError",
    "CustomValidationError",
    "DuplicatePrimaryKeyError",
    "InvalidOverrideError",
    "MissingPrimaryKeyError",
    "MissingPropertyError",
    "ModellerError",
    "SchemaDefinitionError",
    "ValidationError",
    "ValidatorReturnError",
    "WrongTypeError",
    # Logging
    "configure_logging",
    "get_logger",
]

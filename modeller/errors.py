"""
Exception taxonomy for modeller.

Definition, validation and configuration faults are raised synchronously at the
point of the call. Storage faults are whatever the query executor raises and are
never wrapped by this package.
"""

from __future__ import annotations

from typing import Any, Optional


class ModellerError(Exception):
    """Base class for every error raised by modeller itself."""


# ---------------------------------------------------------------------------
# Definition-time faults
# ---------------------------------------------------------------------------


class SchemaDefinitionError(ModellerError, ValueError):
    """Raised when a schema is malformed while the model class is being defined."""

    def __init__(self, message: str, table: Optional[str] = None) -> None:
        super().__init__(message)
        self.table = table


class DuplicatePrimaryKeyError(SchemaDefinitionError):
    def __init__(self, table: str, fields: tuple[str, str]) -> None:
        super().__init__(
            f"Cannot have multiple primary keys on model {table} "
            f"({fields[0]!r} and {fields[1]!r})",
            table=table,
        )
        self.fields = fields


class InvalidOverrideError(SchemaDefinitionError):
    def __init__(self, message: str, table: str, key: Optional[str] = None) -> None:
        super().__init__(message, table=table)
        self.key = key


# ---------------------------------------------------------------------------
# Validation faults
# ---------------------------------------------------------------------------


class ValidationError(ModellerError):
    """Raised by the type checker when a value set does not satisfy a schema."""

    def __init__(self, message: str, field: str) -> None:
        super().__init__(message)
        self.field = field


class MissingPropertyError(ValidationError):
    def __init__(self, field: str) -> None:
        super().__init__(f"Missing required property {field}", field)


class WrongTypeError(ValidationError):
    def __init__(self, field: str, expected: str, actual: str) -> None:
        super().__init__(
            f"Property {field} has the wrong type: expected {expected}, got {actual}",
            field,
        )
        self.expected = expected
        self.actual = actual


class CustomValidationError(ValidationError):
    def __init__(self, field: str, value: Any) -> None:
        super().__init__(f"Property {field} failed custom validation with value {value!r}", field)
        self.value = value


class ValidatorReturnError(ValidationError):
    """The schema's own ``validate`` callable returned something other than a bool."""

    def __init__(self, field: str, returned: Any) -> None:
        super().__init__(
            f"validate() must return boolean for property {field}, "
            f"got {type(returned).__name__}",
            field,
        )
        self.returned = returned


# ---------------------------------------------------------------------------
# Configuration faults
# ---------------------------------------------------------------------------


class ConfigurationError(ModellerError):
    """Raised at call time when a model or connection is not set up for the request."""


class MissingPrimaryKeyError(ConfigurationError):
    def __init__(self, table: str, operation: str, field: Optional[str] = None) -> None:
        if field is None:
            message = f"{operation}() requires a primary key on model {table}"
        else:
            message = f"{operation}() requires a value for primary key {field} on model {table}"
        super().__init__(message)
        self.table = table
        self.operation = operation
        self.field = field


__all__ = [
    "ModellerError",
    "SchemaDefinitionError",
    "DuplicatePrimaryKeyError",
    "InvalidOverrideError",
    "ValidationError",
    "MissingPropertyError",
    "WrongTypeError",
    "CustomValidationError",
    "ValidatorReturnError",
    "ConfigurationError",
    "MissingPrimaryKeyError",
]

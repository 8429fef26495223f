"""
Type checking and default resolution for model values.

``check_types`` is the gate every mutating operation passes through before a
query is issued, and the body of the static ``is_valid`` predicate.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict

from modeller.errors import (
    CustomValidationError,
    MissingPropertyError,
    ValidatorReturnError,
    WrongTypeError,
)
from modeller.schema.fields import FieldDefinition
from modeller.schema.types import get_type_check


def resolve_default(definition: FieldDefinition) -> Any:
    """
    Return the default for a field, calling it when it is a producer.

    Producers run on every call so each record can get a fresh value.
    """
    if callable(definition.default):
        return definition.default()
    return definition.default


def check_types(fields: Mapping[str, FieldDefinition], values: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Validate ``values`` against ``fields`` and fill in defaults.

    Parameters
    ----------
    fields : Mapping[str, FieldDefinition]
        Cleaned field map of a schema (reserved keys already removed).
    values : Mapping[str, Any]
        Candidate values keyed by field name. Not modified.

    Returns
    -------
    dict
        A copy of ``values`` with the resolved defaults of missing fields added.

    Raises
    ------
    MissingPropertyError
        A required field has no value and no default.
    WrongTypeError
        A value does not satisfy its field's type predicate.
    CustomValidationError
        A field's ``validate`` callable returned False.
    ValidatorReturnError
        A field's ``validate`` callable returned a non-bool.
    """
    checked: Dict[str, Any] = dict(values)

    for name, definition in fields.items():
        value = checked.get(name)

        if value is None and definition.has_default:
            value = resolve_default(definition)
            checked[name] = value

        if value is None:
            if definition.nullable or definition.auto_increment:
                continue
            raise MissingPropertyError(name)

        if not get_type_check(definition.type)(value):
            raise WrongTypeError(name, definition.type, type(value).__name__)

        if definition.validator is not None:
            outcome = definition.validator(value)
            if outcome is False:
                raise CustomValidationError(name, value)
            if outcome is not True:
                raise ValidatorReturnError(name, outcome)

    return checked


__all__ = ["check_types", "resolve_default"]

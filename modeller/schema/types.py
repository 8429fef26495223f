"""
Named type predicates used by field definitions.

A field's ``type`` is looked up here by name. The built-in names follow the
vocabulary schemas are usually written in (``string``, ``number``,
``positive``, ...); applications can add their own with :func:`register_type`.
"""

from __future__ import annotations

import datetime as _dt
import math
from collections.abc import Mapping
from decimal import Decimal
from numbers import Real
from typing import Any, Callable, Dict, List

TypePredicate = Callable[[Any], bool]


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a number here
    if isinstance(value, bool) or not isinstance(value, (Real, Decimal)):
        return False
    if isinstance(value, Decimal):
        return value.is_finite()
    return not math.isnan(value) and not math.isinf(value)


def _is_integer(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return _is_number(value) and value == int(value)


_TYPE_CHECKS: Dict[str, TypePredicate] = {
    "string": lambda v: isinstance(v, str),
    "nonEmptyString": lambda v: isinstance(v, str) and len(v) > 0,
    "number": _is_number,
    "integer": _is_integer,
    "float": lambda v: isinstance(v, float) and _is_number(v),
    "positive": lambda v: _is_number(v) and v > 0,
    "negative": lambda v: _is_number(v) and v < 0,
    "boolean": lambda v: isinstance(v, bool),
    "date": lambda v: isinstance(v, _dt.date),
    "datetime": lambda v: isinstance(v, _dt.datetime),
    "object": lambda v: isinstance(v, Mapping),
    "array": lambda v: isinstance(v, (list, tuple)),
    "bytes": lambda v: isinstance(v, (bytes, bytearray, memoryview)),
    "function": callable,
}

_ALIASES: Dict[str, str] = {
    "str": "string",
    "non_empty_string": "nonEmptyString",
    "int": "integer",
    "bool": "boolean",
    "dict": "object",
    "list": "array",
}


def _canonical(name: str) -> str:
    return _ALIASES.get(name, name)


def is_known_type(name: str) -> bool:
    return _canonical(name) in _TYPE_CHECKS


def get_type_check(name: str) -> TypePredicate:
    """
    Return the predicate registered under ``name``.

    Raises
    ------
    KeyError
        If no predicate is registered under that name or alias.
    """
    try:
        return _TYPE_CHECKS[_canonical(name)]
    except KeyError:
        raise KeyError(f"Unknown field type '{name}'. Available: {', '.join(available_types())}") from None


def register_type(name: str, predicate: TypePredicate) -> None:
    """Register (or replace) a named type predicate."""
    if not isinstance(name, str) or not name:
        raise TypeError("register_type() requires a non-empty type name")
    if not callable(predicate):
        raise TypeError(f"Predicate for type '{name}' must be callable")
    _TYPE_CHECKS[name] = predicate


def available_types() -> List[str]:
    return sorted(_TYPE_CHECKS)


__all__ = [
    "TypePredicate",
    "available_types",
    "get_type_check",
    "is_known_type",
    "register_type",
]

from __future__ import annotations

from typing import Any, Dict

import pytest

from modeller.errors import (
    CustomValidationError,
    MissingPropertyError,
    ValidationError,
    ValidatorReturnError,
    WrongTypeError,
)
from modeller.schema.checker import check_types, resolve_default
from modeller.schema.fields import FieldDefinition, parse_field


def _fields(**definitions: Dict[str, Any]) -> Dict[str, FieldDefinition]:
    return {name: parse_field(name, d, "things") for name, d in definitions.items()}


def test_valid_values_pass_through_unchanged() -> None:
    fields = _fields(name={"type": "string"}, year={"type": "integer"})

    assert check_types(fields, {"name": "Alien", "year": 1979}) == {"name": "Alien", "year": 1979}


def test_missing_required_property_names_the_field() -> None:
    fields = _fields(name={"type": "string"})

    with pytest.raises(MissingPropertyError, match="Missing required property name") as excinfo:
        check_types(fields, {})
    assert excinfo.value.field == "name"


def test_none_counts_as_missing() -> None:
    fields = _fields(name={"type": "string"})

    with pytest.raises(MissingPropertyError):
        check_types(fields, {"name": None})


def test_literal_default_fills_missing_value() -> None:
    fields = _fields(title={"type": "string", "default": "Untitled"})

    assert check_types(fields, {}) == {"title": "Untitled"}
    assert check_types(fields, {"title": None}) == {"title": "Untitled"}


def test_falsy_literal_default_is_still_a_default() -> None:
    fields = _fields(count={"type": "integer", "default": 0})

    assert check_types(fields, {}) == {"count": 0}


def test_producer_default_is_called_for_every_check() -> None:
    calls = []

    def next_value() -> int:
        calls.append(1)
        return len(calls)

    fields = _fields(seq={"type": "positive", "default": next_value})

    assert check_types(fields, {})["seq"] == 1
    assert check_types(fields, {})["seq"] == 2


def test_provided_value_wins_over_default() -> None:
    fields = _fields(title={"type": "string", "default": "Untitled"})

    assert check_types(fields, {"title": "Heat"}) == {"title": "Heat"}


@pytest.mark.parametrize("flag", ["nullable", "autoIncrement"])
def test_nullable_and_auto_increment_fields_are_skipped_when_missing(flag: str) -> None:
    fields = _fields(extra={"type": "string", flag: True})

    assert check_types(fields, {}) == {}


def test_nullable_field_with_none_default_resolves_to_none() -> None:
    fields = _fields(note={"type": "string", "nullable": True, "default": None})

    assert check_types(fields, {}) == {"note": None}


def test_wrong_type_reports_expected_and_actual() -> None:
    fields = _fields(name={"type": "string"})

    with pytest.raises(WrongTypeError) as excinfo:
        check_types(fields, {"name": 123})
    assert excinfo.value.field == "name"
    assert excinfo.value.expected == "string"
    assert excinfo.value.actual == "int"


def test_default_is_type_checked_too() -> None:
    fields = _fields(year={"type": "integer", "default": "soon"})

    with pytest.raises(WrongTypeError):
        check_types(fields, {})


def test_custom_validator_accepts_and_rejects() -> None:
    fields = _fields(year={"type": "integer", "validate": lambda v: v > 1900})

    assert check_types(fields, {"year": 1999}) == {"year": 1999}
    with pytest.raises(CustomValidationError) as excinfo:
        check_types(fields, {"year": 1800})
    assert excinfo.value.value == 1800


def test_validator_must_return_a_boolean() -> None:
    fields = _fields(year={"type": "integer", "validate": lambda v: "yes"})

    with pytest.raises(ValidatorReturnError, match="must return boolean"):
        check_types(fields, {"year": 1999})


def test_validation_errors_share_a_base_class() -> None:
    for exc_type in (MissingPropertyError, WrongTypeError, CustomValidationError, ValidatorReturnError):
        assert issubclass(exc_type, ValidationError)


def test_input_mapping_is_not_mutated() -> None:
    fields = _fields(title={"type": "string", "default": "Untitled"})
    values: Dict[str, Any] = {}

    check_types(fields, values)

    assert values == {}


def test_unknown_keys_are_ignored_by_the_checker() -> None:
    fields = _fields(title={"type": "string"})

    assert check_types(fields, {"title": "Heat", "rating": "R"})["title"] == "Heat"


def test_resolve_default_returns_literal_or_produced_value() -> None:
    assert resolve_default(parse_field("a", {"type": "string", "default": "x"}, "t")) == "x"
    assert resolve_default(parse_field("b", {"type": "integer", "default": lambda: 5}, "t")) == 5

from __future__ import annotations

import pytest

from modeller.errors import InvalidOverrideError, SchemaDefinitionError
from modeller.operations import GetOperation, UpdateOperation
from modeller.operations.overrides import OverrideRegistry


async def custom_get(query=None, options=None):
    return []


async def custom_update(record, values=None):
    return 0


def test_missing_overrides_yield_an_empty_registry() -> None:
    registry = OverrideRegistry.from_schema("movies", None)

    assert "get" not in registry
    assert registry.resolve("get", custom_update) is custom_update


def test_allowed_overrides_are_stored_per_slot() -> None:
    registry = OverrideRegistry.from_schema("movies", {"get": custom_get, "update": custom_update})

    assert registry.resolve("get", None) is custom_get
    assert registry.resolve("update", None) is custom_update
    assert registry.resolve("insert", None) is None
    assert "get" in registry
    assert "insert" not in registry


def test_camel_case_slot_names_are_normalised() -> None:
    registry = OverrideRegistry.from_schema("movies", {"getOne": custom_get, "deleteWhere": custom_get})

    assert "get_one" in registry
    assert "delete_where" in registry


def test_overriding_an_unknown_operation_names_key_and_table() -> None:
    with pytest.raises(InvalidOverrideError, match="is_valid.*movies") as excinfo:
        OverrideRegistry.from_schema("movies", {"is_valid": lambda values: True})

    assert excinfo.value.key == "is_valid"
    assert excinfo.value.table == "movies"
    assert isinstance(excinfo.value, SchemaDefinitionError)


def test_first_bad_key_fails_before_later_keys_are_checked() -> None:
    with pytest.raises(InvalidOverrideError) as excinfo:
        OverrideRegistry.from_schema("movies", {"delete": custom_get, "get": "not callable"})

    assert excinfo.value.key == "delete"


def test_override_values_must_be_callable() -> None:
    with pytest.raises(InvalidOverrideError, match="must be callable") as excinfo:
        OverrideRegistry.from_schema("movies", {"get": "select * from movies"})

    assert excinfo.value.key == "get"


def test_overrides_must_be_a_mapping() -> None:
    with pytest.raises(InvalidOverrideError, match="must be a mapping"):
        OverrideRegistry.from_schema("movies", [custom_get])


def test_plain_functions_satisfy_the_slot_interfaces() -> None:
    assert isinstance(custom_get, GetOperation)
    assert isinstance(custom_update, UpdateOperation)
    assert not isinstance("text", GetOperation)

"""
Operation slot interfaces for generated models.

Each replaceable operation of a model is a capability slot filled either by the
default implementation or by an override supplied in the schema's
``_overrides`` entry. Overrides must match the slot's call signature and return
an awaitable, the same as the defaults do.
"""

from __future__ import annotations

from typing import Any, Awaitable, Mapping, Optional, Protocol, runtime_checkable


@runtime_checkable
class GetOperation(Protocol):
    """Static ``get(query, options)``; resolves to a list of records."""

    def __call__(
        self,
        query: Optional[Mapping[str, Any]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> Awaitable[Any]:
        ...


@runtime_checkable
class GetOneOperation(Protocol):
    """Static ``get_one(query)``; resolves to a record or None."""

    def __call__(self, query: Optional[Mapping[str, Any]] = None) -> Awaitable[Any]:
        ...


@runtime_checkable
class InsertOperation(Protocol):
    """Instance ``insert()``; receives the record as its only argument."""

    def __call__(self, record: Any) -> Awaitable[Any]:
        ...


@runtime_checkable
class UpdateOperation(Protocol):
    """Instance ``update(values)``; receives the record and the new values."""

    def __call__(self, record: Any, values: Optional[Mapping[str, Any]] = None) -> Awaitable[Any]:
        ...


@runtime_checkable
class DeleteWhereOperation(Protocol):
    """Static ``delete_where(query)``."""

    def __call__(self, query: Mapping[str, Any]) -> Awaitable[Any]:
        ...


# slot name -> (interface, installed as a static method)
OPERATION_SLOTS: dict[str, tuple[type, bool]] = {
    "get": (GetOperation, True),
    "get_one": (GetOneOperation, True),
    "insert": (InsertOperation, False),
    "update": (UpdateOperation, False),
    "delete_where": (DeleteWhereOperation, True),
}

SLOT_ALIASES: dict[str, str] = {
    "getOne": "get_one",
    "deleteWhere": "delete_where",
}


__all__ = [
    "DeleteWhereOperation",
    "GetOneOperation",
    "GetOperation",
    "InsertOperation",
    "OPERATION_SLOTS",
    "SLOT_ALIASES",
    "UpdateOperation",
]

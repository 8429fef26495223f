"""
Registry of user-supplied operation overrides.

Built from a schema's ``_overrides`` entry while a model is being defined and
dropped once the model class exists.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Dict, Optional

from modeller.errors import InvalidOverrideError
from modeller.operations.abstract import OPERATION_SLOTS, SLOT_ALIASES
from modeller.utils.logging import get_logger

log = get_logger(__name__)


class OverrideRegistry:
    """
    Validated replacements for the overridable model operations.

    Examples
    --------
    >>> registry = OverrideRegistry.from_schema("movies", {"get": my_get})
    >>> "get" in registry
    True
    """

    def __init__(self, table: str, overrides: Optional[Dict[str, Callable[..., Any]]] = None) -> None:
        self.table = table
        self._overrides: Dict[str, Callable[..., Any]] = dict(overrides or {})

    @classmethod
    def from_schema(cls, table: str, raw: Any) -> OverrideRegistry:
        """
        Validate a raw ``_overrides`` entry.

        Keys are checked in order and the first invalid one fails the whole
        definition.

        Raises
        ------
        InvalidOverrideError
            If ``raw`` is not a mapping, names an operation that cannot be
            overridden, or maps to something that does not satisfy the slot.
        """
        if raw is None:
            return cls(table)
        if not isinstance(raw, Mapping):
            raise InvalidOverrideError(
                f"_overrides on model {table} must be a mapping, got {type(raw).__name__}",
                table=table,
            )

        overrides: Dict[str, Callable[..., Any]] = {}
        for key, func in raw.items():
            slot = SLOT_ALIASES.get(key, key)
            if slot not in OPERATION_SLOTS:
                raise InvalidOverrideError(
                    f"Cannot override '{key}' on model {table}. "
                    f"Overridable: {', '.join(OPERATION_SLOTS)}",
                    table=table,
                    key=key,
                )
            interface, _ = OPERATION_SLOTS[slot]
            if not isinstance(func, interface):
                raise InvalidOverrideError(
                    f"Override '{key}' on model {table} must be callable",
                    table=table,
                    key=key,
                )
            overrides[slot] = func

        if overrides:
            log.debug(
                f"Overrides registered for {table}: {', '.join(overrides)}",
                extra={"table": table, "overrides": sorted(overrides)},
            )
        return cls(table, overrides)

    def __contains__(self, slot: str) -> bool:
        return slot in self._overrides

    def resolve(self, slot: str, default: Callable[..., Any]) -> Callable[..., Any]:
        """Return the override registered for ``slot``, or ``default``."""
        return self._overrides.get(slot, default)


__all__ = ["OverrideRegistry"]

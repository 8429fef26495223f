"""
Generated record classes: the record factory and the CRUD operation set.

``define_model(table, schema, executor)`` analyses a schema once and returns a
new subclass of :class:`Record` whose operations close over the schema metadata
and the query executor.

Every storage operation checks its arguments, validates values and resolves the
primary key synchronously, then returns an awaitable. Nothing reaches the
executor unless those checks pass; storage errors surface only when the
awaitable is awaited.

Example
-------
    Movie = define_model("movies", {
        "movie_id": {"type": "positive", "primaryId": True, "autoIncrement": True},
        "title": {"type": "string", "default": "Untitled"},
        "year": {"type": "integer", "nullable": True},
    }, executor)

    movie = await Movie({"year": 1999}).insert()
    recent = await Movie.get({"year": 1999}, {"limit": 10})
"""

from __future__ import annotations

import functools
import inspect
import re
from collections.abc import Mapping, Sequence
from typing import Any, Awaitable, Callable, ClassVar, Dict, List, Optional

from modeller.errors import MissingPrimaryKeyError, SchemaDefinitionError, ValidationError
from modeller.infrastructure.executor import QueryBuilder, QueryExecutor, RawResult, Row
from modeller.operations.abstract import OPERATION_SLOTS
from modeller.operations.overrides import OverrideRegistry
from modeller.schema.analyzer import SOFT_DELETE_FIELD, SchemaInfo, analyze_schema
from modeller.schema.checker import check_types
from modeller.utils.logging import get_logger

log = get_logger(__name__)

DEFAULT_LIMIT = 100
DEFAULT_OFFSET = 0


def _mapping_argument(value: Any, name: str, operation: str, required: bool = False) -> Dict[str, Any]:
    if value is None and not required:
        return {}
    if not isinstance(value, Mapping):
        raise TypeError(
            f"{operation}() expects '{name}' to be a mapping, got {type(value).__name__}"
        )
    return dict(value)


def _inserted_key(result: Any) -> Any:
    # executors report generated keys as a sequence, first element first
    if isinstance(result, Sequence) and not isinstance(result, (str, bytes)):
        return result[0] if result else None
    return result


async def _rows_only(pending: Awaitable[RawResult]) -> List[Row]:
    rows, _ = await pending
    return rows


class Record:
    """
    Base class of every generated model.

    Instances hold one attribute per schema field that has a value. Use
    :func:`define_model` to create concrete subclasses; the class attributes
    below are filled in there.
    """

    _table: ClassVar[str] = ""
    _schema: ClassVar[SchemaInfo] = SchemaInfo(fields={})
    _executor: ClassVar[Optional[QueryExecutor]] = None

    def __init__(self, values: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        if values is not None and not isinstance(values, Mapping):
            raise TypeError(
                f"{type(self).__name__}() expects a mapping of values, got {type(values).__name__}"
            )
        prepared = self._prepare({**(values or {}), **kwargs})
        self._assign(check_types(self._schema.fields, prepared))

    # -- record factory helpers ----------------------------------------------

    @classmethod
    def _prepare(cls, values: Mapping[str, Any]) -> Dict[str, Any]:
        """Keep schema keys only and apply field transforms to provided values."""
        prepared: Dict[str, Any] = {}
        for name, value in values.items():
            definition = cls._schema.fields.get(name)
            if definition is None:
                continue
            if definition.transform is not None and value is not None:
                value = definition.transform(value)
            prepared[name] = value
        return prepared

    def _assign(self, values: Mapping[str, Any]) -> None:
        for name in self._schema.fields:
            if name in values:
                setattr(self, name, values[name])

    def to_dict(self) -> Dict[str, Any]:
        """Field values present on this record, in schema order."""
        return {name: self.__dict__[name] for name in self._schema.fields if name in self.__dict__}

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.to_dict() == other.to_dict()  # type: ignore[attr-defined]

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        body = ", ".join(f"{k}={v!r}" for k, v in self.to_dict().items())
        return f"{type(self).__name__}({body})"

    # -- internals shared by operations --------------------------------------

    @classmethod
    def _builder(cls) -> QueryBuilder:
        return cls._executor.table(cls._table)  # type: ignore[union-attr]

    @classmethod
    def _soft_delete_filter(cls, query: Dict[str, Any]) -> Dict[str, Any]:
        if cls._schema.soft_delete and SOFT_DELETE_FIELD not in query:
            query[SOFT_DELETE_FIELD] = 0
        return query

    @classmethod
    def _log(cls, operation: str, **extra: Any) -> None:
        log.debug(
            f"{operation} on {cls._table}",
            extra={"table": cls._table, "operation": operation, **extra},
        )

    def _key_predicate(self, operation: str) -> Dict[str, Any]:
        primary_key = self._schema.primary_key
        if primary_key is None:
            raise MissingPrimaryKeyError(self._table, operation)
        value = self.__dict__.get(primary_key)
        if value is None:
            raise MissingPrimaryKeyError(self._table, operation, primary_key)
        return {primary_key: value}

    @classmethod
    async def _wrap_rows(cls, pending: Awaitable[List[Row]]) -> List[Record]:
        rows = await pending
        return [cls(row) for row in rows]

    @classmethod
    async def _wrap_first(cls, pending: Awaitable[List[Row]]) -> Optional[Record]:
        rows = await pending
        if not rows:
            return None
        return cls(rows[0])

    # -- static operations ---------------------------------------------------

    @classmethod
    def get(
        cls,
        query: Optional[Mapping[str, Any]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> Awaitable[List[Record]]:
        """
        Select records matching an equality filter.

        Parameters
        ----------
        query : Mapping | None
            Column=value filter. Soft-delete models add ``deleted = 0`` unless
            the query sets ``deleted`` itself.
        options : Mapping | None
            ``limit`` (100), ``offset`` (0), ``order_by``/``orderBy`` (the
            primary key when there is one) and ``asc`` (True). A None limit or
            offset falls back to its default.

        Returns
        -------
        Awaitable[list[Record]]
            Resolves to the matching rows wrapped as records.

        Raises
        ------
        TypeError
            If ``query`` or ``options`` is not a mapping.
        """
        query = cls._soft_delete_filter(_mapping_argument(query, "query", "get"))
        options = _mapping_argument(options, "options", "get")

        limit = options.get("limit")
        if limit is None:
            limit = DEFAULT_LIMIT
        offset = options.get("offset")
        if offset is None:
            offset = DEFAULT_OFFSET
        order_by = options.get("order_by", options.get("orderBy", cls._schema.primary_key))
        ascending = options.get("asc", True)

        builder = cls._builder().where(query).limit(limit).offset(offset)
        if order_by is not None:
            builder = builder.order_by(order_by, "asc" if ascending else "desc")

        cls._log("get", limit=limit, offset=offset, order_by=order_by)
        return cls._wrap_rows(builder.select())

    @classmethod
    def get_one(cls, query: Optional[Mapping[str, Any]] = None) -> Awaitable[Optional[Record]]:
        """
        Fetch the first record matching ``query``; resolves to None when nothing matches.
        """
        query = cls._soft_delete_filter(_mapping_argument(query, "query", "get_one"))
        cls._log("get_one")
        return cls._wrap_first(cls._builder().where(query).limit(1).select())

    @classmethod
    def delete_where(cls, query: Mapping[str, Any]) -> Awaitable[Any]:
        """
        Delete every record matching ``query``.

        Soft-delete models flag live matches with ``deleted = 1`` instead of
        removing them; rows already flagged are left alone.
        """
        query = _mapping_argument(query, "query", "delete_where", required=True)
        if cls._schema.soft_delete:
            query[SOFT_DELETE_FIELD] = 0
            cls._log("delete_where", soft=True)
            return cls._builder().where(query).update({SOFT_DELETE_FIELD: 1})
        cls._log("delete_where", soft=False)
        return cls._builder().where(query).delete()

    @classmethod
    def is_valid(cls, values: Any = None) -> bool:
        """Return True when ``values`` could build a valid record."""
        if not isinstance(values, Mapping):
            return False
        try:
            check_types(cls._schema.fields, values)
        except ValidationError as exc:
            log.debug(str(exc), extra={"table": cls._table, "field": exc.field})
            return False
        except Exception:
            # a schema default or validate callable raised on its own
            log.debug(f"is_valid check failed on {cls._table}", exc_info=True, extra={"table": cls._table})
            return False
        return True

    @classmethod
    def has_field(cls, name: str) -> bool:
        return name in cls._schema.fields

    @classmethod
    def get_query_executor(cls) -> Optional[QueryExecutor]:
        """The executor this model issues queries through, for arbitrary queries."""
        return cls._executor

    @classmethod
    def raw(cls, query: str, bindings: Optional[Sequence[Any]] = None) -> Awaitable[List[Row]]:
        """Run raw SQL through the executor; resolves to the result rows only."""
        if not isinstance(query, str):
            raise TypeError(f"raw() expects a SQL string, got {type(query).__name__}")
        cls._log("raw")
        return _rows_only(cls._executor.raw(query, bindings))  # type: ignore[union-attr]

    # -- instance operations -------------------------------------------------

    def insert(self) -> Awaitable[Any]:
        """
        Insert this record.

        Auto-increment fields are never sent. With a primary key the row is
        fetched back by its key, this record is refreshed from it and the
        awaitable resolves to the fetched record. Without one it resolves to the
        executor's raw insert result.
        """
        schema = self._schema
        checked = check_types(schema.fields, self.to_dict())
        auto_increment = schema.auto_increment_fields
        payload = {k: v for k, v in checked.items() if k not in auto_increment}

        self._log("insert", columns=sorted(payload))
        if schema.primary_key is None:
            return self._builder().insert(payload)
        pending = self._builder().insert(payload, returning=schema.primary_key)
        return self._refresh_after_insert(pending, payload.get(schema.primary_key))

    async def _refresh_after_insert(self, pending: Awaitable[Any], provided_key: Any) -> Optional[Record]:
        result = await pending
        key = _inserted_key(result)
        if key is None:
            key = provided_key

        primary_key = self._schema.primary_key
        fetched = await self._wrap_first(self._builder().where({primary_key: key}).limit(1).select())
        if fetched is not None:
            self._assign(fetched.to_dict())
        return fetched

    def update(self, values: Optional[Mapping[str, Any]] = None) -> Awaitable[Any]:
        """
        Merge ``values`` into this record and persist it.

        The merged values are validated before anything is sent; the record is
        brought in line with them once the update succeeds. Resolves to the
        executor's update result (the affected-row count).

        Raises
        ------
        TypeError
            If ``values`` is not a mapping.
        ValidationError
            If the merged values do not satisfy the schema.
        MissingPrimaryKeyError
            If the model has no primary key or this record has no value for it.
        """
        merged = {**self.to_dict(), **self._prepare(_mapping_argument(values, "values", "update"))}
        checked = check_types(self._schema.fields, merged)
        predicate = self._key_predicate("update")

        self._log("update", columns=sorted(checked))
        pending = self._builder().where(predicate).update(checked)
        return self._reconcile_after_update(pending, checked)

    async def _reconcile_after_update(self, pending: Awaitable[Any], values: Dict[str, Any]) -> Any:
        result = await pending
        self._assign(values)
        return result

    def delete(self) -> Awaitable[Any]:
        """
        Delete this record's row, or flag it ``deleted = 1`` on soft-delete models.

        The in-memory record is left as it is.
        """
        predicate = self._key_predicate("delete")
        builder = self._builder().where(predicate)
        if self._schema.soft_delete:
            self._log("delete", soft=True)
            return builder.update({SOFT_DELETE_FIELD: 1})
        self._log("delete", soft=False)
        return builder.delete()


def _class_name(table: str) -> str:
    words = [w for w in re.split(r"[^0-9A-Za-z]+", table) if w]
    name = "".join(w[:1].upper() + w[1:] for w in words)
    if not name or not name.isidentifier():
        name = f"Model{name}"
    return name


def _as_method(func: Callable[..., Any]) -> Callable[..., Any]:
    # plain functions bind to the instance on their own; other callables need a shim
    if inspect.isfunction(func):
        return func

    @functools.wraps(func)
    def method(self: Record, *args: Any, **kwargs: Any) -> Any:
        return func(self, *args, **kwargs)

    return method


def define_model(table: str, schema: Mapping[str, Any], executor: QueryExecutor) -> type[Record]:
    """
    Build a record class for ``table`` from a declarative schema.

    Parameters
    ----------
    table : str
        Table the model reads from and writes to.
    schema : Mapping
        Field name -> field definition, plus the optional reserved entries
        ``_statics`` (helpers installed as static methods) and ``_overrides``
        (replacements for ``get``, ``get_one``, ``insert``, ``update`` and
        ``delete_where``).
    executor : QueryExecutor
        Collaborator that runs the generated queries.

    Returns
    -------
    type[Record]
        The generated model class.

    Raises
    ------
    TypeError
        If ``table`` is not a non-empty string, ``schema`` is not a mapping or
        no executor is given.
    SchemaDefinitionError
        If the schema is malformed (two primary keys, bad overrides, bad field
        definitions, names clashing with model operations).
    """
    if not isinstance(table, str) or not table:
        raise TypeError("define_model() requires a non-empty table name")
    if not isinstance(schema, Mapping):
        raise TypeError(
            f"define_model() requires a schema mapping, got {type(schema).__name__}"
        )
    if executor is None:
        raise TypeError("define_model() requires a query executor")

    info = analyze_schema(table, schema)
    registry = OverrideRegistry.from_schema(table, info.overrides)

    for name in info.fields:
        if hasattr(Record, name):
            raise SchemaDefinitionError(
                f"Field {name} on model {table} clashes with a model attribute",
                table=table,
            )

    namespace: Dict[str, Any] = {
        "__qualname__": _class_name(table),
        "_table": table,
        "_schema": info,
        "_executor": executor,
    }

    for slot, (_, static) in OPERATION_SLOTS.items():
        default = getattr(Record, slot)
        func = registry.resolve(slot, default)
        if func is not default:
            namespace[slot] = staticmethod(func) if static else _as_method(func)

    for name, func in info.statics.items():
        if hasattr(Record, name) or name in info.fields:
            raise SchemaDefinitionError(
                f"Static helper {name} on model {table} clashes with a model attribute",
                table=table,
            )
        namespace[name] = staticmethod(func)

    model = type(_class_name(table), (Record,), namespace)
    log.debug(
        f"Model defined for {table}",
        extra={
            "table": table,
            "fields": list(info.fields),
            "primary_key": info.primary_key,
            "soft_delete": info.soft_delete,
        },
    )
    return model


__all__ = [
    "DEFAULT_LIMIT",
    "DEFAULT_OFFSET",
    "Record",
    "define_model",
]

"""
Query-execution collaborator contract and its psycopg implementation.

Generated models talk to storage only through :class:`QueryExecutor`:
``table(name)`` hands out a chainable :class:`QueryBuilder` whose terminal
methods are awaitable, and ``raw(text, bindings)`` runs arbitrary SQL.
Predicate maps are flat equality filters.

:class:`PsycopgExecutor` is the reference implementation. It composes SQL with
``psycopg.sql`` and runs each statement on a pooled async connection, committing
per statement.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from typing import Any, Awaitable, Dict, List, Optional, Protocol, Tuple, Union

from psycopg import sql
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from modeller.config import Settings
from modeller.infrastructure.db_factory import open_pool_from_settings
from modeller.utils.logging import get_logger

log = get_logger(__name__)

Row = Dict[str, Any]
RawResult = Tuple[List[Row], Dict[str, Any]]


class QueryBuilder(Protocol):
    """
    Chainable per-table query handle.

    ``where``/``limit``/``offset``/``order_by`` return the builder; the four
    terminals return awaitables resolving to engine results.
    """

    def where(self, predicate: Mapping[str, Any]) -> QueryBuilder:
        ...

    def limit(self, n: int) -> QueryBuilder:
        ...

    def offset(self, n: int) -> QueryBuilder:
        ...

    def order_by(self, field: str, direction: str = "asc") -> QueryBuilder:
        ...

    def select(self) -> Awaitable[List[Row]]:
        ...

    def insert(self, values: Mapping[str, Any], returning: Optional[str] = None) -> Awaitable[Any]:
        ...

    def update(self, values: Mapping[str, Any]) -> Awaitable[int]:
        ...

    def delete(self) -> Awaitable[int]:
        ...


class QueryExecutor(Protocol):
    def table(self, name: str) -> QueryBuilder:
        ...

    def raw(self, query: str, bindings: Optional[Sequence[Any]] = None) -> Awaitable[RawResult]:
        ...


def _identifier(name: str) -> sql.Identifier:
    # "schema.table" addresses a qualified table
    return sql.Identifier(*name.split("."))


class TableQuery:
    """
    psycopg-backed :class:`QueryBuilder` for one table.

    Filters accumulate across ``where`` calls; the builder mutates and returns
    itself so calls can be chained.
    """

    def __init__(self, executor: PsycopgExecutor, table: str) -> None:
        self._executor = executor
        self.table = table
        self.predicate: Dict[str, Any] = {}
        self.limit_value: Optional[int] = None
        self.offset_value: Optional[int] = None
        self.ordering: Optional[Tuple[str, str]] = None

    def where(self, predicate: Mapping[str, Any]) -> TableQuery:
        self.predicate.update(predicate)
        return self

    def limit(self, n: int) -> TableQuery:
        self.limit_value = int(n)
        return self

    def offset(self, n: int) -> TableQuery:
        self.offset_value = int(n)
        return self

    def order_by(self, field: str, direction: str = "asc") -> TableQuery:
        direction = direction.lower()
        if direction not in ("asc", "desc"):
            raise ValueError(f"Sort direction must be 'asc' or 'desc', got '{direction}'")
        self.ordering = (field, direction)
        return self

    # -- SQL composition ------------------------------------------------------

    def _where_clause(self) -> Tuple[sql.Composable, List[Any]]:
        if not self.predicate:
            return sql.SQL(""), []
        parts: List[sql.Composable] = []
        params: List[Any] = []
        for column, value in self.predicate.items():
            if value is None:
                parts.append(sql.SQL("{} IS NULL").format(sql.Identifier(column)))
            else:
                parts.append(sql.SQL("{} = {}").format(sql.Identifier(column), sql.Placeholder()))
                params.append(value)
        return sql.SQL(" WHERE ") + sql.SQL(" AND ").join(parts), params

    def compile_select(self) -> Tuple[sql.Composable, List[Any]]:
        where, params = self._where_clause()
        query = sql.SQL("SELECT * FROM {}").format(_identifier(self.table)) + where
        if self.ordering is not None:
            column, direction = self.ordering
            query += sql.SQL(" ORDER BY {} ").format(sql.Identifier(column)) + sql.SQL(
                direction.upper()
            )
        if self.limit_value is not None:
            query += sql.SQL(" LIMIT {}").format(sql.Placeholder())
            params.append(self.limit_value)
        if self.offset_value is not None:
            query += sql.SQL(" OFFSET {}").format(sql.Placeholder())
            params.append(self.offset_value)
        return query, params

    def compile_insert(
        self, values: Mapping[str, Any], returning: Optional[str] = None
    ) -> Tuple[sql.Composable, List[Any]]:
        table = _identifier(self.table)
        if values:
            query = sql.SQL("INSERT INTO {} ({}) VALUES ({})").format(
                table,
                sql.SQL(", ").join(sql.Identifier(c) for c in values),
                sql.SQL(", ").join(sql.Placeholder() for _ in values),
            )
        else:
            query = sql.SQL("INSERT INTO {} DEFAULT VALUES").format(table)
        if returning is not None:
            query += sql.SQL(" RETURNING {}").format(sql.Identifier(returning))
        return query, list(values.values())

    def compile_update(self, values: Mapping[str, Any]) -> Tuple[sql.Composable, List[Any]]:
        assignments = sql.SQL(", ").join(
            sql.SQL("{} = {}").format(sql.Identifier(c), sql.Placeholder()) for c in values
        )
        where, where_params = self._where_clause()
        query = sql.SQL("UPDATE {} SET ").format(_identifier(self.table)) + assignments + where
        return query, list(values.values()) + where_params

    def compile_delete(self) -> Tuple[sql.Composable, List[Any]]:
        where, params = self._where_clause()
        return sql.SQL("DELETE FROM {}").format(_identifier(self.table)) + where, params

    # -- terminals ------------------------------------------------------------

    async def select(self) -> List[Row]:
        query, params = self.compile_select()
        rows, _ = await self._executor.execute(query, params, fetch=True)
        return rows

    async def insert(
        self, values: Mapping[str, Any], returning: Optional[str] = None
    ) -> Union[List[Any], int]:
        """
        Insert one row.

        Resolves to the list of ``returning`` column values when a column is
        named, otherwise to the affected-row count.
        """
        query, params = self.compile_insert(values, returning)
        rows, meta = await self._executor.execute(query, params, fetch=returning is not None)
        if returning is not None:
            return [row[returning] for row in rows]
        return meta["rowcount"]

    async def update(self, values: Mapping[str, Any]) -> int:
        if not values:
            return 0
        query, params = self.compile_update(values)
        _, meta = await self._executor.execute(query, params)
        return meta["rowcount"]

    async def delete(self) -> int:
        query, params = self.compile_delete()
        _, meta = await self._executor.execute(query, params)
        return meta["rowcount"]


class PsycopgExecutor:
    """
    :class:`QueryExecutor` over a psycopg ``AsyncConnectionPool``.

    Parameters
    ----------
    settings : Settings | None
        Connection settings used to open a pool on first use.
    pool : AsyncConnectionPool | None
        An already configured pool; takes precedence over ``settings``.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        pool: Optional[AsyncConnectionPool] = None,
    ) -> None:
        if settings is None and pool is None:
            raise TypeError("PsycopgExecutor requires settings or a pool")
        self._settings = settings
        self._pool = pool
        self._pool_lock: Optional[asyncio.Lock] = None

    async def _get_pool(self) -> AsyncConnectionPool:
        if self._pool is not None:
            return self._pool
        if self._pool_lock is None:
            self._pool_lock = asyncio.Lock()
        async with self._pool_lock:
            if self._pool is None:
                self._pool = await open_pool_from_settings(self._settings)
        return self._pool

    def table(self, name: str) -> TableQuery:
        return TableQuery(self, name)

    async def execute(
        self,
        query: sql.Composable,
        params: Optional[Sequence[Any]] = None,
        fetch: bool = False,
    ) -> RawResult:
        """
        Run one statement and commit it.

        With ``params`` None the text is sent as-is, so literal ``%`` signs need
        no escaping.

        Returns
        -------
        tuple[list[dict], dict]
            Rows (empty unless ``fetch`` and the statement returns rows) and
            metadata with ``rowcount`` and ``columns``.
        """
        pool = await self._get_pool()
        async with pool.connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(query, params)
                rows: List[Row] = []
                columns: List[str] = []
                if cur.description is not None:
                    columns = [column.name for column in cur.description]
                    if fetch:
                        rows = await cur.fetchall()
                return rows, {"rowcount": cur.rowcount, "columns": columns}

    async def raw(self, query: str, bindings: Optional[Sequence[Any]] = None) -> RawResult:
        return await self.execute(sql.SQL(query), bindings, fetch=True)

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            log.info("Connection pool closed")
            self._pool = None


__all__ = [
    "PsycopgExecutor",
    "QueryBuilder",
    "QueryExecutor",
    "RawResult",
    "Row",
    "TableQuery",
]

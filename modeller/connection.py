"""
Entry point tying models to a query executor.

``connect()`` either wraps a pre-configured executor or builds the default
psycopg executor from settings. The returned :class:`Modeller` defines models
bound to that executor:

    async with connect() as db:
        Movie = db.define("movies", {...})
        movies = await Movie.get()
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from modeller.config import Settings, get_settings
from modeller.errors import ConfigurationError
from modeller.infrastructure.executor import PsycopgExecutor, QueryExecutor
from modeller.model import Record, define_model
from modeller.utils.logging import get_logger

log = get_logger(__name__)


class Modeller:
    """
    Owner of one query executor and factory for models that use it.

    Parameters
    ----------
    executor : QueryExecutor
        Collaborator every model defined here issues its queries through.
    """

    def __init__(self, executor: QueryExecutor) -> None:
        if executor is None:
            raise TypeError("Modeller requires a query executor")
        self.executor = executor

    def define(self, table: str, schema: Mapping[str, Any]) -> type[Record]:
        """Define a model bound to this modeller's executor."""
        return define_model(table, schema, self.executor)

    def get_query_executor(self) -> QueryExecutor:
        """Return the executor, for queries the models do not cover."""
        return self.executor

    async def close(self) -> None:
        """Release the executor's resources when it has any to release."""
        close = getattr(self.executor, "close", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> Modeller:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        del exc_type, exc, tb
        await self.close()


def connect(
    settings: Optional[Settings] = None,
    *,
    executor: Optional[QueryExecutor] = None,
) -> Modeller:
    """
    Create a :class:`Modeller`.

    Parameters
    ----------
    settings : Settings | None
        Connection settings; defaults to :func:`get_settings`. Ignored when an
        executor is given.
    executor : QueryExecutor | None
        A pre-configured executor, used as-is.

    Returns
    -------
    Modeller
        Ready to define models. The default executor opens its pool lazily on
        the first query.

    Raises
    ------
    ConfigurationError
        If no executor is given and the settings lack user, password or
        database name.
    """
    if executor is not None:
        log.debug("Using pre-configured query executor")
        return Modeller(executor)

    settings = settings or get_settings()
    missing = settings.missing_credentials()
    if missing:
        raise ConfigurationError(
            "connect() requires a configuration which specifies user, password "
            f"and database (missing: {', '.join(missing)})"
        )

    log.info(
        f"Connecting to {settings.db_host}:{settings.db_port}/{settings.db_name}",
        extra={"db_host": settings.db_host, "db_port": settings.db_port},
    )
    return Modeller(PsycopgExecutor(settings=settings))


__all__ = ["Modeller", "connect"]

"""
Connection pool factory for modeller.

Builds the psycopg async connection pool behind the default query executor.
Opening the pool retries transient connection failures using tenacity; once
the pool is up, statements are never retried at this layer.
"""

from __future__ import annotations

import logging
from typing import Optional

import psycopg
from psycopg_pool import AsyncConnectionPool, PoolTimeout
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from modeller.config import Settings, get_settings
from modeller.utils.logging import get_logger

log = get_logger(__name__)

DEFAULT_OPEN_TIMEOUT = 30.0


async def open_async_pool(
    conninfo: str,
    min_size: int = 1,
    max_size: int = 10,
    attempts: int = 3,
    timeout: float = DEFAULT_OPEN_TIMEOUT,
) -> AsyncConnectionPool:
    """
    Create and open an async connection pool with automatic retry.

    A pool that failed to fill is closed and a fresh one is built for the next
    attempt, since a closed psycopg pool cannot be reopened.

    Parameters
    ----------
    conninfo : str
        libpq connection string or URL.
    min_size : int
        Minimum number of idle connections to keep.
    max_size : int
        Maximum total connections in the pool.
    attempts : int
        Total number of tries before giving up.
    timeout : float
        Seconds to wait for ``min_size`` connections on each try.

    Returns
    -------
    AsyncConnectionPool
        An opened pool.

    Raises
    ------
    psycopg.OperationalError | PoolTimeout
        If the pool cannot be opened after all retry attempts.
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((psycopg.OperationalError, PoolTimeout)),
        before_sleep=before_sleep_log(log, logging.WARNING),
        reraise=True,
    )
    async for attempt in retrying:
        with attempt:
            pool = AsyncConnectionPool(
                conninfo=conninfo, min_size=min_size, max_size=max_size, open=False
            )
            try:
                await pool.open(wait=True, timeout=timeout)
            except BaseException:
                await pool.close()
                raise
            log.info(
                "Connection pool opened",
                extra={"min_size": min_size, "max_size": max_size},
            )
            return pool
    raise RuntimeError("unreachable: tenacity re-raises the last failure")


async def open_pool_from_settings(settings: Optional[Settings] = None) -> AsyncConnectionPool:
    """Open a pool using the connection and pool sizes from settings."""
    settings = settings or get_settings()
    return await open_async_pool(
        settings.conninfo(),
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        attempts=settings.db_connect_attempts,
    )


__all__ = [
    "DEFAULT_OPEN_TIMEOUT",
    "open_async_pool",
    "open_pool_from_settings",
]

"""asyncpg pool for the verification ledger."""

import json
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import partial

import asyncpg

from origination.config.models.storage import PostgresConfig
from origination.db.errors import ConnectionError
from origination.observability.logging import get_logger

logger = get_logger(__name__)

_DSN_VARIABLES = ("ORIGINATION_DATABASE_URL", "DATABASE_URL")


def resolve_dsn(config: PostgresConfig) -> str | None:
    """Configured DSN, else the first of ORIGINATION_DATABASE_URL / DATABASE_URL."""
    if config.dsn:
        return config.dsn
    for variable in _DSN_VARIABLES:
        if os.environ.get(variable):
            return os.environ[variable]
    return None


async def _init_connection(conn: asyncpg.Connection) -> None:
    # Ledger metadata and correction history are jsonb
    await conn.set_type_codec(
        "jsonb",
        encoder=partial(json.dumps, default=str, ensure_ascii=False),
        decoder=json.loads,
        schema="pg_catalog",
    )


class PostgresPool:
    """Connection pool built from ``storage.postgres`` settings.

    Sessions run in UTC and decode jsonb columns to Python objects.

    Usage:
        pool = PostgresPool(settings.storage.postgres)
        await pool.connect()
        try:
            async with pool.acquire() as conn:
                await conn.fetch("SELECT ...")
        finally:
            await pool.close()
    """

    def __init__(self, config: PostgresConfig | None = None, dsn: str | None = None) -> None:
        self._config = config or PostgresConfig()
        self._dsn = dsn or resolve_dsn(self._config)
        self._pool: asyncpg.Pool | None = None

    @property
    def config(self) -> PostgresConfig:
        return self._config

    async def connect(self) -> None:
        """Open the pool; a no-op when already open."""
        if self._pool is not None:
            return
        if not self._dsn:
            raise ConnectionError(
                "No PostgreSQL DSN: set ORIGINATION_STORAGE__POSTGRES__DSN or DATABASE_URL"
            )

        try:
            self._pool = await asyncpg.create_pool(
                dsn=self._dsn,
                min_size=self._config.min_pool_size,
                max_size=self._config.max_pool_size,
                max_inactive_connection_lifetime=self._config.max_inactive_connection_lifetime,
                command_timeout=self._config.command_timeout,
                server_settings={
                    "application_name": self._config.application_name,
                    "timezone": "UTC",
                },
                init=_init_connection,
            )
            logger.info(
                "postgres_pool_connected",
                application_name=self._config.application_name,
                min_size=self._config.min_pool_size,
                max_size=self._config.max_pool_size,
            )
        except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            logger.error("postgres_pool_connection_failed", error=str(e))
            raise ConnectionError(f"Failed to connect to PostgreSQL: {e}", cause=e) from e

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("postgres_pool_closed")

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[asyncpg.Connection]:
        """Acquire a connection from the pool, connecting first if needed."""
        if self._pool is None:
            await self.connect()

        try:
            async with self._pool.acquire() as connection:  # type: ignore[union-attr]
                yield connection
        except asyncpg.PostgresError as e:
            logger.error("postgres_connection_error", error=str(e))
            raise ConnectionError(f"PostgreSQL error: {e}", cause=e) from e

    async def health_check(self) -> bool:
        """True when the pool is open and the ledger table answers."""
        if self._pool is None:
            return False

        try:
            async with self._pool.acquire() as conn:
                await conn.fetchval("SELECT 1 FROM data_verifications LIMIT 1")
            return True
        except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            logger.warning("postgres_health_check_failed", error=str(e))
            return False

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

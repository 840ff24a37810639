"""Storage backend configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

BackendType = Literal["inmemory", "postgres"]


class PostgresConfig(BaseModel):
    """PostgreSQL connection pool configuration.

    ``dsn`` is usually supplied as ORIGINATION_STORAGE__POSTGRES__DSN;
    without it the pool falls back to ORIGINATION_DATABASE_URL or
    DATABASE_URL, the variables Alembic reads.
    """

    dsn: str | None = Field(default=None, description="postgresql:// connection string")
    application_name: str = Field(
        default="origination",
        description="Reported in pg_stat_activity",
    )
    min_pool_size: int = Field(
        default=5,
        gt=0,
        description="Minimum connections to keep open",
    )
    max_pool_size: int = Field(
        default=20,
        gt=0,
        description="Maximum connections in pool",
    )
    max_inactive_connection_lifetime: float = Field(
        default=300.0,
        gt=0,
        description="Close connections idle longer than this (seconds)",
    )
    command_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Default timeout for queries (seconds)",
    )


class StorageConfig(BaseModel):
    """Backend selection for each store.

    Only the verification ledger has a PostgreSQL backend; the other
    stores are in-memory.
    """

    verification: BackendType = Field(
        default="inmemory",
        description="Backend for the field verification ledger",
    )
    postgres: PostgresConfig = Field(
        default_factory=PostgresConfig,
        description="PostgreSQL pool settings",
    )

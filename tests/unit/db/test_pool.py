"""Tests for PostgresPool construction from storage settings."""

from typing import Any

import asyncpg
import pytest

from origination.config.models.storage import PostgresConfig
from origination.db.errors import ConnectionError
from origination.db.pool import PostgresPool, resolve_dsn


class _FakePool:
    closed = False

    async def close(self) -> None:
        self.closed = True


class TestResolveDsn:
    """Tests for resolve_dsn."""

    def test_configured_dsn_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "postgresql://env/db")
        config = PostgresConfig(dsn="postgresql://config/db")

        assert resolve_dsn(config) == "postgresql://config/db"

    def test_service_variable_before_generic(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ORIGINATION_DATABASE_URL", "postgresql://service/db")
        monkeypatch.setenv("DATABASE_URL", "postgresql://generic/db")

        assert resolve_dsn(PostgresConfig()) == "postgresql://service/db"

    def test_nothing_configured(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ORIGINATION_DATABASE_URL", raising=False)
        monkeypatch.delenv("DATABASE_URL", raising=False)

        assert resolve_dsn(PostgresConfig()) is None


class TestConnect:
    """Tests for PostgresPool.connect."""

    @pytest.mark.asyncio
    async def test_missing_dsn_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ORIGINATION_DATABASE_URL", raising=False)
        monkeypatch.delenv("DATABASE_URL", raising=False)
        pool = PostgresPool(PostgresConfig())

        with pytest.raises(ConnectionError, match="No PostgreSQL DSN"):
            await pool.connect()
        assert not pool.is_connected

    @pytest.mark.asyncio
    async def test_pool_uses_storage_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[dict[str, Any]] = []
        fake = _FakePool()

        async def create_pool(**kwargs: Any) -> _FakePool:
            calls.append(kwargs)
            return fake

        monkeypatch.setattr(asyncpg, "create_pool", create_pool)
        config = PostgresConfig(
            dsn="postgresql://ledger/db",
            min_pool_size=2,
            max_pool_size=4,
            command_timeout=15.0,
            application_name="origination-worker",
        )
        pool = PostgresPool(config)

        await pool.connect()
        await pool.connect()

        assert len(calls) == 1
        kwargs = calls[0]
        assert kwargs["dsn"] == "postgresql://ledger/db"
        assert (kwargs["min_size"], kwargs["max_size"]) == (2, 4)
        assert kwargs["command_timeout"] == 15.0
        assert kwargs["server_settings"] == {
            "application_name": "origination-worker",
            "timezone": "UTC",
        }
        assert kwargs["init"] is not None
        assert pool.is_connected

        await pool.close()
        assert fake.closed
        assert not pool.is_connected

    @pytest.mark.asyncio
    async def test_unreachable_server_raises_store_error(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        async def create_pool(**kwargs: Any) -> None:
            raise OSError("Connection refused")

        monkeypatch.setattr(asyncpg, "create_pool", create_pool)
        pool = PostgresPool(PostgresConfig(dsn="postgresql://down/db"))

        with pytest.raises(ConnectionError, match="Connection refused"):
            await pool.connect()

    @pytest.mark.asyncio
    async def test_health_check_before_connect(self) -> None:
        pool = PostgresPool(PostgresConfig(dsn="postgresql://ledger/db"))

        assert await pool.health_check() is False

"""Unit tests for database helpers with mocked asyncpg pool."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from inventory_api import database


@pytest.fixture
def mock_pool():
    """Patch get_pool with a pool whose acquire() yields a mock connection."""
    conn = AsyncMock()
    pool = MagicMock()
    pool.acquire.return_value.__aenter__ = AsyncMock(return_value=conn)
    pool.acquire.return_value.__aexit__ = AsyncMock(return_value=False)
    with patch("inventory_api.database.get_pool", new_callable=AsyncMock) as mock_get_pool:
        mock_get_pool.return_value = pool
        yield conn


async def test_get_pool_uninitialized_raises():
    with patch.object(database, "_pool", None):
        with pytest.raises(RuntimeError, match="not initialized"):
            await database.get_pool()


async def test_run_migrations_in_order(mock_pool, tmp_path):
    (tmp_path / "002_second.sql").write_text("SELECT 2;")
    (tmp_path / "001_first.sql").write_text("SELECT 1;")

    await database.run_migrations(tmp_path)

    executed = [call.args[0] for call in mock_pool.execute.await_args_list]
    assert executed == ["SELECT 1;", "SELECT 2;"]


async def test_run_migrations_missing_directory(mock_pool, tmp_path):
    await database.run_migrations(tmp_path / "absent")
    mock_pool.execute.assert_not_awaited()


async def test_bundled_users_migration_is_applied(mock_pool):
    await database.run_migrations()

    sql = mock_pool.execute.await_args_list[0].args[0]
    assert "CREATE TABLE IF NOT EXISTS users" in sql
    assert "UNIQUE (email)" in sql


async def test_health_check(mock_pool):
    mock_pool.fetchval.return_value = 1
    assert await database.health_check() is True


async def test_health_check_failure():
    with patch(
        "inventory_api.database.get_pool", new_callable=AsyncMock, side_effect=RuntimeError("x")
    ):
        assert await database.health_check() is False


async def test_init_database_opens_pool_once():
    pool = MagicMock()
    pool.close = AsyncMock()
    with patch.object(database, "_pool", None), patch(
        "inventory_api.database.asyncpg.create_pool", new_callable=AsyncMock
    ) as create_pool:
        create_pool.return_value = pool

        assert await database.init_database("postgresql://db/inventory") is pool
        assert await database.init_database("postgresql://db/inventory") is pool
        create_pool.assert_awaited_once()
        assert create_pool.await_args.args[0] == "postgresql://db/inventory"

        await database.close_database()
        pool.close.assert_awaited_once()
        with pytest.raises(RuntimeError):
            await database.get_pool()

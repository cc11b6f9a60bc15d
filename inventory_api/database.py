"""asyncpg pool for the Postgres credential store."""

from pathlib import Path
from typing import Optional

import asyncpg
import structlog

logger = structlog.get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent.parent / "migrations"

POOL_MIN_SIZE = 2
POOL_MAX_SIZE = 10
COMMAND_TIMEOUT_SECONDS = 30

_pool: Optional[asyncpg.Pool] = None


async def get_pool() -> asyncpg.Pool:
    """Return the shared pool.

    Raises:
        RuntimeError: If init_database() has not been awaited
    """
    if _pool is None:
        raise RuntimeError("Database pool not initialized. Call init_database() first.")
    return _pool


async def init_database(postgres_url: str) -> asyncpg.Pool:
    """Open the shared pool. A second call returns the pool already open."""
    global _pool

    if _pool is None:
        _pool = await asyncpg.create_pool(
            postgres_url,
            min_size=POOL_MIN_SIZE,
            max_size=POOL_MAX_SIZE,
            command_timeout=COMMAND_TIMEOUT_SECONDS,
        )
        logger.info("credential_db_pool_opened", max_size=POOL_MAX_SIZE)
    return _pool


async def close_database() -> None:
    global _pool

    if _pool is not None:
        pool, _pool = _pool, None
        await pool.close()
        logger.info("credential_db_pool_closed")


async def run_migrations(migrations_dir: Path = MIGRATIONS_DIR) -> None:
    """Apply every ``*.sql`` file under migrations_dir in filename order.

    Each file must be idempotent; all of them run on every startup.
    """
    files = sorted(migrations_dir.glob("*.sql")) if migrations_dir.is_dir() else []
    if not files:
        logger.warning("credential_db_no_migrations", path=str(migrations_dir))
        return

    pool = await get_pool()
    async with pool.acquire() as conn:
        for path in files:
            await conn.execute(path.read_text())
            logger.info("credential_db_migration_applied", file=path.name)


async def health_check() -> bool:
    """True when a pooled connection answers ``SELECT 1``."""
    try:
        pool = await get_pool()
        async with pool.acquire() as conn:
            return await conn.fetchval("SELECT 1") == 1
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, RuntimeError) as e:
        logger.warning("credential_db_unhealthy", error=str(e))
        return False

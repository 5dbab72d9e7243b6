import logging
from collections.abc import AsyncIterator

from fastapi import HTTPException, Request
from psycopg import AsyncConnection
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from .config import Settings

logger = logging.getLogger(__name__)


async def open_db_pool(config: Settings) -> AsyncConnectionPool | None:
    # Keep app booting in non-DB contexts; endpoints will fail explicitly if used.
    if not config.database_url:
        logger.warning("DATABASE_URL is empty, starting without a connection pool")
        return None

    pool = AsyncConnectionPool(
        conninfo=config.database_url,
        open=False,
        min_size=config.db_pool_min_size,
        max_size=config.db_pool_max_size,
        kwargs={"autocommit": True, "row_factory": dict_row},
    )
    await pool.open()
    logger.info("Database pool opened (min=%s, max=%s)", config.db_pool_min_size, config.db_pool_max_size)
    return pool


async def close_db_pool(pool: AsyncConnectionPool | None) -> None:
    if pool is None:
        return

    await pool.close()
    logger.info("Database pool closed")


async def get_db_connection(request: Request) -> AsyncIterator[AsyncConnection]:
    # The pool belongs to the running app instance, never to this module.
    pool: AsyncConnectionPool | None = getattr(request.app.state, "db_pool", None)
    if pool is None:
        raise HTTPException(status_code=500, detail="DATABASE_URL is not configured")

    async with pool.connection() as connection:
        yield connection

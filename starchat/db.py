import logging
from collections.abc import AsyncGenerator
from typing import Any

from fastapi import Depends
from fastapi_users.db import SQLAlchemyUserDatabase
from sqlalchemy import inspect, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from .core.config import settings
from .models import User, metadata

logger = logging.getLogger(__name__)

engine = create_async_engine(settings.DATABASE_URL)
async_session_maker = async_sessionmaker(engine, expire_on_commit=False)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """One session per request; services commit or roll back explicitly."""
    async with async_session_maker() as session:
        yield session


async def get_user_db(
    session: AsyncSession = Depends(get_db_session),
) -> SQLAlchemyUserDatabase[User, Any]:
    yield SQLAlchemyUserDatabase(session, User)


async def check_database_health() -> bool:
    """
    Verifies the database answers and that migrations created
    every table the models declare. Raises RuntimeError when tables are missing.
    """
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
        logger.info(f"Database connection to '{engine.url.database}' successful")

        existing_tables = set(
            await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
        )

    missing_tables = sorted(set(metadata.tables) - existing_tables)
    if missing_tables:
        logger.error(f"Missing required tables: {', '.join(missing_tables)}")
        raise RuntimeError(
            f"Database migration required. Missing tables: {', '.join(missing_tables)}"
        )

    logger.info(f"All {len(metadata.tables)} required tables present")
    return True

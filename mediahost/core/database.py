from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from mediahost.core.config import Settings


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """Create the async engine for the record database."""
    return create_async_engine(settings.DATABASE_URL, echo=False, future=True)


def create_session_maker(engine: AsyncEngine) -> sessionmaker:
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_db_and_tables(engine: AsyncEngine):
    """Create all tables if they don't exist.

    Record tables belong to the host application; this is mainly useful for
    local development and tests.
    """
    async with engine.begin() as conn:
        await conn.run_sync(lambda sync_conn: SQLModel.metadata.create_all(sync_conn, checkfirst=True))

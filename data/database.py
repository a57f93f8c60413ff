from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from config.settings import settings
from core.errors import FatalInitError
from data.schema import Base

engine = create_async_engine(settings.DATABASE_URL, echo=False)
async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


async def init_db(db_engine: AsyncEngine | None = None) -> None:
    """Create all tables (idempotent)."""
    db_engine = db_engine or engine
    try:
        async with db_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            # WAL only applies to file-backed SQLite databases
            if db_engine.dialect.name == "sqlite" and db_engine.url.database not in (None, "", ":memory:"):
                await conn.execute(text("PRAGMA journal_mode=WAL"))
    except (SQLAlchemyError, OSError) as exc:
        raise FatalInitError(f"cannot initialise database {db_engine.url!r}: {exc}") from exc


@asynccontextmanager
async def get_session(
    factory: async_sessionmaker[AsyncSession] | None = None,
) -> AsyncGenerator[AsyncSession]:
    async with (factory or async_session_factory)() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

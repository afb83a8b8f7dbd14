"""Async engine, session factory and the per-request session dependency.

Most tables are accessed through raw ``text()`` SQL in each module's
infrastructure layer. Only ``users`` is ORM-mapped.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings


class Base(DeclarativeBase):
    pass


SessionFactory = async_sessionmaker[AsyncSession]

engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_pre_ping=True,
)

# Email handlers open their own sessions from this factory after the request commits
async_session_factory: SessionFactory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request.

    Closing the session rolls back any transaction that was not committed,
    so a request cancelled mid-write leaves no partial state behind.
    """
    async with async_session_factory() as session:
        yield session

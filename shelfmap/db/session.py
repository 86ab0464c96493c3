"""SQLAlchemy async session setup for Shelfmap.

Provides:
- Base: DeclarativeBase for all ORM models
- engine: async engine configured from settings
- async_session_factory: session maker bound to engine
- get_async_session: request-scoped session; rollback on error, commit left to routes
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from shelfmap.config.settings import get_settings


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""

    pass


_settings = get_settings()

engine = create_async_engine(
    _settings.DATABASE_URL,
    echo=(_settings.ENVIRONMENT == "dev"),
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped async session.

    Repositories and services only call add()/flush()/execute(). Nothing
    is committed here: FastAPI runs this teardown after the response has
    been sent. Mutating routes call commit_unit_of_work() before they
    build their response, so every cascade step of one request lands in
    a single transaction that is durable before the client hears of it.
    Uncommitted work is rolled back on any exception and when the
    session closes.
    """
    async with async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise

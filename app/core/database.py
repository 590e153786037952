"""
Database connection and session management.
"""

from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from app.core.config import get_settings

settings = get_settings()

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    future=True,
)

async_session_factory = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


def make_session_factory(bind: AsyncEngine) -> sessionmaker:
    """Build a session factory for an engine other than the default one."""
    return sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_db(bind: AsyncEngine = engine):
    """Create all tables (development only; use migrations in production)."""
    import app.models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


@asynccontextmanager
async def get_session_context(factory: sessionmaker = async_session_factory):
    """Context manager for use outside of FastAPI request lifecycle."""
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

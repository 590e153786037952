"""
Shared fixtures: a throwaway SQLite database, the store over it, and an
engine that has already loaded its roster.
"""

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from app.access.engine import AccessControlEngine
from app.core.database import init_db, make_session_factory
from app.services.access_store import AccessControlStore


@pytest.fixture
async def session_factory(tmp_path):
    bind = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'painel.db'}")
    await init_db(bind)
    yield make_session_factory(bind)
    await bind.dispose()


@pytest.fixture
def store(session_factory) -> AccessControlStore:
    return AccessControlStore(session_factory)


@pytest.fixture
async def access_engine(store) -> AccessControlEngine:
    engine = AccessControlEngine(store)
    await engine.refresh()
    return engine

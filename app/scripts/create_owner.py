"""
Script to bootstrap the organization owner.

The owner is the roster entry exempt from every route restriction; it is
created once per organization, before any access level exists.

    python -m app.scripts.create_owner --email owner@example.com --name "Owner"
"""

import argparse
import asyncio

import structlog
from sqlalchemy.ext.asyncio import create_async_engine

from app.core.config import get_settings
from app.core.database import init_db, make_session_factory
from app.core.logging import configure_logging
from app.services.access_store import AccessControlStore

settings = get_settings()
log = structlog.get_logger()


async def create_owner(email: str, name: str | None, database_url: str) -> None:
    bind = create_async_engine(database_url, future=True)
    await init_db(bind)

    store = AccessControlStore(make_session_factory(bind))
    owner = await store.upsert_owner(email.lower(), name)
    log.info("owner.ready", org_user_id=str(owner.id), email=owner.email)
    await bind.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create or promote the organization owner.")
    parser.add_argument("--email", required=True, help="Email address the owner signs in with")
    parser.add_argument("--name", default=None, help="Display name")
    parser.add_argument(
        "--database-url",
        default=settings.database_url,
        help="Database URL (default: PAINEL_DATABASE_URL)",
    )

    args = parser.parse_args()
    configure_logging("info", "text")
    asyncio.run(create_owner(args.email, args.name, args.database_url))

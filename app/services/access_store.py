"""
Access control store. Reads and writes access levels and org users.
"""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from typing import Any, Optional

import structlog
from sqlalchemy import delete, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlmodel import select

from app.access.errors import StoreError
from app.core.database import get_session_context
from app.models.access_level import AccessLevel
from app.models.org_user import OrgUser
from painel_shared.schemas.access_control import AccessLevelResponse, OrgUserResponse

log = structlog.get_logger()

ACCESS_LEVEL_FIELDS = frozenset({"name", "description", "allowed_routes", "is_admin"})
ORG_USER_FIELDS = frozenset({"name", "access_level_id"})

# Driver-level network errors (refused connection, timeout) are OSErrors
# that SQLAlchemy passes through unwrapped.
STORE_FAILURES = (SQLAlchemyError, OSError)


def _level_response(level: AccessLevel) -> AccessLevelResponse:
    return AccessLevelResponse(
        id=level.id,
        name=level.name,
        description=level.description,
        allowed_routes=list(level.allowed_routes or []),
        is_admin=bool(level.is_admin),
        created_at=level.created_at,
        updated_at=level.updated_at,
    )


def _user_response(user: OrgUser, level: Optional[AccessLevel]) -> OrgUserResponse:
    return OrgUserResponse(
        id=user.id,
        auth_user_id=user.auth_user_id,
        email=user.email,
        name=user.name,
        access_level_id=user.access_level_id,
        access_level=_level_response(level) if level is not None else None,
        is_owner=bool(user.is_owner),
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def _reject_unknown(fields: dict[str, Any], allowed: frozenset[str]) -> None:
    unknown = set(fields) - allowed
    if unknown:
        raise ValueError(f"Unknown fields: {', '.join(sorted(unknown))}")


class AccessControlStore:
    """
    Async adapter over the relational store.

    Every database failure surfaces as ``StoreError``, whether it comes from
    SQLAlchemy or from the network below the driver.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self, action: str):
        try:
            async with get_session_context(self._session_factory) as session:
                yield session
        except STORE_FAILURES as exc:
            raise StoreError(f"Failed to {action}: {exc}") from exc

    # --- Access levels ---

    async def list_access_levels(self) -> list[AccessLevelResponse]:
        async with self._session("list access levels") as session:
            result = await session.execute(select(AccessLevel).order_by(AccessLevel.name))
            return [_level_response(level) for level in result.scalars().all()]

    async def insert_access_level(
        self,
        name: str,
        description: Optional[str],
        allowed_routes: list[str],
        is_admin: bool,
    ) -> AccessLevelResponse:
        level = AccessLevel(
            name=name,
            description=description,
            allowed_routes=list(allowed_routes),
            is_admin=is_admin,
        )
        async with self._session("create access level") as session:
            session.add(level)
            await session.flush()
            await session.refresh(level)
            created = _level_response(level)

        log.info("access_level.created", access_level_id=str(created.id), name=name)
        return created

    async def update_access_level(self, level_id: uuid.UUID, fields: dict[str, Any]) -> None:
        _reject_unknown(fields, ACCESS_LEVEL_FIELDS)
        if not fields:
            return
        async with self._session("update access level") as session:
            await session.execute(
                update(AccessLevel).where(AccessLevel.id == level_id).values(**fields)
            )
        log.info("access_level.updated", access_level_id=str(level_id), fields=sorted(fields))

    async def delete_access_level(self, level_id: uuid.UUID) -> None:
        async with self._session("delete access level") as session:
            await session.execute(delete(AccessLevel).where(AccessLevel.id == level_id))
        log.info("access_level.deleted", access_level_id=str(level_id))

    # --- Org users ---

    async def list_org_users(self) -> list[OrgUserResponse]:
        """All roster entries, each with the access level the join found (if any)."""
        async with self._session("list org users") as session:
            result = await session.execute(
                select(OrgUser, AccessLevel)
                .outerjoin(AccessLevel, AccessLevel.id == OrgUser.access_level_id)
                .order_by(OrgUser.name, OrgUser.email)
            )
            return [_user_response(user, level) for user, level in result.all()]

    async def insert_org_user(
        self,
        email: str,
        name: Optional[str],
        access_level_id: Optional[uuid.UUID],
        *,
        is_owner: bool = False,
    ) -> OrgUserResponse:
        # auth_user_id is linked later, when the user first signs in
        user = OrgUser(
            email=email,
            name=name,
            access_level_id=access_level_id,
            auth_user_id=None,
            is_owner=is_owner,
        )
        async with self._session("create org user") as session:
            session.add(user)
            await session.flush()
            await session.refresh(user)
            created = _user_response(user, await self._get_level(session, access_level_id))

        log.info("org_user.created", org_user_id=str(created.id), is_owner=is_owner)
        return created

    async def update_org_user(self, user_id: uuid.UUID, fields: dict[str, Any]) -> None:
        _reject_unknown(fields, ORG_USER_FIELDS)
        if not fields:
            return
        async with self._session("update org user") as session:
            await session.execute(update(OrgUser).where(OrgUser.id == user_id).values(**fields))
        log.info("org_user.updated", org_user_id=str(user_id), fields=sorted(fields))

    async def delete_org_user(self, user_id: uuid.UUID) -> None:
        async with self._session("delete org user") as session:
            await session.execute(delete(OrgUser).where(OrgUser.id == user_id))
        log.info("org_user.deleted", org_user_id=str(user_id))

    async def upsert_owner(self, email: str, name: Optional[str] = None) -> OrgUserResponse:
        """Create the organization owner, or promote an existing roster entry."""
        async with self._session("bootstrap owner") as session:
            result = await session.execute(select(OrgUser).where(OrgUser.email == email))
            user = result.scalar_one_or_none()
            if user is None:
                user = OrgUser(email=email, name=name, is_owner=True)
            else:
                user.is_owner = True
                if name:
                    user.name = name
            session.add(user)
            await session.flush()
            await session.refresh(user)
            owner = _user_response(user, await self._get_level(session, user.access_level_id))

        log.info("org_user.owner_bootstrapped", org_user_id=str(owner.id))
        return owner

    @staticmethod
    async def _get_level(
        session: AsyncSession, level_id: Optional[uuid.UUID]
    ) -> Optional[AccessLevel]:
        if level_id is None:
            return None
        return await session.get(AccessLevel, level_id)

"""
Access control engine.

Holds the roster (every access level and org user loaded from the store),
resolves an authenticated email to its authorization state, and runs the
administrative mutations. Every successful write is followed by a full
reload; the store is the source of truth and the roster is advisory.

Authorization is fail-open: a caller with no roster entry, or whose entry
has no resolvable access level, may reach every route. Only a non-admin
access level with an explicit route whitelist restricts anyone.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass
from typing import Any, Optional, Union

import structlog

from app.access.errors import OwnerRemovalError, StoreError
from app.services.access_store import AccessControlStore
from painel_shared.schemas.access_control import AccessLevelResponse, OrgUserResponse
from painel_shared.schemas.common import ALL_ROUTES, DashboardRoute

log = structlog.get_logger()

RouteLike = Union[str, DashboardRoute]

_UNSET: Any = object()


def _route_path(route: RouteLike) -> str:
    return route.value if isinstance(route, DashboardRoute) else route


@dataclass(frozen=True)
class Roster:
    """Immutable snapshot of the store; replaced whole on every load."""

    access_levels: tuple[AccessLevelResponse, ...] = ()
    org_users: tuple[OrgUserResponse, ...] = ()

    def access_level(self, level_id: Optional[uuid.UUID]) -> Optional[AccessLevelResponse]:
        if level_id is None:
            return None
        for level in self.access_levels:
            if level.id == level_id:
                return level
        return None

    def org_user(self, user_id: uuid.UUID) -> Optional[OrgUserResponse]:
        for user in self.org_users:
            if user.id == user_id:
                return user
        return None

    def find_by_email(self, email: str) -> Optional[OrgUserResponse]:
        for user in self.org_users:
            if user.email == email:
                return user
        return None


@dataclass(frozen=True)
class AuthorizationState:
    """Resolved (current_user, access_level, is_admin) for one identity."""

    current_user: Optional[OrgUserResponse] = None
    access_level: Optional[AccessLevelResponse] = None
    deny_all: bool = False

    @property
    def is_owner(self) -> bool:
        return self.current_user is not None and self.current_user.is_owner

    @property
    def is_admin(self) -> bool:
        if self.deny_all:
            return False
        return self.is_owner or (self.access_level is not None and self.access_level.is_admin)

    @property
    def is_restricted(self) -> bool:
        """True only when a non-admin access level whitelists the routes."""
        return (
            self.current_user is not None
            and not self.current_user.is_owner
            and self.access_level is not None
            and not self.access_level.is_admin
        )

    @property
    def allowed_routes(self) -> list[str]:
        if self.deny_all:
            return []
        if not self.is_restricted:
            return list(ALL_ROUTES)
        return list(self.access_level.allowed_routes)

    def can_access(self, route: RouteLike) -> bool:
        if self.deny_all:
            return False
        if self.current_user is None:
            return True
        if self.current_user.is_owner:
            return True
        if self.access_level is None:
            return True
        if self.access_level.is_admin:
            return True
        return _route_path(route) in self.access_level.allowed_routes


class AccessControlEngine:
    """
    In-memory authorization view over an ``AccessControlStore``.

    Reloads are last-write-wins: concurrent reloads are neither serialized
    nor cancelled, and whichever finishes last replaces the roster.
    """

    def __init__(self, store: AccessControlStore, *, fail_closed: bool = False):
        self._store = store
        self._fail_closed = fail_closed
        self._roster = Roster()
        self._loaded = False
        self._pending_loads = 0
        self._error: Optional[str] = None

    # --- State ---

    @property
    def roster(self) -> Roster:
        return self._roster

    @property
    def access_levels(self) -> list[AccessLevelResponse]:
        return list(self._roster.access_levels)

    @property
    def org_users(self) -> list[OrgUserResponse]:
        return list(self._roster.org_users)

    @property
    def is_loading(self) -> bool:
        # True until the first reload ends and while any reload is in flight
        return not self._loaded or self._pending_loads > 0

    @property
    def error(self) -> Optional[str]:
        return self._error

    # --- Load ---

    async def refresh(self) -> None:
        """Reload both entity lists. Failures land in ``error``, never raise."""
        self._pending_loads += 1
        self._error = None
        try:
            levels, users = await asyncio.gather(
                self._store.list_access_levels(),
                self._store.list_org_users(),
            )
        except StoreError as exc:
            # A partial roster must not grant anything; drop it entirely
            self._roster = Roster()
            self._error = str(exc)
            log.error("access_control.load_failed", error=self._error)
        else:
            self._roster = Roster(access_levels=tuple(levels), org_users=tuple(users))
            log.info(
                "access_control.roster_loaded",
                access_levels=len(levels),
                org_users=len(users),
            )
        finally:
            self._pending_loads -= 1
            self._loaded = True

    # --- Resolution ---

    def resolve(self, email: Optional[str]) -> AuthorizationState:
        """Match ``email`` exactly against the roster and resolve its access level by id."""
        deny_all = self._fail_closed and self._error is not None
        if not email:
            return AuthorizationState(deny_all=deny_all)

        user = self._roster.find_by_email(email)
        if user is None:
            return AuthorizationState(deny_all=deny_all)

        # The nested level on the user is a join hint; the loaded list decides
        level = self._roster.access_level(user.access_level_id)
        return AuthorizationState(current_user=user, access_level=level, deny_all=deny_all)

    def can_access(self, email: Optional[str], route: RouteLike) -> bool:
        return self.resolve(email).can_access(route)

    # --- Access level mutations ---

    async def create_access_level(
        self,
        name: str,
        description: Optional[str],
        allowed_routes: list[RouteLike],
        is_admin: bool,
    ) -> AccessLevelResponse:
        level = await self._store.insert_access_level(
            name, description, [_route_path(r) for r in allowed_routes], is_admin
        )
        await self.refresh()
        return level

    async def update_access_level(self, level_id: uuid.UUID, updates: dict[str, Any]) -> None:
        fields = dict(updates)
        if fields.get("allowed_routes") is not None:
            fields["allowed_routes"] = [_route_path(r) for r in fields["allowed_routes"]]
        await self._store.update_access_level(level_id, fields)
        await self.refresh()

    async def delete_access_level(self, level_id: uuid.UUID) -> None:
        await self._store.delete_access_level(level_id)
        await self.refresh()

    # --- Org user mutations ---

    async def create_org_user(
        self,
        email: str,
        name: Optional[str],
        access_level_id: Optional[uuid.UUID],
    ) -> OrgUserResponse:
        user = await self._store.insert_org_user(email.lower(), name, access_level_id)
        await self.refresh()
        return user

    async def update_org_user(
        self,
        user_id: uuid.UUID,
        *,
        name: Optional[str] = _UNSET,
        access_level_id: Optional[uuid.UUID] = _UNSET,
    ) -> None:
        fields: dict[str, Any] = {}
        if name is not _UNSET:
            fields["name"] = name
        if access_level_id is not _UNSET:
            fields["access_level_id"] = access_level_id
        await self._store.update_org_user(user_id, fields)
        await self.refresh()

    async def delete_org_user(self, user_id: uuid.UUID) -> None:
        user = self._roster.org_user(user_id)
        if user is not None and user.is_owner:
            raise OwnerRemovalError("The organization owner cannot be removed")
        await self._store.delete_org_user(user_id)
        await self.refresh()

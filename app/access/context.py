"""
Application-wide access to the access control engine.

``install_access_control`` is the provider: it attaches one engine to the
application at startup. Request handlers reach it through
``get_access_control``, which pairs the shared engine with the caller's
resolved authorization state.
"""

from __future__ import annotations

import uuid
from typing import Any, Optional

from fastapi import Depends, FastAPI, HTTPException, Request

from app.access.engine import AccessControlEngine, AuthorizationState, RouteLike
from app.access.errors import AccessControlConfigurationError
from app.core.auth import AuthenticatedIdentity, get_identity, require_identity
from painel_shared.schemas.access_control import AccessLevelResponse, OrgUserResponse
from painel_shared.schemas.common import DashboardRoute

_STATE_KEY = "access_control"


def install_access_control(app: FastAPI, engine: AccessControlEngine) -> None:
    setattr(app.state, _STATE_KEY, engine)


def get_access_control_engine(app: FastAPI) -> AccessControlEngine:
    engine = getattr(app.state, _STATE_KEY, None)
    if engine is None:
        raise AccessControlConfigurationError(
            "Access control used before install_access_control() was called on the app"
        )
    return engine


class AccessControlContext:
    """Per-request view: the shared engine plus the caller's resolved state."""

    def __init__(
        self,
        engine: AccessControlEngine,
        identity: Optional[AuthenticatedIdentity] = None,
    ):
        self._engine = engine
        self.identity = identity
        self._state = engine.resolve(identity.email if identity else None)

    @property
    def state(self) -> AuthorizationState:
        return self._state

    @property
    def current_user(self) -> Optional[OrgUserResponse]:
        return self._state.current_user

    @property
    def access_level(self) -> Optional[AccessLevelResponse]:
        return self._state.access_level

    @property
    def allowed_routes(self) -> list[str]:
        return self._state.allowed_routes

    @property
    def is_admin(self) -> bool:
        return self._state.is_admin

    @property
    def is_owner(self) -> bool:
        return self._state.is_owner

    def can_access(self, route: RouteLike) -> bool:
        return self._state.can_access(route)

    @property
    def access_levels(self) -> list[AccessLevelResponse]:
        return self._engine.access_levels

    @property
    def org_users(self) -> list[OrgUserResponse]:
        return self._engine.org_users

    @property
    def is_loading(self) -> bool:
        return self._engine.is_loading

    @property
    def error(self) -> Optional[str]:
        return self._engine.error

    async def refresh(self) -> None:
        await self._engine.refresh()
        self._reresolve()

    # Mutations re-resolve so the caller sees its own post-write state

    async def create_access_level(
        self,
        name: str,
        description: Optional[str],
        allowed_routes: list[RouteLike],
        is_admin: bool,
    ) -> AccessLevelResponse:
        level = await self._engine.create_access_level(name, description, allowed_routes, is_admin)
        self._reresolve()
        return level

    async def update_access_level(self, level_id: uuid.UUID, updates: dict[str, Any]) -> None:
        await self._engine.update_access_level(level_id, updates)
        self._reresolve()

    async def delete_access_level(self, level_id: uuid.UUID) -> None:
        await self._engine.delete_access_level(level_id)
        self._reresolve()

    async def create_org_user(
        self, email: str, name: Optional[str], access_level_id: Optional[uuid.UUID]
    ) -> OrgUserResponse:
        user = await self._engine.create_org_user(email, name, access_level_id)
        self._reresolve()
        return user

    async def update_org_user(self, user_id: uuid.UUID, **updates: Any) -> None:
        await self._engine.update_org_user(user_id, **updates)
        self._reresolve()

    async def delete_org_user(self, user_id: uuid.UUID) -> None:
        await self._engine.delete_org_user(user_id)
        self._reresolve()

    def _reresolve(self) -> None:
        self._state = self._engine.resolve(self.identity.email if self.identity else None)


async def get_access_control(
    request: Request,
    identity: Optional[AuthenticatedIdentity] = Depends(get_identity),
) -> AccessControlContext:
    """FastAPI dependency for the caller's access control context."""
    return AccessControlContext(get_access_control_engine(request.app), identity)


def require_route(route: DashboardRoute):
    """Dependency factory: the caller must be signed in and allowed on ``route``."""

    async def dependency(
        identity: AuthenticatedIdentity = Depends(require_identity),
        ctx: AccessControlContext = Depends(get_access_control),
    ) -> AccessControlContext:
        if not ctx.can_access(route):
            raise HTTPException(status_code=403, detail=f"Access to {route.value} required")
        return ctx

    return dependency


# Managing access levels and users is gated by the settings page
require_settings_access = require_route(DashboardRoute.SETTINGS)

"""
Org User API endpoints.

GET    /api/v1/org-users           : List the organization roster
POST   /api/v1/org-users           : Invite a user
PATCH  /api/v1/org-users/{userId}  : Change name or access level
DELETE /api/v1/org-users/{userId}  : Remove a user (never the owner)
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from app.access.context import AccessControlContext, require_settings_access
from app.api.v1.errors import access_control_errors
from painel_shared.schemas.access_control import (
    OrgUserCreateRequest,
    OrgUserListResponse,
    OrgUserResponse,
    OrgUserUpdateRequest,
)

router = APIRouter()


def _ensure_level(ctx: AccessControlContext, level_id: Optional[uuid.UUID]) -> None:
    if level_id is not None and not any(level.id == level_id for level in ctx.access_levels):
        raise HTTPException(status_code=422, detail="Unknown access level")


def _ensure_exists(ctx: AccessControlContext, user_id: uuid.UUID) -> None:
    if not any(user.id == user_id for user in ctx.org_users):
        raise HTTPException(status_code=404, detail="User not found in this organization")


@router.get("", response_model=OrgUserListResponse)
async def list_org_users(ctx: AccessControlContext = Depends(require_settings_access)):
    return OrgUserListResponse(data=ctx.org_users)


@router.post("", response_model=OrgUserResponse, status_code=201)
async def create_org_user(
    body: OrgUserCreateRequest,
    ctx: AccessControlContext = Depends(require_settings_access),
):
    """Add a user to the roster. They are linked to their login on first sign-in."""
    _ensure_level(ctx, body.access_level_id)
    with access_control_errors():
        return await ctx.create_org_user(body.email, body.name, body.access_level_id)


@router.patch("/{userId}", status_code=204)
async def update_org_user(
    userId: uuid.UUID,
    body: OrgUserUpdateRequest,
    ctx: AccessControlContext = Depends(require_settings_access),
):
    """Rename a user or (re)assign their access level; null unassigns it."""
    _ensure_exists(ctx, userId)
    updates = body.model_dump(exclude_unset=True)
    if updates.get("name", "") is None:
        del updates["name"]
    _ensure_level(ctx, updates.get("access_level_id"))
    with access_control_errors():
        await ctx.update_org_user(userId, **updates)


@router.delete("/{userId}", status_code=204)
async def delete_org_user(
    userId: uuid.UUID,
    ctx: AccessControlContext = Depends(require_settings_access),
):
    """Remove a user from the roster. The owner cannot be removed."""
    _ensure_exists(ctx, userId)
    with access_control_errors():
        await ctx.delete_org_user(userId)

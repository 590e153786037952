"""
Access Level API endpoints.

GET    /api/v1/access-levels            : List access levels
POST   /api/v1/access-levels            : Create an access level
PATCH  /api/v1/access-levels/{levelId}  : Partially update an access level
DELETE /api/v1/access-levels/{levelId}  : Delete an access level
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException

from app.access.context import AccessControlContext, require_settings_access
from app.api.v1.errors import access_control_errors
from painel_shared.schemas.access_control import (
    AccessLevelCreateRequest,
    AccessLevelListResponse,
    AccessLevelResponse,
    AccessLevelUpdateRequest,
)

router = APIRouter()

# Columns that cannot hold NULL; an explicit null in the body is ignored
_NON_NULLABLE = {"name", "allowed_routes", "is_admin"}


def _ensure_exists(ctx: AccessControlContext, level_id: uuid.UUID) -> None:
    if not any(level.id == level_id for level in ctx.access_levels):
        raise HTTPException(status_code=404, detail="Access level not found")


@router.get("", response_model=AccessLevelListResponse)
async def list_access_levels(ctx: AccessControlContext = Depends(require_settings_access)):
    return AccessLevelListResponse(data=ctx.access_levels)


@router.post("", response_model=AccessLevelResponse, status_code=201)
async def create_access_level(
    body: AccessLevelCreateRequest,
    ctx: AccessControlContext = Depends(require_settings_access),
):
    """Create an access level. Admin levels ignore their route list."""
    with access_control_errors():
        return await ctx.create_access_level(
            body.name, body.description, body.allowed_routes, body.is_admin
        )


@router.patch("/{levelId}", status_code=204)
async def update_access_level(
    levelId: uuid.UUID,
    body: AccessLevelUpdateRequest,
    ctx: AccessControlContext = Depends(require_settings_access),
):
    """Write only the fields present in the body."""
    _ensure_exists(ctx, levelId)
    updates = {
        key: value
        for key, value in body.model_dump(exclude_unset=True).items()
        if value is not None or key not in _NON_NULLABLE
    }
    with access_control_errors():
        await ctx.update_access_level(levelId, updates)


@router.delete("/{levelId}", status_code=204)
async def delete_access_level(
    levelId: uuid.UUID,
    ctx: AccessControlContext = Depends(require_settings_access),
):
    """Delete an access level. Users still pointing at it become unrestricted."""
    _ensure_exists(ctx, levelId)
    with access_control_errors():
        await ctx.delete_access_level(levelId)

"""
Access control API: the caller's resolved permissions and the route catalog.

GET  /api/v1/access-control/me         : Caller's authorization state
GET  /api/v1/access-control/can-access : Check a single route
GET  /api/v1/access-control/routes     : Route catalog and public routes
POST /api/v1/access-control/refresh    : Reload the roster from the store
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.access.context import AccessControlContext, get_access_control, require_settings_access
from painel_shared.schemas.access_control import (
    AuthorizationStateResponse,
    CanAccessResponse,
    RosterSummaryResponse,
    RouteCatalogResponse,
)
from painel_shared.schemas.common import PUBLIC_ROUTES, ROUTE_CATALOG, parse_route

router = APIRouter()


@router.get("/me", response_model=AuthorizationStateResponse)
async def get_my_access(ctx: AccessControlContext = Depends(get_access_control)):
    """Resolved authorization state for the signed-in caller."""
    return AuthorizationStateResponse(
        current_user=ctx.current_user,
        access_level=ctx.access_level,
        allowed_routes=ctx.allowed_routes,
        is_admin=ctx.is_admin,
        is_owner=ctx.is_owner,
        is_loading=ctx.is_loading,
        error=ctx.error,
    )


@router.get("/can-access", response_model=CanAccessResponse)
async def can_access(
    route: str = Query(min_length=1),
    ctx: AccessControlContext = Depends(get_access_control),
):
    """Whether the caller may open ``route``."""
    return CanAccessResponse(
        route=route,
        allowed=ctx.can_access(route),
        known=parse_route(route) is not None,
    )


@router.get("/routes", response_model=RouteCatalogResponse)
async def list_routes():
    """Every dashboard route that can appear in an access level."""
    return RouteCatalogResponse(data=ROUTE_CATALOG, public_routes=sorted(PUBLIC_ROUTES))


@router.post("/refresh", response_model=RosterSummaryResponse)
async def refresh_roster(ctx: AccessControlContext = Depends(require_settings_access)):
    """Reload access levels and org users. Load errors are reported, not raised."""
    await ctx.refresh()
    return RosterSummaryResponse(
        access_levels=len(ctx.access_levels),
        org_users=len(ctx.org_users),
        error=ctx.error,
    )

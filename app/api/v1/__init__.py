"""
API v1 Router
"""

from fastapi import APIRouter
from . import access_control, access_levels, org_users

router = APIRouter()

router.include_router(access_control.router, prefix="/access-control", tags=["Access Control"])
router.include_router(access_levels.router, prefix="/access-levels", tags=["Access Levels"])
router.include_router(org_users.router, prefix="/org-users", tags=["Org Users"])


@router.get("/", tags=["API"])
async def api_root():
    """API root. Returns version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/access-control/me",
            "/access-control/can-access",
            "/access-control/routes",
            "/access-control/refresh",
            "/access-levels",
            "/org-users",
        ],
    }

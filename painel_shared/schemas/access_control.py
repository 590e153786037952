"""Access control schemas: access levels, org users, resolved authorization."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, EmailStr, Field, UUID4

from .common import DashboardRoute, RouteInfo


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class AccessLevelCreateRequest(BaseModel):
    """Create a named permission profile."""
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = ""
    allowed_routes: List[DashboardRoute] = Field(default_factory=list)
    is_admin: bool = False


class AccessLevelUpdateRequest(BaseModel):
    """Partial update; only fields present in the body are written."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    allowed_routes: Optional[List[DashboardRoute]] = None
    is_admin: Optional[bool] = None


class OrgUserCreateRequest(BaseModel):
    """Invite a user into the organization roster."""
    email: EmailStr
    name: Optional[str] = Field(default=None, max_length=200)
    access_level_id: Optional[UUID4] = None


class OrgUserUpdateRequest(BaseModel):
    """Change a roster entry's name or access level. An explicit null unassigns the level."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    access_level_id: Optional[UUID4] = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class AccessLevelResponse(BaseModel):
    """Single access level."""
    id: UUID4
    name: str
    description: Optional[str] = None
    allowed_routes: List[str] = Field(default_factory=list)
    is_admin: bool = False
    created_at: datetime
    updated_at: datetime


class OrgUserResponse(BaseModel):
    """Single roster entry. ``access_level`` is the store's join result, not authoritative."""
    id: UUID4
    auth_user_id: Optional[UUID4] = None
    email: str
    name: Optional[str] = None
    access_level_id: Optional[UUID4] = None
    access_level: Optional[AccessLevelResponse] = None
    is_owner: bool = False
    created_at: datetime
    updated_at: datetime


class AccessLevelListResponse(BaseModel):
    data: List[AccessLevelResponse]


class OrgUserListResponse(BaseModel):
    data: List[OrgUserResponse]


class AuthorizationStateResponse(BaseModel):
    """The caller's resolved authorization state."""
    current_user: Optional[OrgUserResponse] = None
    access_level: Optional[AccessLevelResponse] = None
    allowed_routes: List[str]
    is_admin: bool
    is_owner: bool
    is_loading: bool
    error: Optional[str] = None


class CanAccessResponse(BaseModel):
    route: str
    allowed: bool
    # False for paths outside the dashboard route catalog
    known: bool


class RouteCatalogResponse(BaseModel):
    data: List[RouteInfo]
    public_routes: List[str]


class RosterSummaryResponse(BaseModel):
    """Result of a roster reload."""
    access_levels: int
    org_users: int
    error: Optional[str] = None

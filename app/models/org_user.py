"""Organization roster entry."""

from typing import Optional
import uuid

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class OrgUser(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "org_users"

    auth_user_id: Optional[uuid.UUID] = Field(default=None, index=True)
    email: str = Field(nullable=False, unique=True, index=True)
    name: Optional[str] = None
    # No foreign key: deleting a level leaves the reference dangling
    access_level_id: Optional[uuid.UUID] = Field(default=None, index=True)
    is_owner: bool = Field(default=False, nullable=False)

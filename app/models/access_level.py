"""Access level model: a named route whitelist or an admin profile."""

from typing import Optional

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class AccessLevel(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "access_levels"

    name: str = Field(nullable=False, index=True)
    description: Optional[str] = None
    allowed_routes: list[str] = Field(default_factory=list, sa_type=sa.JSON, nullable=False)
    is_admin: bool = Field(default=False, nullable=False)

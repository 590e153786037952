# Imported here so Alembic sees every table in the metadata.
from .base import UUIDMixin, TimestampMixin  # noqa: F401
from .access_level import AccessLevel  # noqa: F401
from .org_user import OrgUser  # noqa: F401

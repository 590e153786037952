"""Create access_levels and org_users tables

Revision ID: 0001_access_control
Revises: 
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '0001_access_control'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('access_levels',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('allowed_routes', sa.JSON(), server_default='[]', nullable=False),
        sa.Column('is_admin', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_access_levels_id'), 'access_levels', ['id'], unique=False)
    op.create_index(op.f('ix_access_levels_name'), 'access_levels', ['name'], unique=False)

    # No foreign key on access_level_id: deleting a level leaves dangling references
    op.create_table('org_users',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('auth_user_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('access_level_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('is_owner', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_org_users_id'), 'org_users', ['id'], unique=False)
    op.create_index(op.f('ix_org_users_email'), 'org_users', ['email'], unique=True)
    op.create_index(op.f('ix_org_users_auth_user_id'), 'org_users', ['auth_user_id'], unique=False)
    op.create_index(op.f('ix_org_users_access_level_id'), 'org_users', ['access_level_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_org_users_access_level_id'), table_name='org_users')
    op.drop_index(op.f('ix_org_users_auth_user_id'), table_name='org_users')
    op.drop_index(op.f('ix_org_users_email'), table_name='org_users')
    op.drop_index(op.f('ix_org_users_id'), table_name='org_users')
    op.drop_table('org_users')
    op.drop_index(op.f('ix_access_levels_name'), table_name='access_levels')
    op.drop_index(op.f('ix_access_levels_id'), table_name='access_levels')
    op.drop_table('access_levels')

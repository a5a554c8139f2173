"""create inventory and ai settings tables

Revision ID: a41d7c2e9b10
Revises:
Create Date: 2026-10-19 10:00:00.000000

Initial schema:
1. users, locations, location_members (who may touch which inventory)
2. areas, bins (the inventory; bins.short_code is printed on labels)
3. user_ai_settings (one provider configuration per user)
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a41d7c2e9b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables."""
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('display_name', sa.String(length=100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table(
        'locations',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'location_members',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('location_id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['location_id'], ['locations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('location_id', 'user_id', name='uq_location_member'),
    )
    op.create_index(op.f('ix_location_members_location_id'), 'location_members', ['location_id'], unique=False)
    op.create_index(op.f('ix_location_members_user_id'), 'location_members', ['user_id'], unique=False)

    op.create_table(
        'areas',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('location_id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['location_id'], ['locations.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('location_id', 'name', name='uq_area_location_name'),
    )
    op.create_index(op.f('ix_areas_location_id'), 'areas', ['location_id'], unique=False)

    op.create_table(
        'bins',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('location_id', sa.String(length=36), nullable=False),
        sa.Column('area_id', sa.String(length=36), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),

        # Contents
        sa.Column('items', sa.JSON(), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=False),
        sa.Column('icon', sa.String(length=50), nullable=False),
        sa.Column('color', sa.String(length=50), nullable=False),

        # Label code, reused when a deleted bin is restored
        sa.Column('short_code', sa.String(length=6), nullable=False),

        sa.Column('created_by', sa.String(length=36), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['location_id'], ['locations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['area_id'], ['areas.id'], ondelete='SET NULL'),
        sa.UniqueConstraint('short_code'),
    )
    op.create_index(op.f('ix_bins_location_id'), 'bins', ['location_id'], unique=False)

    op.create_table(
        'user_ai_settings',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('provider', sa.String(length=30), nullable=False),
        sa.Column('api_key', sa.Text(), nullable=False),
        sa.Column('model', sa.String(length=255), nullable=False),
        sa.Column('endpoint_url', sa.String(length=500), nullable=True),
        sa.Column('custom_prompt', sa.Text(), nullable=True),
        sa.Column('command_prompt', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('user_id'),
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table('user_ai_settings')
    op.drop_index(op.f('ix_bins_location_id'), table_name='bins')
    op.drop_table('bins')
    op.drop_index(op.f('ix_areas_location_id'), table_name='areas')
    op.drop_table('areas')
    op.drop_index(op.f('ix_location_members_user_id'), table_name='location_members')
    op.drop_index(op.f('ix_location_members_location_id'), table_name='location_members')
    op.drop_table('location_members')
    op.drop_table('locations')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')

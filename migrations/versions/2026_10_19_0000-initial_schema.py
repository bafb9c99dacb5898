"""Initial schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create initial database schema:
    - alias_records table: short code -> target URL, owner and expiry
    - api_keys table: hashed, revocable credentials for the public API
    """
    bind = op.get_bind()
    existing_tables = inspect(bind).get_table_names()

    if 'alias_records' not in existing_tables:
        op.create_table(
            'alias_records',
            sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
            sa.Column('short_code', sa.String(length=20), nullable=False),
            sa.Column('target_url', sa.Text(), nullable=False),
            sa.Column('owner_id', sa.String(length=64), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )

        # The unique index is what arbitrates concurrent allocations
        op.create_index(
            'ix_alias_records_short_code',
            'alias_records',
            ['short_code'],
            unique=True
        )
        op.create_index(
            'ix_alias_records_owner_id',
            'alias_records',
            ['owner_id']
        )
        op.create_index(
            'ix_alias_records_created_at',
            'alias_records',
            ['created_at']
        )
        op.create_index(
            'ix_alias_records_expires_at',
            'alias_records',
            ['expires_at']
        )

    if 'api_keys' not in existing_tables:
        op.create_table(
            'api_keys',
            sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
            sa.Column('key_hash', sa.String(length=64), nullable=False),
            sa.Column('label', sa.String(length=100), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(
            'ix_api_keys_key_hash',
            'api_keys',
            ['key_hash'],
            unique=True
        )


def downgrade() -> None:
    """Drop all tables and indexes."""
    op.drop_index('ix_api_keys_key_hash', table_name='api_keys')
    op.drop_table('api_keys')

    op.drop_index('ix_alias_records_expires_at', table_name='alias_records')
    op.drop_index('ix_alias_records_created_at', table_name='alias_records')
    op.drop_index('ix_alias_records_owner_id', table_name='alias_records')
    op.drop_index('ix_alias_records_short_code', table_name='alias_records')
    op.drop_table('alias_records')

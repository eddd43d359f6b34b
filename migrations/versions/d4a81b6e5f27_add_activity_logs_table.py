"""add_activity_logs_table

Revision ID: d4a81b6e5f27
Revises: 7c2f9a41d0e3
Create Date: 2026-03-09 16:05:52.611840

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = 'd4a81b6e5f27'
down_revision: Union[str, Sequence[str], None] = '7c2f9a41d0e3'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create activity_logs table."""
    op.create_table('activity_logs',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('actor_id', sa.String(length=128), nullable=False),
        sa.Column('actor_name', sa.String(length=255), nullable=True),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('group_tag', sa.String(length=100), nullable=True),
        sa.Column('task_id', sa.UUID(), nullable=True),
        sa.Column('task_title', sa.String(length=500), nullable=True),
        sa.Column('from_status', sa.String(length=20), nullable=True),
        sa.Column('to_status', sa.String(length=20), nullable=True),
        sa.Column('target_user_id', sa.String(length=128), nullable=True),
        sa.Column('changes', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column(
            'metadata',
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=True,
            server_default='{}',
        ),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_activity_logs_actor_id', 'activity_logs', ['actor_id'], unique=False)
    op.create_index('ix_activity_logs_group_tag', 'activity_logs', ['group_tag'], unique=False)
    op.create_index('ix_activity_logs_created_at', 'activity_logs', ['created_at'], unique=False)


def downgrade() -> None:
    """Drop activity_logs table."""
    op.drop_index('ix_activity_logs_created_at', table_name='activity_logs')
    op.drop_index('ix_activity_logs_group_tag', table_name='activity_logs')
    op.drop_index('ix_activity_logs_actor_id', table_name='activity_logs')
    op.drop_table('activity_logs')

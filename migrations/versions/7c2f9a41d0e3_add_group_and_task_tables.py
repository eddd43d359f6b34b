"""add_group_and_task_tables

Revision ID: 7c2f9a41d0e3
Revises:
Create Date: 2026-03-02 10:41:17.204118

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '7c2f9a41d0e3'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create groups, group_collaborators and tasks tables."""
    op.create_table('groups',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('tag', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('color', sa.String(length=20), nullable=False, server_default='#6366f1'),
        sa.Column('owner_id', sa.String(length=128), nullable=False),
        sa.Column('owner_name', sa.String(length=255), nullable=True),
        sa.Column('owner_email', sa.String(length=255), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tag', name='uq_groups_tag'),
    )
    op.create_index('ix_groups_owner_id', 'groups', ['owner_id'], unique=False)

    op.create_table('group_collaborators',
        sa.Column('group_id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('picture', sa.String(length=500), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='viewer'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('invited_at', sa.DateTime(), nullable=False),
        sa.Column('accepted_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint("role IN ('viewer', 'editor', 'admin')", name='ck_group_collaborators_role'),
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'declined')", name='ck_group_collaborators_status'
        ),
        sa.ForeignKeyConstraint(['group_id'], ['groups.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('group_id', 'user_id'),
    )
    op.create_index(
        'ix_group_collaborators_user_id', 'group_collaborators', ['user_id'], unique=False
    )

    op.create_table('tasks',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('owner_id', sa.String(length=128), nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('category', sa.String(length=100), nullable=False, server_default='General'),
        sa.Column('priority', sa.String(length=10), nullable=False, server_default='Medium'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('due_date', sa.DateTime(), nullable=True),
        sa.Column('progress', sa.Integer(), nullable=True),
        sa.Column('group_tag', sa.String(length=100), nullable=True),
        sa.Column(
            'assigned_to',
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default='[]',
        ),
        sa.Column(
            'assignee_snapshots',
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default='[]',
        ),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint("priority IN ('High', 'Medium', 'Low')", name='ck_tasks_priority'),
        sa.CheckConstraint(
            "status IN ('pending', 'in-progress', 'completed')", name='ck_tasks_status'
        ),
        sa.CheckConstraint(
            'progress IS NULL OR (progress >= 0 AND progress <= 100)', name='ck_tasks_progress'
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_tasks_owner_id', 'tasks', ['owner_id'], unique=False)
    op.create_index('ix_tasks_group_tag', 'tasks', ['group_tag'], unique=False)
    # Aggregate view filters group tasks by assignee
    op.execute(
        "CREATE INDEX ix_tasks_assigned_to ON tasks USING gin (assigned_to jsonb_path_ops);"
    )


def downgrade() -> None:
    """Drop tasks, group_collaborators and groups tables."""
    op.execute("DROP INDEX IF EXISTS ix_tasks_assigned_to;")
    op.drop_index('ix_tasks_group_tag', table_name='tasks')
    op.drop_index('ix_tasks_owner_id', table_name='tasks')
    op.drop_table('tasks')
    op.drop_index('ix_group_collaborators_user_id', table_name='group_collaborators')
    op.drop_table('group_collaborators')
    op.drop_index('ix_groups_owner_id', table_name='groups')
    op.drop_table('groups')

"""create taskboard tables

Revision ID: 3f9c2a7d1e04
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c2a7d1e04'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


ID = sa.String(27, collation='C')


def _timestamps():
    return [
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('deleted_at', sa.TIMESTAMP(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    """Create users, sessions, lists, headings, statuses, tasks, tags."""

    # 1. users
    op.create_table(
        'users',
        sa.Column('id', ID, primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        *_timestamps(),
    )
    op.create_index(
        'uq_users_email_live', 'users', [sa.text('lower(email)')], unique=True,
        postgresql_where=sa.text('deleted_at IS NULL'),
    )

    # 2. user_devices
    op.create_table(
        'user_devices',
        sa.Column('id', ID, primary_key=True),
        sa.Column('user_id', ID, sa.ForeignKey('users.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('user_agent', sa.String(512), nullable=False),
        sa.Column('ip', sa.String(64), nullable=False),
        sa.Column('detached', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('latest_login_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('detached_at', sa.TIMESTAMP(timezone=True), nullable=True),
    )
    op.create_index(
        'uq_user_devices_active', 'user_devices', ['user_id', 'user_agent'], unique=True,
        postgresql_where=sa.text('detached IS false'),
    )

    # 3. sessions
    op.create_table(
        'sessions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', ID, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('device_id', ID, sa.ForeignKey('user_devices.id', ondelete='CASCADE'), nullable=False),
        sa.Column('refresh_token', sa.String(255), nullable=False, unique=True),
        sa.Column('last_visit_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('expires_at', sa.TIMESTAMP(timezone=True), nullable=False),
    )

    # 4. lists
    op.create_table(
        'lists',
        sa.Column('id', ID, primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('user_id', ID, sa.ForeignKey('users.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('is_default', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index(
        'ix_lists_user_id_live', 'lists', ['user_id'],
        postgresql_where=sa.text('deleted_at IS NULL'),
    )
    op.create_index(
        'uq_lists_default_per_user', 'lists', ['user_id'], unique=True,
        postgresql_where=sa.text('is_default IS true AND deleted_at IS NULL'),
    )

    # 5. headings
    op.create_table(
        'headings',
        sa.Column('id', ID, primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('list_id', ID, sa.ForeignKey('lists.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('user_id', ID, sa.ForeignKey('users.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('is_default', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index(
        'ix_headings_user_id_live', 'headings', ['user_id'],
        postgresql_where=sa.text('deleted_at IS NULL'),
    )
    op.create_index('ix_headings_list_id', 'headings', ['list_id'])
    op.create_index(
        'uq_headings_default_per_list', 'headings', ['list_id'], unique=True,
        postgresql_where=sa.text('is_default IS true AND deleted_at IS NULL'),
    )

    # 6. statuses (fixed catalogue)
    statuses = op.create_table(
        'statuses',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('title', sa.String(50), nullable=False, unique=True),
    )
    op.bulk_insert(statuses, [
        {'id': 1, 'title': 'Not started'},
        {'id': 2, 'title': 'Planned'},
        {'id': 3, 'title': 'Completed'},
        {'id': 4, 'title': 'Archived'},
    ])

    # 7. tasks
    op.create_table(
        'tasks',
        sa.Column('id', ID, primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('deadline', sa.Date(), nullable=True),
        sa.Column('start_time', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('end_time', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('status_id', sa.Integer(), nullable=False),
        sa.Column('list_id', ID, nullable=False),
        sa.Column('heading_id', ID, nullable=False),
        sa.Column('user_id', ID, nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['status_id'], ['statuses.id'], name='fk_tasks_status_id', ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['list_id'], ['lists.id'], name='fk_tasks_list_id', ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['heading_id'], ['headings.id'], name='fk_tasks_heading_id', ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_tasks_user_id', ondelete='RESTRICT'),
        sa.CheckConstraint(
            "(start_time IS NULL AND end_time IS NULL) OR "
            "(start_time IS NOT NULL AND end_time IS NOT NULL AND start_time < end_time)",
            name='ck_tasks_time_range',
        ),
    )
    op.create_index(
        'ix_tasks_user_id_live', 'tasks', ['user_id'],
        postgresql_where=sa.text('deleted_at IS NULL'),
    )
    op.create_index('ix_tasks_user_start_date', 'tasks', ['user_id', 'start_date'])
    op.create_index('ix_tasks_user_deadline', 'tasks', ['user_id', 'deadline'])
    op.create_index('ix_tasks_heading_id', 'tasks', ['heading_id'])
    op.create_index('ix_tasks_list_id', 'tasks', ['list_id'])

    # 8. tags
    op.create_table(
        'tags',
        sa.Column('id', ID, primary_key=True),
        sa.Column('title', sa.String(50), nullable=False),
        sa.Column('user_id', ID, sa.ForeignKey('users.id', ondelete='RESTRICT'), nullable=False),
        *_timestamps(),
    )
    op.create_index(
        'ix_tags_user_id_live', 'tags', ['user_id'],
        postgresql_where=sa.text('deleted_at IS NULL'),
    )
    op.create_index(
        'uq_tags_user_title_live', 'tags', ['user_id', sa.text('lower(title)')], unique=True,
        postgresql_where=sa.text('deleted_at IS NULL'),
    )

    # 9. task_tags
    op.create_table(
        'task_tags',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('task_id', ID, sa.ForeignKey('tasks.id', ondelete='CASCADE'), nullable=False),
        sa.Column('tag_id', ID, sa.ForeignKey('tags.id', ondelete='RESTRICT'), nullable=False),
        sa.UniqueConstraint('task_id', 'tag_id', name='uq_task_tags_task_tag'),
    )
    op.create_index('ix_task_tags_tag_id', 'task_tags', ['tag_id'])


def downgrade() -> None:
    """Drop all taskboard tables."""
    op.drop_index('ix_task_tags_tag_id', table_name='task_tags')
    op.drop_table('task_tags')

    op.drop_index('uq_tags_user_title_live', table_name='tags')
    op.drop_index('ix_tags_user_id_live', table_name='tags')
    op.drop_table('tags')

    op.drop_index('ix_tasks_list_id', table_name='tasks')
    op.drop_index('ix_tasks_heading_id', table_name='tasks')
    op.drop_index('ix_tasks_user_deadline', table_name='tasks')
    op.drop_index('ix_tasks_user_start_date', table_name='tasks')
    op.drop_index('ix_tasks_user_id_live', table_name='tasks')
    op.drop_table('tasks')

    op.drop_table('statuses')

    op.drop_index('uq_headings_default_per_list', table_name='headings')
    op.drop_index('ix_headings_list_id', table_name='headings')
    op.drop_index('ix_headings_user_id_live', table_name='headings')
    op.drop_table('headings')

    op.drop_index('uq_lists_default_per_user', table_name='lists')
    op.drop_index('ix_lists_user_id_live', table_name='lists')
    op.drop_table('lists')

    op.drop_table('sessions')

    op.drop_index('uq_user_devices_active', table_name='user_devices')
    op.drop_table('user_devices')

    op.drop_index('uq_users_email_live', table_name='users')
    op.drop_table('users')

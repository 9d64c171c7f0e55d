"""initial schema: users, categories, tasks, shares, refresh sessions

Revision ID: 3f1a9c2d7b10
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = '3f1a9c2d7b10'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=30), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column('password_hash', sa.String(length=254), nullable=False),
        sa.Column(
            'role',
            sa.Enum('user', 'admin', name='enum_user_role', native_enum=False, create_constraint=True),
            server_default='user',
            nullable=False,
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_users')),
        sa.UniqueConstraint('email', name='uq_users_email'),
        sa.UniqueConstraint('username', name='uq_users_username'),
    )
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('ix_users_username', 'users', ['username'])

    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('color', sa.String(length=7), nullable=False),
        sa.Column('task_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('task_count >= 0', name=op.f('ck_categories_task_count_non_negative')),
        sa.ForeignKeyConstraint(
            ['owner_id'], ['users.id'],
            name=op.f('fk_categories_owner_id_users'), ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_categories')),
        sa.UniqueConstraint('owner_id', 'name', name='uq_categories_owner_name'),
    )
    op.create_index('ix_categories_owner_id', 'categories', ['owner_id'])

    op.create_table(
        'tasks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column(
            'status',
            sa.Enum('todo', 'in-progress', 'completed', 'archived', name='enum_task_status',
                    native_enum=False, create_constraint=True),
            nullable=False,
        ),
        sa.Column(
            'priority',
            sa.Enum('low', 'medium', 'high', name='enum_task_priority',
                    native_enum=False, create_constraint=True),
            nullable=False,
        ),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('category_id', sa.Integer(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('estimated_hours', sa.Float(), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ['category_id'], ['categories.id'],
            name=op.f('fk_tasks_category_id_categories'), ondelete='SET NULL',
        ),
        sa.ForeignKeyConstraint(
            ['owner_id'], ['users.id'],
            name=op.f('fk_tasks_owner_id_users'), ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_tasks')),
    )
    op.create_index('ix_tasks_owner_status', 'tasks', ['owner_id', 'status'])
    op.create_index('ix_tasks_owner_priority', 'tasks', ['owner_id', 'priority'])
    op.create_index('ix_tasks_owner_due_date', 'tasks', ['owner_id', 'due_date'])
    op.create_index('ix_tasks_owner_category', 'tasks', ['owner_id', 'category_id'])

    op.create_table(
        'task_shares',
        sa.Column('task_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ['task_id'], ['tasks.id'],
            name=op.f('fk_task_shares_task_id_tasks'), ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'],
            name=op.f('fk_task_shares_user_id_users'), ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('task_id', 'user_id', name=op.f('pk_task_shares')),
    )
    op.create_index('ix_task_shares_user_id', 'task_shares', ['user_id'])

    op.create_table(
        'refresh_sessions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('revoked', sa.Boolean(), server_default=sa.false(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'],
            name=op.f('fk_refresh_sessions_user_id_users'), ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_refresh_sessions')),
        sa.UniqueConstraint('token_hash', name='uq_refresh_sessions_token_hash'),
    )
    op.create_index('ix_refresh_sessions_user_id', 'refresh_sessions', ['user_id'])
    op.create_index('ix_refresh_sessions_expires_at', 'refresh_sessions', ['expires_at'])


def downgrade():
    op.drop_index('ix_refresh_sessions_expires_at', table_name='refresh_sessions')
    op.drop_index('ix_refresh_sessions_user_id', table_name='refresh_sessions')
    op.drop_table('refresh_sessions')
    op.drop_index('ix_task_shares_user_id', table_name='task_shares')
    op.drop_table('task_shares')
    op.drop_index('ix_tasks_owner_category', table_name='tasks')
    op.drop_index('ix_tasks_owner_due_date', table_name='tasks')
    op.drop_index('ix_tasks_owner_priority', table_name='tasks')
    op.drop_index('ix_tasks_owner_status', table_name='tasks')
    op.drop_table('tasks')
    op.drop_index('ix_categories_owner_id', table_name='categories')
    op.drop_table('categories')
    op.drop_index('ix_users_username', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')

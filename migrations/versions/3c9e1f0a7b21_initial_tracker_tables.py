"""initial tracker tables

Revision ID: 3c9e1f0a7b21
Revises: 
Create Date: 2026-01-12 19:02:11.418305

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3c9e1f0a7b21'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False, unique=True),
        sa.Column('password', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'profiles',
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), primary_key=True),
        sa.Column('display_name', sa.String(length=120), nullable=False, server_default=''),
        sa.Column('group_code', sa.String(length=120), nullable=False, server_default=''),
    )
    op.create_index('ix_profiles_group_code', 'profiles', ['group_code'])

    op.create_table(
        'daily_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('log_date', sa.Date(), nullable=False),
        sa.Column('weight_kg', sa.Numeric(6, 2), nullable=True),
        sa.UniqueConstraint('user_id', 'log_date', name='uq_daily_logs_user_date'),
    )

    op.create_table(
        'food_entries',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('daily_log_id', sa.Integer(), sa.ForeignKey('daily_logs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('grams', sa.Integer(), nullable=True),
        sa.Column('calories', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('protein_g', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('carbs_g', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('fat_g', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('meal', sa.String(length=20), nullable=False, server_default='Snack'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_food_entries_daily_log_id', 'food_entries', ['daily_log_id'])

    op.create_table(
        'weekly_goals',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('week_start', sa.Date(), nullable=False),
        sa.Column('mode', sa.String(length=10), nullable=False, server_default='cut'),
        sa.Column('calorie_goal', sa.Integer(), nullable=True),
        sa.Column('protein_goal_g', sa.Integer(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', 'week_start', name='uq_weekly_goals_user_week'),
    )


def downgrade():
    op.drop_table('weekly_goals')
    op.drop_index('ix_food_entries_daily_log_id', table_name='food_entries')
    op.drop_table('food_entries')
    op.drop_table('daily_logs')
    op.drop_index('ix_profiles_group_code', table_name='profiles')
    op.drop_table('profiles')
    op.drop_table('users')

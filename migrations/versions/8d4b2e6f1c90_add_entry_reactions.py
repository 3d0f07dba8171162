"""add entry reactions

Revision ID: 8d4b2e6f1c90
Revises: 3c9e1f0a7b21
Create Date: 2026-02-03 21:47:35.120977

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '8d4b2e6f1c90'
down_revision = '3c9e1f0a7b21'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'entry_reactions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('entry_id', sa.Integer(), sa.ForeignKey('food_entries.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('emoji', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('entry_id', 'user_id', 'emoji', name='uq_entry_reactions_entry_user_emoji'),
    )
    op.create_index('ix_entry_reactions_entry_id', 'entry_reactions', ['entry_id'])


def downgrade():
    op.drop_index('ix_entry_reactions_entry_id', table_name='entry_reactions')
    op.drop_table('entry_reactions')

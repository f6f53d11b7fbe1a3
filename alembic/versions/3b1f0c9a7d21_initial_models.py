"""Initial models: users, polls, poll_games, votes

Revision ID: 3b1f0c9a7d21
Revises: 
Create Date: 2026-10-19 09:00:00.000000
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = '3b1f0c9a7d21'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('users',
        sa.Column('username', sa.String(length=20), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('uq_users_username_lower', 'users', [sa.text('lower(username)')], unique=True)

    op.create_table('polls',
        sa.Column('creator_id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(['creator_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_polls_creator_id'), 'polls', ['creator_id'], unique=False)

    op.create_table('poll_games',
        sa.Column('poll_id', sa.Uuid(), nullable=False),
        sa.Column('catalog_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('cover_url', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(['poll_id'], ['polls.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('poll_id', 'catalog_id', name='uq_poll_games_poll_catalog')
    )
    op.create_index(op.f('ix_poll_games_poll_id'), 'poll_games', ['poll_id'], unique=False)

    op.create_table('votes',
        sa.Column('poll_game_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(['poll_game_id'], ['poll_games.id'], ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('poll_game_id', 'user_id', name='uq_votes_game_user')
    )
    op.create_index(op.f('ix_votes_poll_game_id'), 'votes', ['poll_game_id'], unique=False)
    op.create_index(op.f('ix_votes_user_id'), 'votes', ['user_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('ix_votes_user_id'), table_name='votes')
    op.drop_index(op.f('ix_votes_poll_game_id'), table_name='votes')
    op.drop_table('votes')
    op.drop_index(op.f('ix_poll_games_poll_id'), table_name='poll_games')
    op.drop_table('poll_games')
    op.drop_index(op.f('ix_polls_creator_id'), table_name='polls')
    op.drop_table('polls')
    op.drop_index('uq_users_username_lower', table_name='users')
    op.drop_table('users')

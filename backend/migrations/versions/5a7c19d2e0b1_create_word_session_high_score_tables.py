"""create word, game_session and high_score tables

Revision ID: 5a7c19d2e0b1
Revises:
Create Date: 2026-09-02 10:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5a7c19d2e0b1'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'word',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('word', sa.String(length=64), nullable=False),
        sa.Column('clue', sa.String(length=256), nullable=True),
        sa.Column('difficulty', sa.String(length=16), nullable=False, server_default='Easy'),
    )
    op.create_index('ix_word_word', 'word', ['word'])
    op.create_index('ix_word_difficulty', 'word', ['difficulty'])

    op.create_table(
        'game_session',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('word', sa.String(length=64), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('time_taken', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'high_score',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('value', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )


def downgrade():
    op.drop_table('high_score')
    op.drop_table('game_session')
    op.drop_index('ix_word_difficulty', table_name='word')
    op.drop_index('ix_word_word', table_name='word')
    op.drop_table('word')

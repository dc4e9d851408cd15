"""add words_completed, target_count, difficulty and mode to game_session

Revision ID: 9d3e6b8f4c21
Revises: 5a7c19d2e0b1
Create Date: 2026-09-20 14:30:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '9d3e6b8f4c21'
down_revision = '5a7c19d2e0b1'
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    cols = {c['name'] for c in insp.get_columns('game_session')}
    with op.batch_alter_table('game_session') as batch_op:
        if 'words_completed' not in cols:
            batch_op.add_column(sa.Column('words_completed', sa.Integer(), nullable=False, server_default='0'))
        if 'target_count' not in cols:
            batch_op.add_column(sa.Column('target_count', sa.Integer(), nullable=False, server_default='0'))
        if 'difficulty' not in cols:
            batch_op.add_column(sa.Column('difficulty', sa.String(length=16), nullable=True))
        if 'mode' not in cols:
            batch_op.add_column(sa.Column('mode', sa.String(length=32), nullable=True))


def downgrade():
    with op.batch_alter_table('game_session') as batch_op:
        batch_op.drop_column('mode')
        batch_op.drop_column('difficulty')
        batch_op.drop_column('target_count')
        batch_op.drop_column('words_completed')

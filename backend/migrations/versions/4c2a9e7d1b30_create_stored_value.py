"""create stored_value table for leaderboards

Revision ID: 4c2a9e7d1b30
Revises:
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c2a9e7d1b30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    if 'stored_value' in insp.get_table_names():
        return
    op.create_table(
        'stored_value',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('key', sa.String(length=128), nullable=False),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    with op.batch_alter_table('stored_value') as batch_op:
        batch_op.create_index('ix_stored_value_key', ['key'], unique=True)


def downgrade():
    with op.batch_alter_table('stored_value') as batch_op:
        batch_op.drop_index('ix_stored_value_key')
    op.drop_table('stored_value')

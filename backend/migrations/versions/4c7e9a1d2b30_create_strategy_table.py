"""create strategy table

Revision ID: 4c7e9a1d2b30
Revises:
Create Date: 2025-10-06 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c7e9a1d2b30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'strategy',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('risk_level', sa.Integer(), nullable=False),
        sa.Column('allocation', sa.Integer(), nullable=False),
        sa.Column('timeframe', sa.Integer(), nullable=False),
        sa.Column('encrypted_data', sa.Text(), nullable=False),
        sa.Column('encrypted_hash', sa.Text(), nullable=False),
        sa.Column('encrypted_score', sa.Text(), nullable=True),
        sa.Column('decrypted_score', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('computed_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade():
    op.drop_table('strategy')

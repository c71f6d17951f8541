"""Create tracker_document table

Revision ID: 3f9c2a7d1b54
Revises: 
Create Date: 2026-10-18 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f9c2a7d1b54'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('tracker_document',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )


def downgrade():
    op.drop_table('tracker_document')

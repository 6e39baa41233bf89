"""create vehicle makes table

Revision ID: 5b1e7c9d3a20
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5b1e7c9d3a20'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add vehicle_makes table holding makes with embedded vehicle types."""
    op.create_table('vehicle_makes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('make_id', sa.String(length=32), nullable=False),
        sa.Column('make_name', sa.String(length=255), nullable=False),
        sa.Column('vehicle_types', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_vehicle_makes_make_id', 'vehicle_makes', ['make_id'], unique=True)


def downgrade() -> None:
    """Remove vehicle_makes table."""
    op.drop_index('ix_vehicle_makes_make_id', table_name='vehicle_makes')
    op.drop_table('vehicle_makes')

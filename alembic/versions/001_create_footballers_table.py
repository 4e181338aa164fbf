"""Create footballers table

Revision ID: 001_create_footballers_table
Revises: 
Create Date: 2025-03-02

Footballer records. `version` starts at 1 and is the optimistic-concurrency
token compared by conditional updates.
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001_create_footballers_table'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'footballers',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('names', sa.Text(), nullable=False),
        sa.Column('titles', sa.Integer(), nullable=False),
        sa.Column('startedplayyear', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('club', sa.Text(), nullable=False),
        sa.Column('playedclubs', sa.Integer(), nullable=False),
        sa.Column('positions', postgresql.ARRAY(sa.Text()), nullable=False),
        sa.Column('goals', sa.Integer(), nullable=False),
        sa.Column('version', sa.Integer(), server_default=sa.text('1'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        if_not_exists=True,
    )


def downgrade() -> None:
    op.drop_table('footballers', if_exists=True)

"""Add footballers search indexes

Revision ID: 003_add_footballers_indexes
Revises: 002_add_footballers_check_constraints
Create Date: 2025-03-02

GIN indexes backing the list endpoint:
- full-text search on names (must match the query's to_tsvector expression)
- array containment (@>) on positions
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '003_add_footballers_indexes'
down_revision = '002_add_footballers_check_constraints'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_index(
        'footballers_name_idx',
        'footballers',
        [sa.text("to_tsvector('simple', names)")],
        postgresql_using='gin',
        if_not_exists=True,
    )
    op.create_index(
        'footballers_positions_idx',
        'footballers',
        ['positions'],
        postgresql_using='gin',
        if_not_exists=True,
    )


def downgrade() -> None:
    op.drop_index('footballers_positions_idx', table_name='footballers', if_exists=True)
    op.drop_index('footballers_name_idx', table_name='footballers', if_exists=True)

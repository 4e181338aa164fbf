"""Add footballers check constraints

Revision ID: 002_add_footballers_check_constraints
Revises: 001_create_footballers_table
Create Date: 2025-03-02

Backstop for the application-level validation: year range and position count.
"""
from alembic import op

# revision identifiers
revision = '002_add_footballers_check_constraints'
down_revision = '001_create_footballers_table'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_check_constraint(
        'footballers_year_check',
        'footballers',
        "year BETWEEN 1600 AND date_part('year', now())"
    )
    op.create_check_constraint(
        'footballers_length_check',
        'footballers',
        "array_length(positions, 1) BETWEEN 1 AND 6"
    )


def downgrade() -> None:
    op.drop_constraint('footballers_length_check', 'footballers', type_='check')
    op.drop_constraint('footballers_year_check', 'footballers', type_='check')

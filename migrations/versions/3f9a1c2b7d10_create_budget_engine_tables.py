"""create budget engine tables

Revision ID: 3f9a1c2b7d10
Revises:
Create Date: 2026-03-02 10:14:37.218540

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9a1c2b7d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # 1. budget_versions (scenarios)
    op.create_table(
        'budget_versions',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    # 2. companies
    op.create_table(
        'companies',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )

    # 3. concepts + assignments
    op.create_table(
        'concepts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('category_type', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_restricted', sa.Boolean(), nullable=False, server_default='false'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('category_type', 'name', name='uq_concept')
    )
    op.create_table(
        'concept_assignments',
        sa.Column('company_name', sa.String(length=255), nullable=False),
        sa.Column('category_type', sa.String(length=32), nullable=False),
        sa.Column('concept_name', sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint('company_name', 'category_type', 'concept_name')
    )
    op.create_index('ix_concept_assignment_concept', 'concept_assignments', ['category_type', 'concept_name'])

    # 4. budget_entries
    op.create_table(
        'budget_entries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('version_id', sa.String(length=64), nullable=False),
        sa.Column('company_name', sa.String(length=255), nullable=False),
        sa.Column('category_type', sa.String(length=32), nullable=False),
        sa.Column('concept', sa.String(length=255), nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('plan_units', sa.Float(), nullable=False, server_default='0'),
        sa.Column('plan_value', sa.Float(), nullable=False, server_default='0'),
        sa.Column('real_units', sa.Float(), nullable=False, server_default='0'),
        sa.Column('real_value', sa.Float(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'version_id', 'company_name', 'category_type', 'concept', 'month', 'year',
            name='uq_budget_entry'
        )
    )
    op.create_index('ix_budget_entry_version', 'budget_entries', ['version_id'])

    # 5. exchange_rates
    op.create_table(
        'exchange_rates',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('version_id', sa.String(length=64), nullable=False),
        sa.Column('company_name', sa.String(length=255), nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('plan_rate', sa.Float(), nullable=False, server_default='0'),
        sa.Column('real_rate', sa.Float(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('version_id', 'company_name', 'month', 'year', name='uq_exchange_rate')
    )
    op.create_index('ix_exchange_rate_version', 'exchange_rates', ['version_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_exchange_rate_version', table_name='exchange_rates')
    op.drop_table('exchange_rates')
    op.drop_index('ix_budget_entry_version', table_name='budget_entries')
    op.drop_table('budget_entries')
    op.drop_index('ix_concept_assignment_concept', table_name='concept_assignments')
    op.drop_table('concept_assignments')
    op.drop_table('concepts')
    op.drop_table('companies')
    op.drop_table('budget_versions')

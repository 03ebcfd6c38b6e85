"""Initial schema migration.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-01-16 03:32:41.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MINISTRY_CATEGORIES = (
    'CHURCH', 'MISSIONS', 'EDUCATION', 'HUMANITARIAN', 'YOUTH',
    'MEDIA', 'HEALTHCARE', 'ADVOCACY', 'OTHER',
)
GRANT_STATUSES = ('PENDING', 'APPROVED', 'FUNDED', 'REJECTED')


def upgrade() -> None:
    """Create ministries, donors, giving_funds and grants."""
    ministry_category_enum = sa.Enum(*MINISTRY_CATEGORIES, name='ministrycategory')
    grant_status_enum = sa.Enum(*GRANT_STATUSES, name='grantstatus')

    # Create ministries table
    op.create_table('ministries',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('ein', sa.String(10), nullable=True),
        sa.Column('category', ministry_category_enum, nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('mission', sa.Text(), nullable=True),
        sa.Column('website', sa.String(255), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('state', sa.String(50), nullable=True),
        sa.Column('country', sa.String(50), nullable=False),
        sa.Column('verified', sa.Boolean(), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('ein'),
    )
    op.create_index(op.f('ix_ministries_name'), 'ministries', ['name'])
    op.create_index(op.f('ix_ministries_category'), 'ministries', ['category'])
    op.create_index('ix_ministries_verified_active', 'ministries', ['verified', 'active'])

    # Create donors table
    op.create_table('donors',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_donors_email'), 'donors', ['email'], unique=True)
    op.create_index('ix_donors_last_name_first_name', 'donors', ['last_name', 'first_name'])

    # Create giving_funds table; balance is stored in cents
    op.create_table('giving_funds',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('balance', sa.BigInteger(), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('donor_id', sa.Integer(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('balance >= 0', name='ck_giving_funds_balance_non_negative'),
        sa.ForeignKeyConstraint(['donor_id'], ['donors.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_giving_funds_active'), 'giving_funds', ['active'])
    op.create_index(op.f('ix_giving_funds_donor_id'), 'giving_funds', ['donor_id'])

    # Create grants table; amount is stored in cents
    op.create_table('grants',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('amount', sa.BigInteger(), nullable=False),
        sa.Column('status', grant_status_enum, nullable=False),
        sa.Column('purpose', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('giving_fund_id', sa.Integer(), nullable=False),
        sa.Column('ministry_id', sa.Integer(), nullable=False),
        sa.Column('requested_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('funded_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejected_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('amount > 0', name='ck_grants_amount_positive'),
        sa.ForeignKeyConstraint(['giving_fund_id'], ['giving_funds.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['ministry_id'], ['ministries.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_grants_status'), 'grants', ['status'])
    op.create_index(op.f('ix_grants_giving_fund_id'), 'grants', ['giving_fund_id'])
    op.create_index(op.f('ix_grants_ministry_id'), 'grants', ['ministry_id'])
    op.create_index(op.f('ix_grants_requested_at'), 'grants', ['requested_at'])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table('grants')
    op.drop_table('giving_funds')
    op.drop_table('donors')
    op.drop_table('ministries')
    sa.Enum(name='grantstatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='ministrycategory').drop(op.get_bind(), checkfirst=True)

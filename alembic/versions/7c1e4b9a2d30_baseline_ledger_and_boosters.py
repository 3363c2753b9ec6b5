"""baseline_ledger_and_boosters

Revision ID: 7c1e4b9a2d30
Revises:
Create Date: 2026-10-17 10:12:44.118502

Production-safe migration: Only creates tables that do not exist yet.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '7c1e4b9a2d30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_id_type = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def table_exists(table_name: str) -> bool:
    """Check if a table exists in the database."""
    bind = op.get_bind()
    inspector = inspect(bind)
    return table_name in inspector.get_table_names()


def upgrade() -> None:
    """Create users, subscriptions, boosters and transactions tables if missing."""
    if not table_exists('users'):
        op.create_table('users',
            sa.Column('id', user_id_type, nullable=False),
            sa.Column('username', sa.String(), nullable=True),
            sa.Column('first_name', sa.String(), nullable=True),
            sa.Column('last_name', sa.String(), nullable=True),
            sa.Column('role', sa.String(), nullable=False, server_default='user'),
            sa.Column('balance', sa.Float(), nullable=False, server_default='0'),
            sa.Column('referrer_id', sa.BigInteger(), nullable=True),
            sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
            sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
            sa.CheckConstraint('balance >= 0', name='ck_users_balance_non_negative'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
        op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)

    if not table_exists('subscriptions'):
        op.create_table('subscriptions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', user_id_type, nullable=False),
            sa.Column('plan_type', sa.String(), nullable=False, server_default='free'),
            sa.Column('plan_duration', sa.String(), nullable=False, server_default='monthly'),
            sa.Column('start_date', sa.DateTime(), nullable=False),
            sa.Column('end_date', sa.DateTime(), nullable=False),
            sa.Column('status', sa.String(), nullable=False, server_default='active'),
            sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
            sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_subscriptions_id'), 'subscriptions', ['id'], unique=False)
        op.create_index(op.f('ix_subscriptions_user_id'), 'subscriptions', ['user_id'], unique=False)

    if not table_exists('boosters'):
        op.create_table('boosters',
            sa.Column('id', sa.String(length=15), nullable=False),
            sa.Column('user_id', user_id_type, nullable=False),
            sa.Column('booster_id', sa.String(), nullable=False),
            sa.Column('activated_at', sa.DateTime(), nullable=False),
            sa.Column('expires_at', sa.DateTime(), nullable=True),
            sa.Column('type', sa.String(), nullable=False),
            sa.Column('multiplier', sa.Float(), nullable=False),
            sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
            sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_boosters_user_id'), 'boosters', ['user_id'], unique=False)

    if not table_exists('transactions'):
        op.create_table('transactions',
            sa.Column('id', sa.String(length=15), nullable=False),
            sa.Column('user_id', user_id_type, nullable=False),
            sa.Column('type', sa.String(), nullable=False),
            sa.Column('amount', sa.Float(), nullable=False),
            sa.Column('status', sa.String(), nullable=False, server_default='pending'),
            sa.Column('description', sa.String(), nullable=True),
            sa.Column('tx_hash', sa.String(), nullable=True),
            sa.Column('metadata_json', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
            sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
            sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('idx_transactions_user_created', 'transactions', ['user_id', 'created_at'], unique=False)


def downgrade() -> None:
    """Drop tables in reverse dependency order."""
    op.drop_index('idx_transactions_user_created', table_name='transactions')
    op.drop_table('transactions')
    op.drop_index(op.f('ix_boosters_user_id'), table_name='boosters')
    op.drop_table('boosters')
    op.drop_index(op.f('ix_subscriptions_user_id'), table_name='subscriptions')
    op.drop_index(op.f('ix_subscriptions_id'), table_name='subscriptions')
    op.drop_table('subscriptions')
    op.drop_index(op.f('ix_users_username'), table_name='users')
    op.drop_index(op.f('ix_users_id'), table_name='users')
    op.drop_table('users')

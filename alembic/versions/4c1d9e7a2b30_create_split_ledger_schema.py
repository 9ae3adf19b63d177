"""Create split ledger schema

Revision ID: 4c1d9e7a2b30
Revises:
Create Date: 2026-10-19 09:12:41.204518

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4c1d9e7a2b30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('organizations',
    sa.Column('id', sa.UUID(), nullable=False),
    sa.Column('name', sa.String(), nullable=False),
    sa.Column('owner_email', sa.String(), nullable=True),
    sa.Column('owner_phone', sa.String(), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_table('sales',
    sa.Column('id', sa.UUID(), nullable=False),
    sa.Column('organization_id', sa.UUID(), nullable=False),
    sa.Column('total_cents', sa.Integer(), nullable=False),
    sa.Column('status', sa.Enum('open', 'confirmed', 'cancelled', name='salestatus'), nullable=False),
    sa.Column('payment_status', sa.Enum('pending', 'paid', 'refunded', 'chargedback', name='paymentstatus'), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_sales_organization_id'), 'sales', ['organization_id'], unique=False)
    op.create_table('virtual_accounts',
    sa.Column('id', sa.UUID(), nullable=False),
    sa.Column('organization_id', sa.UUID(), nullable=False),
    sa.Column('account_type', sa.Enum('tenant', 'affiliate', 'coproducer', 'industry', 'factory', 'platform', name='accounttype'), nullable=False),
    sa.Column('owner_key', sa.String(), server_default='', nullable=False),
    sa.Column('holder_name', sa.String(), nullable=False),
    sa.Column('holder_email', sa.String(), nullable=True),
    sa.Column('holder_phone', sa.String(), nullable=True),
    sa.Column('balance_cents', sa.Integer(), server_default='0', nullable=False),
    sa.Column('pending_balance_cents', sa.Integer(), server_default='0', nullable=False),
    sa.Column('total_received_cents', sa.Integer(), server_default='0', nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('organization_id', 'account_type', 'owner_key', name='ux_virtual_accounts_owner')
    )
    op.create_index(op.f('ix_virtual_accounts_organization_id'), 'virtual_accounts', ['organization_id'], unique=False)
    op.create_table('virtual_transactions',
    sa.Column('id', sa.UUID(), nullable=False),
    sa.Column('virtual_account_id', sa.UUID(), nullable=False),
    sa.Column('sale_id', sa.UUID(), nullable=False),
    sa.Column('transaction_type', sa.Enum('credit', 'refund', 'chargeback', name='transactiontype'), nullable=False),
    sa.Column('amount_cents', sa.Integer(), nullable=False),
    sa.Column('fee_cents', sa.Integer(), nullable=False),
    sa.Column('net_amount_cents', sa.Integer(), nullable=False),
    sa.Column('status', sa.Enum('pending', 'completed', 'cancelled', name='transactionstatus'), nullable=False),
    sa.Column('reference_id', sa.String(), nullable=False),
    sa.Column('reverses_transaction_id', sa.UUID(), nullable=True),
    sa.Column('description', sa.String(), nullable=True),
    sa.Column('release_at', sa.DateTime(timezone=True), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    sa.ForeignKeyConstraint(['reverses_transaction_id'], ['virtual_transactions.id'], ),
    sa.ForeignKeyConstraint(['sale_id'], ['sales.id'], ),
    sa.ForeignKeyConstraint(['virtual_account_id'], ['virtual_accounts.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('reference_id')
    )
    op.create_index(op.f('ix_virtual_transactions_virtual_account_id'), 'virtual_transactions', ['virtual_account_id'], unique=False)
    op.create_index(op.f('ix_virtual_transactions_sale_id'), 'virtual_transactions', ['sale_id'], unique=False)
    op.create_index(op.f('ix_virtual_transactions_reverses_transaction_id'), 'virtual_transactions', ['reverses_transaction_id'], unique=False)
    op.create_index('ix_virtual_transactions_pending_release', 'virtual_transactions', ['status', 'release_at'], unique=False)
    op.create_table('sale_splits',
    sa.Column('id', sa.UUID(), nullable=False),
    sa.Column('sale_id', sa.UUID(), nullable=False),
    sa.Column('virtual_account_id', sa.UUID(), nullable=True),
    sa.Column('split_type', sa.Enum('tenant', 'affiliate', 'coproducer', 'industry', 'factory', 'platform', 'gateway_fee', name='splittype'), nullable=False),
    sa.Column('gross_amount_cents', sa.Integer(), nullable=False),
    sa.Column('fee_cents', sa.Integer(), server_default='0', nullable=False),
    sa.Column('net_amount_cents', sa.Integer(), nullable=False),
    sa.Column('percentage', sa.Numeric(precision=7, scale=4), nullable=False),
    sa.Column('liable_for_refund', sa.Boolean(), nullable=False),
    sa.Column('liable_for_chargeback', sa.Boolean(), nullable=False),
    sa.Column('transaction_id', sa.UUID(), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.ForeignKeyConstraint(['sale_id'], ['sales.id'], ),
    sa.ForeignKeyConstraint(['transaction_id'], ['virtual_transactions.id'], ),
    sa.ForeignKeyConstraint(['virtual_account_id'], ['virtual_accounts.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('sale_id', 'split_type', name='ux_sale_splits_sale_type')
    )
    op.create_index(op.f('ix_sale_splits_sale_id'), 'sale_splits', ['sale_id'], unique=False)
    op.create_table('organization_split_rules',
    sa.Column('organization_id', sa.UUID(), nullable=False),
    sa.Column('platform_fee_percent', sa.Numeric(precision=5, scale=2), nullable=False),
    sa.Column('platform_fee_fixed_cents', sa.Integer(), nullable=False),
    sa.Column('release_days', sa.Integer(), nullable=False),
    sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ),
    sa.PrimaryKeyConstraint('organization_id')
    )
    op.create_table('platform_settings',
    sa.Column('setting_key', sa.String(), nullable=False),
    sa.Column('setting_value', sa.JSON(), nullable=False),
    sa.PrimaryKeyConstraint('setting_key')
    )
    op.create_table('audit_log',
    sa.Column('id', sa.UUID(), nullable=False),
    sa.Column('actor', sa.String(), nullable=False),
    sa.Column('action', sa.String(), nullable=False),
    sa.Column('entity', sa.String(), nullable=False),
    sa.Column('entity_id', sa.UUID(), nullable=True),
    sa.Column('payload_json', sa.JSON(), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    sa.PrimaryKeyConstraint('id')
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('audit_log')
    op.drop_table('platform_settings')
    op.drop_table('organization_split_rules')
    op.drop_index(op.f('ix_sale_splits_sale_id'), table_name='sale_splits')
    op.drop_table('sale_splits')
    op.drop_index('ix_virtual_transactions_pending_release', table_name='virtual_transactions')
    op.drop_index(op.f('ix_virtual_transactions_reverses_transaction_id'), table_name='virtual_transactions')
    op.drop_index(op.f('ix_virtual_transactions_sale_id'), table_name='virtual_transactions')
    op.drop_index(op.f('ix_virtual_transactions_virtual_account_id'), table_name='virtual_transactions')
    op.drop_table('virtual_transactions')
    op.drop_index(op.f('ix_virtual_accounts_organization_id'), table_name='virtual_accounts')
    op.drop_table('virtual_accounts')
    op.drop_index(op.f('ix_sales_organization_id'), table_name='sales')
    op.drop_table('sales')
    op.drop_table('organizations')
    sa.Enum(name='splittype').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='transactionstatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='transactiontype').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='accounttype').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='paymentstatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='salestatus').drop(op.get_bind(), checkfirst=True)

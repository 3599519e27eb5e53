"""initial sales ledger schema

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the complete shopledger schema:
- businesses / stores / store_counters: tenancy and per-store customer numbering
- customers / staff: store-scoped master data (soft-deleted via is_archived)
- inventory_items / restock_events: stock, cost basis and restock audit trail
- orders / checkouts / transactions: append-only sales records
- profit_loss: per-item materialized totals
- ledger_events: append-only audit log
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261019_initial'
down_revision = None
branch_labels = None
depends_on = None


def _now():
    return sa.text('CURRENT_TIMESTAMP')


def upgrade():
    # ============================================================================
    # Tenancy
    # ============================================================================
    op.create_table(
        'businesses',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('address', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )

    op.create_table(
        'stores',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('business_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('code', sa.String(length=10), nullable=False),
        sa.Column('address', sa.String(length=255), nullable=True),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.ForeignKeyConstraint(['business_id'], ['businesses.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('business_id', 'name', name='uq_stores_business_name'),
        sa.UniqueConstraint('business_id', 'code', name='uq_stores_business_code'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_stores_business_id', 'stores', ['business_id'])
    op.create_index('ix_stores_code', 'stores', ['code'])

    op.create_table(
        'store_counters',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('next_customer_number', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.CheckConstraint('next_customer_number >= 1', name='ck_store_counters_positive'),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('store_id', name='uq_store_counters_store'),
        sqlite_autoincrement=True
    )

    # ============================================================================
    # People
    # ============================================================================
    op.create_table(
        'customers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('customer_number', sa.String(length=32), nullable=False),
        sa.Column('mobile_number', sa.String(length=32), nullable=True),
        sa.Column('country_code', sa.String(length=8), nullable=True),
        sa.Column('address', sa.String(length=255), nullable=False),
        sa.Column('is_archived', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('store_id', 'customer_number', name='uq_customers_store_number'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_customers_store_id', 'customers', ['store_id'])
    op.create_index('ix_customers_store_archived', 'customers', ['store_id', 'is_archived'])

    op.create_table(
        'staff',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('staff_number', sa.String(length=32), nullable=False),
        sa.Column('mobile_number', sa.String(length=32), nullable=True),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('is_archived', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('store_id', 'staff_number', name='uq_staff_store_number'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_staff_store_id', 'staff', ['store_id'])

    # ============================================================================
    # Inventory
    # ============================================================================
    op.create_table(
        'inventory_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('type', sa.String(length=16), nullable=False),
        sa.Column('cost_price_cents', sa.Integer(), nullable=False),
        sa.Column('selling_price_cents', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.CheckConstraint('quantity >= 0', name='ck_inventory_quantity_non_negative'),
        sa.CheckConstraint('cost_price_cents >= 0', name='ck_inventory_cost_non_negative'),
        sa.CheckConstraint('selling_price_cents >= 0', name='ck_inventory_price_non_negative'),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('store_id', 'name', name='uq_inventory_store_name'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_inventory_items_store_id', 'inventory_items', ['store_id'])
    op.create_index('ix_inventory_store_type', 'inventory_items', ['store_id', 'type'])

    op.create_table(
        'restock_events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('inventory_id', sa.Integer(), nullable=False),
        sa.Column('quantity_added', sa.Integer(), nullable=False),
        sa.Column('unit_cost_cents', sa.Integer(), nullable=False),
        sa.Column('cost_strategy', sa.String(length=16), nullable=False),
        sa.Column('override_cost_cents', sa.Integer(), nullable=True),
        sa.Column('previous_quantity', sa.Integer(), nullable=False),
        sa.Column('new_quantity', sa.Integer(), nullable=False),
        sa.Column('previous_cost_price_cents', sa.Integer(), nullable=False),
        sa.Column('new_cost_price_cents', sa.Integer(), nullable=False),
        sa.Column('previous_selling_price_cents', sa.Integer(), nullable=False),
        sa.Column('new_selling_price_cents', sa.Integer(), nullable=False),
        sa.Column('notes', sa.String(length=500), nullable=True),
        sa.Column('staff_id', sa.Integer(), nullable=True),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.CheckConstraint('quantity_added >= 1', name='ck_restock_quantity_positive'),
        sa.CheckConstraint('unit_cost_cents >= 0', name='ck_restock_cost_non_negative'),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id']),
        sa.ForeignKeyConstraint(['inventory_id'], ['inventory_items.id']),
        sa.ForeignKeyConstraint(['staff_id'], ['staff.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_restock_events_store_id', 'restock_events', ['store_id'])
    op.create_index('ix_restock_events_inventory_id', 'restock_events', ['inventory_id'])
    op.create_index('ix_restock_events_staff_id', 'restock_events', ['staff_id'])
    op.create_index('ix_restock_events_occurred_at', 'restock_events', ['occurred_at'])
    op.create_index('ix_restock_events_store_item', 'restock_events', ['store_id', 'inventory_id'])

    # ============================================================================
    # Sales (append-only)
    # ============================================================================
    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('inventory_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price_cents', sa.Integer(), nullable=False),
        sa.Column('total_price_cents', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.CheckConstraint('quantity >= 1', name='ck_orders_quantity_positive'),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id']),
        sa.ForeignKeyConstraint(['inventory_id'], ['inventory_items.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_orders_store_id', 'orders', ['store_id'])
    op.create_index('ix_orders_inventory_id', 'orders', ['inventory_id'])
    op.create_index('ix_orders_store_item', 'orders', ['store_id', 'inventory_id'])

    op.create_table(
        'checkouts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('staff_id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('sale_reference', sa.String(length=32), nullable=False),
        sa.Column('total_price_cents', sa.Integer(), nullable=False),
        sa.Column('payment_method', sa.String(length=16), nullable=False),
        sa.Column('payment_status', sa.String(length=16), nullable=False),
        sa.Column('payment_reference', sa.String(length=128), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id']),
        sa.ForeignKeyConstraint(['staff_id'], ['staff.id']),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('order_id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_checkouts_store_id', 'checkouts', ['store_id'])
    op.create_index('ix_checkouts_staff_id', 'checkouts', ['staff_id'])
    op.create_index('ix_checkouts_sale_reference', 'checkouts', ['sale_reference'])
    op.create_index('ix_checkouts_store_created', 'checkouts', ['store_id', 'created_at'])

    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('inventory_id', sa.Integer(), nullable=False),
        sa.Column('checkout_id', sa.Integer(), nullable=False),
        sa.Column('transaction_date', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id']),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id']),
        sa.ForeignKeyConstraint(['inventory_id'], ['inventory_items.id']),
        sa.ForeignKeyConstraint(['checkout_id'], ['checkouts.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_transactions_store_id', 'transactions', ['store_id'])
    op.create_index('ix_transactions_customer_id', 'transactions', ['customer_id'])
    op.create_index('ix_transactions_inventory_id', 'transactions', ['inventory_id'])
    op.create_index('ix_transactions_checkout_id', 'transactions', ['checkout_id'])
    op.create_index('ix_transactions_store_date', 'transactions', ['store_id', 'transaction_date'])

    # ============================================================================
    # Reporting and audit
    # ============================================================================
    op.create_table(
        'profit_loss',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('inventory_id', sa.Integer(), nullable=False),
        sa.Column('total_quantity_sold', sa.Integer(), nullable=False),
        sa.Column('quantity_remaining', sa.Integer(), nullable=False),
        sa.Column('total_revenue_cents', sa.Integer(), nullable=False),
        sa.Column('total_net_profit_cents', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id']),
        sa.ForeignKeyConstraint(['inventory_id'], ['inventory_items.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('store_id', 'inventory_id', name='uq_profit_loss_store_item'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_profit_loss_store_id', 'profit_loss', ['store_id'])
    op.create_index('ix_profit_loss_inventory_id', 'profit_loss', ['inventory_id'])

    op.create_table(
        'ledger_events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_id', sa.Integer(), nullable=False),
        sa.Column('event_type', sa.String(length=64), nullable=False),
        sa.Column('event_category', sa.String(length=32), nullable=False),
        sa.Column('entity_type', sa.String(length=64), nullable=False),
        sa.Column('entity_id', sa.Integer(), nullable=False),
        sa.Column('actor_staff_id', sa.Integer(), nullable=True),
        sa.Column('actor_user_id', sa.Integer(), nullable=True),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.Column('note', sa.String(length=255), nullable=True),
        sa.Column('payload', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id']),
        sa.ForeignKeyConstraint(['actor_staff_id'], ['staff.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_ledger_events_store_id', 'ledger_events', ['store_id'])
    op.create_index('ix_ledger_events_event_type', 'ledger_events', ['event_type'])
    op.create_index('ix_ledger_events_event_category', 'ledger_events', ['event_category'])
    op.create_index('ix_ledger_events_entity_type', 'ledger_events', ['entity_type'])
    op.create_index('ix_ledger_events_entity_id', 'ledger_events', ['entity_id'])
    op.create_index('ix_ledger_events_actor_staff_id', 'ledger_events', ['actor_staff_id'])
    op.create_index('ix_ledger_events_occurred_at', 'ledger_events', ['occurred_at'])
    op.create_index('ix_ledger_events_store_occurred', 'ledger_events', ['store_id', 'occurred_at'])


def downgrade():
    op.drop_table('ledger_events')
    op.drop_table('profit_loss')
    op.drop_table('transactions')
    op.drop_table('checkouts')
    op.drop_table('orders')
    op.drop_table('restock_events')
    op.drop_table('inventory_items')
    op.drop_table('staff')
    op.drop_table('customers')
    op.drop_table('store_counters')
    op.drop_table('stores')
    op.drop_table('businesses')

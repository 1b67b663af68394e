"""Schema base - cadastros, pedidos e sincronização mobile

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # === Vendedores ===
    op.create_table(
        'sales_reps',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('code', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('password_hash', sa.String(255), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_sales_reps_code', 'sales_reps', ['code'], unique=True)

    # === Rotas de entrega ===
    op.create_table(
        'delivery_routes',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(120), nullable=False),
        sa.Column('description', sa.String(255), nullable=True),
        sa.Column('sales_rep_id', sa.String(36), nullable=True),
        sa.Column('status', sa.String(20), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['sales_rep_id'], ['sales_reps.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_delivery_routes_sales_rep_id', 'delivery_routes', ['sales_rep_id'], unique=False)

    # === Clientes ===
    op.create_table(
        'customers',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('code', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('company_name', sa.String(255), nullable=True),
        sa.Column('document', sa.String(20), nullable=True),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('address', sa.String(255), nullable=True),
        sa.Column('neighborhood', sa.String(120), nullable=True),
        sa.Column('city', sa.String(120), nullable=True),
        sa.Column('state', sa.String(2), nullable=True),
        sa.Column('zip', sa.String(10), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('visit_days', sa.JSON(), nullable=True),
        sa.Column('visit_frequency', sa.String(30), nullable=True),
        sa.Column('visit_sequence', sa.Integer(), nullable=True),
        sa.Column('sales_rep_id', sa.String(36), nullable=True),
        sa.Column('delivery_route_id', sa.String(36), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['sales_rep_id'], ['sales_reps.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['delivery_route_id'], ['delivery_routes.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_customers_code', 'customers', ['code'], unique=False)
    op.create_index('ix_customers_sales_rep_id', 'customers', ['sales_rep_id'], unique=False)
    op.create_index('ix_customers_rep_active', 'customers', ['sales_rep_id', 'active'], unique=False)

    # === Unidades ===
    op.create_table(
        'units',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('code', sa.String(10), nullable=False),
        sa.Column('description', sa.String(100), nullable=True),
        sa.Column('package_quantity', sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code')
    )

    # === Produtos ===
    op.create_table(
        'products',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('code', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('cost', sa.Float(), nullable=True),
        sa.Column('sale_price', sa.Float(), nullable=True),
        sa.Column('max_discount_percent', sa.Float(), nullable=True),
        sa.Column('stock', sa.Float(), nullable=True),
        sa.Column('main_unit_id', sa.String(36), nullable=True),
        sa.Column('sub_unit_id', sa.String(36), nullable=True),
        sa.Column('subunit_ratio', sa.Float(), nullable=True),
        sa.Column('category_id', sa.String(36), nullable=True),
        sa.Column('group_id', sa.String(36), nullable=True),
        sa.Column('brand_id', sa.String(36), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['main_unit_id'], ['units.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['sub_unit_id'], ['units.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_products_code', 'products', ['code'], unique=True)

    # === Tabelas de pagamento ===
    op.create_table(
        'payment_tables',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(120), nullable=False),
        sa.Column('description', sa.String(255), nullable=True),
        sa.Column('type', sa.String(30), nullable=True),
        sa.Column('terms', sa.JSON(), nullable=True),
        sa.Column('installments', sa.JSON(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )

    # === Pedidos ===
    op.create_table(
        'orders',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('code', sa.Integer(), nullable=False),
        sa.Column('mobile_order_id', sa.String(100), nullable=True),
        sa.Column('customer_id', sa.String(36), nullable=True),
        sa.Column('customer_name', sa.String(255), nullable=True),
        sa.Column('sales_rep_id', sa.String(36), nullable=True),
        sa.Column('sales_rep_name', sa.String(255), nullable=True),
        sa.Column('date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('delivery_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('total', sa.Float(), nullable=True),
        sa.Column('discount', sa.Float(), nullable=True),
        sa.Column('status', sa.String(20), nullable=True),
        sa.Column('payment_status', sa.String(20), nullable=True),
        sa.Column('payment_method', sa.String(100), nullable=True),
        sa.Column('payment_method_id', sa.String(36), nullable=True),
        sa.Column('payment_table_id', sa.String(36), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('delivery_address', sa.String(255), nullable=True),
        sa.Column('delivery_city', sa.String(120), nullable=True),
        sa.Column('delivery_state', sa.String(2), nullable=True),
        sa.Column('delivery_zip', sa.String(10), nullable=True),
        sa.Column('rejection_reason', sa.String(255), nullable=True),
        sa.Column('visit_notes', sa.Text(), nullable=True),
        sa.Column('source_project', sa.String(20), nullable=True),
        sa.Column('sync_status', sa.String(20), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id']),
        sa.ForeignKeyConstraint(['sales_rep_id'], ['sales_reps.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code', name='uq_orders_code'),
        sa.UniqueConstraint('mobile_order_id', name='uq_orders_mobile_order_id')
    )
    op.create_index('ix_orders_customer_id', 'orders', ['customer_id'], unique=False)
    op.create_index('ix_orders_sales_rep_id', 'orders', ['sales_rep_id'], unique=False)
    op.create_index('ix_orders_rep_created', 'orders', ['sales_rep_id', 'created_at'], unique=False)

    # === Itens de pedido ===
    op.create_table(
        'order_items',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('order_id', sa.String(36), nullable=False),
        sa.Column('product_id', sa.String(36), nullable=True),
        sa.Column('product_name', sa.String(255), nullable=True),
        sa.Column('product_code', sa.Integer(), nullable=True),
        sa.Column('quantity', sa.Float(), nullable=False),
        sa.Column('unit_price', sa.Float(), nullable=False),
        sa.Column('price', sa.Float(), nullable=True),
        sa.Column('discount', sa.Float(), nullable=True),
        sa.Column('total', sa.Float(), nullable=True),
        sa.Column('unit', sa.String(10), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'], unique=False)

    # === Contador de códigos de pedido ===
    op.create_table(
        'order_code_counters',
        sa.Column('name', sa.String(30), nullable=False),
        sa.Column('last_value', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('name')
    )
    # Parte do maior código existente para não colidir com pedidos antigos
    op.execute(
        "INSERT INTO order_code_counters (name, last_value) "
        "SELECT 'orders', COALESCE(MAX(code), 0) FROM orders"
    )

    # === Tokens de sincronização ===
    op.create_table(
        'sync_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('token_hash', sa.String(64), nullable=False),
        sa.Column('sales_rep_id', sa.String(36), nullable=False),
        sa.Column('name', sa.String(120), nullable=True),
        sa.Column('device_id', sa.String(255), nullable=True),
        sa.Column('device_ip', sa.String(45), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['sales_rep_id'], ['sales_reps.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('token_hash')
    )
    op.create_index('ix_sync_tokens_id', 'sync_tokens', ['id'], unique=False)
    op.create_index('ix_sync_tokens_sales_rep_id', 'sync_tokens', ['sales_rep_id'], unique=False)
    op.create_index('ix_sync_tokens_rep_active', 'sync_tokens', ['sales_rep_id', 'active'], unique=False)

    # === Histórico de sincronização ===
    op.create_table(
        'sync_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sales_rep_id', sa.String(36), nullable=True),
        sa.Column('event_type', sa.String(20), nullable=False),
        sa.Column('data_type', sa.String(50), nullable=False),
        sa.Column('records_count', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('device_id', sa.String(255), nullable=True),
        sa.Column('device_ip', sa.String(45), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_sync_logs_id', 'sync_logs', ['id'], unique=False)
    op.create_index('ix_sync_logs_sales_rep_id', 'sync_logs', ['sales_rep_id'], unique=False)
    op.create_index('ix_sync_logs_created_at', 'sync_logs', ['created_at'], unique=False)
    op.create_index('ix_sync_logs_rep_created', 'sync_logs', ['sales_rep_id', 'created_at'], unique=False)


def downgrade() -> None:
    op.drop_table('sync_logs')
    op.drop_table('sync_tokens')
    op.drop_table('order_code_counters')
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_table('payment_tables')
    op.drop_table('products')
    op.drop_table('units')
    op.drop_table('customers')
    op.drop_table('delivery_routes')
    op.drop_table('sales_reps')

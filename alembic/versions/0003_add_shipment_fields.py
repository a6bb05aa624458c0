"""add_shiprocket_shipment_fields

Revision ID: 0003_add_shipment_fields
Revises: 0002_orders
"""
from alembic import op
import sqlalchemy as sa

revision = '0003_add_shipment_fields'
down_revision = '0002_orders'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column('orders', sa.Column('shiprocket_shipment_id', sa.String(50), nullable=True))
    op.add_column('orders', sa.Column('shiprocket_order_id', sa.String(50), nullable=True))
    op.add_column('orders', sa.Column('awb_code', sa.String(50), nullable=True))
    op.add_column('orders', sa.Column('courier_name', sa.String(100), nullable=True))
    op.add_column('orders', sa.Column('shipping_status', sa.String(50), nullable=True))
    op.add_column('orders', sa.Column('tracking_url', sa.String(500), nullable=True))
    op.add_column('orders', sa.Column('pickup_scheduled_date', sa.DateTime(), nullable=True))
    op.add_column('orders', sa.Column('pickup_address', sa.JSON(), nullable=True))

    # Webhooks look orders up by shipment id
    op.create_index('ix_orders_shiprocket_shipment_id', 'orders', ['shiprocket_shipment_id'])


def downgrade() -> None:
    op.drop_index('ix_orders_shiprocket_shipment_id', table_name='orders')
    for column in (
        'pickup_address', 'pickup_scheduled_date', 'tracking_url', 'shipping_status',
        'courier_name', 'awb_code', 'shiprocket_order_id', 'shiprocket_shipment_id',
    ):
        op.drop_column('orders', column)

from alembic import op
import sqlalchemy as sa

revision = '0002_orders'
down_revision = '0001_catalog_and_users'
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'orders',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('order_number', sa.String(50), nullable=False),
        sa.Column('amount', sa.Integer, nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='INR'),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('customer_name', sa.String(200), nullable=False),
        sa.Column('customer_email', sa.String(255), nullable=False),
        sa.Column('customer_phone', sa.String(50), nullable=False),
        sa.Column('address_street', sa.String(500), nullable=False),
        sa.Column('address_city', sa.String(100), nullable=False),
        sa.Column('address_state', sa.String(100), nullable=False),
        sa.Column('address_zip_code', sa.String(20), nullable=False),
        sa.Column('address_country', sa.String(100), nullable=False),
        sa.Column('razorpay_order_id', sa.String(100), nullable=True),
        sa.Column('razorpay_payment_id', sa.String(100), nullable=True),
        sa.Column('razorpay_signature', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=False),
        sa.Column('updated_at', sa.DateTime, nullable=False),
    )
    op.create_index('ix_orders_order_number', 'orders', ['order_number'], unique=True)
    op.create_index('ix_orders_status', 'orders', ['status'])
    op.create_index('ix_orders_customer_email', 'orders', ['customer_email'])
    op.create_index('ix_orders_razorpay_order_id', 'orders', ['razorpay_order_id'])

    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column(
            'order_id', sa.Integer,
            sa.ForeignKey('orders.id', name='fk_order_items_order_id_orders', ondelete='CASCADE'),
            nullable=False,
        ),
        # Product reference kept without FK so lines survive catalog deletes
        sa.Column('product_id', sa.Integer, nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('price', sa.Integer, nullable=False),
        sa.Column('qty', sa.Integer, nullable=False),
    )

def downgrade():
    op.drop_table('order_items')
    op.drop_table('orders')

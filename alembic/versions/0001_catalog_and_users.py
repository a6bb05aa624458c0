from alembic import op
import sqlalchemy as sa

revision = '0001_catalog_and_users'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'collections',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=False),
        sa.Column('image', sa.String(500), nullable=False),
        sa.Column('meta', sa.JSON, nullable=True),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime, server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_collections_slug', 'collections', ['slug'], unique=True)

    op.create_table(
        'products',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(200), nullable=False),
        sa.Column('sku', sa.String(50), nullable=False),
        sa.Column('price', sa.Integer, nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='INR'),
        sa.Column(
            'collection_id', sa.Integer,
            sa.ForeignKey('collections.id', name='fk_products_collection_id_collections', ondelete='RESTRICT'),
            nullable=False,
        ),
        sa.Column('images', sa.JSON, nullable=True),
        sa.Column('description', sa.Text, nullable=False),
        sa.Column('specs', sa.JSON, nullable=True),
        sa.Column('stock', sa.Integer, nullable=False, server_default='0'),
        sa.Column('featured', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('is_published', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime, server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_products_slug', 'products', ['slug'], unique=True)
    op.create_index('ix_products_sku', 'products', ['sku'])
    op.create_index('ix_products_collection_id', 'products', ['collection_id'])

    op.create_table(
        'users',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='user'),
        sa.Column('password_hash', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime, server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

def downgrade():
    op.drop_table('users')
    op.drop_table('products')
    op.drop_table('collections')

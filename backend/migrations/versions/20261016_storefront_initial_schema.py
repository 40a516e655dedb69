"""storefront initial schema

Revision ID: sf0001_initial
Revises:
Create Date: 2026-10-16 00:00:00.000000

Creates the three storefront tables:
- products: catalog entries with the latest AI-generated copy
- payment_intents: local mirror of gateway payment intents
- shipments: labelled packages with flattened addresses and dimensions
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'sf0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ============================================================================
    # products
    # ============================================================================
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('category', sa.String(length=128), nullable=False),
        sa.Column('ai_generated_description', sa.Text(), nullable=True),
        sa.Column('ai_positioning', sa.Text(), nullable=True),
        sa.Column('ai_pricing_analysis', sa.Text(), nullable=True),
        sa.Column('ai_category', sa.String(length=128), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_ai_analysis', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_products_category', 'products', ['category'])

    # ============================================================================
    # payment_intents
    # ============================================================================
    op.create_table(
        'payment_intents',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('stripe_payment_intent_id', sa.String(length=255), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=True),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('currency', sa.String(length=8), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('customer_email', sa.String(length=255), nullable=True),
        sa.Column('customer_name', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('failure_reason', sa.String(length=255), nullable=True),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_payment_intents_stripe_payment_intent_id', 'payment_intents',
                    ['stripe_payment_intent_id'], unique=True)
    op.create_index('ix_payment_intents_product_id', 'payment_intents', ['product_id'])
    op.create_index('ix_payment_intents_status', 'payment_intents', ['status'])
    op.create_index('ix_payment_intents_created_at', 'payment_intents', ['created_at'])
    op.create_index('ix_payment_intents_email_created', 'payment_intents', ['customer_email', 'created_at'])

    # ============================================================================
    # shipments
    # ============================================================================
    op.create_table(
        'shipments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tracking_number', sa.String(length=32), nullable=False),
        sa.Column('provider', sa.String(length=16), nullable=False),
        sa.Column('speed', sa.String(length=16), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=True),
        sa.Column('payment_intent_id', sa.Integer(), nullable=True),
        sa.Column('from_name', sa.String(length=255), nullable=False),
        sa.Column('from_street1', sa.String(length=255), nullable=False),
        sa.Column('from_street2', sa.String(length=255), nullable=True),
        sa.Column('from_city', sa.String(length=128), nullable=False),
        sa.Column('from_state', sa.String(length=64), nullable=False),
        sa.Column('from_postal_code', sa.String(length=32), nullable=False),
        sa.Column('from_country', sa.String(length=8), nullable=False),
        sa.Column('to_name', sa.String(length=255), nullable=False),
        sa.Column('to_street1', sa.String(length=255), nullable=False),
        sa.Column('to_street2', sa.String(length=255), nullable=True),
        sa.Column('to_city', sa.String(length=128), nullable=False),
        sa.Column('to_state', sa.String(length=64), nullable=False),
        sa.Column('to_postal_code', sa.String(length=32), nullable=False),
        sa.Column('to_country', sa.String(length=8), nullable=False),
        sa.Column('to_phone', sa.String(length=64), nullable=True),
        sa.Column('to_email', sa.String(length=255), nullable=True),
        sa.Column('length', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('width', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('height', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('weight', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('shipping_cost', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('currency', sa.String(length=8), nullable=False),
        sa.Column('label_url', sa.String(length=512), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('estimated_delivery', sa.DateTime(timezone=True), nullable=True),
        sa.Column('actual_delivery', sa.DateTime(timezone=True), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['payment_intent_id'], ['payment_intents.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_shipments_tracking_number', 'shipments', ['tracking_number'], unique=True)
    op.create_index('ix_shipments_status', 'shipments', ['status'])
    op.create_index('ix_shipments_payment_intent_id', 'shipments', ['payment_intent_id'])
    op.create_index('ix_shipments_created_at', 'shipments', ['created_at'])
    op.create_index('ix_shipments_to_email_created', 'shipments', ['to_email', 'created_at'])


def downgrade():
    op.drop_table('shipments')
    op.drop_table('payment_intents')
    op.drop_table('products')

"""create carts and cart_lines tables

Revision ID: 0001_create_carts
Revises:
Create Date: 2026-10-18 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

revision = '0001_create_carts'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'carts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('total_items', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', name='uq_carts_user'),
        sa.CheckConstraint('total_amount >= 0', name='ck_carts_total_amount_nonneg'),
        sa.CheckConstraint('total_items >= 0', name='ck_carts_total_items_nonneg'),
    )
    op.create_index('ix_carts_id', 'carts', ['id'])

    op.create_table(
        'cart_lines',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('cart_id', sa.Integer(), sa.ForeignKey('carts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.String(64), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('image', sa.String(500), nullable=False, server_default=''),
        sa.Column('category', sa.String(100), nullable=False, server_default=''),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('cart_id', 'product_id', name='uq_cart_lines_cart_product'),
        sa.CheckConstraint('quantity > 0', name='ck_cart_lines_quantity_pos'),
        sa.CheckConstraint('price >= 0', name='ck_cart_lines_price_nonneg'),
    )
    op.create_index('ix_cart_lines_id', 'cart_lines', ['id'])
    op.create_index('ix_cart_lines_cart', 'cart_lines', ['cart_id'])


def downgrade():
    op.drop_index('ix_cart_lines_cart', table_name='cart_lines')
    op.drop_index('ix_cart_lines_id', table_name='cart_lines')
    op.drop_table('cart_lines')
    op.drop_index('ix_carts_id', table_name='carts')
    op.drop_table('carts')

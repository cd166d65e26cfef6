"""Initial schema - users, categories, suppliers, products, stock ledger

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


def _timestamps(with_updated_at: bool = True) -> list[sa.Column]:
    columns = [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]
    if with_updated_at:
        columns.append(
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False)
        )
    return columns


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('username', sa.String(length=30), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('role', sa.String(length=50), nullable=False, server_default='user'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
        sa.UniqueConstraint('username', name='uq_users_username'),
        sa.UniqueConstraint('email', name='uq_users_email')
    )
    op.create_index('ix_users_username', 'users', ['username'])
    op.create_index('ix_users_email', 'users', ['email'])

    op.create_table(
        'categories',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_categories'),
        sa.UniqueConstraint('name', name='uq_categories_name')
    )

    op.create_table(
        'suppliers',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=100), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('contact_person', sa.String(length=100), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        *_timestamps(),
        sa.CheckConstraint("status IN ('active', 'inactive')", name='ck_suppliers_status'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_suppliers_user_id_users', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_suppliers'),
        sa.UniqueConstraint('email', name='uq_suppliers_email')
    )
    op.create_index('idx_suppliers_user_id', 'suppliers', ['user_id'])
    op.create_index('idx_suppliers_status', 'suppliers', ['status'])

    op.create_table(
        'products',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('category_id', sa.Uuid(), nullable=True),
        sa.Column('supplier_id', sa.Uuid(), nullable=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('unique_code', sa.String(length=50), nullable=False),
        sa.Column('unit', sa.String(length=20), nullable=False),
        sa.Column('stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        *_timestamps(),
        sa.CheckConstraint('stock >= 0', name='ck_products_stock_non_negative'),
        sa.CheckConstraint(
            "status IN ('active', 'discontinued', 'out-of-stock')",
            name='ck_products_status'
        ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_products_user_id_users', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(
            ['category_id'], ['categories.id'], name='fk_products_category_id_categories', ondelete='SET NULL'
        ),
        sa.ForeignKeyConstraint(
            ['supplier_id'], ['suppliers.id'], name='fk_products_supplier_id_suppliers', ondelete='SET NULL'
        ),
        sa.PrimaryKeyConstraint('id', name='pk_products'),
        sa.UniqueConstraint('unique_code', name='uq_products_unique_code')
    )
    op.create_index('idx_products_user_id', 'products', ['user_id'])
    op.create_index('idx_products_low_stock', 'products', ['user_id', 'stock'])

    op.create_table(
        'stock_transactions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('transaction_type', sa.String(length=20), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('previous_stock', sa.Integer(), nullable=False),
        sa.Column('new_stock', sa.Integer(), nullable=False),
        sa.Column('reference_number', sa.String(length=50), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(with_updated_at=False),
        sa.CheckConstraint('quantity >= 1', name='ck_stock_transactions_quantity_positive'),
        sa.CheckConstraint('new_stock >= 0', name='ck_stock_transactions_new_stock_non_negative'),
        sa.CheckConstraint(
            "transaction_type IN ('in', 'out', 'adjustment', 'return')",
            name='ck_stock_transactions_transaction_type'
        ),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'], name='fk_stock_transactions_user_id_users', ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['product_id'], ['products.id'], name='fk_stock_transactions_product_id_products', ondelete='RESTRICT'
        ),
        sa.PrimaryKeyConstraint('id', name='pk_stock_transactions')
    )
    op.create_index('idx_stock_transactions_user', 'stock_transactions', ['user_id'])
    op.create_index('idx_stock_transactions_product', 'stock_transactions', ['product_id'])
    op.create_index('idx_stock_transactions_type', 'stock_transactions', ['transaction_type'])
    op.create_index('idx_stock_transactions_created_at', 'stock_transactions', ['created_at'])


def downgrade() -> None:
    op.drop_table('stock_transactions')
    op.drop_table('products')
    op.drop_table('suppliers')
    op.drop_table('categories')
    op.drop_table('users')

"""initial storefront schema

Revision ID: 20261019_initial
Revises: 
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_initial"
down_revision = None
branch_labels = None
depends_on = None


order_status = sa.Enum("pending", "confirmed", "shipped", "delivered", "cancelled", name="order_status")


def upgrade() -> None:
	op.create_table(
		"users",
		sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=False),
		sa.Column("first_name", sa.String(128), nullable=True),
		sa.Column("last_name", sa.String(128), nullable=True),
		sa.Column("phone", sa.String(32), nullable=True),
		sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.false()),
	)
	op.create_table(
		"categories",
		sa.Column("id", sa.Integer(), primary_key=True),
		sa.Column("name", sa.String(128), nullable=False, unique=True),
		sa.Column("description", sa.Text(), nullable=True),
	)
	op.create_table(
		"products",
		sa.Column("id", sa.Integer(), primary_key=True),
		sa.Column("name", sa.String(255), nullable=False),
		sa.Column("description", sa.Text(), nullable=True),
		sa.Column("price", sa.Numeric(10, 2), nullable=False),
		sa.Column("stock_quantity", sa.Integer(), nullable=False, server_default="0"),
		sa.Column("brand", sa.String(128), nullable=True),
		sa.Column("is_featured", sa.Boolean(), nullable=False, server_default=sa.false()),
		sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
		sa.Column("photo_file_id", sa.String(256), nullable=True),
		sa.Column("category_id", sa.Integer(), sa.ForeignKey("categories.id"), nullable=True),
		sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
		sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
		sa.CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
		sa.CheckConstraint("stock_quantity >= 0", name="ck_products_stock_non_negative"),
	)
	op.create_table(
		"cart_items",
		sa.Column("id", sa.Integer(), primary_key=True),
		sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id"), nullable=False),
		sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id"), nullable=False),
		sa.Column("quantity", sa.Integer(), nullable=False),
		sa.Column("added_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
		sa.UniqueConstraint("user_id", "product_id", name="uq_cart_items_user_product"),
		sa.CheckConstraint("quantity > 0", name="ck_cart_items_quantity_positive"),
	)
	op.create_index("ix_cart_items_user_id", "cart_items", ["user_id"])
	op.create_table(
		"orders",
		sa.Column("id", sa.Integer(), primary_key=True),
		sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id"), nullable=False),
		sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
		sa.Column("status", order_status, nullable=False, server_default="pending"),
		sa.Column("shipping_address", sa.Text(), nullable=False),
		sa.Column("billing_address", sa.Text(), nullable=False),
		sa.Column("idempotency_key", sa.String(64), nullable=True),
		sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
		sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
		sa.UniqueConstraint("user_id", "idempotency_key", name="uq_orders_user_idempotency_key"),
	)
	op.create_index("ix_orders_user_id", "orders", ["user_id"])
	op.create_table(
		"order_items",
		sa.Column("id", sa.Integer(), primary_key=True),
		sa.Column("order_id", sa.Integer(), sa.ForeignKey("orders.id"), nullable=False),
		sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id"), nullable=False),
		sa.Column("quantity", sa.Integer(), nullable=False),
		sa.Column("price_at_time", sa.Numeric(10, 2), nullable=False),
	)
	op.create_index("ix_order_items_order_id", "order_items", ["order_id"])
	op.create_table(
		"wishlist_items",
		sa.Column("id", sa.Integer(), primary_key=True),
		sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id"), nullable=False),
		sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id"), nullable=False),
		sa.Column("added_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
		sa.UniqueConstraint("user_id", "product_id", name="uq_wishlist_items_user_product"),
	)
	op.create_index("ix_wishlist_items_user_id", "wishlist_items", ["user_id"])
	op.create_table(
		"reviews",
		sa.Column("id", sa.Integer(), primary_key=True),
		sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id"), nullable=False),
		sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id"), nullable=False),
		sa.Column("rating", sa.Integer(), nullable=False),
		sa.Column("comment", sa.Text(), nullable=True),
		sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
		sa.UniqueConstraint("user_id", "product_id", name="uq_reviews_user_product"),
		sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),
	)
	op.create_index("ix_reviews_product_id", "reviews", ["product_id"])


def downgrade() -> None:
	op.drop_index("ix_reviews_product_id", table_name="reviews")
	op.drop_table("reviews")
	op.drop_index("ix_wishlist_items_user_id", table_name="wishlist_items")
	op.drop_table("wishlist_items")
	op.drop_index("ix_order_items_order_id", table_name="order_items")
	op.drop_table("order_items")
	op.drop_index("ix_orders_user_id", table_name="orders")
	op.drop_table("orders")
	op.drop_index("ix_cart_items_user_id", table_name="cart_items")
	op.drop_table("cart_items")
	op.drop_table("products")
	op.drop_table("categories")
	op.drop_table("users")
	order_status.drop(op.get_bind(), checkfirst=True)

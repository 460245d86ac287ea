from datetime import datetime
from decimal import Decimal
from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.session import Base


class Category(Base):
	__tablename__ = "categories"

	id: Mapped[int] = mapped_column(primary_key=True)
	name: Mapped[str] = mapped_column(String(128), unique=True)
	description: Mapped[str | None] = mapped_column(Text(), nullable=True)

	# Relationships
	products: Mapped[list["Product"]] = relationship("Product", back_populates="category")


class Product(Base):
	__tablename__ = "products"
	__table_args__ = (
		CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
		CheckConstraint("stock_quantity >= 0", name="ck_products_stock_non_negative"),
	)

	id: Mapped[int] = mapped_column(primary_key=True)
	name: Mapped[str] = mapped_column(String(255))
	description: Mapped[str | None] = mapped_column(Text())
	price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
	stock_quantity: Mapped[int] = mapped_column(default=0)
	brand: Mapped[str | None] = mapped_column(String(128), nullable=True)
	is_featured: Mapped[bool] = mapped_column(default=False)
	is_deleted: Mapped[bool] = mapped_column(default=False)
	photo_file_id: Mapped[str | None] = mapped_column(String(256), nullable=True)
	category_id: Mapped[int | None] = mapped_column(ForeignKey("categories.id"), nullable=True)
	created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
	updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)

	# Relationships
	category: Mapped["Category | None"] = relationship("Category", back_populates="products")

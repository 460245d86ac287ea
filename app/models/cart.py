from datetime import datetime
from sqlalchemy import CheckConstraint, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base


class CartItem(Base):
	__tablename__ = "cart_items"
	__table_args__ = (
		UniqueConstraint("user_id", "product_id", name="uq_cart_items_user_product"),
		CheckConstraint("quantity > 0", name="ck_cart_items_quantity_positive"),
	)

	id: Mapped[int] = mapped_column(primary_key=True)
	user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
	product_id: Mapped[int] = mapped_column(ForeignKey("products.id"))
	quantity: Mapped[int]
	added_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)

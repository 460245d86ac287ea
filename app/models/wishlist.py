from datetime import datetime
from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base


class WishlistItem(Base):
	__tablename__ = "wishlist_items"
	__table_args__ = (
		UniqueConstraint("user_id", "product_id", name="uq_wishlist_items_user_product"),
	)

	id: Mapped[int] = mapped_column(primary_key=True)
	user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
	product_id: Mapped[int] = mapped_column(ForeignKey("products.id"))
	added_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)

from datetime import datetime
from sqlalchemy import CheckConstraint, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base


class Review(Base):
	__tablename__ = "reviews"
	__table_args__ = (
		UniqueConstraint("user_id", "product_id", name="uq_reviews_user_product"),
		CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),
	)

	id: Mapped[int] = mapped_column(primary_key=True)
	user_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
	product_id: Mapped[int] = mapped_column(ForeignKey("products.id"), index=True)
	rating: Mapped[int]
	comment: Mapped[str | None] = mapped_column(Text(), nullable=True)
	created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)

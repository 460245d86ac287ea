import enum
from datetime import datetime
from decimal import Decimal
from sqlalchemy import Enum, ForeignKey, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.session import Base


class OrderStatus(str, enum.Enum):
	pending = "pending"
	confirmed = "confirmed"
	shipped = "shipped"
	delivered = "delivered"
	cancelled = "cancelled"


class Order(Base):
	__tablename__ = "orders"
	__table_args__ = (
		UniqueConstraint("user_id", "idempotency_key", name="uq_orders_user_idempotency_key"),
	)

	id: Mapped[int] = mapped_column(primary_key=True)
	user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
	total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2))
	status: Mapped[OrderStatus] = mapped_column(
		Enum(OrderStatus, name="order_status"), default=OrderStatus.pending
	)
	shipping_address: Mapped[str] = mapped_column(Text())
	billing_address: Mapped[str] = mapped_column(Text())
	idempotency_key: Mapped[str | None] = mapped_column(String(64), nullable=True)
	created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
	updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)

	items: Mapped[list["OrderItem"]] = relationship(back_populates="order", cascade="all, delete-orphan")


class OrderItem(Base):
	__tablename__ = "order_items"

	id: Mapped[int] = mapped_column(primary_key=True)
	order_id: Mapped[int] = mapped_column(ForeignKey("orders.id"), index=True)
	product_id: Mapped[int] = mapped_column(ForeignKey("products.id"))
	quantity: Mapped[int]
	# price snapshot taken when the order was placed
	price_at_time: Mapped[Decimal] = mapped_column(Numeric(10, 2))

	order: Mapped[Order] = relationship(back_populates="items")

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from app.models.order import OrderStatus


class PlaceOrderInput(BaseModel):
	user_id: int
	shipping_address: str = Field(min_length=1, max_length=1000)
	billing_address: str = Field(min_length=1, max_length=1000)
	idempotency_key: str | None = Field(default=None, min_length=1, max_length=64)

	model_config = ConfigDict(str_strip_whitespace=True)


class CartLineSnapshot(BaseModel):
	"""One cart line joined with the product's price and stock as read in the current transaction."""

	cart_item_id: int
	product_id: int
	quantity: int
	price: Decimal
	stock_quantity: int
	name: str = ""

	@property
	def line_total(self) -> Decimal:
		return self.price * self.quantity


class OrderItemRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: int
	order_id: int
	product_id: int
	quantity: int
	price_at_time: Decimal


class OrderRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: int
	user_id: int
	total_amount: Decimal
	status: OrderStatus
	shipping_address: str
	billing_address: str
	idempotency_key: str | None = None
	created_at: datetime
	updated_at: datetime
	items: list[OrderItemRead] = Field(default_factory=list)


class CategoryCreate(BaseModel):
	name: str = Field(min_length=1, max_length=128)
	description: str | None = None


class ProductCreate(BaseModel):
	name: str = Field(min_length=1, max_length=255)
	description: str | None = None
	price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
	stock_quantity: int = Field(ge=0)
	category_id: int | None = None
	brand: str | None = None
	is_featured: bool = False
	photo_file_id: str | None = None


class ProductUpdate(BaseModel):
	name: str | None = Field(default=None, min_length=1, max_length=255)
	description: str | None = None
	price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
	stock_quantity: int | None = Field(default=None, ge=0)
	category_id: int | None = None
	brand: str | None = None
	is_featured: bool | None = None
	photo_file_id: str | None = None


class ReviewCreate(BaseModel):
	user_id: int
	product_id: int
	rating: int = Field(ge=1, le=5)
	comment: str | None = None

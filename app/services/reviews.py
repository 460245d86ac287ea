from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.order import Order, OrderItem, OrderStatus
from app.models.review import Review
from app.schemas import ReviewCreate
from app.services.catalog import load_product
from app.services.errors import AlreadyExists, NotFound, NotPurchased


async def create_review(session: AsyncSession, data: ReviewCreate) -> Review:
	"""Only users with a non-cancelled order containing the product may review it, once."""
	if await load_product(session, data.product_id) is None:
		raise NotFound("Product", data.product_id)
	purchased = await session.execute(
		select(OrderItem.id)
		.join(Order, Order.id == OrderItem.order_id)
		.where(
			Order.user_id == data.user_id,
			OrderItem.product_id == data.product_id,
			Order.status != OrderStatus.cancelled,
		)
		.limit(1)
	)
	if purchased.first() is None:
		raise NotPurchased("User must purchase product before reviewing")
	existing = await session.execute(
		select(Review.id).where(Review.user_id == data.user_id, Review.product_id == data.product_id)
	)
	if existing.first() is not None:
		raise AlreadyExists("User has already reviewed this product")
	review = Review(**data.model_dump())
	session.add(review)
	await session.commit()
	return review


async def get_product_reviews(session: AsyncSession, product_id: int, limit: int = 10) -> list[Review]:
	res = await session.execute(
		select(Review)
		.where(Review.product_id == product_id)
		.order_by(Review.created_at.desc(), Review.id.desc())
		.limit(limit)
	)
	return list(res.scalars().all())

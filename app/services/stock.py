from loguru import logger
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.product import Product
from app.services.errors import InsufficientStock


async def decrement_stock(session: AsyncSession, product_id: int, amount: int) -> None:
	"""Take `amount` units off a product's stock inside the caller's transaction.

	The update only matches while enough stock is left, so a concurrent writer that got
	there first makes this raise instead of driving the ledger negative.
	"""
	if amount <= 0:
		raise ValueError("amount must be positive")
	result = await session.execute(
		update(Product)
		.where(Product.id == product_id, Product.stock_quantity >= amount)
		.values(stock_quantity=Product.stock_quantity - amount)
		.execution_options(synchronize_session=False)
	)
	if result.rowcount != 1:
		logger.info("Stock decrement refused: product={} amount={}", product_id, amount)
		raise InsufficientStock(product_id, requested=amount)

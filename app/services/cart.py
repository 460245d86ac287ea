from decimal import Decimal

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.cart import CartItem
from app.models.product import Product
from app.schemas import CartLineSnapshot
from app.services.catalog import load_product
from app.services.errors import InsufficientStock, NotFound


async def read_cart(session: AsyncSession, user_id: int, *, lock: bool = False) -> list[CartLineSnapshot]:
	"""Cart lines joined with the current product price and stock.

	With ``lock=True`` the cart and product rows stay locked until the transaction ends
	(``SELECT ... FOR UPDATE``; ignored by SQLite, which serializes writers itself).
	"""
	stmt = (
		select(
			CartItem.id,
			CartItem.product_id,
			CartItem.quantity,
			Product.price,
			Product.stock_quantity,
			Product.name,
		)
		.join(Product, Product.id == CartItem.product_id)
		.where(CartItem.user_id == user_id)
		.order_by(CartItem.product_id)
	)
	if lock:
		stmt = stmt.with_for_update()
	res = await session.execute(stmt)
	return [
		CartLineSnapshot(
			cart_item_id=row.id,
			product_id=row.product_id,
			quantity=row.quantity,
			price=row.price,
			stock_quantity=row.stock_quantity,
			name=row.name,
		)
		for row in res.all()
	]


def cart_total(lines: list[CartLineSnapshot]) -> Decimal:
	total = sum((line.line_total for line in lines), Decimal("0"))
	return total.quantize(Decimal("0.01"))


async def add_to_cart(session: AsyncSession, user_id: int, product_id: int, quantity: int) -> CartItem:
	if quantity <= 0:
		raise ValueError("quantity must be positive")
	product = await load_product(session, product_id)
	if product is None:
		raise NotFound("Product", product_id)
	res = await session.execute(
		select(CartItem).where(CartItem.user_id == user_id, CartItem.product_id == product_id)
	)
	item = res.scalars().first()
	new_qty = quantity + (item.quantity if item else 0)
	if new_qty > product.stock_quantity:
		raise InsufficientStock(product_id, requested=new_qty, available=product.stock_quantity)
	if item:
		item.quantity = new_qty
	else:
		item = CartItem(user_id=user_id, product_id=product_id, quantity=quantity)
		session.add(item)
	await session.commit()
	return item


async def update_cart_item(session: AsyncSession, user_id: int, cart_item_id: int, quantity: int) -> CartItem:
	if quantity <= 0:
		raise ValueError("quantity must be positive")
	res = await session.execute(
		select(CartItem).where(CartItem.id == cart_item_id, CartItem.user_id == user_id)
	)
	item = res.scalars().first()
	if item is None:
		raise NotFound("Cart item", cart_item_id)
	product = await load_product(session, item.product_id)
	if product is None:
		raise NotFound("Product", item.product_id)
	if quantity > product.stock_quantity:
		raise InsufficientStock(item.product_id, requested=quantity, available=product.stock_quantity)
	item.quantity = quantity
	await session.commit()
	return item


async def remove_from_cart(session: AsyncSession, user_id: int, cart_item_id: int) -> bool:
	res = await session.execute(
		delete(CartItem).where(CartItem.id == cart_item_id, CartItem.user_id == user_id)
	)
	await session.commit()
	return res.rowcount > 0


async def clear_cart(session: AsyncSession, user_id: int) -> int:
	res = await session.execute(delete(CartItem).where(CartItem.user_id == user_id))
	await session.commit()
	return res.rowcount


async def delete_cart_lines(session: AsyncSession, lines: list[CartLineSnapshot]) -> int:
	"""Delete exactly the given lines; a line whose quantity changed since it was read is left alone.

	Does not commit. Returns the number of rows removed.
	"""
	deleted = 0
	for line in lines:
		res = await session.execute(
			delete(CartItem)
			.where(CartItem.id == line.cart_item_id, CartItem.quantity == line.quantity)
			.execution_options(synchronize_session=False)
		)
		deleted += res.rowcount
	return deleted

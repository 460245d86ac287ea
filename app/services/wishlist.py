from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.product import Product
from app.models.wishlist import WishlistItem
from app.services.catalog import load_product
from app.services.errors import AlreadyExists, NotFound


async def add_to_wishlist(session: AsyncSession, user_id: int, product_id: int) -> WishlistItem:
	if await load_product(session, product_id) is None:
		raise NotFound("Product", product_id)
	res = await session.execute(
		select(WishlistItem.id).where(WishlistItem.user_id == user_id, WishlistItem.product_id == product_id)
	)
	if res.first() is not None:
		raise AlreadyExists("Product already in wishlist")
	item = WishlistItem(user_id=user_id, product_id=product_id)
	session.add(item)
	await session.commit()
	return item


async def remove_from_wishlist(session: AsyncSession, user_id: int, product_id: int) -> bool:
	res = await session.execute(
		delete(WishlistItem).where(WishlistItem.user_id == user_id, WishlistItem.product_id == product_id)
	)
	await session.commit()
	return res.rowcount > 0


async def get_wishlist_items(session: AsyncSession, user_id: int) -> list[tuple[WishlistItem, Product]]:
	res = await session.execute(
		select(WishlistItem, Product)
		.join(Product, Product.id == WishlistItem.product_id)
		.where(WishlistItem.user_id == user_id, Product.is_deleted.is_(False))
		.order_by(WishlistItem.added_at.desc(), WishlistItem.id.desc())
	)
	return [(item, product) for item, product in res.all()]

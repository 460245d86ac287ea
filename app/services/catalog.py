from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from loguru import logger
from sqlalchemy import ColumnElement, and_, delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.cart import CartItem
from app.models.product import Category, Product
from app.schemas import CategoryCreate, ProductCreate, ProductUpdate
from app.services.errors import AlreadyExists, NotFound


# Product listing filters. Each kind knows how to turn itself into a WHERE clause.

@dataclass(frozen=True)
class CategoryFilter:
	category_id: int

	def clause(self) -> ColumnElement[bool]:
		return Product.category_id == self.category_id


@dataclass(frozen=True)
class BrandFilter:
	brand: str

	def clause(self) -> ColumnElement[bool]:
		return Product.brand == self.brand


@dataclass(frozen=True)
class PriceRangeFilter:
	min_price: Decimal | None = None
	max_price: Decimal | None = None

	def clause(self) -> ColumnElement[bool]:
		conditions = []
		if self.min_price is not None:
			conditions.append(Product.price >= self.min_price)
		if self.max_price is not None:
			conditions.append(Product.price <= self.max_price)
		return and_(True, *conditions)


@dataclass(frozen=True)
class FeaturedFilter:
	is_featured: bool = True

	def clause(self) -> ColumnElement[bool]:
		return Product.is_featured == self.is_featured


@dataclass(frozen=True)
class SearchFilter:
	text: str

	def clause(self) -> ColumnElement[bool]:
		pattern = f"%{self.text}%"
		return or_(Product.name.ilike(pattern), Product.description.ilike(pattern))


ProductFilter = CategoryFilter | BrandFilter | PriceRangeFilter | FeaturedFilter | SearchFilter


async def create_category(session: AsyncSession, data: CategoryCreate) -> Category:
	category = Category(name=data.name, description=data.description)
	session.add(category)
	try:
		await session.commit()
	except IntegrityError as exc:
		await session.rollback()
		raise AlreadyExists(f"Category '{data.name}' already exists") from exc
	return category


async def get_categories(session: AsyncSession) -> list[Category]:
	result = await session.execute(select(Category).order_by(Category.name))
	return list(result.scalars().all())


async def load_product(session: AsyncSession, product_id: int) -> Product | None:
	result = await session.execute(select(Product).where(Product.id == product_id, Product.is_deleted.is_(False)))
	return result.scalars().first()


async def get_product_by_id(session: AsyncSession, product_id: int) -> Product:
	product = await load_product(session, product_id)
	if product is None:
		raise NotFound("Product", product_id)
	return product


async def get_products(
	session: AsyncSession,
	filters: Sequence[ProductFilter] = (),
	limit: int | None = None,
	offset: int | None = None,
) -> list[Product]:
	stmt = (
		select(Product)
		.where(Product.is_deleted.is_(False), *(f.clause() for f in filters))
		.order_by(Product.created_at.desc(), Product.id.desc())
	)
	if limit is not None:
		stmt = stmt.limit(limit)
	if offset is not None:
		stmt = stmt.offset(offset)
	result = await session.execute(stmt)
	return list(result.scalars().all())


async def create_product(session: AsyncSession, data: ProductCreate) -> Product:
	if data.category_id is not None:
		cat = await session.get(Category, data.category_id)
		if cat is None:
			raise NotFound("Category", data.category_id)
	product = Product(**data.model_dump())
	session.add(product)
	await session.commit()
	logger.info("Product created: id={} name={}", product.id, product.name)
	return product


async def update_product(session: AsyncSession, product_id: int, data: ProductUpdate) -> Product:
	"""Apply the fields set on `data`. This is the admin path for price and stock edits."""
	product = await get_product_by_id(session, product_id)
	changes = data.model_dump(exclude_unset=True)
	if changes.get("category_id") is not None:
		cat = await session.get(Category, changes["category_id"])
		if cat is None:
			raise NotFound("Category", changes["category_id"])
	for field, value in changes.items():
		setattr(product, field, value)
	await session.commit()
	logger.info("Product updated: id={} fields={}", product_id, sorted(changes))
	return product


async def archive_product(session: AsyncSession, product_id: int) -> None:
	product = await get_product_by_id(session, product_id)
	product.is_deleted = True
	# archived products can no longer be ordered
	await session.execute(delete(CartItem).where(CartItem.product_id == product_id))
	await session.commit()
	logger.info("Product archived: id={}", product_id)

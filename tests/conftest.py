"""Shared pytest fixtures: a throwaway SQLite database per test and a few catalog rows."""

from decimal import Decimal

import pytest
from sqlalchemy import func, select

import app.models  # noqa: F401
from app.db.session import Base, create_engine, create_session_factory
from app.models import CartItem, Category, Order, OrderItem, Product, User


@pytest.fixture
async def engine(tmp_path):
	db_engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'storefront.db'}")
	async with db_engine.begin() as conn:
		await conn.run_sync(Base.metadata.create_all)
	yield db_engine
	await db_engine.dispose()


@pytest.fixture
def session_factory(engine):
	return create_session_factory(engine)


@pytest.fixture
async def session(session_factory):
	async with session_factory() as db_session:
		yield db_session


@pytest.fixture
async def user(session):
	"""Create a test user."""
	u = User(id=1001, first_name="Test", last_name="User")
	session.add(u)
	await session.commit()
	return u


@pytest.fixture
async def other_user(session):
	u = User(id=2002, first_name="Other", last_name="User")
	session.add(u)
	await session.commit()
	return u


@pytest.fixture
async def category(session):
	c = Category(name="Phones", description="Smartphones")
	session.add(c)
	await session.commit()
	return c


@pytest.fixture
def make_product(session, category):
	async def _make(name="Product", price="10.00", stock=10, **kwargs):
		p = Product(name=name, price=Decimal(price), stock_quantity=stock, category_id=category.id, **kwargs)
		session.add(p)
		await session.commit()
		return p
	return _make


@pytest.fixture
def put_in_cart(session):
	async def _put(user_id, product_id, quantity):
		item = CartItem(user_id=user_id, product_id=product_id, quantity=quantity)
		session.add(item)
		await session.commit()
		return item
	return _put


@pytest.fixture
def db_state(session_factory):
	"""Snapshot of everything order placement may touch, read through a fresh session."""
	async def _state():
		async with session_factory() as s:
			stock = dict((await s.execute(select(Product.id, Product.stock_quantity))).all())
			cart = sorted(
				(await s.execute(select(CartItem.user_id, CartItem.product_id, CartItem.quantity))).all()
			)
			orders = await s.scalar(select(func.count()).select_from(Order))
			items = await s.scalar(select(func.count()).select_from(OrderItem))
		return {"stock": stock, "cart": cart, "orders": orders, "order_items": items}
	return _state

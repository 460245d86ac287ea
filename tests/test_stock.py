import pytest

from app.services.errors import InsufficientStock
from app.services.stock import decrement_stock


async def test_decrement_stock(session, make_product, db_state):
	p = await make_product(stock=5)
	await decrement_stock(session, p.id, 5)
	await session.commit()
	assert (await db_state())["stock"] == {p.id: 0}


async def test_decrement_never_goes_negative(session, make_product, db_state):
	p = await make_product(stock=2)
	# rollback expires loaded instances
	product_id = p.id
	with pytest.raises(InsufficientStock) as exc_info:
		await decrement_stock(session, product_id, 3)
	await session.rollback()

	assert exc_info.value.product_id == product_id
	assert (await db_state())["stock"] == {product_id: 2}


async def test_decrement_unknown_product(session):
	with pytest.raises(InsufficientStock):
		await decrement_stock(session, 12345, 1)


async def test_decrement_requires_positive_amount(session, make_product):
	p = await make_product()
	with pytest.raises(ValueError):
		await decrement_stock(session, p.id, 0)

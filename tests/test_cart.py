from decimal import Decimal

import pytest

from app.services import cart as cart_service
from app.services.catalog import archive_product
from app.services.errors import InsufficientStock, NotFound


async def test_add_to_cart_creates_and_merges_lines(session, user, make_product, db_state):
	p = await make_product(stock=5)

	first = await cart_service.add_to_cart(session, user.id, p.id, 2)
	second = await cart_service.add_to_cart(session, user.id, p.id, 1)

	assert first.id == second.id
	assert (await db_state())["cart"] == [(user.id, p.id, 3)]


async def test_add_to_cart_rejects_quantity_above_stock(session, user, make_product, db_state):
	p = await make_product(stock=3)
	await cart_service.add_to_cart(session, user.id, p.id, 2)

	with pytest.raises(InsufficientStock) as exc_info:
		await cart_service.add_to_cart(session, user.id, p.id, 2)

	assert exc_info.value.available == 3
	assert (await db_state())["cart"] == [(user.id, p.id, 2)]


async def test_add_to_cart_unknown_or_archived_product(session, user, make_product):
	with pytest.raises(NotFound):
		await cart_service.add_to_cart(session, user.id, 9999, 1)

	p = await make_product()
	await archive_product(session, p.id)
	with pytest.raises(NotFound):
		await cart_service.add_to_cart(session, user.id, p.id, 1)


async def test_add_to_cart_requires_positive_quantity(session, user, make_product):
	p = await make_product()
	with pytest.raises(ValueError):
		await cart_service.add_to_cart(session, user.id, p.id, 0)


async def test_update_and_remove_only_touch_own_lines(session, user, other_user, make_product, put_in_cart, db_state):
	p = await make_product()
	mine = await put_in_cart(user.id, p.id, 1)

	with pytest.raises(NotFound):
		await cart_service.update_cart_item(session, other_user.id, mine.id, 5)
	assert await cart_service.remove_from_cart(session, other_user.id, mine.id) is False

	updated = await cart_service.update_cart_item(session, user.id, mine.id, 4)
	assert updated.quantity == 4
	assert await cart_service.remove_from_cart(session, user.id, mine.id) is True
	assert (await db_state())["cart"] == []


async def test_update_cart_item_cannot_exceed_stock(session, user, make_product, put_in_cart, db_state):
	p = await make_product(stock=3)
	product_id = p.id
	line = await put_in_cart(user.id, product_id, 1)
	line_id = line.id

	with pytest.raises(InsufficientStock) as exc_info:
		await cart_service.update_cart_item(session, user.id, line_id, 4)

	assert exc_info.value.available == 3
	assert (await db_state())["cart"] == [(user.id, product_id, 1)]
	updated = await cart_service.update_cart_item(session, user.id, line_id, 3)
	assert updated.quantity == 3


async def test_read_cart_joins_price_and_stock(session, user, make_product, put_in_cart):
	a = await make_product("A", "2.50", stock=7)
	b = await make_product("B", "1.25", stock=1)
	await put_in_cart(user.id, b.id, 2)
	await put_in_cart(user.id, a.id, 4)

	lines = await cart_service.read_cart(session, user.id)

	assert [(l.product_id, l.quantity, l.price, l.stock_quantity, l.name) for l in lines] == [
		(a.id, 4, Decimal("2.50"), 7, "A"),
		(b.id, 2, Decimal("1.25"), 1, "B"),
	]
	assert cart_service.cart_total(lines) == Decimal("12.50")


async def test_clear_cart(session, user, other_user, make_product, put_in_cart, db_state):
	p = await make_product()
	await put_in_cart(user.id, p.id, 1)
	await put_in_cart(other_user.id, p.id, 1)

	assert await cart_service.clear_cart(session, user.id) == 1
	assert (await db_state())["cart"] == [(other_user.id, p.id, 1)]


async def test_delete_cart_lines_skips_changed_lines(session, user, make_product, put_in_cart, db_state):
	a = await make_product("A")
	b = await make_product("B")
	await put_in_cart(user.id, a.id, 1)
	await put_in_cart(user.id, b.id, 1)
	lines = await cart_service.read_cart(session, user.id)
	await session.commit()

	await cart_service.add_to_cart(session, user.id, b.id, 1)
	deleted = await cart_service.delete_cart_lines(session, lines)
	await session.commit()

	assert deleted == 1
	assert (await db_state())["cart"] == [(user.id, b.id, 2)]

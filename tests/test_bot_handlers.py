from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import func, select

from app.bot.handlers.user import catalog as user_handlers
from app.models import User, WishlistItem


@pytest.fixture(autouse=True)
def handlers_db(monkeypatch, session_factory):
	monkeypatch.setattr(user_handlers, "SessionLocal", session_factory)


def _callback(user_id, data):
	return SimpleNamespace(
		data=data,
		from_user=SimpleNamespace(id=user_id, first_name="Ann", last_name=None),
		message=SimpleNamespace(edit_text=AsyncMock(), answer=AsyncMock()),
		answer=AsyncMock(),
	)


async def test_cart_line_buttons_change_quantity(user, make_product, put_in_cart, db_state):
	p = await make_product(stock=3)
	product_id = p.id
	line = await put_in_cart(user.id, product_id, 2)
	line_id = line.id

	await user_handlers.cart_line_change(_callback(user.id, f"cartline:inc:{line_id}:2"))
	assert (await db_state())["cart"] == [(user.id, product_id, 3)]

	cb = _callback(user.id, f"cartline:inc:{line_id}:3")
	await user_handlers.cart_line_change(cb)
	assert (await db_state())["cart"] == [(user.id, product_id, 3)]
	assert cb.answer.await_args.kwargs["show_alert"] is True

	await user_handlers.cart_line_change(_callback(user.id, f"cartline:dec:{line_id}:3"))
	assert (await db_state())["cart"] == [(user.id, product_id, 2)]


async def test_cart_line_removed_by_delete_or_last_decrement(user, make_product, put_in_cart, db_state):
	a = await make_product("A")
	b = await make_product("B")
	line_a = await put_in_cart(user.id, a.id, 1)
	line_b = await put_in_cart(user.id, b.id, 4)
	line_a_id, line_b_id = line_a.id, line_b.id

	await user_handlers.cart_line_change(_callback(user.id, f"cartline:dec:{line_a_id}:1"))
	cb = _callback(user.id, f"cartline:del:{line_b_id}")
	await user_handlers.cart_line_change(cb)

	assert (await db_state())["cart"] == []
	assert cb.message.edit_text.await_args.args[0] == "🛒 Корзина пуста"


async def test_cart_line_buttons_ignore_other_users_lines(user, other_user, make_product, put_in_cart, db_state):
	p = await make_product()
	product_id = p.id
	line = await put_in_cart(user.id, product_id, 2)

	await user_handlers.cart_line_change(_callback(other_user.id, f"cartline:inc:{line.id}:2"))

	assert (await db_state())["cart"] == [(user.id, product_id, 2)]


async def test_wishlist_remove_button(session, session_factory, user, make_product):
	p = await make_product()
	product_id = p.id
	session.add(WishlistItem(user_id=user.id, product_id=product_id))
	await session.commit()

	cb = _callback(user.id, f"wish:del:{product_id}")
	await user_handlers.wishlist_remove(cb)

	assert cb.message.edit_text.await_args.args[0] == "Избранное пусто"
	async with session_factory() as s:
		remaining = await s.scalar(select(func.count()).select_from(WishlistItem))
	assert remaining == 0


async def test_checkout_phone_step_saves_phone(session_factory, user):
	state = SimpleNamespace(set_state=AsyncMock(), get_data=AsyncMock(return_value={
		"shipping_address": "123 Main St", "billing_address": "456 Oak Ave",
	}))
	message = SimpleNamespace(
		text="+7 999 123-45-67",
		from_user=SimpleNamespace(id=user.id, first_name="Ann", last_name=None),
		answer=AsyncMock(),
	)

	await user_handlers.checkout_phone(message, state)

	state.set_state.assert_awaited_with(user_handlers.CheckoutStates.confirm)
	async with session_factory() as s:
		assert (await s.get(User, user.id)).phone == "+79991234567"

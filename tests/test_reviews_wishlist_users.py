import pytest
from pydantic import ValidationError

from app.core.config import settings
from app.models import OrderStatus, User
from app.schemas import ReviewCreate
from app.services import orders as order_service
from app.services import reviews as review_service
from app.services import users as user_service
from app.services import wishlist as wishlist_service
from app.services.errors import AlreadyExists, NotFound, NotPurchased


async def _buy(session_factory, user_id, product_id, put_in_cart):
	await put_in_cart(user_id, product_id, 1)
	async with session_factory() as s:
		return await order_service.place_order(s, user_id, "addr", "addr")


async def test_review_requires_purchase(session, session_factory, user, make_product, put_in_cart):
	p = await make_product()
	data = ReviewCreate(user_id=user.id, product_id=p.id, rating=5, comment="great")

	with pytest.raises(NotPurchased):
		await review_service.create_review(session, data)

	await _buy(session_factory, user.id, p.id, put_in_cart)
	review = await review_service.create_review(session, data)
	assert review.id is not None

	with pytest.raises(AlreadyExists):
		await review_service.create_review(session, data)

	reviews = await review_service.get_product_reviews(session, p.id)
	assert [(r.rating, r.comment) for r in reviews] == [(5, "great")]


async def test_cancelled_order_does_not_count_as_purchase(session, session_factory, user, make_product, put_in_cart):
	p = await make_product()
	order = await _buy(session_factory, user.id, p.id, put_in_cart)
	await order_service.update_order_status(session, order.id, OrderStatus.cancelled)

	with pytest.raises(NotPurchased):
		await review_service.create_review(session, ReviewCreate(user_id=user.id, product_id=p.id, rating=3))


async def test_review_of_unknown_product(session, user):
	with pytest.raises(NotFound):
		await review_service.create_review(session, ReviewCreate(user_id=user.id, product_id=42, rating=4))


@pytest.mark.parametrize("rating", [0, 6])
def test_review_rating_range(rating):
	with pytest.raises(ValidationError):
		ReviewCreate(user_id=1, product_id=1, rating=rating)


async def test_wishlist(session, user, make_product):
	a = await make_product("A")
	b = await make_product("B")

	await wishlist_service.add_to_wishlist(session, user.id, a.id)
	await wishlist_service.add_to_wishlist(session, user.id, b.id)
	with pytest.raises(AlreadyExists):
		await wishlist_service.add_to_wishlist(session, user.id, a.id)
	with pytest.raises(NotFound):
		await wishlist_service.add_to_wishlist(session, user.id, 31337)

	items = await wishlist_service.get_wishlist_items(session, user.id)
	assert [product.id for _, product in items] == [b.id, a.id]

	assert await wishlist_service.remove_from_wishlist(session, user.id, a.id) is True
	assert await wishlist_service.remove_from_wishlist(session, user.id, a.id) is False
	assert [product.id for _, product in await wishlist_service.get_wishlist_items(session, user.id)] == [b.id]


async def test_ensure_user_creates_then_updates(session, monkeypatch):
	monkeypatch.setattr(settings, "admin_ids", "555, 777")

	created = await user_service.ensure_user(session, 555, "Ann", None)
	assert created.is_admin is True
	again = await user_service.ensure_user(session, 555, None, "Lee")
	assert again.first_name == "Ann"
	assert again.last_name == "Lee"

	plain = await user_service.ensure_user(session, 556)
	assert plain.is_admin is False

	updated = await user_service.set_phone(session, 555, "+100")
	assert updated.phone == "+100"
	assert (await session.get(User, 555)).phone == "+100"

	with pytest.raises(NotFound):
		await user_service.set_phone(session, 999, "+1")

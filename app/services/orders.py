import asyncio

from loguru import logger
from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import settings
from app.models.order import Order, OrderItem, OrderStatus
from app.schemas import OrderRead, PlaceOrderInput
from app.services.cart import cart_total, delete_cart_lines, read_cart
from app.services.errors import EmptyCart, InsufficientStock, InvalidStatusTransition, NotFound, PersistenceFailure
from app.services.stock import decrement_stock


_PROGRESSION = [OrderStatus.pending, OrderStatus.confirmed, OrderStatus.shipped, OrderStatus.delivered]


async def place_order(
	session: AsyncSession,
	user_id: int,
	shipping_address: str,
	billing_address: str,
	*,
	idempotency_key: str | None = None,
	timeout: float | None = None,
) -> OrderRead:
	"""Turn the user's whole cart into a pending order.

	Order, order items, stock decrements and cart removal are committed together or not
	at all. `session` must be fresh: the placement opens and owns its transaction.

	Raises EmptyCart, InsufficientStock or PersistenceFailure. Malformed input is rejected
	with pydantic's ValidationError before the database is touched. Passing an
	`idempotency_key` makes a repeated call return the order the first call created.
	"""
	data = PlaceOrderInput(
		user_id=user_id,
		shipping_address=shipping_address,
		billing_address=billing_address,
		idempotency_key=idempotency_key,
	)
	limit = settings.order_placement_timeout if timeout is None else timeout
	try:
		return await asyncio.wait_for(_place_order(session, data, limit), timeout=limit)
	except asyncio.TimeoutError as exc:
		logger.warning("Order placement timed out for user {} after {}s", user_id, limit)
		raise PersistenceFailure(f"Order placement timed out after {limit}s") from exc
	except SQLAlchemyError as exc:
		logger.error("Order placement failed for user {}: {}", user_id, exc)
		raise PersistenceFailure("Order placement failed") from exc


async def _place_order(session: AsyncSession, data: PlaceOrderInput, lock_timeout: float) -> OrderRead:
	async with session.begin():
		await _limit_lock_wait(session, lock_timeout)
		if data.idempotency_key:
			existing = await _find_by_idempotency_key(session, data.user_id, data.idempotency_key)
			if existing is not None:
				logger.info("Order {} already placed for key {}", existing.id, data.idempotency_key)
				return OrderRead.model_validate(existing)

		lines = await read_cart(session, data.user_id, lock=True)
		if not lines:
			raise EmptyCart(data.user_id)
		for line in lines:
			if line.quantity > line.stock_quantity:
				raise InsufficientStock(line.product_id, requested=line.quantity, available=line.stock_quantity)

		# prices come from the snapshot above, never re-read
		order = Order(
			user_id=data.user_id,
			total_amount=cart_total(lines),
			status=OrderStatus.pending,
			shipping_address=data.shipping_address,
			billing_address=data.billing_address,
			idempotency_key=data.idempotency_key,
			items=[
				OrderItem(product_id=line.product_id, quantity=line.quantity, price_at_time=line.price)
				for line in lines
			],
		)
		session.add(order)
		await session.flush()

		for line in lines:
			await decrement_stock(session, line.product_id, line.quantity)

		deleted = await delete_cart_lines(session, lines)
		if deleted != len(lines):
			raise PersistenceFailure(f"Cart of user {data.user_id} changed while the order was being placed")

		logger.info(
			"Order {} placed: user={} items={} total={}",
			order.id, data.user_id, len(lines), order.total_amount,
		)
		return OrderRead.model_validate(order)


async def _limit_lock_wait(session: AsyncSession, seconds: float) -> None:
	"""Make the driver give up waiting for row or database locks after `seconds`."""
	ms = max(1, int(seconds * 1000))
	backend = session.get_bind().dialect.name
	if backend == "sqlite":
		await session.execute(text(f"PRAGMA busy_timeout = {ms}"))
	elif backend == "postgresql":
		await session.execute(text(f"SET LOCAL lock_timeout = '{ms}ms'"))


async def _find_by_idempotency_key(session: AsyncSession, user_id: int, key: str) -> Order | None:
	res = await session.execute(
		select(Order)
		.options(selectinload(Order.items))
		.where(Order.user_id == user_id, Order.idempotency_key == key)
	)
	return res.scalars().first()


async def get_order(session: AsyncSession, order_id: int) -> OrderRead:
	res = await session.execute(select(Order).options(selectinload(Order.items)).where(Order.id == order_id))
	order = res.scalars().first()
	if order is None:
		raise NotFound("Order", order_id)
	return OrderRead.model_validate(order)


async def get_user_orders(session: AsyncSession, user_id: int) -> list[OrderRead]:
	res = await session.execute(
		select(Order)
		.options(selectinload(Order.items))
		.where(Order.user_id == user_id)
		.order_by(Order.created_at.desc(), Order.id.desc())
	)
	return [OrderRead.model_validate(o) for o in res.scalars().all()]


async def get_all_orders(session: AsyncSession, status: OrderStatus | None = None, limit: int | None = None) -> list[OrderRead]:
	stmt = select(Order).options(selectinload(Order.items)).order_by(Order.created_at.desc(), Order.id.desc())
	if status is not None:
		stmt = stmt.where(Order.status == status)
	if limit is not None:
		stmt = stmt.limit(limit)
	res = await session.execute(stmt)
	return [OrderRead.model_validate(o) for o in res.scalars().all()]


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
	if target is OrderStatus.cancelled:
		return current not in (OrderStatus.cancelled, OrderStatus.delivered)
	if current in _PROGRESSION and target in _PROGRESSION:
		return _PROGRESSION.index(target) > _PROGRESSION.index(current)
	return False


async def update_order_status(session: AsyncSession, order_id: int, status: OrderStatus | str) -> OrderRead:
	target = OrderStatus(status)
	res = await session.execute(
		select(Order).options(selectinload(Order.items)).where(Order.id == order_id).with_for_update()
	)
	order = res.scalars().first()
	if order is None:
		raise NotFound("Order", order_id)
	if not can_transition(order.status, target):
		raise InvalidStatusTransition(order.status.value, target.value)
	order.status = target
	await session.commit()
	logger.info("Order {} status changed to {}", order_id, target.value)
	return OrderRead.model_validate(order)

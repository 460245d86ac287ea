import re
from uuid import uuid4

from aiogram import Router, F
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.fsm.state import State, StatesGroup
from aiogram.fsm.context import FSMContext
from aiogram.types import Message, CallbackQuery, ReplyKeyboardRemove
from aiogram.exceptions import TelegramBadRequest
from loguru import logger
from pydantic import ValidationError

from app.bot.keyboards.inline import (
	STATUS_LABELS,
	cart_actions_keyboard,
	categories_keyboard_with_nav,
	checkout_confirm_keyboard,
	main_menu_keyboard,
	phone_request_keyboard,
	product_view_keyboard,
	products_keyboard_with_nav,
	wishlist_keyboard,
)
from app.core.config import settings
from app.db.session import SessionLocal
from app.models.product import Product
from app.models.review import Review
from app.schemas import CartLineSnapshot, OrderRead, ReviewCreate
from app.services import cart as cart_service
from app.services import catalog as catalog_service
from app.services import orders as order_service
from app.services import reviews as review_service
from app.services import users as user_service
from app.services import wishlist as wishlist_service
from app.services.errors import AlreadyExists, EmptyCart, InsufficientStock, NotFound, NotPurchased, PersistenceFailure


router = Router(name="user_catalog")

SAME_ADDRESS_WORDS = {"same", "=", "тот же", "такой же", "совпадает"}
SKIP_WORDS = {"-", "skip", "пропустить"}
PHONE_RE = re.compile(r"\+?\d{7,15}")


async def _safe_edit(callback: CallbackQuery, text: str, reply_markup=None) -> None:
	try:
		await callback.message.edit_text(text, reply_markup=reply_markup)
	except TelegramBadRequest:
		await callback.message.answer(text, reply_markup=reply_markup)


async def _safe_answer(callback: CallbackQuery, text: str | None = None, show_alert: bool = False) -> None:
	"""Safely call callback.answer() with error handling for old queries."""
	try:
		await callback.answer(text, show_alert=show_alert)
	except TelegramBadRequest:
		pass  # Ignore old query errors


def _is_admin(user_id: int) -> bool:
	return user_id in settings.admin_id_set


@router.message(CommandStart())
async def start(message: Message, state: FSMContext) -> None:
	await state.clear()
	user = message.from_user
	async with SessionLocal() as session:
		await user_service.ensure_user(session, user.id, user.first_name, user.last_name)  # type: ignore[union-attr]
	await message.answer(
		"Добро пожаловать в магазин!",
		reply_markup=main_menu_keyboard(is_admin=_is_admin(user.id)).as_markup(),  # type: ignore[union-attr]
	)


@router.callback_query(F.data == "nav:home")
async def nav_home(callback: CallbackQuery, state: FSMContext) -> None:
	await state.clear()
	await _safe_edit(callback, "Главное меню", reply_markup=main_menu_keyboard(is_admin=_is_admin(callback.from_user.id)).as_markup())
	await _safe_answer(callback)


@router.callback_query(F.data == "noop")
async def noop(callback: CallbackQuery) -> None:
	await _safe_answer(callback)


@router.callback_query(F.data == "catalog:open")
async def open_catalog(callback: CallbackQuery) -> None:
	async with SessionLocal() as session:
		categories = await catalog_service.get_categories(session)
	if not categories:
		await _safe_edit(callback, "Каталог пока пуст", reply_markup=main_menu_keyboard(is_admin=_is_admin(callback.from_user.id)).as_markup())
	else:
		kb = categories_keyboard_with_nav([(c.id, c.name) for c in categories])
		await _safe_edit(callback, "Выберите категорию", reply_markup=kb.as_markup())
	await _safe_answer(callback)


@router.callback_query(F.data.startswith("category:"))
async def open_category(callback: CallbackQuery) -> None:
	category_id = int((callback.data or "").split(":")[1])
	async with SessionLocal() as session:
		products = await catalog_service.get_products(session, [catalog_service.CategoryFilter(category_id)])
	if not products:
		await _safe_answer(callback, "В этой категории нет товаров", show_alert=True)
		return
	kb = products_keyboard_with_nav([(p.id, p.name) for p in products])
	await _safe_edit(callback, "Выберите товар", reply_markup=kb.as_markup())
	await _safe_answer(callback)


def format_product(product: Product, qty: int = 1) -> str:
	lines: list[str] = [f"<b>{product.name}</b>"]
	if product.brand:
		lines.append(f"Бренд: {product.brand}")
	if product.description:
		lines.append("")
		lines.append(product.description)
	lines.append("")
	lines.append(f"Цена: <b>{product.price:.2f}</b>")
	if qty > 1:
		lines.append(f"Итого: <b>{product.price * qty:.2f}</b>")
	lines.append(f"В наличии: <b>{product.stock_quantity}</b>")
	return "\n".join(lines)


def format_reviews(reviews: list[Review]) -> str:
	if not reviews:
		return ""
	avg = sum(r.rating for r in reviews) / len(reviews)
	lines = ["", f"Отзывы: {'⭐' * round(avg)} ({avg:.1f})"]
	for r in reviews[:3]:
		lines.append(f"• {r.rating}/5 {r.comment or ''}".rstrip())
	return "\n".join(lines)


@router.callback_query(F.data.startswith("product:"))
async def open_product(callback: CallbackQuery) -> None:
	product_id = int((callback.data or "").split(":")[1])
	async with SessionLocal() as session:
		product = await catalog_service.load_product(session, product_id)
		reviews = await review_service.get_product_reviews(session, product_id) if product else []
	if not product:
		await _safe_answer(callback, "Товар не найден", show_alert=True)
		return
	kb = product_view_keyboard(product.id, product.category_id, enabled=product.stock_quantity > 0)
	await _safe_edit(callback, format_product(product) + format_reviews(reviews), reply_markup=kb.as_markup())
	await _safe_answer(callback)


@router.message(Command("review"))
async def leave_review(message: Message, command: CommandObject) -> None:
	# /review <product_id> <rating 1-5> [comment]
	parts = (command.args or "").split(maxsplit=2)
	try:
		data = ReviewCreate(
			user_id=message.from_user.id,  # type: ignore[union-attr]
			product_id=int(parts[0]),
			rating=int(parts[1]),
			comment=parts[2] if len(parts) > 2 else None,
		)
	except (IndexError, ValueError):
		await message.answer("Использование: /review <id товара> <оценка 1-5> [комментарий]")
		return
	async with SessionLocal() as session:
		try:
			await review_service.create_review(session, data)
		except NotFound:
			await message.answer("Товар не найден")
			return
		except NotPurchased:
			await message.answer("Отзыв можно оставить только на купленный товар")
			return
		except AlreadyExists:
			await message.answer("Вы уже оставили отзыв на этот товар")
			return
	await message.answer("Спасибо за отзыв!")


@router.callback_query(F.data.startswith("qty:"))
async def qty_change(callback: CallbackQuery) -> None:
	# data: qty:<inc|dec>:<product_id>:<qty>
	parts = (callback.data or "").split(":")
	action = parts[1]
	product_id = int(parts[2])
	qty = int(parts[3]) if len(parts) > 3 else 1
	qty = qty + 1 if action == "inc" else max(1, qty - 1)
	async with SessionLocal() as session:
		product = await catalog_service.load_product(session, product_id)
	if not product:
		await _safe_answer(callback, "Товар не найден", show_alert=True)
		return
	qty = min(qty, max(1, product.stock_quantity))
	kb = product_view_keyboard(product.id, product.category_id, qty=qty, enabled=product.stock_quantity > 0)
	await _safe_edit(callback, format_product(product, qty), reply_markup=kb.as_markup())
	await _safe_answer(callback)


@router.callback_query(F.data.startswith("cart:add:"))
async def cart_add(callback: CallbackQuery) -> None:
	# data format: cart:add:<product_id>:<qty>
	parts = (callback.data or "").split(":")
	product_id = int(parts[2])
	qty = int(parts[3]) if len(parts) > 3 else 1
	user = callback.from_user
	async with SessionLocal() as session:
		await user_service.ensure_user(session, user.id, user.first_name, user.last_name)
		try:
			await cart_service.add_to_cart(session, user.id, product_id, qty)
		except NotFound:
			await _safe_answer(callback, "Товар не найден", show_alert=True)
			return
		except InsufficientStock as exc:
			await _safe_answer(callback, f"Недостаточно товара, доступно: {exc.available}", show_alert=True)
			return
	await _safe_answer(callback, f"Добавлено в корзину: {qty} шт.")


def format_cart(lines: list[CartLineSnapshot]) -> str:
	if not lines:
		return "🛒 Корзина пуста"
	out: list[str] = ["🛒 <b>КОРЗИНА</b>", ""]
	for i, line in enumerate(lines, 1):
		out.append(f"<b>{i}.</b> {line.name}")
		out.append(f"   {line.quantity} x {line.price:.2f} = <b>{line.line_total:.2f}</b>")
		if line.quantity > line.stock_quantity:
			out.append(f"   ⚠️ В наличии только {line.stock_quantity}")
	out.append("")
	out.append("━━━━━━━━━━━━━━━━━━━━━━━━━━")
	out.append(f"<b>ИТОГО: {cart_service.cart_total(lines):.2f}</b>")
	return "\n".join(out)


def _cart_keyboard(lines: list[CartLineSnapshot]):
	return cart_actions_keyboard(
		has_items=bool(lines),
		lines=[(line.cart_item_id, line.name, line.quantity) for line in lines],
	)


@router.callback_query(F.data == "cart:view")
async def cart_view(callback: CallbackQuery) -> None:
	async with SessionLocal() as session:
		lines = await cart_service.read_cart(session, callback.from_user.id)
	await _safe_edit(callback, format_cart(lines), reply_markup=_cart_keyboard(lines).as_markup())
	await _safe_answer(callback)


def next_cart_quantity(action: str, qty: int) -> int:
	"""New quantity for a cart line button press; 0 means the line is removed."""
	if action == "inc":
		return qty + 1
	if action == "dec":
		return max(qty - 1, 0)
	return 0


@router.callback_query(F.data.startswith("cartline:"))
async def cart_line_change(callback: CallbackQuery) -> None:
	parts = (callback.data or "").split(":")
	action, cart_item_id = parts[1], int(parts[2])
	qty = int(parts[3]) if len(parts) > 3 else 0
	new_qty = next_cart_quantity(action, qty)
	user_id = callback.from_user.id
	async with SessionLocal() as session:
		try:
			if new_qty == 0:
				await cart_service.remove_from_cart(session, user_id, cart_item_id)
			else:
				await cart_service.update_cart_item(session, user_id, cart_item_id, new_qty)
		except NotFound:
			await _safe_answer(callback, "Позиция уже удалена из корзины", show_alert=True)
			return
		except InsufficientStock as exc:
			await _safe_answer(callback, f"Недостаточно товара, доступно: {exc.available}", show_alert=True)
			return
		lines = await cart_service.read_cart(session, user_id)
	await _safe_edit(callback, format_cart(lines), reply_markup=_cart_keyboard(lines).as_markup())
	await _safe_answer(callback)


@router.callback_query(F.data == "cart:clear")
async def cart_clear(callback: CallbackQuery) -> None:
	async with SessionLocal() as session:
		await cart_service.clear_cart(session, callback.from_user.id)
	await _safe_edit(callback, "Корзина очищена", reply_markup=cart_actions_keyboard(has_items=False).as_markup())
	await _safe_answer(callback)


class CheckoutStates(StatesGroup):
	shipping = State()
	billing = State()
	phone = State()
	confirm = State()


@router.callback_query(F.data == "cart:checkout")
async def checkout_start(callback: CallbackQuery, state: FSMContext) -> None:
	await state.clear()
	# one key per checkout attempt; a repeated confirm returns the same order
	await state.update_data(idempotency_key=uuid4().hex)
	await state.set_state(CheckoutStates.shipping)
	await callback.message.answer("Введите адрес доставки")
	await _safe_answer(callback)


@router.message(CheckoutStates.shipping)
async def checkout_shipping(message: Message, state: FSMContext) -> None:
	address = (message.text or "").strip()
	if not address:
		await message.answer("Введите адрес доставки")
		return
	await state.update_data(shipping_address=address)
	await state.set_state(CheckoutStates.billing)
	await message.answer("Введите платёжный адрес или отправьте «=», если он совпадает с адресом доставки")


@router.message(CheckoutStates.billing)
async def checkout_billing(message: Message, state: FSMContext) -> None:
	address = (message.text or "").strip()
	if not address:
		await message.answer("Введите платёжный адрес")
		return
	data = await state.get_data()
	if address.lower() in SAME_ADDRESS_WORDS:
		address = data["shipping_address"]
	await state.update_data(billing_address=address)
	await state.set_state(CheckoutStates.phone)
	await message.answer(
		"Отправьте телефон для связи, нажмите «📱 Поделиться контактом» или отправьте «-», чтобы пропустить",
		reply_markup=phone_request_keyboard(),
	)


def normalize_phone(raw: str) -> str | None:
	phone = re.sub(r"[\s()\-]", "", raw)
	return phone if PHONE_RE.fullmatch(phone) else None


async def _save_phone(message: Message, phone: str) -> None:
	user = message.from_user
	async with SessionLocal() as session:
		await user_service.ensure_user(session, user.id, user.first_name, user.last_name)  # type: ignore[union-attr]
		await user_service.set_phone(session, user.id, phone)  # type: ignore[union-attr]


@router.message(CheckoutStates.phone, F.contact)
async def checkout_phone_contact(message: Message, state: FSMContext) -> None:
	phone = normalize_phone(message.contact.phone_number or "")  # type: ignore[union-attr]
	if phone is None:
		await message.answer("Не удалось получить контакт. Введите номер вручную")
		return
	await _save_phone(message, phone)
	await _ask_confirmation(message, state)


@router.message(CheckoutStates.phone)
async def checkout_phone(message: Message, state: FSMContext) -> None:
	raw = (message.text or "").strip()
	if raw.lower() not in SKIP_WORDS:
		phone = normalize_phone(raw)
		if phone is None:
			await message.answer("Номер не распознан. Пример: +79991234567, или «-», чтобы пропустить")
			return
		await _save_phone(message, phone)
	await _ask_confirmation(message, state)


async def _ask_confirmation(message: Message, state: FSMContext) -> None:
	await state.set_state(CheckoutStates.confirm)
	data = await state.get_data()
	await message.answer("Проверьте заказ", reply_markup=ReplyKeyboardRemove())
	async with SessionLocal() as session:
		lines = await cart_service.read_cart(session, message.from_user.id)  # type: ignore[union-attr]
	text = "\n".join([
		format_cart(lines),
		"",
		f"Доставка: {data['shipping_address']}",
		f"Оплата: {data['billing_address']}",
	])
	await message.answer(text, reply_markup=checkout_confirm_keyboard().as_markup())


@router.callback_query(CheckoutStates.confirm, F.data == "checkout:cancel")
async def checkout_cancel(callback: CallbackQuery, state: FSMContext) -> None:
	await state.clear()
	await _safe_edit(callback, "Оформление отменено", reply_markup=cart_actions_keyboard(has_items=True).as_markup())
	await _safe_answer(callback)


@router.callback_query(CheckoutStates.confirm, F.data == "checkout:confirm")
async def checkout_confirm(callback: CallbackQuery, state: FSMContext) -> None:
	data = await state.get_data()
	user_id = callback.from_user.id
	async with SessionLocal() as session:
		try:
			order = await order_service.place_order(
				session,
				user_id,
				data.get("shipping_address", ""),
				data.get("billing_address", ""),
				idempotency_key=data.get("idempotency_key"),
			)
		except EmptyCart:
			await state.clear()
			await _safe_edit(callback, "Корзина пуста", reply_markup=cart_actions_keyboard(has_items=False).as_markup())
			await _safe_answer(callback)
			return
		except InsufficientStock as exc:
			await state.clear()
			await _safe_edit(
				callback,
				f"Товара #{exc.product_id} недостаточно на складе. Измените количество в корзине.",
				reply_markup=cart_actions_keyboard(has_items=True).as_markup(),
			)
			await _safe_answer(callback)
			return
		except ValidationError:
			await state.set_state(CheckoutStates.shipping)
			await callback.message.answer("Адрес указан некорректно. Введите адрес доставки")
			await _safe_answer(callback)
			return
		except PersistenceFailure:
			# state is kept so the same key is reused on the next attempt
			await _safe_answer(callback, "Не удалось оформить заказ, попробуйте ещё раз", show_alert=True)
			return
	await state.clear()
	await _safe_edit(
		callback,
		f"Заказ #{order.id} оформлен ✅\nСумма: <b>{order.total_amount:.2f}</b>",
		reply_markup=main_menu_keyboard(is_admin=_is_admin(user_id)).as_markup(),
	)
	await _safe_answer(callback)
	await _notify_managers(callback, order)


def format_order(order: OrderRead) -> str:
	lines = [
		f"<b>Заказ #{order.id}</b> — {STATUS_LABELS[order.status]}",
		f"Дата: {order.created_at:%d.%m.%Y %H:%M}",
		f"Доставка: {order.shipping_address}",
	]
	for item in order.items:
		lines.append(f"• товар #{item.product_id}: {item.quantity} x {item.price_at_time:.2f}")
	lines.append(f"Сумма: <b>{order.total_amount:.2f}</b>")
	return "\n".join(lines)


async def _notify_managers(callback: CallbackQuery, order: OrderRead) -> None:
	if not settings.manager_chat_id:
		return
	text = "Новый заказ\n\n" + format_order(order)
	try:
		await callback.bot.send_message(settings.manager_chat_id, text)
	except TelegramBadRequest as exc:
		logger.warning("Could not notify managers about order {}: {}", order.id, exc)


@router.callback_query(F.data == "orders:my")
async def my_orders(callback: CallbackQuery) -> None:
	async with SessionLocal() as session:
		orders = await order_service.get_user_orders(session, callback.from_user.id)
	if not orders:
		text = "У вас пока нет заказов"
	else:
		text = "\n\n".join(format_order(o) for o in orders[:10])
	await _safe_edit(callback, text, reply_markup=main_menu_keyboard(is_admin=_is_admin(callback.from_user.id)).as_markup())
	await _safe_answer(callback)


@router.callback_query(F.data.startswith("wish:add:"))
async def wishlist_add(callback: CallbackQuery) -> None:
	product_id = int((callback.data or "").split(":")[2])
	user = callback.from_user
	async with SessionLocal() as session:
		await user_service.ensure_user(session, user.id, user.first_name, user.last_name)
		try:
			await wishlist_service.add_to_wishlist(session, user.id, product_id)
		except NotFound:
			await _safe_answer(callback, "Товар не найден", show_alert=True)
			return
		except AlreadyExists:
			await _safe_answer(callback, "Уже в избранном")
			return
	await _safe_answer(callback, "Добавлено в избранное ⭐")


async def _show_wishlist(callback: CallbackQuery, items) -> None:
	if not items:
		await _safe_edit(callback, "Избранное пусто", reply_markup=main_menu_keyboard(is_admin=_is_admin(callback.from_user.id)).as_markup())
	else:
		kb = wishlist_keyboard([(product.id, product.name) for _, product in items])
		await _safe_edit(callback, "⭐ Избранное", reply_markup=kb.as_markup())


@router.callback_query(F.data == "wish:view")
async def wishlist_view(callback: CallbackQuery) -> None:
	async with SessionLocal() as session:
		items = await wishlist_service.get_wishlist_items(session, callback.from_user.id)
	await _show_wishlist(callback, items)
	await _safe_answer(callback)


@router.callback_query(F.data.startswith("wish:del:"))
async def wishlist_remove(callback: CallbackQuery) -> None:
	product_id = int((callback.data or "").split(":")[2])
	user_id = callback.from_user.id
	async with SessionLocal() as session:
		await wishlist_service.remove_from_wishlist(session, user_id, product_id)
		items = await wishlist_service.get_wishlist_items(session, user_id)
	await _show_wishlist(callback, items)
	await _safe_answer(callback, "Удалено из избранного")

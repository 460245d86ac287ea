from aiogram import Router, F
from aiogram.filters import Command
from aiogram.types import Message, CallbackQuery
from aiogram.exceptions import TelegramBadRequest

from app.bot.handlers.user.catalog import format_order
from app.bot.keyboards.inline import admin_menu_keyboard, admin_order_keyboard, admin_orders_keyboard
from app.core.config import settings
from app.db.session import SessionLocal
from app.models.order import OrderStatus
from app.services import orders as order_service
from app.services.errors import InvalidStatusTransition, NotFound


router = Router(name="admin_orders")


async def _safe_edit(callback: CallbackQuery, text: str, reply_markup=None) -> None:
	try:
		await callback.message.edit_text(text, reply_markup=reply_markup)
	except TelegramBadRequest:
		await callback.message.answer(text, reply_markup=reply_markup)


def _is_admin(user_id: int) -> bool:
	return user_id in settings.admin_id_set


def next_statuses(current: OrderStatus) -> list[OrderStatus]:
	return [s for s in OrderStatus if order_service.can_transition(current, s)]


@router.message(Command("admin"))
async def admin_command(message: Message) -> None:
	if not _is_admin(message.from_user.id):  # type: ignore[union-attr]
		await message.answer("Нет доступа")
		return
	await message.answer("Админ-панель", reply_markup=admin_menu_keyboard().as_markup())


@router.callback_query(F.data == "admin:open")
async def admin_open(callback: CallbackQuery) -> None:
	if not _is_admin(callback.from_user.id):
		await callback.answer("Нет доступа", show_alert=True)
		return
	await _safe_edit(callback, "Админ-панель", reply_markup=admin_menu_keyboard().as_markup())
	await callback.answer()


@router.callback_query(F.data.startswith("admin:orders:"))
async def admin_orders(callback: CallbackQuery) -> None:
	if not _is_admin(callback.from_user.id):
		await callback.answer("Нет доступа", show_alert=True)
		return
	# data: admin:orders:<status|all>
	which = (callback.data or "").split(":")[2]
	status = None if which == "all" else OrderStatus(which)
	async with SessionLocal() as session:
		orders = await order_service.get_all_orders(session, status=status, limit=30)
	if not orders:
		await _safe_edit(callback, "Заказов нет", reply_markup=admin_menu_keyboard().as_markup())
	else:
		kb = admin_orders_keyboard([(o.id, o.status) for o in orders])
		await _safe_edit(callback, "Заказы", reply_markup=kb.as_markup())
	await callback.answer()


@router.callback_query(F.data.startswith("adminorder:status:"))
async def admin_order_status(callback: CallbackQuery) -> None:
	if not _is_admin(callback.from_user.id):
		await callback.answer("Нет доступа", show_alert=True)
		return
	# data: adminorder:status:<order_id>:<status>
	parts = (callback.data or "").split(":")
	order_id = int(parts[2])
	async with SessionLocal() as session:
		try:
			order = await order_service.update_order_status(session, order_id, parts[3])
		except NotFound:
			await callback.answer("Заказ не найден", show_alert=True)
			return
		except InvalidStatusTransition as exc:
			await callback.answer(f"Нельзя: {exc.current} → {exc.target}", show_alert=True)
			return
	await _safe_edit(callback, format_order(order), reply_markup=admin_order_keyboard(order.id, next_statuses(order.status)).as_markup())
	await callback.answer("Статус обновлён")


@router.callback_query(F.data.startswith("adminorder:"))
async def admin_order_view(callback: CallbackQuery) -> None:
	if not _is_admin(callback.from_user.id):
		await callback.answer("Нет доступа", show_alert=True)
		return
	order_id = int((callback.data or "").split(":")[1])
	async with SessionLocal() as session:
		try:
			order = await order_service.get_order(session, order_id)
		except NotFound:
			await callback.answer("Заказ не найден", show_alert=True)
			return
	text = format_order(order) + f"\nОплата: {order.billing_address}\nПокупатель: {order.user_id}"
	await _safe_edit(callback, text, reply_markup=admin_order_keyboard(order.id, next_statuses(order.status)).as_markup())
	await callback.answer()

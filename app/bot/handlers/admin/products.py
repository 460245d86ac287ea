from decimal import Decimal, InvalidOperation

from aiogram import Router
from aiogram.filters import Command, CommandObject
from aiogram.types import Message
from pydantic import ValidationError

from app.bot.keyboards.inline import admin_menu_keyboard
from app.core.config import settings
from app.db.session import SessionLocal
from app.schemas import CategoryCreate, ProductCreate, ProductUpdate
from app.services import catalog as catalog_service
from app.services.errors import AlreadyExists, NotFound


router = Router(name="admin_products")


def _is_admin(user_id: int) -> bool:
	return user_id in settings.admin_id_set


def parse_product_args(raw: str) -> ProductCreate:
	"""Parse `name | price | stock | category_id [| brand]` into a ProductCreate."""
	parts = [p.strip() for p in raw.split("|")]
	if len(parts) < 4:
		raise ValueError("expected: name | price | stock | category_id [| brand]")
	try:
		price = Decimal(parts[1].replace(",", "."))
	except InvalidOperation as exc:
		raise ValueError(f"bad price: {parts[1]}") from exc
	return ProductCreate(
		name=parts[0],
		price=price,
		stock_quantity=int(parts[2]),
		category_id=int(parts[3]),
		brand=parts[4] if len(parts) > 4 and parts[4] else None,
	)


@router.message(Command("addcategory"))
async def add_category(message: Message, command: CommandObject) -> None:
	if not _is_admin(message.from_user.id):  # type: ignore[union-attr]
		await message.answer("Нет доступа")
		return
	try:
		data = CategoryCreate(name=(command.args or "").strip())
	except ValidationError:
		await message.answer("Использование: /addcategory <название>")
		return
	async with SessionLocal() as session:
		try:
			category = await catalog_service.create_category(session, data)
		except AlreadyExists:
			await message.answer("Такая категория уже есть")
			return
	await message.answer(f"Категория #{category.id} «{category.name}» создана", reply_markup=admin_menu_keyboard().as_markup())


@router.message(Command("addproduct"))
async def add_product(message: Message, command: CommandObject) -> None:
	if not _is_admin(message.from_user.id):  # type: ignore[union-attr]
		await message.answer("Нет доступа")
		return
	try:
		data = parse_product_args(command.args or "")
	except (ValueError, ValidationError):
		await message.answer("Использование: /addproduct название | цена | остаток | id категории [| бренд]")
		return
	async with SessionLocal() as session:
		try:
			product = await catalog_service.create_product(session, data)
		except NotFound:
			await message.answer("Категория не найдена")
			return
	await message.answer(f"Товар #{product.id} «{product.name}» создан")


async def _update(message: Message, product_id: int, data: ProductUpdate) -> None:
	async with SessionLocal() as session:
		try:
			product = await catalog_service.update_product(session, product_id, data)
		except NotFound:
			await message.answer("Товар не найден")
			return
	await message.answer(f"Товар #{product.id}: цена {product.price:.2f}, остаток {product.stock_quantity}")


@router.message(Command("setstock"))
async def set_stock(message: Message, command: CommandObject) -> None:
	if not _is_admin(message.from_user.id):  # type: ignore[union-attr]
		await message.answer("Нет доступа")
		return
	try:
		product_id, qty = (command.args or "").split()
		data = ProductUpdate(stock_quantity=int(qty))
	except (ValueError, ValidationError):
		await message.answer("Использование: /setstock <id товара> <остаток ≥ 0>")
		return
	await _update(message, int(product_id), data)


@router.message(Command("setprice"))
async def set_price(message: Message, command: CommandObject) -> None:
	if not _is_admin(message.from_user.id):  # type: ignore[union-attr]
		await message.answer("Нет доступа")
		return
	try:
		product_id, price = (command.args or "").split()
		data = ProductUpdate(price=Decimal(price.replace(",", ".")))
	except (ValueError, InvalidOperation, ValidationError):
		await message.answer("Использование: /setprice <id товара> <цена>")
		return
	await _update(message, int(product_id), data)


@router.message(Command("archive"))
async def archive(message: Message, command: CommandObject) -> None:
	if not _is_admin(message.from_user.id):  # type: ignore[union-attr]
		await message.answer("Нет доступа")
		return
	try:
		product_id = int((command.args or "").strip())
	except ValueError:
		await message.answer("Использование: /archive <id товара>")
		return
	async with SessionLocal() as session:
		try:
			await catalog_service.archive_product(session, product_id)
		except NotFound:
			await message.answer("Товар не найден")
			return
	await message.answer(f"Товар #{product_id} перемещён в архив")

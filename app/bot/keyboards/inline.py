from aiogram.utils.keyboard import InlineKeyboardBuilder
from aiogram.types import InlineKeyboardButton, KeyboardButton, ReplyKeyboardMarkup

from app.models.order import OrderStatus


STATUS_LABELS: dict[OrderStatus, str] = {
	OrderStatus.pending: "🕓 Новый",
	OrderStatus.confirmed: "✅ Подтверждён",
	OrderStatus.shipped: "🚚 Отправлен",
	OrderStatus.delivered: "📦 Доставлен",
	OrderStatus.cancelled: "❌ Отменён",
}


def main_menu_keyboard(is_admin: bool) -> InlineKeyboardBuilder:
	builder = InlineKeyboardBuilder()
	builder.button(text="🏷️ Каталог", callback_data="catalog:open")
	builder.button(text="🛒 Корзина", callback_data="cart:view")
	builder.button(text="📋 Мои заказы", callback_data="orders:my")
	builder.button(text="⭐ Избранное", callback_data="wish:view")
	if is_admin:
		builder.button(text="⚙️ Админ", callback_data="admin:open")
	builder.adjust(2)
	return builder



def categories_keyboard_with_nav(categories: list[tuple[int, str]]) -> InlineKeyboardBuilder:
	builder = InlineKeyboardBuilder()
	for category_id, category_name in categories:
		builder.button(text=f"📂 {category_name}", callback_data=f"category:{category_id}")
	builder.adjust(2)
	builder.row(
		InlineKeyboardButton(text="🏠 Главная", callback_data="nav:home"),
	)
	return builder



def products_keyboard_with_nav(products: list[tuple[int, str]]) -> InlineKeyboardBuilder:
	builder = InlineKeyboardBuilder()
	for product_id, product_name in products:
		builder.button(text=f"📦 {product_name}", callback_data=f"product:{product_id}")
	builder.adjust(1)
	builder.row(
		InlineKeyboardButton(text="⬅️ К категориям", callback_data="catalog:open"),
		InlineKeyboardButton(text="🏠 Главная", callback_data="nav:home"),
	)
	return builder



def product_view_keyboard(product_id: int, category_id: int | None, qty: int = 1, enabled: bool = True) -> InlineKeyboardBuilder:
	builder = InlineKeyboardBuilder()
	builder.row(
		InlineKeyboardButton(text="➖", callback_data=f"qty:dec:{product_id}:{qty}"),
		InlineKeyboardButton(text=f"{qty}", callback_data="noop"),
		InlineKeyboardButton(text="➕", callback_data=f"qty:inc:{product_id}:{qty}"),
	)
	btn_text = "🛒 В корзину" if enabled else "❌ Нет в наличии"
	btn_cb = f"cart:add:{product_id}:{qty}" if enabled else "noop"
	builder.row(InlineKeyboardButton(text=btn_text, callback_data=btn_cb))
	builder.row(InlineKeyboardButton(text="⭐ В избранное", callback_data=f"wish:add:{product_id}"))
	back_cb = f"category:{category_id}" if category_id is not None else "catalog:open"
	builder.row(
		InlineKeyboardButton(text="⬅️ Назад", callback_data=back_cb),
		InlineKeyboardButton(text="🏠 Главная", callback_data="nav:home"),
	)
	return builder



def cart_actions_keyboard(has_items: bool, lines: list[tuple[int, str, int]] | None = None) -> InlineKeyboardBuilder:
	builder = InlineKeyboardBuilder()
	# lines are (cart_item_id, product name, quantity)
	for cart_item_id, name, qty in lines or []:
		builder.row(InlineKeyboardButton(text=f"📦 {name}", callback_data="noop"))
		builder.row(
			InlineKeyboardButton(text="➖", callback_data=f"cartline:dec:{cart_item_id}:{qty}"),
			InlineKeyboardButton(text=f"{qty}", callback_data="noop"),
			InlineKeyboardButton(text="➕", callback_data=f"cartline:inc:{cart_item_id}:{qty}"),
			InlineKeyboardButton(text="🗑", callback_data=f"cartline:del:{cart_item_id}"),
		)
	if has_items:
		builder.row(InlineKeyboardButton(text="✅ Оформить заказ", callback_data="cart:checkout"))
		builder.row(InlineKeyboardButton(text="🗑 Очистить", callback_data="cart:clear"))
	builder.row(
		InlineKeyboardButton(text="🏷️ Каталог", callback_data="catalog:open"),
		InlineKeyboardButton(text="🏠 Главная", callback_data="nav:home"),
	)
	return builder



def checkout_confirm_keyboard() -> InlineKeyboardBuilder:
	builder = InlineKeyboardBuilder()
	builder.row(
		InlineKeyboardButton(text="✅ Подтвердить", callback_data="checkout:confirm"),
		InlineKeyboardButton(text="✖️ Отмена", callback_data="checkout:cancel"),
	)
	return builder



def phone_request_keyboard() -> ReplyKeyboardMarkup:
	return ReplyKeyboardMarkup(
		keyboard=[[KeyboardButton(text="📱 Поделиться контактом", request_contact=True)]],
		resize_keyboard=True,
		one_time_keyboard=True,
	)



def wishlist_keyboard(products: list[tuple[int, str]]) -> InlineKeyboardBuilder:
	builder = InlineKeyboardBuilder()
	for product_id, product_name in products:
		builder.row(
			InlineKeyboardButton(text=f"📦 {product_name}", callback_data=f"product:{product_id}"),
			InlineKeyboardButton(text="✖️", callback_data=f"wish:del:{product_id}"),
		)
	builder.row(InlineKeyboardButton(text="🏠 Главная", callback_data="nav:home"))
	return builder



def admin_menu_keyboard() -> InlineKeyboardBuilder:
	builder = InlineKeyboardBuilder()
	builder.row(
		InlineKeyboardButton(text="🕓 Новые заказы", callback_data="admin:orders:pending"),
		InlineKeyboardButton(text="📋 Все заказы", callback_data="admin:orders:all"),
	)
	builder.row(
		InlineKeyboardButton(text="🏠 Главная", callback_data="nav:home"),
	)
	return builder



def admin_orders_keyboard(orders: list[tuple[int, OrderStatus]]) -> InlineKeyboardBuilder:
	builder = InlineKeyboardBuilder()
	for order_id, status in orders:
		builder.button(text=f"#{order_id} {STATUS_LABELS[status]}", callback_data=f"adminorder:{order_id}")
	builder.adjust(2)
	builder.row(InlineKeyboardButton(text="⬅️ Админ", callback_data="admin:open"))
	return builder



def admin_order_keyboard(order_id: int, next_statuses: list[OrderStatus]) -> InlineKeyboardBuilder:
	builder = InlineKeyboardBuilder()
	for status in next_statuses:
		builder.button(text=STATUS_LABELS[status], callback_data=f"adminorder:status:{order_id}:{status.value}")
	builder.adjust(2)
	builder.row(InlineKeyboardButton(text="⬅️ К заказам", callback_data="admin:orders:all"))
	return builder

from .user import User
from .product import Product, Category
from .cart import CartItem
from .order import Order, OrderItem, OrderStatus
from .review import Review
from .wishlist import WishlistItem

__all__ = [
	"User",
	"Product",
	"Category",
	"CartItem",
	"Order",
	"OrderItem",
	"OrderStatus",
	"Review",
	"WishlistItem",
]

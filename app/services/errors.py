class StorefrontError(Exception):
	"""Base class for errors raised by the storefront services."""


class EmptyCart(StorefrontError):
	def __init__(self, user_id: int) -> None:
		super().__init__(f"Cart is empty for user {user_id}")
		self.user_id = user_id


class InsufficientStock(StorefrontError):
	def __init__(self, product_id: int, requested: int | None = None, available: int | None = None) -> None:
		super().__init__(f"Insufficient stock for product {product_id}")
		self.product_id = product_id
		self.requested = requested
		self.available = available


class PersistenceFailure(StorefrontError):
	"""Storage-layer failure or timeout. Nothing was persisted; the caller may retry from scratch."""


class NotFound(StorefrontError):
	def __init__(self, entity: str, entity_id: int) -> None:
		super().__init__(f"{entity} {entity_id} not found")
		self.entity = entity
		self.entity_id = entity_id


class AlreadyExists(StorefrontError):
	pass


class NotPurchased(StorefrontError):
	pass


class InvalidStatusTransition(StorefrontError):
	def __init__(self, current: str, target: str) -> None:
		super().__init__(f"Cannot change order status from {current} to {target}")
		self.current = current
		self.target = target

"""Typed failures raised by the storefront.

Every failure is a protean ``ValidationError`` whose ``messages`` dict is
keyed by a stable error code, so handlers that only know about protean
errors keep working while the API can map codes to HTTP statuses.
"""

import functools

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError

logger = structlog.get_logger(__name__)


class StorefrontError(ValidationError):
    code = "storefront_error"

    def __init__(self, message: str, **details):
        self.message = message
        self.details = details
        super().__init__({self.code: [message]})

    def __str__(self) -> str:
        return self.message


class InvalidQuantity(StorefrontError):
    code = "invalid_quantity"

    def __init__(self, quantity):
        super().__init__(f"Quantity must be a positive integer, got {quantity}", quantity=quantity)


class ProductNotFound(StorefrontError):
    code = "product_not_found"

    def __init__(self, product_id):
        super().__init__(f"Product {product_id} does not exist", product_id=str(product_id))


class ProductUnavailable(StorefrontError):
    code = "product_unavailable"

    def __init__(self, product_id, name=None):
        label = name or product_id
        super().__init__(f"Product {label} is not available for purchase", product_id=str(product_id))


class InsufficientStock(StorefrontError):
    code = "insufficient_stock"

    def __init__(self, product_id, requested: int, available: int, name=None):
        label = name or product_id
        super().__init__(
            f"Insufficient stock for {label}: requested {requested}, available {available}",
            product_id=str(product_id),
            requested=requested,
            available=available,
        )
        self.product_id = str(product_id)
        self.requested = requested
        self.available = available


class CartEmpty(StorefrontError):
    code = "cart_empty"

    def __init__(self, user_id=None):
        super().__init__("Cart is empty", user_id=str(user_id) if user_id else None)


class CartNotFound(StorefrontError):
    code = "cart_not_found"

    def __init__(self, user_id):
        super().__init__(f"No cart exists for user {user_id}", user_id=str(user_id))


class CartItemNotFound(StorefrontError):
    code = "cart_item_not_found"

    def __init__(self, line_id):
        super().__init__(f"Cart item {line_id} does not exist", line_id=str(line_id))


class Unauthorized(StorefrontError):
    code = "unauthorized"

    def __init__(self, message="You are not allowed to access this resource", **details):
        super().__init__(message, **details)


class OrderNotFound(StorefrontError):
    code = "order_not_found"

    def __init__(self, reference):
        super().__init__(f"Order {reference} does not exist", reference=str(reference))


class InvalidOrderState(StorefrontError):
    code = "invalid_order_state"

    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot move order from {current} to {target}", current=current, target=target)


class OrderNumberCollision(StorefrontError):
    code = "order_number_collision"

    def __init__(self, attempts: int):
        super().__init__(f"Could not allocate a unique order number after {attempts} attempts", attempts=attempts)


class InternalFailure(StorefrontError):
    code = "internal_failure"

    def __init__(self, operation: str):
        super().__init__(f"Unexpected failure during {operation}", operation=operation)


def guarded(func):
    """Let domain failures through and wrap anything else in ``InternalFailure``."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (ValidationError, ObjectNotFoundError):
            raise
        except Exception as exc:
            logger.exception("internal_failure", operation=func.__qualname__, error=str(exc))
            raise InternalFailure(func.__qualname__) from exc

    return wrapper
